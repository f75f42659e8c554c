"""Name conversion helpers shared by the generator and the IR loader."""

import re


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def pascal_case(name: str) -> str:
    """Convert snake_case or camelCase to PascalCase."""
    # First convert to snake_case, then to PascalCase
    snake = snake_case(name)
    return "".join(word[:1].upper() + word[1:] for word in snake.split("_"))


def upper_case(name: str) -> str:
    """Convert to UPPER_CASE."""
    return snake_case(name).upper()


# Python reserved keywords that cannot be used as parameter names
PYTHON_KEYWORDS = {
    'False', 'None', 'True', 'and', 'as', 'assert', 'async', 'await',
    'break', 'class', 'continue', 'def', 'del', 'elif', 'else', 'except',
    'finally', 'for', 'from', 'global', 'if', 'import', 'in', 'is',
    'lambda', 'nonlocal', 'not', 'or', 'pass', 'raise', 'return', 'try',
    'while', 'with', 'yield'
}


def safe_param_name(name: str) -> str:
    """Make a parameter name safe for Python by suffixing keywords with underscore."""
    if name in PYTHON_KEYWORDS:
        return f"{name}_"
    return name


_IRREGULAR_PLURALS = {
    "children": "child",
    "people": "person",
    "men": "man",
    "women": "woman",
    "mice": "mouse",
    "geese": "goose",
    "feet": "foot",
    "teeth": "tooth",
    "data": "datum",
    "indices": "index",
    "matrices": "matrix",
    "vertices": "vertex",
}

_UNCOUNTABLE = {"series", "species", "news", "information", "equipment", "metadata"}

# (pattern, replacement), first match wins
_SINGULAR_RULES = [
    (r"(quiz)zes$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(alias|status|bus|address)es$", r"\1"),
    (r"(ss)es$", r"\1"),
    (r"(x|ch|sh|z)es$", r"\1"),
    (r"([^aeiouy])ies$", r"\1y"),
    (r"(hive|tive)s$", r"\1"),
    (r"([lr])ves$", r"\1f"),
    (r"(analy|ba|diagno|parenthe|progno|synop|the)ses$", r"\1sis"),
    (r"(ss|us|is)$", r"\1"),
    (r"s$", ""),
]


def singularize(word: str) -> str:
    """Return the singular form of an English plural noun.

    Only the trailing word of a camelCase name is inflected, so
    ``friendsConnection`` stays as is and ``allFilms`` becomes ``allFilm``.
    """
    if not word:
        return word
    head, tail = _split_last_word(word)
    lower = tail.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        singular = _IRREGULAR_PLURALS[lower]
        if tail[:1].isupper():
            singular = singular[:1].upper() + singular[1:]
        return head + singular
    for pattern, replacement in _SINGULAR_RULES:
        if re.search(pattern, tail, flags=re.IGNORECASE):
            return head + re.sub(pattern, replacement, tail, flags=re.IGNORECASE)
    return word


def _split_last_word(word: str) -> tuple[str, str]:
    match = re.search(r"([A-Z]?[a-z0-9]+|[A-Z]+)$", word)
    if not match:
        return "", word
    return word[:match.start()], match.group(0)


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str) -> str:
    """Make text safe for a single-line Python comment.

    Removes newlines and collapses whitespace so the text cannot
    escape the comment.
    """
    if not text:
        return ""
    text = text.replace('\n', ' ').replace('\r', '')
    text = re.sub(r'\s+', ' ', text)
    return text.strip()


_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def string_literal(text: str) -> str:
    """Render text as a double-quoted Python string literal."""
    return '"' + "".join(_ESCAPES.get(char, char) for char in text) + '"'
