"""Scoped text emitter for generated Python modules.

The writer keeps one growing buffer. Lines are started with
``print_on_newline``; ``print`` appends to the current line. Blank lines
between members are requested with ``print_newline_if_needed`` and only
materialize when the next line is written, so asking twice still yields one
separator (two at module level, one inside a class).

Blocks are context managers and always close in the order they opened:

    writer = CodeWriter()
    with writer.declaration("Hero", ["GraphQLSelectionSet"]):
        with writer.property_getter("name", "str"):
            writer.print_on_newline('return self.snapshot["name"]')
"""

from contextlib import contextmanager
from typing import Iterator, Sequence

from .naming import safe_comment, safe_docstring, string_literal

MAX_LINE_LENGTH = 100


class CodeWriter:
    """Indentation-aware buffer with block-scoped emission primitives."""

    INDENT = "    "

    def __init__(self):
        self._chunks: list[str] = []
        self.indent_level = 0
        self._start_of_indent_level = True
        self._pending_blank_lines = 0

    @property
    def output(self) -> str:
        """The emitted text, terminated by a single newline."""
        text = "".join(self._chunks)
        return text + "\n" if text else text

    # Lines

    def print(self, text: str | None):
        """Append text to the current line."""
        if text:
            self._chunks.append(text)
            self._start_of_indent_level = False

    def print_on_newline(self, text: str | None):
        """Start a new line at the current indentation and write text on it."""
        if not text:
            return
        if self._chunks:
            self._chunks.append("\n" * (1 + self._pending_blank_lines))
        self._pending_blank_lines = 0
        self._chunks.append(self.INDENT * self.indent_level + text)
        self._start_of_indent_level = False

    def print_newline_if_needed(self):
        """Request a blank-line separator before the next line."""
        if self._start_of_indent_level:
            return
        wanted = 2 if self.indent_level == 0 else 1
        self._pending_blank_lines = max(self._pending_blank_lines, wanted)

    # Blocks

    @contextmanager
    def indented(self) -> Iterator[None]:
        self.indent_level += 1
        self._start_of_indent_level = True
        try:
            yield
        finally:
            self.indent_level -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Emit ``header:`` and indent its body; an empty body becomes ``pass``."""
        self.print_on_newline(f"{header}:")
        emitted = len(self._chunks)
        with self.indented():
            yield
            if len(self._chunks) == emitted:
                self.print_on_newline("pass")

    @contextmanager
    def declaration(
        self,
        name: str,
        bases: Sequence[str] = (),
        description: str | None = None,
    ) -> Iterator[None]:
        """Open a class declaration adopting the given base classes."""
        header = f"class {name}({', '.join(bases)})" if bases else f"class {name}"
        self.print_newline_if_needed()
        with self.block(header):
            self.docstring(description)
            yield

    @contextmanager
    def method(
        self,
        name: str,
        params: Sequence[str] = ("self",),
        returns: str | None = None,
        decorators: Sequence[str] = (),
    ) -> Iterator[None]:
        """Open a ``def`` block, one parameter per line if the signature is too long."""
        self.print_newline_if_needed()
        for decorator in decorators:
            self.print_on_newline(f"@{decorator}")
        closing = f") -> {returns}" if returns else ")"
        signature = f"def {name}({', '.join(params)}{closing}"
        if self._fits(signature + ":"):
            header = signature
        else:
            self.print_on_newline(f"def {name}(")
            with self.indented():
                for param in params:
                    self.print_on_newline(f"{param},")
            header = closing
        with self.block(header):
            yield

    @contextmanager
    def property_getter(
        self, name: str, type_name: str, description: str | None = None
    ) -> Iterator[None]:
        """Open the read half of a property accessor."""
        with self.method(name, returns=type_name, decorators=["property"]):
            self.docstring(description)
            yield

    @contextmanager
    def property_setter(self, name: str, type_name: str) -> Iterator[None]:
        """Open the write half of a property accessor; the value is ``new_value``."""
        with self.method(
            name,
            ["self", f"new_value: {type_name}"],
            returns="None",
            decorators=[f"{name}.setter"],
        ):
            yield

    def print_wrapped(self, prefix: str, items: Sequence[str], suffix: str):
        """Write ``prefix`` + comma-separated ``items`` + ``suffix``.

        Items move to their own lines, each with a trailing comma, when the
        single-line form would be too long.
        """
        line = prefix + ", ".join(items) + suffix
        if not items or self._fits(line):
            self.print_on_newline(line)
            return
        self.print_on_newline(prefix)
        with self.indented():
            for item in items:
                self.print_on_newline(f"{item},")
        self.print_on_newline(suffix)

    def _fits(self, line: str) -> bool:
        return len(self.INDENT * self.indent_level) + len(line) <= MAX_LINE_LENGTH

    # Text helpers

    def docstring(self, text: str | None):
        if not text:
            return
        lines = safe_docstring(text.strip()).splitlines()
        if len(lines) == 1:
            self.print_on_newline(f'"""{lines[0]}"""')
            return
        self.print_on_newline(f'"""{lines[0]}')
        for line in lines[1:]:
            if line.strip():
                self.print_on_newline(line.rstrip())
            else:
                self._chunks.append("\n")
        self.print_on_newline('"""')

    def comment(self, text: str | None):
        if not text:
            return
        for line in text.strip().splitlines():
            line = safe_comment(line)
            self.print_on_newline(f"# {line}" if line else "#")

    def multiline_string(self, text: str):
        """Emit one string literal per source line, to be joined by the parser.

        The caller wraps the literals in parentheses. Every line but the last
        keeps its newline.
        """
        lines = text.split("\n")
        for index, line in enumerate(lines):
            if index < len(lines) - 1:
                line += "\n"
            self.print_on_newline(string_literal(line))
