"""Command-line interface for gql-opgen."""

import click
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path

from graphql import GraphQLError
from pydantic import ValidationError

from .core.generator import generate_source
from .core.loader import load_documents, load_schema, compile_to_ir
from .core.options import Options

ARCHIVE_SUFFIXES = (".zip", ".tar.gz", ".tgz")


def extract_archive(archive_path: Path) -> str:
    """Extract archive to temp directory. Returns path to extracted content."""
    temp_dir = tempfile.mkdtemp()
    if archive_path.suffix == ".zip":
        with zipfile.ZipFile(archive_path, "r") as zip_ref:
            zip_ref.extractall(temp_dir)
    elif archive_path.name.endswith((".tar.gz", ".tgz")):
        with tarfile.open(archive_path, "r:gz") as tar_ref:
            tar_ref.extractall(temp_dir)
    else:
        shutil.rmtree(temp_dir)
        raise ValueError(f"Unsupported archive format: {archive_path.suffix}")
    return temp_dir


@click.group()
@click.version_option(package_name="gql-opgen")
def main():
    """GraphQL operation code generator for Python.

    Generate typed Python classes from GraphQL queries, mutations and fragments.
    """
    pass


@main.command()
@click.option(
    "--schema",
    "-s",
    required=True,
    type=click.Path(exists=True),
    help="Path to a schema file (SDL or introspection JSON), directory, or archive (.zip, .tar.gz, .tgz).",
)
@click.option(
    "--documents",
    "-d",
    required=True,
    multiple=True,
    type=click.Path(exists=True),
    help="Operation document file or directory. May be given more than once.",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False),
    help="Output file for the generated module (e.g., api.py).",
)
@click.option("--namespace", default=None, help="Wrap all generated classes in a class of this name.")
@click.option(
    "--passthrough-custom-scalars",
    is_flag=True,
    help="Expose custom scalars under their own names instead of str.",
)
@click.option("--custom-scalars-prefix", default="", help="Prefix for passed-through custom scalar names.")
@click.option("--operation-ids", is_flag=True, help="Emit a SHA-256 operation identifier per operation.")
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory with Jinja2 templates overriding the built-in ones.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def generate(
    schema: str,
    documents: tuple[str, ...],
    output: str,
    namespace: str | None,
    passthrough_custom_scalars: bool,
    custom_scalars_prefix: str,
    operation_ids: bool,
    template_dir: str | None,
    verbose: bool,
):
    """Generate a Python module from GraphQL operation documents.

    Examples:

        gql-opgen generate --schema ./schema.graphql --documents ./queries --output ./api.py

        gql-opgen generate -s ./schema -d hero.graphql -d reviews.graphql -o api.py --namespace API

        gql-opgen generate -s ./schema.tgz -d ./queries -o api.py --operation-ids
    """
    schema_path = Path(schema).resolve()
    output_path = Path(output).resolve()
    temp_dir = None

    try:
        options = Options(
            namespace=namespace,
            passthrough_custom_scalars=passthrough_custom_scalars,
            custom_scalars_prefix=custom_scalars_prefix,
            generate_operation_ids=operation_ids,
            template_dir=template_dir,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))

    try:
        # Handle archives
        actual_schema_path = schema_path
        if schema_path.is_file() and schema_path.name.lower().endswith(ARCHIVE_SUFFIXES):
            click.echo(f"Extracting archive {schema_path.name}...")
            temp_dir = extract_archive(schema_path)
            actual_schema_path = Path(temp_dir)
            if verbose:
                click.echo(f"  Extracted to: {temp_dir}")

        if verbose:
            click.echo(f"Schema: {actual_schema_path}")
            click.echo(f"Documents: {', '.join(documents)}")
            click.echo(f"Output: {output_path}")

        click.echo("Loading schema...")
        graphql_schema = load_schema(str(actual_schema_path))

        click.echo("Compiling documents...")
        document = load_documents(list(documents))
        context = compile_to_ir(graphql_schema, document, options)

        if verbose:
            click.echo(f"  Operations: {len(context.operations)}")
            click.echo(f"  Fragments: {len(context.fragments)}")
            click.echo(f"  Types used: {len(context.types_used)}")

        click.echo("Generating code...")
        code = generate_source(context)

        if verbose:
            click.echo(f"  Lines: {len(code.splitlines())}")
            click.echo(f"  Classes: {code.count('class ')}")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            f.write(code)

        click.echo(f"Done! Generated code in {output_path}")
    except (GraphQLError, ValueError) as e:
        raise click.ClickException(str(e))
    finally:
        # Clean up temp directory
        if temp_dir:
            shutil.rmtree(temp_dir)


if __name__ == "__main__":
    main()
