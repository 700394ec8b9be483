"""CLI entry point for mermaid-ast."""

import logging
import sys

import click

from mermaid_ast.errors import ParseError
from mermaid_ast.generators import generate
from mermaid_ast.parsers import parse

logger = logging.getLogger("mermaid_ast")


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _check(name: str, text: str) -> bool:
    """Round-trip one document; report and return False on any failure."""
    try:
        first = parse(text)
        second = parse(generate(first))
    except ParseError as e:
        logger.error("%s: %s", name, e)
        return False
    if first != second:
        logger.error("%s: regenerated text parses to a different tree", name)
        return False
    logger.info("%s: ok", name)
    return True


@click.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option("--check", "check", is_flag=True, help="Only verify that each document survives a round trip")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log progress to stderr")
def main(files: tuple[str, ...], check: bool, output: str | None, verbose: bool) -> None:
    """Parse Mermaid diagrams and print their canonical form."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(message)s")
    sources = files or ("-",)

    documents: list[tuple[str, str]] = []
    for path in sources:
        try:
            documents.append(("<stdin>" if path == "-" else path, _read(path)))
        except OSError as e:
            click.echo(f"error: cannot read '{path}': {e}", err=True)
            sys.exit(1)

    if check:
        failed = [name for name, text in documents if not _check(name, text)]
        click.echo(f"{len(documents) - len(failed)}/{len(documents)} documents round-trip cleanly")
        if failed:
            sys.exit(1)
        return

    rendered: list[str] = []
    for name, text in documents:
        try:
            rendered.append(generate(parse(text)))
        except ParseError as e:
            click.echo(f"parse error in {name}:\n{e}", err=True)
            sys.exit(1)
    # Documents are separated by a blank line, as generate() separates diagrams.
    result = "\n".join(rendered)

    if output:
        try:
            with open(output, "w", encoding="utf-8") as f:
                f.write(result)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(result, nl=False)


if __name__ == "__main__":
    main()
