"""CLI entry point for flowlayout."""

import logging
import sys

import click

from flowlayout import layout_json
from flowlayout.types import Orientation


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option(
    "--orientation",
    "-r",
    "orientation",
    type=click.Choice([o.value for o in Orientation], case_sensitive=False),
    default=Orientation.default().value,
    help="Flow direction: horizontal (left to right) or vertical (top to bottom)",
)
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--indent", "-i", "indent", type=int, default=2, help="JSON indentation (0 for compact)")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log layout stages to stderr")
def main(input: str | None, orientation: str, output: str | None, indent: int, verbose: bool) -> None:
    """Flowchart project JSON to auto-arranged project JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s %(message)s", stream=sys.stderr)

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        arranged = layout_json(text, orientation, indent=indent or None)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    if output:
        try:
            with open(output, "w") as f:
                f.write(arranged + "\n")
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(arranged)


if __name__ == "__main__":
    main()
