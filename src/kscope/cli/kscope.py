"""
kscope - Kaleidoscope Parser Command-Line Interface
===================================================

This module implements the `kscope` command. It parses Kaleidoscope
input (definitions, extern declarations and top-level expressions) and
reports what it found.

Usage Examples
--------------
Interactive session (prompt shown when stdin is a terminal):
    $ kscope
    ready> def add(a b) a+b;
    Parsed a function definition.

Parse a file and dump the AST:
    $ kscope --ast program.ks

Parse a single expression:
    $ kscope -e "1+2*3"
    (1.0 + (2.0 * 3.0))

Exit Codes
----------
0 - All constructs parsed
1 - One or more syntax errors reported
2 - Invalid arguments or missing file
3 - Internal error
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from kscope import __version__
from kscope.ast import ASTPrinter, format_expression
from kscope.cli.errors import ExitCode, handle_cli_exception
from kscope.config import ParserOptions
from kscope.driver import Driver, ParseOutcome
from kscope.parser import Parser, parse_expression_source


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
)
@click.option(
    "-e", "--expr",
    metavar="TEXT",
    help="Parse TEXT as a single expression and print it",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST of every parsed construct",
)
@click.option(
    "--prompt/--no-prompt",
    default=None,
    help="Show the 'ready> ' prompt (default: when stdin is a terminal)",
)
@click.option(
    "--strict-numbers",
    is_flag=True,
    help="Reject numeric literals such as 1.2.3",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=0),
    default=None,
    help="Stop after N syntax errors (default: 0, never stop)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="kscope")
def main(
    input_file: Optional[Path],
    expr: Optional[str],
    ast: bool,
    prompt: Optional[bool],
    strict_numbers: bool,
    max_errors: Optional[int],
    verbose: bool,
) -> None:
    """
    Parse Kaleidoscope source.

    INPUT_FILE is the source to parse; omit it or pass '-' to read stdin.

    \b
    Examples:
        kscope program.ks            # Report parsed constructs
        kscope --ast program.ks      # Dump the AST
        kscope -e "1+2*3"            # Parse one expression
        kscope --no-prompt < in.ks   # Read stdin quietly
    """
    setup_logging(verbose)

    options = ParserOptions.from_env()
    if strict_numbers:
        options.strict_numbers = True
    if max_errors is not None:
        options.max_errors = max_errors

    try:
        if expr is not None:
            _parse_single_expression(expr, options, ast)
            return

        if input_file is None or str(input_file) == "-":
            if prompt is None:
                prompt = sys.stdin.isatty()
            options.prompt = prompt
            error_count = _parse_stream(sys.stdin, "<stdin>", options, ast)
        else:
            options.prompt = bool(prompt)
            if verbose:
                click.echo(f"Parsing {input_file}...", err=True)
            with input_file.open("r") as stream:
                error_count = _parse_stream(stream, str(input_file), options, ast)

    except Exception as e:
        handle_cli_exception(e, verbose)

    if error_count:
        word = "error" if error_count == 1 else "errors"
        click.echo(f"{error_count} {word}", err=True)
        sys.exit(ExitCode.PARSE_ERROR)


def _parse_single_expression(text: str, options: ParserOptions, dump_ast: bool) -> None:
    expr = parse_expression_source(text, "<expr>", options)
    if dump_ast:
        click.echo(ASTPrinter().print(expr))
    else:
        click.echo(format_expression(expr))


def _parse_stream(stream, filename: str, options: ParserOptions, dump_ast: bool) -> int:
    """Run the driver over stream and return the number of errors."""
    printer = ASTPrinter()

    def report(outcome: ParseOutcome) -> None:
        if not outcome.ok:
            click.echo(str(outcome.error), err=True)
        elif dump_ast:
            click.echo(printer.print(outcome.node))

    parser = Parser.from_source(stream, filename, options, prime=False)
    driver = Driver(parser, handler=report, options=options)
    driver.run()
    logger.debug(f"Parsed {len(driver.nodes())} constructs from {filename}")
    return driver.errors.error_count()


if __name__ == "__main__":
    main()
