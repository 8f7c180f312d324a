"""
stak - Stak Interpreter Command-Line Interface
==============================================

Runs Stak programs from a file or the command line, or interactively.
After a successful run the final stack is printed on one line, bottom
first, using literal forms:

    $ stak -e '"ab" 3 * 1 2.0 true'
    "ababab" 1 2.0 true

Usage Examples
--------------
Run a file:
    $ stak program.stk

Run an expression:
    $ stak -e '1 2 + 3 *'

Inspect the front end without running anything:
    $ stak --tokens program.stk
    $ stak --ast -e 'true if 1 else 2 end'

Interactive session (state persists between lines, Ctrl-D exits):
    $ stak
    > 1 2
    1 2
    > +
    3

Verbose mode (debug logging; add --trace to log every evaluated node):
    $ stak -v --trace program.stk
"""

import logging
from pathlib import Path
from typing import Optional

import click

from stak import __version__
from stak.cli.errors import handle_cli_exception
from stak.errors import StakError
from stak.language.ast import ASTPrinter
from stak.runtime.values import Value
from stak.session import RunResult, Session, SessionOptions


logger = logging.getLogger(__name__)

PROMPT = "> "


# =============================================================================
# Output Helpers
# =============================================================================

def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(message)s",
    )


def format_stack(values: list[Value]) -> str:
    """Render stack contents bottom first, in literal form."""
    return " ".join(repr(value) for value in values)


def dump_front_end(result: RunResult, tokens: bool, ast: bool) -> None:
    """Print the token list and/or AST of a parsed source."""
    if tokens:
        for token in result.tokens:
            click.echo(repr(token))
    if ast:
        click.echo(ASTPrinter().print(result.ast))


# =============================================================================
# REPL
# =============================================================================

def run_repl(session: Session) -> None:
    """
    Read lines until end of input, running each against the session.

    Language errors do not end the loop: the stack as the failed line
    left it is printed, then the error.
    """
    click.echo(f"stak {__version__} (Ctrl-D to exit)")

    while True:
        try:
            line = click.prompt("", prompt_suffix=PROMPT, default="", show_default=False)
        except (click.exceptions.Abort, EOFError):
            click.echo()
            return

        if not line.strip():
            continue

        try:
            result = session.run_source(line, "<stdin>")
        except StakError as e:
            click.echo(format_stack(session.stack))
            click.echo(str(e), err=True)
            continue

        click.echo(format_stack(result.stack))


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-e", "--expression",
    metavar="TEXT",
    help="Run TEXT instead of a file",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the tokens and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the AST and exit (for debugging)",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every evaluated node and the stack before it (implies -v)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="stak")
def main(
    input_file: Optional[Path],
    expression: Optional[str],
    tokens: bool,
    ast: bool,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a Stak program.

    INPUT_FILE is the Stak source file to run. With neither INPUT_FILE
    nor -e, an interactive session is started.

    \b
    Examples:
        stak hello.stk               # Run a file, print the final stack
        stak -e '2 3 pow'            # Run an expression
        stak --ast hello.stk         # Show the parsed program
        stak                         # Start the REPL

    \b
    Exit codes:
        0  success
        1  error in the Stak program
        2  invalid arguments or unreadable file
        3  internal interpreter error
    """
    if input_file is not None and expression is not None:
        raise click.UsageError("give either INPUT_FILE or -e, not both")

    verbose = verbose or trace
    setup_logging(verbose)

    logger.debug(f"stak {__version__}, trace={trace}")
    session = Session(SessionOptions(trace=trace))

    try:
        if input_file is None and expression is None:
            run_repl(session)
            return

        if tokens or ast:
            if expression is not None:
                result = session.parse_source(expression, "<expression>")
            else:
                result = session.parse_file(str(input_file))
            dump_front_end(result, tokens, ast)
            return

        if expression is not None:
            result = session.run_source(expression, "<expression>")
        else:
            result = session.run_file(str(input_file))

        if verbose:
            click.echo(f"Ran {result.filename}: {result.token_count} tokens", err=True)

        click.echo(format_stack(result.stack))

    except Exception as e:
        if isinstance(e, StakError) and not (tokens or ast):
            click.echo(format_stack(session.stack))
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
