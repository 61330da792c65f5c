"""
scc - SimpleC Front-End Command-Line Interface
==============================================

Parses a SimpleC source file and prints what the front end produced.

Usage Examples
--------------
Print the AST:
    $ scc prog.c

Print the token stream:
    $ scc --tokens prog.c

Limit nesting depth:
    $ scc --max-depth 32 prog.c

Verbose mode (debug logging on stderr):
    $ scc -v prog.c
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from simplec import __version__
from simplec.cli.errors import ExitCode, handle_cli_exception
from simplec.frontend import Frontend, FrontendOptions, ParseError

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream instead of the AST",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum nesting depth (default: $SIMPLEC_MAX_DEPTH or 100)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="scc")
def main(
    input_file: Path,
    tokens: bool,
    max_depth: Optional[int],
    verbose: bool,
) -> None:
    """
    Parse SimpleC source code and print its AST.

    INPUT_FILE is the SimpleC source file (.c) to parse.

    \b
    Examples:
        scc prog.c                   # Print the AST
        scc --tokens prog.c          # Print one token per line
        scc -v prog.c                # Debug logging on stderr

    \b
    Exit codes:
        0  success
        1  the source is malformed
        2  invalid arguments or missing file
        3  internal error
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = FrontendOptions.from_env()
    options.collect_tokens = tokens
    if max_depth is not None:
        options.max_depth = max_depth

    frontend = Frontend(options)

    try:
        logger.info(f"Parsing {input_file} (max depth {options.max_depth})")

        result = frontend.parse_file(str(input_file))

        if tokens:
            for token in result.tokens:
                click.echo(repr(token))
        else:
            click.echo(result.ast.dump())

        if verbose:
            click.echo(
                f"Parsed {input_file}: {result.token_count} tokens, "
                f"{len(result.ast.items)} top-level items",
                err=True,
            )

    except ParseError:
        click.echo(frontend.errors.format_report(), err=True)
        sys.exit(ExitCode.PARSE_ERROR)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
