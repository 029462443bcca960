"""Typer application and console-script entry point.

The ``rest-api-provider`` command is a small developer companion to the
library: it writes starter settings, shows the configuration that
resources would use, and sends one-off requests through the same
:class:`~rest_api_provider.client.Requester` that resources use.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any

import typer

from rest_api_provider import __version__
from rest_api_provider.commands.config import config_command
from rest_api_provider.commands.init import init_command
from rest_api_provider.commands.request import request_command
from rest_api_provider.exceptions import RestApiProviderError
from rest_api_provider.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="rest-api-provider",
    help="Map REST API resources onto Python classes.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("init", help="Write a starter settings file.")(init_command)
app.command("config", help="Show the resolved configuration.")(config_command)
app.command("request", help="Send one request and print the response.")(request_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"rest-api-provider {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and library logging."
    ),
) -> None:
    """Install the global OutputManager from CLI flags.

    ``--verbose`` also routes the library's ``rest_api_provider.*`` loggers
    to stderr at DEBUG level.
    """
    from rest_api_provider.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        package_logger = logging.getLogger("rest_api_provider")
        if not package_logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
            package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Console-script entry point.

    Library errors that escape a command are reported on stderr and mapped
    to their exit code; anything else exits with the generic failure code.
    """
    from rest_api_provider.output import error

    _setup_signal_handlers()
    try:
        app()
    except RestApiProviderError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:  # noqa: BLE001
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
