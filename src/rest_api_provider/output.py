"""Terminal output for the ``rest-api-provider`` command line.

Decoded response data is written to **stdout** so it can be piped into
``jq`` and friends; status lines, warnings, errors and debug messages go to
**stderr**.  Rich syntax highlighting is used only when stdout is a colour
TTY (``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` turn it off).

The library never prints: it logs through :mod:`logging`.  Only the CLI
commands use this module.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax

from rest_api_provider.client import ApiResponse


class OutputFormat(str, Enum):
    """How response data is rendered. ``AUTO`` picks ``RICH`` on a colour TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def to_plain_data(value: Any) -> Any:
    """Turn resources and response envelopes into JSON-friendly data.

    Resource instances become their ``to_dict()``, an :class:`ApiResponse`
    becomes its decoded body, and lists/dicts are converted recursively.
    """
    if isinstance(value, ApiResponse):
        return to_plain_data(value.body)
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: to_plain_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain_data(item) for item in value]
    return value


class OutputManager:
    """Write CLI data and diagnostics to the right stream.

    Args:
        format: Rendering of response data.
        no_color: Disable colour and Rich markup.
        quiet: Hide status lines (errors and warnings still show).
        verbose: Show debug lines and response headers.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # -- stdout -------------------------------------------------------------

    def format_response(self, data: Any) -> None:
        """Render decoded data (or resources) on stdout in the active format.

        In ``PLAIN`` mode a flat mapping prints as ``key<TAB>value`` lines;
        strings always print verbatim; everything else is indented JSON.
        """
        data = to_plain_data(data)
        if isinstance(data, str):
            self.print_data(data)
            return
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        elif self._format == OutputFormat.PLAIN and isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{value}")
        else:
            self.print_data(text)

    def print_response(self, response: ApiResponse) -> None:
        """Report the status of *response* on stderr and print its body.

        Headers are listed only in verbose mode.
        """
        self.info(f"HTTP {response.status}")
        if self._verbose:
            for name, value in response.headers.items():
                self.debug(f"{name}: {value}")
        if response.body is not None:
            self.format_response(response.body)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # -- stderr -------------------------------------------------------------

    def info(self, message: str) -> None:
        if not self._quiet:
            self._status(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._status(message, style="green")

    def warning(self, message: str) -> None:
        self._status(message, label="Warning", style="yellow")

    def error(self, message: str) -> None:
        self._status(message, label="Error", style="bold red")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._status(f"[debug] {message}", style="dim")

    def _status(self, message: str, label: Optional[str] = None, style: Optional[str] = None) -> None:
        if self._no_color:
            text = f"{label}: {message}" if label else message
            print(text, file=sys.stderr, flush=True)
        elif label:
            self._stderr.print(f"[{style}]{label}:[/{style}] ", end="")
            self._stderr.print(message, markup=False, highlight=False)
        else:
            self._stderr.print(message, style=style, markup=False, highlight=False)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` disable colour."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# -- process-wide instance ----------------------------------------------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed OutputManager, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
