"""Config command -- print the configuration the library would use."""

from __future__ import annotations

from typing import Optional

import typer

from rest_api_provider.config import resolve_configuration
from rest_api_provider.exceptions import ConfigError
from rest_api_provider.output import error, get_output


def config_command(
    file: Optional[str] = typer.Option(
        None, "--file", "-c", help="JSON/YAML settings file to layer over the defaults."
    ),
    show_token: bool = typer.Option(
        False, "--show-token", help="Print the auth token instead of masking it."
    ),
) -> None:
    """Show the resolved configuration (defaults < file < environment)."""
    try:
        config = resolve_configuration(file)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    data = config.model_dump(mode="json")
    if data.get("auth_token") and not show_token:
        data["auth_token"] = "****"
    get_output().format_response(data)
