"""Init command -- write a starter settings file for an application.

``rest-api-provider init`` creates either a Python settings module that
calls :func:`rest_api_provider.configure` at import time, or, when the
target ends in ``.json``/``.yaml``/``.yml``, a data file that
:func:`rest_api_provider.config.load_configuration` reads.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
import yaml

from rest_api_provider.models import Configuration
from rest_api_provider.output import error, info, success

DEFAULT_SETTINGS_PATH = "rest_api_provider_settings.py"

SETTINGS_TEMPLATE = '''"""rest_api_provider settings. Import this module once at start-up."""

import os

from rest_api_provider import configure
from rest_api_provider.auth import bearer_token

configure(
    api_root=os.environ.get("API_ROOT", "{api_root}"),
    verify_ssl={verify_ssl},
    auth_token=bearer_token(os.environ["API_TOKEN"]) if os.environ.get("API_TOKEN") else None,
    hateoas_links="{hateoas_links}",
    hateoas_href="{hateoas_href}",
)
'''


def render_settings(path: Path, config: Configuration) -> str:
    """Return the content of a settings file for *path*'s extension."""
    suffix = path.suffix.lower()
    data = config.model_dump(mode="json")
    if suffix == ".json":
        return json.dumps(data, indent=2) + "\n"
    if suffix in (".yaml", ".yml"):
        return yaml.safe_dump(data, sort_keys=False)
    return SETTINGS_TEMPLATE.format(
        api_root=config.api_root,
        verify_ssl=config.verify_ssl,
        hateoas_links=config.hateoas_links,
        hateoas_href=config.hateoas_href,
    )


def init_command(
    path: str = typer.Option(
        DEFAULT_SETTINGS_PATH, "--path", "-p", help="File to create (.py, .json, .yaml)."
    ),
    api_root: str = typer.Option(
        "http://", "--api-root", help="Base URL written into the settings."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Write a starter settings file.

    Raises:
        typer.Exit: With code 2 if the file exists and ``--force`` was not given.
    """
    target = Path(path)
    if target.exists() and not force:
        error(f"{target} already exists (use --force to overwrite)")
        raise typer.Exit(code=2)

    content = render_settings(target, Configuration(api_root=api_root))
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    success(f"Created {target}")
    if target.suffix.lower() == ".py":
        info(f"Import it at start-up: import {target.stem}")
