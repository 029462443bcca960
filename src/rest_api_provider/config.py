"""Process-wide configuration with an explicit configure/reset lifecycle.

A single :class:`~rest_api_provider.models.Configuration` instance is shared
by every resource in the process.  It is read on each request (API root,
TLS verification, auth header) and on each relation lookup (HATEOAS field
names).

* :func:`get_configuration` -- return the active instance, creating the
  defaults lazily.
* :func:`configure` -- apply keyword overrides or a callback to a copy of the
  active instance and install the result.
* :func:`reset` -- restore the defaults.
* :func:`load_configuration` / :func:`configuration_from_env` /
  :func:`resolve_configuration` -- build a configuration from a JSON/YAML
  file and ``REST_API_PROVIDER_*`` environment variables.

Replacing the instance is guarded by a lock so that ``configure`` may run
concurrently with requests; readers always see either the old or the new
instance, never a half-updated one.
"""

from __future__ import annotations

import json
import os
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from rest_api_provider.exceptions import ConfigError
from rest_api_provider.models import Configuration

ENV_PREFIX = "REST_API_PROVIDER_"

_lock = threading.Lock()
_configuration: Optional[Configuration] = None


def get_configuration() -> Configuration:
    """Return the active :class:`Configuration`, creating defaults on first use."""
    global _configuration
    with _lock:
        if _configuration is None:
            _configuration = Configuration()
        return _configuration


def set_configuration(configuration: Configuration) -> None:
    """Install *configuration* as the process-wide instance."""
    global _configuration
    with _lock:
        _configuration = configuration


def configure(
    callback: Optional[Callable[[Configuration], Any]] = None,
    **overrides: Any,
) -> Configuration:
    """Update the process-wide configuration and return the new instance.

    Keyword *overrides* are validated against :class:`Configuration`.  When
    *callback* is given it receives a mutable copy of the active
    configuration (assignments are validated) before the overrides are
    applied::

        def setup(config):
            config.api_root = "https://api.example.com"
            config.auth_token = bearer_token("tok")

        configure(setup)
        configure(verify_ssl=True)

    Raises:
        ConfigError: On unknown keys or values that fail validation.
    """
    global _configuration
    unknown = set(overrides) - set(Configuration.model_fields)
    if unknown:
        raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

    with _lock:
        current = _configuration if _configuration is not None else Configuration()
        updated = current.model_copy(deep=True)
        try:
            if callback is not None:
                callback(updated)
            if overrides:
                updated = Configuration.model_validate(
                    {**updated.model_dump(), **overrides}
                )
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc
        _configuration = updated
    return updated


def reset() -> Configuration:
    """Restore the default configuration and return it."""
    global _configuration
    with _lock:
        _configuration = Configuration()
        return _configuration


# --- File and environment sources ---


def load_configuration(path: str | Path) -> Configuration:
    """Load a configuration from a JSON or YAML file.

    The format is chosen from the extension (``.json``, ``.yaml``, ``.yml``);
    other extensions are parsed as JSON first, then YAML.  Keys absent from
    the file keep their defaults.

    Raises:
        ConfigError: If the file is missing, unparsable, not a mapping, or
            fails validation.
    """
    data = _read_config_file(Path(path))
    try:
        return Configuration.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc


def configuration_from_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Collect ``REST_API_PROVIDER_<FIELD>`` variables as raw overrides.

    Values are returned as strings; pydantic converts them when the
    overrides are validated (``"true"`` -> ``True``, ``"5"`` -> ``5.0``).
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for name in Configuration.model_fields:
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            overrides[name] = value
    return overrides


def resolve_configuration(
    path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Configuration:
    """Resolve a configuration with precedence environment > file > defaults.

    Args:
        path: Optional JSON/YAML file to layer over the defaults.
        environ: Environment mapping (defaults to :data:`os.environ`).

    Raises:
        ConfigError: If the file or any environment value is invalid.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data.update(_read_config_file(Path(path)))
    data.update(configuration_from_env(environ))
    try:
        return Configuration.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* into a dict, raising :class:`ConfigError` on any problem."""
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file {path}: {exc}") from exc

    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration file {path} must contain a mapping (got {type(data).__name__})"
        )
    unknown = set(data) - set(Configuration.model_fields)
    if unknown:
        raise ConfigError(
            f"Unknown configuration key(s) in {path}: {', '.join(sorted(unknown))}"
        )
    return data
