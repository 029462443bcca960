"""Pydantic models shared across rest_api_provider.

Only process-wide settings live here.  Declaration-time metadata
(field, relation and operation specs) is defined next to the code that
consumes it in :mod:`~rest_api_provider.fields`,
:mod:`~rest_api_provider.relations` and :mod:`~rest_api_provider.operations`.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Configuration(BaseModel):
    """Process-wide settings consulted by every request and relation lookup.

    Installed and replaced through :func:`rest_api_provider.config.configure`
    and :func:`rest_api_provider.config.reset`.  Loaded from JSON/YAML files
    by :func:`rest_api_provider.config.load_configuration`.

    Example::

        Configuration(
            api_root="https://api.example.com",
            auth_token="Bearer tok123",
        )
    """

    model_config = ConfigDict(validate_assignment=True)

    api_root: str = Field(
        default="http://", description="Base URL prepended to every resource path"
    )
    verify_ssl: bool = Field(
        default=False, description="Verify TLS certificates of the API"
    )
    auth_token: Optional[str] = Field(
        default=None,
        description="Full Authorization header value, e.g. 'Bearer <token>'",
    )
    hateoas_links: str = Field(
        default="links", description="Field holding the HATEOAS links container"
    )
    hateoas_href: str = Field(
        default="href", description="Key of the URL inside a HATEOAS link entry"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
