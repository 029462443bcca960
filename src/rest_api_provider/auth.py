"""Helpers that build ``Authorization`` header values.

The configured ``auth_token`` is sent verbatim as the ``Authorization``
header of every request, so it must already carry its scheme.  These helpers
produce correctly formatted values::

    configure(auth_token=bearer_token(os.environ["API_TOKEN"]))
    configure(auth_token=basic_credentials("user", "secret"))
"""

from __future__ import annotations

import base64

from rest_api_provider.exceptions import ConfigError


def bearer_token(token: str) -> str:
    """Return an ``Authorization`` value for a bearer token."""
    token = token.strip()
    if not token:
        raise ConfigError("Bearer token must not be empty")
    return f"Bearer {token}"


def basic_credentials(username: str, password: str) -> str:
    """Return an ``Authorization`` value for HTTP Basic auth (:rfc:`7617`).

    Raises:
        ConfigError: If *username* contains a colon, which the Basic scheme
            cannot represent.
    """
    if ":" in username:
        raise ConfigError("Basic auth username must not contain a colon")
    raw = f"{username}:{password}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"
