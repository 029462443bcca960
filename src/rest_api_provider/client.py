"""Transport boundary: send one HTTP request and wrap the response.

:class:`Requester` wraps :class:`httpx.Client` the same way for every
generated operation and relation lookup:

- **Target** -- operations send a path relative to the configured
  ``api_root``; relation lookups send the HATEOAS href verbatim.
- **Headers** -- ``Accept: application/json``, caller headers, the
  configured ``Authorization`` value (which wins over a caller one), and the
  resource's ``Content-Type``.
- **Body** -- JSON-serialised only when non-empty; query params only when
  non-empty.
- **Status mapping** -- ``[100, 400)`` is success, anything else raises
  :class:`~rest_api_provider.exceptions.ApiError`.  Transport exceptions are
  wrapped in ``ApiError`` as well.  Nothing is retried.

The process-wide requester is reachable through :func:`get_requester`;
tests install one backed by :class:`httpx.MockTransport` with
:func:`set_requester`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from rest_api_provider.config import get_configuration
from rest_api_provider.exceptions import ApiError
from rest_api_provider.fields import to_json

logger = logging.getLogger(__name__)

HTTP_VERBS = ("GET", "POST", "PUT", "DELETE")
"""Methods resources may declare operations with."""

SUCCESS_STATUSES = range(100, 400)


class ApiResponse:
    """Status, headers and decoded body of a received response.

    Mappers return this envelope unchanged when the body is empty so that
    callers can still inspect, for instance, a ``201`` with a ``Location``
    header.

    Args:
        status: HTTP status code.
        headers: Response headers.
        body: Decoded JSON, or a ``str``/``bytes`` payload to decode.  Bodies
            that are empty or not valid JSON become ``None``.
    """

    def __init__(self, status: int, headers: Optional[Mapping[str, str]] = None, body: Any = None):
        self.status = int(status)
        self.headers: dict[str, str] = dict(headers or {})
        if isinstance(body, (str, bytes, bytearray)):
            try:
                self.body = json.loads(body) if body else None
            except ValueError:
                self.body = None
        else:
            self.body = body

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> ApiResponse:
        return cls(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    @property
    def is_empty(self) -> bool:
        """Whether the body carries no data (``None``, ``{}``, ``[]`` or ``""``)."""
        return not self.body

    def __repr__(self) -> str:
        return f"ApiResponse(status={self.status}, body={self.body!r})"


class Requester:
    """Send requests on behalf of resources.

    Args:
        transport: Optional :class:`httpx.BaseTransport` used instead of the
            network, e.g. :class:`httpx.MockTransport` in tests.

    Example::

        requester = Requester()
        response = requester.make_request_with(method="GET", path="/users")
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._transport = transport

    def make_request_with(
        self,
        method: str = "GET",
        url: Optional[str] = None,
        path: str = "",
        content_type: str = "",
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        verify_ssl: Optional[bool] = None,
    ) -> ApiResponse:
        """Send one request and return its :class:`ApiResponse`.

        Args:
            method: HTTP method (case-insensitive).
            url: Base URL; defaults to the configured ``api_root``.  When
                *path* is empty the request goes to *url* exactly.
            path: Path resolved against *url*.
            content_type: ``Content-Type`` header value; omitted when blank.
            params: Query parameters, sent when non-empty.
            body: JSON-serialisable body, sent when non-empty.
            headers: Extra request headers.
            verify_ssl: TLS verification; defaults to the configuration.

        Returns:
            The wrapped response, for statuses in ``[100, 400)``.

        Raises:
            ApiError: For any other status, or when the transport fails.
        """
        config = get_configuration()
        base = config.api_root if url is None else url
        verify = config.verify_ssl if verify_ssl is None else verify_ssl

        merged_headers: dict[str, str] = {"Accept": "application/json"}
        merged_headers.update(headers or {})
        # The configured credentials win over a caller-supplied Authorization.
        if config.auth_token:
            merged_headers["Authorization"] = config.auth_token
        if content_type:
            merged_headers["Content-Type"] = content_type

        request_kwargs: dict[str, Any] = {"headers": merged_headers}
        if params:
            request_kwargs["params"] = dict(params)

        client_kwargs: dict[str, Any] = {
            "verify": verify,
            "timeout": config.timeout,
            "follow_redirects": True,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        if path:
            client_kwargs["base_url"] = base
            target = path
        else:
            target = base

        request: Optional[httpx.Request] = None
        try:
            if body:
                request_kwargs["content"] = to_json(body)
                merged_headers.setdefault("Content-Type", "application/json")
            with httpx.Client(**client_kwargs) as client:
                request = client.build_request(method.upper(), target, **request_kwargs)
                logger.debug("%s %s", request.method, request.url)
                raw = client.send(request)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Transport failure for %s %s: %s", method.upper(), target, exc)
            raise ApiError(f"Request failed: {exc}", request=request) from exc
        except (TypeError, ValueError) as exc:
            logger.debug("Could not build %s %s: %s", method.upper(), target, exc)
            raise ApiError(f"Request failed: {exc}", request=request) from exc

        response = ApiResponse.from_httpx(raw)
        logger.debug("%s %s -> %d", request.method, request.url, response.status)
        if response.status in SUCCESS_STATUSES:
            return response
        raise ApiError(_error_message(response), request=request, response=response)


def _error_message(response: ApiResponse) -> str:
    """Build ``HTTP <status>[: detail]`` from an error response."""
    detail = ""
    body = response.body
    if isinstance(body, dict):
        detail = str(body.get("message") or body.get("error") or body.get("detail") or "")
    elif body:
        detail = str(body)[:200]
    prefix = f"HTTP {response.status}"
    return f"{prefix}: {detail}" if detail else prefix


# ------------------------------------------------------------------ #
# Process-wide requester
# ------------------------------------------------------------------ #

_requester: Optional[Requester] = None


def get_requester() -> Requester:
    """Return the process-wide :class:`Requester`, creating one lazily."""
    global _requester
    if _requester is None:
        _requester = Requester()
    return _requester


def set_requester(requester: Requester) -> None:
    """Install *requester* as the process-wide instance."""
    global _requester
    _requester = requester


def reset_requester() -> None:
    """Drop the installed requester; the next call creates a default one."""
    global _requester
    _requester = None
