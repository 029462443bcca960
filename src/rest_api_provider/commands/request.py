"""Request command -- send one request and print the decoded response.

Useful to check an API root, credentials and HATEOAS links before
declaring resources against them::

    rest-api-provider request GET /posts --param page=2
    rest-api-provider request POST /posts --body '{"title": "Hi"}'
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from rest_api_provider.client import HTTP_VERBS, get_requester
from rest_api_provider.config import resolve_configuration, set_configuration
from rest_api_provider.exceptions import ApiError, ConfigError
from rest_api_provider.output import debug, error, get_output


def parse_pairs(values: Optional[list[str]], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` options into a dict.

    Raises:
        typer.BadParameter: If a value has no ``=``.
    """
    pairs: dict[str, str] = {}
    for value in values or []:
        key, sep, rest = value.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {value!r}", param_hint=option)
        pairs[key] = rest
    return pairs


def request_command(
    method: str = typer.Argument(..., help="HTTP method: GET, POST, PUT or DELETE."),
    path: str = typer.Argument(..., help="Path relative to the API root, or an absolute URL."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-p", help="Query parameter key=value."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Header key=value."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="JSON request body."),
    content_type: str = typer.Option("application/json", "--content-type", help="Content-Type header."),
    file: Optional[str] = typer.Option(None, "--file", "-c", help="JSON/YAML settings file."),
) -> None:
    """Send one request through the library and print the response body."""
    verb = method.upper()
    if verb not in HTTP_VERBS:
        raise typer.BadParameter(f"Unsupported method {method!r}", param_hint="METHOD")

    params = parse_pairs(param, "--param")
    headers = parse_pairs(header, "--header")
    payload = None
    if body:
        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON body: {exc}", param_hint="--body") from None

    try:
        set_configuration(resolve_configuration(file))
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    absolute = path.startswith(("http://", "https://"))
    debug(f"{verb} {path}")
    try:
        response = get_requester().make_request_with(
            method=verb,
            url=path if absolute else None,
            path="" if absolute else path,
            content_type=content_type if payload is not None else "",
            params=params,
            body=payload,
            headers=headers,
        )
    except ApiError as exc:
        error(str(exc))
        if exc.body is not None:
            get_output().format_response(exc.body)
        raise typer.Exit(code=exc.exit_code) from None

    get_output().print_response(response)
