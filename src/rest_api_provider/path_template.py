"""Path template rendering and data-path splitting.

Resource paths are templates with ``:name`` placeholders, e.g.
``/users/:user_id/posts/:slug``.  :func:`render` fills them from a slug
mapping.  When no slugs are given at all, everything from the first
placeholder onward is dropped, so ``/posts/:slug`` becomes ``/posts`` (the
collection URL) and ``/users/:user_id/posts`` becomes ``/users``.  Partially
supplied slugs leave the remaining placeholders in the path untouched.

:func:`split_data_path` turns ``"/data/items"`` into ``["data", "items"]``
for :mod:`~rest_api_provider.mapper` navigation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

_FIRST_PLACEHOLDER = re.compile(r":.+")


def render(template: str, slugs: Optional[Mapping[str, Any]] = None) -> str:
    """Render *template* with the given *slugs*.

    Args:
        template: A path containing zero or more ``:name`` placeholders.
        slugs: Placeholder values keyed by name.  ``None`` values render as
            an empty string.

    Returns:
        The rendered path.

    Example::

        >>> render("/test_resources/:slug", {"slug": "qwe"})
        '/test_resources/qwe'
        >>> render("/test_resources/:slug", {})
        '/test_resources'
        >>> render("/a/:x/b/:y", {"x": "1"})
        '/a/1/b/:y'
    """
    if not slugs:
        # Clear from the first placeholder to the end of the path, then drop
        # the separator left dangling in front of it.
        stripped = _FIRST_PLACEHOLDER.sub("", template)
        if stripped != template and len(stripped) > 1:
            stripped = stripped.rstrip("/")
        return stripped

    path = template
    for key, value in slugs.items():
        replacement = "" if value is None else str(value)
        path = re.sub(f":{re.escape(str(key))}", lambda _m: replacement, path)
    return path


def split_data_path(data_path: str | Sequence[str] | None) -> list[str]:
    """Split a slash-separated data path into its non-blank keys.

    A sequence is accepted as already split; blank elements are dropped
    either way.

    Example::

        >>> split_data_path("/a/c/d")
        ['a', 'c', 'd']
        >>> split_data_path("")
        []
    """
    if not data_path:
        return []
    parts = data_path.split("/") if isinstance(data_path, str) else list(data_path)
    return [str(part) for part in parts if str(part).strip()]
