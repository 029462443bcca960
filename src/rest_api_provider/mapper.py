"""Project decoded JSON responses onto resource instances.

Three result shapes are supported, each preceded by an optional descent
along a data path:

* :func:`map_to_object` -- one JSON object onto one instance;
* :func:`map_to_array` -- a JSON array of objects onto a list of instances;
* :func:`map_to_grouped_map` -- a JSON object whose values are arrays of
  objects onto ``{group: [instances]}``, preserving group and member order.

Navigation is lenient: a key that is missing (or holds ``null``/``false``) is
skipped and the cursor stays where it was, so ``"/data/items"`` applied to
``{"items": [...]}`` still lands on the array.  Callers relying on this
should know that a mistyped data path silently maps the enclosing node.

When the response body is empty the :class:`~rest_api_provider.client.ApiResponse`
itself is returned so the caller can inspect status and headers.  None of
these functions perform I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional, Union

from rest_api_provider.client import ApiResponse
from rest_api_provider.path_template import split_data_path

if TYPE_CHECKING:
    from rest_api_provider.resource import Resource

logger = logging.getLogger(__name__)

DataPath = Union[str, Sequence[str], None]
Target = Union["type[Resource]", "Resource"]


def navigate(source: Any, data_path: DataPath) -> Any:
    """Descend into *source* one key at a time, skipping absent keys.

    List nodes are indexed by numeric keys (``"items/0"``).

    Example::

        >>> navigate({"a": {"c": {"d": 1}}}, "/a/b/c")
        {'d': 1}
    """
    for key in split_data_path(data_path):
        if isinstance(source, Mapping):
            if key in source and _present(source[key]):
                source = source[key]
                continue
        elif isinstance(source, list) and key.lstrip("-").isdigit():
            index = int(key)
            if -len(source) <= index < len(source) and _present(source[index]):
                source = source[index]
                continue
        logger.debug("Data path segment '%s' not found, staying on current node", key)
    return source


def _present(value: Any) -> bool:
    # Empty containers, 0 and "" are real nodes; only null and false are skipped.
    return value is not None and value is not False


def map_to_object(
    response: Optional[ApiResponse],
    target: Target,
    data_path: DataPath = None,
) -> Union[Resource, ApiResponse, None]:
    """Map the response body onto an instance of *target*.

    Args:
        response: The received response.
        target: A resource class (a new instance is built) or an existing
            instance (updated in place).
        data_path: Keys to descend before mapping.

    Returns:
        The mapped instance; the *response* itself when its body is empty;
        ``None`` when there is no response or the navigated node is not a
        non-empty JSON object.
    """
    if response is None:
        return None
    if response.is_empty:
        return response
    source = navigate(response.body, data_path)
    if not source:
        return None
    return build_instance(source, target)


def map_to_array(
    response: Optional[ApiResponse],
    target: type[Resource],
    data_path: DataPath = None,
) -> Union[list[Any], ApiResponse, None]:
    """Map a JSON array of objects onto a list of *target* instances.

    Elements keep their source order and are mapped like
    :func:`map_to_object` bodies, so an empty element becomes an envelope.
    A navigated node that is not an array yields an empty list.
    """
    if response is None:
        return None
    if response.is_empty:
        return response
    source = navigate(response.body, data_path)
    if not isinstance(source, list):
        logger.warning(
            "Expected a JSON array for %s, got %s", _target_name(target), type(source).__name__
        )
        return []
    return [_map_member(response, item, target) for item in source]


def map_to_grouped_map(
    response: Optional[ApiResponse],
    target: type[Resource],
    data_path: DataPath = None,
) -> Union[dict[str, list[Any]], ApiResponse, None]:
    """Map ``{group: [objects]}`` onto ``{group: [target instances]}``.

    Groups keep their first-appearance order and members their source order.
    Groups whose value is not an array are skipped.
    """
    if response is None:
        return None
    if response.is_empty:
        return response
    source = navigate(response.body, data_path)
    if not isinstance(source, Mapping):
        logger.warning(
            "Expected a JSON object of groups for %s, got %s",
            _target_name(target), type(source).__name__,
        )
        return {}

    result: dict[str, list[Any]] = {}
    for group, members in source.items():
        if not isinstance(members, list):
            logger.warning("Group '%s' is not a JSON array, skipping", group)
            continue
        result[group] = [_map_member(response, member, target) for member in members]
    return result


def _map_member(response: ApiResponse, member: Any, target: Target) -> Union[Resource, ApiResponse, None]:
    """Map one array or group member as if it were a response of its own.

    An empty member therefore yields an envelope holding the member as body
    together with the parent's status and headers.
    """
    element = ApiResponse(status=response.status, headers=response.headers)
    element.body = member
    return map_to_object(element, target)


def build_instance(source: Any, target: Target) -> Optional[Resource]:
    """Assign every key of *source* to a (new or given) *target* instance.

    Keys without a matching declared field are ignored.
    """
    if not isinstance(source, Mapping):
        logger.warning(
            "Expected a JSON object for %s, got %s", _target_name(target), type(source).__name__
        )
        return None
    instance = target() if isinstance(target, type) else target
    for key, value in source.items():
        instance.assign(key, value)
    return instance


def _target_name(target: Target) -> str:
    return target.__name__ if isinstance(target, type) else type(target).__name__
