"""Declared HTTP operations and the generic operation dispatcher.

Every resource type carries an operation table of :class:`OperationSpec`
entries.  Six are always present and pinned to the type's own path, the
root data path and a fixed result shape:

=========== ======== ============
operation   method   result
=========== ======== ============
``all``     GET      array
``grouped`` GET      grouped map
``find``    GET      object
``create``  POST     object
``update``  PUT      object
``destroy`` DELETE   object
=========== ======== ============

Custom operations add a name, method, optional path, result shape and data
path::

    class Post(Resource):
        published = get("/posts/published", result=list)
        by_author = get(result=dict, data_path="/data/groups")
        publish = put("/posts/:slug/publish")

All operations are called the same way, on the class::

    Post.find(slugs={"slug": "42"})
    Post.published(params={"page": 2}, headers={"X-Trace": "1"})

Calls go through :func:`invoke_operation`: render the path, send one
request, and map the response with :mod:`~rest_api_provider.mapper`.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

from rest_api_provider.client import get_requester
from rest_api_provider.exceptions import UnsupportedTypeError
from rest_api_provider.inflection import underscore
from rest_api_provider.mapper import map_to_array, map_to_grouped_map, map_to_object
from rest_api_provider.path_template import render

if TYPE_CHECKING:
    from rest_api_provider.resource import Resource

logger = logging.getLogger(__name__)


class HTTPMethod(str, enum.Enum):
    """Methods an operation may use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ResultShape(str, enum.Enum):
    """How an operation's response is projected."""

    OBJECT = "object"
    ARRAY = "array"
    GROUPED = "grouped"


class OperationSpec(BaseModel):
    """Declared operation.

    ``path`` of ``None`` means the resource's own path template.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    method: HTTPMethod
    path: Optional[str] = None
    result: ResultShape = ResultShape.OBJECT
    data_path: str = ""


PREDEFINED_OPERATIONS: dict[str, OperationSpec] = {
    "all": OperationSpec(name="all", method=HTTPMethod.GET, result=ResultShape.ARRAY),
    "grouped": OperationSpec(name="grouped", method=HTTPMethod.GET, result=ResultShape.GROUPED),
    "find": OperationSpec(name="find", method=HTTPMethod.GET),
    "create": OperationSpec(name="create", method=HTTPMethod.POST),
    "update": OperationSpec(name="update", method=HTTPMethod.PUT),
    "destroy": OperationSpec(name="destroy", method=HTTPMethod.DELETE),
}


def resolve_method(method: Any) -> HTTPMethod:
    """Normalise ``"get"``/``"GET"``/:class:`HTTPMethod` to :class:`HTTPMethod`.

    Raises:
        ValueError: For methods outside GET, POST, PUT and DELETE.
    """
    try:
        return HTTPMethod(str(method.value if isinstance(method, enum.Enum) else method).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in HTTPMethod)
        raise ValueError(f"Unsupported HTTP method {method!r}. Expected one of: {allowed}") from None


def resolve_result_shape(result: Any) -> ResultShape:
    """Normalise a declared result to a :class:`ResultShape`.

    ``list`` means array, ``dict`` means grouped map, a :class:`ResultShape`
    or its value string is taken as-is, and anything else (``None``, the
    resource class) means object.
    """
    if isinstance(result, ResultShape):
        return result
    if result is list:
        return ResultShape.ARRAY
    if result is dict:
        return ResultShape.GROUPED
    if isinstance(result, str):
        try:
            return ResultShape(result.lower())
        except ValueError:
            raise UnsupportedTypeError(
                f"Unsupported result shape {result!r}. Expected one of: "
                + ", ".join(s.value for s in ResultShape)
            ) from None
    return ResultShape.OBJECT


def make_operation_spec(
    name: Any,
    method: Any,
    path: Optional[str] = None,
    result: Any = None,
    data_path: str = "",
) -> OperationSpec:
    """Validate a custom operation declaration and build its spec."""
    return OperationSpec(
        name=underscore(str(name)),
        method=resolve_method(method),
        path=path,
        result=resolve_result_shape(result),
        data_path=data_path or "",
    )


def invoke_operation(
    resource_cls: type[Resource],
    name: str,
    slugs: Optional[Mapping[str, Any]] = None,
    params: Optional[Mapping[str, Any]] = None,
    body: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Any:
    """Run operation *name* of *resource_cls* and return the mapped result.

    Args:
        resource_cls: The declaring resource class; results are instances of it.
        name: Operation name from the type's operation table.
        slugs: Path placeholder values.
        params: Query parameters.
        body: Request body; a resource instance is sent as its ``to_dict()``.
        headers: Extra request headers.

    Returns:
        An instance, a list of instances, or ``{group: [instances]}``
        depending on the operation's result shape; the response envelope
        when the body is empty.

    Raises:
        KeyError: If *name* is not declared on the type.
        ApiError: If the request fails.
    """
    resource_type = resource_cls.resource_type()
    spec = resource_type.operations[name]

    template = spec.path if spec.path is not None else resource_type.path_template
    path = render(template, slugs or {})
    if hasattr(body, "to_dict"):
        body = body.to_dict()

    logger.debug("%s.%s -> %s %s", resource_cls.__name__, name, spec.method.value, path)
    response = get_requester().make_request_with(
        method=spec.method.value,
        path=path,
        content_type=resource_type.content_type,
        params=params or {},
        body=body or {},
        headers=headers or {},
    )

    if spec.result is ResultShape.ARRAY:
        return map_to_array(response, resource_cls, spec.data_path)
    if spec.result is ResultShape.GROUPED:
        return map_to_grouped_map(response, resource_cls, spec.data_path)
    return map_to_object(response, resource_cls, spec.data_path)


class Operation:
    """Class-body descriptor exposing an operation as a class-level callable.

    Use the :func:`get`, :func:`post`, :func:`put` and :func:`delete`
    factories in resource class bodies.
    """

    def __init__(
        self,
        method: Any,
        path: Optional[str] = None,
        result: Any = None,
        data_path: str = "",
    ) -> None:
        self.method = resolve_method(method)
        self.path = path
        self.result = resolve_result_shape(result)
        self.data_path = data_path
        self.name: Optional[str] = None

    def __set_name__(self, owner: type[Resource], name: str) -> None:
        spec = make_operation_spec(name, self.method, self.path, self.result, self.data_path)
        owner.resource_type().operations[spec.name] = spec
        self.name = spec.name

    def __get__(self, instance: Optional[Resource], owner: type[Resource]) -> Callable[..., Any]:
        return bind_operation(owner, self.name)

    def __repr__(self) -> str:
        return f"Operation({self.name!r}, {self.method.value}, path={self.path!r})"


def bind_operation(resource_cls: type[Resource], name: str) -> Callable[..., Any]:
    """Return a callable running operation *name* on *resource_cls*."""

    def operation(
        slugs: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return invoke_operation(
            resource_cls, name, slugs=slugs, params=params, body=body, headers=headers,
        )

    operation.__name__ = name
    operation.__qualname__ = f"{resource_cls.__name__}.{name}"
    return operation


def get(path: Optional[str] = None, result: Any = None, data_path: str = "") -> Operation:
    """Declare a custom GET operation.

    Args:
        path: Path template; defaults to the resource's own template.
        result: ``list`` (array), ``dict`` (grouped map), a
            :class:`ResultShape`, or ``None`` (object).
        data_path: Keys to descend in the response before mapping.
    """
    return Operation(HTTPMethod.GET, path, result, data_path)


def post(path: Optional[str] = None, result: Any = None, data_path: str = "") -> Operation:
    """Declare a custom POST operation. See :func:`get`."""
    return Operation(HTTPMethod.POST, path, result, data_path)


def put(path: Optional[str] = None, result: Any = None, data_path: str = "") -> Operation:
    """Declare a custom PUT operation. See :func:`get`."""
    return Operation(HTTPMethod.PUT, path, result, data_path)


def delete(path: Optional[str] = None, result: Any = None, data_path: str = "") -> Operation:
    """Declare a custom DELETE operation. See :func:`get`."""
    return Operation(HTTPMethod.DELETE, path, result, data_path)
