"""Field declarations, the per-type field registry, and value coercion.

A resource type owns a :class:`FieldRegistry` mapping snake_case field names
to a :class:`FieldSpec` (optional :class:`FieldType` plus default).  Values
assigned to a field pass through :func:`coerce_value`:

* untyped fields store a JSON-normalised deep copy of the value (plain
  dicts, lists and scalars); values that cannot be normalised are stored
  as-is;
* ``string`` fields always succeed by stringifying;
* ``integer``, ``float``, ``date``, ``timestamp``, ``list`` and ``map``
  fields parse the value and, when that fails, leave the previous value in
  place without raising.

Fields are exposed on instances through the :class:`Field` descriptor, bound
when the resource class is created.
"""

from __future__ import annotations

import copy
import datetime
import enum
import json
import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from rest_api_provider.exceptions import UnsupportedTypeError
from rest_api_provider.inflection import underscore

if TYPE_CHECKING:
    from rest_api_provider.resource import Resource

logger = logging.getLogger(__name__)


class FieldType(str, enum.Enum):
    """Supported declared field types."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    DATE = "date"
    TIMESTAMP = "timestamp"
    LIST = "list"
    MAP = "map"


PYTHON_TYPES: dict[type, FieldType] = {
    str: FieldType.STRING,
    int: FieldType.INTEGER,
    float: FieldType.FLOAT,
    datetime.date: FieldType.DATE,
    datetime.datetime: FieldType.TIMESTAMP,
    list: FieldType.LIST,
    dict: FieldType.MAP,
}
"""Python types accepted in place of a :class:`FieldType` tag."""


def _allowed_types() -> str:
    tags = ", ".join(t.value for t in FieldType)
    names = ", ".join(t.__name__ for t in PYTHON_TYPES)
    return f"{tags} (or {names})"


def resolve_field_type(type_: Any) -> Optional[FieldType]:
    """Normalise a declared type to a :class:`FieldType`, or ``None`` if untyped.

    Raises:
        UnsupportedTypeError: If *type_* is not a supported tag or Python type.
    """
    if type_ is None:
        return None
    if isinstance(type_, FieldType):
        return type_
    if isinstance(type_, str):
        try:
            return FieldType(type_.lower())
        except ValueError:
            pass
    elif isinstance(type_, type) and type_ in PYTHON_TYPES:
        return PYTHON_TYPES[type_]
    raise UnsupportedTypeError(
        f"Unsupported type {type_!r}. Expected one of: {_allowed_types()}"
    )


def normalize_field_name(name: Any) -> str:
    """Return the snake_case registry key for *name*."""
    return underscore(str(name))


class FieldSpec(BaseModel):
    """Declared shape of one field: its name, optional type and default."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    type: Optional[FieldType] = None
    default: Any = None

    def initial_value(self) -> Any:
        """Return a fresh copy of the default for a new instance."""
        return copy.deepcopy(self.default)


class FieldRegistry:
    """Ordered mapping of field name to :class:`FieldSpec` for one resource type."""

    def __init__(self, specs: Iterable[FieldSpec] = ()) -> None:
        self._specs: dict[str, FieldSpec] = {spec.name: spec for spec in specs}

    def declare(self, name: Any, type: Any = None, default: Any = None) -> FieldSpec:
        """Declare (or redeclare) a field.

        Redeclaring an existing name replaces its spec but keeps its position.

        Raises:
            UnsupportedTypeError: If *type* is not supported.
        """
        spec = FieldSpec(
            name=normalize_field_name(name),
            type=resolve_field_type(type),
            default=default,
        )
        self._specs[spec.name] = spec
        return spec

    def get(self, name: Any) -> Optional[FieldSpec]:
        return self._specs.get(normalize_field_name(name))

    def names(self) -> list[str]:
        return list(self._specs)

    def defaults(self) -> dict[str, Any]:
        """Return ``{name: fresh default}`` for every declared field, in order."""
        return {name: spec.initial_value() for name, spec in self._specs.items()}

    def copy(self) -> FieldRegistry:
        return FieldRegistry(self._specs.values())

    def __contains__(self, name: object) -> bool:
        return normalize_field_name(name) in self._specs

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"FieldRegistry({self.names()!r})"


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


class CoercionError(ValueError):
    """Internal signal that a value could not be converted; never escapes a setter."""


_INT = TypeAdapter(int)
_FLOAT = TypeAdapter(float)
_DATE = TypeAdapter(datetime.date)
_TIMESTAMP = TypeAdapter(datetime.datetime)


def _json_default(value: Any) -> Any:
    """``json.dumps`` fallback turning library objects into JSON-friendly data."""
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return value.to_dict()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return list(value)
    if isinstance(value, enum.Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    """Serialise *value* to a JSON string, handling resources and dates."""
    return json.dumps(value, default=_json_default)


def json_normalize(value: Any) -> Any:
    """Return a deep copy of *value* made of plain dicts, lists and scalars.

    Raises:
        CoercionError: If *value* cannot be represented as JSON.
    """
    try:
        return json.loads(to_json(value))
    except (TypeError, ValueError) as exc:
        raise CoercionError(str(exc)) from exc


def coerce_value(field_type: Optional[FieldType], raw: Any) -> Any:
    """Convert *raw* to *field_type*.

    Raises:
        CoercionError: If the conversion fails.  Untyped and ``string``
            fields never fail.
    """
    if field_type is None:
        try:
            return json_normalize(raw)
        except CoercionError:
            return raw

    if field_type is FieldType.STRING:
        if raw is None or isinstance(raw, str):
            return raw
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, (dict, list)):
            try:
                return to_json(raw)
            except (TypeError, ValueError):
                return str(raw)
        return str(raw)

    if field_type in (FieldType.INTEGER, FieldType.FLOAT):
        if raw is None or isinstance(raw, bool):
            raise CoercionError(f"{raw!r} is not numeric")
        adapter = _INT if field_type is FieldType.INTEGER else _FLOAT
        try:
            return adapter.validate_python(raw.strip() if isinstance(raw, str) else raw)
        except ValidationError as exc:
            raise CoercionError(str(exc)) from exc

    if field_type is FieldType.DATE:
        if isinstance(raw, datetime.datetime):
            return raw.date()
        if isinstance(raw, datetime.date):
            return raw
        try:
            return _DATE.validate_python(raw)
        except ValidationError:
            pass
        try:
            return _TIMESTAMP.validate_python(raw).date()
        except ValidationError as exc:
            raise CoercionError(str(exc)) from exc

    if field_type is FieldType.TIMESTAMP:
        try:
            return _TIMESTAMP.validate_python(raw)
        except ValidationError as exc:
            raise CoercionError(str(exc)) from exc

    # LIST / MAP
    normalized = json_normalize(raw)
    expected = list if field_type is FieldType.LIST else dict
    if not isinstance(normalized, expected):
        raise CoercionError(f"{raw!r} is not a {field_type.value}")
    return normalized


def assign(attributes: dict[str, Any], spec: FieldSpec, raw: Any) -> bool:
    """Coerce *raw* per *spec* and store it in *attributes*.

    Returns:
        ``True`` if the value was stored, ``False`` if coercion failed and
        the previous value was kept.
    """
    try:
        attributes[spec.name] = coerce_value(spec.type, raw)
    except CoercionError as exc:
        logger.debug(
            "Kept previous value of field '%s': cannot coerce %r to %s (%s)",
            spec.name, raw, spec.type.value if spec.type else "any", exc,
        )
        return False
    return True


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


class Field:
    """Declare a resource field in a class body.

    Args:
        type: A :class:`FieldType`, its tag string, or one of the Python types
            in :data:`PYTHON_TYPES`.  ``None`` leaves the field untyped.
        default: Value each new instance starts with (deep-copied).

    Example::

        class Post(Resource):
            id = Field(int)
            title = Field(str, default="")
            tags = Field(list, default=[])
            meta = Field()

    Raises:
        UnsupportedTypeError: At class creation, for unsupported types.
    """

    def __init__(self, type: Any = None, default: Any = None) -> None:
        self.type = resolve_field_type(type)
        self.default = default
        self.name: Optional[str] = None

    def __set_name__(self, owner: type[Resource], name: str) -> None:
        spec = owner.resource_type().fields.declare(name, self.type, self.default)
        self.name = spec.name

    def __get__(self, instance: Optional[Resource], owner: type[Resource]) -> Any:
        if instance is None:
            return self
        return instance._attributes.get(self.name)

    def __set__(self, instance: Resource, value: Any) -> None:
        instance.assign(self.name, value)

    def __repr__(self) -> str:
        kind = self.type.value if self.type else "any"
        return f"Field({self.name!r}, type={kind}, default={self.default!r})"
