"""The :class:`Resource` base class and per-type metadata.

Subclassing :class:`Resource` declares a resource type.  Everything the
class body declares (fields, relations, custom operations) is collected into
a :class:`ResourceType` owned by the class for the lifetime of the process::

    class Author(Resource):
        name = Field(str)

    class Post(Resource):
        resource_path = "/posts/:slug"
        cache_relations = True

        id = Field(int)
        title = Field(str, default="")
        published_at = Field(datetime.datetime)

        author = belongs_to(rel="blog:author")
        published = get("/posts/published", result=list)

    Post.validates("title", presence=True)

    posts = Post.all()
    post = Post.find(slugs={"slug": "42"})
    post.author()

Every subclass also gets an untyped links field, named after the
``hateoas_links`` configuration value at declaration time, which holds the
HATEOAS links that relation lookups follow.

Subclasses of a declared resource start from copies of their parent's
tables; the relation cache is never shared between classes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, ClassVar, Optional

from rest_api_provider.config import get_configuration
from rest_api_provider.exceptions import UnsupportedTypeError
from rest_api_provider.fields import Field, FieldRegistry, assign, normalize_field_name, json_normalize
from rest_api_provider.inflection import pluralize, underscore
from rest_api_provider.operations import (
    PREDEFINED_OPERATIONS,
    OperationSpec,
    bind_operation,
    invoke_operation,
    make_operation_spec,
)
from rest_api_provider.relations import (
    Cardinality,
    Relation,
    RelationCache,
    RelationSpec,
    make_relation_spec,
)
from rest_api_provider.validation import Errors, Validation, run_validations

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"

_registry: dict[str, type[Resource]] = {}
_registry_lock = threading.Lock()


def register_resource(cls: type[Resource]) -> None:
    """Make *cls* resolvable by name for forward-referenced relations."""
    with _registry_lock:
        previous = _registry.get(cls.__name__)
        if previous is not None and previous is not cls:
            logger.debug("Resource name '%s' redeclared, replacing %r", cls.__name__, previous)
        _registry[cls.__name__] = cls


def lookup_resource(name: str) -> type[Resource]:
    """Return the declared resource class called *name*.

    Raises:
        UnsupportedTypeError: If no resource of that name has been declared.
    """
    with _registry_lock:
        cls = _registry.get(name)
    if cls is None:
        raise UnsupportedTypeError(f"Unknown resource '{name}': no Resource subclass of that name")
    return cls


class ResourceType:
    """Declaration-time metadata of one resource class.

    Attributes:
        name: Class name.
        fields: The :class:`~rest_api_provider.fields.FieldRegistry`.
        relations: Relation name -> :class:`~rest_api_provider.relations.RelationSpec`.
        operations: Operation name -> :class:`~rest_api_provider.operations.OperationSpec`,
            starting with the six predefined operations.
        validations: Declared :class:`~rest_api_provider.validation.Validation` entries.
        cache_relations: Whether resolved relations are cached.
        relation_cache: The type-level relation cache.
    """

    def __init__(self, name: str, parent: Optional[ResourceType] = None) -> None:
        self.name = name
        self.fields = parent.fields.copy() if parent else FieldRegistry()
        self.relations: dict[str, RelationSpec] = dict(parent.relations) if parent else {}
        self.operations: dict[str, OperationSpec] = (
            dict(parent.operations) if parent else dict(PREDEFINED_OPERATIONS)
        )
        self.validations: list[Validation] = list(parent.validations) if parent else []
        self.cache_relations: bool = parent.cache_relations if parent else False
        self.relation_cache = RelationCache()
        self._path: Optional[str] = parent._path if parent else None
        self._content_type: Optional[str] = parent._content_type if parent else None

    @property
    def path_template(self) -> str:
        """Explicit path, or ``/<plural snake_case name>/:slug``."""
        return self._path or f"/{pluralize(underscore(self.name))}/:slug"

    @path_template.setter
    def path_template(self, path: Optional[str]) -> None:
        self._path = path or None

    @property
    def content_type(self) -> str:
        return self._content_type or DEFAULT_CONTENT_TYPE

    @content_type.setter
    def content_type(self, content: Optional[str]) -> None:
        if content is not None and str(content).strip():
            self._content_type = str(content).strip()

    def __repr__(self) -> str:
        return f"ResourceType({self.name!r}, path={self.path_template!r})"


class Resource:
    """Base class for declared REST resources.

    Class attributes:
        resource_path: Path template; defaults to ``/<plural name>/:slug``.
        content_type: ``Content-Type`` sent with requests
            (default ``application/json``).
        cache_relations: Cache resolved relations on the type.

    Args:
        attributes: Initial values; declared fields are assigned through
            their setters, unknown keys are kept in :attr:`extra_attributes`.
        **kwargs: More initial values, merged over *attributes*.
    """

    resource_path: ClassVar[Optional[str]] = None
    content_type: ClassVar[Optional[str]] = None
    cache_relations: ClassVar[bool] = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        resource_type = cls.resource_type()
        if "resource_path" in cls.__dict__:
            resource_type.path_template = cls.__dict__["resource_path"]
        if "content_type" in cls.__dict__:
            resource_type.content_type = cls.__dict__["content_type"]
        if "cache_relations" in cls.__dict__:
            resource_type.cache_relations = bool(cls.__dict__["cache_relations"])

        links_name = normalize_field_name(get_configuration().hateoas_links)
        if links_name not in resource_type.fields:
            cls.declare_field(links_name)
        register_resource(cls)

    # ------------------------------------------------------------------ #
    # Declarations
    # ------------------------------------------------------------------ #

    @classmethod
    def resource_type(cls) -> ResourceType:
        """Return the :class:`ResourceType` of this class, creating it on first use."""
        resource_type = cls.__dict__.get("_resource_type")
        if resource_type is None:
            parent = next(
                (
                    base.__dict__["_resource_type"]
                    for base in cls.__mro__[1:]
                    if "_resource_type" in base.__dict__
                ),
                None,
            )
            resource_type = ResourceType(cls.__name__, parent)
            cls._resource_type = resource_type
        return resource_type

    @classmethod
    def declare_field(cls, name: str, type: Any = None, default: Any = None) -> None:
        """Declare a field at runtime, as ``name = Field(type, default)`` would.

        Raises:
            UnsupportedTypeError: If *type* is not supported.
        """
        spec = cls.resource_type().fields.declare(name, type, default)
        if spec.name.isidentifier() and not hasattr(cls, spec.name):
            descriptor = Field(spec.type, spec.default)
            descriptor.name = spec.name
            setattr(cls, spec.name, descriptor)

    @classmethod
    def declare_relation(
        cls,
        name: str,
        cardinality: Cardinality | str = Cardinality.ONE,
        rel: Optional[str] = None,
        data_path: str = "",
        type: Any = None,
        install: bool = True,
    ) -> RelationSpec:
        """Declare a relation at runtime, as ``has_one``/``has_many`` would.

        Raises:
            TypeError: If *name* is not a string.
            UnsupportedTypeError: If *type* is not a resource class or name.
        """
        spec = make_relation_spec(name, Cardinality(cardinality), rel, data_path, type)
        cls.resource_type().relations[spec.name] = spec
        if install and not hasattr(cls, spec.name):
            descriptor = Relation(spec.cardinality, spec.rel, spec.data_path, type)
            descriptor.name = spec.name
            setattr(cls, spec.name, descriptor)
        return spec

    @classmethod
    def declare_operation(
        cls,
        name: str,
        method: Any,
        path: Optional[str] = None,
        result: Any = None,
        data_path: str = "",
    ) -> OperationSpec:
        """Declare a custom operation at runtime, as ``get(...)`` etc. would.

        Redeclaring one of the six predefined names replaces its spec.
        """
        spec = make_operation_spec(name, method, path, result, data_path)
        cls.resource_type().operations[spec.name] = spec
        if not hasattr(cls, spec.name):
            setattr(cls, spec.name, _BoundOperation(spec.name))
        return spec

    @classmethod
    def validates(
        cls,
        field: str,
        presence: bool = False,
        length: Optional[Mapping[str, Any]] = None,
        numericality: bool = False,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        check: Any = None,
    ) -> None:
        """Register validation rules for *field*. See :mod:`~rest_api_provider.validation`."""
        cls.resource_type().validations.append(
            Validation(field, presence, length, numericality, minimum, maximum, check)
        )

    @classmethod
    def validations(cls) -> list[Validation]:
        return list(cls.resource_type().validations)

    @classmethod
    def set_resource_path(cls, path: str) -> None:
        cls.resource_type().path_template = path

    @classmethod
    def set_content_type(cls, content: str) -> None:
        """Set the request ``Content-Type``; blank values are ignored."""
        cls.resource_type().content_type = content

    @classmethod
    def enable_relations_caching(cls) -> None:
        cls.resource_type().cache_relations = True

    @classmethod
    def relations_caching_enabled(cls) -> bool:
        return cls.resource_type().cache_relations

    @classmethod
    def clear_cache(cls) -> None:
        """Forget every cached relation value of this type."""
        cls.resource_type().relation_cache.clear()

    # ------------------------------------------------------------------ #
    # Predefined operations
    # ------------------------------------------------------------------ #

    @classmethod
    def invoke(cls, name: str, **kwargs: Any) -> Any:
        """Run any declared operation by name with ``slugs``/``params``/``body``/``headers``."""
        return invoke_operation(cls, name, **kwargs)

    @classmethod
    def all(cls, slugs=None, params=None, body=None, headers=None) -> Any:
        """GET the resource path and map a JSON array onto instances."""
        return invoke_operation(cls, "all", slugs, params, body, headers)

    @classmethod
    def grouped(cls, slugs=None, params=None, body=None, headers=None) -> Any:
        """GET the resource path and map ``{group: [objects]}`` onto instances."""
        return invoke_operation(cls, "grouped", slugs, params, body, headers)

    @classmethod
    def find(cls, slugs=None, params=None, body=None, headers=None) -> Any:
        """GET one resource."""
        return invoke_operation(cls, "find", slugs, params, body, headers)

    @classmethod
    def create(cls, slugs=None, params=None, body=None, headers=None) -> Any:
        """POST a new resource."""
        return invoke_operation(cls, "create", slugs, params, body, headers)

    @classmethod
    def update(cls, slugs=None, params=None, body=None, headers=None) -> Any:
        """PUT an existing resource."""
        return invoke_operation(cls, "update", slugs, params, body, headers)

    @classmethod
    def destroy(cls, slugs=None, params=None, body=None, headers=None) -> Any:
        """DELETE a resource."""
        return invoke_operation(cls, "destroy", slugs, params, body, headers)

    # ------------------------------------------------------------------ #
    # Instances
    # ------------------------------------------------------------------ #

    def __init__(self, attributes: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._attributes: dict[str, Any] = type(self).resource_type().fields.defaults()
        self._extra: dict[str, Any] = {}
        self._errors = Errors()
        for key, value in {**(attributes or {}), **kwargs}.items():
            if not self.assign(key, value):
                self._extra[key] = value

    @property
    def attributes(self) -> dict[str, Any]:
        """Declared field values, in declaration order."""
        return dict(self._attributes)

    @property
    def extra_attributes(self) -> dict[str, Any]:
        """Values supplied at construction for names that are not declared fields."""
        return dict(self._extra)

    @property
    def errors(self) -> Errors:
        """Messages from the last :meth:`is_valid` call."""
        return self._errors

    def assign(self, name: str, value: Any) -> bool:
        """Set field *name* through its coercing setter.

        Returns:
            ``True`` if *name* is a declared field (even when coercion failed
            and the previous value was kept), ``False`` otherwise.
        """
        spec = type(self).resource_type().fields.get(name)
        if spec is None:
            return False
        assign(self._attributes, spec, value)
        return True

    def get(self, name: str, default: Any = None) -> Any:
        """Return field *name*, falling back to extra attributes, then *default*."""
        key = normalize_field_name(name)
        if key in self._attributes:
            return self._attributes[key]
        return self._extra.get(name, default)

    def __getitem__(self, name: str) -> Any:
        key = normalize_field_name(name)
        if key in self._attributes:
            return self._attributes[key]
        return self._extra[name]

    def __setitem__(self, name: str, value: Any) -> None:
        if not self.assign(name, value):
            self._extra[name] = value

    def is_valid(self) -> bool:
        """Run the declared validations; messages end up in :attr:`errors`."""
        self._errors = run_validations(self, type(self).resource_type().validations)
        return self._errors.is_empty

    def to_dict(self) -> dict[str, Any]:
        """Return declared and extra attributes as JSON-compatible data.

        Dates and timestamps become ISO 8601 strings.
        """
        return json_normalize({**self._extra, **self._attributes})

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value!r}" for name, value in self._attributes.items())
        return f"{type(self).__name__}({fields})"


class _BoundOperation:
    """Descriptor installed by :meth:`Resource.declare_operation`."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional[Resource], owner: type[Resource]) -> Any:
        return bind_operation(owner, self.name)
