"""HATEOAS relations between resources.

A relation names another resource type and the link relation (``rel``)
under which the server advertises it in an instance's links field::

    class Post(Resource):
        author = belongs_to(rel="blog:author")
        comments = has_many(rel="blog:comments", data_path="/data")

    post.author()                 # GET the "blog:author" href, map one Author
    post.comments(use_cache=True) # list of Comment, cached on Post

Resolution never builds a URL itself: it follows the href found in the
links container (field name and href key come from the configuration).
Instances without the link resolve to ``None`` without any request.

The relation cache belongs to the resource *type*, not the instance: with
caching enabled, a value resolved through one ``Post`` is returned for
every other ``Post`` that asks with ``use_cache=True``.  The cache guards
each read and write with a lock but the lookup-then-store sequence is not
atomic, so concurrent resolutions of the same relation may each issue a
request and the last one to finish wins the slot.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict

from rest_api_provider.client import get_requester
from rest_api_provider.config import get_configuration
from rest_api_provider.exceptions import UnsupportedTypeError
from rest_api_provider.fields import normalize_field_name
from rest_api_provider.inflection import classify
from rest_api_provider.mapper import map_to_array, map_to_object

if TYPE_CHECKING:
    from rest_api_provider.resource import Resource

logger = logging.getLogger(__name__)


class Cardinality(str, enum.Enum):
    """How many target instances a relation resolves to."""

    ONE = "one"
    MANY = "many"


class RelationSpec(BaseModel):
    """Declared relation: cardinality, link rel, data path and target type.

    ``target`` is either a resource class or a class name resolved on first
    use, which allows relations to reference resources declared later.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    cardinality: Cardinality
    rel: str
    data_path: str = ""
    target: Any

    def target_class(self) -> type[Resource]:
        """Return the target resource class, resolving a forward reference.

        Raises:
            UnsupportedTypeError: If a named target was never declared.
        """
        if isinstance(self.target, str):
            from rest_api_provider.resource import lookup_resource

            return lookup_resource(self.target)
        return self.target


def make_relation_spec(
    name: Any,
    cardinality: Cardinality,
    rel: Optional[str] = None,
    data_path: str = "",
    type: Union[str, type[Resource], None] = None,
) -> RelationSpec:
    """Validate a relation declaration and build its :class:`RelationSpec`.

    Raises:
        TypeError: If *name* is not a string.
        UnsupportedTypeError: If *type* is neither a class name nor a
            resource class.
    """
    if not isinstance(name, str):
        raise TypeError("Relation name should be a string")
    return RelationSpec(
        name=name,
        cardinality=cardinality,
        rel=rel or name,
        data_path=data_path or "",
        target=_check_target(name, type),
    )


def _check_target(name: str, target: Any) -> Union[str, type[Resource]]:
    from rest_api_provider.resource import Resource

    if target is None:
        return classify(name)
    if isinstance(target, str) and target:
        return target
    if isinstance(target, type) and issubclass(target, Resource):
        return target
    raise UnsupportedTypeError(
        f"Unsupported relation target {target!r} for '{name}'. "
        "Expected a Resource subclass or its class name"
    )


class RelationCache:
    """Type-level store of resolved relation values, keyed by relation name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values: dict[str, Any] = {}

    def get(self, name: str) -> Any:
        with self._lock:
            return self._values.get(name)

    def set(self, name: str, value: Any) -> None:
        with self._lock:
            self._values[name] = value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return self._values.get(name) is not None


def find_link_href(links: Any, rel: str, href_key: str) -> Optional[str]:
    """Return the href advertised for *rel* in a links container.

    Accepts the keyed form ``{rel: {href_key: url}}`` and the list form
    ``[{"rel": rel, href_key: url}, ...]``.
    """
    link: Any = None
    if isinstance(links, Mapping):
        link = links.get(rel)
    elif isinstance(links, list):
        link = next(
            (item for item in links if isinstance(item, Mapping) and item.get("rel") == rel),
            None,
        )
    if isinstance(link, Mapping):
        href = link.get(href_key)
        return str(href) if href else None
    return None


def resolve_relation(instance: Resource, name: str, use_cache: bool = False) -> Any:
    """Follow relation *name* of *instance* and map the related resource(s).

    Args:
        instance: The owning resource instance.
        name: Declared relation name.
        use_cache: Return the type-level cached value when caching is enabled
            for the type and a value is present.

    Returns:
        A target instance (``one``), a list of them (``many``), the response
        envelope for an empty body, or ``None`` when the link is absent.

    Raises:
        KeyError: If *name* is not a declared relation.
        ApiError: If the follow-up request fails.
    """
    resource_type = type(instance).resource_type()
    spec = resource_type.relations[name]
    caching = resource_type.cache_relations

    if caching and use_cache:
        cached = resource_type.relation_cache.get(name)
        if cached is not None:
            logger.debug("Relation cache hit: %s.%s", resource_type.name, name)
            return cached

    config = get_configuration()
    links = instance._attributes.get(normalize_field_name(config.hateoas_links))
    href = find_link_href(links, spec.rel, config.hateoas_href)
    if href is None:
        logger.debug("%s has no '%s' link, relation '%s' unresolved", resource_type.name, spec.rel, name)
        return None

    response = get_requester().make_request_with(method="GET", url=href)
    target = spec.target_class()
    if spec.cardinality is Cardinality.MANY:
        result = map_to_array(response, target, spec.data_path)
    else:
        result = map_to_object(response, target, spec.data_path)

    if caching:
        resource_type.relation_cache.set(name, result)
    return result


class Relation:
    """Class-body descriptor exposing a relation as an instance method.

    Use the :func:`has_one`, :func:`belongs_to` and :func:`has_many`
    factories rather than instantiating this directly.
    """

    def __init__(
        self,
        cardinality: Cardinality,
        rel: Optional[str] = None,
        data_path: str = "",
        type: Union[str, type[Resource], None] = None,
    ) -> None:
        if type is not None:
            _check_target(rel or "relation", type)
        self.cardinality = cardinality
        self.rel = rel
        self.data_path = data_path
        self.type = type
        self.name: Optional[str] = None

    def __set_name__(self, owner: type[Resource], name: str) -> None:
        owner.declare_relation(
            name, self.cardinality, rel=self.rel, data_path=self.data_path, type=self.type,
            install=False,
        )
        self.name = name

    def __get__(self, instance: Optional[Resource], owner: type[Resource]) -> Any:
        if instance is None:
            return self
        return _bind(instance, self.name)

    def __repr__(self) -> str:
        return f"Relation({self.name!r}, {self.cardinality.value}, rel={self.rel!r})"


def _bind(instance: Resource, name: str) -> Callable[..., Any]:
    def accessor(use_cache: bool = False) -> Any:
        return resolve_relation(instance, name, use_cache=use_cache)

    accessor.__name__ = name
    accessor.__doc__ = f"Resolve the '{name}' relation."
    return accessor


def has_one(
    rel: Optional[str] = None,
    data_path: str = "",
    type: Union[str, type[Resource], None] = None,
) -> Relation:
    """Declare a relation resolving to a single target instance.

    Args:
        rel: Link relation key; defaults to the attribute name.
        data_path: Keys to descend in the related response before mapping.
        type: Target resource class or class name; defaults to the
            classified attribute name (``test_resource`` -> ``TestResource``).
    """
    return Relation(Cardinality.ONE, rel=rel, data_path=data_path, type=type)


belongs_to = has_one


def has_many(
    rel: Optional[str] = None,
    data_path: str = "",
    type: Union[str, type[Resource], None] = None,
) -> Relation:
    """Declare a relation resolving to a list of target instances.

    Takes the same arguments as :func:`has_one`; the default target is the
    singular classified attribute name (``comments`` -> ``Comment``).
    """
    return Relation(Cardinality.MANY, rel=rel, data_path=data_path, type=type)
