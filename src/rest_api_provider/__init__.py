"""rest_api_provider -- declarative client-side resources for REST APIs.

Declare a resource's fields, URL template, HATEOAS relations and validation
rules; the package provides the HTTP-calling operations and maps JSON
responses onto typed instances, lists, or grouped collections.

Typical usage::

    from rest_api_provider import Field, Resource, configure, get, has_many

    configure(api_root="https://api.example.com")

    class Post(Resource):
        id = Field(int)
        title = Field(str)
        comments = has_many(rel="blog:comments")
        recent = get("/posts/recent", result=list)

    for post in Post.all():
        print(post.title, len(post.comments() or []))

Modules:
    resource: The :class:`Resource` base class and per-type metadata.
    fields: Field declarations and value coercion.
    relations: HATEOAS relation declarations and resolution.
    operations: Operation declarations and the operation dispatcher.
    mapper: JSON-to-instance projection.
    path_template: Path placeholder rendering.
    validation: Declarative validation rules.
    client: The httpx-based request layer.
    config: Process-wide configuration lifecycle.
    exceptions: Exception hierarchy.
"""

__version__ = "0.3.0"

from rest_api_provider.client import ApiResponse, Requester, get_requester, reset_requester, set_requester
from rest_api_provider.config import configure, get_configuration, reset
from rest_api_provider.exceptions import ApiError, ConfigError, RestApiProviderError, UnsupportedTypeError
from rest_api_provider.fields import Field, FieldType
from rest_api_provider.models import Configuration
from rest_api_provider.operations import HTTPMethod, ResultShape, delete, get, post, put
from rest_api_provider.relations import Cardinality, belongs_to, has_many, has_one
from rest_api_provider.resource import Resource

__all__ = [
    "ApiError",
    "ApiResponse",
    "Cardinality",
    "ConfigError",
    "Configuration",
    "Field",
    "FieldType",
    "HTTPMethod",
    "Requester",
    "Resource",
    "RestApiProviderError",
    "ResultShape",
    "UnsupportedTypeError",
    "belongs_to",
    "configure",
    "delete",
    "get",
    "get_configuration",
    "get_requester",
    "has_many",
    "has_one",
    "post",
    "put",
    "reset",
    "reset_requester",
    "set_requester",
]
