"""Tests for HATEOAS relation declarations and resolution."""

from __future__ import annotations

import pytest

from rest_api_provider import (
    ApiError,
    ApiResponse,
    Cardinality,
    Field,
    Resource,
    UnsupportedTypeError,
    belongs_to,
    configure,
    has_many,
    has_one,
)
from rest_api_provider.relations import RelationCache, find_link_href

WIDGET_URL = "https://test.com/widgets"
WIDGET_PAYLOAD = {"a": 2, "b": 3, "c": ["4"]}


class Widget(Resource):
    a = Field(int, default=1)
    b = Field(str)
    c = Field()


class HavingOneResource(Resource):
    widget = has_one(rel="test:widget")


class HavingManyResource(Resource):
    widgets = has_many(rel="test:widgets")


class HavingManyWithDataPathResource(Resource):
    widgets = has_many(rel="test:widgets", data_path="/data")


class BelongingResource(Resource):
    widget = belongs_to(rel="test:widget")


class CachingResource(Resource):
    cache_relations = True

    widget = has_one(rel="test:widget")


class OtherCachingResource(Resource):
    cache_relations = True

    widget = has_one(rel="test:widget")


def _link(rel: str, href: str = WIDGET_URL) -> dict:
    return {rel: {"href": href}}


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class TestRelationDeclarations:
    def test_relations_are_stored_by_name(self) -> None:
        relations = BelongingResource.resource_type().relations
        assert list(relations) == ["widget"]
        spec = relations["widget"]
        assert spec.cardinality is Cardinality.ONE
        assert spec.rel == "test:widget"
        assert spec.data_path == ""

    def test_target_defaults_to_classified_name(self) -> None:
        assert HavingOneResource.resource_type().relations["widget"].target_class() is Widget
        assert HavingManyResource.resource_type().relations["widgets"].target_class() is Widget

    def test_has_many_cardinality(self) -> None:
        spec = HavingManyResource.resource_type().relations["widgets"]
        assert spec.cardinality is Cardinality.MANY
        assert spec.rel == "test:widgets"

    def test_rel_defaults_to_relation_name(self) -> None:
        class SomeResource(Resource):
            widget = belongs_to()

        assert SomeResource.resource_type().relations["widget"].rel == "widget"

    def test_explicit_target_class(self) -> None:
        class Gadget(Resource):
            thing = has_one(type=Widget)

        assert Gadget.resource_type().relations["thing"].target_class() is Widget

    def test_non_string_name_is_rejected(self) -> None:
        with pytest.raises(TypeError, match="should be a string"):
            Widget.declare_relation(42)

    def test_unsupported_target_is_rejected(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            has_one(type=42)
        with pytest.raises(UnsupportedTypeError):
            Widget.declare_relation("thing", type=dict)

    def test_runtime_declaration_installs_accessor(self, mock_api) -> None:
        class Runtime(Resource):
            pass

        Runtime.declare_relation("widget", Cardinality.ONE, rel="test:widget")
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        assert Runtime(links=_link("test:widget")).widget().a == 2


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestRelationResolution:
    def test_belongs_to_returns_related_object(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = BelongingResource(links=_link("test:widget"))
        related = owner.widget()
        assert isinstance(related, Widget)
        assert related.a == 2
        assert related.b == "3"
        assert related.c == ["4"]

    def test_has_one_requests_href_verbatim(self, mock_api) -> None:
        href = "https://other.example.org/w/1?expand=true"
        mock_api.add("GET", "https://other.example.org/w/1", WIDGET_PAYLOAD)
        HavingOneResource(links=_link("test:widget", href)).widget()
        assert str(mock_api.last.url) == href

    def test_has_many_returns_list(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, [WIDGET_PAYLOAD, WIDGET_PAYLOAD])
        related = HavingManyResource(links=_link("test:widgets")).widgets()
        assert isinstance(related, list)
        assert len(related) == 2
        assert related[0].a == 2
        assert related[0].c == ["4"]

    def test_has_many_with_data_path(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, {"data": [WIDGET_PAYLOAD, WIDGET_PAYLOAD]})
        related = HavingManyWithDataPathResource(links=_link("test:widgets")).widgets()
        assert len(related) == 2
        assert related[1].b == "3"

    def test_missing_link_returns_none_without_request(self, mock_api) -> None:
        assert HavingOneResource().widget() is None
        assert HavingOneResource(links=_link("test:other")).widget() is None
        assert mock_api.requests == []

    def test_list_form_links(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = HavingOneResource(links=[{"rel": "test:widget", "href": WIDGET_URL}])
        assert owner.widget().a == 2

    def test_configured_link_field_and_href_key(self, mock_api) -> None:
        configure(hateoas_links="_links", hateoas_href="url")

        class HalResource(Resource):
            widget = has_one(rel="test:widget")

        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = HalResource(_links={"test:widget": {"url": WIDGET_URL}})
        assert owner.widget().a == 2

    def test_empty_body_returns_envelope(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, None, status=204)
        result = HavingOneResource(links=_link("test:widget")).widget()
        assert isinstance(result, ApiResponse)
        assert result.status == 204

    def test_failed_lookup_raises_api_error(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, {"message": "boom"}, status=500)
        with pytest.raises(ApiError) as exc_info:
            HavingOneResource(links=_link("test:widget")).widget()
        assert exc_info.value.status == 500
        assert exc_info.value.request is not None
        assert str(exc_info.value.request.url) == WIDGET_URL

    def test_forward_reference_resolves_on_use(self, mock_api) -> None:
        class EarlyResource(Resource):
            late = has_one(rel="test:late", type="LateResource")

        class LateResource(Resource):
            a = Field(int)

        mock_api.add("GET", WIDGET_URL, {"a": 9})
        result = EarlyResource(links=_link("test:late")).late()
        assert isinstance(result, LateResource)
        assert result.a == 9

    def test_undeclared_target_fails_on_use(self, mock_api) -> None:
        class Dangling(Resource):
            ghost = has_one(rel="test:ghost", type="NeverDeclaredResource")

        mock_api.add("GET", WIDGET_URL, {"a": 1})
        with pytest.raises(UnsupportedTypeError, match="NeverDeclaredResource"):
            Dangling(links=_link("test:ghost")).ghost()


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


class TestRelationCaching:
    def test_cache_is_shared_across_instances(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        first = CachingResource(links=_link("test:widget"))
        second = CachingResource(links=_link("test:widget"))

        cached = first.widget(use_cache=True)
        assert second.widget(use_cache=True) is cached
        assert mock_api.count("GET", WIDGET_URL) == 1

    def test_use_cache_false_refreshes_slot(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = CachingResource(links=_link("test:widget"))

        first = owner.widget()
        refreshed = owner.widget()
        assert refreshed is not first
        assert owner.widget(use_cache=True) is refreshed
        assert mock_api.count("GET", WIDGET_URL) == 2

    def test_clear_cache_forces_request(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = CachingResource(links=_link("test:widget"))
        owner.widget(use_cache=True)
        CachingResource.clear_cache()
        owner.widget(use_cache=True)
        assert mock_api.count("GET", WIDGET_URL) == 2

    def test_cache_is_scoped_to_type(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        CachingResource(links=_link("test:widget")).widget(use_cache=True)
        OtherCachingResource(links=_link("test:widget")).widget(use_cache=True)
        assert mock_api.count("GET", WIDGET_URL) == 2

    def test_disabled_caching_always_requests(self, mock_api) -> None:
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = HavingOneResource(links=_link("test:widget"))
        owner.widget(use_cache=True)
        owner.widget(use_cache=True)
        assert mock_api.count("GET", WIDGET_URL) == 2
        assert not HavingOneResource.relations_caching_enabled()

    def test_enable_relations_caching(self, mock_api) -> None:
        class LateCaching(Resource):
            widget = has_one(rel="test:widget")

        LateCaching.enable_relations_caching()
        mock_api.add("GET", WIDGET_URL, WIDGET_PAYLOAD)
        owner = LateCaching(links=_link("test:widget"))
        owner.widget(use_cache=True)
        owner.widget(use_cache=True)
        assert mock_api.count("GET", WIDGET_URL) == 1


@pytest.fixture(autouse=True)
def _clear_relation_caches():
    yield
    CachingResource.clear_cache()
    OtherCachingResource.clear_cache()


class TestHelpers:
    def test_find_link_href_forms(self) -> None:
        assert find_link_href({"r": {"href": "u"}}, "r", "href") == "u"
        assert find_link_href([{"rel": "r", "href": "u"}], "r", "href") == "u"
        assert find_link_href({"r": "u"}, "r", "href") is None
        assert find_link_href(None, "r", "href") is None
        assert find_link_href({"r": {"href": ""}}, "r", "href") is None

    def test_relation_cache(self) -> None:
        cache = RelationCache()
        assert "x" not in cache
        cache.set("x", 1)
        assert cache.get("x") == 1
        assert "x" in cache
        cache.clear()
        assert cache.get("x") is None
