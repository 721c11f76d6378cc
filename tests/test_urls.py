"""Tests for wren.routing.urls — reverse routing and slugs."""

from urllib.parse import parse_qs, urlsplit

import pytest

from wren.routing.router import Router
from wren.routing.urls import UrlBuilder, slugify


def default_router() -> Router:
    return (
        Router()
        .connect("default_full_route", "{controller}/{action}")
        .connect("default_default_action", "{controller}", {"action": "index"})
        .connect(
            "default_default_ctrl_action",
            "",
            {"controller": "home", "action": "index", "extension": ".html"},
        )
    )


@pytest.fixture
def router() -> Router:
    return default_router()


@pytest.fixture
def urls(router: Router) -> UrlBuilder:
    return UrlBuilder(router)


class TestBuild:
    def test_empty_query_is_root(self, urls: UrlBuilder) -> None:
        assert urls.build({}) == "/"
        assert urls.build(None) == "/"

    def test_full_route(self, urls: UrlBuilder) -> None:
        assert urls.build({"controller": "blog", "action": "show"}) == "/blog/show"

    def test_extra_params_go_to_query_string(self, urls: UrlBuilder) -> None:
        assert urls.build({"controller": "blog", "action": "show", "page": 2}) == "/blog/show?page=2"

    def test_values_are_slugified(self, urls: UrlBuilder) -> None:
        assert urls.build({"controller": "Crème Brûlée", "action": "show"}) == "/creme-brulee/show"

    def test_ambient_params_are_inherited(self, router: Router, urls: UrlBuilder) -> None:
        router.match("blog/show")
        assert urls.build({"action": "edit", "id": 3}) == "/blog/edit?id=3"

    def test_explicit_params_override_ambient(self, router: Router, urls: UrlBuilder) -> None:
        router.match("blog/show")
        assert urls.build({"controller": "news", "action": "list"}) == "/news/list"

    def test_ambient_keys_match_ignoring_case(self, router: Router, urls: UrlBuilder) -> None:
        router.match("blog/show")
        assert urls.build({"Action": "edit"}) == "/blog/edit"

    def test_lowest_leak_wins(self) -> None:
        router = Router().connect("general", "{controller}/{action}").connect(
            "post", "blog/{slug}", {"controller": "blog", "action": "show"}
        )
        urls = UrlBuilder(router)
        assert urls.build({"controller": "blog", "action": "show", "slug": "hello"}) == "/blog/hello"

    def test_tie_goes_to_earlier_route(self) -> None:
        router = Router().connect("a", "a/{controller}").connect("b", "b/{controller}")
        assert UrlBuilder(router).build({"controller": "x", "q": 1}) == "/a/x?q=1"

    def test_no_fitting_route_is_root(self) -> None:
        router = Router().connect("blog", "blog/{action}", {"controller": "blog"})
        assert UrlBuilder(router).build({"controller": "news", "action": "list"}) == "/"

    def test_named_route(self, urls: UrlBuilder) -> None:
        assert urls.build({"controller": "blog"}, name="default_default_action") == "/blog"

    def test_unknown_name_falls_back_to_scoring(self, urls: UrlBuilder) -> None:
        assert urls.build({"controller": "blog", "action": "show"}, name="nope") == "/blog/show"

    def test_unresolved_placeholders_are_removed(self) -> None:
        router = Router().connect("tag", "tags/{tag}", {"controller": "tags", "action": "show"})
        assert UrlBuilder(router).build({"controller": "tags"}, name="tag") == "/tags/"

    def test_nested_query_uses_brackets(self, urls: UrlBuilder) -> None:
        url = urls.build({"controller": "blog", "action": "list", "filter": {"tag": "py", "page": 2}})
        parts = urlsplit(url)
        assert parts.path == "/blog/list"
        assert parse_qs(parts.query) == {"filter[tag]": ["py"], "filter[page]": ["2"]}

    def test_none_skipped_and_bools_as_digits(self, urls: UrlBuilder) -> None:
        url = urls.build({"controller": "blog", "action": "list", "draft": True, "tag": None})
        assert url == "/blog/list?draft=1"

    def test_build_is_idempotent(self, urls: UrlBuilder) -> None:
        query = {"controller": "blog", "action": "show", "page": 2}
        assert urls.build(query) == urls.build(query)
        assert query == {"controller": "blog", "action": "show", "page": 2}

    def test_round_trip(self, router: Router, urls: UrlBuilder) -> None:
        assert router.match(urls.build({"controller": "blog", "action": "show"}))
        params = router.matched_route.params
        assert (params["controller"], params["action"]) == ("blog", "show")


class TestContext:
    @pytest.fixture
    def urls(self) -> UrlBuilder:
        router = Router().connect("post", r"posts/{post.id:\d+}", {"controller": "posts", "action": "show"})
        return UrlBuilder(router)

    def test_placeholder_filled_from_context(self, urls: UrlBuilder) -> None:
        context = {"post": {"id": 42, "title": "Hello"}}
        assert urls.build({"controller": "posts", "action": "show"}, context) == "/posts/42"

    def test_context_never_leaks_to_query(self, urls: UrlBuilder) -> None:
        context = {"post": {"id": 42, "title": "Hello"}}
        assert "title" not in urls.build({"controller": "posts", "action": "show"}, context)

    def test_query_wins_over_context(self, urls: UrlBuilder) -> None:
        url = urls.build({"controller": "posts", "action": "show", "post.id": 7}, {"post": {"id": 42}})
        assert url == "/posts/7"


class TestSlugify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("Hello World", "hello-world"),
            ("Crème Brûlée", "creme-brulee"),
            ("Straße", "strasse"),
            ("Æsir", "aesir"),
            ("Tom & Jerry", "tom--jerry"),
            ("<b>bold</b>", "bbold%2fb"),
            (42, "42"),
        ],
    )
    def test_slugify(self, value: object, expected: str) -> None:
        assert slugify(value) == expected

    def test_output_is_ascii(self) -> None:
        assert slugify("Ōsaka Ærø").isascii()
