"""Tests for request building across URL styles."""

import pytest

from booruhub.services.booru import BooruAuth
from booruhub.services.booru.danbooru import DanbooruClient
from booruhub.services.booru.gelbooru import GelbooruClient, SafebooruClient
from booruhub.services.booru.moebooru import KonachanClient
from booruhub.services.booru.request_builder import EndpointKind, RequestBuilder
from booruhub.services.booru.sankaku import SankakuClient


def builder_for(client_cls, auth=None):
    return RequestBuilder(client_cls.base_url, client_cls.capabilities, auth)


class TestTagQuery:
    def test_tags_are_space_joined_and_modifiers_trail(self):
        builder = builder_for(KonachanClient)
        assert builder.tag_query(["wet", "swimsuit"], ["order:random"]) == "wet swimsuit order:random"

    def test_empty_tags_are_skipped(self):
        builder = builder_for(KonachanClient)
        assert builder.tag_query(["", "wet"]) == "wet"


class TestPaginate:
    def test_index_php_uses_zero_based_pid(self):
        assert builder_for(SafebooruClient).paginate(limit=1, offset=7) == {"limit": 1, "pid": 7}

    def test_path_style_uses_one_based_page(self):
        assert builder_for(KonachanClient).paginate(limit=1, offset=7) == {"limit": 1, "page": 8}

    def test_nothing_requested_gives_no_params(self):
        assert builder_for(KonachanClient).paginate() == {}


class TestPathStyle:
    def test_posts_listing(self):
        target = builder_for(KonachanClient).build(EndpointKind.POSTS, ["wet"], extra_params={"limit": 5})
        assert target.url == "https://konachan.com/post.json"
        assert target.params == {"tags": "wet", "limit": 5}
        assert target.headers == {}

    def test_count_uses_xml_listing(self):
        target = builder_for(KonachanClient).build(EndpointKind.COUNT, ["wet"], extra_params={"limit": 1})
        assert target.url == "https://konachan.com/post.xml"
        assert target.params == {"tags": "wet", "limit": 1}

    def test_lookup_by_id_tag(self):
        target = builder_for(KonachanClient).build(EndpointKind.POST, post_id=42)
        assert target.url == "https://konachan.com/post.json"
        assert target.params == {"tags": "id:42", "limit": 1}

    def test_lookup_by_id_in_path(self):
        target = builder_for(DanbooruClient).build(EndpointKind.POST, post_id=42)
        assert target.url == "https://danbooru.donmai.us/posts/42.json"
        assert target.params == {}

    def test_related_uses_backend_query_parameter(self):
        target = builder_for(DanbooruClient).build(EndpointKind.RELATED, ["touhou"])
        assert target.url == "https://danbooru.donmai.us/related_tag.json"
        assert target.params == {"query": "touhou"}

    def test_random_redirect_is_index_php_only(self):
        with pytest.raises(ValueError):
            builder_for(KonachanClient).build(EndpointKind.RANDOM_REDIRECT)

    def test_credentials_become_login_and_api_key(self):
        target = builder_for(DanbooruClient, BooruAuth("alice", "secret")).build(EndpointKind.POSTS, ["cat"])
        assert target.params == {"tags": "cat", "login": "alice", "api_key": "secret"}


class TestIndexPhp:
    def test_posts_listing_vocabulary(self):
        target = builder_for(GelbooruClient).build(EndpointKind.POSTS, ["wet", "swimsuit"], modifiers=["sort:random"])
        assert target.url == "https://gelbooru.com/index.php"
        assert target.params == {
            "page": "dapi",
            "s": "post",
            "q": "index",
            "json": "1",
            "tags": "wet swimsuit sort:random",
        }

    def test_count_drops_json_flag(self):
        target = builder_for(SafebooruClient).build(EndpointKind.COUNT, ["wet"], extra_params={"limit": 1})
        assert "json" not in target.params
        assert target.params["tags"] == "wet"

    def test_lookup_by_id_parameter(self):
        target = builder_for(SafebooruClient).build(EndpointKind.POST, post_id=9)
        assert target.params["id"] == 9
        assert target.params["limit"] == 1
        assert "tags" not in target.params

    def test_random_redirect(self):
        target = builder_for(SafebooruClient).build(EndpointKind.RANDOM_REDIRECT)
        assert target.url == "https://safebooru.org/index.php"
        assert target.params == {"page": "post", "s": "random"}

    def test_credentials_become_user_id_and_api_key(self):
        target = builder_for(GelbooruClient, BooruAuth("123", "key")).build(EndpointKind.POSTS)
        assert target.params["user_id"] == "123"
        assert target.params["api_key"] == "key"

    def test_related_is_unavailable(self):
        with pytest.raises(ValueError):
            builder_for(GelbooruClient).build(EndpointKind.RELATED, ["cat"])


class TestTokenAuth:
    def test_urls_have_no_extension(self):
        target = builder_for(SankakuClient).build(EndpointKind.POSTS, ["sky"])
        assert target.url == "https://capi-v2.sankakucomplex.com/posts"

    def test_credentials_become_bearer_header(self):
        target = builder_for(SankakuClient, BooruAuth("bob", "tok")).build(EndpointKind.POSTS, ["sky"])
        assert target.headers == {"Authorization": "Bearer tok"}
        assert target.params == {"tags": "sky"}

    def test_no_xml_count_listing(self):
        with pytest.raises(ValueError):
            builder_for(SankakuClient).build(EndpointKind.COUNT, ["sky"])
