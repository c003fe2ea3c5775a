"""Tests for the HTTP surface and its error mapping."""

import pytest
import requests
from fastapi.testclient import TestClient

from conftest import FakeTransport, as_json, count_xml, danbooru_post, moebooru_post

from booruhub.main import app
from booruhub.routes.search import get_booru
from booruhub.services.booru import DanbooruClient, KonachanClient, SankakuClient


@pytest.fixture
def api():
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def use_booru(booru):
    def override(name: str):
        return booru
    app.dependency_overrides[get_booru] = override


def http_error(status_code: int) -> requests.HTTPError:
    response = requests.Response()
    response.status_code = status_code
    return requests.HTTPError(f"{status_code} Server Error", response=response)


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_boorus(api):
    boorus = api.get("/api/boorus/").json()["boorus"]
    assert "konachan" in boorus
    assert "safebooru" in boorus


def test_unknown_booru(api):
    response = api.get("/api/boorus/nowhere/random")
    assert response.status_code == 404


def test_random_post(api):
    use_booru(KonachanClient(transport=FakeTransport([as_json([moebooru_post(12)])])))
    response = api.get("/api/boorus/konachan/random", params={"tags": ["wet", ""]})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 12
    assert body["rating"] == "safe"
    assert body["tags"] == ["school_swimsuit", "wet"]


def test_random_posts(api):
    use_booru(KonachanClient(transport=FakeTransport([as_json([moebooru_post(1), moebooru_post(2)])])))
    response = api.get("/api/boorus/konachan/random/5")
    assert [p["id"] for p in response.json()] == [1, 2]


def test_count(api):
    use_booru(KonachanClient(transport=FakeTransport([count_xml(77)])))
    response = api.get("/api/boorus/konachan/count", params={"tags": ["wet", "  "]})
    assert response.json() == {"tags": ["wet"], "count": 77}


def test_related(api):
    body = as_json({"wet": [["wet", "500"], ["rain", "20"]]})
    use_booru(KonachanClient(transport=FakeTransport([body])))
    response = api.get("/api/boorus/konachan/related/wet")
    assert response.json() == [{"name": "wet", "score": 500.0}, {"name": "rain", "score": 20.0}]


def test_feature_unavailable_is_501(api):
    use_booru(DanbooruClient(transport=FakeTransport()))
    assert api.get("/api/boorus/danbooru/count").status_code == 501


def test_too_many_tags_is_400(api):
    use_booru(DanbooruClient(transport=FakeTransport()))
    response = api.get("/api/boorus/danbooru/random", params={"tags": ["a", "b", "c"]})
    assert response.status_code == 400
    assert "at most 2" in response.json()["detail"]


def test_authentication_required_is_401(api):
    use_booru(SankakuClient(transport=FakeTransport()))
    response = api.get("/api/boorus/sankaku/random", params={"tags": ["a", "b", "c", "d", "e"]})
    assert response.status_code == 401


def test_no_match_is_404(api):
    use_booru(DanbooruClient(transport=FakeTransport([as_json([])])))
    assert api.get("/api/boorus/danbooru/random", params={"tags": ["zzz"]}).status_code == 404


def test_missing_post_is_404(api):
    use_booru(KonachanClient(transport=FakeTransport([as_json([])])))
    assert api.get("/api/boorus/konachan/posts/5").status_code == 404


def test_malformed_payload_is_502(api):
    broken = danbooru_post(1)
    del broken["image_width"]
    use_booru(DanbooruClient(transport=FakeTransport([as_json([broken])])))
    assert api.get("/api/boorus/danbooru/latest").status_code == 502


def test_upstream_http_error_is_502(api):
    use_booru(KonachanClient(transport=FakeTransport([http_error(503)])))
    response = api.get("/api/boorus/konachan/latest")
    assert response.status_code == 502
    assert response.json()["detail"] == "Booru answered HTTP 503"


def test_bad_limit_is_400(api):
    use_booru(KonachanClient(transport=FakeTransport()))
    assert api.get("/api/boorus/konachan/latest", params={"limit": 0}).status_code == 400


def test_upstream_invalid_url_is_502(api):
    use_booru(KonachanClient(transport=FakeTransport([requests.exceptions.InvalidURL("bad host")])))
    response = api.get("/api/boorus/konachan/latest")
    assert response.status_code == 502
    assert response.json()["detail"].startswith("Booru request failed")
