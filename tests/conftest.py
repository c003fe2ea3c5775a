"""Shared test fixtures for all test modules."""

import json
import os
import random
import tempfile

import pytest

# ── Environment overrides (must be set before importing booruhub modules) ───
_tmp = tempfile.mkdtemp(prefix="booruhub_pytest_")
os.environ["BOORUHUB_DATA_DIR"] = _tmp
os.environ.pop("BOORUHUB_RANDOM_SEED", None)

from booruhub.services.booru.transport import RedirectResult  # noqa: E402


class FakeTransport:
    """Replays canned bodies in order and records every request target."""

    def __init__(self, responses=None, redirects=None):
        self.responses = list(responses or [])
        self.redirects = list(redirects or [])
        self.requests = []

    async def get(self, target):
        self.requests.append(target)
        if not self.responses:
            raise AssertionError(f"Unexpected request to {target.url} {target.params}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_redirect(self, target):
        self.requests.append(target)
        if not self.redirects:
            raise AssertionError(f"Unexpected redirect request to {target.url}")
        return self.redirects.pop(0)


def as_json(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def count_xml(count: int) -> bytes:
    return f'<?xml version="1.0" encoding="UTF-8"?><posts count="{count}" offset="0"></posts>'.encode("utf-8")


def redirect_to(location: str) -> RedirectResult:
    return RedirectResult(status_code=302, location=location)


# ── Raw post payloads, one per backend family ───────────────────────────────

def moebooru_post(post_id=1, tags="school_swimsuit wet", **overrides):
    post = {
        "id": post_id,
        "tags": tags,
        "created_at": 1700000000,
        "source": "https://example.com/art",
        "file_url": f"https://files.yande.re/image/{post_id}.png",
        "file_size": 123456,
        "preview_url": f"https://files.yande.re/preview/{post_id}.jpg",
        "preview_width": 150,
        "preview_height": 100,
        "rating": "s",
        "width": 1500,
        "height": 1000,
    }
    post.update(overrides)
    return post


def gelbooru_post(post_id=1, tags="school_swimsuit wet", **overrides):
    post = {
        "id": post_id,
        "created_at": "Sat Jun 15 12:00:00 -0500 2019",
        "score": 10,
        "width": 800,
        "height": 600,
        "md5": "d41d8cd98f00b204e9800998ecf8427e",
        "directory": "ab/cd",
        "image": "d41d8cd98f00b204e9800998ecf8427e.jpg",
        "rating": "general",
        "source": "",
        "tags": tags,
        "file_url": f"https://img3.gelbooru.com/images/ab/cd/{post_id}.jpg",
        "preview_url": f"https://img3.gelbooru.com/thumbnails/ab/cd/thumbnail_{post_id}.jpg",
        "preview_width": 150,
        "preview_height": 112,
    }
    post.update(overrides)
    return post


def safebooru_post(post_id=1, tags="school_swimsuit wet", **overrides):
    post = {
        "directory": "4212",
        "hash": "0b1c3a5d",
        "height": 1200,
        "id": post_id,
        "image": "0b1c3a5d.png",
        "change": 1600000000,
        "owner": "danbooru",
        "rating": "safe",
        "tags": tags,
        "width": 900,
        "preview_width": 112,
        "preview_height": 150,
    }
    post.update(overrides)
    return post


def danbooru_post(post_id=1, **overrides):
    post = {
        "id": post_id,
        "created_at": "2019-05-01T10:20:30.123-04:00",
        "rating": "g",
        "source": "",
        "image_width": 2000,
        "image_height": 1500,
        "file_size": 987654,
        "tag_string": "1girl school_swimsuit solo",
        "tag_string_general": "1girl school_swimsuit solo",
        "tag_string_artist": "some_artist",
        "tag_string_character": "",
        "tag_string_copyright": "original",
        "tag_string_meta": "",
        "file_url": f"https://cdn.donmai.us/original/aa/bb/{post_id}.png",
        "preview_file_url": f"https://cdn.donmai.us/180x180/aa/bb/{post_id}.jpg",
        "media_asset": {
            "variants": [
                {"type": "180x180", "url": f"https://cdn.donmai.us/180x180/aa/bb/{post_id}.jpg", "width": 180, "height": 135},
                {"type": "original", "url": f"https://cdn.donmai.us/original/aa/bb/{post_id}.png", "width": 2000, "height": 1500},
            ]
        },
    }
    post.update(overrides)
    return post


def e621_post(post_id=1, **overrides):
    post = {
        "id": post_id,
        "created_at": "2020-01-01T00:00:00.000-05:00",
        "file": {"width": 1000, "height": 800, "ext": "png", "size": 5555, "url": f"https://static1.e621.net/data/{post_id}.png"},
        "preview": {"width": 150, "height": 120, "url": f"https://static1.e621.net/data/preview/{post_id}.jpg"},
        "tags": {"general": ["wolf", "solo"], "species": ["canine"], "artist": []},
        "rating": "s",
        "sources": ["https://example.org/source"],
    }
    post.update(overrides)
    return post


def sankaku_post(post_id=1, **overrides):
    post = {
        "id": post_id,
        "rating": "q",
        "width": 1024,
        "height": 768,
        "file_url": f"https://s.sankakucomplex.com/data/{post_id}.jpg",
        "preview_url": f"https://s.sankakucomplex.com/data/preview/{post_id}.jpg",
        "preview_width": 150,
        "preview_height": 112,
        "file_size": 4321,
        "created_at": {"json_class": "Time", "s": 1650000000, "n": 0},
        "source": None,
        "tags": [{"name": "landscape"}, {"name": "sky"}, {"name": "clouds"}, {"name": "sunset"}, {"name": "sea"}],
    }
    post.update(overrides)
    return post


@pytest.fixture
def rng():
    """A seeded random source so offset draws are reproducible."""
    return random.Random(1234)
