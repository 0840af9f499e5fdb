from __future__ import annotations

import io

import pytest
import requests


class FakeBody(io.BytesIO):
    """Raw body that records connection release"""

    released = False

    def release_conn(self):
        self.released = True


class BrokenBody(FakeBody):
    def read(self, *args, **kwargs):
        raise OSError("connection reset by peer")


@pytest.fixture
def make_response():
    def _make(status_code: int, body: bytes | str = b"", headers: dict | None = None, raw=None):
        if isinstance(body, str):
            body = body.encode("utf-8")
        r = requests.Response()
        r.status_code = status_code
        r.url = "https://example.backlog.com/api/v2/wikis"
        r.raw = raw if raw is not None else FakeBody(body)
        r.headers.update(headers or {})
        return r

    return _make


@pytest.fixture
def broken_raw():
    return BrokenBody(b"")
