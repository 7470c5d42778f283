"""Liveness and blob connectivity checks."""

from __future__ import annotations

import logging

from .. import storage
from ..web import Request, Response, json_response

LOGGER = logging.getLogger(__name__)

TEST_ORDER = "VS-TEST-123"
TEST_CONTENT = "Hello from VoIP Shop Blob test!"


def hello(request: Request) -> Response:
    return json_response(200, {"ok": True, "route": "/api/hello"}, {"Access-Control-Allow-Origin": "*"})


def health(request: Request) -> Response:
    return json_response(200, {"status": "ok"})


def test_blob(request: Request) -> Response:
    try:
        blob = storage.BlobStore().put(
            f"orders/{TEST_ORDER}/hello.txt",
            TEST_CONTENT.encode("utf-8"),
            content_type="text/plain; charset=utf-8",
        )
    except Exception as exc:
        LOGGER.exception("Blob write failed")
        return json_response(500, {"ok": False, "error": str(exc)})
    return json_response(200, {"ok": True, "url": blob.url})
