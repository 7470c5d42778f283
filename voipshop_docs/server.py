"""HTTP server entrypoints for the document API."""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from .config import HOST, LISTEN_BACKLOG, MAX_BODY_BYTES as MAX_BODY_BYTES_CONFIG, PORT
from .net import is_client_disconnect, peer_host
from .web import Request, Response, json_response, parse_json_body

LOGGER = logging.getLogger(__name__)

Resolver = Callable[[str], Optional[Tuple[Callable[[Request], Response], Dict[str, str]]]]

# Import name -> distribution name for the libraries the handlers need.
REQUIRED_MODULES = {
    "fpdf": "fpdf2",
    "dateutil": "python-dateutil",
    "requests": "requests",
    "resend": "resend",
    "upstash_ratelimit": "upstash-ratelimit",
    "upstash_redis": "upstash-redis",
    "jinja2": "jinja2",
    "vercel": "vercel-blob",
}


class DependencyError(RuntimeError):
    """Raised when a required runtime dependency is missing."""


def load_resolver() -> Resolver:
    try:
        from .routes import resolve
    except ModuleNotFoundError as exc:
        root = (exc.name or "").split(".")[0]
        if root in REQUIRED_MODULES:
            raise DependencyError(
                f"Missing dependency '{REQUIRED_MODULES[root]}'. Install project dependencies with "
                "'pip install -e .'."
            ) from exc
        raise
    return resolve


def first_values(query: str) -> Dict[str, str]:
    return {key: values[0] for key, values in parse_qs(query, keep_blank_values=True).items()}


class VoipShopHandler(BaseHTTPRequestHandler):
    MAX_BODY_BYTES = MAX_BODY_BYTES_CONFIG

    def _write_response(self, response: Response) -> bool:
        try:
            self.send_response(response.status)
            for name, value in response.headers.items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(response.body)))
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(response.body)
            return True
        except Exception as exc:
            if is_client_disconnect(exc):
                return False
            raise

    def _send_json(self, status: int, payload: Dict[str, Any]) -> bool:
        return self._write_response(json_response(status, payload))

    def _read_body(self) -> Optional[bytes]:
        header = self.headers.get("Content-Length")
        if header is None:
            if self.command == "POST":
                self._send_json(
                    411,
                    {
                        "error": "missing_content_length",
                        "detail": "Content-Length header is required.",
                    },
                )
                return None
            return b""

        try:
            content_length = int(header)
        except ValueError:
            self._send_json(
                400,
                {
                    "error": "invalid_content_length",
                    "detail": "Content-Length must be an integer.",
                },
            )
            return None

        if content_length < 0:
            self._send_json(400, {"error": "invalid_content_length", "detail": "Content-Length cannot be negative."})
            return None
        if content_length > self.MAX_BODY_BYTES:
            self._send_json(
                413,
                {
                    "error": "payload_too_large",
                    "detail": f"Body exceeds {self.MAX_BODY_BYTES} bytes.",
                },
            )
            return None
        if content_length == 0:
            return b""

        try:
            return self.rfile.read(content_length)
        except Exception as exc:
            if is_client_disconnect(exc):
                return None
            raise

    def _dispatch(self) -> None:
        parts = urlsplit(self.path)
        route = load_resolver()(parts.path)
        if route is None:
            self._send_json(404, {"error": "not_found", "detail": "Unsupported endpoint."})
            return
        handler, params = route

        raw = self._read_body()
        if raw is None:
            return
        body, validation_error = parse_json_body(raw)
        if validation_error is not None:
            status, payload = validation_error
            self._send_json(status, payload)
            return

        request = Request(
            method=self.command,
            path=parts.path,
            query=first_values(parts.query),
            headers=dict(self.headers.items()),
            body=body or {},
            remote_addr=peer_host(self.client_address),
            params=params,
        )
        try:
            response = handler(request)
        except Exception as exc:
            LOGGER.exception("Unhandled error for %s %s", self.command, parts.path)
            self._send_json(500, {"error": "internal_error", "detail": str(exc)})
            return
        LOGGER.info("%s %s -> %d", self.command, parts.path, response.status)
        self._write_response(response)

    do_GET = _dispatch
    do_POST = _dispatch
    do_OPTIONS = _dispatch

    def handle_one_request(self) -> None:
        try:
            super().handle_one_request()
        except Exception as exc:
            if is_client_disconnect(exc):
                return
            raise

    def log_message(self, format: str, *args: Any) -> None:
        return


class VoipShopHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True
    request_queue_size = LISTEN_BACKLOG


def run(host: str = HOST, port: int = PORT) -> None:
    load_resolver()
    server = VoipShopHTTPServer((host, port), VoipShopHandler)
    LOGGER.info("VoIP Shop document API listening on http://%s:%d", host, port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
