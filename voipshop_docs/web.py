"""Framework-free request/response types shared by the handlers and the server."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .formatting import safe_filename

ValidationError = Tuple[int, Dict[str, Any]]

ALLOWED_ORIGINS = frozenset(
    {
        "http://127.0.0.1:5500",
        "http://localhost:5500",
        "https://voipshop.co.za",
        "https://www.voipshop.co.za",
        "https://voipshop-site.vercel.app",
    }
)
FALLBACK_ORIGIN = "https://voipshop.co.za"


@dataclass
class Request:
    method: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    remote_addr: str = ""
    params: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {key.lower(): value for key, value in self.headers.items()}

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    @property
    def is_post(self) -> bool:
        return self.method == "POST"


@dataclass
class Response:
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        merged = dict(headers)
        merged.update(self.headers)
        return Response(self.status, self.body, merged)


def json_response(status: int, payload: Any, headers: Optional[Mapping[str, str]] = None) -> Response:
    body = json.dumps(payload).encode("utf-8")
    return Response(status, body, {**(headers or {}), "Content-Type": "application/json"})


def text_response(status: int, text: str, headers: Optional[Mapping[str, str]] = None) -> Response:
    return Response(status, text.encode("utf-8"), {**(headers or {}), "Content-Type": "text/plain; charset=utf-8"})


def pdf_response(data: bytes, filename: str, inline: bool = True) -> Response:
    disposition = "inline" if inline else "attachment"
    return Response(
        200,
        bytes(data),
        {
            "Content-Type": "application/pdf",
            "Content-Disposition": f'{disposition}; filename="{safe_filename(filename)}"',
        },
    )


def redirect(location: str) -> Response:
    return Response(302, b"", {"Location": location})


def empty(status: int) -> Response:
    return Response(status, b"", {})


def cors_any(methods: str = "GET, POST, OPTIONS") -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": methods,
    }


def cors_reflect(request: Request, methods: str = "POST, OPTIONS") -> Dict[str, str]:
    """Echo the caller's origin and requested headers."""
    return {
        "Vary": "Origin, Access-Control-Request-Headers",
        "Access-Control-Allow-Origin": request.header("origin") or "*",
        "Access-Control-Allow-Methods": methods,
        "Access-Control-Allow-Headers": request.header("access-control-request-headers")
        or "Content-Type, Authorization",
        "Access-Control-Max-Age": "86400",
    }


def cors_allowlist(request: Request, allowed: Iterable[str] = ALLOWED_ORIGINS) -> Dict[str, str]:
    origin = request.header("origin")
    return {
        "Access-Control-Allow-Origin": origin if origin in set(allowed) else FALLBACK_ORIGIN,
        "Vary": "Origin, Access-Control-Request-Headers",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Max-Age": "86400",
    }


def client_ip(request: Request) -> str:
    forwarded = request.header("x-forwarded-for")
    first = forwarded.split(",")[0].strip() if forwarded else ""
    return first or request.remote_addr


def is_truthy_flag(value: Any) -> bool:
    return value is True or value in ("1", "true")


def parse_json_body(body: bytes) -> Tuple[Optional[Dict[str, Any]], Optional[ValidationError]]:
    """Decode a JSON object body; an empty body is an empty object."""
    if not body or not body.strip():
        return {}, None
    try:
        payload = json.loads(body.decode("utf-8"))
    except UnicodeDecodeError:
        return None, (
            400,
            {"error": "invalid_encoding", "detail": "Body must be UTF-8 encoded JSON."},
        )
    except json.JSONDecodeError as exc:
        return None, (
            400,
            {
                "error": "invalid_json",
                "detail": f"{exc.msg} (line {exc.lineno}, column {exc.colno})",
            },
        )

    if not isinstance(payload, dict):
        return None, (
            400,
            {"error": "invalid_payload", "detail": "JSON root must be an object."},
        )
    return payload, None
