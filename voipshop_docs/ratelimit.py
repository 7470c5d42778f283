"""Per-action request limits backed by Upstash Redis.

Without Upstash credentials the limiter is disabled and every request is
allowed; limiter failures are logged and also allow the request.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from upstash_ratelimit import Ratelimit, SlidingWindow
from upstash_redis import Redis

from . import config

LOGGER = logging.getLogger(__name__)

_LIMITER_LOCK = threading.Lock()
_LIMITER: Optional[Ratelimit] = None
_LIMITER_KEY: Optional[tuple] = None


@dataclass(frozen=True)
class RateLimitResult:
    ok: bool
    limit: int = 0
    remaining: int = 0
    window: str = "disabled"


ALLOW = RateLimitResult(ok=True)


def build_limiter(url: str, token: str) -> Ratelimit:
    return Ratelimit(
        redis=Redis(url=url, token=token),
        limiter=SlidingWindow(
            max_requests=config.RATE_LIMIT_MAX_REQUESTS,
            window=config.RATE_LIMIT_WINDOW_S,
        ),
        prefix=config.RATE_LIMIT_PREFIX,
    )


def get_limiter() -> Optional[Ratelimit]:
    global _LIMITER, _LIMITER_KEY
    credentials = config.upstash_credentials()
    if credentials is None:
        return None
    with _LIMITER_LOCK:
        if _LIMITER is None or _LIMITER_KEY != credentials:
            _LIMITER = build_limiter(*credentials)
            _LIMITER_KEY = credentials
        return _LIMITER


def reset_limiter() -> None:
    global _LIMITER, _LIMITER_KEY
    with _LIMITER_LOCK:
        _LIMITER = None
        _LIMITER_KEY = None


def limit_key(action: str, email: str, ip: str) -> str:
    return ":".join(part for part in ("rl", action, email or ip) if part)


def enforce_limits(ip: str = "unknown", action: str = "generic", email: str = "") -> RateLimitResult:
    try:
        limiter = get_limiter()
        if limiter is None:
            return ALLOW
        response: Any = limiter.limit(limit_key(action, email, ip))
    except Exception as exc:  # the Upstash client surfaces transport errors untyped
        LOGGER.warning("Rate limiter error, allowing request: %s", exc)
        return ALLOW
    return RateLimitResult(
        ok=bool(response.allowed),
        limit=int(response.limit),
        remaining=int(response.remaining),
        window="1m",
    )
