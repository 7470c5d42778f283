"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from typing import Optional


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_str(*names: str, default: str = "") -> str:
    """Return the first non-empty value among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value.strip()
    return default


def env_flag(name: str) -> bool:
    return bool(os.getenv(name, "").strip())


HOST = os.getenv("VOIPSHOP_HOST", "0.0.0.0")
PORT = env_int("VOIPSHOP_PORT", 8080, minimum=1)
MAX_BODY_BYTES = env_int("VOIPSHOP_MAX_BODY_BYTES", 8 * 1024 * 1024, minimum=1024)
LISTEN_BACKLOG = env_int("VOIPSHOP_LISTEN_BACKLOG", 128, minimum=1)
MAX_FANOUT_WORKERS = env_int("VOIPSHOP_MAX_FANOUT_WORKERS", 6, minimum=1)
HTTP_TIMEOUT_S = env_int("VOIPSHOP_HTTP_TIMEOUT_S", 15, minimum=1)

SALES_EMAIL = "sales@voipshop.co.za"
DEFAULT_COMPLETE_ORDER_URL = "https://voipshop.co.za/complete-order"

RATE_LIMIT_MAX_REQUESTS = 10
RATE_LIMIT_WINDOW_S = 60
RATE_LIMIT_PREFIX = "voipshop:rl"


def blob_base_url() -> str:
    return env_str("BLOB_BASE_URL").rstrip("/")


def blob_token() -> str:
    return env_str("BLOB_READ_WRITE_TOKEN")


def resend_api_key() -> str:
    return env_str("RESEND_API_KEY")


def email_from() -> str:
    return env_str("EMAIL_FROM", default=SALES_EMAIL)


def recaptcha_secret() -> str:
    return env_str("RECAPTCHA_V3_SECRET_KEY", "RECAPTCHA_SECRET_KEY", "RECAPTCHA_SECRET")


def recaptcha_min_score() -> float:
    return env_float("RECAPTCHA_MIN_SCORE", 0.5)


def upstash_credentials() -> Optional[tuple]:
    url = env_str("UPSTASH_REDIS_REST_URL")
    token = env_str("UPSTASH_REDIS_REST_TOKEN")
    if not url or not token:
        return None
    return url, token


def default_delivery() -> str:
    return "link" if env_flag("USE_BLOB_LINK") else "attach"


def complete_order_url() -> str:
    return env_str("COMPLETE_ORDER_URL", default=DEFAULT_COMPLETE_ORDER_URL)
