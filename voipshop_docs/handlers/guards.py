"""Checks shared by the public POST handlers: captcha and rate limit."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .. import config, ratelimit, recaptcha
from ..recaptcha import RecaptchaResult
from ..ratelimit import RateLimitResult
from ..web import Request, Response, client_ip, json_response


def captcha_action(body: Mapping[str, Any], default: Optional[str] = None) -> Optional[str]:
    action = str(body.get("recaptchaAction") or "").strip()
    return action or default


def check_captcha(request: Request, body: Mapping[str, Any], default_action: Optional[str] = None) -> RecaptchaResult:
    return recaptcha.verify_recaptcha(
        token=body.get("recaptchaToken"),
        action_expected=captcha_action(body, default_action),
        secret=config.recaptcha_secret(),
        remote_ip=client_ip(request) or None,
        min_score=config.recaptcha_min_score(),
    )


def captcha_rejected(result: RecaptchaResult, headers: Mapping[str, str], reason: Optional[str] = None) -> Response:
    payload: dict = {"error": "reCAPTCHA rejected", "reason": reason or result.reason or "unknown"}
    meta = result.meta()
    if meta is not None:
        payload["meta"] = meta
    return json_response(400, payload, headers)


def check_rate_limit(request: Request, action: str, email: str = "") -> RateLimitResult:
    return ratelimit.enforce_limits(ip=client_ip(request) or "unknown", action=action, email=email or "")


def too_many_requests(result: RateLimitResult, headers: Mapping[str, str]) -> Response:
    return json_response(
        429,
        {
            "error": "Too many requests",
            "retry_window": result.window,
            "limit": result.limit,
            "remaining": result.remaining,
        },
        headers,
    )
