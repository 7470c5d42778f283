"""Server-side reCAPTCHA v3 verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from .config import HTTP_TIMEOUT_S

LOGGER = logging.getLogger(__name__)

SITEVERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


@dataclass(frozen=True)
class RecaptchaResult:
    ok: bool
    reason: str = ""
    data: Optional[Dict[str, Any]] = field(default=None)

    def meta(self) -> Optional[Dict[str, Any]]:
        """The subset echoed back to clients on rejection."""
        if not self.data:
            return None
        return {
            "action": self.data.get("action"),
            "score": self.data.get("score"),
            "hostname": self.data.get("hostname"),
        }


def normalize_siteverify(payload: Any) -> Dict[str, Any]:
    payload = payload if isinstance(payload, dict) else {}
    score = payload.get("score")
    return {
        "success": bool(payload.get("success")),
        "score": score if isinstance(score, (int, float)) and not isinstance(score, bool) else None,
        "action": payload.get("action") or None,
        "hostname": payload.get("hostname") or None,
        "errorCodes": payload.get("error-codes") or payload.get("error_codes") or None,
    }


def verify_recaptcha(
    token: Optional[str],
    action_expected: Optional[str],
    secret: Optional[str],
    remote_ip: Optional[str] = None,
    min_score: float = 0.5,
    session: Optional[requests.Session] = None,
) -> RecaptchaResult:
    if not token:
        return RecaptchaResult(False, "missing_token")
    if not secret:
        return RecaptchaResult(False, "missing_secret")

    form = {"secret": secret, "response": token}
    if remote_ip:
        form["remoteip"] = remote_ip

    http = session or requests
    try:
        response = http.post(SITEVERIFY_URL, data=form, timeout=HTTP_TIMEOUT_S)
        payload = response.json()
    except (requests.RequestException, ValueError) as exc:
        LOGGER.warning("reCAPTCHA siteverify failed: %s", exc)
        return RecaptchaResult(False, "siteverify_fetch_failed", {"error": str(exc)})

    data = normalize_siteverify(payload)
    if not data["success"]:
        return RecaptchaResult(False, "verification_failed", data)
    if action_expected and data["action"] and data["action"] != action_expected:
        return RecaptchaResult(False, "action_mismatch", data)
    if data["score"] is not None and data["score"] < min_score:
        return RecaptchaResult(False, "low_score", data)
    return RecaptchaResult(True, "", data)
