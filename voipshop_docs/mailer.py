"""Transactional email through the Resend API."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

import requests
import resend
from resend.exceptions import ResendError

from . import config

LOGGER = logging.getLogger(__name__)


class EmailNotConfigured(RuntimeError):
    """Raised when ``RESEND_API_KEY`` is not set."""


class EmailSendError(RuntimeError):
    """Raised when the email API rejects or fails a send."""


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes

    def as_param(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "content": base64.b64encode(bytes(self.content)).decode("ascii"),
            "content_type": "application/pdf",
        }


def ensure_configured() -> str:
    api_key = config.resend_api_key()
    if not api_key:
        raise EmailNotConfigured("Missing RESEND_API_KEY env var")
    return api_key


def send_email(
    to: Union[str, Sequence[str]],
    subject: str,
    html: str,
    attachments: Sequence[Attachment] = (),
    cc: Optional[Sequence[str]] = None,
    sender: Optional[str] = None,
    reply_to: Optional[str] = None,
) -> Optional[str]:
    """Send one email and return the provider message id."""
    resend.api_key = ensure_configured()
    sender = sender or config.email_from()
    recipients: List[str] = [to] if isinstance(to, str) else list(to)

    params: Dict[str, Any] = {
        "from": sender,
        "to": recipients,
        "subject": subject,
        "html": html,
        "reply_to": reply_to or sender,
    }
    if cc:
        params["cc"] = list(cc)
    if attachments:
        params["attachments"] = [attachment.as_param() for attachment in attachments]

    try:
        result = resend.Emails.send(params)
    except (ResendError, requests.RequestException) as exc:
        raise EmailSendError(str(exc) or "unknown") from exc

    message_id = result.get("id") if isinstance(result, dict) else getattr(result, "id", None)
    LOGGER.info("Sent email %r to %s (id=%s)", subject, ", ".join(recipients), message_id)
    return message_id
