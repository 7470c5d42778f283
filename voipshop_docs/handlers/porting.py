"""``/api/send-porting``: email the porting letter of authority."""

from __future__ import annotations

import logging

from .. import config, documents, emails, mailer, payloads
from ..mailer import Attachment, EmailSendError
from ..web import Request, Response, cors_reflect, empty, json_response, text_response
from . import guards

LOGGER = logging.getLogger(__name__)

ATTACHMENT_NAME = "Porting-Letter-of-Authority.pdf"


def handle(request: Request) -> Response:
    cors = cors_reflect(request, "POST, OPTIONS")
    if request.method == "OPTIONS":
        return empty(204).with_headers(cors)
    if not request.is_post:
        return text_response(405, "Method Not Allowed", cors)

    try:
        return send_porting(request).with_headers(cors)
    except Exception as exc:
        LOGGER.exception("[send-porting] error")
        return text_response(500, str(exc) or "Failed to create/send porting LOA.", cors)


def send_porting(request: Request) -> Response:
    body = request.body
    check = guards.check_captcha(request, body)
    if not check.ok:
        return guards.captcha_rejected(check, {})

    company, client, port = payloads.porting_from_body(body)
    if not client.get("email"):
        return text_response(400, "Missing client email.")

    pdf = documents.build_porting_pdf(company, client, port)

    if not config.resend_api_key():
        LOGGER.error("[send-porting] Missing RESEND_API_KEY env var")
        return text_response(500, "Server not configured (email).")

    try:
        message_id = mailer.send_email(
            client["email"],
            f"Porting Letter of Authority • {client.get('company') or client.get('name') or ''}",
            emails.porting_email(company, client.get("name")),
            attachments=[Attachment(ATTACHMENT_NAME, pdf)],
            sender=config.SALES_EMAIL,
        )
    except EmailSendError as exc:
        LOGGER.error("[send-porting] Resend error: %s", exc)
        return text_response(502, f"Email send failed: {exc}")

    return json_response(200, {"ok": True, "id": message_id, "attached": {"porting": True}})
