"""``/api/send-invoice``: render an invoice and email it as a link or attachment."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .. import config, documents, emails, mailer, payloads, storage
from ..formatting import safe_part
from ..mailer import Attachment, EmailSendError
from ..web import Request, Response, cors_any, empty, json_response, pdf_response, text_response
from . import guards

LOGGER = logging.getLogger(__name__)

CORS = cors_any("GET, POST, OPTIONS")


def handle(request: Request) -> Response:
    if request.method == "OPTIONS":
        return empty(200).with_headers(CORS)

    body = request.body if request.is_post else {}
    try:
        return send_invoice(request, body).with_headers(CORS)
    except Exception as exc:
        LOGGER.exception("[send-invoice] error")
        return text_response(500, str(exc) or "Failed to create/send invoice.", CORS)


def invoice_object_path(number: Any) -> str:
    return f"invoices/{payloads.utc_today()}/invoice-{safe_part(number)}.pdf"


def send_invoice(request: Request, body: Mapping[str, Any]) -> Response:
    if request.is_post:
        check = guards.check_captcha(request, body)
        if not check.ok:
            return guards.captcha_rejected(check, {})

    invoice = payloads.invoice_from_body(body)
    number = invoice["invoiceNumber"]
    order = invoice["orderNumber"]
    pdf = documents.build_invoice_pdf(invoice)

    to = invoice["client"].get("email")
    if request.method == "GET" or not to:
        return pdf_response(pdf, f"Invoice-{number}.pdf")

    if not config.resend_api_key():
        LOGGER.error("[send-invoice] Missing RESEND_API_KEY env var")
        return json_response(500, {"ok": False, "error": "Email not configured"})

    delivery = str(body.get("delivery") or "").lower() or config.default_delivery()
    company = invoice["company"]
    client_name = invoice["client"].get("name")
    subject = f"VoIP Shop Invoice • {number} • Order {order}"

    if delivery == "link":
        blob = storage.BlobStore().put_pdf(invoice_object_path(number), pdf)
        pdf_url = storage.public_url(blob)
        html = emails.invoice_email(company, client_name, number, order, pdf_url=pdf_url)
        try:
            mailer.send_email(to, subject, html, sender=config.SALES_EMAIL)
        except EmailSendError as exc:
            LOGGER.error("[send-invoice] Resend send error (link): %s", exc)
            return text_response(502, f"Email send failed: {exc}")
        return json_response(200, {"ok": True, "delivery": "link", "pdfUrl": pdf_url})

    html = emails.invoice_email(company, client_name, number, order)
    try:
        message_id = mailer.send_email(
            to,
            subject,
            html,
            attachments=[Attachment(f"Invoice-{number}.pdf", pdf)],
            sender=config.SALES_EMAIL,
        )
    except EmailSendError as exc:
        LOGGER.error("[send-invoice] Resend send error (attach): %s", exc)
        return text_response(502, f"Email send failed: {exc}")
    return json_response(200, {"ok": True, "delivery": "attach", "id": message_id})
