"""``/api/complete-order``: build and send the invoice, SLA and porting bundle.

The three PDFs are rendered concurrently. Persisting them is best effort: a
storage failure is logged and the email still goes out, just without links.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from .. import config, documents, emails, fanout, mailer, payloads, storage
from ..mailer import Attachment, EmailSendError
from ..recaptcha import RecaptchaResult
from ..web import Request, Response, cors_allowlist, empty, json_response
from . import guards

LOGGER = logging.getLogger(__name__)

DEFAULT_ACTION = "complete_order_bundle"
SLA_ATTACHMENT = "Service-Level-Agreement.pdf"
PORTING_ATTACHMENT = "Porting-Letter-of-Authority.pdf"


def handle(request: Request) -> Response:
    cors = cors_allowlist(request)
    try:
        if request.method == "OPTIONS":
            return empty(204).with_headers(cors)
        if request.method == "GET":
            return json_response(200, {"ok": True, "info": "complete-order API up"}, cors)
        if not request.is_post:
            return json_response(405, {"error": "Method Not Allowed"}, cors)
        return complete_order(request).with_headers(cors)
    except Exception as exc:
        LOGGER.exception("[complete-order] handler error")
        return json_response(500, {"error": str(exc) or "Failed to complete order."}, cors)


def complete_order(request: Request) -> Response:
    body = request.body
    customer = body.get("customer") if isinstance(body.get("customer"), dict) else {}
    email = customer.get("email")
    if not email:
        return json_response(400, {"error": "Missing customer email."})

    if not config.recaptcha_secret():
        return guards.captcha_rejected(RecaptchaResult(False), {}, reason="server_misconfigured_secret_missing")
    check = guards.check_captcha(request, body)
    if not check.ok:
        return guards.captcha_rejected(check, {})

    limit = guards.check_rate_limit(request, guards.captcha_action(body, DEFAULT_ACTION), email)
    if not limit.ok:
        return guards.too_many_requests(limit, {})

    if not config.resend_api_key():
        LOGGER.error("[complete-order] Missing RESEND_API_KEY env var")
        return json_response(500, {"error": "Server not configured (email)."})

    bundle = payloads.order_bundle(body)
    porting = bundle.porting
    try:
        invoice_pdf, sla_pdf, porting_pdf = fanout.gather(
            [
                lambda: documents.build_invoice_pdf(bundle.invoice),
                lambda: documents.build_sla_pdf(bundle.sla),
                lambda: documents.build_porting_pdf(porting["company"], porting["client"], porting["port"]),
            ]
        )
    except Exception as exc:
        LOGGER.exception("[complete-order] PDF builder error")
        return json_response(500, {"error": f"Failed to build one of the PDFs: {exc}"})

    ids = {"orderNumber": bundle.order_number, "invoiceNumber": bundle.invoice_number}
    links: Dict[str, Any]
    try:
        links = storage.persist_order_artifacts(
            order_number=bundle.order_number,
            invoice_number=bundle.invoice_number,
            invoice_pdf=invoice_pdf,
            sla_pdf=sla_pdf,
            porting_pdf=porting_pdf,
            snapshot=bundle.snapshot,
        )
    except Exception:
        LOGGER.exception("[complete-order] persist_order_artifacts failed")
        links = dict(ids)

    company = bundle.invoice["company"]
    try:
        message_id = mailer.send_email(
            email,
            f"Order {bundle.order_number} • Invoice, SLA & Porting • VoIP Shop",
            emails.order_email(
                company, bundle.invoice["client"].get("name"), bundle.order_number, bundle.invoice_number
            ),
            attachments=[
                Attachment(f"Invoice-{bundle.invoice_number}.pdf", invoice_pdf),
                Attachment(SLA_ATTACHMENT, sla_pdf),
                Attachment(PORTING_ATTACHMENT, porting_pdf),
            ],
            cc=[config.SALES_EMAIL],
            sender=config.SALES_EMAIL,
        )
    except EmailSendError as exc:
        LOGGER.error("[complete-order] Resend error: %s", exc)
        return json_response(502, {"error": f"Email send failed: {exc}", **ids, **links})

    return json_response(200, {"ok": True, "id": message_id, **ids, **links})
