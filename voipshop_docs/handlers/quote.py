"""``/api/send-quote``: render a quote, store it and email it to the client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .. import config, documents, emails, mailer, payloads, storage
from ..mailer import Attachment, EmailSendError
from ..pricing import monthly_incl_vat, vat_rate_of
from ..web import Request, Response, cors_any, empty, is_truthy_flag, json_response, pdf_response, text_response
from . import guards

LOGGER = logging.getLogger(__name__)

CORS = cors_any("GET, POST, OPTIONS")
DEFAULT_ACTION = "send_quote"


def handle(request: Request) -> Response:
    if request.method == "OPTIONS":
        return empty(204).with_headers(CORS)

    body = request.body if request.is_post else {}
    preview = is_truthy_flag(request.query.get("preview")) or is_truthy_flag(body.get("preview"))
    compact = is_truthy_flag(request.query.get("compact")) or is_truthy_flag(body.get("compact"))
    try:
        return send_quote(request, body, preview, compact).with_headers(CORS)
    except Exception as exc:
        LOGGER.exception("[send-quote] error")
        return text_response(500, str(exc) or "Failed to create/send quote.", CORS)


def send_quote(request: Request, body: Mapping[str, Any], preview: bool, compact: bool) -> Response:
    quote = payloads.quote_from_body(body, compact=compact)
    number = quote["quoteNumber"]
    to = quote["client"].get("email")

    if not request.is_post or not to or preview:
        return pdf_response(documents.build_quote_pdf(quote), f"Quote-{number}.pdf")

    if not config.recaptcha_secret():
        return json_response(500, {"error": "Server misconfigured: missing reCAPTCHA secret env"})

    action = guards.captcha_action(body, DEFAULT_ACTION)
    check = guards.check_captcha(request, body, DEFAULT_ACTION)
    if not check.ok:
        return guards.captcha_rejected(check, {})

    limit = guards.check_rate_limit(request, action, to)
    if not limit.ok:
        return guards.too_many_requests(limit, {})

    pdf = documents.build_quote_pdf(quote)
    # Before an order exists the quote is filed under its own number.
    links = storage.persist_order_artifacts(
        order_number=quote["orderNumber"] or number,
        quote_number=number,
        quote_pdf=pdf,
        snapshot=payloads.quote_snapshot(quote, body),
    )

    if not config.resend_api_key():
        LOGGER.error("[send-quote] Missing RESEND_API_KEY env var")
        return json_response(500, {"ok": False, "error": "Email not configured", **links})

    delivery = str(body.get("delivery") or "").lower() or config.default_delivery()
    company = quote["company"]
    monthly = monthly_incl_vat(quote["subtotals"].get("monthly"), vat_rate_of(company))
    message: Dict[str, Any] = {
        "to": to,
        "subject": f"VoIP Shop Quote • {number}",
        "cc": [config.SALES_EMAIL],
        "sender": config.SALES_EMAIL,
    }

    if delivery == "link":
        message["html"] = emails.quote_email(
            company,
            quote["client"].get("name"),
            monthly,
            config.complete_order_url(),
            pdf_url=links.get("quoteUrl"),
        )
    else:
        message["html"] = emails.quote_email(
            company, quote["client"].get("name"), monthly, config.complete_order_url()
        )
        message["attachments"] = [Attachment(f"Quote-{number}.pdf", pdf)]

    try:
        message_id = mailer.send_email(**message)
    except EmailSendError as exc:
        LOGGER.error("[send-quote] Resend send error (%s): %s", delivery, exc)
        return json_response(502, {"ok": False, "error": "Email send failed", **links})

    if delivery == "link":
        return json_response(200, {"ok": True, "delivery": "link", **links})
    return json_response(200, {"ok": True, "delivery": "attach", "id": message_id, **links})
