"""``/api/send-sla``: render the service level agreement for a checkout."""

from __future__ import annotations

import logging

from .. import documents, payloads
from ..web import Request, Response, cors_any, empty, json_response, pdf_response
from . import guards

LOGGER = logging.getLogger(__name__)

CORS = cors_any("GET, POST, OPTIONS")
DEFAULT_ACTION = "send_sla"


def handle(request: Request) -> Response:
    if request.method == "OPTIONS":
        return empty(200).with_headers(CORS)
    if not request.is_post:
        return json_response(405, {"error": "Only POST allowed"}, CORS)

    checkout = request.body
    try:
        check = guards.check_captcha(request, checkout, DEFAULT_ACTION)
        if not check.ok:
            return guards.captcha_rejected(check, CORS)

        customer = checkout.get("customer") or {}
        limit = guards.check_rate_limit(
            request,
            guards.captcha_action(checkout, DEFAULT_ACTION),
            customer.get("email") if isinstance(customer, dict) else "",
        )
        if not limit.ok:
            return guards.too_many_requests(limit, CORS)

        pdf = documents.build_sla_pdf(payloads.sla_from_checkout(checkout))
        return pdf_response(pdf, f"{checkout.get('slaNumber') or 'SLA'}.pdf").with_headers(CORS)
    except Exception as exc:
        LOGGER.exception("[send-sla] error")
        return json_response(500, {"error": "Error generating SLA PDF", "detail": str(exc)}, CORS)
