"""Layout previews under ``/api/dev``.

Each preview starts from fixed sample data and deep-merges the JSON body on
top. ``?download=1`` serves the PDF as an attachment instead of inline.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from .. import documents, payloads
from ..formatting import safe_filename, safe_float
from ..web import Request, Response, json_response, pdf_response, text_response

LOGGER = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _download(request: Request) -> bool:
    return request.query.get("download") == "1"


def _section(body: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = body.get(key)
    return value if isinstance(value, Mapping) else {}


def quote_preview_payload(request: Request) -> Dict[str, Any]:
    body = request.body
    number = request.query.get("quote") or body.get("quoteNumber") or "VOIP-PREVIEW-QUOTE"
    email = request.query.get("email") or _section(body, "client").get("email") or "test@example.com"
    base = {
        "quoteNumber": number,
        "dateISO": _now_iso(),
        "client": {"name": "Test Customer", "email": email},
        "itemsOnceOff": [
            {"name": "Yealink T33G", "qty": 2, "unit": 1450},
            {"name": "Installation", "qty": 1, "unit": 0},
        ],
        "itemsMonthly": [
            {"name": "Cloud PBX Platform", "qty": 1, "unit": 150},
            {"name": "Extension Fee", "qty": 4, "unit": 65},
            {"name": "Calls (250-min bundle)", "qty": 2, "unit": 100},
        ],
        "subtotals": {"onceOff": 2900, "monthly": 480},
        "notes": "Preview quote for layout testing.",
    }
    return payloads.deep_merge(base, body)


def invoice_preview_payload(request: Request) -> Dict[str, Any]:
    body = request.body
    order = request.query.get("order") or body.get("orderNumber") or "VS-PREVIEW-INV"
    email = request.query.get("email") or _section(body, "client").get("email") or "test@example.com"
    base = {
        "orderNumber": order,
        "dateISO": _now_iso(),
        "company": {"name": "VoIP Shop", "vat": "1234567890"},
        "client": {"name": "Test Customer", "email": email},
        "itemsOnceOff": [
            {"name": "Yealink T31P", "qty": 2, "unit": 1100},
            {"name": "Installation", "qty": 1, "unit": 0},
        ],
        "itemsMonthly": [
            {"name": "Cloud PBX Platform", "qty": 1, "unit": 150},
            {"name": "Extension Fee", "qty": 3, "unit": 65},
            {"name": "Calls (250-min bundle)", "qty": 1, "unit": 100},
        ],
        "subtotals": {"onceOff": 2200, "monthly": 445},
        "notes": "Preview invoice for layout testing.",
    }
    return payloads.deep_merge(base, body)


def sla_preview_payload(request: Request) -> Dict[str, Any]:
    body = request.body
    order = request.query.get("order") or body.get("orderNumber") or "VS-PREVIEW-SLA"
    email = request.query.get("email") or _section(body, "customer").get("email") or "test@example.com"
    minutes = safe_float(request.query.get("minutes") or body.get("minutesIncluded") or 250, 250.0)
    base = {
        "orderNumber": order,
        "company": {"name": "VoIP Shop"},
        "customer": {"name": "Test Customer", "email": email},
        "itemsMonthly": [
            {"name": "Cloud PBX Platform", "qty": 1, "unit": 150},
            {"name": "Extension Fee", "qty": 3, "unit": 65},
        ],
        "minutesIncluded": minutes,
        "notes": "Preview SLA for layout testing.",
    }
    return payloads.deep_merge(base, body)


def preview_quote(request: Request) -> Response:
    try:
        data = quote_preview_payload(request)
        pdf = documents.build_quote_pdf(payloads.quote_from_body(data))
        return pdf_response(pdf, f"quote-{safe_filename(data['quoteNumber'])}.pdf", inline=not _download(request))
    except Exception as exc:
        LOGGER.exception("[preview-quote] error")
        return text_response(500, str(exc) or "Error generating quote preview")


def preview_invoice(request: Request) -> Response:
    try:
        data = invoice_preview_payload(request)
        pdf = documents.build_invoice_pdf(payloads.invoice_from_body(data))
        return pdf_response(pdf, f"invoice-{safe_filename(data['orderNumber'])}.pdf", inline=not _download(request))
    except Exception as exc:
        LOGGER.exception("[preview-invoice] error")
        return text_response(500, str(exc) or "Error generating invoice preview")


def preview_sla(request: Request) -> Response:
    try:
        data = sla_preview_payload(request)
        pdf = documents.build_sla_pdf(data)
        return pdf_response(pdf, f"sla-{safe_filename(data['orderNumber'])}.pdf", inline=not _download(request))
    except Exception as exc:
        LOGGER.exception("[preview-sla] error")
        return text_response(500, str(exc) or "Error generating SLA preview")


SLA_SAMPLE: Dict[str, Any] = {
    "company": {"name": "VoIP Shop", "email": "sales@voipshop.co.za"},
    "customer": {"name": "Preview Customer", "email": "preview@example.com"},
    "itemsMonthly": [
        {"name": "Cloud PBX Platform", "qty": 1, "unit": 150},
        {"name": "Extension Fee", "qty": 5, "unit": 65},
        {"name": "Calls (bundles)", "qty": 1, "unit": 100, "minutes": 250},
    ],
    "minutesIncluded": 250,
}


def preview(request: Request) -> Response:
    """``/api/dev/preview?type=sla``; other types are rejected."""
    try:
        if (request.query.get("type") or "sla") == "sla":
            return pdf_response(documents.build_sla_pdf(SLA_SAMPLE), "sla-preview.pdf")
        return json_response(400, {"ok": False, "error": "Unknown preview type"})
    except Exception as exc:
        LOGGER.exception("[preview] error")
        return json_response(500, {"ok": False, "error": str(exc)})
