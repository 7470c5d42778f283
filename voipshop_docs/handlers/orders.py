"""``/api/orders/{order}/{doc}``: serve a stored order document.

Stored PDFs are served by redirect. When ``links.json`` has no URL for the
document it is rebuilt from the order's ``meta.json`` snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Tuple

from .. import documents, payloads, storage
from ..web import Request, Response, json_response, pdf_response, redirect

LOGGER = logging.getLogger(__name__)

DOCUMENTS = ("quote", "invoice", "sla", "porting")


def _nested(snapshot: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = snapshot.get(key)
    return value if isinstance(value, Mapping) else snapshot


def rebuild_quote(snapshot: Mapping[str, Any], order: str) -> Tuple[bytes, str]:
    pdf = documents.build_quote_pdf(payloads.quote_from_body(snapshot))
    return pdf, f"Quote-{snapshot.get('quoteNumber') or order}.pdf"


def rebuild_invoice(snapshot: Mapping[str, Any], order: str) -> Tuple[bytes, str]:
    pdf = documents.build_invoice_pdf(_nested(snapshot, "invoicePayload"))
    return pdf, f"Invoice-{snapshot.get('invoiceNumber') or order}.pdf"


def rebuild_sla(snapshot: Mapping[str, Any], order: str) -> Tuple[bytes, str]:
    pdf = documents.build_sla_pdf(_nested(snapshot, "slaPayload"))
    return pdf, f"SLA-{snapshot.get('invoiceNumber') or order}.pdf"


def rebuild_porting(snapshot: Mapping[str, Any], order: str) -> Tuple[bytes, str]:
    data = _nested(snapshot, "portingPayload")
    client = data.get("client") or snapshot.get("customer")
    pdf = documents.build_porting_pdf(data.get("company"), client, data.get("port"))
    return pdf, f"Porting-{order}.pdf"


REBUILDERS: Dict[str, Callable[[Mapping[str, Any], str], Tuple[bytes, str]]] = {
    "quote": rebuild_quote,
    "invoice": rebuild_invoice,
    "sla": rebuild_sla,
    "porting": rebuild_porting,
}


def handle(request: Request) -> Response:
    order = request.params.get("order") or ""
    doc = request.params.get("doc") or ""
    if not order:
        return json_response(400, {"error": "order required"})
    if doc not in REBUILDERS:
        return json_response(404, {"error": f"Unknown document '{doc}'"})

    try:
        links = storage.get_order_links(order)
        stored = links.get(f"{doc}Url")
        if stored:
            return redirect(stored)

        snapshot = storage.get_order_snapshot(order)
        pdf, filename = REBUILDERS[doc](snapshot, order)
        return pdf_response(pdf, filename)
    except Exception as exc:
        LOGGER.exception("[orders/%s] %s", doc, order)
        return json_response(404, {"error": str(exc) or f"{doc} not available"})
