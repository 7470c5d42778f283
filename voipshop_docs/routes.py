"""URL routing for the local server."""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple
from urllib.parse import unquote

from .handlers import complete_order, dev, diagnostics, invoice, orders, porting, quote, sla
from .web import Request, Response

Handler = Callable[[Request], Response]

EXACT_ROUTES: Dict[str, Handler] = {
    "/health": diagnostics.health,
    "/healthz": diagnostics.health,
    "/api/hello": diagnostics.hello,
    "/api/test-blob": diagnostics.test_blob,
    "/api/send-quote": quote.handle,
    "/api/send-invoice": invoice.handle,
    "/api/send-sla": sla.handle,
    "/api/send-porting": porting.handle,
    "/api/complete-order": complete_order.handle,
    "/api/dev/preview": dev.preview,
    "/api/dev/preview-quote": dev.preview_quote,
    "/api/dev/preview-invoice": dev.preview_invoice,
    "/api/dev/preview-sla": dev.preview_sla,
}

PATTERN_ROUTES: List[Tuple[Pattern[str], Handler]] = [
    (re.compile(r"^/api/orders/(?P<order>[^/]*)/(?P<doc>[a-z]+)$"), orders.handle),
]


def resolve(path: str) -> Optional[Tuple[Handler, Dict[str, str]]]:
    """Handler and path parameters for ``path``; ``None`` when nothing matches."""
    path = path.rstrip("/") or "/"
    handler = EXACT_ROUTES.get(path)
    if handler is not None:
        return handler, {}
    for pattern, handler in PATTERN_ROUTES:
        match = pattern.match(path)
        if match:
            return handler, {key: unquote(value) for key, value in match.groupdict().items()}
    return None
