"""Public package API for VoIP Shop document generation."""

from __future__ import annotations

from typing import Any, Mapping, Optional

__version__ = "0.1.0"


def build_quote_pdf(quote: Mapping[str, Any]) -> bytes:
    from .documents import build_quote_pdf as _build

    return _build(quote)


def build_invoice_pdf(invoice: Mapping[str, Any]) -> bytes:
    from .documents import build_invoice_pdf as _build

    return _build(invoice)


def build_sla_pdf(params: Mapping[str, Any]) -> bytes:
    from .documents import build_sla_pdf as _build

    return _build(params)


def build_porting_pdf(
    company: Optional[Mapping[str, Any]] = None,
    client: Optional[Mapping[str, Any]] = None,
    port: Optional[Mapping[str, Any]] = None,
) -> bytes:
    from .documents import build_porting_pdf as _build

    return _build(company, client, port)


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = ["build_invoice_pdf", "build_porting_pdf", "build_quote_pdf", "build_sla_pdf", "run"]
