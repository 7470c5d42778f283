"""HTML bodies for customer emails, rendered from ``templates/``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import SALES_EMAIL
from .formatting import fmt_money

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


@lru_cache(maxsize=1)
def _get_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["money"] = fmt_money
    return env


def _render(name: str, **context: Any) -> str:
    return _get_env().get_template(name).render(**context)


def quote_email(
    brand: Mapping[str, Any],
    client_name: str,
    monthly_incl_vat: float,
    complete_order_url: str,
    pdf_url: Optional[str] = None,
) -> str:
    """Quote email; with ``pdf_url`` it links the stored PDF, otherwise it refers to the attachment."""
    return _render(
        "quote.html",
        brand=brand,
        client_name=client_name,
        monthly_incl_vat=monthly_incl_vat,
        complete_order_url=complete_order_url,
        pdf_url=pdf_url,
    )


def invoice_email(
    brand: Mapping[str, Any],
    client_name: str,
    invoice_number: str,
    order_number: str,
    pdf_url: Optional[str] = None,
) -> str:
    return _render(
        "invoice.html",
        brand=brand,
        client_name=client_name,
        invoice_number=invoice_number,
        order_number=order_number,
        pdf_url=pdf_url,
    )


def order_email(brand: Mapping[str, Any], client_name: str, order_number: str, invoice_number: str) -> str:
    return _render(
        "order.html",
        brand=brand,
        client_name=client_name,
        order_number=order_number,
        invoice_number=invoice_number,
        sales_email=SALES_EMAIL,
    )


def porting_email(brand: Mapping[str, Any], client_name: str) -> str:
    return _render("porting.html", brand=brand, client_name=client_name)
