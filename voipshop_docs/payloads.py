"""Request normalization: turn front-end JSON into document payloads."""

from __future__ import annotations

import copy
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .formatting import safe_float
from .pdf_constants import DEFAULT_COLORS

LOGO_URL = "https://voipshop.co.za/Assets/Group%201642logo%20(1).png"

COMPANY_DEFAULTS: Dict[str, Any] = {
    "name": "VoIP Shop",
    "address": "23 Lombardy Road, Broadacres, Johannesburg",
    "phone": "+27 10 101 4370",
    "email": "sales@voipshop.co.za",
    "vatRate": 0.15,
    "validityDays": 7,
    "logoUrl": LOGO_URL,
    "colors": dict(DEFAULT_COLORS),
}

INVOICE_COMPANY_DEFAULTS: Dict[str, Any] = {
    **{key: value for key, value in COMPANY_DEFAULTS.items() if key != "validityDays"},
    "phone": "+27 67 922 8256",
}

# Legal entity details printed on order documents.
ORDER_COMPANY: Dict[str, Any] = {
    "name": "VoIP Shop",
    "reg": "2025/406791/07",
    "vat": "***",
    "address": "23 Lombardy Road, Broadacres, Johannesburg",
    "phone": "+27 67 922 8256",
    "email": "sales@voipshop.co.za",
    "website": "https://voipshop.co.za",
    "vatRate": 0.15,
    "logoUrl": LOGO_URL,
}

SLA_COMPANY: Dict[str, Any] = {
    **{key: value for key, value in ORDER_COMPANY.items() if key != "vatRate"},
    "phone": "+27 68 351 0074",
}

PORTING_COMPANY_DEFAULTS: Dict[str, Any] = {"name": "VoIP Shop", "logoUrl": LOGO_URL}

SLA_SERVICE_DESCRIPTION = "Hosted PBX (incl. porting, device provisioning, remote support)"
QUOTE_DEFAULT_NOTES = "PBX system configuration and number setup."
INVOICE_DEFAULT_NOTES = "Thank you for your order."
SLA_NOTICE_DAYS = 30


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def quote_number() -> str:
    return f"Q-{int(time.time() * 1000)}"


def invoice_number() -> str:
    return f"INV-{int(time.time() * 1000)}"


def order_number() -> str:
    return f"VS-{random.randint(0, 999999)}"


def sla_number(today: Optional[str] = None) -> str:
    return "SLA-" + (today or utc_today()).replace("-", "")


def _mapping(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _first_present(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item.get(key)
    return None


def normalize_items(items: Any) -> List[Dict[str, Any]]:
    """Line items with the ``desc``/``quantity``/``price``/``includedMinutes`` aliases resolved."""
    if not isinstance(items, list):
        return []
    normalized = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        name = _first_present(item, "name", "desc")
        row: Dict[str, Any] = {
            "name": str(name if name is not None else ""),
            "qty": safe_float(_first_present(item, "qty", "quantity"), 1.0),
            "unit": safe_float(_first_present(item, "unit", "price"), 0.0),
        }
        minutes = _first_present(item, "minutes", "includedMinutes")
        if minutes is not None:
            row["minutes"] = minutes
        normalized.append(row)
    return normalized


def normalize_subtotals(subtotals: Any) -> Dict[str, float]:
    subtotals = _mapping(subtotals)
    return {
        "onceOff": safe_float(subtotals.get("onceOff")),
        "monthly": safe_float(subtotals.get("monthly")),
    }


def merged_company(overrides: Any, defaults: Mapping[str, Any]) -> Dict[str, Any]:
    company = {**copy.deepcopy(dict(defaults)), **_mapping(overrides)}
    if not company.get("colors") and "colors" in defaults:
        company["colors"] = dict(defaults["colors"])
    return company


def quote_from_body(body: Mapping[str, Any], compact: bool = False) -> Dict[str, Any]:
    company = merged_company(body.get("company"), COMPANY_DEFAULTS)
    valid_days = body.get("validDays")
    if valid_days is None:
        valid_days = company.get("validityDays")
    return {
        "orderNumber": body.get("orderNumber") or "",
        "quoteNumber": body.get("quoteNumber") or quote_number(),
        "dateISO": body.get("dateISO") or utc_today(),
        "validDays": int(safe_float(valid_days, 7)),
        "client": _mapping(body.get("client")),
        "itemsOnceOff": normalize_items(body.get("itemsOnceOff")),
        "itemsMonthly": normalize_items(body.get("itemsMonthly")),
        "subtotals": normalize_subtotals(body.get("subtotals")),
        "notes": body.get("notes") or QUOTE_DEFAULT_NOTES,
        "stamp": body.get("stamp") or "",
        "compact": bool(compact),
        "company": company,
    }


def quote_snapshot(quote: Mapping[str, Any], body: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "company": quote["company"],
        "client": quote["client"],
        "itemsMonthly": quote["itemsMonthly"],
        "itemsOnceOff": quote["itemsOnceOff"],
        "subtotals": quote["subtotals"],
        "minutesIncluded": body.get("minutesIncluded") or 0,
        "dateISO": quote["dateISO"],
        "orderNumber": quote["orderNumber"],
        "quoteNumber": quote["quoteNumber"],
    }


def invoice_from_body(body: Mapping[str, Any]) -> Dict[str, Any]:
    company = merged_company(body.get("company"), INVOICE_COMPANY_DEFAULTS)
    number = body.get("invoiceNumber") or invoice_number()
    return {
        "invoiceNumber": number,
        "orderNumber": body.get("orderNumber") or body.get("invoiceNumber") or order_number(),
        "dateISO": body.get("dateISO") or utc_today(),
        "dueDays": int(safe_float(body.get("dueDays"), 0) or 7),
        "client": _mapping(body.get("client")),
        "itemsOnceOff": normalize_items(body.get("itemsOnceOff")),
        "itemsMonthly": normalize_items(body.get("itemsMonthly")),
        "subtotals": normalize_subtotals(body.get("subtotals")),
        "notes": body.get("notes") or INVOICE_DEFAULT_NOTES,
        "stamp": body.get("stamp") or "",
        "compact": bool(body.get("compact")),
        "company": company,
    }


# (name, monthly key, default count, minimum count, unit)
SERVICE_LINES = (
    ("Cloud PBX", "cloudPbxQty", 1, 1, None),
    ("Extensions", "extensions", 3, 0, None),
    ("Geographic Number (DID)", "didQty", 1, 0, None),
    ("Voice Minutes (bundle)", "minutes", 250, 0, "min"),
)


def _whole(value: float) -> Any:
    return int(value) if value.is_integer() else value


def _service_rows(count: Callable[[str, float, float], float]) -> List[Dict[str, Any]]:
    rows = []
    for name, key, default, minimum, unit in SERVICE_LINES:
        row: Dict[str, Any] = {"name": name, "qty": _whole(count(key, default, minimum))}
        if unit:
            row["unit"] = unit
        rows.append(row)
    return rows


def sla_services(monthly: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Service lines for a standalone SLA: only a missing count takes its default, and zero is kept."""

    def count(key: str, default: float, minimum: float) -> float:
        raw = monthly.get(key)
        return default if raw is None else safe_float(raw, default)

    return _service_rows(count)


def order_services(monthly: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Service lines for a completed order: empty or zero counts take their default, then the minimum applies."""

    def count(key: str, default: float, minimum: float) -> float:
        return max(minimum, safe_float(monthly.get(key) or default, default))

    return _service_rows(count)


def debit_order(debit: Any, today: Optional[str] = None) -> Dict[str, Any]:
    debit = _mapping(debit)
    return {
        "accountName": debit.get("accountName") or "",
        "bank": debit.get("bank") or "",
        "branchCode": debit.get("branchCode") or "",
        "accountNumber": debit.get("accountNumber") or "",
        "accountType": debit.get("accountType") or "",
        "dayOfMonth": debit.get("dayOfMonth") or "",
        "mandateDateISO": today or utc_today(),
    }


def sla_from_checkout(checkout: Mapping[str, Any]) -> Dict[str, Any]:
    today = utc_today()
    customer = _mapping(checkout.get("customer"))
    monthly = _mapping(checkout.get("monthly"))
    totals = _mapping(monthly.get("totals"))
    return {
        "company": dict(SLA_COMPANY),
        "customer": {
            "name": customer.get("company") or customer.get("name") or "Customer",
            "contact": customer.get("contact") or "",
            "email": customer.get("email") or "",
            "phone": customer.get("phone") or "",
            "address": customer.get("address") or "",
            "reg": customer.get("reg") or "",
            "vat": customer.get("vat") or "",
        },
        "slaNumber": checkout.get("slaNumber") or sla_number(today),
        "effectiveDateISO": checkout.get("effectiveDate") or today,
        "noticeDays": SLA_NOTICE_DAYS,
        "monthlyExVat": safe_float(totals.get("exVat")),
        "monthlyInclVat": safe_float(totals.get("inclVat")),
        "vatRate": 0.15,
        "services": sla_services(monthly),
        "debitOrder": debit_order(checkout.get("debit"), today),
        "serviceDescription": SLA_SERVICE_DESCRIPTION,
    }


def porting_from_body(body: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    company = body.get("company")
    company = _mapping(company) if isinstance(company, Mapping) else dict(PORTING_COMPANY_DEFAULTS)
    return company, _mapping(body.get("client")), _mapping(body.get("port"))


@dataclass(frozen=True)
class OrderBundle:
    order_number: str
    invoice_number: str
    invoice: Dict[str, Any]
    sla: Dict[str, Any]
    porting: Dict[str, Any]
    snapshot: Dict[str, Any] = field(default_factory=dict)


def _order_items(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    rows = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        rows.append(
            {
                "name": item.get("name"),
                "qty": max(1.0, safe_float(item.get("qty") or 1, 1.0)),
                "unit": safe_float(item.get("unit") or 0),
            }
        )
    return rows


def order_bundle(body: Mapping[str, Any]) -> OrderBundle:
    """Invoice, SLA and porting payloads for a completed checkout."""
    today = utc_today()
    customer = _mapping(body.get("customer"))
    once_off = _mapping(body.get("onceOff")) or {"items": [], "totals": {"exVat": 0}}
    monthly = _mapping(body.get("monthly")) or {
        "items": [],
        "totals": {"exVat": 0},
        "cloudPbxQty": 1,
        "extensions": 3,
        "didQty": 1,
        "minutes": 250,
    }
    port = _mapping(body.get("port"))
    company = dict(ORDER_COMPANY)
    vat_rate = safe_float(company.get("vatRate"), 0.15) or 0.15

    inv_number = body.get("invoiceNumber") or invoice_number()
    ord_number = body.get("orderNumber") or order_number()
    monthly_ex = safe_float(_mapping(monthly.get("totals")).get("exVat"))

    client = {
        "name": customer.get("name") or customer.get("company") or "",
        "company": customer.get("company") or "",
        "email": customer.get("email"),
        "phone": customer.get("phone") or "",
        "address": customer.get("address") or "",
    }
    invoice = {
        "invoiceNumber": inv_number,
        "orderNumber": ord_number,
        "dateISO": today,
        "client": client,
        "itemsOnceOff": _order_items(once_off.get("items")),
        "itemsMonthly": _order_items(monthly.get("items")),
        "subtotals": {
            "onceOff": safe_float(_mapping(once_off.get("totals")).get("exVat")),
            "monthly": monthly_ex,
        },
        "notes": INVOICE_DEFAULT_NOTES,
        "company": company,
        "port": port,
    }
    sla = {
        "company": company,
        "customer": {
            "name": customer.get("company") or customer.get("name") or "Customer",
            "contact": customer.get("name") or "",
            "email": customer.get("email"),
            "phone": customer.get("phone") or "",
            "address": customer.get("address") or "",
        },
        "slaNumber": sla_number(today),
        "effectiveDateISO": today,
        "noticeDays": SLA_NOTICE_DAYS,
        "monthlyExVat": monthly_ex,
        "monthlyInclVat": monthly_ex * (1 + vat_rate),
        "vatRate": vat_rate,
        "services": order_services(monthly),
        "debitOrder": debit_order(body.get("debit"), today),
        "serviceDescription": SLA_SERVICE_DESCRIPTION,
    }
    porting = {"company": company, "client": client, "port": port}
    snapshot = {
        "company": company,
        "customer": customer,
        "invoicePayload": invoice,
        "slaPayload": sla,
        "portingPayload": porting,
        "onceOff": once_off,
        "monthly": monthly,
        "orderNumber": ord_number,
        "invoiceNumber": inv_number,
        "dateISO": today,
    }
    return OrderBundle(
        order_number=str(ord_number),
        invoice_number=str(inv_number),
        invoice=invoice,
        sla=sla,
        porting=porting,
        snapshot=snapshot,
    )


def deep_merge(base: Any, override: Any) -> Any:
    """Merge ``override`` onto ``base``; nested objects merge, everything else replaces."""
    if not isinstance(override, Mapping):
        return base
    merged = dict(base) if isinstance(base, Mapping) else {}
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged
