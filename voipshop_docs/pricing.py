"""Totals arithmetic and minutes-bundle inference for charge tables."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .formatting import fmt_money, safe_float
from .pdf_constants import DEFAULT_BUNDLE_SIZE

DEFAULT_VAT_RATE = 0.15

# Invoice rows: whole words only.
_CALLS_WORD = re.compile(r"(?:^|\b)(?:calls?|minutes?|bundle)\b", re.IGNORECASE)
# Quote rows.
_CALLS_LOOSE = re.compile(r"call|minute", re.IGNORECASE)
# SLA service rows.
_CALLS_SLA = re.compile(r"call|min(ute)?s?", re.IGNORECASE)

_NAME_MINUTES_PATTERNS = (
    re.compile(r"(\d{2,5})\s*(?:mins?|minutes?)\b", re.IGNORECASE),
    re.compile(r"\bbundle\s*(\d{2,5})\b", re.IGNORECASE),
    re.compile(r"\bx\s*(\d{2,5})\b", re.IGNORECASE),
)

ITEM_MINUTE_KEYS = (
    "minutes",
    "qtyMinutes",
    "minutesIncluded",
    "includedMinutes",
    "qty_min",
    "qty_mins",
    "qtyMin",
    "qtyMins",
)


@dataclass(frozen=True)
class Totals:
    vat_rate: float
    once_off_ex: float
    once_off_vat: float
    once_off_total: float
    monthly_ex: float
    monthly_vat: float
    monthly_total: float

    @property
    def pay_now(self) -> float:
        return self.once_off_total + self.monthly_total

    @property
    def vat_label(self) -> str:
        return f"VAT ({round(self.vat_rate * 100)}%)"


@dataclass(frozen=True)
class TableRow:
    name: str
    qty: str
    unit: str
    amount: float
    is_bundle: bool = False


def vat_rate_of(company: Optional[Mapping[str, Any]]) -> float:
    raw = (company or {}).get("vatRate")
    if raw is None:
        return DEFAULT_VAT_RATE
    return safe_float(raw, DEFAULT_VAT_RATE)


def compute_totals(subtotals: Optional[Mapping[str, Any]], vat_rate: float) -> Totals:
    subtotals = subtotals or {}
    once_ex = safe_float(subtotals.get("onceOff"))
    monthly_ex = safe_float(subtotals.get("monthly"))
    once_vat = once_ex * vat_rate
    monthly_vat = monthly_ex * vat_rate
    return Totals(
        vat_rate=vat_rate,
        once_off_ex=once_ex,
        once_off_vat=once_vat,
        once_off_total=once_ex + once_vat,
        monthly_ex=monthly_ex,
        monthly_vat=monthly_vat,
        monthly_total=monthly_ex + monthly_vat,
    )


def monthly_incl_vat(monthly_ex: Any, vat_rate: Any) -> float:
    return safe_float(monthly_ex) * (1 + safe_float(vat_rate))


def looks_like_calls(name: str) -> bool:
    return bool(_CALLS_WORD.search(name or ""))


def minutes_from_name(name: str) -> int:
    for pattern in _NAME_MINUTES_PATTERNS:
        match = pattern.search(name or "")
        if match and int(match.group(1)) > 0:
            return int(match.group(1))
    return 0


def item_minutes(item: Mapping[str, Any]) -> float:
    """First positive minutes value on the item, else whatever the name says."""
    for key in ITEM_MINUTE_KEYS:
        value = safe_float(item.get(key), 0.0)
        if value > 0:
            return value
    return float(minutes_from_name(str(item.get("name") or "")))


def section(doc: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """``doc[key]`` when it is an object, else an empty mapping."""
    value = doc.get(key)
    return value if isinstance(value, Mapping) else {}


def document_minutes(doc: Mapping[str, Any]) -> float:
    """Document-level minutes fallback for call rows without their own figure."""
    meta = section(doc, "meta")
    candidates = (
        doc.get("minutes"),
        section(doc, "monthlyControls").get("minutes"),
        meta.get("minutes"),
        meta.get("minutesIncluded"),
        section(doc, "controls").get("minutes"),
    )
    for value in candidates:
        if value is not None:
            return safe_float(value)
    return 0.0


def _plain_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def invoice_row(
    item: Mapping[str, Any],
    monthly: bool,
    global_minutes: float = 0.0,
    meta_bundle_size: Any = None,
) -> TableRow:
    name = item.get("name")
    name = name if isinstance(name, str) else str(name if name is not None else "")
    unit = safe_float(item.get("unit"))
    qty = safe_float(item.get("qty"))

    minutes = item_minutes(item)
    if not minutes and looks_like_calls(name):
        minutes = global_minutes
    is_bundle = monthly and minutes > 0

    if is_bundle:
        bundle_size = safe_float(item.get("bundleSize") or meta_bundle_size or DEFAULT_BUNDLE_SIZE)
        bundles = minutes / bundle_size if bundle_size > 0 else 0.0
        return TableRow(
            name=name,
            qty=_plain_number(minutes),
            unit="minutes",
            amount=unit * bundles,
            is_bundle=True,
        )

    qty_value = qty if qty > 0 else 1.0
    return TableRow(
        name=name,
        qty=_plain_number(qty_value),
        unit=fmt_money(unit),
        amount=unit * qty_value,
    )


def quote_unit_text(item: Mapping[str, Any], monthly: bool) -> str:
    minutes = item.get("minutes")
    if monthly and (minutes is not None or _CALLS_LOOSE.search(str(item.get("name") or ""))):
        count = safe_float(minutes)
        return f"{_plain_number(count)} minutes" if count > 0 else "Included minutes"
    return fmt_money(item.get("unit"))


def quote_row(item: Mapping[str, Any], monthly: bool) -> TableRow:
    qty = safe_float(item.get("qty"), 1.0) or 1.0
    unit = safe_float(item.get("unit"))
    return TableRow(
        name=str(item.get("name") or ""),
        qty=_plain_number(qty),
        unit=quote_unit_text(item, monthly),
        amount=unit * qty,
    )


def derive_sla_services(
    services: Any,
    items_monthly: Any,
    minutes_included: Any = 0,
) -> List[Dict[str, Any]]:
    """Service rows for the SLA: explicit ``services`` or rows built from monthly items."""
    if isinstance(services, list) and services:
        return [dict(service) for service in services if isinstance(service, Mapping)]
    if not isinstance(items_monthly, list) or not items_monthly:
        return []

    global_minutes = safe_float(minutes_included)
    rows: List[Dict[str, Any]] = []
    for item in items_monthly:
        if not isinstance(item, Mapping):
            continue
        name = str(item.get("name") or "")
        calls = bool(_CALLS_SLA.search(name))
        minutes = 0.0
        for key in ("minutes", "minutesIncluded", "includedMinutes"):
            if item.get(key) is not None:
                minutes = safe_float(item.get(key))
                break
        if not minutes and calls:
            minutes = global_minutes

        if calls:
            rows.append(
                {
                    "name": name,
                    "qty": _plain_number(minutes),
                    "unit": "minutes",
                    "note": f"Includes {_plain_number(minutes)} minutes" if minutes else "",
                }
            )
            continue

        unit = item.get("unit")
        rows.append(
            {
                "name": name,
                "qty": _plain_number(safe_float(item.get("qty"), 1.0) or 1.0),
                "unit": unit if isinstance(unit, str) and unit else "ea",
                "note": "",
            }
        )
    return rows


def sla_qty_text(service: Mapping[str, Any]) -> str:
    qty = service.get("qty")
    if qty is None:
        return "—"
    if isinstance(qty, (int, float)) and not isinstance(qty, bool):
        qty = _plain_number(qty)
    unit = service.get("unit")
    return f"{qty} {unit}" if unit else str(qty)
