"""Formatting and drawing utility helpers."""

from __future__ import annotations

import math
import re
from typing import Any, List, Protocol

from dateutil import parser as dateutil_parser


class TextWidthProvider(Protocol):
    def text_width(self, text: str, size: float, bold: bool = False) -> float:
        ...


class PdfPathCanvas(Protocol):
    k: float
    h: float

    def rect(self, x: float, y: float, w: float, h: float, style: str) -> None:
        ...

    def _out(self, value: str) -> None:
        ...


_UNSAFE_PART = re.compile(r"[^\w\-]+", re.ASCII)
_UNSAFE_FILENAME = re.compile(r"[^\w.\-]+", re.ASCII)
_DASH_RUN = re.compile(r"-{2,}")


def safe_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def fmt_money(amount: Any) -> str:
    """Format a rand amount as ``R 1,234.50``."""
    return f"R {safe_float(amount):,.2f}"


def fmt_qty(qty: Any) -> str:
    quantity = safe_float(qty, default=float("nan"))
    if math.isnan(quantity):
        return str(qty)
    if quantity.is_integer():
        return str(int(quantity))
    return str(quantity)


def fmt_percent(rate: Any) -> str:
    return f"{round(safe_float(rate) * 100)}%"


def fmt_iso_date(raw: Any) -> str:
    """Parse a date string and return it as ``YYYY-MM-DD``."""
    text = str(raw or "").strip()
    if not text:
        return ""
    try:
        return dateutil_parser.isoparse(text).strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        pass
    try:
        return dateutil_parser.parse(text).strftime("%Y-%m-%d")
    except (ValueError, OverflowError):
        return text[:10]


def safe_part(value: Any) -> str:
    """Reduce ``value`` to a blob path segment of ``[A-Za-z0-9_-]``."""
    text = _UNSAFE_PART.sub("-", str(value or "").strip())
    return _DASH_RUN.sub("-", text).strip("-")


def safe_filename(value: Any) -> str:
    return _UNSAFE_FILENAME.sub("-", str(value or ""))


def split_lines(text: str) -> List[str]:
    if not text:
        return []
    return [line for line in text.split("\n") if line.strip() != ""]


def wrap_text(
    fonts_obj: TextWidthProvider,
    text: str,
    max_width: float,
    font_size: float,
    bold: bool = False,
) -> List[str]:
    def line_width(value: str) -> float:
        return fonts_obj.text_width(value, font_size, bold=bold)

    def wrap_paragraph(paragraph: str) -> List[str]:
        words = paragraph.split()
        if not words:
            return [paragraph]

        lines: List[str] = []
        current = ""
        for word in words:
            candidate = word if not current else f"{current} {word}"
            if line_width(candidate) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
                current = word
                if line_width(word) <= max_width:
                    continue

            # A single word wider than the column is split by characters.
            chunk = ""
            for char in word:
                candidate_chunk = chunk + char
                if chunk and line_width(candidate_chunk) > max_width:
                    lines.append(chunk)
                    chunk = char
                else:
                    chunk = candidate_chunk
            current = chunk

        if current:
            lines.append(current)
        return lines

    result: List[str] = []
    for paragraph in str(text).split("\n"):
        result.extend(wrap_paragraph(paragraph))
    return result if result else [str(text)]


def round_rect(
    pdf: PdfPathCanvas,
    x: float,
    y: float,
    width: float,
    height: float,
    radius: float,
    style: str = "F",
) -> None:
    """Draw a rounded rectangle; ``style`` is ``F`` (fill), ``D`` (stroke) or ``DF``."""
    radius = max(0.0, min(radius, width / 2.0, height / 2.0))
    if radius == 0:
        pdf.rect(x, y, width, height, style)
        return

    k = pdf.k
    hp = pdf.h
    kappa = 0.5522847498307936  # circle approximation constant

    def arc(x1: float, y1: float, x2: float, y2: float, x3: float, y3: float) -> None:
        pdf._out(
            "%.2f %.2f %.2f %.2f %.2f %.2f c"
            % (x1 * k, (hp - y1) * k, x2 * k, (hp - y2) * k, x3 * k, (hp - y3) * k)
        )

    pdf._out("%.2f %.2f m" % ((x + radius) * k, (hp - y) * k))
    pdf._out("%.2f %.2f l" % ((x + width - radius) * k, (hp - y) * k))
    arc(
        x + width - radius + radius * kappa,
        y,
        x + width,
        y + radius - radius * kappa,
        x + width,
        y + radius,
    )
    pdf._out("%.2f %.2f l" % ((x + width) * k, (hp - (y + height - radius)) * k))
    arc(
        x + width,
        y + height - radius + radius * kappa,
        x + width - radius + radius * kappa,
        y + height,
        x + width - radius,
        y + height,
    )
    pdf._out("%.2f %.2f l" % ((x + radius) * k, (hp - (y + height)) * k))
    arc(
        x + radius - radius * kappa,
        y + height,
        x,
        y + height - radius + radius * kappa,
        x,
        y + height - radius,
    )
    pdf._out("%.2f %.2f l" % (x * k, (hp - (y + radius)) * k))
    arc(x, y + radius - radius * kappa, x + radius - radius * kappa, y, x + radius, y)

    operator = {"F": "f", "D": "S", "DF": "B", "FD": "B"}.get(style.upper(), "f")
    pdf._out(operator)
