"""Shared page geometry, palette and type sizes for the document builders."""

from __future__ import annotations

from typing import Dict, Tuple

Color = Tuple[int, int, int]

# A4 in points, top-left origin
PAGE_W = 595.28
PAGE_H = 841.89

FOOTER_H = 28
HAIRLINE_H = 6

# Ascent ratio used to turn a text top into a baseline.
ASCENT = 0.78
LINE_HEIGHT = 1.2

DEFAULT_COLORS: Dict[str, str] = {
    "brand": "#0B63E6",
    "ink": "#0f172a",
    "gray6": "#475569",
    "gray4": "#94a3b8",
    "line": "#e5e7eb",
    "thbg": "#f8fafc",
    "pill": "#f1f5f9",
}

# Invoice palette falls back to slightly warmer greys.
INVOICE_FALLBACK_COLORS: Dict[str, str] = {
    "brand": "#0B63E6",
    "ink": "#111111",
    "gray6": "#4b5563",
    "gray4": "#6b7280",
    "line": "#e5e7eb",
    "thbg": "#f5f5f7",
    "pill": "#f5f5f7",
}

ZEBRA = ("#ffffff", "#fbfdff")
STAMP_COLOR = "#EEF2FF"
STAMP_OPACITY = 0.7
STAMP_ANGLE = 30

# SLA palette
SLA_INK = "#111827"
SLA_MUTED = "#4B5563"
SLA_BG = "#F5F5F7"
SLA_BORDER = "#E5E7EB"
SLA_BLUE = "#0B63E6"
SLA_RULE = "#9CA3AF"
SLA_DOT = "#6B7280"
SLA_DIVIDER = "#F0F0F0"

# Porting palette
PORT_TEXT = "#4b5563"
PORT_RULE = "#d1d5db"
PORT_BAND = "#f3f4f6"

HEADER_TITLE = "#111827"
HEADER_SUBTITLE = "#6B7280"

INCLUDED_BLURB = (
    "Included: Professional install & device setup; Remote support; PBX configuration; "
    "Number porting assistance. Standard call-out fee: R450."
)
INVOICE_INCLUDED_BLURB = (
    "Included: Install & device setup • Remote support • PBX config • Porting assist. "
    "Std call-out: R450."
)

DEFAULT_BUNDLE_SIZE = 250


def hex_to_rgb(value: str, default: Color = (0, 0, 0)) -> Color:
    text = str(value or "").strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        return default
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        return default
