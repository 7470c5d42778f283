"""Space-reservation arithmetic shared by the document builders."""

from __future__ import annotations

from .pdf_constants import FOOTER_H


def space_left(y: float, page_bottom: float, footer_h: float = FOOTER_H) -> float:
    return page_bottom - footer_h - y


def has_space(y: float, need: float, page_bottom: float, footer_h: float = FOOTER_H) -> bool:
    """True when ``need`` points still fit above the footer band from ``y``."""
    return y <= page_bottom - (need + footer_h)


def rows_that_fit(
    start_y: float,
    row_h: float,
    count: int,
    reserve: float,
    page_bottom: float,
    footer_h: float = FOOTER_H,
) -> int:
    """Number of rows drawable before the cursor eats into ``reserve``.

    A row is drawn only when, at its top, ``reserve`` points still fit; this
    keeps room for the totals block that follows a table.
    """
    fitted = 0
    y = start_y
    while fitted < count and has_space(y, reserve, page_bottom, footer_h):
        fitted += 1
        y += row_h
    return fitted


def hidden_rows_label(hidden: int) -> str:
    suffix = "s" if hidden > 1 else ""
    return f"+ {hidden} more item{suffix} included in totals"


def overflow_label(remaining: int) -> str:
    return f"+{remaining} more item(s)"
