"""Layout shared by the quote and the invoice: header, parties, summary cards,
charge tables, the pay-now band and the contact footer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..branding import load_logo
from ..formatting import fmt_iso_date, fmt_money, safe_float
from ..pdf_constants import ZEBRA
from ..pricing import TableRow, Totals, compute_totals, vat_rate_of
from .base import DocumentRenderer, palette

# Description / Qty / Unit / Amount
COLUMN_SHARES = (0.58, 0.12, 0.12, 0.18)


@dataclass(frozen=True)
class ChargesMetrics:
    margin: float
    header_top: float
    logo_width: float
    title_size: float
    meta_size: float
    company_gap: float
    company_name_size: float
    bill_to_gap: float
    bill_to_size: float
    text_size: float
    cards_top_gap: float
    card_gap: float
    card_h: float
    card_radius: float
    card_pad: float
    card_title_size: float
    card_value_size: float
    card_subtitle_size: float
    card_title_dy: float
    card_value_dy: float
    after_cards: float
    section_size: float
    section_gap: float
    head_h: float
    head_size: float
    head_text_dy: float
    row_h: float
    row_size: float
    row_text_dy: float
    totals_gap: float
    totals_size: float
    totals_step: float
    totals_label_w: float
    totals_value_w: float
    band_radius: float
    band_pad: float
    band_label_size: float
    band_value_size: float
    band_text_dy: float


class ChargesRenderer(DocumentRenderer):
    """Base for documents that list once-off and monthly charges."""

    title = ""
    number_label = ""
    number_key = ""
    fallback_colors: Mapping[str, str] = {}
    metrics: ChargesMetrics
    stamp_size: float = 90

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.margin = self.metrics.margin
        super().__init__(data)
        self.company: Mapping[str, Any] = data.get("company") or {}
        self.client: Mapping[str, Any] = data.get("client") or {}
        self.colors = palette(self.company, self.fallback_colors)
        self.vat_rate = vat_rate_of(self.company)
        self.totals: Totals = compute_totals(data.get("subtotals"), self.vat_rate)
        self.valid_days = int(safe_float(data.get("validDays"), 7) or 7)

    # -- header ------------------------------------------------------------

    def draw_hairline(self) -> None:
        self.fill_rect(0, 0, self.page_w, 6, self.colors["brand"])

    def draw_header(self) -> None:
        m = self.metrics
        c = self.colors
        top = m.header_top

        logo = load_logo(str(self.company.get("logoUrl") or ""))
        drew_logo = bool(logo) and self.image(logo, self.left, top, width=m.logo_width)
        if not drew_logo and self.company.get("name"):
            self.text(self.left, top, self.company.get("name"), 16, c["ink"], bold=True)

        self.text(self.left, top, self.title, m.title_size, c["ink"], bold=True, width=self.width, align="R")
        y = top + self.line_height(m.title_size) * 1.2
        meta_lines = [
            f"{self.number_label}: {self.data.get(self.number_key) or ''}",
            f"Date: {fmt_iso_date(self.data.get('dateISO'))}",
            f"Valid: {self.valid_days} days",
        ]
        for line in meta_lines:
            self.text(self.left, y, line, m.meta_size, c["gray6"], width=self.width, align="R")
            y += self.line_height(m.meta_size)
        self.y = y

    def draw_parties(self) -> None:
        m = self.metrics
        c = self.colors
        y = self.y + m.company_gap

        if self.company.get("name"):
            y = self.paragraph(self.left, y, self.company.get("name"), self.width, m.company_name_size, c["ink"], bold=True)
        y = self.paragraph(self.left, y, self.company.get("address"), self.width, m.text_size, c["gray6"])
        contact = str(self.company.get("phone") or "")
        if self.company.get("email"):
            contact += f" • {self.company.get('email')}"
        y = self.paragraph(self.left, y, contact, self.width, m.text_size, c["gray6"])

        y += m.bill_to_gap
        y = self.paragraph(self.left, y, "Bill To", self.width, m.bill_to_size, c["ink"], bold=True)
        for key in ("name", "company", "email", "phone", "address"):
            y = self.paragraph(self.left, y, self.client.get(key), self.width, m.text_size, c["ink"])
        self.y = y

    # -- summary cards -----------------------------------------------------

    def summary_card(self, x: float, y: float, w: float, title: str, value: str, subtitle: str) -> None:
        m = self.metrics
        c = self.colors
        self.rounded(x, y, w, m.card_h, m.card_radius, fill=c["pill"], stroke=c["line"])
        self.text(x + m.card_pad, y + m.card_title_dy, title, m.card_title_size, c["gray6"])
        self.text(x + m.card_pad, y + m.card_value_dy, value, m.card_value_size, c["ink"], bold=True)
        if subtitle:
            sub_w = 60 - (m.card_pad - 10)
            self.text(
                x + w - m.card_pad - sub_w,
                y + m.card_value_dy,
                subtitle,
                m.card_subtitle_size,
                c["gray6"],
                width=sub_w,
                align="R",
            )

    def summary_cards_fit(self, y_start: float) -> bool:
        return True

    def draw_summary_cards(self) -> None:
        m = self.metrics
        y_start = self.y + m.cards_top_gap
        if not self.summary_cards_fit(y_start):
            return
        card_w = (self.width - m.card_gap) / 2
        self.summary_card(self.left, y_start, card_w, "MONTHLY", fmt_money(self.totals.monthly_total), "/month")
        self.summary_card(
            self.left + card_w + m.card_gap,
            y_start,
            card_w,
            "ONCE-OFF",
            fmt_money(self.totals.once_off_total),
            "setup",
        )
        self.y = y_start + m.card_h + m.after_cards

    # -- tables ------------------------------------------------------------

    def columns(self) -> List[float]:
        return [self.width * share for share in COLUMN_SHARES]

    def draw_section_title(self, title: str, y: float) -> float:
        m = self.metrics
        self.text(self.left, y, title, m.section_size, self.colors["ink"], bold=True)
        return y + m.section_gap

    def draw_table_head(self, y: float) -> float:
        m = self.metrics
        c = self.colors
        col = self.columns()
        self.fill_rect(self.left, y, self.width, m.head_h, c["thbg"])
        text_y = y + m.head_text_dy
        self.text(self.left + 8, text_y, "Description", m.head_size, c["ink"], bold=True)
        self.text(self.left + col[0], text_y, "Qty", m.head_size, c["ink"], bold=True, width=col[1], align="R")
        self.text(
            self.left + col[0] + col[1], text_y, "Unit", m.head_size, c["ink"], bold=True, width=col[2], align="R"
        )
        self.text(
            self.left + col[0] + col[1] + col[2],
            text_y,
            "Amount",
            m.head_size,
            c["ink"],
            bold=True,
            width=col[3],
            align="R",
        )
        self.hline(y + m.head_h, c["line"])
        return y + m.head_h

    def draw_row(self, y: float, index: int, row: TableRow) -> float:
        m = self.metrics
        ink = self.colors["ink"]
        col = self.columns()
        self.fill_rect(self.left, y, self.width, m.row_h, ZEBRA[index % 2])
        text_y = y + m.row_text_dy
        self.text(self.left + 8, text_y, self.ellipsized(row.name, col[0] - 10, m.row_size), m.row_size, ink)
        self.text(self.left + col[0], text_y, row.qty, m.row_size, ink, width=col[1], align="R")
        self.text(self.left + col[0] + col[1], text_y, row.unit, m.row_size, ink, width=col[2], align="R")
        self.text(
            self.left + col[0] + col[1] + col[2],
            text_y,
            fmt_money(row.amount),
            m.row_size,
            ink,
            width=col[3],
            align="R",
        )
        return y + m.row_h

    def draw_totals(self, y: float, monthly: bool) -> float:
        m = self.metrics
        c = self.colors
        t = self.totals
        self.hline(y, c["line"])
        y += m.totals_gap

        value_x = self.right - m.totals_value_w
        label_x = value_x - m.totals_label_w - 8
        if monthly:
            lines = [
                ("Subtotal", t.monthly_ex, False),
                (t.vat_label, t.monthly_vat, False),
                ("Total / month", t.monthly_total, True),
            ]
        else:
            lines = [
                ("Subtotal", t.once_off_ex, False),
                (t.vat_label, t.once_off_vat, False),
                ("Total (once-off)", t.once_off_total, True),
            ]
        for label, value, bold in lines:
            self.text(
                label_x, y, label, m.totals_size, c["ink"] if bold else c["gray6"],
                bold=bold, width=m.totals_label_w, align="R",
            )
            self.text(
                value_x, y, fmt_money(value), m.totals_size, c["ink"],
                bold=bold, width=m.totals_value_w, align="R",
            )
            y += m.totals_step
        return y

    # -- pay-now band, notes, footer ---------------------------------------

    def draw_pay_band(self, y: float, height: float) -> None:
        m = self.metrics
        c = self.colors
        self.rounded(self.left, y, self.width, height, m.band_radius, fill=c["pill"], stroke=c["line"])
        text_y = y + m.band_text_dy
        self.text(self.left + m.band_pad, text_y, "Pay now (incl VAT)", m.band_label_size, c["ink"], bold=True)
        self.text(
            self.left,
            text_y,
            fmt_money(self.totals.pay_now),
            m.band_value_size,
            c["ink"],
            bold=True,
            width=self.width - m.band_pad,
            align="R",
        )

    def notes_text(self, included: str, validity: str) -> str:
        notes = self.data.get("notes")
        parts = [included, f"Notes: {notes}" if notes else "", validity]
        return "\n".join(part for part in parts if part)

    def draw_footer(self, y: Optional[float] = None) -> None:
        c = self.colors
        footer_y = self.page_h - 30 if y is None else y
        contact = " • ".join(
            str(self.company.get(key) or "") for key in ("name", "email", "phone")
        )
        self.text(self.left, footer_y, contact, 9, c["gray4"])
        self.text(self.left, footer_y, f"Page {self.page_number}", 9, c["gray4"], width=self.width, align="R")


def item_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
