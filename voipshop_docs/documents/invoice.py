from __future__ import annotations

from typing import Any, List, Mapping

from ..pagination import hidden_rows_label, rows_that_fit
from ..pdf_constants import FOOTER_H, INVOICE_FALLBACK_COLORS, INVOICE_INCLUDED_BLURB, ZEBRA
from ..pricing import document_minutes, invoice_row, section
from .charges import ChargesMetrics, ChargesRenderer, item_list

INVOICE_METRICS = ChargesMetrics(
    margin=36,
    header_top=18,
    logo_width=120,
    title_size=20,
    meta_size=9.5,
    company_gap=11,
    company_name_size=11.5,
    bill_to_gap=7,
    bill_to_size=10.5,
    text_size=9.5,
    cards_top_gap=10,
    card_gap=10,
    card_h=40,
    card_radius=10,
    card_pad=10,
    card_title_size=8.6,
    card_value_size=12.5,
    card_subtitle_size=8.4,
    card_title_dy=6,
    card_value_dy=21,
    after_cards=12,
    section_size=11.5,
    section_gap=19,
    head_h=16,
    head_size=9.5,
    head_text_dy=3,
    row_h=16,
    row_size=9,
    row_text_dy=3,
    totals_gap=6,
    totals_size=9.4,
    totals_step=12,
    totals_label_w=124,
    totals_value_w=104,
    band_radius=10,
    band_pad=10,
    band_label_size=11.5,
    band_value_size=12,
    band_text_dy=8,
)

# Room kept under each row for the totals block.
ROW_RESERVE = 110
TOTALS_NEED = 50
BAND_MIN_H = 26
BAND_MAX_H = 64


class InvoiceRenderer(ChargesRenderer):
    """Invoice squeezed onto exactly one page.

    Blocks that do not fit are dropped instead of flowing to a second page;
    overflowing rows collapse into a single "more items" line and the pay-now
    band grows to take up leftover space.
    """

    title = "Invoice"
    number_label = "Invoice #"
    number_key = "invoiceNumber"
    fallback_colors = INVOICE_FALLBACK_COLORS
    metrics = INVOICE_METRICS
    max_pages = 1
    stamp_size = 84

    def __init__(self, data: Mapping[str, Any]) -> None:
        super().__init__(data)
        self.global_minutes = document_minutes(data)
        self.bundle_size = section(data, "meta").get("bundleSize")

    def summary_cards_fit(self, y_start: float) -> bool:
        return self.has_space(self.metrics.card_h + 12, y_start)

    def draw_table(self, title: str, items: List[Mapping[str, Any]], monthly: bool) -> None:
        m = self.metrics
        y = self.y + 6

        if not self.has_space(24, y):
            return
        self.text(self.left, y, title, m.section_size, self.colors["ink"], bold=True)
        y += m.section_gap

        if not self.has_space(m.head_h + 2, y):
            self.y = y
            return
        y = self.draw_table_head(y) + 1

        shown = rows_that_fit(y, m.row_h, len(items), ROW_RESERVE, self.page_bottom, FOOTER_H)
        for index, item in enumerate(items[:shown]):
            row = invoice_row(item, monthly, self.global_minutes, self.bundle_size)
            y = self.draw_row(y, index, row)

        hidden = len(items) - shown
        if hidden > 0 and self.has_space(m.row_h + 36, y):
            self.fill_rect(self.left, y, self.width, m.row_h, ZEBRA[shown % 2])
            self.text(
                self.left + 8, y + m.row_text_dy, hidden_rows_label(hidden), m.row_size,
                self.colors["gray6"], italic=True,
            )
            y += m.row_h

        if self.has_space(TOTALS_NEED, y):
            y = self.draw_totals(y, monthly)
        self.y = y + 2

    def draw_pay_now(self) -> None:
        if not self.has_space(BAND_MIN_H):
            return
        height = max(BAND_MIN_H, min(BAND_MAX_H, self.space_left() - 8))
        band_y = self.y + 2
        self.draw_pay_band(band_y, height)
        self.y = band_y + height + 6

    def draw(self) -> None:
        self.add_page()
        self.draw_hairline()
        self.draw_header()
        self.draw_parties()
        self.draw_summary_cards()
        self.paint_stamp(self.data.get("stamp"), size=self.stamp_size)

        self.draw_table("Once-off Charges", item_list(self.data.get("itemsOnceOff")), monthly=False)
        self.y += 5
        self.draw_table("Monthly Charges", item_list(self.data.get("itemsMonthly")), monthly=True)

        self.draw_pay_now()

        notes = self.notes_text(
            INVOICE_INCLUDED_BLURB,
            f"Valid for {self.valid_days} days. Pricing in ZAR.",
        )
        if self.has_space(self.height_of(notes, self.width, 9) + 6):
            self.y = self.paragraph(self.left, self.y, notes, self.width, 9, self.colors["gray6"])

        self.draw_footer(self.page_h - FOOTER_H + 2)


def build_invoice_pdf(invoice: Mapping[str, Any]) -> bytes:
    """Render a single-page invoice to PDF bytes."""
    return InvoiceRenderer(invoice).render()
