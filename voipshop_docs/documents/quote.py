from __future__ import annotations

from typing import Any, List, Mapping

from ..pdf_constants import DEFAULT_COLORS, INCLUDED_BLURB
from ..pricing import TableRow, quote_row
from .charges import ChargesMetrics, ChargesRenderer, item_list

QUOTE_METRICS = ChargesMetrics(
    margin=46,
    header_top=22,
    logo_width=150,
    title_size=22,
    meta_size=10,
    company_gap=24,
    company_name_size=12,
    bill_to_gap=14,
    bill_to_size=11,
    text_size=10,
    cards_top_gap=14,
    card_gap=12,
    card_h=48,
    card_radius=12,
    card_pad=12,
    card_title_size=9,
    card_value_size=14,
    card_subtitle_size=9,
    card_title_dy=8,
    card_value_dy=22,
    after_cards=16,
    section_size=12,
    section_gap=20,
    head_h=20,
    head_size=10,
    head_text_dy=5,
    row_h=24,
    row_size=10,
    row_text_dy=6,
    totals_gap=10,
    totals_size=10,
    totals_step=16,
    totals_label_w=140,
    totals_value_w=120,
    band_radius=10,
    band_pad=12,
    band_label_size=12,
    band_value_size=12,
    band_text_dy=9,
)

COMPACT_QUOTE_METRICS = ChargesMetrics(
    margin=40,
    header_top=22,
    logo_width=130,
    title_size=20,
    meta_size=10,
    company_gap=18,
    company_name_size=12,
    bill_to_gap=12,
    bill_to_size=11,
    text_size=10,
    cards_top_gap=10,
    card_gap=12,
    card_h=44,
    card_radius=12,
    card_pad=12,
    card_title_size=9,
    card_value_size=13,
    card_subtitle_size=9,
    card_title_dy=8,
    card_value_dy=22,
    after_cards=12,
    section_size=12,
    section_gap=18,
    head_h=18,
    head_size=10,
    head_text_dy=3,
    row_h=20,
    row_size=10,
    row_text_dy=4,
    totals_gap=8,
    totals_size=10,
    totals_step=14,
    totals_label_w=130,
    totals_value_w=110,
    band_radius=10,
    band_pad=12,
    band_label_size=12,
    band_value_size=12,
    band_text_dy=7,
)

# Reserve kept below a row before a page break is forced.
ROW_RESERVE = 160
EMPTY_RESERVE = 120


class QuoteRenderer(ChargesRenderer):
    """Quote that flows onto extra pages, each with the stamp and footer."""

    title = "Quote"
    number_label = "Quote #"
    number_key = "quoteNumber"
    fallback_colors = DEFAULT_COLORS

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.compact = bool(data.get("compact"))
        self.metrics = COMPACT_QUOTE_METRICS if self.compact else QUOTE_METRICS
        super().__init__(data)

    def on_page_added(self) -> None:
        self.paint_stamp(self.data.get("stamp"), size=self.stamp_size)
        self.draw_footer()

    def ensure_space(self, need: float) -> None:
        if self.y > self.page_h - need:
            self.add_page()

    def draw_table(self, title: str, items: List[Mapping[str, Any]], monthly: bool) -> None:
        m = self.metrics
        self.y = self.draw_section_title(title, self.y)
        self.y = self.draw_table_head(self.y) + 2

        if not items:
            self.ensure_space(EMPTY_RESERVE)
            self.y = self.paragraph(self.left + 8, self.y, "No items.", self.width - 16, m.row_size, self.colors["ink"])
            self.y += 6
        for index, item in enumerate(items):
            self.ensure_space(ROW_RESERVE)
            row: TableRow = quote_row(item, monthly)
            self.y = self.draw_row(self.y, index, row)

        self.y = self.draw_totals(self.y, monthly) + (4 if self.compact else 6)

    def draw(self) -> None:
        self.add_page()
        self.draw_hairline()
        self.draw_header()
        self.draw_parties()
        self.draw_summary_cards()

        self.draw_table("Once-off Charges", item_list(self.data.get("itemsOnceOff")), monthly=False)
        self.y += 8 if self.compact else 10
        self.draw_table("Monthly Charges", item_list(self.data.get("itemsMonthly")), monthly=True)
        self.y += 12 if self.compact else 14

        band_h = 30 if self.compact else 34
        self.ensure_space(band_h + 80)
        self.draw_pay_band(self.y + 4, band_h)
        self.y += 4 + band_h + (20 if self.compact else 24)

        blurb = self.notes_text(
            INCLUDED_BLURB,
            f"This quote is valid for {self.valid_days} days. Pricing in ZAR.",
        )
        if not self.has_space(self.height_of(blurb, self.width, 9)):
            self.add_page()
        self.y = self.paragraph(self.left, self.y, blurb, self.width, 9, self.colors["gray6"])


def build_quote_pdf(quote: Mapping[str, Any]) -> bytes:
    """Render a quote to PDF bytes."""
    return QuoteRenderer(quote).render()
