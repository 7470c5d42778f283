"""Drawing primitives shared by every document builder."""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, Mapping, Optional

from fpdf import FPDF

from ..fonts import FontManager
from ..formatting import round_rect, wrap_text
from ..pagination import has_space, space_left
from ..pdf_constants import (
    ASCENT,
    FOOTER_H,
    LINE_HEIGHT,
    PAGE_H,
    PAGE_W,
    STAMP_ANGLE,
    STAMP_COLOR,
    STAMP_OPACITY,
    Color,
    hex_to_rgb,
)

LOGGER = logging.getLogger(__name__)


class DocumentRenderer:
    """A4 canvas in points with a top-left origin and a running cursor ``y``.

    Subclasses implement ``draw``; ``render`` returns the PDF bytes.
    """

    margin: float = 46
    footer_h: float = FOOTER_H
    max_pages: Optional[int] = None

    def __init__(self, data: Mapping[str, Any]) -> None:
        self.data = data
        self.pdf = FPDF(orientation="P", unit="pt", format="A4")
        self.pdf.set_auto_page_break(False)
        self.pdf.set_margins(self.margin, self.margin, self.margin)
        self.fonts = FontManager(self.pdf)
        self.page_w = PAGE_W
        self.page_h = PAGE_H
        self.left = self.margin
        self.right = self.page_w - self.margin
        self.width = self.right - self.left
        self.y = self.margin

    # -- pages -------------------------------------------------------------

    @property
    def page_number(self) -> int:
        return self.pdf.page_no()

    @property
    def page_bottom(self) -> float:
        return self.page_h - self.margin

    def add_page(self) -> bool:
        """Start a new page unless the page cap is reached."""
        if self.max_pages is not None and self.pdf.page_no() >= self.max_pages:
            return False
        self.pdf.add_page()
        self.y = self.margin
        self.on_page_added()
        return True

    def on_page_added(self) -> None:
        """Hook for per-page decorations (stamps, footers)."""

    def has_space(self, need: float, y: Optional[float] = None) -> bool:
        return has_space(self.y if y is None else y, need, self.page_bottom, self.footer_h)

    def space_left(self) -> float:
        return space_left(self.y, self.page_bottom, self.footer_h)

    # -- colour and text ---------------------------------------------------

    @staticmethod
    def rgb(color: Any) -> Color:
        if isinstance(color, tuple):
            return color
        return hex_to_rgb(color)

    def text_width(self, text: str, size: float, bold: bool = False, italic: bool = False) -> float:
        return self.fonts.text_width(text, size, bold=bold, italic=italic)

    def line_height(self, size: float, line_gap: float = 0.0) -> float:
        return size * LINE_HEIGHT + line_gap

    def text(
        self,
        x: float,
        top: float,
        text: Any,
        size: float,
        color: Any,
        bold: bool = False,
        italic: bool = False,
        width: Optional[float] = None,
        align: str = "L",
    ) -> float:
        """Draw one line whose top edge sits at ``top``; returns the x after it."""
        value = str(text if text is not None else "")
        text_w = self.text_width(value, size, bold=bold, italic=italic)
        if width is not None and align == "R":
            x = x + width - text_w
        elif width is not None and align == "C":
            x = x + (width - text_w) / 2.0
        self.fonts.draw_text(x, top + size * ASCENT, value, size, self.rgb(color), bold=bold, italic=italic)
        return x + text_w

    def wrap(self, text: Any, width: float, size: float, bold: bool = False) -> list:
        return wrap_text(self.fonts, str(text if text is not None else ""), width, size, bold=bold)

    def height_of(self, text: Any, width: float, size: float, bold: bool = False, line_gap: float = 0.0) -> float:
        if text is None or str(text) == "":
            return 0.0
        return len(self.wrap(text, width, size, bold=bold)) * self.line_height(size, line_gap)

    def paragraph(
        self,
        x: float,
        top: float,
        text: Any,
        width: float,
        size: float,
        color: Any,
        bold: bool = False,
        italic: bool = False,
        line_gap: float = 0.0,
        align: str = "L",
    ) -> float:
        """Draw wrapped text and return the y below it."""
        if text is None or str(text) == "":
            return top
        step = self.line_height(size, line_gap)
        y = top
        for line in self.wrap(text, width, size, bold=bold):
            self.text(x, y, line, size, color, bold=bold, italic=italic, width=width, align=align)
            y += step
        return y

    def ellipsized(self, text: Any, width: float, size: float) -> str:
        value = str(text if text is not None else "")
        if self.text_width(value, size) <= width:
            return value
        while value and self.text_width(value + "...", size) > width:
            value = value[:-1]
        return value + "..."

    # -- shapes ------------------------------------------------------------

    def fill_rect(self, x: float, y: float, w: float, h: float, color: Any) -> None:
        self.pdf.set_fill_color(*self.rgb(color))
        self.pdf.rect(x, y, w, h, "F")

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: Any, line_width: float = 1) -> None:
        self.pdf.set_draw_color(*self.rgb(color))
        self.pdf.set_line_width(line_width)
        self.pdf.rect(x, y, w, h, "D")

    def rounded(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: float,
        fill: Any = None,
        stroke: Any = None,
        line_width: float = 1,
    ) -> None:
        if fill is not None:
            self.pdf.set_fill_color(*self.rgb(fill))
            round_rect(self.pdf, x, y, w, h, radius, style="F")
        if stroke is not None:
            self.pdf.set_draw_color(*self.rgb(stroke))
            self.pdf.set_line_width(line_width)
            round_rect(self.pdf, x, y, w, h, radius, style="D")

    def line(self, x1: float, y1: float, x2: float, y2: float, color: Any, line_width: float = 1) -> None:
        self.pdf.set_draw_color(*self.rgb(color))
        self.pdf.set_line_width(line_width)
        self.pdf.line(x1, y1, x2, y2)

    def hline(self, y: float, color: Any, x1: Optional[float] = None, x2: Optional[float] = None, line_width: float = 1) -> None:
        self.line(self.left if x1 is None else x1, y, self.right if x2 is None else x2, y, color, line_width)

    def dot(self, cx: float, cy: float, radius: float, color: Any) -> None:
        self.rounded(cx - radius, cy - radius, radius * 2, radius * 2, radius, fill=color)

    def image(
        self,
        data: bytes,
        x: float,
        y: float,
        width: Optional[float] = None,
        max_width: Optional[float] = None,
        max_height: Optional[float] = None,
    ) -> bool:
        """Place an image; a broken image is logged and skipped."""
        try:
            if max_width and max_height:
                self.pdf.image(io.BytesIO(data), x, y, w=max_width, h=max_height, keep_aspect_ratio=True)
            else:
                self.pdf.image(io.BytesIO(data), x, y, w=width or max_width or 0)
        except Exception as exc:  # fpdf/Pillow raise a wide range of decode errors
            LOGGER.warning("Skipping unreadable logo image: %s", exc)
            return False
        return True

    # -- decorations -------------------------------------------------------

    def paint_stamp(self, text: Any, size: float = 90) -> None:
        """Rotated translucent watermark such as DRAFT or PAID."""
        if not text:
            return
        cx, cy = self.page_w / 2, self.page_h / 2
        with self.pdf.local_context(fill_opacity=STAMP_OPACITY):
            with self.pdf.rotation(angle=STAMP_ANGLE, x=cx, y=cy):
                self.text(
                    self.page_w * 0.1,
                    self.page_h * 0.25,
                    str(text),
                    size,
                    STAMP_COLOR,
                    bold=True,
                    width=self.page_w * 0.8,
                    align="C",
                )

    # -- output ------------------------------------------------------------

    def draw(self) -> None:
        raise NotImplementedError

    def render(self) -> bytes:
        self.draw()
        pdf_blob = self.pdf.output()
        if isinstance(pdf_blob, (bytes, bytearray)):
            return bytes(pdf_blob)
        if isinstance(pdf_blob, str):
            try:
                return pdf_blob.encode("latin-1")
            except UnicodeEncodeError as exc:
                raise RuntimeError(
                    "PDF serialization failed due to non-Latin-1 content. "
                    "Check Unicode font configuration (VOIPSHOP_FONT_PATH/VOIPSHOP_FONT_BOLD_PATH)."
                ) from exc
        raise RuntimeError(f"Unexpected PDF output type: {type(pdf_blob).__name__}")


def palette(company: Optional[Mapping[str, Any]], fallback: Mapping[str, str]) -> Dict[str, Color]:
    colors = (company or {}).get("colors") or {}
    return {name: hex_to_rgb(colors.get(name) or default) for name, default in fallback.items()}
