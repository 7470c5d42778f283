"""Font discovery and text rendering helpers."""

from __future__ import annotations

import logging
import os
import threading
from typing import List, Optional, Tuple

from fpdf import FPDF

LOGGER = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Core PDF fonts only carry Latin-1; typographic punctuation is mapped down.
_LATIN1_FALLBACKS = str.maketrans(
    {
        "•": "·",  # bullet
        "–": "-",
        "—": "-",
        "‘": "'",
        "’": "'",
        "“": '"',
        "”": '"',
        "…": "...",
    }
)


def to_latin1(text: str) -> str:
    return text.translate(_LATIN1_FALLBACKS).encode("latin-1", "replace").decode("latin-1")


def find_font_path(env_var: str, candidates: List[str]) -> Optional[str]:
    override = os.getenv(env_var)
    if override and os.path.exists(override):
        return override

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


FONT_INIT_LOCK = threading.Lock()


class FontManager:
    FAMILY = "DocFont"
    CORE_FAMILY = "Helvetica"
    BUNDLED_DIR = os.path.join(_PROJECT_ROOT, "fonts")
    SYSTEM_DIRS = [
        "/usr/share/fonts/truetype/dejavu",
        "/usr/share/fonts/dejavu",
        "/Library/Fonts",
    ]

    def __init__(self, pdf: FPDF) -> None:
        self.pdf = pdf
        self.unicode = False
        self.has_bold = True
        self.has_italic = True

        regular_path = find_font_path("VOIPSHOP_FONT_PATH", self._candidates("DejaVuSans.ttf"))
        if not regular_path:
            self.family = self.CORE_FAMILY
            return

        bold_path = find_font_path("VOIPSHOP_FONT_BOLD_PATH", self._candidates("DejaVuSans-Bold.ttf"))
        italic_path = find_font_path(
            "VOIPSHOP_FONT_ITALIC_PATH", self._candidates("DejaVuSans-Oblique.ttf")
        )

        with FONT_INIT_LOCK:
            self.pdf.add_font(self.FAMILY, "", regular_path)
            if bold_path:
                self.pdf.add_font(self.FAMILY, "B", bold_path)
            if italic_path:
                self.pdf.add_font(self.FAMILY, "I", italic_path)
        self.family = self.FAMILY
        self.unicode = True
        self.has_bold = bold_path is not None
        self.has_italic = italic_path is not None

    def _candidates(self, filename: str) -> List[str]:
        return [os.path.join(self.BUNDLED_DIR, filename)] + [
            os.path.join(directory, filename) for directory in self.SYSTEM_DIRS
        ]

    def _style(self, bold: bool, italic: bool) -> str:
        style = ""
        if bold and self.has_bold:
            style += "B"
        # No bold-oblique face is registered for the TTF family.
        if italic and self.has_italic and not (self.unicode and style):
            style += "I"
        return style

    def prepare(self, text: str) -> str:
        text = str(text)
        return text if self.unicode else to_latin1(text)

    def set_font(self, size: float, bold: bool = False, italic: bool = False) -> None:
        self.pdf.set_font(self.family, self._style(bold, italic), size)

    def text_width(self, text: str, size: float, bold: bool = False, italic: bool = False) -> float:
        self.set_font(size, bold=bold, italic=italic)
        return self.pdf.get_string_width(self.prepare(text))

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        size: float,
        color: Tuple[int, int, int],
        bold: bool = False,
        italic: bool = False,
    ) -> None:
        """Draw ``text`` with its baseline at ``y``."""
        self.pdf.set_text_color(*color)
        self.set_font(size, bold=bold, italic=italic)
        value = self.prepare(text)
        if bold and not self.has_bold:
            self.pdf.text(x, y, value)
            self.pdf.text(x + 0.4, y, value)
        else:
            self.pdf.text(x, y, value)
