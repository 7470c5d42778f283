"""Logo loading and the logo/title header used by the agreement documents."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Optional

import requests

from .config import HTTP_TIMEOUT_S
from .pdf_constants import HEADER_SUBTITLE, HEADER_TITLE

if TYPE_CHECKING:
    from .documents.base import DocumentRenderer

LOGGER = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOCAL_LOGO_CANDIDATES = [
    os.path.join(_PROJECT_ROOT, "assets", "logo.png"),
    os.path.join(_PROJECT_ROOT, "assets", "logo.jpg"),
]


def _read_local_logo() -> Optional[bytes]:
    override = os.getenv("VOIPSHOP_LOGO_PATH")
    candidates = [override] if override else []
    for path in candidates + LOCAL_LOGO_CANDIDATES:
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            LOGGER.warning("Could not read logo %s: %s", path, exc)
            continue
        if data:
            return data
    return None


def fetch_logo(url: str) -> Optional[bytes]:
    if not url:
        return None
    try:
        response = requests.get(url, timeout=HTTP_TIMEOUT_S)
    except requests.RequestException as exc:
        LOGGER.warning("Logo download failed for %s: %s", url, exc)
        return None
    if not response.ok or not response.content:
        LOGGER.warning("Logo download returned HTTP %s for %s", response.status_code, url)
        return None
    return response.content


def load_logo(url: str = "") -> Optional[bytes]:
    """Logo bytes from the bundled asset, else from ``url``; ``None`` when neither works."""
    local = _read_local_logo()
    if local:
        return local
    return fetch_logo(url)


def draw_logo_header(
    renderer: "DocumentRenderer",
    logo: Optional[bytes],
    align: str = "right",
    max_width: float = 140,
    max_height: float = 40,
    pad_x: float = 24,
    pad_y: float = 20,
    title: str = "",
    subtitle: str = "",
) -> float:
    """Draw the logo box plus title/subtitle and return the y below the header."""
    page_w = renderer.page_w

    if align == "left":
        x = pad_x
    elif align == "center":
        x = (page_w - max_width) / 2
    else:
        x = page_w - pad_x - max_width

    drew_logo = False
    if logo:
        drew_logo = renderer.image(logo, x, pad_y, max_width=max_width, max_height=max_height)

    text_x = x + (max_width + 8 if drew_logo else 0) if align == "left" else pad_x
    text_w = page_w - text_x - pad_x if align == "left" else page_w - pad_x * 2
    text_align = "C" if align == "center" else "L"

    bottom = pad_y
    if title or subtitle:
        y = pad_y + 2 if drew_logo else pad_y
        if title:
            y = renderer.paragraph(
                text_x, y, title, text_w, 11, HEADER_TITLE, bold=True, align=text_align
            )
        if subtitle:
            y = renderer.paragraph(
                text_x, y + 2, subtitle, text_w, 9, HEADER_SUBTITLE, align=text_align
            )
        bottom = y

    header_bottom = max(pad_y + (max_height if drew_logo else 0), bottom)
    return round(header_bottom + 18)
