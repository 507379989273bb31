from __future__ import annotations

import io
import re
from typing import List, Tuple

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from .. import config
from .render import Page, PageFrame, RenderedDocument


def _hex(value: str, default=colors.black) -> colors.Color:
    if not value:
        return default
    try:
        return colors.HexColor("#" + str(value).lstrip("#"))
    except ValueError:
        return default


def _break_token(canv: canvas.Canvas, token: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """Hard-break a token wider than the line into chunks that fit."""
    chunks: List[str] = []
    cur = ""
    for ch in token:
        if cur and canv.stringWidth(cur + ch, font_name, font_size) > max_width:
            chunks.append(cur)
            cur = ""
        cur += ch
    if cur:
        chunks.append(cur)
    return chunks


def _wrap_words(canv: canvas.Canvas, text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """
    Word wrap with ``white-space: pre-wrap`` rules: explicit newlines, runs of
    spaces and leading indentation are kept; whitespace at a wrap point is
    dropped. A word wider than the line breaks inside the word.
    """
    lines: List[str] = []
    for paragraph in (text or "").replace("\r\n", "\n").split("\n"):
        cur = ""
        for token in re.split(r"(\s+)", paragraph):
            if not token:
                continue
            if canv.stringWidth(cur + token, font_name, font_size) <= max_width:
                cur += token
                continue
            if token.isspace():
                lines.append(cur)
                cur = ""
                continue
            if cur:
                lines.append(cur)
            *full, cur = _break_token(canv, token, font_name, font_size, max_width)
            lines.extend(full)
        lines.append(cur)
    return lines


def _content_box(frame: PageFrame, pw: float, ph: float) -> Tuple[float, float, float, float]:
    """Return (x, y_top, width, y_bottom) in PDF coordinates."""
    x = pw * frame.left / 100.0
    width = pw - x - pw * frame.right / 100.0
    y_top = ph - ph * frame.top / 100.0
    y_bottom = ph * frame.bottom / 100.0
    return x, y_top, width, y_bottom


def _draw_background(canv: canvas.Canvas, page: Page, pw: float, ph: float) -> None:
    # opaque white first so transparent artwork never shows the page beneath
    canv.setFillColor(colors.white)
    canv.rect(0, 0, pw, ph, stroke=0, fill=1)
    if page.background is None:
        return
    if not page.background.exists():
        raise FileNotFoundError(f"Letterhead image missing: {page.background}")
    canv.drawImage(str(page.background), 0, 0, width=pw, height=ph)


def _draw_signer(canv: canvas.Canvas, page: Page, x: float, y_bottom: float) -> float:
    """Draw the signer block at the foot of the content box; return its top."""
    size = config.FONT_SIZE
    leading = size * config.LINE_HEIGHT
    title_size = size * 0.9

    canv.setFillColor(_hex(config.SIGNER_TITLE_COLOR))
    canv.setFont(config.FONT_NAME, title_size)
    canv.drawString(x, y_bottom + leading * 0.35, page.signer.title)

    canv.setFillColor(_hex(config.SIGNER_NAME_COLOR))
    canv.setFont(config.FONT_BOLD, size)
    canv.drawString(x, y_bottom + leading * 1.35, page.signer.name)
    return y_bottom + leading * 2.0


def _draw_page(canv: canvas.Canvas, page: Page, pw: float, ph: float) -> None:
    _draw_background(canv, page, pw, ph)
    x, y_top, width, y_bottom = _content_box(page.frame, pw, ph)

    body_floor = y_bottom
    if page.is_last and page.signer is not None:
        # signer sits below the body with a 4% gap
        body_floor = _draw_signer(canv, page, x, y_bottom) + 0.04 * (y_top - y_bottom)

    size = config.FONT_SIZE
    leading = size * config.LINE_HEIGHT
    canv.saveState()
    clip = canv.beginPath()
    clip.rect(x, body_floor, width, y_top - body_floor)
    canv.clipPath(clip, stroke=0, fill=0)
    canv.setFillColor(_hex(config.TEXT_COLOR))
    canv.setFont(config.FONT_NAME, size)

    y = y_top - size
    for line in _wrap_words(canv, page.body, config.FONT_NAME, size, width):
        if y < body_floor:
            break
        canv.drawString(x, y, line)
        y -= leading
    canv.restoreState()


def render_layout_pdf(document: RenderedDocument) -> bytes:
    """
    Draw ``document`` into an unscaled layout PDF, one page per rendered page.

    This is the offscreen instance used by export; it never depends on any
    on-screen preview state.
    """
    pw, ph = config.LAYOUT_PAGE_SIZE
    buffer = io.BytesIO()
    canv = canvas.Canvas(buffer, pagesize=(pw, ph))
    for page in document.pages:
        _draw_page(canv, page, pw, ph)
        canv.showPage()
    canv.save()
    return buffer.getvalue()
