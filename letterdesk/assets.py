from __future__ import annotations

import io
from pathlib import Path
from typing import List

import fitz  # PyMuPDF
from reportlab.lib import colors
from reportlab.pdfgen import canvas

from . import config
from .models import TemplateKind


ACCENTS = {
    "HRT": "#0D6EFD",
    "TRT": "#0DCAF0",
}


def letterhead_path(template: TemplateKind) -> Path:
    kind = TemplateKind.parse(template)
    return Path(config.ASSET_DIR) / f"{kind.value.lower()}_letterhead.png"


def build_placeholder_letterhead(template: TemplateKind, path: Path | None = None) -> Path:
    """
    Draw a stand-in letterhead and save it as a 1242x1755 PNG.

    The header band ends where the template's content frame starts and the
    footer band starts at the footer line, so text placement can be checked
    without the production artwork.
    """
    kind = TemplateKind.parse(template)
    out_path = path or letterhead_path(kind)
    pw, ph = config.LAYOUT_PAGE_SIZE
    accent = colors.HexColor(ACCENTS[kind.value])

    buffer = io.BytesIO()
    canv = canvas.Canvas(buffer, pagesize=(pw, ph))

    header_h = ph * config.HEADER_END_PCT[kind.value] / 100.0
    footer_h = ph * (100.0 - config.FOOTER_START_PCT) / 100.0
    margin = pw * config.SIDE_INSETS_PCT[0] / 100.0

    canv.setFillColor(accent)
    canv.rect(0, ph - header_h * 0.35, pw, header_h * 0.35, stroke=0, fill=1)
    canv.setFillColor(colors.HexColor("#0D2B4E"))
    canv.setFont(config.FONT_BOLD, 20)
    canv.drawString(margin, ph - header_h * 0.7, f"{kind.value} Letterhead")
    canv.setStrokeColor(accent)
    canv.setLineWidth(1)
    canv.line(margin, ph - header_h + 6, pw - margin, ph - header_h + 6)

    canv.line(margin, footer_h - 4, pw - margin, footer_h - 4)
    canv.setFillColor(colors.HexColor("#4A6580"))
    canv.setFont(config.FONT_NAME, 8)
    canv.drawCentredString(pw / 2, footer_h * 0.45, "support@fountain.net")
    canv.showPage()
    canv.save()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with fitz.open(stream=buffer.getvalue(), filetype="pdf") as doc:
        page = doc.load_page(0)
        zoom = config.TEMPLATE_ASPECT[0] / float(page.rect.width)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        pix.save(str(out_path))
    return out_path


def build_placeholder_letterheads(asset_dir: Path | None = None) -> List[Path]:
    root = Path(asset_dir or config.ASSET_DIR)
    return [
        build_placeholder_letterhead(kind, root / f"{kind.value.lower()}_letterhead.png")
        for kind in TemplateKind
    ]
