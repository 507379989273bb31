from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

import fitz  # PyMuPDF
from reportlab.lib.pagesizes import A4
from slugify import slugify

from .. import config
from ..errors import ExportError, ExportInProgressError
from ..models import TemplateKind
from .render import RenderedDocument
from .render_pdf import render_layout_pdf
from .text_formats import to_html, to_plain_text, to_rtf, to_word_markup

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    PDF = "pdf"
    WORD = "doc"
    TEXT = "txt"
    RTF = "rtf"
    HTML = "html"


MIME_TYPES: Dict[ExportFormat, str] = {
    ExportFormat.PDF: "application/pdf",
    ExportFormat.WORD: "application/msword",
    ExportFormat.TEXT: "text/plain",
    ExportFormat.RTF: "application/rtf",
    ExportFormat.HTML: "text/html",
}


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    mime_type: str
    data: bytes


def export_filename(template: TemplateKind, fmt: ExportFormat, today: Optional[date] = None) -> str:
    kind = TemplateKind.parse(template)
    day = (today or date.today()).isoformat()
    return f"{slugify(f'{config.EXPORT_PREFIX} {kind.value} {day}')}.{fmt.value}"


def rasterize_pages(layout_pdf: bytes, scale: float = config.PDF_SUPERSAMPLE) -> List[fitz.Pixmap]:
    """Rasterize every layout page in order onto an opaque white backdrop."""
    pixmaps: List[fitz.Pixmap] = []
    matrix = fitz.Matrix(scale, scale)
    with fitz.open(stream=layout_pdf, filetype="pdf") as doc:
        for index in range(doc.page_count):
            page = doc.load_page(index)
            pixmaps.append(page.get_pixmap(matrix=matrix, alpha=False))
    return pixmaps


def compose_pdf(pixmaps: List[fitz.Pixmap], page_size=A4) -> bytes:
    """Place one bitmap per A4 page, full width, height clamped to the page."""
    pw, ph = page_size
    with fitz.open() as out:
        for pix in pixmaps:
            page = out.new_page(width=pw, height=ph)
            height = min(pw * pix.height / float(pix.width), ph)
            page.insert_image(fitz.Rect(0, 0, pw, height), pixmap=pix, keep_proportion=False)
        return out.tobytes(garbage=3, deflate=True)


class ExportEngine:
    """
    Runs the export operations for a rendered document.

    Only one export runs at a time; a second call while one is in flight
    raises ``ExportInProgressError``.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self._today = today or date.today
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def export(self, document: RenderedDocument, fmt: ExportFormat) -> ExportArtifact:
        fmt = ExportFormat(fmt)
        if not self._lock.acquire(blocking=False):
            raise ExportInProgressError("An export is already running")
        try:
            data = self._serialize(document, fmt)
        finally:
            self._lock.release()
        artifact = ExportArtifact(
            filename=export_filename(document.template, fmt, self._today()),
            mime_type=MIME_TYPES[fmt],
            data=data,
        )
        logger.info("Exported %s (%d bytes, %d pages)", artifact.filename, len(data), document.page_count)
        return artifact

    def export_pdf(self, document: RenderedDocument) -> ExportArtifact:
        return self.export(document, ExportFormat.PDF)

    def export_word(self, document: RenderedDocument) -> ExportArtifact:
        return self.export(document, ExportFormat.WORD)

    def export_text(self, document: RenderedDocument) -> ExportArtifact:
        return self.export(document, ExportFormat.TEXT)

    def export_rtf(self, document: RenderedDocument) -> ExportArtifact:
        return self.export(document, ExportFormat.RTF)

    def export_html(self, document: RenderedDocument) -> ExportArtifact:
        return self.export(document, ExportFormat.HTML)

    def _serialize(self, document: RenderedDocument, fmt: ExportFormat) -> bytes:
        if fmt == ExportFormat.TEXT:
            return to_plain_text(document.body, document.signer).encode("utf-8")
        if fmt == ExportFormat.RTF:
            return to_rtf(document.body, document.signer)
        if fmt == ExportFormat.HTML:
            return to_html(document)
        if fmt == ExportFormat.WORD:
            return to_word_markup(document)
        return self._render_pdf(document)

    def _render_pdf(self, document: RenderedDocument) -> bytes:
        try:
            layout = render_layout_pdf(document)
            pixmaps = rasterize_pages(layout)
            if len(pixmaps) != document.page_count:
                raise ExportError(
                    f"Rasterized {len(pixmaps)} pages, expected {document.page_count}"
                )
            return compose_pdf(pixmaps)
        except ExportError:
            logger.exception("PDF export failed for %s letter", document.template.value)
            raise
        except Exception as exc:
            logger.exception("PDF export failed for %s letter", document.template.value)
            raise ExportError(f"PDF export failed: {exc}") from exc


def save_artifact(artifact: ExportArtifact, sink) -> Path:
    return sink.save(artifact.filename, artifact.data)
