from __future__ import annotations

from datetime import date
from pathlib import Path

import fitz  # PyMuPDF
import pytest

from letterdesk import config
from letterdesk.errors import ExportError, ExportInProgressError
from letterdesk.models import Signer, TemplateKind
from letterdesk.pipeline import export as export_module
from letterdesk.pipeline.export import (
    ExportEngine,
    ExportFormat,
    MIME_TYPES,
    export_filename,
    rasterize_pages,
    save_artifact,
)
from letterdesk.pipeline.render import LetterState, derive_view
from letterdesk.pipeline.render_pdf import render_layout_pdf
from letterdesk.storage import DirectorySink


SIGNER = Signer(id=3, name="Brandon Shrair", title="CEO")
TODAY = date(2026, 10, 19)


def _engine() -> ExportEngine:
    return ExportEngine(today=lambda: TODAY)


def test_filenames_embed_template_and_date() -> None:
    assert export_filename(TemplateKind.HRT, ExportFormat.PDF, TODAY) == "letter-hrt-2026-10-19.pdf"
    assert export_filename(TemplateKind.TRT, ExportFormat.WORD, TODAY) == "letter-trt-2026-10-19.doc"
    assert export_filename(TemplateKind.TRT, ExportFormat.RTF, TODAY) == "letter-trt-2026-10-19.rtf"


def test_mime_types() -> None:
    assert MIME_TYPES[ExportFormat.PDF] == "application/pdf"
    assert MIME_TYPES[ExportFormat.WORD] == "application/msword"
    assert MIME_TYPES[ExportFormat.TEXT] == "text/plain"
    assert MIME_TYPES[ExportFormat.RTF] == "application/rtf"
    assert MIME_TYPES[ExportFormat.HTML] == "text/html"


def test_text_export() -> None:
    view = derive_view(LetterState(body="Dear team,", signer=SIGNER))
    artifact = _engine().export_text(view)
    assert artifact.mime_type == "text/plain"
    assert artifact.filename == "letter-hrt-2026-10-19.txt"
    assert artifact.data.decode("utf-8") == "Dear team,\n\nBrandon Shrair\nCEO"


def test_layout_pdf_has_one_page_per_rendered_page(workspace) -> None:
    view = derive_view(LetterState(body="q " * 2500, signer=SIGNER))
    layout = render_layout_pdf(view)
    with fitz.open(stream=layout, filetype="pdf") as doc:
        assert doc.page_count == view.page_count
        text = doc.load_page(view.page_count - 1).get_text()
        assert "Brandon Shrair" in text
        assert "Brandon Shrair" not in doc.load_page(0).get_text()


def test_rasterize_uses_supersampling(workspace) -> None:
    view = derive_view(LetterState(body="Hello"))
    pixmaps = rasterize_pages(render_layout_pdf(view))
    assert len(pixmaps) == 1
    assert (pixmaps[0].width, pixmaps[0].height) == (1242, 1755)
    assert pixmaps[0].alpha == 0


def test_pdf_export_places_each_page_on_a4(workspace) -> None:
    view = derive_view(LetterState(body="p" * 3500, template=TemplateKind.HRT, signer=SIGNER))
    artifact = _engine().export_pdf(view)
    assert artifact.mime_type == "application/pdf"
    assert artifact.filename.endswith(".pdf")
    with fitz.open(stream=artifact.data, filetype="pdf") as doc:
        assert doc.page_count == 2
        for page in doc:
            assert page.rect.width == pytest.approx(595.28, abs=0.5)
            assert page.rect.height == pytest.approx(841.89, abs=0.5)
            assert len(page.get_images()) == 1


def test_pdf_export_failure_leaves_no_file(workspace, monkeypatch) -> None:
    def broken(layout_pdf: bytes, scale: float = 2.0):
        raise RuntimeError("rasterizer crashed")

    monkeypatch.setattr(export_module, "rasterize_pages", broken)
    engine = _engine()
    sink = DirectorySink(workspace / "downloads")
    view = derive_view(LetterState(body="Letter"))

    with pytest.raises(ExportError):
        save_artifact(engine.export_pdf(view), sink)

    assert engine.busy is False
    assert not (workspace / "downloads").exists() or not any((workspace / "downloads").iterdir())


def test_reentrant_export_is_rejected(workspace, monkeypatch) -> None:
    engine = _engine()
    view = derive_view(LetterState(body="Letter"))
    seen = {}
    original = export_module.rasterize_pages

    def nested(layout_pdf: bytes, scale: float = 2.0):
        seen["busy"] = engine.busy
        with pytest.raises(ExportInProgressError):
            engine.export_text(view)
        return original(layout_pdf, scale)

    monkeypatch.setattr(export_module, "rasterize_pages", nested)
    artifact = engine.export_pdf(view)

    assert seen["busy"] is True
    assert engine.busy is False
    assert artifact.data.startswith(b"%PDF")


def test_missing_letterhead_fails_export(workspace, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "ASSET_DIR", tmp_path / "nowhere")
    view = derive_view(LetterState(body="Letter"))
    with pytest.raises(ExportError):
        _engine().export_pdf(view)


def test_all_formats_save_through_sink(workspace) -> None:
    engine = _engine()
    sink = DirectorySink(workspace)
    view = derive_view(LetterState(body="Body {with} braces\\", template=TemplateKind.TRT, signer=SIGNER))
    saved = [save_artifact(engine.export(view, fmt), sink) for fmt in ExportFormat]

    assert sorted(path.name for path in saved) == [
        "letter-trt-2026-10-19.doc",
        "letter-trt-2026-10-19.html",
        "letter-trt-2026-10-19.pdf",
        "letter-trt-2026-10-19.rtf",
        "letter-trt-2026-10-19.txt",
    ]
    assert all(path.stat().st_size > 0 for path in saved)
    assert not list(workspace.glob("*.tmp"))
