from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

import typer

from . import config
from .assets import build_placeholder_letterheads
from .errors import ExportError, ValidationError
from .models import reset_engine
from .pipeline.export import ExportEngine, ExportFormat, save_artifact
from .session import LetterSession
from .signers import SignerDirectory
from .snippets import SNIPPETS, get_snippet
from .storage import DirectorySink, SqlStore

app = typer.Typer(help="Letterhead letter composer and exporter")
signers_app = typer.Typer(help="Manage signers")
draft_app = typer.Typer(help="Inspect the autosaved draft")
snippets_app = typer.Typer(help="Quick letter templates")
assets_app = typer.Typer(help="Letterhead background images")
app.add_typer(signers_app, name="signers")
app.add_typer(draft_app, name="draft")
app.add_typer(snippets_app, name="snippets")
app.add_typer(assets_app, name="assets")


@app.callback()
def main(
    out: Optional[Path] = typer.Option(None, "--out", help="Output and data directory"),
    assets: Optional[Path] = typer.Option(None, "--assets", help="Letterhead image directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress"),
) -> None:
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    if out:
        config.set_out_dir(out)
        reset_engine()
    if assets:
        config.set_asset_dir(assets)


def _open_session() -> LetterSession:
    store = SqlStore()
    return LetterSession(store, SignerDirectory())


def _load_body(body_file: Optional[Path], snippet: Optional[str], session: LetterSession) -> None:
    if snippet:
        session.apply_snippet(snippet)
    elif body_file:
        session.set_body(body_file.read_text(encoding="utf-8"))


def _fail(message: str) -> None:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


@app.command()
def preview(
    body_file: Optional[Path] = typer.Argument(None, help="Letter body text file"),
    template: str = typer.Option("HRT", "--template", "-t", help="HRT or TRT"),
    signer: Optional[int] = typer.Option(None, "--signer", help="Signer id"),
    snippet: Optional[str] = typer.Option(None, "--snippet", help="Quick template key"),
) -> None:
    session = _open_session()
    try:
        session.set_template(template)
        session.select_signer(signer)
        _load_body(body_file, snippet, session)
    except (ValidationError, KeyError) as exc:
        _fail(str(exc))
    finally:
        session.close()
    view = session.view
    typer.echo(f"{view.template.value} letter: {view.body_length} chars, {view.page_count} page(s)")
    for page in view.pages:
        kind = "letterhead" if page.is_first else "continuation"
        signed = f" + {page.signer.name}" if page.signer else ""
        typer.echo(f"  page {page.index + 1} [{kind}]: {len(page.body)} chars{signed}")
    if view.approaching_limit:
        typer.echo("Approaching page limit")
    if view.long_document:
        typer.echo("Long document")


@app.command()
def export(
    body_file: Optional[Path] = typer.Argument(None, help="Letter body text file"),
    template: str = typer.Option("HRT", "--template", "-t", help="HRT or TRT"),
    signer: Optional[int] = typer.Option(None, "--signer", help="Signer id"),
    snippet: Optional[str] = typer.Option(None, "--snippet", help="Quick template key"),
    formats: List[ExportFormat] = typer.Option([ExportFormat.PDF], "--format", "-f", help="Output format"),
    on: Optional[str] = typer.Option(None, "--date", help="Date for the filename (YYYY-MM-DD)"),
) -> None:
    session = _open_session()
    try:
        session.set_template(template)
        session.select_signer(signer)
        _load_body(body_file, snippet, session)
    except (ValidationError, KeyError) as exc:
        _fail(str(exc))
    finally:
        session.close()

    day = date.fromisoformat(on) if on else date.today()
    engine = ExportEngine(today=lambda: day)
    sink = DirectorySink(config.OUT_DIR)
    failed = False
    for fmt in formats:
        try:
            artifact = engine.export(session.view, fmt)
        except (ExportError, FileNotFoundError) as exc:
            typer.echo(f"FAILED {fmt.value}: {exc}", err=True)
            failed = True
            continue
        path = save_artifact(artifact, sink)
        typer.echo(f"{artifact.mime_type}: {path}")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def prefs(
    zoom: Optional[float] = typer.Option(None, "--zoom", help="Preview zoom (0.6 to 1.5)"),
    dark: Optional[bool] = typer.Option(None, "--dark/--light", help="Dark mode"),
) -> None:
    session = _open_session()
    if zoom is not None:
        session.set_zoom(zoom)
    if dark is not None:
        session.set_dark_mode(dark)
    typer.echo(f"zoom={session.zoom:.2f} dark_mode={session.dark_mode}")


@signers_app.command("list")
def signers_list() -> None:
    for item in SignerDirectory().list():
        typer.echo(f"{item.id}\t{item.name}\t{item.title}")


@signers_app.command("add")
def signers_add(
    name: str = typer.Argument(..., help="Signer name"),
    title: str = typer.Argument(..., help="Signer title"),
) -> None:
    session = _open_session()
    try:
        created = session.add_signer(name, title)
    except ValidationError as exc:
        _fail(str(exc))
    typer.echo(f"Added {created.id}: {created.name}")


@signers_app.command("remove")
def signers_remove(signer_id: int = typer.Argument(..., help="Signer id")) -> None:
    session = _open_session()
    removed = session.delete_signer(signer_id)
    if not removed:
        _fail(f"No signer with id {signer_id}")
    typer.echo(f"Removed {signer_id}")


@draft_app.command("show")
def draft_show() -> None:
    session = _open_session()
    draft = session.pending_draft
    if draft is None:
        typer.echo("No saved draft")
        return
    typer.echo(f"Saved draft from {draft.saved_at.isoformat()} ({draft.template.value}, {len(draft.body)} chars)")
    typer.echo(draft.body)


@draft_app.command("restore")
def draft_restore(
    out_file: Path = typer.Argument(..., help="Write the restored body here"),
) -> None:
    session = _open_session()
    if not session.restore_draft():
        _fail("No saved draft")
    session.close()
    out_file.write_text(session.body, encoding="utf-8")
    typer.echo(f"Restored {len(session.body)} chars ({session.template.value}) to {out_file}")


@draft_app.command("clear")
def draft_clear() -> None:
    session = _open_session()
    session.start_fresh()
    typer.echo("Draft cleared")


@snippets_app.command("list")
def snippets_list() -> None:
    for item in SNIPPETS:
        typer.echo(f"{item.key}\t{item.label}")


@snippets_app.command("show")
def snippets_show(key: str = typer.Argument(..., help="Snippet key")) -> None:
    try:
        typer.echo(get_snippet(key).render())
    except KeyError as exc:
        _fail(str(exc.args[0]))


@assets_app.command("init")
def assets_init() -> None:
    for path in build_placeholder_letterheads():
        typer.echo(f"Wrote {path}")


if __name__ == "__main__":
    app()
