from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from . import config
from .drafts import DraftStore
from .models import LetterDraft, Signer, TemplateKind
from .pipeline.render import LetterState, RenderedDocument, derive_view
from .signers import SignerDirectory, validate_signer
from .snippets import get_snippet
from .storage import read_json, write_json

logger = logging.getLogger(__name__)


def clamp_zoom(value: float) -> float:
    return max(config.ZOOM_MIN, min(config.ZOOM_MAX, float(value)))


@dataclass
class StatusMessage:
    text: str
    expires_at: float


class LetterSession:
    """
    Owns the mutable state of one letter: body, template, signer selection
    and display preferences. Every setter recomputes ``view``.
    """

    def __init__(
        self,
        store,
        signers: SignerDirectory,
        drafts: Optional[DraftStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.signers = signers
        self.drafts = drafts or DraftStore(store)
        self._clock = clock
        self._status: Optional[StatusMessage] = None

        self.body = ""
        self.template = TemplateKind.HRT
        self.selected_signer_id: Optional[int] = None
        self.pending_draft: Optional[LetterDraft] = self.drafts.load()

        self.dark_mode = bool(read_json(store, config.DARK_MODE_KEY, False))
        try:
            self.zoom = clamp_zoom(read_json(store, config.ZOOM_KEY, config.ZOOM_DEFAULT))
        except (TypeError, ValueError):
            self.zoom = config.ZOOM_DEFAULT

        self.view: RenderedDocument = derive_view(self.state())

    # -- derived ------------------------------------------------------------

    @property
    def active_signer(self) -> Optional[Signer]:
        return self.signers.get(self.selected_signer_id)

    def state(self) -> LetterState:
        return LetterState(body=self.body, template=self.template, signer=self.active_signer)

    def draft(self) -> LetterDraft:
        return LetterDraft(
            body=self.body,
            template=self.template,
            selected_signer_id=self.selected_signer_id,
        )

    def _changed(self, persist: bool = True) -> None:
        self.view = derive_view(self.state())
        if persist:
            self.drafts.save(self.draft())

    # -- letter -------------------------------------------------------------

    def set_body(self, body: str) -> None:
        self.body = body or ""
        self._changed()

    def set_template(self, template: TemplateKind | str) -> None:
        self.template = TemplateKind.parse(template)
        self._changed()

    def apply_snippet(self, key: str, today: Optional[date] = None) -> None:
        self.set_body(get_snippet(key).render(today))

    # -- signers ------------------------------------------------------------

    def list_signers(self) -> List[Signer]:
        return self.signers.list()

    def select_signer(self, signer_id: Optional[int]) -> None:
        if signer_id is not None and self.signers.get(signer_id) is None:
            raise KeyError(f"Unknown signer: {signer_id}")
        self.selected_signer_id = signer_id
        self._changed()

    def add_signer(self, name: str, title: str) -> Signer:
        name, title = validate_signer(name, title)
        return self.signers.add(name, title)

    def delete_signer(self, signer_id: int) -> bool:
        removed = self.signers.delete(signer_id)
        if signer_id == self.selected_signer_id:
            self.selected_signer_id = None
            self._changed()
        return removed

    # -- drafts -------------------------------------------------------------

    def restore_draft(self) -> bool:
        draft = self.pending_draft
        if draft is None:
            return False
        self.body = draft.body
        self.template = draft.template
        self.selected_signer_id = draft.selected_signer_id
        if self.active_signer is None:
            self.selected_signer_id = None
        self.pending_draft = None
        self._changed()
        return True

    def dismiss_draft(self) -> None:
        self.pending_draft = None

    def start_fresh(self) -> None:
        self.body = ""
        self.selected_signer_id = None
        self.pending_draft = None
        self.drafts.clear()
        self._changed(persist=False)

    def close(self) -> None:
        self.drafts.flush()

    # -- preferences --------------------------------------------------------

    def set_zoom(self, value: float) -> float:
        self.zoom = clamp_zoom(value)
        write_json(self.store, config.ZOOM_KEY, self.zoom)
        return self.zoom

    def set_dark_mode(self, enabled: bool) -> None:
        self.dark_mode = bool(enabled)
        write_json(self.store, config.DARK_MODE_KEY, self.dark_mode)

    # -- clipboard and status -----------------------------------------------

    def post_status(self, text: str, ttl: float = config.STATUS_TTL_SECONDS) -> None:
        self._status = StatusMessage(text=text, expires_at=self._clock() + ttl)

    @property
    def status(self) -> Optional[str]:
        if self._status is None:
            return None
        if self._clock() >= self._status.expires_at:
            self._status = None
            return None
        return self._status.text

    def copy_body(self, clipboard) -> bool:
        try:
            clipboard.copy(self.body)
        except Exception as exc:
            logger.warning("Clipboard copy failed: %s", exc)
            self.post_status(f"Copy failed: {exc}")
            return False
        self.post_status("Copied")
        return True
