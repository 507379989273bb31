from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from . import config
from .models import LetterDraft
from .storage import delete_key, read_json, write_json

logger = logging.getLogger(__name__)


class DraftStore:
    """
    Debounced persistence of the in-progress letter.

    Every ``save`` cancels the pending timer and schedules a new one, so a
    burst of edits ends in a single write holding the last draft.
    """

    def __init__(
        self,
        store,
        delay: float = config.DRAFT_DEBOUNCE_SECONDS,
        timer_factory: Callable[[float, Callable[[], None]], threading.Timer] = threading.Timer,
        key: str = config.DRAFT_KEY,
    ) -> None:
        self.store = store
        self.delay = delay
        self.key = key
        self._timer_factory = timer_factory
        self._timer = None
        self._pending: Optional[LetterDraft] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> Optional[LetterDraft]:
        return self._pending

    def save(self, draft: LetterDraft) -> None:
        if draft.is_blank:
            return
        with self._lock:
            self._cancel_timer()
            self._pending = draft
            timer = self._timer_factory(self.delay, self.flush)
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._timer = timer
            timer.start()

    def flush(self) -> bool:
        with self._lock:
            self._cancel_timer()
            draft = self._pending
            self._pending = None
        if draft is None:
            return False
        return write_json(self.store, self.key, draft.to_record())

    def load(self) -> Optional[LetterDraft]:
        record = read_json(self.store, self.key)
        if not isinstance(record, dict):
            return None
        try:
            return LetterDraft.from_record(record)
        except (ValueError, TypeError):
            logger.debug("Ignoring malformed draft record", exc_info=True)
            return None

    def clear(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._pending = None
        delete_key(self.store, self.key)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
