from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable, List

from sqlalchemy.exc import OperationalError

from letterdesk.drafts import DraftStore
from letterdesk.models import LetterDraft, TemplateKind
from letterdesk.storage import MemoryStore


class FakeTimer:
    def __init__(self, delay: float, fn: Callable[[], None]) -> None:
        self.delay = delay
        self.fn = fn
        self.cancelled = False

    def start(self) -> None:
        TIMERS.append(self)

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.fn()


TIMERS: List[FakeTimer] = []


class CountingStore(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.writes: List[str] = []

    def set(self, key: str, value: str) -> None:
        self.writes.append(value)
        super().set(key, value)


class BrokenStore:
    def get(self, key: str):
        raise OperationalError("select", {}, Exception("disk I/O error"))

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")

    def delete(self, key: str) -> None:
        raise OSError("quota exceeded")


def _drafts(store) -> DraftStore:
    TIMERS.clear()
    return DraftStore(store, delay=0.6, timer_factory=FakeTimer)


def test_rapid_edits_coalesce_into_one_write() -> None:
    store = CountingStore()
    drafts = _drafts(store)
    for n in range(1, 8):
        drafts.save(LetterDraft(body="Dear " * n))

    assert len(TIMERS) == 7
    assert all(timer.delay == 0.6 for timer in TIMERS)
    for timer in TIMERS:
        timer.fire()

    assert len(store.writes) == 1
    assert json.loads(store.writes[0])["body"] == "Dear " * 7


def test_blank_draft_is_not_saved() -> None:
    store = CountingStore()
    drafts = _drafts(store)
    drafts.save(LetterDraft(body=""))
    assert TIMERS == []
    assert drafts.flush() is False
    assert store.writes == []


def test_signer_only_draft_is_saved() -> None:
    store = CountingStore()
    drafts = _drafts(store)
    drafts.save(LetterDraft(body="", selected_signer_id=2))
    drafts.flush()
    assert drafts.load().selected_signer_id == 2


def test_load_round_trips_record() -> None:
    store = MemoryStore()
    drafts = _drafts(store)
    saved_at = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
    drafts.save(LetterDraft(body="Hi", template=TemplateKind.TRT, selected_signer_id=3, saved_at=saved_at))
    drafts.flush()

    record = json.loads(store.get("letter_draft"))
    assert record == {
        "body": "Hi",
        "templateKind": "TRT",
        "selectedSignerId": 3,
        "savedAt": "2026-10-19T09:30:00+00:00",
    }
    assert drafts.load() == LetterDraft(body="Hi", template=TemplateKind.TRT, selected_signer_id=3, saved_at=saved_at)


def test_clear_cancels_pending_write() -> None:
    store = CountingStore()
    drafts = _drafts(store)
    drafts.save(LetterDraft(body="typing"))
    drafts.clear()
    TIMERS[0].fire()
    assert store.writes == []
    assert drafts.load() is None


def test_corrupt_record_loads_as_none() -> None:
    store = MemoryStore()
    store.set("letter_draft", "{not json")
    assert _drafts(store).load() is None
    store.set("letter_draft", json.dumps({"body": "x", "templateKind": "XYZ"}))
    assert _drafts(store).load() is None


def test_storage_failures_are_ignored() -> None:
    drafts = _drafts(BrokenStore())
    drafts.save(LetterDraft(body="still usable"))
    assert drafts.flush() is False
    assert drafts.load() is None
    drafts.clear()


def test_browser_timestamp_with_z_suffix_loads() -> None:
    store = MemoryStore()
    store.set(
        "letter_draft",
        json.dumps({"body": "Hi", "templateKind": "HRT", "selectedSignerId": None, "savedAt": "2026-10-19T08:30:00.000Z"}),
    )
    draft = _drafts(store).load()
    assert draft is not None
    assert draft.saved_at == datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
