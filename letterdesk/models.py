from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel, Session, create_engine

from . import config
from .errors import ValidationError


class TemplateKind(str, Enum):
    HRT = "HRT"
    TRT = "TRT"

    @classmethod
    def parse(cls, value: "str | TemplateKind") -> "TemplateKind":
        try:
            return cls(str(getattr(value, "value", value)).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown template kind: {value}") from None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Signer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    title: str
    created_at: datetime = Field(default_factory=_utcnow)


class StoredValue(SQLModel, table=True):
    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=_utcnow)


def _parse_timestamp(raw: str) -> datetime:
    # browsers write toISOString() with a trailing Z
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


@dataclass(frozen=True)
class LetterDraft:
    body: str
    template: TemplateKind = TemplateKind.HRT
    selected_signer_id: Optional[int] = None
    saved_at: datetime = field(default_factory=_utcnow)

    @property
    def is_blank(self) -> bool:
        return not self.body and self.selected_signer_id is None

    def to_record(self) -> dict:
        return {
            "body": self.body,
            "templateKind": self.template.value,
            "selectedSignerId": self.selected_signer_id,
            "savedAt": self.saved_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict) -> "LetterDraft":
        signer_id = record.get("selectedSignerId")
        draft = cls(
            body=str(record.get("body") or ""),
            template=TemplateKind.parse(record.get("templateKind") or TemplateKind.HRT),
            selected_signer_id=int(signer_id) if signer_id is not None else None,
        )
        saved_raw = record.get("savedAt")
        if saved_raw:
            draft = replace(draft, saved_at=_parse_timestamp(str(saved_raw)))
        return draft


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
