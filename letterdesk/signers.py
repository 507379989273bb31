from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from sqlmodel import select

from . import config
from .errors import ValidationError
from .models import Signer, StoredValue, get_session, init_db


def validate_signer(name: str, title: str) -> Tuple[str, str]:
    name = (name or "").strip()
    title = (title or "").strip()
    if not name:
        raise ValidationError("Signer name is required")
    if not title:
        raise ValidationError("Signer title is required")
    return name, title


class SignerDirectory:
    """Signer records kept in the ``signer`` table."""

    def __init__(self, seed: Iterable[Tuple[str, str]] | None = None) -> None:
        init_db()
        self._seed_once(config.DEFAULT_SIGNERS if seed is None else seed)

    def _seed_once(self, seed: Iterable[Tuple[str, str]]) -> None:
        # deleting every signer must not bring the defaults back
        with get_session() as session:
            if session.get(StoredValue, config.SIGNERS_SEEDED_KEY) is not None:
                return
            if session.exec(select(Signer)).first() is None:
                rows = [validate_signer(name, title) for name, title in seed]
                session.add_all([Signer(name=name, title=title) for name, title in rows])
            session.add(StoredValue(key=config.SIGNERS_SEEDED_KEY, value="true"))
            session.commit()

    def list(self) -> List[Signer]:
        with get_session() as session:
            return list(session.exec(select(Signer).order_by(Signer.id)))

    def get(self, signer_id: Optional[int]) -> Optional[Signer]:
        if signer_id is None:
            return None
        with get_session() as session:
            return session.get(Signer, signer_id)

    def add(self, name: str, title: str) -> Signer:
        name, title = validate_signer(name, title)
        signer = Signer(name=name, title=title)
        with get_session() as session:
            session.add(signer)
            session.commit()
            session.refresh(signer)
        return signer

    def delete(self, signer_id: int) -> bool:
        with get_session() as session:
            signer = session.get(Signer, signer_id)
            if signer is None:
                return False
            session.delete(signer)
            session.commit()
        return True
