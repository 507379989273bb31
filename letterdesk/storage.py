from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from . import config
from .models import StoredValue, get_session, init_db

logger = logging.getLogger(__name__)

# storage may be missing or broken; the app has to keep working without it
PERSISTENCE_ERRORS = (SQLAlchemyError, OSError, ValueError, TypeError)


class MemoryStore:
    """Key-value store kept in process memory."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class SqlStore:
    """Key-value store backed by the ``storedvalue`` table."""

    def __init__(self) -> None:
        init_db()

    def get(self, key: str) -> Optional[str]:
        with get_session() as session:
            row = session.get(StoredValue, key)
            return row.value if row is not None else None

    def set(self, key: str, value: str) -> None:
        with get_session() as session:
            row = session.get(StoredValue, key)
            if row is None:
                row = StoredValue(key=key, value=value)
            else:
                row.value = value
            session.add(row)
            session.commit()

    def delete(self, key: str) -> None:
        with get_session() as session:
            row = session.get(StoredValue, key)
            if row is not None:
                session.delete(row)
                session.commit()


def read_json(store, key: str, default: Any = None) -> Any:
    try:
        raw = store.get(key)
        if raw is None:
            return default
        return json.loads(raw)
    except PERSISTENCE_ERRORS:
        logger.debug("Ignoring unreadable value for %s", key, exc_info=True)
        return default


def write_json(store, key: str, value: Any) -> bool:
    try:
        store.set(key, json.dumps(value))
    except PERSISTENCE_ERRORS:
        logger.debug("Ignoring failed write for %s", key, exc_info=True)
        return False
    return True


def delete_key(store, key: str) -> None:
    try:
        store.delete(key)
    except PERSISTENCE_ERRORS:
        logger.debug("Ignoring failed delete for %s", key, exc_info=True)


class MemoryClipboard:
    def __init__(self) -> None:
        self.contents: List[str] = []

    def copy(self, text: str) -> None:
        self.contents.append(text)


class DirectorySink:
    """File-download port: writes artifacts into one directory."""

    def __init__(self, out_dir: Path | None = None) -> None:
        self.out_dir = Path(out_dir or config.OUT_DIR)

    def save(self, filename: str, data: bytes) -> Path:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        target = self.out_dir / filename
        fd, temp_name = tempfile.mkstemp(prefix=f".{filename}.", suffix=".tmp", dir=self.out_dir)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            temp_path.replace(target)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
        return target
