# Namespaced key-value storage.
#
# Source of truth is a SQLAlchemy table (SQLite by default). Every write is also
# mirrored, best effort, into a JSON file so a fresh process can show something
# immediately; that mirror read is provisional until the durable read settles.

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lifeflow_main.models.models_store import Base, KeyValue
from utils.config import CONFIG
from utils.persistance import read_document, rewrite_document

logger = logging.getLogger(__name__)


class KeyValueStore:
    def __init__(self,
                 database_url: Optional[str] = None,
                 mirror_path: Optional[str | Path] = None,
                 prefix: Optional[str] = None):
        cfg = CONFIG["storage"]
        self.database_url = database_url or cfg["database_url"]
        self.mirror_path = Path(mirror_path or cfg["mirror_path"])
        self.prefix = cfg["prefix"] if prefix is None else prefix

        connect_args = {"check_same_thread": False} if self.database_url.startswith("sqlite") else {}
        self.engine = create_engine(self.database_url, connect_args=connect_args)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    def _key(self, key: str) -> str:
        return self.prefix + key

    # -------------------------
    # Durable store
    # -------------------------
    def get(self, key: str, default: Any = None) -> Any:
        with self.SessionLocal() as s:
            row = s.get(KeyValue, self._key(key))
            if row is None:
                return default
            return json.loads(row.value)

    def set(self, key: str, value: Any) -> bool:
        with self.SessionLocal() as s:
            s.merge(KeyValue(key=self._key(key), value=json.dumps(value, ensure_ascii=False)))
            s.commit()
        self._mirror(lambda data: {**data, self._key(key): value})
        return True

    def remove(self, key: str) -> bool:
        with self.SessionLocal() as s:
            row = s.get(KeyValue, self._key(key))
            if row is None:
                removed = False
            else:
                s.delete(row)
                s.commit()
                removed = True
        self._mirror(lambda data: {k: v for k, v in data.items() if k != self._key(key)})
        return removed

    async def get_settled(self, key: str, default: Any = None) -> Any:
        return await asyncio.to_thread(self.get, key, default)

    # -------------------------
    # Mirror (provisional)
    # -------------------------
    def get_cached(self, key: str, default: Any = None) -> Any:
        return read_document(self.mirror_path).get(self._key(key), default)

    def _mirror(self, update_fn) -> None:
        try:
            rewrite_document(self.mirror_path, update_fn)
        except OSError as e:
            logger.warning("mirror write to %s failed: %s", self.mirror_path, e)

    def close(self) -> None:
        self.engine.dispose()
