"""
JSON-file persistence for the knowledge base and its index.

Each logical database is a directory holding two independent documents:

    knowledge.json  {"entries": [...], "nextId": N}
    index.json      {"terms": {...}, "idf": {...}, "docCount": N}

Reads never fail: a missing or corrupt document falls back to an empty
default.  There is no locking; two processes writing the same database
can lose each other's updates.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from .config import MemoryConfig
from .models import Index, KnowledgeBase

logger = logging.getLogger(__name__)


class KnowledgeStore:
    """Loads and saves one database described by a :class:`MemoryConfig`."""

    def __init__(self, config: MemoryConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def load(self) -> KnowledgeBase:
        """Return the stored collection, or an empty one if unreadable."""
        data = self._read_json(self.config.knowledge_file)
        if data is None:
            return KnowledgeBase()
        try:
            return KnowledgeBase.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed %s: %s", self.config.knowledge_file, exc)
            return KnowledgeBase()

    def load_index(self) -> Index | None:
        """Return the stored index, or ``None`` if there is no usable one."""
        data = self._read_json(self.config.index_file)
        if data is None:
            return None
        try:
            return Index.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed %s: %s", self.config.index_file, exc)
            return None

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def save(self, kb: KnowledgeBase) -> None:
        """Overwrite the stored collection with *kb*."""
        self._write_json(self.config.knowledge_file, kb.to_dict())

    def save_index(self, index: Index) -> None:
        """Overwrite the stored index with *index*."""
        self._write_json(self.config.index_file, index.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _read_json(path: Path) -> Any | None:
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s, starting empty: %s", path, exc)
            return None

    def _write_json(self, path: Path, data: dict[str, Any]) -> None:
        self.config.ensure_storage()
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Wrote %s", path)
