"""
Storage configuration for smart-memory.

A :class:`MemoryConfig` is resolved once (from the environment or from CLI
flags) and handed to the :class:`~smart_memory.store.KnowledgeStore`; nothing
else reads the environment.

Environment variables:
    SMART_MEMORY_DIR  - root directory for all databases (default: ~/.smart-memory)
    SMART_MEMORY_DB   - logical database name (default: default)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_DATA_DIR = Path.home() / ".smart-memory"
DEFAULT_DATABASE = "default"

KNOWLEDGE_FILENAME = "knowledge.json"
INDEX_FILENAME = "index.json"


@dataclass(frozen=True)
class MemoryConfig:
    """Where one logical database lives on disk."""

    data_dir: Path = DEFAULT_DATA_DIR
    database: str = DEFAULT_DATABASE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> MemoryConfig:
        env = os.environ if environ is None else environ
        data_dir = env.get("SMART_MEMORY_DIR") or str(DEFAULT_DATA_DIR)
        database = env.get("SMART_MEMORY_DB") or DEFAULT_DATABASE
        return cls(data_dir=Path(data_dir).expanduser(), database=database)

    @property
    def storage_path(self) -> Path:
        return Path(self.data_dir) / self.database

    @property
    def knowledge_file(self) -> Path:
        return self.storage_path / KNOWLEDGE_FILENAME

    @property
    def index_file(self) -> Path:
        return self.storage_path / INDEX_FILENAME

    def ensure_storage(self) -> Path:
        """Create the storage directory if needed and return it.

        Raises ``OSError`` when the directory cannot be created.
        """
        path = self.storage_path
        path.mkdir(parents=True, exist_ok=True)
        return path
