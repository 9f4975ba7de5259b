"""Tests for MemoryConfig."""

from __future__ import annotations

from pathlib import Path

from smart_memory.config import DEFAULT_DATA_DIR, MemoryConfig


class TestMemoryConfig:
    def test_defaults_from_empty_environment(self):
        config = MemoryConfig.from_env({})
        assert config.data_dir == DEFAULT_DATA_DIR
        assert config.database == "default"

    def test_environment_overrides(self, tmp_path):
        config = MemoryConfig.from_env({"SMART_MEMORY_DIR": str(tmp_path), "SMART_MEMORY_DB": "work"})
        assert config.storage_path == tmp_path / "work"
        assert config.knowledge_file == tmp_path / "work" / "knowledge.json"
        assert config.index_file == tmp_path / "work" / "index.json"

    def test_empty_values_fall_back_to_defaults(self):
        config = MemoryConfig.from_env({"SMART_MEMORY_DIR": "", "SMART_MEMORY_DB": ""})
        assert config.database == "default"
        assert config.data_dir == DEFAULT_DATA_DIR

    def test_ensure_storage_creates_directory(self, tmp_path):
        config = MemoryConfig(data_dir=tmp_path / "a" / "b", database="db")
        path = config.ensure_storage()
        assert path == tmp_path / "a" / "b" / "db"
        assert path.is_dir()
        # Idempotent
        config.ensure_storage()

    def test_accepts_string_data_dir(self, tmp_path):
        config = MemoryConfig(data_dir=str(tmp_path), database="db")
        assert config.storage_path == Path(tmp_path) / "db"
