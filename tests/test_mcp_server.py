"""Tests for the MCP server tools."""

from __future__ import annotations

import asyncio
import json

import pytest

import smart_memory.mcp_server as mcp_module
from smart_memory.memory import MemoryManager


def _call_tool(name: str, arguments: dict) -> dict:
    """Invoke a tool through FastMCP and decode its JSON text result."""
    result = asyncio.run(mcp_module.mcp.call_tool(name, arguments))
    # Newer FastMCP versions return (content, structured_content).
    if isinstance(result, tuple):
        result = result[0]
    return json.loads(result[0].text)


@pytest.fixture(autouse=True)
def _isolated_manager(monkeypatch, memory_manager: MemoryManager):
    """
    Replace the module-level _manager singleton with a MemoryManager on a
    temporary directory so tests don't share state.
    """
    monkeypatch.setattr(mcp_module, "_manager", memory_manager)
    return memory_manager


class TestMCPTools:
    def test_learn_returns_json(self):
        data = json.loads(mcp_module.memory_learn("Alice likes Python.", tags=["user"]))
        assert data["id"] == 1
        assert data["total"] == 1
        assert data["message"].startswith("Stored:")

    def test_learn_blank_content_reports_error(self):
        data = json.loads(mcp_module.memory_learn("   "))
        assert data["success"] is False
        assert "empty" in data["error"]

    def test_recall_empty(self):
        data = json.loads(mcp_module.memory_recall("anything"))
        assert data["results"] == []
        assert "message" in data

    def test_learn_then_recall(self):
        mcp_module.memory_learn(
            "React useEffect cleanup runs before re-render",
            category="pattern",
            tags=["react", "hooks"],
        )
        data = json.loads(mcp_module.memory_recall("cleanup effects react"))
        assert data["results"][0]["id"] == 1
        assert data["results"][0]["score"] >= 0.1

    def test_recall_category_and_limit(self):
        for i in range(4):
            mcp_module.memory_learn(f"Migration step {i} for billing", category="ops")
        mcp_module.memory_learn("Migration notes for search", category="dev")
        data = json.loads(mcp_module.memory_recall("migration", limit=2, category="ops"))
        assert len(data["results"]) == 2
        assert all(r["category"] == "ops" for r in data["results"])

    def test_stats_reflect_recall(self):
        mcp_module.memory_learn("Docker layer caching")
        mcp_module.memory_recall("docker caching")
        data = json.loads(mcp_module.memory_stats())
        assert data["totalEntries"] == 1
        assert data["totalAccesses"] == 1

    def test_patterns_needs_entries(self):
        data = json.loads(mcp_module.memory_patterns())
        assert "message" in data

    def test_patterns(self):
        for tags in (["ci", "error"], ["ci", "solution"], ["ci"]):
            mcp_module.memory_learn("Pipeline event", tags=tags)
        data = json.loads(mcp_module.memory_patterns())
        assert data["topTags"][0] == ["ci", 3]

    def test_suggest(self):
        mcp_module.memory_learn("Flaky test caused by shared tmp dir", tags=["error"])
        data = json.loads(mcp_module.memory_suggest("flaky test"))
        assert data["suggestions"][0]["type"] == "warning"
        assert data["suggestions"][0]["source"] == 1

    def test_evaluate(self):
        mcp_module.memory_learn("Rate me")
        data = json.loads(mcp_module.memory_evaluate(1, True, feedback="good"))
        assert data == {"success": True, "entryId": 1, "usefulness": 1}

    def test_evaluate_unknown_id(self):
        data = json.loads(mcp_module.memory_evaluate(7, False))
        assert data["success"] is False
        assert "not found" in data["message"]

    def test_unexpected_error_is_reported(self, monkeypatch, _isolated_manager):
        def boom():
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(_isolated_manager, "stats", boom)
        data = json.loads(mcp_module.memory_stats())
        assert data == {"success": False, "error": "disk on fire"}
        # The server keeps serving afterwards.
        assert "results" in json.loads(mcp_module.memory_recall("anything"))


class TestToolWireNames:
    """Tools accept the camelCase argument names of the original tool schema."""

    def test_schema_uses_camel_case_names(self):
        tools = {t.name: t for t in asyncio.run(mcp_module.mcp.list_tools())}
        recall_props = set(tools["memory_recall"].inputSchema["properties"])
        evaluate_schema = tools["memory_evaluate"].inputSchema
        assert recall_props == {"query", "limit", "category", "minScore"}
        assert set(evaluate_schema["properties"]) == {"entryId", "useful", "feedback"}
        assert set(evaluate_schema["required"]) == {"entryId", "useful"}

    def test_evaluate_with_entry_id(self):
        mcp_module.memory_learn("Rate me over the wire")
        data = _call_tool("memory_evaluate", {"entryId": 1, "useful": True})
        assert data == {"success": True, "entryId": 1, "usefulness": 1}

    def test_recall_honours_min_score(self):
        mcp_module.memory_learn("Helm chart values override order")
        assert _call_tool("memory_recall", {"query": "helm chart", "minScore": 0.1})["results"]
        assert _call_tool("memory_recall", {"query": "helm chart", "minScore": 5.0})["results"] == []


class TestGetManager:
    def test_builds_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setattr(mcp_module, "_manager", None)
        monkeypatch.setenv("SMART_MEMORY_DIR", str(tmp_path))
        monkeypatch.setenv("SMART_MEMORY_DB", "envdb")
        manager = mcp_module._get_manager()
        assert manager.config.storage_path == tmp_path / "envdb"
        assert mcp_module._get_manager() is manager


class TestMain:
    def test_exits_when_storage_cannot_be_created(self, monkeypatch, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        monkeypatch.setattr(mcp_module, "_manager", None)
        monkeypatch.setenv("SMART_MEMORY_DIR", str(blocker))
        monkeypatch.setattr(mcp_module.mcp, "run", lambda **kwargs: pytest.fail("server started"))
        with pytest.raises(SystemExit) as exc_info:
            mcp_module.main()
        assert exc_info.value.code == 1

    def test_runs_stdio_transport(self, monkeypatch):
        calls = []
        monkeypatch.setattr(mcp_module.mcp, "run", lambda **kwargs: calls.append(kwargs))
        mcp_module.main()
        assert calls == [{"transport": "stdio"}]
