"""
MCP (Model Context Protocol) server for smart-memory.

Exposes the MemoryManager as a set of tools so that an agent can learn
and recall knowledge across sessions.

Run as a stdio server:
    python -m smart_memory.mcp_server

Or via the installed entry-point:
    smart-memory-mcp

Configuration (environment variables):
    SMART_MEMORY_DIR  - root directory for databases (default: ~/.smart-memory)
    SMART_MEMORY_DB   - database name (default: default)
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from . import __version__
from .config import MemoryConfig
from .memory import DEFAULT_MIN_SCORE, DEFAULT_RECALL_LIMIT, MemoryManager

logger = logging.getLogger(__name__)

# Lazy-initialised singleton; configuration is read from the environment once.
_manager: MemoryManager | None = None


def _get_manager() -> MemoryManager:
    global _manager
    if _manager is None:
        _manager = MemoryManager(MemoryConfig.from_env())
    return _manager


def _dispatch(operation: str, *args: Any, **kwargs: Any) -> str:
    """
    Run a MemoryManager operation and serialise its result as JSON.

    Any exception is logged and returned as ``{"success": false, "error": ...}``
    so one bad request never takes the server down.
    """
    try:
        result = getattr(_get_manager(), operation)(*args, **kwargs)
    except Exception as exc:
        logger.exception("memory_%s failed", operation)
        result = {"success": False, "error": str(exc)}
    return json.dumps(result, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# FastMCP server
# ---------------------------------------------------------------------------

mcp = FastMCP(
    "smart-memory",
    instructions=(
        "Persistent, searchable knowledge for agents. "
        "Use `memory_learn` to store decisions, solutions, errors and patterns. "
        "Use `memory_recall` to search past knowledge by relevance. "
        "Use `memory_suggest` before starting a task to surface warnings and "
        "known-good approaches. "
        "Use `memory_evaluate` to mark recalled entries as useful or not. "
        "Use `memory_stats` and `memory_patterns` for an overview."
    ),
)


@mcp.tool()
def memory_learn(
    content: str,
    category: str = "general",
    tags: list[str] | None = None,
    source: str = "manual",
) -> str:
    """
    Store new knowledge in persistent memory.

    Args:
        content:  The knowledge to store. Be specific and descriptive for
                  better recall.
        category: Category for organization (e.g. 'error', 'solution',
                  'pattern', 'project', 'preference').
        tags:     Tags for retrieval (e.g. ['typescript', 'debugging', 'success']).
        source:   Where this knowledge came from (e.g. 'user', 'codebase', 'web').

    Returns:
        JSON with the new entry id, the total entry count and a confirmation.
    """
    return _dispatch("learn", content, category=category, tags=tags, source=source)


@mcp.tool()
def memory_recall(
    query: str,
    limit: int = DEFAULT_RECALL_LIMIT,
    category: str | None = None,
    minScore: float = DEFAULT_MIN_SCORE,  # noqa: N803
) -> str:
    """
    Search memory by TF-IDF similarity.

    Args:
        query:     What to search for. Natural language works best.
        limit:     Max results to return (default 10).
        category:  Only search this category (optional).
        minScore:  Minimum relevance score (default 0.1).

    Returns:
        JSON with `results` (id, content, category, tags, score, timestamp)
        ranked by score, and the `total` number of entries.
    """
    return _dispatch("recall", query, limit=limit, category=category, min_score=minScore)


@mcp.tool()
def memory_stats() -> str:
    """
    Statistics about the knowledge base: total entries, categories, access
    counts, average usefulness and storage location.
    """
    return _dispatch("stats")


@mcp.tool()
def memory_patterns() -> str:
    """
    Analyse stored knowledge: category distribution, tag frequency,
    co-occurring tags and most accessed entries. Needs at least 3 entries.
    """
    return _dispatch("patterns")


@mcp.tool()
def memory_suggest(context: str) -> str:
    """
    Proactive suggestions for the current task: warnings about past
    errors, successful approaches and best practices.

    Args:
        context: Current task or context to get suggestions for.
    """
    return _dispatch("suggest", context)


@mcp.tool()
def memory_evaluate(entryId: int, useful: bool, feedback: str | None = None) -> str:  # noqa: N803
    """
    Rate a knowledge entry as useful or not useful. Useful entries rank
    higher in later recalls.

    Args:
        entryId:  ID of the knowledge entry to rate.
        useful:   Whether the entry was useful.
        feedback: Optional feedback text.
    """
    return _dispatch("evaluate", entryId, useful, feedback=feedback)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the MCP server over stdio."""
    # stdout carries the protocol, so logs go to stderr.
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    manager = _get_manager()
    try:
        manager.config.ensure_storage()
    except OSError as exc:
        logger.critical("Cannot create storage directory %s: %s", manager.config.storage_path, exc)
        sys.exit(1)

    logger.info(
        "Smart Memory MCP v%s | DB: %s | Path: %s",
        __version__,
        manager.config.database,
        manager.config.storage_path,
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
