"""
MemoryManager: high-level API for learning and recalling knowledge.

This is the main entry-point for applications that want a small local
knowledge base with relevance-ranked retrieval.

Usage example::

    from smart_memory import MemoryConfig, MemoryManager

    memory = MemoryManager(MemoryConfig(data_dir="./memory"))

    memory.learn(
        "React useEffect cleanup runs before re-render",
        category="pattern",
        tags=["react", "hooks"],
    )

    for hit in memory.recall("cleanup effects react")["results"]:
        print(hit["id"], hit["score"], hit["content"])
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from .config import MemoryConfig
from .index import build_index
from .intelligence import adjusted_score, classify_suggestion, cosine_similarity, vectorize
from .models import Entry, EntryNotFoundError, Feedback, format_timestamp
from .patterns import MIN_PATTERN_ENTRIES, analyze_patterns, summarize
from .store import KnowledgeStore

logger = logging.getLogger(__name__)

DEFAULT_RECALL_LIMIT = 10
DEFAULT_MIN_SCORE = 0.1

SUGGEST_LIMIT = 5
SUGGEST_MIN_SCORE = 0.05

#: Preview lengths used in operation results.
LEARN_PREVIEW_LENGTH = 100
SUGGESTION_PREVIEW_LENGTH = 200
CONTEXT_PREVIEW_LENGTH = 80


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryManager:
    """
    Knowledge base backed by two JSON documents on local disk.

    Responsibilities
    ----------------
    * **Learn** – Appends an entry under a fresh id, saves the collection
      and rebuilds the inverted index from scratch.
    * **Recall** – Scores every entry against a query by TF-IDF cosine
      similarity, adds recency and usefulness adjustments, and bumps the
      access count of every returned entry.
    * **Analyse** – Stats, tag co-occurrence patterns and suggestions
      derived from the same collection.
    * **Evaluate** – Records usefulness feedback that later shifts ranking.

    Every operation loads the full state, computes, and saves the full
    state before returning.

    Parameters
    ----------
    config:
        Storage location.  Defaults to :meth:`MemoryConfig.from_env`.
    """

    def __init__(
        self,
        config: MemoryConfig | None = None,
        _store: KnowledgeStore | None = None,
        _clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or (_store.config if _store else MemoryConfig.from_env())
        self._store = _store or KnowledgeStore(self.config)
        self._clock = _clock or _utc_now

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def learn(
        self,
        content: str,
        category: str | None = None,
        tags: list[str] | None = None,
        source: str | None = None,
    ) -> dict[str, Any]:
        """
        Store *content* as a new entry.

        Returns
        -------
        dict
            ``id`` of the new entry, ``total`` entry count and a
            human-readable ``message``.
        """
        if not content or not content.strip():
            raise ValueError("content must not be empty")

        kb = self._store.load()
        entry = kb.add(
            content,
            timestamp=format_timestamp(self._clock()),
            category=category,
            tags=tags,
            source=source,
        )
        self._store.save(kb)
        self._store.save_index(build_index(kb.entries))
        logger.info("Learned entry %d [%s]", entry.id, entry.category)

        preview = content[:LEARN_PREVIEW_LENGTH]
        if len(content) > LEARN_PREVIEW_LENGTH:
            preview += "..."
        return {
            "id": entry.id,
            "total": len(kb),
            "message": f'Stored: "{preview}" [{entry.category}]',
        }

    def recall(
        self,
        query: str,
        limit: int = DEFAULT_RECALL_LIMIT,
        category: str | None = None,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> dict[str, Any]:
        """
        Return the entries most relevant to *query*, best first.

        Scores are cosine similarity plus adjustments and are not clamped
        to [0, 1].  Entries sharing no token with the query are never
        returned.  Every returned entry has its access count incremented.

        Parameters
        ----------
        query:
            Natural-language text to match against.
        limit:
            Maximum number of results.
        category:
            Only consider entries in exactly this category.
        min_score:
            Drop entries whose adjusted score is below this value.
        """
        kb = self._store.load()
        if not kb.entries:
            return {
                "results": [],
                "total": 0,
                "message": "Knowledge base is empty. Use memory_learn to add knowledge.",
            }

        index = self._store.load_index()
        if index is None:
            logger.debug("No stored index, rebuilding from %d entries", len(kb))
            index = build_index(kb.entries)

        query_vec = vectorize(query, index.idf)
        now = self._clock()

        scored: list[tuple[Entry, float]] = []
        for entry in kb.entries:
            if category and entry.category != category:
                continue
            similarity = cosine_similarity(query_vec, vectorize(entry.searchable_text, index.idf))
            # No shared tokens means no match, whatever the boosts would add.
            if similarity <= 0.0:
                continue
            score = adjusted_score(similarity, entry, now)
            if score >= min_score:
                scored.append((entry, score))

        scored.sort(key=lambda pair: pair[1], reverse=True)
        scored = scored[:limit]

        if scored:
            for entry, _ in scored:
                entry.access_count += 1
            self._store.save(kb)

        return {
            "results": [
                {
                    "id": entry.id,
                    "content": entry.content,
                    "category": entry.category,
                    "tags": list(entry.tags),
                    "score": round(score, 3),
                    "timestamp": entry.timestamp,
                }
                for entry, score in scored
            ],
            "total": len(kb),
        }

    def stats(self) -> dict[str, Any]:
        """Entry counts, access totals, average usefulness and storage info."""
        kb = self._store.load()
        result = summarize(kb.entries)
        result["storagePath"] = str(self.config.storage_path)
        result["database"] = self.config.database
        return result

    def patterns(self) -> dict[str, Any]:
        """Category, tag and co-occurrence histograms plus most-accessed entries."""
        kb = self._store.load()
        analysis = analyze_patterns(kb.entries)
        if analysis is None:
            return {
                "message": f"Need at least {MIN_PATTERN_ENTRIES} entries for pattern detection."
            }
        return analysis

    def suggest(self, context: str) -> dict[str, Any]:
        """
        Recall entries related to *context* and label each one as a
        ``warning``, ``recommendation``, ``best_practice`` or ``related``
        suggestion based on its tags.
        """
        recalled = self.recall(context, limit=SUGGEST_LIMIT, min_score=SUGGEST_MIN_SCORE)
        if "message" in recalled:
            return {"suggestions": [], "message": "No knowledge yet."}

        suggestions = [
            {
                "type": classify_suggestion(hit["tags"]),
                "content": hit["content"][:SUGGESTION_PREVIEW_LENGTH],
                "source": hit["id"],
                "relevance": hit["score"],
            }
            for hit in recalled["results"]
        ]
        return {"suggestions": suggestions, "context": context[:CONTEXT_PREVIEW_LENGTH]}

    def evaluate(
        self,
        entry_id: int,
        useful: bool,
        feedback: str | None = None,
    ) -> dict[str, Any]:
        """
        Record whether entry *entry_id* was useful.

        Usefulness moves by exactly one step; an optional *feedback* note
        is appended with a timestamp.  An unknown id is reported in the
        result and leaves the store untouched.
        """
        kb = self._store.load()
        try:
            entry = kb.get(entry_id)
        except EntryNotFoundError as exc:
            return {"success": False, "message": str(exc)}

        entry.usefulness += 1 if useful else -1
        if feedback:
            entry.feedback.append(Feedback(text=feedback, timestamp=format_timestamp(self._clock())))
        self._store.save(kb)
        logger.info("Entry %d usefulness is now %d", entry.id, entry.usefulness)
        return {"success": True, "entryId": entry.id, "usefulness": entry.usefulness}

    def count(self) -> int:
        """Return the total number of stored entries."""
        return len(self._store.load())
