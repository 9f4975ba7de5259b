"""
Data model: knowledge entries, the knowledge base, and the derived index.

Every type converts to and from the plain-JSON shape used on disk
(``knowledge.json`` / ``index.json``), which keeps camelCase keys so that
databases written by other smart-memory implementations stay readable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_CATEGORY = "general"
DEFAULT_SOURCE = "manual"


class EntryNotFoundError(KeyError):
    """Raised when an entry id is not present in the knowledge base."""

    def __init__(self, entry_id: int) -> None:
        super().__init__(entry_id)
        self.entry_id = entry_id

    def __str__(self) -> str:
        return f"Entry {self.entry_id} not found."


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def format_timestamp(moment: datetime) -> str:
    """Render *moment* as UTC ISO-8601 with millisecond precision and ``Z``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning ``None`` if it is unreadable."""
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


@dataclass
class Feedback:
    text: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Feedback:
        return cls(text=str(data["text"]), timestamp=str(data.get("timestamp", "")))


@dataclass
class Entry:
    """
    One stored unit of knowledge.

    ``access_count`` grows every time the entry is returned by a recall;
    ``usefulness`` moves up or down with evaluation feedback and is
    unbounded in both directions.
    """

    id: int
    content: str
    timestamp: str
    category: str = DEFAULT_CATEGORY
    tags: list[str] = field(default_factory=list)
    source: str = DEFAULT_SOURCE
    access_count: int = 0
    usefulness: int = 0
    feedback: list[Feedback] = field(default_factory=list)

    @property
    def searchable_text(self) -> str:
        """Content, tags and category joined into the text that gets indexed."""
        return f"{self.content} {' '.join(self.tags)} {self.category}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
            "source": self.source,
            "timestamp": self.timestamp,
            "accessCount": self.access_count,
            "usefulness": self.usefulness,
            "feedback": [f.to_dict() for f in self.feedback],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entry:
        return cls(
            id=int(data["id"]),
            content=str(data["content"]),
            timestamp=str(data.get("timestamp", "")),
            category=data.get("category") or DEFAULT_CATEGORY,
            tags=[str(t) for t in data.get("tags") or []],
            source=data.get("source") or DEFAULT_SOURCE,
            access_count=int(data.get("accessCount", 0)),
            usefulness=int(data.get("usefulness", 0)),
            feedback=[Feedback.from_dict(f) for f in data.get("feedback") or []],
        )


@dataclass
class KnowledgeBase:
    """Ordered entry collection (insertion order == id order) plus the id counter."""

    entries: list[Entry] = field(default_factory=list)
    next_id: int = 1

    def __len__(self) -> int:
        return len(self.entries)

    def add(
        self,
        content: str,
        timestamp: str,
        category: str | None = None,
        tags: list[str] | None = None,
        source: str | None = None,
    ) -> Entry:
        """Append a new entry under the next id. Ids are never reused."""
        entry = Entry(
            id=self.next_id,
            content=content,
            timestamp=timestamp,
            category=category or DEFAULT_CATEGORY,
            tags=[str(t) for t in tags or []],
            source=source or DEFAULT_SOURCE,
        )
        self.next_id += 1
        self.entries.append(entry)
        return entry

    def get(self, entry_id: int) -> Entry:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise EntryNotFoundError(entry_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "nextId": self.next_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnowledgeBase:
        entries = [Entry.from_dict(e) for e in data.get("entries") or []]
        next_id = int(data.get("nextId", 1))
        # Never hand out an id that is already taken.
        if entries:
            next_id = max(next_id, max(e.id for e in entries) + 1)
        return cls(entries=entries, next_id=next_id)


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


@dataclass
class Index:
    """Inverted index (token -> entry ids) with its IDF table."""

    terms: dict[str, list[int]] = field(default_factory=dict)
    idf: dict[str, float] = field(default_factory=dict)
    doc_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "terms": {t: list(ids) for t, ids in self.terms.items()},
            "idf": dict(self.idf),
            "docCount": self.doc_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Index:
        return cls(
            terms={str(t): [int(i) for i in ids] for t, ids in data["terms"].items()},
            idf={str(t): float(w) for t, w in data["idf"].items()},
            doc_count=int(data.get("docCount", 0)),
        )
