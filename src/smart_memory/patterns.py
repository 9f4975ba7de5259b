"""
Aggregate statistics over the knowledge base.
"""

from __future__ import annotations

from collections import Counter
from itertools import combinations
from typing import Any, Sequence

from .models import Entry

#: Pattern detection needs at least this many entries.
MIN_PATTERN_ENTRIES = 3

TOP_TAGS = 10
TOP_TAG_PAIRS = 5
TOP_ACCESSED = 5

#: Content shown for most-accessed entries is cut to this many characters.
PREVIEW_LENGTH = 120

TAG_PAIR_SEPARATOR = " + "


def tag_pair_key(a: str, b: str) -> str:
    """Order-independent key for a co-occurring tag pair."""
    return TAG_PAIR_SEPARATOR.join(sorted((a, b)))


def category_counts(entries: Sequence[Entry]) -> Counter[str]:
    return Counter(entry.category for entry in entries)


def analyze_patterns(entries: Sequence[Entry]) -> dict[str, Any] | None:
    """
    Category histogram, tag frequencies, tag co-occurrence and the most
    accessed entries.

    Returns ``None`` when there are fewer than :data:`MIN_PATTERN_ENTRIES`
    entries.  Histograms are ``[name, count]`` pairs sorted by count,
    descending; ties keep first-seen order.
    """
    if len(entries) < MIN_PATTERN_ENTRIES:
        return None

    tag_freq: Counter[str] = Counter()
    co_occurrence: Counter[str] = Counter()
    for entry in entries:
        tag_freq.update(entry.tags)
        for a, b in combinations(entry.tags, 2):
            if a != b:
                co_occurrence[tag_pair_key(a, b)] += 1

    most_accessed = sorted(entries, key=lambda e: e.access_count, reverse=True)[:TOP_ACCESSED]

    return {
        "totalEntries": len(entries),
        "categories": [list(kv) for kv in category_counts(entries).most_common()],
        "topTags": [list(kv) for kv in tag_freq.most_common(TOP_TAGS)],
        "tagPairs": [list(kv) for kv in co_occurrence.most_common(TOP_TAG_PAIRS)],
        "mostAccessed": [
            {
                "id": e.id,
                "content": e.content[:PREVIEW_LENGTH],
                "accessCount": e.access_count,
            }
            for e in most_accessed
        ],
    }


def summarize(entries: Sequence[Entry]) -> dict[str, Any]:
    """Totals for the stats operation (no storage details)."""
    total_usefulness = sum(e.usefulness for e in entries)
    return {
        "totalEntries": len(entries),
        "categories": dict(category_counts(entries)),
        "totalAccesses": sum(e.access_count for e in entries),
        "avgUsefulness": round(total_usefulness / len(entries), 2) if entries else 0,
        "oldestEntry": entries[0].timestamp if entries else None,
        "newestEntry": entries[-1].timestamp if entries else None,
    }
