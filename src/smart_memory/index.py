"""
Inverted-index construction.

The index is always rebuilt from scratch over the whole collection; it is
never patched in place.
"""

from __future__ import annotations

from typing import Sequence

from .intelligence import inverse_document_frequency, tokenize
from .models import Entry, Index


def build_index(entries: Sequence[Entry]) -> Index:
    """
    Build the inverted index and IDF table for *entries*.

    Each entry contributes its distinct tokens once, so repeating a word
    inside one entry does not raise that word's document frequency.
    """
    terms: dict[str, list[int]] = {}
    for entry in entries:
        for token in dict.fromkeys(tokenize(entry.searchable_text)):
            terms.setdefault(token, []).append(entry.id)

    n = len(entries)
    idf = {term: inverse_document_frequency(n, len(ids)) for term, ids in terms.items()}
    return Index(terms=terms, idf=idf, doc_count=n)
