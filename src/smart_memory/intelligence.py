"""
Intelligent logic layer: tokenizing, TF-IDF weighting, and scoring.

These pure functions sit underneath the knowledge store to provide:
  - Normalised tokens for bilingual (English + German) text
  - Term-frequency vectors weighted by a smoothed IDF table
  - Cosine similarity plus recency / usefulness ranking adjustments
  - Classification of recall hits into suggestion types
"""

from __future__ import annotations

import math
import re
from collections import Counter
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Sequence

from .models import Entry, parse_timestamp

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Tokens this short or shorter are dropped.
MAX_DROPPED_TOKEN_LENGTH: int = 2

#: Entries younger than this receive :data:`RECENCY_BOOST`.
RECENCY_WINDOW: timedelta = timedelta(hours=24)

#: Flat score bonus for recently learned entries.
RECENCY_BOOST: float = 0.10

#: Score added per point of usefulness (negative usefulness subtracts).
USEFULNESS_WEIGHT: float = 0.05

STOP_WORDS: frozenset[str] = frozenset(
    """
    the a an is are was were be been being have has had do does did will
    would could should may might shall can need to of in for on with at by
    from as into through during before after above below between out off
    over under again further then once here there when where why how all
    both each few more most other some such no nor not only own same so
    than too very just because but and or if while that this it its i me
    my we our you your he him his she her they them their what which who
    whom these those am about up
    das die der und ist ein eine fuer mit auf von den dem des ich du er
    sie es wir ihr
    """.split()
)

# Anything that is not a-z, 0-9, whitespace, hyphen, or ä ö ü ß.
_NON_TOKEN_CHARS = re.compile(r"[^a-z0-9äöüß\s-]")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def tokenize(text: str) -> list[str]:
    """
    Split *text* into lower-case tokens.

    Punctuation and other symbols become separators, tokens of two
    characters or fewer are dropped, and so are stop words.  Never raises;
    an empty string yields an empty list.
    """
    cleaned = _NON_TOKEN_CHARS.sub(" ", text.lower())
    return [
        token
        for token in cleaned.split()
        if len(token) > MAX_DROPPED_TOKEN_LENGTH and token not in STOP_WORDS
    ]


# ---------------------------------------------------------------------------
# Vectorizer
# ---------------------------------------------------------------------------


def term_frequency(tokens: Iterable[str]) -> dict[str, float]:
    """Count tokens and scale so the most frequent one maps to 1.0."""
    counts = Counter(tokens)
    if not counts:
        return {}
    peak = max(counts.values())
    return {token: count / peak for token, count in counts.items()}


def inverse_document_frequency(doc_count: int, doc_freq: int) -> float:
    """Smoothed IDF: ``ln((n + 1) / (df + 1)) + 1``, always positive and finite."""
    return math.log((doc_count + 1) / (doc_freq + 1)) + 1


def weight_vector(tf: Mapping[str, float], idf: Mapping[str, float]) -> dict[str, float]:
    """Multiply each term frequency by its IDF; unknown terms weigh 1.0."""
    return {term: freq * idf.get(term, 1.0) for term, freq in tf.items()}


def vectorize(text: str, idf: Mapping[str, float]) -> dict[str, float]:
    """Tokenize *text* and return its IDF-weighted term vector."""
    return weight_vector(term_frequency(tokenize(text)), idf)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Cosine similarity of two sparse vectors.

    Returns 0.0 when either vector has zero magnitude.
    """
    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for term in a.keys() | b.keys():
        va = a.get(term, 0.0)
        vb = b.get(term, 0.0)
        dot += va * vb
        mag_a += va * va
        mag_b += vb * vb
    if not mag_a or not mag_b:
        return 0.0
    return dot / (math.sqrt(mag_a) * math.sqrt(mag_b))


def adjusted_score(similarity: float, entry: Entry, now: datetime) -> float:
    """
    Apply the ranking adjustments to a raw *similarity*.

    Adds :data:`RECENCY_BOOST` when the entry is younger than
    :data:`RECENCY_WINDOW` and ``usefulness * USEFULNESS_WEIGHT``.  The
    result is not clamped, so it may fall outside [0, 1].
    """
    score = similarity
    created = parse_timestamp(entry.timestamp)
    if created is not None and now - created < RECENCY_WINDOW:
        score += RECENCY_BOOST
    score += entry.usefulness * USEFULNESS_WEIGHT
    return score


# ---------------------------------------------------------------------------
# Suggestion classification
# ---------------------------------------------------------------------------

#: Checked in order; the first rule whose tag set intersects the entry's tags wins.
SUGGESTION_RULES: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"error", "failure"}), "warning"),
    (frozenset({"success", "solution"}), "recommendation"),
    (frozenset({"pattern", "best-practice"}), "best_practice"),
)

DEFAULT_SUGGESTION_TYPE = "related"


def classify_suggestion(tags: Sequence[str]) -> str:
    """Map an entry's tags to ``warning``/``recommendation``/``best_practice``/``related``."""
    for rule_tags, suggestion_type in SUGGESTION_RULES:
        if any(tag in rule_tags for tag in tags):
            return suggestion_type
    return DEFAULT_SUGGESTION_TYPE
