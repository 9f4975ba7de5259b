"""
smart-memory: A local knowledge base with relevance-ranked retrieval.

Stores short knowledge entries with metadata and retrieves them by TF-IDF
similarity, boosted for recency and usefulness feedback.
"""

__version__ = "1.0.0"

from .config import MemoryConfig
from .index import build_index
from .intelligence import cosine_similarity, term_frequency, tokenize
from .memory import MemoryManager
from .models import Entry, EntryNotFoundError, Index, KnowledgeBase
from .store import KnowledgeStore

__all__ = [
    "Entry",
    "EntryNotFoundError",
    "Index",
    "KnowledgeBase",
    "KnowledgeStore",
    "MemoryConfig",
    "MemoryManager",
    "build_index",
    "cosine_similarity",
    "term_frequency",
    "tokenize",
]
