"""Lookups of persisted events and live citations"""

from .citation_index import CitationIndex
from .directory import EventDirectory, InMemoryEventDirectory

__all__ = [
    "CitationIndex",
    "EventDirectory",
    "InMemoryEventDirectory",
]
