"""Title matching between model-written titles and persisted events"""

import re
from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def normalize_key(value: str) -> str:
    """Canonical matching key: lowercase with every non-alphanumeric character removed"""
    if not isinstance(value, str):
        return ""
    return re.sub(r'[^a-z0-9]+', '', value.lower())


class TitleMatcher(ABC):
    """Strategy for resolving a title key against candidate keys"""

    @abstractmethod
    def match(self, target_key: str, candidate_keys: Sequence[str]) -> Optional[int]:
        """
        Pick a candidate for the target

        Args:
            target_key: Normalized key of the title being looked up
            candidate_keys: Normalized keys of candidates, in priority order

        Returns:
            Index of the chosen candidate, or None
        """
        pass


class ExactThenSubstringMatcher(TitleMatcher):
    """Exact key equality first, then bidirectional substring containment.

    Ties go to the first candidate in order. Substring containment can
    pair a short title with an unrelated longer one; unresolved targets
    are dropped downstream, so recall is preferred here.
    """

    def match(self, target_key: str, candidate_keys: Sequence[str]) -> Optional[int]:
        if not target_key:
            return None

        for index, key in enumerate(candidate_keys):
            if key == target_key:
                return index

        for index, key in enumerate(candidate_keys):
            if not key:
                continue
            if target_key in key or key in target_key:
                return index

        return None


class EventIndex(Generic[T]):
    """Titled items indexed by normalized key for repeated lookups"""

    def __init__(self, items: Iterable[T], matcher: Optional[TitleMatcher] = None):
        self.items: List[T] = list(items)
        self.keys: List[str] = [normalize_key(getattr(item, "title", "")) for item in self.items]
        self.matcher = matcher or ExactThenSubstringMatcher()

    def find(self, title: str) -> Optional[T]:
        """Item whose title matches, or None"""
        index = self.matcher.match(normalize_key(title), self.keys)
        return self.items[index] if index is not None else None

    def find_slug(self, title: str) -> Optional[str]:
        item = self.find(title)
        return getattr(item, "slug", None) if item is not None else None
