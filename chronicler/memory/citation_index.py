"""Lookup of citation liveness across phases"""

from abc import ABC, abstractmethod


class CitationIndex(ABC):
    """Answers whether a citation number from a prior phase is still live"""

    @abstractmethod
    def is_live(self, number: int) -> bool:
        """Whether the citation number still resolves to a kept source"""
        pass
