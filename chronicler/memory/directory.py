"""Lookup of persisted events"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set

from chronicler.binding.matching import EventIndex, TitleMatcher
from chronicler.models import EventRecord, ExpandedEvent

logger = logging.getLogger(__name__)


class EventDirectory(ABC):
    """Abstract view of the events that actually exist in the persisted set"""

    @abstractmethod
    async def list_events(self) -> List[EventRecord]:
        """All persisted events"""
        pass

    @abstractmethod
    async def find_slug(self, title: str) -> Optional[str]:
        """Slug of the persisted event matching a title, if any"""
        pass

    async def slugs(self) -> Set[str]:
        """Authoritative slug set"""
        return {event.slug for event in await self.list_events()}


class InMemoryEventDirectory(EventDirectory):
    """Event directory held in memory"""

    def __init__(
        self,
        events: Optional[Iterable[EventRecord]] = None,
        matcher: Optional[TitleMatcher] = None
    ):
        self.events: List[EventRecord] = list(events or [])
        self.matcher = matcher

    @classmethod
    def from_expanded_events(cls, events: Iterable[ExpandedEvent]) -> "InMemoryEventDirectory":
        return cls(EventRecord.from_expanded(event) for event in events)

    def add(self, event: EventRecord):
        """Register a persisted event, replacing any with the same slug"""
        self.events = [existing for existing in self.events if existing.slug != event.slug]
        self.events.append(event)
        logger.debug(f"Registered event {event.slug}")

    async def list_events(self) -> List[EventRecord]:
        return list(self.events)

    async def find_slug(self, title: str) -> Optional[str]:
        match = EventIndex(self.events, self.matcher).find(title)
        return match.slug if match else None
