"""Narrative binding models: structured content attached to persisted events"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .structured import (
    RelationshipType,
    TimelineEventNote,
    TimelineThemeCategory,
)


class BoundRelationship(BaseModel):
    """Relationship whose target title has been resolved to a slug"""
    type: RelationshipType
    target_title: str
    target_slug: str
    detail: str = ""


class EventNarrativeBinding(BaseModel):
    """Per-event bundle; present for every persisted event even when empty"""
    note: Optional[TimelineEventNote] = None
    category: Optional[TimelineThemeCategory] = None
    relationships: List[BoundRelationship] = Field(default_factory=list)

    @property
    def why_it_matters(self) -> str:
        return self.note.so_what if self.note else ""


class BoundConnector(BaseModel):
    text: str
    after_event_slug: Optional[str] = None


class BoundTurningPoint(BaseModel):
    title: str
    description: str
    why_it_matters: str = ""
    event_slug: Optional[str] = None


class BindingStats(BaseModel):
    """Counts of resolved and dropped references"""
    notes_bound: int = 0
    notes_unmatched: int = 0
    relationships_bound: int = 0
    relationships_dropped: int = 0
    connectors_unbound: int = 0
    turning_points_unbound: int = 0


class NarrativeBindings(BaseModel):
    """Binding map keyed by event slug, plus bound connectors and turning points"""
    event_narratives: Dict[str, EventNarrativeBinding] = Field(default_factory=dict)
    connectors: List[BoundConnector] = Field(default_factory=list)
    turning_points: List[BoundTurningPoint] = Field(default_factory=list)
    stats: BindingStats = Field(default_factory=BindingStats)

    def for_event(self, slug: str) -> EventNarrativeBinding:
        """Binding for a slug; unknown slugs get an empty binding"""
        return self.event_narratives.get(slug) or EventNarrativeBinding()
