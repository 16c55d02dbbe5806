"""Structured content: the typed relationship graph over events derived from narrative output"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from .narrative import OverviewSection


class RelationshipType(str, Enum):
    """Closed set of directed edge types between events"""
    LED_TO = "led_to"
    RESPONSE_TO = "response_to"
    PARALLEL = "parallel"
    FORESHADOWS = "foreshadows"


class TimelineStructuredFact(BaseModel):
    title: str
    detail: str


class TimelineStructuredSection(BaseModel):
    heading: str = "Context"
    content: str = ""


class TimelineThemeCategory(BaseModel):
    """Theme membership category; id is unique within one structured content"""
    id: str
    title: str
    description: str = ""
    focus: str = ""


class TimelineEventRelationship(BaseModel):
    """Directed, typed edge. The target is title text until bound to a slug."""
    type: RelationshipType
    target_title: str
    detail: str = ""


class TimelineEventNote(BaseModel):
    """Editorial note about one event, keyed by its title"""
    title: str
    category_id: Optional[str] = None
    summary: str = ""
    so_what: str = Field(default="", description="Why it matters")
    relationships: List[TimelineEventRelationship] = Field(default_factory=list)
    human_detail: str = ""
    quote: str = ""


class TimelineNarrativeConnector(BaseModel):
    """Transitional prose placed after an event"""
    text: str
    after_event_title: str = ""


class TimelineTurningPoint(BaseModel):
    title: str
    description: str
    why_it_matters: str = ""


class PerspectiveEvidence(BaseModel):
    available: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)


class PerspectiveInterpretations(BaseModel):
    debates: List[str] = Field(default_factory=list)
    contested: List[str] = Field(default_factory=list)


class PerspectiveContext(BaseModel):
    contemporary: str = ""
    hindsight: str = ""


class TimelinePerspectives(BaseModel):
    evidence: PerspectiveEvidence = Field(default_factory=PerspectiveEvidence)
    interpretations: PerspectiveInterpretations = Field(default_factory=PerspectiveInterpretations)
    context: PerspectiveContext = Field(default_factory=PerspectiveContext)


class TimelineThemeInsight(BaseModel):
    title: str
    insight: str
    analysis: Optional[str] = None
    modern_relevance: Optional[str] = None
    supporting_events: List[str] = Field(default_factory=list)
    citations: List[int] = Field(default_factory=list)


class TimelineCitationRaw(BaseModel):
    """Citation as proposed alongside narrative content, before deduplication"""
    number: Optional[int] = None
    source: str = ""
    title: str = ""
    url: str = ""


class TimelineStructuredContent(BaseModel):
    """Normalized structured content graph"""
    summary: str = ""
    central_question: str = ""
    story_character: str = ""
    overview: str = ""
    overview_sections: List[OverviewSection] = Field(default_factory=list)
    key_facts: List[TimelineStructuredFact] = Field(default_factory=list)
    themes: List[TimelineThemeCategory] = Field(default_factory=list)
    event_notes: List[TimelineEventNote] = Field(default_factory=list)
    connectors: List[TimelineNarrativeConnector] = Field(default_factory=list)
    turning_points: List[TimelineTurningPoint] = Field(default_factory=list)
    perspectives: TimelinePerspectives = Field(default_factory=TimelinePerspectives)
    theme_insights: List[TimelineThemeInsight] = Field(default_factory=list)
    context_sections: List[TimelineStructuredSection] = Field(default_factory=list)
    citations: List[TimelineCitationRaw] = Field(default_factory=list)
