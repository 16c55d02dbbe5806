"""Editorial enrichment models"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class PerspectiveCategory(str, Enum):
    """Closed set of analytical lenses"""
    INTERPRETATIONS = "INTERPRETATIONS"
    DEBATES = "DEBATES"
    CONFLICT = "CONFLICT"
    HISTORIOGRAPHY = "HISTORIOGRAPHY"
    WITH_HINDSIGHT = "WITH HINDSIGHT"
    SOURCES_AND_BIAS = "SOURCES AND BIAS"


class ExpandedPerson(BaseModel):
    """Biography of a key figure"""
    name: str
    slug: str
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    role: str = ""
    bio_short: str = ""
    bio_long: str = ""
    related_event_slugs: List[str] = Field(default_factory=list)


class BeforeAfter(BaseModel):
    """State of affairs either side of a turning point"""
    before: str = ""
    after: str = ""


class TurningPoint(BaseModel):
    """Pivotal moment identified during enrichment"""
    title: str
    event_slug: str = ""
    year: Optional[int] = None
    description: str = ""
    why_it_matters: str = ""
    before_after: BeforeAfter = Field(default_factory=BeforeAfter)
    citations: List[int] = Field(default_factory=list)


class Perspective(BaseModel):
    """Analytical lens on the period"""
    category: PerspectiveCategory
    title: str
    content: str = ""
    citations: List[int] = Field(default_factory=list)


class ThemeInsight(BaseModel):
    """Insight tied to a theme"""
    theme_id: str
    insight: str
    supporting_events: List[str] = Field(default_factory=list)
    analysis: Optional[str] = None
    modern_relevance: Optional[str] = None
    citations: List[int] = Field(default_factory=list)


class KeyFact(BaseModel):
    """Label/value fact box entry"""
    label: str
    value: str
    citation: Optional[int] = None


class InterpretationSection(BaseModel):
    """Long-form interpretive essay section"""
    id: str
    title: str
    subtitle: Optional[str] = None
    content: str = ""
    citations: List[int] = Field(default_factory=list)


class KeyHighlight(BaseModel):
    """Highlighted event card"""
    event_slug: str
    year: Optional[int] = None
    title: str
    summary: str = ""
    why_it_matters: str = ""
    immediate_impact: str = ""
    tags: List[str] = Field(default_factory=list)
    citations: List[int] = Field(default_factory=list)


class Enrichment(BaseModel):
    """All enrichment output for one timeline"""
    people: List[ExpandedPerson] = Field(default_factory=list)
    turning_points: List[TurningPoint] = Field(default_factory=list)
    perspectives: List[Perspective] = Field(default_factory=list)
    theme_insights: List[ThemeInsight] = Field(default_factory=list)
    key_facts: List[KeyFact] = Field(default_factory=list)
    interpretation_sections: List[InterpretationSection] = Field(default_factory=list)
    key_highlights: List[KeyHighlight] = Field(default_factory=list)
