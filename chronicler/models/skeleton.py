"""Skeleton models: the factual outline produced before prose is written"""

from typing import List, Optional
from pydantic import BaseModel, Field


class SkeletonEvent(BaseModel):
    """Event in the factual outline. Titles are the only cross-reference key at this stage."""
    title: str = Field(..., description="Specific event title")
    year: int = Field(..., description="Start year, negative for BCE")
    end_year: Optional[int] = Field(default=None, description="End year for multi-year events")
    one_sentence: str = Field(default="", description="One-line synopsis")
    key_facts: List[str] = Field(default_factory=list)
    citations_to_use: List[int] = Field(default_factory=list)
    importance: int = Field(default=2, ge=1, le=3, description="1=notable, 2=significant, 3=major")
    type: str = Field(default="", description="Free-text event type, e.g. battle")
    category: str = Field(default="", description="Free-text category")


class SkeletonPerson(BaseModel):
    """Key figure in the factual outline"""
    name: str
    birth_year: Optional[int] = None
    death_year: Optional[int] = None
    role: str = ""
    one_sentence: str = ""
    key_facts: List[str] = Field(default_factory=list)
    citations_to_use: List[int] = Field(default_factory=list)
    related_events: List[str] = Field(default_factory=list, description="Related event titles")


class SkeletonTheme(BaseModel):
    """Thematic thread connecting skeleton events"""
    id: str
    title: str
    one_sentence: str = ""
    related_events: List[str] = Field(default_factory=list, description="Related event titles")


class PeriodBreakdown(BaseModel):
    """Named sub-period used for navigation"""
    name: str
    start_year: int
    end_year: int
    event_count: int = Field(default=0, ge=0)


class TimelineSkeleton(BaseModel):
    """Complete factual outline"""
    events: List[SkeletonEvent] = Field(default_factory=list)
    people: List[SkeletonPerson] = Field(default_factory=list)
    themes: List[SkeletonTheme] = Field(default_factory=list)
    periodization: List[PeriodBreakdown] = Field(default_factory=list)
