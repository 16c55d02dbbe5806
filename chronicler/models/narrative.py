"""Main narrative models"""

from typing import List, Optional
from pydantic import BaseModel, Field


class EventLink(BaseModel):
    """In-text hyperlink: an exact span of a beat paragraph pointing at an event slug"""
    text_to_link: str = Field(..., description="Exact phrase to make clickable")
    event_slug: str = Field(..., description="Target event slug")
    paragraph_index: Optional[int] = Field(default=None, description="Paragraph the phrase occurs in")


class StoryBeat(BaseModel):
    """One dramatic unit of the narrative"""
    beat_type: str = Field(default="development", description="Beat tag, e.g. world-before")
    title: str = ""
    paragraphs: List[str] = Field(default_factory=list)
    event_links: List[EventLink] = Field(default_factory=list)


class ExpandedTheme(BaseModel):
    """Theme described by the narrative phase"""
    id: str
    title: str
    description: str = ""
    icon: Optional[str] = None
    related_event_slugs: List[str] = Field(default_factory=list)


class OverviewSection(BaseModel):
    """Optional overview block above the beats"""
    subheading: Optional[str] = None
    content: str
    citations_used: List[int] = Field(default_factory=list)


class MainNarrative(BaseModel):
    """Dramatized narrative for the timeline page"""
    page_title: str = ""
    central_question: str = ""
    story_character: str = ""
    summary: str = ""
    story_beats: List[StoryBeat] = Field(default_factory=list)
    overview: List[OverviewSection] = Field(default_factory=list)
    themes: List[ExpandedTheme] = Field(default_factory=list)
    key_people: List[str] = Field(default_factory=list)
