"""Expanded event models and persisted event references"""

from typing import List, Optional
from pydantic import BaseModel, Field


class ExpandedEvent(BaseModel):
    """Long-form event. Its slug is the only stable cross-reference key downstream."""
    title: str
    year: int
    end_year: Optional[int] = None
    slug: str = Field(..., description="Generated kebab-case identifier")
    summary: str = ""
    description: str = ""
    significance: str = ""
    importance: int = Field(default=2, ge=1, le=3)
    type: str = ""
    category: str = ""
    theme_id: str = ""
    tags: List[str] = Field(default_factory=list)
    citations: List[int] = Field(default_factory=list)

    def is_complete(self) -> bool:
        """Whether the long-form fields were actually generated"""
        return bool(self.summary and self.description)


class EventRecord(BaseModel):
    """Event as known to the persistence layer: a title and its minted slug"""
    title: str
    slug: str
    year: Optional[int] = None

    @classmethod
    def from_expanded(cls, event: ExpandedEvent) -> "EventRecord":
        return cls(title=event.title, slug=event.slug, year=event.year)
