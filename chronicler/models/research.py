"""Research corpus models"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class CitationType(str, Enum):
    """Kind of source behind a citation"""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    MODERN = "modern"


class Reliability(str, Enum):
    """Editorial confidence in a source"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Citation(BaseModel):
    """Numbered source gathered during research"""
    number: int = Field(..., ge=1, description="Citation number referenced as [n] in text")
    source: str = Field(..., description="Source label")
    url: Optional[str] = Field(default=None, description="Source URL if available")
    type: CitationType = Field(default=CitationType.SECONDARY)
    reliability: Reliability = Field(default=Reliability.MEDIUM)


class KeyQuote(BaseModel):
    """Quotation lifted from a cited source"""
    text: str
    citation_number: Optional[int] = None
    context: str = ""


class ResearchCorpus(BaseModel):
    """Prose digest plus the ordered citations it references"""
    digest: str = Field(default="", description="Research summary with [n] markers")
    citations: List[Citation] = Field(default_factory=list)
    key_quotes: List[KeyQuote] = Field(default_factory=list)
    key_data_points: List[str] = Field(default_factory=list)
    primary_sources_found: List[str] = Field(default_factory=list)

    def citation_numbers(self) -> List[int]:
        """Numbers of all citations in corpus order"""
        return [citation.number for citation in self.citations]
