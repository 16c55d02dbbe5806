"""SEO metadata model"""

from typing import Any, Dict, List
from pydantic import BaseModel, Field


class SchemaSuggestions(BaseModel):
    """Structured-data hints for the rendering layer"""
    timeline: Dict[str, Any] = Field(default_factory=dict)
    events: Dict[str, Any] = Field(default_factory=dict)
    people: Dict[str, Any] = Field(default_factory=dict)


class SEOMetadata(BaseModel):
    """Search and social metadata"""
    seo_title: str = ""
    meta_description: str = ""
    keywords: List[str] = Field(default_factory=list)
    og_title: str = ""
    og_description: str = ""
    schema_suggestions: SchemaSuggestions = Field(default_factory=SchemaSuggestions)
