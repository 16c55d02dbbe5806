"""Seed model: the minimal topic description a run starts from"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TimelineSeed(BaseModel):
    """Topic to generate a timeline for. Years are signed; negative means BCE."""
    title: str = Field(..., min_length=1, description="Topic title")
    start_year: int = Field(..., description="First year covered")
    end_year: int = Field(..., description="Last year covered")
    region: Optional[str] = Field(default=None, description="Geographic region")
    background: Optional[str] = Field(default=None, description="Free-text background context")

    model_config = ConfigDict(frozen=True)

    def describe(self) -> str:
        """Human-readable one-line description for prompts"""
        region = f", {self.region}" if self.region else ""
        text = f"{self.title} ({self.start_year} to {self.end_year}{region})"
        if self.background:
            text += f"\n\nBackground context: {self.background}"
        return text
