"""Generation phases, one per pipeline state"""

from .base import BasePhase
from .research import ResearchPhase
from .skeleton import SkeletonPhase
from .narrative import NarrativePhase
from .events import EventsPhase
from .enrichment import EnrichmentPhase
from .seo import SEOPhase

__all__ = [
    "BasePhase",
    "ResearchPhase",
    "SkeletonPhase",
    "NarrativePhase",
    "EventsPhase",
    "EnrichmentPhase",
    "SEOPhase",
]
