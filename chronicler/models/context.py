"""Generation context threaded through every phase"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .seed import TimelineSeed
from .research import ResearchCorpus, Citation
from .skeleton import TimelineSkeleton
from .narrative import MainNarrative
from .structured import TimelineStructuredContent
from .events import ExpandedEvent
from .links import LinkValidationReport
from .enrichment import Enrichment
from .seo import SEOMetadata
from .bindings import NarrativeBindings
from .report import RunReport


class PipelineState(str, Enum):
    """Strictly linear generation states"""
    SEED = "seed"
    RESEARCH = "research"
    SKELETON = "skeleton"
    NARRATIVE = "narrative"
    EVENTS = "events"
    ENRICHMENT = "enrichment"
    SEO = "seo"
    COMPLETE = "complete"


PHASE_SEQUENCE: List[PipelineState] = [
    PipelineState.RESEARCH,
    PipelineState.SKELETON,
    PipelineState.NARRATIVE,
    PipelineState.EVENTS,
    PipelineState.ENRICHMENT,
    PipelineState.SEO,
]


class GenerationContext(BaseModel):
    """Accumulated outputs of all phases run so far.

    Contexts are never mutated in place; merging a phase patch returns
    a new context so a failed phase leaves the caller's copy untouched.
    """
    seed: TimelineSeed
    state: PipelineState = PipelineState.SEED
    research_corpus: Optional[ResearchCorpus] = None
    skeleton: Optional[TimelineSkeleton] = None
    main_narrative: Optional[MainNarrative] = None
    structured_content: Optional[TimelineStructuredContent] = None
    expanded_events: Optional[List[ExpandedEvent]] = None
    link_report: Optional[LinkValidationReport] = None
    enrichment: Optional[Enrichment] = None
    seo: Optional[SEOMetadata] = None

    def merge(self, patch: Dict[str, Any]) -> "GenerationContext":
        """Return a new context with the patch applied"""
        unknown = set(patch) - set(type(self).model_fields)
        if unknown:
            raise KeyError(f"Unknown context fields: {sorted(unknown)}")
        return self.model_copy(update=patch)

    def event_slugs(self) -> List[str]:
        return [event.slug for event in self.expanded_events or []]


class GenerationResult(BaseModel):
    """Everything one run exposes to the persistence collaborator"""
    context: GenerationContext
    bindings: NarrativeBindings = Field(default_factory=NarrativeBindings)
    citations: List[Citation] = Field(default_factory=list)
    report: RunReport = Field(default_factory=RunReport)
