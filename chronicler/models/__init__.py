"""Pydantic schemas for Chronicler data structures"""

from .seed import TimelineSeed
from .research import Citation, CitationType, Reliability, KeyQuote, ResearchCorpus
from .skeleton import (
    SkeletonEvent,
    SkeletonPerson,
    SkeletonTheme,
    PeriodBreakdown,
    TimelineSkeleton,
)
from .narrative import EventLink, StoryBeat, ExpandedTheme, OverviewSection, MainNarrative
from .structured import (
    RelationshipType,
    TimelineThemeCategory,
    TimelineEventRelationship,
    TimelineEventNote,
    TimelineNarrativeConnector,
    TimelineTurningPoint,
    TimelinePerspectives,
    TimelineThemeInsight,
    TimelineStructuredFact,
    TimelineStructuredSection,
    TimelineCitationRaw,
    TimelineStructuredContent,
)
from .events import ExpandedEvent, EventRecord
from .links import ProposedEventLink, RejectionReason, LinkRejection, LinkValidationReport
from .enrichment import (
    PerspectiveCategory,
    ExpandedPerson,
    TurningPoint,
    Perspective,
    ThemeInsight,
    KeyFact,
    InterpretationSection,
    KeyHighlight,
    Enrichment,
)
from .seo import SEOMetadata, SchemaSuggestions
from .bindings import (
    BoundRelationship,
    EventNarrativeBinding,
    BoundConnector,
    BoundTurningPoint,
    BindingStats,
    NarrativeBindings,
)
from .report import ReportEntry, RunReport
from .context import PipelineState, PHASE_SEQUENCE, GenerationContext, GenerationResult

__all__ = [
    # Seed
    "TimelineSeed",
    # Research
    "Citation",
    "CitationType",
    "Reliability",
    "KeyQuote",
    "ResearchCorpus",
    # Skeleton
    "SkeletonEvent",
    "SkeletonPerson",
    "SkeletonTheme",
    "PeriodBreakdown",
    "TimelineSkeleton",
    # Narrative
    "EventLink",
    "StoryBeat",
    "ExpandedTheme",
    "OverviewSection",
    "MainNarrative",
    # Structured content
    "RelationshipType",
    "TimelineThemeCategory",
    "TimelineEventRelationship",
    "TimelineEventNote",
    "TimelineNarrativeConnector",
    "TimelineTurningPoint",
    "TimelinePerspectives",
    "TimelineThemeInsight",
    "TimelineStructuredFact",
    "TimelineStructuredSection",
    "TimelineCitationRaw",
    "TimelineStructuredContent",
    # Events
    "ExpandedEvent",
    "EventRecord",
    # Links
    "ProposedEventLink",
    "RejectionReason",
    "LinkRejection",
    "LinkValidationReport",
    # Enrichment
    "PerspectiveCategory",
    "ExpandedPerson",
    "TurningPoint",
    "Perspective",
    "ThemeInsight",
    "KeyFact",
    "InterpretationSection",
    "KeyHighlight",
    "Enrichment",
    # SEO
    "SEOMetadata",
    "SchemaSuggestions",
    # Bindings
    "BoundRelationship",
    "EventNarrativeBinding",
    "BoundConnector",
    "BoundTurningPoint",
    "BindingStats",
    "NarrativeBindings",
    # Report
    "ReportEntry",
    "RunReport",
    # Context
    "PipelineState",
    "PHASE_SEQUENCE",
    "GenerationContext",
    "GenerationResult",
]
