"""Reference resolution: citations and narrative bindings"""

from .matching import normalize_key, TitleMatcher, ExactThenSubstringMatcher, EventIndex
from .citations import CitationRegistry, dedupe_citations
from .binder import NarrativeBinder
from .renumbering import apply_citation_numbers, renumber, RESEARCH_SCOPE, NARRATIVE_SCOPE

__all__ = [
    "normalize_key",
    "TitleMatcher",
    "ExactThenSubstringMatcher",
    "EventIndex",
    "CitationRegistry",
    "dedupe_citations",
    "NarrativeBinder",
    "apply_citation_numbers",
    "renumber",
    "RESEARCH_SCOPE",
    "NARRATIVE_SCOPE",
]
