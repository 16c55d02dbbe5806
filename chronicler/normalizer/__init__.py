"""Content normalizer: untyped model output into strict schemas"""

from .coerce import (
    UniqueIdAllocator,
    clamp_importance,
    clean_text,
    finite_number,
    slugify,
    to_int_list,
    to_string_list,
)
from .relationships import normalize_relationship_type
from .research import normalize_research_corpus
from .skeleton import normalize_skeleton
from .narrative import normalize_main_narrative
from .structured import normalize_structured_content
from .events import normalize_expanded_events, normalize_category, TIMELINE_CATEGORIES
from .links import normalize_link_proposals, proposals_from_beats
from .enrichment import normalize_enrichment
from .seo import normalize_seo

__all__ = [
    "UniqueIdAllocator",
    "clamp_importance",
    "clean_text",
    "finite_number",
    "slugify",
    "to_int_list",
    "to_string_list",
    "normalize_relationship_type",
    "normalize_research_corpus",
    "normalize_skeleton",
    "normalize_main_narrative",
    "normalize_structured_content",
    "normalize_expanded_events",
    "normalize_category",
    "TIMELINE_CATEGORIES",
    "normalize_link_proposals",
    "proposals_from_beats",
    "normalize_enrichment",
    "normalize_seo",
]
