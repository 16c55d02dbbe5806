"""Applies deduplicated citation numbers to every cited field of a context"""

import logging
from enum import Enum
from typing import Any, List

from pydantic import BaseModel

from chronicler.models import GenerationContext, TimelineCitationRaw
from .citations import DEFAULT_SCOPE, CitationRegistry

logger = logging.getLogger(__name__)

RESEARCH_SCOPE = DEFAULT_SCOPE
NARRATIVE_SCOPE = "narrative"

NUMBER_LIST_FIELDS = {"citations", "citations_to_use", "citations_used"}
NUMBER_FIELDS = {"citation", "citation_number"}


def _is_number_list(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, int) and not isinstance(item, bool) for item in value
    )


def renumber(value: Any, registry: CitationRegistry, scope: str) -> Any:
    """Rewrite [n] markers and citation number fields throughout a value"""
    if isinstance(value, Enum):
        return value
    if isinstance(value, str):
        return registry.rewrite_markers(value, scope)
    if isinstance(value, list):
        return [renumber(item, registry, scope) for item in value]
    if isinstance(value, BaseModel):
        update = {}
        for name in type(value).model_fields:
            field = getattr(value, name)
            if name in NUMBER_LIST_FIELDS and _is_number_list(field):
                update[name] = registry.remap_numbers(field, scope)
            elif name in NUMBER_FIELDS and (field is None or isinstance(field, int)):
                update[name] = registry.remap_number(field, scope)
            else:
                update[name] = renumber(field, registry, scope)
        return value.model_copy(update=update)
    return value


def _renumber_raw_citations(
    citations: List[TimelineCitationRaw],
    registry: CitationRegistry,
    scope: str
) -> List[TimelineCitationRaw]:
    result = []
    seen = set()
    for citation in citations:
        number = registry.remap_number(citation.number, scope)
        if number is None or number in seen:
            continue
        seen.add(number)
        result.append(citation.model_copy(update={"number": number}))
    return result


def apply_citation_numbers(context: GenerationContext, registry: CitationRegistry) -> GenerationContext:
    """
    Return a context whose citations use the registry's surviving numbers

    Research, skeleton, narrative, event and enrichment output cite the
    research corpus numbering. Structured content cites its own citation
    list, or the research numbering when it proposed no list of its own.
    Markers whose number did not survive stay literal and dangling numbers
    are dropped from citation lists.
    """
    patch = {}

    if context.research_corpus is not None:
        corpus = renumber(context.research_corpus, registry, RESEARCH_SCOPE)
        patch["research_corpus"] = corpus.model_copy(
            update={"citations": registry.scope_citations(RESEARCH_SCOPE)}
        )

    for name in ("skeleton", "main_narrative", "enrichment"):
        value = getattr(context, name)
        if value is not None:
            patch[name] = renumber(value, registry, RESEARCH_SCOPE)

    if context.expanded_events is not None:
        patch["expanded_events"] = renumber(context.expanded_events, registry, RESEARCH_SCOPE)

    structured = context.structured_content
    if structured is not None:
        scope = NARRATIVE_SCOPE if structured.citations else RESEARCH_SCOPE
        renumbered = renumber(structured, registry, scope)
        patch["structured_content"] = renumbered.model_copy(update={
            "citations": _renumber_raw_citations(structured.citations, registry, scope)
        })

    logger.debug(f"Applied {len(registry)} surviving citation numbers")
    return context.merge(patch)
