"""Expanded event normalization and slug minting"""

from typing import Any, Dict, List, Optional

from chronicler.models import ExpandedEvent, SkeletonEvent
from .coerce import (
    UniqueIdAllocator,
    as_dict,
    as_list,
    clamp_importance,
    clean_text,
    normalize_title_key,
    pick,
    slugify,
    to_int,
    to_int_list,
    to_string_list,
)

TIMELINE_CATEGORIES = {
    "military": "Military",
    "political": "Political",
    "diplomatic": "Diplomatic",
    "economic": "Economic",
    "cultural": "Cultural",
    "crisis": "Crisis",
    "legal": "Legal",
    "administrative": "Administrative",
}


def normalize_category(value: Any) -> str:
    """Canonical category key when the text names one, else the trimmed text"""
    text = clean_text(value)
    key = text.lower()
    if key in TIMELINE_CATEGORIES:
        return key
    return text


def is_valid_category(value: str) -> bool:
    return value in TIMELINE_CATEGORIES


def _raw_event_list(raw: Any) -> List[Any]:
    if isinstance(raw, list):
        return raw
    data = as_dict(raw)
    return as_list(pick(data, "expandedEvents", "expanded_events", "events"))


def normalize_expanded_events(
    raw: Any,
    skeleton_events: Optional[List[SkeletonEvent]] = None,
    allocator: Optional[UniqueIdAllocator] = None
) -> List[ExpandedEvent]:
    """
    Normalize events phase output

    Args:
        raw: Parsed model output, either the event list or an object holding it
        skeleton_events: Skeleton events used to fill a missing year or importance
        allocator: Shared slug allocator so slugs stay unique across chunks

    Returns:
        Expanded events with unique slugs; events with no usable year are discarded
    """
    allocator = allocator or UniqueIdAllocator(fallback="event")
    by_title: Dict[str, SkeletonEvent] = {}
    for event in skeleton_events or []:
        by_title.setdefault(normalize_title_key(event.title), event)

    events = []
    for item in _raw_event_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "name"))
        if not title:
            continue

        skeleton_event = by_title.get(normalize_title_key(title))
        year = to_int(pick(data, "year", "startYear", "start_year"))
        if year is None and skeleton_event is not None:
            year = skeleton_event.year
        if year is None:
            continue

        end_year = to_int(pick(data, "endYear", "end_year"))
        if end_year is None and skeleton_event is not None:
            end_year = skeleton_event.end_year

        importance = data.get("importance")
        if importance is None and skeleton_event is not None:
            importance = skeleton_event.importance

        category = normalize_category(data.get("category"))
        if not category and skeleton_event is not None:
            category = normalize_category(skeleton_event.category)

        events.append(ExpandedEvent(
            title=title,
            year=year,
            end_year=end_year,
            slug=allocator.allocate(slugify(data.get("slug")), title),
            summary=clean_text(data.get("summary")),
            description=clean_text(pick(data, "description", "content")),
            significance=clean_text(data.get("significance")),
            importance=clamp_importance(importance),
            type=clean_text(data.get("type")) or (skeleton_event.type if skeleton_event else ""),
            category=category,
            theme_id=slugify(pick(data, "themeId", "theme_id", "theme")),
            tags=to_string_list(data.get("tags")),
            citations=to_int_list(pick(data, "citations", "citationsUsed", "citations_used"), minimum=1)
        ))

    return events
