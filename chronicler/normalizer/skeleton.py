"""Skeleton normalization"""

from typing import Any, Iterable, List, Optional

from chronicler.models import (
    PeriodBreakdown,
    RunReport,
    SkeletonEvent,
    SkeletonPerson,
    SkeletonTheme,
    TimelineSkeleton,
)
from .coerce import (
    UniqueIdAllocator,
    as_dict,
    as_list,
    clamp_importance,
    clean_text,
    pick,
    to_int,
    to_int_list,
    to_string_list,
)

PHASE = "skeleton"


class _CitationFilter:
    """Drops citation numbers that are not live, counting each miss"""

    def __init__(self, known: Optional[Iterable[int]], report: Optional[RunReport]):
        self.known = set(known) if known is not None else None
        self.report = report

    def __call__(self, raw: Any, owner: str) -> List[int]:
        numbers = to_int_list(raw, minimum=1)
        if self.known is None:
            return numbers

        kept = []
        for number in numbers:
            if number in self.known:
                kept.append(number)
            elif self.report is not None:
                self.report.record(
                    PHASE,
                    "citation_dangling",
                    f"{owner} cites unknown source [{number}]",
                    {"number": number}
                )
        return kept


def normalize_skeleton_events(raw: Any, citation_filter=None) -> List[SkeletonEvent]:
    """Skeleton events; entries without a title or a usable year are discarded"""
    citation_filter = citation_filter or _CitationFilter(None, None)
    events = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "name"))
        year = to_int(pick(data, "year", "startYear", "start_year"))
        if not title or year is None:
            continue

        events.append(SkeletonEvent(
            title=title,
            year=year,
            end_year=to_int(pick(data, "endYear", "end_year")),
            one_sentence=clean_text(pick(data, "oneSentence", "one_sentence", "summary")),
            key_facts=to_string_list(pick(data, "keyFacts", "key_facts")),
            citations_to_use=citation_filter(pick(data, "citationsToUse", "citations_to_use", "citations"), title),
            importance=clamp_importance(data.get("importance")),
            type=clean_text(data.get("type")),
            category=clean_text(data.get("category"))
        ))

    return events


def normalize_skeleton_people(raw: Any, citation_filter=None) -> List[SkeletonPerson]:
    citation_filter = citation_filter or _CitationFilter(None, None)
    people = []

    for item in as_list(raw):
        data = as_dict(item)
        name = clean_text(pick(data, "name", "title"))
        if not name:
            continue

        people.append(SkeletonPerson(
            name=name,
            birth_year=to_int(pick(data, "birthYear", "birth_year")),
            death_year=to_int(pick(data, "deathYear", "death_year")),
            role=clean_text(data.get("role")),
            one_sentence=clean_text(pick(data, "oneSentence", "one_sentence", "summary")),
            key_facts=to_string_list(pick(data, "keyFacts", "key_facts")),
            citations_to_use=citation_filter(pick(data, "citationsToUse", "citations_to_use", "citations"), name),
            related_events=to_string_list(pick(data, "relatedEvents", "related_events"))
        ))

    return people


def normalize_skeleton_themes(raw: Any) -> List[SkeletonTheme]:
    allocator = UniqueIdAllocator(fallback="theme")
    themes = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "name"))
        if not title:
            continue

        themes.append(SkeletonTheme(
            id=allocator.allocate(pick(data, "id", "slug"), title),
            title=title,
            one_sentence=clean_text(pick(data, "oneSentence", "one_sentence", "description")),
            related_events=to_string_list(pick(data, "relatedEvents", "related_events"))
        ))

    return themes


def normalize_periodization(raw: Any) -> List[PeriodBreakdown]:
    periods = []

    for item in as_list(raw):
        data = as_dict(item)
        name = clean_text(pick(data, "name", "title"))
        start_year = to_int(pick(data, "startYear", "start_year"))
        end_year = to_int(pick(data, "endYear", "end_year"))
        if not name or start_year is None or end_year is None:
            continue

        periods.append(PeriodBreakdown(
            name=name,
            start_year=min(start_year, end_year),
            end_year=max(start_year, end_year),
            event_count=max(0, to_int(pick(data, "eventCount", "event_count")) or 0)
        ))

    return periods


def normalize_skeleton(
    raw: Any,
    known_citations: Optional[Iterable[int]] = None,
    report: Optional[RunReport] = None
) -> TimelineSkeleton:
    """
    Normalize skeleton phase output

    Args:
        raw: Parsed model output of any shape
        known_citations: Citation numbers that are live; others are dropped.
            None keeps every number.
        report: Optional sink for dangling citation counts
    """
    data = as_dict(raw)
    citation_filter = _CitationFilter(known_citations, report)

    return TimelineSkeleton(
        events=normalize_skeleton_events(data.get("events"), citation_filter),
        people=normalize_skeleton_people(data.get("people"), citation_filter),
        themes=normalize_skeleton_themes(data.get("themes")),
        periodization=normalize_periodization(pick(data, "periodization", "periods"))
    )
