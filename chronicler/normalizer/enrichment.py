"""Enrichment normalization"""

from typing import Any, Iterable, List, Optional

from chronicler.models import (
    Enrichment,
    ExpandedPerson,
    InterpretationSection,
    KeyFact,
    KeyHighlight,
    Perspective,
    PerspectiveCategory,
    RunReport,
    ThemeInsight,
    TurningPoint,
)
from chronicler.models.enrichment import BeforeAfter
from .coerce import (
    UniqueIdAllocator,
    as_dict,
    as_list,
    clean_text,
    optional_text,
    pick,
    slugify,
    to_int,
    to_int_list,
    to_string_list,
)

PHASE = "enrichment"

_PERSPECTIVE_CATEGORIES = {member.value: member for member in PerspectiveCategory}


def normalize_perspective_category(value: Any) -> Optional[PerspectiveCategory]:
    """Closed perspective category, tolerant of case and separators"""
    text = clean_text(value).upper().replace("_", " ").replace("-", " ").replace("&", "AND")
    text = " ".join(text.split())
    return _PERSPECTIVE_CATEGORIES.get(text)


def normalize_people(raw: Any, valid_event_slugs: Optional[Iterable[str]] = None) -> List[ExpandedPerson]:
    """People with unique slugs; related event slugs are filtered when the valid set is known"""
    allocator = UniqueIdAllocator(fallback="person")
    valid = set(valid_event_slugs) if valid_event_slugs is not None else None
    people = []

    for item in as_list(raw):
        data = as_dict(item)
        name = clean_text(pick(data, "name", "title"))
        if not name:
            continue

        related = to_string_list(pick(data, "relatedEventSlugs", "related_event_slugs", "relatedEvents"))
        if valid is not None:
            related = [slug for slug in related if slug in valid]

        people.append(ExpandedPerson(
            name=name,
            slug=allocator.allocate(slugify(data.get("slug")), name),
            birth_year=to_int(pick(data, "birthYear", "birth_year")),
            death_year=to_int(pick(data, "deathYear", "death_year")),
            role=clean_text(data.get("role")),
            bio_short=clean_text(pick(data, "bioShort", "bio_short")),
            bio_long=clean_text(pick(data, "bioLong", "bio_long")),
            related_event_slugs=related
        ))

    return people


def _before_after(value: Any) -> BeforeAfter:
    if isinstance(value, str):
        return BeforeAfter(after=clean_text(value))
    data = as_dict(value)
    return BeforeAfter(before=clean_text(data.get("before")), after=clean_text(data.get("after")))


def normalize_turning_points(raw: Any, valid_event_slugs: Optional[Iterable[str]] = None) -> List[TurningPoint]:
    """Turning points; an event slug outside the valid set is cleared"""
    valid = set(valid_event_slugs) if valid_event_slugs is not None else None
    points = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "event"))
        if not title:
            continue

        event_slug = clean_text(pick(data, "eventSlug", "event_slug"))
        if valid is not None and event_slug not in valid:
            event_slug = ""

        points.append(TurningPoint(
            title=title,
            event_slug=event_slug,
            year=to_int(data.get("year")),
            description=clean_text(data.get("description")),
            why_it_matters=clean_text(pick(data, "whyItMatters", "why_it_matters")),
            before_after=_before_after(pick(data, "beforeAfter", "before_after")),
            citations=to_int_list(data.get("citations"), minimum=1)
        ))

    return points


def normalize_perspectives(raw: Any, report: Optional[RunReport] = None) -> List[Perspective]:
    """Perspectives in the closed category set; unknown categories are dropped"""
    perspectives = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(data.get("title"))
        category = normalize_perspective_category(data.get("category"))
        if category is None:
            if report is not None and title:
                report.record(
                    PHASE,
                    "perspective_category_unknown",
                    f"Dropped perspective {title!r} with category {clean_text(data.get('category'))!r}"
                )
            continue
        if not title:
            continue

        perspectives.append(Perspective(
            category=category,
            title=title,
            content=clean_text(data.get("content")),
            citations=to_int_list(data.get("citations"), minimum=1)
        ))

    return perspectives


def normalize_theme_insights(raw: Any) -> List[ThemeInsight]:
    insights = []

    for item in as_list(raw):
        data = as_dict(item)
        theme_id = slugify(pick(data, "themeId", "theme_id", "id")) or slugify(data.get("title"))
        insight = clean_text(pick(data, "insight", "summary"))
        if not theme_id or not insight:
            continue

        insights.append(ThemeInsight(
            theme_id=theme_id,
            insight=insight,
            supporting_events=to_string_list(pick(data, "supportingEvents", "supporting_events", "relatedEvents")),
            analysis=optional_text(data.get("analysis")),
            modern_relevance=optional_text(pick(data, "modernRelevance", "modern_relevance")),
            citations=to_int_list(data.get("citations"), minimum=1)
        ))

    return insights


def normalize_key_facts(raw: Any) -> List[KeyFact]:
    facts = []

    for item in as_list(raw):
        data = as_dict(item)
        label = clean_text(pick(data, "label", "title"))
        value = clean_text(pick(data, "value", "detail", "text"))
        if not label and not value:
            continue

        citation = to_int(data.get("citation"))
        if citation is None:
            citations = to_int_list(data.get("citations"), minimum=1)
            citation = citations[0] if citations else None

        facts.append(KeyFact(label=label or value, value=value or label, citation=citation))

    return facts


def normalize_interpretation_sections(raw: Any) -> List[InterpretationSection]:
    """Interpretation sections with unique ids"""
    allocator = UniqueIdAllocator(fallback="section")
    sections = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(data.get("title"))
        content = clean_text(data.get("content"))
        if not title or not content:
            continue

        sections.append(InterpretationSection(
            id=allocator.allocate(data.get("id"), title),
            title=title,
            subtitle=optional_text(data.get("subtitle")),
            content=content,
            citations=to_int_list(data.get("citations"), minimum=1)
        ))

    return sections


def normalize_key_highlights(raw: Any, valid_event_slugs: Optional[Iterable[str]] = None) -> List[KeyHighlight]:
    """Highlights pointing at events; unknown slugs are dropped when the valid set is known"""
    valid = set(valid_event_slugs) if valid_event_slugs is not None else None
    highlights = []

    for item in as_list(raw):
        data = as_dict(item)
        event_slug = clean_text(pick(data, "eventSlug", "event_slug"))
        title = clean_text(data.get("title"))
        if not event_slug or not title:
            continue
        if valid is not None and event_slug not in valid:
            continue

        highlights.append(KeyHighlight(
            event_slug=event_slug,
            year=to_int(data.get("year")),
            title=title,
            summary=clean_text(data.get("summary")),
            why_it_matters=clean_text(pick(data, "whyItMatters", "why_it_matters")),
            immediate_impact=clean_text(pick(data, "immediateImpact", "immediate_impact")),
            tags=to_string_list(data.get("tags")),
            citations=to_int_list(data.get("citations"), minimum=1)
        ))

    return highlights


def normalize_enrichment(
    raw: Any,
    valid_event_slugs: Optional[Iterable[str]] = None,
    report: Optional[RunReport] = None
) -> Enrichment:
    """
    Normalize enrichment phase output

    Args:
        raw: Parsed model output of any shape
        valid_event_slugs: Authoritative event slugs for filtering references
        report: Optional sink for dropped perspective counts
    """
    data = as_dict(raw)
    slugs = list(valid_event_slugs) if valid_event_slugs is not None else None

    return Enrichment(
        people=normalize_people(data.get("people"), slugs),
        turning_points=normalize_turning_points(pick(data, "turningPoints", "turning_points"), slugs),
        perspectives=normalize_perspectives(data.get("perspectives"), report),
        theme_insights=normalize_theme_insights(pick(data, "themeInsights", "theme_insights")),
        key_facts=normalize_key_facts(pick(data, "keyFacts", "key_facts")),
        interpretation_sections=normalize_interpretation_sections(
            pick(data, "interpretationSections", "interpretation_sections")
        ),
        key_highlights=normalize_key_highlights(pick(data, "keyHighlights", "key_highlights"), slugs)
    )
