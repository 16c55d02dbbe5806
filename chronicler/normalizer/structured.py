"""Normalization of the structured content graph produced alongside the narrative"""

import re
from typing import Any, Dict, List, Optional

from chronicler.models import (
    OverviewSection,
    RunReport,
    TimelineCitationRaw,
    TimelineEventNote,
    TimelineEventRelationship,
    TimelineNarrativeConnector,
    TimelinePerspectives,
    TimelineStructuredContent,
    TimelineStructuredFact,
    TimelineStructuredSection,
    TimelineThemeCategory,
    TimelineThemeInsight,
    TimelineTurningPoint,
)
from chronicler.models.structured import (
    PerspectiveContext,
    PerspectiveEvidence,
    PerspectiveInterpretations,
)
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
from .relationships import normalize_relationship_type

PHASE = "narrative"


def normalize_theme_categories(raw: Any) -> List[TimelineThemeCategory]:
    """Theme categories with ids unique across the list"""
    allocator = UniqueIdAllocator(fallback="theme")
    themes = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "name"))
        if not title:
            continue

        themes.append(TimelineThemeCategory(
            id=allocator.allocate(pick(data, "id", "key", "slug"), title),
            title=title,
            description=clean_text(pick(data, "description", "summary")),
            focus=clean_text(pick(data, "focus", "insight"))
        ))

    return themes


def _theme_lookup(themes: List[TimelineThemeCategory]) -> Dict[str, str]:
    """Theme id keyed by lowercase title, slugified title and id"""
    lookup = {}
    for theme in themes:
        lower = theme.title.lower()
        lookup[lower] = theme.id
        slug = slugify(lower)
        if slug:
            lookup[slug] = theme.id
        lookup[theme.id] = theme.id
    return lookup


def _resolve_category(value: Any, lookup: Dict[str, str]) -> Optional[str]:
    category = clean_text(value).lower()
    if not category:
        return None
    slug = slugify(category)
    return lookup.get(category) or (lookup.get(slug) if slug else None) or slug or None


def _normalize_relationships(raw: Any, report: Optional[RunReport]) -> List[TimelineEventRelationship]:
    relationships = []

    for item in as_list(raw):
        data = as_dict(item)
        label = pick(data, "type", "relationship")
        relationship_type = normalize_relationship_type(label)
        target_title = clean_text(pick(data, "targetTitle", "target_title", "target", "event"))

        if relationship_type is None or not target_title:
            if report is not None:
                report.record(
                    PHASE,
                    "relationship_unrecognized",
                    f"Dropped relationship with label {clean_text(label)!r}",
                    {"target": target_title}
                )
            continue

        relationships.append(TimelineEventRelationship(
            type=relationship_type,
            target_title=target_title,
            detail=clean_text(pick(data, "detail", "explanation"))
        ))

    return relationships


def normalize_event_notes(
    raw: Any,
    themes: List[TimelineThemeCategory],
    report: Optional[RunReport] = None
) -> List[TimelineEventNote]:
    """Event notes with categories resolved against the theme list"""
    lookup = _theme_lookup(themes)
    notes = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "event"))
        if not title:
            continue

        quote = clean_text(data.get("quote"))
        notes.append(TimelineEventNote(
            title=title,
            category_id=_resolve_category(pick(data, "categoryId", "category_id", "category", "theme"), lookup),
            summary=clean_text(pick(data, "summary", "description")),
            so_what=clean_text(pick(data, "soWhat", "so_what", "significance")),
            relationships=_normalize_relationships(data.get("relationships"), report),
            human_detail=clean_text(pick(data, "humanDetail", "human_detail", "human")) or quote,
            quote=quote
        ))

    return notes


def normalize_context_sections(raw: Any) -> List[TimelineStructuredSection]:
    """Context sections given as a list or as one "Heading: body" string"""
    if isinstance(raw, list):
        items = raw
    elif isinstance(raw, str):
        items = re.split(r'\n(?=[A-Z][^\n]*:)', raw)
    else:
        items = []

    sections = []
    for item in items:
        if not item:
            continue

        if isinstance(item, dict):
            heading = clean_text(pick(item, "heading", "title"))
            content = clean_text(pick(item, "content", "body", "text"))
            if heading or content:
                sections.append(TimelineStructuredSection(heading=heading or "Context", content=content))
            continue

        if isinstance(item, str):
            match = re.match(r'^([^:]+):\s*(.*)$', item, re.DOTALL)
            if match:
                sections.append(TimelineStructuredSection(
                    heading=clean_text(match.group(1)) or "Context",
                    content=clean_text(match.group(2))
                ))
            elif clean_text(item):
                sections.append(TimelineStructuredSection(content=clean_text(item)))

    return sections


def normalize_perspectives(raw: Any) -> TimelinePerspectives:
    data = as_dict(raw)
    evidence = as_dict(data.get("evidence"))
    interpretations = as_dict(data.get("interpretations"))
    context = as_dict(data.get("context"))

    return TimelinePerspectives(
        evidence=PerspectiveEvidence(
            available=to_string_list(pick(evidence, "available", "sources")),
            gaps=to_string_list(evidence.get("gaps"))
        ),
        interpretations=PerspectiveInterpretations(
            debates=to_string_list(interpretations.get("debates")),
            contested=to_string_list(pick(interpretations, "contested", "questions"))
        ),
        context=PerspectiveContext(
            contemporary=clean_text(context.get("contemporary")),
            hindsight=clean_text(context.get("hindsight"))
        )
    )


def normalize_theme_insights(raw: Any) -> List[TimelineThemeInsight]:
    insights = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "theme"))
        insight = clean_text(pick(data, "insight", "summary"))
        if not title or not insight:
            continue

        insights.append(TimelineThemeInsight(
            title=title,
            insight=insight,
            analysis=optional_text(data.get("analysis")),
            modern_relevance=optional_text(pick(data, "modernRelevance", "modern_relevance", "relevance")),
            supporting_events=to_string_list(pick(data, "supportingEvents", "supporting_events", "relatedEvents")),
            citations=to_int_list(data.get("citations"))
        ))

    return insights


def normalize_key_facts(raw: Any) -> List[TimelineStructuredFact]:
    facts = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "label"))
        detail = clean_text(pick(data, "detail", "text", "value"))
        if not title and not detail:
            continue
        facts.append(TimelineStructuredFact(title=title or detail, detail=detail or title))

    return facts


def normalize_overview_sections(raw: Any) -> List[OverviewSection]:
    sections = []

    for item in as_list(raw):
        if isinstance(item, str):
            content = clean_text(item)
            data = {}
        else:
            data = as_dict(item)
            content = clean_text(pick(data, "content", "text", "paragraph"))
        if not content:
            continue
        sections.append(OverviewSection(
            subheading=optional_text(data.get("subheading")),
            content=content,
            citations_used=to_int_list(pick(data, "citationsUsed", "citations_used", "citations"), minimum=1)
        ))

    return sections


def normalize_raw_citations(raw: Any) -> List[TimelineCitationRaw]:
    """Citations that carry a URL and some label; anything else is dropped"""
    citations = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(data.get("title"))
        citation = TimelineCitationRaw(
            number=to_int(data.get("number")),
            source=clean_text(data.get("source")) or title,
            title=title,
            url=clean_text(data.get("url"))
        )
        if citation.url and (citation.source or citation.title):
            citations.append(citation)

    return citations


def normalize_structured_content(raw: Any, report: Optional[RunReport] = None) -> TimelineStructuredContent:
    """
    Normalize structured content into its fixed schema

    Args:
        raw: Parsed model output of any shape
        report: Optional sink for counts of dropped relationships

    Returns:
        Fully populated structured content; the all-defaults value for garbage input
    """
    data = as_dict(raw)
    themes = normalize_theme_categories(data.get("themes"))

    overview = pick(data, "overview", "mainContent")
    overview_sections = normalize_overview_sections(
        pick(data, "overviewSections", "overview_sections")
        if not isinstance(overview, list) else overview
    )

    connectors = []
    for item in as_list(pick(data, "narrativeConnectors", "connectors")):
        connector = as_dict(item)
        text = clean_text(pick(connector, "text", "summary"))
        if text:
            connectors.append(TimelineNarrativeConnector(
                text=text,
                after_event_title=clean_text(pick(connector, "afterEventTitle", "after_event_title", "after"))
            ))

    turning_points = []
    for item in as_list(pick(data, "turningPoints", "turning_points")):
        point = as_dict(item)
        title = clean_text(pick(point, "title", "event"))
        description = clean_text(pick(point, "description", "why"))
        if title and description:
            turning_points.append(TimelineTurningPoint(
                title=title,
                description=description,
                why_it_matters=clean_text(pick(point, "whyItMatters", "why_it_matters"))
            ))

    return TimelineStructuredContent(
        summary=clean_text(data.get("summary")),
        central_question=clean_text(pick(data, "centralQuestion", "central_question", "central_tension")),
        story_character=clean_text(pick(data, "storyCharacter", "story_character", "storyType")),
        overview=clean_text(overview),
        overview_sections=overview_sections,
        key_facts=normalize_key_facts(pick(data, "keyFacts", "key_facts")),
        themes=themes,
        event_notes=normalize_event_notes(pick(data, "eventNotes", "event_notes", "events"), themes, report),
        connectors=connectors,
        turning_points=turning_points,
        perspectives=normalize_perspectives(data.get("perspectives")),
        theme_insights=normalize_theme_insights(pick(data, "themeInsights", "theme_insights", "themesAnalysis")),
        context_sections=normalize_context_sections(pick(data, "contextSections", "context_sections", "context")),
        citations=normalize_raw_citations(data.get("citations"))
    )
