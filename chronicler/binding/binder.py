"""Narrative binder: attaches structured content to persisted events by slug"""

import logging
from typing import Dict, Iterable, Optional, Union

from chronicler.models import (
    BindingStats,
    BoundConnector,
    BoundRelationship,
    BoundTurningPoint,
    EventNarrativeBinding,
    EventRecord,
    ExpandedEvent,
    NarrativeBindings,
    RunReport,
    TimelineStructuredContent,
    TimelineThemeCategory,
)
from .matching import EventIndex, TitleMatcher

logger = logging.getLogger(__name__)

PHASE = "binding"

PersistedEvent = Union[EventRecord, ExpandedEvent]


class NarrativeBinder:
    """Resolves title references in structured content to event slugs"""

    def __init__(self, matcher: Optional[TitleMatcher] = None):
        self.matcher = matcher

    def bind(
        self,
        events: Iterable[PersistedEvent],
        structured: Optional[TimelineStructuredContent],
        report: Optional[RunReport] = None
    ) -> NarrativeBindings:
        """
        Build the per-event binding map

        Args:
            events: Persisted events, each with a title and a slug
            structured: Normalized structured content, or None
            report: Optional sink for unresolved reference counts

        Returns:
            Bindings with exactly one entry for every event slug
        """
        events = list(events)
        index = EventIndex(events, self.matcher)
        event_narratives: Dict[str, EventNarrativeBinding] = {
            event.slug: EventNarrativeBinding() for event in events
        }
        stats = BindingStats()

        if structured is None:
            return NarrativeBindings(event_narratives=event_narratives, stats=stats)

        themes_by_id: Dict[str, TimelineThemeCategory] = {theme.id: theme for theme in structured.themes}

        for note in structured.event_notes:
            match = index.find(note.title)
            if match is None:
                stats.notes_unmatched += 1
                self._record(report, "note_unmatched", f"No event matches note {note.title!r}")
                continue

            relationships = []
            for relationship in note.relationships:
                target_slug = index.find_slug(relationship.target_title)
                if target_slug is None:
                    stats.relationships_dropped += 1
                    self._record(
                        report,
                        "relationships_dropped",
                        f"Relationship target {relationship.target_title!r} does not match any event",
                        {"source": match.slug, "type": relationship.type.value}
                    )
                    continue
                relationships.append(BoundRelationship(
                    type=relationship.type,
                    target_title=relationship.target_title,
                    target_slug=target_slug,
                    detail=relationship.detail
                ))
                stats.relationships_bound += 1

            event_narratives[match.slug] = EventNarrativeBinding(
                note=note,
                category=themes_by_id.get(note.category_id) if note.category_id else None,
                relationships=relationships
            )
            stats.notes_bound += 1

        connectors = []
        for connector in structured.connectors:
            slug = index.find_slug(connector.after_event_title) if connector.after_event_title else None
            if slug is None:
                stats.connectors_unbound += 1
            connectors.append(BoundConnector(text=connector.text, after_event_slug=slug))

        turning_points = []
        for point in structured.turning_points:
            slug = index.find_slug(point.title)
            if slug is None:
                stats.turning_points_unbound += 1
            turning_points.append(BoundTurningPoint(
                title=point.title,
                description=point.description,
                why_it_matters=point.why_it_matters,
                event_slug=slug
            ))

        logger.info(
            f"Bound {stats.notes_bound} notes and {stats.relationships_bound} relationships "
            f"to {len(events)} events ({stats.relationships_dropped} relationships dropped)"
        )

        return NarrativeBindings(
            event_narratives=event_narratives,
            connectors=connectors,
            turning_points=turning_points,
            stats=stats
        )

    @staticmethod
    def _record(report: Optional[RunReport], code: str, message: str, details: Optional[dict] = None):
        if report is not None:
            report.record(PHASE, code, message, details)
