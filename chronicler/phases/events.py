"""Events phase: long-form event expansion and validated in-text event links"""

import logging
from typing import Any, Dict, List, Set

from chronicler.models import (
    ExpandedEvent,
    GenerationContext,
    MainNarrative,
    PipelineState,
    SkeletonEvent,
)
from chronicler.normalizer import (
    UniqueIdAllocator,
    normalize_expanded_events,
    normalize_link_proposals,
    proposals_from_beats,
)
from chronicler.normalizer.coerce import normalize_title_key
from chronicler.validation import EventLinkValidator
from .base import BasePhase

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10


class EventsPhase(BasePhase):
    """Expands skeleton events in chunks, then validates narrative event links"""

    state = PipelineState.EVENTS
    requires = ["skeleton", "main_narrative"]

    def _default_system_prompt(self) -> str:
        return """You expand outline events into long-form, well-cited historical entries.
Return JSON only. Do not wrap in fences. Keep each event's title exactly as given."""

    def _link_system_prompt(self) -> str:
        return """You are an expert at identifying natural places to add hyperlinks in narrative text.
Only propose phrases that appear verbatim in the paragraph. Return valid JSON only."""

    @property
    def chunk_size(self) -> int:
        size = self.pipeline_config.get("events_chunk_size", DEFAULT_CHUNK_SIZE)
        return size if isinstance(size, int) and size > 0 else DEFAULT_CHUNK_SIZE

    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """Execute event expansion and link validation"""
        skeleton_events = context.skeleton.events
        logger.info(f"[Phase 4] Events: expanding {len(skeleton_events)} events")

        allocator = UniqueIdAllocator(fallback="event")
        expanded: List[ExpandedEvent] = []
        for start in range(0, len(skeleton_events), self.chunk_size):
            chunk = skeleton_events[start:start + self.chunk_size]
            expanded.extend(await self._expand_chunk(context, chunk, allocator))

        logger.info(f"[Phase 4] Events complete: {len(expanded)} expanded events")

        valid_slugs = await self._authoritative_slugs(expanded)
        narrative, link_report = await self._link_events(context.main_narrative, expanded, valid_slugs)

        return self._result({
            "expanded_events": expanded,
            "main_narrative": narrative,
            "link_report": link_report,
        })

    async def _expand_chunk(
        self,
        context: GenerationContext,
        chunk: List[SkeletonEvent],
        allocator: UniqueIdAllocator
    ) -> List[ExpandedEvent]:
        logger.info(f"[Phase 4] Generating batch of {len(chunk)} events: {', '.join(e.title for e in chunk)}")

        raw = await self.submit(self._build_user_prompt(context, chunk))
        events = normalize_expanded_events(raw, skeleton_events=chunk, allocator=allocator)

        if len(events) < len(chunk):
            self.report.record(
                self.name,
                "events_missing",
                f"Model returned {len(events)} of {len(chunk)} events"
            )

        incomplete = [event for event in events if not event.is_complete()]
        if not incomplete or not self.pipeline_config.get("retry_incomplete_events", True):
            return events

        for event in incomplete:
            logger.warning(f"[Phase 4] Event {event.title!r} missing summary or description")
        logger.info(f"[Phase 4] Retrying {len(incomplete)} incomplete events")

        incomplete_keys = {normalize_title_key(event.title) for event in incomplete}
        retry_chunk = [event for event in chunk if normalize_title_key(event.title) in incomplete_keys]
        raw = await self.submit(self._build_user_prompt(context, retry_chunk or chunk, retry=True))
        # Retried events keep the slug minted on the first attempt
        retried = {
            normalize_title_key(event.title): event
            for event in normalize_expanded_events(raw, skeleton_events=chunk)
            if event.is_complete()
        }

        result = []
        for event in events:
            replacement = retried.get(normalize_title_key(event.title))
            if not event.is_complete() and replacement is not None:
                event = replacement.model_copy(update={"slug": event.slug})
                self.report.increment("events_retried")
            elif not event.is_complete():
                self.report.record(self.name, "events_incomplete", f"Retry failed for {event.title!r}")
            result.append(event)

        return result

    async def _authoritative_slugs(self, expanded: List[ExpandedEvent]) -> Set[str]:
        if self.event_directory is not None:
            return await self.event_directory.slugs()
        return {event.slug for event in expanded}

    async def _link_events(
        self,
        narrative: MainNarrative,
        expanded: List[ExpandedEvent],
        valid_slugs: Set[str]
    ):
        """Propose links against current beats and keep only the valid ones"""
        beats = narrative.story_beats
        proposals = proposals_from_beats(beats)

        if beats and expanded:
            raw = await self.submitter.submit_prompt(
                self._build_link_prompt(narrative, expanded),
                system_prompt=self._link_system_prompt(),
                max_tokens=(self.pipeline_config.get("max_tokens") or {}).get("event_links")
            )
            proposals.extend(normalize_link_proposals(raw))

        validator = EventLinkValidator(valid_slugs)
        link_report = validator.validate(beats, proposals, report=self.report)
        updated = narrative.model_copy(update={"story_beats": validator.apply(beats, link_report)})

        logger.info(
            f"[Phase 4c] Event links: {link_report.valid_count} added, "
            f"{link_report.rejected_count} rejected"
        )
        return updated, link_report

    def _build_user_prompt(
        self,
        context: GenerationContext,
        chunk: List[SkeletonEvent],
        retry: bool = False
    ) -> str:
        prompt_parts = [
            f"Expand these events for: {context.seed.describe()}",
            "",
            "EVENTS TO EXPAND:",
            self.to_json(chunk),
        ]

        if context.research_corpus:
            prompt_parts.extend(["", "RESEARCH DIGEST:", context.research_corpus.digest])

        if context.structured_content and context.structured_content.themes:
            prompt_parts.extend([
                "",
                "THEME IDS:",
                ", ".join(theme.id for theme in context.structured_content.themes),
            ])

        prompt_parts.extend([
            "",
            "Return a JSON object:",
            '{"expandedEvents": [{"title": "exact title", "year": -216, "slug": "kebab-case", '
            '"summary": "2-3 sentences", "description": "3-5 paragraphs with [n] citations", '
            '"significance": "...", "importance": 2, "type": "...", '
            '"category": "military|political|diplomatic|economic|cultural|crisis|legal|administrative", '
            '"themeId": "theme id", "tags": ["..."]}]}',
        ])

        if retry:
            prompt_parts.append(
                "\nA previous attempt left summary or description empty. "
                "Every event MUST have a non-empty summary and description."
            )

        return "\n".join(prompt_parts)

    def _build_link_prompt(self, narrative: MainNarrative, expanded: List[ExpandedEvent]) -> str:
        beats = [
            {"beatIndex": index, "title": beat.title, "paragraphs": beat.paragraphs}
            for index, beat in enumerate(narrative.story_beats)
        ]
        events = [{"title": event.title, "slug": event.slug, "year": event.year} for event in expanded]

        prompt_parts = [
            "Add hyperlinks from the story beats to the events below.",
            "",
            "STORY BEATS:",
            self.to_json(beats),
            "",
            "EVENTS (use these slugs exactly):",
            self.to_json(events),
            "",
            "Return a JSON object:",
            '{"beats": [{"beatIndex": 0, "eventLinks": [{"textToLink": "exact phrase from the paragraph", '
            '"eventSlug": "event-slug", "paragraphIndex": 0}]}]}',
            "",
            "textToLink must be copied verbatim from the paragraph it names. Link each event at most once.",
        ]

        return "\n".join(prompt_parts)
