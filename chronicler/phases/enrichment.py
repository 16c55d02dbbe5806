"""Enrichment phase: people, turning points, perspectives and highlights"""

import logging
from typing import Any, Dict

from chronicler.models import GenerationContext, PipelineState
from chronicler.normalizer import normalize_enrichment
from .base import BasePhase

logger = logging.getLogger(__name__)


class EnrichmentPhase(BasePhase):
    """Generates editorial enrichment over the expanded events"""

    state = PipelineState.ENRICHMENT
    requires = ["research_corpus", "skeleton", "main_narrative", "expanded_events"]

    def _default_system_prompt(self) -> str:
        return """You are an editor adding analytical depth to a historical timeline.
Ground every element in the research corpus and cite it with citation numbers.
Reference events only by the slugs provided. Return enrichment JSON only."""

    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """Execute enrichment"""
        logger.info(f"[Phase 5] Enrichment: {context.seed.title}")

        raw = await self.submit(self._build_user_prompt(context))
        enrichment = normalize_enrichment(raw, valid_event_slugs=context.event_slugs(), report=self.report)

        logger.info(
            f"[Phase 5] Enrichment complete: {len(enrichment.people)} people, "
            f"{len(enrichment.turning_points)} turning points, {len(enrichment.perspectives)} perspectives"
        )

        return self._result({"enrichment": enrichment})

    def _build_user_prompt(self, context: GenerationContext) -> str:
        events = [
            {"title": event.title, "slug": event.slug, "year": event.year, "summary": event.summary}
            for event in context.expanded_events
        ]
        narrative = context.main_narrative

        prompt_parts = [
            f"Generate enrichment content for: {context.seed.describe()}",
            "",
            "RESEARCH DIGEST:",
            context.research_corpus.digest,
            "",
            "SKELETON PEOPLE (expand each):",
            self.to_json(context.skeleton.people),
            "",
            f"CENTRAL QUESTION: {narrative.central_question}",
            f"THEMES: {', '.join(theme.title for theme in narrative.themes)}",
            "",
            "EXPANDED EVENTS:",
            self.to_json(events),
            "",
            "Return a JSON object with these arrays:",
            '{',
            '"people": [{"name": "...", "slug": "...", "birthYear": -247, "deathYear": -183, "role": "...", '
            '"bioShort": "...", "bioLong": "...", "relatedEventSlugs": ["event-slug"]}],',
            '"turningPoints": [{"title": "...", "eventSlug": "...", "year": -216, "description": "...", '
            '"whyItMatters": "...", "beforeAfter": {"before": "...", "after": "..."}, "citations": [1]}],',
            '"perspectives": [{"category": "INTERPRETATIONS|DEBATES|CONFLICT|HISTORIOGRAPHY|WITH HINDSIGHT|'
            'SOURCES AND BIAS", "title": "...", "content": "...", "citations": [1]}],',
            '"themeInsights": [{"themeId": "...", "insight": "...", "analysis": "...", '
            '"modernRelevance": "...", "supportingEvents": ["event-slug"], "citations": [1]}],',
            '"keyFacts": [{"label": "...", "value": "...", "citation": 1}],',
            '"interpretationSections": [{"id": "...", "title": "...", "subtitle": "...", "content": "...", '
            '"citations": [1]}],',
            '"keyHighlights": [{"eventSlug": "...", "year": -216, "title": "...", "summary": "...", '
            '"whyItMatters": "...", "immediateImpact": "...", "tags": ["..."], "citations": [1]}]',
            '}',
        ]

        return "\n".join(prompt_parts)
