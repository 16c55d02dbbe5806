"""SEO phase: search and social metadata"""

import logging
from typing import Any, Dict

from chronicler.models import GenerationContext, PipelineState
from chronicler.normalizer import normalize_seo
from .base import BasePhase

logger = logging.getLogger(__name__)


class SEOPhase(BasePhase):
    """Generates SEO metadata for the finished timeline"""

    state = PipelineState.SEO
    requires = ["main_narrative", "expanded_events", "enrichment"]

    def _default_system_prompt(self) -> str:
        return """You write search metadata for history pages.
Titles stay under 60 characters and descriptions under 160. Return JSON only."""

    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """Execute SEO generation"""
        logger.info(f"[Phase 6] SEO: {context.seed.title}")

        raw = await self.submit(self._build_user_prompt(context))
        seo = normalize_seo(raw)

        if not seo.seo_title:
            self.report.record(self.name, "empty_output", "SEO title is empty")

        return self._result({"seo": seo})

    def _build_user_prompt(self, context: GenerationContext) -> str:
        seed = context.seed
        narrative = context.main_narrative
        prompt_parts = [
            f'Generate SEO metadata for: "{seed.title}" ({seed.start_year} to {seed.end_year})',
            "",
            f"PAGE TITLE: {narrative.page_title}",
            f"SUMMARY: {narrative.summary}",
            f"THEMES: {', '.join(theme.title for theme in narrative.themes)}",
            f"KEY EVENTS: {', '.join(event.title for event in context.expanded_events[:5])}",
            f"KEY PEOPLE: {', '.join(person.name for person in context.enrichment.people[:5])}",
            "",
            "Return a JSON object:",
            '{"seoTitle": "...", "metaDescription": "...", "keywords": ["..."], "ogTitle": "...", '
            '"ogDescription": "...", "schemaSuggestions": {"timeline": {}, "events": {}, "people": {}}}',
        ]

        return "\n".join(prompt_parts)
