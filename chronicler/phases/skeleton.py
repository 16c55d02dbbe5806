"""Skeleton phase: the factual outline of events, people and themes"""

import logging
from typing import Any, Dict

from chronicler.models import GenerationContext, PipelineState
from chronicler.normalizer import normalize_skeleton
from .base import BasePhase

logger = logging.getLogger(__name__)


class SkeletonPhase(BasePhase):
    """Builds the factual skeleton from the research corpus"""

    state = PipelineState.SKELETON
    requires = ["research_corpus"]

    def _default_system_prompt(self) -> str:
        return """You produce concise factual outlines as JSON without prose.
Every event must carry a specific title and a signed year (negative for BCE).
Only cite citation numbers that exist in the research corpus."""

    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """Execute skeleton generation"""
        corpus = context.research_corpus
        logger.info(f"[Phase 2] Skeleton: {context.seed.title}")

        known_citations = [
            number for number in corpus.citation_numbers()
            if self.citation_index is None or self.citation_index.is_live(number)
        ]

        raw = await self.submit(self._build_user_prompt(context))
        skeleton = normalize_skeleton(raw, known_citations=known_citations, report=self.report)

        logger.info(
            f"[Phase 2] Skeleton complete: {len(skeleton.events)} events, "
            f"{len(skeleton.people)} people, {len(skeleton.themes)} themes"
        )
        if not skeleton.events:
            self.report.record(self.name, "empty_output", "Skeleton has no usable events")

        return self._result({"skeleton": skeleton})

    def _build_user_prompt(self, context: GenerationContext) -> str:
        seed = context.seed
        corpus = context.research_corpus
        prompt_parts = [
            f"Build the factual skeleton for: {seed.describe()}",
            f"Stay within {seed.start_year} to {seed.end_year}.",
            "",
            "RESEARCH DIGEST:",
            corpus.digest,
            "",
            "CITATIONS:",
            self.to_json(corpus.citations),
            "",
            "Return a JSON object:",
            '{',
            '"events": [{"title": "...", "year": -216, "endYear": null, "oneSentence": "...", '
            '"keyFacts": ["..."], "citationsToUse": [1, 2], "importance": 1, "type": "battle", '
            '"category": "military|political|diplomatic|economic|cultural|crisis|legal|administrative"}],',
            '"people": [{"name": "...", "birthYear": -247, "deathYear": -183, "role": "...", '
            '"oneSentence": "...", "keyFacts": ["..."], "citationsToUse": [3], "relatedEvents": ["event title"]}],',
            '"themes": [{"id": "kebab-case-id", "title": "...", "oneSentence": "...", "relatedEvents": ["event title"]}],',
            '"periodization": [{"name": "...", "startYear": -218, "endYear": -201, "eventCount": 5}]',
            '}',
            "",
            "importance: 3 = major, 2 = significant, 1 = notable.",
        ]

        return "\n".join(prompt_parts)
