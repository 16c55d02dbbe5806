"""Research phase: digest and numbered citations for the topic"""

import logging
from typing import Any, Dict

from chronicler.models import GenerationContext, PipelineState, TimelineSeed
from chronicler.normalizer import normalize_research_corpus
from .base import BasePhase

logger = logging.getLogger(__name__)


class ResearchPhase(BasePhase):
    """Gathers a research digest with citations"""

    state = PipelineState.RESEARCH
    requires = []

    def _default_system_prompt(self) -> str:
        return """You are a research historian assembling a source-backed research digest.
Cite every claim with a bracketed citation number [n] that refers to the citation list.
Prefer primary sources and reputable scholarship. Never invent URLs."""

    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """Execute research"""
        logger.info(f"[Phase 1] Research: {context.seed.title}")

        raw = await self.submit(self._build_user_prompt(context.seed))
        corpus = normalize_research_corpus(raw)

        logger.info(
            f"[Phase 1] Research complete: {len(corpus.citations)} citations, "
            f"{len(corpus.key_quotes)} quotes"
        )
        if not corpus.digest:
            self.report.record(self.name, "empty_output", "Research digest is empty")

        return self._result({"research_corpus": corpus})

    def _build_user_prompt(self, seed: TimelineSeed) -> str:
        prompt_parts = [
            f"Research this topic: {seed.describe()}",
            "",
            "Return a JSON object:",
            '{',
            '"digest": "1500-2500 word research digest with [n] citation markers",',
            '"citations": [{"number": 1, "source": "Author, Title", "url": "https://...", '
            '"type": "primary|secondary|modern", "reliability": "high|medium|low"}],',
            '"keyQuotes": [{"text": "...", "citationNumber": 1, "context": "..."}],',
            '"keyDataPoints": ["..."],',
            '"primarySourcesFound": ["..."]',
            '}',
            "",
            "Number citations densely from 1. Every [n] in the digest must appear in citations.",
        ]

        return "\n".join(prompt_parts)
