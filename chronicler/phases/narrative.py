"""Narrative phase: dramatized story beats plus the structured content graph"""

import logging
from typing import Any, Dict

from chronicler.models import GenerationContext, PipelineState
from chronicler.normalizer import normalize_main_narrative, normalize_structured_content
from chronicler.normalizer.coerce import as_dict
from .base import BasePhase

logger = logging.getLogger(__name__)


class NarrativePhase(BasePhase):
    """Writes the main narrative and its structured content"""

    state = PipelineState.NARRATIVE
    requires = ["research_corpus", "skeleton"]

    def _default_system_prompt(self) -> str:
        return """You are a narrative historian who writes vivid, accurate story-driven history.
Frame the period around a central dramatic question and tell it in story beats.
Refer to events by the exact skeleton titles. Return valid JSON for narrative content."""

    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """Execute narrative generation"""
        logger.info(f"[Phase 3] Narrative: {context.seed.title}")

        raw = as_dict(await self.submit(self._build_user_prompt(context)))
        narrative = normalize_main_narrative(raw)
        structured = normalize_structured_content(
            raw.get("structuredContent") or raw,
            report=self.report
        )

        logger.info(
            f"[Phase 3] Narrative complete: {len(narrative.story_beats)} beats, "
            f"{len(structured.event_notes)} event notes, {len(structured.themes)} themes"
        )
        if not narrative.story_beats:
            self.report.record(self.name, "empty_output", "Narrative has no story beats")

        return self._result({
            "main_narrative": narrative,
            "structured_content": structured,
        })

    def _build_user_prompt(self, context: GenerationContext) -> str:
        skeleton = context.skeleton
        prompt_parts = [
            f"Write the main narrative for: {context.seed.describe()}",
            "",
            "RESEARCH DIGEST:",
            context.research_corpus.digest,
            "",
            "SKELETON:",
            self.to_json(skeleton),
            "",
            "Return a JSON object:",
            '{',
            '"pageTitle": "...", "centralQuestion": "...", "storyCharacter": "...", "summary": "...",',
            '"overview": [{"subheading": "...", "content": "... [1]", "citationsUsed": [1]}],',
            '"storyBeats": [{"beatType": "world-before|inciting|escalation|climax|aftermath", '
            '"title": "...", "paragraphs": ["1-3 paragraphs"]}],',
            '"themes": [{"id": "...", "title": "...", "description": "..."}],',
            '"keyPeople": ["..."],',
            '"structuredContent": {',
            '  "themes": [{"id": "...", "title": "...", "description": "...", "focus": "..."}],',
            '  "eventNotes": [{"title": "skeleton event title", "categoryId": "theme id", "summary": "...", '
            '"soWhat": "why it matters", "relationships": [{"type": "led_to|response_to|parallel|foreshadows", '
            '"targetTitle": "skeleton event title", "detail": "..."}], "humanDetail": "...", "quote": "..."}],',
            '  "narrativeConnectors": [{"afterEventTitle": "...", "text": "..."}],',
            '  "turningPoints": [{"title": "...", "description": "...", "whyItMatters": "..."}],',
            '  "perspectives": {"evidence": {"available": [], "gaps": []}, '
            '"interpretations": {"debates": [], "contested": []}, "context": {"contemporary": "", "hindsight": ""}},',
            '  "themeInsights": [{"title": "...", "insight": "...", "supportingEvents": [], "citations": []}],',
            '  "keyFacts": [{"title": "...", "detail": "..."}],',
            '  "contextSections": [{"heading": "...", "content": "..."}],',
            '  "citations": [{"number": 1, "source": "...", "url": "https://..."}]',
            '}',
            '}',
            "",
            f"Skeleton event titles: {', '.join(event.title for event in skeleton.events)}",
        ]

        return "\n".join(prompt_parts)
