"""Base phase class with shared prompt submission and precondition checks"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from chronicler.errors import PhasePreconditionError
from chronicler.llm import PromptSubmitter
from chronicler.memory import CitationIndex, EventDirectory
from chronicler.models import GenerationContext, PipelineState, RunReport

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent.parent.parent / "config" / "prompts"


class BasePhase(ABC):
    """Base class for all generation phases.

    A phase reads the accumulated context, submits one or more prompts and
    returns a patch of normalized outputs. It never mutates the context.
    """

    state: PipelineState
    # Context fields that must be present before the phase may run
    requires: List[str] = []

    def __init__(
        self,
        submitter: PromptSubmitter,
        config: Optional[Dict[str, Any]] = None,
        report: Optional[RunReport] = None,
        event_directory: Optional[EventDirectory] = None,
        citation_index: Optional[CitationIndex] = None
    ):
        """
        Initialize phase

        Args:
            submitter: Injected prompt submission capability
            config: Configuration dictionary
            report: Run report sink
            event_directory: Lookup of persisted events
            citation_index: Lookup of live citation numbers
        """
        self.name = self.state.value
        self.submitter = submitter
        self.config = config or {}
        self.report = report if report is not None else RunReport()
        self.event_directory = event_directory
        self.citation_index = citation_index

        prompt_path = PROMPTS_DIR / f"{self.name}.txt"
        if prompt_path.exists():
            with open(prompt_path, "r", encoding="utf-8") as f:
                self.system_prompt = f.read()
        else:
            self.system_prompt = self._default_system_prompt()

    @abstractmethod
    def _default_system_prompt(self) -> str:
        """Default system prompt if file not found"""
        pass

    @property
    def pipeline_config(self) -> Dict[str, Any]:
        return self.config.get("pipeline", {}) or {}

    def _max_tokens(self) -> Optional[int]:
        return (self.pipeline_config.get("max_tokens") or {}).get(self.name)

    def check_preconditions(self, context: GenerationContext):
        """Raise PhasePreconditionError if an upstream output is absent"""
        for field in self.requires:
            if getattr(context, field) is None:
                raise PhasePreconditionError(self.name, field)

    async def submit(self, prompt: str) -> Any:
        """Submit a prompt with this phase's system prompt and token budget"""
        logger.debug(f"[{self.name}] Prompt length: {len(prompt)} characters")
        return await self.submitter.submit_prompt(
            prompt,
            system_prompt=self.system_prompt,
            max_tokens=self._max_tokens()
        )

    @abstractmethod
    async def execute(self, context: GenerationContext) -> Dict[str, Any]:
        """
        Execute the phase

        Args:
            context: Context accumulated by previous phases

        Returns:
            {"phase": name, "output": patch of context fields, "status": "success"}
        """
        pass

    def _result(self, output: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "phase": self.name,
            "output": output,
            "status": "success"
        }

    @staticmethod
    def to_json(value: Any) -> str:
        """Pretty JSON for embedding models or lists of models in prompts"""
        if hasattr(value, "model_dump"):
            value = value.model_dump(mode="json")
        elif isinstance(value, list):
            value = [item.model_dump(mode="json") if hasattr(item, "model_dump") else item for item in value]
        return json.dumps(value, indent=2, ensure_ascii=False)

    def get_context_summary(self, context: GenerationContext) -> str:
        """Get a human-readable summary of context for prompts"""
        summary_parts = [f"Topic: {context.seed.describe()}"]

        if context.research_corpus:
            summary_parts.append(f"Research: {len(context.research_corpus.citations)} citations")

        if context.skeleton:
            summary_parts.append(
                f"Skeleton: {len(context.skeleton.events)} events, {len(context.skeleton.people)} people"
            )

        if context.main_narrative:
            summary_parts.append(f"Narrative: {context.main_narrative.page_title or 'untitled'}")

        if context.expanded_events:
            summary_parts.append(f"Expanded events: {len(context.expanded_events)}")

        return "\n".join(summary_parts)
