"""Phase orchestrator: runs generation phases in order and binds the result"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel

from chronicler.binding import (
    NARRATIVE_SCOPE,
    RESEARCH_SCOPE,
    CitationRegistry,
    NarrativeBinder,
    apply_citation_numbers,
)
from chronicler.errors import PhasePreconditionError, PipelineRunError, summarize_error
from chronicler.llm import PromptSubmitter
from chronicler.memory import CitationIndex, EventDirectory
from chronicler.models import (
    GenerationContext,
    GenerationResult,
    PipelineState,
    RunReport,
    TimelineSeed,
)
from chronicler.phases import (
    BasePhase,
    EnrichmentPhase,
    EventsPhase,
    NarrativePhase,
    ResearchPhase,
    SEOPhase,
    SkeletonPhase,
)
from .workflow import Workflow

logger = logging.getLogger(__name__)

PHASE_CLASSES = {
    PipelineState.RESEARCH: ResearchPhase,
    PipelineState.SKELETON: SkeletonPhase,
    PipelineState.NARRATIVE: NarrativePhase,
    PipelineState.EVENTS: EventsPhase,
    PipelineState.ENRICHMENT: EnrichmentPhase,
    PipelineState.SEO: SEOPhase,
}


class BatchResult(BaseModel):
    """Outcome of one seed in a batch run"""
    seed: TimelineSeed
    success: bool
    result: Optional[GenerationResult] = None
    error: Optional[str] = None


ProgressCallback = Callable[[int, int, BatchResult], Any]


class PhaseOrchestrator:
    """Orchestrates one or many timeline generation runs"""

    def __init__(
        self,
        submitter: PromptSubmitter,
        config: Optional[Dict[str, Any]] = None,
        event_directory: Optional[EventDirectory] = None,
        citation_index: Optional[CitationIndex] = None,
        binder: Optional[NarrativeBinder] = None
    ):
        """
        Initialize orchestrator

        Args:
            submitter: Injected prompt submission capability
            config: Configuration dictionary
            event_directory: Authoritative persisted events, if the caller has them
            citation_index: Lookup of live citation numbers
            binder: Narrative binder, with its title matching strategy
        """
        self.submitter = submitter
        self.config = config or {}
        self.event_directory = event_directory
        self.citation_index = citation_index
        self.binder = binder or NarrativeBinder()

    @property
    def pipeline_config(self) -> Dict[str, Any]:
        return self.config.get("pipeline", {}) or {}

    def _create_phase(self, state: PipelineState, report: RunReport) -> BasePhase:
        """Create a phase instance"""
        phase_class = PHASE_CLASSES.get(state)
        if not phase_class:
            raise ValueError(f"No phase runs in state: {state}")

        return phase_class(
            submitter=self.submitter,
            config=self.config,
            report=report,
            event_directory=self.event_directory,
            citation_index=self.citation_index
        )

    def run_phase(
        self,
        state: PipelineState,
        context: GenerationContext,
        report: Optional[RunReport] = None
    ) -> Awaitable[GenerationContext]:
        """
        Run a single phase against a context

        Preconditions are checked when this is called, before anything is
        awaited, so a missing upstream output raises PhasePreconditionError
        immediately. The returned awaitable yields a new context; the one
        passed in is never modified.
        """
        phase = self._create_phase(state, report if report is not None else RunReport())
        phase.check_preconditions(context)
        return self._execute_phase(phase, context)

    async def _execute_phase(self, phase: BasePhase, context: GenerationContext) -> GenerationContext:
        result = await phase.execute(context)
        return context.merge({**result["output"], "state": phase.state})

    async def run(self, seed: TimelineSeed, report: Optional[RunReport] = None) -> GenerationResult:
        """
        Generate a complete timeline for a seed

        Args:
            seed: Topic to generate
            report: Optional report sink; a fresh one is created otherwise

        Returns:
            Normalized context, narrative bindings, deduplicated citations and the report

        Raises:
            PhasePreconditionError: A phase was reached without its upstream output
            PipelineRunError: Any other phase failure, with the partial context attached
        """
        report = report if report is not None else RunReport()
        context = GenerationContext(seed=seed)
        workflow = Workflow()
        delay = self.pipeline_config.get("phase_delay_seconds", 0) or 0
        execution_order = workflow.get_execution_order()

        logger.info(f"Generating timeline: {seed.title} ({seed.start_year} to {seed.end_year})")

        for position, state in enumerate(execution_order):
            task = workflow.get_task(state)

            if not task.is_ready(workflow.completed_states()):
                raise RuntimeError(f"Phase {state.value} is not ready")

            task.mark_running()

            try:
                context = await self.run_phase(state, context, report)
            except PhasePreconditionError as e:
                task.mark_failed(e)
                raise
            except Exception as e:
                task.mark_failed(e)
                logger.error(f"Phase {state.value} failed: {summarize_error(e)}")
                raise PipelineRunError(state.value, e, context) from e

            task.mark_completed({"state": state.value})

            if delay > 0 and position < len(execution_order) - 1:
                await asyncio.sleep(delay)

        context = context.merge({"state": PipelineState.COMPLETE})
        return await self._finalize(context, report)

    async def _finalize(self, context: GenerationContext, report: RunReport) -> GenerationResult:
        """Deduplicate and renumber citations, then bind structured content to the persisted events"""
        registry = CitationRegistry(report=report)
        if context.research_corpus:
            registry.extend(context.research_corpus.citations, scope=RESEARCH_SCOPE)
        if context.structured_content:
            registry.extend(context.structured_content.citations, scope=NARRATIVE_SCOPE)

        context = apply_citation_numbers(context, registry)

        if self.event_directory is not None:
            events = await self.event_directory.list_events()
        else:
            events = context.expanded_events or []

        bindings = self.binder.bind(events, context.structured_content, report=report)

        logger.info(
            f"Timeline complete: {len(context.expanded_events or [])} events, "
            f"{len(registry)} citations, {report.count('links_rejected')} links rejected"
        )

        return GenerationResult(
            context=context,
            bindings=bindings,
            citations=registry.citations(),
            report=report
        )

    async def run_batch(
        self,
        seeds: List[TimelineSeed],
        concurrency: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> List[BatchResult]:
        """
        Run independent pipelines for many seeds

        A failed seed becomes a BatchResult with success=False and never
        stops the batch. Results are returned in seed order.
        """
        limit = concurrency or self.pipeline_config.get("concurrency", 1) or 1
        semaphore = asyncio.Semaphore(limit)
        completed = 0

        async def run_one(seed: TimelineSeed) -> BatchResult:
            nonlocal completed
            async with semaphore:
                try:
                    outcome = BatchResult(seed=seed, success=True, result=await self.run(seed))
                except Exception as e:
                    logger.error(f"Error generating timeline {seed.title!r}: {summarize_error(e)}")
                    outcome = BatchResult(seed=seed, success=False, error=summarize_error(e))

            completed += 1
            if on_progress is not None:
                callback_result = on_progress(completed, len(seeds), outcome)
                if asyncio.iscoroutine(callback_result):
                    await callback_result
            return outcome

        results = await asyncio.gather(*(run_one(seed) for seed in seeds))

        succeeded = sum(1 for result in results if result.success)
        logger.info(f"Batch complete: {succeeded} succeeded, {len(results) - succeeded} failed")
        return list(results)
