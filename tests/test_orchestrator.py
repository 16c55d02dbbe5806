"""Tests for the phase orchestrator"""

import pytest
import re
from unittest.mock import AsyncMock, patch

from chronicler.errors import PhasePreconditionError, PipelineRunError
from chronicler.memory import InMemoryEventDirectory
from chronicler.models import (
    EventRecord,
    GenerationContext,
    PipelineState,
    RejectionReason,
    ResearchCorpus,
    RunReport,
    TimelineSeed,
)
from chronicler.orchestrator import PhaseOrchestrator, Workflow


class TestPreconditions:
    """Test phases refuse to run without their upstream outputs"""

    def test_narrative_without_skeleton_fails_synchronously(self, seed, submitter, test_config):
        """Test the error is raised before anything is awaited and nothing is submitted"""
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config)
        context = GenerationContext(seed=seed, research_corpus=ResearchCorpus(digest="notes"))

        with pytest.raises(PhasePreconditionError) as exc_info:
            orchestrator.run_phase(PipelineState.NARRATIVE, context)

        assert exc_info.value.missing == "skeleton"
        assert "skeleton" in str(exc_info.value)
        assert submitter.prompts == []
        assert context.state == PipelineState.SEED
        assert context.main_narrative is None

    def test_precondition_error_is_value_error(self, seed, submitter):
        """Test the precondition error can be caught as a ValueError"""
        orchestrator = PhaseOrchestrator(submitter=submitter)

        with pytest.raises(ValueError):
            orchestrator.run_phase(PipelineState.SEO, GenerationContext(seed=seed))

    def test_no_phase_for_terminal_state(self, seed, submitter):
        """Test only real phases can be run"""
        orchestrator = PhaseOrchestrator(submitter=submitter)

        with pytest.raises(ValueError):
            orchestrator.run_phase(PipelineState.COMPLETE, GenerationContext(seed=seed))

    @pytest.mark.asyncio
    async def test_run_phase_returns_new_context(self, seed, submitter, test_config):
        """Test a phase produces a new context and leaves its input alone"""
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config)
        context = GenerationContext(seed=seed)

        updated = await orchestrator.run_phase(PipelineState.RESEARCH, context)

        assert updated.state == PipelineState.RESEARCH
        assert len(updated.research_corpus.citations) == 2
        assert context.research_corpus is None


class TestWorkflow:
    """Test the linear workflow"""

    def test_execution_order(self):
        """Test phases run in strict order"""
        workflow = Workflow()

        assert workflow.get_execution_order() == [
            PipelineState.RESEARCH,
            PipelineState.SKELETON,
            PipelineState.NARRATIVE,
            PipelineState.EVENTS,
            PipelineState.ENRICHMENT,
            PipelineState.SEO,
        ]

    def test_task_readiness(self):
        """Test a task is ready only after its predecessor completed"""
        workflow = Workflow()
        narrative = workflow.get_task(PipelineState.NARRATIVE)

        assert not narrative.is_ready(set())
        workflow.get_task(PipelineState.RESEARCH).mark_completed({})
        workflow.get_task(PipelineState.SKELETON).mark_completed({})
        assert narrative.is_ready(workflow.completed_states())


class TestFullRun:
    """Test a complete run against canned model output"""

    @pytest.mark.asyncio
    async def test_run_produces_normalized_bound_result(self, seed, submitter, test_config):
        """Test every phase output is normalized, validated and bound"""
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config)

        result = await orchestrator.run(seed)
        context = result.context

        assert context.state == PipelineState.COMPLETE
        assert [e.title for e in context.skeleton.events] == [
            "Crossing of the Alps", "Battle of Cannae", "Battle of Zama"
        ]
        assert context.skeleton.events[2].importance == 3
        assert context.skeleton.events[0].citations_to_use == [1]
        assert context.event_slugs() == ["crossing-of-the-alps", "battle-of-cannae", "battle-of-zama"]
        assert context.expanded_events[2].year == -202
        assert context.main_narrative.story_beats[0].beat_type == "inciting"
        assert context.seo.keywords == ["Hannibal", "Cannae"]

    @pytest.mark.asyncio
    async def test_links_validated_and_applied(self, seed, submitter, test_config):
        """Test only verbatim links to known slugs end up in the narrative"""
        result = await PhaseOrchestrator(submitter=submitter, config=test_config).run(seed)

        link_report = result.context.link_report
        assert link_report.valid_count == 2
        assert sorted(r.reason for r in link_report.rejected) == sorted([
            RejectionReason.TEXT_NOT_FOUND, RejectionReason.UNKNOWN_SLUG
        ])

        beats = result.context.main_narrative.story_beats
        assert [link.event_slug for link in beats[0].event_links] == ["crossing-of-the-alps"]
        assert [link.text_to_link for link in beats[1].event_links] == ["At Cannae"]
        assert result.report.count("links_rejected") == 2

    @pytest.mark.asyncio
    async def test_citations_deduplicated_across_phases(self, seed, submitter, test_config):
        """Test research and narrative citations sharing a URL are kept once"""
        result = await PhaseOrchestrator(submitter=submitter, config=test_config).run(seed)

        assert [c.number for c in result.citations] == [1, 2, 3]
        assert [c.url for c in result.citations] == [
            "https://example.org/polybius",
            "https://example.org/livy",
            "https://example.org/cah",
        ]

    @pytest.mark.asyncio
    async def test_bindings_and_report(self, seed, submitter, test_config):
        """Test structured content is bound by slug and drops are reported"""
        result = await PhaseOrchestrator(submitter=submitter, config=test_config).run(seed)

        bindings = result.bindings
        assert set(bindings.event_narratives) == set(result.context.event_slugs())

        cannae = bindings.for_event("battle-of-cannae")
        assert cannae.note.title == "Cannae"
        assert [r.target_slug for r in cannae.relationships] == ["battle-of-zama"]
        assert bindings.turning_points[0].event_slug == "battle-of-zama"

        report = result.report
        assert report.count("relationships_dropped") == 1
        assert report.count("relationship_unrecognized") == 1
        assert report.count("citation_dangling") == 1
        assert report.count("perspective_category_unknown") == 1
        assert result.context.enrichment.people[0].related_event_slugs == ["battle-of-cannae"]

    @pytest.mark.asyncio
    async def test_event_directory_is_authoritative(self, seed, submitter, test_config):
        """Test link slugs are checked against the persisted event set"""
        directory = InMemoryEventDirectory([EventRecord(title="Battle of Cannae", slug="battle-of-cannae")])
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config, event_directory=directory)

        result = await orchestrator.run(seed)

        assert result.context.link_report.valid_count == 1
        assert result.context.main_narrative.story_beats[0].event_links == []

    @pytest.mark.asyncio
    async def test_binding_uses_persisted_events(self, seed, submitter, test_config):
        """Test relationships to events missing from the directory are dropped"""
        directory = InMemoryEventDirectory([EventRecord(title="Battle of Cannae", slug="battle-of-cannae")])
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config, event_directory=directory)

        result = await orchestrator.run(seed)

        assert list(result.bindings.event_narratives) == ["battle-of-cannae"]
        assert result.bindings.for_event("battle-of-cannae").relationships == []
        assert result.report.count("relationships_dropped") == 2

    @pytest.mark.asyncio
    async def test_phase_failure_wrapped_with_partial_context(self, seed, make_submitter, test_config):
        """Test a failing phase aborts the run with the partial context attached"""
        orchestrator = PhaseOrchestrator(
            submitter=make_submitter(fail_on="Expand these events"),
            config=test_config
        )

        with pytest.raises(PipelineRunError) as exc_info:
            await orchestrator.run(seed)

        error = exc_info.value
        assert error.phase == "events"
        assert isinstance(error.cause, RuntimeError)
        assert error.context.state == PipelineState.NARRATIVE
        assert error.context.main_narrative is not None
        assert error.context.expanded_events is None

    @pytest.mark.asyncio
    async def test_unparseable_output_degrades_to_defaults(self, seed, make_submitter, test_config):
        """Test empty model output never raises and yields empty normalized values"""
        submitter = make_submitter({prefix: {} for prefix in (
            "Build the factual skeleton", "Write the main narrative", "Generate SEO metadata"
        )})

        result = await PhaseOrchestrator(submitter=submitter, config=test_config).run(seed)

        assert result.context.skeleton.events == []
        assert result.context.expanded_events == []
        assert result.bindings.event_narratives == {}
        assert result.report.count("empty_output") >= 3

    @pytest.mark.asyncio
    async def test_delay_only_between_phases(self, seed, submitter):
        """Test the inter-phase delay is not applied after the last phase"""
        orchestrator = PhaseOrchestrator(submitter=submitter, config={"pipeline": {"phase_delay_seconds": 1}})

        with patch("chronicler.orchestrator.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            await orchestrator.run(seed)

        assert sleep.await_count == 5


class TestBatch:
    """Test batch runs"""

    @pytest.mark.asyncio
    async def test_failure_isolated_to_its_seed(self, seed, make_submitter, test_config):
        """Test one failing seed does not stop the others and order is kept"""
        failing = TimelineSeed(title="Third Punic War", start_year=-149, end_year=-146)
        orchestrator = PhaseOrchestrator(
            submitter=make_submitter(fail_on="Third Punic War"),
            config=test_config
        )
        progress = []

        results = await orchestrator.run_batch(
            [failing, seed],
            concurrency=2,
            on_progress=lambda done, total, outcome: progress.append((done, total, outcome.success))
        )

        assert [r.seed.title for r in results] == ["Third Punic War", "Second Punic War"]
        assert results[0].success is False
        assert "model unavailable" in results[0].error
        assert results[1].success is True
        assert results[1].result.context.state == PipelineState.COMPLETE
        assert [entry[:2] for entry in progress] == [(1, 2), (2, 2)]
        assert sorted(entry[2] for entry in progress) == [False, True]

    @pytest.mark.asyncio
    async def test_async_progress_callback(self, seed, submitter, test_config):
        """Test a coroutine progress callback is awaited"""
        callback = AsyncMock()
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config)

        await orchestrator.run_batch([seed], on_progress=callback)

        callback.assert_awaited_once()
        assert callback.await_args.args[:2] == (1, 1)

    @pytest.mark.asyncio
    async def test_report_is_per_run(self, seed, submitter, test_config):
        """Test each run gets its own report unless one is passed in"""
        orchestrator = PhaseOrchestrator(submitter=submitter, config=test_config)
        report = RunReport()

        first = await orchestrator.run(seed, report=report)
        second = await orchestrator.run(seed)

        assert first.report is report
        assert second.report is not report
        assert second.report.count("links_rejected") == 2


class TestCitationRenumbering:
    """Test final citation numbers are applied to everything that cites them"""

    @pytest.fixture
    def renumbering_submitter(self, make_submitter):
        research = {
            "digest": "Rome lost an army at Cannae [2].",
            "citations": [
                {"number": 1, "source": "Polybius, Histories"},
                {"number": 2, "source": "Livy, Ab Urbe Condita", "url": "https://example.org/livy"},
            ],
            "keyQuotes": [{"text": "Hannibal is at the gates", "citationNumber": 2}],
        }
        narrative = {
            "storyBeats": [{"beatType": "climax", "paragraphs": ["At Cannae the legions were destroyed."]}],
            "overview": [{"subheading": "War", "content": "Rome nearly fell [2].", "citationsUsed": [2]}],
            "structuredContent": {
                "turningPoints": [{"title": "Battle of Zama", "description": "Scipio prevails [1]."}],
                "citations": [
                    {"number": 1, "source": "Cambridge Ancient History", "url": "https://example.org/cah"},
                    {"number": 2, "source": "Livy", "url": "https://example.org/livy"},
                ],
            },
        }
        events = {"expandedEvents": [
            {"title": title, "summary": "s", "description": "Encircled at Cannae [2].", "citations": [2]}
            for title in ("Crossing of the Alps", "Battle of Cannae", "Battle of Zama")
        ]}
        return make_submitter({
            "Research this topic": research,
            "Write the main narrative": narrative,
            "Expand these events": events,
        })

    @pytest.mark.asyncio
    async def test_event_citations_resolve_to_intended_source(self, seed, renumbering_submitter, test_config):
        """Test every marker and citation number in event output points at its original source"""
        result = await PhaseOrchestrator(submitter=renumbering_submitter, config=test_config).run(seed)

        urls = {c.number: c.url for c in result.citations}
        assert urls == {1: "https://example.org/livy", 2: "https://example.org/cah"}

        for event in result.context.expanded_events:
            assert event.description == "Encircled at Cannae [1]."
            markers = [int(n) for n in re.findall(r"\[(\d+)\]", event.description)]
            assert [urls[n] for n in markers + event.citations] == ["https://example.org/livy"] * 2

    @pytest.mark.asyncio
    async def test_research_and_narrative_numbering_kept_apart(self, seed, renumbering_submitter, test_config):
        """Test the same original number maps by the numbering of the phase that used it"""
        result = await PhaseOrchestrator(submitter=renumbering_submitter, config=test_config).run(seed)
        context = result.context

        assert context.research_corpus.digest == "Rome lost an army at Cannae [1]."
        assert [c.url for c in context.research_corpus.citations] == ["https://example.org/livy"]
        assert context.research_corpus.key_quotes[0].citation_number == 1

        overview = context.main_narrative.overview[0]
        assert overview.content == "Rome nearly fell [1]."
        assert overview.citations_used == [1]

        structured = context.structured_content
        assert structured.turning_points[0].description == "Scipio prevails [2]."
        assert [(c.number, c.url) for c in structured.citations] == [
            (2, "https://example.org/cah"), (1, "https://example.org/livy")
        ]
        assert result.bindings.turning_points[0].description == "Scipio prevails [2]."
