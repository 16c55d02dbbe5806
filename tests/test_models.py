"""Tests for Pydantic models"""

import pytest
from pydantic import ValidationError

from chronicler.models import (
    EventRecord,
    ExpandedEvent,
    GenerationContext,
    PipelineState,
    RunReport,
    SkeletonEvent,
    TimelineSeed,
)


def test_timeline_seed():
    """Test TimelineSeed model"""
    seed = TimelineSeed(title="Punic Wars", start_year=-264, end_year=-146, background="Rome vs Carthage")

    assert seed.region is None
    assert "Punic Wars (-264 to -146)" in seed.describe()
    assert "Rome vs Carthage" in seed.describe()

    with pytest.raises(ValidationError):
        TimelineSeed(title="", start_year=1, end_year=2)


def test_skeleton_event_importance_bounds():
    """Test importance outside [1, 3] is rejected by the model"""
    with pytest.raises(ValidationError):
        SkeletonEvent(title="Zama", year=-202, importance=4)


def test_expanded_event_completeness():
    """Test completeness requires summary and description"""
    event = ExpandedEvent(title="Zama", year=-202, slug="zama", summary="s")

    assert not event.is_complete()
    assert event.model_copy(update={"description": "d"}).is_complete()
    assert EventRecord.from_expanded(event) == EventRecord(title="Zama", slug="zama", year=-202)


def test_context_merge():
    """Test merging returns a new context and rejects unknown fields"""
    context = GenerationContext(seed=TimelineSeed(title="Zama", start_year=-202, end_year=-202))

    merged = context.merge({"state": PipelineState.RESEARCH})

    assert merged.state == PipelineState.RESEARCH
    assert context.state == PipelineState.SEED
    with pytest.raises(KeyError):
        context.merge({"verdict": "nope"})


def test_run_report():
    """Test entries bump their counters and can be filtered by phase"""
    report = RunReport()
    report.record("events", "links_rejected", "bad link", {"reason": "text_not_found"})
    report.record("skeleton", "citation_dangling", "missing [9]")
    report.increment("links_accepted", 3)

    assert report.count("links_rejected") == 1
    assert report.count("links_accepted") == 3
    assert report.count("unknown") == 0
    assert [entry.code for entry in report.for_phase("events")] == ["links_rejected"]
