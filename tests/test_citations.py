"""Tests for citation deduplication and marker rewriting"""

import pytest

from chronicler.binding import CitationRegistry, dedupe_citations, renumber
from chronicler.models import (
    Citation,
    KeyFact,
    RelationshipType,
    RunReport,
    TimelineCitationRaw,
    TimelineEventNote,
    TimelineEventRelationship,
)


class TestCitationRegistry:
    """Test the citation registry"""

    @pytest.fixture
    def registry(self):
        """Registry holding research citations followed by narrative citations"""
        registry = CitationRegistry(report=RunReport())
        registry.extend([
            Citation(number=1, source="Polybius, Histories", url="https://example.org/polybius"),
            Citation(number=2, source="Livy, Ab Urbe Condita", url="https://example.org/livy"),
        ])
        registry.extend([
            TimelineCitationRaw(number=5, source="Livy", url=" https://example.org/livy "),
            TimelineCitationRaw(number=6, title="Cambridge Ancient History", url="https://example.org/cah"),
        ])
        return registry

    def test_same_url_from_two_phases_kept_once(self, registry):
        """Test a URL cited by two phases produces a single citation"""
        citations = registry.citations()

        assert len(citations) == 3
        assert [c.url for c in citations] == [
            "https://example.org/polybius",
            "https://example.org/livy",
            "https://example.org/cah",
        ]
        assert citations[1].source == "Livy, Ab Urbe Condita"

    def test_numbers_are_dense(self, registry):
        """Test surviving citations are numbered 1..n"""
        assert [c.number for c in registry.citations()] == [1, 2, 3]

    def test_resolve_original_numbers(self, registry):
        """Test original numbers resolve to the surviving citation"""
        assert registry.resolve(5).url == "https://example.org/livy"
        assert registry.resolve(6).number == 3
        assert registry.resolve(42) is None
        assert registry.is_live(1)
        assert not registry.is_live(42)

    def test_first_mapping_wins(self):
        """Test a reused original number keeps its first mapping"""
        registry = CitationRegistry()
        registry.add({"number": 1, "source": "A", "url": "https://a"})
        registry.add({"number": 1, "source": "B", "url": "https://b"})

        assert registry.remap_numbers([1]) == [1]
        assert len(registry) == 2

    def test_incomplete_records_discarded(self):
        """Test records missing url or source are discarded and counted"""
        report = RunReport()
        registry = CitationRegistry(report=report)

        assert registry.add({"number": 1, "source": "Livy"}) is None
        assert registry.add({"number": 2, "url": "https://example.org"}) is None
        assert registry.add("garbage") is None
        assert len(registry) == 0
        assert report.count("citations_discarded") == 3

    def test_rewrite_markers(self, registry):
        """Test [n] markers move to surviving numbers and unknown ones stay literal"""
        text = "Cannae [5] was recorded [1] and analysed [6], see also [9]."

        assert registry.rewrite_markers(text) == "Cannae [2] was recorded [1] and analysed [3], see also [9]."

    def test_remap_numbers_drops_dangling(self, registry):
        """Test remapping drops unknown numbers and duplicates"""
        assert registry.remap_numbers([2, 5, 9, 6]) == [2, 3]

    def test_linkify(self):
        """Test superscript markers become source links with escaped URLs"""
        registry = CitationRegistry()
        registry.add({"number": 1, "source": "Q", "url": 'https://example.org/?a=1&b="2"'})

        html = registry.linkify("Text<sup>[1]</sup> and<sup>[2]</sup>")

        assert 'href="https://example.org/?a=1&amp;b=&quot;2&quot;"' in html
        assert 'target="_blank"' in html
        assert 'rel="noopener noreferrer"' in html
        assert 'class="citation-link">1</a></sup>' in html
        assert html.endswith("and<sup>[2]</sup>")


def test_dedupe_citations():
    """Test the module-level helper"""
    citations = dedupe_citations([
        {"number": 3, "source": "A", "url": "https://a"},
        {"number": 4, "source": "A again", "url": "https://a"},
        {"number": 5, "source": "B", "url": "https://b"},
    ])

    assert [(c.number, c.source) for c in citations] == [(1, "A"), (2, "B")]


def test_same_url_different_labels_collapse():
    """Test two labels for one URL keep the first label and share one number"""
    registry = CitationRegistry()
    registry.extend([
        {"number": 1, "source": "Polybius", "url": "https://example.org/a"},
        {"number": 2, "source": "Polybius (trans. Paton)", "url": "https://example.org/a"},
    ])

    assert [(c.number, c.source) for c in registry.citations()] == [(1, "Polybius")]
    assert registry.rewrite_markers("See [1] and [2].") == "See [1] and [1]."


def test_numbering_scopes_kept_apart():
    """Test phases reusing a number keep their own mapping"""
    registry = CitationRegistry()
    registry.add({"number": 1, "source": "Polybius"}, scope="research")
    registry.add({"number": 2, "source": "Livy", "url": "https://example.org/livy"}, scope="research")
    registry.add({"number": 2, "source": "CAH", "url": "https://example.org/cah"}, scope="narrative")

    assert registry.rewrite_markers("Cannae [2]", "research") == "Cannae [1]"
    assert registry.rewrite_markers("Cannae [2]", "narrative") == "Cannae [2]"
    assert registry.resolve(2, "narrative").url == "https://example.org/cah"
    assert registry.resolve(1, "narrative") is None
    assert registry.remap_numbers([1, 2], "research") == [1]
    assert [c.url for c in registry.scope_citations("narrative")] == ["https://example.org/cah"]


def test_renumber_model_fields():
    """Test markers and number fields are remapped while enum fields survive"""
    registry = CitationRegistry()
    registry.add({"number": 4, "source": "Livy", "url": "https://example.org/livy"})

    note = renumber(
        TimelineEventNote(
            title="Cannae",
            summary="A rout [4], see [7].",
            relationships=[TimelineEventRelationship(type=RelationshipType.LED_TO, target_title="Zama")]
        ),
        registry,
        "research"
    )
    fact = renumber(KeyFact(label="Dead", value="50,000 [4]", citation=7), registry, "research")

    assert note.summary == "A rout [1], see [7]."
    assert note.relationships[0].type is RelationshipType.LED_TO
    assert fact.value == "50,000 [1]"
    assert fact.citation is None
