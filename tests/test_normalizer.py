"""Tests for normalization of untyped model output"""

import math

import pytest

from chronicler.models import RelationshipType, RunReport, SkeletonEvent, TimelineStructuredContent
from chronicler.normalizer import (
    UniqueIdAllocator,
    clamp_importance,
    finite_number,
    normalize_enrichment,
    normalize_expanded_events,
    normalize_link_proposals,
    normalize_main_narrative,
    normalize_relationship_type,
    normalize_research_corpus,
    normalize_seo,
    normalize_skeleton,
    normalize_structured_content,
    slugify,
    to_int_list,
)
from chronicler.normalizer.structured import normalize_context_sections


class TestCoercion:
    """Test primitive coercion helpers"""

    @pytest.mark.parametrize("text, expected", [
        ("Battle of Cannae", "battle-of-cannae"),
        ("  Hannibal's   Oath!  ", "hannibals-oath"),
        ("snake_case--and  spaces", "snake-case-and-spaces"),
        ("---", ""),
        (None, ""),
    ])
    def test_slugify(self, text, expected):
        """Test slugs are lowercase kebab-case without stray punctuation"""
        assert slugify(text) == expected

    @pytest.mark.parametrize("value, expected", [
        (0, 1),
        (-4, 1),
        (2, 2),
        ("3", 3),
        (7, 3),
        (2.6, 3),
        (None, 2),
        ("high", 2),
        (True, 2),
        (float("nan"), 2),
    ])
    def test_clamp_importance(self, value, expected):
        """Test importance is clamped to [1, 3] with a default of 2"""
        assert clamp_importance(value) == expected

    def test_finite_number_rejects_non_numbers(self):
        """Test booleans, infinities and junk strings are not numbers"""
        assert finite_number(True) is None
        assert finite_number(math.inf) is None
        assert finite_number("abc") is None
        assert finite_number(" 12 ") == 12.0

    def test_to_int_list_drops_garbage(self):
        """Test non-numeric entries and values below the minimum are dropped"""
        assert to_int_list([1, "2", "x", None, 0, -3], minimum=1) == [1, 2]
        assert to_int_list("1, 2") == []

    def test_unique_id_allocator_suffixes(self):
        """Test colliding ids receive incrementing suffixes"""
        allocator = UniqueIdAllocator(fallback="theme")

        assert allocator.allocate("Power") == "power"
        assert allocator.allocate("power") == "power-1"
        assert allocator.allocate("POWER") == "power-2"
        assert allocator.allocate("", None) == "theme"
        assert allocator.allocate("!!!", "Trade") == "trade"
        assert "power-1" in allocator

    def test_theme_ids_deterministic(self):
        """Test normalizing the same themes twice yields the same ids"""
        raw = {"themes": [{"title": "Power"}, {"title": "power"}, {"id": "power-1", "title": "Sea"}]}

        first = [theme.id for theme in normalize_structured_content(raw).themes]
        second = [theme.id for theme in normalize_structured_content(raw).themes]

        assert first == second
        assert len(set(first)) == 3


class TestRelationshipMapping:
    """Test free-text relationship labels map onto the closed set"""

    @pytest.mark.parametrize("label, expected", [
        ("led_to", RelationshipType.LED_TO),
        ("Led To", RelationshipType.LED_TO),
        ("caused", RelationshipType.LED_TO),
        ("in response to", RelationshipType.RESPONSE_TO),
        ("reaction", RelationshipType.RESPONSE_TO),
        ("happened meanwhile", RelationshipType.PARALLEL),
        ("foreshadows", RelationshipType.FORESHADOWS),
        ("set the stage for", RelationshipType.FORESHADOWS),
    ])
    def test_known_labels(self, label, expected):
        """Test recognized labels and keywords"""
        assert normalize_relationship_type(label) == expected

    @pytest.mark.parametrize("label", ["", None, 42, "vaguely related"])
    def test_unknown_labels_return_none(self, label):
        """Test unrecognized labels are not guessed"""
        assert normalize_relationship_type(label) is None


class TestGarbageInput:
    """Test every normalizer tolerates input of the wrong shape"""

    @pytest.mark.parametrize("raw", [None, "text", 42, [], {"events": "nope"}])
    def test_skeleton_garbage(self, raw):
        """Test garbage skeleton input yields an empty skeleton"""
        skeleton = normalize_skeleton(raw)
        assert skeleton.events == []
        assert skeleton.people == []

    @pytest.mark.parametrize("raw", [None, "text", 42, ["a"], {"themes": 3}])
    def test_structured_content_garbage(self, raw):
        """Test garbage structured content yields the all-defaults value"""
        assert normalize_structured_content(raw) == TimelineStructuredContent()

    def test_research_garbage(self):
        """Test garbage research input yields an empty corpus"""
        corpus = normalize_research_corpus({"citations": [None, "x", {"url": "https://a"}]})
        assert corpus.digest == ""
        assert corpus.citations == []

    def test_oversized_integers(self):
        """Test integers beyond the float range are treated as unusable numbers"""
        huge = 10 ** 400

        assert finite_number(huge) is None
        assert to_int_list([huge, 2]) == [2]
        assert normalize_skeleton({"events": [{"title": "x", "year": huge}]}).events == []

        events = normalize_expanded_events({"expandedEvents": [
            {"title": "Battle of Cannae", "year": -216, "importance": huge, "summary": "s", "description": "d"}
        ]})
        assert len(events) == 1
        assert events[0].importance == 2

    def test_enrichment_and_seo_garbage(self):
        """Test enrichment and SEO accept non-dict payloads"""
        enrichment = normalize_enrichment(["not", "a", "dict"])
        assert enrichment.people == []
        seo = normalize_seo(None)
        assert seo.seo_title == ""
        assert seo.keywords == []


class TestSkeletonNormalization:
    """Test skeleton normalization"""

    def test_discards_events_without_title_or_year(self):
        """Test events need a title and a usable year"""
        skeleton = normalize_skeleton({"events": [
            {"title": "Battle of Cannae", "year": "-216"},
            {"title": "No year"},
            {"year": -200},
            {"title": "Bad year", "year": "soon"},
        ]})

        assert [event.title for event in skeleton.events] == ["Battle of Cannae"]
        assert skeleton.events[0].year == -216

    def test_dangling_citations_are_dropped_and_counted(self):
        """Test citation numbers outside the known set are removed and reported"""
        report = RunReport()
        skeleton = normalize_skeleton(
            {"events": [{"title": "Zama", "year": -202, "citationsToUse": [1, 4, "2"]}]},
            known_citations=[1, 2],
            report=report
        )

        assert skeleton.events[0].citations_to_use == [1, 2]
        assert report.count("citation_dangling") == 1


class TestResearchNormalization:
    """Test research corpus normalization"""

    def test_duplicate_and_missing_numbers_are_reassigned(self):
        """Test citations stay uniquely numbered"""
        corpus = normalize_research_corpus({"citations": [
            {"number": 1, "source": "Polybius"},
            {"number": 1, "source": "Livy"},
            {"source": "Plutarch"},
            {"number": 1, "url": "https://no-source"},
        ]})

        assert [c.number for c in corpus.citations] == [1, 2, 3]
        assert [c.source for c in corpus.citations] == ["Polybius", "Livy", "Plutarch"]


class TestStructuredContent:
    """Test structured content normalization"""

    def test_theme_ids_unique_and_categories_resolved(self):
        """Test duplicate theme ids are suffixed and note categories resolve by title"""
        content = normalize_structured_content({
            "themes": [
                {"id": "power", "title": "Power"},
                {"id": "power", "title": "Power at sea"},
            ],
            "eventNotes": [
                {"title": "Battle of Mylae", "categoryId": "Power at Sea"},
                {"title": "Battle of Cannae", "category": "Power"},
            ],
        })

        assert [theme.id for theme in content.themes] == ["power", "power-1"]
        assert content.event_notes[0].category_id == "power-1"
        assert content.event_notes[1].category_id == "power"

    def test_unrecognized_relationships_dropped(self):
        """Test relationships with unknown labels or no target are dropped and counted"""
        report = RunReport()
        content = normalize_structured_content({
            "eventNotes": [{
                "title": "Battle of Cannae",
                "relationships": [
                    {"type": "caused", "targetTitle": "Battle of Zama"},
                    {"type": "sort of", "targetTitle": "Battle of Zama"},
                    {"type": "led_to"},
                ],
            }],
        }, report=report)

        relationships = content.event_notes[0].relationships
        assert len(relationships) == 1
        assert relationships[0].type == RelationshipType.LED_TO
        assert report.count("relationship_unrecognized") == 2

    def test_context_sections_from_string(self):
        """Test a "Heading: body" string splits into sections"""
        sections = normalize_context_sections(
            "Background: Rome and Carthage were rivals.\nAftermath: Carthage paid tribute."
        )

        assert [section.heading for section in sections] == ["Background", "Aftermath"]
        assert sections[1].content == "Carthage paid tribute."

    def test_citations_require_url(self):
        """Test structured citations without a url are dropped"""
        content = normalize_structured_content({"citations": [
            {"number": 1, "source": "Livy", "url": "https://example.org/livy"},
            {"number": 2, "source": "No url"},
            {"number": 3, "title": "Titled only", "url": "https://example.org/t"},
        ]})

        assert [c.number for c in content.citations] == [1, 3]
        assert content.citations[1].source == "Titled only"


class TestNarrativeNormalization:
    """Test main narrative normalization"""

    def test_beats_capped_and_typed(self):
        """Test beats keep at most three paragraphs and get a beat type"""
        narrative = normalize_main_narrative({"storyBeats": [
            {"title": "Long", "paragraphs": ["a", "b", "c", "d"]},
            {"title": "Empty", "paragraphs": []},
            {"title": "Single", "paragraphs": "just one", "beatType": "World Before"},
        ]})

        assert len(narrative.story_beats) == 2
        assert narrative.story_beats[0].paragraphs == ["a", "b", "c"]
        assert narrative.story_beats[0].beat_type == "development"
        assert narrative.story_beats[1].beat_type == "world-before"


class TestEventNormalization:
    """Test expanded event normalization"""

    def test_slugs_unique_and_fields_borrowed_from_skeleton(self):
        """Test slugs are minted uniquely and missing fields come from the skeleton"""
        skeleton_events = [SkeletonEvent(title="Battle of Cannae", year=-216, importance=3, category="military")]
        events = normalize_expanded_events({"expandedEvents": [
            {"title": "Battle of Cannae", "summary": "s"},
            {"title": "Battle of Cannae", "year": -216},
            {"title": "Unknown event"},
        ]}, skeleton_events=skeleton_events)

        assert [event.slug for event in events] == ["battle-of-cannae", "battle-of-cannae-1"]
        assert events[0].year == -216
        assert events[0].importance == 3
        assert events[0].category == "military"

    def test_allocator_shared_across_calls(self):
        """Test a shared allocator keeps slugs unique across chunks"""
        allocator = UniqueIdAllocator(fallback="event")
        first = normalize_expanded_events([{"title": "Zama", "year": -202}], allocator=allocator)
        second = normalize_expanded_events([{"title": "Zama", "year": -202}], allocator=allocator)

        assert first[0].slug == "zama"
        assert second[0].slug == "zama-1"


class TestLinkProposals:
    """Test link proposal normalization"""

    def test_empty_fields_preserved_for_validation(self):
        """Test empty strings survive so the validator can reject them with a reason"""
        proposals = normalize_link_proposals({"beats": [
            {"beatIndex": 1, "eventLinks": [
                {"textToLink": "", "eventSlug": "battle-of-cannae", "paragraphIndex": 0},
                "junk",
            ]},
        ]})

        assert len(proposals) == 1
        assert proposals[0].text_to_link == ""
        assert proposals[0].beat_index == 1


class TestEnrichmentNormalization:
    """Test enrichment references are checked against known event slugs"""

    def test_event_references_filtered(self):
        """Test unknown slugs are removed from people, highlights and turning points"""
        enrichment = normalize_enrichment({
            "people": [{"name": "Scipio", "relatedEventSlugs": ["battle-of-zama", "made-up"]}],
            "turningPoints": [
                {"title": "Zama", "eventSlug": "battle-of-zama"},
                {"title": "Metaurus", "eventSlug": "battle-of-the-metaurus"},
            ],
            "keyHighlights": [
                {"title": "Zama", "eventSlug": "battle-of-zama"},
                {"title": "Metaurus", "eventSlug": "battle-of-the-metaurus"},
            ],
        }, valid_event_slugs=["battle-of-zama"])

        assert enrichment.people[0].related_event_slugs == ["battle-of-zama"]
        assert [(p.title, p.event_slug) for p in enrichment.turning_points] == [
            ("Zama", "battle-of-zama"), ("Metaurus", "")
        ]
        assert [h.event_slug for h in enrichment.key_highlights] == ["battle-of-zama"]

    def test_turning_point_slugs_kept_without_valid_set(self):
        """Test slugs pass through when no valid set is known"""
        enrichment = normalize_enrichment({"turningPoints": [{"title": "Metaurus", "eventSlug": "battle-of-the-metaurus"}]})

        assert enrichment.turning_points[0].event_slug == "battle-of-the-metaurus"


class TestSeoNormalization:
    """Test SEO normalization"""

    def test_keywords_deduped_and_description_truncated(self):
        """Test keyword dedupe is case-insensitive and long descriptions are cut"""
        seo = normalize_seo({
            "seoTitle": "Punic Wars",
            "metaDescription": "x" * 200,
            "keywords": ["Rome", "rome", "Carthage"],
        })

        assert seo.keywords == ["Rome", "Carthage"]
        assert len(seo.meta_description) == 160
        assert seo.meta_description.endswith("…")
        assert seo.og_title == "Punic Wars"
