"""Shared fixtures: a canned prompt submitter and the payloads it serves"""

import copy
from typing import Any, Dict, List, Optional

import pytest

from chronicler.llm import PromptSubmitter
from chronicler.models import TimelineSeed


RESEARCH_PAYLOAD = {
    "digest": "Hannibal crossed the Alps [1] and destroyed a Roman army at Cannae [2].",
    "citations": [
        {"number": 1, "source": "Polybius, Histories", "url": "https://example.org/polybius", "type": "primary"},
        {"number": 2, "source": "Livy, Ab Urbe Condita", "url": "https://example.org/livy", "reliability": "high"},
    ],
    "keyQuotes": [{"text": "Hannibal is at the gates", "citationNumber": 2}],
    "keyDataPoints": ["Cannae: c. 50,000 Roman dead"],
}

SKELETON_PAYLOAD = {
    "events": [
        {"title": "Crossing of the Alps", "year": -218, "importance": 3, "citationsToUse": [1, 9]},
        {"title": "Battle of Cannae", "year": -216, "importance": "3", "citationsToUse": [2]},
        {"title": "Battle of Zama", "year": -202, "importance": 7},
        {"title": "Undated rumour"},
    ],
    "people": [{"name": "Hannibal Barca", "birthYear": -247, "deathYear": -183, "relatedEvents": ["Battle of Cannae"]}],
    "themes": [{"id": "strategy", "title": "Strategy"}],
}

NARRATIVE_PAYLOAD = {
    "pageTitle": "The Second Punic War",
    "centralQuestion": "Could Rome survive Hannibal?",
    "summary": "Rome against Carthage.",
    "storyBeats": [
        {
            "beatType": "Inciting",
            "title": "Over the mountains",
            "paragraphs": ["In 218 BCE Hannibal led his army across the Alps into Italy."],
        },
        {
            "beatType": "climax",
            "title": "Cannae",
            "paragraphs": ["At Cannae the Roman legions were encircled and destroyed."],
        },
    ],
    "structuredContent": {
        "themes": [{"id": "strategy", "title": "Strategy", "description": "How wars are won"}],
        "eventNotes": [
            {
                "title": "Cannae",
                "categoryId": "Strategy",
                "soWhat": "Rome's worst defeat",
                "relationships": [
                    {"type": "caused", "targetTitle": "Battle of Zama"},
                    {"type": "led_to", "targetTitle": "Sack of Carthage"},
                    {"type": "vaguely related", "targetTitle": "Crossing of the Alps"},
                ],
            }
        ],
        "turningPoints": [{"title": "Battle of Zama", "description": "Scipio defeats Hannibal"}],
        "citations": [
            {"number": 1, "source": "Livy", "url": "https://example.org/livy"},
            {"number": 2, "title": "Cambridge Ancient History", "url": "https://example.org/cah"},
            {"number": 3, "source": "No url"},
        ],
    },
}

EVENTS_PAYLOAD = {
    "expandedEvents": [
        {"title": "Crossing of the Alps", "slug": "crossing-of-the-alps", "summary": "s", "description": "d"},
        {"title": "Battle of Cannae", "slug": "battle-of-cannae", "summary": "s", "description": "d"},
        {"title": "Battle of Zama", "summary": "s", "description": "d", "category": "Military"},
    ]
}

LINKS_PAYLOAD = {
    "beats": [
        {"beatIndex": 0, "eventLinks": [
            {"textToLink": "across the Alps", "eventSlug": "crossing-of-the-alps", "paragraphIndex": 0},
            {"textToLink": "Hannibal's Oath", "eventSlug": "battle-of-cannae", "paragraphIndex": 0},
        ]},
        {"beatIndex": 1, "eventLinks": [
            {"textToLink": "At Cannae", "eventSlug": "battle-of-cannae", "paragraphIndex": 0},
            {"textToLink": "Roman legions", "eventSlug": "siege-of-saguntum", "paragraphIndex": 0},
        ]},
    ]
}

ENRICHMENT_PAYLOAD = {
    "people": [{"name": "Hannibal Barca", "relatedEventSlugs": ["battle-of-cannae", "made-up"]}],
    "turningPoints": [{"title": "Zama", "eventSlug": "battle-of-zama", "description": "End of the war"}],
    "perspectives": [
        {"category": "debates", "title": "Why no march on Rome?", "content": "..."},
        {"category": "GOSSIP", "title": "Ignored", "content": "..."},
    ],
}

SEO_PAYLOAD = {
    "seoTitle": "Second Punic War Timeline",
    "metaDescription": "Hannibal, Cannae and Zama.",
    "keywords": ["Hannibal", "hannibal", "Cannae"],
}

# Prompt prefix -> payload, matched against the start of each submitted prompt
DEFAULT_RESPONSES = {
    "Research this topic": RESEARCH_PAYLOAD,
    "Build the factual skeleton": SKELETON_PAYLOAD,
    "Write the main narrative": NARRATIVE_PAYLOAD,
    "Expand these events": EVENTS_PAYLOAD,
    "Add hyperlinks": LINKS_PAYLOAD,
    "Generate enrichment content": ENRICHMENT_PAYLOAD,
    "Generate SEO metadata": SEO_PAYLOAD,
}


class CannedSubmitter(PromptSubmitter):
    """Answers prompts from a prefix-keyed table and records every call"""

    def __init__(self, responses: Optional[Dict[str, Any]] = None, fail_on: Optional[str] = None):
        self.responses = copy.deepcopy(responses if responses is not None else DEFAULT_RESPONSES)
        self.fail_on = fail_on
        self.prompts: List[str] = []

    async def submit_prompt(self, prompt: str, system_prompt: Optional[str] = None, max_tokens: Optional[int] = None) -> Any:
        self.prompts.append(prompt)
        if self.fail_on and self.fail_on in prompt:
            raise RuntimeError("model unavailable")
        for prefix, payload in self.responses.items():
            if prompt.startswith(prefix):
                return copy.deepcopy(payload)
        return {}


@pytest.fixture
def seed():
    return TimelineSeed(title="Second Punic War", start_year=-218, end_year=-201, region="Mediterranean")


@pytest.fixture
def submitter():
    return CannedSubmitter()


@pytest.fixture
def test_config():
    """Pipeline configuration without inter-phase delays"""
    return {
        "pipeline": {
            "phase_delay_seconds": 0,
            "events_chunk_size": 10,
            "retry_incomplete_events": True,
        }
    }


@pytest.fixture
def make_submitter():
    """Factory for submitters with overridden payloads or a failing prompt"""
    def _make(overrides: Optional[Dict[str, Any]] = None, fail_on: Optional[str] = None) -> CannedSubmitter:
        responses = dict(DEFAULT_RESPONSES)
        responses.update(overrides or {})
        return CannedSubmitter(responses, fail_on=fail_on)
    return _make
