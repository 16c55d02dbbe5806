"""Mapping of free-text relationship labels onto the closed relationship set"""

import re
from typing import Any, Dict, Optional

from chronicler.models import RelationshipType
from .coerce import clean_text

RELATIONSHIP_KEYWORDS: Dict[str, RelationshipType] = {
    "led to": RelationshipType.LED_TO,
    "leads to": RelationshipType.LED_TO,
    "cause": RelationshipType.LED_TO,
    "caused": RelationshipType.LED_TO,
    "catalyst": RelationshipType.LED_TO,
    "triggered": RelationshipType.LED_TO,
    "response to": RelationshipType.RESPONSE_TO,
    "response": RelationshipType.RESPONSE_TO,
    "reaction": RelationshipType.RESPONSE_TO,
    "counter": RelationshipType.RESPONSE_TO,
    "replied": RelationshipType.RESPONSE_TO,
    "parallel": RelationshipType.PARALLEL,
    "simultaneous": RelationshipType.PARALLEL,
    "concurrent": RelationshipType.PARALLEL,
    "at the same time": RelationshipType.PARALLEL,
    "meanwhile": RelationshipType.PARALLEL,
    "foreshadow": RelationshipType.FORESHADOWS,
    "foreshadows": RelationshipType.FORESHADOWS,
    "set the stage": RelationshipType.FORESHADOWS,
    "would later": RelationshipType.FORESHADOWS,
    "groundwork": RelationshipType.FORESHADOWS,
}

# Substring fallbacks, checked in order
RELATIONSHIP_FRAGMENTS = [
    ("lead", RelationshipType.LED_TO),
    ("response", RelationshipType.RESPONSE_TO),
    ("reply", RelationshipType.RESPONSE_TO),
    ("parallel", RelationshipType.PARALLEL),
    ("meanwhile", RelationshipType.PARALLEL),
    ("foreshadow", RelationshipType.FORESHADOWS),
    ("stage", RelationshipType.FORESHADOWS),
]

_CANONICAL = {member.value: member for member in RelationshipType}


def normalize_relationship_type(label: Any) -> Optional[RelationshipType]:
    """
    Map a label such as "caused" or "in response to" to a RelationshipType.

    Returns None for anything unrecognized; callers drop the relationship
    rather than guess a type.
    """
    text = clean_text(label).lower()
    if not text:
        return None

    canonical = text.replace("-", "_").replace(" ", "_")
    if canonical in _CANONICAL:
        return _CANONICAL[canonical]

    if text in RELATIONSHIP_KEYWORDS:
        return RELATIONSHIP_KEYWORDS[text]

    stripped = re.sub(r'[^a-z]+', ' ', text).strip()
    if stripped in RELATIONSHIP_KEYWORDS:
        return RELATIONSHIP_KEYWORDS[stripped]

    for fragment, relationship_type in RELATIONSHIP_FRAGMENTS:
        if fragment in stripped:
            return relationship_type

    return None
