"""Normalization of event-link proposals"""

from typing import Any, List

from chronicler.models import ProposedEventLink, StoryBeat
from .coerce import as_dict, as_list, clean_text, pick, to_int


def normalize_link_proposals(raw: Any) -> List[ProposedEventLink]:
    """
    Flatten a link proposal response into individual proposals

    Accepts {"beats": [{"beatIndex": n, "eventLinks": [...]}]} or a flat
    list of links that carry their own beatIndex. Empty strings and
    missing indexes are preserved so the validator can reject them with
    a reason instead of the link vanishing here.
    """
    if isinstance(raw, list):
        groups = [{"eventLinks": raw}]
    else:
        groups = as_list(as_dict(raw).get("beats"))

    proposals = []
    for group in groups:
        group_data = as_dict(group)
        group_beat = to_int(pick(group_data, "beatIndex", "beat_index"))

        for item in as_list(pick(group_data, "eventLinks", "event_links", "links")):
            if not isinstance(item, dict):
                continue
            beat_index = to_int(pick(item, "beatIndex", "beat_index"))
            proposals.append(ProposedEventLink(
                text_to_link=clean_text(pick(item, "textToLink", "text_to_link")),
                event_slug=clean_text(pick(item, "eventSlug", "event_slug")),
                beat_index=beat_index if beat_index is not None else group_beat,
                paragraph_index=to_int(pick(item, "paragraphIndex", "paragraph_index"))
            ))

    return proposals


def proposals_from_beats(beats: List[StoryBeat]) -> List[ProposedEventLink]:
    """Proposals for links already embedded in narrative beats"""
    proposals = []

    for beat_index, beat in enumerate(beats):
        for link in beat.event_links:
            paragraph_index = link.paragraph_index
            if paragraph_index is None:
                # Embedded links rarely name a paragraph; use the first that holds the text
                paragraph_index = next(
                    (i for i, paragraph in enumerate(beat.paragraphs) if link.text_to_link in paragraph),
                    0
                )
            proposals.append(ProposedEventLink(
                text_to_link=link.text_to_link,
                event_slug=link.event_slug,
                beat_index=beat_index,
                paragraph_index=paragraph_index
            ))

    return proposals
