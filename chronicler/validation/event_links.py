"""Event-link validator: keeps narrative hyperlinks pointing at real events"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from chronicler.models import (
    EventLink,
    LinkValidationReport,
    ProposedEventLink,
    RejectionReason,
    RunReport,
    StoryBeat,
)

logger = logging.getLogger(__name__)

PHASE = "events"


class EventLinkValidator:
    """Validates proposed link insertions one at a time against the current beats and slugs"""

    def __init__(self, valid_slugs: Iterable[str]):
        """
        Initialize validator

        Args:
            valid_slugs: Authoritative slugs of events that exist at validation time
        """
        self.valid_slugs = set(valid_slugs)

    def _check(self, beats: List[StoryBeat], link: ProposedEventLink) -> Optional[Tuple[RejectionReason, str]]:
        if not link.text_to_link or not link.event_slug:
            return RejectionReason.MISSING_FIELDS, "Missing textToLink or eventSlug"

        beat_index = link.beat_index
        if beat_index is None or beat_index < 0 or beat_index >= len(beats):
            return RejectionReason.INVALID_BEAT, f"Invalid beatIndex {beat_index}"

        paragraphs = beats[beat_index].paragraphs
        paragraph_index = link.paragraph_index
        if paragraph_index is None or paragraph_index < 0 or paragraph_index >= len(paragraphs):
            return (
                RejectionReason.INVALID_PARAGRAPH,
                f"Invalid paragraphIndex {paragraph_index} for beat {beat_index}"
            )

        if link.text_to_link not in paragraphs[paragraph_index]:
            return (
                RejectionReason.TEXT_NOT_FOUND,
                f'Text "{link.text_to_link}" not found in beat {beat_index}, paragraph {paragraph_index}'
            )

        if link.event_slug not in self.valid_slugs:
            return (
                RejectionReason.UNKNOWN_SLUG,
                f'Event slug "{link.event_slug}" is not a persisted event. Text was: "{link.text_to_link}"'
            )

        return None

    def validate(
        self,
        beats: List[StoryBeat],
        proposals: Iterable[ProposedEventLink],
        report: Optional[RunReport] = None
    ) -> LinkValidationReport:
        """
        Validate a batch of proposed links

        A rejected link never aborts the batch; each rejection carries its reason.
        """
        result = LinkValidationReport()

        for link in proposals:
            rejection = self._check(beats, link)
            if rejection is None:
                result.accept(link)
                continue

            reason, message = rejection
            result.reject(link, reason, message)
            logger.warning(f"Rejected event link: {message}")
            if report is not None:
                report.record(PHASE, "links_rejected", message, {"reason": reason.value})

        if report is not None:
            report.increment("links_accepted", result.valid_count)

        logger.info(
            f"Event links validated: {result.valid_count} accepted, {result.rejected_count} rejected"
        )
        return result

    @staticmethod
    def apply(beats: List[StoryBeat], result: LinkValidationReport) -> List[StoryBeat]:
        """
        New beats whose links are exactly the accepted ones

        Links previously embedded in the beats are replaced; they are
        expected to have gone through validation as proposals.
        """
        links_by_beat: Dict[int, List[EventLink]] = {index: [] for index in range(len(beats))}
        seen = set()

        for link in result.accepted:
            key = (link.beat_index, link.paragraph_index, link.text_to_link, link.event_slug)
            if key in seen:
                continue
            seen.add(key)
            links_by_beat[link.beat_index].append(EventLink(
                text_to_link=link.text_to_link,
                event_slug=link.event_slug,
                paragraph_index=link.paragraph_index
            ))

        return [
            beat.model_copy(update={"event_links": links_by_beat[index]})
            for index, beat in enumerate(beats)
        ]
