"""Event-link proposal and validation report models"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class ProposedEventLink(BaseModel):
    """Link insertion proposed by the model against a possibly stale context"""
    text_to_link: str = ""
    event_slug: str = ""
    beat_index: Optional[int] = None
    paragraph_index: Optional[int] = None


class RejectionReason(str, Enum):
    """Why a proposed link was refused"""
    MISSING_FIELDS = "missing_fields"
    INVALID_BEAT = "invalid_beat_index"
    INVALID_PARAGRAPH = "invalid_paragraph_index"
    TEXT_NOT_FOUND = "text_not_found"
    UNKNOWN_SLUG = "unknown_event_slug"


class LinkRejection(BaseModel):
    """Rejected link with a specific reason"""
    link: ProposedEventLink
    reason: RejectionReason
    message: str


class LinkValidationReport(BaseModel):
    """Outcome of validating one batch of proposed links"""
    accepted: List[ProposedEventLink] = Field(default_factory=list)
    rejected: List[LinkRejection] = Field(default_factory=list)

    def accept(self, link: ProposedEventLink):
        self.accepted.append(link)

    def reject(self, link: ProposedEventLink, reason: RejectionReason, message: str):
        """Record a rejected link with its reason"""
        self.rejected.append(LinkRejection(link=link, reason=reason, message=message))

    @property
    def valid_count(self) -> int:
        return len(self.accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    def reasons(self) -> List[str]:
        """Human-readable rejection messages in batch order"""
        return [rejection.message for rejection in self.rejected]
