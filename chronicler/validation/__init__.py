"""Validation of generated cross-references"""

from .event_links import EventLinkValidator

__all__ = ["EventLinkValidator"]
