"""Citation registry: URL deduplication, dense renumbering and marker rewriting"""

import html
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from chronicler.memory.citation_index import CitationIndex
from chronicler.models import Citation, RunReport, TimelineCitationRaw

logger = logging.getLogger(__name__)

MARKER_PATTERN = re.compile(r'\[(\d+)\]')
SUP_MARKER_PATTERN = re.compile(r'<sup>\[(\d+)\]</sup>')

# Research corpus numbering, which every later phase cites against
DEFAULT_SCOPE = "research"


def _fields(record: Any) -> Dict[str, Any]:
    if isinstance(record, Citation):
        return {
            "number": record.number,
            "source": record.source,
            "url": record.url,
            "type": record.type,
            "reliability": record.reliability,
        }
    if isinstance(record, TimelineCitationRaw):
        return {
            "number": record.number,
            "source": record.source or record.title,
            "url": record.url,
        }
    if isinstance(record, dict):
        return {
            "number": record.get("number"),
            "source": record.get("source") or record.get("title"),
            "url": record.get("url"),
        }
    return {}


class CitationRegistry(CitationIndex):
    """
    Deduplicates citations by URL across phases

    Citations are numbered densely from 1 in first-seen order. A record
    without both a URL and a source label is discarded. The original
    number of every added record is remembered per numbering scope, since
    each phase numbers its own citations from 1, so in-text [n] markers can
    be rewritten to the surviving number.
    """

    def __init__(self, report: Optional[RunReport] = None, phase: str = "citations"):
        self.report = report
        self.phase = phase
        self._by_url: Dict[str, Citation] = {}
        self._renumbered: Dict[str, Dict[int, int]] = {}

    def add(self, record: Any, scope: str = DEFAULT_SCOPE) -> Optional[Citation]:
        """
        Add one citation-like record

        Args:
            record: Citation, raw narrative citation or dict
            scope: Numbering space the record's original number belongs to

        Returns:
            The surviving citation the record maps to, or None if discarded
        """
        fields = _fields(record)
        url = fields.get("url").strip() if isinstance(fields.get("url"), str) else ""
        source = fields.get("source").strip() if isinstance(fields.get("source"), str) else ""
        original = fields.get("number")

        if not url or not source:
            if self.report is not None:
                self.report.record(
                    self.phase,
                    "citations_discarded",
                    f"Discarded citation without url or source: {source or url or original!r}",
                    {"scope": scope}
                )
            return None

        citation = self._by_url.get(url)
        if citation is None:
            extra = {key: fields[key] for key in ("type", "reliability") if key in fields}
            citation = Citation(number=len(self._by_url) + 1, source=source, url=url, **extra)
            self._by_url[url] = citation

        if isinstance(original, int) and not isinstance(original, bool):
            # First mapping wins when a scope reuses a number
            self._renumbered.setdefault(scope, {}).setdefault(original, citation.number)

        return citation

    def extend(self, records: Iterable[Any], scope: str = DEFAULT_SCOPE) -> "CitationRegistry":
        for record in records or []:
            self.add(record, scope)
        return self

    def citations(self) -> List[Citation]:
        """Surviving citations in number order"""
        return list(self._by_url.values())

    def scope_citations(self, scope: str = DEFAULT_SCOPE) -> List[Citation]:
        """Surviving citations reached from one scope, in surviving number order"""
        numbers = set(self._mapping(scope).values())
        return [citation for citation in self.citations() if citation.number in numbers]

    def _mapping(self, scope: str) -> Dict[int, int]:
        return self._renumbered.get(scope, {})

    def resolve(self, original_number: int, scope: str = DEFAULT_SCOPE) -> Optional[Citation]:
        """Surviving citation for a number used before deduplication"""
        number = self._mapping(scope).get(original_number)
        if number is None:
            return None
        return self.citations()[number - 1]

    def is_live(self, number: int, scope: str = DEFAULT_SCOPE) -> bool:
        return number in self._mapping(scope)

    def remap_number(self, number: Optional[int], scope: str = DEFAULT_SCOPE) -> Optional[int]:
        if number is None:
            return None
        return self._mapping(scope).get(number)

    def remap_numbers(self, numbers: Iterable[int], scope: str = DEFAULT_SCOPE) -> List[int]:
        """Surviving numbers for a list of original numbers, dropping dangling ones"""
        mapping = self._mapping(scope)
        result = []
        for number in numbers:
            mapped = mapping.get(number)
            if mapped is not None and mapped not in result:
                result.append(mapped)
        return result

    def rewrite_markers(self, text: str, scope: str = DEFAULT_SCOPE) -> str:
        """Rewrite [n] markers to surviving numbers; unknown markers stay literal"""
        if not text:
            return text

        mapping = self._mapping(scope)

        def replace(match: re.Match) -> str:
            mapped = mapping.get(int(match.group(1)))
            if mapped is None:
                return match.group(0)
            return f"[{mapped}]"

        return MARKER_PATTERN.sub(replace, text)

    def linkify(self, markup: str) -> str:
        """Turn <sup>[n]</sup> markers for surviving citations into source links"""
        if not markup:
            return markup

        urls = {citation.number: citation.url for citation in self.citations()}

        def replace(match: re.Match) -> str:
            number = int(match.group(1))
            url = urls.get(number)
            if not url:
                return match.group(0)
            return (
                f'<sup><a href="{html.escape(url, quote=True)}" target="_blank" '
                f'rel="noopener noreferrer" class="citation-link">{number}</a></sup>'
            )

        return SUP_MARKER_PATTERN.sub(replace, markup)

    def __len__(self) -> int:
        return len(self._by_url)


def dedupe_citations(records: Iterable[Any]) -> List[Citation]:
    """Deduplicated, densely numbered citations for a list of records"""
    return CitationRegistry().extend(records).citations()
