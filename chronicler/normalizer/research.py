"""Research corpus normalization"""

from typing import Any, List

from chronicler.models import Citation, CitationType, KeyQuote, Reliability, ResearchCorpus
from .coerce import as_dict, as_list, clean_text, optional_text, pick, to_int, to_string_list


def _enum_value(value: Any, enum_type, default):
    text = clean_text(value).lower()
    for member in enum_type:
        if member.value == text:
            return member
    return default


def normalize_citations(raw: Any) -> List[Citation]:
    """
    Numbered research citations

    Entries without a source label are dropped. Missing or duplicate
    numbers are replaced with the next free number so every citation
    stays addressable.
    """
    citations = []
    used = set()

    for item in as_list(raw):
        data = as_dict(item)
        source = clean_text(pick(data, "source", "title", "name"))
        if not source:
            continue

        number = to_int(data.get("number"))
        if number is None or number < 1 or number in used:
            number = max(used, default=0) + 1
        used.add(number)

        citations.append(Citation(
            number=number,
            source=source,
            url=optional_text(data.get("url")),
            type=_enum_value(data.get("type"), CitationType, CitationType.SECONDARY),
            reliability=_enum_value(data.get("reliability"), Reliability, Reliability.MEDIUM)
        ))

    return citations


def normalize_research_corpus(raw: Any) -> ResearchCorpus:
    """Normalize research phase output"""
    data = as_dict(raw)

    quotes = []
    for item in as_list(pick(data, "keyQuotes", "key_quotes")):
        quote = as_dict(item)
        text = clean_text(quote.get("text"))
        if not text:
            continue
        quotes.append(KeyQuote(
            text=text,
            citation_number=to_int(pick(quote, "citationNumber", "citation_number", "citation")),
            context=clean_text(quote.get("context"))
        ))

    return ResearchCorpus(
        digest=clean_text(pick(data, "digest", "researchDigest", "summary")),
        citations=normalize_citations(data.get("citations")),
        key_quotes=quotes,
        key_data_points=to_string_list(pick(data, "keyDataPoints", "key_data_points")),
        primary_sources_found=to_string_list(pick(data, "primarySourcesFound", "primary_sources_found"))
    )
