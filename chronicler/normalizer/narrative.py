"""Main narrative normalization"""

from typing import Any, List

from chronicler.models import EventLink, ExpandedTheme, MainNarrative, StoryBeat
from .coerce import (
    UniqueIdAllocator,
    as_dict,
    as_list,
    clean_text,
    optional_text,
    pick,
    slugify,
    to_int,
    to_string_list,
)
from .structured import normalize_overview_sections

MAX_BEAT_PARAGRAPHS = 3


def normalize_event_links(raw: Any) -> List[EventLink]:
    """Links embedded in a beat; both text and slug are required"""
    links = []

    for item in as_list(raw):
        data = as_dict(item)
        text = clean_text(pick(data, "textToLink", "text_to_link", "text"))
        slug = clean_text(pick(data, "eventSlug", "event_slug", "slug"))
        if not text or not slug:
            continue
        links.append(EventLink(
            text_to_link=text,
            event_slug=slug,
            paragraph_index=to_int(pick(data, "paragraphIndex", "paragraph_index"))
        ))

    return links


def normalize_story_beats(raw: Any) -> List[StoryBeat]:
    """Story beats; a beat needs at least one paragraph to survive"""
    beats = []

    for item in as_list(raw):
        data = as_dict(item)
        paragraphs = pick(data, "paragraphs", "content", "text")
        if isinstance(paragraphs, str):
            paragraphs = [paragraphs]
        paragraphs = to_string_list(paragraphs)[:MAX_BEAT_PARAGRAPHS]
        if not paragraphs:
            continue

        beats.append(StoryBeat(
            beat_type=slugify(pick(data, "beatType", "beat_type", "type")) or "development",
            title=clean_text(data.get("title")),
            paragraphs=paragraphs,
            event_links=normalize_event_links(pick(data, "eventLinks", "event_links", "links"))
        ))

    return beats


def normalize_expanded_themes(raw: Any) -> List[ExpandedTheme]:
    allocator = UniqueIdAllocator(fallback="theme")
    themes = []

    for item in as_list(raw):
        data = as_dict(item)
        title = clean_text(pick(data, "title", "name"))
        if not title:
            continue

        themes.append(ExpandedTheme(
            id=allocator.allocate(pick(data, "id", "slug"), title),
            title=title,
            description=clean_text(pick(data, "description", "summary")),
            icon=optional_text(data.get("icon")),
            related_event_slugs=to_string_list(pick(data, "relatedEventSlugs", "related_event_slugs", "relatedEvents"))
        ))

    return themes


def normalize_main_narrative(raw: Any) -> MainNarrative:
    """Normalize narrative phase output into the main narrative"""
    data = as_dict(raw)

    key_people = []
    for item in as_list(pick(data, "keyPeople", "key_people")):
        name = clean_text(item) or clean_text(as_dict(item).get("name"))
        if name and name not in key_people:
            key_people.append(name)

    return MainNarrative(
        page_title=clean_text(pick(data, "pageTitle", "page_title", "title")),
        central_question=clean_text(pick(data, "centralQuestion", "central_question")),
        story_character=clean_text(pick(data, "storyCharacter", "story_character")),
        summary=clean_text(data.get("summary")),
        story_beats=normalize_story_beats(pick(data, "storyBeats", "story_beats", "beats")),
        overview=normalize_overview_sections(data.get("overview")),
        themes=normalize_expanded_themes(data.get("themes")),
        key_people=key_people
    )
