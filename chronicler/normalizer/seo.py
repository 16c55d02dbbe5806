"""SEO metadata normalization"""

from typing import Any

from chronicler.models import SEOMetadata, SchemaSuggestions
from .coerce import as_dict, clean_text, pick, to_string_list

META_DESCRIPTION_LIMIT = 160


def normalize_seo(raw: Any) -> SEOMetadata:
    """Normalize SEO phase output; social titles fall back to the SEO title"""
    data = as_dict(raw)
    schema = as_dict(pick(data, "schemaSuggestions", "schema_suggestions"))

    keywords = []
    for keyword in to_string_list(pick(data, "keywords", "relatedKeywords", "related_keywords")):
        if keyword.lower() not in (k.lower() for k in keywords):
            keywords.append(keyword)

    seo_title = clean_text(pick(data, "seoTitle", "seo_title", "title"))
    meta_description = clean_text(pick(data, "metaDescription", "meta_description", "description"))
    if len(meta_description) > META_DESCRIPTION_LIMIT:
        meta_description = meta_description[:META_DESCRIPTION_LIMIT - 1].rstrip() + "…"

    return SEOMetadata(
        seo_title=seo_title,
        meta_description=meta_description,
        keywords=keywords,
        og_title=clean_text(pick(data, "ogTitle", "og_title")) or seo_title,
        og_description=clean_text(pick(data, "ogDescription", "og_description")) or meta_description,
        schema_suggestions=SchemaSuggestions(
            timeline=as_dict(schema.get("timeline")),
            events=as_dict(schema.get("events")),
            people=as_dict(schema.get("people"))
        )
    )
