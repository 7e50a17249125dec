from __future__ import annotations

from typing import Any

from content_pipeline_core.frontmatter import dump_front_matter
from content_pipeline_core.models import Document


def front_matter_fields(document: Document) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "title": document.title,
        "date": document.publish_date.isoformat(),
        "tags": sorted(document.tags),
        "draft": document.draft,
        "summary": document.summary,
    }
    if document.authors:
        fields["authors"] = list(document.authors)
    if document.layout is not None:
        fields["layout"] = document.layout
    if document.images:
        fields["images"] = list(document.images)
    if document.canonical_url is not None:
        fields["canonicalUrl"] = document.canonical_url
    fields["slug"] = document.slug
    for key, value in document.extra.items():
        if key not in fields:
            fields[key] = value
    return fields


def serialize(document: Document) -> str:
    """Inverse of ``parse``: front matter followed by the body exactly as stored."""
    return dump_front_matter(front_matter_fields(document)) + document.body
