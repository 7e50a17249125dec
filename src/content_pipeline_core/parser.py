from __future__ import annotations

import logging
from collections.abc import Sequence

import pydantic

from content_pipeline_core.errors import MalformedDocumentError, ValidationError
from content_pipeline_core.fences import fence_segments
from content_pipeline_core.frontmatter import FrontMatter, split_front_matter
from content_pipeline_core.models import CodeBlock, Document
from content_pipeline_core.util import slug_from_source_id, slugify

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def _decode(raw: bytes | str, *, source_id: str) -> str:
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(
                f"Document is not valid UTF-8 (byte offset {e.start})",
                source_id=source_id,
            ) from e
    else:
        text = raw
    text = text.removeprefix(_BOM)
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _field_name(loc: tuple) -> str:
    return str(loc[0]) if loc else "front_matter"


def _validation_error(
    err: pydantic.ValidationError, *, source_id: str, slug: str | None
) -> ValidationError:
    problems = err.errors()
    first = problems[0]
    field = _field_name(first.get("loc", ()))
    if first.get("type") == "missing":
        message = f"Missing required field {field!r}"
    elif field == "date":
        message = f"Malformed date: {first.get('msg')}"
    else:
        message = f"Invalid field {field!r}: {first.get('msg')}"
    if len(problems) > 1:
        others = ", ".join(_field_name(p.get("loc", ())) for p in problems[1:])
        message = f"{message} (also: {others})"
    return ValidationError(message, source_id=source_id, slug=slug, field=field)


def _resolve_slug(explicit: str | None, declared: object, source_id: str) -> str:
    if explicit:
        return explicit
    if isinstance(declared, str) and declared.strip():
        return "/".join(s for s in (slugify(p) for p in declared.split("/")) if s)
    return slug_from_source_id(source_id)


def parse(
    raw: bytes | str,
    *,
    source_id: str,
    slug: str | None = None,
    default_authors: Sequence[str] = (),
) -> Document:
    """
    Parse a raw front matter + body document into a Document.

    Pure transformation: the caller supplies the bytes. Raises ValidationError for
    missing or malformed metadata and MalformedDocumentError for structural problems
    (encoding, delimiters, YAML syntax, unterminated code fences).
    """
    text = _decode(raw, source_id=source_id)
    try:
        split = split_front_matter(text)
    except MalformedDocumentError as e:
        e.source_id = source_id
        raise

    metadata = dict(split.metadata)
    declared_slug = metadata.pop("slug", None)
    doc_slug = _resolve_slug(slug, declared_slug, source_id)

    try:
        fm = FrontMatter.model_validate(metadata)
    except pydantic.ValidationError as e:
        raise _validation_error(e, source_id=source_id, slug=doc_slug or None) from e

    if not doc_slug:
        raise ValidationError(
            f"Cannot derive a slug from {source_id!r}",
            source_id=source_id,
            field="slug",
        )

    try:
        fences = fence_segments(split.body)
    except MalformedDocumentError as e:
        e.source_id = source_id
        e.slug = doc_slug
        if e.line is not None:
            e.line += split.body_start_line - 1
        raise

    authors = tuple(fm.authors) or tuple(default_authors)
    document = Document(
        slug=doc_slug,
        title=fm.title,
        summary=fm.summary,
        publish_date=fm.date,
        body=split.body,
        source_id=source_id,
        tags=frozenset(fm.tags),
        draft=fm.draft,
        authors=authors,
        canonical_url=fm.canonical_url,
        layout=fm.layout,
        images=tuple(fm.images),
        code_blocks=tuple(
            CodeBlock(language=f.language, content=f.content, ordinal=f.ordinal, meta=f.meta)
            for f in fences
        ),
        extra=fm.extra_fields,
        body_start_line=split.body_start_line,
    )
    logger.debug("Parsed %s as %s (%d code blocks)", source_id, doc_slug, len(document.code_blocks))
    return document
