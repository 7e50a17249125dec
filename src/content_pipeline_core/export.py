from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol

from content_pipeline_core.index import CorpusIndex
from content_pipeline_core.models import Document
from content_pipeline_core.render import CodeNode, LinkSpan, ProseNode, RenderedOutput, TextSpan
from content_pipeline_core.storage.s3 import parse_s3_uri


class ObjectWriter(Protocol):
    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str: ...


@dataclass(frozen=True)
class ExportResult:
    base_prefix: str
    manifest_uri: str
    document_uris: dict[str, str]

    @property
    def bucket(self) -> str:
        return parse_s3_uri(self.manifest_uri)[0]


def document_to_dict(doc: Document) -> dict[str, Any]:
    return {
        "slug": doc.slug,
        "title": doc.title,
        "summary": doc.summary,
        "date": doc.publish_date.isoformat(),
        "tags": sorted(doc.tags),
        "draft": doc.draft,
        "authors": list(doc.authors),
        "canonicalUrl": doc.canonical_url,
        "layout": doc.layout,
        "images": list(doc.images),
        "extra": {k: doc.extra[k] for k in sorted(doc.extra)},
    }


def _span_to_dict(span: TextSpan | LinkSpan) -> dict[str, Any]:
    if isinstance(span, TextSpan):
        return {"type": "text", "text": span.text}
    return {
        "type": "link",
        "label": span.label,
        "target": span.target,
        "href": span.href,
        "resolved": span.resolved,
        "source": span.source_text,
    }


def _node_to_dict(node: ProseNode | CodeNode) -> dict[str, Any]:
    if isinstance(node, CodeNode):
        return {
            "type": "code",
            "language": node.language,
            "meta": node.meta,
            "ordinal": node.ordinal,
            "content": node.content,
        }
    return {"type": "prose", "line": node.start_line, "spans": [_span_to_dict(s) for s in node.spans]}


def rendered_to_dict(out: RenderedOutput, *, document: Document | None = None) -> dict[str, Any]:
    data: dict[str, Any] = {
        "slug": out.slug,
        "title": out.title,
        "readingMinutes": out.reading_minutes,
        "wordCount": out.word_count,
        "toc": [{"depth": t.depth, "text": t.text, "anchor": t.anchor} for t in out.toc],
        "nodes": [_node_to_dict(n) for n in out.nodes],
    }
    if document is not None:
        data["meta"] = document_to_dict(document)
    return data


def index_manifest(index: CorpusIndex, *, per_page: int | None = None) -> dict[str, Any]:
    """
    Listing data for index, tag and archive pages. Drafts are never included.

    With ``per_page`` the manifest also carries the slugs of each listing page.
    """
    posts: list[dict[str, Any]] = []
    for slug in index.by_date:
        doc = index.get(slug)
        posts.append(
            {
                "slug": slug,
                "title": doc.title,
                "summary": doc.summary,
                "date": doc.publish_date.isoformat(),
                "tags": sorted(doc.tags),
            }
        )
    manifest: dict[str, Any] = {
        "posts": posts,
        "tags": dict(index.tag_counts()),
        "byTag": {tag: list(index.by_tag(tag)) for tag in sorted(index.all_tags())},
    }
    if per_page is not None:
        total_pages = index.paginate(1, per_page).total_pages
        manifest["pages"] = [list(index.paginate(n, per_page).items) for n in range(1, total_pages + 1)]
    return manifest


def to_json(data: dict[str, Any]) -> bytes:
    return (json.dumps(data, ensure_ascii=False, indent=2) + "\n").encode("utf-8")


class S3Exporter:
    """Writes the manifest and one JSON tree per rendered document under a stable prefix."""

    def __init__(self, *, writer: ObjectWriter, prefix: str):
        self._writer = writer
        self._prefix = (prefix or "").strip().strip("/")

    def export(
        self,
        *,
        index: CorpusIndex,
        rendered: tuple[RenderedOutput, ...],
        pipeline_version: str,
        include_drafts: bool = False,
        per_page: int | None = None,
    ) -> ExportResult:
        base_prefix = "/".join(p for p in [self._prefix, pipeline_version] if p)
        json_type = "application/json; charset=utf-8"

        # Keys are deterministic so reruns overwrite instead of accumulating.
        manifest_uri = self._writer.put_bytes(
            f"{base_prefix}/manifest.json", to_json(index_manifest(index, per_page=per_page)), content_type=json_type
        )
        uris: dict[str, str] = {}
        for out in rendered:
            doc = index.get(out.slug)
            if doc.draft and not include_drafts:
                continue
            uris[out.slug] = self._writer.put_bytes(
                f"{base_prefix}/documents/{out.slug}.json",
                to_json(rendered_to_dict(out, document=doc)),
                content_type=json_type,
            )
        return ExportResult(base_prefix=base_prefix, manifest_uri=manifest_uri, document_uris=uris)
