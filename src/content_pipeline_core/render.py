from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass

from content_pipeline_core.errors import MalformedDocumentError, RenderError
from content_pipeline_core.fences import FenceSegment, ProseSegment, scan_segments
from content_pipeline_core.index import CorpusIndex
from content_pipeline_core.models import Document

logger = logging.getLogger(__name__)

DEFAULT_LINK_PREFIX = "/blog/"
WORDS_PER_MINUTE = 200

_INLINE_RE = re.compile(
    r"(?P<code>`[^`\n]*`)"
    r"|\[\[(?P<wiki_target>[^\]|\n]+)(?:\|(?P<wiki_label>[^\]\n]+))?\]\]"
    r"|(?<!!)\[(?P<label>[^\]\n]*)\]\((?P<href>[^)\s]+)(?:\s+\"[^\"\n]*\")?\)"
)
_HEADING_RE = re.compile(r"^ {0,3}(?P<hashes>#{1,6})[ \t]+(?P<text>.+?)(?:[ \t]+#+)?[ \t]*$")
_ANCHOR_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)


@dataclass(frozen=True)
class TextSpan:
    text: str


@dataclass(frozen=True)
class LinkSpan:
    label: str
    target: str
    href: str | None
    resolved: bool
    source_text: str


Span = TextSpan | LinkSpan


@dataclass(frozen=True)
class ProseNode:
    spans: tuple[Span, ...]
    start_line: int

    @property
    def text(self) -> str:
        return "".join(s.text if isinstance(s, TextSpan) else s.source_text for s in self.spans)


@dataclass(frozen=True)
class CodeNode:
    language: str
    content: str
    ordinal: int
    meta: str = ""


Node = ProseNode | CodeNode


@dataclass(frozen=True)
class TocEntry:
    depth: int
    text: str
    anchor: str


@dataclass(frozen=True)
class UnresolvedReference:
    slug: str
    target: str
    line: int


@dataclass(frozen=True)
class RenderedOutput:
    slug: str
    title: str
    nodes: tuple[Node, ...]
    toc: tuple[TocEntry, ...]
    word_count: int
    reading_minutes: int
    unresolved: tuple[UnresolvedReference, ...] = ()

    @property
    def code_nodes(self) -> tuple[CodeNode, ...]:
        return tuple(n for n in self.nodes if isinstance(n, CodeNode))


def _split_fragment(target: str) -> tuple[str, str]:
    if "#" in target:
        path, frag = target.split("#", 1)
        return path, f"#{frag}"
    return target, ""


class _ProseRenderer:
    def __init__(self, *, document: Document, index: CorpusIndex, link_prefix: str):
        self._doc = document
        self._line_offset = document.body_start_line - 1
        self._index = index
        self._prefix = link_prefix
        self.unresolved: list[UnresolvedReference] = []

    def _link(self, *, label: str | None, target: str, source_text: str, line: int) -> Span:
        path, fragment = _split_fragment(target.strip())
        slug = self._index.resolve(path, prefix=self._prefix)
        if slug is None:
            logger.warning("Unresolved reference %r in %s (line %d)", target, self._doc.slug, line)
            self.unresolved.append(UnresolvedReference(slug=self._doc.slug, target=target, line=line))
            return LinkSpan(
                label=label or target,
                target=target,
                href=None,
                resolved=False,
                source_text=source_text,
            )
        if label is None:
            label = self._index.get(slug).title
        return LinkSpan(
            label=label,
            target=target,
            href=f"{self._prefix}{slug}{fragment}",
            resolved=True,
            source_text=source_text,
        )

    def spans(self, segment: ProseSegment) -> tuple[Span, ...]:
        text = segment.text
        out: list[Span] = []
        pos = 0
        for m in _INLINE_RE.finditer(text):
            href = m.group("href")
            is_wiki = m.group("wiki_target") is not None
            is_internal = href is not None and href.startswith(self._prefix)
            # Inline code and external links stay literal.
            if not (is_wiki or is_internal):
                continue
            if m.start() > pos:
                out.append(TextSpan(text[pos : m.start()]))
            line = self._line_offset + segment.start_line + text.count("\n", 0, m.start())
            if is_wiki:
                label = m.group("wiki_label")
                out.append(
                    self._link(
                        label=label.strip() if label else None,
                        target=m.group("wiki_target"),
                        source_text=m.group(0),
                        line=line,
                    )
                )
            else:
                out.append(
                    self._link(
                        label=m.group("label"),
                        target=href[len(self._prefix) :],
                        source_text=m.group(0),
                        line=line,
                    )
                )
            pos = m.end()
        tail = text[pos:]
        if tail:
            out.append(TextSpan(tail))
        return tuple(out)


def _anchor(text: str, seen: dict[str, int]) -> str:
    base = _ANCHOR_STRIP_RE.sub("", text.strip().lower()).replace(" ", "-")
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}-{count}"


def _toc(segments: list[ProseSegment]) -> tuple[TocEntry, ...]:
    entries: list[TocEntry] = []
    seen: dict[str, int] = {}
    for seg in segments:
        for line in seg.text.split("\n"):
            m = _HEADING_RE.match(line)
            if not m:
                continue
            text = m.group("text").strip()
            entries.append(TocEntry(depth=len(m.group("hashes")), text=text, anchor=_anchor(text, seen)))
    return tuple(entries)


def render(
    document: Document,
    index: CorpusIndex,
    *,
    link_prefix: str = DEFAULT_LINK_PREFIX,
) -> RenderedOutput:
    """
    Render a document body into an ordered tree of prose and code nodes.

    Code nodes mirror ``document.code_blocks`` exactly (language, content, ordinal);
    highlighting is left to the presentation layer. Cross-references are resolved
    against ``index``; unresolved ones stay literal and are listed in ``unresolved``.
    Line numbers count from the top of the raw document. Same document and same
    index always give an equal result.
    """
    line_offset = document.body_start_line - 1
    try:
        segments = scan_segments(document.body)
    except MalformedDocumentError as e:
        line = e.line + line_offset if e.line is not None else None
        raise RenderError(e.message, source_id=document.source_id, slug=document.slug, line=line) from e

    fences = [s for s in segments if isinstance(s, FenceSegment)]
    scanned = tuple((f.language, f.content, f.ordinal, f.meta) for f in fences)
    expected = tuple((c.language, c.content, c.ordinal, c.meta) for c in document.code_blocks)
    if scanned != expected:
        raise RenderError(
            f"Body has {len(scanned)} code blocks that do not match the {len(expected)} parsed ones",
            source_id=document.source_id,
            slug=document.slug,
        )

    prose_renderer = _ProseRenderer(document=document, index=index, link_prefix=link_prefix)
    nodes: list[Node] = []
    prose_segments: list[ProseSegment] = []
    words = 0
    for seg in segments:
        if isinstance(seg, FenceSegment):
            nodes.append(CodeNode(language=seg.language, content=seg.content, ordinal=seg.ordinal, meta=seg.meta))
            continue
        if not seg.text.strip():
            continue
        prose_segments.append(seg)
        words += len(seg.text.split())
        nodes.append(ProseNode(spans=prose_renderer.spans(seg), start_line=seg.start_line + line_offset))

    return RenderedOutput(
        slug=document.slug,
        title=document.title,
        nodes=tuple(nodes),
        toc=_toc(prose_segments),
        word_count=words,
        reading_minutes=math.ceil(words / WORDS_PER_MINUTE) if words else 0,
        unresolved=tuple(prose_renderer.unresolved),
    )
