from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import cached_property
from typing import TypeVar
from uuid import uuid4

from content_pipeline_core.config import Settings
from content_pipeline_core.errors import (
    BuildCancelledError,
    ParseError,
    PipelineError,
    RenderError,
    UnresolvedReferenceWarning,
)
from content_pipeline_core.events import ContentBuiltEvent
from content_pipeline_core.export import ExportResult, ObjectWriter, S3Exporter
from content_pipeline_core.index import CorpusIndex, build_index
from content_pipeline_core.log import configure_logging
from content_pipeline_core.models import Document, RawDocument
from content_pipeline_core.parser import parse
from content_pipeline_core.render import RenderedOutput, UnresolvedReference, render
from content_pipeline_core.sources.filesystem import iter_directory
from content_pipeline_core.sources.http_api import ContentApiSource
from content_pipeline_core.sources.s3 import S3Source
from content_pipeline_core.storage.s3 import S3Client, S3Config
from content_pipeline_core.util import corpus_fingerprint

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_CANCELLED = object()


@dataclass(frozen=True)
class BuildIssue:
    kind: str
    source_id: str | None
    slug: str | None
    location: str | None
    message: str

    @classmethod
    def from_error(cls, err: PipelineError) -> BuildIssue:
        return cls(
            kind=err.kind,
            source_id=err.source_id,
            slug=err.slug,
            location=err.location,
            message=err.message,
        )

    @classmethod
    def from_unresolved(cls, ref: UnresolvedReference, *, source_id: str) -> BuildIssue:
        warning = UnresolvedReferenceWarning(slug=ref.slug, target=ref.target, line=ref.line)
        return cls(
            kind=type(warning).__name__,
            source_id=source_id,
            slug=warning.slug,
            location=f"line:{warning.line}",
            message=str(warning),
        )

    @property
    def fatal(self) -> bool:
        return self.kind != UnresolvedReferenceWarning.__name__

    def format(self) -> str:
        where = self.slug or self.source_id or "<unknown>"
        if self.location:
            where = f"{where} ({self.location})"
        return f"{self.kind}: {where}: {self.message}"


@dataclass(frozen=True)
class BuildReport:
    issues: tuple[BuildIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not any(i.fatal for i in self.issues)

    @property
    def errors(self) -> tuple[BuildIssue, ...]:
        return tuple(i for i in self.issues if i.fatal)

    @property
    def warnings(self) -> tuple[BuildIssue, ...]:
        return tuple(i for i in self.issues if not i.fatal)

    def format(self) -> str:
        if not self.issues:
            return "Build finished without problems."
        lines = [f"{len(self.errors)} error(s), {len(self.warnings)} warning(s):"]
        lines.extend(f"  {i.format()}" for i in self.issues)
        return "\n".join(lines)


@dataclass(frozen=True)
class BuildResult:
    index: CorpusIndex
    documents: tuple[Document, ...]
    rendered: tuple[RenderedOutput, ...]
    report: BuildReport
    fingerprint: str

    @cached_property
    def _rendered_by_slug(self) -> dict[str, RenderedOutput]:
        return {r.slug: r for r in self.rendered}

    def rendered_for(self, slug: str) -> RenderedOutput | None:
        return self._rendered_by_slug.get(slug)

    def to_event(self, *, pipeline_version: str) -> ContentBuiltEvent:
        return ContentBuiltEvent(
            event_id=uuid4(),
            pipeline_version=pipeline_version,
            corpus_fingerprint=self.fingerprint,
            document_count=len(self.index),
            draft_count=len(self.index.drafts()),
            issue_count=len(self.report.issues),
            tags=sorted(self.index.all_tags()),
            built_at=datetime.now(UTC),
        )


def _run_ordered(
    fn: Callable[[T], R],
    items: Sequence[T],
    *,
    workers: int,
    cancel: threading.Event | None,
    stage: str,
) -> list[R]:
    """
    Run ``fn`` over ``items`` on a thread pool; results keep input positions.
    """

    def task(item: T) -> object:
        if cancel is not None and cancel.is_set():
            return _CANCELLED
        return fn(item)

    slots: list[object] = [_CANCELLED] * len(items)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(task, item): i for i, item in enumerate(items)}
        for future in as_completed(futures):
            slots[futures[future]] = future.result()

    if any(s is _CANCELLED for s in slots):
        raise BuildCancelledError(f"Build cancelled during {stage}")
    return slots  # type: ignore[return-value]


def run_build(
    raw_documents: Sequence[RawDocument],
    *,
    settings: Settings | None = None,
    cancel: threading.Event | None = None,
) -> BuildResult:
    """
    Parse, index and render a corpus.

    Per-document parse and render failures exclude that document and land in the
    build report. A duplicate slug raises DuplicateSlugError and aborts the build.
    A set ``cancel`` event stops the build at the next task boundary.
    """
    settings = settings or Settings()
    workers = settings.build_workers
    issues: list[BuildIssue] = []
    logger.info("Building %d documents with %d workers", len(raw_documents), workers)

    def parse_one(raw: RawDocument) -> Document | ParseError:
        try:
            return parse(raw.body, source_id=raw.source_id, default_authors=settings.default_authors)
        except ParseError as e:
            return e

    parsed = _run_ordered(parse_one, raw_documents, workers=workers, cancel=cancel, stage="parse")
    documents: list[Document] = []
    for item in parsed:
        if isinstance(item, ParseError):
            logger.warning("Excluding %s: %s: %s", item.source_id, item.kind, item.message)
            issues.append(BuildIssue.from_error(item))
        else:
            documents.append(item)

    index = build_index(documents)

    def render_one(doc: Document) -> RenderedOutput | RenderError:
        try:
            return render(doc, index, link_prefix=settings.link_prefix)
        except RenderError as e:
            return e

    rendered_items = _run_ordered(render_one, documents, workers=workers, cancel=cancel, stage="render")
    rendered: list[RenderedOutput] = []
    for doc, item in zip(documents, rendered_items):
        if isinstance(item, RenderError):
            logger.warning("Excluding %s from output: %s", doc.slug, item.message)
            issues.append(BuildIssue.from_error(item))
            continue
        rendered.append(item)
        issues.extend(BuildIssue.from_unresolved(ref, source_id=doc.source_id) for ref in item.unresolved)

    fingerprint = corpus_fingerprint((d.slug, d.body) for d in documents)
    report = BuildReport(issues=tuple(issues))
    logger.info(
        "Built %d published, %d drafts, %d rendered; %d errors, %d warnings",
        len(index),
        len(index.drafts()),
        len(rendered),
        len(report.errors),
        len(report.warnings),
    )
    return BuildResult(
        index=index,
        documents=tuple(documents),
        rendered=tuple(rendered),
        report=report,
        fingerprint=fingerprint,
    )


def load_raw_documents(settings: Settings) -> list[RawDocument]:
    """Read the corpus from the configured source: content API, S3 bucket, or CONTENT_DIR."""
    if settings.content_api_url:
        return ContentApiSource(base_url=settings.content_api_url).list_documents()
    if settings.s3_bucket:
        if not settings.s3_endpoint:
            raise ValueError("S3_ENDPOINT is required when S3_BUCKET is set")
        client = S3Client(
            S3Config(
                endpoint=settings.s3_endpoint,
                bucket=settings.s3_bucket,
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key,
            )
        )
        return S3Source(client, prefix=settings.s3_prefix).list_documents()
    return iter_directory(settings.content_dir)


def build_from_settings(
    settings: Settings | None = None,
    *,
    cancel: threading.Event | None = None,
) -> BuildResult:
    """Configure logging at LOG_LEVEL, load the configured corpus and build it."""
    settings = settings or Settings()
    configure_logging(settings.log_level)
    return run_build(load_raw_documents(settings), settings=settings, cancel=cancel)


def export_build(
    result: BuildResult,
    writer: ObjectWriter,
    *,
    settings: Settings,
    prefix: str = "",
) -> ExportResult:
    """Write a build's manifest and documents, paging listings by POSTS_PER_PAGE."""
    return S3Exporter(writer=writer, prefix=prefix).export(
        index=result.index,
        rendered=result.rendered,
        pipeline_version=settings.pipeline_version,
        per_page=settings.posts_per_page,
    )
