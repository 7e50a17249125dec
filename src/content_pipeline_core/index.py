from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from content_pipeline_core.errors import DuplicateSlugError, NotFoundError
from content_pipeline_core.models import Document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    items: tuple[str, ...]
    page: int
    total_pages: int
    total_items: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


class CorpusIndex:
    """
    Immutable, query-only view over a built corpus.

    Listings hold slugs only, ordered by publish date descending and slug ascending
    on ties. Drafts never appear in listings but are reachable through ``get``.
    Build with ``build_index``; a changed corpus means a new index.
    """

    __slots__ = ("_documents", "_by_date", "_by_tag", "_drafts", "_positions")

    def __init__(
        self,
        *,
        documents: Mapping[str, Document],
        by_date: tuple[str, ...],
        by_tag: Mapping[str, tuple[str, ...]],
        drafts: tuple[str, ...],
    ):
        self._documents = MappingProxyType(dict(documents))
        self._by_date = by_date
        self._by_tag = MappingProxyType(dict(by_tag))
        self._drafts = drafts
        self._positions = MappingProxyType({slug: i for i, slug in enumerate(by_date)})

    def __len__(self) -> int:
        return len(self._by_date)

    def __contains__(self, slug: object) -> bool:
        return slug in self._documents

    @property
    def by_date(self) -> tuple[str, ...]:
        return self._by_date

    def by_tag(self, tag: str) -> tuple[str, ...]:
        return self._by_tag.get(tag, ())

    def latest(self, n: int) -> tuple[str, ...]:
        if n < 0:
            raise ValueError("n must be >= 0")
        return self._by_date[:n]

    def all_tags(self) -> frozenset[str]:
        return frozenset(self._by_tag)

    def tag_counts(self) -> Mapping[str, int]:
        return MappingProxyType({tag: len(self._by_tag[tag]) for tag in sorted(self._by_tag)})

    def get(self, slug: str) -> Document:
        try:
            return self._documents[slug]
        except KeyError:
            raise NotFoundError(slug) from None

    def drafts(self) -> tuple[str, ...]:
        return self._drafts

    def is_published(self, slug: str) -> bool:
        return slug in self._positions

    def paginate(self, page: int, per_page: int) -> Page:
        if per_page <= 0:
            raise ValueError("per_page must be > 0")
        if page < 1:
            raise ValueError("page must be >= 1")
        total = len(self._by_date)
        start = (page - 1) * per_page
        return Page(
            items=self._by_date[start : start + per_page],
            page=page,
            total_pages=max(math.ceil(total / per_page), 1),
            total_items=total,
        )

    def adjacent(self, slug: str) -> tuple[str | None, str | None]:
        """Return ``(newer, older)`` neighbours of a published slug."""
        pos = self._positions.get(slug)
        if pos is None:
            raise NotFoundError(slug)
        newer = self._by_date[pos - 1] if pos > 0 else None
        older = self._by_date[pos + 1] if pos + 1 < len(self._by_date) else None
        return newer, older

    def resolve(self, target: str, *, prefix: str | None = None) -> str | None:
        """
        Resolve a cross-reference target to a published slug.

        Accepts an exact slug (``cpp/auto``) or, when ``prefix`` is given, the slug
        under that one prefix (``/blog/cpp/auto/``). Anything else is unresolved.
        """
        candidate = (target or "").strip().strip("/")
        if not candidate:
            return None
        if candidate in self._positions:
            return candidate
        root = (prefix or "").strip().strip("/")
        if root and candidate.startswith(root + "/"):
            rest = candidate.removeprefix(root + "/")
            if rest in self._positions:
                return rest
        return None


def build_index(documents: Iterable[Document]) -> CorpusIndex:
    """
    Aggregate documents into a CorpusIndex.

    Raises DuplicateSlugError on the first repeated slug (drafts included); no
    index is produced in that case.
    """
    by_slug: dict[str, Document] = {}
    for doc in documents:
        existing = by_slug.get(doc.slug)
        if existing is not None:
            logger.error(
                "Duplicate slug %s in %s and %s", doc.slug, existing.source_id, doc.source_id
            )
            raise DuplicateSlugError(
                doc.slug,
                first_source_id=existing.source_id,
                second_source_id=doc.source_id,
            )
        by_slug[doc.slug] = doc

    published = sorted((d for d in by_slug.values() if not d.draft), key=lambda d: d.sort_key)
    drafts = tuple(sorted(d.slug for d in by_slug.values() if d.draft))

    by_tag: dict[str, list[str]] = {}
    for doc in published:
        for tag in doc.tags:
            by_tag.setdefault(tag, []).append(doc.slug)

    return CorpusIndex(
        documents=by_slug,
        by_date=tuple(d.slug for d in published),
        by_tag={tag: tuple(slugs) for tag, slugs in by_tag.items()},
        drafts=drafts,
    )
