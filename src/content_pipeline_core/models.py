from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class CodeBlock:
    language: str
    content: str
    ordinal: int
    meta: str = ""


@dataclass(frozen=True)
class Document:
    slug: str
    title: str
    summary: str
    publish_date: date
    body: str
    source_id: str
    tags: frozenset[str] = frozenset()
    draft: bool = False
    authors: tuple[str, ...] = ()
    canonical_url: str | None = None
    layout: str | None = None
    images: tuple[str, ...] = ()
    code_blocks: tuple[CodeBlock, ...] = ()
    # Unrecognized front-matter fields, passed through for the presentation layer.
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)
    # Line of the raw document where ``body`` begins; render reports lines relative to it.
    body_start_line: int = field(default=1, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def sort_key(self) -> tuple[int, str]:
        return (-self.publish_date.toordinal(), self.slug)


@dataclass(frozen=True)
class RawDocument:
    source_id: str
    body: bytes
    content_type: str | None = None
