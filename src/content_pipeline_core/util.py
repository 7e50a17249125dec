from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable

_SLUG_SEGMENT_RE = re.compile(r"[^a-z0-9-]+")
_DOCUMENT_SUFFIXES = (".mdx", ".md", ".markdown")


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_text(text: str) -> str:
    return sha256_bytes(text.encode("utf-8"))


def slugify(value: str) -> str:
    candidate = (value or "").strip().lower()
    candidate = _SLUG_SEGMENT_RE.sub("-", candidate)
    return re.sub(r"-{2,}", "-", candidate).strip("-")


def slug_from_source_id(source_id: str) -> str:
    """
    Deterministic slug derived from a source identity such as ``cpp/auto.mdx``.

    Directory segments are kept (``cpp/auto``); each segment is slugified on its own.
    """
    path = (source_id or "").replace("\\", "/")
    if "://" in path:
        path = path.split("://", 1)[1]
    lower = path.lower()
    for suffix in _DOCUMENT_SUFFIXES:
        if lower.endswith(suffix):
            path = path[: -len(suffix)]
            break
    segments = [slugify(p) for p in path.split("/")]
    return "/".join(s for s in segments if s)


def corpus_fingerprint(entries: Iterable[tuple[str, str]]) -> str:
    """
    Stable fingerprint over ``(slug, body)`` pairs; independent of input order.
    """
    digest = hashlib.sha256()
    for slug, body in sorted(entries):
        digest.update(slug.encode("utf-8"))
        digest.update(b"\0")
        digest.update(sha256_text(body).encode("ascii"))
        digest.update(b"\n")
    return digest.hexdigest()
