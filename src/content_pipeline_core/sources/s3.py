from __future__ import annotations

from typing import Protocol

from content_pipeline_core.models import RawDocument
from content_pipeline_core.sources.filesystem import DEFAULT_SUFFIXES


class ObjectStore(Protocol):
    def list_keys(self, *, prefix: str) -> list[str]: ...
    def get_bytes(self, key: str) -> bytes: ...


class S3Source:
    """Documents stored under one bucket prefix; ``source_id`` is the key relative to it."""

    def __init__(self, store: ObjectStore, *, prefix: str = "", suffixes: tuple[str, ...] = DEFAULT_SUFFIXES):
        self._store = store
        self._prefix = (prefix or "").strip().strip("/")
        self._suffixes = tuple(s.lower() for s in suffixes)

    def _relative(self, key: str) -> str:
        if self._prefix:
            return key.removeprefix(self._prefix + "/")
        return key

    def list_documents(self) -> list[RawDocument]:
        list_prefix = f"{self._prefix}/" if self._prefix else ""
        docs: list[RawDocument] = []
        for key in sorted(self._store.list_keys(prefix=list_prefix)):
            rel = self._relative(key)
            name = rel.rsplit("/", 1)[-1]
            if name.startswith(".") or not name.lower().endswith(self._suffixes):
                continue
            docs.append(RawDocument(source_id=rel, body=self._store.get_bytes(key)))
        return docs
