from __future__ import annotations

from dataclasses import dataclass
from time import sleep
from urllib.parse import urljoin

import httpx

from content_pipeline_core.models import RawDocument


@dataclass(frozen=True)
class ContentApiSource:
    """
    Content API exposing ``GET <base>/documents`` as
    ``{"documents": [{"id": "cpp/auto.mdx", "url": "/raw/cpp/auto.mdx"}, ...]}``.

    Relative ``url`` values resolve against ``base_url``.
    """

    base_url: str
    api_key: str | None = None
    timeout_s: float = 20.0
    max_retries: int = 2
    retry_backoff_s: float = 0.5
    transport: httpx.BaseTransport | None = None

    def _get(self, client: httpx.Client, url: str) -> httpx.Response:
        attempt = 0
        while True:
            try:
                resp = client.get(url)
                resp.raise_for_status()
                return resp
            except (httpx.TimeoutException, httpx.TransportError):
                if attempt >= self.max_retries:
                    raise
                sleep(self.retry_backoff_s * (2**attempt))
                attempt += 1

    def list_documents(self) -> list[RawDocument]:
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")

        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"

        docs: list[RawDocument] = []
        with httpx.Client(
            timeout=self.timeout_s,
            headers=headers,
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            listing = self._get(client, urljoin(base, "documents")).json()
            entries = listing.get("documents") or []
            for entry in sorted(entries, key=lambda e: str(e.get("id") or "")):
                doc_id = str(entry.get("id") or "").strip()
                url = str(entry.get("url") or "").strip()
                if not doc_id or not url:
                    raise ValueError(f"Content API entry is missing id or url: {entry!r}")
                resp = self._get(client, urljoin(base, url))
                docs.append(
                    RawDocument(
                        source_id=doc_id,
                        body=resp.content,
                        content_type=resp.headers.get("content-type"),
                    )
                )
        return docs
