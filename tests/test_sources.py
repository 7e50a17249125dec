from __future__ import annotations

import httpx
import pytest

from content_pipeline_core.sources.filesystem import iter_directory
from content_pipeline_core.sources.http_api import ContentApiSource
from content_pipeline_core.sources.s3 import S3Source
from content_pipeline_core.storage.s3 import parse_s3_uri


class FakeStore:
    def __init__(self, objects: dict[str, bytes]):
        self.objects = objects
        self.list_calls: list[str] = []

    def list_keys(self, *, prefix: str) -> list[str]:
        self.list_calls.append(prefix)
        return [k for k in self.objects if k.startswith(prefix)]

    def get_bytes(self, key: str) -> bytes:
        return self.objects[key]


def test_iter_directory_sorted_relative_ids(tmp_path) -> None:  # noqa: ANN001
    (tmp_path / "cpp").mkdir()
    (tmp_path / "cpp" / "move.mdx").write_bytes(b"move")
    (tmp_path / "exec.md").write_bytes(b"exec")
    (tmp_path / "notes.txt").write_bytes(b"ignored")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / ".hidden" / "x.md").write_bytes(b"ignored")

    docs = iter_directory(tmp_path)
    assert [(d.source_id, d.body) for d in docs] == [("cpp/move.mdx", b"move"), ("exec.md", b"exec")]


def test_iter_directory_missing_root(tmp_path) -> None:  # noqa: ANN001
    with pytest.raises(ValueError):
        iter_directory(tmp_path / "nope")


def test_s3_source_strips_prefix_and_filters() -> None:
    store = FakeStore(
        {
            "blog/cpp/auto.mdx": b"auto",
            "blog/.DS_Store": b"",
            "blog/images/a.png": b"png",
            "blog/exec.md": b"exec",
            "other/x.md": b"nope",
        }
    )
    docs = S3Source(store, prefix="/blog/").list_documents()
    assert store.list_calls == ["blog/"]
    assert [(d.source_id, d.body) for d in docs] == [("cpp/auto.mdx", b"auto"), ("exec.md", b"exec")]


def test_content_api_source_lists_and_fetches() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        assert request.headers.get("Authorization") == "Bearer k"
        if request.url.path == "/api/documents":
            return httpx.Response(
                200,
                json={
                    "documents": [
                        {"id": "cpp/move.mdx", "url": "raw/cpp/move.mdx"},
                        {"id": "cpp/auto.mdx", "url": "/api/raw/cpp/auto.mdx"},
                    ]
                },
            )
        return httpx.Response(200, content=request.url.path.encode(), headers={"content-type": "text/markdown"})

    source = ContentApiSource(base_url="https://cms.example/api", api_key="k", transport=httpx.MockTransport(handler))
    docs = source.list_documents()
    assert [d.source_id for d in docs] == ["cpp/auto.mdx", "cpp/move.mdx"]
    assert docs[0].body == b"/api/raw/cpp/auto.mdx"
    assert docs[1].body == b"/api/raw/cpp/move.mdx"
    assert docs[0].content_type == "text/markdown"
    assert seen[0] == "/api/documents"


def test_content_api_source_raises_on_http_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    source = ContentApiSource(base_url="https://cms.example/api", transport=transport)
    with pytest.raises(httpx.HTTPStatusError):
        source.list_documents()


def test_content_api_source_rejects_incomplete_entries() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"documents": [{"id": "a.md"}]}))
    with pytest.raises(ValueError):
        ContentApiSource(base_url="https://cms.example/api", transport=transport).list_documents()


def test_parse_s3_uri() -> None:
    assert parse_s3_uri("s3://bucket/blog/a.md") == ("bucket", "blog/a.md")
    with pytest.raises(ValueError):
        parse_s3_uri("https://bucket/a.md")
