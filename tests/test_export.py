from __future__ import annotations

import json
from collections.abc import Callable

from content_pipeline_core.export import S3Exporter, document_to_dict, index_manifest, rendered_to_dict
from content_pipeline_core.index import build_index
from content_pipeline_core.models import Document
from content_pipeline_core.render import render


class FakeWriter:
    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str | None]] = {}

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        self.objects[key] = (data, content_type)
        return f"s3://bucket/{key}"


def test_index_manifest_lists_published_only(make_doc: Callable[..., Document]) -> None:
    index = build_index(
        [
            make_doc("auto", date="2024-03-24", tags=["cpp"], title="Auto"),
            make_doc("exec", date="2024-01-02", tags=["os"]),
            make_doc("wip", draft=True, tags=["cpp"]),
        ]
    )
    manifest = index_manifest(index)
    assert [p["slug"] for p in manifest["posts"]] == ["auto", "exec"]
    assert manifest["posts"][0]["title"] == "Auto"
    assert manifest["posts"][0]["date"] == "2024-03-24"
    assert manifest["tags"] == {"cpp": 1, "os": 1}
    assert manifest["byTag"] == {"cpp": ["auto"], "os": ["exec"]}
    json.dumps(manifest)


def test_rendered_to_dict_shapes_nodes(make_doc: Callable[..., Document]) -> None:
    doc = make_doc("a", body="# Title\n\nSee [[b]].\n\n```cpp title=a.cpp\nint a = 10;\n```\n")
    index = build_index([doc, make_doc("b", title="B")])
    data = rendered_to_dict(render(doc, index), document=doc)

    assert [n["type"] for n in data["nodes"]] == ["prose", "code"]
    assert data["nodes"][1] == {
        "type": "code",
        "language": "cpp",
        "meta": "title=a.cpp",
        "ordinal": 0,
        "content": "int a = 10;",
    }
    link = data["nodes"][0]["spans"][1]
    assert link["type"] == "link"
    assert link["href"] == "/blog/b"
    assert data["toc"] == [{"depth": 1, "text": "Title", "anchor": "title"}]
    assert data["meta"] == document_to_dict(doc)
    json.dumps(data)


def test_s3_exporter_writes_stable_keys(make_doc: Callable[..., Document]) -> None:
    docs = [make_doc("cpp/auto"), make_doc("wip", draft=True)]
    index = build_index(docs)
    rendered = tuple(render(d, index) for d in docs)
    writer = FakeWriter()

    result = S3Exporter(writer=writer, prefix="/site/").export(index=index, rendered=rendered, pipeline_version="v1")

    assert result.base_prefix == "site/v1"
    assert result.manifest_uri == "s3://bucket/site/v1/manifest.json"
    assert result.document_uris == {"cpp/auto": "s3://bucket/site/v1/documents/cpp/auto.json"}
    body, content_type = writer.objects["site/v1/documents/cpp/auto.json"]
    assert content_type == "application/json; charset=utf-8"
    assert json.loads(body)["slug"] == "cpp/auto"


def test_s3_exporter_can_include_drafts(make_doc: Callable[..., Document]) -> None:
    doc = make_doc("wip", draft=True)
    index = build_index([doc])
    result = S3Exporter(writer=FakeWriter(), prefix="").export(
        index=index, rendered=(render(doc, index),), pipeline_version="v1", include_drafts=True
    )
    assert list(result.document_uris) == ["wip"]
