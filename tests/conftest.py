from __future__ import annotations

from collections.abc import Callable

import pytest

from content_pipeline_core.models import Document
from content_pipeline_core.parser import parse


def _make_text(
    *,
    title: str = "T",
    summary: str = "S",
    date: str = "2024-03-24",
    tags: list[str] | None = None,
    draft: bool = False,
    body: str = "Hello.\n",
    extra: str = "",
) -> str:
    tag_list = ", ".join(tags or [])
    return (
        "---\n"
        f"title: {title}\n"
        f"summary: {summary}\n"
        f"date: {date}\n"
        f"tags: [{tag_list}]\n"
        f"draft: {'true' if draft else 'false'}\n"
        f"{extra}"
        "---\n"
        f"{body}"
    )


@pytest.fixture()
def make_text() -> Callable[..., str]:
    return _make_text


@pytest.fixture()
def make_doc() -> Callable[..., Document]:
    def _make(slug: str, **kwargs: object) -> Document:
        return parse(_make_text(**kwargs), source_id=f"{slug}.mdx")  # type: ignore[arg-type]

    return _make
