from __future__ import annotations

import pytest

from content_pipeline_core.errors import MalformedDocumentError
from content_pipeline_core.fences import FenceSegment, ProseSegment, fence_segments, scan_segments


def test_scan_segments_alternates_prose_and_code() -> None:
    body = "Intro\n\n```cpp\nint a = 10;\n```\n\nOutro\n"
    segments = scan_segments(body)
    assert segments == [
        ProseSegment(text="Intro\n", start_line=1),
        FenceSegment(language="cpp", meta="", content="int a = 10;", ordinal=0, start_line=3),
        ProseSegment(text="\nOutro\n", start_line=6),
    ]


def test_longer_closing_fence_closes_and_shorter_does_not() -> None:
    body = "````md\n```js\nx\n```\n`````\nafter"
    (fence,) = fence_segments(body)
    assert fence.language == "md"
    assert fence.content == "```js\nx\n```"


def test_backtick_info_with_backtick_is_not_a_fence() -> None:
    assert fence_segments("```not `a` fence\ntext") == []


def test_four_space_indent_is_not_a_fence() -> None:
    assert fence_segments("    ```\n    code\n") == []


def test_empty_fence() -> None:
    (fence,) = fence_segments("```\n```")
    assert fence.language == ""
    assert fence.content == ""


def test_unterminated_fence_raises_with_line() -> None:
    with pytest.raises(MalformedDocumentError) as exc:
        scan_segments("a\nb\n~~~python\nprint()\n```\n")
    assert exc.value.line == 3
