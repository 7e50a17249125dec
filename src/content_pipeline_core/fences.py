from __future__ import annotations

import re
from dataclasses import dataclass

from content_pipeline_core.errors import MalformedDocumentError

_OPEN_FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


@dataclass(frozen=True)
class ProseSegment:
    text: str
    start_line: int


@dataclass(frozen=True)
class FenceSegment:
    language: str
    meta: str
    content: str
    ordinal: int
    start_line: int


Segment = ProseSegment | FenceSegment


def _split_info(info: str) -> tuple[str, str]:
    info = info.strip()
    if not info:
        return "", ""
    parts = info.split(None, 1)
    return parts[0], (parts[1].strip() if len(parts) > 1 else "")


def _is_closing(line: str, fence: str) -> bool:
    stripped = line.rstrip()
    indent = len(stripped) - len(stripped.lstrip(" "))
    if indent > 3:
        return False
    run = stripped[indent:]
    return len(run) >= len(fence) and run == fence[0] * len(run)


def scan_segments(body: str) -> list[Segment]:
    """
    Split a document body into prose and fenced code segments, in order.

    A fence opens on three or more backticks or tildes (indented at most three
    spaces) and closes on a run of the same character at least as long. Line
    numbers are 1-based within the body.

    Raises MalformedDocumentError for a fence that is never closed.
    """
    segments: list[Segment] = []
    prose: list[str] = []
    prose_start = 1
    ordinal = 0

    lines = body.split("\n")
    i = 0
    while i < len(lines):
        line = lines[i]
        m = _OPEN_FENCE_RE.match(line)
        if m and not (m.group("fence")[0] == "`" and "`" in m.group("info")):
            fence = m.group("fence")
            open_line = i + 1
            content: list[str] = []
            j = i + 1
            while j < len(lines) and not _is_closing(lines[j], fence):
                content.append(lines[j])
                j += 1
            if j >= len(lines):
                raise MalformedDocumentError(
                    f"Unterminated code fence {fence!r}",
                    line=open_line,
                )

            if prose:
                segments.append(ProseSegment(text="\n".join(prose), start_line=prose_start))
                prose = []
            language, meta = _split_info(m.group("info"))
            segments.append(
                FenceSegment(
                    language=language,
                    meta=meta,
                    content="\n".join(content),
                    ordinal=ordinal,
                    start_line=open_line,
                )
            )
            ordinal += 1
            i = j + 1
            prose_start = i + 1
            continue

        if not prose:
            prose_start = i + 1
        prose.append(line)
        i += 1

    if prose:
        segments.append(ProseSegment(text="\n".join(prose), start_line=prose_start))
    return segments


def fence_segments(body: str) -> list[FenceSegment]:
    return [s for s in scan_segments(body) if isinstance(s, FenceSegment)]
