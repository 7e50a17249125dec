from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_pipeline_core.errors import MalformedDocumentError

FRONT_MATTER_DELIMITER = "---"


class _FrontMatterLoader(yaml.SafeLoader):
    pass


# Dates stay strings so a bad calendar date surfaces as a field error, not a YAML crash.
_FrontMatterLoader.yaml_implicit_resolvers = {
    first: [r for r in resolvers if r[0] != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class FrontMatter(BaseModel):
    """Recognized front-matter fields; anything else is kept in ``model_extra``."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    title: str
    summary: str
    date: dt.date
    draft: bool = False
    tags: list[str] = Field(default_factory=list)
    authors: list[str] = Field(default_factory=list)
    layout: str | None = None
    images: list[str] = Field(default_factory=list)
    canonical_url: str | None = Field(default=None, alias="canonicalUrl")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, dt.date):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                return dt.date.fromisoformat(text)
            except ValueError:
                pass
            try:
                return dt.datetime.fromisoformat(text).date()
            except ValueError as e:
                raise ValueError(f"not an ISO-8601 date: {value!r}") from e
        raise ValueError(f"not an ISO-8601 date: {value!r}")

    @field_validator("tags", "authors", "images", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, value: list[str]) -> list[str]:
        out: list[str] = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in out:
                out.append(tag)
        return out

    @property
    def extra_fields(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


@dataclass(frozen=True)
class SplitDocument:
    metadata: dict[str, Any]
    body: str
    body_start_line: int


def split_front_matter(text: str) -> SplitDocument:
    """
    Split ``---`` delimited YAML front matter from the body.

    The body is returned exactly as written after the closing delimiter line.
    """
    lines = text.split("\n")
    if not lines or lines[0].rstrip() != FRONT_MATTER_DELIMITER:
        raise MalformedDocumentError("Document must start with a '---' front matter delimiter", line=1)

    end_index: int | None = None
    for idx in range(1, len(lines)):
        if lines[idx].rstrip() == FRONT_MATTER_DELIMITER:
            end_index = idx
            break
    if end_index is None:
        raise MalformedDocumentError("Front matter is not closed with '---'", line=1)

    block = "\n".join(lines[1:end_index])
    try:
        loaded = yaml.load(block, Loader=_FrontMatterLoader)  # noqa: S506
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 2 if mark is not None else None
        raise MalformedDocumentError(f"Front matter is not valid YAML: {e}", line=line) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise MalformedDocumentError("Front matter must be a mapping of fields", line=2)

    return SplitDocument(
        metadata={str(k): v for k, v in loaded.items()},
        body="\n".join(lines[end_index + 1 :]),
        body_start_line=end_index + 2,
    )


def dump_front_matter(fields: dict[str, Any]) -> str:
    block = yaml.safe_dump(fields, allow_unicode=True, sort_keys=False, default_flow_style=False)
    return f"{FRONT_MATTER_DELIMITER}\n{block}{FRONT_MATTER_DELIMITER}\n"
