from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ContentBuiltEvent(BaseModel):
    event_id: UUID
    event_type: str = Field(default="content.built")
    pipeline_version: str
    corpus_fingerprint: str
    document_count: int
    draft_count: int
    issue_count: int
    tags: list[str] = Field(default_factory=list)
    built_at: datetime


def idempotency_key(event: ContentBuiltEvent) -> str:
    return f"{event.pipeline_version}:{event.corpus_fingerprint}"
