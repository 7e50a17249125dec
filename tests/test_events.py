from datetime import datetime, timezone
from uuid import uuid4

import pytest

from content_pipeline_core import nats_publisher
from content_pipeline_core.config import Settings
from content_pipeline_core.events import ContentBuiltEvent, idempotency_key
from content_pipeline_core.nats_publisher import publish_build_event


def _event() -> ContentBuiltEvent:
    return ContentBuiltEvent(
        event_id=uuid4(),
        pipeline_version="v1",
        corpus_fingerprint="abc123",
        document_count=3,
        draft_count=1,
        issue_count=0,
        tags=["cpp"],
        built_at=datetime.now(timezone.utc),
    )


def test_idempotency_key_is_stable() -> None:
    assert idempotency_key(_event()) == "v1:abc123"
    assert idempotency_key(_event()) == idempotency_key(_event())


def test_event_serializes_type() -> None:
    assert '"event_type":"content.built"' in _event().model_dump_json()


def test_publish_is_skipped_without_nats_url() -> None:
    assert publish_build_event(Settings.model_validate({}), _event()) is False


def test_publish_sends_event_with_dedup_header(monkeypatch: pytest.MonkeyPatch) -> None:
    sent: list[tuple[str, str, str, dict[str, str] | None]] = []

    async def fake_publish_json(
        nats_url: str, subject: str, payload_json: str, *, headers: dict[str, str] | None = None
    ) -> None:
        sent.append((nats_url, subject, payload_json, headers))

    monkeypatch.setattr(nats_publisher, "publish_json", fake_publish_json)
    settings = Settings.model_validate({"NATS_URL": "nats://localhost:4222", "NATS_SUBJECT": "site.built"})
    event = _event()

    assert publish_build_event(settings, event) is True
    assert len(sent) == 1
    url, subject, payload, headers = sent[0]
    assert url == "nats://localhost:4222"
    assert subject == "site.built"
    assert ContentBuiltEvent.model_validate_json(payload) == event
    assert headers == {"Nats-Msg-Id": "v1:abc123"}
