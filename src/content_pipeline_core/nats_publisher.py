from __future__ import annotations

import asyncio
import logging

from nats.aio.client import Client as NATS

from content_pipeline_core.config import Settings
from content_pipeline_core.events import ContentBuiltEvent, idempotency_key

logger = logging.getLogger(__name__)


async def publish_json(nats_url: str, subject: str, payload_json: str, *, headers: dict[str, str] | None = None) -> None:
    nc = NATS()
    await nc.connect(servers=[nats_url])
    try:
        await nc.publish(subject, payload_json.encode("utf-8"), headers=headers)
        await nc.flush(timeout=2)
    finally:
        await nc.close()


def publish_build_event(settings: Settings, event: ContentBuiltEvent) -> bool:
    """
    Announce a finished build on ``settings.nats_subject``.

    Returns False without connecting when no NATS_URL is configured.
    """
    if not settings.nats_url:
        logger.debug("NATS_URL not set; skipping %s event", event.event_type)
        return False
    key = idempotency_key(event)
    asyncio.run(
        publish_json(
            settings.nats_url,
            settings.nats_subject,
            event.model_dump_json(),
            headers={"Nats-Msg-Id": key},
        )
    )
    logger.info("Published %s (%s) to %s", event.event_type, key, settings.nats_subject)
    return True
