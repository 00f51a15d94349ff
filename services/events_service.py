"""
Live marketplace events.

Writes publish through pg_notify. A single EventHub holds the one LISTEN
connection for the process and fans each message out to per-subscriber
bounded queues, so open SSE streams never hold request-pool connections.
"""

import asyncio
import json

from config import get_config
from db.events_db import (
    NOTIFICATIONS_CHANNEL,
    PRODUCTS_CHANNEL,
    close_listener_connection,
    open_listener_connection,
    publish_event_db,
)
from utils.logging_ut import get_logger

logger = get_logger("events")

## Longest description carried in a product.created event
EVENT_DESCRIPTION_CHARS = 500


class EventHub:
    def __init__(self, queue_size=100):
        self.queue_size = queue_size
        self._subscribers: set[asyncio.Queue] = set()
        self._conn = None

    @property
    def running(self) -> bool:
        return self._conn is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def start(self):
        if self._conn is None:
            self._conn = await open_listener_connection(self._on_notify)
            logger.info("Event listener connected")

    async def stop(self):
        conn, self._conn = self._conn, None
        if conn is not None:
            await close_listener_connection(conn, self._on_notify)
            logger.info("Event listener closed")

    def subscribe(self) -> asyncio.Queue:
        queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue):
        self._subscribers.discard(queue)

    def dispatch(self, message: dict):
        for queue in list(self._subscribers):
            if queue.full():
                ## Slow consumer: drop its oldest event
                queue.get_nowait()
                logger.debug("Subscriber queue full, dropped oldest event")
            queue.put_nowait(message)

    def _on_notify(self, conn, pid, channel, payload):
        try:
            message = json.loads(payload)
        except ValueError:
            logger.warning("Dropping malformed payload on %s", channel)
            return
        self.dispatch(message)


HUB = EventHub()


async def start_event_hub():
    HUB.queue_size = get_config()["EVENTS_QUEUE_SIZE"]
    await HUB.start()


async def stop_event_hub():
    await HUB.stop()


def _listing_event_payload(product):
    data = {k: v for k, v in product.items() if k not in ("image_url", "description")}
    image = product.get("image_url") or ""
    ## Inline images never fit a NOTIFY payload
    data["image_url"] = image if not image.startswith("data:") else None
    data["description"] = (product.get("description") or "")[:EVENT_DESCRIPTION_CHARS]
    return data


async def publish_product_created(product):
    await _publish(PRODUCTS_CHANNEL, "product.created", _listing_event_payload(product))


async def publish_product_deleted(product_id):
    await _publish(PRODUCTS_CHANNEL, "product.deleted", {"id": product_id})


async def publish_notification_created(notification):
    await _publish(NOTIFICATIONS_CHANNEL, "notification.created", notification)


async def _publish(channel, event, data):
    ## Publish failures never fail the write that triggered them
    try:
        await publish_event_db(channel, event, data)
    except Exception:
        logger.exception("Failed to publish %s on %s", event, channel)


def format_sse(event: str, data) -> str:
    body = json.dumps(data, default=str)
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in body.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


def event_visible_to(message: dict, user_email: str) -> bool:
    if message.get("event", "").startswith("notification."):
        return (message.get("data") or {}).get("seller_email") == user_email
    return True


async def subscribe_events(keepalive_seconds: float, hub: EventHub = HUB):
    """
    Async generator over (event, data) tuples fanned out by the hub.
    Yields (None, None) after keepalive_seconds of silence.
    """
    queue = hub.subscribe()
    try:
        while True:
            try:
                message = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield None, None
                continue
            yield message.get("event"), message.get("data")
    finally:
        hub.unsubscribe(queue)
