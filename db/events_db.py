import json

import asyncpg

from config import get_config
from db import get_pool

PRODUCTS_CHANNEL = "bazaar_products"
NOTIFICATIONS_CHANNEL = "bazaar_notifications"
EVENT_CHANNELS = (PRODUCTS_CHANNEL, NOTIFICATIONS_CHANNEL)

## PostgreSQL rejects NOTIFY payloads of 8000 bytes or more
MAX_NOTIFY_BYTES = 7999


def encode_event(event, data) -> str:
    payload = json.dumps({"event": event, "data": data}, default=str)
    size = len(payload.encode("utf-8"))
    if size > MAX_NOTIFY_BYTES:
        raise ValueError(f"{event} payload is {size} bytes, over the NOTIFY limit")
    return payload


async def publish_event_db(channel, event, data):
    payload = encode_event(event, data)
    pool = get_pool()
    async with pool.acquire() as conn:
        await conn.execute("SELECT pg_notify($1, $2)", channel, payload)


async def open_listener_connection(callback):
    """
    Dedicated connection outside the request pool, LISTENing on every event
    channel. The caller owns it and closes it with close_listener_connection().
    """
    conn = await asyncpg.connect(dsn=get_config()["DATABASE_URL"])
    for channel in EVENT_CHANNELS:
        await conn.add_listener(channel, callback)
    return conn


async def close_listener_connection(conn, callback):
    try:
        for channel in EVENT_CHANNELS:
            await conn.remove_listener(channel, callback)
    finally:
        await conn.close()
