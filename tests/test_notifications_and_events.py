import asyncio
import json
from datetime import datetime, timezone

import pytest

from helpers import AsyncStub, make_product
from routes.events_routes import should_forward
from services import events_service, notifications_service, wishlist_service
from db.events_db import MAX_NOTIFY_BYTES, encode_event
from services.events_service import EventHub, event_visible_to, format_sse, subscribe_events

USER = {"id": 7, "email": "buyer@example.com", "name": "Test Buyer"}
NOW = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)


def _notification(**overrides):
    n = {
        "id": 5,
        "seller_email": "oliver@example.com",
        "product_title": "iPhone 15 Pro Max 512GB",
        "type": "review",
        "message": "Test Buyer rated it 5/5",
        "read": False,
        "created_at": NOW,
    }
    n.update(overrides)
    return n


def test_notify_seller_creates_and_publishes(monkeypatch):
    create = AsyncStub(_notification())
    publish = AsyncStub()
    monkeypatch.setattr(notifications_service, "create_notification_db", create)
    monkeypatch.setattr(notifications_service, "publish_notification_created", publish)

    result = asyncio.run(
        notifications_service.notify_seller(make_product(), "review", "rated", actor_email=USER["email"])
    )
    assert result["id"] == 5
    assert create.calls[0][0] == ("oliver@example.com", "iPhone 15 Pro Max 512GB", "review", "rated")
    assert publish.called


@pytest.mark.parametrize(
    "product, actor",
    [
        (make_product(seller_email=None), USER["email"]),
        (make_product(seller_email=USER["email"]), USER["email"]),
    ],
)
def test_notify_seller_skips_sellerless_and_self(monkeypatch, product, actor):
    create = AsyncStub(_notification())
    monkeypatch.setattr(notifications_service, "create_notification_db", create)
    assert asyncio.run(notifications_service.notify_seller(product, "wishlist", "saved", actor_email=actor)) is None
    assert not create.called


def test_notify_seller_rejects_unknown_type():
    with pytest.raises(ValueError):
        asyncio.run(notifications_service.notify_seller(make_product(), "offer", "x"))


def test_wishlist_add_notifies_only_on_insert(monkeypatch):
    monkeypatch.setattr(wishlist_service, "get_product_db", AsyncStub(make_product()))
    notify = AsyncStub()
    monkeypatch.setattr(wishlist_service, "notify_seller", notify)

    monkeypatch.setattr(wishlist_service, "add_to_wishlist_db", AsyncStub(True))
    assert asyncio.run(wishlist_service.add_to_wishlist_service(USER, 1)) == {"product_id": 1, "wishlisted": True}
    monkeypatch.setattr(wishlist_service, "add_to_wishlist_db", AsyncStub(False))
    assert asyncio.run(wishlist_service.add_to_wishlist_service(USER, 1)) == {"product_id": 1, "wishlisted": True}

    assert len(notify.calls) == 1
    assert notify.calls[0][0][1] == "wishlist"


def test_wishlist_toggle_twice_restores_membership(monkeypatch):
    saved = set()

    def _add(email, product_id):
        inserted = product_id not in saved
        saved.add(product_id)
        return inserted

    monkeypatch.setattr(wishlist_service, "get_product_db", AsyncStub(make_product()))
    monkeypatch.setattr(wishlist_service, "notify_seller", AsyncStub())
    monkeypatch.setattr(wishlist_service, "is_wishlisted_db", AsyncStub(side_effect=lambda e, p: p in saved))
    monkeypatch.setattr(wishlist_service, "add_to_wishlist_db", AsyncStub(side_effect=_add))
    monkeypatch.setattr(wishlist_service, "remove_from_wishlist_db", AsyncStub(side_effect=lambda e, p: saved.discard(p)))

    first = asyncio.run(wishlist_service.toggle_wishlist_service(USER, 1))
    second = asyncio.run(wishlist_service.toggle_wishlist_service(USER, 1))
    assert first["wishlisted"] is True
    assert second["wishlisted"] is False
    assert saved == set()


def test_wishlist_add_missing_product(auth_client, monkeypatch):
    monkeypatch.setattr(wishlist_service, "get_product_db", AsyncStub(None))
    assert auth_client.put("/api/wishlist/99").status_code == 404


def test_notifications_routes(auth_client, monkeypatch, buyer):
    monkeypatch.setattr(notifications_service, "list_notifications_db", AsyncStub([_notification(seller_email=buyer["email"])]))
    monkeypatch.setattr(notifications_service, "count_unread_notifications_db", AsyncStub(1))
    r = auth_client.get("/api/notifications")
    assert r.status_code == 200, r.text
    assert r.json()["unread"] == 1
    assert r.json()["items"][0]["type"] == "review"

    monkeypatch.setattr(notifications_service, "mark_notification_read_db", AsyncStub(False))
    assert auth_client.post("/api/notifications/5/read").status_code == 404
    monkeypatch.setattr(notifications_service, "mark_notification_read_db", AsyncStub(True))
    assert auth_client.post("/api/notifications/5/read").status_code == 204

    monkeypatch.setattr(notifications_service, "mark_all_notifications_read_db", AsyncStub(3))
    assert auth_client.post("/api/notifications/read-all").json() == {"updated": 3}


def test_format_sse_frames_json():
    frame = format_sse("product.deleted", {"id": 3})
    assert frame == 'event: product.deleted\ndata: {"id": 3}\n\n'
    created = format_sse("notification.created", {"created_at": NOW})
    assert json.loads(created.splitlines()[1][len("data: "):]) == {"created_at": str(NOW)}


def test_notification_events_only_reach_their_seller():
    message = {"event": "notification.created", "data": {"seller_email": "oliver@example.com"}}
    assert event_visible_to(message, "oliver@example.com")
    assert not event_visible_to(message, "buyer@example.com")
    assert event_visible_to({"event": "product.deleted", "data": {"id": 1}}, "buyer@example.com")


def test_should_forward_applies_listing_filters():
    product = make_product()
    assert should_forward("product.created", product, "buyer@example.com", q="iphone", category="Phones")
    assert not should_forward("product.created", product, "buyer@example.com", category="Cars")
    assert should_forward("product.deleted", {"id": 1}, "buyer@example.com", category="Cars")
    assert not should_forward(None, None, "buyer@example.com")


def test_listing_event_payload_drops_inline_images(monkeypatch):
    publish = AsyncStub()
    monkeypatch.setattr(events_service, "publish_event_db", publish)
    asyncio.run(events_service.publish_product_created(make_product(image_url="data:image/png;base64,AAAA")))
    channel, event, data = publish.calls[0][0]
    assert event == "product.created"
    assert data["image_url"] is None
    assert data["title"] == "iPhone 15 Pro Max 512GB"


def test_publish_failure_is_logged_not_raised(monkeypatch):
    def _fail(*args):
        raise RuntimeError("pool closed")

    monkeypatch.setattr(events_service, "publish_event_db", AsyncStub(side_effect=_fail))
    asyncio.run(events_service.publish_product_deleted(1))


def test_listing_event_payload_trims_long_description(monkeypatch):
    publish = AsyncStub()
    monkeypatch.setattr(events_service, "publish_event_db", publish)
    asyncio.run(events_service.publish_product_created(make_product(description="x" * 20000)))
    data = publish.calls[0][0][2]
    assert len(data["description"]) == events_service.EVENT_DESCRIPTION_CHARS
    assert len(encode_event("product.created", data).encode("utf-8")) <= MAX_NOTIFY_BYTES


def test_encode_event_rejects_oversized_payload():
    with pytest.raises(ValueError):
        encode_event("notification.created", {"message": "y" * MAX_NOTIFY_BYTES})


def test_hub_fans_out_to_every_subscriber():
    async def run():
        hub = EventHub(queue_size=10)
        first, second = hub.subscribe(), hub.subscribe()
        hub.dispatch({"event": "product.deleted", "data": {"id": 1}})
        return first.get_nowait(), second.get_nowait()

    assert asyncio.run(run()) == ({"event": "product.deleted", "data": {"id": 1}},) * 2


def test_hub_queue_is_bounded_and_drops_oldest():
    async def run():
        hub = EventHub(queue_size=2)
        queue = hub.subscribe()
        for i in range(5):
            hub.dispatch({"event": "product.deleted", "data": {"id": i}})
        return [queue.get_nowait()["data"]["id"] for _ in range(queue.qsize())]

    assert asyncio.run(run()) == [3, 4]


def test_many_subscribers_need_no_pool_connection():
    ## db.POOL is not initialised here; subscribing must not touch it
    async def run():
        hub = EventHub(queue_size=5)
        streams = [subscribe_events(5, hub) for _ in range(25)]
        pending = asyncio.gather(*(s.__anext__() for s in streams))
        while hub.subscriber_count < len(streams):
            await asyncio.sleep(0)
        hub.dispatch({"event": "product.deleted", "data": {"id": 9}})
        received = await pending
        count = hub.subscriber_count
        for s in streams:
            await s.aclose()
        return received, count, hub.subscriber_count

    received, during, after = asyncio.run(run())
    assert received == [("product.deleted", {"id": 9})] * 25
    assert during == 25
    assert after == 0


def test_subscribe_events_keepalive():
    async def run():
        hub = EventHub()
        stream = subscribe_events(0.01, hub)
        first = await stream.__anext__()
        await stream.aclose()
        return first

    assert asyncio.run(run()) == (None, None)


def test_hub_start_listens_on_dedicated_connection(monkeypatch):
    conn = object()
    opened = AsyncStub(conn)
    closed = AsyncStub()
    monkeypatch.setattr(events_service, "open_listener_connection", opened)
    monkeypatch.setattr(events_service, "close_listener_connection", closed)

    async def run():
        hub = EventHub()
        await hub.start()
        queue = hub.subscribe()
        callback = opened.calls[0][0][0]
        callback(conn, 1, "bazaar_products", json.dumps({"event": "product.deleted", "data": {"id": 3}}))
        callback(conn, 1, "bazaar_products", "not json")
        running = hub.running
        await hub.stop()
        return running, queue.qsize(), queue.get_nowait(), hub.running

    running, size, message, after = asyncio.run(run())
    assert running is True
    assert size == 1
    assert message["data"] == {"id": 3}
    assert after is False
    assert closed.calls[0][0][0] is conn


def test_events_route_unavailable_without_listener(auth_client):
    assert auth_client.get("/api/events").status_code == 503
