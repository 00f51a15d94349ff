from db.notifications_db import (
    count_unread_notifications_db,
    create_notification_db,
    list_notifications_db,
    mark_all_notifications_read_db,
    mark_notification_read_db,
)
from services.events_service import publish_notification_created
from utils.logging_ut import get_logger

logger = get_logger("notifications")

NOTIFICATION_TYPES = ("message", "review", "wishlist")


async def notify_seller(product, type_, message, actor_email=None):
    """
    Create a notification for the product's seller. Skipped for listings
    without a registered seller and for sellers acting on their own listing.
    """
    if type_ not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type_}")
    seller_email = product.get("seller_email")
    if not seller_email or seller_email == actor_email:
        return None
    notification = await create_notification_db(seller_email, product.get("title") or "", type_, message)
    logger.debug("Notified %s (%s) about product %s", seller_email, type_, product.get("id"))
    await publish_notification_created(notification)
    return notification


async def list_notifications_service(user, unread_only=False, limit=50):
    limit = min(max(int(limit), 1), 100)
    items = await list_notifications_db(user["email"], unread_only=unread_only, limit=limit)
    unread = await count_unread_notifications_db(user["email"])
    return {"items": items, "unread": unread}


async def mark_notification_read_service(user, notification_id):
    found = await mark_notification_read_db(user["email"], notification_id)
    if not found:
        raise LookupError("Not found")


async def mark_all_notifications_read_service(user):
    updated = await mark_all_notifications_read_db(user["email"])
    return {"updated": updated}
