from config import get_config
from db.chats_db import (
    BUYER,
    SELLER,
    add_message_db,
    create_chat_db,
    get_chat_db,
    get_chat_for_product_db,
    list_chats_db,
    list_messages_db,
    mark_messages_read_db,
    set_chat_unread_db,
)
from db.products_db import get_product_db
from services.ai_service import get_live_chat_response
from services.notifications_service import notify_seller
from utils.logging_ut import get_logger

logger = get_logger("chats")


def seller_greeting(product_title):
    return f'Hi! Regarding "{product_title}", I\'m available to answer your questions.'


def _buyer_name(user):
    return user.get("name") or user["email"]


async def _get_own_chat(user, chat_id):
    chat = await get_chat_db(chat_id)
    if not chat:
        raise LookupError("Not found")
    if chat["buyer_email"] != user["email"]:
        raise PermissionError("Forbidden")
    return chat


async def start_chat_service(user, product_id):
    existing = await get_chat_for_product_db(user["email"], product_id)
    if existing:
        existing["messages"] = await list_messages_db(existing["id"])
        return existing

    product = await get_product_db(product_id)
    if not product:
        raise LookupError("Not found")
    if product.get("seller_email") and product["seller_email"] == user["email"]:
        raise ValueError("You cannot start a chat on your own listing")

    chat = await create_chat_db(user["email"], product, seller_greeting(product["title"]))
    chat["messages"] = await list_messages_db(chat["id"])
    logger.info("Chat %s opened by %s for product %s", chat["id"], user["email"], product_id)
    return chat


async def list_chats_service(user):
    chats = await list_chats_db(user["email"])
    return {"items": chats, "unread": sum(1 for c in chats if c["unread"])}


async def open_chat_service(user, chat_id):
    chat = await _get_own_chat(user, chat_id)
    if chat["unread"]:
        await set_chat_unread_db(chat_id, False)
        chat["unread"] = False
    chat["messages"] = await list_messages_db(chat_id)
    return chat


async def send_message_service(user, chat_id, text):
    text = (text or "").strip()
    if not text:
        raise ValueError("Message text is required")
    chat = await _get_own_chat(user, chat_id)
    buyer = _buyer_name(user)

    history = await list_messages_db(chat_id)
    await add_message_db(chat_id, buyer, BUYER, text, status="sent")

    if chat.get("seller_email"):
        await notify_seller(
            {"id": chat["product_id"], "title": chat["product_title"], "seller_email": chat["seller_email"]},
            "message",
            f"{buyer}: {text}",
            actor_email=user["email"],
        )

    if get_config()["CHAT_AUTO_REPLY"]:
        reply = await get_live_chat_response(chat["product_title"], text, history)
        await add_message_db(chat_id, chat["seller_name"], SELLER, reply, status="read", unread=True)
        await mark_messages_read_db(chat_id, BUYER)

    chat = await get_chat_db(chat_id)
    chat["messages"] = await list_messages_db(chat_id)
    return chat
