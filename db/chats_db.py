from db import get_pool

_CHAT_COLUMNS = """
    id, product_id, buyer_email, product_title, product_image, seller_name, seller_email,
    last_message, unread, created_at, updated_at
"""
_MESSAGE_COLUMNS = "id, chat_id, sender, sender_role, text, status, created_at"

## chat_messages.sender_role values
BUYER = "buyer"
SELLER = "seller"


async def get_chat_for_product_db(buyer_email, product_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"SELECT {_CHAT_COLUMNS} FROM chats WHERE buyer_email=$1 AND product_id=$2",
            buyer_email,
            product_id,
        )
        return dict(row) if row else None


async def get_chat_db(chat_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(f"SELECT {_CHAT_COLUMNS} FROM chats WHERE id=$1", chat_id)
        return dict(row) if row else None


async def create_chat_db(buyer_email, product, greeting):
    """Create a chat seeded with the seller's greeting, in one transaction."""
    pool = get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            row = await conn.fetchrow(
                f"""
                INSERT INTO chats (product_id, buyer_email, product_title, product_image,
                                   seller_name, seller_email, last_message)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                ON CONFLICT (buyer_email, product_id) DO UPDATE SET updated_at = chats.updated_at
                RETURNING {_CHAT_COLUMNS}, (xmax = 0) AS inserted
                """,
                product["id"],
                buyer_email,
                product["title"],
                product.get("image_url") or "",
                product["seller_name"],
                product.get("seller_email"),
                greeting,
            )
            chat = dict(row)
            inserted = chat.pop("inserted")
            if inserted:
                await conn.execute(
                    "INSERT INTO chat_messages (chat_id, sender, sender_role, text, status) VALUES ($1, $2, $3, $4, 'read')",
                    chat["id"],
                    product["seller_name"],
                    SELLER,
                    greeting,
                )
            return chat


async def list_chats_db(buyer_email):
    pool = get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            f"SELECT {_CHAT_COLUMNS} FROM chats WHERE buyer_email=$1 ORDER BY updated_at DESC, id DESC",
            buyer_email,
        )
        return [dict(r) for r in rows]


async def list_messages_db(chat_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            f"SELECT {_MESSAGE_COLUMNS} FROM chat_messages WHERE chat_id=$1 ORDER BY id",
            chat_id,
        )
        return [dict(r) for r in rows]


async def add_message_db(chat_id, sender, sender_role, text, status="sent", unread=None):
    """Append a message and bump the chat preview. unread=None leaves the flag unchanged."""
    pool = get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            row = await conn.fetchrow(
                f"""
                INSERT INTO chat_messages (chat_id, sender, sender_role, text, status)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {_MESSAGE_COLUMNS}
                """,
                chat_id,
                sender,
                sender_role,
                text,
                status,
            )
            await conn.execute(
                """
                UPDATE chats
                SET last_message=$2, updated_at=NOW(), unread=COALESCE($3, unread)
                WHERE id=$1
                """,
                chat_id,
                text,
                unread,
            )
            return dict(row)


async def mark_messages_read_db(chat_id, sender_role):
    pool = get_pool()
    async with pool.acquire() as conn:
        await conn.execute(
            "UPDATE chat_messages SET status='read' WHERE chat_id=$1 AND sender_role=$2 AND status<>'read'",
            chat_id,
            sender_role,
        )


async def set_chat_unread_db(chat_id, unread: bool):
    pool = get_pool()
    async with pool.acquire() as conn:
        await conn.execute("UPDATE chats SET unread=$2 WHERE id=$1", chat_id, unread)
