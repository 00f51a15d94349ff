from db import get_pool

_NOTIFICATION_COLUMNS = "id, seller_email, product_title, type, message, read, created_at"


async def create_notification_db(seller_email, product_title, type_, message):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO notifications (seller_email, product_title, type, message)
            VALUES ($1, $2, $3, $4)
            RETURNING {_NOTIFICATION_COLUMNS}
            """,
            seller_email,
            product_title,
            type_,
            message,
        )
        return dict(row)


async def list_notifications_db(seller_email, unread_only=False, limit=50):
    sql = f"SELECT {_NOTIFICATION_COLUMNS} FROM notifications WHERE seller_email=$1"
    if unread_only:
        sql += " AND read = FALSE"
    sql += " ORDER BY created_at DESC, id DESC LIMIT $2"
    pool = get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql, seller_email, limit)
        return [dict(r) for r in rows]


async def mark_notification_read_db(seller_email, notification_id):
    """Returns True when a notification owned by seller_email was found."""
    pool = get_pool()
    async with pool.acquire() as conn:
        val = await conn.fetchval(
            "UPDATE notifications SET read=TRUE WHERE id=$1 AND seller_email=$2 RETURNING id",
            notification_id,
            seller_email,
        )
        return val is not None


async def mark_all_notifications_read_db(seller_email):
    pool = get_pool()
    async with pool.acquire() as conn:
        status = await conn.execute(
            "UPDATE notifications SET read=TRUE WHERE seller_email=$1 AND read=FALSE",
            seller_email,
        )
        return int(status.split()[-1])


async def count_unread_notifications_db(seller_email):
    pool = get_pool()
    async with pool.acquire() as conn:
        val = await conn.fetchval(
            "SELECT COUNT(*) FROM notifications WHERE seller_email=$1 AND read=FALSE",
            seller_email,
        )
        return int(val or 0)
