from db import get_pool


async def list_wishlist_ids_db(user_email):
    pool = get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            "SELECT product_id FROM wishlists WHERE user_email=$1 ORDER BY created_at",
            user_email,
        )
        return [r["product_id"] for r in rows]


async def add_to_wishlist_db(user_email, product_id):
    """Returns True if the row was inserted, False if it was already there."""
    pool = get_pool()
    async with pool.acquire() as conn:
        status = await conn.execute(
            """
            INSERT INTO wishlists (user_email, product_id)
            VALUES ($1, $2)
            ON CONFLICT (user_email, product_id) DO NOTHING
            """,
            user_email,
            product_id,
        )
        return status.endswith(" 1")


async def remove_from_wishlist_db(user_email, product_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        status = await conn.execute(
            "DELETE FROM wishlists WHERE user_email=$1 AND product_id=$2",
            user_email,
            product_id,
        )
        return status.endswith(" 1")


async def is_wishlisted_db(user_email, product_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        val = await conn.fetchval(
            "SELECT 1 FROM wishlists WHERE user_email=$1 AND product_id=$2",
            user_email,
            product_id,
        )
        return val is not None
