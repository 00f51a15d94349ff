from decimal import Decimal

from db import get_pool
from utils.catalog_ut import build_product_filter, compute_rating

_PRODUCT_COLUMNS = """
    p.id, p.title, p.description, p.price, p.category, p.image_url, p.location,
    p.seller_name, p.seller_email, p.phone_number, p.rating, p.reviews_count, p.created_at
"""


def _row_to_product_dict(row):
    d = dict(row)
    for key in ("price", "rating"):
        val = d.get(key)
        if val is not None:
            d[key] = float(val)
    return d


async def create_product_db(
    title,
    description,
    price,
    category,
    image_url,
    location,
    seller_name,
    seller_email,
    phone_number,
):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO products AS p (title, description, price, category, image_url, location,
                                       seller_name, seller_email, phone_number)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING {_PRODUCT_COLUMNS}
            """,
            title,
            description,
            Decimal(str(price)),
            category,
            image_url,
            location,
            seller_name,
            seller_email,
            phone_number,
        )
        return _row_to_product_dict(row)


async def list_products_db(
    query=None,
    category=None,
    wishlist_email=None,
    seller_email=None,
    seller_name=None,
    limit=50,
    offset=0,
):
    where, args = build_product_filter(
        query=query,
        category=category,
        wishlist_email=wishlist_email,
        seller_email=seller_email,
        seller_name=seller_name,
    )
    n = len(args)
    sql = f"""
        SELECT {_PRODUCT_COLUMNS}
        FROM products p
        {where}
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT ${n + 1} OFFSET ${n + 2}
    """
    pool = get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql, *args, limit, offset)
        return [_row_to_product_dict(r) for r in rows]


async def get_product_db(product_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            f"SELECT {_PRODUCT_COLUMNS} FROM products p WHERE p.id=$1",
            product_id,
        )
        return _row_to_product_dict(row) if row else None


async def delete_product_db(product_id):
    pool = get_pool()
    async with pool.acquire() as conn:
        await conn.execute("DELETE FROM products WHERE id=$1", product_id)


async def list_reviews_db(product_id, limit=100):
    pool = get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT id, product_id, user_name, seller_name, rating, comment, created_at
            FROM reviews
            WHERE product_id=$1
            ORDER BY created_at DESC, id DESC
            LIMIT $2
            """,
            product_id,
            limit,
        )
        return [dict(r) for r in rows]


async def add_review_db(product_id, user_name, rating, comment):
    """
    Insert a review and recompute the product's aggregate rating in one
    transaction. Returns the updated product, or None if it does not exist.
    """
    pool = get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            product = await conn.fetchrow(
                "SELECT id, seller_name FROM products WHERE id=$1 FOR UPDATE",
                product_id,
            )
            if product is None:
                return None
            await conn.execute(
                """
                INSERT INTO reviews (product_id, user_name, seller_name, rating, comment)
                VALUES ($1, $2, $3, $4, $5)
                """,
                product_id,
                user_name,
                product["seller_name"],
                rating,
                comment,
            )
            ratings = await conn.fetch("SELECT rating FROM reviews WHERE product_id=$1", product_id)
            avg, count = compute_rating(r["rating"] for r in ratings)
            row = await conn.fetchrow(
                f"""
                UPDATE products AS p SET rating=$2, reviews_count=$3
                WHERE p.id=$1
                RETURNING {_PRODUCT_COLUMNS}
                """,
                product_id,
                Decimal(str(avg)),
                count,
            )
            return _row_to_product_dict(row)


async def get_seller_stats_db(seller_name):
    pool = get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(
            """
            SELECT COUNT(*) AS active_ads,
                   COALESCE(SUM(reviews_count), 0) AS reviews_count,
                   AVG(rating) FILTER (WHERE reviews_count > 0) AS rating,
                   MIN(created_at) AS joined_at
            FROM products
            WHERE seller_name=$1
            """,
            seller_name,
        )
        return dict(row)
