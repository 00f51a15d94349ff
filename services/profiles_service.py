from db.products_db import get_seller_stats_db, list_products_db
from db.users_db import set_user_currency
from utils.catalog_ut import get_currency, is_verified_seller, round_rating


def _seller_stats(row):
    rating = row.get("rating")
    rating = 0.0 if rating is None else round_rating(rating)
    reviews_count = int(row.get("reviews_count") or 0)
    joined_at = row.get("joined_at")
    return {
        "active_ads": int(row.get("active_ads") or 0),
        "reviews_count": reviews_count,
        "rating": rating,
        "joined": str(joined_at.year) if joined_at else None,
        "verified": is_verified_seller(rating, reviews_count),
    }


async def seller_profile_service(seller_name):
    seller_name = (seller_name or "").strip()
    if not seller_name:
        raise ValueError("Seller name is required")
    products = await list_products_db(seller_name=seller_name, limit=100, offset=0)
    if not products:
        raise LookupError("Not found")
    stats = await get_seller_stats_db(seller_name)
    return {"seller_name": seller_name, "stats": _seller_stats(stats), "products": products}


async def my_summary_service(user):
    listings = await list_products_db(seller_email=user["email"], limit=100, offset=0)
    saved = await list_products_db(wishlist_email=user["email"], limit=100, offset=0)
    return {
        "user": {"email": user["email"], "name": user.get("name")},
        "listings": listings,
        "saved": saved,
    }


async def set_currency_service(user, code):
    currency = get_currency(code)
    updated = await set_user_currency(user["id"], currency["code"])
    if not updated:
        raise LookupError("Not found")
    return currency
