from db.products_db import add_review_db, list_reviews_db
from services.notifications_service import notify_seller

DEFAULT_REVIEWER = "Guest Buyer"
DEFAULT_COMMENT = "Highly rated via quick review."


async def add_review_service(user, product_id, rating, comment=None):
    rating = int(rating)
    if rating < 1 or rating > 5:
        raise ValueError("Rating must be between 1 and 5")
    reviewer = (user or {}).get("name") or DEFAULT_REVIEWER
    text = (comment or "").strip() or DEFAULT_COMMENT

    product = await add_review_db(product_id, reviewer, rating, text)
    if product is None:
        raise LookupError("Not found")

    await notify_seller(
        product,
        "review",
        f"{reviewer} rated \"{product['title']}\" {rating}/5",
        actor_email=(user or {}).get("email"),
    )
    product["reviews"] = await list_reviews_db(product_id)
    return product
