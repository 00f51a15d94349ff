from db.products_db import get_product_db
from db.wishlist_db import (
    add_to_wishlist_db,
    is_wishlisted_db,
    list_wishlist_ids_db,
    remove_from_wishlist_db,
)
from services.notifications_service import notify_seller


async def list_wishlist_service(user):
    return await list_wishlist_ids_db(user["email"])


async def add_to_wishlist_service(user, product_id):
    product = await get_product_db(product_id)
    if not product:
        raise LookupError("Not found")
    inserted = await add_to_wishlist_db(user["email"], product_id)
    if inserted:
        await notify_seller(
            product,
            "wishlist",
            f"Someone saved \"{product['title']}\" to their wishlist",
            actor_email=user["email"],
        )
    return {"product_id": product_id, "wishlisted": True}


async def remove_from_wishlist_service(user, product_id):
    await remove_from_wishlist_db(user["email"], product_id)
    return {"product_id": product_id, "wishlisted": False}


async def toggle_wishlist_service(user, product_id):
    if await is_wishlisted_db(user["email"], product_id):
        return await remove_from_wishlist_service(user, product_id)
    return await add_to_wishlist_service(user, product_id)
