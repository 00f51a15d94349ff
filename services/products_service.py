from config import get_config
from db.products_db import (
    create_product_db,
    delete_product_db,
    get_product_db,
    list_products_db,
    list_reviews_db,
)
from services.ai_service import analyze_image_safety, negotiate_price
from services.events_service import publish_product_created, publish_product_deleted
from utils.catalog_ut import (
    CATEGORIES,
    MAX_PRICE,
    build_whatsapp_url,
    get_currency,
    to_base_price,
    to_display_price,
)
from utils.image_ut import is_remote_image, parse_inline_image, to_data_url
from utils.logging_ut import get_logger

logger = get_logger("products")

MIN_DESCRIPTION_LENGTH = 20


def resolve_currency(code=None, user=None):
    """Explicit code wins, then the user's stored preference, then USD."""
    if code:
        return get_currency(code)
    if user and user.get("currency"):
        try:
            return get_currency(user["currency"])
        except ValueError:
            pass
    return get_currency(None)


def present_product(product, currency):
    out = dict(product)
    out["display_price"] = to_display_price(product["price"], currency)
    out["currency"] = currency["code"]
    out["currency_symbol"] = currency["symbol"]
    return out


def _ensure_owner(user, product):
    if not product.get("seller_email") or product["seller_email"] != user["email"]:
        raise PermissionError("Forbidden")


async def _moderated_image(image):
    """Returns the image reference to store. Inline uploads must pass moderation."""
    if is_remote_image(image):
        return image.strip()
    cfg = get_config()
    mime, data = parse_inline_image(image, cfg["MAX_IMAGE_BYTES"])
    verdict = await analyze_image_safety(mime, data)
    if not verdict["is_safe"]:
        raise ValueError(f"Action Required: {verdict['reason'] or 'Image violates safety policy.'}")
    return to_data_url(mime, data)


async def create_product_service(
    user,
    title,
    description,
    price,
    category,
    image,
    location,
    phone_number,
    currency=None,
):
    title = (title or "").strip()
    description = (description or "").strip()
    location = (location or "").strip()
    phone_number = (phone_number or "").strip()
    if not title or price is None:
        raise ValueError("Title and price are required")
    if float(price) < 0:
        raise ValueError("Price must not be negative")
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category}")
    if len(description) < MIN_DESCRIPTION_LENGTH:
        raise ValueError("Please provide a meaningful description.")
    if not location or not phone_number:
        raise ValueError("Location and phone number are required")
    if not image:
        raise ValueError("A verified safe image is required.")

    price_usd = to_base_price(price, get_currency(currency))
    if price_usd > MAX_PRICE:
        raise ValueError("Price is too large")
    image_url = await _moderated_image(image)

    product = await create_product_db(
        title,
        description,
        price_usd,
        category,
        image_url,
        location,
        user.get("name") or user["email"],
        user["email"],
        phone_number,
    )
    logger.info("Listing %s created by %s", product["id"], user["email"])
    await publish_product_created(product)
    return product


async def list_products_service(
    query=None,
    category=None,
    favorites_only=False,
    user=None,
    limit=50,
    offset=0,
):
    limit = min(max(int(limit), 1), 100)
    offset = max(int(offset), 0)
    if favorites_only and not user:
        raise PermissionError("Sign in to view favorites")
    if category and category != "All" and category not in CATEGORIES:
        raise ValueError(f"Unknown category: {category}")
    return await list_products_db(
        query=query,
        category=category,
        wishlist_email=user["email"] if favorites_only else None,
        limit=limit,
        offset=offset,
    )


async def get_product_service(product_id, with_reviews=False):
    product = await get_product_db(product_id)
    if not product:
        raise LookupError("Not found")
    if with_reviews:
        product["reviews"] = await list_reviews_db(product_id)
    return product


async def delete_product_service(user, product_id):
    existing = await get_product_db(product_id)
    if not existing:
        return
    _ensure_owner(user, existing)
    await delete_product_db(product_id)
    logger.info("Listing %s deleted by %s", product_id, user["email"])
    await publish_product_deleted(product_id)


async def get_contact_link_service(product_id):
    product = await get_product_service(product_id)
    cfg = get_config()
    url = build_whatsapp_url(product["phone_number"], product["title"], cfg["DEFAULT_COUNTRY_CODE"])
    return {"product_id": product_id, "whatsapp_url": url}


async def negotiate_service(product_id, offer, currency_code=None):
    if offer is None or float(offer) <= 0:
        raise ValueError("Offer must be a positive amount")
    product = await get_product_service(product_id)
    offer_usd = to_base_price(offer, get_currency(currency_code))
    result = await negotiate_price(product["title"], product["price"], offer_usd)
    return {**result, "offer_usd": offer_usd, "price_usd": product["price"]}
