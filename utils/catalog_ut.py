"""
Catalog constants and the pure derivations shared by services:
currency conversion, rating recompute, listing filters and contact links.
"""

from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import quote

CATEGORIES = (
    "Cars",
    "Phones",
    "Clothing",
    "Games",
    "Electronics",
    "Real Estate",
    "Furniture",
    "Others",
)

ALL_CATEGORIES = "All"
FALLBACK_CATEGORY = "Others"

BASE_CURRENCY = "USD"

## Rates are relative to USD
CURRENCIES = {
    "USD": {"code": "USD", "symbol": "$", "rate": 1.0, "label": "US Dollar"},
    "SAR": {"code": "SAR", "symbol": "SR", "rate": 3.75, "label": "Saudi Riyal"},
    "AED": {"code": "AED", "symbol": "DH", "rate": 3.67, "label": "UAE Dirham"},
    "EGP": {"code": "EGP", "symbol": "E£", "rate": 48.50, "label": "Egypt Pound"},
    "EUR": {"code": "EUR", "symbol": "€", "rate": 0.92, "label": "Euro"},
}

## Largest USD amount the products.price column (NUMERIC(14, 2)) holds
MAX_PRICE = 999_999_999_999.99

VERIFIED_MIN_RATING = 4.5
VERIFIED_MIN_REVIEWS = 50


def get_currency(code: str | None) -> dict:
    key = (code or BASE_CURRENCY).strip().upper()
    if key not in CURRENCIES:
        raise ValueError(f"Unsupported currency: {code}")
    return CURRENCIES[key]


def normalize_category(category: str | None) -> str:
    """Map free-form category text (e.g. from the AI) onto an allowed category."""
    if not category:
        return FALLBACK_CATEGORY
    for c in CATEGORIES:
        if c.lower() == category.strip().lower():
            return c
    return FALLBACK_CATEGORY


def _finite_decimal(value) -> Decimal:
    d = Decimal(str(value))
    if not d.is_finite():
        raise ValueError("Amount must be a finite number")
    return d


def to_display_price(price_usd, currency: dict) -> int:
    amount = _finite_decimal(price_usd) * Decimal(str(currency["rate"]))
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_base_price(amount, currency: dict) -> float:
    value = _finite_decimal(amount) / Decimal(str(currency["rate"]))
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def round_rating(value) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_rating(ratings) -> tuple[float, int]:
    """Returns (mean rounded half-up to one decimal, count). Empty -> (0.0, 0)."""
    values = [int(r) for r in ratings]
    if not values:
        return 0.0, 0
    return round_rating(Decimal(sum(values)) / Decimal(len(values))), len(values)


def is_verified_seller(rating: float, reviews_count: int) -> bool:
    return (rating or 0) >= VERIFIED_MIN_RATING and (reviews_count or 0) >= VERIFIED_MIN_REVIEWS


def build_product_filter(
    query: str | None = None,
    category: str | None = None,
    wishlist_email: str | None = None,
    seller_email: str | None = None,
    seller_name: str | None = None,
    start_index: int = 1,
):
    """
    Build a WHERE clause for the products table as a conjunction of
    independent predicates. Returns (sql, args); sql is "" when nothing
    filters. Placeholders are numbered from start_index.
    """
    clauses = []
    args = []

    def _arg(value):
        args.append(value)
        return "$%d" % (start_index + len(args) - 1)

    if category and category != ALL_CATEGORIES:
        clauses.append("p.category = %s" % _arg(category))

    q = (query or "").strip().lower()
    if q:
        ph = _arg("%" + _escape_like(q) + "%")
        clauses.append(
            "(LOWER(p.title) LIKE {0} OR LOWER(p.description) LIKE {0} "
            "OR LOWER(p.category) LIKE {0} OR LOWER(p.location) LIKE {0})".format(ph)
        )

    if wishlist_email:
        clauses.append(
            "EXISTS (SELECT 1 FROM wishlists w WHERE w.product_id = p.id AND w.user_email = %s)"
            % _arg(wishlist_email)
        )

    if seller_email:
        clauses.append("p.seller_email = %s" % _arg(seller_email))

    if seller_name:
        clauses.append("p.seller_name = %s" % _arg(seller_name))

    if not clauses:
        return "", args
    return "WHERE " + " AND ".join(clauses), args


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def matches_filter(product: dict, query=None, category=None, wishlist_ids=None) -> bool:
    """In-memory twin of build_product_filter, used on live event payloads."""
    if category and category != ALL_CATEGORIES and product.get("category") != category:
        return False
    q = (query or "").strip().lower()
    if q:
        haystacks = (
            product.get("title") or "",
            product.get("description") or "",
            product.get("category") or "",
            product.get("location") or "",
        )
        if not any(q in h.lower() for h in haystacks):
            return False
    if wishlist_ids is not None and product.get("id") not in wishlist_ids:
        return False
    return True


def build_whatsapp_url(phone_number: str, title: str, default_country_code: str = "20") -> str:
    digits = "".join(ch for ch in (phone_number or "") if ch.isdigit())
    if not digits:
        raise ValueError("Seller has no contact number")
    if digits.startswith("0"):
        digits = default_country_code + digits[1:]
    message = quote(f"Hi, I'm interested in: {title}", safe="")
    return f"https://wa.me/{digits}?text={message}"
