import itertools
from urllib.parse import parse_qs, urlparse

import pytest

from utils.catalog_ut import (
    CURRENCIES,
    build_product_filter,
    build_whatsapp_url,
    compute_rating,
    get_currency,
    is_verified_seller,
    matches_filter,
    normalize_category,
    to_base_price,
    to_display_price,
)

PRODUCTS = [
    {"id": 1, "title": "Tesla Model S", "description": "Electric car", "category": "Cars", "location": "New York, USA"},
    {"id": 2, "title": "iPhone 15", "description": "Unlocked phone", "category": "Phones", "location": "London, UK"},
    {"id": 3, "title": "Leather Jacket", "description": "Vintage biker", "category": "Clothing", "location": "Berlin"},
    {"id": 4, "title": "Phone case", "description": "Fits iPhone", "category": "Others", "location": "London, UK"},
]


def test_get_currency_is_case_insensitive_and_defaults_to_usd():
    assert get_currency("sar")["rate"] == 3.75
    assert get_currency(None)["code"] == "USD"
    with pytest.raises(ValueError):
        get_currency("JPY")


def test_display_price_converts_and_rounds_half_up():
    assert to_display_price(100, CURRENCIES["EGP"]) == 4850
    assert to_display_price(0.5, CURRENCIES["USD"]) == 1
    assert to_display_price(1200, CURRENCIES["EUR"]) == 1104


def test_base_price_normalizes_to_usd():
    assert to_base_price(375, CURRENCIES["SAR"]) == 100.0
    assert to_base_price(10, CURRENCIES["USD"]) == 10.0
    assert to_base_price(100, CURRENCIES["AED"]) == 27.25


@pytest.mark.parametrize(
    "ratings, expected",
    [
        ([], (0.0, 0)),
        ([5], (5.0, 1)),
        ([5, 5, 4], (4.7, 3)),
        ([4, 4, 5, 4], (4.3, 4)),  # 4.25 rounds half-up
        ([1, 2], (1.5, 2)),
    ],
)
def test_compute_rating_is_mean_rounded_to_one_decimal(ratings, expected):
    assert compute_rating(ratings) == expected


def test_verified_seller_needs_both_thresholds():
    assert is_verified_seller(4.5, 50)
    assert not is_verified_seller(4.4, 500)
    assert not is_verified_seller(5.0, 49)


def test_normalize_category_matches_allowed_or_falls_back():
    assert normalize_category("real estate") == "Real Estate"
    assert normalize_category(" Phones ") == "Phones"
    assert normalize_category("Boats") == "Others"
    assert normalize_category(None) == "Others"


def test_build_product_filter_empty_when_nothing_filters():
    assert build_product_filter() == ("", [])
    assert build_product_filter(query="   ", category="All") == ("", [])


def test_build_product_filter_conjunction_and_placeholders():
    sql, args = build_product_filter(query=" IPhone ", category="Phones", wishlist_email="a@example.com")
    assert sql.startswith("WHERE ")
    assert sql.count(" AND ") == 2
    assert "p.category = $1" in sql
    assert "LIKE $2" in sql
    assert "w.user_email = $3" in sql
    assert args == ["Phones", "%iphone%", "a@example.com"]


def test_build_product_filter_escapes_like_wildcards():
    _, args = build_product_filter(query="100%_off")
    assert args == ["%100\\%\\_off%"]


def test_build_product_filter_start_index():
    sql, args = build_product_filter(seller_name="Vintage Hub", start_index=3)
    assert sql == "WHERE p.seller_name = $3"
    assert args == ["Vintage Hub"]


def test_matches_filter_search_covers_title_description_category_location():
    assert [p["id"] for p in PRODUCTS if matches_filter(p, query="london")] == [2, 4]
    assert [p["id"] for p in PRODUCTS if matches_filter(p, query="IPHONE")] == [2, 4]
    assert [p["id"] for p in PRODUCTS if matches_filter(p, query="cars")] == [1]


def test_filter_predicates_commute():
    predicates = [
        lambda items: [p for p in items if matches_filter(p, query="phone")],
        lambda items: [p for p in items if matches_filter(p, category="Phones")],
        lambda items: [p for p in items if matches_filter(p, wishlist_ids={2, 3})],
    ]
    results = set()
    for order in itertools.permutations(predicates):
        items = PRODUCTS
        for predicate in order:
            items = predicate(items)
        results.add(tuple(p["id"] for p in items))
    assert results == {(2,)}

    combined = [p["id"] for p in PRODUCTS if matches_filter(p, query="phone", category="Phones", wishlist_ids={2, 3})]
    assert combined == [2]


def test_whatsapp_url_strips_non_digits():
    url = build_whatsapp_url("+1 (212) 555-0199", "Tesla Model S Plaid 2024")
    parsed = urlparse(url)
    assert parsed.netloc == "wa.me"
    assert parsed.path == "/12125550199"
    assert parse_qs(parsed.query)["text"] == ["Hi, I'm interested in: Tesla Model S Plaid 2024"]


def test_whatsapp_url_replaces_leading_zero_with_country_code():
    assert urlparse(build_whatsapp_url("0100 123 4567", "Jacket")).path == "/201001234567"
    assert urlparse(build_whatsapp_url("0501234567", "Jacket", "971")).path == "/971501234567"


def test_whatsapp_url_requires_digits():
    with pytest.raises(ValueError):
        build_whatsapp_url("n/a", "Jacket")


@pytest.mark.parametrize("amount", [float("inf"), float("-inf"), float("nan")])
def test_price_conversion_rejects_non_finite(amount):
    with pytest.raises(ValueError):
        to_base_price(amount, CURRENCIES["USD"])
    with pytest.raises(ValueError):
        to_display_price(amount, CURRENCIES["EUR"])
