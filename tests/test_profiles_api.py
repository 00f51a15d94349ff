import base64
from datetime import datetime, timezone

from helpers import AsyncStub, make_product
from routes import ai_routes
from services import profiles_service

PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16).decode()


def test_currencies_listed(client):
    r = client.get("/api/currencies")
    assert r.status_code == 200
    assert [c["code"] for c in r.json()] == ["USD", "SAR", "AED", "EGP", "EUR"]


def test_seller_profile_stats(client, monkeypatch):
    monkeypatch.setattr(profiles_service, "list_products_db", AsyncStub([make_product(seller_name="Vintage Hub")]))
    monkeypatch.setattr(
        profiles_service,
        "get_seller_stats_db",
        AsyncStub({
            "active_ads": 1,
            "reviews_count": 120,
            "rating": 4.66,
            "joined_at": datetime(2024, 3, 1, tzinfo=timezone.utc),
        }),
    )
    r = client.get("/api/sellers/Vintage Hub", params={"currency": "AED"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["stats"] == {"active_ads": 1, "reviews_count": 120, "rating": 4.7, "joined": "2024", "verified": True}
    assert body["products"][0]["currency"] == "AED"


def test_seller_profile_unknown(client, monkeypatch):
    monkeypatch.setattr(profiles_service, "list_products_db", AsyncStub([]))
    assert client.get("/api/sellers/Nobody").status_code == 404


def test_my_summary(auth_client, monkeypatch, buyer):
    list_db = AsyncStub([make_product(seller_email=buyer["email"])])
    monkeypatch.setattr(profiles_service, "list_products_db", list_db)
    r = auth_client.get("/api/me/summary")
    assert r.status_code == 200, r.text
    assert r.json()["user"]["email"] == buyer["email"]
    assert list_db.calls[0][1]["seller_email"] == buyer["email"]
    assert list_db.calls[1][1]["wishlist_email"] == buyer["email"]


def test_set_currency(auth_client, monkeypatch, buyer):
    set_db = AsyncStub(True)
    monkeypatch.setattr(profiles_service, "set_user_currency", set_db)
    r = auth_client.put("/api/me/currency", json={"code": "eur"})
    assert r.status_code == 200
    assert r.json()["code"] == "EUR"
    assert set_db.calls[0][0] == (buyer["id"], "EUR")

    assert auth_client.put("/api/me/currency", json={"code": "JPY"}).status_code == 400


def test_ai_routes_validate_image_and_title(auth_client, monkeypatch):
    monkeypatch.setattr(ai_routes, "analyze_image_safety", AsyncStub({"is_safe": True, "reason": ""}))
    assert auth_client.post("/api/ai/moderate-image", json={"image": PNG_B64}).json() == {"is_safe": True, "reason": ""}
    assert auth_client.post("/api/ai/moderate-image", json={"image": ""}).status_code == 400

    r = auth_client.post("/api/ai/describe", json={"title": "  "})
    assert r.status_code == 400
    assert r.json()["detail"] == "Please enter a product title first or upload an image."

    describe = AsyncStub("A detailed description.")
    monkeypatch.setattr(ai_routes, "generate_product_description", describe)
    r = auth_client.post("/api/ai/describe", json={"title": "Jacket", "category": "clothing"})
    assert r.json() == {"description": "A detailed description."}
    assert describe.calls[0][0] == ("Jacket", "Clothing")


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
