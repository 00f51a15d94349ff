import argparse
import asyncio
import sys

from db import init_database, close_database, get_pool
from db.products_db import add_review_db, create_product_db, list_products_db

SEED_PRODUCTS = [
    {
        "title": "Tesla Model S Plaid 2024",
        "description": "All-electric Tesla, amazing acceleration, Autopilot system, mint condition.",
        "price": 89000,
        "category": "Cars",
        "image_url": "https://images.unsplash.com/photo-1617788138017-80ad40651399?auto=format&fit=crop&q=80&w=800",
        "location": "New York, USA",
        "seller_name": "James Smith",
        "phone_number": "+12125550199",
        "reviews": [
            ("Michael R.", 5, "Unbelievable acceleration! Worth every penny."),
            ("Sarah K.", 5, "Car is exactly as described. Clean interior."),
            ("John D.", 4, "Great car, though delivery took a bit long."),
        ],
    },
    {
        "title": "iPhone 15 Pro Max 512GB",
        "description": "iPhone 15 Pro Max, Black Titanium, unlocked for all global networks.",
        "price": 1200,
        "category": "Phones",
        "image_url": "https://images.unsplash.com/photo-1696446701796-da61225697cc?auto=format&fit=crop&q=80&w=800",
        "location": "London, UK",
        "seller_name": "Oliver Williams",
        "phone_number": "+442071234567",
        "reviews": [
            ("Emma W.", 5, "Perfect condition. Battery health is 100%."),
            ("David L.", 4, "Fast shipping. Original box included."),
        ],
    },
    {
        "title": "Vintage Leather Biker Jacket",
        "description": (
            "Premium distressed black leather jacket. Classic asymmetric zip, heavy-duty hardware. "
            "Size Large. Perfect for autumn/winter styles."
        ),
        "price": 450,
        "category": "Clothing",
        "image_url": "https://images.unsplash.com/photo-1551028719-00167b16eac5?auto=format&fit=crop&q=80&w=800",
        "location": "Berlin, Germany",
        "seller_name": "Vintage Hub",
        "phone_number": "+4915212345678",
        "reviews": [
            ("Lukas G.", 4, "Beautiful leather. Fits true to size."),
        ],
    },
    {
        "title": "Luxury Apartment Burj Khalifa View",
        "description": "Fully furnished apartment, 3 bedrooms, panoramic view, private pool and gym.",
        "price": 1500000,
        "category": "Real Estate",
        "image_url": "https://images.unsplash.com/photo-1512453979798-5ea266f8880c?auto=format&fit=crop&q=80&w=800",
        "location": "Dubai, UAE",
        "seller_name": "Gulf Properties",
        "phone_number": "+97141234567",
        "reviews": [
            ("Ahmed M.", 5, "Spectacular view. Highly recommended for investors."),
        ],
    },
]


async def seed(force: bool) -> int:
    await init_database()
    try:
        existing = await list_products_db(limit=1, offset=0)
        if existing and not force:
            print("Catalog is not empty; pass --force to seed anyway.")
            return 0
        if force:
            await get_pool().execute("DELETE FROM products WHERE seller_email IS NULL")

        for item in SEED_PRODUCTS:
            product = await create_product_db(
                item["title"],
                item["description"],
                item["price"],
                item["category"],
                item["image_url"],
                item["location"],
                item["seller_name"],
                None,
                item["phone_number"],
            )
            for user_name, rating, comment in item["reviews"]:
                product = await add_review_db(product["id"], user_name, rating, comment)
            print(f"Seeded #{product['id']} {product['title']} (rating {product['rating']}, {product['reviews_count']} reviews)")
        return 0
    finally:
        await close_database()


def main():
    parser = argparse.ArgumentParser(description="Seed the marketplace with the reference listings")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Replace seller-less seed listings even if the catalog already has products",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(seed(force=args.force)))


if __name__ == "__main__":
    main()
