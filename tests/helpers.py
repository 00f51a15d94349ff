from datetime import datetime, timezone


class AsyncStub:
    """Awaitable stand-in for a db/service coroutine that records its calls."""

    def __init__(self, result=None, side_effect=None):
        self.result = result
        self.side_effect = side_effect
        self.calls = []

    async def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.side_effect is not None:
            return self.side_effect(*args, **kwargs)
        return self.result

    @property
    def called(self):
        return bool(self.calls)


def make_product(**overrides):
    product = {
        "id": 1,
        "title": "iPhone 15 Pro Max 512GB",
        "description": "iPhone 15 Pro Max, Black Titanium, unlocked for all global networks.",
        "price": 1200.0,
        "category": "Phones",
        "image_url": "https://images.example.com/iphone.jpg",
        "location": "London, UK",
        "seller_name": "Oliver Williams",
        "seller_email": "oliver@example.com",
        "phone_number": "+442071234567",
        "rating": 4.5,
        "reviews_count": 2,
        "created_at": datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc),
    }
    product.update(overrides)
    return product
