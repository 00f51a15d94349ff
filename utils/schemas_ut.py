from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from utils.catalog_ut import MAX_PRICE


class LoginRequest(BaseModel):
    email: str
    name: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str


class MeResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    avatar_url: str | None = None
    currency: str = "USD"


class LogoutRequest(BaseModel):
    all: bool | None = False


class CurrencyOut(BaseModel):
    code: str
    symbol: str
    rate: float
    label: str


class CurrencyUpdate(BaseModel):
    code: str


class ReviewOut(BaseModel):
    id: int
    user_name: str
    rating: int
    comment: str | None = None
    created_at: datetime


class ProductCreate(BaseModel):
    title: str
    description: str = ""
    price: float = Field(ge=0, le=MAX_PRICE, allow_inf_nan=False)
    currency: str | None = "USD"
    category: str
    image: str = Field(description="Data URL, bare base64 or http(s) URL")
    location: str
    phone_number: str


class ProductOut(BaseModel):
    id: int
    title: str
    description: str
    price: float
    display_price: int
    currency: str
    currency_symbol: str
    category: str
    image_url: str
    location: str
    seller_name: str
    seller_email: str | None = None
    phone_number: str
    rating: float = 0
    reviews_count: int = 0
    created_at: datetime
    wishlisted: bool | None = None


class ProductDetailOut(ProductOut):
    reviews: list[ReviewOut] = []


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class ContactOut(BaseModel):
    product_id: int
    whatsapp_url: str


class NegotiationRequest(BaseModel):
    offer: float = Field(gt=0, le=MAX_PRICE, allow_inf_nan=False)
    currency: str | None = "USD"


class NegotiationOut(BaseModel):
    status: Literal["accepted", "rejected", "counter"]
    message: str
    offer_usd: float
    price_usd: float


class WishlistOut(BaseModel):
    product_id: int
    wishlisted: bool


class ChatMessageOut(BaseModel):
    id: int
    sender: str
    sender_role: Literal["buyer", "seller"]
    text: str
    status: Literal["sending", "sent", "read"]
    created_at: datetime


class ChatOut(BaseModel):
    id: int
    product_id: int | None = None
    product_title: str
    product_image: str
    seller_name: str
    last_message: str
    unread: bool
    updated_at: datetime


class ChatDetailOut(ChatOut):
    messages: list[ChatMessageOut] = []


class ChatListOut(BaseModel):
    items: list[ChatOut]
    unread: int


class ChatMessageCreate(BaseModel):
    text: str


class NotificationOut(BaseModel):
    id: int
    seller_email: str
    product_title: str
    type: str
    message: str
    read: bool
    created_at: datetime


class NotificationListOut(BaseModel):
    items: list[NotificationOut]
    unread: int


class ImageRequest(BaseModel):
    image: str


class SafetyOut(BaseModel):
    is_safe: bool
    reason: str = ""


class ListingSuggestion(BaseModel):
    title: str
    category: str
    description: str


class ListingImageAnalysisOut(SafetyOut):
    suggestion: ListingSuggestion | None = None


class DescribeRequest(BaseModel):
    title: str = ""
    category: str = "Others"


class DescribeOut(BaseModel):
    description: str


class SellerStatsOut(BaseModel):
    active_ads: int
    reviews_count: int
    rating: float
    joined: str | None = None
    verified: bool


class SellerProfileOut(BaseModel):
    seller_name: str
    stats: SellerStatsOut
    products: list[ProductOut]


class SummaryUser(BaseModel):
    email: str
    name: str | None = None


class MySummaryOut(BaseModel):
    user: SummaryUser
    listings: list[ProductOut]
    saved: list[ProductOut]
