from fastapi import APIRouter, Depends, HTTPException, Query, status

from services.products_service import (
    create_product_service,
    delete_product_service,
    get_contact_link_service,
    get_product_service,
    list_products_service,
    negotiate_service,
    present_product,
    resolve_currency,
)
from services.reviews_service import add_review_service
from services.wishlist_service import list_wishlist_service
from utils.schemas_ut import (
    ContactOut,
    NegotiationOut,
    NegotiationRequest,
    ProductCreate,
    ProductDetailOut,
    ProductOut,
    ReviewCreate,
)
from utils.security_ut import get_current_user, get_optional_user

router = APIRouter()


def _currency_or_400(code, user):
    try:
        return resolve_currency(code, user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/products", response_model=list[ProductOut])
async def list_products(
    q: str | None = Query(None, description="Matches title, description, category or location"),
    category: str | None = Query(None),
    favorites: bool = Query(False),
    currency: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user=Depends(get_optional_user),
):
    cur = _currency_or_400(currency, user)
    try:
        items = await list_products_service(
            query=q,
            category=category,
            favorites_only=favorites,
            user=user,
            limit=limit,
            offset=offset,
        )
    except PermissionError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    wishlist = set(await list_wishlist_service(user)) if user else None
    out = []
    for item in items:
        p = present_product(item, cur)
        if wishlist is not None:
            p["wishlisted"] = item["id"] in wishlist
        out.append(p)
    return out


@router.get("/products/{product_id}", response_model=ProductDetailOut)
async def get_product(product_id: int, currency: str | None = Query(None), user=Depends(get_optional_user)):
    cur = _currency_or_400(currency, user)
    try:
        item = await get_product_service(product_id, with_reviews=True)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    out = present_product(item, cur)
    if user:
        out["wishlisted"] = product_id in set(await list_wishlist_service(user))
    return out


@router.post("/products", response_model=ProductOut, status_code=201)
async def create_product(payload: ProductCreate, user=Depends(get_current_user)):
    try:
        item = await create_product_service(
            user=user,
            title=payload.title,
            description=payload.description,
            price=payload.price,
            category=payload.category,
            image=payload.image,
            location=payload.location,
            phone_number=payload.phone_number,
            currency=payload.currency,
        )
        return present_product(item, resolve_currency(None, user))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: int, user=Depends(get_current_user)):
    try:
        await delete_product_service(user=user, product_id=product_id)
        return
    except PermissionError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/products/{product_id}/reviews", response_model=ProductDetailOut, status_code=201)
async def add_review(product_id: int, payload: ReviewCreate, user=Depends(get_current_user)):
    try:
        item = await add_review_service(user, product_id, payload.rating, payload.comment)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return present_product(item, resolve_currency(None, user))


@router.get("/products/{product_id}/contact", response_model=ContactOut)
async def product_contact(product_id: int):
    try:
        return await get_contact_link_service(product_id)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/products/{product_id}/negotiate", response_model=NegotiationOut)
async def negotiate(product_id: int, payload: NegotiationRequest, user=Depends(get_current_user)):
    try:
        return await negotiate_service(product_id, payload.offer, payload.currency)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
