from fastapi import APIRouter, Depends, HTTPException, status

from services.wishlist_service import (
    add_to_wishlist_service,
    list_wishlist_service,
    remove_from_wishlist_service,
    toggle_wishlist_service,
)
from utils.schemas_ut import WishlistOut
from utils.security_ut import get_current_user

router = APIRouter(prefix="/wishlist")


@router.get("", response_model=list[int])
async def list_wishlist(user=Depends(get_current_user)):
    return await list_wishlist_service(user)


@router.put("/{product_id}", response_model=WishlistOut)
async def add_to_wishlist(product_id: int, user=Depends(get_current_user)):
    try:
        return await add_to_wishlist_service(user, product_id)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


@router.delete("/{product_id}", response_model=WishlistOut)
async def remove_from_wishlist(product_id: int, user=Depends(get_current_user)):
    return await remove_from_wishlist_service(user, product_id)


@router.post("/{product_id}/toggle", response_model=WishlistOut)
async def toggle_wishlist(product_id: int, user=Depends(get_current_user)):
    try:
        return await toggle_wishlist_service(user, product_id)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
