from fastapi import APIRouter, Depends, HTTPException, Query, status

from services.products_service import present_product, resolve_currency
from services.profiles_service import (
    my_summary_service,
    seller_profile_service,
    set_currency_service,
)
from utils.catalog_ut import CURRENCIES
from utils.schemas_ut import CurrencyOut, CurrencyUpdate, MySummaryOut, SellerProfileOut
from utils.security_ut import get_current_user, get_optional_user

router = APIRouter()


@router.get("/currencies", response_model=list[CurrencyOut])
async def list_currencies():
    return list(CURRENCIES.values())


@router.get("/sellers/{seller_name}", response_model=SellerProfileOut)
async def seller_profile(seller_name: str, currency: str | None = Query(None), user=Depends(get_optional_user)):
    try:
        cur = resolve_currency(currency, user)
        profile = await seller_profile_service(seller_name)
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    profile["products"] = [present_product(p, cur) for p in profile["products"]]
    return profile


@router.get("/me/summary", response_model=MySummaryOut)
async def my_summary(currency: str | None = Query(None), user=Depends(get_current_user)):
    try:
        cur = resolve_currency(currency, user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    summary = await my_summary_service(user)
    summary["listings"] = [present_product(p, cur) for p in summary["listings"]]
    summary["saved"] = [present_product(p, cur) for p in summary["saved"]]
    return summary


@router.put("/me/currency", response_model=CurrencyOut)
async def set_currency(payload: CurrencyUpdate, user=Depends(get_current_user)):
    try:
        return await set_currency_service(user, payload.code)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
