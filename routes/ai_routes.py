from fastapi import APIRouter, Depends, HTTPException, status

from config import get_config
from services.ai_service import (
    analyze_image_safety,
    analyze_listing_image,
    generate_product_description,
    identify_product_from_image,
)
from utils.catalog_ut import normalize_category
from utils.image_ut import parse_inline_image
from utils.schemas_ut import (
    DescribeOut,
    DescribeRequest,
    ImageRequest,
    ListingImageAnalysisOut,
    ListingSuggestion,
    SafetyOut,
)
from utils.security_ut import get_current_user

router = APIRouter(prefix="/ai")


def _inline_image_or_400(image):
    try:
        return parse_inline_image(image, get_config()["MAX_IMAGE_BYTES"])
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/moderate-image", response_model=SafetyOut)
async def moderate_image(payload: ImageRequest, user=Depends(get_current_user)):
    mime, data = _inline_image_or_400(payload.image)
    return await analyze_image_safety(mime, data)


@router.post("/identify", response_model=ListingSuggestion | None)
async def identify(payload: ImageRequest, user=Depends(get_current_user)):
    mime, data = _inline_image_or_400(payload.image)
    return await identify_product_from_image(mime, data)


@router.post("/analyze-listing-image", response_model=ListingImageAnalysisOut)
async def analyze_listing(payload: ImageRequest, user=Depends(get_current_user)):
    mime, data = _inline_image_or_400(payload.image)
    return await analyze_listing_image(mime, data)


@router.post("/describe", response_model=DescribeOut)
async def describe(payload: DescribeRequest, user=Depends(get_current_user)):
    title = payload.title.strip()
    if not title:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please enter a product title first or upload an image.",
        )
    text = await generate_product_description(title, normalize_category(payload.category))
    return {"description": text}
