from fastapi import APIRouter, Depends, HTTPException, Query, status

from services.notifications_service import (
    list_notifications_service,
    mark_all_notifications_read_service,
    mark_notification_read_service,
)
from utils.schemas_ut import NotificationListOut
from utils.security_ut import get_current_user

router = APIRouter(prefix="/notifications")


@router.get("", response_model=NotificationListOut)
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    user=Depends(get_current_user),
):
    return await list_notifications_service(user, unread_only=unread_only, limit=limit)


@router.post("/{notification_id}/read", status_code=204)
async def mark_read(notification_id: int, user=Depends(get_current_user)):
    try:
        await mark_notification_read_service(user, notification_id)
        return
    except LookupError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


@router.post("/read-all")
async def mark_all_read(user=Depends(get_current_user)):
    return await mark_all_notifications_read_service(user)
