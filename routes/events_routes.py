from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse

from config import get_config
from services.events_service import HUB, event_visible_to, format_sse, subscribe_events
from utils.catalog_ut import matches_filter
from utils.security_ut import get_current_user

router = APIRouter()


def should_forward(event, data, user_email, q=None, category=None):
    if not event:
        return False
    if not event_visible_to({"event": event, "data": data}, user_email):
        return False
    if event == "product.created":
        return matches_filter(data or {}, query=q, category=category)
    return True


@router.get("/events")
async def stream_events(
    request: Request,
    q: str | None = Query(None),
    category: str | None = Query(None),
    user=Depends(get_current_user),
):
    if not HUB.running:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Live events unavailable")
    keepalive = get_config()["EVENTS_KEEPALIVE_SECONDS"]

    async def _stream():
        yield ": connected\n\n"
        async for event, data in subscribe_events(keepalive):
            if await request.is_disconnected():
                break
            if event is None:
                yield ": keep-alive\n\n"
                continue
            if should_forward(event, data, user["email"], q=q, category=category):
                yield format_sse(event, data)

    return StreamingResponse(
        _stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
