import httpx
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from config import get_config
from routes.auth_routes import set_refresh_cookie
from services.oauth_google_service import (
    build_google_auth_url,
    complete_google_login,
    fetch_google_profile,
)
from utils.logging_ut import get_logger
from utils.state_ut import STATE_MAX_AGE_SECONDS, create_state, verify_state

router = APIRouter(prefix="/oauth")

logger = get_logger("oauth.google")

STATE_COOKIE = "oauth_state"


@router.get("/google/start")
async def oauth_google_start():
    cfg = get_config()
    if not cfg["OAUTH_GOOGLE_CLIENT_ID"]:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Google sign-in is not configured")
    state = create_state()
    resp = RedirectResponse(url=build_google_auth_url(state), status_code=302)
    resp.set_cookie(
        key=STATE_COOKIE,
        value=state,
        httponly=True,
        secure=cfg["COOKIE_SECURE"],
        samesite=cfg["COOKIE_SAMESITE"],
        domain=cfg["COOKIE_DOMAIN"],
        path="/",
        max_age=STATE_MAX_AGE_SECONDS,
    )
    return resp


@router.get("/google/callback")
async def oauth_google_callback(request: Request, code: str = "", state: str = ""):
    ## State must round-trip through both the cookie and the provider
    cookie_state = request.cookies.get(STATE_COOKIE, "")
    if not code or not state or cookie_state != state or not verify_state(state):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid state")

    try:
        profile = await fetch_google_profile(code)
        out = await complete_google_login(
            profile,
            request.headers.get("user-agent", ""),
            request.client.host if request.client else None,
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Google sign-in failed: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"OAuth failed: {e}")

    resp = RedirectResponse(url=get_config()["OAUTH_SUCCESS_REDIRECT"], status_code=303)
    set_refresh_cookie(resp, out)
    resp.delete_cookie(key=STATE_COOKIE, path="/")
    return resp
