from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from services.auth_service import (
    email_login_service,
    logout_all_service,
    logout_current_service,
    refresh_token_service,
)
from utils.schemas_ut import LoginRequest, LogoutRequest, MeResponse, TokenResponse
from utils.security_ut import (
    get_current_user,
    get_refresh_cookie_name,
    get_user_from_token,
)

router = APIRouter()


def set_refresh_cookie(response: Response, tokens: dict):
    response.set_cookie(
        key=get_refresh_cookie_name(),
        value=tokens["refresh_token"],
        httponly=True,
        secure=tokens["cookie_secure"],
        samesite=tokens["cookie_samesite"],
        domain=tokens["cookie_domain"],
        path="/",
        max_age=tokens["refresh_max_age"],
    )


def _me(user):
    return {
        "id": user["id"],
        "email": user["email"],
        "name": user["name"],
        "avatar_url": user.get("avatar_url"),
        "currency": user.get("currency") or "USD",
    }


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, request: Request, response: Response):
    user_agent = request.headers.get("user-agent", "")
    client_ip = request.client.host if request.client else None
    try:
        tokens = await email_login_service(payload.email, payload.name, user_agent, client_ip)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    set_refresh_cookie(response, tokens)
    return {"access_token": tokens["access_token"], "token_type": "bearer"}


@router.post("/refresh", response_model=TokenResponse)
async def refresh(request: Request, response: Response):
    refresh_token = request.cookies.get(get_refresh_cookie_name())
    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token"
        )
    try:
        result = await refresh_token_service(refresh_token)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    set_refresh_cookie(response, result)
    return {"access_token": result["access_token"], "token_type": "bearer"}


## Current-session logout uses the refresh cookie only.
## "Logout all" requires Bearer to identify the user.
@router.post("/logout", status_code=204)
async def logout(
    request: Request,
    payload: LogoutRequest | None = None,
    authorization: HTTPAuthorizationCredentials | None = Depends(HTTPBearer(auto_error=False)),
):
    cookie_name = get_refresh_cookie_name()
    if payload and payload.all:
        if authorization is None or not authorization.credentials:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        user = await get_user_from_token(authorization.credentials)
        await logout_all_service(user["id"])
    else:
        refresh_token = request.cookies.get(cookie_name)
        if refresh_token:
            try:
                await logout_current_service(refresh_token)
            except ValueError:
                ## Malformed cookie: nothing to revoke, still clear it
                pass
    resp = Response(status_code=204)
    resp.delete_cookie(key=cookie_name, path="/")
    return resp


@router.get("/me", response_model=MeResponse)
async def me(user=Depends(get_current_user)):
    return _me(user)
