import httpx

from config import get_config
from db.users_db import upsert_user
from services.auth_service import open_session_for_user
from utils.logging_ut import get_logger

logger = get_logger("oauth.google")

GOOGLE_SCOPES = "openid email profile"


def build_google_auth_url(state: str) -> str:
    cfg = get_config()
    params = httpx.QueryParams(
        {
            "client_id": cfg["OAUTH_GOOGLE_CLIENT_ID"],
            "redirect_uri": cfg["OAUTH_GOOGLE_REDIRECT_URI"],
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
            "state": state,
            "prompt": "select_account",
        }
    )
    return f"{cfg['OAUTH_GOOGLE_AUTH_URL']}?{params}"


async def fetch_google_profile(code: str) -> dict:
    """Trade the authorization code for an access token and return Google's userinfo."""
    cfg = get_config()
    async with httpx.AsyncClient(timeout=15, headers={"Accept": "application/json"}) as client:
        r = await client.post(
            cfg["OAUTH_GOOGLE_TOKEN_URL"],
            data={
                "code": code,
                "client_id": cfg["OAUTH_GOOGLE_CLIENT_ID"],
                "client_secret": cfg["OAUTH_GOOGLE_CLIENT_SECRET"],
                "redirect_uri": cfg["OAUTH_GOOGLE_REDIRECT_URI"],
                "grant_type": "authorization_code",
            },
        )
        r.raise_for_status()
        access_token = r.json().get("access_token")
        if not access_token:
            raise ValueError("No access_token from provider")

        r = await client.get(
            cfg["OAUTH_GOOGLE_USERINFO_URL"], headers={"Authorization": f"Bearer {access_token}"}
        )
        r.raise_for_status()
        return r.json()


async def complete_google_login(userinfo: dict, user_agent: str | None, ip: str | None) -> dict:
    """
    Upsert the marketplace user from Google's profile and open a session,
    same token bundle as email login.
    """
    email = (userinfo.get("email") or "").strip().lower()
    if not email or userinfo.get("email_verified") is False:
        raise ValueError("Google account has no verified email")
    name = userinfo.get("name") or email.split("@", 1)[0]
    avatar = userinfo.get("picture") or None

    user = await upsert_user(email, name, avatar)
    logger.info("User %s signed in with Google", email)
    return await open_session_for_user(user, user_agent, ip)
