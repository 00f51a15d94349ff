from datetime import datetime, timedelta, timezone
from ipaddress import ip_address

from email_validator import EmailNotValidError, validate_email

from config import get_config
from db.sessions_db import (
    create_session_placeholder,
    set_session_token_hash,
    get_session_by_id,
    rotate_session,
    revoke_session,
    revoke_all_sessions_for_user,
)
from db.users_db import upsert_user
from utils.logging_ut import get_logger
from utils.security_ut import (
    create_access_token,
    generate_refresh_token_for_session,
    hash_refresh_token,
    parse_refresh_token,
    verify_refresh_token_hash,
    get_security_config,
)

logger = get_logger("auth")


def _normalize_ip(ip: str | None) -> str | None:
    if not ip:
        return None
    try:
        return str(ip_address(ip))
    except ValueError:
        return None


def normalize_login(email, name):
    name = (name or "").strip()
    if not name:
        raise ValueError("Please enter a user name")
    try:
        email_lc = validate_email((email or "").strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        raise ValueError("Please enter a valid email address")
    return email_lc, name


def _token_bundle(access_token, refresh_token):
    sec = get_security_config()
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "refresh_max_age": int(sec["REFRESH_TOKEN_EXPIRES_DAYS"] * 24 * 60 * 60),
        "cookie_secure": sec["COOKIE_SECURE"],
        "cookie_samesite": sec["COOKIE_SAMESITE"],
        "cookie_domain": sec["COOKIE_DOMAIN"],
    }


async def open_session_for_user(user, user_agent, ip):
    sec = get_security_config()
    now = datetime.now(timezone.utc)
    refresh_expires_at = now + timedelta(days=sec["REFRESH_TOKEN_EXPIRES_DAYS"])

    placeholder = await create_session_placeholder(
        user["id"], user_agent or "", _normalize_ip(ip), refresh_expires_at
    )
    session_id = placeholder["id"]
    refresh_token = generate_refresh_token_for_session(session_id)
    await set_session_token_hash(session_id, hash_refresh_token(refresh_token))

    return _token_bundle(create_access_token(user["id"]), refresh_token)


async def email_login_service(email, name, user_agent, ip):
    """Passwordless sign-in by email and display name."""
    if not get_config()["EMAIL_LOGIN_ENABLED"]:
        raise PermissionError("Email login is disabled")
    email_lc, name = normalize_login(email, name)
    user = await upsert_user(email_lc, name)
    logger.info("User %s signed in", email_lc)
    return await open_session_for_user(user, user_agent, ip)


async def _load_live_session(refresh_token):
    session_id, _ = parse_refresh_token(refresh_token)
    session = await get_session_by_id(session_id)
    if not session:
        raise ValueError("Invalid session")
    if session.get("revoked_at"):
        raise ValueError("Session revoked")
    if session["expires_at"] <= datetime.now(timezone.utc):
        raise ValueError("Session expired")
    if not verify_refresh_token_hash(refresh_token, session.get("refresh_token_hash") or ""):
        raise ValueError("Invalid refresh token")
    return session


async def refresh_token_service(refresh_token):
    sec = get_security_config()
    session = await _load_live_session(refresh_token)
    session_id = session["id"]

    new_refresh_token = generate_refresh_token_for_session(session_id)
    new_hash = hash_refresh_token(new_refresh_token)
    new_expires_at = datetime.now(timezone.utc) + timedelta(days=sec["REFRESH_TOKEN_EXPIRES_DAYS"])
    await rotate_session(session_id, new_hash, new_expires_at)

    return _token_bundle(create_access_token(session["user_id"]), new_refresh_token)


async def logout_current_service(refresh_token):
    session_id, _ = parse_refresh_token(refresh_token)
    await revoke_session(session_id)


async def logout_all_service(user_id):
    await revoke_all_sessions_for_user(user_id)
