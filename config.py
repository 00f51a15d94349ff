import os
from pathlib import Path

from dotenv import load_dotenv

_loaded = False
_cache = None


def _parse_bool(val, default=False):
    if val is None:
        return default
    return str(val).strip().lower() in ("1", "true", "yes", "on")


def _parse_list(val, default=None):
    if default is None:
        default = []
    if val is None:
        return default
    s = str(val).strip()
    if not s:
        return default
    parts = [x.strip() for x in s.split(",")]
    return [p for p in parts if p]


def _build_db_url():
    url = os.getenv("DATABASE_URL", "").strip()
    if url:
        return url
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "bazaar")
    user = os.getenv("DB_USER", "bazaar")
    pwd = os.getenv("DB_PASSWORD", "")
    return f"postgresql://{user}:{pwd}@{host}:{port}/{name}"


def reset_config_cache():
    global _cache
    _cache = None


def get_config():
    global _loaded, _cache
    if not _loaded:
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(override=False)
        _loaded = True
    if _cache is not None:
        return _cache

    ## Google OAuth
    google_auth_url = os.getenv("OAUTH_GOOGLE_AUTH_URL", "https://accounts.google.com/o/oauth2/v2/auth")
    google_token_url = os.getenv("OAUTH_GOOGLE_TOKEN_URL", "https://oauth2.googleapis.com/token")
    google_userinfo_url = os.getenv("OAUTH_GOOGLE_USERINFO_URL", "https://openidconnect.googleapis.com/v1/userinfo")

    cfg = {
        "PORT": int(os.getenv("PORT", "8010")),
        "APP_ENV": os.getenv("APP_ENV", "dev"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),

        "DATABASE_URL": _build_db_url(),
        "APPLY_SCHEMA_ON_START": _parse_bool(os.getenv("APPLY_SCHEMA_ON_START", "true"), True),
        "DB_POOL_MIN_SIZE": int(os.getenv("DB_POOL_MIN_SIZE", "1")),
        "DB_POOL_MAX_SIZE": int(os.getenv("DB_POOL_MAX_SIZE", "10")),

        "JWT_SECRET": os.getenv("JWT_SECRET", "change_me_in_prod"),
        "JWT_ALGORITHM": os.getenv("JWT_ALGORITHM", "HS256"),
        "ACCESS_TOKEN_EXPIRES_MINUTES": int(os.getenv("ACCESS_TOKEN_EXPIRES_MINUTES", "15")),
        "REFRESH_TOKEN_EXPIRES_DAYS": int(os.getenv("REFRESH_TOKEN_EXPIRES_DAYS", "30")),
        "REFRESH_COOKIE_NAME": os.getenv("REFRESH_COOKIE_NAME", "bazaar_refresh"),
        "BCRYPT_ROUNDS": int(os.getenv("BCRYPT_ROUNDS", "12")),
        "EMAIL_LOGIN_ENABLED": _parse_bool(os.getenv("EMAIL_LOGIN_ENABLED", "true"), True),

        "COOKIE_SECURE": _parse_bool(os.getenv("COOKIE_SECURE", "false")),
        "COOKIE_SAMESITE": os.getenv("COOKIE_SAMESITE", "lax"),
        "COOKIE_DOMAIN": os.getenv("COOKIE_DOMAIN", "") or None,

        "CORS_ORIGINS": _parse_list(os.getenv("CORS_ORIGINS", "*")),

        ## OAuth Google
        "OAUTH_GOOGLE_CLIENT_ID": os.getenv("OAUTH_GOOGLE_CLIENT_ID", ""),
        "OAUTH_GOOGLE_CLIENT_SECRET": os.getenv("OAUTH_GOOGLE_CLIENT_SECRET", ""),
        "OAUTH_GOOGLE_REDIRECT_URI": os.getenv(
            "OAUTH_GOOGLE_REDIRECT_URI",
            "http://localhost:8010/oauth/google/callback",
        ),
        "OAUTH_GOOGLE_AUTH_URL": google_auth_url,
        "OAUTH_GOOGLE_TOKEN_URL": google_token_url,
        "OAUTH_GOOGLE_USERINFO_URL": google_userinfo_url,
        "OAUTH_SUCCESS_REDIRECT": os.getenv("OAUTH_SUCCESS_REDIRECT", "/"),
        "STATE_SECRET": os.getenv("STATE_SECRET", "change_me_in_prod_state"),

        ## Gemini
        "GEMINI_API_KEY": os.getenv("GEMINI_API_KEY", "") or os.getenv("API_KEY", ""),
        "GEMINI_MODEL": os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
        "GEMINI_API_URL": os.getenv(
            "GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/"),
        "GEMINI_TIMEOUT_SECONDS": float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30")),

        ## Marketplace
        "CHAT_AUTO_REPLY": _parse_bool(os.getenv("CHAT_AUTO_REPLY", "true"), True),
        "MAX_IMAGE_BYTES": int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024))),
        "DEFAULT_COUNTRY_CODE": os.getenv("DEFAULT_COUNTRY_CODE", "20"),
        "EVENTS_KEEPALIVE_SECONDS": float(os.getenv("EVENTS_KEEPALIVE_SECONDS", "15")),
        "EVENTS_QUEUE_SIZE": int(os.getenv("EVENTS_QUEUE_SIZE", "100")),
    }

    cors = cfg["CORS_ORIGINS"]
    if cors == ["*"] or len(cors) == 0:
        cfg["CORS_ORIGINS"] = ["*"]

    _cache = cfg
    return cfg
