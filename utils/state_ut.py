import base64
import hmac
import os
import struct
import time
from hashlib import sha256

from config import get_config

## Matches the oauth_state cookie lifetime
STATE_MAX_AGE_SECONDS = 300


def _b64u(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64u_decode(s: str) -> bytes:
    return base64.urlsafe_b64decode(s + "=" * (-len(s) % 4))


def _sign(value: bytes) -> str:
    key = get_config()["STATE_SECRET"].encode("utf-8")
    return _b64u(hmac.new(key, value, sha256).digest())


def create_state(now: float | None = None) -> str:
    """OAuth state: issue time plus random bytes, HMAC-signed."""
    issued = int(time.time() if now is None else now)
    raw = struct.pack(">Q", issued) + os.urandom(16)
    return f"{_b64u(raw)}.{_sign(raw)}"


def verify_state(state: str, max_age: int = STATE_MAX_AGE_SECONDS, now: float | None = None) -> bool:
    payload, _, sig = (state or "").partition(".")
    if not payload or not sig:
        return False
    try:
        raw = _b64u_decode(payload)
    except ValueError:
        return False
    if len(raw) != 24 or not hmac.compare_digest(sig, _sign(raw)):
        return False
    (issued,) = struct.unpack(">Q", raw[:8])
    age = int(time.time() if now is None else now) - issued
    return 0 <= age <= max_age
