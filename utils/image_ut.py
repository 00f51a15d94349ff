import base64
import binascii
import re

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[\w=.-]+)*;base64,(?P<data>.*)$", re.S)

DEFAULT_MIME_TYPE = "image/jpeg"


def is_remote_image(value: str | None) -> bool:
    v = (value or "").strip().lower()
    return v.startswith("http://") or v.startswith("https://")


def parse_inline_image(value: str, max_bytes: int) -> tuple[str, str]:
    """
    Accepts a data URL or bare base64 payload.
    Returns (mime_type, base64_data) after checking it decodes and fits max_bytes.
    """
    raw = (value or "").strip()
    if not raw:
        raise ValueError("Image is required")

    mime = DEFAULT_MIME_TYPE
    m = _DATA_URL_RE.match(raw)
    if m:
        mime = m.group("mime") or DEFAULT_MIME_TYPE
        raw = m.group("data")

    if not mime.startswith("image/"):
        raise ValueError("Only image uploads are accepted")

    data = "".join(raw.split())
    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("Image is not valid base64")
    if not decoded:
        raise ValueError("Image is required")
    if len(decoded) > max_bytes:
        raise ValueError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit.")
    return mime, data


def to_data_url(mime: str, data: str) -> str:
    return f"data:{mime};base64,{data}"
