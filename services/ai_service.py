"""
Gemini gateway for the marketplace.

Every public task degrades to a safe default instead of raising: an
unreachable moderation service counts as unsafe, a failed negotiation as a
polite rejection, and so on. Callers never see transport errors.
"""

import json

import httpx

from config import get_config
from utils.catalog_ut import CATEGORIES, normalize_category
from utils.logging_ut import get_logger

logger = get_logger("ai")

NEGOTIATION_STATUSES = ("accepted", "rejected", "counter")

SAFETY_FALLBACK = {"is_safe": False, "reason": "Verification service error."}
NEGOTIATION_FALLBACK = {"status": "rejected", "message": "Thanks for your offer."}
CHAT_FALLBACK = "Hello, how can I help you today?"

_SAFETY_PROMPT = """STRICT MODERATION TASK: Analyze this image for a premium global marketplace.
You MUST reject images that contain ANY of the following:
1. WEAPONS: Firearms, ammunition, explosives, tactical knives.
2. ILLEGAL SUBSTANCES: Drugs, paraphernalia.
3. VIOLENCE: Graphic injuries, blood, gore.
4. ADULT CONTENT: Nudity, suggestive imagery.
5. HATE SPEECH: Hate symbols.

Respond ONLY in JSON format:
{ "isSafe": boolean, "reason": "explanation if rejected" }"""

_IDENTIFY_PROMPT = """MARKETPLACE AUTO-FILL TASK:
Identify the product in this image.
Return a concise 'title', a 'category' from the allowed list, and a short 'description'.

ALLOWED CATEGORIES: [{categories}]

Respond ONLY in JSON format:
{{ "title": "Clear product name", "category": "Exact match from allowed categories", "description": "Short catchy description" }}"""

_SAFETY_SCHEMA = {
    "type": "OBJECT",
    "properties": {"isSafe": {"type": "BOOLEAN"}, "reason": {"type": "STRING"}},
    "required": ["isSafe", "reason"],
}

_IDENTIFY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "category": {"type": "STRING"},
        "description": {"type": "STRING"},
    },
    "required": ["title", "category", "description"],
}

_NEGOTIATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "status": {"type": "STRING", "enum": list(NEGOTIATION_STATUSES)},
        "message": {"type": "STRING"},
    },
    "required": ["status", "message"],
}


class AIServiceError(Exception):
    pass


def _image_part(mime_type: str, data: str) -> dict:
    return {"inlineData": {"mimeType": mime_type, "data": data}}


async def _generate_content(parts, response_schema=None, temperature=None) -> str:
    """POST generateContent and return the text of the first candidate."""
    cfg = get_config()
    if not cfg["GEMINI_API_KEY"]:
        raise AIServiceError("GEMINI_API_KEY is not configured")

    generation_config = {}
    if response_schema is not None:
        generation_config["responseMimeType"] = "application/json"
        generation_config["responseSchema"] = response_schema
    if temperature is not None:
        generation_config["temperature"] = temperature

    body = {"contents": [{"role": "user", "parts": parts}]}
    if generation_config:
        body["generationConfig"] = generation_config

    url = f"{cfg['GEMINI_API_URL']}/models/{cfg['GEMINI_MODEL']}:generateContent"
    async with httpx.AsyncClient(timeout=cfg["GEMINI_TIMEOUT_SECONDS"]) as client:
        r = await client.post(
            url,
            json=body,
            headers={"x-goog-api-key": cfg["GEMINI_API_KEY"], "Accept": "application/json"},
        )
        r.raise_for_status()
        payload = r.json()

    try:
        candidate_parts = payload["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise AIServiceError("Response has no candidates")
    return "".join(p.get("text", "") for p in candidate_parts).strip()


def _parse_json_object(text: str) -> dict:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise AIServiceError("Expected a JSON object")
    return data


async def analyze_image_safety(mime_type: str, data: str) -> dict:
    try:
        text = await _generate_content(
            [{"text": _SAFETY_PROMPT}, _image_part(mime_type, data)],
            response_schema=_SAFETY_SCHEMA,
        )
        result = _parse_json_object(text or '{"isSafe": true, "reason": ""}')
        return {"is_safe": bool(result.get("isSafe")), "reason": result.get("reason") or ""}
    except Exception:
        logger.exception("Image safety analysis failed")
        return dict(SAFETY_FALLBACK)


async def identify_product_from_image(mime_type: str, data: str) -> dict | None:
    prompt = _IDENTIFY_PROMPT.format(categories=", ".join(f"'{c}'" for c in CATEGORIES))
    try:
        text = await _generate_content(
            [{"text": prompt}, _image_part(mime_type, data)],
            response_schema=_IDENTIFY_SCHEMA,
        )
        if not text:
            return None
        result = _parse_json_object(text)
    except Exception:
        logger.exception("Product identification failed")
        return None
    return {
        "title": (result.get("title") or "").strip(),
        "category": normalize_category(result.get("category")),
        "description": (result.get("description") or "").strip(),
    }


async def generate_product_description(title: str, category: str) -> str:
    prompt = (
        f'Write a professional detailed marketplace description for "{title}" in "{category}". '
        "Focus on quality and key features. Minimum 100 words."
    )
    try:
        return await _generate_content([{"text": prompt}], temperature=0.8)
    except Exception:
        logger.warning("Description generation failed for %r", title, exc_info=True)
        return ""


async def negotiate_price(product_title: str, original_price: float, offered_price: float) -> dict:
    prompt = (
        f'Global seller for "{product_title}" priced at ${original_price:.2f}. '
        f"Buyer offered ${offered_price:.2f}. Respond as a smart professional seller."
    )
    try:
        text = await _generate_content([{"text": prompt}], response_schema=_NEGOTIATION_SCHEMA)
        result = _parse_json_object(text or "{}")
    except Exception:
        logger.warning("Negotiation failed for %r", product_title, exc_info=True)
        return dict(NEGOTIATION_FALLBACK)

    status = str(result.get("status") or "").lower()
    message = result.get("message") or ""
    if status not in NEGOTIATION_STATUSES or not message:
        logger.warning("Negotiation returned unusable result: %r", result)
        return dict(NEGOTIATION_FALLBACK)
    return {"status": status, "message": message}


async def get_live_chat_response(product_title: str, user_message: str, chat_history=None) -> str:
    ## Only the last 10 turns go into the prompt
    history_lines = [f"{m['sender']}: {m['text']}" for m in (chat_history or [])[-10:]]
    prompt = f'Chat about "{product_title}". '
    if history_lines:
        prompt += "Conversation so far:\n" + "\n".join(history_lines) + "\n"
    prompt += f'Buyer message: "{user_message}". Respond as a polite global seller.'
    try:
        text = await _generate_content([{"text": prompt}], temperature=0.8)
    except Exception:
        logger.warning("Chat auto-reply failed for %r", product_title, exc_info=True)
        return CHAT_FALLBACK
    return text or CHAT_FALLBACK


async def analyze_listing_image(mime_type: str, data: str) -> dict:
    """Sell flow: moderation first, auto-fill suggestion only for safe images."""
    safety = await analyze_image_safety(mime_type, data)
    if not safety["is_safe"]:
        return {
            "is_safe": False,
            "reason": safety["reason"] or "Image violates safety policy.",
            "suggestion": None,
        }
    suggestion = await identify_product_from_image(mime_type, data)
    return {"is_safe": True, "reason": "", "suggestion": suggestion}
