from __future__ import annotations

import json
import logging
from typing import Optional

import httpx

from .config import GenieSettings
from .errors import GenieError, MalformedAIResponse
from .json_utils import parse_json_object
from .openai_client import OpenAIClient
from .theme_data import ThemeRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a WordPress block theme expert. Generate theme.json configuration and "
    "page content for block themes based on user requirements. Answer with JSON only."
)

RESPONSE_SHAPE = {
    "theme_name": "string",
    "theme_slug": "string",
    "colors": [{"name": "Primary", "slug": "primary", "color": "#rrggbb"}],
    "typography": {"headingFont": "font family name", "bodyFont": "font family name"},
    "content": {
        "hero": {"headline": "string", "subheadline": "string", "ctaText": "string"},
        "services": [{"title": "string", "description": "string"}],
        "about": {"heading": "string", "content": "string"},
        "cta": {"heading": "string", "text": "string", "buttonText": "string"},
    },
    "navigation": ["Home", "About", "Services", "Blog", "Contact"],
}


def build_ai_prompt(request: ThemeRequest) -> str:
    lines = [
        "Create a modern WordPress block theme with these details:",
        "",
        f"Website Name: {request.site_name}",
        f"Business Type: {request.business_type}",
    ]
    if request.tagline:
        lines.append(f"Tagline: {request.tagline}")
    if request.description:
        lines.append(f"Description: {request.description}")
    lines += [
        f"Primary Color: {request.primary_color}",
        f"Secondary Color: {request.secondary_color}",
        "",
        "Suggest a complementary palette of 8 colors whose first two entries are the primary "
        "and secondary colors above (slugs: primary, secondary, accent, white, black, "
        "light-gray, gray, dark-gray), a heading and a body font, homepage copy with 3 or 4 "
        "services, and the main navigation labels.",
        "",
        "Respond with exactly one JSON object of this shape and nothing else:",
        json.dumps(RESPONSE_SHAPE, indent=2),
    ]
    return "\n".join(lines)


def extract_completion_text(body: object) -> str:
    try:
        text = body["choices"][0]["message"]["content"]  # type: ignore[index]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedAIResponse("Invalid API response") from e
    if not isinstance(text, str):
        raise MalformedAIResponse("Invalid API response")
    return text


def request_ai_theme_content(
    api_key: str,
    request: ThemeRequest,
    *,
    settings: GenieSettings,
    http: Optional[httpx.Client] = None,
) -> dict:
    """Strict variant: raises RemoteAPIError, TransportError or MalformedAIResponse."""
    payload = {
        "model": settings.chat_model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_ai_prompt(request)},
        ],
        "temperature": settings.chat_temperature,
        "max_tokens": settings.chat_max_tokens,
    }
    with OpenAIClient(
        api_key,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        http=http,
    ) as client:
        body = client.post("chat/completions", payload)
    data = parse_json_object(extract_completion_text(body))
    if data is None:
        raise MalformedAIResponse("AI response did not contain a JSON object")
    return data


def fetch_ai_theme_content(
    api_key: str,
    request: ThemeRequest,
    *,
    settings: Optional[GenieSettings] = None,
    http: Optional[httpx.Client] = None,
) -> Optional[dict]:
    """Return the AI theme payload, or None on any failure."""
    if not api_key:
        return None
    settings = settings or GenieSettings()
    try:
        return request_ai_theme_content(api_key, request, settings=settings, http=http)
    except GenieError as e:
        logger.warning("AI theme content unavailable (%s): %s", e.__class__.__name__, e)
        return None
