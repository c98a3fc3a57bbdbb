"""Merge a ThemeRequest and an optional AI payload into one ThemeData record.

Each top-level field (colors, typography, content, navigation) is validated on
its own; within content the hero, services, about and cta sections are too.
Whatever is missing or malformed falls back to its default alone.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from .sanitize import sanitize_font_name, sanitize_text_field
from .theme_data import (
    About,
    CallToAction,
    ColorEntry,
    Content,
    Hero,
    Service,
    ThemeData,
    ThemeRequest,
    Typography,
)

T = TypeVar("T")

MIN_SERVICES = 3
MAX_SERVICES = 4

DEFAULT_NAVIGATION = ["Home", "About", "Services", "Blog", "Contact"]

# (name, slug, color); primary and secondary come from the request
_FIXED_COLORS = [
    ("Accent", "accent", "#f59e0b"),
    ("White", "white", "#ffffff"),
    ("Black", "black", "#000000"),
    ("Light Gray", "light-gray", "#f3f4f6"),
    ("Gray", "gray", "#6b7280"),
    ("Dark Gray", "dark-gray", "#1f2937"),
]

_DEFAULT_SERVICES = [
    ("Service One", "Professional service description here."),
    ("Service Two", "Quality service for your needs."),
    ("Service Three", "Expert solutions tailored for you."),
    ("Service Four", "Comprehensive support and guidance."),
]

_COLORS = TypeAdapter(List[ColorEntry])
_SERVICES = TypeAdapter(List[Service])


def default_colors(req: ThemeRequest) -> List[ColorEntry]:
    out = [
        ColorEntry(name="Primary", slug="primary", color=req.primary_color),
        ColorEntry(name="Secondary", slug="secondary", color=req.secondary_color),
    ]
    out.extend(ColorEntry(name=n, slug=s, color=c) for n, s, c in _FIXED_COLORS)
    return out


def default_typography() -> Typography:
    return Typography(heading_font="Poppins", body_font="Inter")


def default_hero(req: ThemeRequest) -> Hero:
    return Hero(
        headline=f"Welcome to {req.site_name}",
        subheadline=req.tagline or f"Your trusted partner for {req.business_type}",
        cta_text="Get Started",
    )


def default_services() -> List[Service]:
    return [Service(title=t, description=d) for t, d in _DEFAULT_SERVICES]


def default_about(req: ThemeRequest) -> About:
    return About(
        heading=f"About {req.site_name}",
        content=req.description
        or "We are a dedicated team committed to providing exceptional service and value to our clients.",
    )


def default_cta(req: ThemeRequest) -> CallToAction:
    return CallToAction(
        heading="Ready to Get Started?",
        text=f"Contact {req.site_name} today to learn how we can help.",
        button_text="Contact Us",
    )


def default_content(req: ThemeRequest) -> Content:
    return Content(
        hero=default_hero(req),
        services=default_services(),
        about=default_about(req),
        cta=default_cta(req),
    )


def _clean(value: Any) -> Any:
    """Strip tags from every string in a decoded JSON value."""
    if isinstance(value, str):
        return sanitize_text_field(value)
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_clean(v) for v in value]
    return value


def _pick(raw: Any, parse: Callable[[Any], T], default: Callable[[], T]) -> T:
    if raw is None or raw == {} or raw == []:
        return default()
    try:
        return parse(_clean(raw))
    except (ValidationError, ValueError, TypeError, RecursionError):
        return default()


def _parse_colors(raw: Any) -> List[ColorEntry]:
    colors = _COLORS.validate_python(raw)
    if not colors:
        raise ValueError("empty palette")
    return colors


def _complete_palette(colors: List[ColorEntry], defaults: List[ColorEntry]) -> List[ColorEntry]:
    """Drop duplicate slugs and append any default slot the markup refers to."""
    seen = set()
    out = []
    for entry in list(colors) + list(defaults):
        if entry.slug in seen:
            continue
        seen.add(entry.slug)
        out.append(entry)
    return out


def _parse_typography(raw: Any) -> Typography:
    typo = Typography.model_validate(raw)
    heading = sanitize_font_name(typo.heading_font)
    body = sanitize_font_name(typo.body_font)
    if not heading or not body:
        raise ValueError("unusable font name")
    return Typography(heading_font=heading, body_font=body)


def _parse_services(raw: Any) -> List[Service]:
    services = _SERVICES.validate_python(raw)
    if len(services) < MIN_SERVICES:
        raise ValueError("too few services")
    return services[:MAX_SERVICES]


def _parse_navigation(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        raise ValueError("navigation must be a list")
    labels = [x.strip() for x in raw if isinstance(x, str) and x.strip()]
    if not labels or len(labels) != len(raw):
        raise ValueError("navigation entries must be non-empty strings")
    return labels


def _merge_content(raw: Any, req: ThemeRequest) -> Content:
    if not isinstance(raw, dict) or not raw:
        return default_content(req)
    return Content(
        hero=_pick(raw.get("hero"), Hero.model_validate, lambda: default_hero(req)),
        services=_pick(raw.get("services"), _parse_services, default_services),
        about=_pick(raw.get("about"), About.model_validate, lambda: default_about(req)),
        cta=_pick(raw.get("cta"), CallToAction.model_validate, lambda: default_cta(req)),
    )


def normalize(request: ThemeRequest, ai_payload: Optional[Any] = None) -> ThemeData:
    """Return a fully populated ThemeData. Never raises on a bad AI payload."""
    req = request.sanitized()
    payload = ai_payload if isinstance(ai_payload, dict) else {}

    return ThemeData(
        site_name=req.site_name,
        business_type=req.business_type,
        tagline=req.tagline,
        description=req.description,
        colors=_complete_palette(
            _pick(payload.get("colors"), _parse_colors, lambda: default_colors(req)),
            default_colors(req),
        ),
        typography=_pick(payload.get("typography"), _parse_typography, default_typography),
        content=_merge_content(payload.get("content"), req),
        navigation=_pick(payload.get("navigation"), _parse_navigation, lambda: list(DEFAULT_NAVIGATION)),
    )
