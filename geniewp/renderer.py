"""Pure rendering of ThemeData into the text of each theme artifact.

Nothing here touches the filesystem; the assembler decides where output goes.
Markup references palette entries by slug so theme.json stays the only place
where actual color values live.
"""

from __future__ import annotations

import datetime as _dt
import json
from typing import Any, Dict, List, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from .sanitize import comment_safe, sanitize_title
from .theme_data import ThemeData

DEFAULT_DESCRIPTION = "A custom WordPress block theme generated by GenieWP."
SOCIAL_SERVICES = ("facebook", "instagram", "x", "linkedin")

FONT_SIZES = [
    ("small", "0.875rem", "Small"),
    ("medium", "1rem", "Medium"),
    ("large", "1.5rem", "Large"),
    ("x-large", "2.25rem", "Extra Large"),
    ("xx-large", "3rem", "Huge"),
]

SPACING_SIZES = [
    ("20", "0.5rem", "2X-Small"),
    ("30", "1rem", "X-Small"),
    ("40", "1.5rem", "Small"),
    ("50", "2.5rem", "Medium"),
    ("60", "4rem", "Large"),
    ("70", "6rem", "X-Large"),
]

# relative path -> template name
THEME_FILES = {
    "style.css": "theme/style.css",
    "templates/index.html": "theme/index.html",
    "templates/front-page.html": "theme/front-page.html",
    "templates/page.html": "theme/page.html",
    "templates/single.html": "theme/single.html",
    "parts/header.html": "theme/header.html",
    "parts/footer.html": "theme/footer.html",
    "assets/css/custom.css": "theme/custom.css",
    "functions.php": "theme/functions.php",
    "README.md": "theme/README.md",
}


def block_attrs(attrs: Any) -> Markup:
    """Serialize block comment attributes the way WordPress does."""
    raw = json.dumps(attrs, ensure_ascii=False, separators=(",", ":"))
    raw = (
        raw.replace("--", "\\u002d\\u002d")
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace('\\"', "\\u0022")
    )
    return Markup(raw)


def _make_env() -> Environment:
    env = Environment(
        loader=PackageLoader("geniewp", "templates"),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["block_attrs"] = block_attrs
    env.filters["comment_safe"] = comment_safe
    return env


env = _make_env()


def text_domain(data: ThemeData) -> str:
    return sanitize_title(data.site_name, "geniewp-theme")


def function_prefix(data: ThemeData) -> str:
    return "geniewp_" + text_domain(data).replace("-", "_")


def nav_url(label: str) -> str:
    slug = sanitize_title(label)
    if not slug or slug == "home":
        return "/"
    return f"/{slug}/"


def navigation_items(data: ThemeData) -> List[Dict[str, Any]]:
    return [
        {"label": label, "url": nav_url(label), "kind": "custom", "isTopLevelLink": True}
        for label in data.navigation
    ]


def font_stack(name: str, fallback: str = "sans-serif") -> str:
    family = f'"{name}"' if " " in name else name
    return f"{family}, {fallback}"


def google_fonts_url(data: ThemeData) -> str:
    families = []
    for name in (data.typography.heading_font, data.typography.body_font):
        fam = "family=" + name.replace(" ", "+") + ":wght@400;600;700"
        if fam not in families:
            families.append(fam)
    return "https://fonts.googleapis.com/css2?" + "&".join(families) + "&display=swap"


def _one_line(text: str) -> str:
    return " ".join(text.split())


def _context(data: ThemeData, year: Optional[int] = None) -> Dict[str, Any]:
    nav = navigation_items(data)
    contact = next((i["url"] for i in nav if i["label"].lower() == "contact"), "#")
    return {
        "data": data,
        "nav": nav,
        "hero": data.content.hero,
        "services": data.content.services,
        "about": data.content.about,
        "about_paragraphs": [p.strip() for p in data.content.about.content.split("\n") if p.strip()],
        "cta": data.content.cta,
        "contact_url": contact,
        "about_line": data.tagline or data.description.split("\n")[0] or data.business_type,
        "description": _one_line(data.description or data.tagline or DEFAULT_DESCRIPTION),
        "text_domain": text_domain(data),
        "prefix": function_prefix(data),
        "fonts_url": google_fonts_url(data),
        "palette": ", ".join(c.name for c in data.colors),
        "social": SOCIAL_SERVICES,
        "year": year if year is not None else _dt.date.today().year,
    }


def _render(name: str, data: ThemeData, year: Optional[int] = None) -> str:
    return env.get_template(name).render(**_context(data, year))


def theme_json_document(data: ThemeData) -> Dict[str, Any]:
    return {
        "$schema": "https://schemas.wp.org/trunk/theme.json",
        "version": 2,
        "settings": {
            "appearanceTools": True,
            "color": {
                "palette": [{"slug": c.slug, "color": c.color, "name": c.name} for c in data.colors],
                "defaultPalette": False,
                "custom": True,
            },
            "typography": {
                "fontFamilies": [
                    {
                        "fontFamily": font_stack(data.typography.heading_font),
                        "slug": "heading",
                        "name": data.typography.heading_font,
                    },
                    {
                        "fontFamily": font_stack(data.typography.body_font),
                        "slug": "body",
                        "name": data.typography.body_font,
                    },
                ],
                "fontSizes": [{"slug": s, "size": v, "name": n} for s, v, n in FONT_SIZES],
            },
            "spacing": {
                "units": ["px", "em", "rem", "vh", "vw", "%"],
                "spacingSizes": [{"slug": s, "size": v, "name": n} for s, v, n in SPACING_SIZES],
            },
            "layout": {"contentSize": "800px", "wideSize": "1200px"},
        },
        "styles": {
            "color": {
                "background": "var(--wp--preset--color--white)",
                "text": "var(--wp--preset--color--dark-gray)",
            },
            "typography": {
                "fontFamily": "var(--wp--preset--font-family--body)",
                "fontSize": "var(--wp--preset--font-size--medium)",
                "lineHeight": "1.6",
            },
            "spacing": {"blockGap": "1.5rem"},
            "elements": {
                "link": {
                    "color": {"text": "var(--wp--preset--color--primary)"},
                    ":hover": {"color": {"text": "var(--wp--preset--color--secondary)"}},
                },
                "heading": {
                    "color": {"text": "var(--wp--preset--color--black)"},
                    "typography": {
                        "fontFamily": "var(--wp--preset--font-family--heading)",
                        "fontWeight": "700",
                        "lineHeight": "1.2",
                    },
                },
                "h1": {"typography": {"fontSize": "var(--wp--preset--font-size--xx-large)"}},
                "h2": {"typography": {"fontSize": "var(--wp--preset--font-size--x-large)"}},
                "h3": {"typography": {"fontSize": "var(--wp--preset--font-size--large)"}},
                "button": {
                    "color": {
                        "background": "var(--wp--preset--color--primary)",
                        "text": "var(--wp--preset--color--white)",
                    },
                    "border": {"radius": "6px"},
                    ":hover": {"color": {"background": "var(--wp--preset--color--secondary)"}},
                },
            },
        },
        "templateParts": [
            {"name": "header", "title": "Header", "area": "header"},
            {"name": "footer", "title": "Footer", "area": "footer"},
        ],
    }


def render_theme_json(data: ThemeData) -> str:
    return json.dumps(theme_json_document(data), indent=4, ensure_ascii=False) + "\n"


def render_style_css(data: ThemeData) -> str:
    return _render("theme/style.css", data)


def render_index_template(data: ThemeData) -> str:
    return _render("theme/index.html", data)


def render_front_page_template(data: ThemeData) -> str:
    return _render("theme/front-page.html", data)


def render_page_template(data: ThemeData) -> str:
    return _render("theme/page.html", data)


def render_single_template(data: ThemeData) -> str:
    return _render("theme/single.html", data)


def render_header_part(data: ThemeData) -> str:
    return _render("theme/header.html", data)


def render_footer_part(data: ThemeData, year: Optional[int] = None) -> str:
    return _render("theme/footer.html", data, year)


def render_custom_css(data: ThemeData) -> str:
    return _render("theme/custom.css", data)


def render_functions_php(data: ThemeData) -> str:
    return _render("theme/functions.php", data)


def render_readme(data: ThemeData) -> str:
    return _render("theme/README.md", data)


def render_theme_files(data: ThemeData, year: Optional[int] = None) -> Dict[str, str]:
    """Every artifact of the theme keyed by its path relative to the theme root."""
    if year is None:
        year = _dt.date.today().year
    out = {"theme.json": render_theme_json(data)}
    for rel, name in THEME_FILES.items():
        out[rel] = _render(name, data, year)
    return out


def render_page(name: str, **context: Any) -> str:
    """Render one initial page body from templates/pages/."""
    return env.get_template(f"pages/{name}.html").render(**context)
