from __future__ import annotations

from geniewp.normalizer import DEFAULT_NAVIGATION, default_colors, normalize
from geniewp.sanitize import sanitize_text_field, sanitize_textarea_field
from geniewp.theme_data import ThemeRequest


def _req(**kw):
    base = {"site_name": "Acme", "business_type": "Bakery"}
    base.update(kw)
    return ThemeRequest(**base)


def _ai_colors():
    slugs = ["primary", "secondary", "accent", "white", "black", "light-gray", "gray", "dark-gray"]
    return [
        {"name": s.replace("-", " ").title(), "slug": s, "color": f"#{i:02x}{i:02x}{i:02x}"}
        for i, s in enumerate(slugs, start=1)
    ]


def test_defaults_without_ai():
    data = normalize(_req())
    assert [c.slug for c in data.colors] == [
        "primary", "secondary", "accent", "white", "black", "light-gray", "gray", "dark-gray",
    ]
    assert data.colors[0].color == "#2563eb"
    assert data.colors[1].color == "#10b981"
    assert data.typography.heading_font == "Poppins"
    assert data.typography.body_font == "Inter"
    assert data.content.hero.headline == "Welcome to Acme"
    assert data.content.hero.subheadline == "Your trusted partner for Bakery"
    assert data.content.hero.cta_text == "Get Started"
    assert [s.title for s in data.content.services] == [
        "Service One", "Service Two", "Service Three", "Service Four",
    ]
    assert data.content.about.heading == "About Acme"
    assert data.content.cta.button_text == "Contact Us"
    assert data.navigation == DEFAULT_NAVIGATION


def test_first_two_colors_mirror_request():
    data = normalize(_req(primary_color="#ff0000", secondary_color="#00ff00"))
    assert data.colors[0].color == "#ff0000"
    assert data.colors[1].color == "#00ff00"


def test_bad_request_colors_fall_back():
    data = normalize(_req(primary_color="red", secondary_color="#12345"))
    assert data.colors[0].color == "#2563eb"
    assert data.colors[1].color == "#10b981"


def test_tagline_feeds_subheadline():
    data = normalize(_req(tagline="Fresh every <em>morning</em>"))
    assert data.content.hero.subheadline == "Fresh every morning"


def test_non_dict_payload_gives_defaults():
    assert normalize(_req(), ["not", "a", "dict"]) == normalize(_req())
    assert normalize(_req(), "text") == normalize(_req())


def test_partial_merge_colors_only():
    data = normalize(_req(), {"colors": _ai_colors()})
    defaults = normalize(_req())
    assert [c.color for c in data.colors] == [c["color"] for c in _ai_colors()]
    assert data.typography == defaults.typography
    assert data.content == defaults.content
    assert data.navigation == defaults.navigation


def test_color_value_alias_accepted():
    colors = [{"name": "Primary", "slug": "primary", "colorValue": "#abcdef"}]
    data = normalize(_req(), {"colors": colors})
    assert data.colors[0].color == "#abcdef"


def test_short_palette_is_completed_with_defaults():
    colors = [{"name": "Primary", "slug": "primary", "color": "#abcdef"}]
    data = normalize(_req(), {"colors": colors})
    assert data.colors[0].color == "#abcdef"
    assert {c.slug for c in data.colors} == {c.slug for c in default_colors(_req())}


def test_malformed_colors_fall_back():
    bad = [{"name": "Primary", "slug": "primary", "color": "blue"}]
    data = normalize(_req(), {"colors": bad, "navigation": ["Home", "Menu"]})
    assert data.colors == normalize(_req()).colors
    assert data.navigation == ["Home", "Menu"]


def test_typography_override_and_bad_font():
    data = normalize(_req(), {"typography": {"headingFont": "Lora", "bodyFont": "Open Sans"}})
    assert data.typography.heading_font == "Lora"
    assert data.typography.body_font == "Open Sans"

    bad = normalize(_req(), {"typography": {"headingFont": "Lora'); x", "bodyFont": "Inter"}})
    assert bad.typography.heading_font == "Poppins"


def test_content_sections_fall_back_independently():
    payload = {
        "content": {
            "hero": {"headline": "<b>Hot</b> bread", "subheadline": "Daily", "ctaText": "Order"},
            "services": [{"title": "Only one", "description": "x"}],
            "about": {"heading": "About"},
        }
    }
    data = normalize(_req(), payload)
    defaults = normalize(_req())
    assert data.content.hero.headline == "Hot bread"
    assert data.content.hero.cta_text == "Order"
    assert data.content.services == defaults.content.services
    assert data.content.about == defaults.content.about
    assert data.content.cta == defaults.content.cta


def test_services_truncated_to_four():
    services = [{"title": f"S{i}", "description": f"D{i}"} for i in range(6)]
    data = normalize(_req(), {"content": {"services": services}})
    assert [s.title for s in data.content.services] == ["S0", "S1", "S2", "S3"]


def test_navigation_must_be_strings():
    data = normalize(_req(), {"navigation": ["Home", 3]})
    assert data.navigation == DEFAULT_NAVIGATION


def test_entity_encoded_markup_is_stripped():
    data = normalize(_req(site_name="Fish &lt;b&gt;Chips&lt;/b&gt;", tagline="&amp;lt;i&amp;gt;Fresh&amp;lt;/i&amp;gt;"))
    assert data.site_name == "Fish Chips"
    assert data.tagline == "Fresh"


def test_sanitizers_are_idempotent():
    for raw in ("Fish &lt;b&gt;Chips&lt;/b&gt;", "Tom &amp;amp; Jerry", "a &lt; b", "  <p>two\n lines</p> "):
        once = sanitize_text_field(raw)
        assert sanitize_text_field(once) == once
        assert "<p>" not in once and "<b>" not in once
    text = sanitize_textarea_field("&lt;script&gt;x&lt;/script&gt;\nsecond line")
    assert text == "x\nsecond line"
    assert sanitize_textarea_field(text) == text


if __name__ == "__main__":
    test_defaults_without_ai()
    test_first_two_colors_mirror_request()
    test_bad_request_colors_fall_back()
    test_tagline_feeds_subheadline()
    test_non_dict_payload_gives_defaults()
    test_partial_merge_colors_only()
    test_color_value_alias_accepted()
    test_short_palette_is_completed_with_defaults()
    test_malformed_colors_fall_back()
    test_typography_override_and_bad_font()
    test_content_sections_fall_back_independently()
    test_services_truncated_to_four()
    test_navigation_must_be_strings()
    test_entity_encoded_markup_is_stripped()
    test_sanitizers_are_idempotent()
    print("normalizer tests passed")
