from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, List, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from .errors import InvalidInput
from .sanitize import sanitize_hex_color, sanitize_text_field, sanitize_textarea_field

DEFAULT_PRIMARY = "#2563eb"
DEFAULT_SECONDARY = "#10b981"

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
HexColor = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^#[0-9a-fA-F]{6}$")]


@dataclass
class ThemeRequest:
    site_name: str
    business_type: str
    tagline: str = ""
    description: str = ""
    primary_color: str = DEFAULT_PRIMARY
    secondary_color: str = DEFAULT_SECONDARY

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "ThemeRequest":
        return cls(
            site_name=sanitize_text_field(data.get("site_name")),
            business_type=sanitize_text_field(data.get("business_type")),
            tagline=sanitize_text_field(data.get("tagline")),
            description=sanitize_textarea_field(data.get("description")),
            primary_color=sanitize_hex_color(data.get("primary_color"), DEFAULT_PRIMARY),
            secondary_color=sanitize_hex_color(data.get("secondary_color"), DEFAULT_SECONDARY),
        )

    def sanitized(self) -> "ThemeRequest":
        return ThemeRequest.from_form(self.__dict__)

    def validate(self) -> None:
        if not self.site_name.strip() or not self.business_type.strip():
            raise InvalidInput("Please fill in all required fields (Site Name and Business Type).")


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ColorEntry(_Model):
    name: Text
    slug: Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[a-z0-9-]{1,40}$")]
    color: HexColor = Field(validation_alias=AliasChoices("color", "colorValue"))


class Typography(_Model):
    heading_font: Text = Field(validation_alias=AliasChoices("headingFont", "heading_font"))
    body_font: Text = Field(validation_alias=AliasChoices("bodyFont", "body_font"))


class Hero(_Model):
    headline: Text
    subheadline: Text
    cta_text: Text = Field(validation_alias=AliasChoices("ctaText", "cta_text"))


class Service(_Model):
    title: Text
    description: Text


class About(_Model):
    heading: Text
    content: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=4000)]


class CallToAction(_Model):
    heading: Text
    text: Text
    button_text: Text = Field(validation_alias=AliasChoices("buttonText", "button_text"))


class Content(_Model):
    hero: Hero
    services: List[Service]
    about: About
    cta: CallToAction


class ThemeData(_Model):
    site_name: str
    business_type: str
    tagline: str = ""
    description: str = ""
    colors: List[ColorEntry]
    typography: Typography
    content: Content
    navigation: List[str]

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class GeneratedTheme:
    slug: str
    name: str
    directory: str
    files: tuple[str, ...] = ()
    ai_enhanced: bool = False
