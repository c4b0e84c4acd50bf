from __future__ import annotations

import json
import re
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

THEME_SCHEMA_VERSION = "v1"
FALLBACK_COLOR = "#000000"
MIME_TYPE_JSON = "application/json"
HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")

THEME_PROPERTY_KEYS: tuple[str, ...] = (
    "text",
    "background",
    "gutter",
    "gutter-divider",
    "gutter-current-line-number",
    "gutter-text",
    "selected-line",
    "selection",
    "suggestion-query",
    "find-result-background",
    "delimiter-background",
    "number",
    "operator",
    "keyword",
    "type",
    "language-constant",
    "preprocessor",
    "variable",
    "method",
    "string",
    "comment",
    "tag",
    "tag-name",
    "attribute-name",
    "attribute-value",
    "entity-reference",
)


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody


def property_column(key: str) -> str:
    """Column name of a canonical property in the ``themes`` table."""
    return f"{key.replace('-', '_')}_color"


def normalize_color(value: str) -> str:
    color = str(value).strip()
    if not HEX_COLOR_PATTERN.fullmatch(color):
        raise ValueError(f"Invalid color '{value}'. Use #RRGGBB or #AARRGGBB.")
    return color.upper()


def resolve_colors(pairs: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Build a complete color mapping from (key, value) overrides.

    Every canonical key is present in the result; keys outside the canonical
    set are ignored so files written by older or newer builds still load.
    """
    colors = {key: FALLBACK_COLOR for key in THEME_PROPERTY_KEYS}
    for key, value in pairs:
        normalized_key = str(key).strip().lower()
        if normalized_key in colors:
            colors[normalized_key] = normalize_color(value)
    return colors


class ThemeMetaV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    uuid: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=120)
    author: str = Field(max_length=120)
    description: str = Field(max_length=2_000)

    @field_validator("uuid", "name")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        text = str(value).strip()
        if not text:
            raise ValueError("value must not be empty.")
        return text


class ThemeRefV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uuid: str = Field(min_length=1, max_length=64)


class PropertyItemV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    propertyKey: str
    propertyValue: str


class ThemeCreateRequestV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    meta: ThemeMetaV1
    properties: list[PropertyItemV1] = Field(default_factory=list)


class ThemeModelV1(ThemeMetaV1):
    model_config = ConfigDict(extra="forbid")

    isExternal: bool = True
    colors: dict[str, str] = Field(default_factory=dict)

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, values: dict[str, str]) -> dict[str, str]:
        return resolve_colors(values.items())


class ThemeListResponseV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schemaVersion: str = THEME_SCHEMA_VERSION
    themes: list[ThemeModelV1]


class ThemeExportV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fileName: str
    mimeType: str = MIME_TYPE_JSON
    content: bytes


class ThemeExportLocationV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fileName: str
    location: str


class ExternalThemeV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uuid: str = Field(min_length=1)
    name: str = Field(min_length=1)
    author: str
    description: str
    colorScheme: dict[str, str] = Field(default_factory=dict)

    @field_validator("colorScheme")
    @classmethod
    def validate_color_scheme(cls, values: dict[str, str]) -> dict[str, str]:
        return resolve_colors(values.items())


def theme_from_external(external: ExternalThemeV1) -> ThemeModelV1:
    return ThemeModelV1(
        uuid=external.uuid,
        name=external.name,
        author=external.author,
        description=external.description,
        isExternal=True,
        colors=external.colorScheme,
    )


def serialize_external_theme(model: ThemeModelV1) -> bytes:
    external = ExternalThemeV1(
        uuid=model.uuid,
        name=model.name,
        author=model.author,
        description=model.description,
        colorScheme=model.colors,
    )
    return json.dumps(external.model_dump(mode="json"), indent=2, ensure_ascii=False).encode("utf-8")


def deserialize_external_theme(raw: bytes | str) -> ExternalThemeV1:
    text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Theme file must contain a JSON object.")
    return ExternalThemeV1.model_validate(data)
