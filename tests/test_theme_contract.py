from __future__ import annotations

import json

import pytest

from squircleapi.errors import DeserializationError
from squircleapi.theme_contract import (
    FALLBACK_COLOR,
    MIME_TYPE_JSON,
    THEME_PROPERTY_KEYS,
    PropertyItemV1,
    ThemeModelV1,
    property_column,
    resolve_colors,
)
from squircleapi.theme_defaults import built_in_themes, find_built_in_theme


def _theme_model() -> ThemeModelV1:
    return ThemeModelV1(
        uuid="8c3f0a52-7d8e-4f57-9a47-1d4fb1b8c0de",
        name="Round Trip",
        author="tester",
        description="Every property set",
        colors={key: f"#{index:02X}{index:02X}{index:02X}" for index, key in enumerate(THEME_PROPERTY_KEYS)},
    )


def test_canonical_keys_map_to_snake_case_columns() -> None:
    assert len(THEME_PROPERTY_KEYS) == 26
    assert len(set(THEME_PROPERTY_KEYS)) == 26
    assert property_column("gutter-current-line-number") == "gutter_current_line_number_color"
    assert property_column("text") == "text_color"


def test_resolve_colors_fills_defaults_and_normalizes_case() -> None:
    colors = resolve_colors([("TEXT", "#abcdef"), ("not-a-key", "#123456")])

    assert list(colors) == list(THEME_PROPERTY_KEYS)
    assert colors["text"] == "#ABCDEF"
    assert colors["background"] == FALLBACK_COLOR


def test_property_items_accept_any_value_and_colors_are_checked_per_key() -> None:
    item = PropertyItemV1.model_validate({"propertyKey": "cursor", "propertyValue": "red"})
    assert item.propertyValue == "red"

    with pytest.raises(ValueError, match="Invalid color"):
        resolve_colors([("text", "red")])

    colors = resolve_colors([("cursor", "red"), ("text", "#80ffffff")])
    assert colors["text"] == "#80FFFFFF"
    assert "cursor" not in colors


def test_built_in_themes_are_built_once() -> None:
    first = built_in_themes()
    second = built_in_themes()

    assert first is not second
    assert all(a is b for a, b in zip(first, second))
    assert find_built_in_theme("darcula") is first[0]
    assert find_built_in_theme("missing") is None


def test_built_in_themes_are_complete_and_read_only_flavoured() -> None:
    themes = built_in_themes()

    assert len({theme.uuid for theme in themes}) == len(themes)
    for theme in themes:
        assert theme.isExternal is False
        assert list(theme.colors) == list(THEME_PROPERTY_KEYS)


def test_export_then_import_is_lossless(store) -> None:
    model = _theme_model()

    exported = store.export_theme(model)
    imported = store.import_theme(exported.content)

    assert exported.fileName == "Round Trip.json"
    assert exported.mimeType == MIME_TYPE_JSON
    assert imported == model


def test_export_uses_flat_color_scheme_mapping(store) -> None:
    payload = json.loads(store.export_theme(_theme_model()).content)

    assert set(payload) == {"uuid", "name", "author", "description", "colorScheme"}
    assert set(payload["colorScheme"]) == set(THEME_PROPERTY_KEYS)


def test_import_fills_missing_colors_and_ignores_unknown_keys(store) -> None:
    raw = json.dumps(
        {
            "uuid": "partial",
            "name": "Partial",
            "author": "someone",
            "description": "",
            "colorScheme": {"keyword": "#CC7832", "cursor": "#BBBBBB"},
            "version": 3,
        }
    ).encode("utf-8")

    theme = store.import_theme(raw)

    assert theme.colors["keyword"] == "#CC7832"
    assert theme.colors["text"] == FALLBACK_COLOR
    assert "cursor" not in theme.colors


def test_import_rejects_malformed_json(store) -> None:
    with pytest.raises(DeserializationError) as exc:
        store.import_theme(b"{not json")
    assert exc.value.status_code == 400

    with pytest.raises(DeserializationError):
        store.import_theme(b"[1, 2, 3]")

    with pytest.raises(DeserializationError):
        store.import_theme(b"\xff\xfe")


def test_import_rejects_missing_metadata(store) -> None:
    raw = json.dumps({"uuid": "x", "name": "No author", "colorScheme": {}}).encode("utf-8")

    with pytest.raises(DeserializationError) as exc:
        store.import_theme(raw)

    missing = {tuple(error["loc"]) for error in exc.value.details["errors"]}
    assert ("author",) in missing
    assert ("description",) in missing


def test_import_rejects_invalid_colors(store) -> None:
    raw = json.dumps(
        {
            "uuid": "bad",
            "name": "Bad",
            "author": "",
            "description": "",
            "colorScheme": {"text": "not-a-color"},
        }
    )

    with pytest.raises(DeserializationError):
        store.import_theme(raw)
