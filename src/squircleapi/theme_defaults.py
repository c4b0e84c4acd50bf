from __future__ import annotations

from .theme_contract import THEME_PROPERTY_KEYS, ThemeModelV1

DEFAULT_THEME_ID = "darcula"

# Colors are listed in THEME_PROPERTY_KEYS order.
_BUILT_IN_PALETTES: list[tuple[str, str, str, list[str]]] = [
    (
        "darcula",
        "Darcula",
        "Default color scheme",
        [
            "#ABB7C4", "#303030", "#313335", "#555555", "#A4A3A3", "#616366",
            "#3A3A3A", "#28427F", "#987DAC", "#33654B", "#33654B", "#6897BB",
            "#E8E2B7", "#EC7600", "#EC7600", "#EC7600", "#C9C54E", "#9378A7",
            "#FEC76C", "#6E875A", "#66747B", "#E2C077", "#E2C077", "#BABABA",
            "#ABC16D", "#6897BB",
        ],
    ),
    (
        "eclipse",
        "Eclipse",
        "Light scheme inspired by the Eclipse IDE",
        [
            "#000000", "#FFFFFF", "#F1F1F1", "#E1E1E1", "#111111", "#787878",
            "#E8F2FE", "#C3DAFE", "#9F9F9F", "#FFEC8B", "#BFDFFF", "#0000FF",
            "#000000", "#7F0055", "#7F0055", "#7F0055", "#646464", "#0000C0",
            "#000000", "#2A00FF", "#3F7F5F", "#3F7F7F", "#3F7F7F", "#7F007F",
            "#2A00FF", "#2A00FF",
        ],
    ),
    (
        "monokai",
        "Monokai",
        "Vivid dark scheme",
        [
            "#F8F8F8", "#272823", "#272823", "#5B5A4F", "#C8BBAC", "#5B5A4F",
            "#34352D", "#666666", "#7CE0F3", "#5F5E5A", "#5F5E5A", "#AB81FA",
            "#F92672", "#F92672", "#66D9EE", "#AB81FA", "#F92672", "#F8F8F8",
            "#A6E22E", "#E6DB74", "#75715E", "#F8F8F8", "#F92672", "#A6E22E",
            "#E6DB74", "#AB81FA",
        ],
    ),
    (
        "obsidian",
        "Obsidian",
        "Dark scheme with green accents",
        [
            "#E0E2E4", "#2A3134", "#2A3134", "#67757E", "#E0E0E0", "#859396",
            "#31393C", "#616161", "#9EC56F", "#1C3E1A", "#616161", "#F8CE00",
            "#E7E2BC", "#9EC56F", "#9EC56F", "#9EC56F", "#9EC56F", "#6699CC",
            "#E7E2BC", "#DE7C02", "#808C92", "#E8E2B7", "#52A1C4", "#DE7C02",
            "#E8E2B7", "#F8CE00",
        ],
    ),
    (
        "ladies_night",
        "Ladies Night",
        "Dark scheme with pink accents",
        [
            "#E0E2E4", "#22282C", "#2A3134", "#4F575A", "#E0E0E0", "#859396",
            "#373340", "#5B2B41", "#6BD4F2", "#8F6F99", "#8F6F99", "#7EFBFD",
            "#E7E2BC", "#DA89A2", "#DA89A2", "#DA89A2", "#9EC56F", "#6EA4C7",
            "#8FB4C5", "#75C161", "#808C92", "#E8E2B7", "#DA89A2", "#6D95A5",
            "#75C161", "#7EFBFD",
        ],
    ),
    (
        "tomorrow_night",
        "Tomorrow Night",
        "Muted dark scheme",
        [
            "#C6C8C6", "#222426", "#222426", "#4B4D51", "#FFFFFF", "#C6C8C6",
            "#2D2F33", "#383B40", "#EA9560", "#0F52BA", "#0F52BA", "#DB925F",
            "#9B82BA", "#AA92C7", "#F0C674", "#DB925F", "#CF6A6D", "#CF6A6D",
            "#87A1BB", "#B5BD68", "#969896", "#CF6A6D", "#CF6A6D", "#F0C674",
            "#B5BD68", "#DB925F",
        ],
    ),
    (
        "visual_studio_2013",
        "Visual Studio 2013",
        "Dark scheme inspired by Visual Studio",
        [
            "#C8C8C8", "#232323", "#232323", "#6A6A6A", "#FFFFFF", "#2B91AF",
            "#141414", "#454464", "#FC8C3D", "#1C3D6B", "#3A3A3A", "#BACDAB",
            "#DCDCDC", "#669BD1", "#669BD1", "#669BD1", "#C49594", "#9DDDFF",
            "#71C6B1", "#CE9F89", "#6BA455", "#569CD6", "#569CD6", "#9CDCFE",
            "#CE9178", "#BACDAB",
        ],
    ),
]


_BUILT_IN_THEMES: tuple[ThemeModelV1, ...] = tuple(
    ThemeModelV1(
        uuid=theme_id,
        name=name,
        author="Squircle IDE",
        description=description,
        isExternal=False,
        colors=dict(zip(THEME_PROPERTY_KEYS, palette)),
    )
    for theme_id, name, description, palette in _BUILT_IN_PALETTES
)
_BUILT_IN_THEMES_BY_ID = {theme.uuid: theme for theme in _BUILT_IN_THEMES}


def built_in_themes() -> list[ThemeModelV1]:
    return list(_BUILT_IN_THEMES)


def find_built_in_theme(theme_id: str) -> ThemeModelV1 | None:
    return _BUILT_IN_THEMES_BY_ID.get(theme_id)
