from __future__ import annotations

from dataclasses import asdict, dataclass

DEFAULT_THEME_ID = "dark"


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    primary: str
    secondary: str
    accent: str
    background: str | None = None
    text: str | None = None
    contrast_text: str | None = None

    def as_dict(self):
        return asdict(self)


_LIGHT_ON_DARK = "rgba(255, 255, 255, 0.9)"


def _dark_text_theme(theme_id, name, primary, secondary, accent, background):
    return Theme(
        id=theme_id,
        name=name,
        primary=primary,
        secondary=secondary,
        accent=accent,
        background=background,
        text="#ffffff",
        contrast_text=_LIGHT_ON_DARK,
    )


THEMES = (
    _dark_text_theme("dark", "Dark", "#1a1a1a", "#2d2d2d", "#3b82f6", "#121212"),
    Theme(
        id="light",
        name="Light",
        primary="#ffffff",
        secondary="#f0f0f0",
        accent="#2563eb",
        background="#f9f9f9",
        text="#000000",
        contrast_text="rgba(0, 0, 0, 0.9)",
    ),
    _dark_text_theme("blue", "Blue", "#1e3a8a", "#2563eb", "#60a5fa", "#172554"),
    _dark_text_theme("green", "Green", "#064e3b", "#059669", "#34d399", "#022c22"),
    _dark_text_theme("purple", "Purple", "#4c1d95", "#7c3aed", "#8b5cf6", "#2e1065"),
    _dark_text_theme("red", "Red", "#7f1d1d", "#dc2626", "#ef4444", "#450a0a"),
    _dark_text_theme("pink", "Pink", "#831843", "#db2777", "#f472b6", "#500724"),
    _dark_text_theme("orange", "Orange", "#7c2d12", "#ea580c", "#fb923c", "#431407"),
    Theme(
        "gradient",
        "Gradient",
        "linear-gradient(135deg, #6366f1 0%, #a855f7 50%, #ec4899 100%)",
        "#4c1d95",
        "#f472b6",
        "#1a0536",
        "#ffffff",
        _LIGHT_ON_DARK,
    ),
)

_THEMES_BY_ID = {theme.id: theme for theme in THEMES}


def is_known_theme(theme_id: str | None) -> bool:
    return isinstance(theme_id, str) and theme_id in _THEMES_BY_ID


def get_theme(theme_id: str | None) -> Theme:
    return _THEMES_BY_ID.get(theme_id or "", _THEMES_BY_ID[DEFAULT_THEME_ID])


def theme_css_variables(theme_id: str | None) -> dict[str, str]:
    theme = get_theme(theme_id)
    text = theme.text or "#ffffff"
    return {
        "--profile-primary": theme.primary,
        "--profile-secondary": theme.secondary,
        "--profile-accent": theme.accent,
        "--profile-background": theme.background or theme.primary,
        "--profile-text": text,
        "--profile-contrast-text": theme.contrast_text or text,
    }
