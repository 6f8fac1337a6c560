"""Color themes and ANSI style helpers.

Decisions:
- Six fixed palettes (light, dark, space, coffee, sunset, midnight), each
  with six colors: bg, text, secondary, button, active, active_text.
- Unknown theme names are rejected; a bad stored name falls back to light.
- Truecolor preferred; falls back to the 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
"""
from __future__ import annotations
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, TextIO

from settings import Settings
from storage import Storage, THEME_KEY

DEFAULT_THEME = 'light'
BORDER_ALPHA = 0.2

logger = logging.getLogger(__name__)


class UnknownThemeError(ValueError):
    """Raised when a theme name is not one of the six palettes."""


@dataclass(frozen=True)
class Palette:
    bg: str
    text: str
    secondary: str
    button: str
    active: str
    active_text: str


class Theme(Enum):
    LIGHT = Palette('#FFFFFF', '#1F2937', '#F3F4F6', '#E5E7EB', '#000000', '#FFFFFF')
    DARK = Palette('#000000', '#FFFFFF', '#121212', '#1E1E1E', '#FFFFFF', '#000000')
    SPACE = Palette('#0B0B23', '#A7A7FF', '#1A1A3A', '#2C2C5E', '#A7A7FF', '#0B0B23')
    COFFEE = Palette('#F5ECE4', '#3B2F2F', '#EDE0D4', '#E2D3C0', '#4B3A2A', '#FFFFFF')
    SUNSET = Palette('#FFF3E6', '#CC3300', '#FFDAB9', '#FFD0A8', '#CC3300', '#FFFFFF')
    MIDNIGHT = Palette('#0A0A1A', '#D1D1E9', '#1A1A2E', '#141424', '#D1D1E9', '#0A0A1A')

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> 'Theme':
        key = (name or '').strip().upper()
        if key not in cls.__members__:
            raise UnknownThemeError(f'Unknown theme: {name}')
        return cls[key]


def theme_names() -> List[str]:
    return [t.label for t in Theme]


def hex_to_rgb(hex_code: str) -> tuple[int, int, int]:
    """Convert a hex color code to an RGB tuple."""
    h = hex_code.lstrip('#')
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def rgba(hex_code: str, alpha: float = BORDER_ALPHA) -> str:
    r, g, b = hex_to_rgb(hex_code)
    return f'rgba({r}, {g}, {b}, {alpha})'


def blend(fg_hex: str, bg_hex: str, alpha: float) -> str:
    """Composite fg at alpha over bg; returns '#RRGGBB'."""
    fg = hex_to_rgb(fg_hex)
    bg = hex_to_rgb(bg_hex)
    mixed = [int(round(f * alpha + b * (1 - alpha))) for f, b in zip(fg, bg)]
    return '#' + ''.join(f'{c:02X}' for c in mixed)


def border_rgba(palette: Palette) -> str:
    """Translucent border derived from the text color."""
    return rgba(palette.text, BORDER_ALPHA)


def border_hex(palette: Palette) -> str:
    """Opaque equivalent of border_rgba over the palette background."""
    return blend(palette.text, palette.bg, BORDER_ALPHA)


class Styler:
    """Turns palette colors into ANSI sequences (or nothing when disabled)."""

    def __init__(self, enabled: bool, truecolor: bool = False):
        self.enabled = enabled
        self.truecolor = enabled and truecolor

    @classmethod
    def for_stream(cls, settings: Settings, stream: Optional[TextIO] = None) -> 'Styler':
        stream = stream or sys.stdout
        is_tty = hasattr(stream, 'isatty') and stream.isatty()
        enabled = (settings.force_color or is_tty) and not settings.no_color
        truecolor = any(tok in settings.colorterm for tok in ("truecolor", "24bit"))
        return cls(enabled, truecolor)

    def code(self, part: str) -> str:
        return f"\033[{part}m" if self.enabled else ''

    @property
    def reset(self) -> str:
        return self.code('0')

    @property
    def bold(self) -> str:
        return self.code('1')

    @property
    def strike(self) -> str:
        return self.code('9')

    def fg(self, hex_code: str) -> str:
        return self._rgb(hex_code, 38)

    def bg(self, hex_code: str) -> str:
        return self._rgb(hex_code, 48)

    def _rgb(self, hex_code: str, layer: int) -> str:
        if not self.enabled:
            return ''
        r, g, b = hex_to_rgb(hex_code)
        if self.truecolor:
            return f"\033[{layer};2;{r};{g};{b}m"
        return f"\033[{layer};5;{_cube_index(r, g, b)}m"

    def color(self, text: str, *styles: str) -> str:
        """Apply ANSI styles to a given text."""
        if not self.enabled:
            return text
        return ''.join(styles) + text + self.reset


def _cube_index(r: int, g: int, b: int) -> int:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    return 16 + 36 * to_6(r) + 6 * to_6(g) + to_6(b)


class ThemeRegistry:
    """Tracks the active palette and persists the selected name."""

    def __init__(self, storage: Storage):
        self.storage = storage
        stored = storage.load(THEME_KEY, DEFAULT_THEME)
        try:
            self.active: Theme = Theme.from_name(stored if isinstance(stored, str) else '')
        except UnknownThemeError:
            logger.warning("stored theme %r is not known; using %s", stored, DEFAULT_THEME)
            self.active = Theme.from_name(DEFAULT_THEME)

    @property
    def palette(self) -> Palette:
        return self.active.value

    @property
    def name(self) -> str:
        return self.active.label

    def set_theme(self, name: str) -> Theme:
        """Activate and persist a theme; unknown names raise UnknownThemeError."""
        theme = Theme.from_name(name)
        self.active = theme
        self.storage.save(THEME_KEY, theme.label)
        logger.debug("theme set to %s", theme.label)
        return theme
