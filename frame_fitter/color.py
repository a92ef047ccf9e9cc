"""Background color value type.

Colors are parsed once where they enter the program (settings, CLI, UI) and
then passed around as `Color`. Each backend asks for its own representation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from frame_fitter.errors import InvalidColorError

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FFMPEG_RE = re.compile(r"^0x([0-9a-fA-F]{6})(?:@([0-9]*\.?[0-9]+))?$")


@dataclass(frozen=True, slots=True)
class Color:
    """sRGB color with 8-bit channels and optional alpha."""

    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self) -> None:
        for name in ("r", "g", "b", "a"):
            v = getattr(self, name)
            if not isinstance(v, int) or not 0 <= v <= 255:
                raise InvalidColorError(f"channel {name}={v!r} out of range 0..255")

    @property
    def is_opaque(self) -> bool:
        return self.a == 255

    @classmethod
    def parse(cls, value: str | Color) -> Color:
        """Parse `#rgb`, `#rgba`, `#rrggbb`, `#rrggbbaa` (leading `#` optional)
        or the ffmpeg form `0xRRGGBB[@alpha]`.
        """
        if isinstance(value, Color):
            return value
        if not isinstance(value, str):
            raise InvalidColorError(f"unsupported color value: {value!r}")

        s = value.strip()
        m = _FFMPEG_RE.match(s)
        if m:
            digits, alpha = m.group(1), m.group(2)
            a = 255
            if alpha is not None:
                af = float(alpha)
                if af > 1.0:
                    raise InvalidColorError(f"alpha out of range in {value!r}")
                a = round(af * 255)
            return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16), a)

        m = _HEX_RE.match(s)
        if not m:
            raise InvalidColorError(f"invalid color: {value!r}")
        digits = m.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        return cls(*channels)

    def to_hex(self) -> str:
        base = f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return base if self.is_opaque else f"{base}{self.a:02x}"

    def to_ffmpeg(self) -> str:
        """Color argument for ffmpeg filters (`pad=...:color=`)."""
        base = f"0x{self.r:02X}{self.g:02X}{self.b:02X}"
        if self.is_opaque:
            return base
        return f"{base}@{self.a / 255:.3f}"

    def to_vips(self) -> list[int]:
        if self.is_opaque:
            return [self.r, self.g, self.b]
        return [self.r, self.g, self.b, self.a]

    def __str__(self) -> str:
        return self.to_hex()


BLACK = Color(0, 0, 0)

PRESET_COLORS: dict[str, Color] = {
    "black": BLACK,
    "white": Color(255, 255, 255),
    "rose": Color.parse("#F43F5E"),
    "blue": Color.parse("#3B82F6"),
    "emerald": Color.parse("#10B981"),
    "amber": Color.parse("#F59E0B"),
    "violet": Color.parse("#8B5CF6"),
}
