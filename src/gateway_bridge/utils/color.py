"""Color helpers for gateway lights.

Gateway lights take a single packed 32 bit value: the brightness percentage
in the top byte followed by red, green and blue.
"""
import colorsys
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class HSLColor:
    hue: float         # 0-360
    saturation: float  # 0-100
    lightness: float = 50.0  # 0-100

    def to_rgb(self) -> Tuple[int, int, int]:
        red, green, blue = colorsys.hls_to_rgb(
            (self.hue % 360) / 360.0,
            _clamp(self.lightness, 0, 100) / 100.0,
            _clamp(self.saturation, 0, 100) / 100.0,
        )
        return round(red * 255), round(green * 255), round(blue * 255)

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> "HSLColor":
        hue, lightness, saturation = colorsys.rgb_to_hls(red / 255.0, green / 255.0, blue / 255.0)
        return cls(
            hue=round(hue * 360, 1),
            saturation=round(saturation * 100, 1),
            lightness=round(lightness * 100, 1),
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def pack_rgb(brightness: int, red: int, green: int, blue: int) -> int:
    """Pack brightness and RGB into the gateway's unsigned 32 bit format."""
    packed = (int(brightness) & 0xFF) << 24 | (red & 0xFF) << 16 | (green & 0xFF) << 8 | (blue & 0xFF)
    return packed & 0xFFFFFFFF


def unpack_rgb(packed: int) -> Tuple[int, int, int, int]:
    """Inverse of pack_rgb, returns (brightness, red, green, blue)."""
    return (packed >> 24) & 0xFF, (packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF
