from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

import skia
from PIL import Image

BASELINE_FONT_MULTIPLIER = 40
RING_WIDTH_RATIO = 0.15
BASE_FONT_RATIO = 0.8  # primary text is 80% of the ring width at baseline

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


def parse_hex_color(value: str) -> tuple[int, int, int]:
    """'#2547A9' -> (37, 71, 169). Leading '#' is optional."""
    m = _HEX_RE.match(value.strip())
    if not m:
        raise ValueError(f"not an RGB hex colour: {value!r}")
    raw = m.group(1)
    return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16)


def skia_color(value: str, alpha: int = 255) -> int:
    r, g, b = parse_hex_color(value)
    return skia.ColorSetARGB(alpha, r, g, b)


class ContentVariant(str, Enum):
    PRIMARY = "primary"
    ALTERNATE = "alternate"


# -------------------- Bitmap + derived geometry --------------------

@dataclass(frozen=True)
class SourceBitmap:
    image: skia.Image
    pil: Image.Image = field(repr=False, compare=False)
    _scaled: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()

    @classmethod
    def from_pil(cls, pil: Image.Image) -> "SourceBitmap":
        pil = pil.convert("RGBA")
        w, h = pil.size
        img = skia.Image.frombytes(pil.tobytes(), (w, h), skia.ColorType.kRGBA_8888_ColorType)
        return cls(img, pil)

    def resampled(self, width: int, height: int) -> skia.Image:
        """LANCZOS-resized copy; skia only ever blits it 1:1."""
        key = (width, height)
        if key not in self._scaled:
            if key == self.pil.size:
                self._scaled[key] = self.image
            else:
                pil = self.pil.resize(key, Image.LANCZOS)
                self._scaled[key] = skia.Image.frombytes(pil.tobytes(), key, skia.ColorType.kRGBA_8888_ColorType)
        return self._scaled[key]


@dataclass(frozen=True)
class CanvasGeometry:
    """Square canvas holding the photo disc plus a ring 15% of the larger side wide."""

    source_width: int
    source_height: int
    ring_width: float
    canvas_size: float
    center: float
    outer_radius: float
    inner_radius: float

    @classmethod
    def for_size(cls, width: int, height: int) -> "CanvasGeometry":
        max_dim = max(width, height)
        ring_width = max_dim * RING_WIDTH_RATIO
        canvas_size = max_dim + ring_width * 2
        outer_radius = canvas_size / 2
        return cls(
            source_width=width,
            source_height=height,
            ring_width=ring_width,
            canvas_size=canvas_size,
            center=canvas_size / 2,
            outer_radius=outer_radius,
            inner_radius=outer_radius - ring_width,
        )

    @classmethod
    def for_bitmap(cls, bitmap: SourceBitmap) -> "CanvasGeometry":
        return cls.for_size(bitmap.width, bitmap.height)

    @property
    def pixel_size(self) -> int:
        return int(math.ceil(self.canvas_size))

    @property
    def text_radius(self) -> float:
        # middle of the ring
        return self.inner_radius + self.ring_width / 2

    @property
    def base_font_size(self) -> float:
        return self.ring_width * BASE_FONT_RATIO

    def primary_font_size(self, multiplier: float) -> float:
        return self.base_font_size * (multiplier / BASELINE_FONT_MULTIPLIER)


@dataclass(frozen=True)
class CaptionSizeRange:
    initial: int
    minimum: int
    maximum: int

    @classmethod
    def for_geometry(cls, geometry: CanvasGeometry, multiplier: float = BASELINE_FONT_MULTIPLIER) -> "CaptionSizeRange":
        # Caption starts at 65% of the primary text and may move between 50% and 250% of that
        initial = max(1, round(geometry.primary_font_size(multiplier) * 0.65))
        maximum = round(initial * 2.5)
        # the 10px floor never goes past the top of the range
        return cls(
            initial=initial,
            minimum=min(maximum, max(10, round(initial * 0.5))),
            maximum=maximum,
        )

    def clamp(self, size: float) -> int:
        return int(max(self.minimum, min(self.maximum, round(size))))


# -------------------- Parameters --------------------

@dataclass(frozen=True)
class RenderParameters:
    font_size_multiplier: float = BASELINE_FONT_MULTIPLIER
    text_color: str = "#ffffff"
    ring_color: str = "#2547A9"
    ring_opacity_pct: int = 94
    overlay_mode: bool = False
    caption_enabled: bool = True
    caption_color: str = "#ffffff"
    caption_font_size_px: int = 24
    caption_angle_deg: int = 270
    caption_centered: bool = False
    content_variant: ContentVariant = field(default=ContentVariant.PRIMARY)

    @property
    def ring_opacity(self) -> float:
        return max(0, min(100, self.ring_opacity_pct)) / 100.0

    def with_changes(self, **changes: Any) -> "RenderParameters":
        if "content_variant" in changes:
            changes["content_variant"] = ContentVariant(changes["content_variant"])
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["content_variant"] = self.content_variant.value
        return out
