"""Curved text: place single glyphs along a circular arc.

Angles are radians in canvas space (y grows downward), measured clockwise
from 12 o'clock, which is the frame ``canvas.rotate`` produces. A glyph at
angle ``a`` is drawn by translating to the arc centre, rotating by ``a`` and
then stepping ``radius`` towards the rim.

The angular width of each glyph is its straight-line advance (plus letter
spacing) divided by the radius. This is an arc-length approximation, not an
iso-width circular layout: long strings on small radii come out slightly
under-curved, and that is accepted.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, Optional

import skia

from config import FONT_FAMILIES
from errors import GeometryError

LETTER_SPACING_RATIO = 0.15
HEAVY_WEIGHT = 900


class Orientation(Enum):
    OUTWARD = "outward"  # glyph tops face the rim
    INWARD = "inward"  # glyph tops face the centre, reading order preserved


@dataclass(frozen=True)
class GlyphPlacement:
    char: str
    angle: float  # centre of this glyph's slot
    sweep: float  # angular width of the slot
    offset: float  # applied along the rotated y axis: -radius outward, +radius inward
    mirrored: bool

    @property
    def rotation(self) -> float:
        return self.angle + math.pi if self.mirrored else self.angle

    def position(self, center_x: float, center_y: float) -> tuple[float, float]:
        """Canvas coordinates of the glyph anchor."""
        r = self.rotation
        return center_x - self.offset * math.sin(r), center_y + self.offset * math.cos(r)


@dataclass(frozen=True)
class ArcLayout:
    glyphs: tuple[GlyphPlacement, ...]
    center_x: float
    center_y: float
    radius: float
    total_angle: float
    letter_spacing: float

    def __len__(self) -> int:
        return len(self.glyphs)

    def __iter__(self):
        return iter(self.glyphs)


# -------------------- Fonts --------------------

@lru_cache(maxsize=1)
def heavy_typeface() -> skia.Typeface:
    """Black-weight sans serif from the first installed family in FONT_FAMILIES."""
    fm = skia.FontMgr.RefDefault()
    style = skia.FontStyle(HEAVY_WEIGHT, 5, skia.FontStyle.Slant.kUpright_Slant)
    for name in FONT_FAMILIES:
        tf = fm.matchFamilyStyle(name, style)
        if tf is not None:
            return tf
    return skia.Typeface.MakeDefault()


def heavy_font(size: float) -> skia.Font:
    font = skia.Font(heavy_typeface(), size)
    font.setEdging(skia.Font.Edging.kAntiAlias)
    return font


# -------------------- Layout --------------------

def layout_arc(
    text: str,
    center_x: float,
    center_y: float,
    radius: float,
    start_angle: float,
    font_size: float,
    orientation: Orientation = Orientation.OUTWARD,
    measure: Optional[Callable[[str], float]] = None,
) -> ArcLayout:
    """Lay ``text`` out along a circle, centred on ``start_angle``.

    Each glyph gets a slot ``(advance + spacing) / radius`` wide and sits at
    the middle of its slot. Inward text is laid out reversed so it still
    reads left to right once every glyph is turned 180 degrees.

    ``measure`` returns the advance width of one character; it defaults to
    the heavy sans font at ``font_size``.
    """
    if radius <= 0:
        raise GeometryError(f"arc radius must be positive, got {radius!r}")
    if font_size <= 0:
        raise GeometryError(f"font size must be positive, got {font_size!r}")

    if measure is None:
        measure = heavy_font(font_size).measureText

    inward = orientation is Orientation.INWARD
    display = text[::-1] if inward else text
    spacing = font_size * LETTER_SPACING_RATIO
    offset = radius if inward else -radius

    sweeps = [(measure(ch) + spacing) / radius for ch in display]
    total = sum(sweeps)

    angle = start_angle - total / 2
    glyphs = []
    for ch, sweep in zip(display, sweeps):
        glyphs.append(GlyphPlacement(ch, angle + sweep / 2, sweep, offset, inward))
        angle += sweep

    return ArcLayout(tuple(glyphs), center_x, center_y, radius, total, spacing)


# -------------------- Drawing --------------------

def draw_centered_string(
    canvas: skia.Canvas,
    text: str,
    x: float,
    y: float,
    font: skia.Font,
    fill: skia.Paint,
    stroke: skia.Paint | None = None,
) -> None:
    """Draw ``text`` horizontally centred on x with its em box vertically centred on y."""
    if not text:
        return
    m = font.getMetrics()
    left = x - font.measureText(text) / 2
    baseline = y - (m.fAscent + m.fDescent) / 2
    if stroke is not None:
        canvas.drawString(text, left, baseline, font, stroke)
    canvas.drawString(text, left, baseline, font, fill)


def draw_arc_text(
    canvas: skia.Canvas,
    layout: ArcLayout,
    font: skia.Font,
    fill: skia.Paint,
    stroke: skia.Paint | None = None,
) -> None:
    """Paint a layout glyph by glyph, outline first."""
    for g in layout.glyphs:
        canvas.save()
        canvas.translate(layout.center_x, layout.center_y)
        canvas.rotate(math.degrees(g.rotation))
        canvas.translate(0, g.offset)
        draw_centered_string(canvas, g.char, 0, 0, font, fill, stroke)
        canvas.restore()
