from __future__ import annotations

import json
import math
import os
from pathlib import Path
from typing import Any, Callable, Optional

import skia

from env import load_env

# config constants are read at import, so .env has to be in place first
load_env()

from arc_text import Orientation, draw_arc_text, draw_centered_string, heavy_font, layout_arc  # noqa: E402
from config import CAPTION_ALTERNATE, CAPTION_PRIMARY, SLOGAN_TEXT  # noqa: E402
from errors import CompositeFailure  # noqa: E402
from export import ExportResult, export_surface, request_export  # noqa: E402
from models import CanvasGeometry, CaptionSizeRange, ContentVariant, RenderParameters, SourceBitmap, skia_color  # noqa: E402
from ring_compositor import composite_ring, paint_ops  # noqa: E402

WHITE = "#ffffff"


# -------------------- Text helpers --------------------

def split_slogan(text: str) -> tuple[str, str]:
    """Split on words; the front half gets the extra word when the count is odd."""
    words = text.split(" ")
    mid = math.ceil(len(words) / 2)
    return " ".join(words[:mid]), " ".join(words[mid:])


def caption_text(variant: ContentVariant) -> str:
    return CAPTION_ALTERNATE if ContentVariant(variant) is ContentVariant.ALTERNATE else CAPTION_PRIMARY


def caption_angle(degrees: float) -> float:
    """Slider degrees -> canvas radians. 90 is upright / 3 o'clock on the rim."""
    return (degrees - 90) * math.pi / 180


def caption_radius(geometry: CanvasGeometry, font_size: float) -> float:
    # keep clear of the ring, more so for bigger type, but never past the inner half of the disc
    radius = geometry.inner_radius - geometry.ring_width * 0.25 - font_size * 0.5
    return max(radius, geometry.inner_radius * 0.5)


def text_paints(color: str, stroke_width: float) -> tuple[skia.Paint, skia.Paint]:
    """(fill, outline). White text gets a black outline, anything else a white one."""
    outline = "#000000" if color.lower() == WHITE else WHITE
    fill = skia.Paint(AntiAlias=True, Color=skia_color(color))
    stroke = skia.Paint(
        AntiAlias=True,
        Color=skia_color(outline),
        Style=skia.Paint.kStroke_Style,
        StrokeWidth=stroke_width,
        StrokeCap=skia.Paint.kRound_Cap,
        StrokeJoin=skia.Paint.kRound_Join,
    )
    return fill, stroke


# -------------------- Layers --------------------

def draw_slogan(canvas: skia.Canvas, geometry: CanvasGeometry, params: RenderParameters, text: str = SLOGAN_TEXT) -> None:
    front, back = split_slogan(text)
    if not front and not back:
        return

    size = geometry.primary_font_size(params.font_size_multiplier)
    font = heavy_font(size)
    fill, stroke = text_paints(params.text_color, max(2.0, size / 20))
    c = geometry.center
    r = geometry.text_radius

    if front:
        layout = layout_arc(front, c, c, r, 0.0, size, Orientation.OUTWARD, font.measureText)
        draw_arc_text(canvas, layout, font, fill, stroke)
    if back:
        layout = layout_arc(back, c, c, r, math.pi, size, Orientation.INWARD, font.measureText)
        draw_arc_text(canvas, layout, font, fill, stroke)


def draw_caption(
    canvas: skia.Canvas,
    geometry: CanvasGeometry,
    params: RenderParameters,
    caption_range: CaptionSizeRange,
) -> None:
    size = caption_range.clamp(params.caption_font_size_px)
    text = caption_text(params.content_variant)
    angle = caption_angle(params.caption_angle_deg)
    font = heavy_font(size)
    fill, stroke = text_paints(params.caption_color, max(2.0, size / 6))
    c = geometry.center

    if params.caption_centered:
        canvas.save()
        canvas.translate(c, c)
        canvas.rotate(math.degrees(angle))
        draw_centered_string(canvas, text, 0, 0, font, fill, stroke)
        canvas.restore()
        return

    radius = caption_radius(geometry, size)
    layout = layout_arc(text, c, c, radius, angle, size, Orientation.INWARD, font.measureText)
    draw_arc_text(canvas, layout, font, fill, stroke)


def render(
    bitmap: SourceBitmap,
    params: RenderParameters,
    geometry: Optional[CanvasGeometry] = None,
    caption_range: Optional[CaptionSizeRange] = None,
) -> skia.Surface:
    """Render one complete frame onto a fresh transparent surface."""
    geometry = geometry or CanvasGeometry.for_bitmap(bitmap)
    caption_range = caption_range or CaptionSizeRange.for_geometry(geometry)

    size = geometry.pixel_size
    surface = skia.Surface(size, size)
    canvas = surface.getCanvas()

    paint_ops(canvas, composite_ring(bitmap, geometry, params.ring_color, params.ring_opacity, params.overlay_mode))
    draw_slogan(canvas, geometry, params)
    if params.caption_enabled:
        draw_caption(canvas, geometry, params, caption_range)
    return surface


# -------------------- Editing session --------------------

class FrameEditor:
    """Holds the current photo and parameters; re-renders on every change.

    Two states: empty (no photo, renders are no-ops) and loaded.
    """

    def __init__(self, log: Optional[Callable[[str], None]] = None):
        self.bitmap: Optional[SourceBitmap] = None
        self.params = RenderParameters()
        self.geometry: Optional[CanvasGeometry] = None
        self.caption_range: Optional[CaptionSizeRange] = None
        self.surface: Optional[skia.Surface] = None
        self._log = log

    @property
    def loaded(self) -> bool:
        return self.bitmap is not None

    def load(self, bitmap: SourceBitmap) -> skia.Surface:
        self.bitmap = bitmap
        self.geometry = CanvasGeometry.for_bitmap(bitmap)
        self.caption_range = CaptionSizeRange.for_geometry(self.geometry, self.params.font_size_multiplier)
        self.params = self.params.with_changes(caption_font_size_px=self.caption_range.initial)
        if self._log:
            self._log(
                f"Loaded {bitmap.width}x{bitmap.height} photo -> {self.geometry.pixel_size}px canvas "
                f"(caption {self.caption_range.minimum}-{self.caption_range.maximum}px)"
            )
        return self.render()

    def update(self, **changes: Any) -> Optional[skia.Surface]:
        # Toggling centre mode snaps the caption to upright (90) or bottom of the rim (270)
        if "caption_centered" in changes and "caption_angle_deg" not in changes:
            changes["caption_angle_deg"] = 90 if changes["caption_centered"] else 270
        self.params = self.params.with_changes(**changes)
        return self.render()

    def render(self) -> Optional[skia.Surface]:
        if self.bitmap is None:
            return None
        self.surface = render(self.bitmap, self.params, self.geometry, self.caption_range)
        return self.surface

    def reset(self) -> None:
        self.bitmap = None
        self.geometry = None
        self.caption_range = None
        self.params = RenderParameters()
        if self.surface is not None:
            self.surface.getCanvas().clear(skia.ColorTRANSPARENT)
        if self._log:
            self._log("Editor reset")

    def export(self) -> ExportResult:
        if self.surface is None or self.bitmap is None:
            raise CompositeFailure("nothing rendered yet")
        return export_surface(self.surface)

    def request_export(self, on_done: Callable[[Optional[ExportResult], Optional[Exception]], None]):
        if self.surface is None or self.bitmap is None:
            raise CompositeFailure("nothing rendered yet")
        return request_export(self.surface, on_done)


def main():
    from bitmap import load_path

    cfg_path = os.environ.get("PROFILE_RING_CONFIG")
    if not cfg_path or not os.path.exists(cfg_path):
        raise SystemExit("Set PROFILE_RING_CONFIG to a JSON file with 'photo', 'output_dir' and optional 'params'")

    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = json.load(f)

    out_dir = Path(cfg["output_dir"])
    out_dir.mkdir(parents=True, exist_ok=True)

    editor = FrameEditor(log=print)
    editor.load(load_path(cfg["photo"]))
    overrides = cfg.get("params") or {}
    if overrides:
        editor.update(**overrides)

    result = editor.export()
    out_path = out_dir / result.filename
    out_path.write_bytes(result.data)
    print(out_path)


if __name__ == "__main__":
    main()
