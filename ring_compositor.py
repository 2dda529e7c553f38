from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import skia

from models import CanvasGeometry, SourceBitmap, skia_color


# -------------------- Draw operations --------------------

@dataclass(frozen=True)
class Clear:
    color: int = skia.ColorTRANSPARENT


@dataclass(frozen=True)
class ClipDisc:
    cx: float
    cy: float
    radius: float


@dataclass(frozen=True)
class ReleaseClip:
    pass


@dataclass(frozen=True)
class ImageBlit:
    image: skia.Image
    left: float
    top: float
    right: float
    bottom: float


@dataclass(frozen=True)
class AnnulusFill:
    cx: float
    cy: float
    outer_radius: float
    inner_radius: float
    color: int  # ARGB, alpha already carries the ring opacity


@dataclass(frozen=True)
class DiscMask:
    """Keep only the disc; everything outside it becomes fully transparent."""

    cx: float
    cy: float
    radius: float


DrawOp = Union[Clear, ClipDisc, ReleaseClip, ImageBlit, AnnulusFill, DiscMask]


# -------------------- Geometry helpers --------------------

def cover_fit_rect(width: int, height: int, scale: float, cx: float, cy: float) -> tuple[float, float, float, float]:
    """Centred destination rect, snapped to whole pixels so the blit never rescales."""
    sw = max(1, round(width * scale))
    sh = max(1, round(height * scale))
    left = cx - sw / 2
    top = cy - sh / 2
    return left, top, left + sw, top + sh


def annulus_path(cx: float, cy: float, outer_radius: float, inner_radius: float) -> skia.Path:
    """Ring as one path. The inner circle winds the other way so it is a hole under non-zero fill."""
    path = skia.Path()
    path.addCircle(cx, cy, outer_radius, skia.PathDirection.kCW)
    path.addCircle(cx, cy, inner_radius, skia.PathDirection.kCCW)
    path.setFillType(skia.PathFillType.kWinding)
    return path


def disc_path(cx: float, cy: float, radius: float) -> skia.Path:
    path = skia.Path()
    path.addCircle(cx, cy, radius, skia.PathDirection.kCW)
    return path


# -------------------- Compositing --------------------

def _blit(bitmap: SourceBitmap, rect: tuple[float, float, float, float]) -> ImageBlit:
    left, top, right, bottom = rect
    image = bitmap.resampled(int(round(right - left)), int(round(bottom - top)))
    return ImageBlit(image, left, top, right, bottom)


def composite_ring(
    bitmap: SourceBitmap,
    geometry: CanvasGeometry,
    ring_color: str,
    ring_opacity: float,
    overlay_mode: bool,
) -> list[DrawOp]:
    """Describe photo + ring for one frame, in paint order.

    overlay_mode=False: the photo is cropped to the inner disc and the ring
    sits around it. overlay_mode=True: the photo covers the whole canvas, the
    ring is painted over it and the result is cut down to the outer disc.
    Either way nothing outside the outer circle keeps any alpha.
    """
    c = geometry.center
    alpha = int(round(max(0.0, min(1.0, ring_opacity)) * 255))
    ring = AnnulusFill(c, c, geometry.outer_radius, geometry.inner_radius, skia_color(ring_color, alpha))
    w, h = bitmap.width, bitmap.height

    ops: list[DrawOp] = [Clear()]
    if overlay_mode:
        scale = max(geometry.canvas_size / w, geometry.canvas_size / h)
        ops.append(_blit(bitmap, cover_fit_rect(w, h, scale, c, c)))
        ops.append(ring)
        ops.append(DiscMask(c, c, geometry.outer_radius))
    else:
        scale = (geometry.inner_radius * 2) / min(w, h)
        ops.append(ClipDisc(c, c, geometry.inner_radius))
        ops.append(_blit(bitmap, cover_fit_rect(w, h, scale, c, c)))
        ops.append(ReleaseClip())
        ops.append(ring)
    return ops


def paint_ops(canvas: skia.Canvas, ops: list[DrawOp]) -> None:
    for op in ops:
        if isinstance(op, Clear):
            canvas.clear(op.color)
        elif isinstance(op, ClipDisc):
            canvas.save()
            canvas.clipPath(disc_path(op.cx, op.cy, op.radius), skia.ClipOp.kIntersect, True)
        elif isinstance(op, ReleaseClip):
            canvas.restore()
        elif isinstance(op, ImageBlit):
            rect = skia.Rect.MakeLTRB(op.left, op.top, op.right, op.bottom)
            canvas.drawImageRect(op.image, rect, paint=skia.Paint(AntiAlias=True))
        elif isinstance(op, AnnulusFill):
            paint = skia.Paint(AntiAlias=True, Color=op.color)
            canvas.drawPath(annulus_path(op.cx, op.cy, op.outer_radius, op.inner_radius), paint)
        elif isinstance(op, DiscMask):
            outside = disc_path(op.cx, op.cy, op.radius)
            outside.setFillType(skia.PathFillType.kInverseWinding)
            canvas.drawPath(outside, skia.Paint(AntiAlias=True, BlendMode=skia.BlendMode.kClear))
        else:
            raise TypeError(f"unknown draw op: {op!r}")
