from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
import skia

from config import EXPORT_PREFIX
from errors import CompositeFailure

_name_lock = threading.Lock()
_last_ms = 0


@dataclass(frozen=True)
class ExportResult:
    filename: str
    data: bytes


def export_filename(now_ms: Optional[int] = None) -> str:
    """<prefix>-<epoch-ms>.png, strictly increasing within this process."""
    global _last_ms
    ms = int(time.time() * 1000) if now_ms is None else int(now_ms)
    with _name_lock:
        if ms <= _last_ms:
            ms = _last_ms + 1
        _last_ms = ms
    return f"{EXPORT_PREFIX}-{ms}.png"


def encode_png(image: skia.Image) -> bytes:
    data = image.encodeToData(skia.EncodedImageFormat.kPNG, 100)
    if data is None or len(bytes(data)) == 0:
        raise CompositeFailure("surface could not be encoded as PNG")
    return bytes(data)


def export_surface(surface: skia.Surface) -> ExportResult:
    return ExportResult(export_filename(), encode_png(surface.makeImageSnapshot()))


def request_export(
    surface: skia.Surface,
    on_done: Callable[[Optional[ExportResult], Optional[Exception]], None],
) -> threading.Thread:
    """Encode in the background. The snapshot is taken now, so later renders do not leak in."""
    snapshot = surface.makeImageSnapshot()
    filename = export_filename()

    def _worker():
        try:
            result = ExportResult(filename, encode_png(snapshot))
        except Exception as e:
            on_done(None, e)
            return
        on_done(result, None)

    t = threading.Thread(target=_worker, daemon=True)
    t.start()
    return t


def surface_pixels(surface: skia.Surface) -> np.ndarray:
    """(H, W, 4) uint8 RGBA, un-premultiplied."""
    img = surface.makeImageSnapshot()
    arr = img.toarray(
        colorType=skia.ColorType.kRGBA_8888_ColorType,
        alphaType=skia.AlphaType.kUnpremul_AlphaType,
    )
    return np.asarray(arr, dtype=np.uint8)
