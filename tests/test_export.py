import io
import re
from unittest import mock

import pytest
import skia
from PIL import Image

from errors import CompositeFailure
from export import encode_png, export_filename, export_surface, request_export, surface_pixels


def test_filename_pattern():
    assert re.fullmatch(r"photo-overlay-\d+\.png", export_filename())


def test_filenames_never_collide():
    names = [export_filename(now_ms=10**12) for _ in range(3)]
    assert len(set(names)) == 3
    stamps = [int(n.rsplit("-", 1)[1][:-4]) for n in names]
    assert stamps == sorted(stamps)


def test_encode_failure_is_a_composite_failure():
    image = mock.MagicMock()
    image.encodeToData.return_value = None
    with pytest.raises(CompositeFailure):
        encode_png(image)


def test_export_surface_is_png():
    surface = skia.Surface(8, 8)
    surface.getCanvas().clear(skia.ColorRED)
    result = export_surface(surface)
    assert result.data.startswith(b"\x89PNG\r\n\x1a\n")


def test_async_export_uses_a_snapshot():
    surface = skia.Surface(4, 4)
    surface.getCanvas().clear(skia.ColorRED)
    done = []
    worker = request_export(surface, lambda result, err: done.append((result, err)))
    surface.getCanvas().clear(skia.ColorTRANSPARENT)
    worker.join(timeout=10)

    result, err = done[0]
    assert err is None
    with Image.open(io.BytesIO(result.data)) as img:
        assert img.convert("RGBA").getpixel((0, 0)) == (255, 0, 0, 255)


def test_async_export_reports_failures(monkeypatch):
    import export

    def boom(image):
        raise CompositeFailure("no encoder")

    monkeypatch.setattr(export, "encode_png", boom)
    done = []
    request_export(skia.Surface(2, 2), lambda result, err: done.append((result, err))).join(timeout=10)
    result, err = done[0]
    assert result is None
    assert isinstance(err, CompositeFailure)


def test_surface_pixels_shape():
    surface = skia.Surface(5, 3)
    surface.getCanvas().clear(skia.ColorSetARGB(255, 1, 2, 3))
    px = surface_pixels(surface)
    assert px.shape == (3, 5, 4)
    assert tuple(px[1, 1]) == (1, 2, 3, 255)


def test_async_export_reports_unexpected_errors(monkeypatch):
    import export

    def boom(image):
        raise MemoryError("out of memory")

    monkeypatch.setattr(export, "encode_png", boom)
    done = []
    request_export(skia.Surface(2, 2), lambda result, err: done.append((result, err))).join(timeout=10)
    assert len(done) == 1
    result, err = done[0]
    assert result is None
    assert isinstance(err, MemoryError)
