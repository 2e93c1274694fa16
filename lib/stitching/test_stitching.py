"""
Tests for orientation, compositing and downsampling.
"""
import numpy as np
import pytest

from stitching.domain.models import StitchingConfig, StitchMode, Dimension
from stitching.services import canvas_processor, orientation
from stitching.services.canvas_processor import merge_horizontally, merge_images, merge_vertically
from stitching.services.image_resizer import create_preview_image, create_thumbnail
from stitching.services.orientation import apply_exif_orientation, inverse_orientation
from stitching.services.stitching_service import StitchingService


def make_image(height, width, seed=0, channels=3):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)


@pytest.mark.parametrize("code", [0, 1, 9, -3])
def test_unhandled_orientation_returns_same_object(code):
    img = make_image(4, 6)
    assert apply_exif_orientation(img, code) is img


@pytest.mark.parametrize("code", range(1, 9))
def test_orientation_round_trip_with_inverse(code):
    img = make_image(5, 7, seed=code)
    oriented = apply_exif_orientation(img, code)
    restored = apply_exif_orientation(oriented, inverse_orientation(code))
    assert np.array_equal(restored, img)


def test_rotate_90_is_clockwise():
    img = make_image(2, 3)
    out = apply_exif_orientation(img, orientation.ORIENTATION_ROTATE_90)
    assert out.shape == (3, 2, 3)
    assert np.array_equal(out, np.rot90(img, k=-1))
    # Top-left of the output is the input's bottom-left pixel
    assert np.array_equal(out[0, 0], img[-1, 0])


def test_rotate_270_is_counter_clockwise():
    img = make_image(2, 3)
    out = apply_exif_orientation(img, orientation.ORIENTATION_ROTATE_270)
    assert np.array_equal(out, np.rot90(img, k=1))


def test_flips_and_transposes():
    img = make_image(3, 4)
    assert np.array_equal(apply_exif_orientation(img, 2), img[:, ::-1])
    assert np.array_equal(apply_exif_orientation(img, 3), img[::-1, ::-1])
    assert np.array_equal(apply_exif_orientation(img, 4), img[::-1, :])
    assert np.array_equal(apply_exif_orientation(img, 5), img.transpose(1, 0, 2))
    assert np.array_equal(apply_exif_orientation(img, 7), img.transpose(1, 0, 2)[::-1, ::-1])


def test_orientation_handles_alpha_and_grayscale():
    bgra = make_image(3, 5, channels=4)
    gray = make_image(3, 5)[:, :, 0]
    assert apply_exif_orientation(bgra, 6).shape == (5, 3, 4)
    assert apply_exif_orientation(gray, 8).shape == (5, 3)


def test_orientation_out_of_memory_returns_input(monkeypatch):
    def boom(img):
        raise MemoryError()

    monkeypatch.setitem(orientation._ORIENTATION_TRANSFORMS, 3, boom)
    img = make_image(3, 3)
    assert apply_exif_orientation(img, 3) is img


def test_swaps_dimensions():
    assert orientation.swaps_dimensions(6)
    assert orientation.swaps_dimensions(5)
    assert not orientation.swaps_dimensions(3)
    assert not orientation.swaps_dimensions(0)


def test_vertical_merge_example():
    first = make_image(50, 100, seed=1)
    second = make_image(60, 80, seed=2)
    third = make_image(40, 100, seed=3)

    canvas = merge_vertically([first, second, third])

    assert canvas.shape == (150, 100, 4)
    assert np.array_equal(canvas[0:50, 0:100, :3], first)
    assert np.array_equal(canvas[50:110, 0:80, :3], second)
    assert np.array_equal(canvas[110:150, 0:100, :3], third)
    assert (canvas[0:50, :, 3] == 255).all()
    # Narrower image leaves transparent canvas on its right
    assert not canvas[50:110, 80:100].any()


def test_horizontal_merge_places_images_top_aligned():
    first = make_image(50, 100, seed=1)
    second = make_image(60, 80, seed=2)

    canvas = merge_horizontally([first, second])

    assert canvas.shape == (60, 180, 4)
    assert np.array_equal(canvas[0:50, 0:100, :3], first)
    assert np.array_equal(canvas[0:60, 100:180, :3], second)
    assert not canvas[50:60, 0:100].any()


def test_merge_keeps_alpha_and_expands_grayscale():
    bgra = make_image(10, 10, channels=4)
    gray = make_image(10, 10, seed=5)[:, :, 0]

    canvas = merge_images([bgra, gray], StitchMode.HORIZONTAL)

    assert np.array_equal(canvas[:, 0:10], bgra)
    assert np.array_equal(canvas[:, 10:20, 0], gray)
    assert np.array_equal(canvas[:, 10:20, 2], gray)
    assert (canvas[:, 10:20, 3] == 255).all()


def test_merge_empty_input_returns_none():
    assert merge_vertically([]) is None
    assert merge_horizontally([]) is None


def test_merge_zero_sized_canvas_returns_none():
    empty = np.zeros((0, 5, 3), dtype=np.uint8)
    assert merge_vertically([empty]) is None


def test_merge_allocation_failure_returns_none(monkeypatch):
    def no_memory(*args, **kwargs):
        raise MemoryError()

    monkeypatch.setattr(canvas_processor.np, "full", no_memory)
    assert merge_vertically([make_image(4, 4)]) is None


def test_preview_scales_down_to_bounds():
    img = make_image(400, 800)
    preview = create_preview_image(img, 200, 200)
    assert preview.shape[:2] == (100, 200)


@pytest.mark.parametrize("size,bounds", [
    ((333, 1000), (100, 100)),
    ((1000, 333), (100, 100)),
    ((1234, 567), (300, 400)),
    ((3000, 4000), (1200, 1600)),
])
def test_preview_respects_bounds_and_aspect(size, bounds):
    height, width = size
    img = np.zeros((height, width, 3), dtype=np.uint8)
    preview = create_preview_image(img, *bounds)
    out_h, out_w = preview.shape[:2]
    assert out_w <= bounds[0] and out_h <= bounds[1]
    scale = min(bounds[0] / width, bounds[1] / height)
    assert abs(out_w - width * scale) < 1.0
    assert abs(out_h - height * scale) < 1.0


def test_preview_is_noop_when_image_fits():
    img = make_image(100, 100)
    assert create_preview_image(img, 100, 200) is img
    assert create_thumbnail(img, (128, 128)) is img


def test_preview_rejects_invalid_bounds():
    with pytest.raises(ValueError):
        create_preview_image(make_image(10, 10), 0, 10)


def test_stitching_service_budget_and_stitch():
    service = StitchingService(StitchingConfig(max_total_pixels=1000, preview_max_size=(10, 10)))

    assert service.is_within_pixel_budget([Dimension(10, 100)])
    assert not service.is_within_pixel_budget([Dimension(10, 100), Dimension(1, 1)])

    result = service.stitch([make_image(20, 20), make_image(20, 20)], StitchMode.VERTICAL)
    assert result.shape == (40, 20, 4)
    assert service.create_preview(result).shape[:2] == (10, 5)


def test_stitch_mode_from_name():
    assert StitchMode.from_name("Horizontal") is StitchMode.HORIZONTAL
    with pytest.raises(ValueError):
        StitchMode.from_name("diagonal")
