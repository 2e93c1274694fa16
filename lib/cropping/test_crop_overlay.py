"""
Tests for the crop rectangle model, the drag state machine and crop extraction.
"""
import random

import numpy as np
import pytest

from cropping.domain.models import (
    FREE_ASPECT_RATIO,
    AspectRatio,
    AspectRatioKind,
    CropRect,
    DragMode,
    Point,
    Size,
    ViewTransform,
    find_aspect_ratio
)
from cropping.services.crop_overlay import (
    CropOverlay,
    apply_drag,
    classify_drag,
    largest_centered_rect
)
from cropping.services.crop_processor import crop_image

IMAGE = Size(400, 300)


def edges(rect):
    return rect.left, rect.top, rect.right, rect.bottom


def assert_inside(rect, size):
    assert 0 <= rect.left <= rect.right <= size.width
    assert 0 <= rect.top <= rect.bottom <= size.height


def test_classify_drag_corners_interior_and_outside():
    rect = CropRect(100, 100, 300, 200)
    assert classify_drag(Point(105, 95), rect, 20) is DragMode.SCALE_TOP_LEFT
    assert classify_drag(Point(295, 100), rect, 20) is DragMode.SCALE_TOP_RIGHT
    assert classify_drag(Point(100, 210), rect, 20) is DragMode.SCALE_BOTTOM_LEFT
    assert classify_drag(Point(310, 190), rect, 20) is DragMode.SCALE_BOTTOM_RIGHT
    assert classify_drag(Point(200, 150), rect, 20) is DragMode.MOVE
    assert classify_drag(Point(350, 250), rect, 20) is DragMode.NONE


def test_classify_drag_corner_wins_over_interior():
    rect = CropRect(0, 0, 50, 50)
    # Inside the rectangle but also within the threshold of the top-left corner
    assert classify_drag(Point(5, 5), rect, 20) is DragMode.SCALE_TOP_LEFT


def test_move_is_clamped_by_adjusting_the_translation():
    rect = CropRect(50, 50, 150, 100)
    moved = apply_drag(DragMode.MOVE, rect, Point(-80, 500), IMAGE)
    assert moved == CropRect(0, 250, 100, 300)


def test_move_never_leaves_image_and_keeps_size():
    rng = random.Random(1234)
    for _ in range(500):
        left = rng.uniform(0, IMAGE.width - 1)
        top = rng.uniform(0, IMAGE.height - 1)
        rect = CropRect(left, top,
                        rng.uniform(left + 1, IMAGE.width),
                        rng.uniform(top + 1, IMAGE.height))
        delta = Point(rng.uniform(-1000, 1000), rng.uniform(-1000, 1000))

        moved = apply_drag(DragMode.MOVE, rect, delta, IMAGE)

        assert_inside(moved, IMAGE)
        assert moved.width == pytest.approx(rect.width)
        assert moved.height == pytest.approx(rect.height)


def test_free_scale_moves_only_adjacent_edges():
    rect = CropRect(100, 100, 300, 200)
    delta = Point(10, -20)
    assert apply_drag(DragMode.SCALE_TOP_LEFT, rect, delta, IMAGE) == CropRect(110, 80, 300, 200)
    assert apply_drag(DragMode.SCALE_TOP_RIGHT, rect, delta, IMAGE) == CropRect(100, 80, 310, 200)
    assert apply_drag(DragMode.SCALE_BOTTOM_LEFT, rect, delta, IMAGE) == CropRect(110, 100, 300, 180)
    assert apply_drag(DragMode.SCALE_BOTTOM_RIGHT, rect, delta, IMAGE) == CropRect(100, 100, 310, 180)


def test_free_scale_is_clamped_and_normalized():
    rect = CropRect(100, 100, 300, 200)
    dragged_past = apply_drag(DragMode.SCALE_TOP_LEFT, rect, Point(250, 0), IMAGE)
    assert dragged_past == CropRect(300, 100, 350, 200)

    dragged_out = apply_drag(DragMode.SCALE_BOTTOM_RIGHT, rect, Point(500, 500), IMAGE)
    assert dragged_out == CropRect(100, 100, 400, 300)


@pytest.mark.parametrize("mode", [
    DragMode.SCALE_TOP_LEFT,
    DragMode.SCALE_TOP_RIGHT,
    DragMode.SCALE_BOTTOM_LEFT,
    DragMode.SCALE_BOTTOM_RIGHT,
])
@pytest.mark.parametrize("dx", [-30.0, -5.5, 12.25, 40.0])
def test_locked_scale_preserves_ratio(mode, dx):
    ratio = 4.0 / 3.0
    rect = CropRect(100, 100, 260, 220)  # 160 x 120

    scaled = apply_drag(mode, rect, Point(dx, 999), IMAGE, ratio)

    assert scaled.width / scaled.height == pytest.approx(ratio)


def test_locked_scale_keeps_opposite_corner_fixed():
    ratio = 2.0
    rect = CropRect(100, 100, 200, 150)

    bottom_right = apply_drag(DragMode.SCALE_BOTTOM_RIGHT, rect, Point(20, 0), IMAGE, ratio)
    assert bottom_right == CropRect(100, 100, 220, 160)

    top_left = apply_drag(DragMode.SCALE_TOP_LEFT, rect, Point(-20, 0), IMAGE, ratio)
    assert top_left == CropRect(80, 90, 200, 150)

    top_right = apply_drag(DragMode.SCALE_TOP_RIGHT, rect, Point(20, 0), IMAGE, ratio)
    assert top_right == CropRect(100, 90, 220, 150)

    bottom_left = apply_drag(DragMode.SCALE_BOTTOM_LEFT, rect, Point(-20, 0), IMAGE, ratio)
    assert bottom_left == CropRect(80, 100, 200, 160)


def test_scale_edits_stay_inside_image():
    rng = random.Random(99)
    modes = [m for m in DragMode if m.is_scale]
    for _ in range(300):
        rect = CropRect(100, 75, 300, 225)
        delta = Point(rng.uniform(-800, 800), rng.uniform(-800, 800))
        ratio = rng.choice([None, 1.0, 0.75, 1.6])
        edited = apply_drag(rng.choice(modes), rect, delta, IMAGE, ratio)
        assert_inside(edited, IMAGE)


def test_none_mode_is_a_noop():
    rect = CropRect(1, 2, 3, 4)
    assert apply_drag(DragMode.NONE, rect, Point(50, 50), IMAGE) is rect


def test_largest_centered_rect():
    assert largest_centered_rect(Size(400, 200), 1.0) == CropRect(100, 0, 300, 200)
    assert largest_centered_rect(Size(200, 400), 2.0) == CropRect(0, 150, 200, 250)
    assert largest_centered_rect(Size(400, 200), None) == CropRect(0, 0, 400, 200)


def test_view_transform_fit_and_mapping():
    view = ViewTransform.fit(Size(1000, 600), Size(400, 300))
    assert view.scale == pytest.approx(2.0)
    assert (view.offset_x, view.offset_y) == (100.0, 0.0)
    assert view.to_image(Point(500, 300)) == Point(200, 150)
    assert view.to_screen(Point(200, 150)) == Point(500, 300)
    assert view.delta_to_image(Point(40, -20)) == Point(20, -10)

    with pytest.raises(ValueError):
        ViewTransform.fit(Size(0, 600), Size(400, 300))


def test_aspect_ratio_resolution():
    image = Size(400, 300)
    viewport = Size(1000, 600)
    assert FREE_ASPECT_RATIO.resolve(image, viewport) is None
    assert find_aspect_ratio("3:4").resolve(image, viewport) == pytest.approx(0.75)
    assert find_aspect_ratio("Original").resolve(image, viewport) == pytest.approx(4 / 3)
    assert find_aspect_ratio("Full").resolve(image, viewport) == pytest.approx(5 / 3)
    assert find_aspect_ratio("Full").resolve(image, None) is None

    with pytest.raises(ValueError):
        AspectRatio("broken", AspectRatioKind.FIXED, None)
    with pytest.raises(KeyError):
        find_aspect_ratio("16:9")


def make_overlay():
    overlay = CropOverlay(corner_threshold=48.0)
    overlay.set_viewport(1000, 600)
    overlay.set_image(400, 300)
    return overlay


def test_overlay_resets_rect_when_ratio_changes():
    overlay = make_overlay()
    assert overlay.crop_rect.value == CropRect(0, 0, 400, 300)

    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))
    assert overlay.crop_rect.value == CropRect(50, 0, 350, 300)

    overlay.set_aspect_ratio(find_aspect_ratio("Full"))
    assert edges(overlay.crop_rect.value) == pytest.approx((0, 30, 400, 270))


def test_overlay_move_gesture():
    overlay = make_overlay()
    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))

    assert overlay.drag_start(Point(500, 300)) is DragMode.MOVE
    assert overlay.is_dragging
    assert overlay.drag(Point(40, 0)) == CropRect(70, 0, 370, 300)
    assert overlay.drag(Point(200, 0)) == CropRect(100, 0, 400, 300)
    overlay.drag_end()

    assert not overlay.is_dragging
    assert overlay.drag(Point(-100, 0)) == CropRect(100, 0, 400, 300)


def test_overlay_corner_gesture_with_locked_ratio():
    overlay = make_overlay()
    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))
    screen_corner = overlay.view_transform.to_screen(overlay.crop_rect.value.bottom_right)

    assert overlay.drag_start(screen_corner) is DragMode.SCALE_BOTTOM_RIGHT
    updated = overlay.drag(Point(-100, 0))

    assert updated == CropRect(50, 0, 300, 250)
    assert updated.width == pytest.approx(updated.height)


def test_overlay_ignores_repeated_unchanged_settings():
    overlay = make_overlay()
    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))
    overlay.drag_start(Point(500, 300))
    overlay.drag(Point(40, 0))

    overlay.set_viewport(1000, 600)
    overlay.set_image(400, 300)
    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))

    assert overlay.crop_rect.value == CropRect(70, 0, 370, 300)
    assert overlay.is_dragging

    overlay.set_viewport(800, 600)
    assert overlay.crop_rect.value == CropRect(50, 0, 350, 300)
    assert not overlay.is_dragging


def test_overlay_screen_rect():
    overlay = make_overlay()
    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))
    assert overlay.screen_rect() == CropRect(200, 0, 800, 600)
    assert CropOverlay().screen_rect() is None


def test_overlay_without_image_ignores_gestures():
    overlay = CropOverlay()
    overlay.set_viewport(100, 100)
    assert overlay.crop_rect.value is None
    assert overlay.drag_start(Point(50, 50)) is DragMode.NONE
    assert overlay.drag(Point(10, 10)) is None


def test_overlay_publishes_rect_changes():
    overlay = make_overlay()
    seen = []
    overlay.crop_rect.subscribe(seen.append)

    overlay.drag_start(Point(500, 300))
    overlay.set_aspect_ratio(find_aspect_ratio("1:1"))

    assert not overlay.is_dragging
    assert seen == [CropRect(50, 0, 350, 300)]


def test_crop_image_truncates_and_clips():
    image = np.arange(10 * 20 * 3, dtype=np.uint8).reshape(10, 20, 3)

    cropped = crop_image(image, CropRect(2.9, 1.2, 8.7, 30.0))

    assert cropped.shape == (9, 6, 3)
    assert np.array_equal(cropped, image[1:10, 2:8])
    assert not np.shares_memory(cropped, image)


def test_crop_image_empty_region_returns_none():
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    assert crop_image(image, CropRect(5, 5, 5.5, 9)) is None
    assert crop_image(image, CropRect(20, 20, 30, 30)) is None
