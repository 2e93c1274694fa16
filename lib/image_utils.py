import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def is_valid_image(image_array):
    return isinstance(image_array, np.ndarray) and image_array.ndim >= 2 and image_array.size > 0


def convert_to_8bit_if_needed(image_array):
    if image_array.dtype == np.uint8:
        return image_array
    if image_array.dtype == np.uint16:
        return (image_array // 257).astype(np.uint8)
    if np.issubdtype(image_array.dtype, np.floating):
        return np.clip(image_array * 255.0, 0, 255).astype(np.uint8)
    return np.clip(image_array, 0, 255).astype(np.uint8)


def convert_to_bgra_if_needed(image_array):
    if not is_valid_image(image_array):
        return None  # Explicitly return None for empty or None input

    image_array = np.ascontiguousarray(convert_to_8bit_if_needed(image_array))

    if image_array.ndim == 2:  # Grayscale
        return cv2.cvtColor(image_array, cv2.COLOR_GRAY2BGRA)
    elif image_array.ndim == 3 and image_array.shape[2] == 1:
        return cv2.cvtColor(image_array[:, :, 0], cv2.COLOR_GRAY2BGRA)
    elif image_array.ndim == 3 and image_array.shape[2] == 3:  # BGR
        return cv2.cvtColor(image_array, cv2.COLOR_BGR2BGRA)
    elif image_array.ndim == 3 and image_array.shape[2] == 4:  # BGRA
        return image_array

    logger.warning("Image has unsupported shape %s. Cannot convert to BGRA.", image_array.shape)
    return None


def paste_image_onto_canvas(canvas_array, image_to_paste, top_left_x, top_left_y):
    """Copy image pixels onto a BGRA canvas, clipping at the canvas edges."""
    if image_to_paste is None or image_to_paste.size == 0 or canvas_array is None:
        return

    img_h, img_w = image_to_paste.shape[:2]
    canvas_h, canvas_w = canvas_array.shape[:2]

    y1_canvas, y2_canvas = top_left_y, top_left_y + img_h
    x1_canvas, x2_canvas = top_left_x, top_left_x + img_w

    if x1_canvas >= canvas_w or y1_canvas >= canvas_h or x2_canvas <= 0 or y2_canvas <= 0:
        return

    roi_y1_c = max(0, y1_canvas); roi_y2_c = min(canvas_h, y2_canvas)
    roi_x1_c = max(0, x1_canvas); roi_x2_c = min(canvas_w, x2_canvas)
    src_y1 = max(0, -y1_canvas); src_y2 = src_y1 + (roi_y2_c - roi_y1_c)
    src_x1 = max(0, -x1_canvas); src_x2 = src_x1 + (roi_x2_c - roi_x1_c)

    if roi_y1_c >= roi_y2_c or roi_x1_c >= roi_x2_c:
        return

    img_cropped = convert_to_bgra_if_needed(image_to_paste[src_y1:src_y2, src_x1:src_x2])
    if img_cropped is None:
        return

    canvas_array[roi_y1_c:roi_y2_c, roi_x1_c:roi_x2_c] = img_cropped


def pil_to_numpy(pil_image):
    """PIL image to an OpenCV-ordered array, keeping alpha when present."""
    if pil_image.mode not in ("RGB", "RGBA", "L"):
        has_alpha = "A" in pil_image.getbands() or "transparency" in pil_image.info
        pil_image = pil_image.convert("RGBA" if has_alpha else "RGB")
    array = np.asarray(pil_image)
    if pil_image.mode == "RGBA":
        return cv2.cvtColor(array, cv2.COLOR_RGBA2BGRA)
    if pil_image.mode == "RGB":
        return cv2.cvtColor(array, cv2.COLOR_RGB2BGR)
    return array.copy()


def to_rgb_for_encoding(image_array):
    """Channel order expected by encoders that take RGB(A) input."""
    image_array = np.ascontiguousarray(convert_to_8bit_if_needed(image_array))
    if image_array.ndim == 3 and image_array.shape[2] == 4:
        return cv2.cvtColor(image_array, cv2.COLOR_BGRA2RGBA)
    if image_array.ndim == 3 and image_array.shape[2] == 3:
        return cv2.cvtColor(image_array, cv2.COLOR_BGR2RGB)
    return image_array
