"""
Alpha compositing of object cutouts onto backgrounds, plus the optional
bounding box and maskover visualizations.

All images are BGRA ``uint8`` arrays as loaded by OpenCV.
"""

import cv2
import numpy as np

from .geometry import BoundingBox

BBOX_COLOR = (0, 255, 0, 255)


def to_bgra(image: np.ndarray) -> np.ndarray:
    """Convert a grayscale, BGR or BGRA image to BGRA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    channels = image.shape[2]
    if channels == 4:
        return image
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    if channels == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    raise ValueError(f"Unsupported number of channels: {channels}")


def rgba_to_bgra(color):
    r, g, b, a = color
    return (b, g, r, a)


def _clip_region(bg_shape, patch_shape, x, y):
    """Intersection of the patch placed at (x, y) with the background, in both coordinate frames."""
    bg_h, bg_w = bg_shape[:2]
    p_h, p_w = patch_shape[:2]

    x_start_bg, y_start_bg = max(x, 0), max(y, 0)
    x_end_bg, y_end_bg = min(x + p_w, bg_w), min(y + p_h, bg_h)
    x_start_patch, y_start_patch = max(0, -x), max(0, -y)
    eff_w, eff_h = x_end_bg - x_start_bg, y_end_bg - y_start_bg

    if eff_w <= 0 or eff_h <= 0:
        return None

    bg_slice = (slice(y_start_bg, y_end_bg), slice(x_start_bg, x_end_bg))
    patch_slice = (slice(y_start_patch, y_start_patch + eff_h), slice(x_start_patch, x_start_patch + eff_w))
    return bg_slice, patch_slice


def overlay(background: np.ndarray, patch: np.ndarray, x: int, y: int) -> np.ndarray:
    """
    Paste a BGRA patch onto a BGRA background in place using "over" blending.

    Fully transparent patch pixels leave the background untouched, partially
    transparent ones are mixed in proportion to their alpha. The patch is
    clipped to the background.

    Returns:
        The background, for chaining
    """
    region = _clip_region(background.shape, patch.shape, x, y)
    if region is None:
        return background
    bg_slice, patch_slice = region

    src = patch[patch_slice].astype(np.float32) / 255.0
    dst = background[bg_slice].astype(np.float32) / 255.0

    src_a = src[:, :, 3:4]
    dst_a = dst[:, :, 3:4]
    out_a = src_a + dst_a * (1.0 - src_a)

    # Pixel = (Object * Alpha) + (Background * BackgroundAlpha * (1 - Alpha)), un-premultiplied
    premultiplied = src[:, :, :3] * src_a + dst[:, :, :3] * dst_a * (1.0 - src_a)
    safe_a = np.where(out_a > 0, out_a, 1.0)
    out_rgb = np.where(out_a > 0, premultiplied / safe_a, 0.0)

    blended = np.concatenate([out_rgb, out_a], axis=2)
    background[bg_slice] = np.clip(np.rint(blended * 255.0), 0, 255).astype(np.uint8)
    return background


def draw_bbox(image: np.ndarray, bbox: BoundingBox, color=BBOX_COLOR) -> np.ndarray:
    """Draw a 1 pixel hollow rectangle on the box's outer pixels, in place."""
    p1 = (bbox.x, bbox.y)
    p2 = (bbox.x + bbox.width - 1, bbox.y + bbox.height - 1)
    cv2.rectangle(image, p1, p2, rgba_to_bgra(color), thickness=1)
    return image


def draw_maskover(image: np.ndarray, bbox: BoundingBox, color) -> np.ndarray:
    """Fill the box with an RGBA color, blended by the color's alpha, in place."""
    solid = np.empty((bbox.height, bbox.width, 4), dtype=np.uint8)
    solid[:] = rgba_to_bgra(color)
    return overlay(image, solid, bbox.x, bbox.y)
