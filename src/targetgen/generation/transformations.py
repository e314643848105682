import math
import random
from typing import Tuple

import cv2
import numpy as np

_ROTATIONS = {
    1: cv2.ROTATE_90_CLOCKWISE,
    2: cv2.ROTATE_180,
    3: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def resize_image(image, new_size):
    """Resize an image to an exact (width, height) with interpolation adapted to the scale factor.

    Args:
        image: Image to resize (numpy array)
        new_size: Target (width, height) in pixels

    Returns:
        Resized image of exactly the requested size
    """
    new_width, new_height = new_size
    height, width = image.shape[:2]
    if (width, height) == (new_width, new_height):
        return image.copy()

    scale_factor = max(new_width / width, new_height / height)

    if scale_factor < 1.0:
        # Downscaling: INTER_AREA keeps the most detail
        interpolation = cv2.INTER_AREA
    elif scale_factor < 2.0:
        interpolation = cv2.INTER_CUBIC
    else:
        interpolation = cv2.INTER_LANCZOS4

    return cv2.resize(image, (new_width, new_height), interpolation=interpolation)


def quantize_angle(angle) -> int:
    """Number of clockwise quarter turns closest to an angle in degrees (0-3)."""
    return int(math.floor(angle / 90.0 + 0.5)) % 4


def random_quarter_turns(rng=random) -> int:
    """Draw an angle uniformly from [0, 360) and quantize it to quarter turns."""
    return quantize_angle(rng.uniform(0, 360))


def post_rotate_dimensions(width: int, height: int, quarter_turns: int) -> Tuple[int, int]:
    """Dimensions of a width x height image after the given quarter turns."""
    if quarter_turns % 2 == 1:
        return height, width
    return width, height


def rotate_90s(image: np.ndarray, quarter_turns: int) -> np.ndarray:
    """Rotate clockwise by a multiple of 90 degrees. Zero turns returns the input unchanged."""
    code = _ROTATIONS.get(quarter_turns % 4)
    if code is None:
        return image
    return cv2.rotate(image, code)
