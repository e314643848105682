"""
Generation module: geometry, placement, resizing, rotation and compositing
of objects on backgrounds.

The orchestrator lives in ``targetgen.generation.target_generator``.
"""

from .geometry import BoundingBox, new_sizes, resize_ratio
from .placement import COLLISION_ATTEMPTS, generate_new_location
from .resize_cache import ResizeCache
from .transformations import (resize_image, rotate_90s, quantize_angle,
                              random_quarter_turns, post_rotate_dimensions)
from .compositor import overlay, draw_bbox, draw_maskover, to_bgra

__all__ = [
    'BoundingBox',
    'new_sizes',
    'resize_ratio',
    'COLLISION_ATTEMPTS',
    'generate_new_location',
    'ResizeCache',
    'resize_image',
    'rotate_90s',
    'quantize_angle',
    'random_quarter_turns',
    'post_rotate_dimensions',
    'overlay',
    'draw_bbox',
    'draw_maskover',
    'to_bgra'
]
