"""
Rejection sampler that finds free spots for objects on a background.
"""

import logging
import random
from typing import Iterable, Tuple

from .geometry import BoundingBox
from ..errors import TooManyCollisions

logger = logging.getLogger(__name__)

COLLISION_ATTEMPTS = 15


def generate_new_location(bg_dimensions: Tuple[int, int],
                          obj_dimensions: Tuple[int, int],
                          placed_objects: Iterable[BoundingBox],
                          permit_collisions: bool = False,
                          rng=random,
                          attempts: int = COLLISION_ATTEMPTS) -> Tuple[int, int]:
    """
    Pick a top-left coordinate for a new object.

    Coordinates are drawn uniformly over the background. Boxes may extend past
    the right and bottom edges; the compositor clips them.

    Args:
        bg_dimensions: (width, height) of the background
        obj_dimensions: (width, height) of the object as it will be pasted
        placed_objects: Boxes already placed on this background
        permit_collisions: Accept the first draw without checking overlaps
        rng: Random source (``random`` module or a ``random.Random``)
        attempts: Maximum number of candidates when collisions are forbidden

    Returns:
        (x, y) of the new box

    Raises:
        TooManyCollisions: If every candidate overlapped a placed box
    """
    bg_w, bg_h = bg_dimensions
    obj_w, obj_h = obj_dimensions

    if permit_collisions:
        return rng.randrange(bg_w), rng.randrange(bg_h)

    placed = list(placed_objects)
    for attempt in range(attempts):
        x = rng.randrange(bg_w)
        y = rng.randrange(bg_h)
        candidate = BoundingBox(x, y, obj_w, obj_h)

        if all(not box.collides_with(candidate) for box in placed):
            if attempt:
                logger.debug(f"Placed {obj_w}x{obj_h} object after {attempt + 1} attempts")
            return x, y

    raise TooManyCollisions(attempts)
