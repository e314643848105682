"""
Bounding boxes and scale computations for placed objects.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..errors import DegenerateSize


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in pixels: [x, y, width, height], (0, 0) is the top left corner."""
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> 'BoundingBox':
        x, y, w, h = values
        return cls(int(x), int(y), int(w), int(h))

    @property
    def area(self) -> int:
        return self.width * self.height

    def collides_with(self, other: 'BoundingBox') -> bool:
        """
        Whether both rectangles overlap with positive area.

        Touching edges do not count. A box never collides with itself.
        """
        if other is self:
            return False
        return (self.x < other.x + other.width and self.x + self.width > other.x and
                self.y < other.y + other.height and self.y + self.height > other.y)

    def to_list(self) -> List[int]:
        return [self.x, self.y, self.width, self.height]


def resize_ratio(object_real_size: float, pixels_per_meter: float) -> float:
    """Size in pixels an object of the given real size needs to be at scale."""
    return object_real_size * pixels_per_meter


def new_sizes(object_width: int, object_height: int,
              pixels_per_meter: float, real_width: float) -> Tuple[int, int]:
    """
    Calculate the pixel size of an object at the requested scale.

    The width follows from the real width and the pixels per meter value,
    the height from that width and the object's native aspect ratio.

    Args:
        object_width: Native width of the cutout in pixels
        object_height: Native height of the cutout in pixels
        pixels_per_meter: Scale factor
        real_width: Real-world width of the object in meters

    Returns:
        (width, height) in pixels

    Raises:
        DegenerateSize: If either dimension would be zero or negative
    """
    if object_width <= 0 or object_height <= 0:
        raise DegenerateSize(object_width, object_height)

    aspect_ratio = object_width / object_height
    new_width = int(round(resize_ratio(real_width, pixels_per_meter)))
    new_height = int(round(new_width / aspect_ratio))

    if new_width <= 0 or new_height <= 0:
        raise DegenerateSize(new_width, new_height)

    return new_width, new_height
