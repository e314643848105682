"""
Unit tests for bounding boxes and scale computations.
"""
import pytest

from targetgen.errors import DegenerateSize
from targetgen.generation.geometry import BoundingBox, new_sizes, resize_ratio


@pytest.mark.unit
class TestBoundingBox:
    """Tests for collision checks between boxes."""

    def test_overlapping_boxes_collide(self):
        a = BoundingBox(0, 0, 50, 50)
        b = BoundingBox(25, 25, 50, 50)

        assert a.collides_with(b)
        assert b.collides_with(a)

    def test_contained_box_collides(self):
        outer = BoundingBox(0, 0, 100, 100)
        inner = BoundingBox(10, 10, 5, 5)

        assert outer.collides_with(inner)
        assert inner.collides_with(outer)

    def test_touching_edges_do_not_collide(self):
        a = BoundingBox(0, 0, 50, 50)

        assert not a.collides_with(BoundingBox(50, 0, 50, 50))
        assert not a.collides_with(BoundingBox(0, 50, 50, 50))

    def test_disjoint_boxes_do_not_collide(self):
        assert not BoundingBox(0, 0, 10, 10).collides_with(BoundingBox(100, 100, 10, 10))

    def test_box_never_collides_with_itself(self):
        box = BoundingBox(5, 5, 20, 20)

        assert not box.collides_with(box)

    def test_equal_but_distinct_boxes_collide(self):
        assert BoundingBox(5, 5, 20, 20).collides_with(BoundingBox(5, 5, 20, 20))

    def test_area_and_list(self):
        box = BoundingBox.from_sequence([1.0, 2.0, 30, 40])

        assert box.area == 1200
        assert box.to_list() == [1, 2, 30, 40]


@pytest.mark.unit
class TestNewSizes:
    """Tests for scaling objects to pixels per meter."""

    def test_resize_ratio(self):
        assert resize_ratio(2.0, 45.0) == pytest.approx(90.0)

    def test_width_follows_real_width(self):
        # 1.73m at 45 ppm is 77.85 pixels
        width, height = new_sizes(200, 100, 45.0, 1.73)

        assert width == 78
        assert height == 39

    def test_upscaling(self):
        assert new_sizes(10, 20, 100.0, 1.0) == (100, 200)

    @pytest.mark.parametrize("native", [(200, 150), (150, 200), (640, 480), (300, 300), (120, 200)])
    @pytest.mark.parametrize("ppm,real_width", [(20.0, 0.5), (45.0, 1.73), (100.0, 3.0)])
    def test_aspect_ratio_is_kept(self, native, ppm, real_width):
        obj_w, obj_h = native
        width, height = new_sizes(obj_w, obj_h, ppm, real_width)

        assert abs(height - width * obj_h / obj_w) <= 0.5 + 1e-6
        assert abs(width / height - obj_w / obj_h) <= 1.0 / min(width, height)

    @pytest.mark.parametrize("real_width", [0.0, 0.001])
    def test_tiny_object_is_degenerate(self, real_width):
        with pytest.raises(DegenerateSize):
            new_sizes(200, 100, 45.0, real_width)

    def test_degenerate_height(self):
        # Very wide object: width survives but height rounds to zero
        with pytest.raises(DegenerateSize):
            new_sizes(1000, 1, 45.0, 1.0)

    @pytest.mark.parametrize("native", [(0, 100), (100, 0), (-5, 10)])
    def test_invalid_native_size(self, native):
        with pytest.raises(DegenerateSize):
            new_sizes(native[0], native[1], 45.0, 1.0)
