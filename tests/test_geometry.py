"""Tests for geometry module."""
import pytest

from room_extraction.geometry import (
    BoundingBox,
    Point3D,
    Vector3D,
    UP,
    segments_intersect_2d,
)


class TestVector3D:

    def test_arithmetic(self):
        a = Vector3D(1.0, 2.0, 3.0)
        b = Vector3D(0.5, -1.0, 2.0)
        assert a + b == Vector3D(1.5, 1.0, 5.0)
        assert a - b == Vector3D(0.5, 3.0, 1.0)
        assert a * 2 == Vector3D(2.0, 4.0, 6.0)
        assert 2 * a == a * 2
        assert -a == Vector3D(-1.0, -2.0, -3.0)

    def test_magnitude_and_normalized(self):
        v = Vector3D(3.0, 4.0, 0.0)
        assert v.magnitude == pytest.approx(5.0)
        assert v.normalized().magnitude == pytest.approx(1.0)

    def test_zero_vector_normalized_unchanged(self):
        zero = Vector3D(0.0, 0.0, 0.0)
        assert zero.normalized() == zero

    def test_dot_and_cross(self):
        x = Vector3D(1.0, 0.0, 0.0)
        y = Vector3D(0.0, 1.0, 0.0)
        assert x.dot(y) == 0.0
        assert x.cross(y) == UP


class TestPoint3D:

    def test_point_difference_is_vector(self):
        d = Point3D(4.0, 6.0, 1.0) - Point3D(1.0, 2.0, 1.0)
        assert isinstance(d, Vector3D)
        assert d.magnitude == pytest.approx(5.0)

    def test_point_minus_vector_is_point(self):
        p = Point3D(1.0, 1.0, 1.0) - Vector3D(1.0, 0.0, 0.0)
        assert isinstance(p, Point3D)
        assert p == Point3D(0.0, 1.0, 1.0)

    def test_distance_and_midpoint(self):
        a = Point3D(0.0, 0.0, 0.0)
        b = Point3D(2.0, 2.0, 1.0)
        assert a.distance(b) == pytest.approx(3.0)
        assert a.midpoint(b) == Point3D(1.0, 1.0, 0.5)


class TestBoundingBox:

    def test_corners_are_resorted(self):
        box = BoundingBox(Point3D(2.0, 0.0, 3.0), Point3D(0.0, 1.0, 1.0))
        assert box.min == Point3D(0.0, 0.0, 1.0)
        assert box.max == Point3D(2.0, 1.0, 3.0)

    def test_size_center_volume(self, room_bounds):
        assert room_bounds.size == Vector3D(6.0, 5.0, 2.5)
        assert room_bounds.center == Point3D(3.0, 2.5, 1.25)
        assert room_bounds.volume == pytest.approx(75.0)
        assert room_bounds.footprint_area == pytest.approx(30.0)

    def test_centered(self):
        box = BoundingBox.centered(Point3D(1.0, 1.0, 1.0), Vector3D(2.0, 2.0, 2.0))
        assert box.min == Point3D(0.0, 0.0, 0.0)
        assert box.max == Point3D(2.0, 2.0, 2.0)

    def test_from_points(self):
        box = BoundingBox.from_points([Point3D(1, 5, 0), Point3D(-1, 2, 3), Point3D(0, 0, 1)])
        assert box.min == Point3D(-1.0, 0.0, 0.0)
        assert box.max == Point3D(1.0, 5.0, 3.0)

    def test_from_points_empty_raises(self):
        with pytest.raises(ValueError):
            BoundingBox.from_points([])

    def test_contains_and_intersects(self, room_bounds):
        assert room_bounds.contains(Point3D(1.0, 1.0, 1.0))
        assert not room_bounds.contains(Point3D(7.0, 1.0, 1.0))

        inside = BoundingBox(Point3D(1, 1, 0), Point3D(2, 2, 1))
        outside = BoundingBox(Point3D(10, 10, 0), Point3D(11, 11, 1))
        assert room_bounds.intersects(inside)
        assert not room_bounds.intersects(outside)

    def test_overlap_volume(self):
        a = BoundingBox(Point3D(0, 0, 0), Point3D(2, 2, 2))
        b = BoundingBox(Point3D(1, 1, 1), Point3D(3, 3, 3))
        touching = BoundingBox(Point3D(2, 0, 0), Point3D(3, 2, 2))
        assert a.overlap_volume(b) == pytest.approx(1.0)
        assert a.overlap_volume(touching) == 0.0

    def test_union(self):
        a = BoundingBox(Point3D(0, 0, 0), Point3D(1, 1, 1))
        b = BoundingBox(Point3D(2, -1, 0), Point3D(3, 0, 4))
        u = a.union(b)
        assert u.min == Point3D(0.0, -1.0, 0.0)
        assert u.max == Point3D(3.0, 1.0, 4.0)

    def test_exceeds(self, room_bounds):
        long_box = BoundingBox(Point3D(0, 0, 0), Point3D(7, 1, 1))
        small_box = BoundingBox(Point3D(0, 0, 0), Point3D(1, 1, 1))
        assert long_box.exceeds(room_bounds)
        assert not small_box.exceeds(room_bounds)


class TestSegmentIntersection:

    def test_crossing_segments(self):
        assert segments_intersect_2d((0, 0), (2, 2), (0, 2), (2, 0))

    def test_parallel_segments(self):
        assert not segments_intersect_2d((0, 0), (2, 0), (0, 1), (2, 1))

    def test_disjoint_segments(self):
        assert not segments_intersect_2d((0, 0), (1, 0), (2, -1), (2, 1))

    def test_touching_at_endpoint(self):
        assert segments_intersect_2d((0, 0), (1, 0), (1, 0), (1, 1))

    def test_degenerate_segment(self):
        assert not segments_intersect_2d((1, 1), (1, 1), (0, 0), (2, 2))
