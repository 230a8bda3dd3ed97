"""Tests for coordinate_transformer module."""
import pytest

from room_extraction.coordinate_transformer import (
    IDENTITY,
    UNCONFIGURED,
    ConsistencyLevel,
    CoordinateOrientation,
    CoordinateUnits,
    TransformState,
    analyze_coordinate_system,
    auto_configure,
    auto_configure_from_analysis,
    configure,
    consistency_level,
    create_rotation_matrix,
    detect_units,
    inverse_transform_point,
    transform_bounding_box,
    transform_point,
    transform_room_model,
    transform_vector,
)
from room_extraction.geometry import BoundingBox, Point3D, Vector3D, UP
from room_extraction.types import (
    FloorPlan,
    FurnitureItem,
    FurnitureType,
    PlacementSurface,
    RoomModel,
    SurfaceAccessibility,
    WallElement,
)


def room_with_bounds(bounds, walls=(), furniture=()):
    return RoomModel(
        name="room",
        bounds=bounds,
        walls=walls,
        furniture=furniture,
        openings=(),
        floor=FloorPlan.from_bounds(bounds),
    )


def perimeter_wall(bounds):
    return WallElement(
        Point3D(bounds.min.x, bounds.min.y, bounds.min.z),
        Point3D(bounds.max.x, bounds.min.y, bounds.min.z),
        height=bounds.size.z,
        thickness=0.1,
    )


ALL_ORIENTATIONS = list(CoordinateOrientation)

SAMPLE_POINTS = [
    Point3D(0.0, 0.0, 0.0),
    Point3D(1.5, -2.25, 3.0),
    Point3D(-450.0, 320.5, 12.75),
    Point3D(0.001, 999.0, -7.5),
]


class TestUnconfigured:

    def test_transforms_are_identity(self):
        p = Point3D(1.0, 2.0, 3.0)
        v = Vector3D(0.0, 1.0, 0.0)
        assert transform_point(UNCONFIGURED, p) == p
        assert inverse_transform_point(UNCONFIGURED, p) == p
        assert transform_vector(UNCONFIGURED, v) == v

    def test_room_model_unchanged(self, empty_room):
        assert transform_room_model(UNCONFIGURED, empty_room) is empty_room

    def test_zero_scale_rejected(self):
        with pytest.raises(ValueError):
            TransformState(scale=0.0)

    def test_rotation_shape_checked(self):
        with pytest.raises(ValueError):
            configure(Point3D(0, 0, 0), rotation=[[1, 0], [0, 1]])


class TestTransforms:

    def test_order_is_scale_rotate_translate(self):
        state = configure(
            origin=Point3D(10.0, 0.0, 0.0),
            scale=2.0,
            rotation=create_rotation_matrix(CoordinateOrientation.ROTATED_90),
        )
        # (1, 0, 0) -> scaled (2, 0, 0) -> rotated (0, -2, 0) -> translated (10, -2, 0)
        result = transform_point(state, Point3D(1.0, 0.0, 0.0))
        assert result.x == pytest.approx(10.0)
        assert result.y == pytest.approx(-2.0)
        assert result.z == pytest.approx(0.0)

    def test_vectors_are_not_translated(self):
        state = configure(origin=Point3D(5.0, 5.0, 5.0), scale=0.5)
        v = transform_vector(state, Vector3D(2.0, 0.0, 0.0))
        assert v.x == pytest.approx(1.0)
        assert v.y == pytest.approx(0.0)
        assert v.z == pytest.approx(0.0)

    @pytest.mark.parametrize("orientation", ALL_ORIENTATIONS)
    @pytest.mark.parametrize("scale", [0.001, 0.01, 1.0, 2.5])
    def test_inverse_round_trip(self, orientation, scale):
        state = configure(
            origin=Point3D(1.0, -2.0, 0.5),
            scale=scale,
            rotation=create_rotation_matrix(orientation),
        )
        for p in SAMPLE_POINTS:
            back = inverse_transform_point(state, transform_point(state, p))
            assert back.x == pytest.approx(p.x, abs=1e-4)
            assert back.y == pytest.approx(p.y, abs=1e-4)
            assert back.z == pytest.approx(p.z, abs=1e-4)

    @pytest.mark.parametrize("orientation", ALL_ORIENTATIONS)
    def test_bounding_box_stays_ordered(self, orientation):
        state = configure(
            origin=Point3D(0.0, 0.0, 0.0),
            rotation=create_rotation_matrix(orientation),
        )
        box = BoundingBox(Point3D(1.0, 2.0, 0.0), Point3D(4.0, 7.0, 2.5))
        result = transform_bounding_box(state, box)
        assert result.min.x <= result.max.x
        assert result.min.y <= result.max.y
        assert result.min.z <= result.max.z
        assert result.volume == pytest.approx(box.volume)

    def test_custom_orientation_is_identity(self):
        assert create_rotation_matrix(CoordinateOrientation.CUSTOM) == IDENTITY


class TestAutoConfigure:

    @pytest.mark.parametrize("extent,expected_scale", [
        (0.5, 0.001),
        (6.0, 1.0),
        (450.0, 0.01),
    ])
    def test_scale_from_largest_extent(self, extent, expected_scale):
        bounds = BoundingBox(Point3D(2.0, 3.0, 0.0), Point3D(2.0 + extent, 3.0 + extent / 2, extent / 3))
        state = auto_configure(room_with_bounds(bounds))
        assert state.configured
        assert state.scale == expected_scale
        assert state.origin == bounds.min

    def test_transform_room_model_scales_everything(self):
        bounds = BoundingBox(Point3D(0, 0, 0), Point3D(600, 500, 250))
        surface = PlacementSurface(
            center=Point3D(300, 250, 75),
            normal=UP,
            area=9600.0,
            accessibility=SurfaceAccessibility.EXCELLENT,
        )
        table = FurnitureItem(
            type=FurnitureType.TABLE,
            bounds=BoundingBox(Point3D(240, 210, 0), Point3D(360, 290, 75)),
            surfaces=(surface,),
        )
        room = room_with_bounds(bounds, walls=(perimeter_wall(bounds),), furniture=(table,))

        state = configure(origin=Point3D(0, 0, 0), scale=0.01)
        transformed = transform_room_model(state, room)

        assert transformed.id == room.id
        assert transformed.bounds.size.x == pytest.approx(6.0)
        assert transformed.walls[0].height == pytest.approx(2.5)
        assert transformed.walls[0].thickness == pytest.approx(0.001)
        assert transformed.floor.area == pytest.approx(30.0)
        new_surface = transformed.furniture[0].surfaces[0]
        assert new_surface.area == pytest.approx(0.96)
        assert new_surface.normal.magnitude == pytest.approx(1.0)
        assert new_surface.center.z == pytest.approx(0.75)


class TestAnalysis:

    @pytest.mark.parametrize("size,units", [
        (Vector3D(0.05, 0.04, 0.03), CoordinateUnits.MILLIMETERS),
        (Vector3D(6.0, 5.0, 2.5), CoordinateUnits.CENTIMETERS),
        (Vector3D(450.0, 400.0, 250.0), CoordinateUnits.CENTIMETERS),
        (Vector3D(50.0, 40.0, 20.0), CoordinateUnits.METERS),
        (Vector3D(5000.0, 10.0, 10.0), CoordinateUnits.UNKNOWN),
    ])
    def test_detect_units(self, size, units):
        assert detect_units(size) is units

    def test_centimeter_room_detected(self):
        bounds = BoundingBox(Point3D(0, 0, 0), Point3D(450, 400, 250))
        room = room_with_bounds(bounds, walls=(perimeter_wall(bounds),))
        info = analyze_coordinate_system(room)
        assert info.detected_units is CoordinateUnits.CENTIMETERS
        assert info.recommended_scale == 0.01
        assert info.orientation is CoordinateOrientation.STANDARD
        assert info.consistency is ConsistencyLevel.HIGH
        assert info.requires_transformation

    def test_oversized_furniture_is_an_anomaly(self):
        bounds = BoundingBox(Point3D(0, 0, 0), Point3D(60, 50, 25))
        huge = FurnitureItem(
            type=FurnitureType.TABLE,
            bounds=BoundingBox(Point3D(0, 0, 0), Point3D(70, 1, 1)),
        )
        room = room_with_bounds(bounds, walls=(perimeter_wall(bounds),), furniture=(huge,))
        info = analyze_coordinate_system(room)
        assert len(info.anomalies) == 1
        assert info.consistency is ConsistencyLevel.MEDIUM

    def test_missing_walls_is_an_anomaly(self, empty_room):
        info = analyze_coordinate_system(empty_room)
        assert len(info.anomalies) == 1

    @pytest.mark.parametrize("count,level", [
        (0, ConsistencyLevel.HIGH),
        (1, ConsistencyLevel.MEDIUM),
        (2, ConsistencyLevel.MEDIUM),
        (3, ConsistencyLevel.LOW),
    ])
    def test_consistency_level(self, count, level):
        assert consistency_level(count) is level

    def test_auto_configure_from_analysis(self):
        bounds = BoundingBox(Point3D(10, 20, 0), Point3D(460, 420, 250))
        state = auto_configure_from_analysis(room_with_bounds(bounds, walls=(perimeter_wall(bounds),)))
        assert state.scale == 0.01
        assert state.rotation == IDENTITY
        assert state.origin == bounds.min
