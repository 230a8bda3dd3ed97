"""Tests for the room model types."""
import pytest

from room_extraction.geometry import BoundingBox, Point3D, Vector3D, UP
from room_extraction.types import (
    FurnitureItem,
    FurnitureType,
    Opening,
    OpeningType,
    PlacementSurface,
    SurfaceAccessibility,
    WallElement,
    WallMaterial,
)


def make_surface(accessibility=SurfaceAccessibility.GOOD, area=0.5):
    return PlacementSurface(
        center=Point3D(1.0, 1.0, 0.75),
        normal=UP,
        area=area,
        accessibility=accessibility,
    )


class TestWallElement:

    def test_length_direction_normal(self):
        wall = WallElement(Point3D(0, 0, 0), Point3D(4, 0, 0), height=2.5, thickness=0.1)
        assert wall.length == pytest.approx(4.0)
        assert wall.direction == Vector3D(1.0, 0.0, 0.0)
        assert wall.normal.magnitude == pytest.approx(1.0)
        assert wall.normal.z == pytest.approx(0.0)
        assert wall.normal.dot(wall.direction) == pytest.approx(0.0)

    def test_default_material_is_drywall(self):
        wall = WallElement(Point3D(0, 0, 0), Point3D(1, 0, 0), height=2.5, thickness=0.1)
        assert wall.material is WallMaterial.DRYWALL

    def test_attenuation_depends_on_band(self):
        assert WallMaterial.CONCRETE.rf_attenuation(2400) == 15.0
        assert WallMaterial.CONCRETE.rf_attenuation(5200) == 20.0
        assert WallMaterial.METAL.rf_attenuation(2400) > WallMaterial.DRYWALL.rf_attenuation(2400)

    def test_each_wall_has_unique_id(self):
        a = WallElement(Point3D(0, 0, 0), Point3D(1, 0, 0), height=2.5, thickness=0.1)
        b = WallElement(Point3D(0, 0, 0), Point3D(1, 0, 0), height=2.5, thickness=0.1)
        assert a.id != b.id


class TestPlacementSurface:

    def test_non_positive_area_rejected(self):
        with pytest.raises(ValueError):
            make_surface(area=0.0)

    def test_non_unit_normal_rejected(self):
        with pytest.raises(ValueError):
            PlacementSurface(
                center=Point3D(0, 0, 0),
                normal=Vector3D(0, 0, 2),
                area=1.0,
                accessibility=SurfaceAccessibility.GOOD,
            )

    def test_viable_for_device(self):
        surface = make_surface(area=0.1)
        assert surface.is_viable_for_device(Vector3D(0.2, 0.2, 0.1))
        assert not surface.is_viable_for_device(Vector3D(0.5, 0.5, 0.1))


class TestFurnitureItem:

    def test_confidence_range_enforced(self):
        bounds = BoundingBox(Point3D(0, 0, 0), Point3D(1, 1, 1))
        with pytest.raises(ValueError):
            FurnitureItem(type=FurnitureType.TABLE, bounds=bounds, confidence=1.5)

    def test_placement_candidate_and_surface_area(self):
        bounds = BoundingBox(Point3D(0, 0, 0), Point3D(1, 1, 1))
        table = FurnitureItem(
            type=FurnitureType.TABLE,
            bounds=bounds,
            surfaces=[make_surface(area=0.4), make_surface(area=0.2)],
        )
        sofa = FurnitureItem(type=FurnitureType.SOFA, bounds=bounds)
        assert isinstance(table.surfaces, tuple)
        assert table.is_placement_candidate
        assert not sofa.is_placement_candidate
        assert table.surface_area() == pytest.approx(0.6)


class TestOpening:

    @pytest.mark.parametrize("opening_type,passable", [
        (OpeningType.DOOR, True),
        (OpeningType.WINDOW, False),
        (OpeningType.OPENING, True),
    ])
    def test_passability_follows_type(self, opening_type, passable):
        bounds = BoundingBox(Point3D(0, 0, 0), Point3D(1, 0.1, 2))
        assert Opening.of_type(opening_type, bounds).is_passable is passable


class TestRoomModel:

    def test_lists_become_tuples(self, empty_room):
        assert empty_room.walls == ()
        assert empty_room.volume == pytest.approx(75.0)

    def test_find_surfaces(self, empty_room, room_bounds):
        table = FurnitureItem(
            type=FurnitureType.TABLE,
            bounds=BoundingBox(Point3D(1, 1, 0), Point3D(2, 2, 0.75)),
            surfaces=(make_surface(SurfaceAccessibility.EXCELLENT), make_surface(SurfaceAccessibility.POOR)),
        )
        room = empty_room.with_additions(furniture=[table])
        assert len(room.all_surfaces()) == 2
        assert len(room.find_surfaces(SurfaceAccessibility.EXCELLENT)) == 1
        assert room.find_surfaces(SurfaceAccessibility.GOOD) == []

    def test_with_additions_returns_new_model(self, empty_room):
        wall = WallElement(Point3D(0, 0, 0), Point3D(6, 0, 0), height=2.5, thickness=0.1)
        extended = empty_room.with_additions(walls=[wall])
        assert empty_room.walls == ()
        assert extended.walls == (wall,)
        assert extended.id == empty_room.id

    def test_obstacles_between(self, empty_room):
        wall = WallElement(Point3D(0, 2, 0), Point3D(4, 2, 0), height=2.5, thickness=0.1)
        far_wall = WallElement(Point3D(5, 0, 0), Point3D(5, 4, 0), height=2.5, thickness=0.1)
        chair = FurnitureItem(
            type=FurnitureType.CHAIR,
            bounds=BoundingBox(Point3D(0.5, 2.5, 0), Point3D(1.5, 3.0, 1.0)),
        )
        sofa = FurnitureItem(
            type=FurnitureType.SOFA,
            bounds=BoundingBox(Point3D(3.0, 0.5, 0), Point3D(4.0, 1.0, 1.0)),
        )
        room = empty_room.with_additions(walls=[wall, far_wall], furniture=[chair, sofa])

        obstacles = room.obstacles_between(Point3D(1, 0, 0.5), Point3D(1, 4, 0.5))
        assert wall in obstacles
        assert chair in obstacles
        assert far_wall not in obstacles
        assert sofa not in obstacles
