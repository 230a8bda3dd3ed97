"""
Shared test fixtures for room model extraction tests.

Rooms are built from axis-aligned trimesh boxes in meters, Z up.
"""
from collections import OrderedDict

import pytest
import trimesh

from room_extraction.geometry import BoundingBox, Point3D
from room_extraction.scene_loader import scene_asset_from_meshes
from room_extraction.types import FloorPlan, RoomModel


def box_at(extents, center):
    """Axis-aligned box mesh with the given extents centered on center."""
    mesh = trimesh.creation.box(extents=extents)
    mesh.apply_translation(center)
    return mesh


@pytest.fixture
def make_box():
    """Factory for box meshes: make_box((w, d, h), (cx, cy, cz))."""
    return box_at


@pytest.fixture
def room_shell_meshes():
    """Four walls and a floor of a 6 x 5 x 2.5 m room."""
    return OrderedDict([
        ("wall_front", box_at([6.0, 0.1, 2.5], [3.0, 0.05, 1.25])),
        ("wall_back", box_at([6.0, 0.1, 2.5], [3.0, 4.95, 1.25])),
        ("wall_left", box_at([0.1, 5.0, 2.5], [0.05, 2.5, 1.25])),
        ("wall_right", box_at([0.1, 5.0, 2.5], [5.95, 2.5, 1.25])),
        ("floor", box_at([6.0, 5.0, 0.01], [3.0, 2.5, 0.005])),
    ])


@pytest.fixture
def furniture_meshes():
    """Five non-overlapping furniture pieces, three of them placement-suitable."""
    return OrderedDict([
        ("dining_table", box_at([1.2, 0.8, 0.75], [3.0, 2.5, 0.375])),
        ("desk", box_at([1.4, 0.7, 0.75], [1.5, 4.3, 0.375])),
        ("bookshelf", box_at([1.0, 0.35, 1.8], [4.5, 4.6, 0.9])),
        ("sofa", box_at([2.0, 0.9, 0.8], [3.0, 0.8, 0.4])),
        ("chair", box_at([0.5, 0.5, 0.9], [1.2, 2.5, 0.45])),
    ])


@pytest.fixture
def opening_meshes():
    """A door in the front wall and a window in the back wall."""
    return OrderedDict([
        ("door_main", box_at([0.9, 0.05, 2.1], [1.5, 0.05, 1.05])),
        ("window_1", box_at([1.2, 0.05, 1.0], [3.0, 4.95, 1.5])),
    ])


@pytest.fixture
def living_room_asset(room_shell_meshes, furniture_meshes, opening_meshes):
    """A complete, well-scanned living room."""
    meshes = OrderedDict()
    meshes.update(room_shell_meshes)
    meshes.update(opening_meshes)
    meshes.update(furniture_meshes)
    return scene_asset_from_meshes(meshes, name="living_room")


@pytest.fixture
def wall_less_asset(furniture_meshes):
    """Floor and furniture only; no object is named as a wall."""
    meshes = OrderedDict([("floor", box_at([6.0, 5.0, 0.01], [3.0, 2.5, 0.005]))])
    meshes.update(furniture_meshes)
    return scene_asset_from_meshes(meshes, name="open_plan")


@pytest.fixture
def room_bounds():
    return BoundingBox(Point3D(0.0, 0.0, 0.0), Point3D(6.0, 5.0, 2.5))


@pytest.fixture
def empty_room(room_bounds):
    """A room model with bounds and floor but no walls, furniture or openings."""
    return RoomModel(
        name="empty",
        bounds=room_bounds,
        walls=(),
        furniture=(),
        openings=(),
        floor=FloorPlan.from_bounds(room_bounds),
    )
