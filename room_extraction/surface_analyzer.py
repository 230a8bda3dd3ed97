"""
Placement surface extraction and accessibility scoring.

Each furniture type maps to one extraction strategy:
- flat top (table, desk, counter)
- height-gated top (dresser, cabinet, nightstand)
- stacked shelf levels (shelf)
- none (sofa, chair, bed, stool)
"""

import math
from typing import List, Optional

import trimesh

from .furniture_detector import is_placement_suitable
from .geometry import BoundingBox, Point3D, Vector3D, UP
from .types import DevicePlacement, FurnitureType, PlacementSurface, SurfaceAccessibility


MIN_SURFACE_AREA = 0.01  # 10cm x 10cm
MIN_DEVICE_SIDE = 0.15  # typical extender footprint side
DEVICE_FOOTPRINT = MIN_DEVICE_SIDE * MIN_DEVICE_SIDE
DEVICE_CLEARANCE = 1.2  # 20% margin around the device

TOP_HEIGHT_RANGE = (0.5, 1.8)  # reachable and visible furniture heights

SHELF_SPACING = 0.35
MAX_SHELF_LEVELS = 6
SHELF_BOARD_THICKNESS = 0.02
MAX_SHELF_DEPTH = 0.4
SHELF_HEIGHT_RANGE = (0.3, 2.2)

EDGE_USABILITY = {
    FurnitureType.TABLE: 0.85,      # clean tops
    FurnitureType.DESK: 0.75,       # keyboards, monitors
    FurnitureType.COUNTER: 0.60,    # appliances
    FurnitureType.DRESSER: 0.70,
    FurnitureType.CABINET: 0.70,
    FurnitureType.NIGHTSTAND: 0.80,
}
DEFAULT_EDGE_USABILITY = 0.70

TYPE_SCORES = {
    FurnitureType.TABLE: 1.0,
    FurnitureType.DESK: 1.0,
    FurnitureType.COUNTER: 0.8,
    FurnitureType.DRESSER: 0.7,
    FurnitureType.NIGHTSTAND: 0.7,
    FurnitureType.CABINET: 0.6,
}
DEFAULT_TYPE_SCORE = 0.5

FLAT_TOP_TYPES = frozenset({FurnitureType.TABLE, FurnitureType.DESK, FurnitureType.COUNTER})
HEIGHT_GATED_TYPES = frozenset({FurnitureType.DRESSER, FurnitureType.CABINET, FurnitureType.NIGHTSTAND})


# ----------------------------------------------------------------------
# Scoring
# ----------------------------------------------------------------------

def height_score(height: float) -> float:
    if 0.6 <= height < 1.2:
        return 1.0
    if 0.4 <= height < 0.6 or 1.2 <= height < 1.8:
        return 0.7
    if 0.2 <= height < 0.4 or 1.8 <= height < 2.2:
        return 0.4
    return 0.1


def shelf_height_score(height: float) -> float:
    """Height bands for shelf levels, centered on eye level."""
    if 0.8 <= height <= 1.6:
        return 1.0
    if 0.4 <= height < 0.8 or 1.6 < height < 2.0:
        return 0.7
    if 0.2 <= height < 0.4 or 2.0 <= height < 2.2:
        return 0.4
    return 0.1


def type_score(furniture_type: FurnitureType) -> float:
    return TYPE_SCORES.get(furniture_type, DEFAULT_TYPE_SCORE)


def size_score(footprint_area: float) -> float:
    if footprint_area >= 0.5:
        return 1.0
    if footprint_area >= 0.2:
        return 0.8
    if footprint_area >= 0.05:
        return 0.6
    return 0.4


def shelf_position_score(index: int, total_levels: int) -> float:
    """Middle levels of a unit are easiest to reach."""
    if total_levels <= 2:
        return 1.0
    position = index / (total_levels - 1)
    if 0.3 <= position <= 0.7:
        return 1.0
    if 0.1 <= position < 0.3 or 0.7 < position < 0.9:
        return 0.8
    return 0.5


def accessibility_score(furniture_type: FurnitureType, height: float, bounds: BoundingBox) -> float:
    """Mean of the height, type and footprint size scores."""
    return (height_score(height) + type_score(furniture_type) + size_score(bounds.footprint_area)) / 3.0


def evaluate_accessibility(
    furniture_type: FurnitureType,
    height: float,
    bounds: BoundingBox
) -> SurfaceAccessibility:
    return SurfaceAccessibility.from_score(accessibility_score(furniture_type, height, bounds))


def evaluate_shelf_accessibility(index: int, height: float, total_levels: int) -> SurfaceAccessibility:
    score = (shelf_height_score(height) + shelf_position_score(index, total_levels)) / 2.0
    return SurfaceAccessibility.from_score(score)


# ----------------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------------

def effective_placement_area(total_area: float, furniture_type: FurnitureType) -> float:
    """Top area left after edges and clutter are discounted, floored at one device footprint."""
    usable = total_area * EDGE_USABILITY.get(furniture_type, DEFAULT_EDGE_USABILITY)
    return max(usable, DEVICE_FOOTPRINT)


def extract_top_surface(furniture_type: FurnitureType, bounds: BoundingBox) -> List[PlacementSurface]:
    top_z = bounds.max.z
    total_area = bounds.footprint_area

    if total_area < MIN_SURFACE_AREA:
        return []

    area = effective_placement_area(total_area, furniture_type)
    center = bounds.center
    return [PlacementSurface(
        center=Point3D(center.x, center.y, top_z),
        normal=UP,
        area=area,
        accessibility=evaluate_accessibility(furniture_type, top_z, bounds),
    )]


def extract_gated_top_surface(furniture_type: FurnitureType, bounds: BoundingBox) -> List[PlacementSurface]:
    low, high = TOP_HEIGHT_RANGE
    if not low <= bounds.size.z <= high:
        return []
    return extract_top_surface(furniture_type, bounds)


def estimate_shelf_levels(bounds: BoundingBox) -> List[float]:
    """
    Heights of the shelf boards of a unit, bottom first.

    Boards are assumed evenly spaced about 35cm apart, at most six of them.
    """
    # TODO: detect boards from the horizontal faces of the shelf mesh
    total_height = bounds.size.z
    count = max(1, int(math.floor(total_height / SHELF_SPACING)))
    spacing = total_height / count
    return [
        bounds.min.z + i * spacing + SHELF_BOARD_THICKNESS
        for i in range(min(count, MAX_SHELF_LEVELS))
    ]


def extract_shelf_surfaces(bounds: BoundingBox) -> List[PlacementSurface]:
    levels = estimate_shelf_levels(bounds)
    low, high = SHELF_HEIGHT_RANGE
    center = bounds.center
    area = bounds.size.x * min(bounds.size.y, MAX_SHELF_DEPTH)

    if area < max(MIN_SURFACE_AREA, DEVICE_FOOTPRINT):
        return []

    surfaces = []
    for index, level_z in enumerate(levels):
        if not low <= level_z <= high:
            continue
        surfaces.append(PlacementSurface(
            center=Point3D(center.x, center.y, level_z),
            normal=UP,
            area=area,
            accessibility=evaluate_shelf_accessibility(index, level_z, len(levels)),
        ))
    return surfaces


def extract_placement_surfaces(
    mesh: Optional[trimesh.Trimesh],
    furniture_type: FurnitureType,
    bounds: BoundingBox
) -> List[PlacementSurface]:
    """
    Extract viable placement surfaces from a furniture item.

    Args:
        mesh: The furniture mesh (levels and tops are currently derived from bounds)
        furniture_type: The detected furniture type
        bounds: The furniture's bounding box

    Returns:
        Placement surfaces, empty for types unsuitable for placement
    """
    if not is_placement_suitable(furniture_type):
        return []
    if furniture_type in FLAT_TOP_TYPES:
        return extract_top_surface(furniture_type, bounds)
    if furniture_type in HEIGHT_GATED_TYPES:
        return extract_gated_top_surface(furniture_type, bounds)
    if furniture_type is FurnitureType.SHELF:
        return extract_shelf_surfaces(bounds)
    return []


# ----------------------------------------------------------------------
# Device fitting
# ----------------------------------------------------------------------

def can_accommodate_device(surface: PlacementSurface, device_dimensions: Vector3D) -> bool:
    required = device_dimensions.x * device_dimensions.y * DEVICE_CLEARANCE
    return surface.area >= required


def calculate_optimal_placement(
    surface: PlacementSurface,
    device_dimensions: Vector3D
) -> Optional[DevicePlacement]:
    """Center the device on the surface, resting on it, unrotated."""
    if not can_accommodate_device(surface, device_dimensions):
        return None

    # TODO: account for edge proximity and cable routing when choosing position
    position = Point3D(
        surface.center.x,
        surface.center.y,
        surface.center.z + device_dimensions.z / 2,
    )
    return DevicePlacement(position=position, orientation=0.0, surface_id=surface.id)
