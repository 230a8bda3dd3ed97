"""
Data types for the room model.

Every entity is created once during extraction and never edited afterwards;
a repaired or transformed room is a new RoomModel value.
"""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

from .geometry import BoundingBox, Point3D, Vector3D, UP, segments_intersect_2d


class FurnitureType(Enum):
    TABLE = "table"
    DESK = "desk"
    DRESSER = "dresser"
    SHELF = "shelf"
    CABINET = "cabinet"
    COUNTER = "counter"
    NIGHTSTAND = "nightstand"
    SOFA = "sofa"
    CHAIR = "chair"
    BED = "bed"
    STOOL = "stool"


PLACEMENT_SUITABLE_TYPES = frozenset({
    FurnitureType.TABLE,
    FurnitureType.DESK,
    FurnitureType.DRESSER,
    FurnitureType.SHELF,
    FurnitureType.CABINET,
    FurnitureType.COUNTER,
    FurnitureType.NIGHTSTAND,
})


class WallMaterial(Enum):
    DRYWALL = "drywall"
    CONCRETE = "concrete"
    BRICK = "brick"
    WOOD = "wood"
    GLASS = "glass"
    METAL = "metal"

    def rf_attenuation(self, frequency_mhz: float) -> float:
        """Approximate wall penetration loss in dB at the given frequency."""
        below_3ghz, above_3ghz = _MATERIAL_ATTENUATION_DB[self]
        return below_3ghz if frequency_mhz < 3000 else above_3ghz


_MATERIAL_ATTENUATION_DB = {
    WallMaterial.DRYWALL: (3.0, 4.0),
    WallMaterial.CONCRETE: (15.0, 20.0),
    WallMaterial.BRICK: (10.0, 13.0),
    WallMaterial.WOOD: (2.0, 3.0),
    WallMaterial.GLASS: (2.0, 3.0),
    WallMaterial.METAL: (25.0, 30.0),
}


class SurfaceAccessibility(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "SurfaceAccessibility":
        if score >= 0.8:
            return cls.EXCELLENT
        if score >= 0.6:
            return cls.GOOD
        return cls.POOR


class OpeningType(Enum):
    DOOR = "door"
    WINDOW = "window"
    OPENING = "opening"

    @property
    def is_passable(self) -> bool:
        return self is not OpeningType.WINDOW


@dataclass(frozen=True)
class WallElement:
    """A wall running along the floor plane from start to end."""
    start: Point3D
    end: Point3D
    height: float
    thickness: float
    material: WallMaterial = WallMaterial.DRYWALL
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def length(self) -> float:
        return self.start.distance(self.end)

    @property
    def direction(self) -> Vector3D:
        return (self.end - self.start).normalized()

    @property
    def normal(self) -> Vector3D:
        """Horizontal unit normal of the wall face."""
        return self.direction.cross(UP).normalized()

    def attenuation(self, frequency_mhz: float) -> float:
        return self.material.rf_attenuation(frequency_mhz)


@dataclass(frozen=True)
class PlacementSurface:
    """A flat region on a furniture item where a device could rest."""
    center: Point3D
    normal: Vector3D
    area: float
    accessibility: SurfaceAccessibility
    power_proximity: Optional[float] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if self.area <= 0:
            raise ValueError("surface area must be positive")
        if abs(self.normal.magnitude - 1.0) > 1e-6:
            raise ValueError("surface normal must be unit length")

    def is_viable_for_device(self, device_dimensions: Vector3D) -> bool:
        return self.area >= device_dimensions.x * device_dimensions.y


@dataclass(frozen=True)
class FurnitureItem:
    type: FurnitureType
    bounds: BoundingBox
    surfaces: Tuple[PlacementSurface, ...] = ()
    confidence: float = 0.5
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "surfaces", tuple(self.surfaces))
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")

    @property
    def is_placement_candidate(self) -> bool:
        return self.type in PLACEMENT_SUITABLE_TYPES

    def surface_area(self) -> float:
        return sum(s.area for s in self.surfaces)


@dataclass(frozen=True)
class Opening:
    type: OpeningType
    bounds: BoundingBox
    is_passable: bool
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def of_type(cls, opening_type: OpeningType, bounds: BoundingBox) -> "Opening":
        return cls(type=opening_type, bounds=bounds, is_passable=opening_type.is_passable)


@dataclass(frozen=True)
class FloorPlan:
    bounds: BoundingBox
    area: float

    @classmethod
    def from_bounds(cls, bounds: BoundingBox) -> "FloorPlan":
        return cls(bounds=bounds, area=bounds.footprint_area)


@dataclass(frozen=True)
class DevicePlacement:
    """Where a device sits on a surface. Orientation is rotation about Z in radians."""
    position: Point3D
    orientation: float
    surface_id: uuid.UUID


Obstacle = Union[WallElement, FurnitureItem]


@dataclass(frozen=True)
class RoomModel:
    """Complete model of a scanned room."""
    name: str
    bounds: BoundingBox
    walls: Tuple[WallElement, ...]
    furniture: Tuple[FurnitureItem, ...]
    openings: Tuple[Opening, ...]
    floor: FloorPlan
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "walls", tuple(self.walls))
        object.__setattr__(self, "furniture", tuple(self.furniture))
        object.__setattr__(self, "openings", tuple(self.openings))

    @property
    def volume(self) -> float:
        return self.bounds.volume

    def all_surfaces(self) -> List[PlacementSurface]:
        return [s for item in self.furniture for s in item.surfaces]

    def find_surfaces(self, accessibility: SurfaceAccessibility) -> List[PlacementSurface]:
        """Placement surfaces with the given accessibility rating."""
        return [s for s in self.all_surfaces() if s.accessibility is accessibility]

    def with_additions(
        self,
        walls: Iterable[WallElement] = (),
        furniture: Iterable[FurnitureItem] = ()
    ) -> "RoomModel":
        """Return a new model with walls and furniture appended, keeping the same id."""
        return replace(
            self,
            walls=self.walls + tuple(walls),
            furniture=self.furniture + tuple(furniture),
        )

    def obstacles_between(self, start: Point3D, end: Point3D) -> List[Obstacle]:
        """
        Walls and furniture lying on the straight path from start to end.

        Walls are tested as 2D segments on the floor plane; furniture uses a
        coarse test against the box spanned by the two points.
        """
        obstacles: List[Obstacle] = []
        a, b = (start.x, start.y), (end.x, end.y)

        for wall in self.walls:
            if segments_intersect_2d(a, b, (wall.start.x, wall.start.y), (wall.end.x, wall.end.y)):
                obstacles.append(wall)

        path_box = BoundingBox(start, end)
        for item in self.furniture:
            if item.bounds.contains(start) or item.bounds.contains(end) or item.bounds.intersects(path_box):
                obstacles.append(item)

        return obstacles
