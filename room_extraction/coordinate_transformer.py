"""
Coordinate normalization between the captured scene frame and the metric room frame.

Transform state is an immutable TransformState value. Configuration functions
return a new state and every transform takes the state explicitly. The
default (unconfigured) state makes every transform the identity.

Forward transform order is fixed: scale, then rotate, then translate by origin.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np

from .geometry import BoundingBox, Point3D, Vector3D, ORIGIN
from .types import FloorPlan, FurnitureItem, Opening, PlacementSurface, RoomModel, WallElement


Matrix3 = Tuple[Tuple[float, float, float], Tuple[float, float, float], Tuple[float, float, float]]

IDENTITY: Matrix3 = (
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
)


class CoordinateUnits(Enum):
    MILLIMETERS = "mm"
    CENTIMETERS = "cm"
    METERS = "m"
    UNKNOWN = "unknown"


class CoordinateOrientation(Enum):
    STANDARD = "standard"      # X-right, Y-forward, Z-up
    ROTATED_90 = "rotated_90"  # 90 degrees around Z
    ROTATED_180 = "rotated_180"
    ROTATED_270 = "rotated_270"
    FLIPPED = "flipped"        # Y axis flipped
    CUSTOM = "custom"          # unresolved, treated as identity


class ConsistencyLevel(Enum):
    HIGH = "high"      # no anomalies
    MEDIUM = "medium"  # 1-2 anomalies
    LOW = "low"        # 3 or more


RECOMMENDED_SCALE = {
    CoordinateUnits.MILLIMETERS: 0.001,
    CoordinateUnits.CENTIMETERS: 0.01,
    CoordinateUnits.METERS: 1.0,
    CoordinateUnits.UNKNOWN: 1.0,
}

# Rows of each correction matrix, applied as R @ p
ROTATION_MATRICES = {
    CoordinateOrientation.STANDARD: IDENTITY,
    CoordinateOrientation.ROTATED_90: (
        (0.0, 1.0, 0.0),
        (-1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0),
    ),
    CoordinateOrientation.ROTATED_180: (
        (-1.0, 0.0, 0.0),
        (0.0, -1.0, 0.0),
        (0.0, 0.0, 1.0),
    ),
    CoordinateOrientation.ROTATED_270: (
        (0.0, -1.0, 0.0),
        (1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0),
    ),
    CoordinateOrientation.FLIPPED: (
        (1.0, 0.0, 0.0),
        (0.0, -1.0, 0.0),
        (0.0, 0.0, 1.0),
    ),
    # No inference exists for arbitrary orientations yet
    CoordinateOrientation.CUSTOM: IDENTITY,
}

# Extent beyond which a single room cannot plausibly be metric
CENTIMETER_EXTENT_THRESHOLD = 100.0


@dataclass(frozen=True)
class TransformState:
    """Origin, scale and rotation of a configured transform."""
    origin: Point3D = ORIGIN
    scale: float = 1.0
    rotation: Matrix3 = IDENTITY
    configured: bool = False

    def __post_init__(self):
        if self.scale == 0:
            raise ValueError("scale must be non-zero")

    @property
    def matrix(self) -> np.ndarray:
        return np.array(self.rotation, dtype=np.float64)


UNCONFIGURED = TransformState()


@dataclass(frozen=True)
class CoordinateSystemInfo:
    detected_units: CoordinateUnits
    orientation: CoordinateOrientation
    consistency: ConsistencyLevel
    recommended_scale: float
    anomalies: Tuple[str, ...] = field(default=())

    @property
    def requires_transformation(self) -> bool:
        return (self.detected_units is not CoordinateUnits.METERS or
                self.orientation is not CoordinateOrientation.STANDARD)

    @property
    def is_reliable(self) -> bool:
        return (self.consistency is not ConsistencyLevel.LOW and
                self.detected_units is not CoordinateUnits.UNKNOWN)


def _as_matrix(rotation) -> Matrix3:
    arr = np.asarray(rotation, dtype=np.float64)
    if arr.shape != (3, 3):
        raise ValueError(f"rotation must be 3x3, got shape {arr.shape}")
    return tuple(tuple(float(v) for v in row) for row in arr)


# ----------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------

def configure(
    origin: Point3D,
    scale: float = 1.0,
    rotation=IDENTITY
) -> TransformState:
    """Build a configured transform state from explicit parameters."""
    return TransformState(origin=origin, scale=float(scale), rotation=_as_matrix(rotation), configured=True)


def auto_configure(room_model: RoomModel) -> TransformState:
    """
    Configure from the room's bounds: origin at the bounds minimum and a scale
    guessed from the largest extent (< 1 -> mm, > 100 -> cm, else meters).
    """
    size = room_model.bounds.size
    max_dimension = max(size.x, size.y, size.z)

    if max_dimension < 1.0:
        scale = 0.001
    elif max_dimension > 100.0:
        scale = 0.01
    else:
        scale = 1.0

    return configure(origin=room_model.bounds.min, scale=scale)


def create_rotation_matrix(orientation: CoordinateOrientation) -> Matrix3:
    """Rotation that corrects the given orientation."""
    return ROTATION_MATRICES[orientation]


def auto_configure_from_analysis(room_model: RoomModel) -> TransformState:
    """Analyze the room's coordinate system and configure from the result."""
    info = analyze_coordinate_system(room_model)
    return configure(
        origin=room_model.bounds.min,
        scale=info.recommended_scale,
        rotation=create_rotation_matrix(info.orientation),
    )


# ----------------------------------------------------------------------
# Transforms
# ----------------------------------------------------------------------

def transform_point(state: TransformState, point: Point3D) -> Point3D:
    if not state.configured:
        return point
    rotated = state.matrix @ (point.to_array() * state.scale)
    return Point3D.from_array(rotated + state.origin.to_array())


def transform_points(state: TransformState, points: Sequence[Point3D]) -> List[Point3D]:
    return [transform_point(state, p) for p in points]


def transform_vector(state: TransformState, vector: Vector3D) -> Vector3D:
    """Scale and rotate a vector. Vectors are never translated."""
    if not state.configured:
        return vector
    return Vector3D.from_array(state.matrix @ (vector.to_array() * state.scale))


def transform_bounding_box(state: TransformState, bounds: BoundingBox) -> BoundingBox:
    corner_a = transform_point(state, bounds.min)
    corner_b = transform_point(state, bounds.max)
    # BoundingBox re-sorts the corners componentwise
    return BoundingBox(corner_a, corner_b)


def inverse_transform_point(state: TransformState, point: Point3D) -> Point3D:
    """Exact inverse of transform_point for orthonormal rotations."""
    if not state.configured:
        return point
    translated = point.to_array() - state.origin.to_array()
    return Point3D.from_array((state.matrix.T @ translated) / state.scale)


def transform_room_model(state: TransformState, room_model: RoomModel) -> RoomModel:
    """
    Apply a transform to every spatial field of a room model.

    Heights and thicknesses scale linearly, areas quadratically. Surface
    normals are re-normalized after rotation.
    """
    if not state.configured:
        return room_model

    scale = abs(state.scale)
    area_scale = scale * scale

    walls = tuple(
        replace(
            wall,
            start=transform_point(state, wall.start),
            end=transform_point(state, wall.end),
            height=wall.height * scale,
            thickness=wall.thickness * scale,
        )
        for wall in room_model.walls
    )

    furniture = tuple(
        replace(
            item,
            bounds=transform_bounding_box(state, item.bounds),
            surfaces=tuple(
                replace(
                    surface,
                    center=transform_point(state, surface.center),
                    normal=transform_vector(state, surface.normal).normalized(),
                    area=surface.area * area_scale,
                )
                for surface in item.surfaces
            ),
        )
        for item in room_model.furniture
    )

    openings = tuple(
        replace(opening, bounds=transform_bounding_box(state, opening.bounds))
        for opening in room_model.openings
    )

    floor = FloorPlan(
        bounds=transform_bounding_box(state, room_model.floor.bounds),
        area=room_model.floor.area * area_scale,
    )

    return replace(
        room_model,
        bounds=transform_bounding_box(state, room_model.bounds),
        walls=walls,
        furniture=furniture,
        openings=openings,
        floor=floor,
    )


# ----------------------------------------------------------------------
# Analysis
# ----------------------------------------------------------------------

def detect_units(size: Vector3D) -> CoordinateUnits:
    max_dimension = max(size.x, size.y, size.z)
    min_dimension = min(size.x, size.y, size.z)

    if max_dimension < 0.1 and min_dimension > 0.001:
        return CoordinateUnits.MILLIMETERS
    if max_dimension < 10.0 and min_dimension > 0.1:
        return CoordinateUnits.CENTIMETERS
    if CENTIMETER_EXTENT_THRESHOLD < max_dimension < 1000.0 and min_dimension > 1.0:
        return CoordinateUnits.CENTIMETERS
    if max_dimension < 1000.0 and min_dimension > 1.0:
        return CoordinateUnits.METERS
    return CoordinateUnits.UNKNOWN


def detect_orientation(room_model: RoomModel) -> CoordinateOrientation:
    # TODO: infer orientation from the dominant furniture and wall alignment
    return CoordinateOrientation.STANDARD


def find_consistency_anomalies(room_model: RoomModel) -> List[str]:
    """Describe each structural anomaly of the room, one entry per anomaly."""
    anomalies = []
    bounds = room_model.bounds
    size = bounds.size

    if size.x <= 0 or size.y <= 0 or size.z <= 0:
        anomalies.append("non-positive room dimensions")

    for item in room_model.furniture:
        if item.bounds.exceeds(bounds):
            anomalies.append(f"{item.type.value} larger than the room")

    if not room_model.walls and bounds.volume > 0:
        anomalies.append("no walls in a room with volume")

    return anomalies


def consistency_level(anomaly_count: int) -> ConsistencyLevel:
    if anomaly_count == 0:
        return ConsistencyLevel.HIGH
    if anomaly_count <= 2:
        return ConsistencyLevel.MEDIUM
    return ConsistencyLevel.LOW


def analyze_coordinate_system(room_model: RoomModel) -> CoordinateSystemInfo:
    """
    Infer the unit system, orientation and internal consistency of a room.

    Args:
        room_model: The room model to analyze

    Returns:
        CoordinateSystemInfo describing the detected coordinate system
    """
    units = detect_units(room_model.bounds.size)
    anomalies = find_consistency_anomalies(room_model)

    return CoordinateSystemInfo(
        detected_units=units,
        orientation=detect_orientation(room_model),
        consistency=consistency_level(len(anomalies)),
        recommended_scale=RECOMMENDED_SCALE[units],
        anomalies=tuple(anomalies),
    )
