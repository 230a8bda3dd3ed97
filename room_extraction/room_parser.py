"""
Room model parser - main extraction entry point.

This module provides parse_scene_asset(), which turns a loaded scene asset
into a RoomModel:
1. Validate the asset has objects
2. Extract room bounds (fatal if implausible)
3. Extract walls, inferring them from the bounds when none are named
4. Classify furniture and extract placement surfaces
5. Extract openings and the floor plan
6. Gate on scan quality, repairing the model once if needed
"""

import logging
import time
from typing import List, Optional

import numpy as np
import trimesh
from shapely.geometry import Polygon
from shapely.ops import unary_union

from .errors import CorruptedMeshDataError, InsufficientRoomDataError, MissingGeometryDataError
from .furniture_detector import detect_by_validated_name, detect_furniture_type
from .geometry import BoundingBox, Point3D, Vector3D
from .quality_assessor import QualityAssessor, assess_scan_quality
from .scene_loader import SceneAsset, SceneObject, load_scene_asset
from .surface_analyzer import extract_placement_surfaces
from .types import (
    FloorPlan,
    FurnitureItem,
    FurnitureType,
    Opening,
    OpeningType,
    RoomModel,
    WallElement,
    WallMaterial,
)


logger = logging.getLogger(__name__)

# Plausible room extents in meters
MIN_ROOM_WIDTH = 0.5
MIN_ROOM_DEPTH = 0.5
MIN_ROOM_HEIGHT = 1.0

FLOOR_VERTEX_TOLERANCE = 0.1  # vertices this close to the wall's base count as floor contact
MIN_WALL_RUN = 0.5
MAX_WALL_RUN = 10.0
# Thickness is not estimated from geometry
DEFAULT_WALL_THICKNESS = 0.1

UPWARD_NORMAL_MIN_Z = 0.9

# Heuristic confidence for classified furniture
BASE_CONFIDENCE = 0.5
NAMED_BONUS = 0.2
PLAUSIBLE_VOLUME_BONUS = 0.2
PLAUSIBLE_VOLUME_RANGE = (0.1, 100.0)
MAX_CONFIDENCE = 0.9

# Synthesized during repair
INFERRED_TABLE_SIZE = Vector3D(1.2, 0.8, 0.75)
INFERRED_TABLE_CONFIDENCE = 0.3
INFERRED_TABLE_MIN_FLOOR_AREA = 15.0
INFERRED_TABLE_MAX_FURNITURE = 2

WALL_MATERIAL_KEYWORDS = (
    ("concrete", WallMaterial.CONCRETE),
    ("brick", WallMaterial.BRICK),
    ("wood", WallMaterial.WOOD),
    ("glass", WallMaterial.GLASS),
    ("metal", WallMaterial.METAL),
)

OPENING_KEYWORDS = (
    ("door", OpeningType.DOOR),
    ("window", OpeningType.WINDOW),
    ("opening", OpeningType.OPENING),
    ("arch", OpeningType.OPENING),
)


# ----------------------------------------------------------------------
# Bounds
# ----------------------------------------------------------------------

def extract_room_bounds(asset: SceneAsset) -> BoundingBox:
    """
    Union of every mesh object's bounding box.

    Raises:
        InsufficientRoomDataError: No mesh data, or the room is implausibly small
    """
    boxes = [obj.bounds for obj in asset.mesh_objects()]
    if not boxes:
        raise InsufficientRoomDataError("Scene has no mesh geometry to bound the room")

    bounds = boxes[0]
    for box in boxes[1:]:
        bounds = bounds.union(box)

    size = bounds.size
    if size.x < MIN_ROOM_WIDTH or size.y < MIN_ROOM_DEPTH or size.z < MIN_ROOM_HEIGHT:
        raise InsufficientRoomDataError(
            f"Room bounds {size.x:.2f} x {size.y:.2f} x {size.z:.2f} m are too small for a room"
        )
    return bounds


# ----------------------------------------------------------------------
# Walls
# ----------------------------------------------------------------------

def is_wall_object(name: str) -> bool:
    lowered = name.lower()
    return "wall" in lowered or "partition" in lowered


def is_named_furniture(obj: SceneObject) -> bool:
    """
    True when the object names a furniture type its bounds fit.

    Such objects are furniture even when the name also mentions structure,
    as in "wall_shelf" or "outdoor_table".
    """
    return detect_by_validated_name(obj.name, obj.bounds) is not None


def infer_wall_material(name: str) -> WallMaterial:
    lowered = name.lower()
    for keyword, material in WALL_MATERIAL_KEYWORDS:
        if keyword in lowered:
            return material
    return WallMaterial.DRYWALL


def parse_wall_geometry(vertices: Optional[np.ndarray], name: str = "") -> WallElement:
    """
    Derive a wall run from its mesh vertices.

    The run follows the principal horizontal direction of the vertices touching
    the wall's base, spanning their full extent along that direction.

    Args:
        vertices: Nx3 vertex positions of the wall mesh
        name: Object name, used to pick the material

    Returns:
        WallElement at the wall's base height

    Raises:
        CorruptedMeshDataError: No vertices or no usable run along the base
    """
    if vertices is None or len(vertices) == 0:
        raise CorruptedMeshDataError(f"Wall '{name}' has no vertex data")
    if not np.isfinite(vertices).all():
        raise CorruptedMeshDataError(f"Wall '{name}' has non-finite vertex positions")

    min_z = float(vertices[:, 2].min())
    max_z = float(vertices[:, 2].max())

    base = vertices[vertices[:, 2] <= min_z + FLOOR_VERTEX_TOLERANCE][:, :2]
    base = np.unique(base, axis=0)
    if len(base) < 2:
        raise CorruptedMeshDataError(f"Wall '{name}' has no horizontal run along its base")

    centroid = base.mean(axis=0)
    # Principal direction of the base footprint
    _, _, vt = np.linalg.svd(base - centroid, full_matrices=False)
    direction = vt[0]
    projections = (base - centroid) @ direction
    run = float(projections.max() - projections.min())

    if not MIN_WALL_RUN < run < MAX_WALL_RUN:
        raise CorruptedMeshDataError(f"Wall '{name}' run of {run:.2f} m is not a plausible wall")

    start_xy = centroid + projections.min() * direction
    end_xy = centroid + projections.max() * direction

    return WallElement(
        start=Point3D(float(start_xy[0]), float(start_xy[1]), min_z),
        end=Point3D(float(end_xy[0]), float(end_xy[1]), min_z),
        height=max_z - min_z,
        thickness=DEFAULT_WALL_THICKNESS,
        material=infer_wall_material(name),
    )


def infer_walls_from_bounds(bounds: BoundingBox) -> List[WallElement]:
    """Four drywall walls around the bounding box perimeter: front, back, left, right."""
    lo, hi = bounds.min, bounds.max
    z = lo.z
    height = bounds.size.z

    runs = (
        (Point3D(lo.x, lo.y, z), Point3D(hi.x, lo.y, z)),
        (Point3D(hi.x, hi.y, z), Point3D(lo.x, hi.y, z)),
        (Point3D(lo.x, hi.y, z), Point3D(lo.x, lo.y, z)),
        (Point3D(hi.x, lo.y, z), Point3D(hi.x, hi.y, z)),
    )
    return [
        WallElement(start=start, end=end, height=height, thickness=DEFAULT_WALL_THICKNESS)
        for start, end in runs
    ]


def extract_walls(asset: SceneAsset, bounds: BoundingBox) -> List[WallElement]:
    walls = []
    for obj in asset.objects:
        if not is_wall_object(obj.name) or is_named_furniture(obj):
            continue
        try:
            walls.append(parse_wall_geometry(obj.vertices, obj.name))
        except CorruptedMeshDataError as exc:
            logger.warning("Skipping wall '%s': %s", obj.name, exc)

    if not walls:
        logger.info("No walls found by name, inferring walls from room bounds")
        walls = infer_walls_from_bounds(bounds)
    return walls


# ----------------------------------------------------------------------
# Furniture
# ----------------------------------------------------------------------

def estimate_confidence(name: str, bounds: BoundingBox) -> float:
    confidence = BASE_CONFIDENCE
    if name and "unknown" not in name.lower():
        confidence += NAMED_BONUS
    low, high = PLAUSIBLE_VOLUME_RANGE
    if low < bounds.volume < high:
        confidence += PLAUSIBLE_VOLUME_BONUS
    return min(confidence, MAX_CONFIDENCE)


def build_furniture_item(obj: SceneObject) -> Optional[FurnitureItem]:
    """Classify one scene object, or return None if it is not furniture."""
    furniture_type = detect_furniture_type(obj)
    if furniture_type is None:
        return None

    bounds = obj.bounds
    return FurnitureItem(
        type=furniture_type,
        bounds=bounds,
        surfaces=extract_placement_surfaces(obj.mesh, furniture_type, bounds),
        confidence=estimate_confidence(obj.name, bounds),
    )


def _is_structural(obj: SceneObject) -> bool:
    name = obj.name
    if not (is_wall_object(name) or is_floor_object(name) or detect_opening_type(name) is not None):
        return False
    return not is_named_furniture(obj)


def extract_furniture(asset: SceneAsset) -> List[FurnitureItem]:
    furniture = []
    for obj in asset.mesh_objects():
        if _is_structural(obj):
            continue
        try:
            item = build_furniture_item(obj)
        except ValueError as exc:
            logger.warning("Skipping furniture '%s': %s", obj.name, exc)
            continue
        if item is not None:
            furniture.append(item)
    return furniture


# ----------------------------------------------------------------------
# Openings and floor
# ----------------------------------------------------------------------

def detect_opening_type(name: str) -> Optional[OpeningType]:
    lowered = name.lower()
    for keyword, opening_type in OPENING_KEYWORDS:
        if keyword in lowered:
            return opening_type
    return None


def extract_openings(asset: SceneAsset) -> List[Opening]:
    openings = []
    for obj in asset.objects:
        opening_type = detect_opening_type(obj.name)
        if opening_type is None or is_named_furniture(obj):
            continue
        bounds = obj.bounds
        if bounds is None:
            logger.warning("Skipping opening '%s': no geometry", obj.name)
            continue
        openings.append(Opening.of_type(opening_type, bounds))
    return openings


def is_floor_object(name: str) -> bool:
    lowered = name.lower()
    return "floor" in lowered or "ground" in lowered


def calculate_floor_area(mesh: trimesh.Trimesh) -> float:
    """
    Area of the union of the XY projections of the mesh's upward-facing triangles.

    Returns 0.0 when the mesh has no upward-facing triangles.
    """
    if len(mesh.faces) == 0:
        return 0.0

    upward = mesh.face_normals[:, 2] > UPWARD_NORMAL_MIN_Z
    polygons = []
    for triangle in mesh.triangles[upward]:
        polygon = Polygon(triangle[:, :2])
        if polygon.is_valid and polygon.area > 0:
            polygons.append(polygon)

    if not polygons:
        return 0.0
    return float(unary_union(polygons).area)


def extract_floor_plan(asset: SceneAsset, room_bounds: BoundingBox) -> FloorPlan:
    for obj in asset.mesh_objects():
        if not is_floor_object(obj.name) or is_named_furniture(obj):
            continue
        area = calculate_floor_area(obj.mesh)
        if area > 0:
            return FloorPlan(bounds=obj.bounds, area=area)
        return FloorPlan.from_bounds(obj.bounds)

    return FloorPlan.from_bounds(room_bounds)


# ----------------------------------------------------------------------
# Repair
# ----------------------------------------------------------------------

def infer_table(room_bounds: BoundingBox) -> FurnitureItem:
    """A standard table standing in the middle of the room."""
    center = room_bounds.center
    base = Point3D(center.x, center.y, room_bounds.min.z + INFERRED_TABLE_SIZE.z / 2)
    bounds = BoundingBox.centered(base, INFERRED_TABLE_SIZE)
    return FurnitureItem(
        type=FurnitureType.TABLE,
        bounds=bounds,
        surfaces=extract_placement_surfaces(None, FurnitureType.TABLE, bounds),
        confidence=INFERRED_TABLE_CONFIDENCE,
    )


def repair_room_model(room_model: RoomModel) -> RoomModel:
    """
    Synthesize missing structure from the room bounds.

    Adds four walls when the model has none, and a table when a large room
    has almost no furniture. Returns a new model with the same id.
    """
    walls = []
    if not room_model.walls:
        walls = infer_walls_from_bounds(room_model.bounds)

    furniture = []
    if (room_model.floor.area > INFERRED_TABLE_MIN_FLOOR_AREA and
            len(room_model.furniture) < INFERRED_TABLE_MAX_FURNITURE):
        furniture.append(infer_table(room_model.bounds))

    return room_model.with_additions(walls=walls, furniture=furniture)


# ----------------------------------------------------------------------
# Pipeline
# ----------------------------------------------------------------------

def build_room_model(asset: SceneAsset, verbose: bool = False) -> RoomModel:
    """Run extraction steps 1-5 without the quality gate."""
    if asset.is_empty:
        raise MissingGeometryDataError(f"Scene '{asset.name}' contains no objects")

    if verbose:
        print(f"\nStep 1: Extracting room bounds from {len(asset.objects)} objects...")
    bounds = extract_room_bounds(asset)
    if verbose:
        size = bounds.size
        print(f"  Room: {size.x:.2f} x {size.y:.2f} x {size.z:.2f} m")

    if verbose:
        print("\nStep 2: Extracting walls...")
    walls = extract_walls(asset, bounds)

    if verbose:
        print("\nStep 3: Classifying furniture...")
    furniture = extract_furniture(asset)

    if verbose:
        print("\nStep 4: Extracting openings and floor...")
    openings = extract_openings(asset)
    floor = extract_floor_plan(asset, bounds)

    if verbose:
        surface_count = sum(len(item.surfaces) for item in furniture)
        print(f"  {len(walls)} walls, {len(furniture)} furniture items "
              f"({surface_count} surfaces), {len(openings)} openings")
        print(f"  Floor area: {floor.area:.2f} m²")

    return RoomModel(
        name=asset.name,
        bounds=bounds,
        walls=walls,
        furniture=furniture,
        openings=openings,
        floor=floor,
    )


def parse_scene_asset(
    asset: SceneAsset,
    quality_assessor: Optional[QualityAssessor] = assess_scan_quality,
    enable_repair: bool = True,
    verbose: bool = False
) -> RoomModel:
    """
    Parse a scene asset into a room model.

    Args:
        asset: The loaded scene asset
        quality_assessor: Callable scoring a RoomModel; None skips the quality gate
        enable_repair: Repair an unacceptable model once before failing
        verbose: Print progress information

    Returns:
        RoomModel assessed as acceptable (or unassessed when no assessor is given)

    Raises:
        MissingGeometryDataError: The asset has no objects
        InsufficientRoomDataError: Implausible bounds, or quality still unacceptable
    """
    start_time = time.time()

    if verbose:
        print(f"\n{'='*60}")
        print(f"Room Model Extraction: {asset.name}")
        print(f"{'='*60}")

    room_model = build_room_model(asset, verbose=verbose)

    if quality_assessor is not None:
        if verbose:
            print("\nStep 5: Assessing scan quality...")

        assessment = quality_assessor(room_model)
        if verbose:
            print(f"  Overall quality: {assessment.overall_quality:.2f}")

        if not assessment.is_acceptable_for_analysis:
            if not enable_repair:
                raise InsufficientRoomDataError(
                    f"Scan quality {assessment.overall_quality:.2f} is not acceptable and repair is disabled"
                )

            if verbose:
                print("  Quality not acceptable, repairing model...")
            room_model = repair_room_model(room_model)

            # Repair runs once; a second failure is final
            assessment = quality_assessor(room_model)
            if verbose:
                print(f"  Quality after repair: {assessment.overall_quality:.2f}")
            if not assessment.is_acceptable_for_analysis:
                raise InsufficientRoomDataError(
                    f"Scan quality {assessment.overall_quality:.2f} is not acceptable after repair"
                )

    if verbose:
        elapsed = time.time() - start_time
        print(f"\n{'='*60}")
        print(f"Extraction complete in {elapsed:.2f}s")
        print(f"{'='*60}\n")

    return room_model


def parse_room_scan_file(
    path: str,
    y_up: bool = False,
    quality_assessor: Optional[QualityAssessor] = assess_scan_quality,
    enable_repair: bool = True,
    verbose: bool = False
) -> RoomModel:
    """Load a scene file and parse it into a room model."""
    asset = load_scene_asset(path, y_up=y_up)
    return parse_scene_asset(
        asset,
        quality_assessor=quality_assessor,
        enable_repair=enable_repair,
        verbose=verbose,
    )
