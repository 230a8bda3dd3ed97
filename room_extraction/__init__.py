"""
Room Model Extraction Package

Turn captured 3D room scans into structured room models (walls, furniture
with placement surfaces, openings, floor plan) for equipment placement.
"""

from .geometry import (
    Point3D,
    Vector3D,
    BoundingBox,
    segments_intersect_2d,
)
from .types import (
    FurnitureType,
    WallMaterial,
    SurfaceAccessibility,
    OpeningType,
    WallElement,
    PlacementSurface,
    FurnitureItem,
    Opening,
    FloorPlan,
    DevicePlacement,
    RoomModel,
)
from .errors import (
    RoomExtractionError,
    InvalidInputAssetError,
    MissingGeometryDataError,
    InsufficientRoomDataError,
    CorruptedMeshDataError,
    UnsupportedFormatError,
    OversizeInputError,
    ProcessingTimeoutError,
)
from .config import RoomExtractionConfig
from .scene_loader import (
    SceneObject,
    SceneAsset,
    load_scene_asset,
    scene_asset_from_trimesh,
    scene_asset_from_meshes,
)
from .coordinate_transformer import (
    CoordinateUnits,
    CoordinateOrientation,
    ConsistencyLevel,
    CoordinateSystemInfo,
    TransformState,
    configure,
    auto_configure,
    auto_configure_from_analysis,
    create_rotation_matrix,
    transform_point,
    transform_vector,
    transform_bounding_box,
    inverse_transform_point,
    transform_room_model,
    analyze_coordinate_system,
)
from .furniture_detector import (
    detect_furniture_type,
    classify_furniture,
    is_placement_suitable,
)
from .surface_analyzer import (
    extract_placement_surfaces,
    evaluate_accessibility,
    can_accommodate_device,
    calculate_optimal_placement,
)
from .quality_assessor import (
    QualityLevel,
    QualityIssue,
    QualityRecommendation,
    ScanQualityAssessment,
    assess_scan_quality,
)
from .room_parser import (
    parse_scene_asset,
    parse_room_scan_file,
    repair_room_model,
    infer_walls_from_bounds,
)
from .service import (
    RoomScanWarning,
    RoomScanResult,
    DetailedRoomAnalysis,
    validate_scan_file,
    process_room_scan,
    analyze_room_scan,
)

__all__ = [
    # Geometry
    'Point3D',
    'Vector3D',
    'BoundingBox',
    'segments_intersect_2d',
    # Types
    'FurnitureType',
    'WallMaterial',
    'SurfaceAccessibility',
    'OpeningType',
    'WallElement',
    'PlacementSurface',
    'FurnitureItem',
    'Opening',
    'FloorPlan',
    'DevicePlacement',
    'RoomModel',
    # Errors
    'RoomExtractionError',
    'InvalidInputAssetError',
    'MissingGeometryDataError',
    'InsufficientRoomDataError',
    'CorruptedMeshDataError',
    'UnsupportedFormatError',
    'OversizeInputError',
    'ProcessingTimeoutError',
    # Configuration
    'RoomExtractionConfig',
    # Scene loading
    'SceneObject',
    'SceneAsset',
    'load_scene_asset',
    'scene_asset_from_trimesh',
    'scene_asset_from_meshes',
    # Coordinates
    'CoordinateUnits',
    'CoordinateOrientation',
    'ConsistencyLevel',
    'CoordinateSystemInfo',
    'TransformState',
    'configure',
    'auto_configure',
    'auto_configure_from_analysis',
    'create_rotation_matrix',
    'transform_point',
    'transform_vector',
    'transform_bounding_box',
    'inverse_transform_point',
    'transform_room_model',
    'analyze_coordinate_system',
    # Furniture
    'detect_furniture_type',
    'classify_furniture',
    'is_placement_suitable',
    # Surfaces
    'extract_placement_surfaces',
    'evaluate_accessibility',
    'can_accommodate_device',
    'calculate_optimal_placement',
    # Quality
    'QualityLevel',
    'QualityIssue',
    'QualityRecommendation',
    'ScanQualityAssessment',
    'assess_scan_quality',
    # Parsing
    'parse_scene_asset',
    'parse_room_scan_file',
    'repair_room_model',
    'infer_walls_from_bounds',
    # Service
    'RoomScanWarning',
    'RoomScanResult',
    'DetailedRoomAnalysis',
    'validate_scan_file',
    'process_room_scan',
    'analyze_room_scan',
]
