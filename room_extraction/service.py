"""
Room scan processing service.

Boundary layer around the extraction pipeline: validates input files, runs
the parse under a wall-clock timeout, optionally normalizes coordinates and
reports warnings, quality metrics and placement analysis.
"""

import logging
import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import RoomExtractionConfig
from .coordinate_transformer import (
    CoordinateSystemInfo,
    CoordinateUnits,
    analyze_coordinate_system,
    auto_configure_from_analysis,
    transform_room_model,
)
from .errors import (
    InvalidInputAssetError,
    OversizeInputError,
    ProcessingTimeoutError,
    UnsupportedFormatError,
)
from .quality_assessor import QualityLevel, ScanQualityAssessment, assess_scan_quality
from .room_parser import parse_scene_asset
from .scene_loader import load_scene_asset
from .types import PlacementSurface, RoomModel, SurfaceAccessibility


logger = logging.getLogger(__name__)

ALGORITHM_VERSION = "1.0.0"

WORKER_THREAD_NAME = "room-scan-worker"

# Estimated in-memory cost per entity, in bytes
BASE_MODEL_BYTES = 1000
WALL_BYTES = 200
FURNITURE_BYTES = 500
SURFACE_BYTES = 300

MAX_RECOMMENDED_GOOD_SURFACES = 3


class WarningKind(Enum):
    LOW_SCAN_QUALITY = "low_scan_quality"
    COORDINATE_TRANSFORMATION_APPLIED = "coordinate_transformation_applied"
    SCALING_APPLIED = "scaling_applied"
    NO_PLACEMENT_SURFACES = "no_placement_surfaces"
    NO_OPENINGS_DETECTED = "no_openings_detected"


@dataclass(frozen=True)
class RoomScanWarning:
    """A non-fatal finding about a processed scan; value carries the quality or scale when relevant."""
    kind: WarningKind
    message: str
    value: Optional[float] = None


@dataclass(frozen=True)
class ProcessingQualityMetrics:
    overall_quality: float
    geometry_accuracy: float
    furniture_detection_rate: float
    geometry_consistency: float

    @classmethod
    def from_assessment(cls, assessment: ScanQualityAssessment) -> "ProcessingQualityMetrics":
        return cls(
            overall_quality=assessment.overall_quality,
            geometry_accuracy=assessment.accuracy,
            furniture_detection_rate=assessment.furniture_detection_rate,
            geometry_consistency=assessment.geometry_consistency,
        )


@dataclass(frozen=True)
class RoomScanResult:
    room_model: RoomModel
    warnings: Tuple[RoomScanWarning, ...]
    processing_time: float
    quality_metrics: Optional[ProcessingQualityMetrics] = None


class SurfaceQuality(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"
    NONE = "none"


@dataclass(frozen=True)
class SurfaceAnalysis:
    """Summary of a room's placement surfaces."""
    total_surfaces: int
    total_area: float
    excellent_accessibility: int
    good_accessibility: int
    average_area: float
    recommended_surfaces: Tuple[PlacementSurface, ...]

    @property
    def viable_surface_count(self) -> int:
        return self.excellent_accessibility + self.good_accessibility

    @property
    def surface_quality(self) -> SurfaceQuality:
        if self.excellent_accessibility >= 3:
            return SurfaceQuality.EXCELLENT
        if self.viable_surface_count >= 2:
            return SurfaceQuality.GOOD
        if self.total_surfaces > 0:
            return SurfaceQuality.POOR
        return SurfaceQuality.NONE


class AnalysisRecommendation(Enum):
    IMPROVE_SCAN_QUALITY = "improve_scan_quality"
    ADD_SUITABLE_FURNITURE = "add_suitable_furniture"
    IMPROVE_SURFACE_ACCESSIBILITY = "improve_surface_accessibility"
    VERIFY_WALL_DETECTION = "verify_wall_detection"
    CHECK_COORDINATE_SYSTEM = "check_coordinate_system"


@dataclass(frozen=True)
class ProcessingMetadata:
    parsing_time: float
    memory_usage: int
    algorithm_version: str = ALGORITHM_VERSION


@dataclass(frozen=True)
class DetailedRoomAnalysis:
    room_model: RoomModel
    quality_assessment: ScanQualityAssessment
    coordinate_system_info: CoordinateSystemInfo
    surface_analysis: SurfaceAnalysis
    recommendations: Tuple[AnalysisRecommendation, ...]
    processing_metadata: ProcessingMetadata
    warnings: Tuple[RoomScanWarning, ...] = ()

    @property
    def quality_level(self) -> QualityLevel:
        return self.quality_assessment.quality_level

    @property
    def is_ready_for_placement_analysis(self) -> bool:
        return (self.quality_assessment.is_acceptable_for_analysis and
                self.surface_analysis.total_surfaces > 0 and
                self.coordinate_system_info.is_reliable)


# ----------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------

def validate_scan_file(path: str, config: RoomExtractionConfig) -> Path:
    """
    Check that a scan file exists, has a supported format and fits the size cap.

    Raises:
        InvalidInputAssetError: The file does not exist
        UnsupportedFormatError: The extension is not supported
        OversizeInputError: The file exceeds the configured maximum size
    """
    scan_path = Path(path)
    if not scan_path.is_file():
        raise InvalidInputAssetError(f"Scan file not found: {path}")

    if scan_path.suffix.lower() not in config.supported_extensions:
        raise UnsupportedFormatError(
            f"Unsupported scan format '{scan_path.suffix}', expected one of "
            f"{', '.join(config.supported_extensions)}"
        )

    size = scan_path.stat().st_size
    if size > config.max_file_size_bytes:
        raise OversizeInputError(
            f"Scan file is {size} bytes, limit is {config.max_file_size_bytes} bytes"
        )
    return scan_path


# ----------------------------------------------------------------------
# Processing
# ----------------------------------------------------------------------

def run_with_timeout(func, timeout_s: float, *args, **kwargs):
    """
    Run func in a daemon worker thread and wait at most timeout_s seconds for it.

    On expiry the worker is abandoned, not interrupted. It does not hold up
    interpreter exit, so the CLI returns as soon as the timeout is reported.

    Raises:
        ProcessingTimeoutError: The call did not finish in time
    """
    future: Future = Future()

    def work():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(func(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)

    threading.Thread(target=work, name=WORKER_THREAD_NAME, daemon=True).start()
    try:
        return future.result(timeout=timeout_s)
    except FutureTimeoutError:
        raise ProcessingTimeoutError(f"Processing exceeded {timeout_s:.1f}s") from None


def _parse_scan(scan_path: Path, config: RoomExtractionConfig, verbose: bool) -> RoomModel:
    asset = load_scene_asset(str(scan_path), y_up=config.y_up)
    return parse_scene_asset(
        asset,
        quality_assessor=assess_scan_quality if config.enable_quality_assessment else None,
        enable_repair=config.enable_model_repair,
        verbose=verbose,
    )


def apply_coordinate_normalization(room_model: RoomModel) -> Tuple[RoomModel, List[RoomScanWarning]]:
    """Transform the model into meters when its coordinate system needs it."""
    info = analyze_coordinate_system(room_model)
    if not info.requires_transformation:
        return room_model, []

    warnings = [RoomScanWarning(
        WarningKind.COORDINATE_TRANSFORMATION_APPLIED,
        "Coordinate transformation applied",
    )]
    if info.detected_units is not CoordinateUnits.METERS:
        warnings.append(RoomScanWarning(
            WarningKind.SCALING_APPLIED,
            f"Scaled from {info.detected_units.value} by {info.recommended_scale}",
            info.recommended_scale,
        ))

    state = auto_configure_from_analysis(room_model)
    return transform_room_model(state, room_model), warnings


def model_warnings(room_model: RoomModel) -> List[RoomScanWarning]:
    warnings = []
    if not room_model.all_surfaces():
        warnings.append(RoomScanWarning(
            WarningKind.NO_PLACEMENT_SURFACES,
            "No placement surfaces found",
        ))
    if not room_model.openings:
        warnings.append(RoomScanWarning(
            WarningKind.NO_OPENINGS_DETECTED,
            "No doors, windows or openings detected",
        ))
    return warnings


def process_room_scan(
    path: str,
    config: Optional[RoomExtractionConfig] = None,
    verbose: bool = False
) -> RoomScanResult:
    """
    Validate, parse and post-process one room scan file.

    Args:
        path: Path to the scan file
        config: Processing configuration (uses defaults if None)
        verbose: Print progress information

    Returns:
        RoomScanResult with the room model, warnings and quality metrics
    """
    if config is None:
        config = RoomExtractionConfig()

    start_time = time.time()
    scan_path = validate_scan_file(path, config)

    room_model = run_with_timeout(_parse_scan, config.processing_timeout_s, scan_path, config, verbose)

    warnings: List[RoomScanWarning] = []
    if config.enable_coordinate_transformation:
        room_model, transform_warnings = apply_coordinate_normalization(room_model)
        warnings.extend(transform_warnings)

    warnings.extend(model_warnings(room_model))

    quality_metrics = None
    if config.enable_quality_assessment:
        assessment = assess_scan_quality(room_model)
        quality_metrics = ProcessingQualityMetrics.from_assessment(assessment)
        if assessment.overall_quality < config.low_quality_threshold:
            warnings.append(RoomScanWarning(
                WarningKind.LOW_SCAN_QUALITY,
                f"Low scan quality: {assessment.overall_quality:.2f}",
                assessment.overall_quality,
            ))

    for warning in warnings:
        logger.info("%s: %s", scan_path.name, warning.message)

    return RoomScanResult(
        room_model=room_model,
        warnings=tuple(warnings),
        processing_time=time.time() - start_time,
        quality_metrics=quality_metrics,
    )


# ----------------------------------------------------------------------
# Analysis
# ----------------------------------------------------------------------

def analyze_placement_surfaces(surfaces: Sequence[PlacementSurface]) -> SurfaceAnalysis:
    excellent = [s for s in surfaces if s.accessibility is SurfaceAccessibility.EXCELLENT]
    good = [s for s in surfaces if s.accessibility is SurfaceAccessibility.GOOD]
    total_area = sum(s.area for s in surfaces)

    return SurfaceAnalysis(
        total_surfaces=len(surfaces),
        total_area=total_area,
        excellent_accessibility=len(excellent),
        good_accessibility=len(good),
        average_area=total_area / len(surfaces) if surfaces else 0.0,
        recommended_surfaces=tuple(excellent + good[:MAX_RECOMMENDED_GOOD_SURFACES]),
    )


def generate_recommendations(
    room_model: RoomModel,
    assessment: ScanQualityAssessment,
    coordinate_info: CoordinateSystemInfo
) -> List[AnalysisRecommendation]:
    recommendations = []

    if assessment.overall_quality < 0.8:
        recommendations.append(AnalysisRecommendation.IMPROVE_SCAN_QUALITY)

    surfaces = room_model.all_surfaces()
    if not surfaces:
        recommendations.append(AnalysisRecommendation.ADD_SUITABLE_FURNITURE)
    elif len(room_model.find_surfaces(SurfaceAccessibility.EXCELLENT)) < 2:
        recommendations.append(AnalysisRecommendation.IMPROVE_SURFACE_ACCESSIBILITY)

    if not room_model.walls:
        recommendations.append(AnalysisRecommendation.VERIFY_WALL_DETECTION)

    if not coordinate_info.is_reliable:
        recommendations.append(AnalysisRecommendation.CHECK_COORDINATE_SYSTEM)

    return recommendations


def estimate_memory_usage(room_model: RoomModel) -> int:
    """Rough in-memory size of a room model in bytes, from entity counts."""
    return (
        BASE_MODEL_BYTES +
        WALL_BYTES * len(room_model.walls) +
        FURNITURE_BYTES * len(room_model.furniture) +
        SURFACE_BYTES * len(room_model.all_surfaces())
    )


def analyze_room_scan(
    path: str,
    config: Optional[RoomExtractionConfig] = None,
    verbose: bool = False
) -> DetailedRoomAnalysis:
    """
    Process a room scan and add quality, coordinate system and placement analysis.

    Args:
        path: Path to the scan file
        config: Processing configuration (uses defaults if None)
        verbose: Print progress information

    Returns:
        DetailedRoomAnalysis for the processed room
    """
    result = process_room_scan(path, config, verbose=verbose)
    room_model = result.room_model

    assessment = assess_scan_quality(room_model)
    coordinate_info = analyze_coordinate_system(room_model)

    return DetailedRoomAnalysis(
        room_model=room_model,
        quality_assessment=assessment,
        coordinate_system_info=coordinate_info,
        surface_analysis=analyze_placement_surfaces(room_model.all_surfaces()),
        recommendations=tuple(generate_recommendations(room_model, assessment, coordinate_info)),
        processing_metadata=ProcessingMetadata(
            parsing_time=result.processing_time,
            memory_usage=estimate_memory_usage(room_model),
        ),
        warnings=result.warnings,
    )
