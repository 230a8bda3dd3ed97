"""
Scan quality assessment.

Scores a room model on completeness, geometric accuracy, furniture
detection and geometry consistency, and decides whether it is good enough
for placement analysis.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Sequence, Tuple

from .geometry import BoundingBox
from .types import FurnitureItem, PLACEMENT_SUITABLE_TYPES, RoomModel, WallElement


MIN_ROOM_VOLUME = 2.0       # m^3
MAX_ROOM_VOLUME = 1000.0    # m^3
MIN_FURNITURE_CONFIDENCE = 0.3
MIN_WALL_COUNT = 3
MAX_ASPECT_RATIO = 10.0
MIN_FLOOR_AREA = 4.0        # m^2
WALL_CONNECTION_TOLERANCE = 0.1

OVERALL_WEIGHTS = {
    "completeness": 0.35,
    "accuracy": 0.35,
    "consistency": 0.20,
    "furniture_detection": 0.10,
}


class QualityLevel(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"
    UNUSABLE = "unusable"


class QualityIssue(Enum):
    MISSING_WALLS = "missing_walls"
    INSUFFICIENT_WALLS = "insufficient_walls"
    ROOM_TOO_SMALL = "room_too_small"
    ROOM_TOO_LARGE = "room_too_large"
    NO_FURNITURE_DETECTED = "no_furniture_detected"
    LOW_FURNITURE_CONFIDENCE = "low_furniture_confidence"
    EXTREME_ASPECT_RATIO = "extreme_aspect_ratio"
    INSUFFICIENT_FLOOR_AREA = "insufficient_floor_area"


class QualityRecommendation(Enum):
    RESCAN_WALLS = "rescan_walls"
    COMPLETE_CAPTURE = "complete_capture"
    MULTIPLE_SCANS = "multiple_scans"
    IMPROVE_SCANNING = "improve_scanning"
    VALIDATE_BOUNDARIES = "validate_boundaries"
    RESCAN_FLOOR = "rescan_floor"


ISSUE_RECOMMENDATIONS = {
    QualityIssue.MISSING_WALLS: QualityRecommendation.RESCAN_WALLS,
    QualityIssue.INSUFFICIENT_WALLS: QualityRecommendation.RESCAN_WALLS,
    QualityIssue.ROOM_TOO_SMALL: QualityRecommendation.COMPLETE_CAPTURE,
    QualityIssue.ROOM_TOO_LARGE: QualityRecommendation.MULTIPLE_SCANS,
    QualityIssue.NO_FURNITURE_DETECTED: QualityRecommendation.IMPROVE_SCANNING,
    QualityIssue.LOW_FURNITURE_CONFIDENCE: QualityRecommendation.IMPROVE_SCANNING,
    QualityIssue.EXTREME_ASPECT_RATIO: QualityRecommendation.VALIDATE_BOUNDARIES,
    QualityIssue.INSUFFICIENT_FLOOR_AREA: QualityRecommendation.RESCAN_FLOOR,
}


@dataclass(frozen=True)
class ScanQualityAssessment:
    completeness: float
    accuracy: float
    furniture_detection_rate: float
    geometry_consistency: float
    overall_quality: float
    issues: Tuple[QualityIssue, ...] = ()
    recommendations: Tuple[QualityRecommendation, ...] = ()

    @property
    def is_acceptable_for_analysis(self) -> bool:
        return self.overall_quality > 0.7 and self.completeness > 0.8

    @property
    def quality_level(self) -> QualityLevel:
        if self.overall_quality >= 0.9:
            return QualityLevel.EXCELLENT
        if self.overall_quality >= 0.8:
            return QualityLevel.GOOD
        if self.overall_quality >= 0.7:
            return QualityLevel.ACCEPTABLE
        if self.overall_quality >= 0.5:
            return QualityLevel.POOR
        return QualityLevel.UNUSABLE


QualityAssessor = Callable[[RoomModel], ScanQualityAssessment]


def _aspect_ratio(bounds: BoundingBox) -> float:
    size = bounds.size
    shorter = min(size.x, size.y)
    if shorter <= 0:
        return math.inf
    return max(size.x, size.y) / shorter


# ----------------------------------------------------------------------
# Completeness
# ----------------------------------------------------------------------

def assess_completeness(room: RoomModel) -> float:
    score = 0.0

    # Structure (0.4)
    if room.walls:
        score += 0.2
    if room.floor.area > 0:
        score += 0.2

    # Bounds (0.3)
    volume = room.bounds.volume
    if MIN_ROOM_VOLUME <= volume <= MAX_ROOM_VOLUME:
        score += 0.3
    elif volume > 0:
        score += 0.1

    # Furniture (0.2), optimal around five pieces
    if room.furniture:
        score += 0.2 * min(1.0, len(room.furniture) / 5.0)

    # Openings (0.1)
    if room.openings:
        score += 0.1

    return score


# ----------------------------------------------------------------------
# Accuracy
# ----------------------------------------------------------------------

def wall_connectivity(walls: Sequence[WallElement]) -> float:
    """Share of wall endpoints that meet an endpoint of another wall."""
    if not walls:
        return 0.0

    connected = 0
    for wall in walls:
        for endpoint in (wall.start, wall.end):
            if any(
                other.id != wall.id and (
                    other.start.distance(endpoint) < WALL_CONNECTION_TOLERANCE or
                    other.end.distance(endpoint) < WALL_CONNECTION_TOLERANCE
                )
                for other in walls
            ):
                connected += 1

    return connected / (len(walls) * 2)


def wall_consistency(walls: Sequence[WallElement]) -> float:
    if len(walls) < MIN_WALL_COUNT:
        return 0.0

    heights = [w.height for w in walls]
    mean_height = sum(heights) / len(heights)
    if mean_height > 0:
        variance = sum((h - mean_height) ** 2 for h in heights) / len(heights)
        height_consistency = max(0.0, 1.0 - variance / (mean_height * mean_height))
    else:
        height_consistency = 0.0

    plausible = sum(
        1.0 for w in walls
        if 0.5 <= w.length <= 20.0 and 2.0 <= w.height <= 5.0
    ) / len(walls)

    return (wall_connectivity(walls) + height_consistency + plausible) / 3.0


def furniture_room_consistency(furniture: Sequence[FurnitureItem], room_bounds: BoundingBox) -> float:
    if not furniture:
        return 1.0

    score = 0.0
    room_volume = room_bounds.volume
    for item in furniture:
        if not room_bounds.contains(item.bounds.center):
            continue
        if room_volume > 0 and item.bounds.volume / room_volume < 0.5:
            score += 1.0
        else:
            score += 0.5

    return score / len(furniture)


def assess_accuracy(room: RoomModel) -> float:
    scores = []

    aspect = _aspect_ratio(room.bounds)
    if aspect <= MAX_ASPECT_RATIO:
        scores.append(1.0)
    else:
        scores.append(max(0.0, 1.0 - (aspect - MAX_ASPECT_RATIO) / 10.0))

    if room.walls:
        scores.append(wall_consistency(room.walls))

    if room.furniture:
        scores.append(furniture_room_consistency(room.furniture, room.bounds))

    computed_area = room.bounds.footprint_area
    reported_area = room.floor.area
    larger = max(computed_area, reported_area)
    scores.append(min(computed_area, reported_area) / larger if larger > 0 else 0.0)

    return sum(scores) / len(scores)


# ----------------------------------------------------------------------
# Furniture detection
# ----------------------------------------------------------------------

def expected_furniture_count(room_area: float) -> float:
    if room_area < 10:
        return 2.0
    if room_area < 25:
        return 4.0
    if room_area < 50:
        return 6.0
    return 8.0


def assess_furniture_detection(room: RoomModel) -> float:
    if not room.furniture:
        # partial credit for empty rooms
        return 0.3

    count = len(room.furniture)
    expected = expected_furniture_count(room.bounds.footprint_area)
    count_ratio = min(count, expected) / max(count, expected)

    mean_confidence = sum(item.confidence for item in room.furniture) / count
    diversity = min(1.0, len({item.type for item in room.furniture}) / 3.0)
    suitable = sum(1 for item in room.furniture if item.type in PLACEMENT_SUITABLE_TYPES) / count

    return (count_ratio + mean_confidence + diversity + suitable) / 4.0


# ----------------------------------------------------------------------
# Geometry consistency
# ----------------------------------------------------------------------

def bounds_consistency(room: RoomModel) -> float:
    issues = 0
    for item in room.furniture:
        if not room.bounds.intersects(item.bounds):
            issues += 1
    for wall in room.walls:
        if not room.bounds.contains(wall.start) or not room.bounds.contains(wall.end):
            issues += 1

    size = room.bounds.size
    if size.x <= 0 or size.y <= 0 or size.z <= 0:
        issues += 2

    total = len(room.furniture) + len(room.walls) + 1
    return max(0.0, 1.0 - issues / total)


def overlap_consistency(furniture: Sequence[FurnitureItem]) -> float:
    """Penalize furniture pairs overlapping by more than 10% of the smaller item."""
    pairs = 0
    overlapping = 0
    for i in range(len(furniture)):
        for j in range(i + 1, len(furniture)):
            pairs += 1
            a, b = furniture[i].bounds, furniture[j].bounds
            if not a.intersects(b):
                continue
            if a.overlap_volume(b) > min(a.volume, b.volume) * 0.1:
                overlapping += 1

    if pairs == 0:
        return 1.0
    return max(0.0, 1.0 - overlapping / pairs)


def scale_consistency(room: RoomModel) -> float:
    """Furniture should be clearly smaller than the room's diagonal."""
    if not room.furniture:
        return 1.0

    room_diagonal = room.bounds.size.magnitude
    score = sum(
        1.0 if item.bounds.size.magnitude < room_diagonal * 0.8 else 0.5
        for item in room.furniture
    )
    return score / len(room.furniture)


def assess_geometry_consistency(room: RoomModel) -> float:
    return (bounds_consistency(room) + overlap_consistency(room.furniture) + scale_consistency(room)) / 3.0


# ----------------------------------------------------------------------
# Issues and overall
# ----------------------------------------------------------------------

def identify_quality_issues(room: RoomModel) -> List[QualityIssue]:
    issues = []

    if not room.walls:
        issues.append(QualityIssue.MISSING_WALLS)
    elif len(room.walls) < MIN_WALL_COUNT:
        issues.append(QualityIssue.INSUFFICIENT_WALLS)

    volume = room.bounds.volume
    if volume < MIN_ROOM_VOLUME:
        issues.append(QualityIssue.ROOM_TOO_SMALL)
    elif volume > MAX_ROOM_VOLUME:
        issues.append(QualityIssue.ROOM_TOO_LARGE)

    if not room.furniture:
        issues.append(QualityIssue.NO_FURNITURE_DETECTED)
    else:
        low_confidence = [f for f in room.furniture if f.confidence < MIN_FURNITURE_CONFIDENCE]
        if len(low_confidence) > len(room.furniture) // 2:
            issues.append(QualityIssue.LOW_FURNITURE_CONFIDENCE)

    if _aspect_ratio(room.bounds) > MAX_ASPECT_RATIO:
        issues.append(QualityIssue.EXTREME_ASPECT_RATIO)

    if room.floor.area < MIN_FLOOR_AREA:
        issues.append(QualityIssue.INSUFFICIENT_FLOOR_AREA)

    return issues


def recommendations_for(issues: Sequence[QualityIssue]) -> List[QualityRecommendation]:
    recommendations = []
    for issue in issues:
        recommendation = ISSUE_RECOMMENDATIONS[issue]
        if recommendation not in recommendations:
            recommendations.append(recommendation)
    return recommendations


def assess_scan_quality(room: RoomModel) -> ScanQualityAssessment:
    """
    Assess the overall quality of a room model.

    Args:
        room: The assembled room model

    Returns:
        ScanQualityAssessment with component scores, issues and recommendations
    """
    completeness = assess_completeness(room)
    accuracy = assess_accuracy(room)
    furniture_detection = assess_furniture_detection(room)
    consistency = assess_geometry_consistency(room)

    overall = (
        OVERALL_WEIGHTS["completeness"] * completeness +
        OVERALL_WEIGHTS["accuracy"] * accuracy +
        OVERALL_WEIGHTS["consistency"] * consistency +
        OVERALL_WEIGHTS["furniture_detection"] * furniture_detection
    )

    issues = identify_quality_issues(room)

    return ScanQualityAssessment(
        completeness=completeness,
        accuracy=accuracy,
        furniture_detection_rate=furniture_detection,
        geometry_consistency=consistency,
        overall_quality=overall,
        issues=tuple(issues),
        recommendations=tuple(recommendations_for(issues)),
    )
