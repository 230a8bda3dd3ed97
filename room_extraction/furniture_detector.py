"""
Furniture classification from object names and bounding-box dimensions.

Classification runs a fixed sequence of strategies:
1. name pattern match, accepted only if the dimensions satisfy that type's rule
2. pure dimension match against every rule in specificity order

Both lookup tables are immutable and ordered, so the result for a given
name and bounding box is always the same.
"""

import operator
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple

from .geometry import BoundingBox
from .scene_loader import SceneObject
from .types import FurnitureType, PLACEMENT_SUITABLE_TYPES


@dataclass(frozen=True)
class Dimensions:
    """Furniture extents: width along X, depth along Y, height along Z."""
    width: float
    depth: float
    height: float

    @classmethod
    def from_bounds(cls, bounds: BoundingBox) -> "Dimensions":
        size = bounds.size
        return cls(width=size.x, depth=size.y, height=size.z)

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height


@dataclass(frozen=True)
class AspectRatioConstraint:
    """``numerator / denominator`` compared against ``limit`` (>= if minimum, else <=)."""
    numerator: str
    denominator: str
    limit: float
    minimum: bool

    def satisfied_by(self, dims: Dimensions) -> bool:
        denominator = getattr(dims, self.denominator)
        if denominator <= 0:
            return False
        ratio = getattr(dims, self.numerator) / denominator
        compare = operator.ge if self.minimum else operator.le
        return compare(ratio, self.limit)


def min_ratio(numerator: str, denominator: str, limit: float) -> AspectRatioConstraint:
    return AspectRatioConstraint(numerator, denominator, limit, minimum=True)


def max_ratio(numerator: str, denominator: str, limit: float) -> AspectRatioConstraint:
    return AspectRatioConstraint(numerator, denominator, limit, minimum=False)


@dataclass(frozen=True)
class DimensionRule:
    width_range: Tuple[float, float]
    depth_range: Tuple[float, float]
    height_range: Tuple[float, float]
    aspect_constraints: Tuple[AspectRatioConstraint, ...] = ()

    def matches(self, dims: Dimensions) -> bool:
        for value, (low, high) in (
            (dims.width, self.width_range),
            (dims.depth, self.depth_range),
            (dims.height, self.height_range),
        ):
            if not low <= value <= high:
                return False
        return all(c.satisfied_by(dims) for c in self.aspect_constraints)


# Checked in this order; compound names ("bedside_table", "bar_stool") must
# reach their specific type before the generic pattern of another type.
NAME_PATTERNS: Tuple[Tuple[FurnitureType, Tuple[str, ...]], ...] = (
    (FurnitureType.NIGHTSTAND, ("nightstand", "bedside_table", "night_table", "bedside_cabinet")),
    (FurnitureType.STOOL, ("stool", "bar_stool", "step_stool", "footstool")),
    (FurnitureType.TABLE, ("table", "dining_table", "coffee_table", "side_table",
                           "end_table", "console_table", "conference_table")),
    (FurnitureType.DESK, ("desk", "office_desk", "computer_desk", "writing_desk",
                          "workstation", "bureau")),
    (FurnitureType.DRESSER, ("dresser", "chest_of_drawers", "drawer", "armoire", "wardrobe")),
    (FurnitureType.SHELF, ("shelf", "bookshelf", "shelving", "shelving_unit",
                           "bookcase", "display_shelf", "wall_shelf")),
    (FurnitureType.CABINET, ("cabinet", "kitchen_cabinet", "storage_cabinet",
                             "media_cabinet", "tv_cabinet", "filing_cabinet")),
    (FurnitureType.COUNTER, ("counter", "kitchen_counter", "countertop", "bar",
                             "kitchen_island", "breakfast_bar")),
    (FurnitureType.SOFA, ("sofa", "couch", "loveseat", "sectional", "settee",
                          "chaise", "lounge")),
    (FurnitureType.CHAIR, ("chair", "dining_chair", "office_chair", "armchair",
                           "recliner", "ottoman")),
    (FurnitureType.BED, ("bed", "mattress", "bed_frame", "platform_bed",
                         "queen_bed", "king_bed", "twin_bed")),
)

DIMENSION_RULES = MappingProxyType({
    FurnitureType.TABLE: DimensionRule(
        (0.6, 3.0), (0.6, 2.0), (0.6, 1.2),
        (max_ratio("height", "width", 2.0),),
    ),
    FurnitureType.DESK: DimensionRule(
        (1.0, 2.5), (0.5, 1.2), (0.65, 0.85),
        (min_ratio("width", "depth", 1.2),),
    ),
    FurnitureType.DRESSER: DimensionRule(
        (0.8, 2.0), (0.4, 0.8), (0.7, 1.5),
        (min_ratio("height", "depth", 1.2),),
    ),
    FurnitureType.SHELF: DimensionRule(
        (0.3, 3.0), (0.15, 0.6), (0.3, 3.0),
        (max_ratio("depth", "width", 1.0), min_ratio("height", "depth", 1.0)),
    ),
    FurnitureType.CABINET: DimensionRule(
        (0.4, 2.5), (0.3, 0.8), (0.5, 2.5),
        (min_ratio("height", "depth", 1.0),),
    ),
    FurnitureType.COUNTER: DimensionRule(
        (1.0, 4.0), (0.5, 1.0), (0.85, 1.1),
        (min_ratio("width", "depth", 1.5),),
    ),
    FurnitureType.NIGHTSTAND: DimensionRule(
        (0.3, 0.8), (0.3, 0.6), (0.4, 0.8),
        (max_ratio("width", "depth", 2.0),),
    ),
    FurnitureType.SOFA: DimensionRule(
        (1.5, 3.5), (0.8, 1.2), (0.4, 1.2),
        (min_ratio("width", "depth", 1.5), max_ratio("height", "width", 0.8)),
    ),
    FurnitureType.CHAIR: DimensionRule(
        (0.4, 0.8), (0.4, 0.8), (0.4, 1.3),
        (max_ratio("width", "depth", 2.0),),
    ),
    FurnitureType.BED: DimensionRule(
        (0.9, 2.2), (1.9, 2.2), (0.2, 1.0),  # twin to king
        (min_ratio("depth", "width", 0.9), max_ratio("height", "width", 1.0)),
    ),
    FurnitureType.STOOL: DimensionRule(
        (0.25, 0.6), (0.25, 0.6), (0.4, 0.8),
        (max_ratio("width", "depth", 1.5),),
    ),
})

# Most specific rules first
DIMENSION_ORDER: Tuple[FurnitureType, ...] = (
    FurnitureType.COUNTER,
    FurnitureType.DESK,
    FurnitureType.TABLE,
    FurnitureType.DRESSER,
    FurnitureType.CABINET,
    FurnitureType.SHELF,
    FurnitureType.NIGHTSTAND,
    FurnitureType.BED,
    FurnitureType.SOFA,
    FurnitureType.CHAIR,
    FurnitureType.STOOL,
)


def detect_by_name(name: str) -> Optional[FurnitureType]:
    """First type whose patterns occur in the lower-cased name."""
    lowered = name.lower()
    for furniture_type, patterns in NAME_PATTERNS:
        if any(pattern in lowered for pattern in patterns):
            return furniture_type
    return None


def validate_dimensions(furniture_type: FurnitureType, dims: Dimensions) -> bool:
    rule = DIMENSION_RULES.get(furniture_type)
    return rule is None or rule.matches(dims)


def detect_by_dimensions(dims: Dimensions) -> Optional[FurnitureType]:
    for furniture_type in DIMENSION_ORDER:
        if DIMENSION_RULES[furniture_type].matches(dims):
            return furniture_type
    return None


def detect_by_validated_name(name: str, bounds: Optional[BoundingBox]) -> Optional[FurnitureType]:
    """Type named by the object, provided its bounds satisfy that type's dimension rule."""
    if bounds is None:
        return None
    candidate = detect_by_name(name)
    if candidate is not None and validate_dimensions(candidate, Dimensions.from_bounds(bounds)):
        return candidate
    return None


def classify_furniture(name: str, bounds: Optional[BoundingBox]) -> Optional[FurnitureType]:
    """
    Classify an object by name and bounding box.

    Args:
        name: Object name as found in the scene
        bounds: Object bounding box, or None for objects without geometry

    Returns:
        The detected FurnitureType, or None if the object is not furniture
    """
    if bounds is None:
        return None

    named = detect_by_validated_name(name, bounds)
    if named is not None:
        return named

    return detect_by_dimensions(Dimensions.from_bounds(bounds))


def detect_furniture_type(scene_object: SceneObject) -> Optional[FurnitureType]:
    """Classify a scene object as furniture, or return None."""
    return classify_furniture(scene_object.name, scene_object.bounds)


def is_placement_suitable(furniture_type: FurnitureType) -> bool:
    return furniture_type in PLACEMENT_SUITABLE_TYPES
