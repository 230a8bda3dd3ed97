"""
Configuration for room scan processing.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass
class RoomExtractionConfig:
    """Configuration parameters for the room scan processing service."""

    # Boundary limits
    processing_timeout_s: float = 30.0
    max_file_size_bytes: int = 100_000_000  # 100 MB
    supported_extensions: Tuple[str, ...] = (".obj", ".glb", ".gltf", ".ply", ".stl", ".off")

    # Scene loading
    y_up: bool = False  # glTF and many exporters use Y-up; the room model is Z-up

    # Pipeline stages
    enable_quality_assessment: bool = True
    # Unit detection classifies metric rooms under 10 m as centimeters, so
    # normalization is opt-in
    enable_coordinate_transformation: bool = False
    enable_model_repair: bool = True

    # Warnings
    low_quality_threshold: float = 0.7

    def __post_init__(self):
        """Validate configuration values."""
        if self.processing_timeout_s <= 0:
            raise ValueError("processing_timeout_s must be positive")
        if self.max_file_size_bytes <= 0:
            raise ValueError("max_file_size_bytes must be positive")
        if not self.supported_extensions:
            raise ValueError("supported_extensions must not be empty")
        if not 0.0 <= self.low_quality_threshold <= 1.0:
            raise ValueError("low_quality_threshold must be within [0, 1]")
        self.supported_extensions = tuple(ext.lower() for ext in self.supported_extensions)
