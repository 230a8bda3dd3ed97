"""
Error taxonomy for room model extraction.

Every error here is fatal to the current parse. Per-object failures during
extraction are handled locally and never surface as one of these.
"""


class RoomExtractionError(Exception):
    """Base class for all room extraction failures."""

    default_message = "Room extraction failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class InvalidInputAssetError(RoomExtractionError):
    default_message = "Scene asset is missing or unreadable"


class MissingGeometryDataError(RoomExtractionError):
    default_message = "Scene asset contains no objects"


class InsufficientRoomDataError(RoomExtractionError):
    default_message = "Insufficient room data for analysis"


class CorruptedMeshDataError(RoomExtractionError):
    default_message = "Mesh lacks usable vertex position data"


class UnsupportedFormatError(RoomExtractionError):
    default_message = "Unsupported scene file format"


class OversizeInputError(RoomExtractionError):
    default_message = "Scene file exceeds the maximum allowed size"


class ProcessingTimeoutError(RoomExtractionError):
    default_message = "Room scan processing timed out"
