"""
Exception hierarchy for the photo sorter.

Per-file errors are raised at the point of failure and caught at the
boundary of the stage that owns the file, so no single file can stop a run.
"""


class PhotoSorterError(Exception):
    """Base exception for all photo sorter errors."""
    pass


class SidecarParseError(PhotoSorterError):
    """Raised when a sidecar metadata file cannot be turned into an index entry."""
    pass


class CaptureTagError(PhotoSorterError):
    """Raised when a file has no usable embedded capture date-time."""
    pass


class PlacementError(PhotoSorterError):
    """Raised when a file cannot be placed into the destination tree."""
    pass


class CollisionLimitError(PlacementError):
    """Raised when every numbered name up to the configured bound is taken."""
    pass
