"""Capture timestamp resolution: sidecar -> embedded tag -> filesystem time."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

import exifread

from .exceptions import CaptureTagError
from .metadata_index import MetadataIndex

logger = logging.getLogger(__name__)

CAPTURE_TAG = 'EXIF DateTimeOriginal'

# Raw EXIF uses colons in the date part; the dashed form is what most
# tools display and is accepted as well.
CAPTURE_TAG_FORMATS = ('%Y:%m:%d %H:%M:%S', '%Y-%m-%d %H:%M:%S')


class TimestampSource(Enum):
    """Where a resolved timestamp came from."""
    SIDECAR_METADATA = 'sidecar'
    EMBEDDED_CAPTURE_TAG = 'exif'
    FILESYSTEM_TIME = 'filesystem'


@dataclass(frozen=True)
class ResolvedTimestamp:
    """The single authoritative UTC instant chosen for a file."""
    value: datetime
    source: TimestampSource

    @property
    def unix_seconds(self) -> int:
        return int(self.value.timestamp())


def read_capture_tag(file_path: Path) -> datetime:
    """
    Read the embedded original capture date-time of an image.

    The tag carries local wall-clock time with no zone; it is taken as UTC
    unchanged so that repeated runs stay consistent.

    Raises:
        CaptureTagError: If there is no metadata container, no tag, or the
            value cannot be parsed
    """
    try:
        with open(file_path, 'rb') as f:
            tags = exifread.process_file(f, stop_tag='DateTimeOriginal', details=False)
    except Exception as e:
        raise CaptureTagError(f"No EXIF metadata found in {file_path}: {e}") from e

    if not tags:
        raise CaptureTagError(f"No EXIF metadata found in {file_path}")

    tag = tags.get(CAPTURE_TAG)
    if tag is None:
        raise CaptureTagError(f"No EXIF DateTimeOriginal field found in {file_path}")

    date_str = str(tag).strip()
    for fmt in CAPTURE_TAG_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise CaptureTagError(
        f"Failed to parse EXIF DateTimeOriginal {date_str!r} for {file_path}"
    )


class SidecarStrategy:
    """Exact base-name lookup in the sidecar metadata index."""

    source = TimestampSource.SIDECAR_METADATA

    def __init__(self, index: MetadataIndex):
        self.index = index

    def resolve(self, file_path: Path) -> Optional[datetime]:
        return self.index.get(file_path.name)


class CaptureTagStrategy:
    """Embedded DateTimeOriginal tag of the primary image."""

    source = TimestampSource.EMBEDDED_CAPTURE_TAG

    def resolve(self, file_path: Path) -> Optional[datetime]:
        try:
            return read_capture_tag(file_path)
        except CaptureTagError as e:
            logger.warning(f"{e}, falling back to filesystem time")
            return None


class FilesystemTimeStrategy:
    """Creation time where the platform reports it, modification time otherwise."""

    source = TimestampSource.FILESYSTEM_TIME

    def resolve(self, file_path: Path) -> Optional[datetime]:
        stat = file_path.stat()
        created = getattr(stat, 'st_birthtime', None)
        seconds = created if created is not None else stat.st_mtime
        return datetime.fromtimestamp(seconds, tz=timezone.utc)


class TimestampResolver:
    """Runs an ordered list of strategies; the first one that answers wins."""

    def __init__(self, index: MetadataIndex, strategies: Optional[Sequence] = None):
        if strategies is None:
            strategies = [
                SidecarStrategy(index),
                CaptureTagStrategy(),
                FilesystemTimeStrategy(),
            ]
        self.strategies: List = list(strategies)

    def resolve(self, file_path: Path) -> ResolvedTimestamp:
        """
        Resolve the capture timestamp of a file.

        Never gives up while the file is readable: the filesystem strategy
        always answers. An OSError from stat() is left to the caller.
        """
        for strategy in self.strategies:
            value = strategy.resolve(file_path)
            if value is not None:
                logger.debug(
                    f"Resolved {file_path} to {value.isoformat()} from {strategy.source.value}"
                )
                return ResolvedTimestamp(value, strategy.source)

        raise LookupError(f"No timestamp strategy answered for {file_path}")
