"""Destination derivation, collision-safe naming and copying."""

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Generator, Optional

from .exceptions import CollisionLimitError, PlacementError
from .reservations import ReservationTable
from .timestamps import ResolvedTimestamp
from .utils import calculate_sha256, ensure_directory, file_extension

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
)


def month_name(month: int) -> str:
    """English month name, 'Unknown' outside 1-12."""
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return 'Unknown'


def destination_directory(
    root: Path, file_path: Path, taken_at: datetime, no_extension_dir: str = 'no_ext'
) -> Path:
    """
    Compute <root>/<year>/<Month>/<ext> for a file.

    The extension bucket is lower-cased so that .JPG and .jpg share it.
    """
    ext = file_extension(file_path) or no_extension_dir
    return root / f"{taken_at.year:04d}" / month_name(taken_at.month) / ext


def candidate_names(file_path: Path) -> Generator[str, None, None]:
    """Yield name, stem_1.ext, stem_2.ext, ... keeping the original case."""
    yield file_path.name

    stem = file_path.stem
    suffix = file_path.suffix
    counter = 1
    while True:
        yield f"{stem}_{counter}{suffix}"
        counter += 1


@dataclass
class PlacementResult:
    """Outcome of placing one file."""
    source: Path
    destination: Optional[Path] = None
    timestamp: Optional[ResolvedTimestamp] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.destination is not None


class PlacementEngine:
    """Places files into the year/month/extension tree without overwriting."""

    def __init__(
        self,
        destination_root: Path,
        reservations: ReservationTable,
        no_extension_dir: str = 'no_ext',
        max_collision_attempts: int = 10000,
        verify_copies: bool = False,
        dry_run: bool = False,
    ):
        """
        Initialize the engine.

        Args:
            destination_root: Root of the organized tree
            reservations: Table shared by every worker of the run
            no_extension_dir: Bucket name for files without an extension
            max_collision_attempts: Highest numbered suffix tried before giving up
            verify_copies: Compare SHA256 of source and copy after copying
            dry_run: Claim names and report them without touching the disk
        """
        self.destination_root = Path(destination_root)
        self.reservations = reservations
        self.no_extension_dir = no_extension_dir
        self.max_collision_attempts = max_collision_attempts
        self.verify_copies = verify_copies
        self.dry_run = dry_run

    def place(self, file_path: Path, resolved: ResolvedTimestamp) -> PlacementResult:
        """
        Copy a file to its dated destination and stamp it with the resolved time.

        Failures are logged and returned in the result, never raised.
        """
        try:
            target_dir = destination_directory(
                self.destination_root, file_path, resolved.value, self.no_extension_dir
            )
            if not self.dry_run and not ensure_directory(target_dir):
                raise PlacementError(f"Failed to create directory {target_dir}")

            destination = self.claim(target_dir, file_path)

            if self.dry_run:
                logger.info(f"DRY RUN: would copy {file_path} -> {destination}")
            else:
                self._copy_and_stamp(file_path, destination, resolved)
                logger.debug(f"Placed {file_path} -> {destination}")

            return PlacementResult(file_path, destination, resolved)

        except PlacementError as e:
            logger.error(f"Error processing photo file {file_path}: {e}")
            return PlacementResult(file_path, timestamp=resolved, error=str(e))

    def claim(self, target_dir: Path, file_path: Path) -> Path:
        """
        Reserve the first free name for file_path inside target_dir.

        Each candidate is checked and reserved in one atomic step. The lock is
        not held across candidates, so concurrent searches interleave.

        Raises:
            CollisionLimitError: If all names up to the bound are taken
        """
        for attempt, name in enumerate(candidate_names(file_path)):
            if attempt > self.max_collision_attempts:
                raise CollisionLimitError(
                    f"No free name for {file_path.name} in {target_dir} "
                    f"after {self.max_collision_attempts} attempts"
                )
            candidate = target_dir / name
            if self.reservations.try_reserve(candidate):
                if attempt:
                    logger.debug(f"Name collision for {file_path.name}, using {name}")
                return candidate

    def _copy_and_stamp(self, source: Path, destination: Path, resolved: ResolvedTimestamp):
        """Copy bytes and set both access and modification time on the copy."""
        try:
            shutil.copy2(source, destination)
        except OSError as e:
            raise PlacementError(f"Failed to copy {source} -> {destination}: {e}") from e

        if self.verify_copies:
            source_hash = calculate_sha256(source)
            if not source_hash or source_hash != calculate_sha256(destination):
                raise PlacementError(f"Hash verification failed for {source} -> {destination}")

        seconds = resolved.unix_seconds
        try:
            os.utime(destination, (seconds, seconds))
        except OSError as e:
            raise PlacementError(f"Failed to set file times on {destination}: {e}") from e
