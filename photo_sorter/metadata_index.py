"""Sidecar metadata parsing and the filename -> capture time index."""

import json
import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from .exceptions import SidecarParseError

logger = logging.getLogger(__name__)

# Original filename -> UTC capture instant. Read-only once built.
MetadataIndex = Mapping[str, datetime]

_EPOCH_PATTERN = re.compile(r'[+-]?[0-9]+')


def parse_sidecar(sidecar_path: Path) -> Tuple[str, datetime]:
    """
    Parse one sidecar metadata file.

    The file must be a JSON object with a string ``title`` and a
    ``photoTakenTime.timestamp`` holding Unix epoch seconds as a string.

    Args:
        sidecar_path: Path to the sidecar file

    Returns:
        Tuple of (original filename, UTC capture datetime)

    Raises:
        SidecarParseError: If the file is unreadable or a field is missing
            or malformed
    """
    try:
        with open(sidecar_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError, RecursionError) as e:
        raise SidecarParseError(f"Unreadable sidecar {sidecar_path}: {e}") from e

    if not isinstance(data, dict):
        raise SidecarParseError(f"Sidecar is not an object: {sidecar_path}")

    title = data.get('title')
    if not isinstance(title, str):
        raise SidecarParseError(f"Missing title in {sidecar_path}")

    taken = data.get('photoTakenTime')
    raw_timestamp = taken.get('timestamp') if isinstance(taken, dict) else None
    if not isinstance(raw_timestamp, str):
        raise SidecarParseError(f"Missing photoTakenTime.timestamp in {sidecar_path}")

    if not _EPOCH_PATTERN.fullmatch(raw_timestamp):
        raise SidecarParseError(
            f"Unparseable timestamp {raw_timestamp!r} in {sidecar_path}"
        )

    try:
        taken_at = datetime.fromtimestamp(int(raw_timestamp), tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise SidecarParseError(
            f"Timestamp out of range for {title}: {raw_timestamp}"
        ) from e

    return title, taken_at


class MetadataIndexBuilder:
    """Builds the shared filename -> capture time index from sidecar files."""

    def __init__(self, workers: int = 4):
        self.workers = max(1, workers)
        self._entries: Dict[str, datetime] = {}
        self._lock = threading.Lock()
        self.parsed = 0
        self.skipped = 0

    def _ingest(self, sidecar_path: Path) -> bool:
        """Parse one sidecar and record it. Returns False if it was skipped."""
        try:
            title, taken_at = parse_sidecar(sidecar_path)
        except SidecarParseError as e:
            logger.warning(f"Skipping sidecar: {e}")
            return False

        with self._lock:
            self._entries[title] = taken_at
        logger.debug(f"Indexed {title} -> {taken_at.isoformat()}")
        return True

    def build(self, sidecar_files: Iterable[Path]) -> MetadataIndex:
        """
        Parse every sidecar file and return the completed, read-only index.

        Parsing runs in parallel. Only the insert into the shared mapping is
        serialized; a title seen twice keeps whichever entry was inserted last.

        Args:
            sidecar_files: Sidecar file paths, typically a lazy generator

        Returns:
            Immutable mapping of original filename to UTC capture datetime
        """
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            future_to_path = {
                executor.submit(self._ingest, path): path for path in sidecar_files
            }

            for future in as_completed(future_to_path):
                try:
                    indexed = future.result()
                except Exception as e:
                    logger.error(f"Exception parsing sidecar {future_to_path[future]}: {e}")
                    indexed = False

                if indexed:
                    self.parsed += 1
                else:
                    self.skipped += 1

        logger.info(
            f"Metadata index built: {len(self._entries):,} entries from "
            f"{self.parsed:,} sidecars ({self.skipped:,} skipped)"
        )
        return MappingProxyType(dict(self._entries))

