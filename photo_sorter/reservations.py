"""Process-wide table of claimed destination paths."""

import logging
import threading
from pathlib import Path
from typing import Set, Union

logger = logging.getLogger(__name__)


class ReservationTable:
    """Lock-protected set of destination paths claimed during a run.

    One instance is created at startup and handed to every placement worker.
    A path is claimable only if it is neither reserved nor present on disk,
    and the check and the insert happen under the same lock acquisition.
    Reservations are never released.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reserved: Set[str] = set()

    @staticmethod
    def _key(path: Union[str, Path]) -> str:
        return str(Path(path).absolute())

    def try_reserve(self, path: Union[str, Path]) -> bool:
        """
        Atomically claim a destination path.

        Args:
            path: Candidate destination path

        Returns:
            True if the path was free and is now reserved for the caller,
            False if another worker holds it or it already exists on disk
        """
        key = self._key(path)
        with self._lock:
            if key in self._reserved or Path(key).exists():
                return False
            self._reserved.add(key)
        logger.debug(f"Reserved {key}")
        return True

    def __contains__(self, path: Union[str, Path]) -> bool:
        key = self._key(path)
        with self._lock:
            return key in self._reserved

    def __len__(self) -> int:
        with self._lock:
            return len(self._reserved)
