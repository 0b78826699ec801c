"""Utility functions for photo sorting."""

import hashlib
import psutil
from datetime import datetime
from pathlib import Path
from typing import Generator, Iterable
import logging

logger = logging.getLogger(__name__)


def calculate_sha256(file_path: Path, chunk_size: int = 8192) -> str:
    """
    Calculate SHA256 hash of a file.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read at a time

    Returns:
        SHA256 hash as hexadecimal string
    """
    hasher = hashlib.sha256()
    try:
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
        return hasher.hexdigest()
    except Exception as e:
        logger.error(f"Failed to calculate hash for {file_path}: {e}")
        return ""


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes.

    Args:
        file_path: Path to file

    Returns:
        File size in bytes, 0 if error
    """
    try:
        return file_path.stat().st_size
    except Exception as e:
        logger.error(f"Failed to get size for {file_path}: {e}")
        return 0


def format_bytes(bytes_value: int) -> str:
    """
    Format bytes as human-readable string.

    Args:
        bytes_value: Size in bytes

    Returns:
        Formatted string like "1.2GB"
    """
    if bytes_value == 0:
        return "0B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.1f}{units[unit_index]}"


def get_available_space(path: Path) -> int:
    """
    Get available disk space for a path in bytes.

    Args:
        path: Path to check

    Returns:
        Available space in bytes
    """
    try:
        usage = psutil.disk_usage(str(path))
        return usage.free
    except Exception as e:
        logger.error(f"Failed to get disk space for {path}: {e}")
        return 0


def ensure_directory(path: Path) -> bool:
    """
    Ensure directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure

    Returns:
        True if directory exists or was created successfully
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except Exception as e:
        logger.error(f"Failed to create directory {path}: {e}")
        return False


def is_sidecar_file(file_path: Path, sidecar_suffix: str) -> bool:
    """Check if a path names a sidecar metadata file."""
    return file_path.name.lower().endswith(sidecar_suffix.lower())


def file_extension(file_path: Path) -> str:
    """Lower-cased extension without the dot, '' when there is none."""
    return file_path.suffix.lower().lstrip('.')


def find_sidecar_files(directory: Path, sidecar_suffix: str) -> Generator[Path, None, None]:
    """
    Recursively find all sidecar metadata files in a directory.

    Args:
        directory: Directory to search
        sidecar_suffix: Suffix identifying sidecar files, e.g. '.json'

    Yields:
        Path objects for sidecar files found
    """
    if not directory.exists() or not directory.is_dir():
        logger.warning(f"Directory does not exist or is not a directory: {directory}")
        return

    try:
        for file_path in directory.rglob('*'):
            if file_path.is_file() and is_sidecar_file(file_path, sidecar_suffix):
                yield file_path
    except Exception as e:
        logger.error(f"Error scanning directory {directory}: {e}")


def find_candidate_files(
    directory: Path,
    sidecar_suffix: str,
    excluded_extensions: Iterable[str],
) -> Generator[Path, None, None]:
    """
    Recursively find every regular file that should be placed.

    Sidecar files and files whose extension is excluded are skipped.

    Args:
        directory: Directory to search
        sidecar_suffix: Suffix identifying sidecar files
        excluded_extensions: Extensions (without dots) never placed

    Yields:
        Path objects for candidate files
    """
    if not directory.exists() or not directory.is_dir():
        logger.warning(f"Directory does not exist or is not a directory: {directory}")
        return

    excluded = {ext.lower().lstrip('.') for ext in excluded_extensions}

    try:
        for file_path in directory.rglob('*'):
            if not file_path.is_file():
                continue
            if is_sidecar_file(file_path, sidecar_suffix):
                continue
            ext = file_extension(file_path)
            if ext and ext in excluded:
                continue
            yield file_path
    except Exception as e:
        logger.error(f"Error scanning directory {directory}: {e}")


def get_current_timestamp():
    """Get current timestamp as ISO string."""
    return datetime.now().isoformat()
