"""
Photo Sorter

Copies a photo export into a <year>/<Month>/<extension> tree, dating each
file from its sidecar metadata, its EXIF capture tag, or its file times.
"""

__version__ = "1.0.0"
__author__ = "Homelab Team"

from .config import Config
from .metadata_index import MetadataIndexBuilder, parse_sidecar
from .timestamps import ResolvedTimestamp, TimestampResolver, TimestampSource
from .reservations import ReservationTable
from .placement import PlacementEngine, PlacementResult
from .organizer import PhotoOrganizer
from .reporter import RunReporter

__all__ = [
    'Config',
    'MetadataIndexBuilder',
    'parse_sidecar',
    'ResolvedTimestamp',
    'TimestampResolver',
    'TimestampSource',
    'ReservationTable',
    'PlacementEngine',
    'PlacementResult',
    'PhotoOrganizer',
    'RunReporter',
]
