"""Shared fixtures for photo sorter tests."""

import json
import os
import struct
from pathlib import Path

import pytest
import yaml


@pytest.fixture
def source_tree(tmp_path):
    """Create empty input and output roots."""
    input_dir = tmp_path / 'takeout'
    output_dir = tmp_path / 'organized'
    input_dir.mkdir()
    output_dir.mkdir()
    return input_dir, output_dir


@pytest.fixture
def sample_config(tmp_path):
    """Create a Config backed by a temp YAML file."""
    config_data = {
        'organizer': {
            'sidecar_suffix': '.json',
            'excluded_extensions': ['json', 'zip', 'html'],
            'no_extension_dir': 'no_ext',
            'workers': 4,
            'max_collision_attempts': 1000,
            'verify_copies': False,
            'dry_run': False,
        },
        'logging': {
            'level': 'DEBUG',
        },
    }

    config_path = tmp_path / 'photo_sorter.yml'
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f)

    from photo_sorter.config import Config
    return Config(str(config_path))


@pytest.fixture
def make_file():
    """Factory fixture: create a file with given content and optional mtime."""

    def _create(path, content=b'image-bytes', mtime=None):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _create


@pytest.fixture
def write_sidecar():
    """Factory fixture: write a sidecar JSON file in the export format."""

    def _write(path, title, timestamp, **extra):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {'title': title, 'photoTakenTime': {'timestamp': timestamp}}
        data.update(extra)
        path.write_text(json.dumps(data), encoding='utf-8')
        return path

    return _write


def exif_jpeg_bytes(date_time_original: str) -> bytes:
    """Minimal JPEG whose APP1 segment holds IFD0 -> Exif IFD -> DateTimeOriginal."""
    value = date_time_original.encode('ascii') + b'\x00'
    exif_ifd_offset = 8 + 2 + 12 + 4
    value_offset = exif_ifd_offset + 2 + 12 + 4

    tiff = b'MM' + struct.pack('>HI', 42, 8)
    # IFD0: a single ExifOffset entry
    tiff += struct.pack('>H', 1) + struct.pack('>HHII', 0x8769, 4, 1, exif_ifd_offset)
    tiff += struct.pack('>I', 0)
    # Exif IFD: a single ASCII DateTimeOriginal entry
    tiff += struct.pack('>H', 1) + struct.pack('>HHII', 0x9003, 2, len(value), value_offset)
    tiff += struct.pack('>I', 0)
    tiff += value

    payload = b'Exif\x00\x00' + tiff
    app1 = b'\xff\xe1' + struct.pack('>H', len(payload) + 2) + payload
    return b'\xff\xd8' + app1 + b'\xff\xd9'


@pytest.fixture
def make_exif_jpeg(make_file):
    """Factory fixture: write a JPEG carrying a real EXIF DateTimeOriginal tag."""

    def _create(path, date_time_original='2019:03:04 05:06:07', mtime=None):
        return make_file(path, exif_jpeg_bytes(date_time_original), mtime=mtime)

    return _create
