"""Tests for photo sorter configuration."""

import os

import pytest
import yaml

from photo_sorter.config import Config, DEFAULTS


def write_config(path, data):
    with open(path, 'w') as f:
        yaml.dump(data, f)
    return str(path)


def test_defaults_used_when_no_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config = Config()

    assert config.config_path is None
    assert config.get_sidecar_suffix() == '.json'
    assert config.get_no_extension_dir() == 'no_ext'
    assert config.get_max_collision_attempts() == 10000
    assert config.get_workers() == (os.cpu_count() or 1)
    assert config.is_dry_run() is False
    assert config.validate_config() == []


def test_config_file_found_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_config(tmp_path / 'photo_sorter.yml', {'organizer': {'workers': 3}})

    config = Config()

    assert config.config_path == str((tmp_path / 'photo_sorter.yml').resolve())
    assert config.get_workers() == 3


def test_user_values_merge_over_defaults(tmp_path):
    path = write_config(tmp_path / 'c.yml', {'organizer': {'workers': 2, 'dry_run': True}})

    config = Config(path)

    assert config.get_workers() == 2
    assert config.is_dry_run() is True
    assert config.get_sidecar_suffix() == '.json'
    assert DEFAULTS['organizer']['dry_run'] is False


def test_dot_notation_default_for_missing_key(sample_config):
    assert sample_config.get('organizer.nonexistent', 'fallback') == 'fallback'
    assert sample_config.get('organizer.workers.deeper', 'fallback') == 'fallback'


def test_excluded_extensions_normalized(tmp_path):
    path = write_config(tmp_path / 'c.yml', {'organizer': {'excluded_extensions': ['.ZIP', 'Html']}})

    assert Config(path).get_excluded_extensions() == ['zip', 'html']


def test_set_overrides_value(sample_config):
    sample_config.set('organizer.workers', 7)
    sample_config.set('logging.log_dir', '/tmp/logs')

    assert sample_config.get_workers() == 7
    assert str(sample_config.get_log_dir()) == '/tmp/logs'


@pytest.mark.parametrize('key, value, message', [
    ('organizer.workers', 0, 'Invalid workers'),
    ('organizer.workers', 65, 'Invalid workers'),
    ('organizer.max_collision_attempts', 0, 'Invalid max_collision_attempts'),
    ('organizer.sidecar_suffix', '', 'Sidecar suffix'),
    ('logging.level', 'LOUD', 'Invalid log level'),
])
def test_validation_errors(sample_config, key, value, message):
    sample_config.set(key, value)

    errors = sample_config.validate_config()

    assert any(message in error for error in errors)


def test_invalid_yaml_root_rejected(tmp_path):
    path = tmp_path / 'c.yml'
    path.write_text('- just\n- a list\n')

    with pytest.raises(ValueError):
        Config(str(path))


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config(str(tmp_path / 'missing.yml'))
