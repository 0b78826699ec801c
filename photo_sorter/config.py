"""Configuration management for photo sorting."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    'organizer': {
        'sidecar_suffix': '.json',
        'excluded_extensions': ['json', 'zip', 'tgz', 'gz', 'html'],
        'no_extension_dir': 'no_ext',
        'workers': None,
        'max_collision_attempts': 10000,
        'verify_copies': False,
        'dry_run': False,
    },
    'logging': {
        'level': 'INFO',
        'log_dir': None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base, recursing into nested dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Manages configuration for photo sorting from YAML files."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches for config files
                and falls back to built-in defaults.
        """
        self.config_path = config_path or self._find_config_file()
        self.config: Dict[str, Any] = {}
        self._load_config()

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        # Look for config files in order of preference
        possible_paths = [
            Path.cwd() / "photo_sorter.local.yml",
            Path.cwd() / "photo_sorter.yml",
            Path(__file__).parent / "photo_sorter.local.yml",
            Path(__file__).parent / "photo_sorter.yml",
        ]

        for config_file in possible_paths:
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return str(config_file.resolve())

        logger.debug("No configuration file found, using built-in defaults")
        return None

    def _load_config(self) -> None:
        """Load configuration from YAML file over the defaults."""
        if self.config_path is None:
            self.config = copy.deepcopy(DEFAULTS)
            return

        try:
            with open(self.config_path, 'r') as f:
                user_config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

        if not isinstance(user_config, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_path}")
        self.config = _deep_merge(DEFAULTS, user_config)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path like 'organizer.workers'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key_path: str, value: Any) -> None:
        """Override a configuration value, e.g. from a command line flag."""
        keys = key_path.split('.')
        node = self.config
        for key in keys[:-1]:
            node = node.setdefault(key, {})
        node[keys[-1]] = value

    def get_sidecar_suffix(self) -> str:
        """Get the file suffix that marks sidecar metadata files."""
        return self.get('organizer.sidecar_suffix', '.json')

    def get_excluded_extensions(self) -> List[str]:
        """Get extensions (without dots) that are never placed."""
        extensions = self.get('organizer.excluded_extensions', []) or []
        return [str(ext).lower().lstrip('.') for ext in extensions]

    def get_no_extension_dir(self) -> str:
        """Get the bucket directory name for files without an extension."""
        return self.get('organizer.no_extension_dir', 'no_ext')

    def get_workers(self) -> int:
        """Get number of parallel workers, defaulting to the CPU count."""
        workers = self.get('organizer.workers')
        if workers is None:
            return os.cpu_count() or 1
        return int(workers)

    def get_max_collision_attempts(self) -> int:
        """Get the upper bound on numbered-name attempts per file."""
        return self.get('organizer.max_collision_attempts', 10000)

    def should_verify_copies(self) -> bool:
        """Check if copies should be verified with a hash comparison."""
        return bool(self.get('organizer.verify_copies', False))

    def is_dry_run(self) -> bool:
        """Check if this is a dry run."""
        return bool(self.get('organizer.dry_run', False))

    def get_log_level(self) -> str:
        """Get logging level."""
        return self.get('logging.level', 'INFO')

    def get_log_dir(self) -> Optional[Path]:
        """Get directory for the log file, if file logging is enabled."""
        log_dir = self.get('logging.log_dir')
        return Path(log_dir) if log_dir else None

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages
        """
        errors = []

        suffix = self.get_sidecar_suffix()
        if not suffix:
            errors.append("Sidecar suffix not configured")

        if not self.get_no_extension_dir():
            errors.append("No-extension bucket name not configured")

        # Check parallel workers
        workers = self.get('organizer.workers')
        if workers is not None:
            if not isinstance(workers, int) or workers < 1 or workers > 64:
                errors.append(f"Invalid workers value: {workers} (must be 1-64)")

        attempts = self.get_max_collision_attempts()
        if not isinstance(attempts, int) or attempts < 1:
            errors.append(f"Invalid max_collision_attempts value: {attempts} (must be positive)")

        level = str(self.get_log_level()).upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
            errors.append(f"Invalid log level: {level}")

        return errors

    def __str__(self) -> str:
        """String representation of configuration."""
        return f"Config(path={self.config_path}, workers={self.get_workers()})"
