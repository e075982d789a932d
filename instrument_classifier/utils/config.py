"""Configuration management for the instrument classifier."""

import copy
import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "default_config.yaml"

# Used when the package is installed without the repository's config/ directory
_BUILTIN_DEFAULTS: Dict[str, Any] = {
    'audio': {
        'sample_rate': 44100,
    },
    'features': {
        'preset': None,
        'fft_size': 2048,
        'hop_length': 512,
        'num_mels': 128,
        'f_min': 0.0,
        'f_max': 8000.0,
        'epsilon': 1.0e-10,
        'normalization': 'max_relative_db',
        'layout': 'mel_major',
        'input_shape': None,
    },
    'segments': {
        'enabled': True,
        'segment_duration': 4.0,
        'overlap': 0.5,
        'max_segments': 5,
        'feature_dim': None,
    },
    'classification': {
        'confidence_threshold': 0.85,
        'entropy_threshold': 0.15,
        'labels': None,
    },
    'history': {
        'max_recent': 10,
    },
    'logging': {
        'level': 'INFO',
        'json_format': False,
        'log_file': None,
    },
}


class Config:
    """Configuration manager for the instrument classifier."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to custom config file. If None, uses default config.
        """
        self._config: Dict[str, Any] = {}
        self._load_config(config_path)

    def _load_config(self, config_path: Optional[str] = None) -> None:
        """Load configuration from YAML file."""
        if config_path is None:
            if not DEFAULT_CONFIG_PATH.exists():
                self._config = copy.deepcopy(_BUILTIN_DEFAULTS)
                return
            config_path = DEFAULT_CONFIG_PATH
        else:
            config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            self._config = yaml.safe_load(f) or {}

        self._expand_paths()

    def _expand_paths(self) -> None:
        """Expand ~ in file paths."""
        log_file = self._config.get('logging', {}).get('log_file')
        if log_file:
            self._config['logging']['log_file'] = os.path.expanduser(log_file)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'features.fft_size')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value
            value: Value to set
        """
        keys = key_path.split('.')
        config = self._config

        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

    def save(self, output_path: str) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False, sort_keys=False)

    @property
    def audio(self) -> Dict[str, Any]:
        """Get audio input settings."""
        return self._config.get('audio', {})

    @property
    def features(self) -> Dict[str, Any]:
        """Get feature extraction settings."""
        return self._config.get('features', {})

    @property
    def segments(self) -> Dict[str, Any]:
        """Get segmented extraction settings."""
        return self._config.get('segments', {})

    @property
    def classification(self) -> Dict[str, Any]:
        """Get classification settings."""
        return self._config.get('classification', {})

    @property
    def history(self) -> Dict[str, Any]:
        """Get recent-results history settings."""
        return self._config.get('history', {})

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging settings."""
        return self._config.get('logging', {})


# Global config instance
_config_instance: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_path: Path to custom config file (only used on first call)

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config(config_path)

    return _config_instance
