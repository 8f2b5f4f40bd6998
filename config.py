import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from logger import get_logger
from exceptions import ConfigurationError
from constants import (
    CONFIG_DIR, CONFIG_FILE, DEFAULT_PROGRAM, DEFAULT_WRAP_WIDTH,
    DEFAULT_LOG_LEVEL, BEGIN_EDIT_REPLACE, BEGIN_EDIT_MODES,
)


class Config:
    """Configuration management for run-tui"""

    DEFAULT_CONFIG = {
        'display': {
            'program': DEFAULT_PROGRAM,
            'wrap_width': DEFAULT_WRAP_WIDTH,
            'color': True
        },
        'editor': {
            'begin_edit': BEGIN_EDIT_REPLACE
        },
        'catalog': {
            'path': ''
        },
        'output': {
            'log_level': DEFAULT_LOG_LEVEL
        }
    }

    def __init__(self, config_file: Optional[str] = None):
        self.logger = get_logger(self.__class__.__name__)
        self.config_file = config_file or self._get_default_config_path()
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self._load_config()

    def _get_default_config_path(self) -> str:
        """Get default config file path"""
        return str(Path.home() / CONFIG_DIR / CONFIG_FILE)

    def _load_config(self):
        """Load configuration from file"""
        if not os.path.exists(self.config_file):
            self.logger.debug(f"Config file {self.config_file} does not exist, using defaults")
            return

        self.logger.debug(f"Loading config from {self.config_file}")
        try:
            with open(self.config_file, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Invalid YAML in config file {self.config_file}: {e}")
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except OSError as e:
            self.logger.warning(f"Could not load config file {self.config_file}: {e}")
            return

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {self.config_file} must contain a mapping")
        self._merge_config(self.config, file_config)
        self.logger.info(f"Configuration loaded successfully from {self.config_file}")

    def _merge_config(self, base: Dict, override: Dict):
        """Recursively merge configuration dictionaries"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def update_from_cli(self, **kwargs):
        """Update configuration from CLI arguments"""
        for key, value in kwargs.items():
            if value is None:
                continue
            # Nested keys like 'display.wrap_width'
            keys = key.split('.')
            current = self.config
            for k in keys[:-1]:
                if k not in current or not isinstance(current[k], dict):
                    current[k] = {}
                current = current[k]
            current[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        current = self.config
        for k in key.split('.'):
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default
        return current

    @property
    def wrap_width(self) -> int:
        try:
            width = int(self.get('display.wrap_width', DEFAULT_WRAP_WIDTH))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"display.wrap_width must be an integer, got {self.get('display.wrap_width')!r}"
            )
        if width <= 0:
            raise ConfigurationError("display.wrap_width must be positive")
        return width

    @property
    def begin_edit(self) -> str:
        mode = self.get('editor.begin_edit', BEGIN_EDIT_REPLACE)
        if mode not in BEGIN_EDIT_MODES:
            raise ConfigurationError(
                f"editor.begin_edit must be one of {', '.join(BEGIN_EDIT_MODES)}, got {mode!r}"
            )
        return mode

    def save(self):
        """Save current configuration to file"""
        try:
            os.makedirs(os.path.dirname(self.config_file), exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.safe_dump(self.config, f, default_flow_style=False, indent=2)
            self.logger.info(f"Configuration saved to {self.config_file}")
        except OSError as e:
            self.logger.error(f"Could not save config file {self.config_file}: {e}")
            raise ConfigurationError(f"Could not save config file: {e}")

    def create_default_config(self):
        """Create default configuration file"""
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        self.save()
        return self.config_file
