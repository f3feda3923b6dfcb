"""Simple YAML configuration loader for VoxBridge."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "voxbridge.yaml"


def find_config_file(start_dir: Optional[str] = None) -> Optional[Path]:
    """Look for voxbridge.yaml in start_dir and its parents."""
    directory = Path(start_dir or os.getcwd()).resolve()
    for candidate_dir in [directory, *directory.parents]:
        candidate = candidate_dir / DEFAULT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


class VoxBridgeConfig:
    """VoxBridge configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for voxbridge.yaml
                        in current directory and parent directories.
        """
        if config_path is None:
            found = find_config_file()
            if found is None:
                raise FileNotFoundError(f"No {DEFAULT_CONFIG_NAME} found in current or parent directories")
            self.config_file = found
        else:
            self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}") from e

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (('google_cloud', 'credentials_path'),
                             ('storage', 'data_directory'),
                             ('logging', 'file_path')):
            value = (config.get(section) or {}).get(key)
            if value and not os.path.isabs(value):
                config[section][key] = str(config_dir / value)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'languages.input').

        Args:
            key_path: Dot-separated key path (e.g., 'google_cloud.credentials_path')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'languages.output')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_google_credentials_path(self) -> str:
        """Get Google credentials path - CRASHES if not found."""
        creds_path = self.get('google_cloud.credentials_path')
        if not creds_path:
            raise ValueError(f"Google credentials path not configured in {self.config_file.name}")

        creds_file = Path(creds_path)
        if not creds_file.exists():
            raise FileNotFoundError(f"Google credentials file not found: {creds_path}")

        return str(creds_file.absolute())

    def get_api_key(self, section: str, env_var: str) -> str:
        """Get an API key from the config file, falling back to the environment.

        Args:
            section: Config section holding an 'api_key' entry (e.g. 'deepl')
            env_var: Environment variable to consult when the config has none

        Raises:
            ValueError: If the key is configured in neither place
        """
        api_key = self.get(f'{section}.api_key')
        if api_key and api_key != "YOUR_API_KEY_HERE":
            return api_key

        api_key = os.environ.get(env_var)
        if api_key:
            return api_key

        raise ValueError(f"Missing {section} API key: set '{section}.api_key' in "
                         f"{self.config_file.name} or the {env_var} environment variable")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())
