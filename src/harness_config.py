"""
Harness Configuration
Loads harness settings from a JSON file merged over built-in defaults
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

DEFAULT_CONFIG_PATH = Path("config") / "harness_config.json"

DEFAULT_SETTINGS = {
    "Datafilepath": "data/Test-Data.xlsx",
    "ControlSheet": "TestSuite",
    "Serverurl": "http://127.0.0.1:4723",
    "platformName": "Android",
    "automationName": "UiAutomator2",
    "appPackage": "",
    "appActivity": "",
    "Apppath": "",
    "Implicitywaittimeout": 10,
    "Newcommandtimeout": 100,
    "Screenshotpath": "screenshots",
    "TestReportspath": "reports",
    "Logspath": "logs",
}


class ConfigError(Exception):
    """Configuration file exists but cannot be read or parsed"""


class HarnessConfig:
    def __init__(self, settings: Dict[str, Any], base_dir: Optional[Path] = None):
        self.logger = logging.getLogger(__name__)
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self.settings = self._resolve_paths(settings)

    def _resolve_paths(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Anchor relative values of *path* keys at the base directory"""
        resolved = dict(settings)
        for key, value in settings.items():
            if 'path' in key.lower() and isinstance(value, str) and value:
                path = Path(value)
                if not path.is_absolute():
                    path = self.base_dir / path
                resolved[key] = str(path)
        return resolved

    def get(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.settings[key]

    @property
    def data_file(self) -> Path:
        return Path(self.settings["Datafilepath"])

    @property
    def control_sheet(self) -> str:
        return self.settings["ControlSheet"]

    @property
    def server_url(self) -> str:
        return self.settings["Serverurl"]

    @property
    def implicit_wait(self) -> int:
        return int(self.settings["Implicitywaittimeout"])

    @property
    def screenshots_dir(self) -> Path:
        return Path(self.settings["Screenshotpath"])

    @property
    def reports_dir(self) -> Path:
        return Path(self.settings["TestReportspath"])

    @property
    def logs_dir(self) -> Path:
        return Path(self.settings["Logspath"])


def load_config(config_path: Union[str, Path, None] = None, base_dir: Optional[Path] = None,
                create_default: bool = False) -> HarnessConfig:
    """
    Load harness settings

    Args:
        config_path: JSON file with overrides (defaults to config/harness_config.json)
        base_dir: Directory relative paths are resolved against (defaults to cwd)
        create_default: Write the default settings when the file does not exist

    Returns:
        HarnessConfig with file values merged over the defaults
    """
    logger = logging.getLogger(__name__)
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    settings = dict(DEFAULT_SETTINGS)

    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load configuration {config_path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration {config_path} must contain a JSON object")
        settings.update(loaded)
        logger.info(f"Configuration loaded from {config_path}")
    elif create_default:
        save_config(settings, config_path)
        logger.info(f"Default configuration created at {config_path}")
    else:
        logger.info("No configuration file found, using defaults")

    return HarnessConfig(settings, base_dir=base_dir)


def save_config(settings: Dict[str, Any], config_path: Union[str, Path]):
    """Write settings to a JSON configuration file"""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(settings, f, indent=4)
