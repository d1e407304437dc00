"""
Settings Manager.

Handles editor preferences with JSON file storage. Only preferences live
here; topologies are never written to disk.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class SnapSettings:
    """Terminal drag-and-drop snapping."""
    threshold: float = 40.0                 # Max plug-to-port distance in px
    terminal_anchor_offset: float = 22.0    # Terminal origin to plug, in px


@dataclass
class PlacementDefaults:
    """Where new entities appear on the canvas."""
    free_terminal_x: float = 50.0
    free_terminal_y: float = 50.0
    switch_spawn_origin: float = 100.0
    switch_spawn_span: float = 400.0


@dataclass
class UISettings:
    """User interface settings."""
    show_cable_labels: bool = False
    show_terminal_labels: bool = False
    show_object_list: bool = True


@dataclass
class AppSettings:
    """Complete application settings."""
    snap: SnapSettings = field(default_factory=SnapSettings)
    placement: PlacementDefaults = field(default_factory=PlacementDefaults)
    ui: UISettings = field(default_factory=UISettings)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "snap": asdict(self.snap),
            "placement": asdict(self.placement),
            "ui": asdict(self.ui),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Create from dictionary, ignoring keys this version doesn't know."""
        settings = cls()

        if "snap" in data:
            settings.snap = _load_section(SnapSettings, data["snap"])
        if "placement" in data:
            settings.placement = _load_section(PlacementDefaults, data["placement"])
        if "ui" in data:
            settings.ui = _load_section(UISettings, data["ui"])

        return settings


def _load_section(section_cls, data: dict):
    known = set(section_cls.__dataclass_fields__)
    return section_cls(**{k: v for k, v in data.items() if k in known})


class SettingsManager:
    """
    Manages editor settings with JSON file storage.

    Settings file location:
    - Windows: %APPDATA%/TopoEditor/settings.json
    - Linux: ~/.config/TopoEditor/settings.json
    - macOS: ~/Library/Application Support/TopoEditor/settings.json
    """

    APP_NAME = "TopoEditor"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        """
        Initialize settings manager.

        Args:
            config_override: Optional path to override config file location.
                            Useful for testing.
        """
        self._settings = AppSettings()
        self._config_override = config_override
        self._settings_path = self._get_settings_path()
        self._ensure_settings_dir()
        self.load()

    @property
    def settings(self) -> AppSettings:
        """Get current settings."""
        return self._settings

    @property
    def settings_path(self) -> str:
        """Get the settings file path."""
        return str(self._settings_path)

    # Convenience properties for common settings
    @property
    def snap_threshold(self) -> float:
        return self._settings.snap.threshold

    @snap_threshold.setter
    def snap_threshold(self, value: float):
        self._settings.snap.threshold = float(value)
        self.save()

    @property
    def show_cable_labels(self) -> bool:
        return self._settings.ui.show_cable_labels

    @show_cable_labels.setter
    def show_cable_labels(self, value: bool):
        self._settings.ui.show_cable_labels = bool(value)
        self.save()

    @property
    def show_terminal_labels(self) -> bool:
        return self._settings.ui.show_terminal_labels

    @show_terminal_labels.setter
    def show_terminal_labels(self, value: bool):
        self._settings.ui.show_terminal_labels = bool(value)
        self.save()

    def _get_settings_path(self) -> Path:
        """Get platform-specific settings directory."""
        if self._config_override:
            return Path(self._config_override)

        import platform
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("APPDATA", os.path.expanduser("~"))
            config_dir = Path(base) / self.APP_NAME
        elif system == "Darwin":  # macOS
            config_dir = Path.home() / "Library" / "Application Support" / self.APP_NAME
        else:  # Linux and others
            xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
            config_dir = Path(xdg_config) / self.APP_NAME

        return config_dir / self.SETTINGS_FILE

    def _ensure_settings_dir(self):
        """Create settings directory if it doesn't exist."""
        self._settings_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> bool:
        """Load settings from file."""
        if not self._settings_path.exists():
            return False

        try:
            with open(self._settings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._settings = AppSettings.from_dict(data)
            return True
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Error loading settings from {self._settings_path}: {e}")
            return False

    def save(self) -> bool:
        """Save settings to file."""
        try:
            self._ensure_settings_dir()
            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Error saving settings to {self._settings_path}: {e}")
            return False

    def reset(self):
        """Reset settings to defaults."""
        self._settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the global settings manager instance.

    Args:
        config_override: Optional path to override config location.
                        Only used on first call to initialize.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Reset the global settings manager (useful for testing)."""
    global _settings_manager
    _settings_manager = None
