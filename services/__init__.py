"""Services package."""

from .occupancy import compute_occupied_ports, sync_occupancy
from .traffic import (
    PortStatus,
    resolve_port_traffic,
    sync_traffic,
    port_status,
    status_text,
)
from .port_layout import PortLayout, FaceplateLayout
from .snap_resolver import SnapResolver, SnapTarget
from .history import HistoryManager
from .settings_manager import (
    SettingsManager,
    AppSettings,
    SnapSettings,
    PlacementDefaults,
    UISettings,
    get_settings,
    reset_settings_manager,
)
from .topology_editor import TopologyEditor

__all__ = [
    "compute_occupied_ports",
    "sync_occupancy",
    "PortStatus",
    "resolve_port_traffic",
    "sync_traffic",
    "port_status",
    "status_text",
    "PortLayout",
    "FaceplateLayout",
    "SnapResolver",
    "SnapTarget",
    "HistoryManager",
    "SettingsManager",
    "AppSettings",
    "SnapSettings",
    "PlacementDefaults",
    "UISettings",
    "get_settings",
    "reset_settings_manager",
    "TopologyEditor",
]
