"""
Models package.

This package contains the data models of the switch topology editor:
- Entities (SwitchModel, PortConfig, TerminalModel, CableModel)
- Terminal placement (FreePlacement, PortAttachment)
- The editable graph (TopologyModel) and its errors
- Id and label generation (naming)
"""

from .network import (
    TopologyError,
    InvalidReference,
    PortOccupied,
    Direction,
    TerminalCategory,
    PortKind,
    Position,
    PortConfig,
    PortTraffic,
    SwitchModel,
    FreePlacement,
    PortAttachment,
    Placement,
    TerminalModel,
    CableModel,
    TerminalConfig,
    CableConfig,
    TopologyModel,
    ACCESS_PORT_COUNT,
    UPLINK_PORT_COUNT,
    TOTAL_PORTS,
    generate_ports,
    port_handle,
    parse_port_handle,
    parse_vlan_ranges,
)
from . import naming


__all__ = [
    # Errors
    "TopologyError",
    "InvalidReference",
    "PortOccupied",
    # Enums
    "Direction",
    "TerminalCategory",
    "PortKind",
    # Entities
    "Position",
    "PortConfig",
    "PortTraffic",
    "SwitchModel",
    "FreePlacement",
    "PortAttachment",
    "Placement",
    "TerminalModel",
    "CableModel",
    "TerminalConfig",
    "CableConfig",
    "TopologyModel",
    # Port helpers
    "ACCESS_PORT_COUNT",
    "UPLINK_PORT_COUNT",
    "TOTAL_PORTS",
    "generate_ports",
    "port_handle",
    "parse_port_handle",
    "parse_vlan_ranges",
    "naming",
]
