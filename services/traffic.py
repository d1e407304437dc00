"""
Traffic direction resolution.

Works out, for each occupied port, whether the switch transmits and/or
receives on it. Terminal directions are stated from the terminal's side.
Cable directions are stated relative to the cable's stored source/target,
so the same value reads differently from the two ends.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from models.network import (
    Direction, PortTraffic, TopologyModel, TerminalModel, CableModel,
    port_handle, parse_port_handle,
)

logger = logging.getLogger(__name__)


STATUS_IDLE = "IDLE"
STATUS_FULL_DUPLEX = "FULL_DUPLEX"
STATUS_TX = "PORT_TX_ACTIVE"
STATUS_RX = "PORT_RX_ACTIVE"


def terminal_traffic(terminal: TerminalModel) -> PortTraffic:
    """Switch-side flags for a port hosting ``terminal``."""
    if terminal.direction == Direction.BOTH:
        return PortTraffic(has_transmit=True, has_receive=True)
    if terminal.direction == Direction.A_TO_B:
        # Terminal sends, switch receives
        return PortTraffic(has_transmit=False, has_receive=True)
    return PortTraffic(has_transmit=True, has_receive=False)


def cable_traffic(cable: CableModel, is_source_end: bool) -> PortTraffic:
    """Flags for one end of ``cable``; the target end sees the inverse of the source."""
    if cable.direction == Direction.BOTH:
        return PortTraffic(has_transmit=True, has_receive=True)
    sends = (cable.direction == Direction.A_TO_B) == is_source_end
    return PortTraffic(has_transmit=sends, has_receive=not sends)


def resolve_port_traffic(topology: TopologyModel, switch_id: str, handle: str) -> PortTraffic:
    """
    Resolve TX/RX for one port of a switch.

    Unoccupied ports report no traffic without looking at terminals or
    cables. A terminal on the port takes precedence over a cable.
    """
    switch = topology.get_switch(switch_id)
    if switch is None or handle not in switch.occupied_ports:
        return PortTraffic()

    port_id = parse_port_handle(handle)
    terminal = topology.terminal_on_port(switch_id, port_id)
    if terminal is not None:
        return terminal_traffic(terminal)

    cable = topology.cable_on_port(switch_id, port_id)
    if cable is not None:
        return cable_traffic(cable, cable.is_source_end(switch_id, port_id))
    return PortTraffic()


def sync_traffic(topology: TopologyModel) -> list[str]:
    """
    Rebuild every switch's traffic map for its occupied ports.

    Must run after ``sync_occupancy``. Maps are only replaced when their
    value changes.

    Returns:
        Ids of switches whose traffic map changed
    """
    changed = []
    for switch in topology.switches.values():
        traffic = {
            handle: resolve_port_traffic(topology, switch.id, handle)
            for handle in switch.occupied_ports
        }
        if traffic != switch.traffic:
            switch.traffic = traffic
            changed.append(switch.id)
    if changed:
        logger.debug(f"Traffic maps updated for {changed}")
    return changed


def status_text(traffic: PortTraffic) -> str:
    """Faceplate status line for a port."""
    if traffic.has_transmit and traffic.has_receive:
        return STATUS_FULL_DUPLEX
    if traffic.has_transmit:
        return STATUS_TX
    if traffic.has_receive:
        return STATUS_RX
    return STATUS_IDLE


@dataclass
class PortStatus:
    """What occupies a port and what traffic it carries."""
    switch_id: str
    port_id: int
    terminal_id: Optional[str] = None
    cable_id: Optional[str] = None
    is_source_end: bool = False
    traffic: PortTraffic = field(default_factory=PortTraffic)

    @property
    def is_occupied(self) -> bool:
        return self.terminal_id is not None or self.cable_id is not None

    @property
    def status_text(self) -> str:
        return status_text(self.traffic)


def port_status(topology: TopologyModel, switch_id: str, port_id: int) -> PortStatus:
    """Describe a single port: its occupant, cable orientation and traffic."""
    status = PortStatus(switch_id=switch_id, port_id=port_id)
    terminal = topology.terminal_on_port(switch_id, port_id)
    cable = topology.cable_on_port(switch_id, port_id)
    if terminal is not None:
        status.terminal_id = terminal.id
    elif cable is not None:
        status.cable_id = cable.id
        status.is_source_end = cable.is_source_end(switch_id, port_id)
    status.traffic = resolve_port_traffic(topology, switch_id, port_handle(port_id))
    return status
