"""
Port occupancy synchronization.

A switch's occupied ports are derived from the terminals plugged into it and
the cable endpoints on it. This pass recomputes them from scratch after each
mutation instead of tracking increments.
"""

import logging

from models.network import TopologyModel, port_handle

logger = logging.getLogger(__name__)


def compute_occupied_ports(topology: TopologyModel, switch_id: str) -> list[str]:
    """
    Recompute the occupied port handles of one switch.

    Returns:
        Handles (``p-<n>``) ordered by port number, without duplicates
    """
    ports = set()
    for cable in topology.cables.values():
        if cable.source_switch_id == switch_id:
            ports.add(cable.source_port_id)
        if cable.target_switch_id == switch_id:
            ports.add(cable.target_port_id)
    for terminal in topology.terminals_on_switch(switch_id):
        ports.add(terminal.attachment.port_id)
    return [port_handle(p) for p in sorted(ports)]


def sync_occupancy(topology: TopologyModel) -> list[str]:
    """
    Rewrite every switch's occupied ports.

    A switch is only touched when the recomputed list differs from the stored
    one, so running this on a consistent graph changes nothing.

    Returns:
        Ids of switches whose occupancy changed
    """
    changed = []
    for switch in topology.switches.values():
        occupied = compute_occupied_ports(topology, switch.id)
        if occupied != switch.occupied_ports:
            logger.debug(f"Occupancy of {switch.id}: {switch.occupied_ports} -> {occupied}")
            switch.occupied_ports = occupied
            changed.append(switch.id)
    return changed
