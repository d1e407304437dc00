"""
Unit tests for traffic direction resolution.

Tests:
- Terminal directions seen from the switch
- Cable directions from the source and target ends
- Unoccupied ports and status text
"""

import pytest

from models.network import (
    CableConfig, Direction, PortTraffic, Position, TerminalConfig,
)
from services.traffic import (
    cable_traffic, port_status, resolve_port_traffic, status_text, sync_traffic,
    STATUS_FULL_DUPLEX, STATUS_IDLE, STATUS_RX, STATUS_TX,
)


TX_ONLY = PortTraffic(has_transmit=True, has_receive=False)
RX_ONLY = PortTraffic(has_transmit=False, has_receive=True)
DUPLEX = PortTraffic(has_transmit=True, has_receive=True)
IDLE = PortTraffic()


class TestTerminalTraffic:

    @pytest.mark.parametrize("direction,expected", [
        ("both", DUPLEX),
        ("a-to-b", RX_ONLY),   # terminal transmits toward the switch
        ("b-to-a", TX_ONLY),   # terminal receives from the switch
    ])
    def test_terminal_direction(self, two_switch_topology, resync, direction, expected):
        two_switch_topology.attach_terminal(
            "sw-1", 3, Position(0, 0), TerminalConfig(direction=direction)
        )
        resync(two_switch_topology)
        assert resolve_port_traffic(two_switch_topology, "sw-1", "p-3") == expected


class TestCableTraffic:

    @pytest.mark.parametrize("direction,source,target", [
        ("both", DUPLEX, DUPLEX),
        ("a-to-b", TX_ONLY, RX_ONLY),
        ("b-to-a", RX_ONLY, TX_ONLY),
    ])
    def test_cable_ends(self, two_switch_topology, resync, direction, source, target):
        two_switch_topology.add_cable("sw-1", 1, "sw-2", 2, CableConfig(direction=direction))
        resync(two_switch_topology)
        assert resolve_port_traffic(two_switch_topology, "sw-1", "p-1") == source
        assert resolve_port_traffic(two_switch_topology, "sw-2", "p-2") == target

    def test_same_value_reads_differently_per_end(self, two_switch_topology):
        cable = two_switch_topology.add_cable("sw-1", 1, "sw-2", 2)
        cable.direction = Direction.A_TO_B
        assert cable_traffic(cable, is_source_end=True) == TX_ONLY
        assert cable_traffic(cable, is_source_end=False) == RX_ONLY

    def test_loop_cable_on_one_switch(self, two_switch_topology, resync):
        two_switch_topology.add_cable("sw-1", 5, "sw-1", 6, CableConfig(direction="a-to-b"))
        resync(two_switch_topology)
        assert resolve_port_traffic(two_switch_topology, "sw-1", "p-5") == TX_ONLY
        assert resolve_port_traffic(two_switch_topology, "sw-1", "p-6") == RX_ONLY


class TestUnoccupied:

    def test_free_port_is_idle(self, two_switch_topology, resync):
        resync(two_switch_topology)
        assert resolve_port_traffic(two_switch_topology, "sw-1", "p-1") == IDLE

    def test_unknown_switch_is_idle(self, two_switch_topology):
        assert resolve_port_traffic(two_switch_topology, "sw-9", "p-1") == IDLE

    def test_no_lookup_for_unsynced_port(self, two_switch_topology):
        # Occupancy not yet synced, so the port is treated as free
        two_switch_topology.add_cable("sw-1", 1, "sw-2", 1)
        assert resolve_port_traffic(two_switch_topology, "sw-1", "p-1") == IDLE


class TestSyncTraffic:

    def test_map_covers_occupied_ports(self, two_switch_topology, resync):
        two_switch_topology.add_cable("sw-1", 1, "sw-2", 1, CableConfig(direction="a-to-b"))
        two_switch_topology.attach_terminal("sw-1", 9, Position(0, 0))
        resync(two_switch_topology)

        switch = two_switch_topology.get_switch("sw-1")
        assert switch.traffic == {"p-1": TX_ONLY, "p-9": DUPLEX}

    def test_idempotent(self, two_switch_topology, resync):
        two_switch_topology.add_cable("sw-1", 1, "sw-2", 1)
        resync(two_switch_topology)
        assert sync_traffic(two_switch_topology) == []

    def test_direction_edit_updates_map(self, two_switch_topology, resync):
        cable = two_switch_topology.add_cable("sw-1", 1, "sw-2", 1)
        resync(two_switch_topology)
        two_switch_topology.update_entity(cable.id, direction="b-to-a")

        assert sync_traffic(two_switch_topology) == ["sw-1", "sw-2"]
        assert two_switch_topology.get_switch("sw-2").traffic["p-1"] == TX_ONLY


class TestPortStatus:

    def test_status_text(self):
        assert status_text(DUPLEX) == STATUS_FULL_DUPLEX
        assert status_text(TX_ONLY) == STATUS_TX
        assert status_text(RX_ONLY) == STATUS_RX
        assert status_text(IDLE) == STATUS_IDLE

    def test_cable_port_status(self, two_switch_topology, resync):
        cable = two_switch_topology.add_cable(
            "sw-1", 1, "sw-2", 1, CableConfig(direction="a-to-b")
        )
        resync(two_switch_topology)

        status = port_status(two_switch_topology, "sw-2", 1)
        assert status.is_occupied
        assert status.cable_id == cable.id
        assert status.terminal_id is None
        assert not status.is_source_end
        assert status.status_text == STATUS_RX

    def test_terminal_port_status(self, two_switch_topology, resync):
        terminal = two_switch_topology.attach_terminal("sw-1", 2, Position(0, 0))
        resync(two_switch_topology)

        status = port_status(two_switch_topology, "sw-1", 2)
        assert status.terminal_id == terminal.id
        assert status.status_text == STATUS_FULL_DUPLEX

    def test_empty_port_status(self, two_switch_topology, resync):
        resync(two_switch_topology)
        status = port_status(two_switch_topology, "sw-1", 20)
        assert not status.is_occupied
        assert status.status_text == STATUS_IDLE
