"""
Unit tests for port geometry and terminal snapping.

With the default faceplate and a switch at the origin, port 1's anchor is
at (54, 58) and port 2's at (110, 58). A terminal's plug sits 22px right of
its origin, so dropping a terminal at (32, 58) puts the plug on port 1.
"""

import pytest
from PyQt6.QtCore import QPointF, QRectF

from models.network import Position, TOTAL_PORTS
from services.port_layout import FaceplateLayout, PortLayout
from services.snap_resolver import SnapResolver


class StackedLayout(PortLayout):
    """Every port drawn at the same spot."""

    def handle_rect(self, port_id: int) -> QRectF:
        return QRectF(0, 0, 10, 10)


class TestFaceplateLayout:

    def test_first_access_port(self):
        layout = FaceplateLayout()
        assert layout.handle_rect(1) == QRectF(30, 58, 48, 40)
        assert layout.anchor(1) == QPointF(54, 58)

    def test_second_row(self):
        assert FaceplateLayout().anchor(9) == QPointF(54, 110)

    def test_uplinks(self):
        layout = FaceplateLayout()
        assert layout.anchor(17) == QPointF(510, 58)
        assert layout.anchor(20) == QPointF(574, 110)

    def test_ports_fit_chassis(self):
        layout = FaceplateLayout()
        chassis = QRectF(0, 0, FaceplateLayout.WIDTH, FaceplateLayout.HEIGHT)
        anchors = set()
        for port_id in range(1, TOTAL_PORTS + 1):
            rect = layout.handle_rect(port_id)
            assert chassis.contains(rect)
            anchor = layout.anchor(port_id)
            anchors.add((anchor.x(), anchor.y()))
        assert len(anchors) == TOTAL_PORTS

    @pytest.mark.parametrize("port_id", [0, 21])
    def test_unknown_port(self, port_id):
        with pytest.raises(ValueError):
            FaceplateLayout().handle_rect(port_id)


class TestSnapResolver:

    def test_attach_offset(self):
        assert SnapResolver().attach_offset(1) == Position(32, 58)

    def test_port_anchor_follows_switch(self):
        anchor = SnapResolver().port_anchor(Position(1000, 10), 2)
        assert anchor == QPointF(1110, 68)

    def test_drop_on_port(self, two_switch_topology, resync):
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()

        target = SnapResolver().find_target(two_switch_topology, terminal, Position(32, 58))

        assert target.switch_id == "sw-1"
        assert target.port_id == 1
        assert target.offset == Position(32, 58)
        assert target.distance == 0

    def test_drop_on_second_switch(self, two_switch_topology, resync):
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()

        target = SnapResolver().find_target(two_switch_topology, terminal, Position(1088, 60))

        assert (target.switch_id, target.port_id) == ("sw-2", 2)

    def test_threshold_is_exclusive(self, two_switch_topology, resync):
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()
        resolver = SnapResolver()

        # Plug exactly 40px above port 1
        assert resolver.find_target(two_switch_topology, terminal, Position(32, 18)) is None

        target = resolver.find_target(two_switch_topology, terminal, Position(32, 19))
        assert target.port_id == 1
        assert target.distance == pytest.approx(39)

    def test_far_away_drop(self, two_switch_topology, resync):
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()
        assert SnapResolver().find_target(two_switch_topology, terminal, Position(500, 500)) is None

    def test_custom_threshold(self, two_switch_topology, resync):
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()
        resolver = SnapResolver(threshold=100)
        assert resolver.find_target(two_switch_topology, terminal, Position(32, -30)).port_id == 1

    def test_tie_goes_to_first_port(self, two_switch_topology, resync):
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()

        # Plug at (82, 58): 28px from both port 1 and port 2
        target = SnapResolver().find_target(two_switch_topology, terminal, Position(60, 58))

        assert target.port_id == 1

    def test_occupied_port_skipped(self, two_switch_topology, resync):
        two_switch_topology.add_cable("sw-1", 1, "sw-2", 1)
        resync(two_switch_topology)
        terminal = two_switch_topology.add_free_terminal()

        target = SnapResolver().find_target(two_switch_topology, terminal, Position(60, 58))

        assert target.port_id == 2

    def test_occupied_port_without_alternative(self, two_switch_topology, resync):
        two_switch_topology.attach_terminal("sw-1", 1, Position(32, 58))
        resync(two_switch_topology)
        other = two_switch_topology.add_free_terminal()

        assert SnapResolver().find_target(two_switch_topology, other, Position(32, 58)) is None

    def test_own_port_is_eligible(self, two_switch_topology, resync):
        terminal = two_switch_topology.attach_terminal("sw-1", 1, Position(32, 58))
        resync(two_switch_topology)

        target = SnapResolver().find_target(two_switch_topology, terminal, Position(30, 60))

        assert (target.switch_id, target.port_id) == ("sw-1", 1)

    def test_tie_across_switches_goes_to_first_switch(self, empty_topology, resync):
        empty_topology.add_switch(Position(0, 0))
        empty_topology.add_switch(Position(0, 0))
        resync(empty_topology)
        terminal = empty_topology.add_free_terminal()

        resolver = SnapResolver(layout=StackedLayout())
        target = resolver.find_target(empty_topology, terminal, Position(-17, 0))

        assert (target.switch_id, target.port_id) == ("sw-1", 1)
