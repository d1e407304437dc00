"""
Snap Resolver.

Decides where a dragged terminal lands when it is released: on the nearest
free port within the snap threshold, or free on the canvas.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QLineF, QPointF

from models.network import Position, TerminalModel, TopologyModel, port_handle
from services.port_layout import FaceplateLayout, PortLayout

logger = logging.getLogger(__name__)


DEFAULT_SNAP_THRESHOLD = 40.0
DEFAULT_ANCHOR_OFFSET = 22.0   # Horizontal distance from a terminal's origin to its plug


@dataclass
class SnapTarget:
    """A port a terminal can be attached to."""
    switch_id: str
    port_id: int
    offset: Position      # Terminal position relative to the switch
    distance: float


class SnapResolver:
    """
    Nearest-port search for terminal drops.

    Candidates are visited switch by switch, port by port; the first
    candidate with the smallest distance wins. Exact ties are therefore
    settled by iteration order, which is not meant as a guarantee.
    """

    def __init__(self, layout: Optional[PortLayout] = None,
                 threshold: float = DEFAULT_SNAP_THRESHOLD,
                 anchor_offset: float = DEFAULT_ANCHOR_OFFSET):
        self.layout = layout or FaceplateLayout()
        self.threshold = threshold
        self.anchor_offset = anchor_offset

    def port_anchor(self, switch_position: Position, port_id: int) -> QPointF:
        """Absolute canvas anchor of a port."""
        local = self.layout.anchor(port_id)
        return QPointF(switch_position.x + local.x(), switch_position.y + local.y())

    def attach_offset(self, port_id: int) -> Position:
        """Switch-relative terminal position that lines its plug up with a port."""
        local = self.layout.anchor(port_id)
        return Position(local.x() - self.anchor_offset, local.y())

    def find_target(self, topology: TopologyModel, terminal: TerminalModel,
                    drop: Position) -> Optional[SnapTarget]:
        """
        Find the port a terminal dropped at ``drop`` should snap to.

        Args:
            topology: Graph with up-to-date occupancy
            terminal: The terminal being dragged
            drop: Absolute drop position of the terminal

        Returns:
            The nearest eligible port strictly closer than the threshold,
            or None if the terminal should float free
        """
        plug = QPointF(drop.x + self.anchor_offset, drop.y)
        own = terminal.attachment

        best: Optional[SnapTarget] = None
        best_distance = self.threshold

        for switch in topology.switches.values():
            for port in switch.ports:
                is_own_port = (
                    own is not None
                    and own.switch_id == switch.id
                    and own.port_id == port.id
                )
                if port_handle(port.id) in switch.occupied_ports and not is_own_port:
                    continue

                anchor = self.port_anchor(switch.position, port.id)
                distance = QLineF(plug, anchor).length()
                if distance < best_distance:
                    best_distance = distance
                    best = SnapTarget(
                        switch_id=switch.id,
                        port_id=port.id,
                        offset=self.attach_offset(port.id),
                        distance=distance,
                    )

        if best is not None:
            logger.debug(
                f"Snap {terminal.id} -> {best.switch_id} port {best.port_id} "
                f"({best.distance:.1f}px)"
            )
        return best
