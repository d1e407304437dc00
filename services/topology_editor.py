"""
Topology Editor Service.

Entry point for every edit the canvas makes to the topology. Each edit runs
as one uninterrupted sequence:

    capture prior state -> mutate -> record undo step
        -> resync occupancy -> resync traffic -> emit signals

so listeners only ever see a fully synchronized graph.

Usage:
    editor = TopologyEditor()
    editor.topologyChanged.connect(canvas.refresh)

    sw1 = editor.add_switch()
    sw2 = editor.add_switch()
    editor.add_cable(sw1.id, 1, sw2.id, 1, CableConfig(direction="a-to-b"))
"""

import logging
import random
from contextlib import contextmanager
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from models.network import (
    CableConfig,
    CableModel,
    InvalidReference,
    PortConfig,
    Position,
    SwitchModel,
    TerminalConfig,
    TerminalModel,
    TopologyModel,
    TOTAL_PORTS,
    parse_port_handle,
)
from services.history import HistoryManager
from services.occupancy import sync_occupancy
from services.port_layout import PortLayout
from services.settings_manager import AppSettings
from services.snap_resolver import SnapResolver
from services.traffic import PortStatus, port_status, sync_traffic

logger = logging.getLogger(__name__)


class TopologyEditor(QObject):
    """
    Owns the live topology, its undo history and the snap geometry.

    Operations that name a missing entity raise ``InvalidReference``;
    operations that target a used port raise ``PortOccupied``. In both cases
    nothing changes and no undo step is recorded. ``connect`` is the
    exception: it comes from a finished drag gesture and quietly does
    nothing when a port is taken.

    Signals:
        topologyChanged(): Emitted after an edit, undo or redo
        entityAdded(str): Emitted with the id of each created entity
        entityRemoved(str): Emitted with the id of each deleted entity
        historyChanged(bool, bool): Emitted with (can_undo, can_redo)
        connectionRejected(str): Emitted when ``connect`` is ignored
    """

    topologyChanged = pyqtSignal()
    entityAdded = pyqtSignal(str)
    entityRemoved = pyqtSignal(str)
    historyChanged = pyqtSignal(bool, bool)
    connectionRejected = pyqtSignal(str)

    def __init__(self, settings: Optional[AppSettings] = None,
                 layout: Optional[PortLayout] = None,
                 rng: Optional[random.Random] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._settings = settings or AppSettings()
        self._topology = TopologyModel()
        self._history = HistoryManager()
        self._snap = SnapResolver(
            layout,
            threshold=self._settings.snap.threshold,
            anchor_offset=self._settings.snap.terminal_anchor_offset,
        )
        self._rng = rng or random.Random()

    @property
    def topology(self) -> TopologyModel:
        return self._topology

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def snap_resolver(self) -> SnapResolver:
        return self._snap

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def set_port_layout(self, layout: PortLayout):
        """Use port geometry supplied by the rendering layer."""
        self._snap.layout = layout

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resync(self):
        sync_occupancy(self._topology)
        sync_traffic(self._topology)

    def _notify(self):
        self.topologyChanged.emit()
        self.historyChanged.emit(self._history.can_undo, self._history.can_redo)

    @contextmanager
    def _mutation(self, action: str):
        """
        Wrap one edit.

        The model validates before it mutates, so an exception raised inside
        the block leaves it as it was and no step is recorded. An edit that
        leaves the graph equal to its prior value isn't recorded either.
        """
        prior = self._topology.copy()
        yield self._topology
        if self._topology == prior:
            logger.debug(f"{action}: no change")
            return
        self._history.record(prior)
        self._resync()
        logger.debug(action)
        self._notify()

    def _port_offset(self, switch_id: str, port_id: int) -> Position:
        if not isinstance(port_id, int) or not 1 <= port_id <= TOTAL_PORTS:
            raise InvalidReference(
                f"{switch_id}:{port_id}", f"Switch {switch_id} has no port {port_id!r}"
            )
        return self._snap.attach_offset(port_id)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def add_switch(self, position: Optional[Position] = None) -> SwitchModel:
        """Add a switch; without a position it lands somewhere in the spawn area."""
        if position is None:
            placement = self._settings.placement
            position = Position(
                placement.switch_spawn_origin + self._rng.random() * placement.switch_spawn_span,
                placement.switch_spawn_origin + self._rng.random() * placement.switch_spawn_span,
            )
        with self._mutation("add switch") as topology:
            switch = topology.add_switch(position)
        self.entityAdded.emit(switch.id)
        return switch

    def add_free_terminal(self, position: Optional[Position] = None) -> TerminalModel:
        """Add an unplugged terminal at ``position`` or the default spot."""
        if position is None:
            placement = self._settings.placement
            position = Position(placement.free_terminal_x, placement.free_terminal_y)
        with self._mutation("add terminal") as topology:
            terminal = topology.add_free_terminal(position)
        self.entityAdded.emit(terminal.id)
        return terminal

    def attach_terminal(self, switch_id: str, port_id: int,
                        config: Optional[TerminalConfig] = None,
                        terminal_id: Optional[str] = None,
                        pvid: Optional[int] = None) -> TerminalModel:
        """
        Plug a terminal into a switch port.

        Args:
            switch_id: Target switch
            port_id: Port number 1-20
            config: Label, category and direction to apply
            terminal_id: Existing terminal to move; None creates a new one
            pvid: Native VLAN to set on the port, if given

        Raises:
            InvalidReference: unknown switch, port or terminal
            PortOccupied: port used by a cable or another terminal
        """
        offset = self._port_offset(switch_id, port_id)
        with self._mutation(f"attach terminal to {switch_id} port {port_id}") as topology:
            terminal = topology.attach_terminal(
                switch_id, port_id, offset,
                config=config, terminal_id=terminal_id, pvid=pvid,
            )
        if terminal_id is None:
            self.entityAdded.emit(terminal.id)
        return terminal

    def detach_terminal(self, terminal_id: str,
                        position: Optional[Position] = None) -> TerminalModel:
        """Unplug a terminal, keeping it where it is drawn unless told otherwise."""
        with self._mutation(f"detach {terminal_id}") as topology:
            terminal = topology.detach_terminal(terminal_id, position)
        return terminal

    def drop_terminal(self, terminal_id: str, drop: Position) -> TerminalModel:
        """
        Finish dragging a terminal.

        Snaps it to the nearest free port within the snap threshold (its own
        current port counts as free), otherwise leaves it floating at ``drop``.

        Args:
            terminal_id: The dragged terminal
            drop: Absolute canvas position where it was released
        """
        terminal = self._topology.get_terminal(terminal_id)
        if terminal is None:
            raise InvalidReference(terminal_id, f"Unknown terminal: {terminal_id}")

        drop = Position.coerce(drop)
        target = self._snap.find_target(self._topology, terminal, drop)
        with self._mutation(f"drop {terminal_id}") as topology:
            if target is not None:
                terminal = topology.attach_terminal(
                    target.switch_id, target.port_id, target.offset,
                    terminal_id=terminal_id,
                )
            else:
                terminal = topology.detach_terminal(terminal_id, drop)
        return terminal

    def add_cable(self, source_switch_id: str, source_port_id: int,
                  target_switch_id: str, target_port_id: int,
                  config: Optional[CableConfig] = None) -> CableModel:
        """
        Link two switch ports.

        Raises:
            InvalidReference: unknown switch or port
            PortOccupied: either port is already in use
        """
        with self._mutation("add cable") as topology:
            cable = topology.add_cable(
                source_switch_id, source_port_id,
                target_switch_id, target_port_id, config,
            )
        self.entityAdded.emit(cable.id)
        return cable

    def connect(self, source_id: str, source_handle: str,
                target_id: str, target_handle: str) -> Optional[CableModel]:
        """
        Create a cable from a drawn connection between two port handles.

        Returns None, without recording anything, when either port is
        already occupied.
        """
        source = self._topology.get_switch(source_id)
        if source is None:
            raise InvalidReference(source_id, f"Unknown switch: {source_id}")
        target = self._topology.get_switch(target_id)
        if target is None:
            raise InvalidReference(target_id, f"Unknown switch: {target_id}")

        source_port = parse_port_handle(source_handle)
        target_port = parse_port_handle(target_handle)

        same_port = source_id == target_id and source_port == target_port
        if source.is_occupied(source_port) or target.is_occupied(target_port) or same_port:
            message = (
                f"Connection rejected: {source_id}/{source_handle} -> "
                f"{target_id}/{target_handle}, port already occupied"
            )
            logger.warning(message)
            self.connectionRejected.emit(message)
            return None

        return self.add_cable(source_id, source_port, target_id, target_port)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_entity(self, entity_id: str, **fields):
        """Merge attribute fields into a switch, terminal or cable."""
        with self._mutation(f"update {entity_id}") as topology:
            entity = topology.update_entity(entity_id, **fields)
        return entity

    def update_port(self, switch_id: str, port_id: int, **fields) -> PortConfig:
        """Edit a port's VLAN settings or label."""
        with self._mutation(f"update {switch_id} port {port_id}") as topology:
            port = topology.update_port(switch_id, port_id, **fields)
        return port

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def _emit_removed(self, removed: list[str]):
        for entity_id in removed:
            self.entityRemoved.emit(entity_id)

    def delete_switch(self, switch_id: str) -> list[str]:
        """Delete a switch together with its terminals and cables."""
        with self._mutation(f"delete {switch_id}") as topology:
            removed = topology.delete_switch(switch_id)
        self._emit_removed(removed)
        return removed

    def delete_terminal(self, terminal_id: str) -> list[str]:
        with self._mutation(f"delete {terminal_id}") as topology:
            removed = topology.delete_terminal(terminal_id)
        self._emit_removed(removed)
        return removed

    def delete_cable(self, cable_id: str) -> list[str]:
        with self._mutation(f"delete {cable_id}") as topology:
            removed = topology.delete_cable(cable_id)
        self._emit_removed(removed)
        return removed

    def delete(self, entity_id: str) -> list[str]:
        """Delete any entity by id."""
        with self._mutation(f"delete {entity_id}") as topology:
            removed = topology.delete(entity_id)
        self._emit_removed(removed)
        return removed

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        """Revert the last edit. Returns False if there was nothing to undo."""
        restored = self._history.undo(self._topology)
        if restored is None:
            return False
        self._topology = restored
        self._resync()
        logger.debug("undo")
        self._notify()
        return True

    def redo(self) -> bool:
        """Re-apply the last undone edit. Returns False if there was nothing to redo."""
        restored = self._history.redo(self._topology)
        if restored is None:
            return False
        self._topology = restored
        self._resync()
        logger.debug("redo")
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def port_status(self, switch_id: str, port_id: int) -> PortStatus:
        """Occupant and traffic of one port."""
        switch = self._topology.get_switch(switch_id)
        if switch is None:
            raise InvalidReference(switch_id, f"Unknown switch: {switch_id}")
        if switch.get_port(port_id) is None:
            raise InvalidReference(f"{switch_id}:{port_id}")
        return port_status(self._topology, switch_id, port_id)
