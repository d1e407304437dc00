"""
Switch topology data models.

These models hold the editable topology: switches with a fixed 20-port
faceplate, terminals that plug into ports, and cables between ports.
Occupancy and traffic flags on a switch are derived values; they are
rewritten by the synchronization passes in ``services`` and never edited
directly.
"""

import copy
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from . import naming


class TopologyError(ValueError):
    """Base error for rejected topology operations."""


class InvalidReference(TopologyError):
    """An operation named a switch, port, terminal or cable that doesn't exist."""

    def __init__(self, reference: str, message: str = ""):
        self.reference = reference
        super().__init__(message or f"Unknown reference: {reference}")


class PortOccupied(TopologyError):
    """A port is already referenced by a terminal or a cable endpoint."""

    def __init__(self, switch_id: str, port_id: int):
        self.switch_id = switch_id
        self.port_id = port_id
        super().__init__(f"Port {port_id} on {switch_id} is already occupied")


class Direction(Enum):
    """
    Declared traffic direction.

    For terminals "a" is the terminal and "b" the switch. For cables "a" is
    the stored source endpoint and "b" the target.
    """
    BOTH = "both"
    A_TO_B = "a-to-b"
    B_TO_A = "b-to-a"

    @classmethod
    def parse(cls, value: Union["Direction", str]) -> "Direction":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise TopologyError(f"Unknown direction: {value!r}") from None


class TerminalCategory(Enum):
    """Kinds of end devices that can be plugged into a port."""
    PC = "pc"            # Workstation
    SERVER = "server"
    LAPTOP = "laptop"
    TABLET = "tablet"

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]

    @classmethod
    def parse(cls, value: Union["TerminalCategory", str]) -> "TerminalCategory":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise TopologyError(f"Unknown terminal category: {value!r}") from None


_CATEGORY_NAMES = {
    TerminalCategory.PC: "Workstation / PC",
    TerminalCategory.SERVER: "Data Server",
    TerminalCategory.LAPTOP: "Notebook",
    TerminalCategory.TABLET: "Mobile / Tablet",
}


class PortKind(Enum):
    """Port groups on the switch faceplate."""
    ACCESS = "access"
    UPLINK = "uplink"


ACCESS_PORT_COUNT = 16
UPLINK_PORT_COUNT = 4
TOTAL_PORTS = ACCESS_PORT_COUNT + UPLINK_PORT_COUNT

MIN_VLAN = 1
MAX_VLAN = 4094

_HANDLE_RE = re.compile(r"^p-(\d+)$")


def port_handle(port_id: int) -> str:
    """Canvas handle name for a port, e.g. ``p-3``."""
    return f"p-{port_id}"


def parse_port_handle(handle: str) -> int:
    """Port number from a handle like ``p-3``."""
    match = _HANDLE_RE.match(handle or "")
    if not match:
        raise InvalidReference(str(handle), f"Not a port handle: {handle!r}")
    return int(match.group(1))


def parse_vlan_ranges(text: str) -> list[int]:
    """
    Expand a VLAN list such as ``"1,10-12"`` into ``[1, 10, 11, 12]``.

    Raises:
        TopologyError: on malformed ranges or ids outside 1-4094
    """
    vlans: set[int] = set()
    for part in str(text).split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                low_text, high_text = part.split("-", 1)
                low, high = int(low_text), int(high_text)
            else:
                low = high = int(part)
        except ValueError:
            raise TopologyError(f"Malformed VLAN range: {part!r}") from None
        if low > high or low < MIN_VLAN or high > MAX_VLAN:
            raise TopologyError(f"VLAN range out of bounds: {part!r}")
        vlans.update(range(low, high + 1))
    return sorted(vlans)


@dataclass
class Position:
    """2D position on the canvas."""
    x: float = 0.0
    y: float = 0.0

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    @classmethod
    def coerce(cls, value) -> "Position":
        """Accept a Position or an (x, y) pair."""
        if isinstance(value, cls):
            return cls(value.x, value.y)
        try:
            x, y = value
            return cls(float(x), float(y))
        except (TypeError, ValueError):
            raise TopologyError(f"Not a position: {value!r}") from None


@dataclass
class PortConfig:
    """
    A physical port on a switch faceplate.

    The port number never changes; the VLAN settings and label may be edited.
    """
    id: int = 1
    kind: PortKind = PortKind.ACCESS
    pvid: int = 1                  # Native (untagged) VLAN
    allowed_vlans: str = "1"       # Permitted VLANs, e.g. "1,10-20"
    label: str = ""

    def __post_init__(self):
        if not self.label:
            if self.kind == PortKind.UPLINK:
                self.label = f"XGE1/0/{self.id - ACCESS_PORT_COUNT}"
            else:
                self.label = f"GE1/0/{self.id}"

    @property
    def handle(self) -> str:
        return port_handle(self.id)

    @property
    def allowed_vlan_ids(self) -> list[int]:
        return parse_vlan_ranges(self.allowed_vlans)


def generate_ports() -> list[PortConfig]:
    """Create the fixed 16 access + 4 uplink port set."""
    return [
        PortConfig(
            id=n,
            kind=PortKind.ACCESS if n <= ACCESS_PORT_COUNT else PortKind.UPLINK,
        )
        for n in range(1, TOTAL_PORTS + 1)
    ]


@dataclass
class PortTraffic:
    """Transmit/receive activity of a port, seen from its switch."""
    has_transmit: bool = False
    has_receive: bool = False


@dataclass
class SwitchModel:
    """
    A 20-port switch.

    Attributes:
        id: Unique identifier (``sw-<n>``)
        label: Display name
        position: Canvas position
        ports: The fixed port set, ordered by port number
        occupied_ports: Derived handles of ports in use
        traffic: Derived per-handle traffic flags for occupied ports
    """
    id: str = ""
    label: str = ""
    position: Position = field(default_factory=Position)
    ports: list[PortConfig] = field(default_factory=generate_ports)
    occupied_ports: list[str] = field(default_factory=list)
    traffic: dict[str, PortTraffic] = field(default_factory=dict)

    def get_port(self, port_id: int) -> Optional[PortConfig]:
        """Get a port by its number."""
        for port in self.ports:
            if port.id == port_id:
                return port
        return None

    def is_occupied(self, port_id: int) -> bool:
        return port_handle(port_id) in self.occupied_ports

    def get_available_ports(self) -> list[PortConfig]:
        return [p for p in self.ports if p.handle not in self.occupied_ports]


@dataclass
class FreePlacement:
    """A terminal floating on the canvas at an absolute position."""
    position: Position = field(default_factory=Position)


@dataclass
class PortAttachment:
    """A terminal plugged into a switch port, positioned relative to the switch."""
    switch_id: str = ""
    port_id: int = 1
    offset: Position = field(default_factory=Position)

    @property
    def handle(self) -> str:
        return port_handle(self.port_id)


Placement = Union[FreePlacement, PortAttachment]


@dataclass
class TerminalModel:
    """An end device (workstation, server, laptop, tablet)."""
    id: str = ""
    label: str = ""
    category: TerminalCategory = TerminalCategory.PC
    direction: Direction = Direction.BOTH
    placement: Placement = field(default_factory=FreePlacement)

    @property
    def is_attached(self) -> bool:
        return isinstance(self.placement, PortAttachment)

    @property
    def attachment(self) -> Optional[PortAttachment]:
        return self.placement if isinstance(self.placement, PortAttachment) else None


@dataclass
class CableModel:
    """
    A cable between two switch ports.

    The direction is relative to the stored orientation: ``A_TO_B`` means
    traffic flows from the source port to the target port.
    """
    id: str = ""
    source_switch_id: str = ""
    source_port_id: int = 1
    target_switch_id: str = ""
    target_port_id: int = 1
    direction: Direction = Direction.BOTH
    label: str = ""

    @property
    def source_handle(self) -> str:
        return port_handle(self.source_port_id)

    @property
    def target_handle(self) -> str:
        return port_handle(self.target_port_id)

    @property
    def source_label(self) -> str:
        return f"P{self.source_port_id}"

    @property
    def target_label(self) -> str:
        return f"P{self.target_port_id}"

    def is_source_end(self, switch_id: str, port_id: int) -> bool:
        return self.source_switch_id == switch_id and self.source_port_id == port_id

    def is_target_end(self, switch_id: str, port_id: int) -> bool:
        return self.target_switch_id == switch_id and self.target_port_id == port_id

    def uses_port(self, switch_id: str, port_id: int) -> bool:
        return self.is_source_end(switch_id, port_id) or self.is_target_end(switch_id, port_id)

    def touches(self, switch_id: str) -> bool:
        return switch_id in (self.source_switch_id, self.target_switch_id)


@dataclass
class TerminalConfig:
    """User-supplied attributes for a terminal being plugged in."""
    label: str = ""
    category: Union[TerminalCategory, str] = TerminalCategory.PC
    direction: Union[Direction, str] = Direction.BOTH


@dataclass
class CableConfig:
    """User-supplied attributes for a new cable."""
    direction: Union[Direction, str] = Direction.BOTH
    label: str = ""


# Attribute fields update_entity may touch, per entity kind
SWITCH_FIELDS = {"label", "position"}
TERMINAL_FIELDS = {"label", "category", "direction"}
CABLE_FIELDS = {"label", "direction"}
PORT_FIELDS = {"pvid", "allowed_vlans", "label"}


@dataclass
class TopologyModel:
    """
    Root model holding the whole editable graph.

    Every mutating method validates its arguments and raises a
    ``TopologyError`` before changing anything, so a failed call leaves the
    model untouched. Derived switch fields are not maintained here.
    """
    switches: dict[str, SwitchModel] = field(default_factory=dict)
    terminals: dict[str, TerminalModel] = field(default_factory=dict)
    cables: dict[str, CableModel] = field(default_factory=dict)

    # Highest index issued per id prefix
    issued: dict[str, int] = field(default_factory=dict)

    def copy(self) -> "TopologyModel":
        """Create a deep copy."""
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_switch(self, switch_id: str) -> Optional[SwitchModel]:
        return self.switches.get(switch_id)

    def get_terminal(self, terminal_id: str) -> Optional[TerminalModel]:
        return self.terminals.get(terminal_id)

    def get_cable(self, cable_id: str) -> Optional[CableModel]:
        return self.cables.get(cable_id)

    def get_entity(self, entity_id: str):
        """Get a switch, terminal or cable by id."""
        for collection in (self.switches, self.terminals, self.cables):
            if entity_id in collection:
                return collection[entity_id]
        return None

    def terminal_on_port(self, switch_id: str, port_id: int) -> Optional[TerminalModel]:
        """Get the terminal plugged into a port, if any."""
        for terminal in self.terminals.values():
            att = terminal.attachment
            if att and att.switch_id == switch_id and att.port_id == port_id:
                return terminal
        return None

    def cable_on_port(self, switch_id: str, port_id: int) -> Optional[CableModel]:
        """Get the cable with an endpoint on a port, if any."""
        for cable in self.cables.values():
            if cable.uses_port(switch_id, port_id):
                return cable
        return None

    def is_port_referenced(self, switch_id: str, port_id: int,
                           ignore_terminal_id: Optional[str] = None) -> bool:
        """Check whether a terminal (other than ``ignore_terminal_id``) or a cable uses a port."""
        terminal = self.terminal_on_port(switch_id, port_id)
        if terminal is not None and terminal.id != ignore_terminal_id:
            return True
        return self.cable_on_port(switch_id, port_id) is not None

    def terminals_on_switch(self, switch_id: str) -> list[TerminalModel]:
        return [
            t for t in self.terminals.values()
            if t.attachment and t.attachment.switch_id == switch_id
        ]

    def cables_on_switch(self, switch_id: str) -> list[CableModel]:
        return [c for c in self.cables.values() if c.touches(switch_id)]

    def free_terminals(self) -> list[TerminalModel]:
        return [t for t in self.terminals.values() if not t.is_attached]

    def absolute_position(self, terminal: TerminalModel) -> Position:
        """Canvas position of a terminal, resolving the parent offset if attached."""
        att = terminal.attachment
        if att is None:
            return Position(terminal.placement.position.x, terminal.placement.position.y)
        switch = self._require_switch(att.switch_id)
        return switch.position + att.offset

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _require_switch(self, switch_id: str) -> SwitchModel:
        switch = self.switches.get(switch_id)
        if switch is None:
            raise InvalidReference(switch_id, f"Unknown switch: {switch_id}")
        return switch

    def _require_port(self, switch: SwitchModel, port_id) -> PortConfig:
        port = switch.get_port(port_id) if isinstance(port_id, int) else None
        if port is None:
            raise InvalidReference(
                f"{switch.id}:{port_id}",
                f"Switch {switch.id} has no port {port_id!r}",
            )
        return port

    def _require_terminal(self, terminal_id: str) -> TerminalModel:
        terminal = self.terminals.get(terminal_id)
        if terminal is None:
            raise InvalidReference(terminal_id, f"Unknown terminal: {terminal_id}")
        return terminal

    def _require_cable(self, cable_id: str) -> CableModel:
        cable = self.cables.get(cable_id)
        if cable is None:
            raise InvalidReference(cable_id, f"Unknown cable: {cable_id}")
        return cable

    def _ensure_free(self, switch_id: str, port_id: int,
                     ignore_terminal_id: Optional[str] = None):
        if self.is_port_referenced(switch_id, port_id, ignore_terminal_id):
            raise PortOccupied(switch_id, port_id)

    def _issue(self, prefix: str, ids) -> int:
        index = naming.next_index(ids, prefix, self.issued.get(prefix, 0))
        self.issued[prefix] = index
        return index

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_switch(self, position: Optional[Position] = None) -> SwitchModel:
        """Create and add a new switch with a fresh port set."""
        index = self._issue(naming.SWITCH_PREFIX, self.switches)
        switch = SwitchModel(
            id=naming.switch_id(index),
            label=naming.switch_label(index),
            position=Position.coerce(position) if position is not None else Position(),
        )
        self.switches[switch.id] = switch
        return switch

    def add_free_terminal(self, position: Optional[Position] = None) -> TerminalModel:
        """Create a terminal that is not plugged into anything."""
        index = self._issue(naming.TERMINAL_PREFIX, self.terminals)
        terminal = TerminalModel(
            id=naming.terminal_id(index),
            label=naming.terminal_label(index),
            placement=FreePlacement(
                Position.coerce(position) if position is not None else Position()
            ),
        )
        self.terminals[terminal.id] = terminal
        return terminal

    def attach_terminal(
        self,
        switch_id: str,
        port_id: int,
        offset: Position,
        config: Optional[TerminalConfig] = None,
        terminal_id: Optional[str] = None,
        pvid: Optional[int] = None,
    ) -> TerminalModel:
        """
        Plug a terminal into a port.

        Creates a new terminal when ``terminal_id`` is None, otherwise moves
        the existing terminal onto the port. ``config`` is applied to the
        terminal; for an existing terminal ``None`` keeps its attributes.

        Raises:
            InvalidReference: unknown switch, port or terminal
            PortOccupied: the port is used by a cable or another terminal
        """
        switch = self._require_switch(switch_id)
        port = self._require_port(switch, port_id)
        existing = self._require_terminal(terminal_id) if terminal_id else None
        self._ensure_free(switch_id, port_id, ignore_terminal_id=terminal_id)
        if pvid is not None:
            pvid = _validate_pvid(pvid)

        category = direction = None
        if config is not None:
            category = TerminalCategory.parse(config.category)
            direction = Direction.parse(config.direction)

        attachment = PortAttachment(switch_id, port_id, Position.coerce(offset))

        if existing is None:
            index = self._issue(naming.TERMINAL_PREFIX, self.terminals)
            terminal = TerminalModel(
                id=naming.terminal_id(index),
                label=(config.label if config else "") or naming.terminal_label(index),
                category=category or TerminalCategory.PC,
                direction=direction or Direction.BOTH,
                placement=attachment,
            )
            self.terminals[terminal.id] = terminal
        else:
            terminal = existing
            terminal.placement = attachment
            if config is not None:
                if config.label:
                    terminal.label = config.label
                terminal.category = category
                terminal.direction = direction

        if pvid is not None:
            port.pvid = pvid
        return terminal

    def detach_terminal(self, terminal_id: str,
                        position: Optional[Position] = None) -> TerminalModel:
        """
        Unplug a terminal, leaving it floating.

        Without an explicit ``position`` the terminal stays where it was drawn:
        parent switch position plus its relative offset.
        """
        terminal = self._require_terminal(terminal_id)
        if position is None:
            position = self.absolute_position(terminal)
        terminal.placement = FreePlacement(Position.coerce(position))
        return terminal

    def add_cable(
        self,
        source_switch_id: str,
        source_port_id: int,
        target_switch_id: str,
        target_port_id: int,
        config: Optional[CableConfig] = None,
    ) -> CableModel:
        """
        Create a cable between two ports.

        Raises:
            InvalidReference: unknown switch or port
            PortOccupied: either endpoint is already in use, or both
                endpoints name the same port
        """
        source = self._require_switch(source_switch_id)
        target = self._require_switch(target_switch_id)
        self._require_port(source, source_port_id)
        self._require_port(target, target_port_id)
        self._ensure_free(source_switch_id, source_port_id)
        self._ensure_free(target_switch_id, target_port_id)
        if source_switch_id == target_switch_id and source_port_id == target_port_id:
            raise PortOccupied(target_switch_id, target_port_id)

        config = config or CableConfig()
        direction = Direction.parse(config.direction)

        index = self._issue(naming.CABLE_PREFIX, self.cables)
        cable = CableModel(
            id=naming.cable_id(index),
            source_switch_id=source_switch_id,
            source_port_id=source_port_id,
            target_switch_id=target_switch_id,
            target_port_id=target_port_id,
            direction=direction,
            label=config.label or naming.cable_label(
                source.label, source_port_id, target.label, target_port_id
            ),
        )
        self.cables[cable.id] = cable
        return cable

    def update_entity(self, entity_id: str, **fields):
        """
        Merge attribute fields into a switch, terminal or cable.

        Placement, endpoints and ids can't be changed here.
        """
        entity = self.get_entity(entity_id)
        if entity is None:
            raise InvalidReference(entity_id)

        if isinstance(entity, SwitchModel):
            allowed = SWITCH_FIELDS
        elif isinstance(entity, TerminalModel):
            allowed = TERMINAL_FIELDS
        else:
            allowed = CABLE_FIELDS

        unknown = set(fields) - allowed
        if unknown:
            raise TopologyError(
                f"Cannot update {', '.join(sorted(unknown))} on {entity_id}"
            )

        values = {}
        for name, value in fields.items():
            if name == "position":
                values[name] = Position.coerce(value)
            elif name == "direction":
                values[name] = Direction.parse(value)
            elif name == "category":
                values[name] = TerminalCategory.parse(value)
            else:
                values[name] = str(value)

        for name, value in values.items():
            setattr(entity, name, value)
        return entity

    def update_port(self, switch_id: str, port_id: int, **fields) -> PortConfig:
        """Edit VLAN settings or label of a port."""
        port = self._require_port(self._require_switch(switch_id), port_id)

        unknown = set(fields) - PORT_FIELDS
        if unknown:
            raise TopologyError(f"Cannot update {', '.join(sorted(unknown))} on a port")

        values = {}
        if "pvid" in fields:
            values["pvid"] = _validate_pvid(fields["pvid"])
        if "allowed_vlans" in fields:
            text = str(fields["allowed_vlans"]).strip()
            parse_vlan_ranges(text)
            values["allowed_vlans"] = text
        if "label" in fields:
            values["label"] = str(fields["label"])

        for name, value in values.items():
            setattr(port, name, value)
        return port

    def delete_switch(self, switch_id: str) -> list[str]:
        """Remove a switch with its attached terminals and incident cables."""
        self._require_switch(switch_id)
        removed = [t.id for t in self.terminals_on_switch(switch_id)]
        removed += [c.id for c in self.cables_on_switch(switch_id)]
        for entity_id in removed:
            self.terminals.pop(entity_id, None)
            self.cables.pop(entity_id, None)
        del self.switches[switch_id]
        return [switch_id] + removed

    def delete_terminal(self, terminal_id: str) -> list[str]:
        self._require_terminal(terminal_id)
        del self.terminals[terminal_id]
        return [terminal_id]

    def delete_cable(self, cable_id: str) -> list[str]:
        self._require_cable(cable_id)
        del self.cables[cable_id]
        return [cable_id]

    def delete(self, entity_id: str) -> list[str]:
        """Remove any entity by id, returning every id that went away."""
        if entity_id in self.switches:
            return self.delete_switch(entity_id)
        if entity_id in self.terminals:
            return self.delete_terminal(entity_id)
        if entity_id in self.cables:
            return self.delete_cable(entity_id)
        raise InvalidReference(entity_id)

    def clear(self):
        """Remove everything, including issued-id history."""
        self.switches.clear()
        self.terminals.clear()
        self.cables.clear()
        self.issued.clear()


def _validate_pvid(value) -> int:
    try:
        pvid = int(value)
    except (TypeError, ValueError):
        raise TopologyError(f"Native VLAN must be a number: {value!r}") from None
    if not MIN_VLAN <= pvid <= MAX_VLAN:
        raise TopologyError(f"Native VLAN out of range: {pvid}")
    return pvid
