"""
Undo/redo history.

Keeps full deep copies of the topology. Every discrete edit is one step;
nothing is coalesced.
"""

import logging
from typing import Optional

from models.network import TopologyModel

logger = logging.getLogger(__name__)


class HistoryManager:
    """
    Two stacks of topology snapshots.

    ``past`` holds states before each edit (most recent last), ``future``
    holds undone states (next redo first).
    """

    def __init__(self):
        self.past: list[TopologyModel] = []
        self.future: list[TopologyModel] = []

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def take_snapshot(self, topology: TopologyModel):
        """Copy the current topology onto the undo stack and drop redo states."""
        self.record(topology.copy())

    def record(self, snapshot: TopologyModel):
        """Push an already-copied state onto the undo stack."""
        self.past.append(snapshot)
        self.future.clear()
        logger.debug(f"Snapshot recorded ({len(self.past)} undo steps)")

    def undo(self, current: TopologyModel) -> Optional[TopologyModel]:
        """
        Step back one edit.

        Args:
            current: The live topology, kept for redo

        Returns:
            The state to restore, or None when there is nothing to undo
        """
        if not self.past:
            return None
        self.future.insert(0, current.copy())
        return self.past.pop()

    def redo(self, current: TopologyModel) -> Optional[TopologyModel]:
        """Re-apply the most recently undone edit, or return None."""
        if not self.future:
            return None
        self.past.append(current.copy())
        return self.future.pop(0)

    def clear(self):
        self.past.clear()
        self.future.clear()
