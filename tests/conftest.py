"""
Pytest configuration and shared fixtures for topology editor tests.
"""

import random
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from PyQt6.QtCore import QCoreApplication

from models.network import Position, TopologyModel
from services.occupancy import sync_occupancy
from services.settings_manager import AppSettings, reset_settings_manager
from services.topology_editor import TopologyEditor
from services.traffic import sync_traffic


# ============== Qt Fixtures ==============

@pytest.fixture(scope="session", autouse=True)
def qt_app() -> QCoreApplication:
    """One core application for the whole session."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="topo_editor_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def settings_path(temp_dir: Path) -> Generator[str, None, None]:
    """Settings file location inside the temporary directory."""
    reset_settings_manager()
    yield str(temp_dir / "config" / "settings.json")
    reset_settings_manager()


# ============== Model Fixtures ==============

@pytest.fixture
def empty_topology() -> TopologyModel:
    """Create an empty topology."""
    return TopologyModel()


@pytest.fixture
def two_switch_topology() -> TopologyModel:
    """sw-1 at the origin and sw-2 far to the right, nothing connected."""
    topology = TopologyModel()
    topology.add_switch(Position(0, 0))
    topology.add_switch(Position(1000, 0))
    return topology


# ============== Editor Fixtures ==============

@pytest.fixture
def editor() -> TopologyEditor:
    """Editor with default settings and a seeded spawn generator."""
    return TopologyEditor(AppSettings(), rng=random.Random(7))


@pytest.fixture
def two_switch_editor(editor: TopologyEditor) -> TopologyEditor:
    """Editor holding sw-1 at the origin and sw-2 at (1000, 0), history cleared."""
    editor.add_switch(Position(0, 0))
    editor.add_switch(Position(1000, 0))
    editor.history.clear()
    return editor


# ============== Helper Functions ==============

def _resync(topology: TopologyModel):
    """Run both derivation passes, as the editor does after each edit."""
    sync_occupancy(topology)
    sync_traffic(topology)


def _assert_invariants(topology: TopologyModel):
    """Check exclusivity, referential integrity and derived occupancy."""
    seen = {}
    for terminal in topology.terminals.values():
        att = terminal.attachment
        if att is None:
            continue
        assert att.switch_id in topology.switches
        assert topology.switches[att.switch_id].get_port(att.port_id) is not None
        key = (att.switch_id, att.port_id)
        assert key not in seen, f"{key} used by {seen[key]} and {terminal.id}"
        seen[key] = terminal.id

    for cable in topology.cables.values():
        for key in ((cable.source_switch_id, cable.source_port_id),
                    (cable.target_switch_id, cable.target_port_id)):
            assert key[0] in topology.switches
            assert topology.switches[key[0]].get_port(key[1]) is not None
            assert key not in seen, f"{key} used by {seen[key]} and {cable.id}"
            seen[key] = cable.id

    for switch in topology.switches.values():
        expected = sorted(p for (s, p) in seen if s == switch.id)
        assert switch.occupied_ports == [f"p-{p}" for p in expected]
        assert set(switch.traffic) == set(switch.occupied_ports)


@pytest.fixture
def resync():
    """Derivation passes as a callable for tests that work on bare models."""
    return _resync


@pytest.fixture
def check_invariants():
    """Invariant checker as a callable."""
    return _assert_invariants
