#!/usr/bin/env python3
"""
Switch Topology Editor - Main Entry Point

Builds the starter topology (two switches joined by an uplink cable) through
the editor core and logs the resulting port occupancy and traffic.

Usage:
    python main.py
    python main.py --debug               # Enable debug logging
    python main.py --config my.json      # Use a specific settings file
"""

import sys
import logging
import argparse

from models.network import CableConfig, Position, TopologyModel
from services.settings_manager import get_settings
from services.topology_editor import TopologyEditor
from services.traffic import status_text


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Log startup message
    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def build_starter_topology(editor: TopologyEditor):
    """Core and aggregation switch linked port 1 to port 1."""
    core = editor.add_switch(Position(300, 50))
    editor.update_entity(core.id, label="Core-01")
    agg = editor.add_switch(Position(100, 350))
    editor.update_entity(agg.id, label="Agg-01")
    editor.add_cable(core.id, 1, agg.id, 1, CableConfig(direction="both"))
    # The starter layout isn't something the user should be able to undo
    editor.history.clear()


def log_summary(topology: TopologyModel):
    logger = logging.getLogger(__name__)
    for switch in topology.switches.values():
        logger.info(f"{switch.id} '{switch.label}': occupied {switch.occupied_ports or 'none'}")
        for handle, traffic in switch.traffic.items():
            logger.info(f"  {handle}: {status_text(traffic)}")
    for cable in topology.cables.values():
        logger.info(f"{cable.id} '{cable.label}' ({cable.direction.value})")


def main():
    """Main entry point."""
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Switch topology editor core')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', metavar='PATH', help='Settings file to use')
    args = parser.parse_args()

    # Setup logging
    setup_logging(debug=args.debug)

    settings = get_settings(args.config)
    editor = TopologyEditor(settings.settings)
    build_starter_topology(editor)
    log_summary(editor.topology)
    return 0


if __name__ == "__main__":
    sys.exit(main())
