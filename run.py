#!/usr/bin/env python3
"""
Milestone Registry - server runner

Usage:
    python run.py                          # Serve with config/config.yaml
    python run.py --port 9000              # Override port
    python run.py --store sqlite --db milestones.db

Each flag can also come from the environment or a .env file:
MILESTONES_CONFIG, MILESTONES_HOST, MILESTONES_PORT, MILESTONES_STORE,
MILESTONES_DB and MILESTONES_EVENTS. Flags win over the environment.
"""

from __future__ import annotations

import argparse
import logging
import os

from dotenv import load_dotenv

from milestones.api import run_server
from milestones.config import get_validated_config, load_config, set_config_value

# Load environment variables
load_dotenv()


def main(argv: list[str] | None = None) -> None:
    env = os.environ.get
    parser = argparse.ArgumentParser(description="Milestone Registry Server")
    parser.add_argument("--config", default=env("MILESTONES_CONFIG"), help="Path to config.yaml")
    parser.add_argument("--host", default=env("MILESTONES_HOST"), help="Host to bind to")
    parser.add_argument("--port", type=int, default=env("MILESTONES_PORT"), help="Port to bind to")
    parser.add_argument(
        "--store", choices=["memory", "sqlite"], default=env("MILESTONES_STORE"), help="Store backend"
    )
    parser.add_argument(
        "--db", default=env("MILESTONES_DB"), help="SQLite database path (with --store sqlite)"
    )
    parser.add_argument("--events", default=env("MILESTONES_EVENTS"), help="JSONL file for registry events")
    args = parser.parse_args(argv)

    load_config(args.config)

    # CLI overrides, re-validated on each set
    if args.host is not None:
        set_config_value("server.host", args.host)
    if args.port is not None:
        set_config_value("server.port", args.port)
    if args.db is not None:
        set_config_value("store.path", args.db)
    if args.store is not None:
        set_config_value("store.backend", args.store)
    if args.events is not None:
        set_config_value("logging.output_file", args.events)

    config = get_validated_config()
    logging.basicConfig(
        level=getattr(logging, config.logging.level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "Starting milestone registry on %s:%d (store=%s)",
        config.server.host,
        config.server.port,
        config.store.backend,
    )
    run_server(config)


if __name__ == "__main__":
    main()
