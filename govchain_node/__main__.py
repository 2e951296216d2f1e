# govchain_node/__main__.py
"""
Entry point for running the GovChain node as a module:
    python -m govchain_node [--host 127.0.0.1] [--port 8000]
                            [--data-dir ./data] [--deployer ST1...]
                            [--no-persist]
Env toggles (see govchain_node.config):
  GOVCHAIN_DEPLOYER=...    -> owner + first admin of a fresh ledger
  GOVCHAIN_DATA_DIR=...    -> where the ledger snapshot lives
  GOVCHAIN_LOG_LEVEL=...   -> logging level
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from . import config as node_config
from .govchain_api import create_app
from .govchain_executor import GovChainExecutor


def parse_args(argv=None):
    cfg = node_config.load_config(os.getcwd())
    p = argparse.ArgumentParser(
        prog="govchain-node",
        description="Run a GovChain node (access control, voting, counter and message board programs)",
    )
    p.add_argument("--host", default=node_config.get_bind_host(cfg), help="Bind address")
    p.add_argument("--port", type=int, default=node_config.get_bind_port(cfg), help="HTTP port")
    p.add_argument("--data-dir", default=node_config.get_data_dir(cfg), help="Ledger snapshot directory")
    p.add_argument("--deployer", default=node_config.get_deployer(cfg), help="Deployer principal")
    p.add_argument("--no-persist", action="store_true", help="Keep the ledger in memory only")
    return cfg, p.parse_args(argv)


def main(argv=None) -> int:
    cfg, args = parse_args(argv)

    cfg["persistence"]["data_dir"] = args.data_dir
    cfg["persistence"]["enabled"] = not args.no_persist and node_config.persistence_enabled(cfg)
    cfg["node"]["deployer"] = args.deployer

    app = create_app(GovChainExecutor(cfg))
    uvicorn.run(app, host=args.host, port=args.port, log_level=node_config.get_log_level(cfg).lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
