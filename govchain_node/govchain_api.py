from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from . import config as node_config
from .api import access_control, chain, counter, health, message_board, voting
from .govchain_executor import GovChainExecutor, get_executor

log = logging.getLogger(__name__)


def configure_logging(cfg: Dict[str, Any]) -> None:
    level = getattr(logging, node_config.get_log_level(cfg), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")
    else:
        root.setLevel(level)


def create_app(execu: Optional[GovChainExecutor] = None) -> FastAPI:
    execu = execu if execu is not None else get_executor()
    configure_logging(execu.cfg)

    app = FastAPI(title="GovChain Node API", version=__version__)
    app.state.executor = execu

    # CORS: tighten in prod if needed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health.router)
    app.include_router(chain.router)
    app.include_router(access_control.router)
    app.include_router(voting.router)
    app.include_router(counter.router)
    app.include_router(message_board.router)

    log.info("GovChain API ready; owner=%s height=%s", execu.get_contract_owner(), execu.block_height())
    return app
