# govchain_node/api/health.py
from __future__ import annotations

"""
Health & summary API.

Routes
------
- GET /health
    Simple heartbeat.

- GET /health/summary
    High-level counts per program namespace.
"""

import time
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..govchain_executor import GovChainExecutor
from .deps import current_executor

router = APIRouter(prefix="/health", tags=["health"])


class PingResponse(BaseModel):
    ok: bool = True
    ts: float = Field(..., description="Server timestamp.")


class SummaryResponse(BaseModel):
    ok: bool = True
    height: int
    owner: str
    counts: Dict[str, int]
    persistent: bool


@router.get("", response_model=PingResponse)
def ping():
    return PingResponse(ts=time.time())


@router.get("/summary", response_model=SummaryResponse)
def summary(execu: GovChainExecutor = Depends(current_executor)):
    return SummaryResponse(
        height=execu.block_height(),
        owner=execu.get_contract_owner(),
        counts={
            "admins": len(execu.list_admins()),
            "roles": len(execu.list_roles()),
            "proposals": execu.get_proposal_count(),
            "messages": execu.get_board_stats()["active_messages"],
        },
        persistent=execu.store is not None,
    )
