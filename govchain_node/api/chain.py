# govchain_node/api/chain.py
"""
Chain clock API.

- GET  /chain/height   current block height
- POST /chain/mine     advance the block height (local dev chain driver)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..govchain_executor import GovChainExecutor
from .deps import current_executor

router = APIRouter(prefix="/chain", tags=["chain"])
logger = logging.getLogger(__name__)


class HeightResponse(BaseModel):
    height: int


class MineRequest(BaseModel):
    count: int = Field(1, ge=1, le=100_000)


@router.get("/height", response_model=HeightResponse)
def get_height(execu: GovChainExecutor = Depends(current_executor)):
    return HeightResponse(height=execu.block_height())


@router.post("/mine", response_model=HeightResponse)
def mine_blocks(payload: MineRequest, execu: GovChainExecutor = Depends(current_executor)):
    height = execu.mine_blocks(payload.count)
    logger.info("Mined %s block(s); height=%s", payload.count, height)
    return HeightResponse(height=height)
