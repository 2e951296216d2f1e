from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..govchain_executor import GovChainExecutor
from ..govchain_runtime.errors import VotingCode
from .deps import apply_call, caller_principal, current_executor

__all__ = [
    "router",
    "Proposal",
    "ProposalCreate",
    "ProposalVoteRequest",
    "VotingConfig",
]

router = APIRouter(prefix="/voting", tags=["voting"])


class Proposal(BaseModel):
    id: int
    title: str
    description: str = ""
    proposer: str
    start: int
    end: int
    yes_votes: int = 0
    no_votes: int = 0
    status: str = "active"


class ProposalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    duration: int = Field(..., gt=0, description="Voting window length in blocks")


class ProposalCreated(BaseModel):
    ok: bool = True
    id: int
    height: int


class ProposalVoteRequest(BaseModel):
    # 1 = yes, 2 = no; anything else is rejected by the runtime (204)
    choice: int


class VoteResponse(BaseModel):
    proposal_id: int
    voter: str
    choice: Optional[int] = None


class ProposalResults(BaseModel):
    yes_votes: int
    no_votes: int
    total_votes: int
    status: str


class FinalizeResponse(BaseModel):
    ok: bool = True
    status: str
    height: int


class AckResponse(BaseModel):
    ok: bool = True
    height: int


class VotingConfig(BaseModel):
    min_duration: int
    max_duration: int


class ProposalCount(BaseModel):
    count: int


class ProposalActive(BaseModel):
    proposal_id: int
    active: bool
    height: int


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"error": int(VotingCode.PROPOSAL_NOT_FOUND), "reason": "ERR_PROPOSAL_NOT_FOUND"},
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@router.get("/config", response_model=VotingConfig)
def get_voting_config(execu: GovChainExecutor = Depends(current_executor)):
    return VotingConfig(**execu.get_voting_config())


@router.get("/proposals/count", response_model=ProposalCount)
def get_proposal_count(execu: GovChainExecutor = Depends(current_executor)):
    return ProposalCount(count=execu.get_proposal_count())


@router.get("/proposals", response_model=List[Proposal])
def list_proposals(execu: GovChainExecutor = Depends(current_executor)):
    return [Proposal(**p) for p in execu.list_proposals()]


@router.get("/proposals/{proposal_id}", response_model=Proposal)
def get_proposal(proposal_id: int, execu: GovChainExecutor = Depends(current_executor)):
    p = execu.get_proposal(proposal_id)
    if p is None:
        raise _not_found()
    return Proposal(**p)


@router.get("/proposals/{proposal_id}/results", response_model=ProposalResults)
def get_proposal_results(proposal_id: int, execu: GovChainExecutor = Depends(current_executor)):
    results = execu.get_proposal_results(proposal_id)
    if results is None:
        raise _not_found()
    return ProposalResults(**results)


@router.get("/proposals/{proposal_id}/active", response_model=ProposalActive)
def is_proposal_active(proposal_id: int, execu: GovChainExecutor = Depends(current_executor)):
    return ProposalActive(
        proposal_id=proposal_id,
        active=execu.is_proposal_active(proposal_id),
        height=execu.block_height(),
    )


@router.get("/proposals/{proposal_id}/votes/{voter}", response_model=VoteResponse)
def get_vote(proposal_id: int, voter: str, execu: GovChainExecutor = Depends(current_executor)):
    return VoteResponse(proposal_id=proposal_id, voter=voter, choice=execu.get_vote(proposal_id, voter))


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------


@router.post("/proposals", response_model=ProposalCreated)
def create_proposal(
    payload: ProposalCreate,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(
        execu,
        "voting.create_proposal",
        caller,
        title=payload.title,
        description=payload.description,
        duration=payload.duration,
    )
    return ProposalCreated(id=int(receipt["result"]), height=int(receipt["height"]))


@router.post("/proposals/{proposal_id}/votes", response_model=AckResponse)
def vote_proposal(
    proposal_id: int,
    payload: ProposalVoteRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "voting.vote", caller, proposal_id=proposal_id, choice=payload.choice)
    return AckResponse(height=int(receipt["height"]))


@router.post("/proposals/{proposal_id}/finalize", response_model=FinalizeResponse)
def finalize_proposal(
    proposal_id: int,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "voting.finalize_proposal", caller, proposal_id=proposal_id)
    return FinalizeResponse(status=str(receipt["result"]), height=int(receipt["height"]))


@router.post("/proposals/{proposal_id}/cancel", response_model=AckResponse)
def cancel_proposal(
    proposal_id: int,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "voting.cancel_proposal", caller, proposal_id=proposal_id)
    return AckResponse(height=int(receipt["height"]))


@router.put("/config", response_model=AckResponse)
def update_voting_duration(
    payload: VotingConfig,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(
        execu,
        "voting.update_voting_duration",
        caller,
        min_duration=payload.min_duration,
        max_duration=payload.max_duration,
    )
    return AckResponse(height=int(receipt["height"]))
