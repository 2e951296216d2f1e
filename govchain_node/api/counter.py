from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..govchain_executor import GovChainExecutor
from .deps import apply_call, caller_principal, current_executor

router = APIRouter(prefix="/counter", tags=["counter"])


class CounterValue(BaseModel):
    value: int


class CounterConfig(BaseModel):
    current_value: int
    paused: bool
    increment_requires_permission: bool
    decrement_requires_permission: bool
    max_value: int


class AmountRequest(BaseModel):
    amount: int


class BatchRequest(BaseModel):
    count: int


class SetValueRequest(BaseModel):
    value: int = Field(..., ge=0)


class PausedRequest(BaseModel):
    paused: bool


class PermissionRequest(BaseModel):
    increment: bool
    decrement: bool


class AckResponse(BaseModel):
    ok: bool = True
    height: int


@router.get("", response_model=CounterValue)
def get_counter(execu: GovChainExecutor = Depends(current_executor)):
    return CounterValue(value=execu.get_counter())


@router.get("/config", response_model=CounterConfig)
def get_counter_config(execu: GovChainExecutor = Depends(current_executor)):
    return CounterConfig(**execu.get_counter_config())


@router.post("/increment", response_model=CounterValue)
def increment(caller: str = Depends(caller_principal), execu: GovChainExecutor = Depends(current_executor)):
    return CounterValue(value=apply_call(execu, "counter.increment", caller)["result"])


@router.post("/increment-by", response_model=CounterValue)
def increment_by(
    payload: AmountRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return CounterValue(value=apply_call(execu, "counter.increment_by", caller, amount=payload.amount)["result"])


@router.post("/batch-increment", response_model=CounterValue)
def batch_increment(
    payload: BatchRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return CounterValue(value=apply_call(execu, "counter.batch_increment", caller, count=payload.count)["result"])


@router.post("/decrement", response_model=CounterValue)
def decrement(caller: str = Depends(caller_principal), execu: GovChainExecutor = Depends(current_executor)):
    return CounterValue(value=apply_call(execu, "counter.decrement", caller)["result"])


@router.post("/decrement-by", response_model=CounterValue)
def decrement_by(
    payload: AmountRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return CounterValue(value=apply_call(execu, "counter.decrement_by", caller, amount=payload.amount)["result"])


@router.post("/reset", response_model=CounterValue)
def reset_counter(caller: str = Depends(caller_principal), execu: GovChainExecutor = Depends(current_executor)):
    return CounterValue(value=apply_call(execu, "counter.reset_counter", caller)["result"])


@router.put("", response_model=CounterValue)
def set_counter(
    payload: SetValueRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return CounterValue(value=apply_call(execu, "counter.set_counter", caller, value=payload.value)["result"])


@router.put("/paused", response_model=AckResponse)
def set_contract_paused(
    payload: PausedRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "counter.set_contract_paused", caller, paused=payload.paused)
    return AckResponse(height=int(receipt["height"]))


@router.post("/emergency-pause", response_model=AckResponse)
def emergency_pause(caller: str = Depends(caller_principal), execu: GovChainExecutor = Depends(current_executor)):
    receipt = apply_call(execu, "counter.emergency_pause", caller)
    return AckResponse(height=int(receipt["height"]))


@router.put("/permissions", response_model=AckResponse)
def set_permission_requirements(
    payload: PermissionRequest,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(
        execu,
        "counter.set_permission_requirements",
        caller,
        increment=payload.increment,
        decrement=payload.decrement,
    )
    return AckResponse(height=int(receipt["height"]))
