# govchain_node/api/access_control.py
"""
Access Control API.

Mutating routes act as the principal in the X-Principal header.

Routes
------
- GET    /access/owner
- GET    /access/admins
- POST   /access/admins                  add_admin
- DELETE /access/admins/{target}         remove_admin
- POST   /access/users                   grant_user_role
- DELETE /access/users/{target}          revoke_user_role
- POST   /access/renounce                renounce_role
- POST   /access/ownership               transfer_ownership
- GET    /access/principals/{principal}  role summary
"""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..govchain_executor import GovChainExecutor
from .deps import apply_call, caller_principal, current_executor

router = APIRouter(prefix="/access", tags=["access_control"])


class PrincipalTarget(BaseModel):
    target: str = Field(..., min_length=1)


class OwnershipTransfer(BaseModel):
    new_owner: str = Field(..., min_length=1)


class AckResponse(BaseModel):
    ok: bool = True
    result: bool = True
    height: int


class OwnerResponse(BaseModel):
    owner: str


class AdminsResponse(BaseModel):
    admins: List[str]


class PrincipalRoleResponse(BaseModel):
    principal: str
    is_admin: bool
    has_role: bool
    role: Optional[int] = None
    is_authorized: bool
    is_owner: bool


def _ack(receipt: Dict) -> AckResponse:
    return AckResponse(result=bool(receipt["result"]), height=int(receipt["height"]))


@router.get("/owner", response_model=OwnerResponse)
def get_contract_owner(execu: GovChainExecutor = Depends(current_executor)):
    return OwnerResponse(owner=execu.get_contract_owner())


@router.get("/admins", response_model=AdminsResponse)
def list_admins(execu: GovChainExecutor = Depends(current_executor)):
    return AdminsResponse(admins=execu.list_admins())


@router.post("/admins", response_model=AckResponse)
def add_admin(
    payload: PrincipalTarget,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return _ack(apply_call(execu, "access_control.add_admin", caller, target=payload.target))


@router.delete("/admins/{target}", response_model=AckResponse)
def remove_admin(
    target: str,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return _ack(apply_call(execu, "access_control.remove_admin", caller, target=target))


@router.post("/users", response_model=AckResponse)
def grant_user_role(
    payload: PrincipalTarget,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return _ack(apply_call(execu, "access_control.grant_user_role", caller, target=payload.target))


@router.delete("/users/{target}", response_model=AckResponse)
def revoke_user_role(
    target: str,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return _ack(apply_call(execu, "access_control.revoke_user_role", caller, target=target))


@router.post("/renounce", response_model=AckResponse)
def renounce_role(
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return _ack(apply_call(execu, "access_control.renounce_role", caller))


@router.post("/ownership", response_model=AckResponse)
def transfer_ownership(
    payload: OwnershipTransfer,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    return _ack(apply_call(execu, "access_control.transfer_ownership", caller, new_owner=payload.new_owner))


@router.get("/principals/{principal}", response_model=PrincipalRoleResponse)
def get_principal_roles(principal: str, execu: GovChainExecutor = Depends(current_executor)):
    return PrincipalRoleResponse(
        principal=principal,
        is_admin=execu.has_admin_role(principal),
        has_role=execu.has_role(principal),
        role=execu.get_user_role(principal),
        is_authorized=execu.is_authorized(principal),
        is_owner=execu.get_contract_owner() == principal,
    )
