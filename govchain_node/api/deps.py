from __future__ import annotations

"""
Shared FastAPI dependencies for the program routers.

- current_executor: the executor bound to the running app
- caller_principal: the calling principal, taken from the X-Principal header
- apply_call: submit a call and turn a failure receipt into HTTPException
"""

from typing import Any, Dict

from fastapi import Header, HTTPException, Request, status

from ..govchain_executor import GovChainExecutor
from ..govchain_runtime.errors import NOT_FOUND_CODES, UNAUTHORIZED_CODES


def current_executor(request: Request) -> GovChainExecutor:
    return request.app.state.executor


def caller_principal(x_principal: str = Header(..., alias="X-Principal")) -> str:
    principal = x_principal.strip()
    if not principal:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="principal_required")
    return principal


def _status_for(code: int) -> int:
    if code in UNAUTHORIZED_CODES:
        return status.HTTP_403_FORBIDDEN
    if code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


def apply_call(execu: GovChainExecutor, op: str, caller: str, **kwargs: Any) -> Dict[str, Any]:
    receipt = execu.submit(op, caller, **kwargs)
    if not receipt["ok"]:
        detail = {"error": receipt["error"], "reason": receipt["reason"]}
        raise HTTPException(status_code=_status_for(int(receipt["error"])), detail=detail)
    return receipt
