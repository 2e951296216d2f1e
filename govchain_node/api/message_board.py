# govchain_node/api/message_board.py
"""
Message Board API.

Routes
------
- GET    /board/stats
- GET    /board/config
- PUT    /board/config                  configure_board (admin)
- POST   /board/emergency-pause         emergency_pause (admin)
- GET    /board/messages                live messages, oldest first
- POST   /board/messages                post_message (optional reply_to)
- GET    /board/messages/{id}
- GET    /board/messages/{id}/content
- PUT    /board/messages/{id}           edit_message (author)
- DELETE /board/messages/{id}           delete_message (author or moderator)
- GET    /board/pinned
- POST   /board/messages/{id}/pin       pin_message (admin)
- DELETE /board/messages/{id}/pin       unpin_message (admin)
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..govchain_executor import GovChainExecutor
from ..govchain_runtime.errors import MessageBoardCode
from .deps import apply_call, caller_principal, current_executor

router = APIRouter(prefix="/board", tags=["message_board"])


class Message(BaseModel):
    id: int
    author: str
    content: str
    reply_to: Optional[int] = None
    created_at: int
    edited_at: Optional[int] = None
    deleted: bool = False
    pinned: bool = False


class MessagePost(BaseModel):
    # Length is enforced by the runtime (402) so the error code is stable.
    content: str
    reply_to: Optional[int] = None


class MessageEdit(BaseModel):
    content: str


class MessagePosted(BaseModel):
    ok: bool = True
    id: int
    height: int


class MessageContent(BaseModel):
    id: int
    content: Optional[str] = None


class PinnedMessages(BaseModel):
    pinned: List[int]


class BoardConfig(BaseModel):
    paused: bool
    moderation_enabled: bool
    public_posting: bool


class BoardStats(BaseModel):
    total_messages: int
    active_messages: int
    pinned_messages: int
    is_paused: bool


class AckResponse(BaseModel):
    ok: bool = True
    height: int


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"error": int(MessageBoardCode.MESSAGE_NOT_FOUND), "reason": "ERR_MESSAGE_NOT_FOUND"},
    )


@router.get("/stats", response_model=BoardStats)
def get_board_stats(execu: GovChainExecutor = Depends(current_executor)):
    return BoardStats(**execu.get_board_stats())


@router.get("/config", response_model=BoardConfig)
def get_board_config(execu: GovChainExecutor = Depends(current_executor)):
    return BoardConfig(**execu.get_board_config())


@router.put("/config", response_model=AckResponse)
def configure_board(
    payload: BoardConfig,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(
        execu,
        "message_board.configure_board",
        caller,
        paused=payload.paused,
        moderation_enabled=payload.moderation_enabled,
        public_posting=payload.public_posting,
    )
    return AckResponse(height=int(receipt["height"]))


@router.post("/emergency-pause", response_model=AckResponse)
def emergency_pause(caller: str = Depends(caller_principal), execu: GovChainExecutor = Depends(current_executor)):
    receipt = apply_call(execu, "message_board.emergency_pause", caller)
    return AckResponse(height=int(receipt["height"]))


@router.get("/messages", response_model=List[Message])
def list_messages(execu: GovChainExecutor = Depends(current_executor)):
    return [Message(**m) for m in execu.list_messages()]


@router.post("/messages", response_model=MessagePosted)
def post_message(
    payload: MessagePost,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(
        execu,
        "message_board.post_message",
        caller,
        content=payload.content,
        reply_to=payload.reply_to,
    )
    return MessagePosted(id=int(receipt["result"]), height=int(receipt["height"]))


@router.get("/messages/{message_id}", response_model=Message)
def get_message(message_id: int, execu: GovChainExecutor = Depends(current_executor)):
    m = execu.get_message(message_id)
    if m is None:
        raise _not_found()
    return Message(**m)


@router.get("/messages/{message_id}/content", response_model=MessageContent)
def get_message_content(message_id: int, execu: GovChainExecutor = Depends(current_executor)):
    return MessageContent(id=message_id, content=execu.get_message_content(message_id))


@router.put("/messages/{message_id}", response_model=AckResponse)
def edit_message(
    message_id: int,
    payload: MessageEdit,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(
        execu, "message_board.edit_message", caller, message_id=message_id, content=payload.content
    )
    return AckResponse(height=int(receipt["height"]))


@router.delete("/messages/{message_id}", response_model=AckResponse)
def delete_message(
    message_id: int,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "message_board.delete_message", caller, message_id=message_id)
    return AckResponse(height=int(receipt["height"]))


@router.get("/pinned", response_model=PinnedMessages)
def get_pinned_messages(execu: GovChainExecutor = Depends(current_executor)):
    return PinnedMessages(pinned=execu.get_pinned_messages())


@router.post("/messages/{message_id}/pin", response_model=AckResponse)
def pin_message(
    message_id: int,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "message_board.pin_message", caller, message_id=message_id)
    return AckResponse(height=int(receipt["height"]))


@router.delete("/messages/{message_id}/pin", response_model=AckResponse)
def unpin_message(
    message_id: int,
    caller: str = Depends(caller_principal),
    execu: GovChainExecutor = Depends(current_executor),
):
    receipt = apply_call(execu, "message_board.unpin_message", caller, message_id=message_id)
    return AckResponse(height=int(receipt["height"]))
