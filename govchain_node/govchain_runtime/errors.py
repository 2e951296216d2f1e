from __future__ import annotations

"""
Contract error codes.

Each program owns a fixed numeric range:
- Access Control: 100-199
- Voting System:  200-299
- Counter:        300-399
- Message Board:  400-499

Runtimes raise the component's ContractError subclass; the executor turns
it into a failure receipt carrying the numeric code.
"""

from enum import Enum


class AccessControlCode(int, Enum):
    UNAUTHORIZED = 100
    ALREADY_ADMIN = 101
    NOT_ADMIN = 102
    CANNOT_REMOVE_LAST_ADMIN = 103
    INVALID_PRINCIPAL = 104


class VotingCode(int, Enum):
    UNAUTHORIZED = 200
    PROPOSAL_NOT_FOUND = 201
    PROPOSAL_ENDED = 202
    ALREADY_VOTED = 203
    INVALID_VOTE = 204
    PROPOSAL_STILL_ACTIVE = 205
    INVALID_DURATION = 206


class CounterCode(int, Enum):
    UNAUTHORIZED = 300
    COUNTER_OVERFLOW = 301
    COUNTER_UNDERFLOW = 302
    INVALID_AMOUNT = 303
    COUNTER_PAUSED = 304


class MessageBoardCode(int, Enum):
    UNAUTHORIZED = 400
    MESSAGE_NOT_FOUND = 401
    MESSAGE_TOO_LONG = 402
    PIN_LIMIT_REACHED = 403
    NOT_PINNED = 404
    MESSAGE_ALREADY_DELETED = 405
    BOARD_PAUSED = 406


UNAUTHORIZED_CODES = frozenset(
    {
        int(AccessControlCode.UNAUTHORIZED),
        int(VotingCode.UNAUTHORIZED),
        int(CounterCode.UNAUTHORIZED),
        int(MessageBoardCode.UNAUTHORIZED),
    }
)

NOT_FOUND_CODES = frozenset(
    {
        int(VotingCode.PROPOSAL_NOT_FOUND),
        int(MessageBoardCode.MESSAGE_NOT_FOUND),
    }
)


class ContractError(RuntimeError):
    component = "contract"

    def __init__(self, code: Enum, detail: str = "") -> None:
        self.code = int(code.value)
        self.reason = f"ERR_{code.name}"
        self.detail = detail
        super().__init__(f"{self.component}: {self.reason} ({self.code}){': ' + detail if detail else ''}")

    def to_dict(self) -> dict:
        out = {"error": self.code, "reason": self.reason}
        if self.detail:
            out["detail"] = self.detail
        return out


class AccessControlError(ContractError):
    component = "access_control"


class VotingError(ContractError):
    component = "voting"


class CounterError(ContractError):
    component = "counter"


class MessageBoardError(ContractError):
    component = "message_board"
