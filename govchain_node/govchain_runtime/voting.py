# govchain_node/govchain_runtime/voting.py
from __future__ import annotations

"""
VotingRuntime:
- Proposal registry with sequential ids (1, 2, 3, ... never reused)
- One vote per principal per proposal, YES/NO only, never changed
- Block-height window [start, end] inclusive
- Permissionless finalization by strict majority (ties fail)
- Admin cancel and admin duration bounds

Authorization is read through an injected AuthorizationProvider; this
runtime never writes access-control state.
"""

import copy
from enum import Enum
from typing import Any, Dict, List, Optional

from .access_control import AuthorizationProvider
from .errors import VotingCode, VotingError
from .state import dict_ns, int_field, ns

DEFAULT_MIN_DURATION = 144  # ~1 day of blocks
DEFAULT_MAX_DURATION = 4320  # ~30 days of blocks


class VoteChoice(int, Enum):
    YES = 1
    NO = 2


class ProposalStatus(str, Enum):
    ACTIVE = "active"
    PASSED = "passed"
    FAILED = "failed"


def _require(cond: bool, code: VotingCode, detail: str = "") -> None:
    if not cond:
        raise VotingError(code, detail)


class VotingRuntime:
    NAMESPACE = "voting"

    def __init__(
        self,
        ledger: Dict[str, Any],
        auth: AuthorizationProvider,
        *,
        min_duration: int = DEFAULT_MIN_DURATION,
        max_duration: int = DEFAULT_MAX_DURATION,
    ) -> None:
        self.ledger = ledger
        self.auth = auth
        config = dict_ns(self._root, "config")
        config.setdefault("min_duration", int(min_duration))
        config.setdefault("max_duration", int(max_duration))
        self._root.setdefault("proposal_count", 0)
        dict_ns(self._root, "proposals")
        dict_ns(self._root, "votes")

    # ------------------------
    # State access
    # ------------------------
    @property
    def _root(self) -> Dict[str, Any]:
        return ns(self.ledger, self.NAMESPACE)

    def _view(self, key: str) -> Dict[str, Any]:
        # Read-only access; writes go through dict_ns.
        obj = self._root.get(key)
        return obj if isinstance(obj, dict) else {}

    @property
    def _proposals(self) -> Dict[str, Any]:
        return self._view("proposals")

    @property
    def _votes(self) -> Dict[str, Any]:
        return self._view("votes")

    def _proposal(self, proposal_id: int) -> Optional[Dict[str, Any]]:
        p = self._proposals.get(str(int(proposal_id)))
        return p if isinstance(p, dict) else None

    @staticmethod
    def _in_window(p: Dict[str, Any], height: int) -> bool:
        return int(p["start"]) <= int(height) <= int(p["end"])

    # ------------------------
    # Queries
    # ------------------------
    def get_proposal(self, proposal_id: int) -> Optional[Dict[str, Any]]:
        p = self._proposal(proposal_id)
        return copy.deepcopy(p) if p is not None else None

    def list_proposals(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(p) for _, p in sorted(self._proposals.items(), key=lambda kv: int(kv[0]))]

    def get_vote(self, proposal_id: int, voter: str) -> Optional[int]:
        ballots = self._votes.get(str(int(proposal_id)))
        if not isinstance(ballots, dict) or voter not in ballots:
            return None
        return int(ballots[voter])

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self.get_vote(proposal_id, voter) is not None

    def get_proposal_count(self) -> int:
        return int_field(self._root, "proposal_count")

    def get_voting_config(self) -> Dict[str, int]:
        config = self._view("config")
        return {
            "min_duration": int_field(config, "min_duration", DEFAULT_MIN_DURATION),
            "max_duration": int_field(config, "max_duration", DEFAULT_MAX_DURATION),
        }

    def is_proposal_active(self, proposal_id: int, height: int) -> bool:
        p = self._proposal(proposal_id)
        if p is None:
            return False
        return p.get("status") == ProposalStatus.ACTIVE.value and self._in_window(p, height)

    def get_proposal_results(self, proposal_id: int) -> Optional[Dict[str, Any]]:
        p = self._proposal(proposal_id)
        if p is None:
            return None
        yes = int(p.get("yes_votes", 0))
        no = int(p.get("no_votes", 0))
        return {"yes_votes": yes, "no_votes": no, "total_votes": yes + no, "status": p.get("status")}

    # ------------------------
    # Proposal lifecycle
    # ------------------------
    def create_proposal(
        self, caller: str, title: str, description: str, duration: int, height: int
    ) -> int:
        _require(self.auth.is_authorized(caller), VotingCode.UNAUTHORIZED)
        cfg = self.get_voting_config()
        duration = int(duration)
        _require(
            cfg["min_duration"] <= duration <= cfg["max_duration"],
            VotingCode.INVALID_DURATION,
            f"duration must be within [{cfg['min_duration']}, {cfg['max_duration']}]",
        )

        pid = self.get_proposal_count() + 1
        start = int(height)
        dict_ns(self._root, "proposals")[str(pid)] = {
            "id": pid,
            "title": str(title),
            "description": str(description),
            "proposer": caller,
            "start": start,
            "end": start + duration,
            "yes_votes": 0,
            "no_votes": 0,
            "status": ProposalStatus.ACTIVE.value,
        }
        self._root["proposal_count"] = pid
        return pid

    def vote(self, caller: str, proposal_id: int, choice: int, height: int) -> bool:
        p = self._proposal(proposal_id)
        _require(p is not None, VotingCode.PROPOSAL_NOT_FOUND, str(proposal_id))
        _require(self.auth.is_authorized(caller), VotingCode.UNAUTHORIZED)
        _require(
            p["status"] == ProposalStatus.ACTIVE.value and self._in_window(p, height),
            VotingCode.PROPOSAL_ENDED,
        )
        key = str(p["id"])
        _require(caller not in self._votes.get(key, {}), VotingCode.ALREADY_VOTED)
        try:
            option = VoteChoice(int(choice))
        except (TypeError, ValueError):
            raise VotingError(VotingCode.INVALID_VOTE, repr(choice)) from None

        dict_ns(dict_ns(self._root, "votes"), key)[caller] = int(option)
        if option is VoteChoice.YES:
            p["yes_votes"] = int(p.get("yes_votes", 0)) + 1
        else:
            p["no_votes"] = int(p.get("no_votes", 0)) + 1
        return True

    def finalize_proposal(self, caller: str, proposal_id: int, height: int) -> str:
        # Deliberately open to any caller: the outcome is fixed by committed votes.
        p = self._proposal(proposal_id)
        _require(p is not None, VotingCode.PROPOSAL_NOT_FOUND, str(proposal_id))
        _require(int(height) > int(p["end"]), VotingCode.PROPOSAL_STILL_ACTIVE)
        _require(p["status"] == ProposalStatus.ACTIVE.value, VotingCode.PROPOSAL_ENDED)

        if int(p.get("yes_votes", 0)) > int(p.get("no_votes", 0)):
            p["status"] = ProposalStatus.PASSED.value
        else:
            p["status"] = ProposalStatus.FAILED.value
        return p["status"]

    def cancel_proposal(self, caller: str, proposal_id: int) -> bool:
        _require(self.auth.has_admin_role(caller), VotingCode.UNAUTHORIZED)
        p = self._proposal(proposal_id)
        _require(p is not None, VotingCode.PROPOSAL_NOT_FOUND, str(proposal_id))
        _require(p["status"] == ProposalStatus.ACTIVE.value, VotingCode.PROPOSAL_ENDED)

        p["status"] = ProposalStatus.FAILED.value
        return True

    # ------------------------
    # Admin config
    # ------------------------
    def update_voting_duration(self, caller: str, min_duration: int, max_duration: int) -> bool:
        _require(self.auth.has_admin_role(caller), VotingCode.UNAUTHORIZED)
        lo, hi = int(min_duration), int(max_duration)
        _require(hi > lo > 0, VotingCode.INVALID_DURATION, "require max > min > 0")

        self._root["config"] = {"min_duration": lo, "max_duration": hi}
        return True
