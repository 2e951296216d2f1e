from __future__ import annotations

"""
GovChain Executor

Hosts the ledger-resident programs of one deployed instance:
- Access Control (authorization root)
- Voting System (reads Access Control through AuthorizationProvider)
- Counter (reads Access Control through AuthorizationProvider)
- Message Board (reads Access Control through AuthorizationProvider)

Every call goes through submit(), which is the single writer:
- one re-entrant lock per instance serializes all calls and reads
- the block height is read once and passed explicitly to the runtime
- the ledger is snapshotted before the call and restored if it fails
- a successful call is persisted before the lock is released
"""

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import config as node_config
from .govchain_runtime.access_control import AccessControlRuntime
from .govchain_runtime.atomic_store import AtomicLedgerStore
from .govchain_runtime.clock import BlockClock
from .govchain_runtime.counter import CounterRuntime
from .govchain_runtime.errors import ContractError
from .govchain_runtime.message_board import MessageBoardRuntime
from .govchain_runtime.voting import VotingRuntime

log = logging.getLogger(__name__)

SCHEMA_VERSION = 2

Receipt = Dict[str, Any]


class UnknownOperation(KeyError):
    pass


class GovChainExecutor:
    def __init__(self, cfg: Optional[Dict[str, Any]] = None) -> None:
        self.cfg = cfg if cfg is not None else node_config.load_config()
        self.deployer = node_config.get_deployer(self.cfg)

        self.store: Optional[AtomicLedgerStore] = None
        if node_config.persistence_enabled(self.cfg):
            pcfg = self.cfg.get("persistence", {})
            self.store = AtomicLedgerStore(
                node_config.get_data_dir(self.cfg),
                filename=str(pcfg.get("filename", "govchain_state.json")),
                keep_backups=int(pcfg.get("keep_backups", 2)),
            )

        loaded = self.store.load() if self.store is not None else None
        self.ledger: Dict[str, Any] = loaded if isinstance(loaded, dict) else {}
        fresh = not self.ledger

        self._lock = threading.RLock()
        self._migrate_ledger()

        vcfg = self.cfg.get("voting", {})
        ccfg = self.cfg.get("counter", {})
        bcfg = self.cfg.get("message_board", {})

        self.clock = BlockClock(self.ledger, node_config.get_genesis_height(self.cfg))
        self.access = AccessControlRuntime(self.ledger)
        self.access.initialize(self.deployer)
        self.voting = VotingRuntime(
            self.ledger,
            self.access,
            min_duration=int(vcfg.get("min_duration", 144)),
            max_duration=int(vcfg.get("max_duration", 4320)),
        )
        self.counter = CounterRuntime(
            self.ledger,
            self.access,
            increment_requires_permission=bool(ccfg.get("increment_requires_permission", True)),
            decrement_requires_permission=bool(ccfg.get("decrement_requires_permission", True)),
        )
        self.board = MessageBoardRuntime(
            self.ledger,
            self.access,
            moderation_enabled=bool(bcfg.get("moderation_enabled", True)),
            public_posting=bool(bcfg.get("public_posting", False)),
        )

        self._ops: Dict[str, Tuple[Callable[..., Any], bool]] = self._build_op_table()

        if fresh:
            log.info("Initialized new ledger; owner=%s height=%s", self.deployer, self.clock.height())
            self.save_state()
        else:
            log.info(
                "Loaded ledger; owner=%s proposals=%s height=%s",
                self.access.get_contract_owner(),
                self.voting.get_proposal_count(),
                self.clock.height(),
            )

    # ----------------------- ledger schema ------------------

    def _migrate_ledger(self) -> None:
        led = self.ledger
        v = int(led.get("schema_version", 0) or 0)
        if v < SCHEMA_VERSION:
            led.setdefault("access_control", {})
            led.setdefault("voting", {})
            led.setdefault("counter", {})
            led.setdefault("chain", {})
            led.setdefault("message_board", {})
            led["schema_version"] = SCHEMA_VERSION

    # ----------------------- operation table ------------------

    def _build_op_table(self) -> Dict[str, Tuple[Callable[..., Any], bool]]:
        """op name -> (runtime method, takes block height)"""
        ac, vs, ct, mb = self.access, self.voting, self.counter, self.board
        return {
            "access_control.add_admin": (ac.add_admin, False),
            "access_control.remove_admin": (ac.remove_admin, False),
            "access_control.grant_user_role": (ac.grant_user_role, False),
            "access_control.revoke_user_role": (ac.revoke_user_role, False),
            "access_control.renounce_role": (ac.renounce_role, False),
            "access_control.transfer_ownership": (ac.transfer_ownership, False),
            "voting.create_proposal": (vs.create_proposal, True),
            "voting.vote": (vs.vote, True),
            "voting.finalize_proposal": (vs.finalize_proposal, True),
            "voting.cancel_proposal": (vs.cancel_proposal, False),
            "voting.update_voting_duration": (vs.update_voting_duration, False),
            "counter.increment": (ct.increment, False),
            "counter.increment_by": (ct.increment_by, False),
            "counter.batch_increment": (ct.batch_increment, False),
            "counter.decrement": (ct.decrement, False),
            "counter.decrement_by": (ct.decrement_by, False),
            "counter.reset_counter": (ct.reset_counter, False),
            "counter.set_counter": (ct.set_counter, False),
            "counter.set_contract_paused": (ct.set_contract_paused, False),
            "counter.emergency_pause": (ct.emergency_pause, False),
            "counter.set_permission_requirements": (ct.set_permission_requirements, False),
            "message_board.post_message": (mb.post_message, True),
            "message_board.edit_message": (mb.edit_message, True),
            "message_board.delete_message": (mb.delete_message, False),
            "message_board.pin_message": (mb.pin_message, False),
            "message_board.unpin_message": (mb.unpin_message, False),
            "message_board.configure_board": (mb.configure_board, False),
            "message_board.emergency_pause": (mb.emergency_pause, False),
        }

    def operations(self) -> List[str]:
        return sorted(self._ops)

    # ----------------------- persistence ------------------

    def save_state(self) -> None:
        with self._lock:
            if self.store is not None:
                self.store.save(self.ledger)

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        # In place: runtimes hold a reference to this dict.
        self.ledger.clear()
        self.ledger.update(snapshot)

    # ----------------------- calls ------------------

    def submit(self, op: str, caller: str, **kwargs: Any) -> Receipt:
        """
        Apply one program call atomically and return a receipt:
            {"ok": True,  "op", "caller", "height", "result"}
            {"ok": False, "op", "caller", "height", "error", "reason"}
        """
        entry = self._ops.get(op)
        if entry is None:
            raise UnknownOperation(op)
        fn, takes_height = entry

        with self._lock:
            height = self.clock.height()
            receipt: Receipt = {"op": op, "caller": caller, "height": height}
            snapshot = copy.deepcopy(self.ledger)

            try:
                if takes_height:
                    result = fn(caller, height=height, **kwargs)
                else:
                    result = fn(caller, **kwargs)
            except ContractError as e:
                self._restore(snapshot)
                log.info("Rejected %s by %s at %s: %s", op, caller, height, e.reason)
                receipt["ok"] = False
                receipt.update(e.to_dict())
                return receipt
            except Exception:
                self._restore(snapshot)
                log.exception("Call %s by %s failed unexpectedly", op, caller)
                raise

            try:
                self.save_state()
            except OSError:
                self._restore(snapshot)
                log.error("Could not persist %s; call discarded", op, exc_info=True)
                raise

            log.info("Committed %s by %s at %s", op, caller, height)
            receipt.update({"ok": True, "result": result})
            return receipt

    # ----------------------- block clock ------------------

    def block_height(self) -> int:
        with self._lock:
            return self.clock.height()

    def mine_blocks(self, count: int = 1) -> int:
        with self._lock:
            before = self.clock.height()
            try:
                height = self.clock.advance(count)
                self.save_state()
            except OSError:
                self.ledger["chain"]["height"] = before
                raise
            return height

    # ----------------------- read-only queries ------------------

    def get_contract_owner(self) -> str:
        with self._lock:
            return self.access.get_contract_owner()

    def has_admin_role(self, principal: str) -> bool:
        with self._lock:
            return self.access.has_admin_role(principal)

    def has_role(self, principal: str) -> bool:
        with self._lock:
            return self.access.has_role(principal)

    def get_user_role(self, principal: str) -> Optional[int]:
        with self._lock:
            return self.access.get_user_role(principal)

    def is_authorized(self, principal: str) -> bool:
        with self._lock:
            return self.access.is_authorized(principal)

    def list_admins(self) -> List[str]:
        with self._lock:
            return self.access.list_admins()

    def list_roles(self) -> Dict[str, int]:
        with self._lock:
            return self.access.list_roles()

    def get_proposal(self, proposal_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self.voting.get_proposal(proposal_id)

    def list_proposals(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self.voting.list_proposals()

    def get_vote(self, proposal_id: int, voter: str) -> Optional[int]:
        with self._lock:
            return self.voting.get_vote(proposal_id, voter)

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        with self._lock:
            return self.voting.has_voted(proposal_id, voter)

    def get_proposal_count(self) -> int:
        with self._lock:
            return self.voting.get_proposal_count()

    def get_voting_config(self) -> Dict[str, int]:
        with self._lock:
            return self.voting.get_voting_config()

    def is_proposal_active(self, proposal_id: int) -> bool:
        with self._lock:
            return self.voting.is_proposal_active(proposal_id, self.clock.height())

    def get_proposal_results(self, proposal_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self.voting.get_proposal_results(proposal_id)

    def get_counter(self) -> int:
        with self._lock:
            return self.counter.get_counter()

    def get_counter_config(self) -> Dict[str, Any]:
        with self._lock:
            return self.counter.get_counter_config()

    def get_message(self, message_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self.board.get_message(message_id)

    def get_message_content(self, message_id: int) -> Optional[str]:
        with self._lock:
            return self.board.get_message_content(message_id)

    def list_messages(self, include_deleted: bool = False) -> List[Dict[str, Any]]:
        with self._lock:
            return self.board.list_messages(include_deleted)

    def get_pinned_messages(self) -> List[int]:
        with self._lock:
            return self.board.get_pinned_messages()

    def get_board_config(self) -> Dict[str, bool]:
        with self._lock:
            return self.board.get_board_config()

    def get_board_stats(self) -> Dict[str, Any]:
        with self._lock:
            return self.board.get_board_stats()


# ------------------------------------------------------------------------------
# Process-wide instance
# ------------------------------------------------------------------------------

_executor: Optional[GovChainExecutor] = None
_executor_lock = threading.Lock()


def get_executor() -> GovChainExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = GovChainExecutor()
        return _executor
