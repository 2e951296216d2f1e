# govchain_node/govchain_runtime/counter.py
from __future__ import annotations

"""
CounterRuntime: a bounded shared counter gated by the authorization root.

Increment/decrement require is_authorized() while the matching permission
flag is set; every configuration change is admin-only.
"""

from typing import Any, Dict

from .access_control import AuthorizationProvider
from .errors import CounterCode, CounterError
from .state import ns

MAX_COUNTER_VALUE = 1_000_000_000
MAX_BATCH_SIZE = 100


def _require(cond: bool, code: CounterCode, detail: str = "") -> None:
    if not cond:
        raise CounterError(code, detail)


class CounterRuntime:
    NAMESPACE = "counter"

    def __init__(
        self,
        ledger: Dict[str, Any],
        auth: AuthorizationProvider,
        *,
        increment_requires_permission: bool = True,
        decrement_requires_permission: bool = True,
    ) -> None:
        self.ledger = ledger
        self.auth = auth
        root = self._root
        root.setdefault("value", 0)
        root.setdefault("paused", False)
        root.setdefault("increment_requires_permission", bool(increment_requires_permission))
        root.setdefault("decrement_requires_permission", bool(decrement_requires_permission))

    @property
    def _root(self) -> Dict[str, Any]:
        return ns(self.ledger, self.NAMESPACE)

    # ------------------------
    # Queries
    # ------------------------
    def get_counter(self) -> int:
        return int(self._root.get("value", 0))

    def get_counter_config(self) -> Dict[str, Any]:
        root = self._root
        return {
            "current_value": self.get_counter(),
            "paused": bool(root.get("paused", False)),
            "increment_requires_permission": bool(root.get("increment_requires_permission", True)),
            "decrement_requires_permission": bool(root.get("decrement_requires_permission", True)),
            "max_value": MAX_COUNTER_VALUE,
        }

    # ------------------------
    # Gates
    # ------------------------
    def _check_can_increment(self, caller: str) -> None:
        root = self._root
        _require(not root.get("paused", False), CounterCode.COUNTER_PAUSED)
        if root.get("increment_requires_permission", True):
            _require(self.auth.is_authorized(caller), CounterCode.UNAUTHORIZED)

    def _check_can_decrement(self, caller: str) -> None:
        root = self._root
        _require(not root.get("paused", False), CounterCode.COUNTER_PAUSED)
        if root.get("decrement_requires_permission", True):
            _require(self.auth.is_authorized(caller), CounterCode.UNAUTHORIZED)

    def _check_admin(self, caller: str) -> None:
        _require(self.auth.has_admin_role(caller), CounterCode.UNAUTHORIZED)

    # ------------------------
    # Mutations
    # ------------------------
    def increment(self, caller: str) -> int:
        return self.increment_by(caller, 1)

    def increment_by(self, caller: str, amount: int) -> int:
        self._check_can_increment(caller)
        amount = int(amount)
        _require(amount > 0, CounterCode.INVALID_AMOUNT)
        new_value = self.get_counter() + amount
        _require(new_value <= MAX_COUNTER_VALUE, CounterCode.COUNTER_OVERFLOW)

        self._root["value"] = new_value
        return new_value

    def batch_increment(self, caller: str, count: int) -> int:
        self._check_can_increment(caller)
        _require(int(count) <= MAX_BATCH_SIZE, CounterCode.INVALID_AMOUNT, f"batch limit is {MAX_BATCH_SIZE}")
        return self.increment_by(caller, count)

    def decrement(self, caller: str) -> int:
        return self.decrement_by(caller, 1)

    def decrement_by(self, caller: str, amount: int) -> int:
        self._check_can_decrement(caller)
        amount = int(amount)
        _require(amount > 0, CounterCode.INVALID_AMOUNT)
        _require(self.get_counter() >= amount, CounterCode.COUNTER_UNDERFLOW)

        new_value = self.get_counter() - amount
        self._root["value"] = new_value
        return new_value

    # ------------------------
    # Admin
    # ------------------------
    def reset_counter(self, caller: str) -> int:
        self._check_admin(caller)
        self._root["value"] = 0
        return 0

    def set_counter(self, caller: str, value: int) -> int:
        self._check_admin(caller)
        value = int(value)
        _require(0 <= value <= MAX_COUNTER_VALUE, CounterCode.COUNTER_OVERFLOW)
        self._root["value"] = value
        return value

    def set_contract_paused(self, caller: str, paused: bool) -> bool:
        self._check_admin(caller)
        self._root["paused"] = bool(paused)
        return True

    def emergency_pause(self, caller: str) -> bool:
        return self.set_contract_paused(caller, True)

    def set_permission_requirements(self, caller: str, increment: bool, decrement: bool) -> bool:
        self._check_admin(caller)
        self._root["increment_requires_permission"] = bool(increment)
        self._root["decrement_requires_permission"] = bool(decrement)
        return True
