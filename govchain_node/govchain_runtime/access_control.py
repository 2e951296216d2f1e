# govchain_node/govchain_runtime/access_control.py
from __future__ import annotations

"""
Access Control runtime: the authorization root every other program consults.

State (ledger["access_control"]):
    owner       -> principal
    admins      -> {principal: True}
    user_roles  -> {principal: role tag}   (admins carry ROLE_ADMIN here too)

Known weakness, kept on purpose:
    "cannot remove the last admin" is only enforced as "an admin cannot
    remove or renounce itself". A co-admin can still strip any other
    admin, the owner included.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from .errors import AccessControlCode, AccessControlError
from .state import dict_ns, ns

# Network burn address; never a valid target.
NULL_PRINCIPAL = "SP000000000000000000002Q6VF78"


class Role(int, Enum):
    ADMIN = 1
    USER = 2


class AuthorizationProvider(Protocol):
    """Read-only view of the authorization root used by consumer programs."""

    def is_authorized(self, principal: str) -> bool: ...

    def has_admin_role(self, principal: str) -> bool: ...


def _require(cond: bool, code: AccessControlCode, detail: str = "") -> None:
    if not cond:
        raise AccessControlError(code, detail)


class AccessControlRuntime:
    NAMESPACE = "access_control"

    def __init__(self, ledger: Dict[str, Any]) -> None:
        self.ledger = ledger

    # ------------------------
    # State access
    # ------------------------
    @property
    def _root(self) -> Dict[str, Any]:
        return ns(self.ledger, self.NAMESPACE)

    @property
    def _admins(self) -> Dict[str, Any]:
        return dict_ns(self._root, "admins")

    @property
    def _roles(self) -> Dict[str, Any]:
        return dict_ns(self._root, "user_roles")

    def is_initialized(self) -> bool:
        return bool(self._root.get("owner"))

    def initialize(self, deployer: str) -> None:
        """Genesis: the deploying principal is owner and sole admin."""
        if self.is_initialized():
            return
        root = self._root
        root["owner"] = str(deployer)
        root["admins"] = {str(deployer): True}
        root["user_roles"] = {str(deployer): int(Role.ADMIN)}

    # ------------------------
    # Queries
    # ------------------------
    def get_contract_owner(self) -> str:
        return str(self._root.get("owner", ""))

    def has_admin_role(self, principal: str) -> bool:
        return bool(self._admins.get(principal, False))

    def has_role(self, principal: str) -> bool:
        return principal in self._roles

    def get_user_role(self, principal: str) -> Optional[int]:
        tag = self._roles.get(principal)
        return int(tag) if tag is not None else None

    def is_authorized(self, principal: str) -> bool:
        return self.has_admin_role(principal) or self.has_role(principal)

    def list_admins(self) -> List[str]:
        return sorted(p for p, flag in self._admins.items() if flag)

    def list_roles(self) -> Dict[str, int]:
        return {p: int(tag) for p, tag in self._roles.items()}

    # ------------------------
    # Admin management
    # ------------------------
    def add_admin(self, caller: str, target: str) -> bool:
        _require(self.has_admin_role(caller), AccessControlCode.UNAUTHORIZED)
        _require(target != NULL_PRINCIPAL, AccessControlCode.INVALID_PRINCIPAL)
        _require(not self.has_admin_role(target), AccessControlCode.ALREADY_ADMIN, target)

        self._admins[target] = True
        self._roles[target] = int(Role.ADMIN)
        return True

    def remove_admin(self, caller: str, target: str) -> bool:
        _require(self.has_admin_role(caller), AccessControlCode.UNAUTHORIZED)
        _require(self.has_admin_role(target), AccessControlCode.NOT_ADMIN, target)
        # Self-removal only; a co-admin may still remove any other admin.
        _require(caller != target, AccessControlCode.CANNOT_REMOVE_LAST_ADMIN)

        self._admins.pop(target, None)
        self._roles.pop(target, None)
        return True

    # ------------------------
    # User roles
    # ------------------------
    def grant_user_role(self, caller: str, target: str) -> bool:
        _require(self.has_admin_role(caller), AccessControlCode.UNAUTHORIZED)
        _require(target != NULL_PRINCIPAL, AccessControlCode.INVALID_PRINCIPAL)
        # Demoting an admin goes through remove_admin, never through a grant.
        _require(not self.has_admin_role(target), AccessControlCode.UNAUTHORIZED, "target is admin")

        self._roles[target] = int(Role.USER)
        return True

    def revoke_user_role(self, caller: str, target: str) -> bool:
        _require(self.has_admin_role(caller), AccessControlCode.UNAUTHORIZED)
        _require(not self.has_admin_role(target), AccessControlCode.UNAUTHORIZED, "target is admin")

        self._roles.pop(target, None)
        return True

    def renounce_role(self, caller: str) -> bool:
        _require(self.has_role(caller), AccessControlCode.UNAUTHORIZED, "caller holds no role")
        _require(not self.has_admin_role(caller), AccessControlCode.CANNOT_REMOVE_LAST_ADMIN)

        self._roles.pop(caller, None)
        return True

    # ------------------------
    # Ownership
    # ------------------------
    def transfer_ownership(self, caller: str, new_owner: str) -> bool:
        _require(caller == self.get_contract_owner(), AccessControlCode.UNAUTHORIZED)
        _require(new_owner != NULL_PRINCIPAL, AccessControlCode.INVALID_PRINCIPAL)

        if not self.has_admin_role(new_owner):
            self._admins[new_owner] = True
            self._roles[new_owner] = int(Role.ADMIN)
        self._root["owner"] = new_owner
        return True
