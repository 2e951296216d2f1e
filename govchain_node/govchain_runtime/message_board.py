# govchain_node/govchain_runtime/message_board.py
from __future__ import annotations

"""
MessageBoardRuntime: threaded posts gated by the authorization root.

State (ledger["message_board"]):
    config         -> {paused, moderation_enabled, public_posting}
    message_count  -> last allocated id (ids start at 1, never reused)
    messages       -> {str(id): message}
    pinned         -> [id, ...] in pin order

Posting requires is_authorized() unless public posting is on. Authors edit
and delete their own messages; admins may delete any message while
moderation is enabled. Deleted messages keep their record (tombstone) but
lose their content. Board configuration and pins are admin-only.
"""

import copy
from typing import Any, Dict, List, Optional

from .access_control import AuthorizationProvider
from .errors import MessageBoardCode, MessageBoardError
from .state import dict_ns, int_field, ns

MAX_MESSAGE_LENGTH = 500
MAX_PINNED_MESSAGES = 10


def _require(cond: bool, code: MessageBoardCode, detail: str = "") -> None:
    if not cond:
        raise MessageBoardError(code, detail)


class MessageBoardRuntime:
    NAMESPACE = "message_board"

    def __init__(
        self,
        ledger: Dict[str, Any],
        auth: AuthorizationProvider,
        *,
        moderation_enabled: bool = True,
        public_posting: bool = False,
    ) -> None:
        self.ledger = ledger
        self.auth = auth
        root = self._root
        config = dict_ns(root, "config")
        config.setdefault("paused", False)
        config.setdefault("moderation_enabled", bool(moderation_enabled))
        config.setdefault("public_posting", bool(public_posting))
        root.setdefault("message_count", 0)
        dict_ns(root, "messages")
        if not isinstance(root.get("pinned"), list):
            root["pinned"] = []

    @property
    def _root(self) -> Dict[str, Any]:
        return ns(self.ledger, self.NAMESPACE)

    @property
    def _config(self) -> Dict[str, Any]:
        return dict_ns(self._root, "config")

    @property
    def _messages(self) -> Dict[str, Any]:
        return dict_ns(self._root, "messages")

    @property
    def _pinned(self) -> List[int]:
        return self._root["pinned"]

    def _message(self, message_id: int) -> Optional[Dict[str, Any]]:
        m = self._messages.get(str(int(message_id)))
        return m if isinstance(m, dict) else None

    def _live_message(self, message_id: int) -> Dict[str, Any]:
        m = self._message(message_id)
        _require(m is not None, MessageBoardCode.MESSAGE_NOT_FOUND, str(message_id))
        _require(not m.get("deleted", False), MessageBoardCode.MESSAGE_ALREADY_DELETED, str(message_id))
        return m

    @staticmethod
    def _check_content(content: str) -> str:
        content = str(content)
        _require(
            0 < len(content) <= MAX_MESSAGE_LENGTH,
            MessageBoardCode.MESSAGE_TOO_LONG,
            f"content must be 1..{MAX_MESSAGE_LENGTH} characters",
        )
        return content

    def _check_not_paused(self) -> None:
        _require(not self._config.get("paused", False), MessageBoardCode.BOARD_PAUSED)

    def _check_admin(self, caller: str) -> None:
        _require(self.auth.has_admin_role(caller), MessageBoardCode.UNAUTHORIZED)

    # ------------------------
    # Queries
    # ------------------------
    def get_message(self, message_id: int) -> Optional[Dict[str, Any]]:
        m = self._message(message_id)
        if m is None:
            return None
        out = copy.deepcopy(m)
        out["pinned"] = int(m["id"]) in self._pinned
        return out

    def get_message_content(self, message_id: int) -> Optional[str]:
        m = self._message(message_id)
        if m is None or m.get("deleted", False):
            return None
        return str(m.get("content", ""))

    def list_messages(self, include_deleted: bool = False) -> List[Dict[str, Any]]:
        out = []
        for _, m in sorted(self._messages.items(), key=lambda kv: int(kv[0])):
            if include_deleted or not m.get("deleted", False):
                out.append(self.get_message(m["id"]))
        return out

    def get_pinned_messages(self) -> List[int]:
        return list(self._pinned)

    def get_board_config(self) -> Dict[str, bool]:
        config = self._config
        return {
            "paused": bool(config.get("paused", False)),
            "moderation_enabled": bool(config.get("moderation_enabled", True)),
            "public_posting": bool(config.get("public_posting", False)),
        }

    def get_board_stats(self) -> Dict[str, Any]:
        active = sum(1 for m in self._messages.values() if not m.get("deleted", False))
        return {
            "total_messages": int_field(self._root, "message_count"),
            "active_messages": active,
            "pinned_messages": len(self._pinned),
            "is_paused": bool(self._config.get("paused", False)),
        }

    # ------------------------
    # Posting
    # ------------------------
    def post_message(
        self, caller: str, content: str, height: int, reply_to: Optional[int] = None
    ) -> int:
        self._check_not_paused()
        if not self._config.get("public_posting", False):
            _require(self.auth.is_authorized(caller), MessageBoardCode.UNAUTHORIZED)
        content = self._check_content(content)
        if reply_to is not None:
            reply_to = int(self._live_message(reply_to)["id"])

        mid = int_field(self._root, "message_count") + 1
        self._messages[str(mid)] = {
            "id": mid,
            "author": caller,
            "content": content,
            "reply_to": reply_to,
            "created_at": int(height),
            "edited_at": None,
            "deleted": False,
        }
        self._root["message_count"] = mid
        return mid

    def edit_message(self, caller: str, message_id: int, content: str, height: int) -> bool:
        self._check_not_paused()
        m = self._live_message(message_id)
        _require(m.get("author") == caller, MessageBoardCode.UNAUTHORIZED, "only the author may edit")
        content = self._check_content(content)

        m["content"] = content
        m["edited_at"] = int(height)
        return True

    def delete_message(self, caller: str, message_id: int) -> bool:
        self._check_not_paused()
        m = self._live_message(message_id)
        moderator = self._config.get("moderation_enabled", True) and self.auth.has_admin_role(caller)
        _require(m.get("author") == caller or moderator, MessageBoardCode.UNAUTHORIZED)

        m["content"] = ""
        m["deleted"] = True
        if int(m["id"]) in self._pinned:
            self._pinned.remove(int(m["id"]))
        return True

    # ------------------------
    # Admin
    # ------------------------
    def pin_message(self, caller: str, message_id: int) -> bool:
        self._check_admin(caller)
        mid = int(self._live_message(message_id)["id"])
        if mid in self._pinned:
            return True
        _require(len(self._pinned) < MAX_PINNED_MESSAGES, MessageBoardCode.PIN_LIMIT_REACHED)

        self._pinned.append(mid)
        return True

    def unpin_message(self, caller: str, message_id: int) -> bool:
        self._check_admin(caller)
        m = self._message(message_id)
        _require(m is not None, MessageBoardCode.MESSAGE_NOT_FOUND, str(message_id))
        _require(int(m["id"]) in self._pinned, MessageBoardCode.NOT_PINNED)

        self._pinned.remove(int(m["id"]))
        return True

    def configure_board(
        self, caller: str, paused: bool, moderation_enabled: bool, public_posting: bool
    ) -> bool:
        self._check_admin(caller)
        self._root["config"] = {
            "paused": bool(paused),
            "moderation_enabled": bool(moderation_enabled),
            "public_posting": bool(public_posting),
        }
        return True

    def emergency_pause(self, caller: str) -> bool:
        self._check_admin(caller)
        self._config["paused"] = True
        return True
