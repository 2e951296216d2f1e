from __future__ import annotations

"""
Block-height clock.

Height is a monotonically increasing counter persisted in ledger["chain"].
It is read once per call by the executor and handed to runtimes as an
explicit argument; nothing else reads it.
"""

from typing import Any, Dict

from .state import int_field, ns


class BlockClock:
    NAMESPACE = "chain"

    def __init__(self, ledger: Dict[str, Any], genesis_height: int = 0) -> None:
        self.ledger = ledger
        ns(self.ledger, self.NAMESPACE).setdefault("height", int(genesis_height))

    def height(self) -> int:
        return int_field(ns(self.ledger, self.NAMESPACE), "height")

    def advance(self, blocks: int = 1) -> int:
        blocks = int(blocks)
        if blocks < 0:
            raise ValueError("block height cannot move backwards")
        chain = ns(self.ledger, self.NAMESPACE)
        chain["height"] = self.height() + blocks
        return chain["height"]
