import pathlib
import sys

import pytest

# Ensure repo root (containing the govchain_node package) is on sys.path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from govchain_node.config import default_config
from govchain_node.govchain_executor import GovChainExecutor

DEPLOYER = "ST1DEPLOYER"
ALICE = "ST2ALICE"
BOB = "ST3BOB"
CAROL = "ST4CAROL"
MALLORY = "ST9MALLORY"


@pytest.fixture(scope="function")
def node_cfg(tmp_path):
    """Config for a fresh node with its ledger under tmp_path"""
    cfg = default_config()
    cfg["node"]["deployer"] = DEPLOYER
    cfg["persistence"]["data_dir"] = str(tmp_path / "data")
    return cfg


@pytest.fixture(scope="function")
def executor(node_cfg):
    """Fresh executor per test, isolated data dir"""
    return GovChainExecutor(node_cfg)


def ok(receipt):
    assert receipt["ok"] is True, receipt
    return receipt["result"]


def err(receipt):
    assert receipt["ok"] is False, receipt
    return receipt["error"]
