# tests/test_message_board.py
from __future__ import annotations

import pytest

from conftest import ALICE, BOB, DEPLOYER, MALLORY, err, ok
from govchain_node.govchain_executor import GovChainExecutor
from govchain_node.govchain_runtime.message_board import MAX_MESSAGE_LENGTH, MAX_PINNED_MESSAGES


def _post(executor, caller, content="Hello, this is my first message!", reply_to=None):
    return executor.submit("message_board.post_message", caller, content=content, reply_to=reply_to)


def _configure(executor, paused=False, moderation=True, public=False):
    return executor.submit(
        "message_board.configure_board",
        DEPLOYER,
        paused=paused,
        moderation_enabled=moderation,
        public_posting=public,
    )


# ============================================================
# Posting
# ============================================================

def test_admin_can_post(executor):
    executor.mine_blocks(4)
    assert ok(_post(executor, DEPLOYER)) == 1
    m = executor.get_message(1)
    assert m["author"] == DEPLOYER
    assert m["content"] == "Hello, this is my first message!"
    assert m["reply_to"] is None
    assert m["created_at"] == 4
    assert m["deleted"] is False
    assert m["pinned"] is False


def test_authorized_user_can_post(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    assert ok(_post(executor, ALICE, "Hello from user!")) == 1


def test_unknown_principal_cannot_post_by_default(executor):
    assert err(_post(executor, MALLORY)) == 400
    assert executor.get_board_stats()["total_messages"] == 0


def test_public_posting_opens_the_board(executor):
    assert ok(_configure(executor, public=True)) is True
    assert ok(_post(executor, MALLORY, "Hello from public user!")) == 1


@pytest.mark.parametrize("content", ["", "x" * (MAX_MESSAGE_LENGTH + 1)])
def test_content_length_bounds(executor, content):
    assert err(_post(executor, DEPLOYER, content)) == 402


def test_content_at_max_length_accepted(executor):
    assert ok(_post(executor, DEPLOYER, "x" * MAX_MESSAGE_LENGTH)) == 1


def test_paused_board_rejects_posts_first(executor):
    ok(_configure(executor, paused=True))
    assert err(_post(executor, DEPLOYER)) == 406
    # pause is checked before authorization and content
    assert err(_post(executor, MALLORY, "")) == 406


def test_reply_to_message(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    ok(_post(executor, DEPLOYER, "Original message"))
    assert ok(_post(executor, ALICE, "This is a reply", reply_to=1)) == 2
    assert executor.get_message(2)["reply_to"] == 1


def test_reply_to_missing_message(executor):
    assert err(_post(executor, DEPLOYER, "Reply to nowhere", reply_to=999)) == 401
    assert executor.get_board_stats()["total_messages"] == 0


def test_reply_to_deleted_message(executor):
    ok(_post(executor, DEPLOYER))
    ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1))
    assert err(_post(executor, DEPLOYER, "late reply", reply_to=1)) == 405


def test_ids_are_sequential_across_failures(executor):
    assert ok(_post(executor, DEPLOYER)) == 1
    err(_post(executor, DEPLOYER, ""))
    err(_post(executor, MALLORY))
    assert ok(_post(executor, DEPLOYER)) == 2


# ============================================================
# Edit / delete
# ============================================================

def test_author_can_edit(executor):
    ok(_post(executor, DEPLOYER, "Original content"))
    executor.mine_blocks(2)
    assert ok(executor.submit("message_board.edit_message", DEPLOYER, message_id=1, content="Edited content")) is True
    assert executor.get_message_content(1) == "Edited content"
    assert executor.get_message(1)["edited_at"] == 2


def test_non_author_cannot_edit(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    ok(_post(executor, DEPLOYER, "Original content"))
    assert err(executor.submit("message_board.edit_message", ALICE, message_id=1, content="Hacked content")) == 400
    assert executor.get_message_content(1) == "Original content"


def test_edit_checks(executor):
    assert err(executor.submit("message_board.edit_message", DEPLOYER, message_id=1, content="x")) == 401
    ok(_post(executor, DEPLOYER))
    assert err(executor.submit("message_board.edit_message", DEPLOYER, message_id=1, content="")) == 402
    ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1))
    assert err(executor.submit("message_board.edit_message", DEPLOYER, message_id=1, content="x")) == 405


def test_author_can_delete(executor):
    ok(_post(executor, DEPLOYER, "Message to be deleted"))
    assert ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1)) is True
    assert executor.get_message_content(1) is None
    m = executor.get_message(1)
    assert m["deleted"] is True
    assert m["content"] == ""


def test_cannot_delete_twice(executor):
    ok(_post(executor, DEPLOYER))
    ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1))
    assert err(executor.submit("message_board.delete_message", DEPLOYER, message_id=1)) == 405


def test_delete_missing_message(executor):
    assert err(executor.submit("message_board.delete_message", DEPLOYER, message_id=3)) == 401


def test_admin_moderation(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=BOB))
    ok(_post(executor, ALICE, "first"))
    ok(_post(executor, ALICE, "second"))

    assert err(executor.submit("message_board.delete_message", BOB, message_id=1)) == 400
    assert ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1)) is True

    ok(_configure(executor, moderation=False))
    assert err(executor.submit("message_board.delete_message", DEPLOYER, message_id=2)) == 400
    assert ok(executor.submit("message_board.delete_message", ALICE, message_id=2)) is True


# ============================================================
# Pins
# ============================================================

def test_admin_can_pin_and_unpin(executor):
    ok(_post(executor, DEPLOYER, "Important message"))
    assert ok(executor.submit("message_board.pin_message", DEPLOYER, message_id=1)) is True
    assert executor.get_pinned_messages() == [1]
    assert executor.get_message(1)["pinned"] is True

    # pinning twice is a no-op
    assert ok(executor.submit("message_board.pin_message", DEPLOYER, message_id=1)) is True
    assert executor.get_pinned_messages() == [1]

    assert ok(executor.submit("message_board.unpin_message", DEPLOYER, message_id=1)) is True
    assert executor.get_pinned_messages() == []
    assert err(executor.submit("message_board.unpin_message", DEPLOYER, message_id=1)) == 404


def test_pins_are_admin_only(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    ok(_post(executor, ALICE))
    assert err(executor.submit("message_board.pin_message", ALICE, message_id=1)) == 400
    ok(executor.submit("message_board.pin_message", DEPLOYER, message_id=1))
    assert err(executor.submit("message_board.unpin_message", ALICE, message_id=1)) == 400


def test_pin_checks(executor):
    assert err(executor.submit("message_board.pin_message", DEPLOYER, message_id=1)) == 401
    for _ in range(MAX_PINNED_MESSAGES + 1):
        ok(_post(executor, DEPLOYER))
    for mid in range(1, MAX_PINNED_MESSAGES + 1):
        ok(executor.submit("message_board.pin_message", DEPLOYER, message_id=mid))
    assert err(executor.submit("message_board.pin_message", DEPLOYER, message_id=MAX_PINNED_MESSAGES + 1)) == 403


def test_deleting_unpins(executor):
    ok(_post(executor, DEPLOYER))
    ok(executor.submit("message_board.pin_message", DEPLOYER, message_id=1))
    ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1))
    assert executor.get_pinned_messages() == []
    assert err(executor.submit("message_board.pin_message", DEPLOYER, message_id=1)) == 405


# ============================================================
# Board administration
# ============================================================

def test_configure_and_pause_are_admin_only(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    r = executor.submit(
        "message_board.configure_board", ALICE, paused=True, moderation_enabled=True, public_posting=True
    )
    assert err(r) == 400
    assert err(executor.submit("message_board.emergency_pause", ALICE)) == 400
    assert executor.get_board_config() == {"paused": False, "moderation_enabled": True, "public_posting": False}


def test_emergency_pause(executor):
    assert ok(executor.submit("message_board.emergency_pause", DEPLOYER)) is True
    assert err(_post(executor, DEPLOYER, "Should not work")) == 406
    assert executor.get_board_stats()["is_paused"] is True


def test_pause_blocks_edit_and_delete(executor):
    ok(_post(executor, DEPLOYER))
    ok(executor.submit("message_board.emergency_pause", DEPLOYER))
    assert err(executor.submit("message_board.edit_message", DEPLOYER, message_id=1, content="x")) == 406
    assert err(executor.submit("message_board.delete_message", DEPLOYER, message_id=1)) == 406


def test_board_stats(executor):
    assert executor.get_board_stats() == {
        "total_messages": 0,
        "active_messages": 0,
        "pinned_messages": 0,
        "is_paused": False,
    }
    ok(_post(executor, DEPLOYER))
    ok(_post(executor, DEPLOYER))
    ok(executor.submit("message_board.pin_message", DEPLOYER, message_id=2))
    ok(executor.submit("message_board.delete_message", DEPLOYER, message_id=1))

    stats = executor.get_board_stats()
    assert stats["total_messages"] == 2
    assert stats["active_messages"] == 1
    assert stats["pinned_messages"] == 1
    assert [m["id"] for m in executor.list_messages()] == [2]
    assert [m["id"] for m in executor.list_messages(include_deleted=True)] == [1, 2]


def test_board_defaults_from_config(node_cfg):
    node_cfg["message_board"] = {"moderation_enabled": False, "public_posting": True}
    ex = GovChainExecutor(node_cfg)
    assert ex.get_board_config() == {"paused": False, "moderation_enabled": False, "public_posting": True}
    assert ok(_post(ex, MALLORY)) == 1


# ============================================================
# Cross-program
# ============================================================

def test_revocation_blocks_counter_and_board(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    assert ok(_post(executor, ALICE, "I can post messages!")) == 1

    ok(executor.submit("access_control.revoke_user_role", DEPLOYER, target=ALICE))
    assert err(executor.submit("counter.increment", ALICE)) == 300
    assert err(_post(executor, ALICE, "This should fail")) == 400


def test_emergency_pause_on_counter_and_board(executor):
    ok(executor.submit("access_control.grant_user_role", DEPLOYER, target=ALICE))
    assert ok(executor.submit("counter.increment", ALICE)) == 1
    assert ok(_post(executor, ALICE, "Normal operation")) == 1

    ok(executor.submit("counter.emergency_pause", DEPLOYER))
    ok(executor.submit("message_board.emergency_pause", DEPLOYER))

    assert err(executor.submit("counter.increment", ALICE)) == 304
    assert err(_post(executor, ALICE, "This should fail")) == 406


def test_board_survives_restart(node_cfg):
    ex = GovChainExecutor(node_cfg)
    ok(_post(ex, DEPLOYER, "persisted"))
    ok(_post(ex, DEPLOYER, "reply", reply_to=1))
    ok(ex.submit("message_board.pin_message", DEPLOYER, message_id=1))

    again = GovChainExecutor(node_cfg)
    assert again.get_message_content(1) == "persisted"
    assert again.get_message(2)["reply_to"] == 1
    assert again.get_pinned_messages() == [1]
    assert ok(_post(again, DEPLOYER)) == 3
