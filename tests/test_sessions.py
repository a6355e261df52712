import threading

import pytest

from wayfinder.actions import NearestTarget
from wayfinder.graph import Node, NodeType
from wayfinder.sessions import NavigationSession, SessionStore

A = Node("A", "Main Entrance", NodeType.ENTRANCE, 0, 0, 1)
B = Node("B", "Gate A5", NodeType.GATE, 10, 0, 1)


def test_transitions_return_new_values():
    s = NavigationSession()
    s2 = s.with_location("A")
    assert s.current_node_id is None
    assert s2.current_node_id == "A"


def test_route_lifecycle():
    s = NavigationSession(current_node_id="A").with_pending(NearestTarget.NEAREST_EXIT)
    s = s.with_route([A, B], B)
    assert s.has_active_path and s.active_path[0].id == "A"
    assert s.destination_node_id == "B" and s.destination_name == "Gate A5"
    assert s.pending_target is None

    moved = s.with_location("B")
    assert moved.active_path == s.active_path

    cleared = moved.cleared_route()
    assert not cleared.has_active_path
    assert cleared.destination_node_id is None
    assert cleared.current_node_id == "B"


def test_store_create_get_update():
    store = SessionStore()
    sid = store.create_session()
    assert sid in store
    assert store.get(sid) == NavigationSession()
    store.update(sid, store.get(sid).with_location("A"))
    assert store.get(sid).current_node_id == "A"
    # unknown ids are created on demand
    assert store.get("robot_session_xyz") == NavigationSession()


def test_reset_keeps_gate():
    store = SessionStore()
    sid = store.create_session()
    store.update(sid, NavigationSession(current_node_id="A", user_gate="Gate B12"))
    assert store.reset(sid)
    assert store.get(sid) == NavigationSession(user_gate="Gate B12")
    assert not store.reset("missing")


def test_cleanup_expires_idle_sessions():
    store = SessionStore(ttl_seconds=5)
    old = store.create_session()
    fresh = store.create_session()
    store._meta[old] -= 10
    assert store.cleanup() == 1
    assert old not in store
    assert fresh in store


def test_transaction_commits_and_rolls_back():
    store = SessionStore()
    sid = store.create_session()
    with store.transaction(sid) as tx:
        tx.session = tx.session.with_location("A")
    assert store.get(sid).current_node_id == "A"

    with pytest.raises(RuntimeError):
        with store.transaction(sid) as tx:
            tx.session = tx.session.with_location("B")
            raise RuntimeError("planning failed")
    assert store.get(sid).current_node_id == "A"


def test_transactions_are_serialized():
    store = SessionStore()
    sid = store.create_session()

    def writer():
        for _ in range(50):
            with store.transaction(sid) as tx:
                tx.session = tx.session.with_gate((tx.session.user_gate or "") + "x")

    threads = [threading.Thread(target=writer) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store.get(sid).user_gate) == 400


def test_reset_waits_for_running_transaction():
    store = SessionStore()
    sid = store.create_session()
    entered = threading.Event()
    release = threading.Event()

    def planner():
        with store.transaction(sid) as tx:
            tx.session = tx.session.with_location("A").with_gate("Gate A5")
            entered.set()
            release.wait(5)

    worker = threading.Thread(target=planner)
    worker.start()
    assert entered.wait(5)
    resetter = threading.Thread(target=store.reset, args=(sid,))
    resetter.start()
    resetter.join(0.2)
    # still blocked behind the open transaction
    assert resetter.is_alive()
    release.set()
    worker.join()
    resetter.join()
    assert store.get(sid) == NavigationSession(user_gate="Gate A5")


def test_update_waits_for_running_transaction():
    store = SessionStore()
    sid = store.create_session()
    entered = threading.Event()
    release = threading.Event()

    def planner():
        with store.transaction(sid) as tx:
            tx.session = tx.session.with_location("A")
            entered.set()
            release.wait(5)

    worker = threading.Thread(target=planner)
    worker.start()
    assert entered.wait(5)
    writer = threading.Thread(target=store.update, args=(sid, NavigationSession(current_node_id="B")))
    writer.start()
    release.set()
    worker.join()
    writer.join()
    assert store.get(sid).current_node_id == "B"
