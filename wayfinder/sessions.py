import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Iterator, Optional, Tuple, Union

from wayfinder.actions import NearestTarget
from wayfinder.graph import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationSession:
    """
    Per-user navigation context. Values are immutable: every transition
    returns a new session, and only the store's writer swaps it in.

    `active_path` is only authoritative while its first node is the current
    location; once the location moves off it the caller must replan.
    """
    current_node_id: Optional[str] = None
    destination_node_id: Optional[str] = None
    destination_name: Optional[str] = None
    active_path: Tuple[Node, ...] = ()
    user_gate: Optional[str] = None
    # Target asked for before the location was known; planned on the next fix.
    pending_target: Optional[Union[str, NearestTarget]] = None
    # Last raw (x, y, floor) reported by the positioning stream.
    last_position: Optional[Tuple[float, float, int]] = None

    @property
    def has_active_path(self) -> bool:
        return len(self.active_path) > 0

    def with_location(self, node_id: str) -> "NavigationSession":
        return replace(self, current_node_id=node_id)

    def with_route(self, path, destination: Node) -> "NavigationSession":
        return replace(
            self,
            active_path=tuple(path),
            destination_node_id=destination.id,
            destination_name=destination.name,
            pending_target=None,
        )

    def cleared_route(self) -> "NavigationSession":
        return replace(self, active_path=(), destination_node_id=None, destination_name=None)

    def with_pending(self, target) -> "NavigationSession":
        return replace(self, pending_target=target)

    def with_gate(self, gate: Optional[str]) -> "NavigationSession":
        return replace(self, user_gate=gate)

    def with_position(self, x: float, y: float, floor: int) -> "NavigationSession":
        return replace(self, last_position=(x, y, floor))


# Simple in-memory session store with TTL. One writer per session at a time.
class SessionStore:
    def __init__(self, ttl_seconds: int = 3600):
        self.ttl = ttl_seconds
        self._store: Dict[str, NavigationSession] = {}
        self._meta: Dict[str, float] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def create_session(self) -> str:
        sid = str(uuid.uuid4())
        with self._guard:
            self._store[sid] = NavigationSession()
            self._meta[sid] = time.time()
            self._locks[sid] = threading.RLock()
        logger.debug("created session %s", sid)
        return sid

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._store

    def get(self, session_id: str) -> NavigationSession:
        with self._guard:
            if session_id not in self._store:
                # create one to be permissive
                self._store[session_id] = NavigationSession()
                self._locks.setdefault(session_id, threading.RLock())
            self._meta[session_id] = time.time()
            return self._store[session_id]

    def update(self, session_id: str, session: NavigationSession) -> None:
        with self._writer(session_id):
            with self._guard:
                self._store[session_id] = session
                self._meta[session_id] = time.time()

    def reset(self, session_id: str) -> bool:
        if session_id not in self:
            return False
        with self.transaction(session_id) as tx:
            # The user's gate comes from their ticket, not from the conversation.
            tx.session = NavigationSession(user_gate=tx.session.user_gate)
        return True

    def _writer(self, session_id: str) -> threading.RLock:
        with self._guard:
            return self._locks.setdefault(session_id, threading.RLock())

    @contextmanager
    def transaction(self, session_id: str) -> Iterator["_Transaction"]:
        """
        Hold the session's writer lock while reading and replacing its state.
        Utterances, position updates and resets for the same session are
        serialized, so at most one plan is in flight and the last request wins.
        """
        with self._writer(session_id):
            tx = _Transaction(self.get(session_id))
            yield tx
            self.update(session_id, tx.session)

    def cleanup(self) -> int:
        now = time.time()
        removed = 0
        with self._guard:
            for sid, touched in list(self._meta.items()):
                if now - touched > self.ttl:
                    del self._meta[sid]
                    del self._store[sid]
                    self._locks.pop(sid, None)
                    removed += 1
        if removed:
            logger.info("expired %d idle sessions", removed)
        return removed


class _Transaction:
    def __init__(self, session: NavigationSession):
        self.session = session
