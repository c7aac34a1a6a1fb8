from __future__ import annotations
from typing import Any, Dict, List, Optional

from app.core.errors import ConflictError, InvalidState
from app.utils.timestamps import utc_now_iso


class InvalidTransition(InvalidState):
    pass


class OptimisticLockError(ConflictError):
    pass


HistoryEntry = Dict[str, Any]


class StateMachine:
    """
    Small, generic state machine with:
      - allowed transitions map
      - history recording (with actor / metadata)
      - optimistic versioning (caller may supply expected_version)

    Usage:
      sm = StateMachine(state="pending", allowed_transitions=ALLOWED_TRANSITIONS)
      result = sm.apply("confirmed", actor=email, expected_version=doc["version"])
      doc["status"] = result["state"]
      doc["status_history"] = result["history"]
      doc["version"] = result["version"]
    """

    def __init__(self, state: str, allowed_transitions: Dict[str, List[str]], version: int = 0,
                 history: Optional[List[HistoryEntry]] = None):
        self.state = state or ""
        self.allowed_transitions = allowed_transitions or {}
        self.version = int(version or 0)
        self.history: List[HistoryEntry] = list(history or [])

    def can_transition(self, to_state: str) -> bool:
        allowed = self.allowed_transitions.get(self.state, [])
        return to_state in allowed

    def apply(self, to_state: str, actor: Optional[str] = None, meta: Optional[Dict[str, Any]] = None,
              expected_version: Optional[int] = None) -> Dict[str, Any]:
        """
        Attempt to transition to `to_state`. Raises InvalidTransition or OptimisticLockError.
        Returns dict with keys: state, history (full list), version (new).
        """
        to_state = (to_state or "").strip()
        if not to_state:
            raise InvalidTransition("Empty target state")

        if expected_version is not None and int(expected_version) != int(self.version):
            raise OptimisticLockError(f"Version mismatch (expected {expected_version}, got {self.version})")

        # idempotent: already in the desired state
        if to_state == self.state:
            return {"state": self.state, "history": list(self.history), "version": self.version}

        if not self.can_transition(to_state):
            raise InvalidTransition(f"Invalid transition: {self.state} -> {to_state}",
                                    allowed=list(self.allowed_transitions.get(self.state, [])))

        entry: HistoryEntry = {
            "from": self.state,
            "to": to_state,
            "at": utc_now_iso(),
            "actor": actor,
            "meta": dict(meta or {}),
        }
        self.state = to_state
        self.history.append(entry)
        self.version = int(self.version) + 1

        return {"state": self.state, "history": list(self.history), "version": self.version}
