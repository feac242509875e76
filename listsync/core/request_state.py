"""Request State — explicit state machine for the single-flight fetch lifecycle.

Invariants:
    - Transitions: IDLE→LOADING, LOADING→LOADED, LOADING→ERROR,
      LOADED→LOADING, ERROR→LOADING — anything else raises
    - LOADING→LOADING is the single-flight violation and raises BusyError
    - error is set only in ERROR, cleared when a new request begins
    - pending_mode / pending_order remember the last begun request so retry()
      can re-issue it verbatim

Design Decisions:
    - Guarded transition table over ad hoc boolean flags: two concurrent fetches
      are unrepresentable, not merely unchecked
    - Illegal non-busy transitions raise RuntimeError: they are programming
      errors in the shell, not user-facing conditions
"""

from dataclasses import dataclass

from listsync.core.domain_types import FetchMode, RequestStatus
from listsync.core.errors import BusyError, ErrorInfo
from listsync.core.order_spec import OrderSpec


_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.IDLE: frozenset({RequestStatus.LOADING}),
    RequestStatus.LOADING: frozenset({RequestStatus.LOADED, RequestStatus.ERROR}),
    RequestStatus.LOADED: frozenset({RequestStatus.LOADING}),
    RequestStatus.ERROR: frozenset({RequestStatus.LOADING}),
}


@dataclass
class RequestState:
    """Per-coordinator request lifecycle — pure dataclass, no IO."""

    status: RequestStatus = RequestStatus.IDLE
    error: ErrorInfo | None = None

    # Last request that entered LOADING (for retry)
    pending_mode: FetchMode | None = None
    pending_order: OrderSpec | None = None

    @property
    def in_flight(self) -> bool:
        return self.status is RequestStatus.LOADING

    @property
    def can_retry(self) -> bool:
        return self.status is RequestStatus.ERROR and self.pending_mode is not None

    def begin(self, mode: FetchMode, order: OrderSpec) -> None:
        """Enter LOADING. Raises BusyError while another request is in flight."""
        if self.in_flight:
            raise BusyError()
        self._transition(RequestStatus.LOADING)
        self.error = None
        self.pending_mode = mode
        self.pending_order = order

    def succeed(self) -> None:
        self._transition(RequestStatus.LOADED)

    def fail(self, error: ErrorInfo) -> None:
        self._transition(RequestStatus.ERROR)
        self.error = error

    def _transition(self, target: RequestStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise RuntimeError(
                f"Illegal request transition {self.status.value} → {target.value}",
            )
        self.status = target
