"""
Client state: auth, transient notifications and layout.

State is an immutable ClientState value; `reduce` is a pure function from
(state, action) to the next state. A Store holds the current value, applies
dispatched actions and tells subscribers. The Store is passed explicitly to
whatever needs it (see ClientContext) instead of living in a module global.
"""

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple, Union


@dataclass(frozen=True)
class AuthState:
    token: str
    subject: str
    role: Optional[str] = None


@dataclass(frozen=True)
class Notification:
    id: str
    message: str
    level: str
    expires_at: float


@dataclass(frozen=True)
class LayoutState:
    sidebar_open: bool = True


@dataclass(frozen=True)
class ClientState:
    auth: Optional[AuthState] = None
    notifications: Tuple[Notification, ...] = ()
    layout: LayoutState = field(default_factory=LayoutState)


# Actions

@dataclass(frozen=True)
class SignedIn:
    auth: AuthState


@dataclass(frozen=True)
class SignedOut:
    pass


@dataclass(frozen=True)
class Notify:
    notification: Notification


@dataclass(frozen=True)
class DismissNotification:
    id: str


@dataclass(frozen=True)
class PruneNotifications:
    now: float


@dataclass(frozen=True)
class ToggleSidebar:
    pass


Action = Union[SignedIn, SignedOut, Notify, DismissNotification, PruneNotifications, ToggleSidebar]


def reduce(state: ClientState, action: Action) -> ClientState:
    """Return the state after applying `action`; `state` is never mutated."""
    if isinstance(action, SignedIn):
        return replace(state, auth=action.auth)
    if isinstance(action, SignedOut):
        return replace(state, auth=None)
    if isinstance(action, Notify):
        return replace(state, notifications=state.notifications + (action.notification,))
    if isinstance(action, DismissNotification):
        return replace(
            state,
            notifications=tuple(n for n in state.notifications if n.id != action.id),
        )
    if isinstance(action, PruneNotifications):
        return replace(
            state,
            notifications=tuple(n for n in state.notifications if n.expires_at > action.now),
        )
    if isinstance(action, ToggleSidebar):
        return replace(state, layout=replace(state.layout, sidebar_open=not state.layout.sidebar_open))
    raise TypeError(f"Unknown action: {action!r}")


class Store:

    def __init__(
        self,
        state: Optional[ClientState] = None,
        notification_ttl: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.state = state or ClientState()
        self.notification_ttl = notification_ttl
        self._clock = clock
        self._listeners: List[Callable[[ClientState], None]] = []

    def dispatch(self, action: Action) -> ClientState:
        self.state = reduce(self.state, action)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def subscribe(self, listener: Callable[[ClientState], None]) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    @property
    def token(self) -> Optional[str]:
        return self.state.auth.token if self.state.auth else None

    def notify(self, message: str, level: str = "info") -> Notification:
        """Push a transient notification that expires after notification_ttl."""
        notification = Notification(
            id=uuid.uuid4().hex,
            message=message,
            level=level,
            expires_at=self._clock() + self.notification_ttl,
        )
        self.dispatch(Notify(notification))
        return notification

    def prune_expired(self, now: Optional[float] = None) -> None:
        """Drop notifications expired at `now` (default: the store's clock)."""
        self.dispatch(PruneNotifications(now=self._clock() if now is None else now))
