"""Shared authentication state for one application session.

``AuthStateContext`` holds the only subscription to the identity provider's
session-change stream. Create one per application, ``start()`` it once at
startup, hand it to the components that need it, and ``close()`` it on
shutdown.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from taskboard.client.api import AuthCallback, AuthSession
from taskboard.enums import AuthEvent
from taskboard.errors import TaskboardError
from taskboard.schemas.auth import UserResponse

logger = logging.getLogger(__name__)


class AuthStatus(StrEnum):
    LOADING = "loading"
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


@dataclass(frozen=True)
class AuthState:
    """Snapshot of the authentication state."""

    status: AuthStatus
    user: UserResponse | None = None
    access_token: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.status == AuthStatus.LOADING

    @property
    def is_signed_in(self) -> bool:
        return self.status == AuthStatus.SIGNED_IN

    @property
    def is_signed_out(self) -> bool:
        return self.status == AuthStatus.SIGNED_OUT


class AuthProvider(Protocol):
    """What the context needs from the identity provider."""

    def get_current_session(self) -> AuthSession | None: ...

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]: ...


StateListener = Callable[[AuthState], None]


class AuthStateContext:
    """Observable auth state driven by the provider's session events."""

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        self._state = AuthState(AuthStatus.LOADING)
        self._listeners: list[StateListener] = []
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` on every state change. Returns a remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def start(self) -> AuthState:
        """Subscribe to the provider and resolve the current session.

        Calling ``start`` again while started does nothing. If the lookup
        fails the state still leaves loading (as signed out) before the error
        propagates.
        """
        if self._unsubscribe is not None:
            return self._state

        self._unsubscribe = self._provider.on_auth_change(self.dispatch)
        self._set(AuthState(AuthStatus.LOADING))

        try:
            session = self._provider.get_current_session()
        except TaskboardError as e:
            logger.warning(f"Session lookup failed ({e.code}); treating as signed out")
            self._set(AuthState(AuthStatus.SIGNED_OUT))
            raise

        self._set(_state_for(session))
        return self._state

    def close(self) -> None:
        """Drop the provider subscription and all listeners."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def dispatch(self, event: AuthEvent, session: AuthSession | None) -> None:
        """Apply a session-change event from the provider."""
        if event in (AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED):
            self._set(_state_for(session))
        elif event == AuthEvent.SIGNED_OUT:
            self._set(AuthState(AuthStatus.SIGNED_OUT))

    def __enter__(self) -> "AuthStateContext":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _set(self, state: AuthState) -> None:
        if state == self._state:
            return
        logger.debug(f"Auth state {self._state.status} -> {state.status}")
        self._state = state
        for listener in list(self._listeners):
            listener(state)


def _state_for(session: AuthSession | None) -> AuthState:
    if session is None:
        return AuthState(AuthStatus.SIGNED_OUT)
    return AuthState(AuthStatus.SIGNED_IN, user=session.user, access_token=session.access_token)
