"""Client-side data access for the Taskboard API."""

from taskboard.client.api import AuthSession, TaskboardClient, error_from_response
from taskboard.client.queries import LatestQueryGate, QueryTicket
from taskboard.client.session import AuthState, AuthStateContext, AuthStatus

__all__ = [
    "AuthSession",
    "TaskboardClient",
    "error_from_response",
    "LatestQueryGate",
    "QueryTicket",
    "AuthState",
    "AuthStateContext",
    "AuthStatus",
]
