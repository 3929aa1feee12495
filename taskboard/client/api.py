"""HTTP client for the Taskboard API.

``TaskboardClient`` is both the identity provider seen by the application
(sign up, sign in, refresh, sign out and a session-change stream) and its
data-access layer. Failed calls raise the same typed errors the server uses.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from taskboard.config import get_settings
from taskboard.enums import AuthEvent, TaskStatus
from taskboard.errors import (
    ERRORS_BY_CODE,
    AuthenticationError,
    AuthorizationError,
    FileTooLargeError,
    InvalidContentTypeError,
    NotFoundError,
    TaskboardError,
    TransientError,
    ValidationError,
)
from taskboard.schemas.auth import AuthResponse, UserResponse
from taskboard.schemas.profile import ProfileResponse
from taskboard.schemas.task import (
    TaskCountsResponse,
    TaskPage,
    TaskQuery,
    TaskResponse,
    TaskUpdate,
)
from taskboard.services.storage import validate_avatar

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

ERRORS_BY_STATUS: dict[int, type[TaskboardError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    413: FileTooLargeError,
    415: InvalidContentTypeError,
    422: ValidationError,
}


@dataclass(frozen=True)
class AuthSession:
    """An authenticated session: bearer token plus the identity it belongs to."""

    access_token: str
    user: UserResponse


AuthCallback = Callable[[AuthEvent, AuthSession | None], None]


def error_from_response(response: httpx.Response) -> TaskboardError:
    """Translate an error response into the matching typed error."""
    code = None
    message = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = body.get("code")
        if body.get("detail") is not None:
            message = str(body["detail"])

    error_cls = ERRORS_BY_CODE.get(code) if code else None
    if error_cls is None:
        if response.status_code >= 500:
            error_cls = TransientError
        else:
            error_cls = ERRORS_BY_STATUS.get(response.status_code, TaskboardError)
    return error_cls(message)


class TaskboardClient:
    """Client for the Taskboard API over an ``httpx.Client``."""

    def __init__(
        self,
        http: httpx.Client,
        session: AuthSession | None = None,
        max_avatar_bytes: int | None = None,
    ) -> None:
        self._http = http
        self._session = session
        self._listeners: list[AuthCallback] = []
        self.max_avatar_bytes = (
            max_avatar_bytes if max_avatar_bytes is not None else get_settings().avatar_max_bytes
        )

    # --- Identity provider ---

    @property
    def session(self) -> AuthSession | None:
        return self._session

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        """Subscribe to session changes. Returns a function that unsubscribes."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def sign_up(self, email: str, password: str) -> AuthSession:
        """Create an account and sign in to it."""
        data = self._request("POST", "/auth/register", json={"email": email, "password": password})
        return self._start_session(AuthResponse.model_validate(data), AuthEvent.SIGNED_IN)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._start_session(AuthResponse.model_validate(data), AuthEvent.SIGNED_IN)

    def refresh(self) -> AuthSession:
        """Exchange the current token for a fresh one."""
        data = self._request("POST", "/auth/refresh", authenticated=True)
        return self._start_session(AuthResponse.model_validate(data), AuthEvent.TOKEN_REFRESHED)

    def sign_out(self) -> None:
        """End the session. The token is dropped even if the server call fails."""
        if self._session is None:
            return
        try:
            self._request("POST", "/auth/logout", authenticated=True)
        finally:
            self._session = None
            self._emit(AuthEvent.SIGNED_OUT, None)

    def get_current_session(self) -> AuthSession | None:
        """Resolve the stored token against the server.

        An expired or revoked token yields ``None`` and is forgotten.
        """
        if self._session is None:
            return None
        try:
            data = self._request("GET", "/auth/me", authenticated=True)
        except AuthenticationError:
            self._session = None
            return None
        self._session = AuthSession(self._session.access_token, UserResponse.model_validate(data))
        return self._session

    # --- Tasks ---

    def list_tasks(self, query: TaskQuery | None = None) -> TaskPage:
        """Get one page of the caller's tasks."""
        query = query or TaskQuery()
        data = self._request("GET", "/tasks", params=query.to_params(), authenticated=True)
        return TaskPage(
            items=[TaskResponse.model_validate(item) for item in data["items"]],
            total=data["total"],
            page=data["page"],
            page_size=data["page_size"],
        )

    def get_task(self, task_id: uuid.UUID) -> TaskResponse:
        data = self._request("GET", f"/tasks/{task_id}", authenticated=True)
        return TaskResponse.model_validate(data)

    def create_task(
        self,
        title: str,
        description: str | None = None,
        status: TaskStatus = TaskStatus.PENDING,
    ) -> TaskResponse:
        """Create a task. Blank titles are rejected without a request."""
        if not title or not title.strip():
            raise ValidationError("Title is required")
        self._require_session()
        data = self._request(
            "POST",
            "/tasks",
            json={"title": title, "description": description, "status": TaskStatus(status).value},
            authenticated=True,
        )
        return TaskResponse.model_validate(data)

    def update_task(self, task_id: uuid.UUID, **fields: Any) -> TaskResponse:
        """Update only the given fields (title, description, status)."""
        body = TaskUpdate(**fields).model_dump(mode="json", exclude_unset=True)
        if "title" in body and (body["title"] is None or not body["title"].strip()):
            raise ValidationError("Title is required")
        data = self._request("PATCH", f"/tasks/{task_id}", json=body, authenticated=True)
        return TaskResponse.model_validate(data)

    def toggle_task(self, task_id: uuid.UUID) -> TaskResponse:
        data = self._request("POST", f"/tasks/{task_id}/toggle", authenticated=True)
        return TaskResponse.model_validate(data)

    def delete_task(self, task_id: uuid.UUID) -> None:
        self._request("DELETE", f"/tasks/{task_id}", authenticated=True)

    def task_counts(self) -> TaskCountsResponse:
        data = self._request("GET", "/tasks/stats", authenticated=True)
        return TaskCountsResponse.model_validate(data)

    def recent_tasks(self, limit: int = 5) -> list[TaskResponse]:
        data = self._request("GET", "/tasks/recent", params={"limit": limit}, authenticated=True)
        return [TaskResponse.model_validate(item) for item in data]

    # --- Profile ---

    def get_profile(self) -> ProfileResponse | None:
        data = self._request("GET", "/profile", authenticated=True)
        if data is None:
            return None
        return ProfileResponse.model_validate(data)

    def upsert_profile(
        self, name: str | None = None, avatar_url: str | None = None
    ) -> ProfileResponse:
        """Create or replace the caller's profile."""
        data = self._request(
            "PUT",
            "/profile",
            json={"name": name, "avatar_url": avatar_url},
            authenticated=True,
        )
        return ProfileResponse.model_validate(data)

    def upload_avatar(self, content: bytes, content_type: str, filename: str = "avatar") -> str:
        """Upload an avatar image and return its public URL.

        Type and size are checked locally, so invalid files never leave the
        process. The profile is not updated; pass the URL to ``upsert_profile``.
        """
        validate_avatar(content, content_type, self.max_avatar_bytes)
        self._require_session()
        data = self._request(
            "POST",
            "/profile/avatar",
            files={"file": (filename, content, content_type)},
            authenticated=True,
        )
        return data["avatar_url"]

    # --- Internals ---

    def _start_session(self, auth: AuthResponse, event: AuthEvent) -> AuthSession:
        self._session = AuthSession(access_token=auth.access_token, user=auth.user)
        self._emit(event, self._session)
        return self._session

    def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        for callback in list(self._listeners):
            callback(event, session)

    def _require_session(self) -> AuthSession:
        if self._session is None:
            raise AuthenticationError()
        return self._session

    def _request(
        self, method: str, path: str, authenticated: bool = False, **kwargs: Any
    ) -> Any:
        headers = kwargs.pop("headers", {})
        if authenticated:
            headers["Authorization"] = f"Bearer {self._require_session().access_token}"

        try:
            response = self._http.request(method, f"{API_PREFIX}{path}", headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransientError(str(e)) from e

        if response.is_error:
            raise error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()
