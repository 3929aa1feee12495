"""Row-level owner scoping for every SQLAlchemy session.

Two session events enforce that an identity only ever sees and writes its own
rows of owned models (``OwnedMixin``):

- ``do_orm_execute`` adds ``user_id == <identity>`` to every ORM SELECT and
  DELETE, so rows of other owners are silently filtered out. ORM INSERT and
  UPDATE statements on owned models are refused outright.
- ``before_flush`` rejects inserts, updates and deletes of rows whose owner is
  not the identity, and refreshes ``updated_at`` on every updated row.

The identity is bound per session with ``bind_identity``. A session without an
identity sees no owned rows at all; only sessions explicitly marked trusted
with ``system_session`` bypass the scoping.
"""

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import event, inspect
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from taskboard.errors import AuthenticationError, AuthorizationError
from taskboard.models.mixins import OwnedMixin, TimestampMixin

logger = logging.getLogger(__name__)

IDENTITY_KEY = "identity"
TRUSTED_KEY = "trusted"


def bind_identity(session: Session, user_id: uuid.UUID) -> None:
    """Scope all owned-row access through this session to ``user_id``."""
    session.info[IDENTITY_KEY] = user_id


def unbind_identity(session: Session) -> None:
    """Remove the identity; the session falls back to seeing no owned rows."""
    session.info.pop(IDENTITY_KEY, None)


def current_identity(session: Session) -> uuid.UUID | None:
    """Identity bound to the session, if any."""
    return session.info.get(IDENTITY_KEY)


def require_identity(session: Session) -> uuid.UUID:
    """Identity bound to the session; raises if there is none."""
    identity = current_identity(session)
    if identity is None:
        raise AuthenticationError()
    return identity


@contextmanager
def system_session(session: Session) -> Iterator[Session]:
    """Temporarily lift owner scoping, for maintenance code only."""
    previous = session.info.get(TRUSTED_KEY, False)
    session.info[TRUSTED_KEY] = True
    try:
        yield session
    finally:
        session.info[TRUSTED_KEY] = previous


@event.listens_for(Session, "do_orm_execute")
def _scope_owned_rows(execute_state: ORMExecuteState) -> None:
    session = execute_state.session
    if session.info.get(TRUSTED_KEY):
        return

    if execute_state.is_insert or execute_state.is_update:
        # Statement-level writes skip the flush checks below, so owned rows
        # may only be written through the unit of work.
        mapper = execute_state.bind_mapper
        if mapper is not None and issubclass(mapper.class_, OwnedMixin):
            logger.warning(
                f"Rejected bulk write on {mapper.class_.__name__} for {current_identity(session)}"
            )
            raise AuthorizationError("Owned rows cannot be written with bulk statements")
        return

    if not (execute_state.is_select or execute_state.is_delete):
        return
    if execute_state.is_column_load or execute_state.is_relationship_load:
        return

    identity = current_identity(session)
    if identity is None:
        criteria = with_loader_criteria(
            OwnedMixin, lambda cls: cls.user_id.is_(None), include_aliases=True
        )
    else:
        criteria = with_loader_criteria(
            OwnedMixin, lambda cls: cls.user_id == identity, include_aliases=True
        )
    execute_state.statement = execute_state.statement.options(criteria)


@event.listens_for(Session, "before_flush")
def _guard_owned_writes(session: Session, flush_context, instances) -> None:
    trusted = session.info.get(TRUSTED_KEY, False)
    identity = current_identity(session)

    for obj in session.new:
        if isinstance(obj, OwnedMixin) and not trusted:
            _check_owner(obj, identity, "insert")

    for obj in session.dirty:
        if isinstance(obj, OwnedMixin) and not trusted:
            _check_owner(obj, identity, "update")
            if inspect(obj).attrs.user_id.history.has_changes():
                logger.warning(f"Rejected owner change on {type(obj).__name__} {obj.id}")
                raise AuthorizationError("Row owner cannot be changed")
        if isinstance(obj, TimestampMixin):
            obj.touch()

    for obj in session.deleted:
        if isinstance(obj, OwnedMixin) and not trusted:
            _check_owner(obj, identity, "delete")


def _check_owner(obj: OwnedMixin, identity: uuid.UUID | None, operation: str) -> None:
    if identity is None:
        raise AuthenticationError()
    owner = _original_owner(obj) if operation != "insert" else obj.user_id
    if owner != identity:
        logger.warning(
            f"Rejected {operation} on {type(obj).__name__} owned by {owner} for {identity}"
        )
        raise AuthorizationError()


def _original_owner(obj: OwnedMixin) -> uuid.UUID | None:
    """Owner as loaded from the database, ignoring pending changes."""
    history = inspect(obj).attrs.user_id.history
    if history.deleted:
        return history.deleted[0]
    return obj.user_id
