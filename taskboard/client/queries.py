"""Discarding results of superseded task listings."""

import logging
import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

from taskboard.schemas.task import TaskQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryTicket:
    """Handle for one issued request."""

    query: TaskQuery
    sequence: int


class LatestQueryGate(Generic[T]):
    """Only the newest issued query may publish its result.

    Call ``begin`` when a request is sent and ``resolve`` when its result
    arrives. A result whose ticket has been superseded by a later ``begin``
    is dropped, so a slow, stale listing can never overwrite a newer one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sequence = 0
        self._latest: QueryTicket | None = None
        self._result: T | None = None
        self._result_query: TaskQuery | None = None

    def begin(self, query: TaskQuery) -> QueryTicket:
        with self._lock:
            self._sequence += 1
            self._latest = QueryTicket(query=query, sequence=self._sequence)
            return self._latest

    def is_current(self, ticket: QueryTicket) -> bool:
        with self._lock:
            return self._latest == ticket

    def resolve(self, ticket: QueryTicket, result: T) -> bool:
        """Publish ``result`` if ``ticket`` is still the newest request."""
        with self._lock:
            if self._latest != ticket:
                logger.debug(f"Discarding stale result for {ticket.query}")
                return False
            self._result = result
            self._result_query = ticket.query
            return True

    @property
    def result(self) -> T | None:
        """Last published result."""
        return self._result

    @property
    def result_query(self) -> TaskQuery | None:
        """Query that produced the last published result."""
        return self._result_query
