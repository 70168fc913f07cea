"""State tracking and store bounds for one order-creation transaction.

``OrderTransaction`` walks the state machine defined in
``modules.orders.constants``.  Each protocol step runs inside
``step(target)``: a store error raised by the step becomes a
``TransactionFailure`` carrying that step's message.  Steps run inside
``bounded_transaction()``, so any exception leaving a step also leaves
the atomic block and rolls every write back.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction

from modules.orders.constants import (
    STEP_FAILURE_MESSAGES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderTxState,
)
from modules.orders.exceptions import InvalidTransition, TransactionFailure

logger = structlog.get_logger(__name__)


class OrderTransaction:
    """Per-invocation state machine for ``OrderService.create_order``.

    Holds no shared state; a new instance is created for every call.
    """

    def __init__(self) -> None:
        self.state: str = OrderTxState.BEGIN
        self.history: List[str] = [OrderTxState.BEGIN]
        self.abort_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def can_transition_to(self, new_state: str) -> bool:
        return new_state in VALID_TRANSITIONS.get(self.state, set())

    def advance(self, new_state: str) -> None:
        """Move to ``new_state``.

        Raises:
            InvalidTransition: ``new_state`` is not reachable from the
                current state.
        """
        if not self.can_transition_to(new_state):
            raise InvalidTransition(f"Cannot move from {self.state} to {new_state}.")
        self.state = new_state
        self.history.append(new_state)
        logger.debug("order.tx_state", state=new_state)

    def abort(self, reason: str) -> None:
        """Record the failure. Idempotent once aborted."""
        if self.state == OrderTxState.ABORTED:
            return
        failed_in = self.state
        self.advance(OrderTxState.ABORTED)
        self.abort_reason = reason
        logger.warning("order.aborted", failed_in=failed_in, reason=reason)

    @contextmanager
    def step(self, target: str, *, enter: bool = False) -> Iterator[None]:
        """Run one protocol step tied to ``target``.

        By default ``target`` is the state reached once the step body
        has finished (``HEADER_INSERTED`` after the insert).  With
        ``enter=True`` the state is entered before the body runs, for
        the phases that are states in their own right (``LOCKING``,
        ``VALIDATING``), so a failure aborts from inside that phase.
        """
        if not self.can_transition_to(target):
            raise InvalidTransition(f"Cannot move from {self.state} to {target}.")
        if enter:
            self.advance(target)
        try:
            yield
        except DatabaseError as exc:
            message = STEP_FAILURE_MESSAGES[target]
            logger.error("order.step_failed", step=target, error=str(exc))
            raise TransactionFailure(message) from exc
        if not enter:
            self.advance(target)


@contextmanager
def bounded_transaction(connection) -> Iterator[None]:
    """Open the order transaction with bounded lock waits and statement time.

    PostgreSQL scopes both bounds to the transaction (``SET LOCAL``).
    MySQL only has a session-wide lock wait; it is set before ``BEGIN``
    and put back after the commit or rollback, so pooled connections
    (``CONN_MAX_AGE``) do not inherit it.  SQLite takes its write lock at
    ``BEGIN IMMEDIATE`` and has nothing to configure.
    """
    with _session_lock_wait(connection, int(settings.ORDER_LOCK_TIMEOUT)):
        with transaction.atomic(using=connection.alias):
            if connection.vendor == "postgresql":
                lock_timeout = int(settings.ORDER_LOCK_TIMEOUT)
                statement_timeout = int(settings.ORDER_STATEMENT_TIMEOUT)
                with connection.cursor() as cursor:
                    cursor.execute(f"SET LOCAL lock_timeout = '{lock_timeout}s'")
                    cursor.execute(
                        f"SET LOCAL statement_timeout = '{statement_timeout}s'"
                    )
            yield


@contextmanager
def _session_lock_wait(connection, seconds: int) -> Iterator[None]:
    if connection.vendor != "mysql":
        yield
        return

    with connection.cursor() as cursor:
        cursor.execute("SELECT @@SESSION.innodb_lock_wait_timeout")
        (previous,) = cursor.fetchone()
        cursor.execute("SET SESSION innodb_lock_wait_timeout = %s", [seconds])
    try:
        yield
    finally:
        with connection.cursor() as cursor:
            cursor.execute("SET SESSION innodb_lock_wait_timeout = %s", [previous])
