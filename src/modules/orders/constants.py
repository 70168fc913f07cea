"""Order domain constants.

Defines the per-request state machine of the order-creation
transaction and the failure message reported for each step.
"""

from django.db import models


class OrderTxState(models.TextChoices):
    BEGIN = "BEGIN", "Begin"
    LOCKING = "LOCKING", "Locking"
    VALIDATING = "VALIDATING", "Validating"
    HEADER_INSERTED = "HEADER_INSERTED", "Header inserted"
    ITEMS_INSERTED = "ITEMS_INSERTED", "Items inserted"
    STOCK_DECREMENTED = "STOCK_DECREMENTED", "Stock decremented"
    TOTAL_FINALIZED = "TOTAL_FINALIZED", "Total finalized"
    COMMITTED = "COMMITTED", "Committed"
    ABORTED = "ABORTED", "Aborted"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderTxState.BEGIN: {OrderTxState.LOCKING, OrderTxState.ABORTED},
    OrderTxState.LOCKING: {OrderTxState.VALIDATING, OrderTxState.ABORTED},
    OrderTxState.VALIDATING: {OrderTxState.HEADER_INSERTED, OrderTxState.ABORTED},
    OrderTxState.HEADER_INSERTED: {OrderTxState.ITEMS_INSERTED, OrderTxState.ABORTED},
    OrderTxState.ITEMS_INSERTED: {
        OrderTxState.STOCK_DECREMENTED,
        OrderTxState.ABORTED,
    },
    OrderTxState.STOCK_DECREMENTED: {
        OrderTxState.TOTAL_FINALIZED,
        OrderTxState.ABORTED,
    },
    OrderTxState.TOTAL_FINALIZED: {OrderTxState.COMMITTED, OrderTxState.ABORTED},
    OrderTxState.COMMITTED: set(),
    OrderTxState.ABORTED: set(),
}

TERMINAL_STATES: set[str] = {OrderTxState.COMMITTED, OrderTxState.ABORTED}

# Message reported when the step that leads *into* the state fails.
STEP_FAILURE_MESSAGES: dict[str, str] = {
    OrderTxState.LOCKING: "Failed to lock product rows.",
    OrderTxState.VALIDATING: "Failed to validate stock.",
    OrderTxState.HEADER_INSERTED: "Failed to create order.",
    OrderTxState.ITEMS_INSERTED: "Failed to add order items.",
    OrderTxState.STOCK_DECREMENTED: "Failed to update stock.",
    OrderTxState.TOTAL_FINALIZED: "Failed to update order total.",
    OrderTxState.COMMITTED: "Commit failed.",
}

BEGIN_FAILURE_MESSAGE = "Transaction error."
