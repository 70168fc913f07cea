"""Order service layer (Use Cases).

Hosts the order-creation transaction engine plus the read-side
order queries.  The service holds no state between calls; the store
handle is whatever repositories it was constructed with.

Business rules enforced:
- An empty basket is rejected before any transaction opens.
- Every product in the basket is locked (SELECT FOR UPDATE, id order)
  before its stock is checked, so competing orders on a shared
  product serialise and stock never goes negative.
- Inactive and unknown products are reported as ``ProductNotFound``.
- Items carry the price read under the lock; the order total is the
  sum of ``quantity * price`` and is fixed at commit.
- Any failure after the transaction opens rolls back every write.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Sequence

import structlog

from django.db import DatabaseError, connection

from modules.orders.constants import (
    BEGIN_FAILURE_MESSAGE,
    STEP_FAILURE_MESSAGES,
    OrderTxState,
)
from modules.orders.dtos import OrderReceipt, OrderRowDTO
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidRequest,
    OrderError,
    ProductNotFound,
    TransactionFailure,
)
from modules.orders.transaction import OrderTransaction, bounded_transaction

if TYPE_CHECKING:
    from modules.core.pagination import PageRequest
    from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> OrderReceipt:
        """Place an order: lock, validate, insert, decrement, commit.

        Steps (one atomic transaction):
        1. Bound lock/statement waits for the backend.
        2. Lock every referenced product row in a single query.
        3. Validate existence, activity and stock, first failure wins.
        4. Insert the header with a provisional total.
        5. Insert the items with the locked snapshot prices.
        6. Decrement stock per product, then check every write landed.
        7. Write the final total.
        8. Commit.

        Raises:
            InvalidRequest: the basket is empty (no transaction opened).
            ProductNotFound: a product is unknown or inactive.
            InsufficientStock: a product lacks the requested stock.
            TransactionFailure: the store failed; everything rolled back.
        """
        items = list(dto.items) if dto is not None else []
        if not items:
            raise InvalidRequest("Products are required to create an order.")

        tx = OrderTransaction()
        log = logger.bind(item_count=len(items))
        log.info("order.creation_started")

        try:
            with bounded_transaction(connection):
                order, total = self._run_protocol(tx, items)
        except OrderError as exc:
            tx.abort(str(exc))
            raise
        except DatabaseError as exc:
            # Escaped every step: either opening the transaction or the commit.
            if tx.state == OrderTxState.TOTAL_FINALIZED:
                message = STEP_FAILURE_MESSAGES[OrderTxState.COMMITTED]
            else:
                message = BEGIN_FAILURE_MESSAGE
            log.error("order.transaction_failed", state=tx.state, error=str(exc))
            tx.abort(message)
            raise TransactionFailure(message) from exc

        tx.advance(OrderTxState.COMMITTED)
        log.info("order.committed", order_id=order.id, total=str(total))
        return OrderReceipt(order_id=order.id, total_price=total)

    def _run_protocol(
        self, tx: OrderTransaction, items: Sequence[CreateOrderItemDTO]
    ) -> tuple[Order, Decimal]:
        with tx.step(OrderTxState.LOCKING, enter=True):
            locked = self._product_repo.lock_many(item.product_id for item in items)
            logger.info("order.stock_locked", product_ids=sorted(locked))

        with tx.step(OrderTxState.VALIDATING, enter=True):
            requested = self._validate(items, locked)

        with tx.step(OrderTxState.HEADER_INSERTED):
            order = self._order_repo.create_header()

        with tx.step(OrderTxState.ITEMS_INSERTED):
            lines = [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": locked[item.product_id].price,
                }
                for item in items
            ]
            self._order_repo.add_items(order, lines)
            total = sum(
                (line["price"] * line["quantity"] for line in lines), Decimal("0.00")
            )

        with tx.step(OrderTxState.STOCK_DECREMENTED):
            self._decrement_stock(requested)

        with tx.step(OrderTxState.TOTAL_FINALIZED):
            self._order_repo.finalize_total(order, total)

        return order, total

    def _validate(
        self, items: Sequence[CreateOrderItemDTO], locked: Dict[int, Product]
    ) -> Dict[int, int]:
        """Check each entry in basket order against the locked rows.

        Repeated products are checked against their running total, so
        ``[{P, 3}, {P, 3}]`` cannot pass against a stock of 5.  Returns
        the quantity to take from each product.
        """
        requested: Dict[int, int] = {}
        for item in items:
            product = locked.get(item.product_id)
            if product is None or not product.is_active:
                raise ProductNotFound(item.product_id)

            needed = requested.get(item.product_id, 0) + item.quantity
            if product.quantity < needed:
                logger.info(
                    "order.insufficient_stock",
                    product_id=item.product_id,
                    requested=needed,
                    available=product.quantity,
                )
                raise InsufficientStock(item.product_id)
            requested[item.product_id] = needed
        return requested

    def _decrement_stock(self, requested: Dict[int, int]) -> None:
        """Issue one guarded decrement per product, then join the results.

        All writes share the one transaction, so they run back to back;
        the step only succeeds once every write has reported its row.
        """
        results = {
            product_id: self._product_repo.decrement_stock(product_id, quantity)
            for product_id, quantity in requested.items()
        }
        failed = [product_id for product_id, ok in results.items() if not ok]
        if failed:
            logger.error("order.stock_update_missed", product_ids=failed)
            raise TransactionFailure(
                STEP_FAILURE_MESSAGES[OrderTxState.STOCK_DECREMENTED]
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> List[OrderRowDTO]:
        """Order header joined with each of its items.

        Returns an empty list when nothing matches; the caller decides
        whether that means "not found".
        """
        rows = self._order_repo.list_items_with_order(order_id)
        return [OrderRowDTO.from_entity(item) for item in rows]

    def list_orders(self, page: PageRequest) -> List[Order]:
        """One page of orders, oldest first."""
        return page.slice(self._order_repo.list())
