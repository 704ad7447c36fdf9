"""
Order repository: create, list, fetch, status changes, deletion and stats.

Each call re-reads the orders collection from the record store and, for
writes, saves the whole collection back. Two writers racing on the same
collection can lose an update (last save wins).
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from catalog import Catalog
from database import Record, RecordStore, find_index, next_id
from errors import ForbiddenError, InvalidStatusError, NotFoundError
from guard import Caller, require_admin
from logger import get_logger
from pricing import price_order
from query import contains_text, equals, newest_first, run_query
from schemas import OrderCreate

log = get_logger("orders")

COLLECTION = "orders"
STATUSES = ["pending", "processing", "completed", "cancelled", "refunded"]
SEARCH_FIELDS = (
    "orderNumber",
    "customerInfo.email",
    "customerInfo.firstName",
    "customerInfo.lastName",
)
DEFAULT_PAGE_SIZE = 10


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_owner(order: Record, caller: Caller) -> bool:
    # guest orders (userId null) belong to nobody
    return caller.user_id is not None and order.get("userId") == caller.user_id


class OrderRepository:
    def __init__(self, store: RecordStore, catalog: Optional[Catalog] = None):
        self.store = store
        self.catalog = catalog or Catalog(store)

    def create(self, data: OrderCreate) -> Record:
        priced = price_order(data, self.catalog.by_id())

        orders = self.store.load(COLLECTION, strict=True)
        order_id = next_id(orders)
        now = _now()
        order = {
            "id": order_id,
            "orderNumber": f"ORD-{order_id}",
            "userId": data.userId,
            "customerInfo": priced.customer_info,
            "items": priced.items,
            "total": priced.total,
            "paymentMethod": priced.payment_method,
            # no payment gateway: every order is treated as paid on creation
            "status": "completed",
            "paymentStatus": "paid",
            "createdAt": now,
            "updatedAt": now,
        }
        orders.append(order)
        self.store.save_or_raise(COLLECTION, orders)
        log.info(f"Created order {order['orderNumber']} total={order['total']:.2f} items={len(order['items'])}")
        return order

    def list(self, caller: Caller, status: Optional[str] = None, search: Optional[str] = None,
             page: int = 1, limit: Optional[int] = DEFAULT_PAGE_SIZE, own_only: bool = False) -> Dict[str, Any]:
        """Newest first. Non-admin callers only ever see their own orders."""
        predicates = []
        if own_only or not caller.is_admin:
            predicates.append(lambda o: _is_owner(o, caller))
        if status:
            predicates.append(equals("status", status))
        if search:
            predicates.append(contains_text(search, SEARCH_FIELDS))
        return run_query(self.store.load(COLLECTION), predicates, sort=newest_first,
                         page=page, limit=DEFAULT_PAGE_SIZE if limit is None else limit)

    def get_by_id(self, order_id: Any, caller: Caller) -> Record:
        for order in self.store.load(COLLECTION):
            if order.get("id") == order_id:
                if not caller.is_admin and not _is_owner(order, caller):
                    raise ForbiddenError()
                return order
        raise NotFoundError("Order", order_id)

    def update_status(self, order_id: Any, status: Optional[str], caller: Caller) -> Record:
        require_admin(caller)
        if status not in STATUSES:
            raise InvalidStatusError(status, STATUSES)

        orders = self.store.load(COLLECTION, strict=True)
        index = find_index(orders, order_id)
        if index == -1:
            raise NotFoundError("Order", order_id)

        order = orders[index]
        previous = order.get("status")
        order["status"] = status
        order["updatedAt"] = _now()
        self.store.save_or_raise(COLLECTION, orders)
        log.info(f"Order {order_id} status {previous} -> {status}")
        return order

    def delete(self, order_id: Any, caller: Caller) -> Record:
        require_admin(caller)
        orders = self.store.load(COLLECTION, strict=True)
        index = find_index(orders, order_id)
        if index == -1:
            raise NotFoundError("Order", order_id)
        removed = orders.pop(index)
        self.store.save_or_raise(COLLECTION, orders)
        log.info(f"Deleted order {order_id}")
        return removed

    def stats_summary(self, caller: Caller) -> Dict[str, Any]:
        require_admin(caller)
        orders = self.store.load(COLLECTION)
        total_orders = len(orders)
        total_revenue = sum(o.get("total", 0) for o in orders)

        def count(status):
            return sum(1 for o in orders if o.get("status") == status)

        return {
            "totalOrders": total_orders,
            "totalRevenue": total_revenue,
            "completedOrders": count("completed"),
            "pendingOrders": count("pending"),
            "cancelledOrders": count("cancelled"),
            "averageOrderValue": total_revenue / total_orders if total_orders else 0,
        }
