"""Order repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from orderpricing.models.order import Order, OrderLineItem


class OrderRepository:
    """Repository for Order and OrderLineItem models.

    Write methods only flush. The caller owns the transaction, so an order,
    its lines and its promo reservation commit or roll back together.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, order_id: UUID) -> Order | None:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def get_by_user_id(self, user_id: UUID, skip: int = 0, limit: int = 100) -> list[Order]:
        return (
            self.db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_user_id(self, user_id: UUID) -> int:
        return self.db.query(Order).filter(Order.user_id == user_id).count()

    def get_items(self, order_id: UUID) -> list[OrderLineItem]:
        return (
            self.db.query(OrderLineItem)
            .filter(OrderLineItem.order_id == order_id)
            .order_by(OrderLineItem.position.asc())
            .all()
        )

    def add(self, order: Order, items: list[OrderLineItem]) -> Order:
        self.db.add(order)
        self.db.flush()
        for position, item in enumerate(items):
            item.order_id = order.id
            item.position = position  # type: ignore[assignment]
            self.db.add(item)
        self.db.flush()
        return order
