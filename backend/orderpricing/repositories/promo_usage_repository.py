"""PromoUsageRecord repository for read access to the usage ledger."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from orderpricing.models.promo_usage import PromoUsageRecord


class PromoUsageRepository:
    """Read-side queries over promo usage records.

    Inserts and deletes go through ``PromoUsageLedger`` so that the record
    table and ``PromoCode.usage_count`` always move together.
    """

    def __init__(self, db: Session):
        self.db = db

    def count_for_user(self, promo_code_id: UUID, user_id: UUID) -> int:
        return (
            self.db.query(func.count(PromoUsageRecord.id))
            .filter(
                PromoUsageRecord.promo_code_id == promo_code_id,
                PromoUsageRecord.user_id == user_id,
            )
            .scalar()
            or 0
        )

    def count_by_promo_code_id(self, promo_code_id: UUID) -> int:
        return (
            self.db.query(func.count(PromoUsageRecord.id))
            .filter(PromoUsageRecord.promo_code_id == promo_code_id)
            .scalar()
            or 0
        )

    def get_by_order_id(self, order_id: UUID) -> PromoUsageRecord | None:
        return self.db.query(PromoUsageRecord).filter(PromoUsageRecord.order_id == order_id).first()

    def get_all(
        self,
        promo_code_id: UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[PromoUsageRecord]:
        """Usage rows, newest first, optionally filtered by code and date range."""
        query = self.db.query(PromoUsageRecord)
        if promo_code_id:
            query = query.filter(PromoUsageRecord.promo_code_id == promo_code_id)
        if start_date:
            query = query.filter(PromoUsageRecord.used_at >= start_date)
        if end_date:
            query = query.filter(PromoUsageRecord.used_at <= end_date)
        return query.order_by(PromoUsageRecord.used_at.desc()).all()
