"""Promo code statistics and usage reporting for admin tooling."""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from orderpricing.core.money import ZERO, quantize_money, to_decimal
from orderpricing.models.promo_code import PromoCode, PromoCodeStatus
from orderpricing.models.promo_usage import PromoUsageRecord
from orderpricing.models.shared import utc_now
from orderpricing.repositories.promo_usage_repository import PromoUsageRepository


@dataclass
class PromoStats:
    total_codes: int
    active_codes: int
    inactive_codes: int
    upcoming_codes: int
    expired_codes: int
    exhausted_codes: int
    total_usages: int
    total_discount_given: Decimal


@dataclass
class PromoUsageReport:
    total_usages: int
    unique_codes_used: int
    unique_users: int
    total_discount_given: Decimal
    avg_discount_amount: Decimal
    usages: list[PromoUsageRecord]


class PromoReportService:
    def __init__(self, db: Session):
        self.db = db
        self.usage_repo = PromoUsageRepository(db)

    def stats(self, now: datetime | None = None) -> PromoStats:
        """Count codes per derived status and total the discounts granted."""
        now = now or utc_now()
        promos = self.db.query(PromoCode).all()
        by_status = Counter(promo.status_at(now) for promo in promos)
        usages = self.usage_repo.get_all()

        return PromoStats(
            total_codes=len(promos),
            active_codes=by_status[PromoCodeStatus.ACTIVE],
            inactive_codes=by_status[PromoCodeStatus.INACTIVE],
            upcoming_codes=by_status[PromoCodeStatus.UPCOMING],
            expired_codes=by_status[PromoCodeStatus.EXPIRED],
            exhausted_codes=by_status[PromoCodeStatus.EXHAUSTED],
            total_usages=sum(int(promo.usage_count or 0) for promo in promos),
            total_discount_given=quantize_money(
                sum((to_decimal(u.discount_applied) for u in usages), start=ZERO)
            ),
        )

    def usage_report(
        self,
        promo_code_id: UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> PromoUsageReport:
        usages = self.usage_repo.get_all(
            promo_code_id=promo_code_id, start_date=start_date, end_date=end_date
        )
        total = sum((to_decimal(u.discount_applied) for u in usages), start=ZERO)
        average = total / len(usages) if usages else ZERO

        return PromoUsageReport(
            total_usages=len(usages),
            unique_codes_used=len({u.promo_code_id for u in usages}),
            unique_users=len({u.user_id for u in usages}),
            total_discount_given=quantize_money(total),
            avg_discount_amount=quantize_money(average),
            usages=usages,
        )
