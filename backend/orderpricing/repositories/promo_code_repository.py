"""PromoCode repository for data access."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from orderpricing.core.sorting import apply_order_by
from orderpricing.models.promo_code import PromoCode, PromoCodeStatus
from orderpricing.models.shared import utc_now
from orderpricing.schemas.promo_code import PromoCodeCreate, PromoCodeUpdate


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _status_filter(status: PromoCodeStatus, now: datetime):  # type: ignore[no-untyped-def]
    exhausted = and_(
        PromoCode.usage_limit.isnot(None),
        PromoCode.usage_count >= PromoCode.usage_limit,
    )
    if status == PromoCodeStatus.INACTIVE:
        return PromoCode.is_active.is_(False)
    if status == PromoCodeStatus.UPCOMING:
        return and_(PromoCode.is_active.is_(True), PromoCode.valid_from > now)
    if status == PromoCodeStatus.EXPIRED:
        return and_(PromoCode.is_active.is_(True), PromoCode.valid_until < now)
    if status == PromoCodeStatus.EXHAUSTED:
        return and_(
            PromoCode.is_active.is_(True),
            PromoCode.valid_from <= now,
            PromoCode.valid_until >= now,
            exhausted,
        )
    return and_(
        PromoCode.is_active.is_(True),
        PromoCode.valid_from <= now,
        PromoCode.valid_until >= now,
        or_(PromoCode.usage_limit.is_(None), PromoCode.usage_count < PromoCode.usage_limit),
    )


class PromoCodeRepository:
    """Repository for PromoCode model.

    ``usage_count`` is deliberately absent from every write path here; only
    the usage ledger changes it.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        status: PromoCodeStatus | None = None,
        search: str | None = None,
        order_by: str | None = None,
    ) -> list[PromoCode]:
        """Get promo codes with optional derived-status and code/title search filters."""
        query = self.db.query(PromoCode)
        if status:
            query = query.filter(_status_filter(status, utc_now()))
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(PromoCode.code.ilike(term), PromoCode.title.ilike(term)))
        query = apply_order_by(query, PromoCode, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, status: PromoCodeStatus | None = None) -> int:
        query = self.db.query(PromoCode)
        if status:
            query = query.filter(_status_filter(status, utc_now()))
        return query.count()

    def get_by_id(self, promo_code_id: UUID) -> PromoCode | None:
        return self.db.query(PromoCode).filter(PromoCode.id == promo_code_id).first()

    def get_by_code(self, code: str) -> PromoCode | None:
        return self.db.query(PromoCode).filter(PromoCode.code == normalize_code(code)).first()

    def create(self, data: PromoCodeCreate) -> PromoCode:
        promo = PromoCode(
            code=normalize_code(data.code),
            title=data.title,
            description=data.description,
            discount_type=data.discount_type.value,
            discount_value=data.discount_value,
            min_order_amount=data.min_order_amount,
            max_discount_amount=data.max_discount_amount,
            usage_limit=data.usage_limit,
            usage_count=0,
            user_usage_limit=data.user_usage_limit,
            valid_from=data.valid_from,
            valid_until=data.valid_until,
            is_active=data.is_active,
        )
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)
        return promo

    def update(self, promo_code_id: UUID, data: PromoCodeUpdate) -> PromoCode | None:
        promo = self.get_by_id(promo_code_id)
        if not promo:
            return None

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("discount_type"):
            update_data["discount_type"] = update_data["discount_type"].value

        for key, value in update_data.items():
            setattr(promo, key, value)

        self.db.commit()
        self.db.refresh(promo)
        return promo

    def toggle_status(self, promo_code_id: UUID) -> PromoCode | None:
        promo = self.get_by_id(promo_code_id)
        if not promo:
            return None
        promo.is_active = not promo.is_active  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(promo)
        return promo

    def delete(self, promo_code_id: UUID) -> bool:
        promo = self.get_by_id(promo_code_id)
        if not promo:
            return False
        self.db.delete(promo)
        self.db.commit()
        return True
