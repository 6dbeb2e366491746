"""Promo code admin and validation API endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from orderpricing.core.auth import get_optional_user_id
from orderpricing.core.database import get_db
from orderpricing.core.money import ZERO, quantize_money
from orderpricing.models.promo_code import DiscountType, PromoCode, PromoCodeStatus
from orderpricing.models.shared import as_utc
from orderpricing.repositories.promo_code_repository import PromoCodeRepository
from orderpricing.repositories.promo_usage_repository import PromoUsageRepository
from orderpricing.schemas.promo_code import (
    PromoCodeCreate,
    PromoCodeResponse,
    PromoCodeUpdate,
    PromoStatsResponse,
    PromoUsageReportResponse,
    PromoUsageResponse,
    PromoValidateRequest,
    PromoValidateResponse,
)
from orderpricing.services.discount_calculator import calculate_discount
from orderpricing.services.promo_report_service import PromoReportService
from orderpricing.services.promo_validator import PromoCodeValidator

router = APIRouter()


def _check_update(promo: PromoCode, data: PromoCodeUpdate) -> None:
    """Re-run the create-time consistency rules against the merged values."""
    fields = data.model_dump(exclude_unset=True)
    discount_type = fields.get("discount_type") or DiscountType(promo.discount_type)
    value = fields.get("discount_value", promo.discount_value)
    if discount_type == DiscountType.PERCENTAGE and not (0 < value <= 100):
        raise HTTPException(
            status_code=422, detail="Percentage discount must be between 0 and 100"
        )
    if discount_type == DiscountType.FIXED_AMOUNT and value <= 0:
        raise HTTPException(status_code=422, detail="Fixed amount discount must be greater than 0")

    valid_from = fields.get("valid_from", promo.valid_from)
    valid_until = fields.get("valid_until", promo.valid_until)
    if as_utc(valid_from) >= as_utc(valid_until):
        raise HTTPException(status_code=422, detail="valid_until must be after valid_from")

    usage_limit = fields.get("usage_limit", promo.usage_limit)
    if usage_limit is not None and usage_limit < promo.usage_count:
        raise HTTPException(
            status_code=422,
            detail=f"usage_limit cannot be below the current usage count ({promo.usage_count})",
        )


@router.post(
    "/",
    response_model=PromoCodeResponse,
    status_code=201,
    summary="Create promo code",
    responses={
        409: {"description": "Promo code already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_promo_code(data: PromoCodeCreate, db: Session = Depends(get_db)) -> PromoCode:
    repo = PromoCodeRepository(db)
    if repo.get_by_code(data.code):
        raise HTTPException(status_code=409, detail="Promo code already exists")
    return repo.create(data)


@router.get("/", response_model=list[PromoCodeResponse], summary="List promo codes")
async def list_promo_codes(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    status: PromoCodeStatus | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
) -> list[PromoCode]:
    """List promo codes, optionally filtered by derived status or a code/title search."""
    repo = PromoCodeRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(status=status))
    return repo.get_all(skip=skip, limit=limit, status=status, search=search, order_by=order_by)


@router.get("/stats", response_model=PromoStatsResponse, summary="Promo code statistics")
async def get_promo_stats(db: Session = Depends(get_db)) -> PromoStatsResponse:
    stats = PromoReportService(db).stats()
    return PromoStatsResponse(**vars(stats))


@router.get(
    "/usage-report",
    response_model=PromoUsageReportResponse,
    summary="Promo code usage report",
)
async def get_usage_report(
    promo_code_id: UUID | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
) -> PromoUsageReportResponse:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be before end_date")
    report = PromoReportService(db).usage_report(
        promo_code_id=promo_code_id, start_date=start_date, end_date=end_date
    )
    return PromoUsageReportResponse(
        total_usages=report.total_usages,
        unique_codes_used=report.unique_codes_used,
        unique_users=report.unique_users,
        total_discount_given=report.total_discount_given,
        avg_discount_amount=report.avg_discount_amount,
        usages=[PromoUsageResponse.model_validate(u) for u in report.usages],
    )


@router.post(
    "/validate",
    response_model=PromoValidateResponse,
    summary="Preview a promo code against an order total",
    responses={
        400: {"description": "Promo code cannot be applied"},
        404: {"description": "Promo code not found"},
        409: {"description": "Promo code usage limit reached"},
    },
)
async def validate_promo_code(
    data: PromoValidateRequest,
    db: Session = Depends(get_db),
    user_id: UUID | None = Depends(get_optional_user_id),
) -> PromoValidateResponse:
    """Validate a code and compute its discount. Does not reserve a usage."""
    promo = PromoCodeValidator(db).validate(data.code, data.order_total, user_id=user_id)
    discount = calculate_discount(promo, data.order_total)
    return PromoValidateResponse(
        code=str(promo.code),
        discount_amount=discount,
        final_total=quantize_money(max(data.order_total - discount, ZERO)),
    )


@router.get(
    "/{promo_code_id}",
    response_model=PromoCodeResponse,
    summary="Get promo code",
    responses={404: {"description": "Promo code not found"}},
)
async def get_promo_code(promo_code_id: UUID, db: Session = Depends(get_db)) -> PromoCode:
    promo = PromoCodeRepository(db).get_by_id(promo_code_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Promo code not found")
    return promo


@router.put(
    "/{promo_code_id}",
    response_model=PromoCodeResponse,
    summary="Update promo code",
    responses={
        404: {"description": "Promo code not found"},
        409: {"description": "Promo code already exists"},
        422: {"description": "Validation error"},
    },
)
async def update_promo_code(
    promo_code_id: UUID,
    data: PromoCodeUpdate,
    db: Session = Depends(get_db),
) -> PromoCode:
    repo = PromoCodeRepository(db)
    promo = repo.get_by_id(promo_code_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Promo code not found")
    if data.code and data.code != promo.code:
        existing = repo.get_by_code(data.code)
        if existing:
            raise HTTPException(status_code=409, detail="Promo code already exists")
    _check_update(promo, data)
    return repo.update(promo_code_id, data)  # type: ignore[return-value]


@router.post(
    "/{promo_code_id}/toggle-status",
    response_model=PromoCodeResponse,
    summary="Activate or deactivate promo code",
    responses={404: {"description": "Promo code not found"}},
)
async def toggle_promo_code(promo_code_id: UUID, db: Session = Depends(get_db)) -> PromoCode:
    promo = PromoCodeRepository(db).toggle_status(promo_code_id)
    if not promo:
        raise HTTPException(status_code=404, detail="Promo code not found")
    return promo


@router.delete(
    "/{promo_code_id}",
    status_code=204,
    summary="Delete promo code",
    responses={
        404: {"description": "Promo code not found"},
        409: {"description": "Promo code has been used"},
    },
)
async def delete_promo_code(promo_code_id: UUID, db: Session = Depends(get_db)) -> None:
    """Delete an unused promo code. Used codes must be deactivated instead."""
    repo = PromoCodeRepository(db)
    if not repo.get_by_id(promo_code_id):
        raise HTTPException(status_code=404, detail="Promo code not found")
    if PromoUsageRepository(db).count_by_promo_code_id(promo_code_id) > 0:
        raise HTTPException(
            status_code=409, detail="Promo code has been used; deactivate it instead"
        )
    repo.delete(promo_code_id)
