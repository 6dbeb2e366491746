"""Shared sorting utilities for repository queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from orderpricing.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply a "field:direction" sort string to a query.

    A bare field name sorts ascending. Unknown fields fall back to
    ``default_field``; unknown directions fall back to ``default_direction``.
    """
    field = default_field
    direction = default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        if hasattr(model, candidate_field):
            field = candidate_field
            if not candidate_direction:
                direction = "asc"
            elif candidate_direction in ("asc", "desc"):
                direction = candidate_direction

    column = getattr(model, field)
    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(column))
