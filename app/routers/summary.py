"""
Weekly summary router.

GET /weekly-summary  - per-user count totals for one week
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.summary import WeeklySummaryResponse
from app.services.aggregation import weekly_summary

router = APIRouter(tags=["summary"])


@router.get(
    "/weekly-summary",
    response_model=WeeklySummaryResponse,
    summary="Per-user totals for one week",
)
def get_weekly_summary(
    week_start: Optional[str] = Query(
        default=None,
        description="Any ISO date or datetime in the wanted week. Defaults to the current week.",
        examples=["2024-01-08"],
    ),
    db: Session = Depends(get_db),
):
    """
    `totals[user_id]` is the sum of `count` over that user's entries in the
    week. Users with no entries are left out; treat a missing key as 0.
    """
    result = weekly_summary(db=db, week_start=week_start)
    return WeeklySummaryResponse(
        week_start=result.week_start.isoformat(),
        totals=result.totals,
        entry_count=result.entry_count,
    )
