"""Reporting routes."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.app.core.time import local_today
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.schemas.report import KpoBook
from backend.app.services.reports import build_kpo_book

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/kpo", response_model=KpoBook)
async def get_kpo_book(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    customer_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: str = Depends(get_current_user),
):
    today = local_today()
    start = from_date or date(today.year, 1, 1)
    end = to_date or today
    if start > end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="from_date must not be after to_date")
    return build_kpo_book(db, start, end, status=status_filter, customer_id=customer_id)
