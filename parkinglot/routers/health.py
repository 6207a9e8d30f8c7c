# parkinglot/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB and the business calendar in effect.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from parkinglot.database import get_db
from parkinglot.deps import get_calendar, get_clock
from parkinglot.services.fee_engine import BusinessCalendar, is_within_business_hours
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db),
                 now: datetime = Depends(get_clock),
                 calendar: BusinessCalendar = Depends(get_calendar)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Business hours, tariff, and whether the lot is open right now
    """
    result = {
        "status": "ok",
        "timestamp": now.isoformat(),
        "backend": "ok",
        "database": "unknown",
        "business_hours": {
            "open": calendar.open_time.strftime("%H:%M"),
            "close": calendar.close_time.strftime("%H:%M"),
            "open_now": is_within_business_hours(now, calendar),
        },
        "tariff": {
            "rate_per_unit": str(calendar.rate_per_billing_unit),
            "unit_minutes": calendar.billing_unit_minutes,
        },
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
