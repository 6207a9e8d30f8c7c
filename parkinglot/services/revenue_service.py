# parkinglot/services/revenue_service.py
"""
Dashboard figures: daily revenue, monthly statistics, parked and overnight lists.
Pure functions over a list of sessions, evaluated in the business time zone.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from parkinglot.services.fee_engine import (
    ActiveSession, BusinessCalendar, ClosedSession, ParkingSession,
    billable_fee, close_boundary_of, ensure_aware, is_carryover_outstanding,
)


@dataclass(frozen=True)
class MonthlyStats:
    year: int
    month: int
    total_revenue: Decimal
    total_vehicles: int
    max_payment: Decimal
    min_payment: Decimal
    avg_payment: Decimal


@dataclass(frozen=True)
class OvernightVehicle:
    session: ActiveSession
    boundary_time: datetime
    carryover_fee: Decimal


def _exit_date(record: ClosedSession, calendar: BusinessCalendar):
    return ensure_aware(record.exit_time).astimezone(calendar.tz).date()


def _billed(records: Iterable[ParkingSession]) -> List[ClosedSession]:
    # Carryover records settled by another exit hold a zero payment; the
    # exiting record carries their fee.
    return [r for r in records if isinstance(r, ClosedSession) and r.settled_by_id is None]


def todays_revenue(records: Iterable[ParkingSession], now: datetime,
                   calendar: BusinessCalendar) -> Decimal:
    today = ensure_aware(now).astimezone(calendar.tz).date()
    return sum(
        (r.payment for r in _billed(records) if _exit_date(r, calendar) == today),
        Decimal("0"),
    )


def monthly_stats(records: Iterable[ParkingSession], year: int, month: int,
                  calendar: BusinessCalendar) -> Optional[MonthlyStats]:
    """Revenue figures for records that exited during the given month. None if there were none."""
    exited = [
        r for r in _billed(records)
        if (_exit_date(r, calendar).year, _exit_date(r, calendar).month) == (year, month)
    ]
    if not exited:
        return None

    payments = [r.payment for r in exited]
    total = sum(payments, Decimal("0"))
    return MonthlyStats(
        year=year,
        month=month,
        total_revenue=total,
        total_vehicles=len(exited),
        max_payment=max(payments),
        min_payment=min(payments),
        avg_payment=total / len(exited),
    )


def parked_vehicles(records: Iterable[ParkingSession], now: datetime,
                    calendar: BusinessCalendar, search: Optional[str] = None) -> List[ActiveSession]:
    """Currently parked vehicles, excluding those with carryover outstanding."""
    parked = [
        r for r in records
        if isinstance(r, ActiveSession) and not is_carryover_outstanding(r, now, calendar)
    ]
    if search and search.strip():
        needle = search.strip().lower()
        parked = [r for r in parked if needle in r.plate_number.lower()]
    return sorted(parked, key=lambda r: ensure_aware(r.entry_time))


def overnight_vehicles(records: Iterable[ParkingSession], now: datetime,
                       calendar: BusinessCalendar) -> List[OvernightVehicle]:
    result = []
    for r in records:
        if is_carryover_outstanding(r, now, calendar):
            boundary = close_boundary_of(r.entry_time, calendar)
            result.append(OvernightVehicle(
                session=r,
                boundary_time=boundary,
                carryover_fee=billable_fee(r.entry_time, boundary, calendar),
            ))
    return sorted(result, key=lambda v: ensure_aware(v.session.entry_time))
