# parkinglot/routers/dashboard.py
"""Revenue dashboard: today's takings, monthly statistics, parked and overnight vehicles."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from parkinglot.deps import get_calendar, get_clock, get_repository
from parkinglot.schemas.dashboard import MonthlyStatsOut, OvernightVehicleOut, TodayRevenueOut
from parkinglot.schemas.parking_record import ParkingRecordOut
from parkinglot.services import revenue_service
from parkinglot.services.fee_engine import BusinessCalendar, SessionState
from parkinglot.services.record_repository import RecordRepository

router = APIRouter()


@router.get("/dashboard/revenue/today", response_model=TodayRevenueOut, summary="Dashboard — today's revenue")
def get_todays_revenue(repo: RecordRepository = Depends(get_repository),
                       now: datetime = Depends(get_clock),
                       calendar: BusinessCalendar = Depends(get_calendar)):
    today = now.astimezone(calendar.tz).date()
    return TodayRevenueOut(
        date=str(today),
        total_revenue=revenue_service.todays_revenue(repo.list_records(), now, calendar),
    )


@router.get("/dashboard/revenue/monthly", response_model=MonthlyStatsOut, summary="Dashboard — monthly statistics")
def get_monthly_stats(year: int = Query(..., ge=2000), month: int = Query(..., ge=1, le=12),
                      repo: RecordRepository = Depends(get_repository),
                      calendar: BusinessCalendar = Depends(get_calendar)):
    stats = revenue_service.monthly_stats(repo.list_records(), year, month, calendar)
    if not stats:
        raise HTTPException(status_code=404, detail=f"No parking records found for {month}/{year}")
    return MonthlyStatsOut.model_validate(stats)


@router.get("/dashboard/parked", response_model=list[ParkingRecordOut], summary="Dashboard — currently parked vehicles")
def get_parked(search: Optional[str] = None,
               repo: RecordRepository = Depends(get_repository),
               now: datetime = Depends(get_clock),
               calendar: BusinessCalendar = Depends(get_calendar)):
    """Vehicles with overnight charges pending are listed separately under /dashboard/overnight."""
    parked = revenue_service.parked_vehicles(repo.list_records(), now, calendar, search)
    return [ParkingRecordOut.from_session(r, SessionState.PARKED.value) for r in parked]


@router.get("/dashboard/overnight", response_model=list[OvernightVehicleOut],
            summary="Dashboard — vehicles with overnight charges pending")
def get_overnight(repo: RecordRepository = Depends(get_repository),
                  now: datetime = Depends(get_clock),
                  calendar: BusinessCalendar = Depends(get_calendar)):
    return [
        OvernightVehicleOut(
            record=ParkingRecordOut.from_session(v.session, SessionState.CARRYOVER_PENDING.value),
            boundary_time=v.boundary_time,
            carryover_fee=v.carryover_fee,
        )
        for v in revenue_service.overnight_vehicles(repo.list_records(), now, calendar)
    ]
