# parkinglot/routers/entries.py
"""Staff endpoints: log entries, list records, staff exit, administrative delete."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from parkinglot.deps import get_calendar, get_clock, get_repository
from parkinglot.schemas.parking_record import (
    DecisionOut, EntryCreate, ParkingRecordOut, ReceiptOut, RemovedOut,
)
from parkinglot.services import parking_service
from parkinglot.services.fee_engine import BusinessCalendar, ensure_aware, session_state
from parkinglot.services.record_repository import RecordRepository
from parkinglot.utils.plate import sanitize_plate

router = APIRouter()


@router.post("/entries", response_model=ParkingRecordOut, status_code=status.HTTP_201_CREATED,
             summary="Staff — log a vehicle entry")
def create_entry(body: EntryCreate,
                 repo: RecordRepository = Depends(get_repository),
                 now: datetime = Depends(get_clock),
                 calendar: BusinessCalendar = Depends(get_calendar)):
    """Rejected with 400 for a malformed plate and 409 when the entry check denies it."""
    record = parking_service.register_entry(repo, body.plate_number, now, calendar)
    return ParkingRecordOut.from_session(record, session_state(record, now, calendar).value)


@router.get("/entries", response_model=list[ParkingRecordOut], summary="Staff — list parking records")
def list_entries(plate: Optional[str] = None, limit: int = Query(50, ge=1, le=500),
                 repo: RecordRepository = Depends(get_repository),
                 now: datetime = Depends(get_clock),
                 calendar: BusinessCalendar = Depends(get_calendar)):
    """Newest entries first. Filter by exact plate."""
    records = repo.list_records_for_plate(sanitize_plate(plate)) if plate else repo.list_records()
    records = sorted(records, key=lambda r: ensure_aware(r.entry_time), reverse=True)[:limit]
    return [ParkingRecordOut.from_session(r, session_state(r, now, calendar).value) for r in records]


@router.get("/entries/check/{plate}", response_model=DecisionOut, summary="Staff — dry-run the entry check")
def check_entry(plate: str,
                repo: RecordRepository = Depends(get_repository),
                now: datetime = Depends(get_clock),
                calendar: BusinessCalendar = Depends(get_calendar)):
    return DecisionOut.model_validate(parking_service.check_entry(repo, plate, now, calendar))


@router.post("/entries/{record_id}/exit", response_model=ReceiptOut, summary="Staff — process an exit by record id")
def exit_by_record(record_id: int,
                   repo: RecordRepository = Depends(get_repository),
                   now: datetime = Depends(get_clock),
                   calendar: BusinessCalendar = Depends(get_calendar)):
    receipt = parking_service.process_exit(repo, None, now, calendar, record_id=record_id)
    return ReceiptOut.model_validate(receipt)


@router.delete("/vehicles/{plate}", response_model=RemovedOut, summary="Staff — remove every record of a plate")
def remove_vehicle(plate: str, repo: RecordRepository = Depends(get_repository)):
    """Data correction only. Bypasses the normal entry/exit lifecycle."""
    removed = parking_service.remove_vehicle(repo, plate)
    return RemovedOut(plate_number=sanitize_plate(plate), removed=removed)
