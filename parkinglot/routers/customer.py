# parkinglot/routers/customer.py
"""Customer self-service: look up a plate, then pay and exit."""

from datetime import datetime

from fastapi import APIRouter, Depends

from parkinglot.deps import get_calendar, get_clock, get_repository
from parkinglot.schemas.parking_record import ChargeOut, LookupOut, ParkingRecordOut, ReceiptOut
from parkinglot.services import parking_service
from parkinglot.services.fee_engine import BusinessCalendar, session_state
from parkinglot.services.record_repository import RecordRepository

router = APIRouter()


@router.get("/lookup/{plate}", response_model=LookupOut, summary="Customer — current parking record and fee")
def lookup(plate: str,
           repo: RecordRepository = Depends(get_repository),
           now: datetime = Depends(get_clock),
           calendar: BusinessCalendar = Depends(get_calendar)):
    """Fee includes any outstanding overnight charges for the plate."""
    session, charge = parking_service.quote(repo, plate, now, calendar)
    return LookupOut(
        record=ParkingRecordOut.from_session(session, session_state(session, now, calendar).value),
        charge=ChargeOut.model_validate(charge),
    )


@router.post("/exit/{plate}", response_model=ReceiptOut, summary="Customer — pay and exit")
def pay_and_exit(plate: str,
                 repo: RecordRepository = Depends(get_repository),
                 now: datetime = Depends(get_clock),
                 calendar: BusinessCalendar = Depends(get_calendar)):
    return ReceiptOut.model_validate(parking_service.process_exit(repo, plate, now, calendar))
