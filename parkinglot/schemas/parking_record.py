# parkinglot/schemas/parking_record.py
from pydantic import BaseModel, PlainSerializer
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, List, Optional

from parkinglot.services.fee_engine import EntryDecision, ParkingSession

# Amounts stay exact internally; two-digit rounding happens only on the way out.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(Decimal(v).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
                    return_type=float),
]


class EntryCreate(BaseModel):
    plate_number: str


class ParkingRecordOut(BaseModel):
    id: int
    plate_number: str
    entry_time: datetime
    exit_time: Optional[datetime] = None
    payment: Optional[Money] = None
    is_overnight: bool = False
    settled_by_id: Optional[int] = None
    state: Optional[str] = None

    @classmethod
    def from_session(cls, session: ParkingSession, state: Optional[str] = None):
        return cls(
            id=session.id,
            plate_number=session.plate_number,
            entry_time=session.entry_time,
            exit_time=getattr(session, "exit_time", None),
            payment=getattr(session, "payment", None),
            is_overnight=getattr(session, "is_overnight", False),
            settled_by_id=getattr(session, "settled_by_id", None),
            state=state,
        )


class CarryoverItemOut(BaseModel):
    record_id: int
    entry_time: datetime
    boundary_time: datetime
    fee: Money

    class Config:
        from_attributes = True


class ChargeOut(BaseModel):
    carryover_items: List[CarryoverItemOut]
    carryover_total: Money
    current_fee: Money
    current_entry_time: datetime
    current_end_time: datetime
    total_fee: Money
    is_overnight: bool
    current_is_carryover: bool

    class Config:
        from_attributes = True


class LookupOut(BaseModel):
    record: ParkingRecordOut
    charge: ChargeOut


class DecisionOut(BaseModel):
    status: EntryDecision
    allowed: bool
    reason: str
    blocking_record_id: Optional[int]
    carryover_record_ids: List[int]

    class Config:
        from_attributes = True


class ReceiptOut(BaseModel):
    receipt_id: str
    record_id: int
    plate_number: str
    entry_time: datetime
    exit_time: datetime
    duration_minutes: int
    payment: Money
    is_overnight: bool
    charge: ChargeOut

    class Config:
        from_attributes = True


class RemovedOut(BaseModel):
    plate_number: str
    removed: int
    status: str = "removed"
