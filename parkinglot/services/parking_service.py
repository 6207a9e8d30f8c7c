# parkinglot/services/parking_service.py
"""
Entry / lookup / exit orchestration on top of the fee engine.

How it works:
  - Entry: plate is normalized, the engine's can_enter decides, a record is created
  - Lookup: most recent open record for the plate + a live Charge
  - Exit: one Charge is computed; every stale carryover record it itemizes is
    closed with a zero payment pointing at the exiting record, and the exiting
    record carries the full total
  - Admin delete: remove every record of a plate (data correction only)

Every function takes the caller's `now`; nothing here reads the clock.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from parkinglot.exceptions import (
    EntryDeniedError, NotFoundError, RecordAlreadyClosedError, ValidationError,
)
from parkinglot.services.fee_engine import (
    ActiveSession, BusinessCalendar, Charge, ClosedSession, Decision,
    can_enter, compute_charge, ensure_aware,
)
from parkinglot.services.record_repository import RecordRepository
from parkinglot.utils.logger import get_logger
from parkinglot.utils.plate import normalize_plate

logger = get_logger(__name__)


@dataclass(frozen=True)
class Receipt:
    receipt_id: str
    record_id: int
    plate_number: str
    entry_time: datetime
    exit_time: datetime
    duration_minutes: int
    payment: Decimal
    is_overnight: bool
    charge: Charge


def check_entry(repo: RecordRepository, raw_plate: str, now: datetime,
                calendar: BusinessCalendar) -> Decision:
    plate = normalize_plate(raw_plate)
    return can_enter(repo.list_records_for_plate(plate), plate, now, calendar)


def register_entry(repo: RecordRepository, raw_plate: str, now: datetime,
                   calendar: BusinessCalendar) -> ActiveSession:
    """Log a vehicle entry. Raises ValidationError or EntryDeniedError."""
    plate = normalize_plate(raw_plate)
    decision = can_enter(repo.list_records_for_plate(plate), plate, now, calendar)
    if not decision.allowed:
        logger.warning(f"[ENTRY] Denied plate={plate} status={decision.status.value}")
        raise EntryDeniedError(decision)

    record = repo.create(plate, now)
    repo.commit()
    if decision.carryover_record_ids:
        logger.info(f"[ENTRY] Plate={plate} re-entered with carryover pending on {list(decision.carryover_record_ids)}")
    logger.info(f"[ENTRY] Plate={plate} logged as record {record.id}")
    return record


def find_active_session(repo: RecordRepository, raw_plate: str) -> ActiveSession:
    """Most recent record of the plate that has no exit yet."""
    plate = normalize_plate(raw_plate)
    active = [r for r in repo.list_records_for_plate(plate) if isinstance(r, ActiveSession)]
    if not active:
        raise NotFoundError(f"No active parking record found for {plate}")
    return max(active, key=lambda r: ensure_aware(r.entry_time))


def quote(repo: RecordRepository, raw_plate: str, now: datetime,
          calendar: BusinessCalendar) -> Tuple[ActiveSession, Charge]:
    """Customer lookup: the open session and what leaving at `now` would cost."""
    session = find_active_session(repo, raw_plate)
    records = repo.list_records_for_plate(session.plate_number)
    return session, compute_charge(records, session, now, calendar)


def process_exit(repo: RecordRepository, raw_plate: Optional[str], now: datetime,
                 calendar: BusinessCalendar, record_id: Optional[int] = None) -> Receipt:
    """
    Close a session and settle outstanding carryover for the same plate.

    Staff exit by record id; customers exit by plate (most recent open record).
    """
    if record_id is not None:
        session = repo.get(record_id)
        if session is None:
            raise NotFoundError(f"Parking record {record_id} not found")
        if isinstance(session, ClosedSession):
            raise RecordAlreadyClosedError(record_id)
    else:
        session = find_active_session(repo, raw_plate)

    if ensure_aware(now) < ensure_aware(session.entry_time):
        raise ValidationError("Exit time cannot be earlier than entry time")

    records = repo.list_records_for_plate(session.plate_number)
    charge = compute_charge(records, session, now, calendar)

    for item in charge.carryover_items:
        repo.close(item.record_id, now, Decimal("0"), True, settled_by_id=session.id)
        logger.info(f"[EXIT] Carryover record {item.record_id} settled by {session.id} fee={item.fee}")

    closed = repo.close(session.id, now, charge.total_fee, charge.is_overnight)
    repo.commit()

    logger.info(
        f"[EXIT] Plate={session.plate_number} record={session.id} "
        f"carryover={charge.carryover_total} current={charge.current_fee} total={charge.total_fee}"
    )

    return Receipt(
        receipt_id=f"RCP-{int(ensure_aware(now).timestamp() * 1000)}",
        record_id=closed.id,
        plate_number=closed.plate_number,
        entry_time=closed.entry_time,
        exit_time=closed.exit_time,
        duration_minutes=int((ensure_aware(now) - ensure_aware(session.entry_time)).total_seconds() // 60),
        payment=charge.total_fee,
        is_overnight=charge.is_overnight,
        charge=charge,
    )


def remove_vehicle(repo: RecordRepository, raw_plate: str) -> int:
    """Administrative override: delete every record of a plate."""
    plate = normalize_plate(raw_plate)
    removed = repo.delete_by_plate(plate)
    repo.commit()
    if not removed:
        raise NotFoundError(f"No parking records found for {plate}")
    return removed
