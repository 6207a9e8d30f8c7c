# parkinglot/services/record_repository.py
"""
Record store for parking sessions.

RecordRepository is the boundary the parking service depends on. The
SQLAlchemy implementation below maps rows of the parking_records table into
the engine's ActiveSession / ClosedSession types, so nothing above this layer
ever checks a nullable exit_time.

Writes are flushed, not committed; the caller commits once per logical operation.
Storage errors are not caught here.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Protocol

from sqlalchemy.orm import Session

from parkinglot.exceptions import NotFoundError, RecordAlreadyClosedError
from parkinglot.models.parking_record import ParkingRecord
from parkinglot.services.fee_engine import ActiveSession, ClosedSession, ParkingSession, ensure_aware
from parkinglot.utils.logger import get_logger

logger = get_logger(__name__)


class RecordRepository(Protocol):
    def list_records(self) -> List[ParkingSession]: ...
    def list_records_for_plate(self, plate: str) -> List[ParkingSession]: ...
    def get(self, record_id: int) -> Optional[ParkingSession]: ...
    def create(self, plate: str, entry_time: datetime) -> ActiveSession: ...
    def close(self, record_id: int, exit_time: datetime, payment: Decimal,
              is_overnight: bool, settled_by_id: Optional[int] = None) -> ClosedSession: ...
    def delete_by_plate(self, plate: str) -> int: ...
    def commit(self) -> None: ...


def _utc(t: datetime) -> datetime:
    # SQLite stores DateTime without an offset; keep every stored value in UTC.
    return ensure_aware(t).astimezone(timezone.utc)


def to_session(row: ParkingRecord) -> ParkingSession:
    entry_time = ensure_aware(row.entry_time)
    if row.exit_time is None:
        return ActiveSession(id=row.id, plate_number=row.plate_number, entry_time=entry_time)
    return ClosedSession(
        id=row.id,
        plate_number=row.plate_number,
        entry_time=entry_time,
        exit_time=ensure_aware(row.exit_time),
        payment=Decimal(row.payment) if row.payment is not None else Decimal("0"),
        is_overnight=bool(row.is_overnight),
        settled_by_id=row.settled_by_id,
    )


class SqlRecordRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_records(self) -> List[ParkingSession]:
        rows = self.db.query(ParkingRecord).order_by(ParkingRecord.entry_time.asc()).all()
        return [to_session(r) for r in rows]

    def list_records_for_plate(self, plate: str) -> List[ParkingSession]:
        rows = (
            self.db.query(ParkingRecord)
            .filter(ParkingRecord.plate_number == plate)
            .order_by(ParkingRecord.entry_time.asc())
            .all()
        )
        return [to_session(r) for r in rows]

    def get(self, record_id: int) -> Optional[ParkingSession]:
        row = self.db.query(ParkingRecord).filter(ParkingRecord.id == record_id).first()
        return to_session(row) if row else None

    def create(self, plate: str, entry_time: datetime) -> ActiveSession:
        now = datetime.now(timezone.utc)
        row = ParkingRecord(
            plate_number=plate,
            entry_time=_utc(entry_time),
            is_overnight=False,
            created_at=now,
            updated_at=now,
        )
        self.db.add(row)
        self.db.flush()
        return ActiveSession(id=row.id, plate_number=row.plate_number, entry_time=_utc(entry_time))

    def close(self, record_id: int, exit_time: datetime, payment: Decimal,
              is_overnight: bool, settled_by_id: Optional[int] = None) -> ClosedSession:
        # Conditional update: only a still-open row can be closed, and only once.
        updated = (
            self.db.query(ParkingRecord)
            .filter(ParkingRecord.id == record_id, ParkingRecord.exit_time.is_(None))
            .update(
                {
                    ParkingRecord.exit_time: _utc(exit_time),
                    ParkingRecord.payment: payment,
                    ParkingRecord.is_overnight: is_overnight,
                    ParkingRecord.settled_by_id: settled_by_id,
                    ParkingRecord.updated_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
        )
        if not updated:
            if self.get(record_id) is None:
                raise NotFoundError(f"Parking record {record_id} not found")
            raise RecordAlreadyClosedError(record_id)

        row = self.db.query(ParkingRecord).filter(ParkingRecord.id == record_id).first()
        self.db.refresh(row)
        return to_session(row)

    def delete_by_plate(self, plate: str) -> int:
        deleted = (
            self.db.query(ParkingRecord)
            .filter(ParkingRecord.plate_number == plate)
            .delete(synchronize_session=False)
        )
        logger.warning(f"[ADMIN] Deleted {deleted} record(s) for plate {plate}")
        return deleted

    def commit(self) -> None:
        self.db.commit()
