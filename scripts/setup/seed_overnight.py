# scripts/setup/seed_overnight.py
"""
Seed an open parking record dated yesterday, to exercise overnight carryover.
Creates a new record, or moves the plate's open record back to yesterday.
Usage: python scripts/setup/seed_overnight.py --plate CCC111 --time 15:30
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import datetime, timedelta, timezone

from parkinglot.config import settings
from parkinglot.database import SessionLocal, create_tables
from parkinglot.models.parking_record import ParkingRecord
from parkinglot.services.fee_engine import billable_fee, close_boundary_of
from parkinglot.utils.plate import normalize_plate


def yesterday_at(hour, minute, calendar, now=None):
    """`hour:minute` on the business day before `now`, in the business time zone."""
    now = now or datetime.now(timezone.utc)
    yesterday = now.astimezone(calendar.tz) - timedelta(days=1)
    return yesterday.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seed_record(db, plate, entry_time):
    """
    Move the plate's open record to `entry_time`, or create one there.
    Timestamps are written in UTC; SQLite drops offsets on storage.
    """
    entry_utc = entry_time.astimezone(timezone.utc)
    record = (
        db.query(ParkingRecord)
        .filter(ParkingRecord.plate_number == plate, ParkingRecord.exit_time.is_(None))
        .order_by(ParkingRecord.entry_time.desc())
        .first()
    )
    if record:
        record.entry_time = entry_utc
        record.updated_at = datetime.now(timezone.utc)
        created = False
    else:
        record = ParkingRecord(plate_number=plate, entry_time=entry_utc, is_overnight=False,
                               created_at=entry_utc, updated_at=entry_utc)
        db.add(record)
        created = True
    db.commit()
    return record, created


def main():
    parser = argparse.ArgumentParser(description="Seed an overnight parking record")
    parser.add_argument("--plate", default="CCC111")
    parser.add_argument("--time", default="15:30", help="Entry time-of-day yesterday (HH:MM)")
    args = parser.parse_args()

    calendar = settings.calendar
    plate = normalize_plate(args.plate)
    hour, minute = (int(p) for p in args.time.split(":"))
    entry_time = yesterday_at(hour, minute, calendar)

    create_tables()
    db = SessionLocal()
    try:
        record, created = seed_record(db, plate, entry_time)
        verb = "Created" if created else "Moved"
        print(f"✅ {verb} open record {record.id} for {plate} at {entry_time:%Y-%m-%d %H:%M}")
    finally:
        db.close()

    boundary = close_boundary_of(entry_time, calendar)
    print(f"🌙 Expected carryover fee: {billable_fee(entry_time, boundary, calendar):.2f} "
          f"({entry_time:%H:%M} → {boundary:%H:%M})")


if __name__ == "__main__":
    main()
