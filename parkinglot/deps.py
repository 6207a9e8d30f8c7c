# parkinglot/deps.py
"""
FastAPI dependencies shared by the routers.
Override get_clock / get_repository in tests to pin time and storage.
"""

from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy.orm import Session

from parkinglot.config import settings
from parkinglot.database import get_db
from parkinglot.services.fee_engine import BusinessCalendar
from parkinglot.services.record_repository import RecordRepository, SqlRecordRepository


def get_repository(db: Session = Depends(get_db)) -> RecordRepository:
    return SqlRecordRepository(db)


def get_clock() -> datetime:
    """Sampled once per request; every engine call in that request sees the same instant."""
    return datetime.now(timezone.utc)


def get_calendar() -> BusinessCalendar:
    return settings.calendar
