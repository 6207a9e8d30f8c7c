"""Pytest configuration and shared fixtures."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Keep tests off the production database and out of the log directory.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from datetime import datetime
from decimal import Decimal

from parkinglot.exceptions import NotFoundError, RecordAlreadyClosedError
from parkinglot.services.fee_engine import ActiveSession, BusinessCalendar, ClosedSession


class InMemoryRecordRepository:
    """Dict-backed stand-in for SqlRecordRepository."""

    def __init__(self, sessions=()):
        self.records = {s.id: s for s in sessions}
        self._next_id = max(self.records, default=0) + 1
        self.commits = 0

    def list_records(self):
        return sorted(self.records.values(), key=lambda r: r.entry_time)

    def list_records_for_plate(self, plate):
        return [r for r in self.list_records() if r.plate_number == plate]

    def get(self, record_id):
        return self.records.get(record_id)

    def create(self, plate, entry_time):
        record = ActiveSession(id=self._next_id, plate_number=plate, entry_time=entry_time)
        self.records[record.id] = record
        self._next_id += 1
        return record

    def close(self, record_id, exit_time, payment, is_overnight, settled_by_id=None):
        record = self.records.get(record_id)
        if record is None:
            raise NotFoundError(f"Parking record {record_id} not found")
        if isinstance(record, ClosedSession):
            raise RecordAlreadyClosedError(record_id)
        closed = ClosedSession(
            id=record.id,
            plate_number=record.plate_number,
            entry_time=record.entry_time,
            exit_time=exit_time,
            payment=payment,
            is_overnight=is_overnight,
            settled_by_id=settled_by_id,
        )
        self.records[record_id] = closed
        return closed

    def delete_by_plate(self, plate):
        ids = [r.id for r in self.records.values() if r.plate_number == plate]
        for record_id in ids:
            del self.records[record_id]
        return len(ids)

    def commit(self):
        self.commits += 1


@pytest.fixture
def calendar():
    """08:30–17:30, 0.50 per 30 minutes, evaluated in UTC."""
    return BusinessCalendar()


@pytest.fixture
def repo():
    return InMemoryRecordRepository()


@pytest.fixture
def make_repo():
    return InMemoryRecordRepository


@pytest.fixture
def rate():
    return Decimal("0.50")
