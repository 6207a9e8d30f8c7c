# tests/test_revenue_service.py
"""Unit tests for the dashboard figures."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timezone
from decimal import Decimal
from parkinglot.services.fee_engine import ActiveSession, ClosedSession
from parkinglot.services.revenue_service import (
    monthly_stats, overnight_vehicles, parked_vehicles, todays_revenue,
)


def at(month, day, hour, minute=0):
    return datetime(2025, month, day, hour, minute, tzinfo=timezone.utc)


def paid(record_id, exit_, payment, plate="ABC-123", settled_by_id=None):
    return ClosedSession(record_id, plate, exit_.replace(hour=8), exit_, Decimal(payment),
                         settled_by_id=settled_by_id)


RECORDS = [
    paid(1, at(3, 10, 10), "1.50"),
    paid(2, at(3, 11, 12), "3.00", plate="CCC111"),
    paid(3, at(3, 11, 12), "0", plate="CCC111", settled_by_id=2),
    paid(4, at(3, 11, 16), "0.50", plate="XYZ-9"),
    paid(5, at(4, 1, 9), "4.00"),
    ActiveSession(6, "DEF-456", at(3, 11, 9)),
    ActiveSession(7, "CCC222", at(3, 10, 15, 30)),
]


class TestTodaysRevenue:
    def test_sums_payments_exited_today(self, calendar):
        assert todays_revenue(RECORDS, at(3, 11, 17), calendar) == Decimal("3.50")

    def test_no_exits_today(self, calendar):
        assert todays_revenue(RECORDS, at(3, 12, 10), calendar) == Decimal("0")


class TestMonthlyStats:
    def test_march(self, calendar):
        stats = monthly_stats(RECORDS, 2025, 3, calendar)
        assert stats.total_revenue == Decimal("5.00")
        assert stats.total_vehicles == 3      # settled carryover row is not a separate vehicle
        assert stats.max_payment == Decimal("3.00")
        assert stats.min_payment == Decimal("0.50")
        assert stats.avg_payment == Decimal("5.00") / 3

    def test_empty_month(self, calendar):
        assert monthly_stats(RECORDS, 2025, 2, calendar) is None


class TestVehicleLists:
    def test_parked_excludes_carryover(self, calendar):
        parked = parked_vehicles(RECORDS, at(3, 11, 10), calendar)
        assert [r.id for r in parked] == [6]

    def test_parked_search_is_case_insensitive(self, calendar):
        assert [r.id for r in parked_vehicles(RECORDS, at(3, 11, 10), calendar, "def")] == [6]
        assert parked_vehicles(RECORDS, at(3, 11, 10), calendar, "zzz") == []

    def test_overnight_lists_boundary_fee(self, calendar):
        overnight = overnight_vehicles(RECORDS, at(3, 11, 10), calendar)
        assert len(overnight) == 1
        assert overnight[0].session.id == 7
        assert overnight[0].boundary_time == at(3, 10, 17, 30)
        assert overnight[0].carryover_fee == Decimal("2.00")
