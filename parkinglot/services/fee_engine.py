# parkinglot/services/fee_engine.py
"""
Fee & overnight-carryover engine.

Pure functions over (records, now, calendar). Nothing here reads the clock,
touches the database or logs: callers sample `now` once and pass the same
instant to every call that belongs to one logical operation.

Rules:
  - Fees accrue per billing unit (default 30 min at 0.50), always rounded up.
  - A session still parked at/after close on its entry day, or into any later
    day, is "carryover outstanding" and is billed only up to the close
    boundary of its entry day.
  - On exit, every other outstanding carryover record of the plate is itemized
    and added to the charge of the session being closed.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Union


@dataclass(frozen=True)
class BusinessCalendar:
    open_time: time = time(8, 30)
    close_time: time = time(17, 30)
    rate_per_billing_unit: Decimal = Decimal("0.50")
    billing_unit_minutes: int = 30
    recent_exit_minutes: int = 5
    tz: tzinfo = timezone.utc


# ── Records ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ActiveSession:
    """A record with no exit yet: the vehicle is still parked."""
    id: int
    plate_number: str
    entry_time: datetime


@dataclass(frozen=True)
class ClosedSession:
    id: int
    plate_number: str
    entry_time: datetime
    exit_time: datetime
    payment: Decimal
    is_overnight: bool = False
    settled_by_id: Optional[int] = None


ParkingSession = Union[ActiveSession, ClosedSession]


class SessionState(str, Enum):
    PARKED = "parked"
    CARRYOVER_PENDING = "carryover_pending"
    EXITED = "exited"


# ── Results ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CarryoverItem:
    record_id: int
    entry_time: datetime
    boundary_time: datetime
    fee: Decimal


@dataclass(frozen=True)
class Charge:
    carryover_items: tuple
    carryover_total: Decimal
    current_fee: Decimal
    current_entry_time: datetime
    current_end_time: datetime
    total_fee: Decimal
    is_overnight: bool
    current_is_carryover: bool = False


class EntryDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED_OUTSIDE_HOURS = "denied_outside_hours"
    DENIED_ALREADY_PARKED = "denied_already_parked"
    DENIED_RECENT_EXIT = "denied_recent_exit"


@dataclass(frozen=True)
class Decision:
    status: EntryDecision
    reason: str = ""
    blocking_record_id: Optional[int] = None
    carryover_record_ids: tuple = field(default_factory=tuple)

    @property
    def allowed(self) -> bool:
        return self.status is EntryDecision.ALLOWED


# ── Time helpers ─────────────────────────────────────────────────────────────

def ensure_aware(t: datetime) -> datetime:
    """Naive values (e.g. read back from SQLite) are taken as UTC."""
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t


def _local(t: datetime, calendar: BusinessCalendar) -> datetime:
    return ensure_aware(t).astimezone(calendar.tz)


def close_boundary_of(t: datetime, calendar: BusinessCalendar) -> datetime:
    """`t`'s business date combined with the close time."""
    local = _local(t, calendar)
    return datetime.combine(local.date(), calendar.close_time, tzinfo=calendar.tz)


def is_within_business_hours(now: datetime, calendar: BusinessCalendar) -> bool:
    tod = _local(now, calendar).time()
    return calendar.open_time <= tod <= calendar.close_time


# ── Operations ───────────────────────────────────────────────────────────────

def is_carryover_outstanding(record: ParkingSession, now: datetime,
                             calendar: BusinessCalendar) -> bool:
    """
    True when a still-parked vehicle entered before close and either the
    business date has rolled over since, or it is the same date and close
    has already passed.
    """
    if not isinstance(record, ActiveSession):
        return False

    entry = _local(record.entry_time, calendar)
    current = _local(now, calendar)

    if entry.time() >= calendar.close_time:
        return False
    if entry.date() < current.date():
        return True
    return entry.date() == current.date() and current.time() >= calendar.close_time


def billable_fee(entry_time: datetime, end_time: datetime,
                 calendar: BusinessCalendar) -> Decimal:
    """
    Convert a duration into a fee.

    Partial minutes and partial billing units round up. Zero or negative
    durations are charged the minimum unit.
    """
    elapsed = _local(end_time, calendar) - _local(entry_time, calendar)
    micros = elapsed // timedelta(microseconds=1)
    minutes = -(-micros // 60_000_000)

    if minutes <= 0:
        units = 1
    else:
        units = -(-minutes // calendar.billing_unit_minutes)

    rate = calendar.rate_per_billing_unit
    return max(units * rate, rate)


def compute_charge(plate_records: Iterable[ParkingSession], active_record: ActiveSession,
                   now: datetime, calendar: BusinessCalendar) -> Charge:
    """Itemized charge for closing `active_record` at `now`."""
    stale = sorted(
        (r for r in plate_records
         if r.id != active_record.id
         and r.plate_number == active_record.plate_number
         and is_carryover_outstanding(r, now, calendar)),
        key=lambda r: ensure_aware(r.entry_time),
    )

    items = []
    for record in stale:
        boundary = close_boundary_of(record.entry_time, calendar)
        items.append(CarryoverItem(
            record_id=record.id,
            entry_time=record.entry_time,
            boundary_time=boundary,
            fee=billable_fee(record.entry_time, boundary, calendar),
        ))
    carryover_total = sum((i.fee for i in items), Decimal("0"))

    current_is_carryover = is_carryover_outstanding(active_record, now, calendar)
    if current_is_carryover:
        current_end = close_boundary_of(active_record.entry_time, calendar)
    else:
        current_end = now
    current_fee = billable_fee(active_record.entry_time, current_end, calendar)

    return Charge(
        carryover_items=tuple(items),
        carryover_total=carryover_total,
        current_fee=current_fee,
        current_entry_time=active_record.entry_time,
        current_end_time=current_end,
        total_fee=carryover_total + current_fee,
        is_overnight=carryover_total > 0 or current_is_carryover,
        current_is_carryover=current_is_carryover,
    )


def can_enter(plate_records: Iterable[ParkingSession], plate: str, now: datetime,
              calendar: BusinessCalendar) -> Decision:
    """Decide whether `plate` may start a new session at `now`. Never raises."""
    records = [r for r in plate_records if r.plate_number == plate]
    active = [r for r in records if isinstance(r, ActiveSession)]
    carryover_ids = tuple(r.id for r in active if is_carryover_outstanding(r, now, calendar))
    after_open = _local(now, calendar).time() >= calendar.open_time

    for record in active:
        if record.id not in carryover_ids or not after_open:
            return Decision(
                EntryDecision.DENIED_ALREADY_PARKED,
                f"Vehicle {plate} is already parked",
                blocking_record_id=record.id,
            )

    guard = timedelta(minutes=calendar.recent_exit_minutes)
    for record in records:
        if isinstance(record, ClosedSession):
            since_exit = _local(now, calendar) - _local(record.exit_time, calendar)
            if timedelta(0) <= since_exit < guard:
                return Decision(
                    EntryDecision.DENIED_RECENT_EXIT,
                    f"Vehicle {plate} exited less than {calendar.recent_exit_minutes} minutes ago",
                    blocking_record_id=record.id,
                )

    if not is_within_business_hours(now, calendar) and not carryover_ids:
        return Decision(
            EntryDecision.DENIED_OUTSIDE_HOURS,
            f"Entry is only allowed between {calendar.open_time:%H:%M} and {calendar.close_time:%H:%M}",
        )

    return Decision(EntryDecision.ALLOWED, carryover_record_ids=carryover_ids)


def session_state(record: ParkingSession, now: datetime,
                  calendar: BusinessCalendar) -> SessionState:
    if isinstance(record, ClosedSession):
        return SessionState.EXITED
    if is_carryover_outstanding(record, now, calendar):
        return SessionState.CARRYOVER_PENDING
    return SessionState.PARKED
