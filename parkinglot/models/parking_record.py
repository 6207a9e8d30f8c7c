"""
Parking records table.
One row per parking session: created on entry, closed exactly once on exit.
Stale carryover sessions closed as part of another exit point at it via settled_by_id.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from parkinglot.database import Base


class ParkingRecord(Base):
    __tablename__ = "parking_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plate_number = Column(String(10), nullable=False, index=True)
    entry_time = Column(DateTime(timezone=True), nullable=False, index=True)
    exit_time = Column(DateTime(timezone=True), index=True)    # NULL while parked
    payment = Column(Numeric(10, 2))                           # set on exit
    is_overnight = Column(Boolean, default=False, nullable=False)
    settled_by_id = Column(Integer)                            # exit record that paid this carryover
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<ParkingRecord {self.id} plate={self.plate_number} exited={self.exit_time is not None}>"
