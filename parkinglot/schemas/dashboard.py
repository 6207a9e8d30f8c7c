# parkinglot/schemas/dashboard.py
from pydantic import BaseModel
from datetime import datetime

from parkinglot.schemas.parking_record import Money, ParkingRecordOut


class TodayRevenueOut(BaseModel):
    date: str
    total_revenue: Money


class MonthlyStatsOut(BaseModel):
    year: int
    month: int
    total_revenue: Money
    total_vehicles: int
    max_payment: Money
    min_payment: Money
    avg_payment: Money

    class Config:
        from_attributes = True


class OvernightVehicleOut(BaseModel):
    record: ParkingRecordOut
    boundary_time: datetime
    carryover_fee: Money
