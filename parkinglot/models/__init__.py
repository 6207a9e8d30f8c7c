# Parking Lot: Database Models
# Import all models here for SQLAlchemy discovery

from parkinglot.models.parking_record import ParkingRecord   # noqa
