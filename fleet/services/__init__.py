from .availability_service import AvailabilityService, find_available
from .conflict_service import ConflictService
from .customer_service import CustomerService
from .reservation_service import ReservationService
from .spare_service import SpareService
from .vehicle_service import VehicleService

__all__ = [
    "AvailabilityService",
    "ConflictService",
    "CustomerService",
    "ReservationService",
    "SpareService",
    "VehicleService",
    "find_available",
]
