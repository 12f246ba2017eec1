from dataclasses import dataclass, asdict
from typing import Optional

from fleet.models.interval import Interval
from fleet.utils.constants import ReservationStatus, ReservationType, SpareVehicleStatus


@dataclass
class Reservation:
    """
    A booking of one vehicle over an inclusive date range.

    Three kinds share this record:
      - standard: a customer rental
      - maintenance_block: the vehicle is out of service, no customer
      - replacement: a spare vehicle standing in for another reservation
        (`replacement_for_reservation_id`). A replacement with no vehicle yet
        is a placeholder (`placeholder_spare=True`).
    `end_date=None` means open-ended.
    """
    reservation_id: str
    vehicle_id: Optional[str]
    customer_id: Optional[str]
    start_date: str
    end_date: Optional[str]
    status: ReservationStatus = ReservationStatus.PENDING
    type: ReservationType = ReservationType.STANDARD
    replacement_for_reservation_id: Optional[str] = None
    spare_vehicle_status: Optional[SpareVehicleStatus] = None
    placeholder_spare: bool = False
    notes: Optional[str] = None
    total_price: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["Reservation"]:
        if not d:
            return None
        spare = d.get("spare_vehicle_status")
        price = d.get("total_price")
        return cls(
            reservation_id=d.get("reservation_id") or d.get("id"),
            vehicle_id=d.get("vehicle_id"),
            customer_id=d.get("customer_id"),
            start_date=d["start_date"],
            end_date=d.get("end_date"),
            status=ReservationStatus(d.get("status") or ReservationStatus.PENDING),
            type=ReservationType(d.get("type") or ReservationType.STANDARD),
            replacement_for_reservation_id=d.get("replacement_for_reservation_id"),
            spare_vehicle_status=SpareVehicleStatus(spare) if spare else None,
            placeholder_spare=bool(d.get("placeholder_spare", False)),
            notes=d.get("notes"),
            total_price=float(price) if price is not None else None,
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
        )

    @property
    def id(self) -> str:
        return self.reservation_id

    @property
    def interval(self) -> Interval:
        return Interval.of(self.start_date, self.end_date)

    @property
    def is_cancelled(self) -> bool:
        return self.status == ReservationStatus.CANCELLED

    @property
    def is_replacement(self) -> bool:
        return self.type == ReservationType.REPLACEMENT

    @property
    def is_maintenance(self) -> bool:
        return self.type == ReservationType.MAINTENANCE_BLOCK

    def to_dict(self) -> dict:
        """Storage shape: snake_case keys, enums as plain strings."""
        d = asdict(self)
        d["status"] = self.status.value
        d["type"] = self.type.value
        d["spare_vehicle_status"] = self.spare_vehicle_status.value if self.spare_vehicle_status else None
        return d

    def to_json(self) -> dict:
        return {
            "id": self.reservation_id,
            "vehicleId": self.vehicle_id,
            "customerId": self.customer_id,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "status": self.status.value,
            "type": self.type.value,
            "replacementForReservationId": self.replacement_for_reservation_id,
            "spareVehicleStatus": self.spare_vehicle_status.value if self.spare_vehicle_status else None,
            "placeholderSpare": self.placeholder_spare,
            "notes": self.notes,
            "totalPrice": self.total_price,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
