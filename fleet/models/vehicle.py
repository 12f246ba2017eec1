from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class Vehicle:
    """
    Fleet vehicle. The Store keeps raw dicts; services wrap them into this
    object before handing them to callers.
    `available_for_rental` is the admin switch; date-based availability is
    computed from reservations, never stored here.
    """
    vehicle_id: str
    license_plate: str
    brand: str
    model: str
    available_for_rental: bool = True
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["Vehicle"]:
        if not d:
            return None
        return cls(
            vehicle_id=d.get("vehicle_id") or d.get("id"),
            license_plate=d.get("license_plate") or "",
            brand=d.get("brand") or "",
            model=d.get("model") or "",
            available_for_rental=bool(d.get("available_for_rental", True)),
            created_at=d.get("created_at"),
        )

    @property
    def id(self) -> str:
        return self.vehicle_id

    @property
    def label(self) -> str:
        """Human label used in notes, e.g. 'AB-123-C (Toyota Corolla)'."""
        return f"{self.license_plate} ({self.brand} {self.model})"

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> dict:
        return {
            "id": self.vehicle_id,
            "licensePlate": self.license_plate,
            "brand": self.brand,
            "model": self.model,
            "availableForRental": self.available_for_rental,
            "createdAt": self.created_at,
        }
