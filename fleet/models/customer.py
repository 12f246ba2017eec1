from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class Customer:
    """Renting customer; reservations reference it by id."""
    customer_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> Optional["Customer"]:
        if not d:
            return None
        return cls(
            customer_id=d.get("customer_id") or d.get("id"),
            name=d.get("name") or "",
            email=d.get("email"),
            phone=d.get("phone"),
            created_at=d.get("created_at"),
        )

    @property
    def id(self) -> str:
        return self.customer_id

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> dict:
        return {
            "id": self.customer_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "createdAt": self.created_at,
        }
