from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from car_rental.models.rental import RentalRecord
from car_rental.utils.dates import format_timestamp


@dataclass
class Car:
    """
    A rentable car. The Store keeps raw dicts; repositories wrap them into
    Car objects and attach the currently active rental as `user_car`.
    """
    id: int
    name: str
    price: float
    size: str  # "small" | "medium" | "large"
    image: str
    is_currently_rented: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_car: Optional[RentalRecord] = field(default=None, compare=False)

    @classmethod
    def from_record(cls, record: dict, user_car: Optional[RentalRecord] = None) -> "Car":
        return cls(
            id=record["id"],
            name=record["name"],
            price=record["price"],
            size=record["size"],
            image=record["image"],
            is_currently_rented=bool(record.get("isCurrentlyRented", False)),
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
            user_car=user_car,
        )

    def to_dict(self) -> dict:
        """JSON shape sent to API clients."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "size": self.size,
            "image": self.image,
            "isCurrentlyRented": self.is_currently_rented,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
            "userCar": self.user_car.to_dict() if self.user_car else None,
        }
