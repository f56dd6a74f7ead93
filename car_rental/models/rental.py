from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from car_rental.utils.dates import format_timestamp


@dataclass
class RentalRecord:
    """
    A user's rental of a car (the "userCar" of the JSON API).
    The period is half-open: [rent_started_at, rent_ended_at).
    """
    id: int
    user_id: int
    car_id: int
    rent_started_at: datetime
    rent_ended_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: dict) -> "RentalRecord":
        return cls(
            id=record["id"],
            user_id=record["userId"],
            car_id=record["carId"],
            rent_started_at=record["rentStartedAt"],
            rent_ended_at=record["rentEndedAt"],
            created_at=record.get("createdAt"),
            updated_at=record.get("updatedAt"),
        )

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Overlap rule for half-open ranges: a_start < b_end and b_start < a_end."""
        return self.rent_started_at < end and start < self.rent_ended_at

    def covers(self, instant: datetime) -> bool:
        return self.rent_started_at <= instant < self.rent_ended_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "carId": self.car_id,
            "rentStartedAt": format_timestamp(self.rent_started_at),
            "rentEndedAt": format_timestamp(self.rent_ended_at),
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
