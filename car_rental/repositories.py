"""
Data-access interfaces used by the services, and their Store-backed
implementations.

Services only depend on the Protocols; tests hand in fakes with the same
methods.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, List, Optional, Protocol

from car_rental.exceptions import CarValidationError
from car_rental.models.car import Car
from car_rental.models.rental import RentalRecord
from car_rental.models.store import Store
from car_rental.utils.constants import ALLOWED_SIZES, CAR_FIELDS
from car_rental.utils.dates import DurationUtility, parse_timestamp


class CarRepository(Protocol):
    def find_all(self, offset: int = 0, limit: Optional[int] = None, **filters: Any) -> List[Any]: ...

    def count(self, **filters: Any) -> int: ...

    def find_by_key(self, car_id: int) -> Optional[Any]: ...

    def create(self, fields: dict) -> Any: ...

    def update(self, car: Any, fields: dict) -> Any: ...

    def destroy(self, car: Any) -> None: ...


class RentalRepository(Protocol):
    def find_one(self, **filters: Any) -> Optional[Any]: ...

    def create(self, fields: dict) -> Any: ...


# -------- validators / normalizers --------
def _to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid (booleans included)."""
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_car_fields(fields: dict, partial: bool = False) -> dict:
    """
    Check car attributes and return them normalized.
    With `partial=False` (create) name, price, size and image are required.
    """
    unknown = sorted(set(fields) - set(CAR_FIELDS))
    if unknown:
        raise CarValidationError(f"Unknown car attribute(s): {', '.join(unknown)}")

    if not partial:
        missing = [k for k in ("name", "price", "size", "image") if fields.get(k) in (None, "")]
        if missing:
            raise CarValidationError(f"Missing required car attribute(s): {', '.join(missing)}")

    clean = {}
    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise CarValidationError("Car name must be a non-empty string")
        clean["name"] = name.strip()

    if "price" in fields:
        price = _to_float_safe(fields["price"])
        if price is None or not math.isfinite(price) or price < 0:
            raise CarValidationError("Car price must be a finite, non-negative number")
        clean["price"] = price

    if "size" in fields:
        size = fields["size"]
        if size not in ALLOWED_SIZES:
            raise CarValidationError(f"Car size must be one of: {', '.join(sorted(ALLOWED_SIZES))}")
        clean["size"] = size

    if "image" in fields:
        image = fields["image"]
        if not isinstance(image, str) or not image.strip():
            raise CarValidationError("Car image must be a non-empty string")
        clean["image"] = image.strip()

    if "isCurrentlyRented" in fields:
        flag = fields["isCurrentlyRented"]
        if not isinstance(flag, bool):
            raise CarValidationError("isCurrentlyRented must be a boolean")
        clean["isCurrentlyRented"] = flag

    return clean


class StoreCarRepository:
    """CarRepository over the in-process Store."""

    def __init__(self, store: Store, clock: Optional[DurationUtility] = None):
        self.store = store
        self.clock = clock or DurationUtility()

    def _current_rental(self, car_id: int, at: datetime) -> Optional[RentalRecord]:
        for r in self.store.rentals_for_car(car_id):
            rental = RentalRecord.from_record(r)
            if rental.covers(at):
                return rental
        return None

    def _to_car(self, record: dict) -> Car:
        return Car.from_record(record, user_car=self._current_rental(record["id"], self.clock.now()))

    def _matching(self, size: Optional[str] = None, available_at=None) -> List[dict]:
        records = self.store.list_cars()
        if size:
            records = [r for r in records if r.get("size") == size]
        if available_at is not None:
            instant = parse_timestamp(available_at)
            records = [r for r in records if self._current_rental(r["id"], instant) is None]
        return records

    def find_all(self, offset: int = 0, limit: Optional[int] = None,
                 size: Optional[str] = None, available_at=None) -> List[Car]:
        records = self._matching(size=size, available_at=available_at)
        end = None if limit is None else offset + limit
        return [self._to_car(r) for r in records[offset:end]]

    def count(self, size: Optional[str] = None, available_at=None) -> int:
        return len(self._matching(size=size, available_at=available_at))

    def find_by_key(self, car_id: int) -> Optional[Car]:
        record = self.store.get_car(car_id)
        if record is None:
            return None
        return self._to_car(record)

    def create(self, fields: dict) -> Car:
        record = self.store.create_car(validate_car_fields(fields))
        return self._to_car(record)

    def update(self, car: Car, fields: dict) -> Car:
        record = self.store.update_car(car.id, validate_car_fields(fields, partial=True))
        if record is None:
            raise CarValidationError(f"Car {car.id} no longer exists")
        return self._to_car(record)

    def destroy(self, car: Car) -> None:
        self.store.delete_car(car.id)


class StoreRentalRepository:
    """RentalRepository over the in-process Store."""

    def __init__(self, store: Store):
        self.store = store

    def find_one(self, car_id: Optional[int] = None, user_id: Optional[int] = None,
                 overlapping: Optional[tuple] = None) -> Optional[RentalRecord]:
        """
        First rental matching every given filter.
        `overlapping` is a (start, end) pair; a rental matches when its
        half-open period intersects [start, end).
        """
        if car_id is not None:
            candidates = self.store.rentals_for_car(car_id)
        else:
            candidates = self.store.list_rentals()

        for r in candidates:
            rental = RentalRecord.from_record(r)
            if user_id is not None and rental.user_id != user_id:
                continue
            if overlapping is not None and not rental.overlaps(*overlapping):
                continue
            return rental
        return None

    def create(self, fields: dict) -> RentalRecord:
        record = self.store.create_rental({
            "userId": fields["userId"],
            "carId": fields["carId"],
            "rentStartedAt": parse_timestamp(fields["rentStartedAt"]),
            "rentEndedAt": parse_timestamp(fields["rentEndedAt"]),
        })
        return RentalRecord.from_record(record)
