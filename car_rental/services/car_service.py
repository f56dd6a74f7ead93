"""Car listing, creation, rental, update and deletion logic."""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from car_rental.exceptions import (
    CarAlreadyRentedError,
    CarNotFoundError,
    InvalidBodyError,
    InvalidQueryError,
    InvalidRentalPeriodError,
    error_payload,
)
from car_rental.repositories import CarRepository, RentalRepository
from car_rental.utils.constants import (
    ALLOWED_SIZES,
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RENT_DURATION_DAYS,
)
from car_rental.utils.dates import DurationUtility, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


def _positive_int(query: Mapping, key: str, default: int) -> int:
    raw = query.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise InvalidQueryError(f"{key} must be an integer") from None
    if value < 1:
        raise InvalidQueryError(f"{key} must be greater than 0")
    return value


def page_params(query: Mapping, default_page_size: int = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    """Return (page_size, page_number) from list query parameters."""
    return (
        _positive_int(query, "pageSize", default_page_size),
        _positive_int(query, "pageNumber", DEFAULT_PAGE_NUMBER),
    )


def build_pagination_object(query: Mapping, total_count: int,
                            default_page_size: int = DEFAULT_PAGE_SIZE) -> dict:
    """
    Pagination descriptor for a list response.
    Pure: the same query and count always produce the same descriptor.
    """
    page_size, page_number = page_params(query, default_page_size)
    return {
        "page": {
            "size": page_size,
            "totalCount": total_count,
            "totalPages": math.ceil(total_count / page_size),
            "number": page_number,
        }
    }


def _json_object(body) -> dict:
    """A request body as a dict; a missing body counts as empty."""
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise InvalidBodyError(f"Request body must be a JSON object, got {type(body).__name__}")
    return dict(body)


def _serialize(entity: Any) -> Any:
    to_dict = getattr(entity, "to_dict", None)
    return to_dict() if callable(to_dict) else entity


class CarRentalService:
    """
    Request handlers for the /v1/cars resource.

    Every handler returns a (payload, status) pair. Creation failures are
    turned into a 422 response here; all other failures are raised as
    DomainError and left to the application's error handlers.
    """

    def __init__(
            self,
            car_repository: CarRepository,
            rental_repository: Optional[RentalRepository] = None,
            duration: Optional[DurationUtility] = None,
            default_page_size: int = DEFAULT_PAGE_SIZE,
            rent_duration_days: int = DEFAULT_RENT_DURATION_DAYS,
    ):
        self.car_repository = car_repository
        self.rental_repository = rental_repository
        self.duration = duration or DurationUtility()
        self.default_page_size = default_page_size
        self.rent_duration_days = rent_duration_days

    # -------- helpers --------
    def build_pagination(self, query: Mapping, total_count: int) -> dict:
        return build_pagination_object(query, total_count, self.default_page_size)

    def _list_filters(self, query: Mapping) -> dict:
        filters = {}
        size = query.get("size")
        if size:
            if size not in ALLOWED_SIZES:
                raise InvalidQueryError(f"size must be one of: {', '.join(sorted(ALLOWED_SIZES))}")
            filters["size"] = size
        available_at = query.get("availableAt")
        if available_at:
            try:
                filters["available_at"] = parse_timestamp(available_at)
            except ValueError:
                raise InvalidQueryError("availableAt must be an ISO-8601 timestamp") from None
        return filters

    def _get_car(self, car_id: int):
        car = self.car_repository.find_by_key(car_id)
        if car is None:
            raise CarNotFoundError(f"Car with id {car_id} not found")
        return car

    @staticmethod
    def _rental_time(body: Mapping, key: str):
        raw = body.get(key)
        if raw is None or raw == "":
            return None
        try:
            return parse_timestamp(raw)
        except ValueError:
            raise InvalidRentalPeriodError(f"{key} must be an ISO-8601 timestamp") from None

    # -------- handlers --------
    def list_cars(self, query: Mapping):
        page_size, page_number = page_params(query, self.default_page_size)
        offset = (page_number - 1) * page_size
        filters = self._list_filters(query)

        cars = self.car_repository.find_all(offset=offset, limit=page_size, **filters)
        total_count = self.car_repository.count(**filters)

        return {
            "cars": [_serialize(car) for car in cars],
            "meta": {"pagination": self.build_pagination(query, total_count)},
        }, 200

    def get_car(self, car_id: int):
        return _serialize(self._get_car(car_id)), 200

    def create_car(self, body: Mapping):
        try:
            car = self.car_repository.create(_json_object(body))
        except Exception as err:
            logger.warning("Car creation rejected: %s", err)
            return {"error": error_payload(err)}, 422
        logger.info("Car created: %s", getattr(car, "id", None))
        return _serialize(car), 201

    def rent_car(self, car_id: int, user_id: int, body: Mapping):
        body = _json_object(body)
        car = self._get_car(car_id)

        rent_started_at = self._rental_time(body, "rentStartedAt") or self.duration.now()
        rent_ended_at = self._rental_time(body, "rentEndedAt")
        if rent_ended_at is None:
            try:
                rent_ended_at = self.duration.add(rent_started_at, self.rent_duration_days, "day")
            except ValueError:
                raise InvalidRentalPeriodError("rentStartedAt is too late to add the default rental duration") from None

        if rent_ended_at <= rent_started_at:
            raise InvalidRentalPeriodError("rentEndedAt must be after rentStartedAt")

        active = self.rental_repository.find_one(
            car_id=car.id,
            overlapping=(rent_started_at, rent_ended_at),
        )
        if active is not None:
            raise CarAlreadyRentedError(
                f"Car {car.id} is already rented until {format_timestamp(active.rent_ended_at)}"
            )

        user_car = self.rental_repository.create({
            "userId": user_id,
            "carId": car.id,
            "rentStartedAt": rent_started_at,
            "rentEndedAt": rent_ended_at,
        })
        logger.info("Car %s rented by user %s", car.id, user_id)
        return _serialize(user_car), 201

    def update_car(self, car_id: int, body: Mapping):
        fields = _json_object(body)
        car = self._get_car(car_id)
        updated = self.car_repository.update(car, fields)
        logger.info("Car updated: %s", car_id)
        return _serialize(updated), 200

    def delete_car(self, car_id: int):
        car = self._get_car(car_id)
        self.car_repository.destroy(car)
        logger.info("Car deleted: %s", car_id)
        return "", 204
