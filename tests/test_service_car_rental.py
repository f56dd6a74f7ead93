"""
Unit tests for CarRentalService with mocked repositories. Focus on the
request/response contract: status codes, payloads and the exact arguments
handed to the data-access layer.
"""
from datetime import timedelta
from unittest.mock import Mock

import pytest

from car_rental.services.car_service import CarRentalService
from car_rental.exceptions import (
    CarAlreadyRentedError,
    CarNotFoundError,
    InvalidBodyError,
    InvalidRentalPeriodError,
    RepositoryError,
)
from car_rental.models.car import Car
from car_rental.models.rental import RentalRecord
from car_rental.utils.dates import DurationUtility, parse_timestamp

MOCK_CAR = {
    "id": 3,
    "name": "mclaren",
    "price": 12000.5,
    "size": "small",
    "image": "gambar-mobil.jpg",
    "isCurrentlyRented": False,
    "createdAt": "2022-01-01T07:08:01.871Z",
    "updatedAt": "2022-01-01T07:08:01.871Z",
    "userCar": None,
}


class FixedClock(DurationUtility):
    """DurationUtility whose now() never moves."""

    def __init__(self, now):
        self._now = parse_timestamp(now)

    def now(self):
        return self._now


def make_car(**overrides):
    data = dict(name="pick-up", price=12000.5, size="medium", image="pickup.jpg")
    data.update(overrides)
    return Car(id=data.pop("id", 3), **data)


# -------- list --------
def test_list_cars_returns_repository_records_with_pagination():
    cars = [{**MOCK_CAR, "id": i + 1} for i in range(10)]
    car_repo = Mock()
    car_repo.find_all.return_value = cars
    car_repo.count.return_value = 10

    service = CarRentalService(car_repository=car_repo, rental_repository=Mock())
    body, status = service.list_cars({})

    car_repo.find_all.assert_called_once_with(offset=0, limit=10)
    car_repo.count.assert_called_once_with()
    assert status == 200
    assert body == {
        "cars": cars,
        "meta": {"pagination": service.build_pagination({}, 10)},
    }


def test_list_cars_computes_offset_from_page_number():
    car_repo = Mock()
    car_repo.find_all.return_value = []
    car_repo.count.return_value = 25

    service = CarRentalService(car_repository=car_repo)
    body, status = service.list_cars({"pageSize": "5", "pageNumber": "3"})

    car_repo.find_all.assert_called_once_with(offset=10, limit=5)
    assert status == 200
    assert body["meta"]["pagination"] == {
        "page": {"size": 5, "totalCount": 25, "totalPages": 5, "number": 3}
    }


def test_list_cars_forwards_filters_to_find_all_and_count():
    car_repo = Mock()
    car_repo.find_all.return_value = []
    car_repo.count.return_value = 0

    service = CarRentalService(car_repository=car_repo)
    service.list_cars({"size": "large", "availableAt": "2030-01-01T00:00:00Z"})

    expected_at = parse_timestamp("2030-01-01T00:00:00Z")
    car_repo.find_all.assert_called_once_with(offset=0, limit=10, size="large", available_at=expected_at)
    car_repo.count.assert_called_once_with(size="large", available_at=expected_at)


# -------- create --------
def test_create_car_returns_201_and_created_entity():
    body = {"name": "pick-up", "price": 12000.5, "size": "medium", "image": "pickup.jpg"}
    car = make_car()
    car_repo = Mock()
    car_repo.create.return_value = car

    service = CarRentalService(car_repository=car_repo)
    payload, status = service.create_car(body)

    car_repo.create.assert_called_once_with(body)
    assert status == 201
    assert payload == car.to_dict()


def test_create_car_rejection_becomes_422_with_error_name_and_message():
    body = {
        "name": "pick-up",
        "price": 12000.5,
        "size": "medium",
        "image": "pickup.jpg",
        "isCurrentlyRented": False,
    }
    car_repo = Mock()
    car_repo.create.side_effect = RepositoryError("error", kind="Error")

    service = CarRentalService(car_repository=car_repo)
    payload, status = service.create_car(body)

    car_repo.create.assert_called_once_with(body)
    assert status == 422
    assert payload == {"error": {"name": "Error", "message": "error"}}


def test_create_car_maps_foreign_exceptions_by_class_name():
    car_repo = Mock()
    car_repo.create.side_effect = ValueError("bad price")

    service = CarRentalService(car_repository=car_repo)
    payload, status = service.create_car({"name": "x"})

    assert status == 422
    assert payload == {"error": {"name": "ValueError", "message": "bad price"}}


# -------- rent --------
def _rental_repo(existing=None):
    repo = Mock()
    repo.find_one.return_value = existing

    def create(fields):
        return RentalRecord(
            id=3,
            user_id=fields["userId"],
            car_id=fields["carId"],
            rent_started_at=fields["rentStartedAt"],
            rent_ended_at=fields["rentEndedAt"],
        )

    repo.create.side_effect = create
    return repo


def test_rent_car_defaults_end_to_one_day_after_start():
    rent_started_at = "2022-11-28T08:02:01.861Z"
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car(id=3)
    rental_repo = _rental_repo()

    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo)
    payload, status = service.rent_car(3, 3, {"rentStartedAt": rent_started_at, "rentEndedAt": None})

    start = parse_timestamp(rent_started_at)
    rental_repo.create.assert_called_once_with({
        "userId": 3,
        "carId": 3,
        "rentStartedAt": start,
        "rentEndedAt": start + timedelta(days=1),
    })
    assert status == 201
    assert payload["rentStartedAt"] == "2022-11-28T08:02:01.861Z"
    assert payload["rentEndedAt"] == "2022-11-29T08:02:01.861Z"
    assert payload["userId"] == 3
    assert payload["carId"] == 3


def test_rent_car_without_start_uses_current_time():
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car(id=7)
    rental_repo = _rental_repo()
    clock = FixedClock("2030-05-01T10:00:00Z")

    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo, duration=clock)
    payload, status = service.rent_car(7, 1, {})

    assert status == 201
    assert payload["rentStartedAt"] == "2030-05-01T10:00:00.000Z"
    assert payload["rentEndedAt"] == "2030-05-02T10:00:00.000Z"


def test_rent_car_uses_configured_default_duration():
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car()
    service = CarRentalService(
        car_repository=car_repo,
        rental_repository=_rental_repo(),
        rent_duration_days=3,
    )

    payload, _ = service.rent_car(3, 1, {"rentStartedAt": "2030-05-01T00:00:00Z"})

    assert payload["rentEndedAt"] == "2030-05-04T00:00:00.000Z"


def test_rent_car_checks_for_overlapping_rental_of_the_same_car():
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car(id=3)
    rental_repo = _rental_repo()

    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo)
    service.rent_car(3, 1, {
        "rentStartedAt": "2030-05-01T00:00:00Z",
        "rentEndedAt": "2030-05-03T00:00:00Z",
    })

    rental_repo.find_one.assert_called_once_with(
        car_id=3,
        overlapping=(parse_timestamp("2030-05-01T00:00:00Z"), parse_timestamp("2030-05-03T00:00:00Z")),
    )


def test_rent_missing_car_is_delegated_as_not_found():
    car_repo = Mock()
    car_repo.find_by_key.return_value = None
    rental_repo = _rental_repo()

    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo)
    with pytest.raises(CarNotFoundError):
        service.rent_car(99, 1, {})
    rental_repo.create.assert_not_called()


def test_rent_already_rented_car_is_delegated_as_conflict():
    existing = RentalRecord(
        id=1, user_id=2, car_id=3,
        rent_started_at=parse_timestamp("2030-05-01T00:00:00Z"),
        rent_ended_at=parse_timestamp("2030-05-02T00:00:00Z"),
    )
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car(id=3)
    rental_repo = _rental_repo(existing=existing)

    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo)
    with pytest.raises(CarAlreadyRentedError):
        service.rent_car(3, 1, {"rentStartedAt": "2030-05-01T12:00:00Z"})
    rental_repo.create.assert_not_called()


@pytest.mark.parametrize("body", [
    {"rentStartedAt": "2030-05-02T00:00:00Z", "rentEndedAt": "2030-05-01T00:00:00Z"},
    {"rentStartedAt": "2030-05-02T00:00:00Z", "rentEndedAt": "2030-05-02T00:00:00Z"},
    {"rentStartedAt": "next tuesday"},
])
def test_rent_with_invalid_period_is_rejected(body):
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car()
    service = CarRentalService(car_repository=car_repo, rental_repository=_rental_repo())

    with pytest.raises(InvalidRentalPeriodError):
        service.rent_car(3, 1, body)


# -------- update --------
def test_update_car_passes_body_fields_and_returns_200():
    body = {
        "name": "pick-up",
        "price": 12000.5,
        "size": "medium",
        "image": "pickup.jpg",
        "isCurrentlyRented": False,
    }
    car = make_car()
    car_repo = Mock()
    car_repo.find_by_key.return_value = car
    car_repo.update.return_value = car

    service = CarRentalService(car_repository=car_repo)
    payload, status = service.update_car(3, body)

    car_repo.find_by_key.assert_called_once_with(3)
    car_repo.update.assert_called_once_with(car, body)
    assert status == 200
    assert payload == car.to_dict()


def test_update_missing_car_raises_not_found():
    car_repo = Mock()
    car_repo.find_by_key.return_value = None

    service = CarRentalService(car_repository=car_repo)
    with pytest.raises(CarNotFoundError):
        service.update_car(3, {"name": "x"})
    car_repo.update.assert_not_called()


# -------- delete --------
def test_delete_car_destroys_entity_and_returns_204():
    car = make_car()
    car_repo = Mock()
    car_repo.find_by_key.return_value = car

    service = CarRentalService(car_repository=car_repo)
    payload, status = service.delete_car(3)

    car_repo.destroy.assert_called_once_with(car)
    assert status == 204
    assert payload == ""


def test_get_car_serializes_entity():
    car = make_car()
    car_repo = Mock()
    car_repo.find_by_key.return_value = car

    service = CarRentalService(car_repository=car_repo)
    payload, status = service.get_car(3)

    assert status == 200
    assert payload["name"] == "pick-up"
    assert payload["userCar"] is None


def test_non_object_bodies_are_rejected_before_touching_repositories():
    car_repo = Mock()
    rental_repo = _rental_repo()
    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo)

    payload, status = service.create_car([1, 2])
    assert status == 422
    assert payload["error"]["name"] == "InvalidBodyError"

    with pytest.raises(InvalidBodyError):
        service.update_car(3, [1, 2])
    with pytest.raises(InvalidBodyError):
        service.rent_car(3, 1, "tomorrow")

    car_repo.create.assert_not_called()
    car_repo.update.assert_not_called()
    rental_repo.create.assert_not_called()


def test_rent_default_end_past_calendar_limit_is_invalid_period():
    car_repo = Mock()
    car_repo.find_by_key.return_value = make_car()
    rental_repo = _rental_repo()
    service = CarRentalService(car_repository=car_repo, rental_repository=rental_repo)

    with pytest.raises(InvalidRentalPeriodError):
        service.rent_car(3, 1, {"rentStartedAt": "9999-12-31T12:00:00Z"})
    rental_repo.create.assert_not_called()
