from flask import Blueprint, current_app, g, request

from ..utils.decorators import login_required

bp = Blueprint("cars", __name__, url_prefix="/v1/cars")


def _service():
    """The CarRentalService built by create_app()."""
    return current_app.extensions["car_rental"]


@bp.get("")
def list_cars():
    """Paginated car list; supports pageSize, pageNumber, size and availableAt."""
    return _service().list_cars(request.args)


@bp.post("")
def create_car():
    return _service().create_car(request.get_json(silent=True))


@bp.get("/<int:car_id>")
def get_car(car_id):
    return _service().get_car(car_id)


@bp.post("/<int:car_id>/rent")
@login_required
def rent_car(car_id):
    """Rent a car for the logged-in user; rentEndedAt defaults to one day after the start."""
    return _service().rent_car(car_id, g.user_id, request.get_json(silent=True))


@bp.put("/<int:car_id>")
def update_car(car_id):
    return _service().update_car(car_id, request.get_json(silent=True))


@bp.delete("/<int:car_id>")
def delete_car(car_id):
    return _service().delete_car(car_id)
