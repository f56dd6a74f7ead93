import logging
from collections.abc import Mapping

from flask import Flask

from .commands import register_commands
from .config import Config
from .controllers.cars import bp as cars_bp
from .controllers.errors import bp as errors_bp
from .controllers.views import bp as views_bp
from .models.store import Store
from .repositories import StoreCarRepository, StoreRentalRepository
from .services.car_service import CarRentalService
from .utils.dates import DurationUtility


def create_app(config=None, car_repository=None, rental_repository=None):
    """
    Build the Flask app. `config` may be a class/object or a mapping applied
    over the Config defaults; CAR_RENTAL_* environment variables win over both.
    Repositories default to Store-backed ones.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if isinstance(config, Mapping):
        app.config.from_mapping(config)
    elif config is not None:
        app.config.from_object(config)
    app.config.from_prefixed_env("CAR_RENTAL")

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    store = Store(app.config["DATA_PATH"] if app.config["PERSIST"] else None)
    duration = DurationUtility()
    app.extensions["car_rental_store"] = store
    app.extensions["car_rental"] = CarRentalService(
        car_repository=car_repository or StoreCarRepository(store, clock=duration),
        rental_repository=rental_repository or StoreRentalRepository(store),
        duration=duration,
        default_page_size=int(app.config["DEFAULT_PAGE_SIZE"]),
        rent_duration_days=int(app.config["DEFAULT_RENT_DURATION_DAYS"]),
    )

    app.register_blueprint(views_bp)
    app.register_blueprint(cars_bp)
    app.register_blueprint(errors_bp)
    register_commands(app)

    return app
