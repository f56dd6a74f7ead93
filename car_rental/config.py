"""Configuration defaults for the Car Rental API."""
import os

from car_rental.models.store import DEFAULT_DATA_PATH
from car_rental.utils.constants import DEFAULT_PAGE_SIZE, DEFAULT_RENT_DURATION_DAYS


class Config:
    """
    Defaults for every environment. create_app() layers
    CAR_RENTAL_* environment variables on top (e.g. CAR_RENTAL_DATA_PATH,
    CAR_RENTAL_LOG_LEVEL, CAR_RENTAL_DEFAULT_PAGE_SIZE=20).
    """
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    DATA_PATH = str(DEFAULT_DATA_PATH)
    PERSIST = True
    DEFAULT_PAGE_SIZE = DEFAULT_PAGE_SIZE
    DEFAULT_RENT_DURATION_DAYS = DEFAULT_RENT_DURATION_DAYS
    LOG_LEVEL = "INFO"


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    PERSIST = False
    LOG_LEVEL = "WARNING"
