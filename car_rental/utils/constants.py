# car_rental/utils/constants.py

"""
Global constants for car sizes, paging defaults and placeholders.
These constants are imported by models, repositories and services.
"""


class CarSize:
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


ALLOWED_SIZES = {CarSize.SMALL, CarSize.MEDIUM, CarSize.LARGE}

# Fields a client may set on a car; anything else in a body is ignored
CAR_FIELDS = ("name", "price", "size", "image", "isCurrentlyRented")

# --- Paging ---
DEFAULT_PAGE_SIZE = 10
DEFAULT_PAGE_NUMBER = 1

# --- Misc ---
DEFAULT_RENT_DURATION_DAYS = 1
