from functools import wraps

from flask import g, session

from car_rental.exceptions import UnauthorizedError


def login_required(fn):
    """Require a user id in the session (set by the login flow) and expose it as g.user_id."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if "uid" not in session:
            raise UnauthorizedError("Please login first")
        g.user_id = session["uid"]
        return fn(*args, **kwargs)

    return wrapper
