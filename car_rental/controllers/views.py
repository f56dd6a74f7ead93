from flask import Blueprint

bp = Blueprint("views", __name__)


@bp.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "OK",
        "message": "Car rental API is up and running",
    }
