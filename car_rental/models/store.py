import atexit
import logging
import os
import pickle
import threading
from datetime import datetime
from pathlib import Path

import pytz

logger = logging.getLogger(__name__)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"


def _now() -> datetime:
    return datetime.now(pytz.utc)


class Store:
    """
    In-process record storage for cars and rentals.

    Records are plain dicts keyed by integer id. When `path` is given the
    whole store is pickled to that file after every write; with `path=None`
    it lives in memory only.
    """

    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = DEFAULT_DATA_PATH):
        self.path = str(path) if path else None
        self.cars: dict[int, dict] = {}
        self.rentals: dict[int, dict] = {}
        self._next_ids = {"cars": 1, "rentals": 1}
        self._rw = threading.RLock()

        if self.path:
            logger.info("[Store] Using file: %s", self.path)
            self._load()

            # Automatically save on exit (skipped in test environments)
            if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
                atexit.register(self.save)
                Store._atexit_registered = True

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("[Store] Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.cars = data.get("cars", {}) or {}
            self.rentals = data.get("rentals", {}) or {}
            self._next_ids = data.get("next_ids") or {
                "cars": max(self.cars, default=0) + 1,
                "rentals": max(self.rentals, default=0) + 1,
            }
            logger.info("[Store] Loaded: cars=%d, rentals=%d", len(self.cars), len(self.rentals))
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            os.replace(self.path, bak)
            logger.warning("[Store] Incompatible store (%s); backed up to %s. Starting empty.",
                           type(data).__name__, bak)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "cars": self.cars,
            "rentals": self.rentals,
            "next_ids": self._next_ids,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            if self.path:
                logger.info("[Store] Saving to %s ...", self.path)
            self._dump()

    def clear(self):
        """Drop every record and restart id sequences."""
        with self._rw:
            self.cars.clear()
            self.rentals.clear()
            self._next_ids = {"cars": 1, "rentals": 1}
            self._dump()

    def _take_id(self, table: str) -> int:
        new_id = self._next_ids[table]
        self._next_ids[table] = new_id + 1
        return new_id

    # ---------- Cars ----------
    def create_car(self, data: dict) -> dict:
        """Insert a car record, assigning id and timestamps; return the stored record."""
        with self._rw:
            now = _now()
            record = dict(data)
            record["id"] = self._take_id("cars")
            record.setdefault("isCurrentlyRented", False)
            record["createdAt"] = now
            record["updatedAt"] = now
            self.cars[record["id"]] = record
            self._dump()
            return dict(record)

    def get_car(self, car_id: int) -> dict | None:
        """Get car data by id (a copy, callers may mutate it freely)."""
        with self._rw:
            record = self.cars.get(car_id)
            return dict(record) if record is not None else None

    def list_cars(self) -> list[dict]:
        """All car records ordered by id."""
        with self._rw:
            return [dict(self.cars[k]) for k in sorted(self.cars)]

    def update_car(self, car_id: int, updates: dict) -> dict | None:
        """Overwrite the given attributes; return the new record or None if absent."""
        with self._rw:
            record = self.cars.get(car_id)
            if record is None:
                return None
            record.update({k: v for k, v in updates.items() if k != "id"})
            record["updatedAt"] = _now()
            self._dump()
            return dict(record)

    def delete_car(self, car_id: int) -> bool:
        """Delete a car by id together with its rental records."""
        with self._rw:
            if car_id in self.cars:
                del self.cars[car_id]
                for rid in [k for k, r in self.rentals.items() if r.get("carId") == car_id]:
                    del self.rentals[rid]
                self._dump()
                return True
            return False

    # ---------- Rentals ----------
    def create_rental(self, data: dict) -> dict:
        """Insert a rental record, assigning id and timestamps."""
        with self._rw:
            now = _now()
            record = dict(data)
            record["id"] = self._take_id("rentals")
            record["createdAt"] = now
            record["updatedAt"] = now
            self.rentals[record["id"]] = record
            self._dump()
            return dict(record)

    def rentals_for_car(self, car_id: int) -> list[dict]:
        """Rental records of one car, oldest start first."""
        with self._rw:
            out = [dict(r) for r in self.rentals.values() if r.get("carId") == car_id]
        out.sort(key=lambda r: r["rentStartedAt"])
        return out

    def list_rentals(self) -> list[dict]:
        """All rental records, oldest start first."""
        with self._rw:
            out = [dict(r) for r in self.rentals.values()]
        out.sort(key=lambda r: r["rentStartedAt"])
        return out
