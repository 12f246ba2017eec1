import atexit
import copy
import logging
import os
import pickle
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path

from fleet.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"

TABLES = ("vehicles", "customers", "reservations")


class Store:
    """
    In-process data store: three dicts keyed by uuid strings, pickled to disk.

    Every mutation runs under one re-entrant lock. `transaction()` holds that
    lock across a whole check-then-write sequence, so a conflict check and the
    insert that depends on it can never interleave with another writer.
    `path=None` keeps everything in memory (tests).
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path) if path else None
        self.vehicles: dict[str, dict] = {}
        self.customers: dict[str, dict] = {}
        self.reservations: dict[str, dict] = {}
        self._rw = threading.RLock()
        self._depth = 0

        logger.info("[Store] Using file: %s", self.path or "<memory>")
        self._load()

        # Automatically save on exit (skipped in test environments)
        if self.path and not Store._atexit_registered and os.getenv("APP_ENV") != "test":
            atexit.register(self.save)
            Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = DEFAULT_DATA_PATH):
        """Return the global singleton instance of Store, creating it on first use."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path)
        return cls._inst

    @classmethod
    def reset_instance(cls, store: "Store | None" = None):
        """Swap the global instance (None drops it); returns the new one."""
        with cls._inst_lock:
            cls._inst = store
        return store

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("[Store] Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            for table in TABLES:
                setattr(self, table, data.get(table, {}) or {})
            logger.info("[Store] Loaded: vehicles=%d, customers=%d, reservations=%d",
                        len(self.vehicles), len(self.customers), len(self.reservations))
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                logger.warning("[Store] Incompatible store (%s); backed up to %s. Starting empty.",
                               type(data).__name__, bak)
            except OSError as e:
                logger.error("[Store] Backup failed: %s", e)

    def _snapshot(self) -> dict:
        return {table: getattr(self, table) for table in TABLES}

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "wb") as f:
            pickle.dump(self._snapshot(), f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def _commit(self):
        """Persist now unless an outer transaction will do it on exit."""
        if self._depth == 0:
            self._dump()

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.info("[Store] Saving to %s ...", self.path or "<memory>")
            self._dump()

    def clear(self):
        with self._rw:
            for table in TABLES:
                getattr(self, table).clear()
            self._commit()

    @contextmanager
    def transaction(self):
        """
        Serialize a read-check-write sequence.
        On an exception the tables are restored to their state at entry and
        nothing is written; otherwise the outermost block persists once.
        """
        with self._rw:
            backup = copy.deepcopy(self._snapshot()) if self._depth == 0 else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if backup is not None:
                    for table, rows in backup.items():
                        setattr(self, table, rows)
                    logger.info("[Store] Transaction rolled back")
                raise
            self._depth -= 1
            if self._depth == 0:
                self._dump()

    # ---------- Vehicles ----------
    def find_vehicle_by_plate(self, plate: str) -> dict | None:
        """Case-insensitive lookup by license plate."""
        key = (plate or "").strip().upper()
        for v in self.vehicles.values():
            if (v.get("license_plate") or "").upper() == key:
                return v
        return None

    def create_vehicle(self, data: dict) -> str:
        """Create a new vehicle record and return its ID."""
        with self._rw:
            vid = str(uuid.uuid4())
            self.vehicles[vid] = {
                "vehicle_id": vid,
                "license_plate": (data.get("license_plate") or "").strip().upper(),
                "brand": data.get("brand", ""),
                "model": data.get("model", ""),
                "available_for_rental": bool(data.get("available_for_rental", True)),
                "created_at": utc_now_iso(),
            }
            self._commit()
            return vid

    def get_vehicle(self, vehicle_id: str) -> dict | None:
        """Get vehicle information by ID."""
        return self.vehicles.get(str(vehicle_id))

    def update_vehicle(self, vehicle_id: str, **updates) -> bool:
        """Update vehicle attributes; return True if updated successfully."""
        with self._rw:
            vid = str(vehicle_id)
            if vid not in self.vehicles:
                return False
            self.vehicles[vid].update({k: v for k, v in updates.items() if v is not None})
            self._commit()
            return True

    def delete_vehicle(self, vehicle_id: str) -> bool:
        """Delete a vehicle by ID."""
        with self._rw:
            if vehicle_id in self.vehicles:
                del self.vehicles[vehicle_id]
                self._commit()
                return True
            return False

    # ---------- Customers ----------
    def create_customer(self, data: dict) -> str:
        with self._rw:
            cid = str(uuid.uuid4())
            self.customers[cid] = {
                "customer_id": cid,
                "name": data.get("name", ""),
                "email": data.get("email"),
                "phone": data.get("phone"),
                "created_at": utc_now_iso(),
            }
            self._commit()
            return cid

    def get_customer(self, customer_id: str) -> dict | None:
        return self.customers.get(str(customer_id))

    # ---------- Reservations ----------
    def create_reservation(self, r: dict) -> str:
        """Create a new reservation record."""
        with self._rw:
            rid = str(uuid.uuid4())
            now = utc_now_iso()
            r = dict(r)
            r["reservation_id"] = rid
            r.setdefault("created_at", now)
            r["updated_at"] = now
            self.reservations[rid] = r
            self._commit()
            return rid

    def get_reservation(self, rid: str) -> dict | None:
        return self.reservations.get(str(rid))

    def update_reservation(self, rid: str, updates: dict) -> bool:
        """Update an existing reservation by ID."""
        with self._rw:
            if rid in self.reservations:
                self.reservations[rid].update(updates)
                self.reservations[rid]["updated_at"] = utc_now_iso()
                self._commit()
                return True
            return False
