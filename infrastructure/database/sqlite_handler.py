import logging
import shutil
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.care_tasks import CareTaskOperations
from infrastructure.database.ops.plants import PlantOperations

logger = logging.getLogger(__name__)


class SQLiteDatabaseHandler(
    PlantOperations,
    CareTaskOperations,
):
    """Thread-safe SQLite handler decoupled from Flask globals."""

    def __init__(self, database_path: str, *, cache_size_kb: int = 8_000) -> None:
        self._database_path = database_path
        self._cache_size_kb = cache_size_kb
        self._local = threading.local()

        # Ensure the directory for the database file exists
        db_path = Path(database_path)
        if database_path != ":memory:" and not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Created database directory: %s", db_path.parent)

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask) -> None:
        """Release each request thread's connection when its app context ends."""
        app.teardown_appcontext(self.close_db)

    def get_db(self) -> sqlite3.Connection:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                else:
                    raise
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Configure the SQLite connection.

        - WAL mode: concurrent readers while one request writes
        - NORMAL synchronous: safe with WAL
        - foreign keys: CareTasks rows follow their plant
        - busy timeout: two tabs writing at once wait instead of failing
        """
        connection.execute("PRAGMA journal_mode=WAL")
        connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute("PRAGMA foreign_keys=ON")
        connection.execute("PRAGMA busy_timeout=5000")
        connection.execute(f"PRAGMA cache_size=-{int(self._cache_size_kb)}")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        finally:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        with self.connection() as db:
            db.execute(
                """
                CREATE TABLE IF NOT EXISTS Plants (
                    plant_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    species TEXT,
                    acquired_date TEXT,
                    last_watered TEXT,
                    last_fertilized TEXT,
                    last_pruned TEXT,
                    watering_interval_days INTEGER,
                    fertilizing_interval_days INTEGER,
                    pruning_interval_days INTEGER,
                    created_at TEXT,
                    updated_at TEXT
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_plants_user ON Plants(user_id)")

            db.execute(
                """
                CREATE TABLE IF NOT EXISTS CareTasks (
                    task_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    plant_id INTEGER NOT NULL,
                    task_type TEXT NOT NULL
                        CHECK (task_type IN ('watering', 'fertilizing', 'pruning')),
                    due_date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'completed', 'skipped')),
                    last_care_date TEXT,
                    completed_at TEXT,
                    created_at TEXT,
                    updated_at TEXT,
                    FOREIGN KEY (plant_id) REFERENCES Plants(plant_id) ON DELETE CASCADE
                )
                """
            )
            db.execute("CREATE INDEX IF NOT EXISTS idx_caretasks_plant ON CareTasks(plant_id)")
            db.execute("CREATE INDEX IF NOT EXISTS idx_caretasks_due_date ON CareTasks(due_date)")
            db.execute("CREATE INDEX IF NOT EXISTS idx_caretasks_status ON CareTasks(status)")
            # At most one pending task per (plant, care type).
            db.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS idx_caretasks_one_pending
                ON CareTasks(plant_id, task_type) WHERE status = 'pending'
                """
            )
        logger.debug("Database schema ready at %s", self._database_path)
