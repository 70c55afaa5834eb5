"""
Shared test fixtures for the plant care test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- Care engine services driven by a controllable clock
- An in-memory storage fake without conditional writes
- Helper utilities for seeding test data

Usage:
    def test_example(seed, care_service):
        plant_id = seed.create_plant("Fern")
        tasks = care_service.ensure_tasks_up_to_date(plant_id)
"""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.domain.care_task import CareTask, Plant
from app.domain.exceptions import NotFoundError, StorageError
from app.enums.care import CareType, TaskStatus
from app.services.application.care_task_service import CareTaskService
from app.services.application.task_generator import CareTaskGenerator
from app.services.application.task_reconciler import CareTaskReconciler
from app.utils.time import to_iso
from infrastructure.database.repositories.care_tasks import CareTaskRepository
from infrastructure.database.repositories.plants import PlantRepository

# ---------------------------------------------------------------------------
# Database & Repositories
# ---------------------------------------------------------------------------
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)

# Saturday noon UTC; far from midnight so calendar-date tests are unambiguous.
FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_db()


@pytest.fixture()
def db_connection(db_handler):
    """Raw sqlite3 connection for direct SQL in tests."""
    with db_handler.connection() as conn:
        yield conn


# ========================== Repository Fixtures ============================


@pytest.fixture()
def plant_repo(db_handler):
    """PlantRepository backed by the in-memory DB."""
    return PlantRepository(db_handler)


@pytest.fixture()
def care_task_repo(db_handler):
    """CareTaskRepository backed by the in-memory DB."""
    return CareTaskRepository(db_handler)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def mock_audit_logger():
    """Mock AuditLogger."""
    logger = MagicMock()
    logger.log_care_action = MagicMock()
    return logger


@pytest.fixture()
def generator(care_task_repo, clock):
    """CareTaskGenerator with default intervals (2/30/90 days), UTC."""
    return CareTaskGenerator(care_task_repo, clock=clock)


@pytest.fixture()
def reconciler(care_task_repo, clock, mock_audit_logger):
    return CareTaskReconciler(care_task_repo, clock=clock, audit_logger=mock_audit_logger)


@pytest.fixture()
def care_service(care_task_repo, generator, reconciler, clock):
    return CareTaskService(care_task_repo, generator, reconciler, clock=clock)


# ========================== Storage Fake ===================================


class InMemoryCareStorage:
    """Storage collaborator without atomic conditional writes.

    ``create_task`` always inserts, so duplicates are possible and the
    generator must de-duplicate on read. ``fail_create_for`` makes
    ``create_task`` raise StorageError for the given care types.
    """

    supports_conditional_writes = False

    def __init__(self) -> None:
        self.plants: dict[int, Plant] = {}
        self.tasks: dict[int, CareTask] = {}
        self.fail_create_for: set[CareType] = set()
        self._ids = itertools.count(1)

    def add_plant(self, plant: Plant) -> Plant:
        self.plants[plant.plant_id] = plant
        return plant

    def add_task(self, task: CareTask) -> CareTask:
        task.task_id = next(self._ids)
        self.tasks[task.task_id] = task
        return task

    def get_plant(self, plant_id: int) -> Plant | None:
        return self.plants.get(plant_id)

    def list_pending_tasks(self, plant_id: int) -> list[CareTask]:
        return [t for t in self.tasks.values() if t.plant_id == plant_id and t.is_pending]

    def create_task(self, task: CareTask) -> CareTask | None:
        if task.task_type in self.fail_create_for:
            raise StorageError("simulated write failure", detail={"task_type": task.task_type.value})
        task.created_at = task.created_at or FIXED_NOW
        return self.add_task(task)

    def get_task(self, task_id: int) -> CareTask | None:
        return self.tasks.get(task_id)

    def update_task(
        self,
        task_id: int,
        fields: dict[str, Any],
        *,
        expected_status: TaskStatus = TaskStatus.PENDING,
    ) -> CareTask | None:
        task = self.tasks.get(task_id)
        if task is None or task.status is not expected_status:
            return None
        for key, value in fields.items():
            setattr(task, key, value)
        return task

    def complete_task(self, task_id: int, completed_at: datetime) -> CareTask | None:
        task = self.tasks.get(task_id)
        if task is None or not task.is_pending:
            return None
        plant = self.plants.get(task.plant_id)
        if plant is None:
            raise NotFoundError(f"Plant {task.plant_id} not found", detail={"plant_id": task.plant_id})
        task.status = TaskStatus.COMPLETED
        task.completed_at = completed_at
        setattr(plant, task.task_type.last_care_field, completed_at)
        return task

    def list_resolved_tasks_by_user(self, user_id: int, limit: int = 100) -> list[CareTask]:
        owned = {pid for pid, p in self.plants.items() if p.user_id == user_id}
        resolved = [t for t in self.tasks.values() if t.plant_id in owned and t.status.is_resolved]
        return resolved[:limit]

    def list_plants_by_user(self, user_id: int) -> list[Plant]:
        return [p for p in self.plants.values() if p.user_id == user_id]

    def list_plant_ids(self) -> list[int]:
        return sorted(self.plants)


@pytest.fixture()
def memory_storage():
    return InMemoryCareStorage()


# ========================== Seed Data Helpers ==============================


class SeedData:
    """Helper to create commonly needed test data.

    Usage in tests::

        def test_something(seed):
            plant_id = seed.create_plant("Fern", last_watered=FIXED_NOW)
            task_id = seed.create_task(plant_id, "watering", due_date=FIXED_NOW)
    """

    def __init__(self, db_handler: SQLiteDatabaseHandler):
        self._db = db_handler

    def create_plant(
        self,
        name: str = "Test Fern",
        *,
        user_id: int = 1,
        species: str | None = "Nephrolepis exaltata",
        acquired_date: datetime | None = FIXED_NOW,
        last_watered: datetime | None = None,
        last_fertilized: datetime | None = None,
        last_pruned: datetime | None = None,
        watering_interval_days: int | None = None,
    ) -> int:
        """Create a plant and return its ID."""
        with self._db.connection() as conn:
            cur = conn.execute(
                """INSERT INTO Plants (user_id, name, species, acquired_date,
                   last_watered, last_fertilized, last_pruned, watering_interval_days,
                   created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    user_id,
                    name,
                    species,
                    to_iso(acquired_date),
                    to_iso(last_watered),
                    to_iso(last_fertilized),
                    to_iso(last_pruned),
                    watering_interval_days,
                    to_iso(FIXED_NOW),
                    to_iso(FIXED_NOW),
                ),
            )
            return cur.lastrowid

    def create_task(
        self,
        plant_id: int,
        task_type: str = "watering",
        *,
        due_date: datetime = FIXED_NOW,
        status: str = "pending",
        completed_at: datetime | None = None,
    ) -> int:
        """Insert a care task row directly and return its ID."""
        with self._db.connection() as conn:
            cur = conn.execute(
                """INSERT INTO CareTasks (plant_id, task_type, due_date, status,
                   completed_at, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    plant_id,
                    task_type,
                    to_iso(due_date),
                    status,
                    to_iso(completed_at),
                    to_iso(FIXED_NOW),
                    to_iso(completed_at or FIXED_NOW),
                ),
            )
            return cur.lastrowid

    def count_tasks(self, plant_id: int, *, status: str | None = None) -> int:
        sql = "SELECT COUNT(*) FROM CareTasks WHERE plant_id = ?"
        params: list[Any] = [plant_id]
        if status is not None:
            sql += " AND status = ?"
            params.append(status)
        with self._db.connection() as conn:
            return conn.execute(sql, params).fetchone()[0]


@pytest.fixture()
def seed(db_handler):
    """SeedData helper for quickly populating the test database."""
    return SeedData(db_handler)
