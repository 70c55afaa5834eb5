"""SQLite storage: conditional writes and the one-pending-task index."""

import sqlite3
from datetime import timedelta

import pytest

from app.domain.care_task import CareTask
from app.domain.exceptions import StorageError
from app.enums.care import CareType, TaskStatus
from infrastructure.database.sql_safety import safe_columns
from tests.conftest import FIXED_NOW


def _pending(plant_id, care_type=CareType.WATERING):
    return CareTask(plant_id=plant_id, task_type=care_type, due_date=FIXED_NOW)


class TestConditionalInsert:
    def test_second_insert_for_same_type_is_refused(self, seed, care_task_repo):
        plant_id = seed.create_plant()

        first = care_task_repo.create_task(_pending(plant_id))
        second = care_task_repo.create_task(_pending(plant_id))

        assert first is not None
        assert first.status is TaskStatus.PENDING
        assert second is None
        assert seed.count_tasks(plant_id) == 1

    def test_other_types_and_plants_are_independent(self, seed, care_task_repo):
        fern = seed.create_plant("Fern")
        ivy = seed.create_plant("Ivy")

        assert care_task_repo.create_task(_pending(fern)) is not None
        assert care_task_repo.create_task(_pending(fern, CareType.PRUNING)) is not None
        assert care_task_repo.create_task(_pending(ivy)) is not None

    def test_new_pending_allowed_after_resolution(self, seed, care_task_repo):
        plant_id = seed.create_plant()
        task = care_task_repo.create_task(_pending(plant_id))
        care_task_repo.update_task(task.task_id, {"status": TaskStatus.SKIPPED})

        assert care_task_repo.create_task(_pending(plant_id)) is not None

    def test_partial_unique_index_rejects_raw_duplicate(self, seed, db_connection):
        plant_id = seed.create_plant()
        seed.create_task(plant_id, "watering")

        with pytest.raises(sqlite3.IntegrityError):
            seed.create_task(plant_id, "watering")
        db_connection.rollback()

        # Resolved duplicates are fine.
        seed.create_task(plant_id, "watering", status="completed", completed_at=FIXED_NOW)
        seed.create_task(plant_id, "watering", status="completed", completed_at=FIXED_NOW)
        assert seed.count_tasks(plant_id) == 3

    def test_check_constraint_rejects_unknown_type(self, seed):
        plant_id = seed.create_plant()

        with pytest.raises(sqlite3.IntegrityError):
            seed.create_task(plant_id, "repotting")


class TestConditionalUpdate:
    def test_update_only_while_pending(self, seed, care_task_repo):
        plant_id = seed.create_plant()
        task_id = seed.create_task(plant_id, "watering")

        done = care_task_repo.update_task(task_id, {"status": TaskStatus.COMPLETED, "completed_at": FIXED_NOW})
        again = care_task_repo.update_task(task_id, {"status": TaskStatus.COMPLETED, "completed_at": FIXED_NOW})

        assert done.status is TaskStatus.COMPLETED
        assert done.completed_at == FIXED_NOW
        assert again is None

    def test_update_unknown_task(self, care_task_repo):
        assert care_task_repo.update_task(404, {"status": TaskStatus.SKIPPED}) is None

    def test_disallowed_columns_are_dropped(self, seed, care_task_repo):
        plant_id = seed.create_plant()
        task_id = seed.create_task(plant_id, "watering")

        task = care_task_repo.update_task(task_id, {"plant_id": 999, "due_date": FIXED_NOW + timedelta(days=1)})

        assert task.plant_id == plant_id
        assert task.due_date == FIXED_NOW + timedelta(days=1)


class TestAtomicCompletion:
    def test_completes_task_and_stamps_plant(self, seed, care_task_repo, plant_repo):
        plant_id = seed.create_plant()
        task_id = seed.create_task(plant_id, "pruning")

        task = care_task_repo.complete_task(task_id, FIXED_NOW)

        assert task.status is TaskStatus.COMPLETED
        assert task.completed_at == FIXED_NOW
        assert plant_repo.get_plant(plant_id).last_pruned == FIXED_NOW
        assert care_task_repo.complete_task(task_id, FIXED_NOW) is None

    def test_unknown_task(self, care_task_repo):
        assert care_task_repo.complete_task(404, FIXED_NOW) is None

    def test_plant_write_failure_rolls_back_task(self, seed, care_task_repo, plant_repo, db_connection):
        plant_id = seed.create_plant()
        task_id = seed.create_task(plant_id, "watering")
        db_connection.execute(
            "CREATE TRIGGER reject_plant_update BEFORE UPDATE ON Plants "
            "BEGIN SELECT RAISE(ABORT, 'disk I/O error'); END"
        )

        with pytest.raises(StorageError):
            care_task_repo.complete_task(task_id, FIXED_NOW)

        task = care_task_repo.get_task(task_id)
        assert task.status is TaskStatus.PENDING
        assert task.completed_at is None
        assert plant_repo.get_plant(plant_id).last_watered is None


class TestPlants:
    def test_intervals_can_be_reset(self, plant_repo):
        plant_id = plant_repo.create_plant(user_id=1, name="Fern", watering_interval_days=5)

        plant = plant_repo.set_intervals(plant_id, {"watering_interval_days": None})

        assert plant.watering_interval_days is None

    def test_list_plants_is_per_user(self, plant_repo, care_task_repo):
        plant_repo.create_plant(user_id=1, name="fern")
        plant_repo.create_plant(user_id=1, name="Aloe")
        plant_repo.create_plant(user_id=2, name="Basil")

        assert [p.name for p in plant_repo.list_plants(1)] == ["Aloe", "fern"]
        assert len(care_task_repo.list_plant_ids()) == 3

    def test_deleting_a_plant_removes_its_tasks(self, seed, db_connection):
        plant_id = seed.create_plant()
        seed.create_task(plant_id, "watering")

        db_connection.execute("DELETE FROM Plants WHERE plant_id = ?", (plant_id,))

        assert seed.count_tasks(plant_id) == 0


def test_sqlite_errors_become_storage_errors(db_handler, care_task_repo):
    with db_handler.connection() as conn:
        conn.execute("DROP TABLE CareTasks")

    with pytest.raises(StorageError):
        care_task_repo.list_pending_tasks(1)


def test_safe_columns_converts_values():
    cols = safe_columns(
        {"status": TaskStatus.SKIPPED, "completed_at": FIXED_NOW, "bogus; DROP": 1},
        {"status", "completed_at"},
    )

    assert cols == {"status": "skipped", "completed_at": "2024-06-15T12:00:00+00:00"}
