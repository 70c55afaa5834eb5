"""
Plant Database Operations
=========================

CRUD helpers for the Plants table. Mixed into SQLiteDatabaseHandler.

Every sqlite3 failure is logged and re-raised as StorageError so that the
care engine can decide whether to isolate or surface it.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from app.domain.care_task import Plant
from app.domain.exceptions import StorageError
from app.utils.time import iso_now
from infrastructure.database.sql_safety import build_insert_parts, build_set_clause, safe_columns

if TYPE_CHECKING:
    from sqlite3 import Connection

logger = logging.getLogger(__name__)

PLANT_INSERT_COLUMNS = frozenset(
    {
        "user_id",
        "name",
        "species",
        "acquired_date",
        "last_watered",
        "last_fertilized",
        "last_pruned",
        "watering_interval_days",
        "fertilizing_interval_days",
        "pruning_interval_days",
    }
)

PLANT_UPDATE_COLUMNS = PLANT_INSERT_COLUMNS - {"user_id"}


class PlantOperations:
    """Plant-related CRUD helpers for database handlers."""

    def get_db(self) -> "Connection":
        """Get database connection. Must be implemented by mixing class."""
        raise NotImplementedError("Subclass must implement get_db()")

    def insert_plant(self, fields: dict[str, Any]) -> int:
        """
        Insert a plant row.

        Args:
            fields: Column values; ``user_id`` and ``name`` are required

        Returns:
            New plant_id
        """
        cols = safe_columns(fields, PLANT_INSERT_COLUMNS, context="insert_plant")
        now = iso_now()
        cols["created_at"] = now
        cols["updated_at"] = now
        columns_sql, placeholders, values = build_insert_parts(cols)
        try:
            db = self.get_db()
            cursor = db.execute(f"INSERT INTO Plants ({columns_sql}) VALUES ({placeholders})", values)
            db.commit()
        except sqlite3.Error as exc:
            logger.error("insert_plant failed: %s", exc)
            raise StorageError("Failed to create plant", detail={"name": fields.get("name")}) from exc
        logger.info("Created plant %s for user %s", cursor.lastrowid, fields.get("user_id"))
        return int(cursor.lastrowid)

    def get_plant_row(self, plant_id: int) -> Plant | None:
        try:
            row = self.get_db().execute("SELECT * FROM Plants WHERE plant_id = ?", (plant_id,)).fetchone()
        except sqlite3.Error as exc:
            logger.error("get_plant_row(%s) failed: %s", plant_id, exc)
            raise StorageError("Failed to load plant", detail={"plant_id": plant_id}) from exc
        return Plant.from_row(dict(row)) if row else None

    def update_plant_row(self, plant_id: int, fields: dict[str, Any]) -> bool:
        """
        Update plant columns.

        Returns:
            True if the plant exists, False otherwise
        """
        cols = safe_columns(fields, PLANT_UPDATE_COLUMNS, context="update_plant")
        cols["updated_at"] = iso_now()
        set_clause, values = build_set_clause(cols)
        try:
            db = self.get_db()
            cursor = db.execute(f"UPDATE Plants SET {set_clause} WHERE plant_id = ?", [*values, plant_id])
            db.commit()
        except sqlite3.Error as exc:
            logger.error("update_plant_row(%s) failed: %s", plant_id, exc)
            raise StorageError("Failed to update plant", detail={"plant_id": plant_id}) from exc
        return cursor.rowcount > 0

    def get_plants_for_user(self, user_id: int) -> list[Plant]:
        try:
            rows = self.get_db().execute(
                "SELECT * FROM Plants WHERE user_id = ? ORDER BY name COLLATE NOCASE, plant_id",
                (user_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("get_plants_for_user(%s) failed: %s", user_id, exc)
            raise StorageError("Failed to list plants", detail={"user_id": user_id}) from exc
        return [Plant.from_row(dict(row)) for row in rows]

    def get_all_plant_ids(self) -> list[int]:
        try:
            rows = self.get_db().execute("SELECT plant_id FROM Plants ORDER BY plant_id").fetchall()
        except sqlite3.Error as exc:
            logger.error("get_all_plant_ids failed: %s", exc)
            raise StorageError("Failed to list plant ids") from exc
        return [int(row[0]) for row in rows]
