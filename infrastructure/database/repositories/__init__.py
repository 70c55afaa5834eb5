"""Repository facades exposing typed accessors over the SQLite operation mixins."""

from infrastructure.database.repositories.care_tasks import CareTaskRepository
from infrastructure.database.repositories.plants import PlantRepository

__all__ = [
    "CareTaskRepository",
    "PlantRepository",
]
