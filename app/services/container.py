from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config import AppConfig
from app.services.application.care_task_service import CareTaskService
from app.services.application.task_generator import CareTaskGenerator
from app.services.application.task_reconciler import CareTaskReconciler
from infrastructure.database.repositories.care_tasks import CareTaskRepository
from infrastructure.database.repositories.plants import PlantRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    plant_repo: PlantRepository
    care_task_repo: CareTaskRepository
    audit_logger: AuditLogger
    task_generator: CareTaskGenerator
    task_reconciler: CareTaskReconciler
    care_task_service: CareTaskService

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Create the database handler, repositories and care services."""
        database = SQLiteDatabaseHandler(config.database_path, cache_size_kb=config.db_cache_size_kb)
        database.create_tables()

        plant_repo = PlantRepository(database)
        care_task_repo = CareTaskRepository(database)
        audit_logger = AuditLogger(config.audit_log_path)

        tz = config.care_tzinfo
        generator = CareTaskGenerator(care_task_repo, config.care_policy(), tz=tz)
        reconciler = CareTaskReconciler(care_task_repo, tz=tz, audit_logger=audit_logger)
        care_task_service = CareTaskService(care_task_repo, generator, reconciler, tz=tz)

        logger.info(
            "Service container ready (database=%s, timezone=%s)",
            config.database_path,
            config.timezone,
        )
        return cls(
            config=config,
            database=database,
            plant_repo=plant_repo,
            care_task_repo=care_task_repo,
            audit_logger=audit_logger,
            task_generator=generator,
            task_reconciler=reconciler,
            care_task_service=care_task_service,
        )

    def shutdown(self) -> None:
        """Release the calling thread's database connection."""
        self.database.close_db()
        logger.info("Service container shut down")
