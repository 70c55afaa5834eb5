"""Application services: care-task generation, reconciliation and the caller-facing facade."""
