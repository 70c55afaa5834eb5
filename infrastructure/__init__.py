"""Infrastructure layer: SQLite persistence and audit logging."""
