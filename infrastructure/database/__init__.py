"""SQLite database handler, operation mixins and repositories."""
