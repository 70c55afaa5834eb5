"""Table-level SQLite operation mixins composed into SQLiteDatabaseHandler."""
