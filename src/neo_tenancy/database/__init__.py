"""Database connection management for neo-tenancy."""

from .connection import (
    DatabaseManager,
    get_database,
    init_database,
    close_database,
    parse_row_count,
)

__all__ = [
    "DatabaseManager",
    "get_database",
    "init_database",
    "close_database",
    "parse_row_count",
]
