from .memory_store import InMemoryDirectoryStore, InMemoryDirectoryTransaction
from .postgres_store import PostgresDirectoryStore, PostgresDirectoryTransaction

__all__ = [
    "InMemoryDirectoryStore",
    "InMemoryDirectoryTransaction",
    "PostgresDirectoryStore",
    "PostgresDirectoryTransaction",
]
