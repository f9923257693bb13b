"""Concrete health data store and provider implementations.

Available stores:
    InMemoryHealthDataStore — list-backed store for development and tests
    PostgresHealthDataStore — read-only queries over the health_records table
"""

from src.datasources.stores.memory import (
    InMemoryHealthDataStore,
    StaticPriorityListProvider,
    StaticWriteAccessReader,
)
from src.datasources.stores.postgres import (
    PostgresHealthDataStore,
    PostgresPriorityListProvider,
    PostgresWriteAccessReader,
)

__all__ = [
    "InMemoryHealthDataStore",
    "StaticPriorityListProvider",
    "StaticWriteAccessReader",
    "PostgresHealthDataStore",
    "PostgresPriorityListProvider",
    "PostgresWriteAccessReader",
]
