"""
Storage implementations.

Provides implementations of the TabularStore interface used for test
configurations and per-test results tables.

Available implementations:
- JSONLTabularStore: One JSONL file per table inside a data directory
- MemoryTabularStore: Process-local tables, for tests and dry runs
"""

from .jsonl_storage import JSONLTabularStore
from .memory_storage import MemoryTabularStore

__all__ = ["JSONLTabularStore", "MemoryTabularStore"]
