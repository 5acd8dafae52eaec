"""Storage adapters for the Patient Registry.

This module contains storage adapters that implement the RecordStorePort
interface.
"""

from patient_registry.adapters.storage.memory_adapter import InMemoryRecordStore

__all__ = ["InMemoryRecordStore"]
