"""
Storage layer for JobTrack.

Provides SQLite-based key/value persistence with:
- Best-effort reads and writes (faults degrade to "absent")
- In-process change notification
- Snapshots and backup/restore
"""

from jobtrack.storage.store import PersistentStore, StorageKeys

__all__ = ["PersistentStore", "StorageKeys"]
