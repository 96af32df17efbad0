"""
User profile repository (singleton).
"""

from __future__ import annotations

from jobtrack.models import UserProfile
from jobtrack.repositories.base import SingletonRepository
from jobtrack.seed import default_profile
from jobtrack.storage.store import PersistentStore, StorageKeys


class ProfileRepository(SingletonRepository[UserProfile]):

    def __init__(self, store: PersistentStore):
        super().__init__(store, StorageKeys.USER_PROFILE, UserProfile, default=default_profile)
