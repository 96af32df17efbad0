"""
Company repository.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from jobtrack.models import Company, now_utc
from jobtrack.repositories.base import Clock, EntityRepository
from jobtrack.storage.store import PersistentStore, StorageKeys


class CompanyRepository(EntityRepository[Company]):

    def __init__(
        self,
        store: PersistentStore,
        seed: Optional[Callable[[], List[Any]]] = None,
        clock: Clock = now_utc,
    ):
        super().__init__(store, StorageKeys.COMPANIES, Company, seed=seed, clock=clock)

    def get_by_industry(self, industry: str) -> List[Company]:
        wanted = (industry or "").lower()
        return [c for c in self.get_all() if c.industry.lower() == wanted]

    def search(self, query: str) -> List[Company]:
        """Case-insensitive substring match on name or industry."""
        q = (query or "").lower()
        return [
            c for c in self.get_all()
            if q in c.name.lower() or q in c.industry.lower()
        ]
