"""Contracts for the services the alignment engine depends on."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Union

from .models import Candidate

CandidateRow = Union[Candidate, Dict[str, Any]]


class EmbeddingProvider(ABC):
    """Turns scene text into a fixed-length vector."""

    @abstractmethod
    async def generate_embedding(self, text: str) -> List[float]:
        pass


class CandidateStore(ABC):
    """Nearest-neighbour image search over the indexed library."""

    @abstractmethod
    async def search_candidates(
        self,
        vector: Sequence[float],
        min_impact: float,
        pool_size: int
    ) -> List[CandidateRow]:
        """
        Return up to pool_size candidates with impact_score >= min_impact and
        similarity > 0.3, ordered by similarity descending.
        """
        pass


class KeywordExtractor(ABC):
    """Condenses scene intent into image-bank search keywords."""

    @abstractmethod
    async def extract_search_keywords(self, intent: str) -> str:
        pass


class SyncQueue(ABC):
    """Accepts library re-sync jobs for scenes that found nothing."""

    @abstractmethod
    async def enqueue_auto_sync(self, keywords: str) -> str:
        """Queue an auto-sync job and return its id."""
        pass
