"""In-memory candidate store with cosine-similarity search."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from alignment.collaborators import CandidateStore
from alignment.models import Candidate
from alignment.normalize import normalize_candidate
from exceptions import CandidateStoreError

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.3


class InMemoryVectorStore(CandidateStore):
    """
    Holds analyzed images and their embeddings in memory.

    Usage:
        store = InMemoryVectorStore.load_json(Path("data/library.json"))
        rows = await store.search_candidates(vector, min_impact=6, pool_size=50)

    Library file format: a JSON array of candidate rows (camelCase or
    snake_case, see alignment.normalize) each with an "embedding" array.
    """

    def __init__(self, similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD):
        self.similarity_threshold = similarity_threshold
        self._candidates: List[Candidate] = []
        self._vectors: List[np.ndarray] = []
        self._matrix: Optional[np.ndarray] = None
        self._norms: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self._candidates)

    @property
    def dimension(self) -> Optional[int]:
        return self._vectors[0].shape[0] if self._vectors else None

    def add(self, candidate: Any, embedding: Sequence[float]) -> None:
        """
        Index one image.

        Raises:
            CandidateStoreError: If the embedding is empty or its dimension differs from the index
        """
        vector = np.asarray(embedding, dtype=np.float32)
        if vector.ndim != 1 or vector.size == 0:
            raise CandidateStoreError("Embedding must be a non-empty 1-D vector")
        if self.dimension is not None and vector.shape[0] != self.dimension:
            raise CandidateStoreError(
                f"Embedding dimension {vector.shape[0]} does not match index dimension {self.dimension}"
            )

        self._candidates.append(normalize_candidate(candidate))
        self._vectors.append(vector)
        self._matrix = None

    def _ensure_matrix(self) -> None:
        if self._matrix is None:
            self._matrix = np.vstack(self._vectors)
            self._norms = np.linalg.norm(self._matrix, axis=1)

    def similarities(self, vector: Sequence[float]) -> np.ndarray:
        """Cosine similarity of vector against every indexed image."""
        query = np.asarray(vector, dtype=np.float32)
        if self.dimension is not None and (query.ndim != 1 or query.shape[0] != self.dimension):
            raise CandidateStoreError(
                f"Query dimension {query.shape} does not match index dimension {self.dimension}"
            )
        if not self._candidates:
            return np.zeros(0, dtype=np.float32)

        self._ensure_matrix()
        denom = self._norms * np.linalg.norm(query)
        dots = self._matrix @ query
        return np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)

    async def search_candidates(
        self,
        vector: Sequence[float],
        min_impact: float,
        pool_size: int
    ) -> List[Candidate]:
        sims = self.similarities(vector)
        if sims.size == 0:
            return []

        impacts = np.array([c.metadata.impact_score for c in self._candidates], dtype=np.float32)
        eligible = np.flatnonzero((impacts >= min_impact) & (sims > self.similarity_threshold))
        # Stable sort so equal similarities keep insertion order
        ordered = eligible[np.argsort(-sims[eligible], kind="stable")][:pool_size]

        results = [
            self._candidates[i].model_copy(update={"similarity": float(sims[i])})
            for i in ordered
        ]
        logger.debug(f"Found {len(results)} candidate images (min impact {min_impact})")
        return results

    @classmethod
    def load_json(cls, path: Path, similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> "InMemoryVectorStore":
        """
        Build a store from a JSON library file.

        Raises:
            FileNotFoundError: If path does not exist
            CandidateStoreError: If the file is not a JSON array of rows with embeddings
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Library file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                rows = json.load(f)
        except json.JSONDecodeError as e:
            raise CandidateStoreError(f"Failed to parse library file {path}: {e}") from e

        if not isinstance(rows, list):
            raise CandidateStoreError(f"Library file {path} must contain a JSON array")

        store = cls(similarity_threshold=similarity_threshold)
        for row in rows:
            store.add_row(row)
        logger.info(f"Loaded {len(store)} images from {path}")
        return store

    def add_row(self, row: Dict[str, Any]) -> None:
        """Index a library row that carries its own "embedding" field."""
        embedding = row.get("embedding") if isinstance(row, dict) else None
        if embedding is None:
            raise CandidateStoreError(f"Library row has no embedding: {row.get('id') if isinstance(row, dict) else row!r}")
        self.add({k: v for k, v in row.items() if k != "embedding"}, embedding)
