"""Scene alignment orchestration.

Runs the per-scene pipeline over an ordered scene sequence:
1. Embed the scene text (intent plus emotional/spatial words)
2. Fetch a candidate pool from the store
3. Score and rank the pool, keeping the top RANKED_CANDIDATE_LIMIT
4. Cluster by mood and select the cluster that continues the previous scene
5. Re-sort the winning cluster and truncate to top_k
6. Fix the visual anchor from scene 0, track the previous scene's mood
7. On an empty result, spawn a background keyword-extraction + auto-sync

Scenes run strictly in order because scene i clusters against scene i-1's
mood and scores against scene 0's anchor. Anchor and previous mood live in
local variables, so concurrent calls share nothing.
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence, Set

from exceptions import ValidationError
from .clustering import group_by_mood, select_best_cluster
from .collaborators import CandidateStore, EmbeddingProvider, KeywordExtractor, SyncQueue
from .intent_text import build_embedding_text, build_structured_search_formula
from .models import ImageMatch, MoodDna, RankingWeights, Scene
from .normalize import normalize_candidate, normalize_scene
from .scoring import Scorer

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 50
DEFAULT_TOP_K = 5
RANKED_CANDIDATE_LIMIT = 5
IMPACT_TOLERANCE = 2


class AlignmentEngine:
    """Maps scene sequences to ranked, mood-continuous image lists."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        candidate_store: CandidateStore,
        keyword_extractor: KeywordExtractor,
        sync_queue: SyncQueue,
        weights: Optional[RankingWeights] = None,
        pool_size: int = DEFAULT_POOL_SIZE
    ):
        if pool_size < 1:
            raise ValidationError(f"pool_size must be positive, got {pool_size}")
        self.embedding_provider = embedding_provider
        self.candidate_store = candidate_store
        self.keyword_extractor = keyword_extractor
        self.sync_queue = sync_queue
        self.scorer = Scorer(weights)
        self.pool_size = pool_size
        # Held only so the event loop does not drop running fallbacks
        self._fallback_tasks: Set[asyncio.Task] = set()

    async def find_aligned_images(
        self,
        scenes: Sequence[Any],
        top_k: int = DEFAULT_TOP_K,
        mood_consistency_multiplier: float = 1.0
    ) -> List[List[ImageMatch]]:
        """
        Find ranked images for every scene, keeping mood continuity.

        Args:
            scenes: Scene records or raw scene dicts, in narrative order
            top_k: Matches returned per scene
            mood_consistency_multiplier: Scale on the mood-consistency term

        Returns:
            One list per scene (same length as scenes); a failed or
            zero-match scene yields an empty list

        Raises:
            ValidationError: If scenes is empty or any argument is invalid
        """
        if not scenes:
            raise ValidationError("No scenes provided for image matching")
        if top_k < 1:
            raise ValidationError(f"top_k must be at least 1, got {top_k}")
        if mood_consistency_multiplier < 0:
            raise ValidationError(
                f"mood_consistency_multiplier cannot be negative, got {mood_consistency_multiplier}"
            )
        normalized = [normalize_scene(s) for s in scenes]

        logger.info(f"Finding aligned images for {len(normalized)} scenes")

        results: List[List[ImageMatch]] = []
        visual_anchor: Optional[MoodDna] = None
        previous_mood: Optional[MoodDna] = None

        for index, scene in enumerate(normalized):
            is_first_scene = index == 0
            try:
                selection = await self._align_scene(
                    scene,
                    is_first_scene=is_first_scene,
                    anchor_mood=visual_anchor,
                    context_mood=None if is_first_scene else previous_mood,
                    top_k=top_k,
                    mood_multiplier=mood_consistency_multiplier,
                )
            except Exception as e:
                logger.error(f"Failed to find images for scene {index}: {e}")
                selection = []

            if selection:
                top_mood = selection[0].mood_dna
                if is_first_scene:
                    visual_anchor = top_mood
                    logger.debug(f"Set visual anchor mood: {visual_anchor}")
                previous_mood = top_mood
            else:
                logger.warning(
                    f"No matches found for scene {index} (\"{scene.intent}\"). Triggering auto-sync..."
                )
                self._spawn_fallback(index, scene.intent)

            results.append(selection)

        matched = sum(1 for r in results if r)
        logger.info(f"Found matches for {matched} of {len(results)} scenes")
        return results

    async def _align_scene(
        self,
        scene: Scene,
        is_first_scene: bool,
        anchor_mood: Optional[MoodDna],
        context_mood: Optional[MoodDna],
        top_k: int,
        mood_multiplier: float
    ) -> List[ImageMatch]:
        if scene.visual_intent is not None:
            logger.debug(f"Search formula:\n{build_structured_search_formula(scene)}")
        embedding = await self.embedding_provider.generate_embedding(build_embedding_text(scene))

        min_impact = max(1, scene.required_impact - IMPACT_TOLERANCE)
        rows = await self.candidate_store.search_candidates(embedding, min_impact, self.pool_size)
        candidates = []
        for row in rows:
            try:
                candidates.append(normalize_candidate(row))
            except ValidationError as e:
                logger.warning(f"Skipping malformed candidate row: {e}")
        logger.debug(f"Found {len(candidates)} candidate images for semantic match")

        ranked = self.scorer.rank(
            scene,
            candidates,
            is_first_scene=is_first_scene,
            anchor_mood=anchor_mood,
            mood_multiplier=mood_multiplier,
            limit=RANKED_CANDIDATE_LIMIT,
        )

        clusters = group_by_mood(ranked)
        best = select_best_cluster(clusters, context_mood)
        return sorted(best, key=lambda m: m.match_score, reverse=True)[:top_k]

    def _spawn_fallback(self, scene_index: int, intent: str) -> None:
        task = asyncio.create_task(
            self._run_fallback(scene_index, intent),
            name=f"auto-sync-scene-{scene_index}",
        )
        self._fallback_tasks.add(task)
        task.add_done_callback(self._fallback_tasks.discard)

    async def _run_fallback(self, scene_index: int, intent: str) -> Optional[str]:
        """Extract keywords and queue an auto-sync; failures are logged, never raised."""
        try:
            keywords = await self.keyword_extractor.extract_search_keywords(intent)
            job_id = await self.sync_queue.enqueue_auto_sync(keywords)
        except Exception as e:
            logger.error(f"Keyword extraction for auto-sync failed (scene {scene_index}): {e}")
            return None
        logger.info(f"Successfully queued auto-sync job {job_id} for keywords: \"{keywords}\"")
        return job_id

    @property
    def pending_fallbacks(self) -> int:
        return len(self._fallback_tasks)

    async def wait_for_fallbacks(self) -> None:
        """Wait for background auto-sync tasks spawned so far (shutdown and tests)."""
        if self._fallback_tasks:
            await asyncio.gather(*list(self._fallback_tasks))


def find_aligned_images_sync(
    engine: AlignmentEngine,
    scenes: Sequence[Any],
    top_k: int = DEFAULT_TOP_K,
    mood_consistency_multiplier: float = 1.0
) -> List[List[ImageMatch]]:
    """
    Synchronous wrapper for AlignmentEngine.find_aligned_images.

    Drains background auto-sync tasks before the event loop closes.
    """
    async def _run():
        results = await engine.find_aligned_images(scenes, top_k, mood_consistency_multiplier)
        await engine.wait_for_fallbacks()
        return results

    return asyncio.run(_run())
