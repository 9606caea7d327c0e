"""Group ranked matches into mood-coherent clusters and pick the best one.

Clustering is a single greedy pass, not k-means. Seeds are taken in
descending match-score order (pool order on ties); each seed absorbs every
unassigned match whose temperature is within TEMP_THRESHOLD of its own.
The result is always a partition of the input.
"""

import logging
from typing import List, Optional

from .models import NEUTRAL_KELVIN, ImageMatch, MoodDna

logger = logging.getLogger(__name__)

TEMP_THRESHOLD = 1000.0
CONTINUITY_BONUS = 0.3
CONTINUITY_RANGE = 4000.0

Cluster = List[ImageMatch]


def match_temperature(match: ImageMatch) -> float:
    mood = match.mood_dna
    return mood.kelvin() if mood is not None else NEUTRAL_KELVIN


def cluster_average_temperature(cluster: Cluster) -> float:
    if not cluster:
        return NEUTRAL_KELVIN
    return sum(match_temperature(m) for m in cluster) / len(cluster)


def group_by_mood(matches: List[ImageMatch]) -> List[Cluster]:
    """
    Partition matches by temperature proximity.

    Args:
        matches: Scored matches for one scene, any order

    Returns:
        Clusters in seed order; the first cluster holds the top-scoring match
    """
    if not matches:
        return []

    ordered = sorted(matches, key=lambda m: m.match_score, reverse=True)
    assigned = [False] * len(ordered)
    clusters: List[Cluster] = []

    for i, seed in enumerate(ordered):
        if assigned[i]:
            continue
        assigned[i] = True
        cluster = [seed]
        seed_temp = match_temperature(seed)

        for j in range(i + 1, len(ordered)):
            if assigned[j]:
                continue
            if abs(seed_temp - match_temperature(ordered[j])) <= TEMP_THRESHOLD:
                cluster.append(ordered[j])
                assigned[j] = True

        clusters.append(cluster)

    logger.debug(f"Grouped {len(matches)} candidates into {len(clusters)} clusters")
    return clusters


def cluster_score(cluster: Cluster, context_mood: Optional[MoodDna] = None) -> float:
    """Average match score plus up to +0.3 for temperature closeness to the context mood."""
    score = sum(m.match_score for m in cluster) / len(cluster)
    if context_mood is not None:
        diff = abs(cluster_average_temperature(cluster) - context_mood.kelvin())
        score += max(0.0, CONTINUITY_BONUS * (1 - diff / CONTINUITY_RANGE))
    return score


def select_best_cluster(clusters: List[Cluster], context_mood: Optional[MoodDna] = None) -> Cluster:
    """
    Pick the cluster that best continues the running mood.

    Ties keep the earlier cluster. An empty cluster list yields an empty cluster.
    """
    best: Cluster = []
    best_score = float("-inf")
    for cluster in clusters:
        if not cluster:
            continue
        score = cluster_score(cluster, context_mood)
        if score > best_score:
            best, best_score = cluster, score
    return best
