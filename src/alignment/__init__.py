"""Scene alignment and visual continuity engine."""

from .models import (
    Candidate,
    CandidateMetadata,
    Composition,
    ImageMatch,
    MoodDna,
    RankingWeights,
    Scene,
    VisualIntent,
)
from .scoring import Scorer
from .clustering import group_by_mood, select_best_cluster
from .orchestrate import AlignmentEngine, find_aligned_images_sync

__all__ = [
    'Candidate',
    'CandidateMetadata',
    'Composition',
    'ImageMatch',
    'MoodDna',
    'RankingWeights',
    'Scene',
    'VisualIntent',
    'Scorer',
    'group_by_mood',
    'select_best_cluster',
    'AlignmentEngine',
    'find_aligned_images_sync',
]
