"""Score candidate images against a scene.

Composite score:
    base  = 0.5 × vector_similarity
          + 0.3 × impact_relevance
          + 0.15 × composition_match
          + 0.05 × mood_consistency × multiplier
    match = min(1, base × (0.8 + 0.2 × intent_depth))

The weights come from RankingWeights; the intent-depth blend is fixed.
"""

import json
import logging
import math
import re
from typing import List, Optional, Sequence, Tuple

from .models import (
    Candidate,
    Composition,
    ImageMatch,
    MoodDna,
    RankingWeights,
    Scene,
    VisualIntent,
)

logger = logging.getLogger(__name__)

SHOT_ORDER = ["CU", "MS", "WS"]

SHOT_EXACT_CREDIT = 0.5
SHOT_ADJACENT_CREDIT = 0.25
ANGLE_EXACT_CREDIT = 0.5
ANGLE_ANY_CREDIT = 0.1

TEMPERATURE_MISMATCH_PENALTY = 0.2
COLOR_DISTANCE_PENALTY = 0.1
MAX_COLOR_DISTANCE = 300.0
NEUTRAL_MOOD_SCORE = 0.5

DEPTH_FLOOR = 0.8
DEPTH_SPAN = 0.2

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def impact_relevance(required_impact: float, impact_score: float) -> float:
    """1 at equal impact, falling by 0.1 per point of difference."""
    return max(0.0, 1 - abs(required_impact - impact_score) / 10)


def composition_match(preferred: Composition, image: Composition) -> float:
    """
    Compare shot type and angle.

    Shot type: exact 0.5, one step apart on CU/MS/WS 0.25, otherwise 0.
    Angle: exact 0.5, otherwise 0.1.
    """
    score = 0.0
    if preferred.shot_type == image.shot_type:
        score += SHOT_EXACT_CREDIT
    elif abs(SHOT_ORDER.index(preferred.shot_type) - SHOT_ORDER.index(image.shot_type)) == 1:
        score += SHOT_ADJACENT_CREDIT

    if preferred.angle == image.angle:
        score += ANGLE_EXACT_CREDIT
    else:
        score += ANGLE_ANY_CREDIT

    return min(1.0, score)


def hex_to_rgb(hex_color: str) -> Optional[Tuple[int, int, int]]:
    """Parse '#RRGGBB' (leading # optional); None if not a hex colour."""
    match = _HEX_RE.match(hex_color.strip()) if hex_color else None
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def hex_color_distance(hex1: str, hex2: str) -> float:
    """Euclidean RGB distance; unparseable colours count as maximally distant."""
    rgb1 = hex_to_rgb(hex1)
    rgb2 = hex_to_rgb(hex2)
    if rgb1 is None or rgb2 is None:
        return MAX_COLOR_DISTANCE
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(rgb1, rgb2)))


def mood_consistency(anchor: Optional[MoodDna], candidate: Optional[MoodDna]) -> float:
    """
    Soft continuity score of a candidate mood against the visual anchor.

    Missing mood on either side scores a neutral 0.5.
    """
    if anchor is None or candidate is None:
        return NEUTRAL_MOOD_SCORE

    score = 1.0
    if anchor.temperature_category() != candidate.temperature_category():
        score -= TEMPERATURE_MISMATCH_PENALTY

    if anchor.primary_color and candidate.primary_color:
        distance = hex_color_distance(anchor.primary_color, candidate.primary_color)
        score -= min(1.0, distance / MAX_COLOR_DISTANCE) * COLOR_DISTANCE_PENALTY

    return max(0.0, score)


def _fraction_found(words: Sequence[str], haystacks: Sequence[str]) -> float:
    lowered = [h.lower() for h in haystacks]
    found = sum(1 for w in words if any(w.lower() in h for h in lowered))
    return found / len(words)


def intent_depth(visual_intent: Optional[VisualIntent], candidate: Candidate) -> float:
    """
    Average agreement between a scene's visual-intent layers and a candidate.

    Emotional layer: share of intent words found in the metaphorical tags.
    Color layer: 1 if the mapped temperature equals the candidate's, else 0.
    Subject layer: share of treatment words found in the serialized metadata.
    Layers that are absent (or carry no words) are skipped; with nothing to
    compare the score is a neutral 1.0.
    """
    if visual_intent is None:
        return 1.0

    metadata = candidate.metadata
    layer_scores: List[float] = []

    emotional = visual_intent.emotional_layer
    if emotional and emotional.intent_words:
        layer_scores.append(_fraction_found(emotional.intent_words, metadata.metaphorical_tags))

    color = visual_intent.color_mapping
    if color:
        mood = metadata.mood_dna
        matches = mood is not None and mood.temperature_category() == color.temperature
        layer_scores.append(1.0 if matches else 0.0)

    subject = visual_intent.subject_treatment
    if subject and subject.treatment_words:
        serialized = json.dumps(metadata.model_dump(mode="json"))
        layer_scores.append(_fraction_found(subject.treatment_words, [serialized]))

    if not layer_scores:
        return 1.0
    return sum(layer_scores) / len(layer_scores)


class Scorer:
    """Scores (scene, candidate) pairs with a fixed set of ranking weights."""

    def __init__(self, weights: Optional[RankingWeights] = None):
        self.weights = weights or RankingWeights()

    def score(
        self,
        scene: Scene,
        candidate: Candidate,
        is_first_scene: bool,
        anchor_mood: Optional[MoodDna] = None,
        mood_multiplier: float = 1.0
    ) -> ImageMatch:
        """
        Score one candidate for one scene.

        Args:
            scene: Scene being matched
            candidate: Candidate from the store
            is_first_scene: First scene of the sequence always has full mood consistency
            anchor_mood: Visual anchor fixed by the first scene
            mood_multiplier: Caller-supplied scale on the mood term

        Returns:
            ImageMatch with composite and sub-scores
        """
        w = self.weights
        metadata = candidate.metadata

        vector_similarity = candidate.similarity
        impact = impact_relevance(scene.required_impact, metadata.impact_score)
        composition = composition_match(scene.preferred_composition, metadata.composition)
        mood = 1.0 if is_first_scene else mood_consistency(anchor_mood, metadata.mood_dna)

        base = (
            w.vector_similarity * vector_similarity
            + w.impact_relevance * impact
            + w.composition_match * composition
            + w.mood_consistency * mood * mood_multiplier
        )

        depth = None
        if scene.visual_intent is not None:
            depth = intent_depth(scene.visual_intent, candidate)
            base *= DEPTH_FLOOR + DEPTH_SPAN * depth

        return ImageMatch(
            image_id=candidate.id,
            external_id=candidate.external_id,
            url=candidate.url,
            match_score=min(1.0, max(0.0, base)),
            vector_similarity=vector_similarity,
            impact_relevance=impact,
            composition_match=composition,
            mood_consistency_score=mood,
            intent_depth_score=depth,
            metadata=metadata,
        )

    def rank(
        self,
        scene: Scene,
        candidates: Sequence[Candidate],
        is_first_scene: bool,
        anchor_mood: Optional[MoodDna] = None,
        mood_multiplier: float = 1.0,
        limit: Optional[int] = None
    ) -> List[ImageMatch]:
        """Score all candidates and sort by match score, keeping pool order on ties."""
        matches = [
            self.score(scene, c, is_first_scene, anchor_mood, mood_multiplier)
            for c in candidates
        ]
        matches.sort(key=lambda m: m.match_score, reverse=True)
        if limit is not None:
            matches = matches[:limit]
        logger.debug(f"Ranked {len(candidates)} candidates, kept {len(matches)}")
        return matches
