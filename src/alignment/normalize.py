"""Normalize raw scene and candidate payloads into alignment records.

Upstream payloads arrive in either camelCase (database rows, API DTOs) or
snake_case (analysis output). Every default is filled here so that scoring
and clustering can read fields directly.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from exceptions import ValidationError
from .models import (
    NEUTRAL_KELVIN,
    Candidate,
    CandidateMetadata,
    ColorMapping,
    Composition,
    EmotionalLayer,
    MoodDna,
    Scene,
    SpatialStrategy,
    SubjectTreatment,
    VisualIntent,
)

logger = logging.getLogger(__name__)

VALID_NEGATIVE_SPACES = ("left", "right", "center")
VALID_SHOT_TYPES = ("CU", "MS", "WS")
VALID_ANGLES = ("low", "eye", "high")
VALID_BALANCES = ("symmetrical", "asymmetrical")
VALID_DOMINANCES = ("weak", "moderate", "strong")
VALID_TEMPS = ("warm", "cold")
VALID_CONTRASTS = ("low", "medium", "high")

MAX_METAPHORICAL_TAGS = 15


def _pick(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among keys."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _choice(value: Any, valid: Iterable[str], default: str) -> str:
    return value if value in valid else default


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    if hasattr(value, "model_dump"):
        return value.model_dump()
    return {}


def _as_word_list(value: Any) -> list:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


def _clamp_score(value: Any, default: float = 5) -> float:
    """Clamp a 1-10 score, replacing missing or non-numeric values with default."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return min(10.0, max(1.0, number))


def _parse_temp(value: Any, fallback: Optional[str]) -> Union[float, str]:
    if isinstance(value, bool):
        value = None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in VALID_TEMPS:
            return lowered
        try:
            return float(lowered.rstrip("k"))
        except ValueError:
            pass
    if fallback in VALID_TEMPS:
        return fallback
    return NEUTRAL_KELVIN


def normalize_composition(raw: Any) -> Composition:
    """
    Normalize any partial composition to a complete Composition.

    Accepts both the 3-field scene shape and the 5-field analysis shape;
    unknown values fall back to center / MS / eye / asymmetrical / moderate.
    """
    if isinstance(raw, Composition):
        return raw
    comp = _as_dict(raw)
    return Composition(
        negative_space=_choice(comp.get("negative_space", comp.get("negativeSpace")),
                               VALID_NEGATIVE_SPACES, "center"),
        shot_type=_choice(comp.get("shot_type", comp.get("shotType")), VALID_SHOT_TYPES, "MS"),
        angle=_choice(comp.get("angle"), VALID_ANGLES, "eye"),
        balance=_choice(comp.get("balance"), VALID_BALANCES, "asymmetrical"),
        subject_dominance=_choice(comp.get("subject_dominance", comp.get("subjectDominance")),
                                  VALID_DOMINANCES, "moderate"),
    )


def normalize_mood_dna(
    raw: Any,
    fallback_temp: Optional[str] = None,
    fallback_primary_color: Optional[str] = None
) -> Optional[MoodDna]:
    """
    Normalize a mood fingerprint.

    Args:
        raw: mood dict (or MoodDna); None means the image has no mood data
        fallback_temp: colour-profile temperature used when temp is unusable
        fallback_primary_color: colour-profile primary colour

    Returns:
        MoodDna, or None when raw carries no mood at all
    """
    if isinstance(raw, MoodDna):
        return raw
    if raw is None and fallback_temp is None and fallback_primary_color is None:
        return None
    mood = _as_dict(raw)
    return MoodDna(
        temp=_parse_temp(mood.get("temp", mood.get("temperature")), fallback_temp),
        primary_color=str(_pick(mood, "primary_color", "primaryColor",
                                default=fallback_primary_color or "neutral")),
        vibe=str(mood.get("vibe") or "neutral"),
        emotional_intensity=str(_pick(mood, "emotional_intensity", "emotionalIntensity",
                                      default="medium")),
        rhythm=str(mood.get("rhythm") or "calm"),
    )


def normalize_visual_intent(raw: Any) -> Optional[VisualIntent]:
    """Normalize the optional four-layer visual intent; empty input yields None."""
    if isinstance(raw, VisualIntent):
        return None if raw.is_empty() else raw
    intent = _as_dict(raw)
    if not intent:
        return None

    emotional = _as_dict(_pick(intent, "emotional_layer", "emotionalLayer", "emotional"))
    spatial = _as_dict(_pick(intent, "spatial_strategy", "spatialStrategy", "spatial"))
    subject = _as_dict(_pick(intent, "subject_treatment", "subjectTreatment", "subject"))
    color = _as_dict(_pick(intent, "color_mapping", "colorMapping", "color"))

    visual_intent = VisualIntent(
        emotional_layer=EmotionalLayer(
            intent_words=_as_word_list(_pick(emotional, "intent_words", "intentWords")),
            vibe=str(emotional.get("vibe") or ""),
        ) if emotional else None,
        spatial_strategy=SpatialStrategy(
            strategy_words=_as_word_list(_pick(spatial, "strategy_words", "strategyWords")),
            shot_type=spatial.get("shot_type") if spatial.get("shot_type") in VALID_SHOT_TYPES else None,
            balance=spatial.get("balance") if spatial.get("balance") in VALID_BALANCES else None,
        ) if spatial else None,
        subject_treatment=SubjectTreatment(
            treatment_words=_as_word_list(_pick(subject, "treatment_words", "treatmentWords")),
            identity=str(subject.get("identity") or ""),
            dominance=str(subject.get("dominance") or ""),
        ) if subject else None,
        color_mapping=ColorMapping(
            temperature_words=_as_word_list(_pick(color, "temperature_words", "temperatureWords")),
            temperature=_choice(color.get("temperature"), VALID_TEMPS, "warm"),
            contrast=_choice(color.get("contrast"), VALID_CONTRASTS, "medium"),
        ) if color else None,
    )
    return None if visual_intent.is_empty() else visual_intent


def normalize_candidate_metadata(raw: Any) -> CandidateMetadata:
    if isinstance(raw, CandidateMetadata):
        return raw
    meta = _as_dict(raw)
    color_profile = _as_dict(_pick(meta, "color_profile", "colorProfile"))
    tags = _as_word_list(_pick(meta, "metaphorical_tags", "metaphoricalTags", "metaphorical_field"))

    return CandidateMetadata(
        impact_score=_clamp_score(_pick(meta, "impact_score", "impactScore")),
        visual_weight=_clamp_score(_pick(meta, "visual_weight", "visualWeight")),
        composition=normalize_composition(meta.get("composition")),
        mood_dna=normalize_mood_dna(
            _pick(meta, "mood_dna", "moodDna"),
            fallback_temp=color_profile.get("temperature"),
            fallback_primary_color=color_profile.get("primary_color"),
        ),
        metaphorical_tags=tags[:MAX_METAPHORICAL_TAGS],
    )


def normalize_candidate(raw: Any) -> Candidate:
    """
    Normalize a candidate-store row into a Candidate.

    Raises:
        ValidationError: If the row has no image id
    """
    if isinstance(raw, Candidate):
        return raw
    row = _as_dict(raw)
    image_id = _pick(row, "id", "image_id", "imageId")
    if image_id is None:
        raise ValidationError(f"Candidate row has no image id: {row!r}")

    similarity = row.get("similarity")
    try:
        similarity = float(similarity) if similarity is not None else 0.0
    except (TypeError, ValueError):
        similarity = 0.0

    return Candidate(
        id=str(image_id),
        external_id=str(_pick(row, "external_id", "externalId", "pexels_id", "pexelsId", default="")),
        url=str(row.get("url") or ""),
        photographer=row.get("photographer"),
        similarity=similarity,
        metadata=normalize_candidate_metadata(row.get("metadata", row)),
    )


def normalize_scene(raw: Any) -> Scene:
    """
    Normalize a scene payload into a Scene.

    Raises:
        ValidationError: If the intent is missing or required impact is not 1-10
    """
    if isinstance(raw, Scene):
        return raw
    if not isinstance(raw, dict):
        raise ValidationError(f"Scene must be a mapping, got {type(raw).__name__}")

    impact = _pick(raw, "required_impact", "requiredImpact")
    if isinstance(impact, bool) or not isinstance(impact, (int, float)):
        raise ValidationError(f"Scene required_impact must be a number, got {impact!r}")

    try:
        return Scene(
            intent=raw.get("intent") or "",
            required_impact=int(round(impact)),
            preferred_composition=normalize_composition(
                _pick(raw, "preferred_composition", "preferredComposition", "composition")
            ),
            visual_intent=normalize_visual_intent(_pick(raw, "visual_intent", "visualIntent")),
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid scene: {e}") from e
