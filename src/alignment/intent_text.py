"""Build search text from a scene's intent and visual-intent layers."""

from typing import List

from .models import Scene


def _join(words: List[str]) -> str:
    return ", ".join(w for w in words if w)


def build_structured_search_formula(scene: Scene) -> str:
    """
    Render a scene's visual intent as a labelled search formula.

    Example:
        CORE_INTENT: overwhelmed
        SPATIAL_STRATEGY: cluttered frame
        SUBJECT_TREATMENT: hidden face
        COLOR_PROFILE: harsh light
        KEYWORD_STRING: A person feeling overwhelmed, cluttered frame, overwhelmed, harsh light

    Layers that are absent are left out; a scene without visual intent
    yields only the KEYWORD_STRING line with its intent.
    """
    vi = scene.visual_intent
    intent_words = vi.emotional_layer.intent_words if vi and vi.emotional_layer else []
    strategy_words = vi.spatial_strategy.strategy_words if vi and vi.spatial_strategy else []
    treatment_words = vi.subject_treatment.treatment_words if vi and vi.subject_treatment else []
    temperature_words = vi.color_mapping.temperature_words if vi and vi.color_mapping else []

    lines = []
    if intent_words:
        lines.append(f"CORE_INTENT: {_join(intent_words)}")
    if strategy_words:
        lines.append(f"SPATIAL_STRATEGY: {_join(strategy_words)}")
    if treatment_words:
        lines.append(f"SUBJECT_TREATMENT: {_join(treatment_words)}")
    if temperature_words:
        lines.append(f"COLOR_PROFILE: {_join(temperature_words)}")

    keyword_parts = [scene.intent.strip(), *strategy_words, *intent_words, *temperature_words]
    lines.append(f"KEYWORD_STRING: {_join(keyword_parts)}")
    return "\n".join(lines)


def build_embedding_text(scene: Scene) -> str:
    """Text sent to the embedding provider: intent plus emotional and spatial words."""
    vi = scene.visual_intent
    if vi is None:
        return scene.intent

    extra: List[str] = []
    if vi.emotional_layer:
        extra.extend(vi.emotional_layer.intent_words)
        if vi.emotional_layer.vibe:
            extra.append(vi.emotional_layer.vibe)
    if vi.spatial_strategy:
        extra.extend(vi.spatial_strategy.strategy_words)

    if not extra:
        return scene.intent
    return f"{scene.intent}. {' '.join(extra)}"
