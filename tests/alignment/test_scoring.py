"""Tests for candidate scoring.

Covers the four sub-scores, intent depth, and the composite formula:
(0.5 × similarity + 0.3 × impact + 0.15 × composition + 0.05 × mood × multiplier)
× (0.8 + 0.2 × depth), capped at 1.
"""

import pytest

from alignment.models import (
    ColorMapping,
    Composition,
    EmotionalLayer,
    MoodDna,
    RankingWeights,
    SpatialStrategy,
    SubjectTreatment,
    VisualIntent,
)
from alignment.scoring import (
    Scorer,
    composition_match,
    hex_color_distance,
    hex_to_rgb,
    impact_relevance,
    intent_depth,
    mood_consistency,
)


@pytest.mark.unit
class TestImpactRelevance:

    def test_equal_impact_is_full_score(self):
        assert impact_relevance(8, 8) == 1.0

    def test_difference_reduces_linearly(self):
        assert impact_relevance(8, 5) == pytest.approx(0.7)

    def test_never_negative(self):
        assert impact_relevance(1, 10) == pytest.approx(0.1)
        assert impact_relevance(0, 10) == 0.0


@pytest.mark.unit
class TestCompositionMatch:

    @pytest.mark.parametrize("preferred,image,expected", [
        (("WS", "eye"), ("WS", "eye"), 1.0),
        (("WS", "eye"), ("MS", "eye"), 0.75),
        (("WS", "eye"), ("WS", "low"), 0.6),
        (("CU", "high"), ("MS", "low"), 0.35),
        (("CU", "high"), ("WS", "low"), 0.1),
        (("CU", "eye"), ("WS", "eye"), 0.5),
    ])
    def test_discrete_values(self, preferred, image, expected):
        result = composition_match(
            Composition(shot_type=preferred[0], angle=preferred[1]),
            Composition(shot_type=image[0], angle=image[1]),
        )
        assert result == pytest.approx(expected)

    def test_adjacent_shot_is_between_partial_and_exact(self):
        """A WS request against an MS image with matching angle scores 0.75."""
        result = composition_match(Composition(shot_type="WS"), Composition(shot_type="MS"))

        assert 0.2 < result < 1.0
        assert result == pytest.approx(0.75)


@pytest.mark.unit
class TestColorHelpers:

    def test_hex_to_rgb_with_and_without_hash(self):
        assert hex_to_rgb("#FF6B6B") == (255, 107, 107)
        assert hex_to_rgb("4a90e2") == (74, 144, 226)

    @pytest.mark.parametrize("value", ["neutral", "#FFF", "", "#GG0000"])
    def test_hex_to_rgb_rejects_non_hex(self, value):
        assert hex_to_rgb(value) is None

    def test_distance_of_identical_colors_is_zero(self):
        assert hex_color_distance("#123456", "#123456") == 0.0

    def test_invalid_color_is_max_distance(self):
        assert hex_color_distance("#123456", "neutral") == 300.0


@pytest.mark.unit
class TestMoodConsistency:

    def test_identical_moods_score_full(self):
        mood = MoodDna(temp="warm", primary_color="#FF6B6B")

        assert mood_consistency(mood, mood) == 1.0

    def test_warm_anchor_against_cold_candidate(self):
        anchor = MoodDna(temp="warm", primary_color="#FF6B6B")
        candidate = MoodDna(temp="cold", primary_color="#4A90E2")

        score = mood_consistency(anchor, candidate)

        assert 0.7 <= score < 1.0
        # 1 - 0.2 - 0.1 * (219.75 / 300)
        assert score == pytest.approx(0.7267, abs=1e-3)

    def test_numeric_temps_compare_by_category(self):
        anchor = MoodDna(temp=6000, primary_color="#808080")
        same_side = MoodDna(temp=7000, primary_color="#808080")
        other_side = MoodDna(temp=3000, primary_color="#808080")

        assert mood_consistency(anchor, same_side) == 1.0
        assert mood_consistency(anchor, other_side) == pytest.approx(0.8)

    def test_missing_mood_is_neutral(self):
        mood = MoodDna(temp="warm", primary_color="#FF6B6B")

        assert mood_consistency(None, mood) == 0.5
        assert mood_consistency(mood, None) == 0.5

    def test_unparseable_color_costs_full_color_penalty(self):
        anchor = MoodDna(temp="warm", primary_color="neutral")
        candidate = MoodDna(temp="warm", primary_color="#FF6B6B")

        assert mood_consistency(anchor, candidate) == pytest.approx(0.9)


@pytest.mark.unit
class TestIntentDepth:

    def test_no_visual_intent_is_neutral(self, make_candidate):
        assert intent_depth(None, make_candidate("a")) == 1.0

    def test_spatial_only_intent_is_neutral(self, make_candidate):
        vi = VisualIntent(spatial_strategy=SpatialStrategy(strategy_words=["cluttered frame"]))

        assert intent_depth(vi, make_candidate("a")) == 1.0

    def test_emotional_words_matched_case_insensitively(self, make_candidate):
        vi = VisualIntent(emotional_layer=EmotionalLayer(intent_words=["overwhelmed", "isolated"]))
        candidate = make_candidate("a", tags=["Overwhelmed by chaos", "storm"])

        assert intent_depth(vi, candidate) == pytest.approx(0.5)

    def test_color_temperature_match(self, make_candidate):
        vi = VisualIntent(color_mapping=ColorMapping(temperature="cold"))

        assert intent_depth(vi, make_candidate("a", temp="cold")) == 1.0
        assert intent_depth(vi, make_candidate("b", temp="warm")) == 0.0
        assert intent_depth(vi, make_candidate("c", mood=False)) == 0.0

    def test_subject_words_found_in_serialized_metadata(self, make_candidate):
        vi = VisualIntent(subject_treatment=SubjectTreatment(treatment_words=["hidden face", "crowd"]))
        candidate = make_candidate("a", tags=["a hidden face in shadow"])

        assert intent_depth(vi, candidate) == pytest.approx(0.5)

    def test_average_across_layers(self, make_candidate):
        vi = VisualIntent(
            emotional_layer=EmotionalLayer(intent_words=["overwhelmed", "isolated"]),
            subject_treatment=SubjectTreatment(treatment_words=["hidden face"]),
            color_mapping=ColorMapping(temperature="cold"),
        )
        candidate = make_candidate("a", temp="warm", tags=["overwhelmed", "hidden face"])

        # (0.5 + 1.0 + 0.0) / 3
        assert intent_depth(vi, candidate) == pytest.approx(0.5)


@pytest.mark.unit
class TestScorer:

    @pytest.mark.smoke
    def test_perfect_first_scene_match(self, make_scene, make_candidate):
        """Exact impact and composition on the first scene scores ~0.95."""
        scene = make_scene(impact=8, shot_type="WS", angle="eye")
        candidate = make_candidate("a", similarity=0.9, impact=8, shot_type="WS", angle="eye")

        match = Scorer().score(scene, candidate, is_first_scene=True)

        assert match.vector_similarity == 0.9
        assert match.impact_relevance == 1.0
        assert match.composition_match == 1.0
        assert match.mood_consistency_score == 1.0
        assert match.intent_depth_score is None
        assert match.match_score == pytest.approx(0.95)

    def test_first_scene_ignores_anchor(self, make_scene, make_candidate):
        anchor = MoodDna(temp="cold", primary_color="#0000FF")
        candidate = make_candidate("a", temp="warm", primary_color="#FF0000")

        match = Scorer().score(make_scene(), candidate, is_first_scene=True, anchor_mood=anchor)

        assert match.mood_consistency_score == 1.0

    def test_later_scene_uses_anchor(self, make_scene, make_candidate):
        anchor = MoodDna(temp="warm", primary_color="#FF6B6B")
        candidate = make_candidate("a", temp="cold", primary_color="#4A90E2")

        match = Scorer().score(make_scene(), candidate, is_first_scene=False, anchor_mood=anchor)

        assert 0.7 <= match.mood_consistency_score < 1.0

    def test_mood_multiplier_scales_mood_term(self, make_scene, make_candidate):
        scene = make_scene(impact=8, shot_type="WS")
        candidate = make_candidate("a", similarity=0.5, impact=8, shot_type="WS")

        base = Scorer().score(scene, candidate, is_first_scene=True, mood_multiplier=0.0)
        doubled = Scorer().score(scene, candidate, is_first_scene=True, mood_multiplier=2.0)

        assert doubled.match_score - base.match_score == pytest.approx(0.1)

    def test_intent_depth_blends_into_composite(self, make_scene, make_candidate):
        vi = VisualIntent(color_mapping=ColorMapping(temperature="cold"))
        scene = make_scene(impact=8, shot_type="WS", visual_intent=vi)
        candidate = make_candidate("a", similarity=0.9, impact=8, shot_type="WS", temp="warm")

        match = Scorer().score(scene, candidate, is_first_scene=True)

        assert match.intent_depth_score == 0.0
        assert match.match_score == pytest.approx(0.95 * 0.8)

    def test_match_score_capped_at_one(self, make_scene, make_candidate):
        candidate = make_candidate("a", similarity=1.0, impact=8, shot_type="WS")

        match = Scorer().score(make_scene(impact=8), candidate, is_first_scene=True, mood_multiplier=10.0)

        assert match.match_score == 1.0

    def test_custom_weights(self, make_scene, make_candidate):
        weights = RankingWeights(vector_similarity=1.0, impact_relevance=0.0,
                                 composition_match=0.0, mood_consistency=0.0)
        candidate = make_candidate("a", similarity=0.42, impact=1, shot_type="CU", angle="low")

        match = Scorer(weights).score(make_scene(), candidate, is_first_scene=True)

        assert match.match_score == pytest.approx(0.42)

    def test_rank_sorts_descending_with_stable_ties(self, make_scene, make_candidate):
        candidates = [
            make_candidate("low", similarity=0.4),
            make_candidate("tie-1", similarity=0.7),
            make_candidate("high", similarity=0.9),
            make_candidate("tie-2", similarity=0.7),
        ]

        ranked = Scorer().rank(make_scene(), candidates, is_first_scene=True)

        assert [m.image_id for m in ranked] == ["high", "tie-1", "tie-2", "low"]
        scores = [m.match_score for m in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_rank_limit(self, make_scene, make_candidate):
        candidates = [make_candidate(f"img-{i}", similarity=0.5 + i * 0.01) for i in range(10)]

        ranked = Scorer().rank(make_scene(), candidates, is_first_scene=True, limit=5)

        assert len(ranked) == 5
        assert ranked[0].image_id == "img-9"

    def test_scores_always_within_unit_interval(self, make_scene, make_candidate):
        anchor = MoodDna(temp="warm", primary_color="#FFFFFF")
        candidates = [
            make_candidate(f"img-{i}", similarity=i / 10, impact=(i % 10) + 1,
                           shot_type=["CU", "MS", "WS"][i % 3], angle=["low", "eye", "high"][i % 3],
                           temp=["warm", "cold"][i % 2], primary_color="#000000")
            for i in range(11)
        ]

        for is_first in (True, False):
            for match in Scorer().rank(make_scene(), candidates, is_first, anchor_mood=anchor):
                assert 0.0 <= match.match_score <= 1.0
