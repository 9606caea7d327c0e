"""
Shared pytest fixtures for scene alignment tests.
"""

import os
import sys
import pytest
from pathlib import Path
from unittest.mock import AsyncMock

DEFAULT_MARKEXPR = "smoke or (not integration and not slow)"


def pytest_addoption(parser):
    """Add --full flag to run entire test suite"""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite (skip smoke-only mode)"
    )


def pytest_configure(config):
    """Configure test run based on flags"""
    if config.getoption("--full"):
        # Only clear default marker if no explicit -m flag was provided
        if config.option.markexpr == DEFAULT_MARKEXPR:
            config.option.markexpr = ""


# Project root
PROJECT_ROOT = Path(__file__).parent.parent

if str(PROJECT_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT / "src"))


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def check_api_key():
    """Check if Gemini API key is available."""
    from dotenv import load_dotenv
    load_dotenv(PROJECT_ROOT / ".env")
    api_key = os.getenv("GeminiImageAPI")
    if not api_key:
        pytest.skip("Gemini API key not found. Set GeminiImageAPI in .env file.")
    return api_key


@pytest.fixture
def make_candidate():
    """
    Factory for Candidate records.

    Usage:
        candidate = make_candidate("img-1", similarity=0.9, impact=8, shot_type="WS")
    """
    from alignment.models import Candidate, CandidateMetadata, Composition, MoodDna

    def _make(
        image_id,
        similarity=0.8,
        impact=5,
        shot_type="MS",
        angle="eye",
        temp=5500,
        primary_color="#808080",
        tags=None,
        mood=True,
    ):
        return Candidate(
            id=image_id,
            external_id=f"p-{image_id}",
            url=f"https://images.example/{image_id}.jpg",
            similarity=similarity,
            metadata=CandidateMetadata(
                impact_score=impact,
                composition=Composition(shot_type=shot_type, angle=angle),
                mood_dna=MoodDna(temp=temp, primary_color=primary_color) if mood else None,
                metaphorical_tags=tags or [],
            ),
        )

    return _make


@pytest.fixture
def make_match():
    """Factory for ImageMatch records with a given score and temperature."""
    from alignment.models import CandidateMetadata, ImageMatch, MoodDna

    def _make(image_id, score, temp=5500, mood=True):
        return ImageMatch(
            image_id=image_id,
            external_id=f"p-{image_id}",
            url=f"https://images.example/{image_id}.jpg",
            match_score=score,
            vector_similarity=score,
            impact_relevance=1.0,
            composition_match=1.0,
            mood_consistency_score=1.0,
            metadata=CandidateMetadata(
                mood_dna=MoodDna(temp=temp, primary_color="#808080") if mood else None,
            ),
        )

    return _make


@pytest.fixture
def make_scene():
    """Factory for Scene records."""
    from alignment.models import Composition, Scene

    def _make(intent="A lone figure on a salt flat", impact=8, shot_type="WS", angle="eye", visual_intent=None):
        return Scene(
            intent=intent,
            required_impact=impact,
            preferred_composition=Composition(shot_type=shot_type, angle=angle),
            visual_intent=visual_intent,
        )

    return _make


@pytest.fixture
def collaborators():
    """AsyncMock collaborators with a store that returns nothing by default."""
    embedding_provider = AsyncMock()
    embedding_provider.generate_embedding.return_value = [0.1, 0.2, 0.3]

    candidate_store = AsyncMock()
    candidate_store.search_candidates.return_value = []

    keyword_extractor = AsyncMock()
    keyword_extractor.extract_search_keywords.return_value = "salt flat twilight"

    sync_queue = AsyncMock()
    sync_queue.enqueue_auto_sync.return_value = "autosync-salt-flat-twilight-1"

    return {
        "embedding_provider": embedding_provider,
        "candidate_store": candidate_store,
        "keyword_extractor": keyword_extractor,
        "sync_queue": sync_queue,
    }
