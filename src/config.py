"""Centralized configuration for the scene alignment engine.

This module provides:
- PROJECT_ROOT and SRC_DIR paths
- Environment variable access with get_env()
- Automatic .env loading
- Typed getters for alignment settings

Usage:
    from config import PROJECT_ROOT, get_env, get_candidate_pool_size

    api_key = get_env("GeminiImageAPI")
    pool_size = get_candidate_pool_size()
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from exceptions import ConfigurationError

# Calculate paths once at import time
SRC_DIR = Path(__file__).parent.resolve()
PROJECT_ROOT = SRC_DIR.parent.resolve()

# Load .env from project root
_env_path = PROJECT_ROOT / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

DEFAULT_EMBEDDING_MODEL = "text-embedding-004"
DEFAULT_KEYWORD_MODEL = "gemini-2.0-flash"
DEFAULT_POOL_SIZE = 50
DEFAULT_TOP_K = 5


def get_env(key: str, default: Optional[str] = None) -> str:
    """Get environment variable value.

    Args:
        key: Environment variable name
        default: Default value if not set. If None and key not found, raises KeyError.

    Returns:
        Environment variable value or default

    Raises:
        KeyError: If key not found and no default provided
    """
    value = os.environ.get(key)
    if value is not None:
        return value
    if default is not None:
        return default
    raise KeyError(f"Environment variable '{key}' not set and no default provided")


def _get_positive_int(key: str, default: int) -> int:
    raw = get_env(key, default=str(default))
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got '{raw}'") from e
    if value < 1:
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


def get_gemini_api_key() -> str:
    """Get Gemini API key from environment."""
    return get_env("GeminiImageAPI")


def get_embedding_model() -> str:
    """Get the Gemini embedding model name."""
    return get_env("GEMINI_EMBEDDING_MODEL", default=DEFAULT_EMBEDDING_MODEL)


def get_keyword_model() -> str:
    """Get the Gemini model used for search keyword extraction."""
    return get_env("GEMINI_KEYWORD_MODEL", default=DEFAULT_KEYWORD_MODEL)


def get_candidate_pool_size() -> int:
    """Number of candidates requested from the store per scene."""
    return _get_positive_int("ALIGNMENT_POOL_SIZE", DEFAULT_POOL_SIZE)


def get_default_top_k() -> int:
    """Default number of matches returned per scene."""
    return _get_positive_int("ALIGNMENT_TOP_K", DEFAULT_TOP_K)
