"""Gemini-backed embedding provider and keyword extractor."""

import logging
from typing import List, Optional

from exceptions import EmbeddingError
from util.gemini import GeminiAPI
from .collaborators import EmbeddingProvider, KeywordExtractor

logger = logging.getLogger(__name__)

KEYWORD_SYSTEM_PROMPT = """You are an expert image researcher. Your task is to condense a visual description into 2-3 searchable keywords for an image bank.

Focus on:
- Primary subjects (e.g., "solitary figure", "mountain", "cyberpunk city")
- Lighting/Environment (e.g., "sunset", "neon", "misty")
- Color/Style (e.g., "golden hour", "minimalist")

Return ONLY the keywords separated by spaces, no punctuation, no explanations.
Example:
Input: "A lone figure standing on a vast salt flat under a purple twilight sky"
Output: "solitary person salt flat twilight\""""

FALLBACK_KEYWORD_COUNT = 3


def fallback_keywords(intent: str) -> str:
    """First few words of the intent, used when keyword extraction is unavailable."""
    return " ".join(intent.split()[:FALLBACK_KEYWORD_COUNT])


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Embeds scene text with a Gemini embedding model."""

    def __init__(self, api: Optional[GeminiAPI] = None):
        self.api = api or GeminiAPI()

    async def generate_embedding(self, text: str) -> List[float]:
        try:
            vector = await self.api.embed_text_async(text)
        except Exception as e:
            raise EmbeddingError(f"Failed to embed scene text: {e}") from e
        logger.debug(f"Embedded {len(text)} chars into {len(vector)} dims")
        return vector


class GeminiKeywordExtractor(KeywordExtractor):
    """
    Asks Gemini for 2-3 image-bank keywords.

    Best-effort: any API failure (or an unconfigured client) falls back to
    the first three words of the intent.
    """

    def __init__(self, api: Optional[GeminiAPI] = None):
        self.api = api

    async def extract_search_keywords(self, intent: str) -> str:
        if self.api is None:
            logger.debug("Keyword extraction disabled, using intent prefix")
            return fallback_keywords(intent)

        logger.debug(f"Extracting keywords for intent: \"{intent}\"")
        try:
            response = await self.api.generate_content_async(
                f"Extract keywords for: \"{intent}\"",
                system_instruction=KEYWORD_SYSTEM_PROMPT,
            )
            keywords = (response.text or "").strip().replace('"', "").replace("'", "")
        except Exception as e:
            logger.error(f"Keyword extraction failed, falling back to original intent: {e}")
            return fallback_keywords(intent)

        if not keywords:
            return fallback_keywords(intent)
        logger.debug(f"Extracted keywords: \"{keywords}\"")
        return keywords
