"""
Gemini API utilities for the scene alignment engine.

Centralized module for all Google Generative AI (Gemini) interactions:
text generation for keyword extraction and text embeddings for scene intent.
"""

import asyncio
import os
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from google import genai

# Default model names
DEFAULT_MODEL_NAME = "gemini-2.0-flash"
DEFAULT_EMBEDDING_MODEL = "text-embedding-004"


class GeminiAPI:
    """Wrapper for Gemini API operations."""

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL_NAME,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
        api_key: Optional[str] = None
    ):
        """
        Initialize Gemini API client.

        Args:
            model_name: Gemini model used for text generation
            embedding_model: Gemini model used for embeddings
            api_key: API key (if None, loads from environment)
        """
        self.model_name = model_name
        self.embedding_model = embedding_model
        self._configured = False
        self.client = None

        if api_key:
            self._configure_with_key(api_key)
        else:
            self._configure_from_env()

    def _configure_from_env(self):
        """Load API key from .env file and configure Gemini."""
        project_root = Path(__file__).parent.parent.parent
        load_dotenv(dotenv_path=project_root / ".env")

        api_key = os.getenv("GeminiImageAPI")
        if not api_key:
            raise ValueError(
                "Gemini API key not found. Set GeminiImageAPI in .env file or pass api_key parameter."
            )

        self.client = genai.Client(api_key=api_key)
        self._configured = True

    def _configure_with_key(self, api_key: str):
        """Configure Gemini with provided API key."""
        self.client = genai.Client(api_key=api_key)
        self._configured = True

    def _require_configured(self):
        if not self._configured:
            raise RuntimeError("Gemini API not configured.")

    def generate_content(self, prompt: str, system_instruction: Optional[str] = None) -> Any:
        """
        Generate content using Gemini.

        Args:
            prompt: Text prompt
            system_instruction: Optional system instruction

        Returns:
            Response object with .text attribute
        """
        self._require_configured()
        config = {"system_instruction": system_instruction} if system_instruction else None
        return self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=config
        )

    def embed_text(self, text: str) -> List[float]:
        """
        Embed a single text with the configured embedding model.

        Returns:
            Embedding values as a list of floats

        Raises:
            RuntimeError: If the response carries no embedding
        """
        self._require_configured()
        response = self.client.models.embed_content(
            model=self.embedding_model,
            contents=text
        )
        if not response.embeddings:
            raise RuntimeError("Gemini returned no embeddings")
        return list(response.embeddings[0].values)

    async def generate_content_async(self, prompt: str, system_instruction: Optional[str] = None) -> Any:
        """
        Async wrapper for generate_content using asyncio.to_thread.

        The google.genai client call is synchronous; running it in a thread
        keeps the event loop free while the request is in flight.
        """
        return await asyncio.to_thread(self.generate_content, prompt, system_instruction)

    async def embed_text_async(self, text: str) -> List[float]:
        """Async wrapper for embed_text using asyncio.to_thread."""
        return await asyncio.to_thread(self.embed_text, text)
