#!/usr/bin/env python3
"""
Align a scene sequence against an indexed image library.

This script:
1. Loads scenes (JSON array of scene objects) and the image library
   (JSON array of analyzed images with embeddings)
2. Embeds each scene with Gemini and runs the alignment engine
3. Writes one ranked match list per scene as JSON
4. Reports auto-sync jobs queued for scenes with no matches

Usage:
    python scripts/align_scenes.py --scenes data/scenes.json --library data/library.json
    python scripts/align_scenes.py --scenes data/scenes.json --library data/library.json --top-k 3 --output out.json
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from alignment import AlignmentEngine  # noqa: E402
from alignment.providers import GeminiEmbeddingProvider, GeminiKeywordExtractor  # noqa: E402
from config import get_candidate_pool_size, get_default_top_k, get_embedding_model, get_keyword_model  # noqa: E402
from library import InMemorySyncQueue, InMemoryVectorStore  # noqa: E402
from logging_config import setup_logging  # noqa: E402
from util.gemini import GeminiAPI  # noqa: E402

logger = logging.getLogger("align_scenes")


def load_scenes(path: Path) -> List[Dict[str, Any]]:
    """Load the scene array from a JSON file (bare array or {"scenes": [...]})."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("scenes", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of scenes")
    return data


async def run_alignment(
    scenes: List[Dict[str, Any]],
    engine: AlignmentEngine,
    top_k: int,
    mood_multiplier: float
) -> List[List[Dict[str, Any]]]:
    results = await engine.find_aligned_images(scenes, top_k=top_k, mood_consistency_multiplier=mood_multiplier)
    await engine.wait_for_fallbacks()
    return [[match.model_dump(mode="json") for match in scene_matches] for scene_matches in results]


def main():
    parser = argparse.ArgumentParser(description="Align scenes to library images with mood continuity")
    parser.add_argument("--scenes", type=Path, required=True, help="JSON file with scene objects")
    parser.add_argument("--library", type=Path, required=True, help="JSON library file with embeddings")
    parser.add_argument("--top-k", type=int, default=None, help="Matches per scene (default: ALIGNMENT_TOP_K or 5)")
    parser.add_argument("--mood-multiplier", type=float, default=1.0, help="Mood consistency multiplier")
    parser.add_argument("--output", type=Path, default=None, help="Write results here instead of stdout")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    scenes = load_scenes(args.scenes)
    store = InMemoryVectorStore.load_json(args.library)
    api = GeminiAPI(model_name=get_keyword_model(), embedding_model=get_embedding_model())
    queue = InMemorySyncQueue()
    engine = AlignmentEngine(
        embedding_provider=GeminiEmbeddingProvider(api),
        candidate_store=store,
        keyword_extractor=GeminiKeywordExtractor(api),
        sync_queue=queue,
        pool_size=get_candidate_pool_size(),
    )

    top_k = args.top_k if args.top_k is not None else get_default_top_k()
    results = asyncio.run(run_alignment(scenes, engine, top_k, args.mood_multiplier))

    payload = json.dumps(results, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload, encoding='utf-8')
        logger.info(f"Wrote results for {len(results)} scenes to {args.output}")
    else:
        print(payload)

    for job in queue.history:
        logger.info(f"Auto-sync queued: {job.job_id} ({job.keywords})")


if __name__ == "__main__":
    main()
