"""Request pipelines: concept generation, image generation and song picks."""

from __future__ import annotations

import logging
import random
from typing import Callable

from core.errors import ProviderError, ProviderUnavailable
from core.extraction import extract_concept, extract_song
from core.fallback import ensure_valid_concept, ensure_valid_song
from core.models import Concept, GeneratedImage, GenreFilter, SongRecommendation
from core.prompt_builder import (
    build_concept_prompt,
    build_image_prompt,
    build_song_prompt,
    current_time_ms,
)
from core.providers import ImageProvider
from core.text_providers import TextProvider, call_text_provider

logger = logging.getLogger(__name__)

CONCEPT_MAX_TOKENS = 900
SONG_MAX_TOKENS = 400


def generate_concept(
    text_provider: TextProvider | None,
    genre_filter: str | GenreFilter = "any",
    era_filter: str = "any",
    hardcore_mode: bool = False,
    rng: random.Random | None = None,
    clock: Callable[[], int] = current_time_ms,
) -> Concept:
    """Prompt, call, extract, validate. Never raises for provider trouble."""
    request = build_concept_prompt(
        genre_filter, era_filter, hardcore_mode, rng=rng, clock=clock,
    )
    logger.info(
        "Generating concept genre=%s decade=%s theme=%r hardcore=%s seed=%d",
        request.genre_filter.value, request.decade, request.theme,
        request.hardcore_mode, request.seed,
    )

    candidate = None
    result = call_text_provider(request.prompt, text_provider, max_tokens=CONCEPT_MAX_TOKENS)
    if result.ok:
        candidate = extract_concept(result.value)
        if candidate is None:
            logger.warning("Concept response was not parseable JSON; falling back")
    else:
        logger.warning("No concept from provider (%s); falling back", result.error)

    return ensure_valid_concept(
        candidate,
        request.decade,
        request.genre_filter,
        request.seed,
        request.hardcore_mode,
    )


def generate_image(
    concept: Concept,
    providers: list[ImageProvider],
    visual_elements: str = "",
) -> GeneratedImage:
    """Try each provider in turn (each with its own retries).

    Raises the last ``ProviderError`` when every provider is exhausted; no
    placeholder image is ever substituted.
    """
    if not providers:
        raise ProviderUnavailable("image", "No image provider configured")

    prompt = build_image_prompt(concept, visual_elements)
    last_error: ProviderError | None = None
    for provider in providers:
        try:
            image, elapsed = provider.timed_generate(prompt)
        except ProviderError as e:
            logger.error("Image generation via %s failed: %s", provider.provider_name, e)
            last_error = e
            continue
        logger.info(
            "Image generated via %s in %.2fs after %d attempt(s)",
            provider.provider_name, elapsed, image.attempts,
        )
        return image
    raise last_error


def recommend_song(concept: Concept, text_provider: TextProvider | None) -> SongRecommendation:
    candidate = None
    result = call_text_provider(build_song_prompt(concept), text_provider, max_tokens=SONG_MAX_TOKENS)
    if result.ok:
        candidate = extract_song(result.value)
    else:
        logger.warning("No song from provider (%s); falling back", result.error)
    return ensure_valid_song(candidate, concept)
