"""Prompt builders for the concept, image and song stages."""

from __future__ import annotations

import json
import logging
import random
import time
from typing import Callable

from core.models import Concept, ConceptPrompt, GenreFilter, parse_era_filter
from prompts.templates import (
    ANY_GENRE_CONSTRAINT,
    BANNED_TITLE_WORDS,
    CONCEPT_PROMPT,
    CREATIVE_THEMES,
    DECADES,
    DEFAULT_DECADE,
    ERA_RENDER_STYLES,
    ERA_STYLES,
    GENRE_CONSTRAINTS,
    HARDCORE_CONSTRAINT,
    HARDCORE_IMAGE_INTENSITY,
    HARDCORE_THEMES,
    RENDER_STYLE_HINTS,
    RENDER_STYLES,
    SONG_PROMPT,
)

logger = logging.getLogger(__name__)

SEED_MODULUS = 100_000


def current_time_ms() -> int:
    return int(time.time() * 1000)


def derive_seed(now_ms: int) -> int:
    return now_ms % SEED_MODULUS


def resolve_decade(era_filter: str, rng: random.Random) -> str:
    """Use the requested decade verbatim, or draw one uniformly for ``any``."""
    era = parse_era_filter(era_filter)
    if era == "any":
        return rng.choice(DECADES)
    return era


def theme_pool(genre_filter: GenreFilter, hardcore_mode: bool) -> tuple[str, ...]:
    if not hardcore_mode:
        return CREATIVE_THEMES
    if genre_filter is GenreFilter.ANY:
        combined: list[str] = []
        for pool in HARDCORE_THEMES.values():
            combined.extend(pool)
        return tuple(combined)
    return HARDCORE_THEMES[genre_filter.value]


def build_concept_prompt(
    genre_filter: str | GenreFilter = "any",
    era_filter: str = "any",
    hardcore_mode: bool = False,
    rng: random.Random | None = None,
    clock: Callable[[], int] = current_time_ms,
) -> ConceptPrompt:
    """Render the concept instruction and pick this request's decade, theme and seed.

    Every call draws fresh values; pass ``rng`` and ``clock`` to make the
    draw reproducible.
    """
    if rng is None:
        rng = random.Random()
    genre = GenreFilter.parse(genre_filter)
    decade = resolve_decade(era_filter, rng)
    theme = rng.choice(theme_pool(genre, hardcore_mode))
    seed = derive_seed(clock())

    if genre is GenreFilter.ANY:
        genre_constraint = ANY_GENRE_CONSTRAINT
    else:
        genre_constraint = GENRE_CONSTRAINTS[genre.value]

    prompt = CONCEPT_PROMPT.substitute(
        decade=decade,
        genre_constraint=genre_constraint,
        theme=theme,
        banned_words=", ".join(BANNED_TITLE_WORDS),
        intensity=HARDCORE_CONSTRAINT if hardcore_mode else "",
        render_styles=" | ".join(f'"{s}"' for s in RENDER_STYLES),
        default_render_style=ERA_RENDER_STYLES[decade],
        nod_theme=json.dumps(bool(hardcore_mode)),
        seed=seed,
    )
    logger.debug("Built concept prompt decade=%s theme=%s seed=%d", decade, theme, seed)
    return ConceptPrompt(
        prompt=prompt,
        decade=decade,
        theme=theme,
        seed=seed,
        genre_filter=genre,
        hardcore_mode=bool(hardcore_mode),
    )


def build_image_prompt(
    concept: Concept,
    visual_elements: str = "",
    era_styles: dict[str, str] = ERA_STYLES,
    render_style_hints: dict[str, str] = RENDER_STYLE_HINTS,
    hardcore_mode: bool | None = None,
) -> str:
    """Turn a concept into a comma-joined image prompt."""
    decade = concept.decade if concept.decade in era_styles else DEFAULT_DECADE
    genre = concept.genre or "cinematic"
    if hardcore_mode is None:
        hardcore_mode = concept.nod_theme

    spec = concept.visual_spec
    parts = [
        "Portrait painting of a character",
        f"{genre} film aesthetic from the {decade}",
        era_styles[decade],
        render_style_hints.get(concept.render_style, ""),
        visual_elements.strip(),
        spec.lighting,
        spec.environment,
        f"palette of {', '.join(spec.palette[:3])}" if spec.palette else "",
        HARDCORE_IMAGE_INTENSITY if hardcore_mode else "",
        "Professional concept art illustration",
        "No text, no words, no letters anywhere in the image",
    ]
    prompt = ", ".join(p for p in parts if p)
    logger.debug("Built image prompt: %s", prompt)
    return prompt


def build_song_prompt(concept: Concept) -> str:
    return SONG_PROMPT.safe_substitute(
        title=concept.title or "Untitled",
        genre=concept.genre or "Unknown",
        decade=concept.decade or "Unknown",
        tagline=concept.tagline or "N/A",
        synopsis=concept.synopsis or "N/A",
    )
