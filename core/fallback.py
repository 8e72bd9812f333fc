"""Concept and song validation with deterministic local fallbacks."""

from __future__ import annotations

import logging
from typing import Any

from core.models import (
    Camera,
    Concept,
    Genre,
    GenreFilter,
    SongRecommendation,
    VisualSpec,
)
from prompts.templates import (
    BASELINE_BANNED,
    DECADES,
    DEFAULT_DECADE,
    ERA_RENDER_STYLES,
    FALLBACK_KEYWORDS,
    FALLBACK_SYNOPSES,
    FALLBACK_TAGLINES,
    FALLBACK_TITLES,
    FALLBACK_VISUALS,
    RENDER_STYLES,
    SONG_DATABASE,
)

logger = logging.getLogger(__name__)

_FILTER_GENRES = {
    GenreFilter.ANY: Genre.SCI_FI,
    GenreFilter.HORROR: Genre.HORROR,
    GenreFilter.SCI_FI: Genre.SCI_FI,
    GenreFilter.FUSION: Genre.FUSION,
}

_GENRE_ALIASES = {g.value.lower(): g.value for g in Genre}
_GENRE_ALIASES.update({"scifi": Genre.SCI_FI.value, "sci fi": Genre.SCI_FI.value})


def resolve_genre(genre_filter: str | GenreFilter) -> str:
    return _FILTER_GENRES[GenreFilter.parse(genre_filter)].value


def _normalise_genre(value: str) -> str | None:
    return _GENRE_ALIASES.get(value.strip().lower())


def with_baseline_banned(banned: list[str]) -> list[str]:
    out = list(banned)
    present = {b.lower() for b in out}
    for term in BASELINE_BANNED:
        if term not in present:
            out.append(term)
    return out


def is_valid_concept(candidate: Any) -> bool:
    if not isinstance(candidate, dict):
        return False
    title = candidate.get("title")
    spec = candidate.get("visual_spec", candidate.get("visualSpec"))
    return isinstance(title, str) and bool(title.strip()) and isinstance(spec, dict)


def fallback_concept(
    decade: str,
    genre_filter: str | GenreFilter,
    seed: int,
    hardcore_mode: bool,
) -> Concept:
    """A complete concept that is a pure function of its arguments."""
    mode = bool(hardcore_mode)
    titles = FALLBACK_TITLES[mode]
    taglines = FALLBACK_TAGLINES[mode]
    index = seed % len(titles)
    visuals = FALLBACK_VISUALS[mode]
    camera = visuals["camera"]
    decade = decade if decade in DECADES else DEFAULT_DECADE

    return Concept(
        title=titles[index],
        tagline=taglines[index],
        synopsis=FALLBACK_SYNOPSES[mode],
        decade=decade,
        genre=resolve_genre(genre_filter),
        visual_spec=VisualSpec(
            subgenre=visuals["subgenre"],
            palette=list(visuals["palette"]),
            camera=Camera(**camera),
            composition=visuals["composition"],
            lighting=visuals["lighting"],
            environment=visuals["environment"],
            wardrobe_props=visuals["wardrobe_props"],
            motifs=list(visuals["motifs"]),
            keywords=list(FALLBACK_KEYWORDS),
            banned=list(BASELINE_BANNED),
        ),
        render_style=ERA_RENDER_STYLES[decade],
        nod_theme=mode,
        seed=seed,
    )


def ensure_valid_concept(
    candidate: dict[str, Any] | None,
    decade: str,
    genre_filter: str | GenreFilter,
    seed: int,
    hardcore_mode: bool,
) -> Concept:
    """Always return a usable concept.

    A valid candidate keeps the provider's fields, except that the request's
    hardcore flag and seed are written back, an out-of-range decade, genre or
    render style is replaced from the request, and the baseline banned terms
    are merged in.
    """
    if not is_valid_concept(candidate):
        logger.warning("Concept candidate invalid; using fallback (seed=%d)", seed)
        return fallback_concept(decade, genre_filter, seed, hardcore_mode)

    concept = Concept.from_dict(candidate)
    concept.nod_theme = bool(hardcore_mode)
    concept.seed = seed
    if concept.decade not in DECADES:
        concept.decade = decade if decade in DECADES else DEFAULT_DECADE
    concept.genre = _normalise_genre(concept.genre) or resolve_genre(genre_filter)
    if concept.render_style not in RENDER_STYLES:
        concept.render_style = ERA_RENDER_STYLES[concept.decade]
    concept.visual_spec.banned = with_baseline_banned(concept.visual_spec.banned)
    return concept


def _song_category(genre: str) -> str:
    genre = genre.lower()
    if "horror" in genre:
        return "horror"
    if "sci-fi" in genre:
        return "sci-fi"
    return "default"


def fallback_song(concept: Concept) -> SongRecommendation:
    category = _song_category(concept.genre)
    songs = SONG_DATABASE.get(concept.decade) or SONG_DATABASE[DEFAULT_DECADE]
    title, artist, year = songs.get(category) or songs["default"]
    label = "classic" if category == "default" else category
    return SongRecommendation(
        title=title,
        artist=artist,
        year=year,
        reason=(
            f"This {year} {label} song perfectly captures the mood and era of "
            f'"{concept.title or "Untitled"}" with its atmospheric sound and '
            "thematic resonance."
        ),
    )


def ensure_valid_song(candidate: dict[str, Any] | None, concept: Concept) -> SongRecommendation:
    if isinstance(candidate, dict):
        song = SongRecommendation.from_dict(candidate)
        if song.title and song.artist and song.reason:
            return song
    logger.warning("Song candidate invalid; using fallback for %s", concept.decade or "unknown decade")
    return fallback_song(concept)
