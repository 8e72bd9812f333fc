import random

import pytest

from core.models import Concept, GenreFilter, VisualSpec
from core.prompt_builder import (
    build_concept_prompt,
    build_image_prompt,
    build_song_prompt,
    derive_seed,
    theme_pool,
)
from prompts.templates import (
    CREATIVE_THEMES,
    DECADES,
    ERA_STYLES,
    HARDCORE_IMAGE_INTENSITY,
    HARDCORE_THEMES,
)

GENRE_FILTERS = ["any", "horror", "sci-fi", "fusion"]
ERA_FILTERS = ["any", *DECADES]


@pytest.mark.parametrize("hardcore_mode", [False, True])
@pytest.mark.parametrize("genre_filter", GENRE_FILTERS)
def test_decade_always_from_fixed_set(genre_filter, hardcore_mode):
    for i, era in enumerate(ERA_FILTERS):
        result = build_concept_prompt(genre_filter, era, hardcore_mode, rng=random.Random(i))
        assert result.decade in DECADES
        if era != "any":
            assert result.decade == era


def test_unknown_era_is_treated_as_any():
    result = build_concept_prompt("horror", "1890s", rng=random.Random(3))
    assert result.decade in DECADES


def test_seed_is_clock_modulo_100000():
    result = build_concept_prompt(clock=lambda: 1_700_000_123_456, rng=random.Random(0))
    assert result.seed == 23456
    assert derive_seed(99_999) == 99_999
    assert derive_seed(100_000) == 0


def test_each_call_draws_fresh_values():
    ticks = iter([1_000, 2_000])
    first = build_concept_prompt(clock=lambda: next(ticks))
    second = build_concept_prompt(clock=lambda: next(ticks))
    assert (first.seed, second.seed) == (1_000, 2_000)


def test_injected_rng_makes_selection_reproducible():
    a = build_concept_prompt("any", "any", rng=random.Random(42), clock=lambda: 7)
    b = build_concept_prompt("any", "any", rng=random.Random(42), clock=lambda: 7)
    assert (a.decade, a.theme, a.prompt) == (b.decade, b.theme, b.prompt)


def test_normal_mode_uses_creative_themes():
    result = build_concept_prompt("horror", "1970s", False, rng=random.Random(1))
    assert result.theme in CREATIVE_THEMES


@pytest.mark.parametrize("genre_filter", ["horror", "sci-fi", "fusion"])
def test_hardcore_mode_uses_genre_pool(genre_filter):
    result = build_concept_prompt(genre_filter, "any", True, rng=random.Random(5))
    assert result.theme in HARDCORE_THEMES[genre_filter]


def test_hardcore_any_combines_every_pool():
    pool = theme_pool(GenreFilter.ANY, True)
    for themes in HARDCORE_THEMES.values():
        assert set(themes) <= set(pool)


def test_prompt_embeds_constraints_and_schema_values():
    result = build_concept_prompt("horror", "1980s", True, rng=random.Random(2), clock=lambda: 123_456)
    prompt = result.prompt
    assert 'Era MUST be "1980s"' in prompt
    assert 'Genre MUST be "Horror"' in prompt
    assert result.theme in prompt
    assert "Dark, Shadow, Night, Blood, Death, Steel, Cross, Stone" in prompt
    assert "PG-13" in prompt
    assert '"decade": "1980s"' in prompt
    assert '"nod_theme": true' in prompt
    assert '"seed": 23456' in prompt


def test_any_genre_constraint_and_fusion_wording():
    any_prompt = build_concept_prompt("any", "1990s", rng=random.Random(0)).prompt
    fusion_prompt = build_concept_prompt("fusion", "1990s", rng=random.Random(0)).prompt
    assert "Horror or Sci-Fi or fusion" in any_prompt
    assert "a tasteful fusion of Horror and Sci-Fi" in fusion_prompt
    assert '"nod_theme": false' in any_prompt


def test_image_prompt_includes_era_style_and_no_text_rule():
    concept = Concept(
        title="Quiet Orbit",
        decade="1960s",
        genre="Sci-Fi",
        render_style="silkscreen halftone",
        visual_spec=VisualSpec(palette=["#111111", "#222222", "#333333"], lighting="cold moonlight"),
    )
    prompt = build_image_prompt(concept, "astronaut in a flooded chapel")
    assert ERA_STYLES["1960s"] in prompt
    assert "Sci-Fi film aesthetic from the 1960s" in prompt
    assert "astronaut in a flooded chapel" in prompt
    assert "cold moonlight" in prompt
    assert "halftone" in prompt
    assert prompt.endswith("No text, no words, no letters anywhere in the image")
    assert HARDCORE_IMAGE_INTENSITY not in prompt


def test_image_prompt_defaults_for_empty_concept_and_hardcore():
    prompt = build_image_prompt(Concept(nod_theme=True))
    assert ERA_STYLES["1980s"] in prompt
    assert "cinematic film aesthetic" in prompt
    assert HARDCORE_IMAGE_INTENSITY in prompt


def test_song_prompt_mentions_concept():
    concept = Concept(title="Echo Garden", genre="Horror", decade="1970s", synopsis="Plants listen.")
    prompt = build_song_prompt(concept)
    assert 'Title: "Echo Garden"' in prompt
    assert "Era: 1970s" in prompt
    assert 'Tagline: "N/A"' in prompt
