"""Data models for poster concepts, song picks and provider results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core.errors import ProviderError
from prompts.templates import DECADES


class Genre(str, Enum):
    HORROR = "Horror"
    SCI_FI = "Sci-Fi"
    FUSION = "Fusion"


class GenreFilter(str, Enum):
    ANY = "any"
    HORROR = "horror"
    SCI_FI = "sci-fi"
    FUSION = "fusion"

    @classmethod
    def parse(cls, value: Any) -> GenreFilter:
        """Lenient parse; anything unrecognised means ``any``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.ANY


def parse_era_filter(value: Any) -> str:
    """Return a decade literal, or ``"any"`` for anything outside the fixed set."""
    era = str(value or "").strip()
    return era if era in DECADES else "any"


def parse_flag(value: Any) -> bool:
    """Strict boolean: ``True`` or "true"/"1"/"yes" (any case); everything else is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return False


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [_text(v) for v in value if v is not None]
    return [_text(value)]


_CAMERA_KEYS = {"shot", "lens", "depth_of_field", "depthOfField"}


@dataclass
class Camera:
    shot: str = ""
    lens: str = ""
    depth_of_field: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Camera:
        if not isinstance(data, dict):
            return cls()
        return cls(
            shot=_text(data.get("shot")),
            lens=_text(data.get("lens")),
            depth_of_field=_text(data.get("depth_of_field", data.get("depthOfField"))),
            extra={k: v for k, v in data.items() if k not in _CAMERA_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({"shot": self.shot, "lens": self.lens, "depth_of_field": self.depth_of_field})
        return out


_VISUAL_SPEC_KEYS = {
    "subgenre", "palette", "camera", "composition", "lighting", "environment",
    "wardrobe_props", "wardrobeProps", "motifs", "keywords", "banned",
}


@dataclass
class VisualSpec:
    subgenre: str = ""
    palette: list[str] = field(default_factory=list)
    camera: Camera = field(default_factory=Camera)
    composition: str = ""
    lighting: str = ""
    environment: str = ""
    wardrobe_props: str = ""
    motifs: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    banned: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> VisualSpec:
        if not isinstance(data, dict):
            return cls()
        return cls(
            subgenre=_text(data.get("subgenre")),
            palette=_text_list(data.get("palette")),
            camera=Camera.from_dict(data.get("camera")),
            composition=_text(data.get("composition")),
            lighting=_text(data.get("lighting")),
            environment=_text(data.get("environment")),
            wardrobe_props=_text(data.get("wardrobe_props", data.get("wardrobeProps"))),
            motifs=_text_list(data.get("motifs")),
            keywords=_text_list(data.get("keywords")),
            banned=_text_list(data.get("banned")),
            extra={k: v for k, v in data.items() if k not in _VISUAL_SPEC_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({
            "subgenre": self.subgenre,
            "palette": list(self.palette),
            "camera": self.camera.to_dict(),
            "composition": self.composition,
            "lighting": self.lighting,
            "environment": self.environment,
            "wardrobe_props": self.wardrobe_props,
            "motifs": list(self.motifs),
            "keywords": list(self.keywords),
            "banned": list(self.banned),
        })
        return out


_CONCEPT_KEYS = {
    "title", "tagline", "synopsis", "decade", "genre", "visual_spec", "visualSpec",
    "render_style", "renderStyle", "nod_theme", "hardcoreMode", "seed",
}


@dataclass
class Concept:
    """The creative brief handed from the concept stage to the image stage."""

    title: str = ""
    tagline: str = ""
    synopsis: str = ""
    decade: str = ""
    genre: str = ""
    visual_spec: VisualSpec = field(default_factory=VisualSpec)
    render_style: str = ""
    nod_theme: bool = False
    seed: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Concept:
        """Build from provider or browser JSON; unknown keys ride along in ``extra``."""
        if not isinstance(data, dict):
            return cls()
        seed = data.get("seed", 0)
        try:
            seed = int(seed)
        except (TypeError, ValueError):
            seed = 0
        return cls(
            title=_text(data.get("title")).strip(),
            tagline=_text(data.get("tagline")),
            synopsis=_text(data.get("synopsis")),
            decade=_text(data.get("decade")).strip(),
            genre=_text(data.get("genre")).strip(),
            visual_spec=VisualSpec.from_dict(data.get("visual_spec", data.get("visualSpec"))),
            render_style=_text(data.get("render_style", data.get("renderStyle"))).strip(),
            nod_theme=parse_flag(data.get("nod_theme", data.get("hardcoreMode", False))),
            seed=seed,
            extra={k: v for k, v in data.items() if k not in _CONCEPT_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update({
            "title": self.title,
            "tagline": self.tagline,
            "decade": self.decade,
            "genre": self.genre,
            "synopsis": self.synopsis,
            "visual_spec": self.visual_spec.to_dict(),
            "render_style": self.render_style,
            "nod_theme": self.nod_theme,
            "seed": self.seed,
        })
        return out


@dataclass
class SongRecommendation:
    title: str
    artist: str
    year: str = "Unknown"
    reason: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SongRecommendation:
        return cls(
            title=_text(data.get("title")).strip(),
            artist=_text(data.get("artist")).strip(),
            year=_text(data.get("year")).strip() or "Unknown",
            reason=_text(data.get("reason")).strip(),
        )

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "artist": self.artist, "year": self.year, "reason": self.reason}


@dataclass
class ConceptPrompt:
    """A rendered concept prompt plus the values later stages validate against."""

    prompt: str
    decade: str
    theme: str
    seed: int
    genre_filter: GenreFilter = GenreFilter.ANY
    hardcore_mode: bool = False


@dataclass
class ProviderResult:
    value: str | None = None
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None


@dataclass
class GeneratedImage:
    base64_data: str
    mime_type: str = "image/png"
    provider: str = ""
    attempts: int = 1

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"
