"""Prompt templates and literal lookup tables for poster concept generation."""

from __future__ import annotations

from string import Template

# --- Eras ---

DECADES: tuple[str, ...] = (
    "1950s", "1960s", "1970s", "1980s", "1990s", "2000s", "2010s", "2020s",
)

DEFAULT_DECADE = "1980s"

# --- Creative seed themes ---

CREATIVE_THEMES: tuple[str, ...] = (
    "time manipulation", "parallel dimensions", "artificial consciousness",
    "genetic memories", "color psychology", "mathematical nightmares",
    "botanical mutations", "memory trading", "gravity anomalies",
    "digital archaeology", "weather manipulation", "architectural haunting",
    "crystalline entities", "quantum entanglement", "molecular dissolution",
    "temporal echoes", "geometric demons", "photographic souls",
    "magnetic personalities", "elastic reality", "transparent beings",
    "living architecture", "cosmic dread", "eldritch signals",
    "body horror metamorphosis (non-graphic)", "occult conspiracies (non-graphic)",
    "witch covens (implied)", "alien first contact", "robotic uprising (PG-13)",
    "mind uploading", "cryogenic revival", "space colonies", "virtual realities",
    "bioengineered viruses (non-graphic)", "energy beings",
    "mirror dimension bleeding (abstract)", "emotional parasites (metaphoric)",
    "dream archaeology", "liquid shadows (lighting motif)", "paper-thin realities",
    "dimensional doorways", "bone libraries (symbolic)",
)

# Hardcore pools widen intensity but stay PG-13 by implication.
HARDCORE_THEMES: dict[str, tuple[str, ...]] = {
    "horror": (
        "possessed broadcast towers (implied)", "cursed home movies",
        "sleep paralysis visitors", "cult of the drowned town (implied)",
        "skinwalker folklore (non-graphic)", "haunted asylum wards",
        "parasitic folklore (metaphoric)", "ritual masks that will not come off",
    ),
    "sci-fi": (
        "derelict generation ship", "runaway nanotech swarm",
        "hostile terraforming", "android insurgency (PG-13)",
        "black hole cult", "collapsed orbital elevator",
        "sentient quarantine zone", "time loop execution (non-graphic)",
    ),
    "fusion": (
        "alien possession (implied)", "haunted space station",
        "eldritch AI awakening", "biomechanical hive (non-graphic)",
        "cosmic cult transmission", "interdimensional predator (implied)",
        "quantum ghosts", "necromantic machinery (symbolic)",
    ),
}

# --- Constraints ---

GENRE_CONSTRAINTS: dict[str, str] = {
    "horror": '"Horror"',
    "sci-fi": '"Sci-Fi"',
    "fusion": "a tasteful fusion of Horror and Sci-Fi",
}

ANY_GENRE_CONSTRAINT = "Horror or Sci-Fi or fusion"

BANNED_TITLE_WORDS: tuple[str, ...] = (
    "Dark", "Shadow", "Night", "Blood", "Death", "Steel", "Cross", "Stone",
)

BASELINE_BANNED: tuple[str, ...] = ("gore", "blood", "weapons", "graphic injury")

# --- Render styles ---

RENDER_STYLES: tuple[str, ...] = (
    "hand-painted lithograph",
    "silkscreen halftone",
    "airbrushed illustration",
    "painted montage",
    "studio photo-composite",
    "digital composite",
)

ERA_RENDER_STYLES: dict[str, str] = {
    "1950s": "hand-painted lithograph",
    "1960s": "silkscreen halftone",
    "1970s": "airbrushed illustration",
    "1980s": "painted montage",
    "1990s": "studio photo-composite",
    "2000s": "digital composite",
    "2010s": "digital composite",
    "2020s": "digital composite",
}

RENDER_STYLE_HINTS: dict[str, str] = {
    "hand-painted lithograph": "hand-painted lithograph texture with visible brushwork",
    "silkscreen halftone": "silkscreen print with halftone dots and flat ink layers",
    "airbrushed illustration": "smooth airbrushed illustration with soft gradients",
    "painted montage": "painted montage of layered figures and dramatic rim light",
    "studio photo-composite": "studio photo-composite with crisp practical lighting",
    "digital composite": "polished digital composite with atmospheric depth",
}

ERA_STYLES: dict[str, str] = {
    "1950s": "vintage painted portrait style with warm color palette",
    "1960s": "retro illustration with bold geometric shapes and pop art influence",
    "1970s": "airbrushed painting with soft gradients and earthy tones",
    "1980s": "neon-lit cinematic portrait with dramatic shadows and vibrant colors",
    "1990s": "digital matte painting with photorealistic details",
    "2000s": "polished digital artwork with clean composition",
    "2010s": "minimalist portrait with negative space and contemporary aesthetics",
    "2020s": "modern digital painting with atmospheric lighting",
}

HARDCORE_IMAGE_INTENSITY = (
    "heightened dread, unsettling atmosphere, intense tension implied rather than shown"
)

IMAGE_NEGATIVE_PROMPT = (
    "text, words, letters, typography, titles, credits, signatures, "
    "logos, watermarks, captions, gore, blood"
)

# --- Fallback concept tables (normal, hardcore) ---

FALLBACK_TITLES: dict[bool, tuple[str, ...]] = {
    False: (
        "The Glass Orchard", "Signal From Meridian", "Hollow Frequency",
        "The Lantern Protocol", "Velvet Static", "Station Nine Below",
        "The Paper Cathedral", "Echo Garden", "Quiet Orbit",
        "The Mirror Tenant", "Amber Transmission", "Cold Harbor Lights",
    ),
    True: (
        "The Drowned Choir", "Vessel Zero", "Skin of the Moon",
        "Static Saints", "The Hollow Ward", "Red Meridian",
        "Feral Signal", "The Last Lighthouse Keeper", "Marrow Orbit",
        "Hunger Frequency", "The Wax Congregation", "Below the Ice Shelf",
    ),
}

FALLBACK_TAGLINES: dict[bool, tuple[str, ...]] = {
    False: (
        "Some harvests should never ripen.",
        "The message was meant for someone else.",
        "Listen closely. Something is listening back.",
        "Every light is a door.",
        "The picture is not the only thing moving.",
        "Nine floors down, the clocks run backwards.",
        "Faith folds in strange places.",
        "What you plant here remembers you.",
        "Silence has an orbit of its own.",
        "Your reflection signed the lease.",
        "It has been broadcasting for forty years.",
        "The harbor never sleeps. Neither will you.",
    ),
    True: (
        "The hymn rises from under the water.",
        "It came aboard empty. It will not leave that way.",
        "Wear it once and it wears you.",
        "Every channel is praying now.",
        "Lights out is only the beginning.",
        "The sky changed color and so did they.",
        "Something answered the distress call.",
        "The light keeps them out. For now.",
        "Nothing drifts out here by accident.",
        "It feeds on every frequency.",
        "They smile because they cannot stop.",
        "The ice remembers what it swallowed.",
    ),
}

FALLBACK_SYNOPSES: dict[bool, str] = {
    False: (
        "An enigmatic event reshapes life in a quiet town, and one reluctant "
        "witness must decide whether to expose it or become part of it."
    ),
    True: (
        "A sealed community wakes to find its rituals rewritten overnight, and "
        "the only way out runs straight through the thing they have been feeding."
    ),
}

FALLBACK_VISUALS: dict[bool, dict[str, object]] = {
    False: {
        "subgenre": "atmospheric mystery",
        "palette": ("#1B2A41", "#C9A227", "#E8E3D9"),
        "camera": {"shot": "medium close-up", "lens": "50mm", "depth_of_field": "shallow"},
        "composition": "centered figure framed by a glowing doorway",
        "lighting": "low-key with a single warm practical source",
        "environment": "fog-laced small town at dusk",
        "wardrobe_props": "period-accurate coat, handheld lantern",
        "motifs": ("doorways", "static glow", "reflections"),
    },
    True: {
        "subgenre": "cosmic dread",
        "palette": ("#0B0B0F", "#7A0C12", "#B8B8B8"),
        "camera": {"shot": "low-angle close-up", "lens": "24mm", "depth_of_field": "deep"},
        "composition": "figure dwarfed by an impossible silhouette",
        "lighting": "hard red rim light with crushed blacks",
        "environment": "abandoned facility flooded with mist",
        "wardrobe_props": "ceremonial mask, flickering flashlight",
        "motifs": ("masks", "eclipsed light", "spirals"),
    },
}

FALLBACK_KEYWORDS: tuple[str, ...] = ("poster", "no text", "cinematic", "professional")

# --- Song fallback table: decade -> category -> (title, artist, year) ---

SONG_DATABASE: dict[str, dict[str, tuple[str, str, str]]] = {
    "1950s": {
        "horror": ("Monster Mash", "Bobby Pickett", "1962"),
        "sci-fi": ("Flying Purple People Eater", "Sheb Wooley", "1958"),
        "default": ("Only You", "The Platters", "1955"),
    },
    "1960s": {
        "horror": ("I Put a Spell on You", "Screamin' Jay Hawkins", "1956"),
        "sci-fi": ("Space Oddity", "David Bowie", "1969"),
        "default": ("The Sound of Silence", "Simon & Garfunkel", "1964"),
    },
    "1970s": {
        "horror": ("Superstition", "Stevie Wonder", "1972"),
        "sci-fi": ("Space Truckin'", "Deep Purple", "1972"),
        "default": ("Hotel California", "Eagles", "1976"),
    },
    "1980s": {
        "horror": ("Thriller", "Michael Jackson", "1982"),
        "sci-fi": ("Blue Monday", "New Order", "1983"),
        "default": ("Don't Stop Believin'", "Journey", "1981"),
    },
    "1990s": {
        "horror": ("Closer", "Nine Inch Nails", "1994"),
        "sci-fi": ("Firestarter", "The Prodigy", "1996"),
        "default": ("Smells Like Teen Spirit", "Nirvana", "1991"),
    },
    "2000s": {
        "horror": ("Bodies", "Drowning Pool", "2001"),
        "sci-fi": ("Technologic", "Daft Punk", "2005"),
        "default": ("Hips Don't Lie", "Shakira", "2006"),
    },
    "2010s": {
        "horror": ("Heathens", "Twenty One Pilots", "2016"),
        "sci-fi": ("Radioactive", "Imagine Dragons", "2012"),
        "default": ("Shape of You", "Ed Sheeran", "2017"),
    },
    "2020s": {
        "horror": ("bad guy", "Billie Eilish", "2019"),
        "sci-fi": ("Blinding Lights", "The Weeknd", "2019"),
        "default": ("drivers license", "Olivia Rodrigo", "2021"),
    },
}

# --- Prompt bodies ---

CONCEPT_PROMPT = Template(
    """You are a film art director. Produce ONLY valid JSON. No prose.

Constraints:
- Era MUST be "$decade"
- Genre MUST be $genre_constraint
- Creative seed: "$theme"
- Avoid banned title words ($banned_words)
- Keep PG-13 implication (no graphic detail)$intensity
- Add render_style: era-true medium ($render_styles)

Return JSON:
{
  "title": "Short original title",
  "tagline": "Atmospheric one-liner",
  "decade": "$decade",
  "genre": "Horror|Sci-Fi|Fusion",
  "synopsis": "1-2 sentences",
  "visual_spec": {
    "subgenre": "...",
    "palette": ["#hex","#hex","#hex"],
    "camera": {"shot":"...","lens":"...","depth_of_field":"..."},
    "composition":"...",
    "lighting":"...",
    "environment":"...",
    "wardrobe_props":"...",
    "motifs":["..."],
    "keywords":["poster","no text","cinematic","professional"],
    "banned":["gore","blood","weapons","graphic injury"]
  },
  "render_style": "$default_render_style",
  "nod_theme": $nod_theme,
  "seed": $seed
}"""
)

HARDCORE_CONSTRAINT = (
    "\n- Hardcore mode: push dread and tension hard, but imply rather than show"
)

SONG_PROMPT = Template(
    """You are a music expert and film soundtrack consultant. Based on this movie concept, recommend the PERFECT song that would capture the essence and mood of this film.

MOVIE DETAILS:
Title: "$title"
Genre: $genre
Era: $decade
Tagline: "$tagline"
Synopsis: "$synopsis"

CRITICAL: You MUST respond with ONLY a valid JSON object. No additional text, explanation, or formatting. Just the JSON.

Example format:
{"title": "Song Title", "artist": "Artist Name", "year": "1985", "reason": "This song captures the film's themes because..."}

Your JSON response:"""
)

PING_PROMPT = "Reply with the single word OK."
