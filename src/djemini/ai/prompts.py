from __future__ import annotations

from typing import Iterable, Sequence

from djemini import config
from djemini.store.models import Item


def analysis_types(analysis_type: str) -> tuple[str, ...]:
    """Expand 'all' into the concrete category types."""
    if analysis_type == "all":
        return config.CATEGORY_TYPES
    if analysis_type not in config.CATEGORY_TYPES:
        raise ValueError(
            f"analysis type must be one of {', '.join(config.ANALYSIS_TYPES)}"
        )
    return (analysis_type,)


def build_categorization_prompt(items: Sequence[Item], analysis_type: str) -> str:
    types = analysis_types(analysis_type)

    song_list = "\n".join(
        f'{idx}. "{item.title}" by {item.artist or "Unknown"}'
        for idx, item in enumerate(items, start=1)
    )

    instructions = []
    example = []
    if "mood" in types:
        instructions.append(
            "**Mood** (can have multiple): " + ", ".join(config.MOOD_VOCABULARY)
        )
        example.append('"mood": ["happy", "uplifting"]')
    if "genre" in types:
        instructions.append(
            "**Genre** (can have multiple): " + ", ".join(config.GENRE_VOCABULARY)
        )
        example.append('"genre": ["pop", "electronic"]')
    if "energy" in types:
        instructions.append(
            "**Energy** (single value): " + ", ".join(config.ENERGY_VOCABULARY)
        )
        example.append('"energy": "high"')

    return "\n".join(
        [
            "Analyze the following songs and categorize them.",
            "Return ONLY valid JSON, no markdown or explanations.",
            "",
            "Songs:",
            song_list,
            "",
            *instructions,
            "",
            "Return one entry per song, using the song's number as index:",
            "{",
            '  "analyses": [',
            "    {",
            '      "index": 1,',
            "      " + ",\n      ".join(example),
            "    }",
            "  ]",
            "}",
        ]
    )


def _join(values: Iterable[str]) -> str:
    values = list(values)
    return ", ".join(values) if values else "(none)"


def build_suggestion_prompt(
    moods: Sequence[str], genres: Sequence[str], energies: Sequence[str]
) -> str:
    return "\n".join(
        [
            "You are a music curator. Based on the following categories found in a user's library,",
            f"suggest {config.MIN_SUGGESTIONS}-{config.MAX_SUGGESTIONS} logical playlists with simple, common names.",
            "",
            f"Available moods: {_join(moods)}",
            f"Available genres: {_join(genres)}",
            f"Available energy levels: {_join(energies)}",
            "",
            "Create playlists that combine these attributes in meaningful ways.",
            "Use simple, everyday names without buzzwords. Examples:",
            '- "Workout" (high energy + hip-hop/electronic + energetic mood)',
            '- "Late Night" (low energy + calm/melancholic + indie/r&b)',
            '- "Study" (medium energy + calm + electronic/classical)',
            '- "Sleep" (low energy + calm)',
            "",
            "Keep names 1-2 words, simple and descriptive.",
            'NO buzzwords like "bangers", "vibes", "mode", "flow".',
            "",
            "Each playlist should:",
            "1. Have a simple, common name (1-2 words max)",
            "2. Have a brief description",
            "3. Define filters using ONLY the available categories above",
            "",
            "Return ONLY valid JSON, no markdown:",
            "{",
            '  "playlists": [',
            "    {",
            '      "name": "Workout",',
            '      "description": "High-energy tracks for exercise",',
            '      "filters": {',
            '        "mood": ["energetic", "uplifting"],',
            '        "genre": ["hip-hop", "electronic"],',
            '        "energy": ["high"]',
            "      }",
            "    }",
            "  ]",
            "}",
        ]
    )
