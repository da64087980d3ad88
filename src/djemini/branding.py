from __future__ import annotations

import shutil
from typing import Literal

# --------------------------------------------------
# Layout constants
# --------------------------------------------------

DEFAULT_WIDTH = 72
LOG_GUTTER_WIDTH = 10

Width = int | Literal["auto"]


def _resolve_width(width: Width) -> int:
    if width == "auto":
        try:
            cols = shutil.get_terminal_size().columns
        except OSError:
            cols = DEFAULT_WIDTH
        return max(DEFAULT_WIDTH, cols - LOG_GUTTER_WIDTH)
    return max(DEFAULT_WIDTH, int(width))


# --------------------------------------------------
# Banner
# --------------------------------------------------

DJEMINI_BANNER = r"""
     _ _                _       _
  __| (_) ___ _ __ ___ (_)_ __ (_)
 / _` | |/ _ \ '_ ` _ \| | '_ \| |
| (_| | |  __/ | | | | | | | | | |
 \__,_|/ |\___|_| |_| |_|_|_| |_|_|
     |__/
"""


# --------------------------------------------------
# Headers / sections
# --------------------------------------------------


def DJEMINI_HEADER(
    title: str,
    *,
    width: Width = DEFAULT_WIDTH,
    pad: int = 6,
    motif: str = "♪",
) -> str:
    title = title.strip()
    inner = max(_resolve_width(width) - 2, len(title) + pad * 2)

    filler = inner - len(motif)
    left = filler // 2
    right = filler - left

    top = f"╔{'═' * left}{motif}{'═' * right}╗"
    mid = f"│{title.center(inner)}│"
    bot = f"╚{'═' * left}{motif}{'═' * right}╝"

    return f"\n{top}\n{mid}\n{bot}\n"


def DJEMINI_SECTION_END(
    *,
    width: Width = DEFAULT_WIDTH,
    motif: str = "♪",
    fill: str = "━",
) -> str:
    w = _resolve_width(width)
    side = max(0, (w - len(motif)) // 2)
    return f"{fill * side}{motif}{fill * (w - side - len(motif))}"


# --------------------------------------------------
# Symbols
# --------------------------------------------------


class SYMBOLS:
    OK = "✔"
    FAIL = "✖"
    WARN = "⚠"
    SKIPPED = "⤼"
