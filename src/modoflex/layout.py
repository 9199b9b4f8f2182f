"""Initial placement of letter tokens inside the viewport."""

import logging
import random
import uuid
from typing import List, Optional, Tuple

from .config import settings
from .models import Bounds, LetterToken, Point, Vector, Viewport

logger = logging.getLogger(__name__)

Box = Tuple[float, float, float, float]


def padded_box(x: float, y: float, size: float, buffer: float) -> Box:
    half = size / 2 + buffer / 2
    return (x - half, y - half, x + half, y + half)


def boxes_intersect(a: Box, b: Box) -> bool:
    return a[0] < b[2] and b[0] < a[2] and a[1] < b[3] and b[1] < a[3]


def _try_place(
    char: str,
    area: Bounds,
    used: List[Box],
    size_range: Tuple[float, float],
    buffer: float,
    rng,
) -> Optional[Tuple[LetterToken, Box]]:
    for _ in range(settings.PLACEMENT_ATTEMPTS):
        size = rng.uniform(*size_range)
        x = rng.uniform(area.min_x, area.max_x)
        y = rng.uniform(area.min_y, area.max_y)
        box = padded_box(x, y, size, buffer)
        if any(boxes_intersect(box, other) for other in used):
            continue
        token = LetterToken(
            id=str(uuid.uuid4()),
            char=char,
            position=Point(x=x, y=y),
            size=size,
            velocity=Vector(
                dx=rng.uniform(-settings.MAX_SPEED, settings.MAX_SPEED),
                dy=rng.uniform(-settings.MAX_SPEED, settings.MAX_SPEED),
            ),
        )
        return token, box
    return None


def generate_layout(
    word: str, viewport: Viewport, rng=None
) -> Tuple[List[LetterToken], List[str]]:
    """Places one token per character of ``word`` without overlap.

    A character that does not fit after ``PLACEMENT_ATTEMPTS`` tries is
    retried with no buffer and progressively smaller sizes. Characters that
    still do not fit are returned in the second element of the result.
    """
    rng = rng or random
    area = viewport.layout_area()
    used: List[Box] = []
    tokens: List[LetterToken] = []
    dropped: List[str] = []

    base_range = (settings.TOKEN_SIZE_MIN, settings.TOKEN_SIZE_MAX)
    for char in word:
        placed = _try_place(char, area, used, base_range, settings.TOKEN_BUFFER, rng)

        scale = 1.0
        for round_no in range(1, settings.PLACEMENT_RELAX_ROUNDS + 1):
            if placed is not None:
                break
            scale *= settings.PLACEMENT_RELAX_FACTOR
            size_range = (base_range[0] * scale, base_range[1] * scale)
            placed = _try_place(char, area, used, size_range, 0.0, rng)
            if placed is not None:
                logger.info(f"Placed {char!r} after {round_no} relaxed round(s)")

        if placed is None:
            logger.warning(f"Placement failed: {char!r} in {word!r}")
            dropped.append(char)
            continue

        token, box = placed
        tokens.append(token)
        used.append(box)

    return tokens, dropped
