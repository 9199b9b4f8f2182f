"""One fixed-rate simulation tick for the bouncing letter tokens."""

import math
from typing import List

from .config import settings
from .models import Bounds, LetterToken


def _integrate(token: LetterToken, bounds: Bounds):
    r = token.radius
    pos, vel = token.position, token.velocity

    new_x = pos.x + vel.dx
    if new_x - r < bounds.min_x or new_x + r > bounds.max_x:
        vel.dx = -vel.dx
        new_x = pos.x + vel.dx

    new_y = pos.y + vel.dy
    if new_y - r < bounds.min_y or new_y + r > bounds.max_y:
        vel.dy = -vel.dy
        new_y = pos.y + vel.dy

    pos.x, pos.y = new_x, new_y


def _separate(a: LetterToken, b: LetterToken):
    dx = b.position.x - a.position.x
    dy = b.position.y - a.position.y
    distance = math.hypot(dx, dy)
    # Sizes are diameters, so this is the sum of the radii.
    min_dist = (a.size + b.size) / 2
    if distance >= min_dist:
        return

    overlap = (min_dist - distance) / 2
    angle = math.atan2(dy, dx)
    offset_x = math.cos(angle) * overlap
    offset_y = math.sin(angle) * overlap
    a.position.x -= offset_x
    a.position.y -= offset_y
    b.position.x += offset_x
    b.position.y += offset_y


def _clamp(token: LetterToken, bounds: Bounds):
    r = token.radius
    pos, vel = token.position, token.velocity
    if pos.x - r < bounds.min_x:
        pos.x = bounds.min_x + r
        vel.dx = abs(vel.dx)
    elif pos.x + r > bounds.max_x:
        pos.x = bounds.max_x - r
        vel.dx = -abs(vel.dx)
    if pos.y - r < bounds.min_y:
        pos.y = bounds.min_y + r
        vel.dy = abs(vel.dy)
    elif pos.y + r > bounds.max_y:
        pos.y = bounds.max_y - r
        vel.dy = -abs(vel.dy)


def step_tokens(tokens: List[LetterToken], bounds: Bounds) -> List[LetterToken]:
    """Returns the tokens advanced by one tick; the input list is left untouched.

    Velocities are per-tick displacements. Pairwise overlap is resolved by
    pushing both tokens apart by half the overlap each.
    """
    moved = [t.model_copy(deep=True) for t in tokens]

    for token in moved:
        _integrate(token, bounds)

    for i in range(len(moved)):
        for j in range(i + 1, len(moved)):
            _separate(moved[i], moved[j])

    if settings.CLAMP_AFTER_COLLISION:
        for token in moved:
            _clamp(token, bounds)

    return moved
