"""Word-attempt state machine.

Every operation takes a ``SessionState`` and returns a new one; the input
is never mutated. ``advance_tick`` on a finished session returns the very
same object.
"""

import logging
import random
from datetime import datetime
from typing import Optional, Sequence

from .config import settings
from .layout import generate_layout
from .models import (
    Point,
    SessionState,
    TapOutcome,
    Viewport,
    WordPair,
)
from .motion import step_tokens

logger = logging.getLogger(__name__)

HANDS = ("left", "right")


class NoWordsError(LookupError):
    """Raised when a session is started from an empty word list."""


def _regenerate(state: SessionState, rng) -> None:
    tokens, dropped = generate_layout(state.target.spanish, state.viewport, rng)
    state.tokens = tokens
    state.dropped_letters = dropped
    state.generation += 1
    state.typed_so_far = ""
    state.lives = settings.MAX_LIVES
    state.mistakes = 0
    state.completed = False
    state.instruction_hand = rng.choice(HANDS)
    state.word_started_at = datetime.now()
    state.word_finished_at = None
    if dropped:
        logger.warning(
            f"Incomplete layout for {state.target.spanish!r}: dropped {dropped}"
        )


def _clear_feedback(state: SessionState) -> None:
    state.last_outcome = None
    state.error_flash = False
    state.sound = None
    state.new_high_score = False


def start_new_word(
    word_pairs: Sequence[WordPair],
    viewport: Viewport,
    previous: Optional[SessionState] = None,
    rng=None,
    high_score: int = 0,
) -> SessionState:
    """Draws a random pair (with replacement) and lays out its letters.

    Score, streak, high score and the total timer carry over from
    ``previous`` when one is given.
    """
    if not word_pairs:
        raise NoWordsError("No words available")
    rng = rng or random

    if previous is not None:
        state = SessionState(
            score=previous.score,
            streak=previous.streak,
            high_score=max(previous.high_score, high_score),
            generation=previous.generation,
            started_at=previous.started_at,
        )
    else:
        state = SessionState(high_score=high_score)

    state.target = rng.choice(list(word_pairs))
    state.viewport = viewport
    _regenerate(state, rng)
    logger.debug(
        f"New word: {state.target.hungarian} -> {state.target.spanish} "
        f"(generation {state.generation})"
    )
    return state


def restart_word(state: SessionState, rng=None) -> SessionState:
    """Lays out the same pair again with full lives."""
    new = state.model_copy(deep=True)
    _regenerate(new, rng or random)
    new.retries += 1
    return new


def advance_tick(state: SessionState, viewport: Viewport) -> SessionState:
    if state.completed or state.target is None:
        return state
    new = state.model_copy(deep=True)
    new.viewport = viewport
    new.tokens = step_tokens(state.tokens, viewport.motion_bounds())
    new.ticks += 1
    return new


def _hit_test(state: SessionState, point: Point):
    # Last drawn is on top.
    for token in reversed(state.tokens):
        if not token.fading_out and token.contains(point):
            return token
    return None


def _complete(state: SessionState) -> None:
    state.completed = True
    if not (settings.BONUS_REQUIRES_CLEAN_RUN and state.mistakes > 0):
        state.score += settings.COMPLETION_BONUS
    state.streak += 1
    if state.score > state.high_score:
        state.high_score = state.score
        state.new_high_score = True
    state.word_finished_at = datetime.now()
    state.last_outcome = TapOutcome.COMPLETED


def handle_tap_at(state: SessionState, point: Point, rng=None) -> SessionState:
    """Resolves a tap against the tokens and applies its consequences."""
    rng = rng or random
    new = state.model_copy(deep=True)
    _clear_feedback(new)

    expected = new.expected_char()
    if expected is None:
        new.last_outcome = TapOutcome.IGNORED
        return new

    token = _hit_test(new, point)
    if token is not None and token.char == expected:
        token.fading_out = True
        new.typed_so_far += token.char
        new.score += settings.TAP_SCORE
        new.instruction_hand = rng.choice(HANDS)
        new.last_outcome = TapOutcome.CORRECT
        if len(new.typed_so_far) == len(new.target.spanish):
            _complete(new)
        return new

    new.lives -= 1
    new.streak = 0
    new.mistakes += 1
    new.error_flash = True
    new.sound = "error"
    new.last_outcome = TapOutcome.MISS if token is None else TapOutcome.WRONG_LETTER

    if new.lives <= 0:
        logger.info(f"Out of lives on {new.target.spanish!r}, retrying")
        _regenerate(new, rng)
        new.retries += 1
        new.last_outcome = TapOutcome.RETRY
    return new


def remove_token(state: SessionState, token_id: str, generation: int) -> SessionState:
    """Drops a faded token unless the layout has been replaced since."""
    if state.generation != generation:
        return state
    if not any(t.id == token_id for t in state.tokens):
        return state
    new = state.model_copy(deep=True)
    new.tokens = [t for t in new.tokens if t.id != token_id]
    return new
