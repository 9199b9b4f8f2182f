import asyncio
import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from . import session as machine
from .config import settings
from .database import get_high_score, save_high_score
from .models import Point, SessionState, TapOutcome, Viewport, WordPair

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState, SessionState], None]


def record_high_score(old: SessionState, new: SessionState):
    """Listener that persists the high score when a completion beats it."""
    if new.high_score > old.high_score:
        # Another session may have stored a better score since this one started.
        if new.high_score > get_high_score():
            logger.info(f"New high score: {new.high_score}")
        save_high_score(new.high_score)


class GameSession:
    """Owns the state of one player and publishes every change to listeners."""

    def __init__(
        self,
        word_pairs: Sequence[WordPair],
        viewport: Viewport,
        topic: str = "",
        rng=None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id
        self.word_pairs = list(word_pairs)
        self.viewport = viewport
        self.topic = topic
        self.rng = rng
        self.created_at = datetime.now()
        self.last_seen = self.created_at
        self.state = SessionState()
        self._listeners: List[Listener] = []
        self._fades: Dict[str, asyncio.TimerHandle] = {}

    # --- Observers ---
    def subscribe(self, listener: Listener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, new: SessionState):
        old, self.state = self.state, new
        if new is old:
            return
        if new.generation != old.generation:
            self._cancel_fades()
        for listener in list(self._listeners):
            listener(old, new)

    # --- Operations ---
    def start(self) -> SessionState:
        previous = self.state if self.state.target is not None else None
        new = machine.start_new_word(
            self.word_pairs,
            self.viewport,
            previous=previous,
            rng=self.rng,
            high_score=get_high_score(),
        )
        self._publish(new)
        return self.state

    def tick(self, steps: int = 1, viewport: Optional[Viewport] = None) -> SessionState:
        if viewport is not None:
            self.viewport = viewport
        new = self.state
        for _ in range(min(steps, settings.MAX_TICKS_PER_REQUEST)):
            new = machine.advance_tick(new, self.viewport)
        self._publish(new)
        return self.state

    def tap(self, point: Point) -> SessionState:
        before = {t.id for t in self.state.tokens if t.fading_out}
        new = machine.handle_tap_at(self.state, point, rng=self.rng)
        self._publish(new)

        if new.last_outcome in (TapOutcome.CORRECT, TapOutcome.COMPLETED):
            for token in new.tokens:
                if token.fading_out and token.id not in before:
                    self._schedule_fade(token.id, new.generation)
        elif new.last_outcome == TapOutcome.RETRY:
            logger.info(
                f"Retrying {new.target.spanish!r} ({new.retries} retries)",
                extra={"session_id": self.session_id},
            )
        return self.state

    # --- Deferred fade removal ---
    def _schedule_fade(self, token_id: str, generation: int):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop there is no animation to wait for.
            self._fade_done(token_id, generation)
            return
        self._fades[token_id] = loop.call_later(
            settings.FADE_DELAY_SECONDS, self._fade_done, token_id, generation
        )

    def _fade_done(self, token_id: str, generation: int):
        self._fades.pop(token_id, None)
        self._publish(machine.remove_token(self.state, token_id, generation))

    def _cancel_fades(self):
        for handle in self._fades.values():
            handle.cancel()
        self._fades.clear()

    @property
    def pending_fades(self) -> int:
        return len(self._fades)

    def close(self):
        self._cancel_fades()
        self._listeners.clear()


class GameManager:
    """In-memory registry of game sessions keyed by cookie value."""

    def __init__(self):
        self.sessions: Dict[str, GameSession] = {}

    def create(
        self,
        word_pairs: Sequence[WordPair],
        viewport: Viewport,
        topic: str = "",
        rng=None,
    ) -> str:
        self.purge_expired()
        new_id = str(uuid.uuid4())
        game = GameSession(word_pairs, viewport, topic=topic, rng=rng, session_id=new_id)
        game.subscribe(record_high_score)
        game.start()

        self.sessions[new_id] = game
        logger.info(
            f"New session: {new_id} [Topic: {topic}]", extra={"session_id": new_id}
        )
        return new_id

    def get(self, session_id: Optional[str]) -> Optional[GameSession]:
        if not session_id or session_id not in self.sessions:
            return None
        game = self.sessions[session_id]
        if self._expired(game):
            self.remove(session_id)
            return None
        game.last_seen = datetime.now()
        return game

    def purge_expired(self) -> int:
        """Drops every session idle for longer than the timeout."""
        expired = [sid for sid, game in self.sessions.items() if self._expired(game)]
        for sid in expired:
            self.remove(sid)
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")
        return len(expired)

    @staticmethod
    def _expired(game: GameSession) -> bool:
        return datetime.now() - game.last_seen > timedelta(
            minutes=settings.SESSION_TIMEOUT_MINUTES
        )

    def remove(self, session_id: Optional[str]):
        game = self.sessions.pop(session_id, None) if session_id else None
        if game is not None:
            game.close()
