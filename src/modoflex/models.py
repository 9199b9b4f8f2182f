from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .config import settings

Hand = Literal["left", "right"]


# --- Vocabulary ---
class WordPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = 0
    hungarian: str
    spanish: str
    question_note: str = ""
    answer_note: str = ""
    score: str = "0"


class RemoteFile(BaseModel):
    name: str
    url: str


# --- Geometry ---
class Point(BaseModel):
    x: float
    y: float


class Vector(BaseModel):
    dx: float = 0.0
    dy: float = 0.0


class Bounds(BaseModel):
    min_x: float
    min_y: float
    max_x: float
    max_y: float


class Viewport(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)

    def layout_area(self) -> Bounds:
        """Region where token centres may be placed initially."""
        min_x, max_x = _ordered(
            settings.LAYOUT_PAD_X, self.width - settings.LAYOUT_PAD_X
        )
        min_y, max_y = _ordered(
            settings.LAYOUT_PAD_TOP, self.height - settings.LAYOUT_PAD_BOTTOM
        )
        return Bounds(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)

    def motion_bounds(self) -> Bounds:
        """Walls the tokens bounce off while moving."""
        return Bounds(
            min_x=settings.MOTION_MARGIN_X,
            min_y=settings.MOTION_MARGIN_TOP,
            max_x=self.width - settings.MOTION_MARGIN_X,
            max_y=self.height - settings.MOTION_MARGIN_BOTTOM,
        )


def _ordered(low: float, high: float):
    # An inverted range means the viewport is too small; use its midpoint.
    if high < low:
        mid = (low + high) / 2
        return mid, mid
    return low, high


# --- Game state ---
class LetterToken(BaseModel):
    id: str
    char: str
    position: Point
    size: float
    velocity: Vector
    fading_out: bool = False

    @property
    def radius(self) -> float:
        return self.size / 2

    def contains(self, point: Point) -> bool:
        dx = point.x - self.position.x
        dy = point.y - self.position.y
        return dx * dx + dy * dy <= self.radius * self.radius


class TapOutcome(str, Enum):
    CORRECT = "correct"
    COMPLETED = "completed"
    WRONG_LETTER = "wrong_letter"
    MISS = "miss"
    RETRY = "retry"
    IGNORED = "ignored"


class SessionState(BaseModel):
    target: Optional[WordPair] = None
    tokens: List[LetterToken] = []
    typed_so_far: str = ""
    lives: int = Field(default=settings.MAX_LIVES, ge=0)
    score: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    high_score: int = 0
    completed: bool = False
    instruction_hand: Hand = "left"
    mistakes: int = 0
    retries: int = 0
    generation: int = 0
    ticks: int = 0
    dropped_letters: List[str] = []
    viewport: Optional[Viewport] = None

    # Feedback for the most recent tap
    last_outcome: Optional[TapOutcome] = None
    error_flash: bool = False
    sound: Optional[str] = None
    new_high_score: bool = False

    word_started_at: Optional[datetime] = None
    word_finished_at: Optional[datetime] = None
    started_at: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def matched_count(self) -> int:
        return len(self.typed_so_far)

    @computed_field
    @property
    def layout_complete(self) -> bool:
        return not self.dropped_letters

    @computed_field
    @property
    def word_elapsed_seconds(self) -> int:
        if self.word_started_at is None:
            return 0
        end = self.word_finished_at or datetime.now()
        return int((end - self.word_started_at).total_seconds())

    @computed_field
    @property
    def total_elapsed_seconds(self) -> int:
        return int((datetime.now() - self.started_at).total_seconds())

    def expected_char(self) -> Optional[str]:
        if self.target is None or self.completed:
            return None
        if len(self.typed_so_far) >= len(self.target.spanish):
            return None
        return self.target.spanish[len(self.typed_so_far)]


# --- API payloads ---
class StartRequest(BaseModel):
    source: Optional[str] = None
    remote: bool = False
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class TickRequest(BaseModel):
    steps: int = Field(default=1, ge=1)
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)


class TapRequest(BaseModel):
    x: float
    y: float
