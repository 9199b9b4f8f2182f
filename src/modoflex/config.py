import os
from typing import List, Tuple


class Settings:
    PROJECT_NAME: str = "modoflex"
    DEBUG: bool = os.environ.get("MODOFLEX_DEBUG", "") == "1"
    LOG_DIR: str = "log"
    LOG_FILE: str = "modoflex.log"
    LOG_TO_DB: bool = True
    DB_DIR: str = "db"
    DB_FILE: str = "modoflex.db"
    VOCAB_DIR: str = "vocabulary"
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")

    # Remote word lists
    WORDLIST_BASE_URL: str = os.environ.get(
        "WORDLIST_BASE_URL",
        "https://raw.githubusercontent.com/sandororszaghbihari/modoflex/main/modoflex/DATA/",
    )
    REQUEST_TIMEOUT: float = 10.0
    # (display name, file name on the server)
    FALLBACK_FILES: List[Tuple[str, str]] = [
        ("data.txt", "data.txt"),
        ("alap.txt", "alap.txt"),
        ("haladó.txt", "halado.txt"),
        ("szavak.txt", "szavak.txt"),
        ("gyakorlás.txt", "gyakorlas.txt"),
    ]

    # Sessions
    SESSION_COOKIE_NAME: str = "modoflex_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    HIGH_SCORE_KEY: str = "highScore"

    # Scoring
    MAX_LIVES: int = 3
    TAP_SCORE: int = 1
    COMPLETION_BONUS: int = 5
    BONUS_REQUIRES_CLEAN_RUN: bool = False

    # Layout
    TOKEN_SIZE_MIN: float = 48.0
    TOKEN_SIZE_MAX: float = 64.0
    TOKEN_BUFFER: float = 10.0
    LAYOUT_PAD_X: float = 60.0
    LAYOUT_PAD_TOP: float = 200.0
    LAYOUT_PAD_BOTTOM: float = 250.0
    PLACEMENT_ATTEMPTS: int = 100
    PLACEMENT_RELAX_ROUNDS: int = 3
    PLACEMENT_RELAX_FACTOR: float = 0.85

    # Motion
    MAX_SPEED: float = 1.2
    MOTION_MARGIN_X: float = 30.0
    MOTION_MARGIN_TOP: float = 120.0
    MOTION_MARGIN_BOTTOM: float = 130.0
    CLAMP_AFTER_COLLISION: bool = True
    TICK_RATE: int = 60
    TICKS_PER_REQUEST: int = 3
    MAX_TICKS_PER_REQUEST: int = 10
    FADE_DELAY_SECONDS: float = 0.3


settings = Settings()
