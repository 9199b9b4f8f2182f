import logging
import random

import pytest
from fastapi.testclient import TestClient

from modoflex.config import settings
from modoflex.database import init_db
from modoflex.models import Viewport, WordPair


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_DIR", str(tmp_path / "db"))
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setattr(settings, "VOCAB_DIR", str(tmp_path / "vocabulary"))
    init_db()
    yield


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def viewport():
    return Viewport(width=400, height=900)


@pytest.fixture
def hola():
    return WordPair(id=1, hungarian="szia", spanish="hola")


@pytest.fixture
def client(tmp_path, monkeypatch):
    from modoflex.app import create_app
    from modoflex.globals import game_manager, vocab_manager

    vocab_dir = tmp_path / "vocabulary"
    vocab_dir.mkdir()
    (vocab_dir / "greetings.txt").write_text("szia;hola\n", encoding="utf-8")
    monkeypatch.setattr(vocab_manager, "directory", str(vocab_dir))

    with TestClient(create_app()) as test_client:
        yield test_client

    for session_id in list(game_manager.sessions):
        game_manager.remove(session_id)
    logger = logging.getLogger("modoflex")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
