import os

from fastapi.templating import Jinja2Templates

from .config import settings
from .game import GameManager
from .vocabulary import RemoteWordSource, VocabularyManager

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

templates = Jinja2Templates(directory=os.path.join(PACKAGE_DIR, "templates"))
vocab_manager = VocabularyManager(
    settings.VOCAB_DIR, remote=RemoteWordSource(settings.WORDLIST_BASE_URL)
)
game_manager = GameManager()
