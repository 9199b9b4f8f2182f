import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import settings
from .database import init_db
from .globals import PACKAGE_DIR, vocab_manager
from .log_handler import SQLiteHandler
from .router import router


# --- Logging Setup ---
def setup_logging():
    logger = logging.getLogger("modoflex")
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if settings.LOG_TO_DB:
        db_handler = SQLiteHandler()
        db_handler.setFormatter(formatter)
        logger.addHandler(db_handler)
    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    vocab_manager.load_all()
    yield


# --- App Factory ---
def create_app() -> FastAPI:
    init_db()
    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan,
        root_path=settings.ROOT_PATH,
    )

    app.mount(
        "/static",
        StaticFiles(directory=os.path.join(PACKAGE_DIR, "static")),
        name="static",
    )

    app.include_router(router)

    return app
