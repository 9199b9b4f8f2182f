import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from .config import settings
from .database import get_high_score
from .globals import game_manager, templates, vocab_manager
from .models import Point, StartRequest, TapRequest, TickRequest, Viewport
from .session import NoWordsError
from .vocabulary import WordListError

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def _session_invalid() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


# --- Routes ---
@router.get("/", response_class=HTMLResponse)
async def home(request: Request):
    return templates.TemplateResponse(
        request,
        "game.html",
        {
            "title": "ModoFlex",
            "tick_rate": settings.TICK_RATE,
            "ticks_per_request": settings.TICKS_PER_REQUEST,
        },
    )


@router.get("/api/topics")
async def get_topics():
    return vocab_manager.get_topics()


@router.get("/api/files")
def get_remote_files():
    return [f.model_dump() for f in vocab_manager.list_remote_files()]


@router.get("/api/high-score")
async def high_score():
    return {"high_score": get_high_score()}


@router.post("/api/game/start")
async def start_game(
    body: StartRequest,
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
):
    topic = body.source or ""
    try:
        if body.remote:
            if not topic:
                return JSONResponse({"error": "No file selected"}, status_code=400)
            word_pairs = await run_in_threadpool(vocab_manager.load_remote, topic)
        else:
            word_pairs = vocab_manager.get_words(topic)
            if not word_pairs:
                # Fallback to first available
                topics = vocab_manager.get_topics()
                topic = topics[0]["id"] if topics else ""
                word_pairs = vocab_manager.get_words(topic)

        viewport = Viewport(width=body.width, height=body.height)
        new_id = game_manager.create(word_pairs, viewport, topic=topic)
    except (WordListError, NoWordsError) as e:
        logger.error(f"Cannot start game with {topic!r}: {e}")
        return JSONResponse({"error": str(e)}, status_code=404)

    game_manager.remove(session_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=new_id,
        httponly=True,
        samesite="Lax",
    )
    return game_manager.get(new_id).state.model_dump(mode="json")


@router.get("/api/game/state")
async def get_state(session_id: Optional[str] = Depends(get_session_id)):
    game = game_manager.get(session_id)
    if not game:
        return _session_invalid()
    return game.state.model_dump(mode="json")


@router.post("/api/game/tick")
async def tick(body: TickRequest, session_id: Optional[str] = Depends(get_session_id)):
    game = game_manager.get(session_id)
    if not game:
        return _session_invalid()
    viewport = None
    if body.width is not None and body.height is not None:
        viewport = Viewport(width=body.width, height=body.height)
    return game.tick(body.steps, viewport).model_dump(mode="json")


@router.post("/api/game/tap")
async def tap(body: TapRequest, session_id: Optional[str] = Depends(get_session_id)):
    game = game_manager.get(session_id)
    if not game:
        return _session_invalid()
    return game.tap(Point(x=body.x, y=body.y)).model_dump(mode="json")


@router.post("/api/game/next")
async def next_word(session_id: Optional[str] = Depends(get_session_id)):
    game = game_manager.get(session_id)
    if not game:
        return _session_invalid()
    return game.start().model_dump(mode="json")


@router.post("/api/reset")
async def reset_session(response: Response, session_id: Optional[str] = Depends(get_session_id)):
    game_manager.remove(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}
