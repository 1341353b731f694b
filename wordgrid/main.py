from __future__ import annotations
import logging

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import Config
from .dictionary import get_service
from .errors import GameNotFound, StoreError
from .managers.game import GameManager
from .routers.games import router as games_router
from .schemas import MergeWrite

logging.basicConfig(level=Config.LOG_LEVEL,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Socket.IO server (ASGI)
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=Config.CORS_ORIGINS)
app = FastAPI(title="Wordgrid Server", version="0.1.0")

# Mount Socket.IO ASGI application
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# CORS for REST
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

games = GameManager(sio)
app.state.games = games
app.include_router(games_router)

# Dictionary validation REST endpoint
@app.get('/dict/validate')
async def validate_word(word: str):
    return { 'word': word, 'valid': get_service().is_valid(word) }

# Socket.IO Events
@sio.event
async def connect(sid, environ, auth):
    # The client sends its player id as the auth token
    player_id = None
    if isinstance(auth, dict):
        token = auth.get('token')
        if isinstance(token, str) and token.strip():
            player_id = token.strip()
    await sio.save_session(sid, { 'player_id': player_id })
    logger.debug('Socket %s connected as %s', sid, player_id)
    await sio.emit('pong', to=sid)

@sio.event
async def disconnect(sid):
    logger.debug('Socket %s disconnected', sid)

@sio.on('ping')
async def on_ping(sid):
    await sio.emit('pong', to=sid)

@sio.on('game:subscribe')
async def game_subscribe(sid, game_id: str):
    try:
        state = await games.get_game(game_id)
    except GameNotFound as exc:
        return { 'ok': False, 'notFound': True, 'error': str(exc) }
    await sio.enter_room(sid, game_id)
    # Subscribers always start from the current document
    await sio.emit('game:snapshot', state.model_dump(), to=sid)
    return { 'ok': True }

@sio.on('game:unsubscribe')
async def game_unsubscribe(sid, game_id: str):
    await sio.leave_room(sid, game_id)
    return { 'ok': True }

@sio.on('game:get')
async def game_get(sid, game_id: str):
    try:
        state = await games.get_game(game_id)
    except GameNotFound as exc:
        return { 'ok': False, 'notFound': True, 'error': str(exc) }
    return { 'ok': True, 'game': state.model_dump() }

@sio.on('game:merge')
async def game_merge(sid, payload):
    sess = await sio.get_session(sid) or {}
    player_id = sess.get('player_id')
    if not player_id:
        return { 'ok': False, 'error': 'Not identified' }
    try:
        write = MergeWrite.model_validate(payload)
        state = await games.merge(write.gameId, player_id, write.fields)
    except GameNotFound as exc:
        return { 'ok': False, 'notFound': True, 'error': str(exc) }
    except (StoreError, ValidationError) as exc:
        logger.warning('Rejected write from %s: %s', player_id, exc)
        return { 'ok': False, 'error': str(exc) }
    return { 'ok': True, 'game': state.model_dump() }

# Export ASGI app for uvicorn
application = asgi_app

# For local running: uvicorn wordgrid.main:application --reload --host 0.0.0.0 --port 8000
