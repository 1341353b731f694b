from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional

import socketio

from .config import Config
from .errors import GameError, GameNotFound, StoreError
from .schemas import GameState
from .store import Listener, Unsubscribe

logger = logging.getLogger(__name__)

# Game documents held by the wordgrid server; the player id goes in the auth token
class SocketIODocumentStore:
    def __init__(self, player_id: str, url: str = Config.SERVER_URL, client: Optional[socketio.AsyncClient] = None):
        self.player_id = player_id
        self.url = url
        self.sio = client or socketio.AsyncClient()
        self._listeners: Dict[str, List[Listener]] = {}
        self.sio.on('connect', self._on_connect)
        self.sio.on('game:snapshot', self._on_snapshot)

    async def connect(self):
        await self.sio.connect(self.url, auth={'token': self.player_id})
        logger.info('Connected to %s as %s', self.url, self.player_id)

    async def disconnect(self):
        await self.sio.disconnect()

    async def get(self, game_id: str) -> Optional[GameState]:
        resp = await self.sio.call('game:get', game_id)
        if not resp or not resp.get('ok'):
            return None
        return GameState.model_validate(resp['game'])

    async def subscribe(self, game_id: str, listener: Listener) -> Unsubscribe:
        listeners = self._listeners.setdefault(game_id, [])
        listeners.append(listener)
        try:
            # server answers with an ack, then pushes the current document as game:snapshot
            await self._request_feed(game_id)
        except Exception:
            self._drop(game_id, listener)
            raise

        def unsubscribe():
            if self._drop(game_id, listener):
                self.sio.start_background_task(self.sio.emit, 'game:unsubscribe', game_id)

        return unsubscribe

    async def merge_write(self, game_id: str, fields: Mapping[str, Any]) -> GameState:
        resp = await self.sio.call('game:merge', {'gameId': game_id, 'fields': dict(fields)})
        self._check(resp, game_id, 'writing')
        return GameState.model_validate(resp['game'])

    async def _request_feed(self, game_id: str):
        resp = await self.sio.call('game:subscribe', game_id)
        self._check(resp, game_id, 'subscribing to')

    def _check(self, resp: Optional[Dict[str, Any]], game_id: str, action: str):
        if not resp:
            raise StoreError(f'No answer {action} game {game_id}')
        if not resp.get('ok'):
            if resp.get('notFound'):
                raise GameNotFound(game_id)
            raise StoreError(resp.get('error') or f'{action.capitalize()} game {game_id} rejected')

    def _drop(self, game_id: str, listener: Listener) -> bool:
        # True once the last listener of the game is gone
        listeners = self._listeners.get(game_id, [])
        if listener in listeners:
            listeners.remove(listener)
        if listeners or game_id not in self._listeners:
            return False
        del self._listeners[game_id]
        return True

    async def _on_connect(self):
        # a reconnect gets a new sid that is in no room yet; acks need the read loop free
        if self._listeners:
            self.sio.start_background_task(self._resubscribe)

    async def _resubscribe(self):
        for game_id in list(self._listeners):
            try:
                await self._request_feed(game_id)
            except GameError as exc:
                logger.warning('Could not resubscribe to game %s: %s', game_id, exc)

    async def _on_snapshot(self, data: Dict[str, Any]):
        state = GameState.model_validate(data)
        for listener in list(self._listeners.get(state.id, [])):
            await listener(state)
