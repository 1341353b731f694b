from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from .errors import StaleSnapshot, StoreError
from .managers.session import GameSession
from .managers.turn import TurnController
from .schemas import COMMIT_FIELDS, GameState
from .store import DocumentStore, Unsubscribe

logger = logging.getLogger(__name__)

class SyncBridge:
    def __init__(self, store: DocumentStore, game_id: str, session: GameSession):
        self.store = store
        self.game_id = game_id
        self.session = session
        self.controller = TurnController(session, publish=self.push)
        self._unsubscribe: Optional[Unsubscribe] = None

    async def start(self):
        if self._unsubscribe is not None:
            return
        self._unsubscribe = await self.store.subscribe(self.game_id, self._on_snapshot)
        logger.info('%s subscribed to game %s', self.session.player_id, self.game_id)

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.info('%s unsubscribed from game %s', self.session.player_id, self.game_id)

    async def _on_snapshot(self, state: GameState):
        if state.id != self.game_id:
            return
        try:
            self.controller.apply_snapshot(state)
        except StaleSnapshot as exc:
            logger.warning('Ignoring snapshot for game %s: %s', self.game_id, exc)

    async def push(self, fields: Dict[str, Any]) -> GameState:
        extra = set(fields) - set(COMMIT_FIELDS)
        if extra:
            raise StoreError(f'Refusing to write non-commit fields: {", ".join(sorted(extra))}')
        missing = set(COMMIT_FIELDS) - set(fields)
        if missing:
            raise StoreError(f'Commit is missing fields: {", ".join(sorted(missing))}')
        return await self.store.merge_write(self.game_id, fields)
