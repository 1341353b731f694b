from __future__ import annotations
import logging
from itertools import count
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol

from .errors import GameNotFound, StoreError
from .schemas import GameState

logger = logging.getLogger(__name__)

Listener = Callable[[GameState], Awaitable[None]]
Unsubscribe = Callable[[], None]

# One document per game, pushed to subscribers on every change
class DocumentStore(Protocol):
    async def get(self, game_id: str) -> Optional[GameState]: ...

    async def subscribe(self, game_id: str, listener: Listener) -> Unsubscribe: ...

    async def merge_write(self, game_id: str, fields: Mapping[str, Any]) -> GameState: ...

# Every write stamps a new updatedAt revision
class InMemoryDocumentStore:
    def __init__(self):
        self._docs: Dict[str, GameState] = {}
        self._listeners: Dict[str, List[Listener]] = {}
        self._revisions = count(1)

    async def create(self, state: GameState) -> GameState:
        if state.id in self._docs:
            raise StoreError(f'Game {state.id} already exists')
        stored = state.model_copy(update={'updatedAt': next(self._revisions)}, deep=True)
        self._docs[stored.id] = stored
        logger.info('Created game %s', stored.id)
        await self._notify(stored)
        return stored.model_copy(deep=True)

    async def get(self, game_id: str) -> Optional[GameState]:
        doc = self._docs.get(game_id)
        return doc.model_copy(deep=True) if doc else None

    async def subscribe(self, game_id: str, listener: Listener) -> Unsubscribe:
        listeners = self._listeners.setdefault(game_id, [])
        listeners.append(listener)

        def unsubscribe():
            if listener in listeners:
                listeners.remove(listener)

        doc = self._docs.get(game_id)
        if doc is not None:
            await listener(doc.model_copy(deep=True))
        return unsubscribe

    async def merge_write(self, game_id: str, fields: Mapping[str, Any]) -> GameState:
        doc = self._docs.get(game_id)
        if doc is None:
            raise GameNotFound(game_id)
        unknown = (set(fields) - set(GameState.model_fields)) | ({'id', 'updatedAt'} & set(fields))
        if unknown:
            raise StoreError(f'Cannot write fields: {", ".join(sorted(unknown))}')
        merged = GameState.model_validate({
            **doc.model_dump(),
            **fields,
            'updatedAt': next(self._revisions),
        })
        self._docs[game_id] = merged
        logger.debug('Game %s now at revision %d', game_id, merged.updatedAt)
        await self._notify(merged)
        return merged.model_copy(deep=True)

    async def _notify(self, doc: GameState):
        for listener in list(self._listeners.get(doc.id, [])):
            await listener(doc.model_copy(deep=True))
