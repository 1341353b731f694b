from __future__ import annotations
import logging
import uuid
from typing import Any, Mapping, Optional, Set

from ..config import Config
from ..errors import GameNotFound, StoreError
from ..letter_bag import LetterBag
from ..schemas import COMMIT_FIELDS, GameState
from ..store import InMemoryDocumentStore

logger = logging.getLogger(__name__)

# Every stored change is mirrored to the Socket.IO room named after the game
class GameManager:
    def __init__(self, sio, store: Optional[InMemoryDocumentStore] = None, letter_bag: Optional[LetterBag] = None):
        self.sio = sio
        self.store = store or InMemoryDocumentStore()
        self.letter_bag = letter_bag or LetterBag()
        self._broadcasting: Set[str] = set()

    async def _broadcast(self, state: GameState):
        await self.sio.emit('game:snapshot', state.model_dump(), room=state.id)

    async def _ensure_broadcast(self, game_id: str):
        if game_id in self._broadcasting:
            return
        self._broadcasting.add(game_id)
        await self.store.subscribe(game_id, self._broadcast)

    async def create_game(self, player_id: str, player_name: Optional[str] = None) -> GameState:
        state = GameState(
            id=uuid.uuid4().hex,
            player1=player_id,
            player1Name=player_name or 'Player 1',
            player1Letters=self.letter_bag.draw(Config.RACK_SIZE),
            currentTurn=player_id,
            status='waiting',
        )
        stored = await self.store.create(state)
        await self._ensure_broadcast(stored.id)
        return stored

    async def get_game(self, game_id: str) -> GameState:
        state = await self.store.get(game_id)
        if state is None:
            raise GameNotFound(game_id)
        return state

    async def join_game(self, game_id: str, player_id: str, player_name: Optional[str] = None) -> GameState:
        state = await self.get_game(game_id)
        # Only a waiting game can take a second player, and not its creator
        if state.status != 'waiting' or state.player1 == player_id:
            return state
        joined = await self.store.merge_write(game_id, {
            'player2': player_id,
            'player2Name': player_name or 'Player 2',
            'player2Letters': self.letter_bag.draw(Config.RACK_SIZE),
            'status': 'active',
        })
        logger.info('%s joined game %s', player_id, game_id)
        return joined

    async def merge(self, game_id: str, player_id: str, fields: Mapping[str, Any]) -> GameState:
        state = await self.get_game(game_id)
        if state.status != 'active':
            raise StoreError(f'Game {game_id} is {state.status}')
        if state.currentTurn != player_id:
            raise StoreError(f'{player_id} does not hold the turn in game {game_id}')
        extra = set(fields) - set(COMMIT_FIELDS)
        if extra:
            raise StoreError(f'Cannot write fields: {", ".join(sorted(extra))}')
        # Committed letters stay put for the rest of the game
        board = fields.get('board', state.board)
        if not isinstance(board, Mapping) or any(board.get(key) != letter for key, letter in state.board.items()):
            raise StoreError(f'Board for game {game_id} changes committed letters')
        return await self.store.merge_write(game_id, dict(fields))
