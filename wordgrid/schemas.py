from __future__ import annotations
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional

GameStatus = Literal['waiting', 'active', 'finished']
PlayerSlot = Literal['player1', 'player2']

# The groups a committing client writes back: board, both racks, both scores, turn owner
COMMIT_FIELDS = (
    'board',
    'player1Letters',
    'player2Letters',
    'player1Score',
    'player2Score',
    'currentTurn',
)

class GameState(BaseModel):
    id: str
    player1: str
    player1Name: Optional[str] = None
    player2: Optional[str] = None
    player2Name: Optional[str] = None
    # sparse "row,col" -> letter
    board: Dict[str, str] = {}
    player1Letters: List[str] = []
    player2Letters: List[str] = []
    player1Score: int = 0
    player2Score: int = 0
    currentTurn: Optional[str] = None
    status: GameStatus = 'waiting'
    # store-assigned revision, grows with every write
    updatedAt: int = 0

    def slot_of(self, player_id: str) -> Optional[PlayerSlot]:
        if player_id == self.player1:
            return 'player1'
        if self.player2 is not None and player_id == self.player2:
            return 'player2'
        return None

    def opponent_of(self, player_id: str) -> Optional[str]:
        slot = self.slot_of(player_id)
        if slot == 'player1':
            return self.player2
        if slot == 'player2':
            return self.player1
        return None

    def letters_of(self, player_id: str) -> List[str]:
        slot = self.slot_of(player_id)
        if slot is None:
            return []
        return list(getattr(self, f'{slot}Letters'))

    def score_of(self, player_id: str) -> int:
        slot = self.slot_of(player_id)
        if slot is None:
            return 0
        return getattr(self, f'{slot}Score')

class WordResult(BaseModel):
    word: str
    valid: bool
    score: int = 0

class Evaluation(BaseModel):
    totalScore: int = 0
    validWords: List[str] = []
    invalidWords: List[str] = []
    words: List[WordResult] = []

    @property
    def accepted(self) -> bool:
        return not self.invalidWords

class PlayerInfo(BaseModel):
    playerId: str
    playerName: Optional[str] = None

class MergeWrite(BaseModel):
    gameId: str
    fields: Dict[str, Any]
