from __future__ import annotations
from dataclasses import dataclass, field
from typing import Container, List, Optional

from ..grid import GridModel
from ..letter_bag import LetterBag
from ..schemas import GameState, GameStatus, PlayerSlot

@dataclass
class GameSession:
    player_id: str
    dictionary: Container[str]
    letter_bag: LetterBag = field(default_factory=LetterBag)
    grid: GridModel = field(default_factory=GridModel)
    # board the current turn started from
    snapshot: GridModel = field(default_factory=GridModel)
    rack: List[str] = field(default_factory=list)
    state: Optional[GameState] = None

    @property
    def slot(self) -> Optional[PlayerSlot]:
        return self.state.slot_of(self.player_id) if self.state else None

    @property
    def status(self) -> Optional[GameStatus]:
        return self.state.status if self.state else None

    @property
    def current_turn(self) -> Optional[str]:
        return self.state.currentTurn if self.state else None

    @property
    def score(self) -> int:
        return self.state.score_of(self.player_id) if self.state else 0

    @property
    def opponent_score(self) -> int:
        if not self.state:
            return 0
        opponent = self.state.opponent_of(self.player_id)
        return self.state.score_of(opponent) if opponent else 0
