from fastapi import APIRouter, Depends, HTTPException, Request

from ..errors import GameNotFound
from ..managers.game import GameManager
from ..schemas import GameState, PlayerInfo

router = APIRouter(prefix='/games')

def get_games(request: Request) -> GameManager:
    return request.app.state.games

@router.post('', response_model=GameState)
async def create_game(player: PlayerInfo, games: GameManager = Depends(get_games)):
    return await games.create_game(player.playerId, player.playerName)

@router.get('/{game_id}', response_model=GameState)
async def get_game(game_id: str, games: GameManager = Depends(get_games)):
    try:
        return await games.get_game(game_id)
    except GameNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))

@router.post('/{game_id}/join', response_model=GameState)
async def join_game(game_id: str, player: PlayerInfo, games: GameManager = Depends(get_games)):
    # Second player joining flips a waiting game to active
    try:
        return await games.join_game(game_id, player.playerId, player.playerName)
    except GameNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
