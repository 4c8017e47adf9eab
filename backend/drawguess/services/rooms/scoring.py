from typing import List, Optional

from flask import current_app

from drawguess import db
from drawguess.models import Player, Room


def leaderboard(room: Room) -> List[Player]:
    """Players by score, highest first; ties keep join order."""
    return sorted(room.players, key=lambda p: (-(p.score or 0), p.id or 0))


def top_player(room: Room) -> Optional[Player]:
    board = leaderboard(room)
    return board[0] if board else None


def award_correct_guess(room: Room, player: Player) -> int:
    """Credit a correct guess to `player` and return the points awarded."""
    points = int(current_app.config.get('CORRECT_GUESS_POINTS', 10))
    player.score = (player.score or 0) + points
    db.session.add(player)
    db.session.commit()
    current_app.logger.info(
        f"[score] room={room.code} round={room.round} player={player.user_id} +{points} total={player.score}"
    )
    return points


def reset_scores(room: Room) -> None:
    for p in room.players:
        p.score = 0
        db.session.add(p)
