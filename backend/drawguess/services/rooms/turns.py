import random
from typing import Optional

from flask import current_app

from drawguess import db
from drawguess.models import Room
from drawguess.words import pick_word
from .canvas import clear_canvas
from .chat import post_system_message
from .errors import RoomError
from .scoring import reset_scores, top_player
from . import notify


def _next_drawer_id(room: Room):
    players = list(room.players)
    if not players:
        return None
    next_idx = 0
    if room.drawer_id:
        ids = [p.user_id for p in players]
        # A drawer who already left counts as index -1, so rotation restarts at the first player
        current_idx = ids.index(room.drawer_id) if room.drawer_id in ids else -1
        next_idx = (current_idx + 1) % len(players)
    return players[next_idx].user_id


def start_game(room: Room, user_id: str) -> Room:
    player = room.find_player(user_id)
    if not player:
        raise RoomError('You are not a player in this room', 404)
    if not player.is_host:
        raise RoomError('Only the host may start the game', 403)
    if room.status == 'playing':
        # Idempotent start: already started
        return room
    min_players = int(current_app.config.get('MIN_PLAYERS', 2))
    if len(room.players) < min_players:
        raise RoomError(f'At least {min_players} players are required to start')

    if room.status == 'ended':
        reset_scores(room)
        room.round = 0
        room.winner = None
        room.drawer_id = None
    current_app.logger.info(f"[start] room={room.code} players={len(room.players)} by={user_id}")
    next_turn(room)
    return room


def next_turn(room: Room, rng=random) -> Room:
    """Hand the pencil to the next player with a fresh word, or end the game."""
    total_rounds = int(current_app.config.get('TOTAL_ROUNDS', 0) or 0)
    if total_rounds > 0 and room.round >= total_rounds:
        return end_game(room)

    drawer_id = _next_drawer_id(room)
    if drawer_id is None:
        current_app.logger.info(f"[next_turn] room={room.code} no players left")
        return room

    prev_round = room.round
    room.status = 'playing'
    room.drawer_id = drawer_id
    room.current_word = pick_word(rng)
    room.timer = int(current_app.config.get('TURN_DURATION_SEC', 60))
    room.round = prev_round + 1
    room.winner = None
    room.touch()
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(
        f"[next_turn] room={room.code} round {prev_round} -> {room.round} drawer={drawer_id}"
    )

    notify.state_changed(room)
    notify.players_changed(room)
    clear_canvas(room)
    post_system_message(room, f"Round {room.round} started! A drawer has been chosen.")
    return room


def end_game(room: Room) -> Room:
    winner = top_player(room)
    room.status = 'ended'
    room.drawer_id = None
    room.current_word = None
    room.timer = 0
    room.winner = winner.name if winner else None
    room.touch()
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[finish] room={room.code} finished at round={room.round} winner={room.winner}")

    notify.state_changed(room)
    if winner:
        post_system_message(room, f"Game over! {winner.name} wins with {winner.score} points.")
    else:
        post_system_message(room, "Game over!")
    return room


def stop_game(room: Room) -> Room:
    """Return a room to the lobby, e.g. when too few players remain."""
    stopped_at = room.round
    room.status = 'waiting'
    room.drawer_id = None
    room.current_word = None
    room.timer = 0
    room.round = 0
    room.touch()
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[stop] room={room.code} back to waiting after round={stopped_at}")
    notify.state_changed(room)
    clear_canvas(room)
    return room


def tick(room: Room, expected_round: Optional[int] = None) -> bool:
    """Advance the turn clock by one step.

    ``expected_round`` is the round the caller is counting down; a tick for a
    round that has already been replaced (say by a correct guess committed in
    the meantime) changes nothing. Returns True when the turn ran out and the
    next turn (or the end of the game) was entered.
    """
    if expected_round is None:
        expected_round = room.round
    if room.status != 'playing' or room.round != expected_round:
        return False
    if room.timer > 0:
        # Conditional update so a stale in-memory room never overwrites a newer turn
        updated = Room.query.filter(
            Room.id == room.id,
            Room.status == 'playing',
            Room.round == expected_round,
            Room.timer > 0,
        ).update({'timer': Room.timer - 1}, synchronize_session=False)
        db.session.commit()
        if updated:
            notify.state_changed(room)
        return False
    db.session.refresh(room)
    if room.status != 'playing' or room.round != expected_round:
        return False
    current_app.logger.info(f"[timeout] room={room.code} round={room.round} drawer={room.drawer_id}")
    next_turn(room)
    return True
