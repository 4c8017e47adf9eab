from typing import Optional

from flask import current_app

from drawguess.models import Message, Room
from .chat import post_message, post_system_message
from .errors import RoomError
from .scoring import award_correct_guess
from .turns import next_turn
from . import notify


def is_correct(guess: str, word: Optional[str]) -> bool:
    if not word:
        return False
    return guess.strip().casefold() == word.strip().casefold()


def submit_chat(room: Room, user_id: str, text) -> dict:
    """Post a chat line, treating it as a guess while a turn is running.

    A correct guess is never posted to the chat; the guesser is credited, the
    answer is announced by a system message and the next turn starts.
    """
    player = room.find_player(user_id)
    if not player:
        raise RoomError('You are not a player in this room', 404)
    text = text.strip() if isinstance(text, str) else ''
    if not text:
        raise RoomError('Message text is required')

    playing = room.status == 'playing'
    if playing and user_id == room.drawer_id:
        raise RoomError('The drawer cannot chat during their turn', 403)

    if playing and is_correct(text, room.current_word):
        word = room.current_word
        points = award_correct_guess(room, player)
        notify.players_changed(room)
        announcement = post_system_message(room, f"{player.name} guessed the word [{word}]!")
        current_app.logger.info(f"[guess] room={room.code} round={room.round} player={user_id} correct")
        next_turn(room)
        return {'correct': True, 'points': points, 'message': announcement.to_dict()}

    message: Message = post_message(room, player.user_id, player.name, text)
    return {'correct': False, 'points': 0, 'message': message.to_dict()}
