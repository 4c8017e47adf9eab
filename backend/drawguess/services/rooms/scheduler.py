import time
from typing import Set, Tuple

from drawguess import socketio
from drawguess.models import Room
from .turns import tick


_scheduled_turn_keys: Set[Tuple[int, int]] = set()


def schedule_turn_timer(app, room_id: int) -> None:
    """Run the countdown for the current turn of the given room.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single worker per (room_id, round)
    - Ticks every TICK_INTERVAL_SEC; once the clock is spent the next turn
      starts and a worker for the new round takes over
    - A worker stops as soon as its room is gone, idle, or already on
      another round (e.g. after a correct guess)
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    with app.app_context():
        room = Room.query.filter_by(id=room_id).first()
        if not room or room.status != 'playing':
            return
        round_idx = int(room.round or 0)
        key = (room.id, round_idx)
        if key in _scheduled_turn_keys:
            app.logger.info(f"[timer-skip] room={room.code} round={round_idx} already scheduled")
            return
        _scheduled_turn_keys.add(key)
        app.logger.info(f"[timer-set] room={room.code} round={round_idx} timer={room.timer}s")

    interval = float(app.config.get('TICK_INTERVAL_SEC', 1))
    try:
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
    except (TypeError, ValueError):
        hb = 0

    def _worker(rid: int, expected_round: int):
        last_beat = time.time()
        while True:
            socketio.sleep(interval)
            with app.app_context():
                r = Room.query.filter_by(id=rid).first()
                if not r or r.status != 'playing' or int(r.round or 0) != expected_round:
                    _scheduled_turn_keys.discard((rid, expected_round))
                    app.logger.info(f"[timer-abort] room={rid} round={expected_round} mismatch status/round")
                    return
                if hb > 0 and time.time() - last_beat >= hb:
                    last_beat = time.time()
                    app.logger.info(f"[timer-heartbeat] room={r.code} round={expected_round} remaining={r.timer}s")
                advanced = tick(r, expected_round)
                still_playing = r.status == 'playing'
            if advanced:
                _scheduled_turn_keys.discard((rid, expected_round))
                if still_playing:
                    schedule_turn_timer(app, rid)
                return

    if app.config.get('TESTING'):
        _worker(room_id, round_idx)
    else:
        socketio.start_background_task(_worker, room_id, round_idx)
