from flask import Blueprint, jsonify, request, current_app, abort
from sqlalchemy.exc import SQLAlchemyError
from voicerelay import db, socketio, clips
from voicerelay.models import Game
from voicerelay.services.relay.engine import (
    compute_visible,
    evaluate,
    record_first,
    record_second,
    reset,
)
from voicerelay.services.relay.codec import to_rows
from voicerelay.services.relay.errors import InvalidTransition, PersistenceFailure, RelayError
from typing import Any, Dict, Optional
import threading
import time
import weakref


relay = Blueprint('relay', __name__)

# One mutator at a time per game: evaluate -> mutate -> commit runs under this lock.
# Entries live only while some request holds the lock.
_game_locks: 'weakref.WeakValueDictionary[str, threading.Lock]' = weakref.WeakValueDictionary()
_game_locks_guard = threading.Lock()


def _game_lock(game_code: str) -> threading.Lock:
    with _game_locks_guard:
        lock = _game_locks.get(game_code)
        if lock is None:
            lock = threading.Lock()
            _game_locks[game_code] = lock
        return lock


def _request_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _player_name(data: Dict[str, Any]) -> Optional[str]:
    name = data.get('player_name')
    if not isinstance(name, str):
        return None
    return name.strip() or None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _load_game(game_code: str) -> Game:
    """Fetch the game row locked for update, creating the default game on first use."""
    game = Game.query.filter_by(game_code=game_code).with_for_update().first()
    if game is None and game_code == current_app.config.get('DEFAULT_GAME_CODE'):
        game = Game(game_code=game_code)
        db.session.add(game)
        _commit(game_code)
        game = Game.query.filter_by(game_code=game_code).with_for_update().first()
    if game is None:
        abort(404)
    return game


def _read_state(game: Game):
    try:
        return game.state
    except ValueError as exc:
        current_app.logger.exception(f"[state-corrupt] game={game.game_code}")
        raise PersistenceFailure('Could not read game state', game_code=game.game_code) from exc


def _commit(game_code: str, written_clip: Optional[str] = None) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        if written_clip:
            clips.delete(written_clip)
        current_app.logger.exception(f"[persist-fail] game={game_code}")
        raise PersistenceFailure('Could not save game state', game_code=game_code) from exc


def _notify(game_code: str) -> None:
    socketio.emit('state_update', {'game_code': game_code}, to=f"game:{game_code}", namespace='/ws')


def _evaluate_and_reclaim(game: Game, now: int):
    """Run the turn evaluation and persist a timeout reclamation if one happened."""
    state = _read_state(game)
    new_state, status = evaluate(state, now)
    if new_state != state:
        game.state = new_state
        _commit(game.game_code)
        current_app.logger.info(f"[reclaim] game={game.game_code} slot={status.player_number} timed out")
        _notify(game.game_code)
    return new_state, status


@relay.errorhandler(RelayError)
def handle_relay_error(exc: RelayError):
    if isinstance(exc, InvalidTransition):
        current_app.logger.info(f"[rejected] action={exc.action} reason={exc.message}")
    return jsonify(exc.to_dict()), exc.status_code


@relay.route('/create', methods=['POST'])
def create_game():
    new_game = Game()
    db.session.add(new_game)
    _commit(new_game.game_code)
    current_app.logger.info(f"[create] game={new_game.game_code}")
    return jsonify({
        'message': 'New game created!',
        'game_code': new_game.game_code
    }), 201


@relay.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    code = game_code.upper()
    lock = _game_lock(code)
    with lock:
        game = _load_game(code)
        state, status = _evaluate_and_reclaim(game, _now_ms())
        # Release the row lock taken by _load_game
        db.session.commit()
    return jsonify({
        'game_code': code,
        'slots': to_rows(state),
        'status': status.to_dict(),
        'visible': compute_visible(state).to_list(),
    })


@relay.route('/<string:game_code>/record-first', methods=['POST'])
def record_first_audio(game_code):
    data = _request_body()
    payload = clips.decode(data.get('audio_data'))
    code = game_code.upper()

    lock = _game_lock(code)
    with lock:
        game = _load_game(code)
        now = _now_ms()
        state, status = _evaluate_and_reclaim(game, now)
        if not status.can_record_first:
            db.session.commit()
            raise InvalidTransition('Not ready to record first audio', action='record_first')

        filename = clips.make_name(status.player_number - 1, 1, data.get('mime_type'))
        new_state, index = record_first(state, filename, _player_name(data), now)
        clips.save(filename, payload)
        game.state = new_state
        _commit(code, written_clip=filename)

    current_app.logger.info(f"[record-first] game={code} slot={index + 1} clip={filename}")
    _notify(code)
    return jsonify({
        'success': True,
        'message': 'First recording saved! Now record your second one.',
        'filename': filename,
        'player_number': index + 1,
    })


@relay.route('/<string:game_code>/record-second', methods=['POST'])
def record_second_audio(game_code):
    data = _request_body()
    payload = clips.decode(data.get('audio_data'))
    code = game_code.upper()

    lock = _game_lock(code)
    with lock:
        game = _load_game(code)
        now = _now_ms()
        state, status = _evaluate_and_reclaim(game, now)
        if not status.needs_second_file:
            db.session.commit()
            raise InvalidTransition('Not ready to record second audio', action='record_second')

        filename = clips.make_name(status.player_number - 1, 2, data.get('mime_type'))
        new_state = record_second(state, filename, _player_name(data), now)
        clips.save(filename, payload)
        game.state = new_state
        _commit(code, written_clip=filename)

    current_app.logger.info(f"[record-second] game={code} slot={status.player_number} clip={filename}")
    _notify(code)
    return jsonify({
        'success': True,
        'message': 'Second recording saved! Wait for the next player.',
        'filename': filename,
        'player_number': status.player_number,
    })


@relay.route('/<string:game_code>/reset', methods=['POST'])
def reset_game(game_code):
    code = game_code.upper()
    lock = _game_lock(code)
    with lock:
        game = _load_game(code)
        game.state = reset()
        _commit(code)
    current_app.logger.info(f"[reset] game={code}")
    _notify(code)
    return jsonify({'success': True, 'message': 'Game reset!'})
