from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from numguess import socketio
from numguess.models import GameDifficulty, GameStatus, parse_enum, to_storage
from numguess.services.games import engine, statistics
from numguess.services.results import ErrorKind, normalize_paging
from numguess.validators import validate_create_session, validate_guess


games = Blueprint('games', __name__)

_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.GAME_NOT_ACTIVE: 409,
    ErrorKind.OUT_OF_RANGE: 400,
    ErrorKind.ATTEMPTS_EXHAUSTED: 409,
    ErrorKind.CONCURRENT_SESSION_LIMIT_EXCEEDED: 409,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.PERSISTENCE_FAILURE: 503,
}


def _failure(result):
    body = {'success': False, 'error': result.error.value, 'message': result.message}
    return jsonify(body), _STATUS_CODES.get(result.error, 400)


def _validation_failure(message, errors):
    return jsonify({
        'success': False,
        'error': ErrorKind.VALIDATION_FAILED.value,
        'message': message,
        'errors': errors,
    }), 400


def _emit_game_update(game):
    socketio.emit(
        'game_update',
        {'game_id': game.id, 'status': to_storage(game.status), 'attempts_count': game.attempts_count},
        to=f"player:{current_user.id}",
        namespace='/ws',
    )


def _int_arg(name, default):
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


@games.route('', methods=['POST'])
@login_required
def create_game():
    data, errors = validate_create_session(request.get_json(silent=True))
    if errors:
        return _validation_failure('Game creation failed', errors)

    result = engine.create_session(
        current_user.id,
        difficulty=data['difficulty'],
        custom_min=data['custom_min'],
        custom_max=data['custom_max'],
        custom_max_attempts=data['custom_max_attempts'],
    )
    if not result.ok:
        return _failure(result)
    game = result.value
    _emit_game_update(game)
    return jsonify({'success': True, 'data': game.to_dict(user_id=current_user.id)}), 201


@games.route('/<string:game_id>/guess', methods=['POST'])
@login_required
def make_guess(game_id):
    guessed, errors = validate_guess(request.get_json(silent=True))
    if errors:
        return _validation_failure('Guess failed', errors)

    result = engine.submit_guess(current_user.id, game_id, guessed)
    if not result.ok:
        return _failure(result)
    attempt = result.value
    game_result = engine.get_session(current_user.id, game_id)
    if game_result.ok:
        _emit_game_update(game_result.value)
    return jsonify({'success': True, 'data': attempt.to_dict()})


@games.route('/<string:game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    result = engine.get_session(current_user.id, game_id)
    if not result.ok:
        return _failure(result)
    return jsonify({'success': True, 'data': result.value.to_dict(user_id=current_user.id)})


@games.route('/<string:game_id>/abandon', methods=['POST'])
@login_required
def abandon_game(game_id):
    result = engine.abandon_session(current_user.id, game_id)
    if not result.ok:
        return _failure(result)
    game = result.value
    _emit_game_update(game)
    return jsonify({'success': True, 'data': game.to_dict(user_id=current_user.id)})


@games.route('/history', methods=['GET'])
@login_required
def get_history():
    # Unknown filter values are ignored rather than rejected
    status = parse_enum(GameStatus, request.args.get('status'))
    difficulty = parse_enum(GameDifficulty, request.args.get('difficulty'))
    result = engine.get_history(
        current_user.id,
        page=_int_arg('page', 1),
        page_size=_int_arg('page_size', current_app.config.get('HISTORY_DEFAULT_PAGE_SIZE', 10)),
        status=status,
        difficulty=difficulty,
    )
    if not result.ok:
        return _failure(result)
    page = result.value
    return jsonify({
        'success': True,
        'data': page.to_dict(lambda g: g.to_dict(user_id=current_user.id)),
    })


@games.route('/stats', methods=['GET'])
@login_required
def get_stats():
    result = statistics.get_user_stats(current_user.id)
    if not result.ok:
        return _failure(result)
    return jsonify({'success': True, 'data': result.value})


@games.route('/leaderboard', methods=['GET'])
@login_required
def get_leaderboard():
    cfg = current_app.config
    page, page_size = normalize_paging(
        _int_arg('page', 1),
        _int_arg('page_size', 10),
        default_size=10,
        max_size=int(cfg.get('HISTORY_MAX_PAGE_SIZE', 100)),
    )
    board = request.args.get('by', 'score')
    if board == 'win_rate':
        min_games = _int_arg('min_games', int(cfg.get('LEADERBOARD_MIN_GAMES', 5)))
        result = statistics.top_by_win_rate(page, page_size, min_games=min_games)
    elif board == 'score':
        result = statistics.top_by_score(page, page_size)
    else:
        return _validation_failure('Invalid leaderboard', ["by must be 'score' or 'win_rate'"])
    payload = result.to_dict()
    payload['by'] = board
    return jsonify({'success': True, 'data': payload})
