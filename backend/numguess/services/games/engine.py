"""Lifecycle of a single number-guessing session.

InProgress --correct guess--> Won
InProgress --attempts exhausted--> Lost
InProgress --abandon--> Abandoned

Won, Lost and Abandoned are final. Every mutation here runs inside one unit of
work so attempt, game and statistics rows commit together or not at all.
"""

import random
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from numguess import db
from numguess.models import (
    GameAttempt, GameDifficulty, GameSession, GameStatus, GuessResult, User,
    UserGameStatistics, utcnow,
)
from numguess.services.results import ErrorKind, Page, Result, normalize_paging
from numguess.services.unit_of_work import unit_of_work
from . import scoring, statistics

DEFAULT_MAX_ACTIVE_GAMES = 3


def _max_active_games() -> int:
    return int(current_app.config.get('MAX_ACTIVE_GAMES', DEFAULT_MAX_ACTIVE_GAMES))


def create_session(
    user_id: int,
    difficulty: GameDifficulty = GameDifficulty.NORMAL,
    custom_min: Optional[int] = None,
    custom_max: Optional[int] = None,
    custom_max_attempts: Optional[int] = None,
    rng=None,
) -> Result:
    """Start a new session for ``user_id``.

    ``rng`` is anything with ``randint(a, b)``; defaults to the ``random``
    module.
    """
    rng = rng or random
    min_range, max_range, max_attempts = scoring.resolve_configuration(
        difficulty, custom_min, custom_max, custom_max_attempts
    )
    if min_range < 1 or max_range < min_range:
        return Result.failure(
            ErrorKind.VALIDATION_FAILED,
            f"Invalid range {min_range}-{max_range}",
        )
    if max_attempts < 1:
        return Result.failure(ErrorKind.VALIDATION_FAILED, 'Maximum attempts must be at least 1')

    if db.session.get(User, user_id) is None:
        return Result.failure(ErrorKind.NOT_FOUND, 'User not found')

    limit = _max_active_games()
    with unit_of_work():
        stats = statistics.get_or_create(user_id)
        # Lock the statistics row so concurrent creators for this user
        # serialize on the count below.
        stats = (
            UserGameStatistics.query.filter_by(id=stats.id)
            .with_for_update()
            .one()
        )
        active = GameSession.query.filter_by(
            user_game_statistics_id=stats.id, status=GameStatus.IN_PROGRESS
        ).count()
        if active >= limit:
            current_app.logger.info(f"[game-create-rejected] user={user_id} active={active} limit={limit}")
            return Result.failure(
                ErrorKind.CONCURRENT_SESSION_LIMIT_EXCEEDED,
                f"You can have a maximum of {limit} active games at once.",
            )

        game = GameSession(
            user_game_statistics_id=stats.id,
            secret_number=rng.randint(min_range, max_range),
            min_range=min_range,
            max_range=max_range,
            max_attempts=max_attempts,
            difficulty=difficulty,
            status=GameStatus.IN_PROGRESS,
            attempts_count=0,
            score=0,
            started_at=utcnow(),
        )
        db.session.add(game)

    current_app.logger.info(
        f"[game-create] user={user_id} game={game.id} difficulty={difficulty.name} "
        f"range={min_range}-{max_range} max_attempts={max_attempts}"
    )
    return Result.success(game)


def _load_owned_session(user_id: int, session_id: str, lock: bool = False):
    """Look up a game and check ownership.

    Returns (game, None) or (None, failed Result).
    """
    query = GameSession.query.filter_by(id=session_id)
    if lock:
        query = query.with_for_update()
    game = query.first()
    if game is None:
        return None, Result.failure(ErrorKind.NOT_FOUND, 'Game session not found')
    owner = db.session.get(UserGameStatistics, game.user_game_statistics_id)
    if owner is None or owner.user_id != user_id:
        return None, Result.failure(ErrorKind.FORBIDDEN, 'You are not authorized to access this game')
    return game, None


def submit_guess(user_id: int, session_id: str, guessed_number: int) -> Result:
    try:
        with unit_of_work():
            game, failure = _load_owned_session(user_id, session_id, lock=True)
            if failure:
                return failure
            if game.status.is_terminal:
                return Result.failure(ErrorKind.GAME_NOT_ACTIVE, 'This game is no longer active')
            if guessed_number < game.min_range or guessed_number > game.max_range:
                return Result.failure(
                    ErrorKind.OUT_OF_RANGE,
                    f"Guess must be between {game.min_range} and {game.max_range}",
                )
            if game.attempts_count >= game.max_attempts:
                return Result.failure(ErrorKind.ATTEMPTS_EXHAUSTED, 'Maximum number of attempts reached')

            now = utcnow()
            previous = game.attempts[-1].attempted_at if game.attempts else game.started_at
            result = scoring.evaluate_guess(guessed_number, game.secret_number)
            hint = scoring.build_hint(guessed_number, game.secret_number)

            attempt = GameAttempt(
                game_session_id=game.id,
                guessed_number=guessed_number,
                attempt_number=game.attempts_count + 1,
                result=result,
                hint=hint,
                attempted_at=now,
                time_taken_ms=int((now - previous).total_seconds() * 1000),
            )
            game.attempts.append(attempt)
            game.attempts_count += 1

            if result is GuessResult.CORRECT:
                game.status = GameStatus.WON
                game.ended_at = now
                game.score = scoring.calculate_score(
                    game.attempts_count, game.max_attempts, game.difficulty
                )
            elif game.attempts_count >= game.max_attempts:
                game.status = GameStatus.LOST
                game.ended_at = now
                game.score = 0
                attempt.hint += scoring.game_over_suffix(game.secret_number)

            db.session.add(game)
            if game.status in (GameStatus.WON, GameStatus.LOST):
                statistics.record_game_result(
                    user_id,
                    game.score,
                    game.status is GameStatus.WON,
                    game.attempts_count,
                )
    except (StaleDataError, IntegrityError) as exc:
        current_app.logger.warning(f"[guess-conflict] user={user_id} game={session_id} {exc.__class__.__name__}")
        return Result.failure(
            ErrorKind.PERSISTENCE_FAILURE,
            'The game was updated by another request; please retry',
        )

    current_app.logger.info(
        f"[guess] user={user_id} game={session_id} guess={guessed_number} "
        f"attempt={attempt.attempt_number} result={result.name} status={game.status.name}"
    )
    return Result.success(attempt)


def get_session(user_id: int, session_id: str) -> Result:
    game, failure = _load_owned_session(user_id, session_id)
    if failure:
        return failure
    return Result.success(game)


def abandon_session(user_id: int, session_id: str) -> Result:
    """Move an in-progress game to Abandoned. Statistics are not touched."""
    try:
        with unit_of_work():
            game, failure = _load_owned_session(user_id, session_id, lock=True)
            if failure:
                return failure
            if game.status.is_terminal:
                return Result.failure(ErrorKind.GAME_NOT_ACTIVE, 'This game is no longer active')
            game.status = GameStatus.ABANDONED
            game.ended_at = utcnow()
            db.session.add(game)
    except StaleDataError:
        current_app.logger.warning(f"[abandon-conflict] user={user_id} game={session_id}")
        return Result.failure(
            ErrorKind.PERSISTENCE_FAILURE,
            'The game was updated by another request; please retry',
        )

    current_app.logger.info(f"[game-abandon] user={user_id} game={session_id}")
    return Result.success(game)


def get_history(
    user_id: int,
    page: int = 1,
    page_size: int = 10,
    status: Optional[GameStatus] = None,
    difficulty: Optional[GameDifficulty] = None,
) -> Result:
    cfg = current_app.config
    page, page_size = normalize_paging(
        page,
        page_size,
        default_size=int(cfg.get('HISTORY_DEFAULT_PAGE_SIZE', 10)),
        max_size=int(cfg.get('HISTORY_MAX_PAGE_SIZE', 100)),
    )
    query = (
        GameSession.query.join(
            UserGameStatistics,
            UserGameStatistics.id == GameSession.user_game_statistics_id,
        )
        .filter(UserGameStatistics.user_id == user_id)
    )
    if status is not None:
        query = query.filter(GameSession.status == status)
    if difficulty is not None:
        query = query.filter(GameSession.difficulty == difficulty)

    total = query.count()
    sessions = (
        query.order_by(GameSession.started_at.desc(), GameSession.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return Result.success(Page(items=sessions, page=page, page_size=page_size, total_count=total))
