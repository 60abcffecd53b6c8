"""Per-user rolled-up game statistics.

``record_game_result`` is the only code that moves the counters. It does not
commit; callers run it inside the same unit of work as the session write that
ended the game.
"""

from flask import current_app
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

from numguess import db
from numguess.models import (
    GameDifficulty, GameSession, GameStatus, User, UserGameStatistics,
    to_storage, utcnow,
)
from numguess.services.results import Page, Result


def _find(user_id: int):
    return UserGameStatistics.query.filter_by(user_id=user_id).first()


def get_or_create(user_id: int) -> UserGameStatistics:
    """Fetch the user's statistics row, creating a zeroed one on first access.

    The insert runs in a SAVEPOINT so that losing a concurrent first-access
    race (unique ``user_id``) only unwinds the savepoint; the winner's row is
    then read back.
    """
    stats = _find(user_id)
    if stats is not None:
        return stats
    try:
        with db.session.begin_nested():
            stats = UserGameStatistics(user_id=user_id)
            db.session.add(stats)
    except IntegrityError:
        current_app.logger.info(f"[stats-create-race] user={user_id} re-reading existing row")
        stats = _find(user_id)
        if stats is None:
            raise
    return stats


def record_game_result(user_id: int, score: int, is_win: bool, attempts: int) -> UserGameStatistics:
    stats = get_or_create(user_id)
    stats.games_played += 1
    stats.total_score += score
    if is_win:
        stats.games_won += 1
        if attempts > 0 and (stats.best_attempts is None or attempts < stats.best_attempts):
            stats.best_attempts = attempts
    stats.last_updated_at = utcnow()
    db.session.add(stats)
    current_app.logger.info(
        f"[stats-record] user={user_id} win={is_win} score={score} attempts={attempts} "
        f"played={stats.games_played} won={stats.games_won} best={stats.best_attempts}"
    )
    return stats


def _breakdown_by_difficulty(stats: UserGameStatistics) -> dict:
    won = case((GameSession.status == GameStatus.WON, 1), else_=0)
    rows = (
        db.session.query(
            GameSession.difficulty,
            func.count(GameSession.id),
            func.sum(won),
            func.avg(GameSession.score),
            func.max(GameSession.score),
        )
        .filter(
            GameSession.user_game_statistics_id == stats.id,
            GameSession.status.in_([GameStatus.WON, GameStatus.LOST]),
        )
        .group_by(GameSession.difficulty)
        .all()
    )
    breakdown = {}
    for difficulty, played, games_won, average, best in rows:
        breakdown[to_storage(difficulty)] = {
            'games_played': played,
            'games_won': int(games_won or 0),
            'average_score': round(float(average or 0), 2),
            'best_score': int(best or 0),
        }
    for difficulty in GameDifficulty:
        breakdown.setdefault(to_storage(difficulty), {
            'games_played': 0, 'games_won': 0, 'average_score': 0.0, 'best_score': 0,
        })
    return breakdown


def get_user_stats(user_id: int) -> Result:
    stats = get_or_create(user_id)
    db.session.commit()
    payload = stats.to_dict()
    payload['stats_by_difficulty'] = _breakdown_by_difficulty(stats)
    return Result.success(payload)


def _win_rate_expr():
    return UserGameStatistics.games_won * 100.0 / UserGameStatistics.games_played


def _leaderboard_page(query, order_by, page: int, page_size: int) -> Page:
    total = query.count()
    rows = (
        query.order_by(*order_by)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    first_rank = (page - 1) * page_size + 1
    items = []
    for rank, (stats, user) in enumerate(rows, start=first_rank):
        entry = stats.to_dict()
        entry['rank'] = rank
        entry['username'] = user.username
        entry['display_name'] = user.display_name or user.username
        items.append(entry)
    return Page(items=items, page=page, page_size=page_size, total_count=total)


def top_by_score(page: int, page_size: int) -> Page:
    """Players with at least one finished game, highest total score first;
    ties go to the better win rate, then the lower user id."""
    query = (
        db.session.query(UserGameStatistics, User)
        .join(User, User.id == UserGameStatistics.user_id)
        .filter(UserGameStatistics.games_played > 0)
    )
    order_by = (
        UserGameStatistics.total_score.desc(),
        _win_rate_expr().desc(),
        UserGameStatistics.user_id.asc(),
    )
    return _leaderboard_page(query, order_by, page, page_size)


def top_by_win_rate(page: int, page_size: int, min_games: int = 5) -> Page:
    """Players with at least ``min_games`` finished games, best win rate first;
    ties go to the higher total score, then the lower user id."""
    min_games = max(1, int(min_games))
    query = (
        db.session.query(UserGameStatistics, User)
        .join(User, User.id == UserGameStatistics.user_id)
        .filter(UserGameStatistics.games_played >= min_games)
    )
    order_by = (
        _win_rate_expr().desc(),
        UserGameStatistics.total_score.desc(),
        UserGameStatistics.user_id.asc(),
    )
    return _leaderboard_page(query, order_by, page, page_size)
