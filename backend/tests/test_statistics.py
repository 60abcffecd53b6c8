from unittest import mock

from numguess import db
from numguess.models import GameDifficulty, UserGameStatistics
from numguess.services.games import engine, statistics

from conftest import FixedRandom


def test_get_or_create_is_idempotent(make_user):
    user = make_user()
    first = statistics.get_or_create(user.id)
    db.session.commit()
    second = statistics.get_or_create(user.id)
    assert first.id == second.id
    assert UserGameStatistics.query.filter_by(user_id=user.id).count() == 1
    assert second.games_played == 0
    assert second.games_won == 0
    assert second.total_score == 0
    assert second.best_attempts is None
    assert second.win_rate == 0


def test_get_or_create_rereads_row_after_losing_insert_race(make_user):
    user = make_user()
    existing = statistics.get_or_create(user.id)
    db.session.commit()
    existing_id = existing.id

    real_find = statistics._find
    lookups = []

    def miss_first_lookup(user_id):
        lookups.append(user_id)
        # The first read happens before the other request commits its row
        return None if len(lookups) == 1 else real_find(user_id)

    with mock.patch.object(statistics, '_find', side_effect=miss_first_lookup):
        stats = statistics.get_or_create(user.id)

    assert len(lookups) == 2
    assert stats.id == existing_id
    db.session.commit()
    assert UserGameStatistics.query.filter_by(user_id=user.id).count() == 1


def test_record_game_result_counts_wins_and_losses(make_user):
    user = make_user()
    statistics.record_game_result(user.id, 270, True, 2)
    statistics.record_game_result(user.id, 0, False, 8)
    stats = statistics.record_game_result(user.id, 300, True, 4)
    db.session.commit()
    assert stats.games_played == 3
    assert stats.games_won == 2
    assert stats.total_score == 570
    assert stats.best_attempts == 2
    assert stats.win_rate == 66.67


def test_best_attempts_never_increases(make_user):
    user = make_user()
    statistics.record_game_result(user.id, 280, True, 1)
    stats = statistics.record_game_result(user.id, 210, True, 8)
    assert stats.best_attempts == 1


def test_zero_attempt_win_does_not_set_best(make_user):
    user = make_user()
    stats = statistics.record_game_result(user.id, 100, True, 0)
    assert stats.best_attempts is None
    assert stats.games_won == 1


def test_get_user_stats_breaks_down_by_difficulty(make_user):
    user = make_user()
    easy = engine.create_session(user.id, GameDifficulty.EASY, rng=FixedRandom(3)).value
    engine.submit_guess(user.id, easy.id, 3)
    hard = engine.create_session(
        user.id, GameDifficulty.HARD, rng=FixedRandom(30)
    ).value
    for guess in (1, 2, 3, 4, 5, 6):
        engine.submit_guess(user.id, hard.id, guess)
    engine.create_session(user.id, GameDifficulty.EXPERT)

    payload = statistics.get_user_stats(user.id).value
    assert payload['total_games'] == 2
    assert payload['games_won'] == 1
    assert payload['win_rate'] == 50.0
    assert payload['best_attempts'] == 1

    by_difficulty = payload['stats_by_difficulty']
    assert by_difficulty['Easy'] == {
        'games_played': 1, 'games_won': 1, 'average_score': 200.0, 'best_score': 200,
    }
    assert by_difficulty['Hard']['games_played'] == 1
    assert by_difficulty['Hard']['games_won'] == 0
    assert by_difficulty['Expert']['games_played'] == 0
    assert by_difficulty['Normal']['games_played'] == 0


def _seed(make_user, name, played, won, score):
    user = make_user(name)
    db.session.add(UserGameStatistics(
        user_id=user.id, games_played=played, games_won=won, total_score=score,
    ))
    db.session.commit()
    return user


def test_top_by_score_orders_and_breaks_ties_on_win_rate(make_user):
    low = _seed(make_user, 'low', 4, 1, 300)
    tie_worse = _seed(make_user, 'tieworse', 4, 1, 900)
    tie_better = _seed(make_user, 'tiebetter', 4, 3, 900)
    _seed(make_user, 'idle', 0, 0, 0)

    page = statistics.top_by_score(1, 10)
    assert page.total_count == 3
    assert [e['user_id'] for e in page.items] == [tie_better.id, tie_worse.id, low.id]
    assert [e['rank'] for e in page.items] == [1, 2, 3]
    assert page.items[0]['username'] == 'tiebetter'


def test_top_by_win_rate_applies_floor(make_user):
    few = _seed(make_user, 'few', 2, 2, 500)
    steady = _seed(make_user, 'steady', 10, 8, 2000)
    grinder = _seed(make_user, 'grinder', 20, 16, 4000)
    weak = _seed(make_user, 'weak', 10, 2, 400)

    page = statistics.top_by_win_rate(1, 10, min_games=5)
    ids = [e['user_id'] for e in page.items]
    assert few.id not in ids
    # steady and grinder share 80%; higher total score first
    assert ids == [grinder.id, steady.id, weak.id]


def test_leaderboard_paging_ranks_continue(make_user):
    for i in range(5):
        _seed(make_user, f'player{i}', 1, 1, 100 * (i + 1))
    page = statistics.top_by_score(2, 2)
    assert page.total_count == 5
    assert [e['rank'] for e in page.items] == [3, 4]
    assert page.has_next and page.has_previous
