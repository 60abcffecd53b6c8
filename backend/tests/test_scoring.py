import pytest

from numguess.models import GameDifficulty, GuessResult
from numguess.services.games.scoring import (
    build_hint,
    calculate_score,
    evaluate_guess,
    game_over_suffix,
    resolve_configuration,
)


@pytest.mark.parametrize('difficulty, expected', [
    (GameDifficulty.EASY, (1, 30, 10)),
    (GameDifficulty.NORMAL, (1, 43, 8)),
    (GameDifficulty.HARD, (1, 60, 6)),
    (GameDifficulty.EXPERT, (1, 100, 5)),
])
def test_difficulty_table(difficulty, expected):
    assert resolve_configuration(difficulty) == expected


def test_custom_range_wins_and_attempts_default_to_ten():
    assert resolve_configuration(GameDifficulty.EXPERT, 5, 500) == (5, 500, 10)
    assert resolve_configuration(GameDifficulty.EXPERT, 5, 500, 3) == (5, 500, 3)


def test_partial_custom_range_falls_back_to_difficulty():
    assert resolve_configuration(GameDifficulty.HARD, 5, None, 3) == (1, 60, 6)
    assert resolve_configuration(GameDifficulty.HARD, None, 99) == (1, 60, 6)


def test_score_normal_first_try():
    assert calculate_score(1, 8, GameDifficulty.NORMAL) == 280


def test_score_normal_last_try():
    assert calculate_score(8, 8, GameDifficulty.NORMAL) == 210


def test_score_base_by_difficulty():
    assert calculate_score(5, 5, GameDifficulty.EASY) == 110
    assert calculate_score(5, 5, GameDifficulty.HARD) == 410
    assert calculate_score(5, 5, GameDifficulty.EXPERT) == 810


def test_evaluate_guess():
    assert evaluate_guess(21, 21) is GuessResult.CORRECT
    assert evaluate_guess(3, 21) is GuessResult.TOO_LOW
    assert evaluate_guess(50, 21) is GuessResult.TOO_HIGH


@pytest.mark.parametrize('guess, secret, expected', [
    (21, 21, 'Congratulations! You guessed correctly!'),
    (16, 21, 'Very close! Try higher!'),
    (26, 21, 'Very close! Try lower!'),
    (11, 21, 'Close! Try higher!'),
    (31, 21, 'Close! Try lower!'),
    (1, 21, 'Getting warmer... Try higher!'),
    (41, 21, 'Getting warmer... Try lower!'),
    (50, 21, 'Try lower!'),
    (1, 90, 'Try higher!'),
])
def test_hint_proximity(guess, secret, expected):
    assert build_hint(guess, secret) == expected


def test_game_over_suffix_reveals_secret():
    assert game_over_suffix(17) == ' Game over! The correct number was 17.'
