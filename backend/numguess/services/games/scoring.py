from typing import Optional, Tuple

from numguess.models import GameDifficulty, GuessResult

# difficulty -> (min_range, max_range, max_attempts)
DIFFICULTY_SETTINGS = {
    GameDifficulty.EASY: (1, 30, 10),
    GameDifficulty.NORMAL: (1, 43, 8),
    GameDifficulty.HARD: (1, 60, 6),
    GameDifficulty.EXPERT: (1, 100, 5),
}

BASE_SCORES = {
    GameDifficulty.EASY: 100,
    GameDifficulty.NORMAL: 200,
    GameDifficulty.HARD: 400,
    GameDifficulty.EXPERT: 800,
}

DEFAULT_CUSTOM_MAX_ATTEMPTS = 10

CORRECT_HINT = 'Congratulations! You guessed correctly!'


def resolve_configuration(
    difficulty: GameDifficulty,
    custom_min: Optional[int] = None,
    custom_max: Optional[int] = None,
    custom_max_attempts: Optional[int] = None,
) -> Tuple[int, int, int]:
    """Return (min_range, max_range, max_attempts) for a new session.

    A custom range only applies when both bounds are given; otherwise the
    difficulty table decides and any custom attempt budget is ignored.
    """
    if custom_min is not None and custom_max is not None:
        max_attempts = custom_max_attempts if custom_max_attempts is not None else DEFAULT_CUSTOM_MAX_ATTEMPTS
        return custom_min, custom_max, max_attempts
    return DIFFICULTY_SETTINGS[difficulty]


def calculate_score(attempts: int, max_attempts: int, difficulty: GameDifficulty) -> int:
    """Base score for the difficulty plus 10 points per unused attempt (the
    winning attempt counts as unused)."""
    attempt_bonus = (max_attempts - attempts + 1) * 10
    return BASE_SCORES[difficulty] + attempt_bonus


def evaluate_guess(guess: int, secret: int) -> GuessResult:
    if guess == secret:
        return GuessResult.CORRECT
    if guess < secret:
        return GuessResult.TOO_LOW
    return GuessResult.TOO_HIGH


def proximity_phrase(guess: int, secret: int) -> str:
    difference = abs(guess - secret)
    if difference <= 5:
        return 'Very close! '
    if difference <= 10:
        return 'Close! '
    if difference <= 20:
        return 'Getting warmer... '
    return ''


def build_hint(guess: int, secret: int) -> str:
    result = evaluate_guess(guess, secret)
    if result is GuessResult.CORRECT:
        return CORRECT_HINT
    direction = 'higher' if result is GuessResult.TOO_LOW else 'lower'
    return f"{proximity_phrase(guess, secret)}Try {direction}!"


def game_over_suffix(secret: int) -> str:
    return f" Game over! The correct number was {secret}."
