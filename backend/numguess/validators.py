"""Request-shape validation for the HTTP layer.

Each ``validate_*`` function takes the decoded JSON body and returns
``(cleaned, errors)``. ``errors`` is a list of messages; empty means valid.
The game engine re-checks cross-field rules it depends on.
"""

import re

from numguess.models import GameDifficulty, parse_enum

MAX_RANGE = 10000
MAX_CUSTOM_ATTEMPTS = 50

USERNAME_RE = re.compile(r'^[A-Za-z0-9_.\-]{3,64}$')
PASSWORD_RE = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).*$')


def _optional_int(data, key, errors):
    raw = data.get(key)
    if raw is None or raw == '':
        return None
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        errors.append(f"{key} must be an integer")
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        errors.append(f"{key} must be an integer")
        return None


def validate_create_session(data):
    data = data or {}
    errors = []

    raw_difficulty = data.get('difficulty')
    if raw_difficulty is None or raw_difficulty == '':
        difficulty = GameDifficulty.NORMAL
    else:
        difficulty = parse_enum(GameDifficulty, raw_difficulty)
        if difficulty is None:
            errors.append('Invalid difficulty level')

    custom_min = _optional_int(data, 'custom_min_range', errors)
    custom_max = _optional_int(data, 'custom_max_range', errors)
    custom_attempts = _optional_int(data, 'custom_max_attempts', errors)

    if custom_min is not None and custom_min <= 0:
        errors.append('Minimum range must be greater than 0')
    if custom_min is not None and custom_max is not None:
        if custom_max <= custom_min:
            errors.append('Maximum range must be greater than minimum range')
        if custom_max > MAX_RANGE:
            errors.append('Maximum range cannot exceed 10,000')
    if custom_attempts is not None:
        if custom_attempts <= 0:
            errors.append('Maximum attempts must be greater than 0')
        elif custom_attempts > MAX_CUSTOM_ATTEMPTS:
            errors.append('Maximum attempts cannot exceed 50')
    has_min = data.get('custom_min_range') not in (None, '')
    has_max = data.get('custom_max_range') not in (None, '')
    if has_min != has_max:
        errors.append('Both minimum and maximum range must be provided when using custom ranges')

    cleaned = {
        'difficulty': difficulty,
        'custom_min': custom_min,
        'custom_max': custom_max,
        'custom_max_attempts': custom_attempts,
    }
    return cleaned, errors


def validate_guess(data):
    data = data or {}
    errors = []
    if data.get('guessed_number') is None:
        return None, ['guessed_number is required']
    guessed = _optional_int(data, 'guessed_number', errors)
    if guessed is not None:
        if guessed <= 0:
            errors.append('Guessed number must be greater than 0')
        elif guessed > MAX_RANGE:
            errors.append('Guessed number cannot exceed 10,000')
    return guessed, errors


def validate_registration(data):
    data = data or {}
    errors = []
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    display_name = (data.get('display_name') or '').strip() or None

    if not username:
        errors.append('Username is required')
    elif not USERNAME_RE.match(username):
        errors.append('Username must be 3-64 characters of letters, digits, "_", "." or "-"')

    if not password:
        errors.append('Password is required')
    else:
        if len(password) < 8:
            errors.append('Password must be at least 8 characters long')
        if len(password) > 100:
            errors.append('Password must not exceed 100 characters')
        if not PASSWORD_RE.match(password):
            errors.append('Password must contain at least one lowercase letter, one uppercase letter, and one digit')

    if display_name and len(display_name) > 100:
        errors.append('Display name must not exceed 100 characters')

    return {'username': username, 'password': password, 'display_name': display_name}, errors
