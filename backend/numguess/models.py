from numguess import db, bcrypt
from flask_login import UserMixin
from sqlalchemy.types import TypeDecorator
from datetime import datetime, timezone
import enum
import uuid


def utcnow():
    """Naive UTC timestamp; SQLite drops tzinfo so everything is stored naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id():
    return str(uuid.uuid4())


class GameDifficulty(enum.Enum):
    EASY = 'easy'
    NORMAL = 'normal'
    HARD = 'hard'
    EXPERT = 'expert'


class GameStatus(enum.Enum):
    IN_PROGRESS = 'in_progress'
    WON = 'won'
    LOST = 'lost'
    ABANDONED = 'abandoned'

    @property
    def is_terminal(self):
        return self is not GameStatus.IN_PROGRESS


class GuessResult(enum.Enum):
    TOO_LOW = 'too_low'
    TOO_HIGH = 'too_high'
    CORRECT = 'correct'


# Storage representation for every enum member. Stored strings are part of the
# schema; changing one requires a migration.
STORAGE_NAMES = {
    GameDifficulty: {
        GameDifficulty.EASY: 'Easy',
        GameDifficulty.NORMAL: 'Normal',
        GameDifficulty.HARD: 'Hard',
        GameDifficulty.EXPERT: 'Expert',
    },
    GameStatus: {
        GameStatus.IN_PROGRESS: 'InProgress',
        GameStatus.WON: 'Won',
        GameStatus.LOST: 'Lost',
        GameStatus.ABANDONED: 'Abandoned',
    },
    GuessResult: {
        GuessResult.TOO_LOW: 'TooLow',
        GuessResult.TOO_HIGH: 'TooHigh',
        GuessResult.CORRECT: 'Correct',
    },
}


def to_storage(member):
    return STORAGE_NAMES[type(member)][member]


def from_storage(enum_class, stored):
    for member, name in STORAGE_NAMES[enum_class].items():
        if name == stored:
            return member
    raise ValueError(f"Unknown stored value {stored!r} for {enum_class.__name__}")


def parse_enum(enum_class, raw):
    """Accept a storage name ('InProgress'), member value ('in_progress') or
    member name ('IN_PROGRESS'), case-insensitively. Returns None on no match."""
    if raw is None:
        return None
    wanted = str(raw).strip().lower()
    for member, name in STORAGE_NAMES[enum_class].items():
        if wanted in (name.lower(), member.value, member.name.lower()):
            return member
    return None


class StoredEnum(TypeDecorator):
    impl = db.String
    cache_ok = True

    def __init__(self, enum_class, length=20, **kwargs):
        super().__init__(length=length, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, self.enum_class):
            raise TypeError(f"Expected {self.enum_class.__name__}, got {value!r}")
        return to_storage(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return from_storage(self.enum_class, value)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(100), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'display_name': self.display_name or self.username,
        }


class UserGameStatistics(db.Model):
    __tablename__ = 'user_game_statistics'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False, index=True)
    games_played = db.Column(db.Integer, nullable=False, default=0)
    games_won = db.Column(db.Integer, nullable=False, default=0)
    total_score = db.Column(db.Integer, nullable=False, default=0, index=True)
    best_attempts = db.Column(db.Integer, nullable=True)
    last_updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    sessions = db.relationship('GameSession', lazy='dynamic')

    def __init__(self, **kwargs):
        super(UserGameStatistics, self).__init__(**kwargs)
        # Column defaults only apply at flush; counters are read before that
        for field in ('games_played', 'games_won', 'total_score'):
            if getattr(self, field) is None:
                setattr(self, field, 0)

    @property
    def win_rate(self):
        if not self.games_played:
            return 0.0
        return round(self.games_won / self.games_played * 100, 2)

    @property
    def average_score(self):
        if not self.games_played:
            return 0.0
        return round(self.total_score / self.games_played, 2)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'total_games': self.games_played,
            'games_won': self.games_won,
            'total_score': self.total_score,
            'win_rate': self.win_rate,
            'average_score': self.average_score,
            'best_attempts': self.best_attempts,
        }


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_game_statistics_id = db.Column(db.Integer, db.ForeignKey('user_game_statistics.id'), nullable=False, index=True)
    secret_number = db.Column(db.Integer, nullable=False)
    min_range = db.Column(db.Integer, nullable=False, default=1)
    max_range = db.Column(db.Integer, nullable=False, default=43)
    max_attempts = db.Column(db.Integer, nullable=False, default=8)
    attempts_count = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(StoredEnum(GameStatus), nullable=False, default=GameStatus.IN_PROGRESS, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    difficulty = db.Column(StoredEnum(GameDifficulty), nullable=False, default=GameDifficulty.NORMAL, index=True)
    started_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    ended_at = db.Column(db.DateTime, nullable=True)
    version = db.Column(db.Integer, nullable=False)
    attempts = db.relationship(
        'GameAttempt',
        order_by='GameAttempt.attempt_number',
        cascade='all, delete-orphan',
    )

    __table_args__ = (
        db.Index('ix_game_session_stats_status', 'user_game_statistics_id', 'status'),
        db.Index('ix_game_session_stats_started', 'user_game_statistics_id', 'started_at'),
    )
    __mapper_args__ = {'version_id_col': version}

    def __init__(self, **kwargs):
        super(GameSession, self).__init__(**kwargs)
        if not self.id:
            self.id = new_id()
        if self.attempts_count is None:
            self.attempts_count = 0
        if self.score is None:
            self.score = 0
        if self.status is None:
            self.status = GameStatus.IN_PROGRESS
        if self.started_at is None:
            self.started_at = utcnow()

    def to_dict(self, user_id=None, include_attempts=True):
        data = {
            'id': self.id,
            'user_id': user_id,
            'attempts_count': self.attempts_count,
            'max_attempts': self.max_attempts,
            'remaining_attempts': max(0, self.max_attempts - self.attempts_count),
            'status': to_storage(self.status),
            'score': self.score,
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'ended_at': self.ended_at.isoformat() if self.ended_at else None,
            'min_range': self.min_range,
            'max_range': self.max_range,
            'difficulty': to_storage(self.difficulty),
        }
        if include_attempts:
            data['attempts'] = [a.to_dict() for a in self.attempts]
        return data


class GameAttempt(db.Model):
    __tablename__ = 'game_attempt'
    id = db.Column(db.String(36), primary_key=True, default=new_id)
    game_session_id = db.Column(db.String(36), db.ForeignKey('game_session.id'), nullable=False, index=True)
    guessed_number = db.Column(db.Integer, nullable=False)
    attempt_number = db.Column(db.Integer, nullable=False)
    result = db.Column(StoredEnum(GuessResult), nullable=False)
    hint = db.Column(db.String(500), nullable=False, default='')
    attempted_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    time_taken_ms = db.Column(db.Integer, nullable=True)

    __table_args__ = (
        db.UniqueConstraint('game_session_id', 'attempt_number', name='uq_game_attempt_session_number'),
    )

    def __init__(self, **kwargs):
        super(GameAttempt, self).__init__(**kwargs)
        if not self.id:
            self.id = new_id()

    def to_dict(self):
        return {
            'id': self.id,
            'game_session_id': self.game_session_id,
            'guessed_number': self.guessed_number,
            'attempt_number': self.attempt_number,
            'result': to_storage(self.result),
            'hint': self.hint,
            'attempted_at': self.attempted_at.isoformat() if self.attempted_at else None,
            'time_taken_ms': self.time_taken_ms,
        }
