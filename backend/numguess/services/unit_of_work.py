from contextlib import contextmanager

from numguess import db


@contextmanager
def unit_of_work():
    """Scope a group of writes to one transaction.

    Commits when the block exits normally; rolls back and re-raises otherwise.
    """
    session = db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
