from numguess import db, socketio
from numguess.models import User, UserGameStatistics


_reconciler_started = set()


def reconcile_missing_statistics(app) -> int:
    """Create a zeroed statistics row for every user that lacks one.

    Returns the number of rows created.
    """
    with app.app_context():
        missing = (
            db.session.query(User.id)
            .outerjoin(UserGameStatistics, UserGameStatistics.user_id == User.id)
            .filter(UserGameStatistics.id.is_(None))
            .all()
        )
        for (user_id,) in missing:
            db.session.add(UserGameStatistics(user_id=user_id))
            app.logger.debug(f"[stats-reconcile] created statistics for user={user_id}")
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        if missing:
            app.logger.info(f"[stats-reconcile] created statistics for {len(missing)} user(s)")
        return len(missing)


def start_stats_reconciler(app) -> None:
    """Run ``reconcile_missing_statistics`` forever in a background task.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Sleeps STATS_RECONCILE_INTERVAL_SEC after a good pass
    - Sleeps STATS_RECONCILE_RETRY_SEC after a failed pass; failures are logged
    - One worker per app
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return
    if id(app) in _reconciler_started:
        app.logger.info("[stats-reconcile-skip] worker already running")
        return
    _reconciler_started.add(id(app))

    interval = int(app.config.get('STATS_RECONCILE_INTERVAL_SEC', 300))
    retry = int(app.config.get('STATS_RECONCILE_RETRY_SEC', 60))

    def _worker():
        app.logger.info(f"[stats-reconcile] worker started interval={interval}s retry={retry}s")
        while True:
            try:
                reconcile_missing_statistics(app)
                delay = interval
            except Exception:
                app.logger.exception("[stats-reconcile] pass failed")
                delay = retry
            socketio.sleep(delay)

    socketio.start_background_task(_worker)
