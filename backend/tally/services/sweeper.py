"""Periodic deactivation of expired rooms.

Reads already refuse expired rooms; the sweep only makes ``is_active``
reflect it so the flag stays false for good.
"""

from sqlalchemy.exc import SQLAlchemyError

from tally import db, socketio
from tally.models import Room, utcnow


class ExpirySweeper:

    def __init__(self, app=None):
        self.app = None
        self._running = False
        self._task = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        app.extensions['sweeper'] = self

    def sweep(self) -> int:
        """Deactivate every active room past ``expires_at``; returns the count.

        Needs an app context. Failures are logged and rolled back; the next
        run retries.
        """
        try:
            count = (
                Room.query.filter(Room.expires_at < utcnow(), Room.is_active.is_(True))
                .update({Room.is_active: False}, synchronize_session=False)
            )
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            self.app.logger.exception('[sweep] failed to deactivate expired rooms')
            return 0
        if count:
            self.app.logger.info(f"[sweep] deactivated {count} expired room(s)")
        return count

    def start(self):
        if self._running:
            return
        self._running = True
        interval = int(self.app.config.get('SWEEP_INTERVAL_SEC', 3600))
        self.app.logger.info(f"[sweep] running every {interval}s")
        self._task = socketio.start_background_task(self._worker, interval)

    def stop(self):
        self._running = False

    def _worker(self, interval: int):
        while self._running:
            socketio.sleep(interval)
            if not self._running:
                break
            try:
                with self.app.app_context():
                    self.sweep()
            except Exception:
                # Keep the loop alive; the next tick retries
                self.app.logger.exception('[sweep] unexpected error')
