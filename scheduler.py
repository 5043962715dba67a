import logging
import threading

logger = logging.getLogger(__name__)


class SweepScheduler:
    """
    Runs the expiry sweep in a background thread: once at start, then every
    ``interval_seconds`` until stopped.

    Parameters
    ----------
    app : flask.Flask
        The app whose sweeper is run; sweeps run inside its app context.
    interval_seconds : int
        Pause between two sweeps.
    """

    def __init__(self, app, interval_seconds=300):
        self.app = app
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread = None

    def run_once(self):
        with self.app.app_context():
            try:
                count = self.app.extensions["expiry_sweeper"].sweep()
                logger.debug("Scheduled sweep closed %d rides", count)
                return count
            except Exception:
                logger.exception("Scheduled sweep failed")
                return 0

    def _loop(self):
        self.run_once()
        while not self._stop.wait(self.interval_seconds):
            self.run_once()

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="expiry-sweep", daemon=True)
        self._thread.start()
        logger.info("Expiry sweep scheduled every %s seconds", self.interval_seconds)

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
