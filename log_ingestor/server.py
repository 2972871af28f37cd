"""Threaded HTTP server wrapping the Flask app, with a periodic stats job."""

import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from werkzeug.serving import make_server

from log_ingestor.app import create_app
from log_ingestor.config import Config
from log_ingestor.store import LogStore

logger = logging.getLogger(__name__)


class LogIngestorServer:
    """Serves ingest and query requests, one thread per request."""

    def __init__(self, config: Config, store: LogStore = None):
        self._config = config
        self._store = store if store is not None else LogStore()
        self._app = create_app(config=config, store=self._store)
        self._httpd = None
        self._scheduler = None
        self._server_address = None
        self._lifecycle_lock = threading.Lock()
        self._stopping = False

    @property
    def store(self) -> LogStore:
        return self._store

    @property
    def server_address(self) -> tuple:
        """Return (host, port) the server is bound to. Useful when port=0."""
        return self._server_address

    def log_stats(self):
        logger.info("Store holds %d log record(s)", self._store.count)

    def start(self):
        """Bind and serve until stop() is called.

        Returns immediately if stop() has already been called.
        """
        with self._lifecycle_lock:
            if self._stopping:
                logger.info("Stop requested before startup, not serving")
                return

            server_cfg = self._config["server"]
            self._httpd = make_server(
                server_cfg["host"], server_cfg["port"], self._app, threaded=True
            )
            self._server_address = self._httpd.server_address[:2]

            interval = self._config["stats"]["interval_seconds"]
            if interval > 0:
                self._scheduler = BackgroundScheduler()
                self._scheduler.add_job(self.log_stats, "interval", seconds=interval)
                self._scheduler.start()

            httpd = self._httpd

        logger.info("Log ingestor listening on %s:%d", *self._server_address)
        httpd.serve_forever()

    def stop(self):
        """Stop serving and shut down the stats job. Safe to call before start()."""
        logger.info("Server shutting down...")
        with self._lifecycle_lock:
            self._stopping = True
            scheduler, self._scheduler = self._scheduler, None
            httpd, self._httpd = self._httpd, None

        if scheduler is not None:
            scheduler.shutdown(wait=False)
        if httpd is not None:
            # Blocks until serve_forever() has returned
            httpd.shutdown()
            httpd.server_close()
