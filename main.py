"""Entry point for the Log Ingestor service."""

import logging
import os
import signal
import sys
import threading

from log_ingestor.config import Config
from log_ingestor.server import LogIngestorServer


def main():
    config = Config(os.environ.get("CONFIG_PATH", "config.yaml"))

    logging.basicConfig(
        level=config["logging"]["level"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    server = LogIngestorServer(config)
    failures = []

    def serve():
        try:
            server.start()
        except OSError as e:
            logger.error("Server failed: %s", e)
            failures.append(e)
        finally:
            shutdown_event.set()

    server_thread = threading.Thread(target=serve, daemon=True)
    server_thread.start()

    try:
        shutdown_event.wait()
    finally:
        server.stop()
        server_thread.join(timeout=5.0)

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
