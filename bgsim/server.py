"""Background uvicorn server with an idempotent start/stop lifecycle."""

import threading
import time

import uvicorn
from fastapi import FastAPI

from bgsim.core.config import DEFAULT_PORT, LOOPBACK_HOST
from bgsim.core.logging_config import get_logger

logger = get_logger(__name__)


class LocalApiServer:
    """Serves an app on the loopback interface from a background thread.

    ``start()`` and ``stop()`` may be called redundantly; only the first
    call of each pair has an effect.

    Example:
        server = LocalApiServer(app, port=32123)
        server.start()
        ...
        server.stop()
    """

    def __init__(
        self,
        app: FastAPI,
        port: int = DEFAULT_PORT,
        startup_timeout: float = 10.0,
        shutdown_timeout: float = 10.0,
    ):
        self.app = app
        self.port = port
        self.startup_timeout = startup_timeout
        self.shutdown_timeout = shutdown_timeout
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        return f"http://{LOOPBACK_HOST}:{self.port}/"

    @property
    def running(self) -> bool:
        return self._server is not None

    def start(self) -> bool:
        """Start listening.

        Returns:
            True if the server is listening, False if it failed to start
            (e.g. the port is taken); the failure is logged.
        """
        with self._lock:
            if self._server is not None:
                return True

            config = uvicorn.Config(
                self.app,
                host=LOOPBACK_HOST,
                port=self.port,
                log_config=None,
                timeout_graceful_shutdown=int(self.shutdown_timeout),
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(target=server.run, name="bgsim-local-api", daemon=True)
            thread.start()

            deadline = time.monotonic() + self.startup_timeout
            while not server.started and thread.is_alive() and time.monotonic() < deadline:
                time.sleep(0.05)

            if not server.started:
                logger.error(
                    f"Local API failed to start on {self.url}",
                    extra={"extra_data": {"port": self.port}},
                )
                server.should_exit = True
                thread.join(timeout=self.shutdown_timeout)
                return False

            self._server = server
            self._thread = thread
            logger.info(f"Local API listening on {self.url}")
            return True

    def stop(self) -> None:
        """Stop listening and wait for in-flight requests to wind down."""
        with self._lock:
            if self._server is None:
                return
            server, thread = self._server, self._thread
            self._server = None
            self._thread = None

        server.should_exit = True
        if thread is not None:
            thread.join(timeout=self.shutdown_timeout)
        logger.info("Local API stopped")

    def wait(self) -> None:
        """Block until the server thread exits."""
        thread = self._thread
        while thread is not None and thread.is_alive():
            thread.join(timeout=0.5)
