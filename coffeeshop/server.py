# coffeeshop/server.py
import logging
import threading
from typing import Optional, Tuple

import uvicorn

from .config import ConfigError, ServerConfig
from .database import INVENTORY, MemoryStore, Store
from .log import configure_logging
from .main import create_app

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8088


class ServeError(RuntimeError):
    """The server could not listen or stopped on a transport failure."""


class ShutdownTimeoutError(TimeoutError):
    """Requests were still in flight when the shutdown deadline passed."""


def split_address(addr: str) -> Tuple[str, int]:
    """Split ``host:port``; an empty host means every interface."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ConfigError(f"address {addr!r} has no port")
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"address {addr!r} has an invalid port") from None
    if not 0 <= port_number <= 65535:
        raise ConfigError(f"address {addr!r} has an invalid port")
    return host.strip("[]") or "0.0.0.0", port_number


class CoffeeShopServer:
    """HTTP server for the coffee shop products API.

    ``config`` defaults to the environment (see ServerConfig.from_env) and
    ``latency`` overrides the configured delay. Both are validated here, so a
    bad value fails before anything listens.
    """

    def __init__(
        self,
        addr: str,
        store: Store,
        config: Optional[ServerConfig] = None,
        *,
        latency=None,
    ):
        if config is None:
            config = ServerConfig.from_env()
        if latency is not None:
            config = config.with_latency(latency)

        self.addr = addr
        self.url = f"http://{addr}/"
        self.store = store
        self.config = config
        self.host, self.port = split_address(addr)
        self.app = create_app(store, config)
        self._server = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.host,
                port=self.port,
                lifespan="off",
                log_config=None,
                timeout_keep_alive=max(int(config.read_timeout.total_seconds()), 1),
            )
        )
        self._lock = threading.Lock()
        # set whenever listen_and_serve is not running
        self._stopped = threading.Event()
        self._stopped.set()

    @property
    def latency(self):
        return self.config.latency

    @property
    def started(self) -> bool:
        return self._server.started

    def listen_and_serve(self) -> None:
        """Serve requests until shutdown() is called.

        Raises ServeError when the address cannot be bound.
        """
        logger.info("coffeeshop listening on %s (latency %s)", self.addr, self.config.latency)
        with self._lock:
            self._stopped.clear()
        try:
            self._server.run()
        except SystemExit as exc:
            # uvicorn exits the process when it cannot bind
            raise ServeError(f"cannot serve on {self.addr}") from exc
        except OSError as exc:
            raise ServeError(f"cannot serve on {self.addr}: {exc}") from exc
        finally:
            self._stopped.set()
        if not self._server.started and not self._server.should_exit:
            raise ServeError(f"cannot serve on {self.addr}")

    def shutdown(self, timeout: float) -> None:
        """Stop accepting connections and wait for in-flight requests.

        Returns at once when the server is not serving. Raises
        ShutdownTimeoutError when requests are still running after
        ``timeout`` seconds; the server is then stopped without waiting.
        """
        with self._lock:
            if self._stopped.is_set():
                # never started, or already stopped
                return
            self._server.should_exit = True
        if self._stopped.wait(timeout):
            return
        logger.warning("shutdown deadline of %ss passed with requests in flight", timeout)
        self._server.force_exit = True
        raise ShutdownTimeoutError(f"requests still in flight after {timeout}s")


def run(config: Optional[ServerConfig] = None) -> None:
    """Serve the seed inventory from memory on the default port."""
    store = MemoryStore(INVENTORY)
    server = CoffeeShopServer(f":{DEFAULT_PORT}", store, config)
    server.listen_and_serve()


def main() -> int:
    try:
        config = ServerConfig.from_env()
    except ConfigError as exc:
        configure_logging()
        logger.error("%s", exc)
        return 1
    configure_logging(config.log_level)

    try:
        run(config)
    except (ConfigError, ServeError) as exc:
        logger.error("%s", exc)
        return 1
    return 0
