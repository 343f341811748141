import asyncio
import contextlib
import signal
import socket
import sys

import uvicorn
from pydantic import ValidationError

from geoip_service.clients.base import BaseGeoLookupClient
from geoip_service.clients.maxmind_client import MaxMindCountryClient
from geoip_service.config import (
    KEEP_ALIVE_TIMEOUT_SECONDS,
    LISTEN_HOST,
    SHUTDOWN_GRACE_SECONDS,
    Settings,
    get_settings,
)
from geoip_service.errors import DatabaseOpenError, ServerStoppedError, TransportBindError
from geoip_service.grpc_api.server import create_grpc_server
from geoip_service.logger import logger, setup_logging
from geoip_service.main import app
from geoip_service.service import LookupService


class HttpServer(uvicorn.Server):
    """uvicorn server whose shutdown is driven by ServiceRunner, not by its own signal handlers."""

    def install_signal_handlers(self) -> None:
        # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        # uvicorn >= 0.29
        yield


def bind_http_socket(host: str, port: int) -> socket.socket:
    try:
        return socket.create_server((host, port))
    except OSError as exc:
        raise TransportBindError(f"failed to listen on HTTP address {host}:{port}: {exc}") from exc


class ServiceRunner:
    """Owns the process-lifetime state: the database handle and both servers."""

    def __init__(self, settings: Settings, log_config: dict | None = None, host: str = LISTEN_HOST) -> None:
        self._settings = settings
        self._log_config = log_config
        self._host = host
        self._stop_event: asyncio.Event | None = None

    def request_stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    def open_lookup_client(self) -> BaseGeoLookupClient:
        return MaxMindCountryClient.open(self._settings.GEOIP_DB_PATH)

    async def run(self) -> None:
        lookup_client = self.open_lookup_client()
        try:
            await self._serve(LookupService(lookup_client))
        finally:
            lookup_client.close()

    async def _serve(self, service: LookupService) -> None:
        grpc_server, grpc_port = create_grpc_server(service, self._host, self._settings.GRPC_PORT)
        try:
            http_socket = bind_http_socket(self._host, self._settings.PORT)
        except TransportBindError:
            await grpc_server.stop(None)
            raise

        app.state.lookup_service = service
        http_server = HttpServer(
            uvicorn.Config(
                app,
                log_config=self._log_config,
                access_log=False,
                timeout_keep_alive=KEEP_ALIVE_TIMEOUT_SECONDS,
                timeout_graceful_shutdown=int(SHUTDOWN_GRACE_SECONDS),
            )
        )

        self._stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_stop)

        try:
            await grpc_server.start()
            logger.info(f"gRPC server starting address={self._host}:{grpc_port}")
            logger.info(f"HTTP server starting address={self._host}:{http_socket.getsockname()[1]}")

            http_task = asyncio.create_task(http_server.serve(sockets=[http_socket]))
            grpc_task = asyncio.create_task(grpc_server.wait_for_termination())
            stop_task = asyncio.create_task(self._stop_event.wait())

            done, _ = await asyncio.wait({http_task, grpc_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
            unexpected_stop = None
            if stop_task not in done:
                if http_task in done and not http_server.started:
                    unexpected_stop = "HTTP server failed to start"
                elif http_task in done:
                    unexpected_stop = "HTTP server stopped unexpectedly"
                else:
                    unexpected_stop = "gRPC server stopped unexpectedly"
                logger.error(f"{unexpected_stop}, shutting down")

            logger.info("Shutting down servers...")
            http_server.should_exit = True
            await grpc_server.stop(SHUTDOWN_GRACE_SECONDS)

            try:
                await asyncio.wait_for(http_task, timeout=SHUTDOWN_GRACE_SECONDS)
            except asyncio.TimeoutError:
                logger.error("HTTP server forced to shutdown")

            stop_task.cancel()
            grpc_task.cancel()
            logger.info("Servers exited")

            if unexpected_stop is not None:
                raise ServerStoppedError(unexpected_stop)
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            http_socket.close()
            app.state.lookup_service = None


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        setup_logging()
        logger.error(f"Invalid configuration error={exc}")
        sys.exit(1)

    log_config = setup_logging(settings.LOG_LEVEL)
    logger.info(
        "Starting GeoIP Service "
        f"http_port={settings.PORT} grpc_port={settings.GRPC_PORT} db_path={settings.GEOIP_DB_PATH}"
    )

    try:
        asyncio.run(ServiceRunner(settings, log_config).run())
    except DatabaseOpenError as exc:
        logger.error(f"Failed to initialize GeoIP service error={exc}")
        sys.exit(1)
    except TransportBindError as exc:
        logger.error(f"Failed to start server error={exc}")
        sys.exit(1)
    except ServerStoppedError as exc:
        logger.error(f"Server exited abnormally error={exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
