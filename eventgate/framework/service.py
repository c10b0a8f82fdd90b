"""
Base AsyncService class for the event services.

Provides lifecycle management, HTTP server, health checks,
metrics and graceful shutdown.
"""

import asyncio
import signal
from abc import ABC, abstractmethod
from typing import Optional

from aiohttp import web
import psutil
import structlog

from .config import ServiceConfig
from .health import HealthChecker
from .metrics import MetricsCollector


logger = structlog.get_logger(__name__)

METRICS_INTERVAL_SECONDS = 30


class AsyncService(ABC):
    """
    Base class for async HTTP services.

    Subclasses register their routes in ``_setup_service_routes`` and
    acquire/release their resources in the startup and shutdown hooks.
    """

    def __init__(self, config: ServiceConfig):
        self.config = config
        self.logger = structlog.get_logger(self.config.service_name).bind(service=self.config.service_name)

        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

        self.health_checker = HealthChecker(self.config)
        self.metrics = MetricsCollector(self.config.service_name)

        self.shutdown_event = asyncio.Event()
        self.metrics_task: Optional[asyncio.Task] = None
        self._stopped = False

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def handle_signal(signum: int) -> None:
            self.logger.info("Received shutdown signal", signal=signum)
            self.shutdown_event.set()

        for signum in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(signum, handle_signal, signum)

    def build_app(self) -> web.Application:
        """Create the web application with framework and service routes."""
        self.app = web.Application(middlewares=[self.metrics.middleware()])
        self._setup_routes()
        return self.app

    async def startup(self) -> None:
        """Initialize service components and start listening."""
        self.logger.info("Starting service")

        await self._startup_hook()
        self.build_app()

        self.metrics_task = asyncio.create_task(self._update_metrics_periodically())

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, host=self.config.http.host, port=self.config.http.port)
        await self.site.start()

        self.logger.info("Service started", host=self.config.http.host, port=self.config.http.port)

    async def shutdown(self) -> None:
        """Gracefully shutdown service."""
        if self._stopped:
            return
        self._stopped = True
        self.logger.info("Shutting down service")

        if self.site:
            await self.site.stop()

        if self.metrics_task:
            self.metrics_task.cancel()
            try:
                await self.metrics_task
            except asyncio.CancelledError:
                pass

        if self.runner:
            await self.runner.cleanup()

        await self._shutdown_hook()

        self.shutdown_event.set()
        self.logger.info("Service shutdown complete")

    def _setup_routes(self) -> None:
        """Setup HTTP routes."""
        self.app.router.add_get("/health", self._health_handler)
        self.app.router.add_get("/health/ready", self._readiness_handler)
        self.app.router.add_get("/health/live", self._liveness_handler)
        self.app.router.add_get("/metrics", self._metrics_handler)

        self._setup_service_routes()

    def _setup_service_routes(self) -> None:
        """Setup service-specific HTTP routes. Override in subclasses."""
        pass

    async def _health_handler(self, request: web.Request) -> web.Response:
        health_status = await self.health_checker.check_health()
        status_code = 200 if health_status["healthy"] else 503
        return web.json_response(health_status, status=status_code)

    async def _readiness_handler(self, request: web.Request) -> web.Response:
        ready_status = await self.health_checker.check_readiness()
        status_code = 200 if ready_status["ready"] else 503
        return web.json_response(ready_status, status=status_code)

    async def _liveness_handler(self, request: web.Request) -> web.Response:
        return web.json_response({"alive": True})

    async def _metrics_handler(self, request: web.Request) -> web.Response:
        # content_type= rejects the charset parameter prometheus includes
        return web.Response(
            body=self.metrics.get_metrics(),
            headers={"Content-Type": self.metrics.get_content_type()},
        )

    @abstractmethod
    async def _startup_hook(self) -> None:
        """Service-specific startup logic."""

    @abstractmethod
    async def _shutdown_hook(self) -> None:
        """Service-specific shutdown logic."""

    async def _update_metrics_periodically(self) -> None:
        """Refresh service info, health and memory gauges."""
        process = psutil.Process()
        while not self.shutdown_event.is_set():
            try:
                self.metrics.update_service_info(
                    version=self.config.version,
                    environment=self.config.environment,
                )
                health_status = await self.health_checker.check_health()
                self.metrics.set_health_status(health_status["healthy"])
                self.metrics.set_memory_usage(process.memory_info().rss)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error updating metrics", error=str(e))

            try:
                await asyncio.sleep(METRICS_INTERVAL_SECONDS)
            except asyncio.CancelledError:
                break

    async def run(self) -> None:
        """Run the service until a shutdown signal arrives."""
        self._setup_signal_handlers()
        try:
            await self.startup()
            await self.shutdown_event.wait()
        except Exception as e:
            self.logger.error("Service error", error=str(e), exc_info=True)
            raise
        finally:
            await self.shutdown()
