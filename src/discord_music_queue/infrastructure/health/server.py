"""HTTP liveness listener for hosting platforms that probe a port."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from aiohttp import web

from discord_music_queue.config.settings import HealthSettings
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

ALIVE_TEXT = "Bot is running!"


class HealthServer:
    """Serves ``/``, ``/health`` and ``/status`` on the configured host and port."""

    def __init__(
        self,
        settings: HealthSettings | None = None,
        *,
        session_count: Callable[[], int] | None = None,
    ) -> None:
        self._settings = settings or HealthSettings()
        self._session_count = session_count or (lambda: 0)
        self._runner: web.AppRunner | None = None
        self._started_at = time.monotonic()

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self.handle_alive)
        app.router.add_get("/health", self.handle_alive)
        app.router.add_get("/status", self.handle_status)
        return app

    async def handle_alive(self, request: web.Request) -> web.Response:
        return web.Response(text=ALIVE_TEXT)

    async def handle_status(self, request: web.Request) -> web.Response:
        return web.json_response(
            {
                "status": "ok",
                "uptime_s": int(time.monotonic() - self._started_at),
                "active_sessions": self._session_count(),
            }
        )

    async def start(self) -> None:
        if self._runner is not None:
            return

        runner = web.AppRunner(self.build_app())
        await runner.setup()
        site = web.TCPSite(runner, self._settings.host, self._settings.port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise

        self._runner = runner
        self._started_at = time.monotonic()
        logger.info(LogTemplates.HEALTH_SERVER_STARTED, self._settings.host, self._settings.port)

    async def stop(self) -> None:
        if self._runner is None:
            return

        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.info(LogTemplates.HEALTH_SERVER_STOPPED)
