"""
Canary target: an always-up HTTP endpoint to point the monitor at.
"""

from typing import Optional

from aiohttp import web

from utils.logger import get_logger


logger = get_logger("Canary")


class CanaryServer:
    """Answers ``GET /canary`` with ``OK``."""

    def __init__(self, bind: str = "0.0.0.0", port: int = 9000):
        self.bind = bind
        self.port = port
        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None

        self.app.router.add_get("/canary", self._handle_canary)

    async def start(self) -> None:
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.bind, self.port)
        await site.start()
        logger.info(f"listen to {self.bind}:{self.port}")

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    async def _handle_canary(self, request: web.Request) -> web.Response:
        logger.info(f"request from {request.remote}")
        return web.Response(text="OK\n")
