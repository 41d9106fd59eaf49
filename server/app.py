"""
============================================================================
MEOW UPTIME MONITOR - CONFIG SERVER
============================================================================
aiohttp service through which endpoint definitions are managed. The
monitor fetches its endpoint list from here at startup.

    GET  /endpoints        → 200 JSON array of payloads, ordered by identifier
    GET  /endpoints/{id}   → 200 JSON payload | 404 unknown | 400 bad identifier
    POST /endpoints/{id}   → 201 created | 204 updated | 400 bad body/identifier
                             | 500 persisting failed

Any other method on these resources answers 405.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import re
from typing import Optional

from aiohttp import web

from config.constants import Patterns
from config.settings import ServerSettings
from exceptions.store import PersistenceError
from exceptions.validation import EndpointValidationError
from monitoring.endpoint import Endpoint
from store.config_store import ConfigStore
from utils.logger import get_logger


logger = get_logger("ConfigServer")

ENDPOINT_RESOURCE_PATTERN = re.compile(Patterns.ENDPOINT_RESOURCE)


def extract_identifier(path: str) -> str:
    """
    Take the endpoint identifier from a resource path such as
    ``/endpoints/my-api``.

    Raises:
        ValueError: If the path does not name a valid identifier
    """
    match = ENDPOINT_RESOURCE_PATTERN.fullmatch(path)
    if not match:
        raise ValueError(
            f'endpoint "{path}" does not match pattern "{Patterns.ENDPOINT_RESOURCE}"'
        )
    return match.group(1)


class ConfigServer:
    """
    CRUD front end over a ConfigStore.

    Attributes
    ----------
    store : ConfigStore
    app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    """

    def __init__(self, settings: ServerSettings, store: ConfigStore):
        self.settings = settings
        self.store = store
        self.app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

        self.app.router.add_route("*", "/endpoints", self._handle_collection)
        self.app.router.add_route("*", "/endpoints/{tail:.*}", self._handle_resource)

    async def start(self) -> None:
        """Bind and start serving."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.settings.addr, self.settings.port)
        await self._site.start()
        logger.info(f"✓ ConfigServer listening on {self.settings.addr}:{self.settings.port}")

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ ConfigServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_collection(self, request: web.Request) -> web.Response:
        if request.method != "GET":
            return self._not_allowed(request)

        logger.info(f"GET {request.path} from {request.remote}")
        payloads = [endpoint.to_payload() for endpoint in self.store.list()]
        return web.json_response(payloads)

    async def _handle_resource(self, request: web.Request) -> web.Response:
        if request.method == "GET":
            return await self._get_endpoint(request)
        if request.method == "POST":
            return await self._post_endpoint(request)
        return self._not_allowed(request)

    async def _get_endpoint(self, request: web.Request) -> web.Response:
        logger.info(f"GET {request.path} from {request.remote}")
        try:
            identifier = extract_identifier(request.path)
        except ValueError as e:
            logger.warning(f"extract endpoint identifier of {request.path}: {e}")
            return web.Response(status=400)

        endpoint = self.store.get(identifier)
        if endpoint is None:
            logger.info(f'no such endpoint "{identifier}"')
            return web.Response(status=404)
        return web.Response(text=endpoint.to_json(), content_type="application/json")

    async def _post_endpoint(self, request: web.Request) -> web.Response:
        logger.info(f"POST {request.path} from {request.remote}")
        try:
            identifier = extract_identifier(request.path)
        except ValueError as e:
            logger.warning(f"extract endpoint identifier of {request.path}: {e}")
            return web.Response(status=400)

        body = await request.text()
        try:
            endpoint = Endpoint.from_json(body)
        except EndpointValidationError as e:
            logger.warning(f"parse JSON body: {e}")
            return web.Response(status=400)

        if endpoint.identifier != identifier:
            logger.warning(
                f"identifier mismatch: (resource: {identifier}, body: {endpoint.identifier})"
            )
            return web.Response(status=400)

        try:
            created = await self.store.upsert(endpoint)
        except PersistenceError as e:
            logger.error(f"✗ {e}")
            return web.Response(status=500)

        return web.Response(status=201 if created else 204)

    @staticmethod
    def _not_allowed(request: web.Request) -> web.Response:
        logger.warning(
            f"request from {request.remote} rejected: method {request.method} not allowed"
        )
        return web.Response(status=405)
