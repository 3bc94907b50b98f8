"""HTTP service implementation using FastAPI."""

import asyncio
import webbrowser
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from loguru import logger
from pydantic import BaseModel

from .base_service import BaseService
from .ui import render_contents, render_page, render_sidebar
from ..enumeration import BroadcastKind
from ..exceptions import PipelineClosedError
from ..fanout import iter_events
from ..schema import BroadcastEvent
from ..utils import hash_text

RESOURCE_DIR = Path(__file__).parent.parent / "resources"
CONTENTS_PREFIX = "/.contents"


class PingResponse(BaseModel):
    success: bool = True
    msg: str = "Pong"


def websocket_message(event: BroadcastEvent) -> dict | None:
    """Translate a broadcast event into the JSON message the browser client understands."""
    if event.kind == BroadcastKind.ARTIFACT_CHANGED:
        return {
            "action": event.kind.value,
            "path": event.path,
            "content": {"contents": event.artifact.content, "word_count": event.artifact.word_count},
        }
    if event.kind == BroadcastKind.LISTING_CHANGED:
        return {"action": event.kind.value, "content": render_sidebar(event.listing or [])}
    return None


def raw_request_path(request: Request) -> str:
    """The still percent-encoded request path; decoding is up to the query service."""
    raw_path: bytes | None = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return quote(request.url.path)


class HttpService(BaseService):
    """Serves rendered pages and pushes live updates over a websocket."""

    def __init__(self, **kwargs):
        """Initialize the FastAPI app and its routes."""
        super().__init__(**kwargs)
        self.server: uvicorn.Server | None = None

        self.ws_js: bytes = (RESOURCE_DIR / "ws.js").read_bytes()
        self.ws_js_etag: str = f'"{hash_text(self.ws_js.decode("utf-8"))[:16]}"'

        @asynccontextmanager
        async def lifespan(_: FastAPI):
            await self.app.start()
            stop_task = asyncio.create_task(self._exit_on_shutdown())
            self._open_browser()
            yield
            stop_task.cancel()
            await self.app.close()

        self.api = FastAPI(title=self.service_config.app_name, lifespan=lifespan)
        self.api.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self.api.add_exception_handler(PipelineClosedError, self._closed_handler)

        self.api.get("/.ping", response_model=PingResponse)(lambda: PingResponse())
        self.api.get("/.listing")(self.listing_endpoint)
        self.api.get("/.rsc/ws.js")(self.ws_js_endpoint)
        self.api.websocket("/.ws")(self.websocket_endpoint)
        self.api.get(CONTENTS_PREFIX + "/{path:path}", response_class=HTMLResponse)(self.contents_endpoint)
        self.api.get("/{path:path}", response_class=HTMLResponse)(self.page_endpoint)

    @staticmethod
    async def _closed_handler(_request: Request, exc: PipelineClosedError) -> Response:
        logger.debug(f"Rejected request: {exc}")
        return HTMLResponse("Service unavailable", status_code=503)

    async def _exit_on_shutdown(self):
        await self.app.wait_shutdown()
        logger.info(f"Stopping HTTP server: {self.app.shutdown_reason}")
        if self.server is not None:
            self.server.should_exit = True

    @property
    def url(self) -> str:
        cfg = self.service_config.http
        return f"http://{cfg.host}:{cfg.port}"

    def _open_browser(self):
        if self.service_config.http.open_browser:
            webbrowser.open(self.url)

    async def listing_endpoint(self) -> JSONResponse:
        return JSONResponse(await self.app.get_listing())

    async def ws_js_endpoint(self, request: Request) -> Response:
        if request.headers.get("if-none-match") == self.ws_js_etag:
            return Response(status_code=304)
        return Response(
            self.ws_js,
            media_type="application/javascript",
            headers={"ETag": self.ws_js_etag},
        )

    async def contents_endpoint(self, request: Request) -> HTMLResponse:
        requested = raw_request_path(request)[len(CONTENTS_PREFIX) :]
        result = await self.app.get_file(requested)
        return HTMLResponse(render_contents(result.artifact), status_code=200 if result.found else 404)

    async def page_endpoint(self, request: Request) -> HTMLResponse:
        requested = raw_request_path(request)
        result = await self.app.get_file(requested)
        page = render_page(result.path or requested, result.artifact, result.listing)
        return HTMLResponse(page, status_code=200 if result.found else 404)

    async def websocket_endpoint(self, websocket: WebSocket):
        # attach before accepting so no broadcast falls between the handshake and registration
        try:
            subscriber_id, channel = await self.app.attach()
        except PipelineClosedError:
            await websocket.close(code=1013)
            return
        await websocket.accept()

        logger.debug(f"Established websocket connection {subscriber_id}")
        sender = asyncio.create_task(self._forward_events(websocket, channel))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            await self.app.detach(subscriber_id)
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass
            logger.debug(f"Closed websocket connection {subscriber_id}")

    @staticmethod
    async def _forward_events(websocket: WebSocket, channel: asyncio.Queue):
        try:
            async for event in iter_events(channel):
                message = websocket_message(event)
                if message is not None:
                    await websocket.send_json(message)
            await websocket.close()
        except (RuntimeError, OSError) as e:
            logger.error(f"Web socket connection broke: {e}")

    def run(self):
        """Start the Uvicorn server."""
        cfg = self.service_config.http
        config = uvicorn.Config(
            self.api,
            host=cfg.host,
            port=cfg.port,
            timeout_keep_alive=cfg.timeout_keep_alive,
            limit_concurrency=cfg.limit_concurrency,
            **cfg.model_extra,
        )
        self.server = uvicorn.Server(config)
        logger.info(f"Starting server on {self.url}")
        self.server.run()
