"""
Middlewares HTTP : authentification par secret partagé et plafond de taille du corps.
"""

import logging
import secrets

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.config import get_settings
from app.core.exceptions import PayloadTooLargeError, UnauthorizedError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Rejette en 403 toute requête dont l'en-tête x-api-key ne correspond pas au secret."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        logger.info("Requête reçue: %s %s", request.method, request.url.path)

        expected = get_settings().app_api_key
        provided = request.headers.get(API_KEY_HEADER, "")
        if not secrets.compare_digest(provided.encode(), expected.encode()):
            logger.warning("Clé API invalide pour %s %s", request.method, request.url.path)
            error = UnauthorizedError()
            return JSONResponse(status_code=error.status_code, content=error.to_content())

        return await call_next(request)


class BodySizeLimitMiddleware:
    """
    Rejette en 413 les requêtes dont le corps dépasse MAX_BODY_SIZE.
    Un Content-Length trop grand est refusé d'emblée ; sans Content-Length (envoi chunked),
    le corps est lu et compté jusqu'au plafond avant d'être transmis à l'application.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = get_settings().max_body_size
        content_length = Headers(scope=scope).get("content-length")

        if content_length is not None:
            if content_length.isdigit() and int(content_length) > limit:
                logger.warning("Corps de requête trop volumineux: %s octets", content_length)
                await self._reject(limit, scope, receive, send)
                return
            await self.app(scope, receive, send)
            return

        chunks: list[bytes] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                # Client déconnecté avant la fin du corps
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > limit:
                logger.warning("Corps de requête chunked au-delà de %d octets", limit)
                await self._reject(limit, scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body_sent = False

        async def replay() -> Message:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": b"".join(chunks), "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    @staticmethod
    async def _reject(limit: int, scope: Scope, receive: Receive, send: Send) -> None:
        error = PayloadTooLargeError(details={"max_size": limit})
        response = JSONResponse(status_code=error.status_code, content=error.to_content())
        await response(scope, receive, send)
