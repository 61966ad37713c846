import logging
import uuid

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ("Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization, accept, "
                      "origin, Cache-Control, X-Requested-With, Session")
CORS_ALLOW_METHODS = "POST, OPTIONS, GET, PUT, PATCH, DELETE"


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Adds permissive CORS headers to every response and answers OPTIONS with 204.

    Meant for a service running locally behind a dev frontend.
    """

    def __init__(self, app, requester_id_header: str):
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Headers": f"{CORS_ALLOW_HEADERS}, {requester_id_header}",
            "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        response.headers.update(self.headers)
        return response


class RequesterIdMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose requester id header is missing or not a UUID."""

    def __init__(self, app, requester_id_header: str, debug: bool = False):
        super().__init__(app)
        self.header = requester_id_header
        self.debug = debug

    def _reject(self, msg: str) -> Response:
        if self.debug:
            logger.info(msg)
        return PlainTextResponse(msg, status_code=400)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        requester_id = request.headers.get(self.header, "")
        if not requester_id:
            return self._reject(f"No '{self.header}' header")
        try:
            uuid.UUID(requester_id)
        except ValueError:
            return self._reject(f"{self.header}- is not valid UUID")
        return await call_next(request)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with a trace id and optionally logs start and finish.

    A missing trace id header gets a fresh UUID. The id is stored on
    ``request.state.trace_id`` and echoed in the response header.
    """

    def __init__(self, app, trace_id_header: str, debug: bool = False):
        super().__init__(app)
        self.header = trace_id_header
        self.debug = debug

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(self.header) or str(uuid.uuid4())
        request.state.trace_id = trace_id

        if self.debug:
            logger.info("Received: %s -- %s", request.url.path, trace_id)

        response = await call_next(request)
        response.headers[self.header] = trace_id

        if self.debug:
            logger.info("Finished: %s -- %s -- [%d]", request.url.path, trace_id, response.status_code)
        return response


def add_cors_middleware_and_endpoint(app: FastAPI, requester_id_header: str):
    app.add_middleware(CORSHeadersMiddleware, requester_id_header=requester_id_header)


def add_requester_id_header_middleware(app: FastAPI, requester_id_header: str, debug: bool = False):
    app.add_middleware(RequesterIdMiddleware, requester_id_header=requester_id_header, debug=debug)


def add_logging_middleware(app: FastAPI, trace_id_header: str, debug: bool = False):
    app.add_middleware(LoggingMiddleware, trace_id_header=trace_id_header, debug=debug)
