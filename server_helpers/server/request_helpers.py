"""
Request pipeline: read input, run business logic, write the response.

Every handler built on ``RequestPipeline`` has three stages:

    1. preprocess - read the body (size capped), decode it into the input
       object and call its ``validate_input``; skipped when no input object
       is given. Any failure here is answered with 400.
    2. logic - ``logic(input_obj, request) -> (payload, status)``. Raise
       ``HandlerError(message, status)`` to answer with that status.
    3. respond - serialise ``payload`` and build the response. The body is
       fully encoded before the response is created so a serialisation
       error can still become a 500.

On failure the error text is sent back as a plain-text body with the error
status, and ``log_error(error, request)`` is called exactly once. Error
text reaches the client verbatim, so keep this to trusted callers.

Example:

    @router.post("/models")
    async def create_model(request: Request):
        return await standard_json_request_handler(request, ModelRequest(), create_logic)
"""
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from server_helpers.config import MAX_REQUEST_BYTES
from server_helpers.schemas.base import InputObject
from server_helpers.server import jsonapi
from server_helpers.server.errors import (
    HandlerError,
    InputValidationError,
    PipelineError,
    RequestDecodeError,
    RequestTooLargeError,
    ResponseEncodeError,
    UnsupportedContentTypeError,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_HEADER = "Content-Type"
ACCEPT_HEADER = "Accept"

JSON_CONTENT_TYPE = "application/json"
JSONAPI_CONTENT_TYPE = jsonapi.MEDIA_TYPE

DEFAULT_MAX_BYTES = 524288

LogErrorFn = Callable[[BaseException, Request], None]
UnmarshalFn = Callable[[InputObject, bytes, Request], None]
PreprocessFn = Callable[[Optional[InputObject], int, Request], Awaitable[None]]
LogicFn = Callable[[Optional[InputObject], Request], Any]
ResponseFn = Callable[[Any, int, Request], Response]


def log_request_error(err: BaseException, request: Request):
    logger.warning("%s %s failed: %s", request.method, request.url.path, err)


# ---------------------------------------------------------------------------
# Reading input
# ---------------------------------------------------------------------------

async def read_body(request: Request, max_bytes: int = 0) -> bytes:
    """Read the request body, failing as soon as it grows past ``max_bytes``.

    ``max_bytes`` of 0 means DEFAULT_MAX_BYTES.
    """
    limit = max_bytes or DEFAULT_MAX_BYTES
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise RequestTooLargeError("http: request body too large")
    return bytes(body)


def _load_json_object(body: bytes) -> dict:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise RequestDecodeError(f"invalid json: {e}") from e
    if not isinstance(data, dict):
        raise RequestDecodeError("invalid json: expected an object")
    return data


def _populate(input_obj: InputObject, data: dict):
    try:
        input_obj.populate(data)
    except ValueError as e:
        raise RequestDecodeError(str(e)) from e


def unmarshal_object_from_json(input_obj: InputObject, body: bytes, request: Request):
    # Keys the model doesn't know about are dropped
    data = _load_json_object(body)
    known = type(input_obj).known_keys()
    _populate(input_obj, {k: v for k, v in data.items() if k in known})


def unmarshal_object_from_json_strict(input_obj: InputObject, body: bytes, request: Request):
    data = _load_json_object(body)
    unknown = sorted(set(data) - type(input_obj).known_keys())
    if unknown:
        raise RequestDecodeError(f"json: unknown field \"{unknown[0]}\"")
    _populate(input_obj, data)


def unmarshal_object_from_jsonapi(input_obj: InputObject, body: bytes, request: Request):
    jsonapi.unmarshal_payload(body, input_obj)


def unmarshal_object_from_headers(input_obj: InputObject, body: bytes, request: Request):
    content_type = request.headers.get(CONTENT_TYPE_HEADER, "")
    if content_type == JSON_CONTENT_TYPE:
        unmarshal_object_from_json_strict(input_obj, body, request)
    elif content_type == JSONAPI_CONTENT_TYPE:
        unmarshal_object_from_jsonapi(input_obj, body, request)
    else:
        raise UnsupportedContentTypeError("Content-Type header is not json or jsonapi standard")


async def preprocess_input(input_obj: Optional[InputObject], max_bytes: int, request: Request,
                           unmarshal: UnmarshalFn):
    if input_obj is None:
        return

    body = await read_body(request, max_bytes)
    unmarshal(input_obj, body, request)

    try:
        input_obj.validate_input()
    except PipelineError:
        raise
    except Exception as e:
        raise InputValidationError(str(e)) from e


async def preprocess_input_from_json(input_obj: Optional[InputObject], max_bytes: int, request: Request):
    await preprocess_input(input_obj, max_bytes, request, unmarshal_object_from_json_strict)


async def preprocess_input_from_jsonapi(input_obj: Optional[InputObject], max_bytes: int, request: Request):
    await preprocess_input(input_obj, max_bytes, request, unmarshal_object_from_jsonapi)


async def preprocess_input_from_headers(input_obj: Optional[InputObject], max_bytes: int, request: Request):
    await preprocess_input(input_obj, max_bytes, request, unmarshal_object_from_headers)


# ---------------------------------------------------------------------------
# Writing output
# ---------------------------------------------------------------------------

def marshal_json(payload: Any) -> bytes:
    """Encode ``payload`` to JSON bytes or raise ResponseEncodeError.

    NaN and Infinity are rejected rather than written as invalid JSON.
    """
    try:
        return json.dumps(jsonable_encoder(payload), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ResponseEncodeError(f"could not encode response: {e}") from e


def write_model_to_response_json(payload: Any, status: int, request: Request = None) -> Response:
    body = marshal_json(payload)
    return Response(content=body, status_code=status, media_type=JSON_CONTENT_TYPE)


def write_model_to_response_jsonapi(payload: Any, status: int, request: Request = None) -> Response:
    body = marshal_json(jsonapi.marshal_payload(payload))
    return Response(content=body, status_code=status, media_type=JSONAPI_CONTENT_TYPE)


def write_model_to_response_from_headers(payload: Any, status: int, request: Request) -> Response:
    content_type = request.headers.get(CONTENT_TYPE_HEADER, "")
    accept = request.headers.get(ACCEPT_HEADER, "")
    if content_type == JSONAPI_CONTENT_TYPE or accept == JSONAPI_CONTENT_TYPE:
        return write_model_to_response_jsonapi(payload, status, request)
    return write_model_to_response_json(payload, status, request)


def write_no_content_to_response(payload: Any, status: int, request: Request = None) -> Response:
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

def send_error_on_error(err: Optional[BaseException], status: int, request: Request,
                        log_error: LogErrorFn) -> Optional[Response]:
    if err is None:
        return None
    log_error(err, request)
    return PlainTextResponse(str(err), status_code=status)


# ---------------------------------------------------------------------------
# Standard handlers
# ---------------------------------------------------------------------------

async def _call_logic(logic: LogicFn, input_obj: Optional[InputObject], request: Request) -> Tuple[Any, int]:
    if inspect.iscoroutinefunction(logic):
        result = await logic(input_obj, request)
    else:
        result = await run_in_threadpool(logic, input_obj, request)
    payload, status = result
    return payload, status


class RequestPipeline:
    """
    Runs the preprocess, logic and respond stages for one request at a time.

    Holds only configuration, so a single instance can serve concurrent
    requests.
    """

    def __init__(self, max_bytes: int = MAX_REQUEST_BYTES, log_error: LogErrorFn = log_request_error):
        self.max_bytes = max_bytes
        self.log_error = log_error

    async def handle(
        self,
        request: Request,
        input_obj: Optional[InputObject],
        logic: LogicFn,
        preprocess: PreprocessFn = preprocess_input_from_json,
        respond: ResponseFn = write_model_to_response_json,
    ) -> Response:
        # Every preprocess failure is treated as bad client input, including
        # failures of lookups a custom preprocess function may do.
        try:
            await preprocess(input_obj, self.max_bytes, request)
        except Exception as e:
            return send_error_on_error(e, 400, request, self.log_error)

        try:
            payload, status = await _call_logic(logic, input_obj, request)
        except HandlerError as e:
            return send_error_on_error(e, e.status, request, self.log_error)
        except Exception as e:
            return send_error_on_error(e, 500, request, self.log_error)

        try:
            return respond(payload, status, request)
        except ResponseEncodeError as e:
            return send_error_on_error(e, e.status, request, self.log_error)
        except Exception as e:
            return send_error_on_error(ResponseEncodeError(f"could not write response: {e}"), 500,
                                       request, self.log_error)

    async def handle_json(self, request: Request, input_obj: Optional[InputObject], logic: LogicFn) -> Response:
        return await self.handle(request, input_obj, logic, preprocess_input_from_json, write_model_to_response_json)

    async def handle_agnostic(self, request: Request, input_obj: Optional[InputObject], logic: LogicFn) -> Response:
        return await self.handle(request, input_obj, logic, preprocess_input_from_headers,
                                 write_model_to_response_from_headers)


def _pipeline(max_bytes: int, log_error: LogErrorFn) -> RequestPipeline:
    return RequestPipeline(max_bytes or MAX_REQUEST_BYTES, log_error)


async def standard_request_handler(
    request: Request,
    input_obj: Optional[InputObject],
    logic: LogicFn,
    preprocess: PreprocessFn,
    respond: ResponseFn,
    max_bytes: int = 0,
    log_error: LogErrorFn = log_request_error,
) -> Response:
    return await _pipeline(max_bytes, log_error).handle(request, input_obj, logic, preprocess, respond)


async def standard_json_request_handler(request: Request, input_obj: Optional[InputObject], logic: LogicFn,
                                        max_bytes: int = 0, log_error: LogErrorFn = log_request_error) -> Response:
    return await _pipeline(max_bytes, log_error).handle_json(request, input_obj, logic)


async def standard_agnostic_request_handler(request: Request, input_obj: Optional[InputObject], logic: LogicFn,
                                            max_bytes: int = 0, log_error: LogErrorFn = log_request_error) -> Response:
    return await _pipeline(max_bytes, log_error).handle_agnostic(request, input_obj, logic)
