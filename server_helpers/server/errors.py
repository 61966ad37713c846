from typing import Optional


class PipelineError(RuntimeError):
    status = 500

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        if status is not None:
            self.status = status


class RequestDecodeError(PipelineError):
    status = 400


class UnsupportedContentTypeError(RequestDecodeError):
    pass


class RequestTooLargeError(RequestDecodeError):
    pass


class InputValidationError(PipelineError):
    status = 400


class HandlerError(PipelineError):
    """Raised by business logic; ``status`` is sent back unchanged."""

    def __init__(self, message: str, status: int):
        super().__init__(message, status)


class ResponseEncodeError(PipelineError):
    status = 500
