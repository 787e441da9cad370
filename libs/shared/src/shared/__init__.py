from .schemas import ErrorResponse
from .errors import register_error_handlers
from .request_context import REQUEST_ID_HEADER, RequestIDMiddleware

__all__ = ["ErrorResponse", "register_error_handlers", "REQUEST_ID_HEADER", "RequestIDMiddleware"]
