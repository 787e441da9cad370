from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
    request_id: str | None = None
    # Machine-readable next step for the client, e.g. "deposit_funds"
    action: str | None = None
    context: dict[str, Any] | None = None
