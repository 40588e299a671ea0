# User value: This file keeps API responses predictable for callers of the translation service.
from typing import Any, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "OK"
    contract_version: str


class ErrorResponse(BaseModel):
    # User value: one stable error shape whether upload, submission or polling failed.
    error_code: str
    error_message: str
    detail: Any = None
    path: str
    request_id: Optional[str] = None
    # User value: reports leaked staged artifacts even when the translation itself failed first.
    cleanup_error: Optional[str] = None
