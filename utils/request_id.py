import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{8,128}$")


def normalize_request_id(raw: str | None) -> str:
    value = (raw or "").strip()
    if value and _REQUEST_ID_RE.match(value):
        return value
    return f"req-{uuid.uuid4().hex}"


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


@contextmanager
def request_context(value: str | None) -> Iterator[str | None]:
    """Bind ``value`` as the current request id; an already bound id is kept."""
    current = _REQUEST_ID_CTX.get()
    token = _REQUEST_ID_CTX.set(current or value)
    try:
        yield _REQUEST_ID_CTX.get()
    finally:
        _REQUEST_ID_CTX.reset(token)
