import json
import logging
from datetime import datetime, timezone
from typing import Any

from services.signing import redact_sas
from utils.request_id import get_request_id

logger = logging.getLogger("translator.stage")

_ERROR_EVENTS = {"FAILED"}
_WARNING_EVENTS = {"CANCELLED"}


# Payloads may carry blob or batch URLs; signatures never reach the log sink.
def _field(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return redact_sas(str(value))


def log_stage(
    *,
    job_id: str,
    stage: str,
    event: str,
    error: str | None = None,
    **extra: Any,
) -> None:
    event = event.upper()
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "job_id": job_id,
        "stage": stage.upper(),
        "event": event,
    }
    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id
    if error:
        payload["error"] = redact_sas(error)

    for key in sorted(extra):
        value = _field(extra[key])
        if value is not None:
            payload[key] = value

    msg = json.dumps(payload, ensure_ascii=False)
    if error or event in _ERROR_EVENTS:
        logger.error("stage_event %s", msg)
    elif event in _WARNING_EVENTS:
        logger.warning("stage_event %s", msg)
    else:
        logger.info("stage_event %s", msg)
