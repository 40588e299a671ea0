# User value: queues the user's document with the translation service and reports rejections clearly.
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config import WorkflowConfig
from schemas.translation import render_translation_request
from services.errors import SubmissionRejected, SubmissionTransportError

logger = logging.getLogger("translator.client")

_MAX_ERROR_BODY_CHARS = 2000


@dataclass(frozen=True)
class SubmissionResult:
    status_code: int
    operation_location: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return 200 <= self.status_code < 300


class TranslatorClient:
    def __init__(self, config: WorkflowConfig, session: requests.Session | None = None):
        self._config = config
        self._session = session or requests.Session()

    # User value: sends the auth headers the translation service expects on every batch call.
    def _headers(self) -> dict:
        return {
            "Ocp-Apim-Subscription-Key": self._config.translator_key,
            "Content-Type": "application/json",
            "Ocp-Apim-Subscription-Region": self._config.translator_region,
        }

    # User value: submits one document for translation; a 2xx only means the batch was queued.
    def submit(
        self,
        source_url: str,
        target_url: str,
        source_language: str | None,
        target_language: str,
    ) -> SubmissionResult:
        body = render_translation_request(source_url, target_url, source_language, target_language)
        url = self._config.batches_url

        try:
            response = self._session.post(
                url,
                data=body.encode("utf-8"),
                headers=self._headers(),
                timeout=self._config.request_timeout_sec,
            )
        except requests.RequestException as exc:
            raise SubmissionTransportError(
                f"error sending translation request: {exc.__class__.__name__}: {exc}"
            ) from exc

        if self._config.verbose:
            logger.debug(
                "translator_response status=%s headers=%s",
                response.status_code,
                dict(response.headers),
            )

        result = SubmissionResult(
            status_code=response.status_code,
            operation_location=response.headers.get("Operation-Location"),
        )
        if not result.accepted:
            raise SubmissionRejected(response.status_code, (response.text or "")[:_MAX_ERROR_BODY_CHARS])

        return result
