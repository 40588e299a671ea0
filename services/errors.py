# User value: This file gives users one clear failure category per translation stage.
from typing import List, Optional, Tuple


class StorageError(Exception):
    """Raised by the blob store for any storage-side failure."""


class ObjectNotFound(StorageError):
    """The requested blob does not exist (yet)."""


class TranslationWorkflowError(Exception):
    error_code = "TRANSLATION_FAILED"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.cleanup_error: Optional["CleanupError"] = None

    # User value: keeps a translation failure and a leaked-artifact failure visible together.
    def attach_cleanup_error(self, cleanup_error: "CleanupError") -> None:
        self.cleanup_error = cleanup_error

    def __str__(self) -> str:
        if self.cleanup_error is None:
            return self.message
        return f"{self.message}; additionally {self.cleanup_error}"


class ConfigurationError(TranslationWorkflowError):
    error_code = "CONFIGURATION_INVALID"
    http_status = 500


class CredentialError(TranslationWorkflowError):
    error_code = "CREDENTIAL_INVALID"
    http_status = 500


class UploadError(TranslationWorkflowError):
    error_code = "UPLOAD_FAILED"
    http_status = 503


class SigningError(TranslationWorkflowError):
    error_code = "SIGNING_FAILED"
    http_status = 500


class SubmissionTransportError(TranslationWorkflowError):
    error_code = "SUBMISSION_TRANSPORT_FAILED"
    http_status = 502


class SubmissionRejected(TranslationWorkflowError):
    error_code = "SUBMISSION_REJECTED"
    http_status = 502

    def __init__(self, status_code: int, body: str = ""):
        message = f"translation service rejected the batch request with status {status_code}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PollingTimeout(TranslationWorkflowError):
    error_code = "TRANSLATION_TIMEOUT"
    http_status = 504

    def __init__(self, blob_name: str, attempts: int):
        super().__init__(
            f"translated document {blob_name} was not ready after {attempts} attempt(s)"
        )
        self.blob_name = blob_name
        self.attempts = attempts


class PollingCancelled(TranslationWorkflowError):
    error_code = "TRANSLATION_CANCELLED"
    http_status = 499

    def __init__(self, blob_name: str, attempts: int):
        super().__init__(f"polling for {blob_name} cancelled after {attempts} attempt(s)")
        self.blob_name = blob_name
        self.attempts = attempts


class DownloadError(TranslationWorkflowError):
    error_code = "DOWNLOAD_FAILED"
    http_status = 502


class CleanupError(TranslationWorkflowError):
    error_code = "CLEANUP_FAILED"
    http_status = 500

    def __init__(self, failures: List[Tuple[str, Exception]]):
        details = ", ".join(
            f"{blob_name} ({exc.__class__.__name__}: {exc})" for blob_name, exc in failures
        )
        super().__init__(f"failed to delete staged artifact(s): {details}")
        self.failures = list(failures)

    @property
    def blob_names(self) -> List[str]:
        return [blob_name for blob_name, _ in self.failures]
