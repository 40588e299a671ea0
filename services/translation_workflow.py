# User value: This file runs one document translation end to end and always removes staged uploads.
import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from config import WorkflowConfig
from schemas.job_contract import (
    CONTRACT_VERSION,
    JOB_STATE_CLEANING_UP,
    JOB_STATE_GRANT_ISSUED,
    JOB_STATE_POLLING,
    JOB_STATE_SOURCE_UPLOADED,
    JOB_STATE_SUBMITTED,
)
from services.blob_storage import BlobStore
from services.cleanup import cleanup_artifacts
from services.errors import CleanupError, PollingCancelled, StorageError, TranslationWorkflowError, UploadError
from services.identity import ArtifactNames, derive_artifact_names, new_job_identity
from services.poller import FixedIntervalRetry, PollOutcome, poll_until_ready
from services.signing import SasSigner, redact_sas
from services.translator_client import SubmissionResult, TranslatorClient
from utils.request_id import request_context
from utils.stage_logging import log_stage
from utils.status_machine import WorkflowRun

logger = logging.getLogger("translator.workflow")


@dataclass(frozen=True)
class WorkflowResult:
    job_id: str
    output_path: str
    source_artifact: str
    destination_artifact: str
    attempts: int
    operation_location: Optional[str] = None
    states: Tuple[str, ...] = ()


class TranslationWorkflow:
    """Upload, sign, submit, poll and clean up for a single document.

    The workflow keeps no per-job state on the instance, so one instance (and
    its storage client and HTTP session) can serve concurrent jobs. Each call to
    :meth:`translate_document` mints a new job id and its own SAS grant.
    """

    def __init__(
        self,
        config: WorkflowConfig,
        *,
        store=None,
        signer=None,
        client=None,
        retry_policy=None,
    ):
        self.config = config
        self.store = store or BlobStore(config)
        self.signer = signer or SasSigner(config)
        self.client = client or TranslatorClient(config)
        self.retry_policy = retry_policy or FixedIntervalRetry(
            max_retries=config.timeout,
            interval_sec=config.poll_interval_sec,
        )

    def translate_document(
        self,
        input_path: str,
        output_path: str,
        source_language: str | None,
        target_language: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> WorkflowResult:
        job_id = new_job_identity()
        with request_context(job_id):
            return self._run(job_id, input_path, output_path, source_language, target_language, cancel_event)

    def _run(
        self,
        job_id: str,
        input_path: str,
        output_path: str,
        source_language: str | None,
        target_language: str,
        cancel_event: Optional[threading.Event],
    ) -> WorkflowResult:
        names = derive_artifact_names(job_id, input_path)
        run = WorkflowRun(job_id)
        log_stage(
            job_id=job_id,
            stage="TRANSLATION_REQUEST",
            event="STARTED",
            filename=os.path.basename(input_path),
            source_language=source_language or "auto",
            target_language=target_language,
            contract_version=CONTRACT_VERSION,
        )

        self._upload(run, input_path, names)

        try:
            submission, outcome = self._translate(
                run, names, output_path, source_language, target_language, cancel_event
            )
        except BaseException as exc:
            # Ctrl-C while polling must still remove the staged blobs.
            self._cleanup_after_failure(run, names, exc)
            raise

        run.advance(JOB_STATE_CLEANING_UP)
        cleanup_error = self._cleanup(run, names)
        run.finish(succeeded=cleanup_error is None)
        if cleanup_error is not None:
            log_stage(job_id=job_id, stage="TRANSLATION_REQUEST", event="FAILED", error=str(cleanup_error))
            raise cleanup_error

        log_stage(
            job_id=job_id,
            stage="TRANSLATION_REQUEST",
            event="COMPLETED",
            output_path=output_path,
            attempts=outcome.attempts,
        )
        return WorkflowResult(
            job_id=job_id,
            output_path=output_path,
            source_artifact=names.source,
            destination_artifact=names.destination,
            attempts=outcome.attempts,
            operation_location=submission.operation_location,
            states=tuple(run.history),
        )

    def _upload(self, run: WorkflowRun, input_path: str, names: ArtifactNames) -> None:
        log_stage(job_id=run.job_id, stage="SOURCE_UPLOAD", event="STARTED", blob=names.source)
        try:
            self.store.upload_file(input_path, names.source)
        except StorageError as exc:
            run.finish(succeeded=False)
            log_stage(
                job_id=run.job_id,
                stage="SOURCE_UPLOAD",
                event="FAILED",
                blob=names.source,
                error=f"{exc.__class__.__name__}: {exc}",
            )
            raise UploadError(f"error uploading file to blob storage: {exc}") from exc

        run.advance(JOB_STATE_SOURCE_UPLOADED)
        log_stage(job_id=run.job_id, stage="SOURCE_UPLOAD", event="COMPLETED", blob=names.source)

    def _translate(
        self,
        run: WorkflowRun,
        names: ArtifactNames,
        output_path: str,
        source_language: str | None,
        target_language: str,
        cancel_event: Optional[threading.Event],
    ) -> Tuple[SubmissionResult, PollOutcome]:
        grant = self.signer.container_grant()
        run.advance(JOB_STATE_GRANT_ISSUED)
        source_url = grant.url_for(names.source)
        target_url = grant.url_for(names.destination)
        log_stage(
            job_id=run.job_id,
            stage="SAS_GRANT",
            event="COMPLETED",
            permissions=grant.permissions,
            expires_at=grant.expires_at.isoformat(),
        )
        if self.config.verbose:
            logger.debug("sas_source_url %s", redact_sas(source_url))
            logger.debug("sas_target_url %s", redact_sas(target_url))

        log_stage(job_id=run.job_id, stage="BATCH_SUBMIT", event="STARTED", endpoint=self.config.translator_endpoint)
        submission = self.client.submit(source_url, target_url, source_language, target_language)
        run.advance(JOB_STATE_SUBMITTED)
        log_stage(
            job_id=run.job_id,
            stage="BATCH_SUBMIT",
            event="COMPLETED",
            status_code=submission.status_code,
            operation_location=submission.operation_location,
        )

        run.advance(JOB_STATE_POLLING)
        log_stage(
            job_id=run.job_id,
            stage="RESULT_POLL",
            event="STARTED",
            blob=names.destination,
            max_retries=self.retry_policy.max_retries,
        )
        outcome = poll_until_ready(self.store, names.destination, output_path, self.retry_policy, cancel_event)
        log_stage(
            job_id=run.job_id,
            stage="RESULT_POLL",
            event="COMPLETED",
            attempts=outcome.attempts,
            sleeps=outcome.sleeps,
        )
        return submission, outcome

    def _cleanup(self, run: WorkflowRun, names: ArtifactNames) -> Optional[CleanupError]:
        log_stage(job_id=run.job_id, stage="STAGED_CLEANUP", event="STARTED")
        try:
            cleanup_artifacts(self.store, names, strict=self.config.strict_cleanup)
        except CleanupError as exc:
            log_stage(job_id=run.job_id, stage="STAGED_CLEANUP", event="FAILED", error=str(exc))
            return exc
        log_stage(job_id=run.job_id, stage="STAGED_CLEANUP", event="COMPLETED")
        return None

    def _cleanup_after_failure(self, run: WorkflowRun, names: ArtifactNames, exc: BaseException) -> None:
        failed_state = run.state
        run.advance(JOB_STATE_CLEANING_UP)
        cleanup_error = self._cleanup(run, names)
        run.finish(succeeded=False)
        cancelled = isinstance(exc, (PollingCancelled, KeyboardInterrupt))
        reason = f"{exc.__class__.__name__}: {exc}"
        log_stage(
            job_id=run.job_id,
            stage="TRANSLATION_REQUEST",
            event="CANCELLED" if cancelled else "FAILED",
            failed_after=failed_state,
            error=None if cancelled else reason,
            reason=reason if cancelled else None,
            cleanup_error=str(cleanup_error) if cleanup_error else None,
        )

        if cleanup_error is None or not isinstance(exc, Exception):
            return
        if isinstance(exc, TranslationWorkflowError):
            exc.attach_cleanup_error(cleanup_error)
            return
        raise cleanup_error from exc


def translate_document(
    input_path: str,
    output_path: str,
    source_language: str | None,
    target_language: str,
    config: WorkflowConfig,
    cancel_event: Optional[threading.Event] = None,
) -> WorkflowResult:
    return TranslationWorkflow(config).translate_document(
        input_path, output_path, source_language, target_language, cancel_event
    )
