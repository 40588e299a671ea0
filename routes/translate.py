# User value: This file lets users translate a document with a single upload request.
# routes/translate.py
import logging
import os
import shutil
import tempfile

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from config import config_from_env
from schemas.responses import ErrorResponse
from services.errors import ConfigurationError
from services.translation_workflow import TranslationWorkflow
from startup_env import missing_config_fields, missing_storage_fields

router = APIRouter(tags=["translate"])
logger = logging.getLogger("translator.api")

JOB_ID_HEADER = "X-Translation-Job-ID"

_workflow: TranslationWorkflow | None = None


# User value: builds the shared workflow once so every request reuses the storage and HTTP clients.
def get_workflow() -> TranslationWorkflow:
    global _workflow
    if _workflow is not None:
        return _workflow

    config = config_from_env()
    missing = missing_config_fields(config) + missing_storage_fields(config)
    if missing:
        raise ConfigurationError(f"missing required settings: {', '.join(missing)}")

    _workflow = TranslationWorkflow(config)
    return _workflow


def _bad_request(error_code: str, message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"error_code": error_code, "error_message": message})


@router.post(
    "/translate",
    response_class=FileResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
# User value: translates the uploaded document and streams the result back in the same request.
def translate(
    file: UploadFile = File(...),
    target_language: str = Form(...),
    source_language: str = Form(""),
    workflow: TranslationWorkflow = Depends(get_workflow),
):
    filename = os.path.basename(str(file.filename or "").strip())
    if not filename:
        raise _bad_request("INVALID_FILENAME", "Filename is required")
    target_language = target_language.strip()
    if not target_language:
        raise _bad_request("INVALID_TARGET_LANGUAGE", "target_language is required")

    work_dir = tempfile.mkdtemp(prefix="doc_translate_")
    input_path = os.path.join(work_dir, filename)
    output_path = os.path.join(work_dir, "translated", filename)
    try:
        with open(input_path, "wb") as fh:
            shutil.copyfileobj(file.file, fh)
        result = workflow.translate_document(
            input_path,
            output_path,
            source_language.strip(),
            target_language,
        )
    except Exception:
        shutil.rmtree(work_dir, ignore_errors=True)
        raise

    logger.info("translate_request_completed job_id=%s filename=%s", result.job_id, filename)
    return FileResponse(
        result.output_path,
        filename=filename,
        headers={JOB_ID_HEADER: result.job_id},
        background=BackgroundTask(shutil.rmtree, work_dir, ignore_errors=True),
    )
