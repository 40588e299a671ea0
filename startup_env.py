import logging
import os
from typing import List

from config import (
    ENV_BLOB_ACCOUNT,
    ENV_BLOB_ACCOUNT_KEY,
    ENV_BLOB_CONTAINER,
    ENV_TRANSLATOR_ENDPOINT,
    ENV_TRANSLATOR_KEY,
    ENV_TRANSLATOR_REGION,
    WorkflowConfig,
)
from services.errors import ConfigurationError

logger = logging.getLogger("translator.startup")

SERVICE_ENV_KEYS = (
    ENV_TRANSLATOR_ENDPOINT,
    ENV_TRANSLATOR_KEY,
    ENV_TRANSLATOR_REGION,
    ENV_BLOB_ACCOUNT,
    ENV_BLOB_ACCOUNT_KEY,
    ENV_BLOB_CONTAINER,
)


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _validate_https_endpoint(value: str, key: str, warnings: List[str]) -> None:
    if _is_blank(value):
        return
    if not value.startswith("https://"):
        warnings.append(f"{key} should start with https://")


def missing_config_fields(config: WorkflowConfig) -> List[str]:
    required = (
        ("endpoint", config.translator_endpoint),
        ("key", config.translator_key),
        ("region", config.translator_region),
    )
    return [name for name, value in required if _is_blank(value)]


def missing_storage_fields(config: WorkflowConfig) -> List[str]:
    required = (
        ("blob-account", config.blob_account_name),
        ("blob-account-key", config.blob_account_key),
        ("blob-container", config.blob_container_name),
    )
    return [name for name, value in required if _is_blank(value)]


def validate_workflow_inputs(
    config: WorkflowConfig,
    *,
    input_path: str | None,
    output_path: str | None,
    target_language: str | None,
) -> None:
    """Fail with every missing argument at once, the way the CLI reports them."""
    missing = missing_config_fields(config)
    if _is_blank(input_path):
        missing.append("in")
    if _is_blank(output_path):
        missing.append("out")
    if _is_blank(target_language):
        missing.append("to")
    missing.extend(missing_storage_fields(config))

    if missing:
        raise ConfigurationError(f"missing required arguments: {', '.join(missing)}")

    if not os.path.isfile(input_path):
        raise ConfigurationError(f"input file not found: {input_path}")

    warnings: List[str] = []
    _validate_https_endpoint(config.translator_endpoint, "endpoint", warnings)
    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)


def validate_startup_env() -> None:
    errors: List[str] = []
    warnings: List[str] = []

    for key in SERVICE_ENV_KEYS:
        if _is_blank(os.getenv(key)):
            errors.append(f"{key} is required")

    _validate_https_endpoint(os.getenv(ENV_TRANSLATOR_ENDPOINT) or "", ENV_TRANSLATOR_ENDPOINT, warnings)

    if errors:
        for err in errors:
            logger.error("startup_env_invalid %s", err)
        raise ConfigurationError("Startup env validation failed: " + "; ".join(errors))

    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)

    logger.info("startup_env_validated keys=%s", list(SERVICE_ENV_KEYS))
