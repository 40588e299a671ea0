import json
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from services.errors import ConfigurationError

load_dotenv()

ENV_TRANSLATOR_ENDPOINT = "TRANSLATOR_ENDPOINT"
ENV_TRANSLATOR_KEY = "TRANSLATOR_KEY"
ENV_TRANSLATOR_REGION = "TRANSLATOR_REGION"
ENV_BLOB_ACCOUNT = "BLOB_STORAGE_ACCOUNT_NAME"
ENV_BLOB_ACCOUNT_KEY = "BLOB_STORAGE_ACCOUNT_KEY"
ENV_BLOB_CONTAINER = "BLOB_STORAGE_CONTAINER_NAME"
ENV_TIMEOUT = "TRANSLATION_TIMEOUT_SEC"
ENV_VERBOSE = "TRANSLATION_VERBOSE"

API_VERSION = "2024-05-01"
DEFAULT_TIMEOUT_SEC = 30
DEFAULT_SAS_EXPIRY_HOURS = 48
BLOB_ENDPOINT_SUFFIX = "blob.core.windows.net"


class WorkflowConfig(BaseModel):
    """Immutable settings for one translation workflow.

    Aliases match the keys of the JSON config file accepted by the CLI.
    ``timeout`` is the poll retry budget: the number of retries after the first
    fetch of the translated document.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    blob_account_name: str = Field(default="", alias="BlobAccountName")
    blob_account_key: str = Field(default="", alias="BlobAccountKey", repr=False)
    blob_container_name: str = Field(default="", alias="BlobContainerName")
    translator_endpoint: str = Field(default="", alias="TranslatorEndpoint")
    translator_key: str = Field(default="", alias="TranslatorKey", repr=False)
    translator_region: str = Field(default="", alias="TranslatorRegion")
    timeout: int = Field(default=DEFAULT_TIMEOUT_SEC, ge=0, alias="Timeout")
    verbose: bool = Field(default=False, alias="Verbose")

    api_version: str = Field(default=API_VERSION, alias="APIVersion")
    sas_expiry_hours: float = Field(default=DEFAULT_SAS_EXPIRY_HOURS, gt=0, alias="SASExpiryHours")
    poll_interval_sec: float = Field(default=1.0, ge=0, alias="PollInterval")
    request_timeout_sec: float = Field(default=30.0, gt=0, alias="RequestTimeout")
    strict_cleanup: bool = Field(default=False, alias="StrictCleanup")
    blob_endpoint_suffix: str = Field(default=BLOB_ENDPOINT_SUFFIX, alias="BlobEndpointSuffix")

    @property
    def blob_account_url(self) -> str:
        return f"https://{self.blob_account_name}.{self.blob_endpoint_suffix}"

    @property
    def container_url(self) -> str:
        return f"{self.blob_account_url}/{self.blob_container_name}"

    @property
    def batches_url(self) -> str:
        base = self.translator_endpoint.rstrip("/")
        return f"{base}/translator/document/batches?api-version={self.api_version}"


def _flag(raw: str | None, default: bool = False) -> bool:
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def config_from_env(**overrides) -> WorkflowConfig:
    values = {
        "translator_endpoint": os.getenv(ENV_TRANSLATOR_ENDPOINT, ""),
        "translator_key": os.getenv(ENV_TRANSLATOR_KEY, ""),
        "translator_region": os.getenv(ENV_TRANSLATOR_REGION, ""),
        "blob_account_name": os.getenv(ENV_BLOB_ACCOUNT, ""),
        "blob_account_key": os.getenv(ENV_BLOB_ACCOUNT_KEY, ""),
        "blob_container_name": os.getenv(ENV_BLOB_CONTAINER, ""),
        "timeout": os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT_SEC)),
        "verbose": _flag(os.getenv(ENV_VERBOSE)),
    }
    values.update(overrides)
    try:
        return WorkflowConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc


def load_config_file(path: str) -> dict:
    """Read a JSON config file and return only the settings it actually sets."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a JSON object")

    try:
        parsed = WorkflowConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid config file {path}: {exc}") from exc

    return {name: getattr(parsed, name) for name in parsed.model_fields_set}


def merge_config_file(config: WorkflowConfig, path: str) -> WorkflowConfig:
    """Overlay the settings present in ``path`` onto ``config``; file values win."""
    file_values = load_config_file(path)
    try:
        return WorkflowConfig.model_validate({**config.model_dump(), **file_values})
    except ValidationError as exc:
        raise ConfigurationError(f"invalid config file {path}: {exc}") from exc
