# -*- coding: utf-8 -*-

import logging
import os

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from config import WorkflowConfig
from services.errors import ObjectNotFound, StorageError

logger = logging.getLogger("translator.storage")


class BlobStore:
    """Staging container for documents handed to the translation service."""

    def __init__(self, config: WorkflowConfig, service_client: BlobServiceClient | None = None):
        self._config = config
        self._client = service_client

    # =========================================================
    # LAZY CLIENT
    # =========================================================
    def _get_client(self) -> BlobServiceClient:
        if self._client is not None:
            return self._client

        self._client = BlobServiceClient(
            account_url=self._config.blob_account_url,
            credential={
                "account_name": self._config.blob_account_name,
                "account_key": self._config.blob_account_key,
            },
        )
        return self._client

    def _container(self):
        return self._get_client().get_container_client(self._config.blob_container_name)

    @property
    def container_url(self) -> str:
        return self._config.container_url

    def blob_url(self, blob_name: str) -> str:
        return f"{self.container_url}/{blob_name}"

    # =========================================================
    # UPLOAD FILE
    # =========================================================
    def upload_file(self, local_path: str, blob_name: str) -> str:
        try:
            with open(local_path, "rb") as fh:
                self._container().upload_blob(name=blob_name, data=fh, overwrite=True)
        except (OSError, AzureError, ValueError) as exc:
            raise StorageError(f"upload of {local_path} to {blob_name} failed: {exc}") from exc

        logger.debug("blob_uploaded blob=%s", blob_name)
        return self.blob_url(blob_name)

    # =========================================================
    # DOWNLOAD TO FILE (NO PARTIAL OUTPUT)
    # =========================================================
    def download_to_file(self, blob_name: str, local_path: str) -> str:
        blob_client = self._container().get_blob_client(blob_name)
        try:
            downloader = blob_client.download_blob()
        except ResourceNotFoundError as exc:
            raise ObjectNotFound(f"blob {blob_name} not found") from exc
        except (AzureError, ValueError) as exc:
            raise StorageError(f"download of {blob_name} failed: {exc}") from exc

        directory = os.path.dirname(os.path.abspath(local_path))
        tmp_path = f"{local_path}.part"
        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "wb") as fh:
                downloader.readinto(fh)
            os.replace(tmp_path, local_path)
        except (OSError, AzureError) as exc:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"download of {blob_name} to {local_path} failed: {exc}") from exc

        logger.debug("blob_downloaded blob=%s path=%s", blob_name, local_path)
        return local_path

    # =========================================================
    # DELETE
    # =========================================================
    def delete(self, blob_name: str) -> None:
        try:
            self._container().delete_blob(blob_name, delete_snapshots="include")
        except ResourceNotFoundError as exc:
            raise ObjectNotFound(f"blob {blob_name} not found") from exc
        except (AzureError, ValueError) as exc:
            raise StorageError(f"delete of {blob_name} failed: {exc}") from exc

        logger.debug("blob_deleted blob=%s", blob_name)
