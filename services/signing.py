# User value: lets the translation service read and write staged documents without our account key.
import base64
import binascii
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, FrozenSet, Iterable, Optional
from urllib.parse import quote

from azure.core.exceptions import AzureError
from azure.storage.blob import generate_blob_sas, generate_container_sas

from config import WorkflowConfig
from services.errors import CredentialError, SigningError

logger = logging.getLogger("translator.signing")

SAS_PROTOCOL = "https"
_PERMISSION_ORDER = "racwdxltmeop"
_SIGNATURE_RE = re.compile(r"(sig=)[^&\s\"']+", re.IGNORECASE)


class Permission(str, Enum):
    READ = "r"
    ADD = "a"
    WRITE = "w"
    LIST = "l"


CONTAINER_PERMISSIONS: FrozenSet[Permission] = frozenset({Permission.READ, Permission.WRITE})
BLOB_PERMISSIONS: FrozenSet[Permission] = frozenset(
    {Permission.ADD, Permission.READ, Permission.WRITE, Permission.LIST}
)


def permission_string(permissions: Iterable[Permission]) -> str:
    letters = {p.value for p in permissions}
    return "".join(c for c in _PERMISSION_ORDER if c in letters)


def redact_sas(url: str) -> str:
    return _SIGNATURE_RE.sub(r"\1REDACTED", url)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SasScope:
    blob_name: Optional[str] = None

    @classmethod
    def container(cls) -> "SasScope":
        return cls()

    @classmethod
    def blob(cls, blob_name: str) -> "SasScope":
        if not blob_name:
            raise ValueError("blob scope requires a blob name")
        return cls(blob_name=blob_name)

    @property
    def is_container(self) -> bool:
        return self.blob_name is None

    @property
    def required_permissions(self) -> FrozenSet[Permission]:
        return CONTAINER_PERMISSIONS if self.is_container else BLOB_PERMISSIONS


@dataclass(frozen=True)
class SignedAccessGrant:
    url: str
    query: str
    scope: SasScope
    permissions: str
    expires_at: datetime
    container_url: str

    # User value: builds per-document URLs that reuse this run's container grant.
    def url_for(self, blob_name: str) -> str:
        if not self.scope.is_container:
            raise ValueError("only a container grant can address other blobs")
        return f"{self.container_url}/{quote(blob_name)}?{self.query}"


class SasSigner:
    """Issues short-lived SAS grants on the staging container.

    Every call signs with a fresh timestamp; grants are never cached or shared
    between workflow runs.
    """

    def __init__(self, config: WorkflowConfig, clock: Callable[[], datetime] | None = None):
        self._config = config
        self._clock = clock or _utcnow

    def _account_key(self) -> str:
        key = (self._config.blob_account_key or "").strip()
        if not key:
            raise CredentialError("blob account key is empty")
        try:
            base64.b64decode(key, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CredentialError("blob account key is not valid base64") from exc
        return key

    def sign(self, scope: SasScope, permissions: Iterable[Permission]) -> SignedAccessGrant:
        requested = frozenset(permissions)
        if requested != scope.required_permissions:
            raise ValueError(
                f"{'container' if scope.is_container else 'blob'} scope requires "
                f"permissions {permission_string(scope.required_permissions)!r}, "
                f"got {permission_string(requested)!r}"
            )

        account_key = self._account_key()
        expires_at = self._clock() + timedelta(hours=self._config.sas_expiry_hours)
        permission = permission_string(requested)
        container_url = self._config.container_url

        try:
            if scope.is_container:
                query = generate_container_sas(
                    account_name=self._config.blob_account_name,
                    container_name=self._config.blob_container_name,
                    account_key=account_key,
                    permission=permission,
                    expiry=expires_at,
                    protocol=SAS_PROTOCOL,
                )
                url = f"{container_url}?{query}"
            else:
                query = generate_blob_sas(
                    account_name=self._config.blob_account_name,
                    container_name=self._config.blob_container_name,
                    blob_name=scope.blob_name,
                    account_key=account_key,
                    permission=permission,
                    expiry=expires_at,
                    protocol=SAS_PROTOCOL,
                )
                url = f"{container_url}/{quote(scope.blob_name)}?{query}"
        except (AzureError, TypeError, ValueError) as exc:
            raise SigningError(f"could not sign SAS for {scope.blob_name or 'container'}: {exc}") from exc

        if self._config.verbose:
            logger.debug("sas_issued scope=%s url=%s", scope.blob_name or "container", redact_sas(url))

        return SignedAccessGrant(
            url=url,
            query=query,
            scope=scope,
            permissions=permission,
            expires_at=expires_at,
            container_url=container_url,
        )

    def container_grant(self) -> SignedAccessGrant:
        return self.sign(SasScope.container(), CONTAINER_PERMISSIONS)

    def blob_grant(self, blob_name: str) -> SignedAccessGrant:
        return self.sign(SasScope.blob(blob_name), BLOB_PERMISSIONS)
