# User value: This test keeps SAS grants short-lived, HTTPS-only and scoped to what translation needs.
import base64
import unittest
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

from config import WorkflowConfig
from services.errors import CredentialError
from services.signing import (
    BLOB_PERMISSIONS,
    CONTAINER_PERMISSIONS,
    Permission,
    SasScope,
    SasSigner,
    permission_string,
    redact_sas,
)

ACCOUNT_KEY = base64.b64encode(b"unit-test-account-key").decode("ascii")
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_config(**overrides) -> WorkflowConfig:
    values = {
        "blob_account_name": "acct",
        "blob_account_key": ACCOUNT_KEY,
        "blob_container_name": "staging",
    }
    values.update(overrides)
    return WorkflowConfig(**values)


class SigningUnitTests(unittest.TestCase):
    def test_container_grant_is_https_read_write_for_48_hours(self):
        grant = SasSigner(make_config(), clock=lambda: NOW).container_grant()

        parts = urlsplit(grant.url)
        self.assertEqual(parts.scheme, "https")
        self.assertEqual(parts.netloc, "acct.blob.core.windows.net")
        self.assertEqual(parts.path, "/staging")
        self.assertEqual(parts.query, grant.query)

        query = parse_qs(grant.query)
        self.assertEqual(query["sp"], ["rw"])
        self.assertEqual(query["spr"], ["https"])
        self.assertEqual(query["sr"], ["c"])
        self.assertEqual(query["se"], ["2024-05-03T12:00:00Z"])
        self.assertIn("sig", query)
        self.assertEqual(grant.permissions, "rw")
        self.assertEqual(grant.expires_at, NOW + timedelta(hours=48))

    def test_blob_grant_is_scoped_to_one_blob(self):
        grant = SasSigner(make_config(), clock=lambda: NOW).blob_grant("abc-report.pdf")

        parts = urlsplit(grant.url)
        self.assertEqual(parts.scheme, "https")
        self.assertEqual(parts.path, "/staging/abc-report.pdf")
        query = parse_qs(grant.query)
        self.assertEqual(query["sp"], ["rawl"])
        self.assertEqual(query["sr"], ["b"])
        self.assertEqual(query["spr"], ["https"])

    def test_expiry_is_configurable(self):
        grant = SasSigner(make_config(sas_expiry_hours=2), clock=lambda: NOW).container_grant()
        self.assertEqual(grant.expires_at, NOW + timedelta(hours=2))

    # User value: every run gets its own grant, signed at the time it is issued.
    def test_each_call_takes_a_fresh_timestamp(self):
        ticks = iter([NOW, NOW + timedelta(minutes=5)])
        signer = SasSigner(make_config(), clock=lambda: next(ticks))
        first = signer.container_grant()
        second = signer.container_grant()
        self.assertEqual(second.expires_at - first.expires_at, timedelta(minutes=5))
        self.assertNotEqual(first.query, second.query)

    def test_malformed_account_key_is_a_credential_error(self):
        signer = SasSigner(make_config(blob_account_key="not base64!!"), clock=lambda: NOW)
        with self.assertRaises(CredentialError):
            signer.container_grant()

    def test_empty_account_key_is_a_credential_error(self):
        signer = SasSigner(make_config(blob_account_key=""), clock=lambda: NOW)
        with self.assertRaises(CredentialError):
            signer.blob_grant("abc-report.pdf")

    def test_scope_rejects_other_permission_sets(self):
        signer = SasSigner(make_config(), clock=lambda: NOW)
        with self.assertRaises(ValueError):
            signer.sign(SasScope.container(), BLOB_PERMISSIONS)
        with self.assertRaises(ValueError):
            signer.sign(SasScope.blob("x.pdf"), {Permission.READ})

    def test_container_grant_addresses_blobs_in_the_container(self):
        grant = SasSigner(make_config(), clock=lambda: NOW).container_grant()
        url = grant.url_for("abc-translated-my report.pdf")
        self.assertEqual(
            url,
            f"https://acct.blob.core.windows.net/staging/abc-translated-my%20report.pdf?{grant.query}",
        )

    def test_blob_grant_cannot_address_other_blobs(self):
        grant = SasSigner(make_config(), clock=lambda: NOW).blob_grant("a.pdf")
        with self.assertRaises(ValueError):
            grant.url_for("b.pdf")

    def test_permission_string_is_canonical(self):
        self.assertEqual(permission_string(CONTAINER_PERMISSIONS), "rw")
        self.assertEqual(permission_string(BLOB_PERMISSIONS), "rawl")

    def test_redact_sas_hides_signature(self):
        url = "https://acct.blob.core.windows.net/staging?sp=rw&sig=abc%2Bdef&spr=https"
        self.assertEqual(redact_sas(url), "https://acct.blob.core.windows.net/staging?sp=rw&sig=REDACTED&spr=https")

    def test_redact_sas_stops_at_whitespace_inside_messages(self):
        message = "rejected https://acct.blob.core.windows.net/staging?SIG=abc%2Bdef then retried"
        self.assertEqual(
            redact_sas(message),
            "rejected https://acct.blob.core.windows.net/staging?SIG=REDACTED then retried",
        )


if __name__ == "__main__":
    unittest.main()
