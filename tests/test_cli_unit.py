# User value: This test keeps the command line honest: clear errors and a non-zero exit on failure.
import io
import json
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr
from unittest.mock import patch

import cli
from services.errors import PollingTimeout
from services.translation_workflow import WorkflowResult

SERVICE_ENV = {
    "TRANSLATOR_ENDPOINT": "https://translator.example.com",
    "TRANSLATOR_KEY": "tr-key",
    "TRANSLATOR_REGION": "westeurope",
    "BLOB_STORAGE_ACCOUNT_NAME": "acct",
    "BLOB_STORAGE_ACCOUNT_KEY": "a2V5",
    "BLOB_STORAGE_CONTAINER_NAME": "staging",
}


@patch("cli.configure_json_logging")
class CliUnitTests(unittest.TestCase):
    def setUp(self):
        self.work_dir = tempfile.mkdtemp()
        self.input_path = os.path.join(self.work_dir, "report.pdf")
        with open(self.input_path, "wb") as fh:
            fh.write(b"%PDF")
        self.output_path = os.path.join(self.work_dir, "report.fr.pdf")

    def tearDown(self):
        shutil.rmtree(self.work_dir, ignore_errors=True)

    def result(self):
        return WorkflowResult(
            job_id="abc123",
            output_path=self.output_path,
            source_artifact="abc123-report.pdf",
            destination_artifact="abc123-translated-report.pdf",
            attempts=1,
        )

    def test_missing_arguments_exit_non_zero(self, _logging):
        stderr = io.StringIO()
        with patch.dict(os.environ, {}, clear=True), redirect_stderr(stderr):
            code = cli.main([])
        self.assertEqual(code, 1)
        self.assertIn("Error: missing required arguments: endpoint, key, region, in, out, to", stderr.getvalue())

    def test_runs_translation_with_env_defaults(self, _logging):
        with patch.dict(os.environ, SERVICE_ENV, clear=True), patch(
            "cli.translate_document", return_value=self.result()
        ) as translate:
            code = cli.main(
                ["--in", self.input_path, "--out", self.output_path, "--from", "en", "--to", "fr", "--timeout", "5"]
            )

        self.assertEqual(code, 0)
        args = translate.call_args.args
        self.assertEqual(args[:4], (self.input_path, self.output_path, "en", "fr"))
        config = args[4]
        self.assertEqual(config.translator_region, "westeurope")
        self.assertEqual(config.blob_container_name, "staging")
        self.assertEqual(config.timeout, 5)
        self.assertFalse(config.verbose)

    def test_flags_override_env_and_config_file_overrides_flags(self, _logging):
        config_path = os.path.join(self.work_dir, "config.json")
        with open(config_path, "w", encoding="utf-8") as fh:
            json.dump({"TranslatorRegion": "northeurope", "Verbose": True}, fh)

        with patch.dict(os.environ, SERVICE_ENV, clear=True), patch(
            "cli.translate_document", return_value=self.result()
        ) as translate:
            code = cli.main(
                [
                    "--in", self.input_path,
                    "--out", self.output_path,
                    "--to", "fr",
                    "--key", "flag-key",
                    "--region", "flag-region",
                    "--config", config_path,
                ]
            )

        self.assertEqual(code, 0)
        config = translate.call_args.args[4]
        self.assertEqual(config.translator_key, "flag-key")
        self.assertEqual(config.translator_region, "northeurope")
        self.assertTrue(config.verbose)

    # User value: timeout and verbosity set in the environment apply when no flag is given.
    def test_timeout_and_verbose_fall_back_to_env(self, _logging):
        env = dict(SERVICE_ENV, TRANSLATION_TIMEOUT_SEC="5", TRANSLATION_VERBOSE="true")
        with patch.dict(os.environ, env, clear=True), patch(
            "cli.translate_document", return_value=self.result()
        ) as translate:
            code = cli.main(["--in", self.input_path, "--out", self.output_path, "--to", "fr"])

        self.assertEqual(code, 0)
        config = translate.call_args.args[4]
        self.assertEqual(config.timeout, 5)
        self.assertTrue(config.verbose)

    def test_timeout_flag_overrides_env(self, _logging):
        env = dict(SERVICE_ENV, TRANSLATION_TIMEOUT_SEC="5")
        with patch.dict(os.environ, env, clear=True), patch(
            "cli.translate_document", return_value=self.result()
        ) as translate:
            cli.main(["--in", self.input_path, "--out", self.output_path, "--to", "fr", "--timeout", "9", "-v"])

        config = translate.call_args.args[4]
        self.assertEqual(config.timeout, 9)
        self.assertTrue(config.verbose)

    def test_unexpected_error_is_reported_without_traceback(self, _logging):
        stderr = io.StringIO()
        with patch.dict(os.environ, SERVICE_ENV, clear=True), patch(
            "cli.translate_document", side_effect=RuntimeError("sdk exploded")
        ), redirect_stderr(stderr):
            code = cli.main(["--in", self.input_path, "--out", self.output_path, "--to", "fr"])

        self.assertEqual(code, 1)
        self.assertEqual(stderr.getvalue().strip(), "Error: RuntimeError: sdk exploded")

    def test_workflow_error_is_reported(self, _logging):
        stderr = io.StringIO()
        with patch.dict(os.environ, SERVICE_ENV, clear=True), patch(
            "cli.translate_document", side_effect=PollingTimeout("abc123-translated-report.pdf", 31)
        ), redirect_stderr(stderr):
            code = cli.main(["--in", self.input_path, "--out", self.output_path, "--to", "fr"])

        self.assertEqual(code, 1)
        self.assertIn("Error: translated document abc123-translated-report.pdf was not ready", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
