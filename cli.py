"""
Command-line front end: translate one document through Azure Translator.

    doc-translate --in report.pdf --out report.fr.pdf --to fr
"""
import argparse
import logging
import os
import sys

from config import (
    DEFAULT_TIMEOUT_SEC,
    ENV_BLOB_ACCOUNT,
    ENV_BLOB_ACCOUNT_KEY,
    ENV_BLOB_CONTAINER,
    ENV_TIMEOUT,
    ENV_TRANSLATOR_ENDPOINT,
    ENV_TRANSLATOR_KEY,
    ENV_TRANSLATOR_REGION,
    ENV_VERBOSE,
    config_from_env,
    merge_config_file,
)
from services.errors import TranslationWorkflowError
from services.translation_workflow import translate_document
from startup_env import validate_workflow_inputs
from utils.json_logging import configure_json_logging

logger = logging.getLogger("translator.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doc-translate",
        description="Translate a document with Azure Translator, staging it in Azure Blob Storage.",
    )
    parser.add_argument("--endpoint", default=os.getenv(ENV_TRANSLATOR_ENDPOINT, ""), help="Azure Translator API endpoint")
    parser.add_argument("--key", default=os.getenv(ENV_TRANSLATOR_KEY, ""), help="Azure Translator API key")
    parser.add_argument("--region", default=os.getenv(ENV_TRANSLATOR_REGION, ""), help="Azure region")
    parser.add_argument("--in", dest="input_path", default="", help="Input file path")
    parser.add_argument("--from", dest="source_language", default="", help="Source language (empty: auto-detect)")
    parser.add_argument("--to", dest="target_language", default="", help="Target language")
    parser.add_argument("--out", dest="output_path", default="", help="Destination file path")
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help=f"Seconds to keep polling for the translated document (default: ${ENV_TIMEOUT} or {DEFAULT_TIMEOUT_SEC})",
    )
    parser.add_argument(
        "--blob-account",
        default=os.getenv(ENV_BLOB_ACCOUNT, ""),
        help="Azure Blob Storage account name",
    )
    parser.add_argument(
        "--blob-account-key",
        default=os.getenv(ENV_BLOB_ACCOUNT_KEY, ""),
        help="Azure Blob Storage account key",
    )
    parser.add_argument(
        "--blob-container",
        default=os.getenv(ENV_BLOB_CONTAINER, ""),
        help="Azure Blob Storage container name",
    )
    parser.add_argument("--config", default="", help="JSON configuration file; its settings override flags")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help=f"enable verbose logging (default: ${ENV_VERBOSE})",
    )
    return parser


def run(argv=None):
    args = build_parser().parse_args(argv)

    overrides = dict(
        translator_endpoint=args.endpoint,
        translator_key=args.key,
        translator_region=args.region,
        blob_account_name=args.blob_account,
        blob_account_key=args.blob_account_key,
        blob_container_name=args.blob_container,
        timeout=args.timeout,
        verbose=args.verbose,
    )
    # Unset flags fall back to the environment.
    config = config_from_env(**{k: v for k, v in overrides.items() if v is not None})
    if args.config:
        config = merge_config_file(config, args.config)

    configure_json_logging(
        service="doc-translate",
        level=logging.DEBUG if config.verbose else logging.INFO,
    )

    validate_workflow_inputs(
        config,
        input_path=args.input_path,
        output_path=args.output_path,
        target_language=args.target_language,
    )

    logger.info("Starting document translation")
    result = translate_document(
        args.input_path,
        args.output_path,
        args.source_language,
        args.target_language,
        config,
    )
    logger.info("translation_completed job_id=%s output=%s", result.job_id, result.output_path)
    return result


def main(argv=None) -> int:
    try:
        run(argv)
    except TranslationWorkflowError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Error: interrupted", file=sys.stderr)
        return 130
    except Exception as exc:
        logger.debug("unexpected_failure", exc_info=True)
        print(f"Error: {exc.__class__.__name__}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
