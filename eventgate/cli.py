"""
Command line tools for schema authors and producers.

    eventgate check-schema event.jddf.json
    eventgate validate --schema event.jddf.json order.json heartbeat.json

Results are written to stdout as JSON lines. The exit status is 1 when the
schema or any document is invalid.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, TextIO

import structlog

from eventgate.schemas.registry import SchemaRegistry
from eventgate.schemas.validator import Validator
from eventgate.utils.errors import SchemaCompilationError
from eventgate.utils.logging import setup_logging


logger = structlog.get_logger(__name__)

CLI_SCHEMA_NAME = "cli"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="eventgate", description="Schema and event validation tools")
    parser.add_argument("--log-level", default="warning", help="Logging level")
    subcommands = parser.add_subparsers(dest="command", required=True)

    check = subcommands.add_parser("check-schema", help="Compile a schema and report problems")
    check.add_argument("schema", help="Path to a JSON schema description")

    validate = subcommands.add_parser("validate", help="Validate JSON documents against a schema")
    validate.add_argument("--schema", required=True, help="Path to a JSON schema description")
    validate.add_argument("--max-errors", type=int, default=0, help="Errors to report per document (0 = all)")
    validate.add_argument("documents", nargs="+", help="Paths to JSON documents")

    return parser


def _load_registry(schema_path: str, max_errors: int = 0) -> SchemaRegistry:
    registry = SchemaRegistry(validator=Validator(max_errors=max_errors))
    registry.load_file(CLI_SCHEMA_NAME, schema_path)
    return registry


def _emit(out: TextIO, payload: dict) -> None:
    out.write(json.dumps(payload) + "\n")


def _schema_failure(out: TextIO, schema_path: str, error: Any) -> int:
    _emit(out, {"schema": schema_path, "valid": False, "error": error})
    return 1


def check_schema(schema_path: str, out: TextIO) -> int:
    try:
        registry = _load_registry(schema_path)
    except SchemaCompilationError as exc:
        return _schema_failure(out, schema_path, exc.to_dict())
    except OSError as exc:
        return _schema_failure(out, schema_path, f"Cannot read schema: {exc.strerror}")

    schema = registry.get_schema(CLI_SCHEMA_NAME)
    _emit(out, {"schema": schema_path, "valid": True, "form": schema.form.value})
    return 0


def validate_documents(schema_path: str, documents: List[str], max_errors: int, out: TextIO) -> int:
    if max_errors < 0:
        return _schema_failure(out, schema_path, "max-errors must be >= 0")
    try:
        registry = _load_registry(schema_path, max_errors)
    except SchemaCompilationError as exc:
        return _schema_failure(out, schema_path, exc.to_dict())
    except OSError as exc:
        return _schema_failure(out, schema_path, f"Cannot read schema: {exc.strerror}")

    status = 0
    for document_path in documents:
        try:
            instance = json.loads(Path(document_path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            _emit(out, {"document": document_path, "valid": False, "error": f"Invalid JSON: {exc.msg}"})
            status = 1
            continue
        except (OSError, UnicodeDecodeError) as exc:
            _emit(out, {"document": document_path, "valid": False, "error": f"Cannot read document: {exc}"})
            status = 1
            continue

        errors = registry.validate(CLI_SCHEMA_NAME, instance)
        _emit(
            out,
            {
                "document": document_path,
                "valid": not errors,
                "errors": [error.to_dict() for error in errors],
            },
        )
        if errors:
            status = 1

    return status


def main(argv: Optional[List[str]] = None, out: TextIO = sys.stdout) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("eventgate-cli", log_level=args.log_level, format_type="console")

    if args.command == "check-schema":
        return check_schema(args.schema, out)
    return validate_documents(args.schema, args.documents, args.max_errors, out)


if __name__ == "__main__":
    sys.exit(main())
