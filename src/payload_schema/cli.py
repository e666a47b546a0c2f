"""Command-line interface router for payload-schema."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING

from payload_schema.config import ConfigError, load_settings
from payload_schema.definitions import load_definitions
from payload_schema.errors import SchemaDefinitionError
from payload_schema.main import ExitCode
from payload_schema.observability.logging import LOG_FORMATS, configure_logging, get_logger
from payload_schema.payloads import validate_payload
from payload_schema.values import strip_undefined

if TYPE_CHECKING:
    from payload_schema.collection import SchemaCollection

_LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = int(ExitCode.INPUT_ERROR)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="payload-schema",
        description=(
            "payload-schema: validate JSON payloads against declarative object schemas.\n\n"
            "Common workflows:\n"
            "  payload-schema check defs.yaml payload.json            Classify a payload\n"
            "  payload-schema check defs.yaml payload.json -s person  Validate one schema\n"
            "  payload-schema describe defs.yaml                      Show schema rules\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: $PAYLOAD_SCHEMA_LOG_LEVEL or WARNING).",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Log line format (default: $PAYLOAD_SCHEMA_LOG_FORMAT or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate or classify a JSON payload.")
    _add_definitions_argument(check)
    check.add_argument("payload", help="Path to a JSON payload file, or '-' for stdin.")
    check.add_argument(
        "--schema",
        "-s",
        default=None,
        help="Validate against this schema instead of classifying against all of them.",
    )
    check.add_argument(
        "--no-defaults",
        action="store_true",
        default=False,
        help="Do not fill declared defaults before validating against --schema.",
    )
    check.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        default=False,
        help="Emit a machine-readable JSON result.",
    )
    check.set_defaults(handler=_cmd_check)

    describe = subparsers.add_parser("describe", help="Print schema rules and complexity.")
    _add_definitions_argument(describe)
    describe.add_argument("--schema", "-s", default=None, help="Only describe this schema.")
    describe.set_defaults(handler=_cmd_describe)

    return parser


def _add_definitions_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "definitions",
        nargs="?",
        default=None,
        help="Definition document (.yaml/.yml/.toml/.json); default: $PAYLOAD_SCHEMA_DEFINITIONS.",
    )


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    stdout: IO[str] | None = None,
    stderr: IO[str] | None = None,
    stdin: IO[str] | None = None,
) -> int:
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr

    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(
            log_level=args.log_level,
            log_format=args.log_format,
            definitions_path=args.definitions,
        )
        configure_logging(settings.log_level, settings.log_format, stream=err)

        if settings.definitions_path is None:
            raise CLIError("no definitions document given (argument or $PAYLOAD_SCHEMA_DEFINITIONS)")
        collection = load_definitions(settings.definitions_path)
        return int(args.handler(args, collection, out, stdin if stdin is not None else sys.stdin))
    except CLIError as exc:
        print(f"error: {exc.message}", file=err)
        return exc.exit_code
    except (ConfigError, SchemaDefinitionError) as exc:
        print(f"error: {exc}", file=err)
        return int(ExitCode.INPUT_ERROR)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_check(
    args: argparse.Namespace,
    collection: SchemaCollection,
    out: IO[str],
    stdin: IO[str],
) -> ExitCode:
    payload = _read_payload(args.payload, stdin)

    if args.schema is not None:
        schema = collection.get_schema(args.schema)
        if schema is None:
            raise CLIError(_unknown_schema_message(args.schema, collection))
        result = validate_payload(schema, payload, apply_defaults=not args.no_defaults)
        matched_key = args.schema if result.valid else None
        reason = result.reason
    else:
        matched, matched_key = collection.validate_object_schema(payload)
        reason = "" if matched else "Payload did not match any registered schema"

    valid = matched_key is not None
    _LOGGER.info("cli_check_completed", valid=valid, schema_key=matched_key)

    if args.as_json:
        document = {
            "valid": valid,
            "schema": matched_key,
            "reason": reason,
            "payload": strip_undefined(payload),
        }
        print(json.dumps(document, sort_keys=True, ensure_ascii=False), file=out)
    elif valid:
        print(f"valid: {matched_key}", file=out)
    else:
        print("rejected:", file=out)
        for line in reason.splitlines():
            print(f"  {line}", file=out)

    return ExitCode.SUCCESS if valid else ExitCode.REJECTED


def _cmd_describe(
    args: argparse.Namespace,
    collection: SchemaCollection,
    out: IO[str],
    stdin: IO[str],
) -> ExitCode:
    keys = collection.get_schema_keys()
    if args.schema is not None:
        if not collection.has_schema(args.schema):
            raise CLIError(_unknown_schema_message(args.schema, collection))
        keys = [args.schema]

    for key in keys:
        schema = collection.get_schema(key)
        assert schema is not None
        print(f"{key} (complexity {schema.complexity})", file=out)
        print(schema.display_string, file=out)
    return ExitCode.SUCCESS


def _read_payload(location: str, stdin: IO[str]) -> object:
    try:
        text = stdin.read() if location == "-" else Path(location).read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"unable to read payload {location!r}: {exc.strerror or exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise CLIError(f"payload {location!r} is not valid JSON: {exc}") from exc


def _unknown_schema_message(name: str, collection: SchemaCollection) -> str:
    return f"unknown schema {name!r}; available: {collection.get_schema_keys()}"


__all__ = ["CLIError", "build_parser", "run_cli"]
