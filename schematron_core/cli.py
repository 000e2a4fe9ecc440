#!/usr/bin/env python3
"""
Schematron Validate

Validates XML documents against an ISO Schematron schema.

Usage:
    schematron-validate <schema> <document> [<document> ...] [options]

Examples:
    # Validate one document, schema fragments resolved next to the schema
    schematron-validate rules/record.sch record.xml

    # Only errors make a document invalid
    schematron-validate rules/record.sch a.xml b.xml --suppress-warnings

    # Take schema and policy from a config file, print JSON reports
    schematron-validate --config validator.yaml record.xml --json

Exit codes:
    0  every document is valid
    1  at least one document is invalid or could not be checked
    2  the schema could not be compiled or the arguments are wrong
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from schematron_core.config.settings import ValidatorConfig, load_config
from schematron_core.exceptions import SchemaCompilationError
from schematron_core.validation.schematron_validator import SchematronValidator

logger = logging.getLogger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schematron-validate",
        description="Validate XML documents against an ISO Schematron schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "schema",
        type=Path,
        nargs="?",
        default=None,
        help="Schematron schema file (default: schema_path from --config)"
    )

    parser.add_argument(
        "documents",
        type=Path,
        nargs="*",
        help="XML documents to validate"
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="JSON or YAML validator configuration"
    )

    parser.add_argument(
        "--schema-dir",
        type=Path,
        default=None,
        help="Directory schema paths and fragments are resolved from "
             "(default: the schema's directory)"
    )

    parser.add_argument(
        "--preprocessor-dir",
        type=Path,
        default=None,
        help="Directory with ISO Schematron preprocessor stylesheets "
             "(default: the ones bundled with lxml)"
    )

    parser.add_argument(
        "-s", "--suppress-warnings",
        action="store_true",
        help="Documents with only warnings are valid"
    )

    parser.add_argument(
        "--phase",
        default=None,
        help="Schematron phase to validate"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print reports as JSON"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO, or log_level from --config)"
    )

    return parser


def resolve_config(args: argparse.Namespace) -> ValidatorConfig:
    """Merge command line arguments over the optional config file."""
    config = load_config(args.config) if args.config else ValidatorConfig()

    # With a config file the first positional may be a document, not a schema
    if args.config and config.schema_path and args.schema is not None:
        args.documents.insert(0, args.schema)
        args.schema = None

    if args.schema is not None:
        schema = args.schema.resolve()
        config.schema_dir = str(args.schema_dir.resolve() if args.schema_dir else schema.parent)
        config.schema_path = str(schema.relative_to(config.schema_dir))
    elif args.schema_dir:
        config.schema_dir = str(args.schema_dir.resolve())

    if args.preprocessor_dir:
        config.preprocessor_dir = str(args.preprocessor_dir.resolve())
    if args.suppress_warnings:
        config.suppress_warnings = True
    if args.phase:
        config.phase = args.phase
    if args.log_level:
        config.log_level = args.log_level
    return config


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not config.schema_path:
        parser.print_usage(sys.stderr)
        print("✗ Error: no Schematron schema given", file=sys.stderr)
        return EXIT_USAGE
    if not args.documents:
        parser.print_usage(sys.stderr)
        print("✗ Error: no documents given", file=sys.stderr)
        return EXIT_USAGE

    try:
        validator = SchematronValidator.from_config(config)
    except SchemaCompilationError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    missing = [path for path in args.documents if not path.is_file()]
    if missing:
        for path in missing:
            print(f"✗ Error: document not found: {path}", file=sys.stderr)
        return EXIT_USAGE

    outcomes = validator.validate_batch(path.read_bytes() for path in args.documents)

    results = []
    for path, outcome in zip(args.documents, outcomes):
        if args.json:
            entry = {'document': str(path), 'valid': outcome.is_valid}
            if outcome.report is not None:
                entry.update(outcome.report.to_dict())
            if outcome.error is not None and outcome.report is None:
                entry['error'] = str(outcome.error)
            results.append(entry)
        elif outcome.is_valid:
            print(f"✓ {path}: {outcome.report.summary()}")
        else:
            print(f"✗ {path}:\n{outcome.message}")

    if args.json:
        print(json.dumps(results, indent=2))

    return EXIT_VALID if all(outcome.is_valid for outcome in outcomes) else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
