"""CLI entrypoints for svcgen commands."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn

from .config import ConfigError, load_config
from .error_classifier import classify
from .logging import configure_logging
from .orchestrator import ServiceOrchestrator
from .prompts import ConsolePrompter
from .validators import InputValidationError

_TOKEN_ENV = "SVCGEN_API_TOKEN"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_common_options(parser: argparse.ArgumentParser, *, with_path: bool = True) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON output.")
    parser.add_argument(
        "--config",
        default=None,
        help="Directory or .svcgen.yml file to load settings from (defaults to the project path).",
    )
    if with_path:
        parser.add_argument(
            "path",
            nargs="?",
            default=".",
            help="Path to the service project (defaults to current directory).",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svcgen",
        description="Scaffold edge-worker services and assess existing ones.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug logs to this file (credentials are redacted).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create", help="Generate a new service project.")
    _add_common_options(create_parser, with_path=False)
    create_parser.add_argument("--service-name", dest="service_name")
    create_parser.add_argument("--service-type", dest="service_type")
    create_parser.add_argument("--domain", dest="domain_name")
    create_parser.add_argument(
        "--api-token",
        dest="api_credential",
        help=f"Platform API token (defaults to ${_TOKEN_ENV}).",
    )
    create_parser.add_argument("--account-id", dest="account_id")
    create_parser.add_argument("--zone-id", dest="zone_id")
    create_parser.add_argument("--environment", dest="environment")
    create_parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Override a derived value, e.g. --set version=2.0.0 or --set 'features=search=off'.",
    )
    create_parser.add_argument(
        "--output",
        default=None,
        help="Directory to generate into (defaults to ./<service-name>).",
    )
    create_parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Rewrite files that already exist in the output directory.",
    )
    create_parser.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt for missing inputs and review every derived value.",
    )

    discover_parser = subparsers.add_parser("discover", help="Show the capabilities a project configures.")
    _add_common_options(discover_parser)

    assess_parser = subparsers.add_parser("assess", help="Score a project's completeness and maturity.")
    _add_common_options(assess_parser)

    validate_parser = subparsers.add_parser("validate", help="Check required files and manifest drift.")
    _add_common_options(validate_parser)

    diagnose_parser = subparsers.add_parser("diagnose", help="Explain problems and suggest fixes.")
    _add_common_options(diagnose_parser)
    diagnose_parser.add_argument(
        "--deep-scan",
        action="store_true",
        help="Add best-practice recommendations.",
    )

    return parser


def parse_overrides(pairs: List[str]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for pair in pairs:
        field, sep, value = pair.partition("=")
        if not sep or not field.strip():
            raise ValueError(f"Invalid override '{pair}'; expected FIELD=VALUE")
        overrides[field.strip()] = value
    return overrides


def _fail(parser: argparse.ArgumentParser, command: str, exc: BaseException) -> NoReturn:
    classification = classify(exc, {"action": command})
    lines = [f"svcgen {command} failed ({classification.severity}): {exc}"]
    lines.extend(f"  - {suggestion}" for suggestion in classification.suggestions)
    parser.exit(1, "\n".join(lines) + "\n")


def _emit(data: Dict[str, Any]) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for svcgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    command = args.command
    config_location = Path(args.config) if args.config else Path(getattr(args, "path", "."))
    try:
        config = load_config(config_location)
    except ConfigError as exc:
        _fail(parser, command, exc)

    orchestrator = ServiceOrchestrator(config)

    if command == "create":
        _run_create(parser, orchestrator, args)
    elif command == "discover":
        model = orchestrator.discover(args.path)
        if args.json:
            _emit(model.to_dict())
        else:
            for name, slot in model.slots.items():
                state = "configured" if slot.configured else "-"
                extra = f" ({slot.provider})" if slot.provider else ""
                print(f"{name:<15} {state}{extra}")
    elif command == "assess":
        model, result = orchestrator.assess(args.path)
        if args.json:
            _emit({**model.to_dict(), "assessment": result.to_dict()})
        else:
            print(f"Completeness: {result.completeness}% ({result.maturity})")
            print(f"Service type: {result.inferred_service_type}")
            if result.missing_capabilities:
                print(f"Missing: {', '.join(result.missing_capabilities)}")
            for rec in result.recommendations:
                print(f"[{rec.kind}] {rec.message}")
    elif command == "validate":
        report = orchestrator.validate(args.path)
        if args.json:
            _emit(report.to_dict())
        else:
            print("Project is valid" if report.valid else "Project has issues:")
            for issue in report.issues:
                print(f"  - {issue}")
            for warning in report.warnings:
                print(f"  warning: {warning}")
        if not report.valid:
            parser.exit(1)
    elif command == "diagnose":
        diagnosis = orchestrator.diagnose(args.path, deep_scan=bool(args.deep_scan))
        if args.json:
            _emit(diagnosis.to_dict())
        else:
            for entry in diagnosis.errors:
                print(f"error ({entry.severity}): {entry.message}\n  fix: {entry.suggestion}")
            for entry in diagnosis.warnings:
                print(f"warning: {entry.message}\n  fix: {entry.suggestion}")
            for recommendation in diagnosis.recommendations:
                print(f"recommendation: {recommendation}")
            if diagnosis.healthy and not diagnosis.warnings:
                print("No problems found")
        if not diagnosis.healthy:
            parser.exit(1)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_create(
    parser: argparse.ArgumentParser, orchestrator: ServiceOrchestrator, args: argparse.Namespace
) -> None:
    raw = {
        name: getattr(args, name)
        for name in (
            "service_name",
            "service_type",
            "domain_name",
            "api_credential",
            "account_id",
            "zone_id",
            "environment",
        )
        if getattr(args, name) is not None
    }
    if "api_credential" not in raw and os.environ.get(_TOKEN_ENV):
        raw["api_credential"] = os.environ[_TOKEN_ENV]
    raw.setdefault("service_type", "generic")
    raw.setdefault("environment", "development")

    try:
        overrides = parse_overrides(args.overrides)
        prompter = ConsolePrompter() if args.interactive else None
        outcome = orchestrator.create(
            raw,
            args.output,
            overrides=overrides,
            prompter=prompter,
            confirm=bool(args.interactive),
            overwrite=args.overwrite,
        )
    except (InputValidationError, ValueError, RuntimeError, OSError, EOFError) as exc:
        _fail(parser, "create", exc)

    for rejected in outcome.rejected:
        print(f"Kept default for {rejected.field}: {rejected.reason}", file=sys.stderr)
    if args.json:
        _emit(outcome.to_dict())
        return
    result = outcome.result
    print(f"Generated {result.manifest.total_files} files in {_relativize(outcome.target_root)}")
    if result.skipped:
        print(f"Skipped {len(result.skipped)} existing file(s); use --overwrite to replace them")
    print(f"Manifest: {_relativize(result.manifest_path)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
