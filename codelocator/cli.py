"""CLI entrypoints for codelocator commands."""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path

from .archive import ArchiveError
from .config import PROVIDER_IDS, CodeLocatorConfig, ConfigError, load_settings
from .logging import configure_logging
from .pipeline import AnalysisPipeline
from .validation import ValidationError, validate_analysis_request


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


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .codelocator.yml file or the directory containing it.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codelocator",
        description="Locate where described features are implemented in a zipped project.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a zip archive and print the feature location report as JSON.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_config_option(analyze_parser)
    analyze_parser.add_argument("archive", type=Path, help="Path to the zipped project.")
    analyze_parser.add_argument(
        "--problem",
        required=True,
        help="Natural-language description of the features to locate.",
    )
    analyze_parser.add_argument(
        "--verify",
        action="store_true",
        help="Attach generated functional verification tests to the report.",
    )
    analyze_parser.add_argument(
        "--provider",
        choices=PROVIDER_IDS,
        default=None,
        help="Override the configured analysis provider.",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP analysis service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=3000, help="Port to listen on.")

    return parser


def _with_provider(config: CodeLocatorConfig, provider: str | None) -> CodeLocatorConfig:
    if not provider:
        return config
    return replace(config, llm=replace(config.llm, provider=provider))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for codelocator commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_settings(args.config)
    except ConfigError as exc:
        parser.exit(2, f"codelocator: {exc}\n")

    if args.command == "analyze":
        config = _with_provider(config, args.provider)
        try:
            description = validate_analysis_request(
                args.problem,
                has_archive=args.archive.is_file(),
                upload_size=args.archive.stat().st_size if args.archive.is_file() else None,
                max_upload_bytes=config.storage.max_upload_bytes,
            )
        except ValidationError as exc:
            parser.exit(2, "".join(f"codelocator: {error}\n" for error in exc.errors))
        try:
            report = AnalysisPipeline(config).run(
                description, args.archive, include_verification=bool(args.verify)
            )
        except ArchiveError as exc:
            parser.exit(1, f"codelocator analyze failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - unexpected failure
            parser.exit(1, f"codelocator analyze failed: {exc}\nRun with --verbose for more details.\n")
        print(json.dumps(report, ensure_ascii=False, indent=2))
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


__all__ = ["main"]
