from __future__ import annotations

import argparse
import asyncio
import json
import sys
from functools import partial
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from bulk_import.api.client import SubmissionClient, TransportError
from bulk_import.config.loader import ConfigError, load_config, require_base_url
from bulk_import.excel.reader import ParseError
from bulk_import.excel.template import write_template
from bulk_import.logging.error_log import ErrorLogBuffer
from bulk_import.logging.init import log_summary, setup_logging
from bulk_import.models.config_models import ImportConfig
from bulk_import.services.orchestrator import UploadResult, run_upload, select_path
from bulk_import.services.profiles import PROFILES, get_profile
from bulk_import.services.session import SessionError, configure, open_session
from bulk_import.services.summary import render_error_lines, render_summary_line

"""CLI entrypoint.

Subcommands:
- upload ENTITY FILE: parse, preview and submit a spreadsheet
- template ENTITY: write the guidance workbook
- options RESOURCE: list active countries / specialties for ``-p`` values

Exit codes: 0 all records succeeded, 2 completed with failures, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

OPTION_RESOURCES = ("countries", "specialties")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True lets .env values replace variables already in the process
    environment. A failure only produces a warning.
    """
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_value(raw: str) -> Any:
    raw = raw.strip()
    return int(raw) if raw.isdigit() else raw


def _parse_parameters(entity: str, pairs: list[str]) -> dict[str, Any]:
    """Turn ``NAME=VALUE`` pairs into parameter values.

    Multi-valued parameters take comma-separated ids (``specialties=1,4``).
    """
    profile = get_profile(entity)
    values: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"expected NAME=VALUE, got '{pair}'")
        name = name.strip()
        param = profile.parameter(name)
        if param is not None and param.multiple:
            values[name] = tuple(_parse_value(v) for v in raw.split(",") if v.strip())
        else:
            values[name] = _parse_value(raw)
    return values


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="bulk-import", description="Back-office spreadsheet bulk importer")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/import.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    up = sub.add_parser("upload", help="Parse a spreadsheet and submit it in batches")
    up.add_argument("entity", choices=sorted(PROFILES))
    up.add_argument("file", type=Path)
    up.add_argument(
        "-p", "--param", dest="params", action="append", default=[], metavar="NAME=VALUE",
        help="Shared parameter applied to every record (repeatable)",
    )
    up.add_argument("--dry-run", action="store_true", help="Print the preview and exit")

    tpl = sub.add_parser("template", help="Write the download template workbook")
    tpl.add_argument("entity", choices=sorted(PROFILES))
    tpl.add_argument("--output", type=Path, default=None)

    opt = sub.add_parser("options", help="List active lookup values")
    opt.add_argument("resource", choices=OPTION_RESOURCES)
    return p.parse_args(argv)


def _print_preview(records: Any, total: int) -> None:
    print(f"PREVIEW {len(records)} of {total} records")
    for r in records:
        print(f"  row {r.row_number}: {json.dumps(r.to_payload(), ensure_ascii=False)}")


async def _upload(args: argparse.Namespace, cfg: ImportConfig, logger: Any) -> int:
    profile = get_profile(args.entity)
    session = configure(open_session(profile), **_parse_parameters(args.entity, args.params))
    session = await select_path(session, args.file)
    _print_preview(session.preview(), session.record_count)

    if args.dry_run:
        return EXIT_SUCCESS_ALL

    require_base_url(cfg)
    async with SubmissionClient(cfg.api) as client:
        result: UploadResult = await run_upload(
            session,
            partial(client.submit, profile),
            upload=cfg.upload_for(profile.entity),
            error_log=ErrorLogBuffer(cfg.logs_directory),
            on_success=lambda report: logger.info(
                f"{report.success_count} {profile.entity} created"
            ),
        )

    report = result.report
    summary_line = render_summary_line(profile.entity, report, result.elapsed_seconds)
    log_summary(summary_line.removeprefix("SUMMARY "))
    for line in render_error_lines(report):
        print(line)

    return EXIT_PARTIAL_FAILURE if report.has_failures else EXIT_SUCCESS_ALL


async def _options(args: argparse.Namespace, cfg: ImportConfig) -> int:
    require_base_url(cfg)
    async with SubmissionClient(cfg.api) as client:
        options = await client.list_options(args.resource)
    for option_id, name in options:
        print(f"{option_id}\t{name}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config, explicit=args.config is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "template":
        path = write_template(get_profile(args.entity), args.output)
        logger.info(f"template written: {path}")
        return EXIT_SUCCESS_ALL

    try:
        if args.command == "options":
            return asyncio.run(_options(args, cfg))
        return asyncio.run(_upload(args, cfg, logger))
    except ConfigError as e:
        logger.error(f"config: {e}")
    except ValueError as e:
        logger.error(f"parameters: {e}")
    except SessionError as e:
        logger.error(f"session: {e}")
    except ParseError as e:
        logger.error(f"file: {e}")
    except TransportError as e:
        logger.error(f"api: {e}")
    return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
