from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from metalman_iot.config.loader import ConfigError, load_config, resolve_config_path
from metalman_iot.excel.reader import WorkbookReadError, load_workbook
from metalman_iot.logging.error_log import ErrorLogBuffer
from metalman_iot.logging.init import log_summary, setup_logging
from metalman_iot.services.pipeline import ProcessingError, describe, inspect_workbook, process_files
from metalman_iot.services.query import consumption_by
from metalman_iot.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config
- Parse each given workbook's target sheet into IoT data points
- Log row errors as WARN lines, print a SUMMARY line (or a JSON document)
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="metalman-iot",
        description="Extract IoT energy-consumption readings from Excel workbooks",
    )
    p.add_argument("files", nargs="+", type=Path, help="Workbook(s) to parse (.xlsx)")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/metalman.yml)")
    p.add_argument("--sheet", default=None, help="Worksheet name, overrides target_sheet from config")
    p.add_argument("--json", action="store_true", help="Print points and errors as JSON")
    p.add_argument("--inspect", action="store_true", help="Print normalized grids of every sheet as JSON, then exit")
    p.add_argument("--totals", action="store_true", help="Report consumed kW totals per plant and per sensor")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _inspect(files: list[Path]) -> int:
    out: dict[str, object] = {}
    code = EXIT_SUCCESS_ALL
    for f in files:
        try:
            workbook = load_workbook(f)
        except WorkbookReadError as e:
            out[f.name] = {"error": str(e)}
            code = EXIT_PARTIAL_FAILURE
            continue
        out[f.name] = inspect_workbook(workbook)
    print(json.dumps(out, ensure_ascii=False, indent=2, default=str))
    return code


def _totals(points) -> dict[str, dict[str, float]]:
    return {key: consumption_by(points, key) for key in ("plant", "sensor_name")}


def main(argv: list[str] | None = None) -> int:
    # only fall back to sys.argv for None; an empty list is a valid argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    machine_output = args.json or args.inspect
    logger = setup_logging(debug=args.debug, stream=sys.stderr if machine_output else None)
    if args.debug:
        logger.debug("debug mode enabled")

    load_dotenv(dotenv_path=Path(".env"), override=False)

    if args.inspect:
        return _inspect(args.files)

    config_path = resolve_config_path(args.config)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        result = process_files(
            list(args.files),
            cfg,
            sheet_name=args.sheet,
            error_log=ErrorLogBuffer(cfg.error_log_dir),
            progress_enabled=False if machine_output else None,
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    totals = _totals(result.dataset.points) if args.totals else None

    if args.json:
        document = result.dataset.to_dict()
        document.update(describe(result))
        if totals is not None:
            document["totals"] = totals
        print(json.dumps(document, ensure_ascii=False, indent=2))
    elif totals is not None:
        for key, per_key in totals.items():
            for name, kw in per_key.items():
                logger.info(f"total {key}={name} consumed_kw={kw:g}")

    summary_line = render_summary_line(result)
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0 or result.total_row_errors > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
