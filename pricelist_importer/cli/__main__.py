from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..export.encoders import ExportFormatError, write_export
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import get_logger, log_summary, setup_logging
from ..models.config_models import ImporterConfig
from ..services.orchestrator import ProcessingError, process_all
from ..services.session import ImportSession
from ..services.summary import render_summary_line
from ..table.reader import TableReadError, read_rows_file

"""CLI entrypoint.

Subcommands:
- extract  FILE|DIR ...   upload documents, export the rows, optionally commit
- paste    TEXTFILE|-     parse pasted rows, export, optionally commit
- submit   ROWSFILE       commit rows from a .json/.csv/.xlsx file
- inspect  ROWSFILE       print headers and the first resolved rows

Exit codes: 0 everything succeeded, 2 at least one document or the
submission failed, 1 fatal (config / input errors).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存環境変数を上書き (API_URL を最優先)。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="pricelist-importer", description="Price list review & import tool")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to importer.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    ex = sub.add_parser("extract", help="Extract rows from price list documents")
    ex.add_argument("paths", nargs="+", type=Path, help="Documents or directories of .pdf documents")
    ex.add_argument("--out-dir", type=Path, default=None, help="Write <name>.csv / <name>.json exports here")
    ex.add_argument("--commit", action="store_true", help="Submit each document's rows after extraction")

    pa = sub.add_parser("paste", help="Parse pasted rows (brand, model, type, dp, mrp)")
    pa.add_argument("source", help="Text file, or '-' for stdin")
    pa.add_argument("--csv", type=Path, default=None, help="Write the rows as CSV")
    pa.add_argument("--json", type=Path, default=None, help="Write the rows as JSON")
    pa.add_argument("--commit", action="store_true", help="Submit the parsed rows")

    su = sub.add_parser("submit", help="Submit rows from a .json/.csv/.xlsx file")
    su.add_argument("rows_file", type=Path)

    ins = sub.add_parser("inspect", help="Print headers and resolved sample rows of a rows file")
    ins.add_argument("rows_file", type=Path)
    ins.add_argument("--rows", type=int, default=INSPECT_SAMPLE_ROWS, help="Number of sample rows")
    return p.parse_args(argv)


def _flush_error_log(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        get_logger().warning(f"error log flush failed: {e}")
        return
    if path is not None:
        get_logger().info(f"error log written: {path}")


def _cmd_extract(args: argparse.Namespace, cfg: ImporterConfig) -> int:
    logger = get_logger()
    error_log = ErrorLogBuffer(Path(cfg.error_log_dir))
    try:
        result = process_all(
            args.paths, cfg, commit=args.commit, output_dir=args.out_dir, error_log=error_log
        )
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    finally:
        _flush_error_log(error_log)

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary が "SUMMARY " を付与するので除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_paste(args: argparse.Namespace, cfg: ImporterConfig) -> int:
    logger = get_logger()
    if args.source == "-":
        text, source = sys.stdin.read(), "<paste>"
    else:
        path = Path(args.source)
        if not path.exists():
            logger.error(f"file not found: {path}")
            return EXIT_FATAL
        try:
            text, source = path.read_text(encoding="utf-8"), path.name
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"paste: cannot read {path}: {e}")
            return EXIT_FATAL

    session = ImportSession(cfg)
    count = session.paste(text)
    logger.info(session.status)
    if count == 0:
        return EXIT_SUCCESS_ALL

    try:
        if args.csv is not None:
            logger.info(f"wrote {write_export(session.records, args.csv, headers=session.headers)}")
        if args.json is not None:
            logger.info(f"wrote {write_export(session.records, args.json)}")
    except (ExportFormatError, OSError) as e:
        logger.error(f"export: {e}")
        return EXIT_FATAL

    if not args.commit:
        return EXIT_SUCCESS_ALL
    ok = session.submit(source=source)
    logger.info(session.status)
    _flush_error_log(session.error_log)
    return EXIT_SUCCESS_ALL if ok else EXIT_PARTIAL_FAILURE


def _cmd_submit(args: argparse.Namespace, cfg: ImporterConfig) -> int:
    logger = get_logger()
    try:
        records = read_rows_file(args.rows_file)
    except TableReadError as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL

    session = ImportSession(cfg)
    session.load_records(records)
    logger.info(f"{args.rows_file.name}: {len(session)} rows, headers={session.headers}")
    ok = session.submit(source=args.rows_file.name)
    if ok:
        logger.info(session.status)
    else:
        logger.error(session.status)
    _flush_error_log(session.error_log)
    return EXIT_SUCCESS_ALL if ok else EXIT_PARTIAL_FAILURE


def _cmd_inspect(args: argparse.Namespace, cfg: ImporterConfig) -> int:
    try:
        records = read_rows_file(args.rows_file)
    except TableReadError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    session = ImportSession(cfg)
    session.load_records(records)
    print(f"FILE: {args.rows_file.name} rows={len(session)}")
    print(f"  headers={session.headers}")
    for raw, resolved in list(zip(session.records, session.build_payload()))[: max(args.rows, 0)]:
        print(f"    raw={json.dumps(raw, ensure_ascii=False, default=str)}")
        print(f"    resolved={json.dumps(resolved, ensure_ascii=False)}")
    return EXIT_SUCCESS_ALL


COMMANDS: dict[str, Callable[[argparse.Namespace, ImporterConfig], int]] = {
    "extract": _cmd_extract,
    "paste": _cmd_paste,
    "submit": _cmd_submit,
    "inspect": _cmd_inspect,
}


def main(argv: list[str] | None = None) -> int:
    # NOTE: 空リスト [] はそのまま使う。None のときのみ sys.argv を読む。
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.debug(f"api={cfg.api.base_url} policy={cfg.empty_extraction_policy.value}")
    return COMMANDS[args.command](args, cfg)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
