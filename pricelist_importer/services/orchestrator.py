from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..export.encoders import ExportFormatError, write_export
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImporterConfig
from ..models.processing_result import FileStat, ProcessingResult
from ..models.source_file import FileStatus, SourceFile
from .client import ImporterClient
from .progress import ProgressTracker
from .session import ImportSession

"""Batch orchestration: run one import session per price list document.

For every document: extract -> (optional) write CSV/JSON exports ->
(optional) submit. Documents are independent: a failed extraction or
submission marks that document failed and the run continues with the next.
"""

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".pdf",)


class ProcessingError(Exception):
    """Fatal error that prevents a batch run from starting."""


def scan_source_files(paths: Iterable[Path], suffixes: tuple[str, ...] = SOURCE_SUFFIXES) -> list[Path]:
    """Expand the given paths into documents to process.

    Files are taken as given. Directories contribute their direct children
    with a matching suffix (non-recursive, sorted by name).

    Raises:
        ProcessingError: If a path does not exist or a directory cannot be read
    """
    files: list[Path] = []
    for path in paths:
        if not path.exists():
            raise ProcessingError(f"Path not found: {path}")
        if path.is_dir():
            try:
                found = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in suffixes)
            except OSError as e:
                raise ProcessingError(f"Error reading directory {path}: {e}") from e
            files.extend(found)
        else:
            files.append(path)
    return files


def _write_exports(session: ImportSession, file_path: Path, output_dir: Path) -> tuple[Path, ...]:
    records = session.records
    stem = file_path.stem
    return (
        write_export(records, output_dir / f"{stem}.csv", headers=session.headers),
        write_export(records, output_dir / f"{stem}.json"),
    )


def process_file(
    file_path: Path,
    config: ImporterConfig,
    client: ImporterClient,
    error_log: ErrorLogBuffer,
    *,
    commit: bool = False,
    output_dir: Path | None = None,
) -> SourceFile:
    """Run one document through its own session."""
    start_time = datetime.now(UTC)
    session = ImportSession(config, client=client, error_log=error_log)

    def _done(status: FileStatus, **kwargs: object) -> SourceFile:
        return SourceFile(
            path=file_path,
            name=file_path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=status,
            **kwargs,  # type: ignore[arg-type]
        )

    if not session.extract(file_path):
        return _done(FileStatus.FAILED, error=session.status)
    extracted = len(session)

    exports: tuple[Path, ...] = ()
    if output_dir is not None:
        try:
            exports = _write_exports(session, file_path, output_dir)
        except (ExportFormatError, OSError) as e:
            logger.error("%s: export failed: %s", file_path.name, e)
            return _done(FileStatus.FAILED, extracted_rows=extracted, error=f"export failed: {e}")

    submitted = 0
    if commit:
        if not session.submit(source=file_path.name):
            return _done(
                FileStatus.FAILED, extracted_rows=extracted, exports=exports, error=session.status
            )
        submitted = extracted

    return _done(FileStatus.SUCCESS, extracted_rows=extracted, submitted_rows=submitted, exports=exports)


def process_all(
    paths: Iterable[Path],
    config: ImporterConfig,
    client: ImporterClient | None = None,
    *,
    commit: bool = False,
    output_dir: Path | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Process every document and aggregate the results.

    Args:
        paths: Documents and/or directories of documents
        config: Importer configuration
        client: HTTP client (one is created from config.api when None)
        commit: Submit each document's rows after extraction
        output_dir: Write <stem>.csv / <stem>.json exports here when given
        error_log: Buffer receiving failure records (flushed by the caller)

    Raises:
        ProcessingError: For errors that prevent the run from starting
    """
    start_time = datetime.now(UTC)
    file_paths = scan_source_files(paths)
    error_log = error_log if error_log is not None else ErrorLogBuffer(Path(config.error_log_dir))

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_rows = 0
    submitted_rows = 0

    if file_paths:
        own_client = client is None
        client = client or ImporterClient(config.api)
        try:
            with ProgressTracker(len(file_paths)) as progress:
                for file_path in file_paths:
                    progress.start_file(file_path)
                    result = process_file(
                        file_path, config, client, error_log, commit=commit, output_dir=output_dir
                    )
                    ok = result.status == FileStatus.SUCCESS
                    if ok:
                        success_count += 1
                    else:
                        failed_count += 1
                        logger.warning("%s: %s", file_path.name, result.error)
                    total_rows += result.extracted_rows
                    submitted_rows += result.submitted_rows

                    progress.set_postfix(success=success_count, failed=failed_count, rows=total_rows)
                    progress.finish_file(success=ok)

                    elapsed = (result.end_time - result.start_time).total_seconds()  # type: ignore[operator]
                    file_stats.append(
                        FileStat(
                            file_name=result.name,
                            status=result.status.value,
                            extracted_rows=result.extracted_rows,
                            submitted_rows=result.submitted_rows,
                            elapsed_seconds=elapsed,
                        )
                    )
        finally:
            if own_client:
                client.close()

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_rows=total_rows,
        submitted_rows=submitted_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
    )
