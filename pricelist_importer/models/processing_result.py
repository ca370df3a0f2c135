from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for batch extraction runs.

ProcessingResult aggregates the per-file FileStat entries produced by
services.orchestrator.process_all and feeds the SUMMARY output line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for ProcessingResult)."""
    file_name: str
    status: str  # success/failed
    extracted_rows: int
    submitted_rows: int
    elapsed_seconds: float


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results and summary output for a batch run."""
    success_files: int
    failed_files: int
    total_rows: int  # 抽出行数の合計
    submitted_rows: int  # import 成功行数の合計
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # total_rows / elapsed
    file_stats: list[FileStat] | None = None
