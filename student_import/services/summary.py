from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..models.import_batch import CommitResult

"""Commit summary rendering.

render_summary_line() is the single machine-readable line printed at the end
of a CLI run:

    SUMMARY batch=<id> rows=<n> imported=<n> failed=<n> elapsed_sec=<s>

generate_import_summary() is the human-readable report written next to the
error export.
"""

__all__ = [
    "REPORT_TIMEZONE",
    "format_elapsed",
    "render_summary_line",
    "generate_import_summary",
]

# Asia/Kolkata, no DST
REPORT_TIMEZONE = timezone(timedelta(hours=5, minutes=30), "IST")


def format_elapsed(seconds: float) -> str:
    """Render seconds without scientific notation and without a trailing '.0'."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(batch_id: str, result: CommitResult) -> str:
    """Render the SUMMARY line for one commit.

    Examples:
        >>> render_summary_line("batch_1", CommitResult(imported=9, failed=1, elapsed_seconds=2.0))
        'SUMMARY batch=batch_1 rows=10 imported=9 failed=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY batch={batch_id} "
        f"rows={result.processed} "
        f"imported={result.imported} "
        f"failed={result.failed} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )


def generate_import_summary(result: CommitResult, now: datetime | None = None) -> str:
    """Multi-line import report: totals, success rate, then one line per failed row."""
    total = result.processed
    rate = f"{result.imported / total * 100:.1f}" if total > 0 else "0"
    finished = (now or datetime.now(REPORT_TIMEZONE)).astimezone(REPORT_TIMEZONE)

    lines = [
        "Import Summary",
        "==============",
        "",
        f"Total Processed: {total}",
        f"Successfully Imported: {result.imported}",
        f"Failed: {result.failed}",
        f"Success Rate: {rate}%",
        "",
    ]
    if result.errors:
        lines.append("Errors:")
        lines.append("-------")
        lines.extend(f"Row {e.row_number}: {e.error}" for e in result.errors)
        lines.append("")
    lines.append(f"Import completed at: {finished.strftime('%d/%m/%Y, %H:%M:%S')}")
    return "\n".join(lines) + "\n"
