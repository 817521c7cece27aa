"""
CSV Exporter — Writes customer records as a CSV report.

Output columns (fixed order):
    ID, Display Name, Email Address, Amount Spent, Currency Code

Rows are written in the order the API returned them. A missing email becomes
an empty cell. Amounts are quantized to two decimal places with
ROUND_HALF_EVEN, the decimal module's default ("12.345" -> "12.34",
"12.355" -> "12.36").

The destination is a file path, or None / "" / "-" for standard output.
Files are truncated and closed on every exit path; stdout is flushed but
never closed.

The deadline is polled before each data row. Once it has expired the export
stops with ExportCancelledError; rows already written are left in place.
A write that is already in progress is not interrupted.
"""

import csv
import sys
from contextlib import contextmanager
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from typing import Iterable, Optional

from .deadline import Deadline
from .errors import ExportCancelledError, ExportWriteError
from .models import CustomerRecord

CSV_HEADER = ["ID", "Display Name", "Email Address", "Amount Spent", "Currency Code"]

STDOUT_DESTINATIONS = (None, "", "-")

_CENTS = Decimal("0.01")


def is_stdout(destination: Optional[str]) -> bool:
    return destination in STDOUT_DESTINATIONS


def format_amount(amount: Decimal) -> str:
    """Format a monetary amount with exactly two decimal digits.

    Precision is widened to fit the integer part, so large amounts never
    hit the default 28-digit context limit. Negative zero prints as "0.00".
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        cents = amount.quantize(_CENTS, rounding=ROUND_HALF_EVEN)
    if cents.is_zero():
        cents = cents.copy_abs()
    return str(cents)


def record_to_row(record: CustomerRecord) -> list:
    return [
        record.id,
        record.display_name,
        record.email or "",
        format_amount(record.amount),
        record.currency_code,
    ]


@contextmanager
def _open_destination(destination: Optional[str]):
    if is_stdout(destination):
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return

    with open(destination, "w", newline="", encoding="utf-8") as f:
        yield f


def export_customers(records: Iterable[CustomerRecord], destination: Optional[str],
                     deadline: Optional[Deadline] = None) -> int:
    """Write records to destination as CSV.

    Args:
        records: Customer records, written in iteration order.
        destination: File path, or None / "" / "-" for standard output.
        deadline: If given, checked before each data row.

    Returns:
        The number of data rows written.

    Raises:
        ExportCancelledError: If the deadline expired before all rows were written.
        ExportWriteError: If the destination cannot be opened or written.
    """
    written = 0
    try:
        with _open_destination(destination) as stream:
            writer = csv.writer(stream)
            writer.writerow(CSV_HEADER)
            for record in records:
                if deadline is not None and deadline.expired():
                    raise ExportCancelledError(
                        f"Operation timed out during CSV export after {written} rows"
                    )
                writer.writerow(record_to_row(record))
                written += 1
    except (OSError, csv.Error, UnicodeError) as exc:
        raise ExportWriteError(f"Failed to write CSV after {written} rows: {exc}") from exc
    return written
