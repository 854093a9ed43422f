"""
CSV boundary of the ledger: reading transaction rows in, writing balances out.

Input rows are ``type, client, tx, amount`` with a header line. Fields may be
padded with whitespace; it is stripped before validation. Output rounds
amounts to four decimal places for display only.
"""
import csv
import logging
import sys
from decimal import Context, Decimal, ROUND_HALF_EVEN
from typing import Iterable, Iterator, List, Optional, TextIO, Tuple

from models import ClientAccount, ProcessingStats, Transaction
from validator import parse_record

logger = logging.getLogger(__name__)

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]
DISPLAY_PRECISION = Decimal("0.0001")


class InputError(Exception):
    """The input file could not be read as CSV at all."""


def read_rows(filepath: str) -> Iterator[Tuple[int, List[str]]]:
    """
    Yield (starting line number, stripped fields) for every data row after the header.

    Raises:
        InputError: the file cannot be opened or the CSV cannot be tokenized
    """
    try:
        with open(filepath, "r", newline="") as f:
            reader = csv.reader(f, strict=True)
            header = next(reader, None)
            if header is None:
                return
            while True:
                # Quoted fields can span lines; report the line the row starts on.
                line_number = reader.line_num + 1
                row = next(reader, None)
                if row is None:
                    break
                if not row:
                    continue
                yield line_number, [field.strip() for field in row]
    except OSError as e:
        raise InputError(f"Cannot read {filepath}: {e}") from e
    except (csv.Error, UnicodeDecodeError) as e:
        raise InputError(f"Malformed CSV in {filepath}: {e}") from e


def load_transactions(filepath: str, stats: Optional[ProcessingStats] = None) -> List[Transaction]:
    """Parse every row of the file, logging and skipping the invalid ones."""
    transactions = []
    for line_number, fields in read_rows(filepath):
        transaction = parse_record(fields)
        if transaction is None:
            logger.warning(f"Invalid record on line {line_number}")
            if stats is not None:
                stats.record_rejection()
            continue
        transactions.append(transaction)
    return transactions


def format_amount(value: Decimal) -> str:
    """Round to 4 decimal places and drop trailing zeros."""
    if value.is_nan():
        return "NaN"
    if value.is_infinite():
        return "-inf" if value.is_signed() else "inf"
    # Widen precision so large balances keep all their integer digits.
    context = Context(prec=max(28, value.adjusted() + 6))
    rounded = value.quantize(DISPLAY_PRECISION, rounding=ROUND_HALF_EVEN, context=context)
    if rounded.is_zero():
        return "0"
    return f"{rounded.normalize(context):f}"


def write_accounts(accounts: Iterable[ClientAccount], stream: Optional[TextIO] = None) -> None:
    """Write one CSV row per account, ordered by client id. Defaults to stdout."""
    if stream is None:
        stream = sys.stdout
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for account in sorted(accounts, key=lambda account: account.client_id):
        writer.writerow([
            account.client_id,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])
