import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, TextIO, Union

from dateutil import parser as date_parser

from engine.classifier import classify
from engine.rules import HABIT_THRESHOLD, IMPULSE_THRESHOLD
from models.category import CATEGORY_KEYWORDS, Category
from models.transaction import Source, Transaction

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "description", "amount", "type")
RECORD_TYPES = ("debit", "credit")


class CSVValidationError(ValueError):
    """A bank statement could not be decoded.

    Attributes:
        line: 1-based line number of the offending row, or None when the
              problem concerns the whole file.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


@dataclass(frozen=True)
class BankRecord:
    date: datetime
    description: str
    amount: Decimal  # always positive
    type: str  # 'debit' or 'credit'

    @property
    def is_debit(self) -> bool:
        return self.type == "debit"


def infer_category(description: str) -> Category:
    """Map a bank description to a category by keyword; OTHER if nothing matches."""
    text = description.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return category
    return Category.OTHER


def row_to_record(row: List[str], columns: Dict[str, int], line: int) -> BankRecord:
    """Convert one CSV row to a BankRecord.

    Args:
        row: Raw CSV cells.
        columns: Lower-cased header name -> cell index.
        line: 1-based line number, used in error messages.

    Raises:
        CSVValidationError: If the date, amount or type is invalid.
    """
    date_str = row[columns["date"]].strip()
    description = row[columns["description"]].strip()
    amount_str = row[columns["amount"]].strip()
    type_str = row[columns["type"]].strip()

    try:
        date = date_parser.parse(date_str)
    except (ValueError, OverflowError):
        raise CSVValidationError(
            f"Invalid date format in row {line}: {date_str}", line
        ) from None
    # Keep timestamps naive so they compare with manually entered ones
    if date.tzinfo is not None:
        date = date.replace(tzinfo=None)

    try:
        amount = Decimal(amount_str.replace(",", ""))
    except InvalidOperation:
        raise CSVValidationError(f"Invalid amount in row {line}: {amount_str}", line) from None
    if not amount.is_finite():
        raise CSVValidationError(f"Invalid amount in row {line}: {amount_str}", line)

    record_type = type_str.lower()
    if record_type not in RECORD_TYPES:
        raise CSVValidationError(
            f"Invalid type in row {line}: {type_str}. Must be 'debit' or 'credit'",
            line,
        )

    return BankRecord(
        date=date,
        description=description,
        amount=abs(amount),
        type=record_type,
    )


def decode(source: Union[str, TextIO]) -> List[BankRecord]:
    """Decode a bank statement CSV.

    Expected format:
    - Header row with at least: date, description, amount, type (any order,
      case-insensitive, extra columns allowed)
    - One record per following row; blank lines are ignored

    Decoding is all-or-nothing: the first invalid row aborts the whole file.

    Raises:
        CSVValidationError: Naming the 1-based line of the first bad row.
    """
    if isinstance(source, str):
        source = io.StringIO(source)

    reader = csv.reader(source)
    rows = []
    try:
        for row in reader:
            if not row or all(not cell.strip() for cell in row):
                continue
            rows.append((reader.line_num, row))
    except csv.Error as e:
        raise CSVValidationError(
            f"Malformed CSV at row {reader.line_num}: {e}", reader.line_num
        ) from None

    if len(rows) < 2:
        raise CSVValidationError(
            "CSV file must have at least a header row and one data row"
        )

    header_line, header = rows[0]
    headers = [h.strip().lower() for h in header]
    for required in REQUIRED_COLUMNS:
        if required not in headers:
            raise CSVValidationError(f"CSV must contain column: {required}", header_line)
    columns = {name: headers.index(name) for name in REQUIRED_COLUMNS}

    records = []
    for line, row in rows[1:]:
        if len(row) != len(headers):
            raise CSVValidationError(
                f"Row {line} has incorrect number of columns", line
            )
        records.append(row_to_record(row, columns, line))

    logger.info(f"Decoded {len(records)} bank record(s)")
    return records


def record_to_transaction(
    record: BankRecord, user_id: Optional[str] = None
) -> Transaction:
    return Transaction(
        description=record.description,
        amount=record.amount,
        category=infer_category(record.description),
        occurred_at=record.date,
        source=Source.AUTO,
        user_id=user_id,
    )


def ingest(
    source: Union[str, TextIO],
    history: Iterable[Transaction] = (),
    user_id: Optional[str] = None,
    impulse_threshold: Decimal = IMPULSE_THRESHOLD,
    habit_threshold: int = HABIT_THRESHOLD,
) -> List[Transaction]:
    """Decode a bank statement and turn its debits into classified transactions.

    Credit records are dropped before classification.

    Raises:
        CSVValidationError: If decoding fails or the file has no debit rows.
    """
    history = list(history)
    transactions = []
    skipped = 0
    for record in decode(source):
        if not record.is_debit:
            skipped += 1
            continue
        transaction = record_to_transaction(record, user_id)
        flags = classify(transaction, history, impulse_threshold, habit_threshold)
        transaction.is_impulse = flags.impulse
        transactions.append(transaction)

    if not transactions:
        raise CSVValidationError("No debit transactions found in CSV")

    logger.info(
        f"Ingested {len(transactions)} debit transaction(s), skipped {skipped} credit(s)"
    )
    return transactions
