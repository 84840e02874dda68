"""Transaction intake - turns raw records into domain transactions, skipping bad ones"""

import logging
import math
from datetime import date, datetime, tzinfo
from typing import Any, Iterable, List, Mapping, Optional

from smartspend_gateway.domain.exceptions import InputDataError
from smartspend_gateway.domain.models import CATEGORIES, TRANSACTION_TYPES, Transaction

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any, tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse an ISO string / date / datetime into naive local wall-clock time.

    Offset-carrying values are converted to `tz` (when given) before the
    offset is dropped. Date-only values mean local midnight.

    Raises:
        InputDataError: value is missing or not a recognizable timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InputDataError(f"Unparseable timestamp: {value!r}") from e
    else:
        raise InputDataError(f"Missing or invalid timestamp: {value!r}")

    if parsed.tzinfo is not None:
        if tz is not None:
            parsed = parsed.astimezone(tz)
        parsed = parsed.replace(tzinfo=None)
    return parsed


def parse_transaction(record: Mapping[str, Any], tz: Optional[tzinfo] = None) -> Transaction:
    """
    Build a Transaction from a raw record (API payload or stored row).

    Raises:
        InputDataError: bad date, non-numeric or non-positive amount, unknown type
            or category
    """
    try:
        amount = float(record.get("amount"))
    except (TypeError, ValueError) as e:
        raise InputDataError(f"Invalid amount: {record.get('amount')!r}") from e
    if not math.isfinite(amount) or amount <= 0:
        raise InputDataError(f"Non-positive amount: {amount}")

    tx_type = record.get("type")
    if tx_type not in TRANSACTION_TYPES:
        raise InputDataError(f"Unknown transaction type: {tx_type!r}")

    category = str(record.get("category") or "Other")
    if category not in CATEGORIES:
        raise InputDataError(f"Unknown category: {category!r}")

    tx_date = parse_timestamp(record.get("date"), tz)

    # created_at only feeds time-of-day inference; a bad one is dropped, not fatal
    created_at = None
    if record.get("created_at"):
        try:
            created_at = parse_timestamp(record["created_at"], tz)
        except InputDataError:
            created_at = None

    return Transaction(
        id="" if record.get("id") is None else str(record["id"]),
        amount=amount,
        category=category,
        date=tx_date,
        description=str(record.get("description") or ""),
        type=tx_type,
        created_at=created_at,
    )


def load_transactions(records: Iterable[Mapping[str, Any]], tz: Optional[tzinfo] = None) -> List[Transaction]:
    """Parse a batch best-effort: malformed records are logged and skipped"""
    transactions = []
    for record in records:
        try:
            transactions.append(parse_transaction(record, tz))
        except InputDataError as e:
            logger.warning(
                "Skipping malformed transaction",
                extra={"transaction_id": record.get("id"), "reason": str(e)},
            )
    return transactions
