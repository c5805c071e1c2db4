"""Normalize raw transaction payloads into TransactionRecord

Records reach the gateway in several shapes:
- canonical: timestamp / sender_id / receiver_id / amount / status / category
- UPI statement export: "Timestamp", "Sender UPI ID", "Amount (INR)", "To Type", ...
- scoring API echo: transaction_date / sender_upi_id / receiver_upi_id / Status / Type
- app ledger: id / date / amount / type ("debit" | "credit") / merchant, no handles

All of them are mapped here so the scoring code only ever sees one shape.
"""

import math
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Tuple

from finupi_gateway.domain.exceptions import InvalidRecordError
from finupi_gateway.domain.models import (
    TransactionCategory,
    TransactionRecord,
    TransactionStatus,
)
from finupi_gateway.utils.date_utils import parse_timestamp

FIELD_ALIASES = {
    "timestamp": ("timestamp", "Timestamp", "transaction_date", "date"),
    "sender_id": ("sender_id", "Sender UPI ID", "sender_upi_id", "senderId"),
    "receiver_id": ("receiver_id", "Receiver UPI ID", "receiver_upi_id", "receiverId"),
    "amount": ("amount", "Amount (INR)", "amount_inr"),
    "status": ("status", "Status"),
    "category": ("category", "To Type", "to_type"),
    "reference": ("reference", "transaction_ref", "Transaction ID", "id"),
}

LEDGER_COUNTERPARTY_KEYS = ("merchant", "counterparty", "description")


def _lookup(raw: Mapping[str, Any], name: str) -> Tuple[bool, Any]:
    for key in FIELD_ALIASES[name]:
        if key in raw:
            return True, raw[key]
    return False, None


def parse_amount(value: Any) -> float:
    """Parse a non-negative finite amount from a number or numeric string"""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        raise InvalidRecordError(f"Non-numeric amount: {value!r}")

    try:
        if isinstance(value, str):
            value = Decimal(value.strip().replace(",", ""))
        # float() refuses signaling NaNs instead of returning nan
        amount = float(value)
    except (InvalidOperation, ValueError, OverflowError) as e:
        raise InvalidRecordError(f"Non-numeric amount: {value!r}") from e

    if not math.isfinite(amount):
        raise InvalidRecordError(f"Non-finite amount: {value!r}")
    if amount < 0:
        raise InvalidRecordError(f"Negative amount: {value!r}")
    return amount


def parse_status(value: Any) -> TransactionStatus:
    """Unknown status strings are treated as FAILED"""
    if value is None:
        return TransactionStatus.FAILED
    if not isinstance(value, str):
        raise InvalidRecordError(f"Unparseable status: {value!r}")
    try:
        return TransactionStatus(value.strip().upper())
    except ValueError:
        return TransactionStatus.FAILED


def parse_category(value: Any) -> TransactionCategory:
    if not isinstance(value, str):
        return TransactionCategory.OTHER
    try:
        return TransactionCategory(value.strip().upper())
    except ValueError:
        return TransactionCategory.OTHER


def _ledger_parties(raw: Mapping[str, Any], subject_id: str) -> Tuple[str, str]:
    """Derive sender/receiver for app-ledger records that only carry debit/credit"""
    counterparty: Optional[str] = None
    for key in LEDGER_COUNTERPARTY_KEYS:
        if raw.get(key):
            counterparty = str(raw[key])
            break
    counterparty = counterparty or "unknown"

    kind = str(raw.get("type", "")).strip().lower()
    if kind == "debit":
        return subject_id, counterparty
    if kind == "credit":
        return counterparty, subject_id
    raise InvalidRecordError(f"Record has no sender/receiver and unknown type: {raw.get('type')!r}")


def normalize_record(raw: Any, subject_id: str) -> TransactionRecord:
    """
    Convert one raw record into a TransactionRecord.

    Raises:
        InvalidRecordError: On a missing/unparseable timestamp or amount,
            a non-string status, or missing parties
    """
    if isinstance(raw, TransactionRecord):
        try:
            timestamp = parse_timestamp(raw.timestamp)
        except (TypeError, ValueError) as e:
            raise InvalidRecordError(str(e)) from e
        return replace(raw, timestamp=timestamp, amount=parse_amount(raw.amount))
    if not isinstance(raw, Mapping):
        raise InvalidRecordError(f"Record is not a mapping: {type(raw).__name__}")

    has_ts, ts_value = _lookup(raw, "timestamp")
    if not has_ts:
        raise InvalidRecordError("Record has no timestamp")
    try:
        timestamp = parse_timestamp(ts_value)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(str(e)) from e

    has_amount, amount_value = _lookup(raw, "amount")
    if not has_amount:
        raise InvalidRecordError("Record has no amount")
    amount = parse_amount(amount_value)

    has_sender, sender = _lookup(raw, "sender_id")
    has_receiver, receiver = _lookup(raw, "receiver_id")
    has_status, status_value = _lookup(raw, "status")

    if has_sender and has_receiver and sender and receiver:
        sender_id, receiver_id = str(sender), str(receiver)
        status = parse_status(status_value)
    else:
        # Ledger entries are already-settled bookings from the subject's own account
        sender_id, receiver_id = _ledger_parties(raw, subject_id)
        status = parse_status(status_value) if has_status else TransactionStatus.SUCCESS

    _, category_value = _lookup(raw, "category")
    _, reference = _lookup(raw, "reference")

    return TransactionRecord(
        timestamp=timestamp,
        sender_id=sender_id,
        receiver_id=receiver_id,
        amount=amount,
        status=status,
        category=parse_category(category_value),
        reference=str(reference) if reference is not None else None,
    )
