"""
decode.py - Single explicit decode step from input fields to Transaction

The engine does not read files. Whatever reads the input hands over the four
field values of one row (already split, as strings or numbers) and gets back
either a Transaction or a DecodeError.

    decode_transaction("deposit", "1", "7", "2.5")
    decode_record({"type": "dispute", "client": 1, "tx": 7, "amount": ""})
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from .amount import FixedPointAmount
from .core import (
    Transaction, TransactionType,
    InvalidTransaction,
    MAX_CLIENT_ID, MAX_TRANSACTION_ID,
)


FieldValue = Union[str, int, Decimal, float, None]


def _parse_id(value: FieldValue, name: str, upper: int) -> int:
    if isinstance(value, bool):
        raise InvalidTransaction(f"{name} must be an integer, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        parsed = int(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidTransaction(f"{name} must be an integer, got {value!r}") from None
    # int() truncates floats and Decimals; 1.9 is not client 1.
    if not isinstance(value, str) and parsed != value:
        raise InvalidTransaction(f"{name} must be an integer, got {value!r}")
    if not 0 <= parsed <= upper:
        raise InvalidTransaction(f"{name} out of range 0..{upper}: {parsed}")
    return parsed


def _parse_amount(value: FieldValue) -> Optional[FixedPointAmount]:
    """Empty strings and None mean 'no amount'."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        return FixedPointAmount.from_decimal(value)
    except (ValueError, ArithmeticError) as e:
        raise InvalidTransaction(f"amount is not a valid decimal: {value!r}") from e


def decode_transaction(
    type_label: str,
    client: FieldValue,
    tx: FieldValue,
    amount: FieldValue = None,
) -> Transaction:
    """
    Build a Transaction from raw field values.

    The new transaction is never disputed. Amounts on dispute, resolve and
    chargeback rows are dropped since those rows reference another
    transaction's amount.

    Args:
        type_label: One of deposit, withdrawal, dispute, resolve, chargeback
                    (case-sensitive; surrounding whitespace is trimmed)
        client: Client id, 0..65535
        tx: Transaction id, 0..4294967295
        amount: Optional decimal amount

    Returns:
        The decoded Transaction

    Raises:
        InvalidTransactionType: If the type label is unknown
        InvalidTransaction: If an id or the amount is malformed
    """
    if isinstance(type_label, str):
        type_label = type_label.strip()
    tx_type = TransactionType.parse(type_label)
    client_id = _parse_id(client, "client", MAX_CLIENT_ID)
    tx_id = _parse_id(tx, "tx", MAX_TRANSACTION_ID)
    parsed_amount = _parse_amount(amount) if tx_type.is_monetary else None
    return Transaction(
        id=tx_id,
        client_id=client_id,
        type=tx_type,
        amount=parsed_amount,
    )


def decode_record(record: Mapping[str, Any]) -> Transaction:
    """
    Decode a row mapping with the keys type, client, tx and (optionally) amount.

    Raises:
        InvalidTransaction: If a required key is missing
        InvalidTransactionType: If the type label is unknown
    """
    missing = [key for key in ("type", "client", "tx") if key not in record]
    if missing:
        raise InvalidTransaction(f"record missing field(s): {', '.join(missing)}")
    return decode_transaction(
        record["type"],
        record["client"],
        record["tx"],
        record.get("amount"),
    )
