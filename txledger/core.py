"""
Core types for the transaction ledger engine.

This module provides the foundational data structures shared by the rest of
the package:
1. Enums: TransactionType, DisputeStatus, ApplyResult
2. Exceptions: LedgerError and the decode error types
3. Data structures: Transaction (mutable dispute status only), ClientSnapshot
4. Constants: identifier ranges

Nothing here mutates a client's balances; that is the job of ClientLedger.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .amount import FixedPointAmount, format_amount


# ============================================================================
# CONSTANTS
# ============================================================================

# Client ids are unsigned 16-bit, transaction ids unsigned 32-bit.
MAX_CLIENT_ID = 2 ** 16 - 1
MAX_TRANSACTION_ID = 2 ** 32 - 1

# Column names of a snapshot row, in output order.
SNAPSHOT_FIELDS = ("client", "available", "held", "total", "locked")


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class DecodeError(LedgerError):
    """Raised when an input record cannot be turned into a Transaction."""
    pass


class InvalidTransactionType(DecodeError):
    """Raised when a transaction type label is not one of the five known labels."""
    pass


class InvalidTransaction(DecodeError):
    """Raised when a record has a missing or out-of-range id, or a malformed amount."""
    pass


# ============================================================================
# ENUMS
# ============================================================================

class TransactionType(Enum):
    """
    The five transaction kinds. Values are the exact input labels.

    DEPOSIT and WITHDRAWAL carry an amount and are kept in history.
    DISPUTE, RESOLVE and CHARGEBACK reference an earlier DEPOSIT/WITHDRAWAL
    by its transaction id.
    """
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, label: str) -> TransactionType:
        """
        Map a case-sensitive label to its TransactionType.

        Raises:
            InvalidTransactionType: If the label is not recognized.
        """
        try:
            return _TYPES_BY_LABEL[label]
        except (KeyError, TypeError):
            raise InvalidTransactionType(f"invalid transaction type: {label!r}") from None

    @property
    def is_monetary(self) -> bool:
        """True for the types that carry an amount and are stored in history."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


_TYPES_BY_LABEL: Dict[str, TransactionType] = {t.value: t for t in TransactionType}


class DisputeStatus(Enum):
    """
    Dispute state of a stored transaction.

    NORMAL -> DISPUTED on dispute, DISPUTED -> NORMAL on resolve,
    DISPUTED -> CHARGED_BACK on chargeback. CHARGED_BACK is terminal.
    """
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ApplyResult(Enum):
    """
    Outcome of applying one transaction.

    APPLIED: State changed as requested.
    IGNORED: A precondition was not met (non-positive amount, insufficient
             funds, unknown or non-disputed target, locked account); no
             state changed.
    ALREADY_APPLIED: A deposit/withdrawal id that was already applied.
    REJECTED: The record could not be decoded and never reached a client.
    """
    APPLIED = "applied"
    IGNORED = "ignored"
    ALREADY_APPLIED = "already_applied"
    REJECTED = "rejected"


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(slots=True)
class Transaction:
    """
    One ledger event.

    Attributes:
        id: Transaction id. For DEPOSIT/WITHDRAWAL it names this transaction;
            for DISPUTE/RESOLVE/CHARGEBACK it names the target transaction.
        client_id: Client the event applies to.
        type: The TransactionType.
        amount: Present for DEPOSIT/WITHDRAWAL only.
        status: Dispute status. The only field that changes after creation.

    The identity fields are validated in __post_init__ and are read-only by
    convention; ClientLedger changes status through mark_disputed(),
    mark_resolved() and mark_charged_back().
    """
    id: int
    client_id: int
    type: TransactionType
    amount: Optional[FixedPointAmount] = None
    status: DisputeStatus = field(default=DisputeStatus.NORMAL)

    def __post_init__(self):
        if not isinstance(self.type, TransactionType):
            raise ValueError(f"Transaction type must be TransactionType, got {type(self.type)}")
        if not isinstance(self.id, int) or not 0 <= self.id <= MAX_TRANSACTION_ID:
            raise ValueError(f"Transaction id out of range: {self.id!r}")
        if not isinstance(self.client_id, int) or not 0 <= self.client_id <= MAX_CLIENT_ID:
            raise ValueError(f"Client id out of range: {self.client_id!r}")
        if self.amount is not None and not isinstance(self.amount, FixedPointAmount):
            raise ValueError(f"Transaction amount must be FixedPointAmount, got {type(self.amount)}")

    @property
    def disputed(self) -> bool:
        return self.status is DisputeStatus.DISPUTED

    @property
    def charged_back(self) -> bool:
        return self.status is DisputeStatus.CHARGED_BACK

    def mark_disputed(self) -> None:
        self.status = DisputeStatus.DISPUTED

    def mark_resolved(self) -> None:
        self.status = DisputeStatus.NORMAL

    def mark_charged_back(self) -> None:
        self.status = DisputeStatus.CHARGED_BACK

    def __repr__(self) -> str:
        amount = f", amount={format_amount(self.amount)}" if self.amount is not None else ""
        flag = f", {self.status.value}" if self.status is not DisputeStatus.NORMAL else ""
        return f"Transaction({self.type.value} #{self.id}, client={self.client_id}{amount}{flag})"


@dataclass(frozen=True, slots=True)
class ClientSnapshot:
    """
    Read-only view of one client's balances at the end of a run.

    Attributes:
        client_id: Client identifier
        available: Funds free to withdraw
        held: Funds frozen by open disputes
        total: available + held
        locked: True once any chargeback has hit the account
    """
    client_id: int
    available: FixedPointAmount
    held: FixedPointAmount
    total: FixedPointAmount
    locked: bool

    def as_row(self) -> Dict[str, str]:
        """
        Render for an external encoder: 4-decimal amounts, boolean literal.

        Example:
            {'client': '1', 'available': '1.5000', 'held': '0.0000',
             'total': '1.5000', 'locked': 'false'}
        """
        return {
            "client": str(self.client_id),
            "available": format_amount(self.available),
            "held": format_amount(self.held),
            "total": format_amount(self.total),
            "locked": "true" if self.locked else "false",
        }
