"""
client.py - Per-client balance state machine

The ClientLedger class owns one client's balances and the deposits and
withdrawals needed to service later disputes. It is the only place balances
change.

Key rules:
    - total == available + held after every operation
    - locked only ever goes from False to True
    - invalid operations are ignored, never raised: every method returns
      ApplyResult.APPLIED or ApplyResult.IGNORED
"""

from __future__ import annotations
from typing import Dict, Optional, Tuple

from .amount import FixedPointAmount
from .core import (
    Transaction, TransactionType, DisputeStatus, ApplyResult, ClientSnapshot,
)


class ClientLedger:
    """
    Balances and dispute-serviceable history for a single client.

    History is a dict keyed by transaction id. Dicts keep insertion order,
    so it is both the ordered audit record and the id index used by
    dispute, resolve and chargeback.

    Example:
        client = ClientLedger(1)
        client.deposit(Transaction(0, 1, TransactionType.DEPOSIT,
                                   FixedPointAmount.from_decimal("2")))
        client.dispute(Transaction(0, 1, TransactionType.DISPUTE))
        client.held  # FixedPointAmount(2.0000)
    """

    def __init__(self, client_id: int, freeze_locked: bool = True):
        """
        Create an empty client ledger.

        Args:
            client_id: Client identifier
            freeze_locked: Ignore deposits and withdrawals once the account
                           is locked (default: True)
        """
        self.id = client_id
        self.available = FixedPointAmount.zero()
        self.held = FixedPointAmount.zero()
        self.total = FixedPointAmount.zero()
        self.locked = False
        self.freeze_locked = freeze_locked
        self._history: Dict[int, Transaction] = {}

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    @property
    def history(self) -> Tuple[Transaction, ...]:
        """Stored deposits and withdrawals in the order they were applied."""
        return tuple(self._history.values())

    def get_transaction(self, tx_id: int) -> Optional[Transaction]:
        return self._history.get(tx_id)

    def snapshot(self) -> ClientSnapshot:
        return ClientSnapshot(
            client_id=self.id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )

    def _move_funds(
        self,
        available: FixedPointAmount = FixedPointAmount(),
        held: FixedPointAmount = FixedPointAmount(),
    ) -> bool:
        """
        Add signed deltas to available and held, then recompute total.

        All three balances are computed before any is stored. Returns False,
        with nothing changed, if a balance would leave the 64-bit range.
        """
        try:
            new_available = self.available + available
            new_held = self.held + held
            new_total = new_available + new_held
        except ValueError:
            return False
        self.available = new_available
        self.held = new_held
        self.total = new_total
        return True

    def _accepts_funds_movement(self, tx: Transaction) -> bool:
        if self.freeze_locked and self.locked:
            return False
        if tx.amount is None or not tx.amount.is_positive():
            return False
        # Ids are unique; a repeated id must not replace the stored original.
        return tx.id not in self._history

    # ========================================================================
    # STATE-CHANGING OPERATIONS
    # ========================================================================

    def deposit(self, tx: Transaction) -> ApplyResult:
        """
        Credit available funds.

        Ignored if the amount is missing or not positive, the id was already
        stored, the account is locked (with freeze_locked), or the new
        balance would not fit the 64-bit range.
        """
        if not self._accepts_funds_movement(tx):
            return ApplyResult.IGNORED
        if not self._move_funds(available=tx.amount):
            return ApplyResult.IGNORED
        self._history[tx.id] = tx
        return ApplyResult.APPLIED

    def withdraw(self, tx: Transaction) -> ApplyResult:
        """
        Debit available funds.

        Ignored under the same conditions as deposit(), and also when
        available < amount. Withdrawing the entire available balance is allowed.
        """
        if not self._accepts_funds_movement(tx):
            return ApplyResult.IGNORED
        if not self.available >= tx.amount:
            return ApplyResult.IGNORED
        if not self._move_funds(available=-tx.amount):
            return ApplyResult.IGNORED
        self._history[tx.id] = tx
        return ApplyResult.APPLIED

    def dispute(self, tx: Transaction) -> ApplyResult:
        """
        Open a dispute on the stored transaction with id tx.id.

        Disputed deposit: the amount moves from available to held.
        Disputed withdrawal: the amount is added to held; available is unchanged.

        Ignored if the target is unknown, already disputed, or charged back.
        """
        target = self._history.get(tx.id)
        if target is None or target.status is not DisputeStatus.NORMAL:
            return ApplyResult.IGNORED
        if target.amount is None:
            return ApplyResult.IGNORED

        if target.type is TransactionType.DEPOSIT:
            moved = self._move_funds(available=-target.amount, held=target.amount)
        elif target.type is TransactionType.WITHDRAWAL:
            moved = self._move_funds(held=target.amount)
        else:
            return ApplyResult.IGNORED
        if not moved:
            return ApplyResult.IGNORED

        target.mark_disputed()
        return ApplyResult.APPLIED

    def resolve(self, tx: Transaction) -> ApplyResult:
        """
        Dismiss a dispute, undoing what dispute() did.

        Resolved deposit: held funds return to available.
        Resolved withdrawal: only the hold is released. Unlike a deposit,
        available is not credited, so the withdrawal stands.

        Ignored if the target is unknown or not currently disputed.
        """
        target = self._history.get(tx.id)
        if target is None or not target.disputed:
            return ApplyResult.IGNORED
        if target.type is TransactionType.DEPOSIT:
            moved = self._move_funds(available=target.amount, held=-target.amount)
        else:
            moved = self._move_funds(held=-target.amount)
        if not moved:
            return ApplyResult.IGNORED
        target.mark_resolved()
        return ApplyResult.APPLIED

    def chargeback(self, tx: Transaction) -> ApplyResult:
        """
        Uphold a dispute, reversing the target transaction, and lock the account.

        Charged-back deposit: the held funds are removed.
        Charged-back withdrawal: the held amount is returned to available.

        Ignored if the target is unknown or not currently disputed.
        """
        target = self._history.get(tx.id)
        if target is None or not target.disputed:
            return ApplyResult.IGNORED
        if target.type is TransactionType.WITHDRAWAL:
            moved = self._move_funds(available=target.amount, held=-target.amount)
        else:
            moved = self._move_funds(held=-target.amount)
        if not moved:
            return ApplyResult.IGNORED
        target.mark_charged_back()
        self.locked = True
        return ApplyResult.APPLIED

    def __repr__(self) -> str:
        lock = ", locked" if self.locked else ""
        return (
            f"ClientLedger({self.id}: available={self.available}, held={self.held}, "
            f"total={self.total}{lock})"
        )
