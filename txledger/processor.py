"""
processor.py - Routing of a transaction stream to client ledgers

The LedgerProcessor owns every ClientLedger of a run, keyed by client id.
It creates a client on first sight of its id, dispatches each transaction to
the matching ClientLedger operation, and exposes the final snapshots.

Key responsibilities:
    - Strict input order: each transaction is fully applied before the next
    - Idempotency: a deposit/withdrawal id is applied at most once per stream
    - Decode failures are reported to an error sink and skipped
    - Audit: verify_balances() checks total == available + held for all clients
"""

from __future__ import annotations
from collections import Counter
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Set
import sys

from .client import ClientLedger
from .core import (
    Transaction, TransactionType, ApplyResult, ClientSnapshot,
    LedgerError, DecodeError,
)
from .decode import decode_record


# Error sink signature: (raw record, decode error) -> None
ErrorSink = Callable[[Mapping[str, Any], DecodeError], None]

# Operation handler signature: (client ledger, transaction) -> result
Handler = Callable[[ClientLedger, Transaction], ApplyResult]

HANDLERS: Dict[TransactionType, Handler] = {
    TransactionType.DEPOSIT: ClientLedger.deposit,
    TransactionType.WITHDRAWAL: ClientLedger.withdraw,
    TransactionType.DISPUTE: ClientLedger.dispute,
    TransactionType.RESOLVE: ClientLedger.resolve,
    TransactionType.CHARGEBACK: ClientLedger.chargeback,
}


class LedgerProcessor:
    """
    Owner of all client ledgers for one input stream.

    Thread Safety:
        Not thread-safe. To process in parallel, split the stream with
        partition_by_client(), run one processor per partition and combine
        them with LedgerProcessor.merge().

    Example:
        processor = LedgerProcessor()
        processor.process_records([
            {"type": "deposit", "client": "1", "tx": "1", "amount": "1.0"},
            {"type": "withdrawal", "client": "1", "tx": "2", "amount": "0.5"},
        ])
        processor.rows()
        # [{'client': '1', 'available': '0.5000', 'held': '0.0000',
        #   'total': '0.5000', 'locked': 'false'}]
    """

    def __init__(
        self,
        verbose: bool = False,
        freeze_locked: bool = True,
        error_sink: Optional[ErrorSink] = None,
    ):
        """
        Create an empty processor.

        Args:
            verbose: Print a line for every ignored, duplicate or undecodable
                     transaction (default: False)
            freeze_locked: Passed to every ClientLedger; locked accounts ignore
                           deposits and withdrawals (default: True)
            error_sink: Called with (record, error) for each decode failure.
                        Defaults to appending to self.errors.
        """
        self.verbose = verbose
        self.freeze_locked = freeze_locked
        self._clients: Dict[int, ClientLedger] = {}
        self.seen_transaction_ids: Set[int] = set()
        self.errors: List[tuple] = []
        self._error_sink: ErrorSink = error_sink or self._collect_error

    # ========================================================================
    # CLIENT ACCESS
    # ========================================================================

    def get_client(self, client_id: int) -> Optional[ClientLedger]:
        return self._clients.get(client_id)

    def _get_or_create_client(self, client_id: int) -> ClientLedger:
        client = self._clients.get(client_id)
        if client is None:
            client = ClientLedger(client_id, freeze_locked=self.freeze_locked)
            self._clients[client_id] = client
        return client

    @property
    def clients(self) -> Iterator[ClientLedger]:
        """Client ledgers in the order their ids first appeared."""
        return iter(tuple(self._clients.values()))

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._clients

    # ========================================================================
    # PROCESSING (Mutating)
    # ========================================================================

    def process(self, tx: Transaction) -> ApplyResult:
        """
        Apply one transaction to its client's ledger.

        Returns:
            ApplyResult.APPLIED if the client's state changed
            ApplyResult.IGNORED if a precondition was not met
            ApplyResult.ALREADY_APPLIED if this deposit/withdrawal id was
            already applied earlier in the stream
        """
        client = self._get_or_create_client(tx.client_id)

        if tx.type.is_monetary and tx.id in self.seen_transaction_ids:
            if self.verbose:
                print(f"⚠️  ALREADY_APPLIED: {tx!r}")
            return ApplyResult.ALREADY_APPLIED

        result = HANDLERS[tx.type](client, tx)

        if result is ApplyResult.APPLIED and tx.type.is_monetary:
            self.seen_transaction_ids.add(tx.id)
        if result is ApplyResult.IGNORED and self.verbose:
            print(f"✗ IGNORED: {tx!r} on {client!r}")
        return result

    def process_all(self, transactions: Iterable[Transaction]) -> Dict[ApplyResult, int]:
        """
        Apply transactions in order.

        Returns:
            Count of each ApplyResult seen
        """
        counts: Counter = Counter()
        for tx in transactions:
            counts[self.process(tx)] += 1
        return dict(counts)

    def process_records(self, records: Iterable[Mapping[str, Any]]) -> Dict[ApplyResult, int]:
        """
        Decode and apply raw records in order.

        A record that fails to decode is sent to the error sink, counted as
        ApplyResult.REJECTED and skipped; processing continues with the next.

        Args:
            records: Mappings with the keys type, client, tx and amount

        Returns:
            Count of each ApplyResult seen
        """
        counts: Counter = Counter()
        for record in records:
            try:
                tx = decode_record(record)
            except DecodeError as e:
                self._report(record, e)
                counts[ApplyResult.REJECTED] += 1
                continue
            counts[self.process(tx)] += 1
        return dict(counts)

    def _report(self, record: Mapping[str, Any], error: DecodeError) -> None:
        if self.verbose:
            print(f"✗ REJECTED: {error}", file=sys.stderr)
        self._error_sink(record, error)

    def _collect_error(self, record: Mapping[str, Any], error: DecodeError) -> None:
        self.errors.append((record, error))

    # ========================================================================
    # OUTPUT
    # ========================================================================

    def snapshots(self) -> List[ClientSnapshot]:
        """Snapshots of every client, in first-seen order."""
        return [client.snapshot() for client in self._clients.values()]

    def rows(self) -> List[Dict[str, str]]:
        """Snapshots rendered as string rows for an external encoder."""
        return [snap.as_row() for snap in self.snapshots()]

    def verify_balances(self) -> Dict[str, Any]:
        """
        Verify total == available + held for every client.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every client satisfies the invariant
            - 'discrepancies': List[Dict] - client, available, held, total
              for each violating client
        """
        discrepancies = []
        for client in self._clients.values():
            if client.total != client.available + client.held:
                discrepancies.append({
                    'client': client.id,
                    'available': client.available,
                    'held': client.held,
                    'total': client.total,
                })
        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }

    # ========================================================================
    # PARTITIONING
    # ========================================================================

    @classmethod
    def merge(cls, processors: Iterable[LedgerProcessor], **kwargs) -> LedgerProcessor:
        """
        Combine processors that each handled a disjoint set of clients.

        Client ledgers are moved, not copied, into the new processor; the
        inputs should not be used afterwards.

        Args:
            processors: Processors built from partition_by_client() output
            **kwargs: Constructor arguments for the merged processor

        Raises:
            LedgerError: If two processors own the same client id
        """
        merged = cls(**kwargs)
        for processor in processors:
            for client_id, client in processor._clients.items():
                if client_id in merged._clients:
                    raise LedgerError(f"Client {client_id} present in more than one partition")
                merged._clients[client_id] = client
            merged.seen_transaction_ids |= processor.seen_transaction_ids
            merged.errors.extend(processor.errors)
        return merged


def partition_by_client(transactions: Iterable[Transaction]) -> Dict[int, List[Transaction]]:
    """
    Split a stream by client id, keeping input order inside each partition.

    Clients never interact, so each partition can be replayed independently.
    Deposit/withdrawal ids are assumed unique across the whole stream; a
    duplicate id spread over two clients is only caught within one processor.
    """
    partitions: Dict[int, List[Transaction]] = {}
    for tx in transactions:
        partitions.setdefault(tx.client_id, []).append(tx)
    return partitions
