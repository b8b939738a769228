"""
txledger - Per-client Transaction Ledger Engine

Applies an ordered stream of deposits, withdrawals, disputes, resolves and
chargebacks to per-client balances using exact fixed-point arithmetic.

Usage:
    from txledger import LedgerProcessor, decode_transaction

    processor = LedgerProcessor()
    processor.process(decode_transaction("deposit", 1, 1, "2.0"))
    processor.process(decode_transaction("dispute", 1, 1))

    for row in processor.rows():
        print(row)
    # {'client': '1', 'available': '0.0000', 'held': '2.0000',
    #  'total': '2.0000', 'locked': 'false'}
"""

# Fixed-point amounts
from .amount import (
    FixedPointAmount,
    add,
    subtract,
    greater_than_zero,
    greater_or_equal,
    format_amount,
    SCALE,
)

# Core types
from .core import (
    Transaction,
    TransactionType,
    DisputeStatus,
    ApplyResult,
    ClientSnapshot,
    LedgerError,
    DecodeError,
    InvalidTransactionType,
    InvalidTransaction,
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    SNAPSHOT_FIELDS,
)

# Decoding
from .decode import decode_transaction, decode_record

# Client ledger
from .client import ClientLedger

# Processor
from .processor import LedgerProcessor, partition_by_client, HANDLERS

__all__ = [
    # Amounts
    'FixedPointAmount', 'add', 'subtract', 'greater_than_zero', 'greater_or_equal',
    'format_amount', 'SCALE',
    # Core
    'Transaction', 'TransactionType', 'DisputeStatus', 'ApplyResult', 'ClientSnapshot',
    'LedgerError', 'DecodeError', 'InvalidTransactionType', 'InvalidTransaction',
    'MAX_CLIENT_ID', 'MAX_TRANSACTION_ID', 'SNAPSHOT_FIELDS',
    # Decoding
    'decode_transaction', 'decode_record',
    # Client ledger
    'ClientLedger',
    # Processor
    'LedgerProcessor', 'partition_by_client', 'HANDLERS',
]

__version__ = '1.0.0'
