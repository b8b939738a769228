"""
conftest.py - Shared pytest fixtures for txledger tests

Provides common fixtures used across unit and conformance tests:
- Transaction factories
- Client ledgers in the states used by the literal scenarios
- Processors (quiet, verbose)
"""

import pytest
from decimal import Decimal

from txledger import (
    ClientLedger, LedgerProcessor, FixedPointAmount,
    Transaction, TransactionType,
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def make_tx(tx_type: TransactionType, tx_id: int, client_id: int = 0, amount=None) -> Transaction:
    """Create a transaction; amount may be any Decimal-like value."""
    if amount is not None and not isinstance(amount, FixedPointAmount):
        amount = FixedPointAmount.from_decimal(amount)
    return Transaction(id=tx_id, client_id=client_id, type=tx_type, amount=amount)


def balances(client: ClientLedger) -> tuple:
    """(available, held, total, locked) as display strings / bool."""
    return (str(client.available), str(client.held), str(client.total), client.locked)


# =============================================================================
# TRANSACTION FIXTURES
# =============================================================================

@pytest.fixture
def tx():
    """Factory fixture: tx(TransactionType.DEPOSIT, 0, 0, "2.0")."""
    return make_tx


@pytest.fixture
def balances_of():
    return balances


# =============================================================================
# CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def empty_client():
    """Fresh client 0 with zero balances."""
    return ClientLedger(0)


@pytest.fixture
def funded_client():
    """Client 0 after depositing 2.0000 as tx 0."""
    client = ClientLedger(0)
    client.deposit(make_tx(TransactionType.DEPOSIT, 0, 0, Decimal("2.0")))
    return client


@pytest.fixture
def disputed_client(funded_client):
    """Funded client with tx 0 under dispute."""
    funded_client.dispute(make_tx(TransactionType.DISPUTE, 0, 0))
    return funded_client


@pytest.fixture
def withdrawn_client():
    """Client 0 after depositing 2.0000 (tx 0) and withdrawing 2.0000 (tx 1)."""
    client = ClientLedger(0)
    client.deposit(make_tx(TransactionType.DEPOSIT, 0, 0, Decimal("2.0")))
    client.withdraw(make_tx(TransactionType.WITHDRAWAL, 1, 0, Decimal("2.0")))
    return client


# =============================================================================
# PROCESSOR FIXTURES
# =============================================================================

@pytest.fixture
def processor():
    """Quiet processor with default configuration."""
    return LedgerProcessor(verbose=False)


@pytest.fixture
def verbose_processor():
    return LedgerProcessor(verbose=True)
