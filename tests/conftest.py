"""
conftest.py - Shared pytest fixtures for launcher tests

Provides common fixtures used across unit, conformance and functional tests:
- Substrates (funded in-memory ledger, fake with failure injection)
- Launchers (whole-token asset, 6-decimal asset, launcher on the fake)
"""

import pytest

from launcher import Launcher, IssuanceRecord

from tests.builders import (
    ASSET, CONTROLLER, BASE_PRICE, MAX_SUPPLY,
    build_accounts, build_launcher,
)
from tests.fake_asset_ledger import FakeAssetLedger


# =============================================================================
# SUBSTRATE FIXTURES
# =============================================================================

@pytest.fixture
def accounts():
    """In-memory substrate with TOK registered and alice/bob/mallory funded."""
    return build_accounts()


@pytest.fixture
def fake_accounts():
    """Fake substrate: alice holds 10^12 currency, nothing else."""
    return FakeAssetLedger(currency={"alice": 10 ** 12})


# =============================================================================
# LAUNCHER FIXTURES
# =============================================================================

@pytest.fixture
def launcher():
    """Whole-token asset (decimals=0), max supply 1,000,000, price 1,000,000."""
    return build_launcher()


@pytest.fixture
def decimal_launcher():
    """6-decimal asset with a cap of 1,000 whole tokens."""
    return build_launcher(decimals=6, max_supply=1_000 * 10 ** 6)


@pytest.fixture
def fake_launcher(fake_accounts):
    """Launcher over the fake substrate, TOK initialized with decimals=0."""
    launcher = Launcher(fake_accounts, verbose=False)
    launcher.initialize(
        CONTROLLER, ASSET, decimals=0,
        initial_price=BASE_PRICE, max_supply=MAX_SUPPLY,
    )
    return launcher


@pytest.fixture
def record():
    """Fresh issuance record, not stored anywhere."""
    return IssuanceRecord(
        controller=CONTROLLER,
        asset_id=ASSET,
        decimals=0,
        current_price=BASE_PRICE,
        max_supply=MAX_SUPPLY,
    )
