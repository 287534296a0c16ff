#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Launch a Bonding-Curve Token Step by Step

Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:   Setup           - The substrate, the reserve account, initialization
  4-6:   Trading         - Buying up the curve, rejections, selling with slippage
  7-8:   Controller      - Withdrawals and under-collateralization
  9:     What-if         - Cloning a launcher to try operations safely

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from launcher import (
    # Core classes
    Launcher, InMemoryAssetLedger,
    # Constants
    SYSTEM_WALLET, DEFAULT_BASE_PRICE,
    # Pricing
    compute_price, price_curve, is_non_decreasing,
    # Errors
    LauncherError,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    asset_id: str = "PUMP"
    controller: str = "issuer"
    decimals: int = 0
    max_supply: int = 1_000_000
    initial_price: int = DEFAULT_BASE_PRICE

    # Initial funding in lamports
    alice_initial: int = 10 ** 15
    bob_initial: int = 10 ** 15

    alice_buy: int = 250_000 * 1_000_000
    alice_sell: int = 100_000


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_state(launcher: Launcher):
    record = launcher.get_record(CONFIG.asset_id)
    print(f"Issued:             {record.total_issued:,} / {record.max_supply:,}")
    print(f"Current price:      {record.current_price:,}")
    print(f"Reserve collected:  {record.reserve_collected:,}")
    print(f"Reserve balance:    {launcher.accounts.reserve_balance(CONFIG.asset_id):,}")


# ============================================================================
# PHASE 1: SETUP
# ============================================================================

def step_01_substrate():
    """Create the in-memory substrate and fund the buyers."""
    step_header(1, "The Substrate",
        "The launcher never holds balances itself; a substrate does.")

    print("""
    The substrate moves currency and mints or burns tokens. The launcher only
    decides WHAT to move. Currency enters through the system wallet, so the
    sum over all wallets is zero for every symbol.
    """)

    wait_for_enter()

    print(">>> accounts = InMemoryAssetLedger('devnet', verbose=True)")
    accounts = InMemoryAssetLedger("devnet", verbose=True)
    for wallet in ("alice", "bob", CONFIG.controller):
        accounts.register_wallet(wallet)
    accounts.fund("alice", CONFIG.alice_initial)
    accounts.fund("bob", CONFIG.bob_initial)

    section_header("Initial State")
    print(f"Registered wallets: {sorted(accounts.list_wallets())}")
    print(f"System balance:     {accounts.get_balance(SYSTEM_WALLET, accounts.currency):,}")
    return accounts


def step_02_reserve(accounts: InMemoryAssetLedger):
    """Register the asset and its reserve account."""
    step_header(2, "The Reserve",
        "Every asset gets a dedicated reserve wallet that holds buyers' payments.")

    print(f">>> accounts.register_asset('{CONFIG.asset_id}')")
    reserve = accounts.register_asset(CONFIG.asset_id)
    print(f"\nReserve account: {reserve}")
    return accounts


def step_03_initialize(accounts: InMemoryAssetLedger):
    """Create the issuance record."""
    step_header(3, "Initialization",
        "The record fixes the controller, decimals and the supply cap for good.")

    launcher = Launcher(accounts, name="tutorial")
    launcher.initialize(
        CONFIG.controller, CONFIG.asset_id,
        decimals=CONFIG.decimals,
        initial_price=CONFIG.initial_price,
        max_supply=CONFIG.max_supply,
        name="Pump Token", symbol=CONFIG.asset_id,
    )

    section_header("The Curve")
    issued, prices = price_curve(CONFIG.max_supply, points=11)
    for level, price in zip(issued, prices):
        print(f"  issued {level:>9,}  ->  price {price:,}")
    print(f"\nNon-decreasing: {is_non_decreasing(prices)}")
    return launcher


# ============================================================================
# PHASE 2: TRADING
# ============================================================================

def step_04_buy(launcher: Launcher):
    step_header(4, "Buying",
        "Payment is converted at the current price, then the price moves up.")

    launcher.buy(CONFIG.asset_id, "alice", CONFIG.alice_buy)
    section_header("After Alice's Buy")
    show_state(launcher)

    quote = launcher.quote_buy(CONFIG.asset_id, CONFIG.alice_buy)
    print(f"\nThe same payment now buys only {quote.token_units:,} units.")
    return launcher


def step_05_rejections(launcher: Launcher):
    step_header(5, "Rejections",
        "A rejected operation changes nothing, on the record or the substrate.")

    before = launcher.get_record(CONFIG.asset_id)
    for description, attempt in (
        ("payment below one token", lambda: launcher.buy(CONFIG.asset_id, "bob", 999)),
        ("buy past the cap", lambda: launcher.buy(CONFIG.asset_id, "bob", 10 ** 13)),
        ("withdraw by a stranger", lambda: launcher.withdraw(CONFIG.asset_id, "bob", 1)),
    ):
        print(f"\n>>> {description}")
        try:
            attempt()
        except LauncherError as exc:
            print(f"    raised {type(exc).__name__}")
    print(f"\nRecord unchanged: {launcher.get_record(CONFIG.asset_id) == before}")
    return launcher


def step_06_sell(launcher: Launcher):
    step_header(6, "Selling",
        "Sellers are paid at the current price minus slippage.")

    price = launcher.current_price(CONFIG.asset_id)
    receipt = launcher.sell(CONFIG.asset_id, "alice", CONFIG.alice_sell)
    print(f"\nGross value at {price:,}: {CONFIG.alice_sell * price:,}")
    print(f"Paid out:                 {receipt.currency_amount:,}")
    section_header("After Alice's Sell")
    show_state(launcher)
    expected = compute_price(launcher.get_record(CONFIG.asset_id).total_issued, CONFIG.max_supply)
    print(f"\nPrice matches the curve: {launcher.current_price(CONFIG.asset_id) == expected}")
    return launcher


# ============================================================================
# PHASE 3: CONTROLLER
# ============================================================================

def step_07_withdraw(launcher: Launcher):
    step_header(7, "Withdrawal",
        "The controller may take currency out of the reserve.")

    amount = launcher.accounts.reserve_balance(CONFIG.asset_id) // 2
    launcher.withdraw(CONFIG.asset_id, CONFIG.controller, amount)
    show_state(launcher)
    return launcher


def step_08_collateral(launcher: Launcher):
    step_header(8, "Collateral",
        "Withdrawals do not reduce reserve_collected, so backing can fall short.")

    result = launcher.verify_invariants(CONFIG.asset_id)
    for key in ('valid', 'reserve_collected', 'reserve_balance', 'collateral_shortfall'):
        print(f"{key:<22}{result[key]}")
    return launcher


# ============================================================================
# PHASE 4: WHAT-IF
# ============================================================================

def step_09_what_if(launcher: Launcher):
    step_header(9, "What-if on a Clone",
        "A clone has its own substrate; nothing done to it reaches the original.")

    what_if = launcher.clone()
    what_if.verbose = False
    held = what_if.accounts.get_balance("alice", CONFIG.asset_id)
    try:
        what_if.sell(CONFIG.asset_id, "alice", held)
        print(f"Clone: alice could sell all {held:,} units")
    except LauncherError as exc:
        print(f"Clone: selling all {held:,} units fails with {type(exc).__name__}")
    print(f"Original issued supply: {launcher.get_record(CONFIG.asset_id).total_issued:,}")


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       TOKEN LAUNCHER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    accounts = step_01_substrate()
    wait_for_enter()

    accounts = step_02_reserve(accounts)
    wait_for_enter()

    launcher = step_03_initialize(accounts)
    wait_for_enter()

    launcher = step_04_buy(launcher)
    wait_for_enter()

    launcher = step_05_rejections(launcher)
    wait_for_enter()

    launcher = step_06_sell(launcher)
    wait_for_enter()

    launcher = step_07_withdraw(launcher)
    wait_for_enter()

    launcher = step_08_collateral(launcher)
    wait_for_enter()

    step_09_what_if(launcher)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - Run tests: pytest tests/
      - Read DESIGN.md for how the pieces fit together
    """)


if __name__ == "__main__":
    main()
