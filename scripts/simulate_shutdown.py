#!/usr/bin/env python3
"""Simulate a collection shutdown from start to claims.

Four holders each deposit one asset and receive one whole collection token.
Two of them vote the shutdown through, the owner executes it, the sweeper
pool sells every asset and the voters claim their share of the proceeds.

Usage:
    python scripts/simulate_shutdown.py
    python scripts/simulate_shutdown.py --holders 6 --voters 3 --sale-fraction 0.5 -v
"""

import argparse
import logging
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from flayer.protocol import build_protocol  # noqa: E402

logger = structlog.get_logger()

NFT_ADDRESS = "0x" + "11" * 20
TOKEN_ADDRESS = "0x" + "22" * 20
BUYER = "0x" + "99" * 20


def holder_address(index: int) -> str:
    return "0x" + f"{index + 1:040x}"


def simulate(holders: int, voters: int, sold: int, sale_fraction: float) -> dict[str, int]:
    """Run the scenario and return the payout per voter."""
    protocol = build_protocol()
    protocol.add_collection(NFT_ADDRESS, TOKEN_ADDRESS, symbol="SIM")
    nft = protocol.nft(NFT_ADDRESS)
    token = protocol.vault.collection_token(NFT_ADDRESS)
    assert token is not None

    for index in range(holders):
        holder = holder_address(index)
        nft.mint(holder, index)
        protocol.vault.deposit(holder, NFT_ADDRESS, [index])
        token.approve(holder, protocol.shutdown.address, token.balance_of(holder))

    protocol.shutdown.start(holder_address(0), NFT_ADDRESS)
    for index in range(1, voters):
        protocol.shutdown.vote(holder_address(index), NFT_ADDRESS)

    pool_address = protocol.shutdown.execute(protocol.owner, NFT_ADDRESS, list(range(sold)))
    pool = next(p for p in protocol.pool_factory.pools if p.address == pool_address)

    # Sell every asset once the price has decayed by sale_fraction
    protocol.runtime.clock.advance(int(protocol.shutdown.config.sweeper_duration * sale_fraction))
    protocol.native.mint(BUYER, pool.spot_price() * sold)
    for token_id in range(sold):
        pool.buy(BUYER, token_id)

    return {
        holder_address(index): protocol.shutdown.claim(holder_address(index), NFT_ADDRESS)
        for index in range(voters)
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate a collection shutdown")
    parser.add_argument("--holders", type=int, default=4, help="Holders with one token each")
    parser.add_argument("--voters", type=int, default=2, help="Holders that vote (default: 2)")
    parser.add_argument(
        "--sold",
        type=int,
        default=3,
        help="Assets sent to the sweeper pool (default: 3)",
    )
    parser.add_argument(
        "--sale-fraction",
        type=float,
        default=0.99,
        help="Fraction of the decay schedule elapsed before the sale (default: 0.99)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    if not 0 < args.voters <= args.holders or not 0 < args.sold <= args.holders:
        print("Error: need 0 < voters <= holders and 0 < sold <= holders")
        return 1

    payouts = simulate(args.holders, args.voters, args.sold, args.sale_fraction)

    print("=" * 60)
    print("Shutdown payouts")
    print("=" * 60)
    for voter, amount in payouts.items():
        print(f"{voter}: {amount / 10**18:.6f} ETH")
    print(f"Total: {sum(payouts.values()) / 10**18:.6f} ETH")
    return 0


if __name__ == "__main__":
    sys.exit(main())
