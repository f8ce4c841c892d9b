"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Accounts, collection addresses, amounts and prices
- factories: Protocol, collection, fee and trade factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    BUYER,
    CAROL,
    DAVE,
    DEEP_LIQUIDITY,
    DEPOSITOR,
    LIMIT_DOWN,
    LIMIT_UP,
    NATIVE,
    NFT,
    NFT_HIGH,
    ONE_ETH,
    ONE_TOKEN,
    OWNER,
    PRICE_ONE,
    TOKEN,
    TOKEN_HIGH,
    TRADER,
)
from tests.helpers.factories import (
    add_collection,
    buy_params,
    deposit_holders,
    fund_trader,
    make_protocol,
    seed_fees,
    sell_params,
)

__all__ = [
    # Constants
    "OWNER",
    "ALICE",
    "BOB",
    "CAROL",
    "DAVE",
    "TRADER",
    "DEPOSITOR",
    "BUYER",
    "NFT",
    "TOKEN",
    "NFT_HIGH",
    "TOKEN_HIGH",
    "NATIVE",
    "ONE_TOKEN",
    "ONE_ETH",
    "PRICE_ONE",
    "DEEP_LIQUIDITY",
    "LIMIT_UP",
    "LIMIT_DOWN",
    # Factories
    "make_protocol",
    "add_collection",
    "seed_fees",
    "fund_trader",
    "buy_params",
    "sell_params",
    "deposit_holders",
]
