"""In-memory fungible and non-fungible token ledgers."""

from __future__ import annotations

from flayer.errors import InsufficientAllowance, InsufficientBalance, ValidationError
from flayer.journal import StateHolder
from flayer.models.types import normalize_address


class InMemoryToken(StateHolder):
    """ERC20-style balance ledger.

    Attributes:
        address: Token address
        symbol: Display symbol
    """

    def __init__(self, address: str, symbol: str = "", denomination: int = 0) -> None:
        self.address = normalize_address(address, validate=True)
        self.symbol = symbol
        self._denomination = denomination
        self._total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol or self.address})"

    def denomination(self) -> int:
        return self._denomination

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError(f"Negative allowance: {amount}")
        self._allowances[(normalize_address(owner), normalize_address(spender))] = amount

    def mint(self, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError(f"Negative mint: {amount}")
        recipient = normalize_address(recipient)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self._total_supply += amount

    def burn(self, account: str, amount: int) -> None:
        account = normalize_address(account)
        self._debit(account, amount)
        self._total_supply -= amount

    def burn_from(self, spender: str, account: str, amount: int) -> None:
        self._spend_allowance(account, spender, amount)
        self.burn(account, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        sender, recipient = normalize_address(sender), normalize_address(recipient)
        self._debit(sender, amount)
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        self._spend_allowance(owner, spender, amount)
        self.transfer(owner, recipient, amount)

    def _debit(self, account: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError(f"Negative amount: {amount}")
        balance = self._balances.get(account, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"{self!r}: {account} holds {balance}, needs {amount}"
            )
        self._balances[account] = balance - amount

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        key = (normalize_address(owner), normalize_address(spender))
        # The owner moving its own tokens needs no allowance
        if key[0] == key[1]:
            return
        allowed = self._allowances.get(key, 0)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{self!r}: {spender} may spend {allowed} of {owner}, needs {amount}"
            )
        self._allowances[key] = allowed - amount


class InMemoryNft(StateHolder):
    """ERC721-style ownership ledger."""

    def __init__(self, address: str, symbol: str = "") -> None:
        self.address = normalize_address(address, validate=True)
        self.symbol = symbol
        self._owners: dict[int, str] = {}

    def __repr__(self) -> str:
        return f"InMemoryNft({self.symbol or self.address})"

    def mint(self, recipient: str, token_id: int) -> None:
        if token_id in self._owners:
            raise ValidationError(f"{self!r}: token {token_id} already minted")
        self._owners[token_id] = normalize_address(recipient)

    def owner_of(self, token_id: int) -> str | None:
        return self._owners.get(token_id)

    def tokens_of(self, owner: str) -> list[int]:
        owner = normalize_address(owner)
        return sorted(token_id for token_id, o in self._owners.items() if o == owner)

    def transfer_from(self, sender: str, recipient: str, token_id: int) -> None:
        if self._owners.get(token_id) != normalize_address(sender):
            raise InsufficientBalance(f"{self!r}: {sender} does not own token {token_id}")
        self._owners[token_id] = normalize_address(recipient)
