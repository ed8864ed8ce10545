"""Token protocols: collateral and debt token ledgers."""
from typing import Protocol


class CollateralToken(Protocol):
    """Fungible collateral token the engine takes custody of."""

    @property
    def symbol(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def balance_of(self, holder: str) -> int: ...

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool: ...


class DebtToken(Protocol):
    """Synthetic debt token; the engine is its only minter and burner."""

    @property
    def symbol(self) -> str: ...

    def balance_of(self, holder: str) -> int: ...

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool: ...

    def mint(self, caller: str, to: str, amount: int) -> bool: ...

    def burn(self, caller: str, amount: int) -> None: ...
