"""Plain fungible-token balance book."""
from __future__ import annotations

import logging

from ..errors import InsufficientBalance, InvalidRecipient

logger = logging.getLogger(__name__)


class TokenLedger:
    """Fungible token balances keyed by holder. Balances never go negative."""

    def __init__(self, symbol: str, decimals: int = 18) -> None:
        self._symbol = symbol
        self._decimals = decimals
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def decimals(self) -> int:
        return self._decimals

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def total_supply(self) -> int:
        return self._total_supply

    def holders(self) -> list[str]:
        return list(self._balances)

    def mint_to(self, to: str, amount: int) -> None:
        """Create ``amount`` new units for ``to`` (faucet for tests and scenarios)."""
        if not to:
            raise InvalidRecipient(self._symbol)
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        logger.debug("%s: minted %d to %s", self._symbol, amount, to)

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``sender`` to ``recipient``.

        Returns False (and moves nothing) when the sender's balance is too low.
        """
        if not recipient:
            raise InvalidRecipient(self._symbol)
        available = self.balance_of(sender)
        if amount > available:
            logger.debug(
                "%s: transfer of %d from %s rejected (balance %d)",
                self._symbol, amount, sender, available,
            )
            return False
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def _burn_from(self, holder: str, amount: int) -> None:
        available = self.balance_of(holder)
        if amount > available:
            raise InsufficientBalance(self._symbol, holder, amount, available)
        self._balances[holder] = available - amount
        self._total_supply -= amount

    # ------------------------------------------------------------------
    # Checkpointable
    # ------------------------------------------------------------------

    def checkpoint(self) -> tuple[dict[str, int], int]:
        return dict(self._balances), self._total_supply

    def restore(self, state: tuple[dict[str, int], int]) -> None:
        balances, total_supply = state
        self._balances = dict(balances)
        self._total_supply = total_supply
