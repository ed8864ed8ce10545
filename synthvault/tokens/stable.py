"""Pegged synthetic debt token, mintable and burnable by its owner only."""
from __future__ import annotations

import logging

from ..errors import AmountMustBeMoreThanZero, InvalidRecipient, NotOwner
from .ledger import TokenLedger

logger = logging.getLogger(__name__)


class StableToken(TokenLedger):
    """Debt token whose owner (the engine's custody identity) controls supply."""

    def __init__(self, owner: str, symbol: str = "DSC", decimals: int = 18) -> None:
        super().__init__(symbol, decimals)
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def _only_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise NotOwner(self.symbol, caller)

    def mint(self, caller: str, to: str, amount: int) -> bool:
        self._only_owner(caller)
        if not to:
            raise InvalidRecipient(self.symbol)
        if amount <= 0:
            raise AmountMustBeMoreThanZero(amount)
        self.mint_to(to, amount)
        return True

    def burn(self, caller: str, amount: int) -> None:
        """Destroy ``amount`` from the owner's own balance."""
        self._only_owner(caller)
        if amount <= 0:
            raise AmountMustBeMoreThanZero(amount)
        self._burn_from(caller, amount)
        logger.debug("%s: burned %d", self.symbol, amount)
