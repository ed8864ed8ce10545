"""Collateral and debt ledgers: the engine's own bookkeeping."""
from __future__ import annotations

from ..errors import BurnAmountExceedsDebt, InsufficientCollateral


class CollateralLedger:
    """Deposited amount per (participant, asset); missing entries read as zero."""

    def __init__(self) -> None:
        self._deposits: dict[str, dict[str, int]] = {}

    def balance_of(self, participant: str, asset: str) -> int:
        return self._deposits.get(participant, {}).get(asset, 0)

    def increase(self, participant: str, asset: str, amount: int) -> int:
        positions = self._deposits.setdefault(participant, {})
        positions[asset] = positions.get(asset, 0) + amount
        return positions[asset]

    def decrease(self, participant: str, asset: str, amount: int) -> int:
        available = self.balance_of(participant, asset)
        if amount > available:
            raise InsufficientCollateral(participant, asset, amount, available)
        self._deposits[participant][asset] = available - amount
        return available - amount

    def checkpoint(self) -> dict[str, dict[str, int]]:
        return {p: dict(positions) for p, positions in self._deposits.items()}

    def restore(self, state: dict[str, dict[str, int]]) -> None:
        self._deposits = {p: dict(positions) for p, positions in state.items()}


class DebtLedger:
    """Minted debt per participant."""

    def __init__(self) -> None:
        self._minted: dict[str, int] = {}

    def debt_of(self, participant: str) -> int:
        return self._minted.get(participant, 0)

    def increase(self, participant: str, amount: int) -> int:
        self._minted[participant] = self.debt_of(participant) + amount
        return self._minted[participant]

    def decrease(self, participant: str, amount: int) -> int:
        available = self.debt_of(participant)
        if amount > available:
            raise BurnAmountExceedsDebt(participant, amount, available)
        self._minted[participant] = available - amount
        return available - amount

    def checkpoint(self) -> dict[str, int]:
        return dict(self._minted)

    def restore(self, state: dict[str, int]) -> None:
        self._minted = dict(state)
