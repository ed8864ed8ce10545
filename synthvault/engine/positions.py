"""Position engine: deposit, mint, burn and redeem with solvency enforcement."""
from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from ..config import EngineConfig, validate_engine
from ..errors import (
    AmountMustBeMoreThanZero,
    MintFailed,
    ReentrantCall,
    TokenError,
    TransferFailed,
)
from ..interfaces.checkpoint import Checkpointable
from ..interfaces.price_feed import PriceFeed
from ..interfaces.token import CollateralToken, DebtToken
from ..models import (
    AccountInformation,
    CollateralDeposited,
    CollateralRedeemed,
    EngineEvent,
    Liquidation,
)
from .health import HealthFactorEvaluator
from .ledgers import CollateralLedger, DebtLedger
from .liquidation import LiquidationEngine
from .registry import Asset, SystemRegistry
from .valuation import ValuationEngine

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def nonreentrant(method: F) -> F:
    """Reject calls into any guarded operation while another one is running."""

    @functools.wraps(method)
    def wrapper(self: PositionEngine, *args: Any, **kwargs: Any) -> Any:
        if self._entered:
            raise ReentrantCall(method.__name__)
        self._entered = True
        try:
            return method(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper  # type: ignore[return-value]


class PositionEngine:
    """Collateral and debt accounting for every participant.

    Each public state-changing operation is atomic: ledger mutations, recorded
    events and the state of checkpointable token collaborators are restored
    if anything inside the call raises. Ledger updates come first, health
    checks next, token movements last.
    """

    def __init__(
        self,
        registry: SystemRegistry,
        debt_token: DebtToken,
        config: EngineConfig | None = None,
    ) -> None:
        config = config or EngineConfig()
        validate_engine(config)

        self._config = config
        self._registry = registry
        self._debt_token = debt_token
        self._custody = config.custody

        self._collateral = CollateralLedger()
        self._debt = DebtLedger()
        self._events: list[EngineEvent] = []
        self._entered = False

        self._valuation = ValuationEngine(registry)
        self._health = HealthFactorEvaluator(
            registry,
            self._valuation,
            self._collateral,
            self._debt,
            threshold_pct=config.liquidation_threshold_pct,
            precision=config.precision,
            min_health_factor=config.min_health_factor,
        )
        self._liquidation = LiquidationEngine(
            self._health,
            self._valuation,
            bonus_pct=config.liquidation_bonus_pct,
            debit_collateral=self._debit_collateral,
            send_collateral=self._send_collateral,
            settle_debt=self._burn,
            record=self._events.append,
        )

    # ------------------------------------------------------------------
    # Atomicity
    # ------------------------------------------------------------------

    def _collaborators(self) -> list[Checkpointable]:
        candidates: list[Any] = [self._debt_token] + [a.token for a in self._registry]
        found: list[Checkpointable] = []
        for c in candidates:
            if isinstance(c, Checkpointable) and not any(c is f for f in found):
                found.append(c)
        return found

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        collaborators = self._collaborators()
        saved = (
            self._collateral.checkpoint(),
            self._debt.checkpoint(),
            len(self._events),
            [c.checkpoint() for c in collaborators],
        )
        try:
            yield
        except Exception as e:
            collateral, debt, n_events, states = saved
            self._collateral.restore(collateral)
            self._debt.restore(debt)
            del self._events[n_events:]
            for c, state in zip(collaborators, states):
                c.restore(state)
            logger.warning("%s rolled back: %s", operation, e)
            raise

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    @staticmethod
    def _require_positive(amount: int) -> None:
        if amount <= 0:
            raise AmountMustBeMoreThanZero(amount)

    def _transfer(
        self,
        token: CollateralToken | DebtToken,
        sender: str,
        recipient: str,
        amount: int,
    ) -> None:
        """Move tokens; a raising token fails the same way as one returning False."""
        try:
            moved = token.transfer_from(sender, recipient, amount)
        except TokenError as e:
            raise TransferFailed(token.symbol, sender, recipient, amount) from e
        if not moved:
            raise TransferFailed(token.symbol, sender, recipient, amount)

    def _deposit(self, participant: str, asset: str, amount: int) -> None:
        self._require_positive(amount)
        entry = self._registry.get(asset)

        self._collateral.increase(participant, asset, amount)
        self._events.append(CollateralDeposited(participant, asset, amount))

        self._transfer(entry.token, participant, self._custody, amount)

    def _mint(self, participant: str, amount: int) -> None:
        self._require_positive(amount)

        self._debt.increase(participant, amount)
        self._health.assert_healthy(participant)

        try:
            minted = self._debt_token.mint(self._custody, participant, amount)
        except TokenError as e:
            raise MintFailed(participant, amount) from e
        if not minted:
            raise MintFailed(participant, amount)

    def _burn(self, amount: int, on_behalf_of: str, funded_by: str) -> None:
        """Cancel ``on_behalf_of``'s debt with tokens pulled from ``funded_by``."""
        self._require_positive(amount)

        self._debt.decrease(on_behalf_of, amount)

        self._transfer(self._debt_token, funded_by, self._custody, amount)
        self._debt_token.burn(self._custody, amount)

    def _debit_collateral(
        self, asset: str, amount: int, redeemed_from: str, redeemed_to: str
    ) -> Asset:
        entry = self._registry.get(asset)
        self._collateral.decrease(redeemed_from, asset, amount)
        self._events.append(
            CollateralRedeemed(redeemed_from, redeemed_to, asset, amount)
        )
        return entry

    def _send_collateral(self, entry: Asset, recipient: str, amount: int) -> None:
        self._transfer(entry.token, self._custody, recipient, amount)

    def _redeem(self, participant: str, asset: str, amount: int) -> None:
        self._require_positive(amount)
        self._registry.get(asset)

        # A participant may not pull collateral out of an unhealthy position.
        self._health.assert_healthy(participant)
        entry = self._debit_collateral(asset, amount, participant, participant)
        if self._config.recheck_after_redeem:
            self._health.assert_healthy(participant)
        self._send_collateral(entry, participant, amount)

    # ------------------------------------------------------------------
    # State-changing operations
    # ------------------------------------------------------------------

    @nonreentrant
    def deposit_collateral(self, participant: str, asset: str, amount: int) -> None:
        with self._atomic("deposit_collateral"):
            self._deposit(participant, asset, amount)
        logger.info("%s deposited %d %s", participant, amount, asset)

    @nonreentrant
    def mint(self, participant: str, amount: int) -> None:
        with self._atomic("mint"):
            self._mint(participant, amount)
        logger.info("%s minted %d %s", participant, amount, self._debt_token.symbol)

    @nonreentrant
    def deposit_collateral_and_mint(
        self, participant: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        with self._atomic("deposit_collateral_and_mint"):
            self._deposit(participant, asset, collateral_amount)
            self._mint(participant, debt_amount)
        logger.info(
            "%s deposited %d %s and minted %d %s",
            participant, collateral_amount, asset,
            debt_amount, self._debt_token.symbol,
        )

    @nonreentrant
    def burn(self, participant: str, amount: int) -> None:
        with self._atomic("burn"):
            self._burn(amount, on_behalf_of=participant, funded_by=participant)
            self._health.assert_healthy(participant)
        logger.info("%s burned %d %s", participant, amount, self._debt_token.symbol)

    @nonreentrant
    def redeem_collateral(self, participant: str, asset: str, amount: int) -> None:
        with self._atomic("redeem_collateral"):
            self._redeem(participant, asset, amount)
        logger.info("%s redeemed %d %s", participant, amount, asset)

    @nonreentrant
    def redeem_collateral_for_debt(
        self, participant: str, asset: str, collateral_amount: int, debt_amount: int
    ) -> None:
        with self._atomic("redeem_collateral_for_debt"):
            self._burn(debt_amount, on_behalf_of=participant, funded_by=participant)
            self._redeem(participant, asset, collateral_amount)
        logger.info(
            "%s burned %d %s and redeemed %d %s",
            participant, debt_amount, self._debt_token.symbol,
            collateral_amount, asset,
        )

    @nonreentrant
    def liquidate(
        self, liquidator: str, collateral_asset: str, debtor: str, debt_to_cover: int
    ) -> Liquidation:
        """Repay ``debt_to_cover`` of an unhealthy ``debtor`` for bonus collateral."""
        with self._atomic("liquidate"):
            self._require_positive(debt_to_cover)
            self._registry.get(collateral_asset)
            record = self._liquidation.liquidate(
                liquidator, collateral_asset, debtor, debt_to_cover
            )
        logger.info(
            "%s liquidated %s: covered %d, seized %d %s",
            liquidator, debtor, record.debt_covered,
            record.collateral_seized, collateral_asset,
        )
        return record

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def collateral_balance_of(self, participant: str, asset: str) -> int:
        return self._collateral.balance_of(participant, asset)

    def debt_of(self, participant: str) -> int:
        return self._debt.debt_of(participant)

    def account_collateral_value(self, participant: str) -> int:
        return self._health.collateral_value(participant)

    def account_information(self, participant: str) -> AccountInformation:
        return AccountInformation(
            total_debt=self._debt.debt_of(participant),
            collateral_value=self._health.collateral_value(participant),
        )

    def health_factor(self, participant: str) -> int:
        return self._health.health_factor(participant)

    def calculate_health_factor(self, total_debt: int, collateral_value: int) -> int:
        return self._health.calculate_health_factor(total_debt, collateral_value)

    def value_of(self, asset: str, amount: int) -> int:
        return self._valuation.value_of(asset, amount)

    def amount_from_value(self, asset: str, value: int) -> int:
        return self._valuation.amount_from_value(asset, value)

    def collateral_assets(self) -> tuple[str, ...]:
        return self._registry.symbols

    def price_feed_of(self, asset: str) -> PriceFeed | None:
        if asset not in self._registry:
            return None
        return self._registry.oracle_of(asset).feed

    @property
    def events(self) -> tuple[EngineEvent, ...]:
        return tuple(self._events)

    @property
    def registry(self) -> SystemRegistry:
        return self._registry

    @property
    def debt_token(self) -> DebtToken:
        return self._debt_token

    @property
    def custody(self) -> str:
        return self._custody

    @property
    def precision(self) -> int:
        return self._config.precision

    @property
    def liquidation_threshold(self) -> int:
        return self._config.liquidation_threshold_pct

    @property
    def liquidation_bonus(self) -> int:
        return self._config.liquidation_bonus_pct

    @property
    def min_health_factor(self) -> int:
        return self._config.min_health_factor
