"""Engine and token error taxonomy."""
from __future__ import annotations


class EngineError(Exception):
    """Base class for every failure raised by the position engine."""


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class AmountMustBeMoreThanZero(EngineError):
    def __init__(self, amount: int) -> None:
        self.amount = amount
        super().__init__(f"Amount must be more than zero, got {amount}")


class TokenNotAllowed(EngineError):
    def __init__(self, asset: str) -> None:
        self.asset = asset
        super().__init__(f"Asset '{asset}' is not an accepted collateral")


class ConfigurationMismatch(EngineError):
    def __init__(self, tokens: int, feeds: int) -> None:
        self.tokens = tokens
        self.feeds = feeds
        super().__init__(
            f"Token and price feed lists must be the same length ({tokens} != {feeds})"
        )


class InsufficientCollateral(EngineError):
    def __init__(
        self, participant: str, asset: str, requested: int, available: int
    ) -> None:
        self.participant = participant
        self.asset = asset
        self.requested = requested
        self.available = available
        super().__init__(
            f"'{participant}' holds {available} {asset} collateral, {requested} requested"
        )


class BurnAmountExceedsDebt(EngineError):
    def __init__(self, participant: str, requested: int, available: int) -> None:
        self.participant = participant
        self.requested = requested
        self.available = available
        super().__init__(
            f"'{participant}' owes {available}, cannot burn {requested}"
        )


# ---------------------------------------------------------------------------
# Invariant
# ---------------------------------------------------------------------------


class HealthFactorBroken(EngineError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"Health factor broken: {health_factor}")


# ---------------------------------------------------------------------------
# External dependencies
# ---------------------------------------------------------------------------


class TransferFailed(EngineError):
    def __init__(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        self.asset = asset
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        super().__init__(
            f"Transfer of {amount} {asset} from '{sender}' to '{recipient}' failed"
        )


class MintFailed(EngineError):
    def __init__(self, recipient: str, amount: int) -> None:
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"Minting {amount} to '{recipient}' failed")


class OracleUnavailable(EngineError):
    def __init__(self, asset: str, reason: str) -> None:
        self.asset = asset
        self.reason = reason
        super().__init__(f"Price for '{asset}' unavailable: {reason}")


# ---------------------------------------------------------------------------
# Liquidation
# ---------------------------------------------------------------------------


class HealthFactorOk(EngineError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(f"Position is healthy ({health_factor}), cannot liquidate")


class HealthFactorNotImproved(EngineError):
    def __init__(self, health_factor: int) -> None:
        self.health_factor = health_factor
        super().__init__(
            f"Liquidation did not improve health factor (ended at {health_factor})"
        )


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class ReentrantCall(EngineError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Re-entrant call into '{operation}' rejected")


# ---------------------------------------------------------------------------
# Token collaborators
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """Raised by the in-memory token ledgers for their own preconditions."""


class InsufficientBalance(TokenError):
    def __init__(self, symbol: str, holder: str, requested: int, available: int) -> None:
        self.symbol = symbol
        self.holder = holder
        self.requested = requested
        self.available = available
        super().__init__(
            f"'{holder}' holds {available} {symbol}, {requested} requested"
        )


class NotOwner(TokenError):
    def __init__(self, symbol: str, caller: str) -> None:
        self.symbol = symbol
        self.caller = caller
        super().__init__(f"'{caller}' is not the owner of {symbol}")


class InvalidRecipient(TokenError):
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        super().__init__(f"{symbol}: recipient must not be empty")
