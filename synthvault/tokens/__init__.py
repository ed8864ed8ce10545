"""In-memory token ledgers."""
from .ledger import TokenLedger
from .stable import StableToken

__all__ = ["StableToken", "TokenLedger"]
