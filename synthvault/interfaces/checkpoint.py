"""Checkpointable protocol: state that can be rolled back after a failed call."""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Checkpointable(Protocol):
    """Collaborator whose state is captured and restored around engine calls."""

    def checkpoint(self) -> Any: ...

    def restore(self, state: Any) -> None: ...
