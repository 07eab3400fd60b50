from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .response import Response


class ChiselError(Exception):
    """Base class for every error raised by the engine."""


class RegistrationError(ChiselError, ValueError):
    """A module class was rejected by Engine.register()."""


class EngineStateError(ChiselError, RuntimeError):
    """The engine was used in a state that does not allow the operation."""


class EngineRunningError(EngineStateError):
    pass


class EngineDisposedError(EngineStateError):
    pass


class TransportError(ChiselError):
    """Connection-level failure while fetching a target (retryable)."""


class TransportTimeout(TransportError):
    pass


class UnacceptableStatusError(ChiselError):
    """A response arrived but the module's status predicate rejected it (retryable)."""

    def __init__(self, response: "Response") -> None:
        self.response = response
        super().__init__(f"unacceptable status {response}")

    @property
    def status_code(self) -> int:
        return self.response.status_code


class ModuleCancelled(ChiselError):
    """The run was cancelled before the next target could be fetched."""

    def __init__(self, url: Optional[str] = None) -> None:
        self.url = url
        super().__init__(f"cancelled before fetching {url}" if url else "cancelled")
