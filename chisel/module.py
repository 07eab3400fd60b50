from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .response import Response

BackoffProvider = Callable[[int, Optional[Response]], float]
StatusPredicate = Callable[[int], bool]
HeaderMap = Dict[str, Union[str, List[str]]]


def _accept_any(status_code: int) -> bool:
    return True


@dataclass
class ModuleSettings:
    """Per-module request settings.

    ``headers`` maps a header name to its values; a plain string is taken as a
    single value. ``retry_backoff_provider``, when set, receives the 1-based
    attempt number and the last response (``None`` after a transport failure)
    and returns the delay in seconds, replacing the min_backoff rule.
    """

    base_url: str = ""
    headers: HeaderMap = field(default_factory=dict)
    min_backoff: float = 2.0
    exponential_backoff: bool = True
    retry_backoff_provider: Optional[BackoffProvider] = None
    is_acceptable_status_code: StatusPredicate = _accept_any

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.min_backoff < 0:
            raise ValueError(f"min_backoff must be >= 0, got {self.min_backoff}")

    def header_lists(self) -> Dict[str, List[str]]:
        return {
            name: [values] if isinstance(values, str) else list(values)
            for name, values in self.headers.items()
        }

    def url_for(self, target: str) -> str:
        return f"{self.base_url}/{target}"


class ScrapeModule(ABC):
    """Base class for every scrape module.

    The engine creates a fresh instance per run with no arguments, calls
    ``init`` once, ``handle`` once per target in order, then exactly one of
    ``after_success`` / ``after_failure``. A module holding resources can
    define ``close()``; it is called once after the hook on every path.
    """

    def __init__(self) -> None:
        self.settings = ModuleSettings()

    @property
    @abstractmethod
    def targets(self) -> Iterable[str]:
        """Path fragments appended to settings.base_url."""

    def init(self, services: Any) -> None:
        """Optional setup before the first fetch; ``services`` is passed through untouched."""

    @abstractmethod
    def handle(self, response: Response) -> None:
        ...

    def after_success(self) -> None:
        pass

    def after_failure(self, cause: BaseException) -> None:
        pass

    @property
    def name(self) -> str:
        return type(self).__name__
