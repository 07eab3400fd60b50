from __future__ import annotations

import inspect
from collections import deque
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Deque, Iterable, List, Optional, Type

from .errors import RegistrationError
from .module import ScrapeModule


@dataclass(frozen=True)
class ModuleDescriptor:
    """A registered module: a display name and a zero-argument factory."""

    name: str
    factory: Callable[[], ScrapeModule]

    def create(self) -> ScrapeModule:
        return self.factory()


class ModuleRegistry:
    """FIFO queue of validated module descriptors.

    register() checks the whole batch first and enqueues nothing if any
    class is invalid."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._queue: Deque[ModuleDescriptor] = deque()

    def register(self, modules: Iterable[Type[ScrapeModule]]) -> List[ModuleDescriptor]:
        batch = [self.describe(cls) for cls in modules]
        with self._lock:
            self._queue.extend(batch)
        return batch

    def pop(self) -> Optional[ModuleDescriptor]:
        with self._lock:
            return self._queue.popleft() if self._queue else None

    def names(self) -> List[str]:
        with self._lock:
            return [d.name for d in self._queue]

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    @staticmethod
    def describe(cls: Type[ScrapeModule]) -> ModuleDescriptor:
        error = validate_module_class(cls)
        if error:
            raise RegistrationError(error)
        return ModuleDescriptor(name=cls.__name__, factory=cls)


def validate_module_class(cls: object) -> Optional[str]:
    """Return why ``cls`` cannot be used as a module, or None if it can."""
    if not inspect.isclass(cls) or not issubclass(cls, ScrapeModule):
        return f"{cls!r} is not a subclass of {ScrapeModule.__name__}"
    if inspect.isabstract(cls):
        missing = ", ".join(sorted(cls.__abstractmethods__))
        return f"{cls.__qualname__} is abstract (missing: {missing})"
    try:
        inspect.signature(cls).bind()
    except TypeError:
        return f"{cls.__qualname__} does not have a constructor that takes no arguments"
    except ValueError:
        return f"{cls.__qualname__} has no inspectable constructor"
    return None
