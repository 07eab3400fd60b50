from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, List, Optional, Type

from .errors import EngineDisposedError, EngineRunningError
from .log import configure_logging, get_logger, remove_logging
from .metrics import MetricsCollector
from .models import ModuleResult
from .module import ScrapeModule
from .registry import ModuleRegistry
from .runner import ModuleRunner
from .transport import DEFAULT_TIMEOUT, RequestsTransport, Transport

DEFAULT_RETRIES = 3

logger = get_logger("engine")


class Engine:
    """Runs registered modules one after another against a shared transport.

    Modules are executed in registration order, each in a fresh instance.
    A failing module is reported and the next one still runs; setting the
    cancellation event stops the current module at its next fetch and
    leaves the remaining modules queued.

    ``timeout`` and ``retries`` may only change while the engine is idle.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        timeout: Optional[float] = None,
        retries: int = DEFAULT_RETRIES,
        log_sink: Any = None,
        log_level: str = "INFO",
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._transport = transport or RequestsTransport(timeout=DEFAULT_TIMEOUT)
        if timeout is not None:
            self._transport.timeout = _check_timeout(timeout)
        self._retries = _check_retries(retries)
        self._registry = ModuleRegistry()
        self._metrics = metrics or MetricsCollector()
        self._executor: Optional[ThreadPoolExecutor] = None

        self._lock = threading.Lock()
        self._running = False
        self._disposed = False

        self._log_handler: Optional[int] = None
        if log_sink is not None:
            self._log_handler = configure_logging(log_sink, log_level)

    @property
    def timeout(self) -> float:
        return self._transport.timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        value = _check_timeout(value)
        with self._lock:
            self._ensure_idle()
            self._transport.timeout = value

    @property
    def retries(self) -> int:
        return self._retries

    @retries.setter
    def retries(self, value: int) -> None:
        value = _check_retries(value)
        with self._lock:
            self._ensure_idle()
            self._retries = value

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def disposed(self) -> bool:
        with self._lock:
            return self._disposed

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def queued(self) -> List[str]:
        return self._registry.names()

    def register(self, *modules: Type[ScrapeModule]) -> None:
        """Queue module classes; the whole batch is rejected if any class is invalid."""
        with self._lock:
            self._ensure_idle()
            batch = self._registry.register(modules)
        for descriptor in batch:
            logger.info("Queued module {} in series", descriptor.name)

    def start(self, services: Any = None, cancel: Optional[threading.Event] = None) -> List[ModuleResult]:
        """Run every queued module and return one result per executed module.

        Module failures do not raise; only misuse of the engine does."""
        self._begin()
        try:
            return self._run(services, cancel)
        finally:
            self._finish()

    def submit(self, services: Any = None, cancel: Optional[threading.Event] = None) -> Future:
        """Like start(), but runs on a background worker and returns a Future."""
        self._begin()
        try:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chisel-engine")
            return self._executor.submit(self._run_and_finish, services, cancel)
        except BaseException:
            self._finish()
            raise

    def close(self) -> None:
        with self._lock:
            self._ensure_idle()
            self._disposed = True
        try:
            self._transport.close()
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
            if self._log_handler is not None:
                remove_logging(self._log_handler)
                self._log_handler = None

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run_and_finish(self, services: Any, cancel: Optional[threading.Event]) -> List[ModuleResult]:
        try:
            return self._run(services, cancel)
        finally:
            self._finish()

    def _run(self, services: Any, cancel: Optional[threading.Event]) -> List[ModuleResult]:
        cancel = cancel or threading.Event()
        results: List[ModuleResult] = []
        logger.info("Starting to process {} modules", len(self._registry))

        while not cancel.is_set():
            descriptor = self._registry.pop()
            if descriptor is None:
                break
            try:
                module = descriptor.create()
            except Exception as exc:  # noqa: BLE001
                logger.opt(exception=exc).error("Could not create module {}", descriptor.name)
                results.append(
                    ModuleResult(
                        module=descriptor.name,
                        success=False,
                        handled=0,
                        attempts=0,
                        duration_ms=0,
                        error_type=type(exc).__name__,
                        error=str(exc),
                    )
                )
                continue
            runner = ModuleRunner(self._transport, retries=self._retries, metrics=self._metrics, cancel=cancel)
            results.append(runner.run(module, services))

        if cancel.is_set() and len(self._registry):
            logger.warning("Run cancelled; {} modules left in the queue", len(self._registry))
        ok = sum(1 for r in results if r.success)
        logger.info("Finished {} modules ({} succeeded, {} failed)", len(results), ok, len(results) - ok)
        return results

    def _begin(self) -> None:
        with self._lock:
            self._ensure_idle()
            self._running = True

    def _finish(self) -> None:
        with self._lock:
            self._running = False

    def _ensure_idle(self) -> None:
        # caller holds self._lock
        if self._disposed:
            raise EngineDisposedError("Engine has already been disposed.")
        if self._running:
            raise EngineRunningError("Cannot perform operation while the engine is running.")


def _check_timeout(value: float) -> float:
    value = float(value)
    if value <= 0:
        raise ValueError(f"timeout must be positive, got {value}")
    return value


def _check_retries(value: int) -> int:
    value = int(value)
    if value < 0:
        raise ValueError(f"retries must be >= 0, got {value}")
    return value
