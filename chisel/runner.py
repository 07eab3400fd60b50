from __future__ import annotations

import threading
import time
from typing import Any, Optional

from .errors import ModuleCancelled, TransportError, UnacceptableStatusError
from .log import get_logger
from .metrics import MetricsCollector
from .models import FetchRecord, ModuleResult, Request
from .module import ScrapeModule
from .pacing import Pacer, sleep
from .response import Response
from .retry import RetryPolicy
from .transport import Transport


class ModuleRunner:
    """Drives a single module instance from init to its final hook.

    Targets are fetched one at a time. Fetch failures (transport errors and
    rejected status codes) are retried up to ``retries`` attempts per target;
    anything raised by the module itself fails the run immediately. The run
    never raises: the outcome is reported to the module through
    after_success/after_failure and returned as a ModuleResult.
    """

    def __init__(
        self,
        transport: Transport,
        retries: int = 3,
        metrics: Optional[MetricsCollector] = None,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self._transport = transport
        self._max_attempts = max(1, int(retries))
        self._metrics = metrics
        self._cancel = cancel
        self._handled = 0
        self._attempts = 0

    def run(self, module: ScrapeModule, services: Any = None) -> ModuleResult:
        name = module.name
        log = get_logger(name)
        start_ms = self._now_ms()
        self._handled = 0
        self._attempts = 0
        cause: Optional[BaseException] = None

        log.info("Processing module {}", name)
        try:
            log.debug("Initializing module {}", name)
            module.init(services)
            self._scrape(module, log)
        except Exception as exc:  # noqa: BLE001
            cause = exc
            if isinstance(exc, ModuleCancelled):
                log.warning("Module {} was cancelled after {} targets", name, self._handled)
            else:
                log.opt(exception=exc).error("Module {} failed: {}", name, exc)

        try:
            if cause is None:
                module.after_success()
            else:
                module.after_failure(cause)
        except Exception as exc:  # noqa: BLE001
            log.opt(exception=exc).error("Lifecycle hook of module {} raised", name)
            if cause is None:
                cause = exc
        finally:
            self._release(module, log)

        duration_ms = self._now_ms() - start_ms
        if cause is None:
            log.info("Module {} finished: {} targets in {} ms", name, self._handled, duration_ms)
        return ModuleResult(
            module=name,
            success=cause is None,
            handled=self._handled,
            attempts=self._attempts,
            duration_ms=duration_ms,
            error_type=None if cause is None else type(cause).__name__,
            error=None if cause is None else str(cause),
        )

    def _scrape(self, module: ScrapeModule, log) -> None:
        settings = module.settings
        settings.validate()
        policy = RetryPolicy.from_settings(settings)
        pacer = Pacer(policy.spacing(), self._cancel)
        headers = settings.header_lists()

        for target in module.targets:
            request = Request(url=settings.url_for(target), headers=headers)
            response = self._fetch(module.name, request, policy, pacer, log)
            module.handle(response)
            self._handled += 1
            pacer.wait()

    def _fetch(self, name: str, request: Request, policy: RetryPolicy, pacer: Pacer, log) -> Response:
        attempt = 0
        while True:
            if self._cancel is not None and self._cancel.is_set():
                raise ModuleCancelled(request.url)

            attempt += 1
            self._attempts += 1
            last_response: Optional[Response] = None
            log.debug("Getting target {} (attempt {})", request.url, attempt)
            sent_at = pacer.mark()
            try:
                raw = self._transport.send(request)
            except TransportError as exc:
                failure: Exception = exc
            else:
                response = Response.from_raw(raw)
                if policy.should_accept(response.status_code):
                    self._record(name, request, attempt, response.status_code, sent_at, None)
                    return response
                failure = UnacceptableStatusError(response)
                last_response = response

            status_code = last_response.status_code if last_response is not None else None
            self._record(name, request, attempt, status_code, sent_at, type(failure).__name__)

            if attempt >= self._max_attempts or not policy.should_retry(failure):
                raise failure

            delay = policy.next_delay(attempt, last_response)
            log.warning(
                "Retry {}/{} for {} | error={} | delay={:.2f}s",
                attempt + 1, self._max_attempts, request.url, type(failure).__name__, delay,
            )
            # a cancelled wait falls through to the check at the top of the loop
            sleep(delay, self._cancel)

    def _record(
        self,
        name: str,
        request: Request,
        attempt: int,
        status_code: Optional[int],
        sent_at: float,
        error_type: Optional[str],
    ) -> None:
        if self._metrics is None:
            return
        self._metrics.record_fetch(
            FetchRecord(
                module=name,
                url=request.url,
                attempt=attempt,
                status_code=status_code,
                latency_ms=int((time.monotonic() - sent_at) * 1000),
                error_type=error_type,
            )
        )

    @staticmethod
    def _release(module: ScrapeModule, log) -> None:
        close = getattr(module, "close", None)
        if not callable(close):
            return
        try:
            close()
        except Exception as exc:  # noqa: BLE001
            log.opt(exception=exc).error("Releasing module {} raised", module.name)

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)
