"""Chisel: a paced, module-driven web-scraping engine.

Client code subclasses ScrapeModule, registers the classes with an Engine
and starts it; modules run one after another, targets one after another.

Key modules:
    engine    -- Engine: registration, FIFO execution, running/disposed guard
    runner    -- ModuleRunner: per-target fetch, retry, handle and pacing loop
    module    -- ScrapeModule base class and ModuleSettings
    registry  -- ModuleRegistry and module class validation
    response  -- Response envelope with lazy JSON/HTML views
    retry     -- RetryPolicy for acceptance and backoff decisions
    pacing    -- Pacer enforcing the minimum gap between requests
    transport -- Transport ABC, requests and curl_cffi implementations
    metrics   -- MetricsCollector for per-attempt statistics
    models    -- Request, RawResponse, ModuleResult, FetchRecord dataclasses
    errors    -- exception hierarchy
    log       -- loguru sink helpers

Engine logs are disabled until a sink is attached with Engine(log_sink=...)
or chisel.log.configure_logging().
"""
from loguru import logger

from .engine import Engine
from .errors import (
    ChiselError,
    EngineDisposedError,
    EngineRunningError,
    EngineStateError,
    ModuleCancelled,
    RegistrationError,
    TransportError,
    TransportTimeout,
    UnacceptableStatusError,
)
from .module import ModuleSettings, ScrapeModule
from .response import Response
from .retry import RetryPolicy

logger.disable("chisel")

__all__ = [
    "ChiselError",
    "Engine",
    "EngineDisposedError",
    "EngineRunningError",
    "EngineStateError",
    "ModuleCancelled",
    "ModuleSettings",
    "RegistrationError",
    "Response",
    "RetryPolicy",
    "ScrapeModule",
    "TransportError",
    "TransportTimeout",
    "UnacceptableStatusError",
]
