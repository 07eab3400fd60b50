from __future__ import annotations

import argparse
import importlib
import json
import sys
import threading
from dataclasses import asdict
from typing import List, Type

from loguru import logger

from chisel.engine import DEFAULT_RETRIES, Engine
from chisel.models import ModuleResult
from chisel.module import ScrapeModule
from chisel.transport import DEFAULT_IMPERSONATE, DEFAULT_TIMEOUT, CurlTransport, RequestsTransport, Transport


def _load_module_class(spec: str) -> Type[ScrapeModule]:
    """Resolve ``package.module:ClassName`` to a class."""
    if ":" not in spec:
        raise ValueError(f"Module must be given as 'package.module:ClassName', got {spec!r}")
    module_path, attr = spec.split(":", 1)
    target = importlib.import_module(module_path)
    try:
        return getattr(target, attr)
    except AttributeError:
        raise ValueError(f"{module_path} has no attribute {attr!r}") from None


def _build_transport(timeout: float, impersonate: str | None) -> Transport:
    if impersonate:
        return CurlTransport(timeout=timeout, impersonate=impersonate)
    return RequestsTransport(timeout=timeout)


def _write_results(path: str, results: List[ModuleResult]) -> None:
    with open(path, "a", encoding="utf-8") as f:
        for result in results:
            f.write(json.dumps(asdict(result), ensure_ascii=False) + "\n")


def run(
    module_specs: List[str],
    timeout: float,
    retries: int,
    impersonate: str | None,
    log_level: str,
    results_path: str | None,
) -> List[ModuleResult]:
    classes = [_load_module_class(spec) for spec in module_specs]
    # the engine attaches its own stderr sink
    logger.remove()
    cancel = threading.Event()

    with Engine(
        transport=_build_transport(timeout, impersonate),
        retries=retries,
        log_sink=sys.stderr,
        log_level=log_level,
    ) as engine:
        engine.register(*classes)
        future = engine.submit(services={}, cancel=cancel)
        try:
            results = future.result()
        except KeyboardInterrupt:
            # let the current request finish, then unwind
            cancel.set()
            results = future.result()

    if results_path:
        _write_results(results_path, results)

    for result in results:
        print(
            f"module={result.module} success={result.success} handled={result.handled} "
            f"attempts={result.attempts} duration_ms={result.duration_ms} error={result.error_type}"
        )
    ok = sum(1 for r in results if r.success)
    print(f"\nDONE: success={ok} fail={len(results) - ok} total={len(results)}")
    return results


def main() -> None:
    parser = argparse.ArgumentParser(description="Run scrape modules in series")
    parser.add_argument("modules", nargs="+", help="Module classes as package.module:ClassName")

    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Per-request timeout in seconds")
    parser.add_argument("--retries", type=int, default=DEFAULT_RETRIES, help="Max fetch attempts per target")
    parser.add_argument(
        "--impersonate",
        nargs="?",
        const=DEFAULT_IMPERSONATE,
        default=None,
        help=f"Use curl_cffi with browser impersonation (default profile: {DEFAULT_IMPERSONATE})",
    )
    parser.add_argument("--log-level", default="INFO", help="Log level for engine output")
    parser.add_argument("--results", default=None, help="Append module results to this JSONL file")

    args = parser.parse_args()

    results = run(
        module_specs=args.modules,
        timeout=args.timeout,
        retries=args.retries,
        impersonate=args.impersonate,
        log_level=args.log_level,
        results_path=args.results,
    )
    if not all(r.success for r in results):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
