"""Metric construction helpers.

Thin wrappers around prometheus_client primitives with optional namespace
prefixing and basic naming validation. Every helper takes an explicit
registry so tests can work against an isolated ``CollectorRegistry``.
"""

from __future__ import annotations

import re
from typing import Sequence

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def validate_name(name: str) -> str:
    if not _NAME_RE.match(name):
        raise ValueError(
            f"Invalid metric name '{name}'. Use snake_case alphanumerics/underscores."
        )
    return name


def prefixed(name: str, namespace: str | None) -> str:
    if namespace and not name.startswith(namespace + "_"):
        return f"{namespace}_{name}"
    return name


def get_counter(
    name: str,
    documentation: str,
    namespace: str | None = None,
    registry: CollectorRegistry = REGISTRY,
) -> Counter:
    return Counter(
        validate_name(prefixed(name, namespace)), documentation, registry=registry
    )


def get_histogram(
    name: str,
    documentation: str,
    namespace: str | None = None,
    buckets: Sequence[float] | None = None,
    registry: CollectorRegistry = REGISTRY,
) -> Histogram:
    full_name = validate_name(prefixed(name, namespace))
    if buckets is None:
        return Histogram(full_name, documentation, registry=registry)
    return Histogram(full_name, documentation, buckets=buckets, registry=registry)


def get_gauge(
    name: str,
    documentation: str,
    namespace: str | None = None,
    registry: CollectorRegistry = REGISTRY,
) -> Gauge:
    return Gauge(
        validate_name(prefixed(name, namespace)), documentation, registry=registry
    )


__all__ = [
    "get_counter",
    "get_gauge",
    "get_histogram",
    "prefixed",
    "validate_name",
]
