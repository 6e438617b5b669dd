"""Metrics hook protocol and no-op default implementation.

The converters report counters and timings for every call.  By default a
:class:`NoopMetricsHook` absorbs them at zero cost; a caller may pass any
object satisfying :class:`MetricsHook` through
``ElementalifyConfig(metrics=...)`` to forward them to StatsD, Prometheus
or similar.

Emitted metric names:

* ``elementalify.conversions_total``          -- counter, tag ``direction``
* ``elementalify.conversion_duration_ms``     -- timing, tag ``direction``
* ``elementalify.nodes_skipped_total``        -- counter, tag ``reason``
* ``elementalify.conversion_warnings_total``  -- counter, tag ``direction``
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    *tags* is an optional ``str -> str`` mapping that backends may turn
    into labels or suffixes.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Add *value* to the counter *name*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration of *ms* milliseconds under *name*."""
        ...


class NoopMetricsHook:
    """Metrics backend that discards every data point."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: object | None) -> MetricsHook:
    """Return *hook* when given, else a shared :class:`NoopMetricsHook`."""
    if hook is None:
        return _NOOP
    return hook  # type: ignore[return-value]


_NOOP = NoopMetricsHook()
