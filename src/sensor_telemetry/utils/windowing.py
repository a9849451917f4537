"""
Aggregation window planning.

Turns a span request ("last N ms") or a bounds request ([start, stop) in ms)
into the time range, the aggregation window and the Flux range() bounds.
Wider requests get proportionally coarser windows, never finer than 30 s.
"""

from typing import Optional, Union

from ..entities.sensor_data import (
    MIN_WINDOW_MS,
    BoundsRequest,
    QueryPlan,
    SpanRequest,
    TimeRange,
    WindowSpec,
)
from ..exceptions.telemetry_exceptions import InvalidRangeError
from .conversions import now_ms as current_time_ms

WINDOW_SCALE = 1000


def window_for_duration(duration_ms: int) -> int:
    """Window width for a span: max(30_000, duration_ms // 1000)."""
    return max(MIN_WINDOW_MS, duration_ms // WINDOW_SCALE)


def plan_span(duration_ms: int, now_ms: Optional[int] = None) -> QueryPlan:
    """
    Plan a "look back `duration_ms` from now" query.

    `now_ms` is sampled once, so the range and the window agree.

    Raises:
        InvalidRangeError: if duration_ms is zero or negative.
    """
    if duration_ms <= 0:
        raise InvalidRangeError(f"Span must be positive, got {duration_ms} ms")

    now = current_time_ms() if now_ms is None else now_ms
    return QueryPlan(
        time_range=TimeRange(start_ms=now - duration_ms, stop_ms=now),
        window=WindowSpec(window_ms=window_for_duration(duration_ms)),
        start_bound=f"-{duration_ms}ms",
    )


def plan_bounds(start_ms: int, stop_ms: int) -> QueryPlan:
    """
    Plan an explicit [start_ms, stop_ms) query.

    Flux bounds are whole unix seconds. The stop bound is pushed up by one second
    before truncating so a sub-second range never collapses to an empty interval.

    Raises:
        InvalidRangeError: if stop_ms <= start_ms.
    """
    if stop_ms <= start_ms:
        raise InvalidRangeError(f"Stop ({stop_ms}) must be after start ({start_ms})")

    duration_ms = stop_ms - start_ms
    return QueryPlan(
        time_range=TimeRange(start_ms=start_ms, stop_ms=stop_ms),
        window=WindowSpec(window_ms=window_for_duration(duration_ms)),
        start_bound=str(start_ms // 1000),
        stop_bound=str((stop_ms + 1000) // 1000),
    )


def plan(request: Union[SpanRequest, BoundsRequest], now_ms: Optional[int] = None) -> QueryPlan:
    """Dispatch on the request shape."""
    if isinstance(request, SpanRequest):
        return plan_span(request.duration_ms, now_ms=now_ms)
    return plan_bounds(request.start_ms, request.stop_ms)
