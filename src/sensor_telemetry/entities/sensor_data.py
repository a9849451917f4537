from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..enums.measurement import MeasurementField
from ..exceptions.telemetry_exceptions import MalformedRowError
from ..utils.conversions import round_2, to_epoch_ms

MIN_WINDOW_MS = 30_000


class TimeRange(BaseModel):
    """Half-open [start_ms, stop_ms) interval in epoch milliseconds."""
    model_config = ConfigDict(frozen=True)

    start_ms: int
    stop_ms: int

    @property
    def duration_ms(self) -> int:
        return self.stop_ms - self.start_ms


class WindowSpec(BaseModel):
    """Aggregation bucket width sent to the store."""
    model_config = ConfigDict(frozen=True)

    window_ms: int = Field(ge=MIN_WINDOW_MS)

    @property
    def every(self) -> str:
        """Flux duration literal, e.g. `30000ms`."""
        return f"{self.window_ms}ms"


class QueryPlan(BaseModel):
    """Planner output: the range, the window and the Flux range() bounds."""
    model_config = ConfigDict(frozen=True)

    time_range: TimeRange
    window: WindowSpec
    start_bound: str
    stop_bound: Optional[str] = None

    @property
    def flux_range(self) -> str:
        if self.stop_bound is None:
            return f"start: {self.start_bound}"
        return f"start: {self.start_bound}, stop: {self.stop_bound}"


class SpanRequest(BaseModel):
    """Look back `duration_ms` from now."""
    duration_ms: int


class BoundsRequest(BaseModel):
    """Explicit [start_ms, stop_ms) request."""
    start_ms: int
    stop_ms: int


class FieldSample(BaseModel):
    """Single-field reading, as served by the temperature and humidity endpoints."""
    model_config = ConfigDict(frozen=True)

    value: float
    time: int


class Sample(BaseModel):
    """Combined reading. CO2 is only present on sensors that report it."""
    model_config = ConfigDict(frozen=True)

    time: int
    temperature: float
    humidity: float
    co2: Optional[float] = None


class RawSample(BaseModel):
    """One pivoted Flux row, before conversion."""
    model_config = ConfigDict(frozen=True)

    time: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    co2: Optional[float] = None

    @classmethod
    def from_record(cls, values: Dict[str, Any]) -> "RawSample":
        """Build from a FluxRecord's values (`_time` plus one column per field)."""
        moment = values.get("_time")
        if not isinstance(moment, datetime):
            raise MalformedRowError(f"Row has no usable _time: {moment!r}")
        try:
            return cls(
                time=moment,
                temperature=values.get("temperature"),
                humidity=values.get("humidity"),
                co2=values.get("co2"),
            )
        except ValidationError as e:
            raise MalformedRowError(f"Row at {moment.isoformat()} has a non-numeric field: {e}") from e

    def _rounded(self, name: str) -> Optional[float]:
        value = getattr(self, name)
        return round_2(float(value)) if value is not None else None

    def to_sample(self, field: MeasurementField) -> Union[Sample, FieldSample]:
        """
        Convert to the public representation for `field`.

        Floats are rounded to 2 decimals and the timestamp becomes epoch ms.
        Only CO2 may be absent; a missing field from `field.required_fields`
        raises MalformedRowError.
        """
        missing = sorted(name for name in field.required_fields if getattr(self, name) is None)
        if missing:
            raise MalformedRowError(
                f"Row at {self.time.isoformat()} is missing field(s) {', '.join(missing)}"
            )

        time_ms = to_epoch_ms(self.time)
        if field is MeasurementField.COMBINED:
            return Sample(
                time=time_ms,
                temperature=self._rounded("temperature"),
                humidity=self._rounded("humidity"),
                co2=self._rounded("co2"),
            )
        return FieldSample(value=self._rounded(field.value), time=time_ms)
