import logging
from operator import attrgetter
from typing import Any, Dict, Iterator, List, Optional, Union

from ..app_settings import app_settings
from ..clients.influxdb import InfluxDBStoreClient
from ..entities.sensor_data import FieldSample, QueryPlan, RawSample, Sample
from ..enums.measurement import AggregationFunction, ErrorPolicy, MeasurementField
from ..exceptions.telemetry_exceptions import MalformedRowError, QueryFailedError, StoreConnectionError
from ..utils.windowing import plan_bounds, plan_span

logger = logging.getLogger(__name__)

Reading = Union[Sample, FieldSample]

PIVOT = 'pivot(rowKey: ["_time"], columnKey: ["_field"], valueColumn: "_value")'


def _filters(measurement: str, field: MeasurementField) -> str:
    lines = f'|> filter(fn: (r) => r["_measurement"] == "{measurement}")'
    if field.field_filter is not None:
        lines += f'\n    |> filter(fn: (r) => r["_field"] == "{field.field_filter}")'
    return lines


def build_range_query(
    bucket: str,
    measurement: str,
    field: MeasurementField,
    plan: QueryPlan,
    aggregation: AggregationFunction = AggregationFunction.MEAN,
) -> str:
    """Flux for an aggregated range query. Empty windows produce no row."""
    return f"""
from(bucket: "{bucket}")
    |> range({plan.flux_range})
    {_filters(measurement, field)}
    |> aggregateWindow(every: {plan.window.every}, fn: {aggregation.value}, createEmpty: false)
    |> {PIVOT}
    |> yield(name: "{aggregation.value}")"""


def build_latest_query(
    bucket: str,
    measurement: str,
    field: MeasurementField,
    lookback_ms: int,
) -> str:
    """Flux for the newest raw row within the lookback window."""
    return f"""
from(bucket: "{bucket}")
    |> range(start: -{lookback_ms}ms)
    {_filters(measurement, field)}
    |> {PIVOT}
    |> sort(columns: ["_time"])
    |> last(column: "_time")"""


def convert_rows(rows: List[Dict[str, Any]], field: MeasurementField) -> List[Reading]:
    """Convert pivoted rows to public values, sorted by time (stable)."""
    readings = [RawSample.from_record(row).to_sample(field) for row in rows]
    return sorted(readings, key=attrgetter("time"))


class SensorDataRepository:
    """Range and latest-value queries against the sensor measurement."""

    def __init__(self, store_client: InfluxDBStoreClient, current_lookback_ms: Optional[int] = None):
        self.client = store_client
        self.current_lookback_ms = (
            app_settings.current_lookback_ms if current_lookback_ms is None else current_lookback_ms
        )

    async def fetch(
        self,
        field: MeasurementField,
        plan: QueryPlan,
        aggregation: AggregationFunction = AggregationFunction.MEAN,
    ) -> Iterator[Reading]:
        """
        Run an aggregated range query and return its readings in time order.

        The store round trip, conversion and sorting are finished before this
        returns; the iterator only walks the materialized result.

        Raises:
            QueryFailedError: the store rejected the query or could not be reached.
            MalformedRowError: a row lacks a required field.
        """
        query = build_range_query(self.client.bucket, self.client.measurement, field, plan, aggregation)
        rows = await self.client._execute(query)
        return iter(convert_rows(rows, field))

    async def get_span(self, field: MeasurementField, duration_ms: int) -> Iterator[Reading]:
        """Readings for the last `duration_ms` milliseconds."""
        return await self.fetch(field, plan_span(duration_ms))

    async def get_range(self, field: MeasurementField, start_ms: int, stop_ms: int) -> Iterator[Reading]:
        """Readings for [start_ms, stop_ms)."""
        return await self.fetch(field, plan_bounds(start_ms, stop_ms))

    async def fetch_latest(
        self,
        field: MeasurementField,
        on_error: ErrorPolicy = ErrorPolicy.ABSENT,
    ) -> Optional[Reading]:
        """
        Newest reading within the lookback window, or None if there is none.

        With ErrorPolicy.ABSENT, store and row failures are logged and reported
        as None: a sensor without a current reading is a normal state.
        """
        query = build_latest_query(
            self.client.bucket, self.client.measurement, field, self.current_lookback_ms
        )
        try:
            rows = await self.client._execute(query)
            readings = convert_rows(rows, field)
        except (QueryFailedError, MalformedRowError, StoreConnectionError) as e:
            if on_error is ErrorPolicy.RAISE:
                raise
            logger.warning(f"No current {field.value} reading: {e}")
            return None

        return readings[-1] if readings else None

    async def get_current(self, field: MeasurementField) -> Optional[Reading]:
        return await self.fetch_latest(field)
