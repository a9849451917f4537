import logging
import time
from typing import Awaitable, Callable, Dict, Iterator, List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request

from ..dependencies.auth import require_bearer_token
from ..dependencies.influxdb import get_sensor_repository
from ..enums.measurement import MeasurementField
from ..exceptions.telemetry_exceptions import (
    InvalidDurationError,
    InvalidRangeError,
    TelemetryException,
)
from ..repos.sensor_data_repo import Reading, SensorDataRepository
from ..utils.arrow_response import (
    client_wants_arrow,
    dataframe_to_arrow_streaming_response,
    readings_to_dataframe,
)
from ..utils.durations import parse_duration_ms

logger = logging.getLogger(__name__)

COLUMNS: Dict[MeasurementField, Tuple[str, ...]] = {
    MeasurementField.TEMPERATURE: ("value", "time"),
    MeasurementField.HUMIDITY: ("value", "time"),
    MeasurementField.COMBINED: ("time", "temperature", "humidity", "co2"),
}


async def _collect(label: str, fetcher: Callable[[], Awaitable[Iterator[Reading]]]) -> List[Reading]:
    """Run a range fetch, map core errors to HTTP errors and log the timing."""
    start_time = time.perf_counter()
    try:
        readings = list(await fetcher())
    except InvalidRangeError as e:
        raise HTTPException(400, str(e))
    except TelemetryException as e:
        logger.error(f"Error fetching {label} measurements: {e}")
        raise HTTPException(500, f"Database error: {str(e)}")

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.info(f"Took {elapsed_ms:.0f} ms to fetch {len(readings)} {label} measurements")
    return readings


def _respond(request: Request, field: MeasurementField, readings: List[Reading]):
    if client_wants_arrow(request):
        df = readings_to_dataframe(readings, COLUMNS[field])
        return dataframe_to_arrow_streaming_response(df, filename=f"{field.value}.arrow")
    return readings


def build_readings_router(field: MeasurementField, prefix: str, label: str) -> APIRouter:
    """Current, span and explicit-range endpoints for one field selection."""
    router = APIRouter(prefix=prefix)

    @router.get("/current")
    async def get_current(
        repo: SensorDataRepository = Depends(get_sensor_repository),
    ):
        """Latest reading from the last 24 hours."""
        reading = await repo.get_current(field)
        if reading is None:
            raise HTTPException(404, f"Could not get current {label}")
        return reading

    @router.get("/range/{duration}", dependencies=[Depends(require_bearer_token)])
    async def get_span(
        duration: str,
        request: Request,
        repo: SensorDataRepository = Depends(get_sensor_repository),
    ):
        """Readings for the last `duration` (e.g. 1h, 30m, 7d)."""
        try:
            duration_ms = parse_duration_ms(duration)
        except InvalidDurationError as e:
            raise HTTPException(400, str(e))

        readings = await _collect(label, lambda: repo.get_span(field, duration_ms))
        return _respond(request, field, readings)

    @router.get("/from/{start}/to/{stop}", dependencies=[Depends(require_bearer_token)])
    async def get_range(
        start: int,
        stop: int,
        request: Request,
        repo: SensorDataRepository = Depends(get_sensor_repository),
    ):
        """Readings for [start, stop), both in epoch milliseconds."""
        readings = await _collect(label, lambda: repo.get_range(field, start, stop))
        return _respond(request, field, readings)

    return router


temperature_router = build_readings_router(MeasurementField.TEMPERATURE, "/temp", "temperature")
humidity_router = build_readings_router(MeasurementField.HUMIDITY, "/humidity", "humidity")
climate_router = build_readings_router(MeasurementField.COMBINED, "/climate", "climate")
