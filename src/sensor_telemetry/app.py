import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from .app_settings import AppSettings, app_settings
from .clients.influxdb import InfluxDBStoreClient
from .enums.measurement import MeasurementField
from .exceptions.telemetry_exceptions import TelemetryException
from .logging_config import configure_logging
from .repos.sensor_data_repo import SensorDataRepository
from .routes import health
from .routes.readings import climate_router, humidity_router, temperature_router

configure_logging(app_settings.log_level)
logger = logging.getLogger(__name__)

WARMUP_SPAN_MS = 60 * 60 * 1000


async def _warm_up(repo: SensorDataRepository) -> None:
    """Query the store once so the first request doesn't pay for connection setup."""
    current = await repo.get_current(MeasurementField.TEMPERATURE)
    logger.info(f"Current temperature at startup: {current}")
    try:
        readings = list(await repo.get_span(MeasurementField.TEMPERATURE, WARMUP_SPAN_MS))
        logger.info(f"Warm-up fetched {len(readings)} temperature measurements")
    except TelemetryException as e:
        logger.warning(f"Warm-up query failed: {e}")


def create_app(
    settings: AppSettings = app_settings,
    store_client: Optional[InfluxDBStoreClient] = None,
) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info("Starting Sensor Telemetry Service")
        client = store_client or InfluxDBStoreClient(settings)
        await client.connect()
        app.state.store_client = client
        app.state.sensor_repo = SensorDataRepository(client, settings.current_lookback_ms)

        if not settings.http_password:
            logger.warning("HTTP_PASSWORD not set! Range endpoints are served without authentication.")
        if settings.warmup_on_startup:
            await _warm_up(app.state.sensor_repo)

        yield

        await client.close()
        logger.info("Shutting down Sensor Telemetry Service")

    app = FastAPI(
        title="Sensor Telemetry API",
        version="0.1.0",
        description="Read-only API for temperature, humidity and CO2 readings stored in InfluxDB",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # GZip middleware
    if settings.gzip_enabled:
        app.add_middleware(
            GZipMiddleware,
            minimum_size=settings.gzip_min_size,
            compresslevel=settings.gzip_level,
        )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(temperature_router, tags=["Temperature"])
    app.include_router(humidity_router, tags=["Humidity"])
    app.include_router(climate_router, tags=["Climate"])

    # Static files last, so API routes win
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.info(f"Static directory {static_dir} not found, not serving files")

    return app


# Application instance
app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    logger.info(f"Starting server on port {app_settings.http_port}")
    uvicorn.run(app, host=app_settings.http_host, port=app_settings.http_port)
