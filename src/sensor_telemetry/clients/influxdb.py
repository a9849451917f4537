import asyncio
import logging
from typing import Any, Dict, List, Optional

from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync

from ..app_settings import AppSettings, app_settings
from ..exceptions.telemetry_exceptions import QueryFailedError, StoreConnectionError

logger = logging.getLogger(__name__)


class InfluxDBStoreClient:
    """Async InfluxDB client holding the single connection handle."""

    def __init__(self, settings: AppSettings = app_settings):
        self._client: Optional[InfluxDBClientAsync] = None
        self._lock = asyncio.Lock()
        self.settings = settings
        self.bucket = settings.influxdb_bucket
        self.measurement = settings.influxdb_measurement

    async def connect(self) -> None:
        """Create the connection handle. Must run inside the event loop."""
        try:
            self._client = InfluxDBClientAsync(
                url=self.settings.influxdb_host,
                token=self.settings.influxdb_token,
                org=self.settings.influxdb_org,
                timeout=self.settings.influxdb_timeout_ms,
            )
            logger.info(f"InfluxDB client created for {self.settings.influxdb_host} (bucket {self.bucket})")
        except Exception as e:
            logger.error(f"Failed to create InfluxDB client: {e}")
            raise StoreConnectionError(f"Connection failed: {e}") from e

    async def _execute(self, query: str) -> List[Dict[str, Any]]:
        """Run a Flux query and return every record's values, table by table.

        The lock covers the store round trip only.
        """
        async with self._lock:
            if not self._client:
                raise StoreConnectionError("No active connection")
            try:
                tables = await self._client.query_api().query(query)
            except Exception as e:
                logger.error(f"Query execution failed: {e}")
                raise QueryFailedError(str(e)) from e

        return [record.values for table in tables for record in table.records]

    async def health_check(self) -> bool:
        """Check if InfluxDB answers a ping."""
        if not self._client:
            return False
        try:
            return await self._client.ping()
        except Exception as e:
            logger.warning(f"InfluxDB ping failed: {e}")
            return False

    async def close(self) -> None:
        """Close the connection."""
        if self._client:
            await self._client.close()
            self._client = None
