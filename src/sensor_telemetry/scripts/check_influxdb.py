"""
InfluxDB connectivity check.

Connects with the configured host/org/token, pings the server and runs the same
latest-value and one-hour span queries the API serves.
"""

import asyncio
import logging
import sys

from sensor_telemetry.app_settings import app_settings
from sensor_telemetry.clients.influxdb import InfluxDBStoreClient
from sensor_telemetry.enums.measurement import ErrorPolicy, MeasurementField
from sensor_telemetry.exceptions.telemetry_exceptions import TelemetryException
from sensor_telemetry.repos.sensor_data_repo import SensorDataRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

ONE_HOUR_MS = 60 * 60 * 1000


async def check() -> int:
    logger.info(f"Connecting to {app_settings.influxdb_host} (org {app_settings.influxdb_org or '-'})")
    logger.info(f"Bucket: {app_settings.influxdb_bucket}, measurement: {app_settings.influxdb_measurement}")

    client = InfluxDBStoreClient(app_settings)
    try:
        await client.connect()

        if not await client.health_check():
            logger.error("❌ InfluxDB ping failed")
            return 1
        logger.info("✅ InfluxDB ping successful")

        repo = SensorDataRepository(client)
        for field in MeasurementField:
            latest = await repo.fetch_latest(field, on_error=ErrorPolicy.RAISE)
            if latest is None:
                logger.warning(f"⚠️ No {field.value} reading in the last 24h")
            else:
                logger.info(f"  latest {field.value}: {latest.model_dump()}")

        readings = list(await repo.get_span(MeasurementField.COMBINED, ONE_HOUR_MS))
        logger.info(f"  last hour: {len(readings)} aggregated rows")

        logger.info("✅ InfluxDB check completed")
        return 0

    except TelemetryException as e:
        logger.error(f"❌ InfluxDB error: {e}")
        return 1
    finally:
        await client.close()


def main() -> int:
    return asyncio.run(check())


if __name__ == "__main__":
    sys.exit(main())
