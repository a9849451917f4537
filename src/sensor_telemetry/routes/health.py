import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    store_client = request.app.state.store_client
    influxdb_ok = await store_client.health_check()

    return {
        "status": "healthy" if influxdb_ok else "degraded",
        "influxdb": "OK" if influxdb_ok else "UNREACHABLE",
        "bucket": store_client.bucket,
        "measurement": store_client.measurement,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
