from fastapi import Request

from ..repos.sensor_data_repo import SensorDataRepository


def get_sensor_repository(request: Request) -> SensorDataRepository:
    """Repository bound to the store client created in the app lifespan."""
    return request.app.state.sensor_repo
