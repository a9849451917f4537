from enum import Enum
from typing import FrozenSet, Optional


class MeasurementField(str, Enum):
    """Field selection served by an endpoint."""
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    COMBINED = "combined"

    @property
    def field_filter(self) -> Optional[str]:
        """Flux `_field` to filter on, or None to keep every field."""
        if self is MeasurementField.COMBINED:
            return None
        return self.value

    @property
    def required_fields(self) -> FrozenSet[str]:
        if self is MeasurementField.COMBINED:
            return frozenset({"temperature", "humidity"})
        return frozenset({self.value})


class AggregationFunction(str, Enum):
    """Flux aggregate functions usable in aggregateWindow."""
    MEAN = "mean"
    MEDIAN = "median"
    MIN = "min"
    MAX = "max"
    LAST = "last"


class ErrorPolicy(str, Enum):
    """What a lookup does with a store or row failure."""
    RAISE = "raise"
    ABSENT = "absent"
