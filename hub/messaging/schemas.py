from __future__ import annotations
from pydantic import BaseModel, ConfigDict

from ..domain.models import Measurement


class MeasurementPayload(BaseModel):
    """JSON body published on measurement/<place>."""

    model_config = ConfigDict(allow_inf_nan=False)

    temperature: float
    humidity: float

    def to_measurement(self) -> Measurement:
        return Measurement(temperature=self.temperature, humidity=self.humidity)
