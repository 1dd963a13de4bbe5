from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .models import HeaterState


@dataclass
class ControlState:
    enabled: bool = False
    desired_temperature: Optional[float] = None
    current_temperature: Optional[float] = None

    def decision(self) -> Optional[HeaterState]:
        return decide_heater_state(
            self.enabled, self.desired_temperature, self.current_temperature
        )


def decide_heater_state(
    enabled: bool,
    desired: Optional[float],
    current: Optional[float],
) -> Optional[HeaterState]:
    """
    Returns the state every heater should be in, or None when no decision
    can be made (controller disabled or a temperature not yet known).

    Heat only while strictly below the set-point; no dead band.
    """
    if not enabled:
        return None
    if desired is None or current is None:
        return None
    return HeaterState.ON if desired > current else HeaterState.OFF
