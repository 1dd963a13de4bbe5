import pytest

from hub.domain.controller import ControlState, decide_heater_state
from hub.domain.models import Heater, HeaterState


@pytest.mark.parametrize(
    "enabled, desired, current, expected",
    [
        (False, 21.0, 18.0, None),
        (False, None, None, None),
        (True, None, 18.0, None),
        (True, 21.0, None, None),
        (True, None, None, None),
        (True, 21.5, 19.0, HeaterState.ON),
        (True, 19.0, 21.5, HeaterState.OFF),
        (True, 20.0, 20.0, HeaterState.OFF),
        (True, -2.0, -5.5, HeaterState.ON),
    ],
)
def test_decide_heater_state(enabled, desired, current, expected):
    assert decide_heater_state(enabled, desired, current) is expected


def test_control_state_defaults_to_no_decision():
    state = ControlState()
    assert state.enabled is False
    assert state.desired_temperature is None
    assert state.current_temperature is None
    assert state.decision() is None


def test_control_state_decision_uses_its_fields():
    state = ControlState(enabled=True, desired_temperature=22.0, current_temperature=21.9)
    assert state.decision() is HeaterState.ON


def test_heater_state_encodings():
    assert HeaterState.ON.value == "on"
    assert HeaterState.OFF.value == "off"
    assert HeaterState.ON.as_int == 1
    assert HeaterState.OFF.as_int == 0
    assert HeaterState.from_int(1) is HeaterState.ON
    assert HeaterState.from_int(0) is HeaterState.OFF
    assert HeaterState("on") is HeaterState.ON


def test_heater_command_topic():
    assert Heater(id="C4402D", name="Spisebord").command_topic == "shellies/shelly1-C4402D/relay/0/command"
