import pytest

from hub.messaging.topics import RELAY, SUBSCRIPTIONS, TEMPERATURE, TopicFilter, shelly_id


def test_subscription_patterns():
    assert [f.pattern for f in SUBSCRIPTIONS] == [
        "temperature/+",
        "measurement/+",
        "shellies/+/relay/0",
    ]


@pytest.mark.parametrize(
    "topic, expected",
    [
        ("temperature/set", ("set",)),
        ("temperature/inside", ("inside",)),
        ("temperature", None),
        ("temperature/set/extra", None),
        ("humidity/set", None),
    ],
)
def test_single_level_wildcard(topic, expected):
    assert TEMPERATURE.match(topic) == expected


def test_relay_filter_rejects_command_topic():
    assert RELAY.match("shellies/shelly1-C4402D/relay/0") == ("shelly1-C4402D",)
    assert RELAY.match("shellies/shelly1-C4402D/relay/0/command") is None
    assert RELAY.match("shellies/shelly1-C4402D/relay/1") is None


def test_multi_level_wildcard():
    f = TopicFilter("shellies/#")
    assert f.match("shellies/shelly1-C4402D/relay/0") == ("shelly1-C4402D/relay/0",)
    assert f.match("other/x") is None


@pytest.mark.parametrize(
    "device, expected",
    [
        ("shelly1-C4402D", "C4402D"),
        ("shelly1-10db9c", "10db9c"),
        ("shelly1-C4402", None),
        ("shelly1-C4402DD", None),
        ("shelly1-XYZ123", None),
        ("shelly2-C4402D", None),
    ],
)
def test_shelly_id(device, expected):
    assert shelly_id(device) == expected
