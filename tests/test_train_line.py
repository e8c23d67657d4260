import pytest

from marey.ast import TrainLineSegment
from marey.parse.error import Err, Ok
from marey.parse.train_line import parse_train_line


def _line(header, body="Central\n02:00\nEast Side\n"):
    return f"---\n{header}---\n{body}"


def _messages(res):
    assert isinstance(res, Err)
    return [e.message for e in res.error]


def test_parse_local_a(local_a_text):
    res = parse_train_line(local_a_text, "local-a.txt")
    assert isinstance(res, Ok)

    meta = res.value.meta
    assert meta.name == "Local A"
    assert meta.default_stop_time == 30
    assert meta.period == 3600
    assert meta.runs == [21600, 23400]
    assert meta.repeat_runs == 1
    assert meta.extra_stop_times == {"Meadow": 45}
    assert meta.occurrence_extra_stop_times == {"Meadow": {2: 60}}
    assert meta.stop_location == {}
    assert meta.base_color is None

    segments = res.value.segments
    assert [s.stop for s in segments] == [
        "Central",
        "East Side",
        "Meadow",
        "Hilltop",
        "Meadow",
        "East Side",
        "Central",
    ]
    assert segments[0] == TrainLineSegment("Central", 120)
    assert segments[-1] == TrainLineSegment("Central", None)


def test_parsing_is_idempotent(local_a_text):
    assert parse_train_line(local_a_text, "a") == parse_train_line(local_a_text, "a")


def test_optional_keys():
    header = (
        "name: Express\n"
        "default_stop_time: 00:20\n"
        "period: 00:30:00\n"
        "runs: 06:00, 25:00\n"
        'base_color: "#1F77B4"\n'
        "stop_location:\n"
        "  East Side: 3.5\n"
        '  Central: "0"\n'
    )
    res = parse_train_line(_line(header))
    assert isinstance(res, Ok)

    meta = res.value.meta
    assert meta.runs == [21600, 90000]
    assert meta.repeat_runs == 0
    assert meta.base_color == "#1f77b4"
    assert meta.stop_location == {"East Side": 3.5, "Central": 0.0}


def test_runs_in_space_separated_form():
    header = "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\nruns:\n  - 06 30\n"
    res = parse_train_line(_line(header))
    assert isinstance(res, Ok)
    assert res.value.meta.runs == [23400]


def test_inline_extra_stop_times():
    header = (
        "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
        'extra_stop_times: { East Side: "01:00", "Central#2": "00:10" }\n'
    )
    body = "Central\n01:00\nEast Side\n01:00\nCentral\n"
    res = parse_train_line(_line(header, body))
    assert isinstance(res, Ok)
    assert res.value.meta.extra_stop_times == {"East Side": 60}
    assert res.value.meta.occurrence_extra_stop_times == {"Central": {2: 10}}


def test_body_comments_and_blank_lines():
    header = "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
    body = "\n# origin\nCentral\n\n# travel\n02:00\n\nEast Side\n\n"
    res = parse_train_line(_line(header, body))
    assert isinstance(res, Ok)
    assert res.value.segments == [
        TrainLineSegment("Central", 120),
        TrainLineSegment("East Side", None),
    ]


@pytest.mark.parametrize(
    "text",
    [
        "Central\n02:00\nEast Side\n",
        "---\nname: L\nCentral\n02:00\nEast Side\n",
        "# comment\n---\nname: L\n---\nCentral\n",
    ],
)
def test_missing_header(text):
    res = parse_train_line(text, "l.txt")
    assert isinstance(res, Err)
    assert len(res.error) == 1
    assert "Missing header" in res.error[0].message


def test_invalid_header_syntax_stops_parsing():
    res = parse_train_line(_line("name: [unclosed\n", "Central\n"), "l.txt")
    assert isinstance(res, Err)
    assert len(res.error) == 1
    assert "Invalid header syntax" in res.error[0].message


def test_errors_are_accumulated():
    header = (
        "name: L\n"
        "default_stop_time: 0:99\n"
        "period: 01:00:00\n"
        "runs:\n"
        "  - 6h\n"
    )
    body = "Central\n1:75\nEast Side\n"
    res = parse_train_line(_line(header, body), "l.txt")

    assert isinstance(res, Err)
    lines = sorted(e.line for e in res.error)
    assert lines == [3, 6, 9]
    assert all(e.file == "l.txt" for e in res.error)


def test_missing_required_keys():
    res = parse_train_line(_line("runs:\n  - 06:00\n"))
    messages = _messages(res)
    for key in ["name", "default_stop_time", "period"]:
        assert f'missing required key "{key}"' in " ".join(messages)


def test_empty_name_and_zero_period():
    header = 'name: ""\ndefault_stop_time: 00:20\nperiod: 00:00\n'
    res = parse_train_line(_line(header))
    messages = _messages(res)
    assert 'Header "name" must be non-empty' in messages
    assert '"period" must be > 0' in messages

    period_error = [e for e in res.error if "period" in e.message][0]
    assert period_error.line == 4


def test_unknown_and_legacy_keys():
    header = (
        "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
        "colour: red\n"
        "custom_stop_times:\n  Central: 00:10\n"
    )
    messages = _messages(parse_train_line(_line(header)))
    assert 'Unknown header key "colour"' in messages
    assert '"custom_stop_times" has been renamed to "extra_stop_times"' in messages


def test_override_keys_must_name_stops():
    header = (
        "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
        "extra_stop_times:\n"
        "  Nowhere: 00:10\n"
        "  Elsewhere#2: 00:10\n"
        "stop_location:\n"
        "  Somewhere: 1\n"
    )
    res = parse_train_line(_line(header))
    messages = _messages(res)
    assert messages == [
        'extra_stop_times contains unknown stop "Nowhere"',
        'extra_stop_times contains unknown stop "Elsewhere"',
        'stop_location contains unknown stop "Somewhere"',
    ]
    assert [e.line for e in res.error] == [6, 7, 9]


@pytest.mark.parametrize("value", ["-1", "abc", "inf", "nan"])
def test_stop_location_must_be_non_negative_number(value):
    header = (
        "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
        f"stop_location:\n  Central: {value}\n"
    )
    messages = _messages(parse_train_line(_line(header)))
    assert messages == ["stop_location[Central] must be a non-negative number"]


def test_wrong_value_shapes():
    header = (
        "name:\n  - a\n"
        "default_stop_time: 00:20\nperiod: 10:00\n"
        "repeat_runs: -1\n"
        "extra_stop_times: 00:10\n"
        "base_color: red\n"
    )
    messages = _messages(parse_train_line(_line(header)))
    assert len(messages) == 4
    assert '"name" must be a single value' in messages
    assert '"extra_stop_times" must be a map' in messages


def test_at_least_two_stops():
    header = "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
    messages = _messages(parse_train_line(_line(header, "Central\n")))
    assert messages == ["At least two stops are required"]


def test_travel_time_placement():
    header = "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"

    res = parse_train_line(_line(header, "Central\nEast Side\n"))
    assert _messages(res) == ['Missing travel time between "Central" and "East Side"']
    assert res.error[0].line == 7

    res = parse_train_line(_line(header, "Central\n01:00\nEast Side\n01:00\n"))
    assert _messages(res) == [
        'The last stop "East Side" must not be followed by a travel time'
    ]
    assert res.error[0].line == 9

    res = parse_train_line(_line(header, "01:00\nCentral\n01:00\n02:00\nEast Side\n"))
    assert _messages(res) == [
        "Travel time before the first stop",
        'Second travel time after "Central"',
    ]


def test_duplicate_header_keys():
    header = (
        "name: A\n"
        "name: B\n"
        "default_stop_time: 00:20\nperiod: 10:00\n"
        "runs: [06:00]\n"
        "runs: [07:00]\n"
    )
    res = parse_train_line(_line(header))
    assert _messages(res) == [
        'Duplicate header key "name"',
        'Duplicate header key "runs"',
    ]
    assert [e.line for e in res.error] == [3, 7]


def test_duplicate_extra_stop_times_key():
    header = (
        "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
        "extra_stop_times:\n  East Side: 00:10\n  East Side: 00:40\n"
    )
    res = parse_train_line(_line(header))
    assert _messages(res) == ['Duplicate extra_stop_times key "East Side"']
    assert res.error[0].line == 7


def test_stop_named_like_an_occurrence_key():
    header = (
        "name: L\ndefault_stop_time: 00:20\nperiod: 10:00\n"
        "extra_stop_times:\n  Platform#2: 00:10\n  Central#2: 00:05\n"
    )
    body = "Central\n01:00\nPlatform#2\n01:00\nCentral\n"
    res = parse_train_line(_line(header, body))
    assert isinstance(res, Ok)

    meta = res.value.meta
    assert meta.extra_stop_times == {"Platform#2": 10}
    assert meta.occurrence_extra_stop_times == {"Central": {2: 5}}
    assert meta.extra_stop_time_lines == {"Platform#2": 6, "Central#2": 7}
