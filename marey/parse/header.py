"""
Parse the YAML header of a train line file.

```yaml
name: Local A
default_stop_time: 00:30
period: 01:00:00
runs:
  - 06:00
  - 06:30
repeat_runs: 1
base_color: "#1f77b4"
extra_stop_times:
  Meadow: 00:45
  Meadow#2: 01:00
stop_location:
  Hilltop: 3.5
```

The document is composed (not constructed) with `BaseLoader`: every scalar
stays a string and every node keeps its line, so `12:30` is never read as a
base-60 integer and field errors can point at the offending line.

`extra_stop_times` keys of the form `Stop#N` target the N-th visit of `Stop`
within a run, unless the whole key is itself the name of a Stop.
"""

from typing import Callable
import re
import math
import dataclasses

import yaml

from marey.ast import Stop, VisitIdx
from marey.times import Duration, TimeOfDay, parse_duration, parse_time_of_day
from marey.parse.error import Err, Ok, ParseError, Result

OCCURRENCE_KEY_RE = re.compile(r"^(.*)#([0-9]+)$")
NON_NEGATIVE_INT_RE = re.compile(r"^[0-9]+$")
BASE_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")

REQUIRED_KEYS = ("name", "default_stop_time", "period")
LEGACY_KEYS = {"custom_stop_times": "extra_stop_times"}


@dataclasses.dataclass(frozen=True)
class StopRef:
    """
    A header entry naming a Stop, checked later against the body's Stops.
    """

    key: str
    stop: Stop
    line: int


@dataclasses.dataclass(frozen=True)
class ExtraStopTime:
    """
    An `extra_stop_times` entry as written; whether `Stop#N` names a visit or
    a Stop is only known once the body has been read.
    """

    key: str
    dwell: Duration
    line: int


class HeaderBuilder:  # pylint: disable=too-many-instance-attributes
    """
    Collects header values and field errors while walking the YAML node tree.
    """

    name: str | None
    default_stop_time: Duration | None
    period: Duration | None
    period_line: int | None
    runs: list[TimeOfDay]
    repeat_runs: int
    extra_stop_times: dict[Stop, Duration]
    occurrence_extra_stop_times: dict[Stop, dict[VisitIdx, Duration]]
    extra_stop_time_lines: dict[str, int]
    stop_location: dict[Stop, float]
    base_color: str | None

    extra_entries: list[ExtraStopTime]
    stop_refs: list[StopRef]
    errors: list[ParseError]

    def __init__(self, file_name: str, first_line: int) -> None:
        self.name = None
        self.default_stop_time = None
        self.period = None
        self.period_line = None
        self.runs = []
        self.repeat_runs = 0
        self.extra_stop_times = {}
        self.occurrence_extra_stop_times = {}
        self.extra_stop_time_lines = {}
        self.stop_location = {}
        self.base_color = None

        self.extra_entries = []
        self.stop_refs = []
        self.errors = []

        self._file_name = file_name
        self._first_line = first_line

    def line_of(self, node: yaml.Node) -> int:
        """
        File line of a node; marks are 0-based within the header text.
        """

        return self._first_line + node.start_mark.line

    def error(self, node: yaml.Node | None, message: str) -> None:
        line = self.line_of(node) if node is not None else None
        self.errors.append(ParseError(self._file_name, line, message))

    def scalar(self, key: str, node: yaml.Node) -> str | None:
        if not isinstance(node, yaml.ScalarNode):
            self.error(node, f'"{key}" must be a single value')
            return None
        return node.value.strip()

    def mapping(
        self, key: str, node: yaml.Node
    ) -> list[tuple[yaml.ScalarNode, yaml.Node]]:
        """
        Entries of a map value; entries with non-scalar keys are reported and
        dropped.
        """

        if isinstance(node, yaml.ScalarNode) and node.value.strip() == "":
            return []
        if not isinstance(node, yaml.MappingNode):
            self.error(node, f'"{key}" must be a map')
            return []

        entries = []
        seen: set[str] = set()
        for k_node, v_node in node.value:
            if not isinstance(k_node, yaml.ScalarNode):
                self.error(k_node, f'"{key}" keys must be stop names')
                continue

            entry_key = k_node.value.strip()
            if entry_key in seen:
                self.error(k_node, f'Duplicate {key} key "{entry_key}"')
                continue
            seen.add(entry_key)

            entries.append((k_node, v_node))

        return entries

    def resolve_extra_stop_times(self, stops: set[Stop]) -> None:
        """
        Sort `extra_stop_times` entries into flat and per-visit overrides.

        A key naming a declared Stop is always a flat override, so a Stop
        called `Platform#2` can still be targeted; otherwise `Stop#N` targets
        the N-th visit of `Stop`.
        """

        for entry in self.extra_entries:
            match = OCCURRENCE_KEY_RE.match(entry.key)
            if entry.key in stops or match is None:
                self.extra_stop_times[entry.key] = entry.dwell
                self.extra_stop_time_lines[entry.key] = entry.line
                self.stop_refs.append(
                    StopRef("extra_stop_times", entry.key, entry.line)
                )
                continue

            stop = match[1].strip()
            visit = int(match[2])
            if visit < 1:
                self.errors.append(
                    ParseError(
                        self._file_name,
                        entry.line,
                        f'extra_stop_times key "{entry.key}": occurrence must be >= 1',
                    )
                )
                continue

            self.occurrence_extra_stop_times.setdefault(stop, {})[visit] = entry.dwell
            self.extra_stop_time_lines[f"{stop}#{visit}"] = entry.line
            self.stop_refs.append(StopRef("extra_stop_times", stop, entry.line))


def _name(builder: HeaderBuilder, node: yaml.Node) -> None:
    value = builder.scalar("name", node)
    if value is not None:
        builder.name = value


def _default_stop_time(builder: HeaderBuilder, node: yaml.Node) -> None:
    value = builder.scalar("default_stop_time", node)
    if value is None:
        return

    res = parse_duration(value)
    if isinstance(res, Err):
        builder.error(node, f"default_stop_time: {res.error}")
        return

    builder.default_stop_time = res.value


def _period(builder: HeaderBuilder, node: yaml.Node) -> None:
    value = builder.scalar("period", node)
    if value is None:
        return

    res = parse_duration(value)
    if isinstance(res, Err):
        builder.error(node, f"period: {res.error}")
        return

    builder.period = res.value
    builder.period_line = builder.line_of(node)


def _runs(builder: HeaderBuilder, node: yaml.Node) -> None:
    items: list[tuple[str, yaml.Node]] = []

    if isinstance(node, yaml.SequenceNode):
        for item_node in node.value:
            value = builder.scalar("runs", item_node)
            if value is not None:
                items.append((value, item_node))
    elif isinstance(node, yaml.ScalarNode):
        # NOTE: "runs: 06:00, 06:30" on a single line
        for value in node.value.strip().strip("[]").split(","):
            if value.strip():
                items.append((value.strip(), node))
    else:
        builder.error(node, '"runs" must be a list of times of day')
        return

    for value, item_node in items:
        res = parse_time_of_day(value)
        if isinstance(res, Err):
            builder.error(item_node, f'runs entry "{value}": {res.error}')
            continue
        builder.runs.append(res.value)


def _repeat_runs(builder: HeaderBuilder, node: yaml.Node) -> None:
    value = builder.scalar("repeat_runs", node)
    if value is None:
        return

    if NON_NEGATIVE_INT_RE.match(value) is None:
        builder.error(node, f'"repeat_runs" must be a non-negative integer: {value}')
        return

    builder.repeat_runs = int(value)


def _extra_stop_times(builder: HeaderBuilder, node: yaml.Node) -> None:
    for k_node, v_node in builder.mapping("extra_stop_times", node):
        key = k_node.value.strip()
        value = builder.scalar(f"extra_stop_times[{key}]", v_node)
        if value is None:
            continue

        res = parse_duration(value)
        if isinstance(res, Err):
            builder.error(v_node, f"Invalid extra_stop_times for {key}: {res.error}")
            continue

        builder.extra_entries.append(
            ExtraStopTime(key, res.value, builder.line_of(k_node))
        )


def _stop_location(builder: HeaderBuilder, node: yaml.Node) -> None:
    for k_node, v_node in builder.mapping("stop_location", node):
        stop = k_node.value.strip()
        value = builder.scalar(f"stop_location[{stop}]", v_node)
        if value is None:
            continue

        builder.stop_refs.append(StopRef("stop_location", stop, builder.line_of(k_node)))

        try:
            location = float(value)
        except ValueError:
            location = math.nan

        if not math.isfinite(location) or location < 0:
            builder.error(v_node, f"stop_location[{stop}] must be a non-negative number")
            continue

        builder.stop_location[stop] = location


def _base_color(builder: HeaderBuilder, node: yaml.Node) -> None:
    value = builder.scalar("base_color", node)
    if value is None:
        return

    match = BASE_COLOR_RE.match(value)
    if match is None:
        builder.error(node, f'"base_color" must be a hex colour like "#1f77b4": {value}')
        return

    builder.base_color = f"#{match[1].lower()}"


KEY_HANDLERS: dict[str, Callable[[HeaderBuilder, yaml.Node], None]] = {
    "name": _name,
    "default_stop_time": _default_stop_time,
    "period": _period,
    "runs": _runs,
    "repeat_runs": _repeat_runs,
    "extra_stop_times": _extra_stop_times,
    "stop_location": _stop_location,
    "base_color": _base_color,
}


def parse_header(
    text: str, file_name: str, first_line: int
) -> Result[HeaderBuilder, list[ParseError]]:
    """
    Parse header text starting at file line `first_line`.

    Unparsable YAML is structural and returned as an `Err`; field errors are
    collected on the returned builder so that the body can still be checked.
    """

    try:
        root = yaml.compose(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = first_line + mark.line if mark is not None else None
        problem = getattr(e, "problem", None) or str(e)
        return Err([ParseError(file_name, line, f"Invalid header syntax: {problem}")])

    builder = HeaderBuilder(file_name, first_line)
    seen: set[str] = set()

    if isinstance(root, yaml.MappingNode):
        entries = root.value
    else:
        if root is not None:
            builder.error(root, "Header must be a map of keys to values")
        entries = []

    for k_node, v_node in entries:
        if not isinstance(k_node, yaml.ScalarNode):
            builder.error(k_node, "Header keys must be plain names")
            continue

        key = k_node.value.strip()
        if key in seen:
            builder.error(k_node, f'Duplicate header key "{key}"')
            continue
        seen.add(key)

        if key in LEGACY_KEYS:
            builder.error(k_node, f'"{key}" has been renamed to "{LEGACY_KEYS[key]}"')
            continue

        handler = KEY_HANDLERS.get(key)
        if handler is None:
            builder.error(k_node, f'Unknown header key "{key}"')
            continue

        handler(builder, v_node)

    for key in REQUIRED_KEYS:
        if key not in seen:
            builder.error(None, f'Header is missing required key "{key}"')

    return Ok(builder)
