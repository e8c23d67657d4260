"""
Parse a train line file: a YAML header between two `---` lines, then a body
of stop names alternating with the travel time to the next stop.

```text
---
name: Local A
default_stop_time: 00:30
period: 01:00:00
runs:
  - 06:00
---
Central
02:00
East Side
02:30
Meadow
```
"""

import re

from marey.ast import Stop, TrainLineMeta, TrainLineSegment, TrainLineSpec
from marey.const import COMMENT_PREFIX, DEFAULT_TRAIN_LINE_FILE, HEADER_DELIMITER
from marey.times import Duration, parse_duration
from marey.parse.error import Err, Ok, ParseError, Result
from marey.parse.header import HeaderBuilder, parse_header

# NOTE: anything made of digits and colons is meant as a travel time, even if
# it turns out to be malformed
TRAVEL_LIKE_RE = re.compile(r"^[0-9]+(?::[0-9]+)+$")


def _split_header(lines: list[str]) -> tuple[int, int] | None:
    """
    Indexes of the opening and closing delimiter lines; only blank lines may
    precede the opening one.
    """

    i = 0
    while i < len(lines) and len(lines[i].strip()) == 0:
        i += 1

    if i >= len(lines) or lines[i].strip() != HEADER_DELIMITER:
        return None

    for j in range(i + 1, len(lines)):
        if lines[j].strip() == HEADER_DELIMITER:
            return (i, j)

    return None


def _parse_body(
    lines: list[str], file_name: str, first_line: int
) -> tuple[list[TrainLineSegment], list[ParseError]]:
    stops: list[Stop] = []
    travels: dict[int, Duration] = {}
    errors: list[ParseError] = []

    last_kind: str | None = None
    last_travel_line = first_line

    for line_no, raw in enumerate(lines, start=first_line):
        token = raw.strip()
        if len(token) == 0 or token.startswith(COMMENT_PREFIX):
            continue

        if TRAVEL_LIKE_RE.match(token) is not None:
            if not stops:
                errors.append(
                    ParseError(file_name, line_no, "Travel time before the first stop")
                )
            elif last_kind == "travel":
                errors.append(
                    ParseError(
                        file_name, line_no, f'Second travel time after "{stops[-1]}"'
                    )
                )
            else:
                res = parse_duration(token)
                if isinstance(res, Err):
                    errors.append(
                        ParseError(file_name, line_no, f"Invalid travel time: {res.error}")
                    )
                else:
                    travels[len(stops) - 1] = res.value

            last_kind = "travel"
            last_travel_line = line_no
            continue

        if last_kind == "stop":
            errors.append(
                ParseError(
                    file_name,
                    line_no,
                    f'Missing travel time between "{stops[-1]}" and "{token}"',
                )
            )

        stops.append(token)
        last_kind = "stop"

    if stops and last_kind == "travel":
        errors.append(
            ParseError(
                file_name,
                last_travel_line,
                f'The last stop "{stops[-1]}" must not be followed by a travel time',
            )
        )

    segments = [TrainLineSegment(stop, travels.get(i)) for i, stop in enumerate(stops)]
    return (segments, errors)


def _cross_check(
    header: HeaderBuilder, segments: list[TrainLineSegment], file_name: str
) -> list[ParseError]:
    errors: list[ParseError] = []

    if header.name is not None and len(header.name) == 0:
        errors.append(ParseError(file_name, None, 'Header "name" must be non-empty'))

    if len(segments) < 2:
        errors.append(ParseError(file_name, None, "At least two stops are required"))

    if header.period is not None and header.period <= 0:
        errors.append(ParseError(file_name, header.period_line, '"period" must be > 0'))

    stops = {segment.stop for segment in segments}
    for ref in sorted(header.stop_refs, key=lambda r: r.line):
        if ref.stop not in stops:
            errors.append(
                ParseError(
                    file_name, ref.line, f'{ref.key} contains unknown stop "{ref.stop}"'
                )
            )

    return errors


def parse_train_line(
    text: str, file_name: str = DEFAULT_TRAIN_LINE_FILE
) -> Result[TrainLineSpec, list[ParseError]]:
    """
    Parse a train line file, reporting every problem found in one pass.
    """

    lines = text.split("\n")

    delimiters = _split_header(lines)
    if delimiters is None:
        return Err(
            [ParseError(file_name, None, f"Missing header delimited by {HEADER_DELIMITER}")]
        )

    open_idx, close_idx = delimiters
    header_text = "\n".join(lines[open_idx + 1 : close_idx])

    header_res = parse_header(header_text, file_name, open_idx + 2)
    if isinstance(header_res, Err):
        return header_res

    header = header_res.value
    segments, body_errors = _parse_body(lines[close_idx + 1 :], file_name, close_idx + 2)
    header.resolve_extra_stop_times({segment.stop for segment in segments})

    errors = header.errors + body_errors + _cross_check(header, segments, file_name)
    if errors:
        return Err(errors)

    assert header.name is not None
    assert header.default_stop_time is not None
    assert header.period is not None

    meta = TrainLineMeta(
        name=header.name,
        default_stop_time=header.default_stop_time,
        period=header.period,
        runs=header.runs,
        repeat_runs=header.repeat_runs,
        extra_stop_times=header.extra_stop_times,
        occurrence_extra_stop_times=header.occurrence_extra_stop_times,
        extra_stop_time_lines=header.extra_stop_time_lines,
        stop_location=header.stop_location,
        base_color=header.base_color,
    )

    return Ok(TrainLineSpec(meta, segments))
