"""
Parse a topology: one stop name per line, in distance-axis order.

```text
# comments and blank lines are ignored
Central
East Side
Meadow
```
"""

from marey.ast import Stop, Topology
from marey.const import COMMENT_PREFIX, DEFAULT_TOPOLOGY_FILE
from marey.parse.error import Err, Ok, ParseError, Result


def parse_topology(
    text: str, file_name: str = DEFAULT_TOPOLOGY_FILE
) -> Result[Topology, list[ParseError]]:
    """
    Parse a topology document; every duplicate stop is reported.
    """

    stops: list[Stop] = []
    first_seen: dict[Stop, int] = {}
    errors: list[ParseError] = []

    for line_no, raw in enumerate(text.split("\n"), start=1):
        stop = raw.strip()
        if len(stop) == 0 or stop.startswith(COMMENT_PREFIX):
            continue

        if stop in first_seen:
            errors.append(
                ParseError(
                    file_name,
                    line_no,
                    f'Duplicate stop name "{stop}" (first seen at line {first_seen[stop]})',
                )
            )
            continue

        first_seen[stop] = line_no
        stops.append(stop)

    if len(stops) == 0:
        errors.append(ParseError(file_name, None, "Topology contains no stops"))

    if errors:
        return Err(errors)

    return Ok(Topology(stops))
