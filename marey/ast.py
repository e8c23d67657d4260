"""
Train lines, topologies, runs and plotted series.
"""

from typing import TypeAlias
import dataclasses

import serde

from marey.times import Duration, TimeOfDay
from marey.parse.error import ParseError

Stop: TypeAlias = str
VisitIdx: TypeAlias = int


@serde.serde
@dataclasses.dataclass(frozen=True)
class TrainLineMeta:  # pylint: disable=too-many-instance-attributes
    """
    Header of a train line file (e.g. name, dwell and period rules, run starts).
    """

    name: str
    default_stop_time: Duration
    period: Duration
    runs: list[TimeOfDay]
    repeat_runs: int = 0
    extra_stop_times: dict[Stop, Duration] = serde.field(default_factory=dict)
    occurrence_extra_stop_times: dict[Stop, dict[VisitIdx, Duration]] = serde.field(
        default_factory=dict
    )
    stop_location: dict[Stop, float] = serde.field(default_factory=dict)
    base_color: str | None = None
    # header line of each extra_stop_times entry, keyed "Stop" or "Stop#N"
    extra_stop_time_lines: dict[str, int] = serde.field(
        default_factory=dict, skip=True
    )


@serde.serde
@dataclasses.dataclass(frozen=True)
class TrainLineSegment:
    """
    A Stop and the travel time to the next one (absent for the last Stop).
    """

    stop: Stop
    travel_to_next: Duration | None


@serde.serde
@dataclasses.dataclass(frozen=True)
class TrainLineSpec:
    """
    A validated train line: metadata plus at least two ordered segments.
    """

    meta: TrainLineMeta
    segments: list[TrainLineSegment]

    def stops(self) -> set[Stop]:
        return {segment.stop for segment in self.segments}


@dataclasses.dataclass(frozen=True)
class ParsedTrainLine:
    """
    A TrainLineSpec with the name of the file it came from.
    """

    file_name: str
    spec: TrainLineSpec


@serde.serde
@dataclasses.dataclass(frozen=True)
class Topology:
    """
    The ordered, duplicate-free Stops making up the distance axis.
    """

    stops: list[Stop]


@serde.serde
@dataclasses.dataclass(frozen=True)
class StopSchedulePoint:
    """
    Arrival at and departure from a Stop, in seconds since the day origin.
    """

    stop: Stop
    arrival: TimeOfDay
    departure: TimeOfDay


@serde.serde
@dataclasses.dataclass(frozen=True)
class RunInstance:
    """
    One concrete, simulated run of a train line.
    """

    line_name: str
    run_start: TimeOfDay
    schedule: list[StopSchedulePoint]


@serde.serde
@dataclasses.dataclass(frozen=True)
class GraphPoint:
    distance: float
    time: TimeOfDay


@serde.serde
@dataclasses.dataclass(frozen=True)
class GraphSeries:
    """
    A plottable path in the time-distance diagram.
    """

    id: str
    color: str
    points: list[GraphPoint]


@serde.serde
@dataclasses.dataclass(frozen=True)
class Diagram:
    """
    Everything derived from one set of input files.
    """

    series: list[GraphSeries]
    errors: list[ParseError]
    warnings: list[ParseError]
