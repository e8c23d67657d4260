"""
Expand train lines into concrete runs.
"""

from typing import Iterator
import dataclasses

from marey.ast import (
    RunInstance,
    Stop,
    StopSchedulePoint,
    TrainLineMeta,
    TrainLineSpec,
)
from marey.times import Duration, TimeOfDay, add, compare, elapsed, shift


def resolve_dwell(meta: TrainLineMeta, stop: Stop, visit: int) -> Duration:
    """
    Dwell time for the `visit`-th (1-based) visit of a Stop within a run.

    An occurrence-specific override replaces the Stop's flat override, which in
    turn replaces the line's default stop time.
    """

    occurrence = meta.occurrence_extra_stop_times.get(stop, {})
    if visit in occurrence:
        return occurrence[visit]

    if stop in meta.extra_stop_times:
        return meta.extra_stop_times[stop]

    return meta.default_stop_time


def expand_run_starts(meta: TrainLineMeta) -> Iterator[TimeOfDay]:
    """
    Every declared run start, each followed by `repeat_runs` repetitions one
    period apart.
    """

    for start in meta.runs:
        for k in range(meta.repeat_runs + 1):
            yield shift(start, Duration(k * meta.period))


def _walk(spec: TrainLineSpec, run_start: TimeOfDay) -> list[StopSchedulePoint]:
    schedule = []
    visits: dict[Stop, int] = {}

    cursor = run_start
    for i, segment in enumerate(spec.segments):
        visit = visits.get(segment.stop, 0) + 1
        visits[segment.stop] = visit

        # no dwell at the origin, overrides included
        dwell = Duration(0) if i == 0 else resolve_dwell(spec.meta, segment.stop, visit)

        arrival = cursor
        departure = shift(arrival, dwell)
        schedule.append(StopSchedulePoint(segment.stop, arrival, departure))

        travel = segment.travel_to_next if segment.travel_to_next is not None else 0
        cursor = shift(departure, Duration(travel))

    return schedule


def natural_runtime(spec: TrainLineSpec) -> Duration:
    """
    Time from origin departure to terminus departure, before any idling at the
    terminus is added.
    """

    schedule = _walk(spec, TimeOfDay(0))
    total = Duration(0)
    for point in schedule:
        total = add(total, elapsed(point.arrival, point.departure))

    for segment in spec.segments:
        if segment.travel_to_next is not None:
            total = add(total, segment.travel_to_next)

    return total


def compute_runs_for_line(spec: TrainLineSpec) -> list[RunInstance]:
    """
    Simulate every run of a line.

    A run that reaches its terminus early idles there until `run_start +
    period`, so consecutive runs of a line stay exactly one period apart.
    """

    runs = []

    for run_start in expand_run_starts(spec.meta):
        schedule = _walk(spec, run_start)

        planned_end = shift(run_start, spec.meta.period)
        last = schedule[-1]
        if compare(last.departure, planned_end) < 0:
            schedule[-1] = dataclasses.replace(last, departure=planned_end)

        runs.append(RunInstance(spec.meta.name, run_start, schedule))

    return runs
