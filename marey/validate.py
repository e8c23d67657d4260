"""
Checks spanning several parsed documents.

Errors are fatal problems; warnings (messages starting with "Warning:") are
advisory and never block schedule computation.
"""

from typing import Sequence

from marey.ast import ParsedTrainLine, Stop, Topology
from marey.const import DEFAULT_TOPOLOGY_FILE, WARNING_PREFIX
from marey.parse.error import ParseError
from marey.schedules import natural_runtime
from marey.times import Duration, format_duration


def check_stop_existence(
    lines: Sequence[ParsedTrainLine],
    topology: Topology | None,
    topology_file: str = DEFAULT_TOPOLOGY_FILE,
) -> list[ParseError]:
    """
    Every topology Stop must be served by at least one parsed line.
    """

    if topology is None:
        return []

    served: set[Stop] = set()
    for line in lines:
        served |= line.spec.stops()

    return [
        ParseError(
            topology_file,
            None,
            f'Topology stop "{stop}" does not exist in any loaded train line',
        )
        for stop in topology.stops
        if stop not in served
    ]


def check_zero_effect_overrides(lines: Sequence[ParsedTrainLine]) -> list[ParseError]:
    """
    Flag `extra_stop_times` entries of exactly zero.
    """

    warnings = []

    for line in lines:
        meta = line.spec.meta

        keys = [stop for stop, dwell in meta.extra_stop_times.items() if dwell == 0]
        for stop, visits in meta.occurrence_extra_stop_times.items():
            keys.extend(f"{stop}#{visit}" for visit, dwell in visits.items() if dwell == 0)

        for key in keys:
            warnings.append(
                ParseError(
                    line.file_name,
                    meta.extra_stop_time_lines.get(key),
                    f'{WARNING_PREFIX}extra_stop_times entry "{key}" is 0 and has no effect',
                )
            )

    return warnings


def check_period_overruns(lines: Sequence[ParsedTrainLine]) -> list[ParseError]:
    """
    Flag lines whose trip, dwell included, takes longer than their period.
    """

    warnings = []

    for line in lines:
        period = line.spec.meta.period
        runtime = natural_runtime(line.spec)
        if runtime <= period:
            continue

        overrun = Duration(runtime - period)
        warnings.append(
            ParseError(
                line.file_name,
                None,
                (
                    f"{WARNING_PREFIX}runtime {format_duration(runtime)} of line"
                    f' "{line.spec.meta.name}" exceeds its period'
                    f" {format_duration(period)} by {format_duration(overrun)}"
                ),
            )
        )

    return warnings


def validate(
    lines: Sequence[ParsedTrainLine],
    topology: Topology | None,
    topology_file: str = DEFAULT_TOPOLOGY_FILE,
) -> tuple[list[ParseError], list[ParseError]]:
    """
    Run every cross-document check; returns (errors, warnings).
    """

    errors = check_stop_existence(lines, topology, topology_file)
    warnings = check_zero_effect_overrides(lines) + check_period_overruns(lines)

    return (errors, warnings)
