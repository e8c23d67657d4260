import pytest

from marey.ast import TrainLineMeta, TrainLineSegment, TrainLineSpec
from marey.times import Duration, TimeOfDay

LOCAL_A = """---
name: Local A
default_stop_time: 00:30
period: 01:00:00
runs:
  - 06:00
  - 06:30
repeat_runs: 1
extra_stop_times:
  Meadow: 00:45
  Meadow#2: 01:00
---
Central
02:00
East Side
02:30
Meadow
01:45
Hilltop
01:45
Meadow
02:30
East Side
02:00
Central
"""

TOPOLOGY = """# Topology: one stop per line
Central
East Side
Meadow
Hilltop
"""


@pytest.fixture
def local_a_text():
    return LOCAL_A


@pytest.fixture
def topology_text():
    return TOPOLOGY


def make_spec(
    stops,
    travels,
    default_stop_time=30,
    period=200,
    runs=(0,),
    repeat_runs=0,
    extra_stop_times=None,
    occurrence_extra_stop_times=None,
    stop_location=None,
    name="L",
):
    segments = [
        TrainLineSegment(stop, Duration(travels[i]) if i < len(travels) else None)
        for i, stop in enumerate(stops)
    ]
    meta = TrainLineMeta(
        name=name,
        default_stop_time=Duration(default_stop_time),
        period=Duration(period),
        runs=[TimeOfDay(r) for r in runs],
        repeat_runs=repeat_runs,
        extra_stop_times=extra_stop_times or {},
        occurrence_extra_stop_times=occurrence_extra_stop_times or {},
        stop_location=stop_location or {},
    )
    return TrainLineSpec(meta, segments)


@pytest.fixture
def spec_factory():
    return make_spec
