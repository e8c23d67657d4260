"""
Project runs onto a topology's distance axis.
"""

from marey.ast import GraphPoint, GraphSeries, RunInstance, Topology, TrainLineSpec
from marey.colors import color_for
from marey.times import format_time_of_day


def series_id(run: RunInstance) -> str:
    return f"{run.line_name}@{format_time_of_day(run.run_start)}"


def graph_points(
    run: RunInstance, spec: TrainLineSpec, topology: Topology
) -> list[GraphPoint]:
    """
    Points of a run at the Stops present in the topology; a Stop with a dwell
    gets a second point at its departure, drawing a vertical segment.
    """

    stop_idx = {stop: i for i, stop in enumerate(topology.stops)}
    points = []

    for point in run.schedule:
        if point.stop not in stop_idx:
            continue

        distance = spec.meta.stop_location.get(point.stop, float(stop_idx[point.stop]))

        points.append(GraphPoint(distance, point.arrival))
        if point.departure != point.arrival:
            points.append(GraphPoint(distance, point.departure))

    return points


def build_graph_series(
    runs: list[RunInstance], spec: TrainLineSpec, topology: Topology
) -> list[GraphSeries]:
    """
    One series per run; runs with fewer than two plottable points are dropped.
    """

    series = []

    for run in runs:
        points = graph_points(run, spec, topology)
        if len(points) < 2:
            continue

        s_id = series_id(run)
        color = color_for(s_id, run.line_name, spec.meta.base_color)
        series.append(GraphSeries(s_id, color, points))

    return series
