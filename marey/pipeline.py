"""
Run the whole pipeline over a set of source files.
"""

from typing import Sequence
import dataclasses

from marey.ast import Diagram, GraphSeries, ParsedTrainLine, Topology
from marey.const import DEFAULT_TOPOLOGY_FILE
from marey.types import PipelineContext
from marey.parse.error import Err, MareyError, ParseError
from marey.parse.topology import parse_topology
from marey.parse.train_line import parse_train_line
from marey.schedules import compute_runs_for_line
from marey.series import build_graph_series
from marey.validate import validate


@dataclasses.dataclass(frozen=True)
class SourceFile:
    """
    Raw text of an input document.
    """

    name: str
    text: str


def read_source(path: str) -> SourceFile:
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise MareyError(f"could not read {path}: {e}") from e

    return SourceFile(path, text)


def parse_train_lines(
    ctx: PipelineContext, files: Sequence[SourceFile]
) -> tuple[list[ParsedTrainLine], list[ParseError]]:
    """
    Parse each train line file on its own; one file's errors don't keep the
    others from contributing.
    """

    lines = []
    errors = []

    for source in files:
        res = parse_train_line(source.text, source.name)
        if isinstance(res, Err):
            ctx.logger.info("%s: %d error(s)", source.name, len(res.error))
            errors.extend(res.error)
            continue

        spec = res.value
        ctx.logger.info(
            "%s: line %s with %d stops", source.name, spec.meta.name, len(spec.segments)
        )
        lines.append(ParsedTrainLine(source.name, spec))

    return (lines, errors)


def build_diagram(
    ctx: PipelineContext,
    line_files: Sequence[SourceFile],
    topology_file: SourceFile | None,
) -> Diagram:
    """
    Parse, validate and project everything; series are only built against a
    valid topology.
    """

    lines, errors = parse_train_lines(ctx, line_files)

    topology: Topology | None = None
    topology_name = DEFAULT_TOPOLOGY_FILE

    if topology_file is not None:
        topology_name = topology_file.name
        res = parse_topology(topology_file.text, topology_file.name)
        if isinstance(res, Err):
            errors.extend(res.error)
        else:
            topology = res.value
            ctx.logger.info("%s: %d stops", topology_name, len(topology.stops))

    cross_errors, warnings = validate(lines, topology, topology_name)
    errors.extend(cross_errors)

    series: list[GraphSeries] = []
    if topology is not None:
        for line in lines:
            runs = compute_runs_for_line(line.spec)
            line_series = build_graph_series(runs, line.spec, topology)
            ctx.logger.info(
                "%s: %d run(s), %d series", line.file_name, len(runs), len(line_series)
            )
            series.extend(line_series)

    return Diagram(series, errors, warnings)
