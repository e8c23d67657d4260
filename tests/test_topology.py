from marey.ast import Topology
from marey.parse.error import Err, Ok
from marey.parse.topology import parse_topology


def test_parse_topology_ignores_blanks_and_comments(topology_text):
    res = parse_topology("\n" + topology_text + "\n  # trailing comment\n\n", "topo.txt")
    assert res == Ok(Topology(["Central", "East Side", "Meadow", "Hilltop"]))


def test_duplicate_stop():
    res = parse_topology("Alpha\nBeta\nAlpha", "topo.txt")
    assert isinstance(res, Err)
    assert len(res.error) == 1

    error = res.error[0]
    assert error.file == "topo.txt"
    assert error.line == 3
    assert '"Alpha"' in error.message
    assert "line 1" in error.message


def test_every_duplicate_is_reported():
    res = parse_topology("Alpha\nBeta\nAlpha\nBeta\r\n", "topo.txt")
    assert isinstance(res, Err)
    assert [e.line for e in res.error] == [3, 4]


def test_duplicates_are_case_sensitive():
    res = parse_topology("Alpha\nalpha")
    assert res == Ok(Topology(["Alpha", "alpha"]))


def test_no_stops():
    res = parse_topology("# only comments\n   \n\n", "topo.txt")
    assert isinstance(res, Err)
    assert any("no stops" in e.message for e in res.error)
