"""Tests for the acquaintance graph: shortest path, degree cap, via."""

import pytest

from cohora.roster.graph import (
    MAX_DEGREE,
    ConnectionPath,
    ConnectionResolver,
    build_graph,
)
from cohora.roster.person import USER_ID, CurrentUser, Person, Roster


# ── Helpers ───────────────────────────────────────────────


def make_roster(user_connections: list[str], edges: dict[str, list[str]]) -> Roster:
    """Roster where each person's name is their id upper-cased."""
    people = [
        Person(id=pid, name=pid.upper(), connections=conns)
        for pid, conns in edges.items()
    ]
    return Roster(people, CurrentUser(connections=user_connections))


NONE = ConnectionPath(degree=None, path=[], via=None)


# ── Fixtures ──────────────────────────────────────────────


@pytest.fixture
def chain() -> ConnectionResolver:
    """You -> b -> c -> d -> e, plus an isolated f."""
    roster = make_roster(
        ["b"],
        {
            "b": ["c"],
            "c": ["d"],
            "d": ["e"],
            "e": [],
            "f": [],
        },
    )
    return ConnectionResolver(roster)


# ── Graph construction ────────────────────────────────────


class TestBuildGraph:
    def test_includes_user_and_every_person(self):
        roster = make_roster(["a"], {"a": ["b"], "b": []})
        graph = build_graph(roster)
        assert set(graph) == {USER_ID, "a", "b"}
        assert graph[USER_ID] == ["a"]
        assert graph["a"] == ["b"]
        assert graph["b"] == []

    def test_graph_is_a_copy(self):
        roster = make_roster(["a"], {"a": []})
        graph = build_graph(roster)
        graph[USER_ID].append("zzz")
        assert roster.user.connections == ["a"]

    def test_resolver_graph_property_is_a_copy(self, chain):
        g = chain.graph
        g["b"].clear()
        assert chain.resolve_path("c").degree == 2


# ── Resolution ────────────────────────────────────────────


class TestResolvePath:
    def test_self_is_no_path(self, chain):
        assert chain.resolve_path(USER_ID) == NONE

    def test_direct_connection(self, chain):
        result = chain.resolve_path("b")
        assert result.degree == 1
        assert result.path == ["You", "B"]
        assert result.via is None

    def test_second_degree(self, chain):
        # Scenario A
        result = chain.resolve_path("c")
        assert result == ConnectionPath(degree=2, path=["You", "B", "C"], via="B")

    def test_third_degree(self, chain):
        result = chain.resolve_path("d")
        assert result.degree == 3
        assert result.path == ["You", "B", "C", "D"]
        assert result.via == "B"

    def test_fourth_degree_is_normalized_away(self, chain):
        # Scenario C: a path exists but is too long to report
        assert chain.resolve_path("e") == NONE

    def test_isolated_person(self, chain):
        # Scenario B
        assert chain.resolve_path("f") == NONE

    def test_unknown_id(self, chain):
        assert chain.resolve_path("nobody") == NONE

    def test_idempotent(self, chain):
        first = chain.resolve_path("d")
        second = chain.resolve_path("d")
        assert first == second
        assert first is not second

    def test_user_with_no_connections(self):
        resolver = ConnectionResolver(make_roster([], {"a": []}))
        assert resolver.resolve_path("a") == NONE


class TestInvariants:
    @pytest.fixture
    def resolver(self) -> ConnectionResolver:
        roster = make_roster(
            ["a", "b"],
            {
                "a": ["c", "b"],
                "b": ["d"],
                "c": ["e"],
                "d": ["e", "f"],
                "e": ["g"],
                "f": [],
                "g": [],
            },
        )
        return ConnectionResolver(roster)

    @pytest.mark.parametrize("target", ["a", "b", "c", "d", "e", "f", "g", "zz"])
    def test_degree_matches_path_and_via(self, resolver, target):
        result = resolver.resolve_path(target)
        if result.degree is None:
            assert result.path == []
            assert result.via is None
            return
        assert 1 <= result.degree <= MAX_DEGREE
        assert result.degree == len(result.path) - 1
        assert result.path[0] == "You"
        if result.degree >= 2:
            assert result.via == result.path[1]
        else:
            assert result.via is None


class TestTieBreak:
    def test_first_neighbour_wins(self):
        # Both b and c reach d in two hops; b comes first in the user's list.
        roster = make_roster(["b", "c"], {"b": ["d"], "c": ["d"], "d": []})
        result = ConnectionResolver(roster).resolve_path("d")
        assert result.path == ["You", "B", "D"]
        assert result.via == "B"

    def test_order_flip_changes_introducer(self):
        roster = make_roster(["c", "b"], {"b": ["d"], "c": ["d"], "d": []})
        result = ConnectionResolver(roster).resolve_path("d")
        assert result.via == "C"

    def test_tie_break_is_stable(self):
        roster = make_roster(["b", "c"], {"b": ["d"], "c": ["d"], "d": []})
        resolver = ConnectionResolver(roster)
        results = {resolver.resolve_path("d").via for _ in range(5)}
        assert results == {"B"}


class TestAsymmetricData:
    def test_edges_follow_stored_direction(self):
        # c lists b but b doesn't list c, so c is unreachable from You.
        roster = make_roster(["b"], {"b": [], "c": ["b"]})
        assert ConnectionResolver(roster).resolve_path("c") == NONE

    def test_unknown_neighbour_id_is_a_dead_end(self):
        roster = make_roster(["ghost", "b"], {"b": ["c"], "c": []})
        result = ConnectionResolver(roster).resolve_path("c")
        assert result.path == ["You", "B", "C"]

    def test_unknown_id_on_path_shows_raw_id(self):
        # "x" has no record but is listed as a connection on the way to c.
        roster = make_roster(["b"], {"b": ["x"], "c": []})
        resolver = ConnectionResolver(roster)
        result = resolver.resolve_path("x")
        assert result.path == ["You", "B", "x"]


# ── ConnectionPath helpers ────────────────────────────────


class TestConnectionPath:
    def test_none_factory(self):
        p = ConnectionPath.none()
        assert p.degree is None
        assert p.path == []
        assert p.via is None
        assert not p.found

    @pytest.mark.parametrize(
        "degree, label",
        [(1, "1st degree"), (2, "2nd degree"), (3, "3rd degree"), (None, "Not in network")],
    )
    def test_label(self, degree, label):
        assert ConnectionPath(degree=degree).label == label

    def test_to_dict(self):
        p = ConnectionPath(degree=2, path=["You", "B", "C"], via="B")
        assert p.to_dict() == {"degree": 2, "path": ["You", "B", "C"], "via": "B"}
        assert p.found
