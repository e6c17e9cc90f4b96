"""Acquaintance graph: how far is a student from the current user?

Builds an adjacency mapping from the roster (the current user plus every
student) and answers shortest-path queries with a breadth-first search.
Only paths of up to MAX_DEGREE hops are reported; anything further out
counts as "not in network".
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cohora.roster.person import USER_ID

if TYPE_CHECKING:
    from cohora.roster.person import Roster


MAX_DEGREE = 3

_DEGREE_LABELS = {
    1: "1st degree",
    2: "2nd degree",
    3: "3rd degree",
}
NOT_IN_NETWORK = "Not in network"


@dataclass
class ConnectionPath:
    """Shortest acquaintance path from the current user to a student."""
    degree: int | None = None          # 1, 2, 3, or None when unreachable
    path: list[str] = field(default_factory=list)  # Display names, "You" first
    via: str | None = None             # Who can introduce you (degree 2 or 3)

    @classmethod
    def none(cls) -> ConnectionPath:
        return cls(degree=None, path=[], via=None)

    @property
    def found(self) -> bool:
        return self.degree is not None

    @property
    def label(self) -> str:
        if self.degree is None:
            return NOT_IN_NETWORK
        return _DEGREE_LABELS[self.degree]

    def to_dict(self) -> dict:
        return {"degree": self.degree, "path": list(self.path), "via": self.via}


def build_graph(roster: "Roster") -> dict[str, list[str]]:
    """Adjacency lists keyed by node id, neighbours in stored order."""
    graph: dict[str, list[str]] = {USER_ID: list(roster.user.connections)}
    for person in roster.get_all():
        graph[person.id] = list(person.connections)
    return graph


class ConnectionResolver:
    """Resolve shortest acquaintance paths over a read-only roster.

    The roster never changes after load, so the adjacency mapping is
    built once here and reused for every query.
    """

    def __init__(self, roster: "Roster") -> None:
        self._roster = roster
        self._graph = build_graph(roster)

    @property
    def graph(self) -> dict[str, list[str]]:
        return {node: list(neighbours) for node, neighbours in self._graph.items()}

    def resolve_path(self, target_id: str) -> ConnectionPath:
        """Find the shortest path from the current user to target_id (BFS).

        Neighbours are visited in adjacency-list order, so among several
        shortest paths the first one discovered wins. Unknown ids have no
        neighbours and simply come back as "no path".
        """
        if target_id == USER_ID:
            return ConnectionPath.none()

        visited = {USER_ID}
        parent: dict[str, str] = {}
        queue: deque[str] = deque([USER_ID])

        while queue:
            current = queue.popleft()

            if current == target_id:
                return self._build_path(current, parent)

            for neighbour in self._graph.get(current, []):
                if neighbour not in visited:
                    visited.add(neighbour)
                    parent[neighbour] = current
                    queue.append(neighbour)

        return ConnectionPath.none()

    def _build_path(self, target_id: str, parent: dict[str, str]) -> ConnectionPath:
        ids = [target_id]
        while ids[-1] in parent:
            ids.append(parent[ids[-1]])
        ids.reverse()

        degree = len(ids) - 1
        if degree > MAX_DEGREE:
            return ConnectionPath.none()

        names = [self._roster.name_for(node_id) for node_id in ids]
        # Degree 1 has no introducer: the target is the user's own connection.
        via = names[1] if degree >= 2 else None
        return ConnectionPath(degree=degree, path=names, via=via)
