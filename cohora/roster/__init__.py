"""Roster store and acquaintance graph.

The roster (students + the current user's direct connections) is static
fixture data loaded once at startup. The graph resolver answers "how am I
connected to this student?" with a hop-capped breadth-first search.
"""

from cohora.roster.person import (
    USER_ID,
    USER_LABEL,
    CurrentUser,
    Person,
    Project,
    Roster,
    RosterError,
)
from cohora.roster.graph import (
    MAX_DEGREE,
    ConnectionPath,
    ConnectionResolver,
    build_graph,
)

__all__ = [
    "USER_ID",
    "USER_LABEL",
    "MAX_DEGREE",
    "ConnectionPath",
    "ConnectionResolver",
    "CurrentUser",
    "Person",
    "Project",
    "Roster",
    "RosterError",
    "build_graph",
]
