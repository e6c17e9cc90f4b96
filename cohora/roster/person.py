"""Student records and the read-only roster they live in.

The roster is loaded once from two JSON fixtures in the data directory:

    data/
    ├── students.json   # list of student records
    └── user.json       # the current user's direct connections

Nothing here writes back to disk; the roster is immutable for the
lifetime of the process.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from loguru import logger


# ── Reserved identity of the current user ────────────────

USER_ID = "user"
USER_LABEL = "You"

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

_REQUIRED_FIELDS = ("id", "name")
_STRING_LIST_FIELDS = ("skills", "clubs", "connections")


class RosterError(Exception):
    """Raised when the static roster can't be loaded or is malformed."""


# ── Dataclasses ───────────────────────────────────────────


@dataclass
class Project:
    """Something a student built."""
    name: str
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> Project:
        return cls(name=d["name"], description=d.get("description", ""))


@dataclass
class Person:
    """A student on the roster."""
    id: str
    name: str
    batch: str = ""
    skills: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    clubs: list[str] = field(default_factory=list)
    bio: str = ""
    connections: list[str] = field(default_factory=list)  # person ids

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "batch": self.batch,
            "skills": list(self.skills),
            "projects": [p.to_dict() for p in self.projects],
            "clubs": list(self.clubs),
            "bio": self.bio,
            "connections": list(self.connections),
        }

    def to_prompt_dict(self) -> dict:
        """Profile without connection ids, as shown to the matcher."""
        d = self.to_dict()
        del d["connections"]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Person:
        return cls(
            id=d["id"],
            name=d["name"],
            batch=d.get("batch", ""),
            skills=list(d.get("skills") or []),
            projects=[Project.from_dict(p) for p in d.get("projects") or []],
            clubs=list(d.get("clubs") or []),
            bio=d.get("bio", ""),
            connections=list(d.get("connections") or []),
        )


@dataclass
class CurrentUser:
    """The person using the app. Not a roster entry."""
    connections: list[str] = field(default_factory=list)
    id: str = USER_ID

    @classmethod
    def from_dict(cls, d: dict) -> CurrentUser:
        return cls(connections=list(d.get("connections") or []))


# ── Roster ────────────────────────────────────────────────


class Roster:
    """Read-only collection of students plus the current user.

    Lookups are O(1) by id. Iteration order is the order the records
    were supplied in, which is also the order the matcher sees them.
    """

    def __init__(self, people: list[Person], user: CurrentUser) -> None:
        self._people: dict[str, Person] = {}
        for person in people:
            if person.id == USER_ID:
                raise RosterError(f"Person id '{USER_ID}' is reserved for the current user")
            if person.id in self._people:
                raise RosterError(f"Duplicate person id: {person.id}")
            self._people[person.id] = person
        self._user = user

    @classmethod
    def load(cls, data_dir: Path | None = None) -> Roster:
        """Load students.json and user.json from data_dir.

        Raises RosterError on missing files, bad JSON, records without
        the required fields, or list fields of the wrong shape. A partial
        roster is never returned.
        """
        data_dir = data_dir or DEFAULT_DATA_DIR
        raw_people = _read_json(data_dir / "students.json")
        raw_user = _read_json(data_dir / "user.json")

        if not isinstance(raw_people, list):
            raise RosterError("students.json must contain a list of records")
        if not isinstance(raw_user, dict):
            raise RosterError("user.json must contain an object")

        people = []
        for i, record in enumerate(raw_people):
            if not isinstance(record, dict):
                raise RosterError(f"Student record #{i} is not an object")
            missing = [k for k in _REQUIRED_FIELDS if k not in record]
            if missing:
                raise RosterError(
                    f"Student record #{i} missing required fields: {', '.join(missing)}"
                )
            _check_record(record, f"Student record #{i}")
            try:
                people.append(Person.from_dict(record))
            except (KeyError, TypeError) as e:
                raise RosterError(f"Student record #{i} is malformed: {e}") from e

        _check_string_list(raw_user, "connections", "user.json")
        roster = cls(people, CurrentUser.from_dict(raw_user))
        logger.info(
            f"Roster loaded: {len(people)} students, "
            f"{len(roster.user.connections)} direct connections, from {data_dir}"
        )
        return roster

    @property
    def user(self) -> CurrentUser:
        return self._user

    def __len__(self) -> int:
        return len(self._people)

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._people

    def get_by_id(self, person_id: str) -> Person | None:
        return self._people.get(person_id)

    def get_all(self) -> list[Person]:
        return list(self._people.values())

    def name_for(self, node_id: str) -> str:
        """Display name for a graph node. Unknown ids are shown as-is."""
        if node_id == USER_ID:
            return USER_LABEL
        person = self._people.get(node_id)
        return person.name if person else node_id

    def first_degree_connections(self) -> list[Person]:
        """The user's direct connections, in the user's own order."""
        return [self._people[pid] for pid in self._user.connections if pid in self._people]

    def is_direct_connection(self, person_id: str) -> bool:
        return person_id in self._user.connections

    def find_by_name(self, name: str) -> Person | None:
        """Find a student by display name (case-insensitive)."""
        name_lower = name.strip().lower()
        for person in self._people.values():
            if person.name.lower() == name_lower:
                return person
        return None

    def prompt_view(self) -> list[dict[str, Any]]:
        return [p.to_prompt_dict() for p in self._people.values()]


# ── Utilities ─────────────────────────────────────────────


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise RosterError(f"Roster file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RosterError(f"Failed to parse {path.name}: {e}") from e


def _check_string_list(record: dict, key: str, where: str) -> None:
    """A list field may be absent or null, but never a bare string or mixed list."""
    value = record.get(key)
    if value is None:
        return
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RosterError(f"{where}: '{key}' must be a list of strings")


def _check_record(record: dict, where: str) -> None:
    for key in _STRING_LIST_FIELDS:
        _check_string_list(record, key, where)
    projects = record.get("projects")
    if projects is None:
        return
    if not isinstance(projects, list) or not all(isinstance(p, dict) for p in projects):
        raise RosterError(f"{where}: 'projects' must be a list of objects")
