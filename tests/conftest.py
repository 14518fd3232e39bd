"""Shared fixtures: small on-disk databases built with the reference store."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from tablescope import DatabaseHandle
from tablescope.store import Database

USERS_SCHEMA = """
table Users {
    id: int
    name: string?
    score: double
}
"""

PEOPLE_SCHEMA = """
# Every column kind the store supports
table Pet {
    name: string
    legs: int
}

table Person {
    id: int
    name: string?
    active: bool?
    avatar: binary?
    born: date?
    ratio: float?
    score: double?
    tag: uuid?
    best_friend: Person
    favorite: Pet
    pets: Pet[]
    lucky_numbers: int[]
    nicknames: string[]?
    flags: bool[]?
    readings: double[]?
    moments: date[]?
    blobs: binary[]?
    weights: float[]?
}
"""

BORN = datetime(2001, 9, 9, 1, 46, 40, tzinfo=timezone.utc)
BORN_MILLIS = 1_000_000_000_000


@pytest.fixture
def users_handle(tmp_path):
    """Users(id, name?, score) with the rows (1, Ann, NaN), (2, null, 3.5), (3, Bo, inf)."""
    with Database.create(tmp_path / "users", USERS_SCHEMA) as db:
        db.insert("Users", [1, "Ann", math.nan])
        db.insert("Users", [2, None, 3.5])
        db.insert("Users", [3, "Bo", math.inf])
    return DatabaseHandle(tmp_path / "users")


@pytest.fixture
def people_handle(tmp_path):
    """Two pets and three people covering every column kind."""
    with Database.create(tmp_path / "people", PEOPLE_SCHEMA) as db:
        db.insert("Pet", {"name": "Rex", "legs": 4})
        db.insert("Pet", {"name": "Tweety", "legs": 2})
        db.insert(
            "Person",
            {
                "id": 7,
                "name": "Ann",
                "active": True,
                "avatar": b"\x89PNG",
                "born": BORN,
                "ratio": 0.1,
                "score": -math.inf,
                "tag": 0x0123456789ABCDEF0123456789ABCDEF,
                "favorite": 1,
                "pets": [0, 1],
                "lucky_numbers": [3, -1, 42],
                "nicknames": ["Annie", "A"],
                "flags": [True, False],
                "readings": [1.5, math.nan],
                "moments": [BORN_MILLIS],
                "blobs": [b"\x00\xff"],
                "weights": [2.5],
            },
        )
        db.insert(
            "Person",
            {
                "id": 3,
                "best_friend": 0,
                "lucky_numbers": [],
                "nicknames": [],
            },
        )
        db.insert(
            "Person",
            {
                "id": 5,
                "name": "Cy",
                "active": False,
                "score": 2.25,
                "best_friend": 1,
                "pets": [1],
                "lucky_numbers": [0],
            },
        )
    return DatabaseHandle(tmp_path / "people")
