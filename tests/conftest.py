"""Shared fixtures.

Settings are read at import time, so the connection variables are set here
before any ``familytree`` module is imported.
"""
import os
from datetime import date

import pytest

os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DB", "familytree_test")
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "test")

from familytree.models.member_model import MemberRecord, MemberRef, SpouseAsMember1, SpouseAsMember2


def build_member(id, name=None, parent_id=None, generation=None, root=False, adopted=False,
                 gender="MALE", birthday=None, spouse1=(), spouse2=(), passing=False):
    """MemberRecord with spouse relationships given as (partner id, divorce date) pairs."""
    return MemberRecord(
        id=id,
        fullName=name or f"Member {id}",
        gender=gender,
        birthday=birthday,
        generation=generation,
        isRootPerson=root,
        isAdopted=adopted,
        parentId=parent_id,
        spouse1=[
            SpouseAsMember1(id=100 + partner, divorceDate=divorced, familyMember2=MemberRef(id=partner))
            for partner, divorced in spouse1
        ],
        spouse2=[
            SpouseAsMember2(id=100 + id, divorceDate=divorced, familyMember1=MemberRef(id=partner))
            for partner, divorced in spouse2
        ],
        passingRecords=[{"dateOfPassing": "2020-01-01"}] if passing else [],
    )


@pytest.fixture
def make_member():
    return build_member


@pytest.fixture
def thomas_family():
    """Thomas (root) -> Forrest, married to Geoffrey; Ruben recorded under Forrest only."""
    return [
        build_member(1, "Thomas", generation="1", root=True, birthday=date(1940, 5, 1)),
        build_member(2, "Forrest", parent_id=1, generation="2", birthday=date(1965, 3, 2),
                     spouse1=[(3, None)]),
        build_member(3, "Geoffrey", generation="2", birthday=date(1966, 7, 9), spouse2=[(2, None)]),
        build_member(4, "Ruben", parent_id=2, generation="3", birthday=date(1995, 11, 20)),
    ]
