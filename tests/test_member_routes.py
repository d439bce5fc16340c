"""Member write paths against an in-memory stand-in for the Neo4j driver.

The stand-in records every Cypher statement with its parameters, hands out
sequential ids for counter queries and counts committed and rolled-back
transactions. Member reads are served from the ``thomas_family`` fixture.
"""
from datetime import date, timedelta

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from familytree.db.neo4j import neo4j
from familytree.main import app
from familytree.routers import members
from familytree.services import member_service


class FakeResult:

    def __init__(self, row=None):
        self.row = row

    async def single(self):
        return self.row


class FakeGraph:

    def __init__(self):
        self.runs = []
        self.issued = []
        self.cycle = False
        self.commits = 0
        self.rollbacks = 0

    def session(self):
        return FakeSession(self)

    def run(self, query, params):
        self.runs.append((query, params))
        if "AS nextId" in query:
            self.issued.append(11 + len(self.issued))
            return FakeResult({"nextId": self.issued[-1]})
        if "AS cycle" in query:
            return FakeResult({"cycle": self.cycle})
        return FakeResult()

    def params_of(self, fragment):
        return [params for query, params in self.runs if fragment in query]


class FakeTransaction:

    def __init__(self, graph):
        self.graph = graph

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.graph.commits += 1
        else:
            self.graph.rollbacks += 1
        return False

    async def run(self, query, **params):
        return self.graph.run(query, params)


class FakeSession(FakeTransaction):

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def begin_transaction(self):
        return FakeTransaction(self.graph)


async def _tree(tree_id):
    return {"_id": tree_id, "name": "Nguyen"}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(members, "get_tree_or_404", _tree)
    return TestClient(app)


@pytest.fixture
def graph(monkeypatch):
    fake = FakeGraph()
    monkeypatch.setattr(neo4j, "driver", fake)
    return fake


@pytest.fixture
def records(monkeypatch, graph, thomas_family, make_member):
    """Stored members by id; ids handed out by the graph resolve to fresh records."""
    stored = {m.id: m for m in thomas_family}

    async def fake_list(tree_id):
        return list(stored.values())

    async def fake_get(tree_id, member_id):
        if member_id in stored:
            return stored[member_id]
        if member_id in graph.issued:
            return make_member(member_id)
        raise HTTPException(status_code=404, detail="Family member not found")

    async def no_histories(tree_id, member_id, occupations, places_of_origin):
        return None

    monkeypatch.setattr(member_service, "list_members", fake_list)
    monkeypatch.setattr(member_service, "get_member", fake_get)
    monkeypatch.setattr(member_service, "save_histories", no_histories)
    return stored


@pytest.fixture
def changes(monkeypatch):
    logged = []

    async def fake_log(entity_type, entity_id, action, tree_id, old_values=None, new_values=None):
        logged.append((entity_type, entity_id, action, old_values, new_values))

    monkeypatch.setattr(member_service, "log_change", fake_log)
    return logged


@pytest.fixture
def removed_events(monkeypatch):
    removed = []

    async def fake_delete(member_id):
        removed.append(member_id)

    monkeypatch.setattr(member_service, "delete_member_events", fake_delete)
    return removed


def new_member(**overrides):
    body = {
        "fullName": "Linh Tran", "gender": "FEMALE", "birthDate": "1996-02-02",
        "address": "12 Hang Bac, Hanoi",
    }
    body.update(overrides)
    return body


class TestCreateSpouse:

    def test_undated_marriage_to_an_infant(self, client, records, changes, make_member):
        """Without a relationship date the marriage is dated today and still checked."""
        records[5] = make_member(5, generation="4", birthday=date.today() - timedelta(days=30))
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="spouse", relatedMemberId=5,
        ))
        assert res.status_code == 400
        assert res.json()["field"] == "marriageDate"
        assert "7 years" in res.json()["detail"]

    def test_undated_marriage_of_a_newborn(self, client, records, graph, changes):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="spouse", relatedMemberId=4,
            birthDate=(date.today() - timedelta(days=30)).isoformat(),
        ))
        assert res.status_code == 400
        assert res.json()["field"] == "marriageDate"
        assert graph.runs == []
        assert changes == []

    def test_future_marriage_date(self, client, records, graph, changes):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="spouse", relatedMemberId=4,
            relationshipDate=(date.today() + timedelta(days=30)).isoformat(),
        ))
        assert res.status_code == 400
        assert res.json() == {"detail": "Marriage date cannot be in the future", "field": "marriageDate"}
        assert graph.runs == []

    def test_spouse_link_and_generation(self, client, records, graph, changes):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="spouse", relatedMemberId=4, relationshipDate="2020-06-01",
        ))
        assert res.status_code == 200
        assert res.json()["id"] == 11

        [node] = graph.params_of("CREATE (n:FamilyMember")
        assert node["generation"] == "3"
        assert node["established"] == "2020-06-01"
        [link] = graph.params_of("SPOUSE_OF {relationshipId")
        assert (link["first"], link["second"]) == (4, 11)
        assert (link["rid"], link["married"]) == (12, "2020-06-01")
        assert (graph.commits, graph.rollbacks) == (1, 0)

        assert [(c[0], c[1], c[2]) for c in changes] == [
            ("FamilyMember", 11, "CREATE"), ("SpouseRelationship", 12, "CREATE"),
        ]
        assert changes[1][4] == {"familyMember1Id": 4, "familyMember2Id": 11, "marriageDate": "2020-06-01"}

    def test_partner_already_married(self, client, records, graph):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="spouse", relatedMemberId=2, relationshipDate="2020-06-01",
        ))
        assert res.status_code == 409
        assert "already has an active spouse" in res.json()["detail"]
        assert graph.runs == []


class TestCreateChild:

    def test_child_is_one_generation_below(self, client, records, graph, changes):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            fullName="  Minh  ", relationship="parent", relatedMemberId=2, birthDate="1990-04-04",
        ))
        assert res.status_code == 200
        [node] = graph.params_of("CREATE (n:FamilyMember")
        assert node["generation"] == "3"
        assert node["name"] == "Minh"
        assert node["root"] is False
        [edge] = graph.params_of("MERGE (parent)-[:PARENT_OF]->(child)")
        assert (edge["parentId"], edge["childId"]) == (2, 11)
        assert graph.commits == 1
        assert changes[0][4]["relationship"] == "parent"

    def test_born_before_parent(self, client, records, graph):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="parent", relatedMemberId=2, birthDate="1960-01-01",
        ))
        assert res.status_code == 400
        assert res.json()["field"] == "birthDate"
        assert graph.runs == []

    def test_second_root_refused(self, client, records, graph):
        res = client.post("/api/v1/trees/t1/members", json=new_member(relationship="none"))
        assert res.status_code == 400
        assert "already has a root member" in res.json()["detail"]
        assert graph.runs == []

    def test_missing_related_member(self, client, records, graph):
        res = client.post("/api/v1/trees/t1/members", json=new_member(
            relationship="parent", relatedMemberId=99,
        ))
        assert res.status_code == 400
        assert res.json()["detail"] == "Related family member not found"

    def test_related_member_required(self, client, records):
        res = client.post("/api/v1/trees/t1/members", json=new_member(relationship="parent"))
        assert res.status_code == 400


class TestUpdateMember:

    def test_new_parent_reinfers_generation(self, client, records, graph, changes):
        res = client.patch("/api/v1/trees/t1/members/4", json={"parentId": 1})
        assert res.status_code == 200

        [relink] = graph.params_of("DELETE old")
        assert (relink["parentId"], relink["childId"]) == (1, 4)
        [setters] = graph.params_of("SET n.")
        assert setters["generation"] == "2"
        assert (graph.commits, graph.rollbacks) == (1, 0)

        [(entity, member_id, action, old, new)] = changes
        assert (entity, member_id, action) == ("FamilyMember", 4, "UPDATE")
        assert old == {"generation": "3", "parentId": 2}
        assert new == {"generation": "2", "parentId": 1}

    def test_explicit_generation_wins(self, client, records, graph, changes):
        res = client.patch("/api/v1/trees/t1/members/4", json={"parentId": 1, "generation": " 7 "})
        assert res.status_code == 200
        [setters] = graph.params_of("SET n.")
        assert setters["generation"] == "7"

    def test_root_cannot_get_a_parent(self, client, records, graph, changes):
        res = client.patch("/api/v1/trees/t1/members/1", json={"parentId": 4})
        assert res.status_code == 400
        assert res.json()["detail"] == "The root family member cannot have a parent"
        assert graph.runs == []
        assert changes == []

    def test_cycle_rolls_back(self, client, records, graph, changes):
        graph.cycle = True
        res = client.patch("/api/v1/trees/t1/members/2", json={"parentId": 4})
        assert res.status_code == 400
        assert res.json()["detail"] == "This parent link would create a cycle"
        assert (graph.commits, graph.rollbacks) == (0, 1)
        assert graph.params_of("SET n.") == []
        assert changes == []

    def test_new_spouse_shares_generation(self, client, records, graph, changes, make_member):
        records[5] = make_member(5, "Linh", gender="FEMALE", birthday=date(1997, 3, 3))
        res = client.patch("/api/v1/trees/t1/members/5", json={"spouseId": 4, "relationshipDate": "2021-05-05"})
        assert res.status_code == 200

        [link] = graph.params_of("SPOUSE_OF {relationshipId")
        assert (link["first"], link["second"], link["married"]) == (4, 5, "2021-05-05")
        [setters] = graph.params_of("SET n.")
        assert setters["generation"] == "3"
        assert graph.commits == 1
        assert [c[:3] for c in changes] == [
            ("FamilyMember", 5, "UPDATE"), ("SpouseRelationship", 11, "CREATE"),
        ]

    def test_spouse_already_married(self, client, records, graph, make_member):
        records[5] = make_member(5, "Linh", gender="FEMALE", birthday=date(1997, 3, 3))
        res = client.patch("/api/v1/trees/t1/members/5", json={"spouseId": 3, "relationshipDate": "2021-05-05"})
        assert res.status_code == 409
        assert graph.runs == []

    def test_empty_patch(self, client, records):
        res = client.patch("/api/v1/trees/t1/members/4", json={})
        assert res.status_code == 400
        assert res.json()["detail"] == "Nothing to update"


class TestDeleteMember:

    def test_root_is_kept(self, client, records, graph, removed_events, changes):
        res = client.delete("/api/v1/trees/t1/members/1")
        assert res.status_code == 400
        assert res.json()["detail"] == "Cannot delete the root family member"
        assert graph.runs == []
        assert removed_events == []

    def test_delete_removes_node_and_events(self, client, records, graph, removed_events, changes):
        res = client.delete("/api/v1/trees/t1/members/4")
        assert res.status_code == 200
        [params] = graph.params_of("DETACH DELETE n")
        assert params == {"mid": 4, "tid": "t1"}
        assert removed_events == [4]
        [(entity, member_id, action, old, new)] = changes
        assert (entity, member_id, action, new) == ("FamilyMember", 4, "DELETE", None)
        assert old["fullName"] == "Ruben"

    def test_unknown_member(self, client, records, graph):
        res = client.delete("/api/v1/trees/t1/members/42")
        assert res.status_code == 404
