import logging
from datetime import date
from fastapi import HTTPException
from familytree.db.neo4j import neo4j
from familytree.models.member_model import MemberRecord
from familytree.services.changelog_service import log_change
from familytree.services.graph_service import active_partner_ids
from familytree.services.validation_service import validate_divorce_date, validate_marriage_date

logger = logging.getLogger(__name__)

# Seed for each id counter: the highest id already in the graph
COUNTER_SEEDS = {
    "MEMBER": "OPTIONAL MATCH (x:FamilyMember) WITH coalesce(max(x.memberId), 0) AS mx",
    "SPOUSE": "OPTIONAL MATCH ()-[x:SPOUSE_OF]->() WITH coalesce(max(x.relationshipId), 0) AS mx",
}

RELATIONSHIP_FIELDS = """
    r.relationshipId AS id, a.memberId AS familyMember1Id, b.memberId AS familyMember2Id,
    r.marriageDate AS marriageDate, r.divorceDate AS divorceDate
"""

async def next_id(session, kind: str) -> int:
    res = await session.run(
        f"""
        {COUNTER_SEEDS[kind]}
        MERGE (c:Counter {{type:$kind}})
        ON CREATE SET c.value = mx
        WITH c
        SET c.value = c.value + 1
        RETURN c.value AS nextId
        """,
        kind=kind,
    )
    rec = await res.single()
    if not rec:
        raise HTTPException(status_code=500, detail=f"Failed to generate {kind.lower()} id")
    return rec["nextId"]

async def link_spouses(session, tree_id: str, member_a: int, member_b: int, marriage_date: date) -> int:
    """SPOUSE_OF always points from the smaller member id to the larger one."""
    rel_id = await next_id(session, "SPOUSE")
    await session.run("""
        MATCH (a:FamilyMember {memberId:$first, treeId:$tid}),
              (b:FamilyMember {memberId:$second, treeId:$tid})
        CREATE (a)-[:SPOUSE_OF {relationshipId:$rid, marriageDate:$married, divorceDate:null}]->(b)
    """, first=min(member_a, member_b), second=max(member_a, member_b), tid=tree_id,
       rid=rel_id, married=marriage_date.isoformat())
    return rel_id

async def would_create_cycle(session, tree_id: str, parent_id: int, child_id: int) -> bool:
    if parent_id == child_id:
        return True
    res = await session.run("""
        MATCH (parent:FamilyMember {memberId:$parentId, treeId:$tid}),
              (child:FamilyMember {memberId:$childId, treeId:$tid})
        OPTIONAL MATCH path = (child)-[:PARENT_OF*]->(parent)
        RETURN path IS NOT NULL AS cycle
    """, parentId=parent_id, childId=child_id, tid=tree_id)
    rec = await res.single()
    return bool(rec and rec["cycle"])

def ensure_no_active_spouse(member: MemberRecord, partner_id: int | None = None):
    if active_partner_ids(member, exclude=partner_id):
        raise HTTPException(
            status_code=409,
            detail="This person already has an active spouse relationship. "
                   "They must be divorced first before adding a new spouse.",
        )

async def create_spouse_relationship(tree_id: str, member1: MemberRecord, member2: MemberRecord,
                                     marriage_date: date) -> dict:
    if member1.id == member2.id:
        raise HTTPException(status_code=400, detail="A member cannot marry themselves")
    validate_marriage_date(marriage_date, member1.birthday, member2.birthday)
    if member2.id in active_partner_ids(member1):
        raise HTTPException(status_code=409, detail="These members are already married")
    ensure_no_active_spouse(member1, member2.id)
    ensure_no_active_spouse(member2, member1.id)

    async with neo4j.driver.session() as session:
        async with await session.begin_transaction() as tx:
            rel_id = await link_spouses(tx, tree_id, member1.id, member2.id, marriage_date)
    out = {
        "id": rel_id,
        "familyMember1Id": min(member1.id, member2.id),
        "familyMember2Id": max(member1.id, member2.id),
        "marriageDate": marriage_date,
        "divorceDate": None,
    }
    await log_change("SpouseRelationship", rel_id, "CREATE", tree_id, None, {
        "marriageDate": marriage_date.isoformat(),
        "familyMember1Id": out["familyMember1Id"],
        "familyMember2Id": out["familyMember2Id"],
    })
    return out

async def get_spouse_relationship(tree_id: str, relationship_id: int) -> dict:
    async with neo4j.driver.session() as session:
        res = await session.run(f"""
            MATCH (a:FamilyMember {{treeId:$tid}})-[r:SPOUSE_OF {{relationshipId:$rid}}]->(b:FamilyMember)
            RETURN {RELATIONSHIP_FIELDS}
        """, tid=tree_id, rid=relationship_id)
        rec = await res.single()
    if not rec:
        raise HTTPException(status_code=404, detail="Spouse relationship not found")
    return rec.data()

async def list_spouse_relationships(tree_id: str) -> list[dict]:
    async with neo4j.driver.session() as session:
        res = await session.run(f"""
            MATCH (a:FamilyMember {{treeId:$tid}})-[r:SPOUSE_OF]->(b:FamilyMember)
            RETURN {RELATIONSHIP_FIELDS}
            ORDER BY r.relationshipId
        """, tid=tree_id)
        return await res.data()

async def record_divorce(tree_id: str, relationship_id: int, divorce_date: date) -> dict:
    rel = await get_spouse_relationship(tree_id, relationship_id)
    if rel.get("divorceDate"):
        raise HTTPException(status_code=409, detail="This relationship already has a divorce recorded")
    marriage_date = date.fromisoformat(rel["marriageDate"]) if rel.get("marriageDate") else None
    validate_divorce_date(marriage_date, divorce_date)

    async with neo4j.driver.session() as session:
        await session.run("""
            MATCH (:FamilyMember {treeId:$tid})-[r:SPOUSE_OF {relationshipId:$rid}]->(:FamilyMember)
            SET r.divorceDate = $divorced
        """, tid=tree_id, rid=relationship_id, divorced=divorce_date.isoformat())
    await log_change("Divorce", relationship_id, "CREATE", tree_id,
                     {"divorceDate": None}, {"divorceDate": divorce_date.isoformat()})
    logger.info("Recorded divorce for relationship %s in tree %s", relationship_id, tree_id)
    return {**rel, "divorceDate": divorce_date}

MARRIAGE_EVENT_FIELDS = """
    r.relationshipId AS id, r.marriageDate AS marriageDate, r.divorceDate AS divorceDate,
    {id: a.memberId, fullName: a.fullName} AS familyMember1,
    {id: b.memberId, fullName: b.fullName} AS familyMember2
"""

async def list_marriage_events(tree_id: str, active_only: bool = False) -> list[dict]:
    """Spouse relationships with both members' names, latest marriage first."""
    where = "WHERE r.divorceDate IS NULL" if active_only else ""
    async with neo4j.driver.session() as session:
        res = await session.run(f"""
            MATCH (a:FamilyMember {{treeId:$tid}})-[r:SPOUSE_OF]->(b:FamilyMember)
            {where}
            RETURN {MARRIAGE_EVENT_FIELDS}
            ORDER BY r.marriageDate DESC
        """, tid=tree_id)
        return await res.data()

async def get_marriage_event(tree_id: str, relationship_id: int) -> dict:
    async with neo4j.driver.session() as session:
        res = await session.run(f"""
            MATCH (a:FamilyMember {{treeId:$tid}})-[r:SPOUSE_OF {{relationshipId:$rid}}]->(b:FamilyMember)
            RETURN {MARRIAGE_EVENT_FIELDS}
        """, tid=tree_id, rid=relationship_id)
        rec = await res.single()
    if not rec:
        raise HTTPException(status_code=404, detail="Relationship not found")
    return rec.data()
