import logging
from datetime import date
from fastapi import HTTPException
from familytree.db.neo4j import neo4j
from familytree.models.member_model import MemberCreate, MemberRecord, MemberUpdate, RelationshipKind
from familytree.models.tree_model import RootMemberIn
from familytree.services.changelog_service import log_change
from familytree.services.generation_service import format_generation, infer_generation
from familytree.services.graph_service import active_partner_ids
from familytree.services.life_event_service import delete_member_events, events_by_member, save_histories
from familytree.services.relationship_service import (
    ensure_no_active_spouse, link_spouses, next_id, would_create_cycle,
)
from familytree.services.validation_service import (
    validate_birth_date, validate_date_ranges, validate_marriage_date, validate_relationship_dates,
)

logger = logging.getLogger(__name__)

MEMBER_QUERY = """
    MATCH (m:FamilyMember {treeId:$tid})
    WHERE $mid IS NULL OR m.memberId = $mid
    OPTIONAL MATCH (p:FamilyMember)-[:PARENT_OF]->(m)
    RETURN m {.*} AS member,
           CASE WHEN p IS NULL THEN null ELSE {id: p.memberId, fullName: p.fullName} END AS parent,
           [(m)-[:PARENT_OF]->(c:FamilyMember) | {id: c.memberId, fullName: c.fullName}] AS children,
           [(m)-[r:SPOUSE_OF]->(s:FamilyMember) | {
               id: r.relationshipId, marriageDate: r.marriageDate, divorceDate: r.divorceDate,
               familyMember2: {id: s.memberId, fullName: s.fullName}
           }] AS spouse1,
           [(s:FamilyMember)-[r:SPOUSE_OF]->(m) | {
               id: r.relationshipId, marriageDate: r.marriageDate, divorceDate: r.divorceDate,
               familyMember1: {id: s.memberId, fullName: s.fullName}
           }] AS spouse2
    ORDER BY m.memberId
"""

def _native(value):
    """Neo4j temporal values -> python; ISO strings are left for pydantic."""
    if value is not None and hasattr(value, "to_native"):
        return value.to_native()
    return value

def _to_record(rec, passings: dict, achievements: dict) -> MemberRecord:
    node = rec["member"]
    member_id = node["memberId"]
    parent = rec["parent"]
    return MemberRecord(
        id=member_id,
        fullName=node.get("fullName"),
        gender=node.get("gender"),
        birthday=_native(node.get("birthday")),
        address=node.get("address"),
        generation=node.get("generation"),
        isRootPerson=bool(node.get("isRootPerson")),
        isAdopted=bool(node.get("isAdopted")),
        relationshipEstablishedDate=_native(node.get("relationshipEstablishedDate")),
        parentId=parent["id"] if parent else None,
        parent=parent,
        children=rec["children"],
        spouse1=rec["spouse1"],
        spouse2=rec["spouse2"],
        passingRecords=passings.get(member_id, []),
        achievements=achievements.get(member_id, []),
    )

async def _fetch(tree_id: str, member_id: int | None = None) -> list[MemberRecord]:
    async with neo4j.driver.session() as session:
        res = await session.run(MEMBER_QUERY, tid=tree_id, mid=member_id)
        records = [r async for r in res]
    passings, achievements = await events_by_member(tree_id)
    return [_to_record(r, passings, achievements) for r in records]

async def list_members(tree_id: str) -> list[MemberRecord]:
    return await _fetch(tree_id)

async def get_member(tree_id: str, member_id: int) -> MemberRecord:
    found = await _fetch(tree_id, member_id)
    if not found:
        raise HTTPException(status_code=404, detail="Family member not found")
    return found[0]

async def _create_node(session, tree_id: str, full_name: str, gender: str, birthday: date | None,
                       address: str | None, generation: int, is_root: bool, is_adopted: bool,
                       established: date | None = None) -> int:
    member_id = await next_id(session, "MEMBER")
    await session.run("""
        CREATE (n:FamilyMember {
            memberId:$mid, treeId:$tid, fullName:$name, gender:$gender,
            birthday:$birthday, address:$address, generation:$generation,
            isRootPerson:$root, isAdopted:$adopted, relationshipEstablishedDate:$established
        })
    """, mid=member_id, tid=tree_id, name=full_name.strip(), gender=gender,
       birthday=birthday.isoformat() if birthday else None, address=address,
       generation=format_generation(generation), root=is_root, adopted=is_adopted,
       established=established.isoformat() if established else None)
    return member_id

async def create_root_member(tree_id: str, root: RootMemberIn, baseline: int = 0) -> MemberRecord:
    if root.birthDate is not None:
        validate_birth_date(root.birthDate)
    generation = infer_generation(RelationshipKind.NONE, None, baseline)
    async with neo4j.driver.session() as session:
        async with await session.begin_transaction() as tx:
            member_id = await _create_node(tx, tree_id, root.fullName, root.gender, root.birthDate,
                                           root.address, generation, is_root=True, is_adopted=False)
    await log_change("FamilyMember", member_id, "CREATE", tree_id, None, {
        "fullName": root.fullName.strip(), "generation": format_generation(generation), "isRootPerson": True,
    })
    logger.info("Created root member %s for tree %s", member_id, tree_id)
    return await get_member(tree_id, member_id)

async def create_member(tree_id: str, body: MemberCreate, baseline: int = 0) -> MemberRecord:
    members = await list_members(tree_id)
    if body.relationship == RelationshipKind.NONE:
        if any(m.isRootPerson for m in members):
            raise HTTPException(
                status_code=400,
                detail="This tree already has a root member; new members must be related to an existing member",
            )
        root = RootMemberIn(fullName=body.fullName, gender=body.gender,
                            birthDate=body.birthDate, address=body.address)
        return await create_root_member(tree_id, root, baseline)

    if body.relatedMemberId is None:
        raise HTTPException(status_code=400, detail="relatedMemberId is required for a parent or spouse relationship")
    related = next((m for m in members if m.id == body.relatedMemberId), None)
    if related is None:
        raise HTTPException(status_code=400, detail="Related family member not found")

    as_child = body.relationship == RelationshipKind.PARENT
    # undated marriages are recorded as of today
    marriage_date = body.relationshipDate or date.today()
    validate_birth_date(body.birthDate, related.birthday if as_child else None)
    validate_relationship_dates(body.birthDate, body.relationship, body.relationshipDate)
    if not as_child:
        validate_relationship_dates(related.birthday, RelationshipKind.SPOUSE, body.relationshipDate)
        validate_marriage_date(marriage_date, body.birthDate, related.birthday)
        ensure_no_active_spouse(related)
    validate_date_ranges(body.occupations, body.birthDate, "occupation", "occupations")
    validate_date_ranges(body.placesOfOrigin, body.birthDate, "place of origin", "placesOfOrigin")

    generation = infer_generation(body.relationship, related, baseline)
    relationship_id = None
    async with neo4j.driver.session() as session:
        async with await session.begin_transaction() as tx:
            member_id = await _create_node(tx, tree_id, body.fullName, body.gender, body.birthDate,
                                           body.address, generation, is_root=False, is_adopted=body.isAdopted,
                                           established=body.relationshipDate)
            if as_child:
                await tx.run("""
                    MATCH (parent:FamilyMember {memberId:$parentId, treeId:$tid}),
                          (child:FamilyMember {memberId:$childId, treeId:$tid})
                    MERGE (parent)-[:PARENT_OF]->(child)
                """, parentId=related.id, childId=member_id, tid=tree_id)
            else:
                relationship_id = await link_spouses(tx, tree_id, related.id, member_id, marriage_date)

    await save_histories(tree_id, member_id, body.occupations, body.placesOfOrigin)
    await log_change("FamilyMember", member_id, "CREATE", tree_id, None, {
        "fullName": body.fullName.strip(),
        "generation": format_generation(generation),
        "relationship": body.relationship.value,
        "relatedMemberId": related.id,
    })
    if relationship_id is not None:
        await log_change("SpouseRelationship", relationship_id, "CREATE", tree_id, None, {
            "familyMember1Id": min(related.id, member_id),
            "familyMember2Id": max(related.id, member_id),
            "marriageDate": marriage_date.isoformat(),
        })
    return await get_member(tree_id, member_id)

async def update_member(tree_id: str, member_id: int, body: MemberUpdate) -> MemberRecord:
    patch = body.model_dump(exclude_unset=True)
    if not patch:
        raise HTTPException(status_code=400, detail="Nothing to update")
    member = await get_member(tree_id, member_id)
    parent_id = patch.pop("parentId", None)
    spouse_id = patch.pop("spouseId", None)
    relationship_date = patch.pop("relationshipDate", None)
    birthday = patch.get("birthday") or member.birthday

    if "generation" in patch:
        text = (patch["generation"] or "").strip()
        patch["generation"] = text or None
    explicit_generation = patch.get("generation") is not None

    new_parent = None
    if parent_id is not None and parent_id != member.parentId:
        if member.isRootPerson:
            raise HTTPException(status_code=400, detail="The root family member cannot have a parent")
        new_parent = await get_member(tree_id, parent_id)
        validate_relationship_dates(birthday, RelationshipKind.PARENT, relationship_date)
        if not explicit_generation:
            patch["generation"] = format_generation(infer_generation(RelationshipKind.PARENT, new_parent))

    spouse = None
    if spouse_id is not None:
        spouse = await get_member(tree_id, spouse_id)
        marriage_date = relationship_date or date.today()
        validate_relationship_dates(birthday, RelationshipKind.SPOUSE, relationship_date)
        validate_marriage_date(marriage_date, birthday, spouse.birthday)
        ensure_no_active_spouse(member, spouse.id)
        ensure_no_active_spouse(spouse, member.id)
        if not explicit_generation and new_parent is None:
            patch["generation"] = format_generation(infer_generation(RelationshipKind.SPOUSE, spouse))

    if patch.get("birthday") is not None:
        parent = new_parent
        if parent is None and member.parentId is not None:
            parent = await get_member(tree_id, member.parentId)
        validate_birth_date(patch["birthday"], parent.birthday if parent else None)
        patch["birthday"] = patch["birthday"].isoformat()
    if "fullName" in patch:
        patch["fullName"] = patch["fullName"].strip()

    relationship_id = None
    async with neo4j.driver.session() as session:
        async with await session.begin_transaction() as tx:
            if new_parent is not None:
                if await would_create_cycle(tx, tree_id, new_parent.id, member.id):
                    raise HTTPException(status_code=400, detail="This parent link would create a cycle")
                await tx.run("""
                    MATCH (child:FamilyMember {memberId:$childId, treeId:$tid})
                    OPTIONAL MATCH (:FamilyMember)-[old:PARENT_OF]->(child)
                    DELETE old
                    WITH DISTINCT child
                    MATCH (parent:FamilyMember {memberId:$parentId, treeId:$tid})
                    MERGE (parent)-[:PARENT_OF]->(child)
                """, childId=member.id, parentId=new_parent.id, tid=tree_id)
            if spouse is not None and spouse.id not in active_partner_ids(member):
                relationship_id = await link_spouses(tx, tree_id, member.id, spouse.id, marriage_date)
            if patch:
                setters = ", ".join(f"n.{k} = ${k}" for k in patch)
                await tx.run(f"""
                    MATCH (n:FamilyMember {{memberId:$mid, treeId:$tid}})
                    SET {setters}
                """, mid=member.id, tid=tree_id, **patch)

    old_values = member.model_dump(mode="json", include=set(patch) | {"parentId"})
    new_values = {**patch, "parentId": new_parent.id if new_parent else member.parentId}
    if spouse is not None:
        new_values["spouseId"] = spouse.id
    await log_change("FamilyMember", member.id, "UPDATE", tree_id, old_values, new_values)
    if relationship_id is not None:
        await log_change("SpouseRelationship", relationship_id, "CREATE", tree_id, None, {
            "familyMember1Id": min(member.id, spouse.id),
            "familyMember2Id": max(member.id, spouse.id),
            "marriageDate": marriage_date.isoformat(),
        })
    return await get_member(tree_id, member.id)

async def delete_member(tree_id: str, member_id: int):
    member = await get_member(tree_id, member_id)
    if member.isRootPerson:
        raise HTTPException(status_code=400, detail="Cannot delete the root family member")
    async with neo4j.driver.session() as session:
        await session.run("""
            MATCH (n:FamilyMember {memberId:$mid, treeId:$tid})
            DETACH DELETE n
        """, mid=member_id, tid=tree_id)
    await delete_member_events(member_id)
    await log_change("FamilyMember", member_id, "DELETE", tree_id,
                     member.model_dump(mode="json", include={"fullName", "generation", "parentId"}), None)
    return True

async def get_birth_record(tree_id: str, child_id: int) -> dict:
    child = await get_member(tree_id, child_id)
    if child.parentId is None:
        raise HTTPException(status_code=400, detail="Family member does not have a parent")
    parent = await get_member(tree_id, child.parentId)
    return {
        "id": child.id,
        "fullName": child.fullName,
        "parentId": parent.id,
        "relationshipEstablishedDate": child.relationshipEstablishedDate,
        "parent": {"id": parent.id, "fullName": parent.fullName, "birthday": parent.birthday},
    }

async def update_birth_record(tree_id: str, child_id: int, birth_date: date) -> dict:
    """Re-date the child's registration under its parent."""
    record = await get_birth_record(tree_id, child_id)
    validate_birth_date(birth_date, record["parent"]["birthday"])
    async with neo4j.driver.session() as session:
        await session.run("""
            MATCH (n:FamilyMember {memberId:$mid, treeId:$tid})
            SET n.relationshipEstablishedDate = $established
        """, mid=child_id, tid=tree_id, established=birth_date.isoformat())
    previous = record["relationshipEstablishedDate"]
    await log_change("FamilyMember", child_id, "UPDATE", tree_id,
                     {"relationshipEstablishedDate": previous.isoformat() if previous else None},
                     {"relationshipEstablishedDate": birth_date.isoformat()})
    return {**record, "relationshipEstablishedDate": birth_date}

async def delete_tree_members(tree_id: str) -> int:
    async with neo4j.driver.session() as session:
        res = await session.run("""
            MATCH (n:FamilyMember {treeId:$tid})
            DETACH DELETE n
            RETURN count(*) AS c
        """, tid=tree_id)
        rec = await res.single()
    return rec["c"] if rec else 0
