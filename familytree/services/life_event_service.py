import uuid
import logging
from datetime import date, datetime, timezone
from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError
from familytree.db.mongo import collection
from familytree.models.life_event_model import (
    AchievementCreate, AchievementUpdate, PassingRecordCreate, PassingRecordUpdate,
)
from familytree.models.member_model import DateRangeIn, MemberRecord
from familytree.services.changelog_service import log_change
from familytree.services.validation_service import (
    validate_achievement_date, validate_burial_places, validate_passing_date,
)

logger = logging.getLogger(__name__)

def now():
    return datetime.now(timezone.utc)

PASSINGS = lambda: collection("passing_records")
ACHIEVEMENTS = lambda: collection("achievements")
OCCUPATIONS = lambda: collection("occupations")
ORIGINS = lambda: collection("places_of_origin")

async def save_histories(tree_id: str, member_id: int, occupations: list[DateRangeIn],
                         places_of_origin: list[DateRangeIn]):
    if occupations:
        await OCCUPATIONS().insert_many([
            {"_id": str(uuid.uuid4()), "treeId": tree_id, "familyMemberId": member_id,
             "jobTitle": o.label.strip(), **o.model_dump(mode="json", include={"startDate", "endDate"})}
            for o in occupations
        ])
    if places_of_origin:
        await ORIGINS().insert_many([
            {"_id": str(uuid.uuid4()), "treeId": tree_id, "familyMemberId": member_id,
             "location": p.label.strip(), **p.model_dump(mode="json", include={"startDate", "endDate"})}
            for p in places_of_origin
        ])

async def events_by_member(tree_id: str) -> tuple[dict[int, list[dict]], dict[int, list[dict]]]:
    """Passing records and achievements of a tree, grouped by member id."""
    passings: dict[int, list[dict]] = {}
    async for doc in PASSINGS().find({"treeId": tree_id}):
        passings.setdefault(doc["familyMemberId"], []).append(doc)
    achievements: dict[int, list[dict]] = {}
    async for doc in ACHIEVEMENTS().find({"treeId": tree_id}):
        achievements.setdefault(doc["familyMemberId"], []).append(doc)
    return passings, achievements

async def get_passing_record(member_id: int) -> dict | None:
    return await PASSINGS().find_one({"familyMemberId": member_id})

def _checked_passing(member: MemberRecord, body: PassingRecordCreate | PassingRecordUpdate) -> list[str]:
    validate_passing_date(member.birthday, body.dateOfPassing)
    validate_burial_places(body.dateOfPassing, body.burialPlaces)
    causes = [c.strip() for c in body.causesOfDeath]
    if not all(causes):
        raise HTTPException(status_code=400, detail="All causes of death must be non-empty strings")
    return causes

async def record_passing(tree_id: str, member: MemberRecord, body: PassingRecordCreate):
    causes = _checked_passing(member, body)

    doc = {
        "_id": str(uuid.uuid4()),
        "treeId": tree_id,
        "familyMemberId": member.id,
        "dateOfPassing": body.dateOfPassing.isoformat(),
        "causesOfDeath": causes,
        "burialPlaces": [p.model_dump(mode="json") for p in body.burialPlaces],
        "createdAt": now(),
    }
    try:
        await PASSINGS().insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="A passing record already exists for this family member")
    await log_change("PassingRecord", doc["_id"], "CREATE", tree_id, None, {
        "familyMemberId": member.id, "dateOfPassing": doc["dateOfPassing"], "causesOfDeath": causes,
    })
    return doc

async def list_passing_records(tree_id: str) -> list[dict]:
    cursor = PASSINGS().find({"treeId": tree_id}).sort("dateOfPassing", 1)
    return await cursor.to_list(length=None)

async def get_passing_record_by_id(tree_id: str, record_id: str) -> dict:
    doc = await PASSINGS().find_one({"_id": record_id, "treeId": tree_id})
    if not doc:
        raise HTTPException(status_code=404, detail="Passing record not found")
    return doc

async def check_passing_record(member_id: int) -> dict:
    doc = await get_passing_record(member_id)
    return {"hasRecord": doc is not None, "passingRecord": doc}

async def update_passing_record(tree_id: str, record: dict, member: MemberRecord,
                                body: PassingRecordUpdate) -> dict:
    causes = _checked_passing(member, body)
    changes = {
        "dateOfPassing": body.dateOfPassing.isoformat(),
        "causesOfDeath": causes,
        "burialPlaces": [p.model_dump(mode="json") for p in body.burialPlaces],
    }
    await PASSINGS().update_one({"_id": record["_id"]}, {"$set": changes})
    await log_change("PassingRecord", record["_id"], "UPDATE", tree_id,
                     {k: record.get(k) for k in changes}, changes)
    return {**record, **changes}

async def delete_passing_record(tree_id: str, record: dict):
    await PASSINGS().delete_one({"_id": record["_id"]})
    await log_change("PassingRecord", record["_id"], "DELETE", tree_id, {
        "familyMemberId": record["familyMemberId"], "dateOfPassing": record["dateOfPassing"],
    }, None)

async def _check_achieve_date(member: MemberRecord, achieve_date: date):
    passing = await get_passing_record(member.id)
    date_of_passing = None
    if passing:
        date_of_passing = date.fromisoformat(passing["dateOfPassing"])
    validate_achievement_date(member.birthday, achieve_date, date_of_passing)

async def record_achievement(tree_id: str, member: MemberRecord, body: AchievementCreate):
    await _check_achieve_date(member, body.achieveDate)

    doc = {
        "_id": str(uuid.uuid4()),
        "treeId": tree_id,
        **body.model_dump(mode="json"),
        "title": body.title.strip(),
        "createdAt": now(),
    }
    await ACHIEVEMENTS().insert_one(doc)
    await log_change("Achievement", doc["_id"], "CREATE", tree_id, None, {
        "familyMemberId": member.id, "title": doc["title"], "achieveDate": doc["achieveDate"],
    })
    return doc

async def list_achievements(tree_id: str, member_id: int | None = None) -> list[dict]:
    query: dict = {"treeId": tree_id}
    if member_id is not None:
        query["familyMemberId"] = member_id
    cursor = ACHIEVEMENTS().find(query).sort("achieveDate", 1)
    return await cursor.to_list(length=None)

async def get_achievement(tree_id: str, achievement_id: str) -> dict:
    doc = await ACHIEVEMENTS().find_one({"_id": achievement_id, "treeId": tree_id})
    if not doc:
        raise HTTPException(status_code=404, detail="Achievement not found in this family tree")
    return doc

async def update_achievement(tree_id: str, achievement: dict, member: MemberRecord,
                             body: AchievementUpdate) -> dict:
    await _check_achieve_date(member, body.achieveDate)
    changes = body.model_dump(mode="json")
    changes["title"] = body.title.strip()
    changes["achievementType"] = body.achievementType.strip()
    await ACHIEVEMENTS().update_one({"_id": achievement["_id"]}, {"$set": changes})
    await log_change("Achievement", achievement["_id"], "UPDATE", tree_id,
                     {k: achievement.get(k) for k in changes}, changes)
    return {**achievement, **changes}

async def delete_achievement(tree_id: str, achievement: dict):
    await ACHIEVEMENTS().delete_one({"_id": achievement["_id"]})
    await log_change("Achievement", achievement["_id"], "DELETE", tree_id, {
        "familyMemberId": achievement["familyMemberId"], "title": achievement["title"],
    }, None)

async def delete_member_events(member_id: int):
    for col in (PASSINGS(), ACHIEVEMENTS(), OCCUPATIONS(), ORIGINS()):
        await col.delete_many({"familyMemberId": member_id})

async def delete_tree_events(tree_id: str):
    for col in (PASSINGS(), ACHIEVEMENTS(), OCCUPATIONS(), ORIGINS(), collection("change_logs")):
        await col.delete_many({"treeId": tree_id})
    logger.info("Removed life events of tree %s", tree_id)
