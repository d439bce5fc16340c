from typing import Optional
from fastapi import APIRouter
from familytree.models.common import APIMessage
from familytree.models.life_event_model import (
    AchievementCreate, AchievementOut, AchievementUpdate, PassingCheckOut,
    PassingRecordCreate, PassingRecordOut, PassingRecordUpdate,
)
from familytree.models.member_model import BirthRecordOut, BirthRecordUpdate
from familytree.models.relationship_model import MarriageEventOut
from familytree.services.life_event_service import (
    check_passing_record, delete_achievement, delete_passing_record, get_achievement,
    get_passing_record_by_id, list_achievements, list_passing_records, record_achievement,
    record_passing, update_achievement, update_passing_record,
)
from familytree.services.member_service import get_birth_record, update_birth_record
from familytree.services.relationship_service import get_marriage_event, list_marriage_events
from familytree.utils.deps import get_member_in_tree, get_tree_or_404

router = APIRouter(prefix="/api/v1/trees/{treeId}", tags=["Life events"])

@router.post("/passing-records", response_model=PassingRecordOut)
async def create_passing_record(treeId: str, body: PassingRecordCreate):
    await get_tree_or_404(treeId)
    member = await get_member_in_tree(treeId, body.familyMemberId, status_code=400)
    return await record_passing(treeId, member, body)

@router.get("/passing-records", response_model=list[PassingRecordOut])
async def passing_records(treeId: str):
    await get_tree_or_404(treeId)
    return await list_passing_records(treeId)

@router.get("/passing-records/check/{memberId}", response_model=PassingCheckOut)
async def passing_record_check(treeId: str, memberId: int):
    await get_tree_or_404(treeId)
    member = await get_member_in_tree(treeId, memberId)
    return await check_passing_record(member.id)

@router.get("/passing-records/{recordId}", response_model=PassingRecordOut)
async def passing_record(treeId: str, recordId: str):
    await get_tree_or_404(treeId)
    return await get_passing_record_by_id(treeId, recordId)

@router.put("/passing-records/{recordId}", response_model=PassingRecordOut)
async def edit_passing_record(treeId: str, recordId: str, body: PassingRecordUpdate):
    await get_tree_or_404(treeId)
    record = await get_passing_record_by_id(treeId, recordId)
    member = await get_member_in_tree(treeId, record["familyMemberId"], status_code=400)
    return await update_passing_record(treeId, record, member, body)

@router.delete("/passing-records/{recordId}", response_model=APIMessage)
async def remove_passing_record(treeId: str, recordId: str):
    await get_tree_or_404(treeId)
    record = await get_passing_record_by_id(treeId, recordId)
    await delete_passing_record(treeId, record)
    return APIMessage(message="Passing record deleted successfully")

@router.post("/achievements", response_model=AchievementOut)
async def create_achievement(treeId: str, body: AchievementCreate):
    await get_tree_or_404(treeId)
    member = await get_member_in_tree(treeId, body.familyMemberId, status_code=400)
    return await record_achievement(treeId, member, body)

@router.get("/achievements", response_model=list[AchievementOut])
async def achievements(treeId: str, memberId: Optional[int] = None):
    await get_tree_or_404(treeId)
    return await list_achievements(treeId, memberId)

@router.get("/achievements/{achievementId}", response_model=AchievementOut)
async def achievement(treeId: str, achievementId: str):
    await get_tree_or_404(treeId)
    return await get_achievement(treeId, achievementId)

@router.put("/achievements/{achievementId}", response_model=AchievementOut)
async def edit_achievement(treeId: str, achievementId: str, body: AchievementUpdate):
    await get_tree_or_404(treeId)
    doc = await get_achievement(treeId, achievementId)
    member = await get_member_in_tree(treeId, doc["familyMemberId"], status_code=400)
    return await update_achievement(treeId, doc, member, body)

@router.delete("/achievements/{achievementId}", response_model=APIMessage)
async def remove_achievement(treeId: str, achievementId: str):
    await get_tree_or_404(treeId)
    doc = await get_achievement(treeId, achievementId)
    await delete_achievement(treeId, doc)
    return APIMessage(message="Achievement deleted successfully")

@router.get("/life-events", response_model=list[MarriageEventOut])
async def life_events(treeId: str):
    await get_tree_or_404(treeId)
    return await list_marriage_events(treeId)

@router.get("/life-events/{relationshipId}", response_model=MarriageEventOut)
async def life_event(treeId: str, relationshipId: int):
    await get_tree_or_404(treeId)
    return await get_marriage_event(treeId, relationshipId)

@router.get("/birth-records/{childId}", response_model=BirthRecordOut)
async def birth_record(treeId: str, childId: int):
    await get_tree_or_404(treeId)
    return await get_birth_record(treeId, childId)

@router.put("/birth-records/{childId}", response_model=BirthRecordOut)
async def edit_birth_record(treeId: str, childId: int, body: BirthRecordUpdate):
    await get_tree_or_404(treeId)
    return await update_birth_record(treeId, childId, body.birthDate)
