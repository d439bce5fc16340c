from fastapi import APIRouter
from familytree.core.config import settings
from familytree.models.common import APIMessage
from familytree.models.member_model import (
    MemberCreate, MemberRecord, MemberUpdate, RelationshipCheckIn, ValidationResult,
)
from familytree.services.member_service import create_member, delete_member, list_members, update_member
from familytree.services.validation_service import check_relationship_dates
from familytree.utils.deps import get_member_in_tree, get_tree_or_404

router = APIRouter(prefix="/api/v1/trees/{treeId}/members", tags=["Members"])

@router.post("", response_model=MemberRecord)
async def create_member_route(treeId: str, body: MemberCreate):
    await get_tree_or_404(treeId)
    return await create_member(treeId, body, settings.ROOT_GENERATION_BASELINE)

@router.get("", response_model=list[MemberRecord])
async def list_members_route(treeId: str):
    await get_tree_or_404(treeId)
    return await list_members(treeId)

# Pre-check used by the add-member form before submitting
@router.post("/validate", response_model=ValidationResult)
async def validate_relationship_route(treeId: str, body: RelationshipCheckIn):
    return check_relationship_dates(body.birthDate, body.relationship, body.relationshipDate)

@router.get("/{memberId}", response_model=MemberRecord)
async def get_member_route(treeId: str, memberId: int):
    return await get_member_in_tree(treeId, memberId)

@router.patch("/{memberId}", response_model=MemberRecord)
async def update_member_route(treeId: str, memberId: int, body: MemberUpdate):
    await get_tree_or_404(treeId)
    return await update_member(treeId, memberId, body)

@router.delete("/{memberId}", response_model=APIMessage)
async def delete_member_route(treeId: str, memberId: int):
    await delete_member(treeId, memberId)
    return {"message": "Family member deleted"}
