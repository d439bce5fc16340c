from fastapi import APIRouter
from familytree.models.relationship_model import (
    DivorceCreate, MarriageEventOut, SpouseRelationshipCreate, SpouseRelationshipOut,
)
from familytree.services.relationship_service import (
    create_spouse_relationship, list_marriage_events, list_spouse_relationships, record_divorce,
)
from familytree.utils.deps import get_member_in_tree, get_tree_or_404

router = APIRouter(prefix="/api/v1/trees/{treeId}/relationships", tags=["Relationships"])

@router.post("/spouses", response_model=SpouseRelationshipOut)
async def create_spouse_route(treeId: str, body: SpouseRelationshipCreate):
    await get_tree_or_404(treeId)
    member1 = await get_member_in_tree(treeId, body.member1Id, status_code=400)
    member2 = await get_member_in_tree(treeId, body.member2Id, status_code=400)
    return await create_spouse_relationship(treeId, member1, member2, body.marriageDate)

@router.get("/spouses", response_model=list[SpouseRelationshipOut])
async def list_spouses_route(treeId: str):
    await get_tree_or_404(treeId)
    return await list_spouse_relationships(treeId)

# Marriages that can still be dissolved
@router.get("/divorces", response_model=list[MarriageEventOut])
async def divorce_candidates_route(treeId: str):
    await get_tree_or_404(treeId)
    return await list_marriage_events(treeId, active_only=True)

@router.post("/divorces", response_model=SpouseRelationshipOut)
async def create_divorce_route(treeId: str, body: DivorceCreate):
    await get_tree_or_404(treeId)
    return await record_divorce(treeId, body.relationshipId, body.divorceDate)
