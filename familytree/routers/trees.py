from fastapi import APIRouter, Query
from familytree.models.common import APIMessage
from familytree.models.life_event_model import ChangeLogOut
from familytree.models.tree_model import FamilyTreeCreate, FamilyTreeOut, FamilyTreeUpdate, TreeStatistics
from familytree.services.changelog_service import list_changes
from familytree.services.tree_service import (
    create_tree, delete_tree, get_statistics, list_trees, update_tree,
)
from familytree.utils.deps import get_tree_or_404

router = APIRouter(prefix="/api/v1/trees", tags=["Trees"])

@router.post("", response_model=FamilyTreeOut)
async def create_tree_route(data: FamilyTreeCreate):
    return await create_tree(data)

@router.get("", response_model=list[FamilyTreeOut])
async def list_trees_route(limit: int = Query(50, ge=1, le=500), skip: int = Query(0, ge=0)):
    return await list_trees(limit, skip)

@router.get("/{treeId}", response_model=FamilyTreeOut)
async def get_tree_route(treeId: str):
    return await get_tree_or_404(treeId)

@router.patch("/{treeId}", response_model=FamilyTreeOut)
async def update_tree_route(treeId: str, data: FamilyTreeUpdate):
    return await update_tree(treeId, data)

@router.delete("/{treeId}", response_model=APIMessage)
async def delete_tree_route(treeId: str):
    await delete_tree(treeId)
    return {"message": "Family tree deleted"}

@router.get("/{treeId}/statistics", response_model=TreeStatistics)
async def tree_statistics(treeId: str):
    await get_tree_or_404(treeId)
    return await get_statistics(treeId)

@router.get("/{treeId}/change-logs", response_model=list[ChangeLogOut])
async def tree_change_logs(treeId: str, limit: int = Query(50, ge=1, le=500), skip: int = Query(0, ge=0)):
    await get_tree_or_404(treeId)
    return await list_changes(treeId, limit, skip)
