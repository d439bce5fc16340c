from typing import Literal, Optional
from fastapi import APIRouter, Query
from familytree.models.graph_model import TreeGraphOut, TreeLayoutOut
from familytree.services.tree_service import get_tree_graph, get_tree_layout
from familytree.utils.deps import get_tree_or_404

router = APIRouter(prefix="/api/v1/trees/{treeId}/tree", tags=["Tree"])

@router.get("/graph", response_model=TreeGraphOut)
async def tree_graph_route(treeId: str):
    await get_tree_or_404(treeId)
    return await get_tree_graph(treeId)

@router.get("/layout", response_model=TreeLayoutOut)
async def tree_layout_route(
    treeId: str,
    generation: Optional[int] = Query(None, description="Only show members of this generation"),
    preset: Optional[Literal["workspace", "viewer"]] = None,
):
    await get_tree_or_404(treeId)
    return await get_tree_layout(treeId, generation, preset)
