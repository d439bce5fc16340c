from fastapi import HTTPException
from familytree.models.member_model import MemberRecord
from familytree.services.member_service import get_member
from familytree.services.tree_service import get_tree

async def get_tree_or_404(tree_id: str) -> dict:
    return await get_tree(tree_id)

async def get_member_in_tree(tree_id: str, member_id: int, status_code: int = 404) -> MemberRecord:
    """Resolve a member referenced by a request body; a dangling reference is a 400."""
    try:
        return await get_member(tree_id, member_id)
    except HTTPException as e:
        if e.status_code == 404 and status_code != 404:
            raise HTTPException(status_code=status_code, detail="Family member not found") from e
        raise
